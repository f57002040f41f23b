"""
Logging for the Pulse storefront.

Every record handled by the stdout handler carries a `session` field:
the (truncated) browser session id bound for the current request, or
"-" outside of one. Routers bind it through the session cookie
dependency, so cart and auth messages can be traced per shopper.

Usage:
    from storefront.logging import get_logger
    logger = get_logger(__name__)

    logger.info("Cart saved")
"""

import logging
import os
import sys
from contextvars import ContextVar
from functools import cache
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(session)s] %(message)s"
LOG_FORMAT_VERCEL = "%(levelname)s - %(name)s - [%(session)s] %(message)s"

# Loggers that talk about every upstream or Upstash call at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "upstash_redis")

_session_id: ContextVar[Optional[str]] = ContextVar("storefront_session_id", default=None)


def _escape_log_injection(value: str) -> str:
    """Escape characters that could inject fake log entries (CWE-117)."""
    return (
        value.replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )


def sanitize_id_for_logging(id_value: Optional[str]) -> str:
    """Escaped first 8 characters of an id, or "N/A" when empty."""
    if not id_value:
        return "N/A"
    return _escape_log_injection(str(id_value))[:8]


def bind_session_id(session_id: Optional[str]) -> None:
    """Tag log records of the current request with a session id."""
    _session_id.set(session_id)


class SessionFilter(logging.Filter):
    """Adds the bound session id to each record as `session`."""

    def filter(self, record: logging.LogRecord) -> bool:
        session_id = _session_id.get()
        record.session = sanitize_id_for_logging(session_id) if session_id else "-"
        return True


def _get_log_level() -> int:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def build_handler() -> logging.Handler:
    """Stdout handler with the session-aware format (compact on Vercel)."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(_get_log_level())
    handler.addFilter(SessionFilter())
    is_vercel = os.environ.get("VERCEL") == "1"
    handler.setFormatter(logging.Formatter(LOG_FORMAT_VERCEL if is_vercel else LOG_FORMAT))
    return handler


def _configure_root_logger() -> None:
    root = logging.getLogger()

    # Leave hosts that configured logging (uvicorn --log-config, pytest) alone
    if root.handlers:
        return

    root.setLevel(_get_log_level())
    root.addHandler(build_handler())

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


_configure_root_logger()


@cache
def get_logger(name: str) -> logging.Logger:
    """Get or create a logger with the given name (typically __name__)."""
    return logging.getLogger(name)


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_VERCEL",
    "SessionFilter",
    "bind_session_id",
    "build_handler",
    "get_logger",
    "sanitize_id_for_logging",
]
