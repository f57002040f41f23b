"""
Storage Module - Key-value storage for per-session state

Provides:
- Sync Upstash Redis client (singleton)
- KeyValueStorage implementations (Redis, in-memory, no-op)
- Namespaced key builders and TTL constants

Carts, auth tokens and product selections are stored as JSON strings
under one key each, the same way a browser keeps them in localStorage.
"""

import os
import threading
from typing import Optional, Protocol

from upstash_redis import Redis

from storefront.logging import get_logger

logger = get_logger(__name__)

# Upstash Redis - standard env var names per docs
UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")

_redis_client: Optional[Redis] = None
_storage: Optional["KeyValueStorage"] = None


def get_redis_sync() -> Redis:
    """
    Get sync Upstash Redis client (singleton).

    Uses standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _redis_client

    if _redis_client is None:
        if not UPSTASH_REDIS_REST_URL or not UPSTASH_REDIS_REST_TOKEN:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _redis_client = Redis(url=UPSTASH_REDIS_REST_URL, token=UPSTASH_REDIS_REST_TOKEN)

    return _redis_client


class StorageKeys:
    """Key prefixes for per-session records."""

    CART = "pulse-cart:"  # pulse-cart:{session_id}
    TOKEN = "pulse-token:"  # pulse-token:{session_id}
    SELECTED_PRODUCT = "pulse:selectedProduct:"  # pulse:selectedProduct:{session_id}

    @staticmethod
    def cart_key(session_id: str) -> str:
        return f"{StorageKeys.CART}{session_id}"

    @staticmethod
    def token_key(session_id: str) -> str:
        return f"{StorageKeys.TOKEN}{session_id}"

    @staticmethod
    def selection_key(session_id: str) -> str:
        return f"{StorageKeys.SELECTED_PRODUCT}{session_id}"


class TTL:
    """Time-to-live constants for stored records (seconds)."""

    CART = int(os.environ.get("CART_TTL_SECONDS", 60 * 60 * 24 * 30))  # 30 days
    TOKEN = 60 * 60 * 24 * 7  # 7 days
    SELECTION = 60 * 60 * 24  # 24 hours


class KeyValueStorage(Protocol):
    """String key-value store with the localStorage surface."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str, ttl: Optional[int] = None) -> None: ...

    def remove_item(self, key: str) -> None: ...


class RedisStorage:
    """KeyValueStorage backed by Upstash Redis."""

    def __init__(self, redis: Optional[Redis] = None):
        self._redis = redis

    @property
    def redis(self) -> Redis:
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            self._redis = get_redis_sync()
        return self._redis

    def get_item(self, key: str) -> Optional[str]:
        value = self.redis.get(key)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    def set_item(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        if ttl:
            self.redis.set(key, value, ex=ttl)
        else:
            self.redis.set(key, value)

    def remove_item(self, key: str) -> None:
        self.redis.delete(key)


class MemoryStorage:
    """Process-local KeyValueStorage. TTLs are ignored."""

    def __init__(self):
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set_item(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        with self._lock:
            self._data[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


class NoopStorage:
    """KeyValueStorage that keeps nothing (persistence disabled)."""

    def get_item(self, key: str) -> Optional[str]:
        return None

    def set_item(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        return None

    def remove_item(self, key: str) -> None:
        return None


def get_storage() -> KeyValueStorage:
    """
    Get the process-wide storage (singleton).

    Redis when Upstash credentials are configured, in-memory otherwise.
    """
    global _storage

    if _storage is None:
        if UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN:
            _storage = RedisStorage()
        else:
            logger.warning("Upstash Redis is not configured; carts and sessions are kept in memory")
            _storage = MemoryStorage()

    return _storage


def set_storage(storage: Optional[KeyValueStorage]) -> None:
    """Replace the process-wide storage (None resets to auto-detection)."""
    global _storage
    _storage = storage
