"""
Shared Dependencies for Routers

Session cookie, storage-backed stores, the shop API client, and
auth guards.
"""

import os
import re
import secrets

from fastapi import Depends, HTTPException, Request, Response

from storefront.api_client import ApiClient, get_api_client
from storefront.auth import AuthSession, RouteGuard
from storefront.cart import CartStore, get_cart_store
from storefront.db import StorageKeys, get_storage
from storefront.errors import (
    ApiError,
    ERROR_FORBIDDEN,
    ERROR_UNAUTHORIZED,
    ERROR_UPSTREAM_UNAVAILABLE,
    to_user_message,
)
from storefront.logging import bind_session_id, get_logger
from storefront.selection import ProductSelection

logger = get_logger(__name__)

SESSION_COOKIE = "pulse_sid"
SESSION_MAX_AGE = 60 * 60 * 24 * 30
_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_-]{16,64}$")

CUSTOMER_GUARD = RouteGuard(require_auth=True)
ADMIN_GUARD = RouteGuard(require_auth=True, require_role="administrator")


# ==================== SESSION ====================

async def get_session_id(request: Request, response: Response) -> str:
    """Session id from the cookie (bound to log records); a new one is issued when missing or malformed."""
    session_id = request.cookies.get(SESSION_COOKIE)
    if session_id and _SESSION_ID_RE.match(session_id):
        bind_session_id(session_id)
        return session_id

    session_id = secrets.token_urlsafe(24)
    bind_session_id(session_id)
    response.set_cookie(
        SESSION_COOKIE,
        session_id,
        max_age=SESSION_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=os.environ.get("SESSION_COOKIE_SECURE") == "1",
    )
    return session_id


def get_cart(session_id: str = Depends(get_session_id)) -> CartStore:
    return get_cart_store(session_id)


def get_selection(session_id: str = Depends(get_session_id)) -> ProductSelection:
    return ProductSelection(get_storage(), StorageKeys.selection_key(session_id))


# ==================== SHOP API ====================

def get_shop_api() -> ApiClient:
    """Shared ApiClient; 503 when the shop API is not configured."""
    try:
        return get_api_client()
    except ValueError as e:
        logger.error("Shop API not configured: %s", e)
        raise HTTPException(status_code=503, detail=ERROR_UPSTREAM_UNAVAILABLE)


def api_error_to_http(error: ApiError) -> HTTPException:
    """Same status as upstream; transport failures become 502."""
    status = error.status if 400 <= error.status < 600 else 502
    return HTTPException(status_code=status, detail=to_user_message(error) or ERROR_UPSTREAM_UNAVAILABLE)


def get_auth_session(
    session_id: str = Depends(get_session_id),
    client: ApiClient = Depends(get_shop_api),
) -> AuthSession:
    return AuthSession(get_storage(), StorageKeys.token_key(session_id), client)


# ==================== GUARDS ====================

async def _guarded(request: Request, auth: AuthSession, guard: RouteGuard) -> AuthSession:
    await auth.hydrate()
    decision = guard.evaluate(auth.user, auth.initialized, request.url.path)
    if decision.allowed:
        return auth
    if auth.user is None:
        raise HTTPException(
            status_code=401,
            detail={"message": ERROR_UNAUTHORIZED, "redirect": decision.redirect},
        )
    raise HTTPException(
        status_code=403,
        detail={"message": ERROR_FORBIDDEN, "redirect": decision.redirect},
    )


async def require_user(request: Request, auth: AuthSession = Depends(get_auth_session)) -> AuthSession:
    """Signed-in user of any role."""
    return await _guarded(request, auth, CUSTOMER_GUARD)


async def require_admin(request: Request, auth: AuthSession = Depends(get_auth_session)) -> AuthSession:
    """Signed-in administrator."""
    return await _guarded(request, auth, ADMIN_GUARD)
