"""
Auth Router

Sign in and out against the shop API. The bearer token stays on the
server, keyed by the session cookie.
"""
from fastapi import APIRouter, Depends

from storefront.auth import AuthSession
from storefront.errors import ApiError
from .deps import api_error_to_http, get_auth_session
from .models import LoginRequest

router = APIRouter(tags=["auth"])


@router.post("/auth/login")
async def login(data: LoginRequest, auth: AuthSession = Depends(get_auth_session)):
    """Sign in with email and password."""
    try:
        result = await auth.login(data.email.strip(), data.password)
    except ApiError as e:
        raise api_error_to_http(e)
    return {
        "user": auth.user.model_dump() if auth.user else None,
        "redirect_to": result.get("redirect_to"),
    }


@router.post("/auth/logout")
async def logout(auth: AuthSession = Depends(get_auth_session)):
    """Sign out (always succeeds locally)."""
    await auth.logout()
    return {"ok": True}


@router.get("/auth/me")
async def me(auth: AuthSession = Depends(get_auth_session)):
    """Current user, or null when signed out."""
    user = await auth.hydrate()
    return {"user": user.model_dump() if user else None}
