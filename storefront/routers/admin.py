"""
Admin Router

Read-only order and customer listings for administrators.
"""
from fastapi import APIRouter, Depends, Query

from storefront.api_client import ApiClient
from storefront.auth import AuthSession
from storefront.errors import ApiError
from storefront.pagination import paginated_response
from .deps import api_error_to_http, get_shop_api, require_admin

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/orders")
async def admin_list_orders(
    page: int = Query(1, ge=1),
    status: str | None = None,
    auth: AuthSession = Depends(require_admin),
    client: ApiClient = Depends(get_shop_api),
):
    """All orders, newest first."""
    try:
        payload = await client.get(
            "/admin/orders",
            query={"page": page, "status": status or None},
            auth_token=auth.token,
        )
    except ApiError as e:
        raise api_error_to_http(e)
    return paginated_response(payload)


@router.get("/customers")
async def admin_list_customers(
    page: int = Query(1, ge=1),
    search: str | None = None,
    auth: AuthSession = Depends(require_admin),
    client: ApiClient = Depends(get_shop_api),
):
    """Registered users."""
    try:
        payload = await client.get(
            "/users",
            query={"page": page, "search": (search or "").strip() or None},
            auth_token=auth.token,
        )
    except ApiError as e:
        raise api_error_to_http(e)
    return paginated_response(payload)
