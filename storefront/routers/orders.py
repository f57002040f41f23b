"""
Orders Router

Checkout and the signed-in customer's order history.
"""
from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.api_client import ApiClient
from storefront.auth import AuthSession
from storefront.cart import CartStore
from storefront.checkout import ShippingDetails, place_order
from storefront.errors import (
    ApiError,
    CheckoutError,
    ERROR_ORDER_FAILED,
    ERROR_ORDER_NOT_FOUND,
    ERROR_TRY_AGAIN,
    handle_error,
)
from storefront.pagination import paginated_response
from .deps import api_error_to_http, get_cart, get_shop_api, require_user

router = APIRouter(tags=["orders"])


@router.post("/checkout")
async def checkout(
    details: ShippingDetails,
    auth: AuthSession = Depends(require_user),
    store: CartStore = Depends(get_cart),
    client: ApiClient = Depends(get_shop_api),
):
    """Place an order for the cart; the cart is emptied only on success."""
    try:
        return await place_order(store, details, client, auth.token)
    except CheckoutError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ApiError as e:
        message = handle_error(e, title=ERROR_ORDER_FAILED, fallback_message=ERROR_TRY_AGAIN)
        status = e.status if 400 <= e.status < 600 else 502
        raise HTTPException(status_code=status, detail=message)


@router.get("/orders")
async def list_orders(
    page: int = Query(1, ge=1),
    auth: AuthSession = Depends(require_user),
    client: ApiClient = Depends(get_shop_api),
):
    """Signed-in customer's orders."""
    try:
        payload = await client.get("/orders", query={"page": page}, auth_token=auth.token)
    except ApiError as e:
        raise api_error_to_http(e)
    return paginated_response(payload)


@router.get("/orders/{order_id}")
async def get_order(
    order_id: str,
    auth: AuthSession = Depends(require_user),
    client: ApiClient = Depends(get_shop_api),
):
    """Single order of the signed-in customer."""
    try:
        payload = await client.get(f"/orders/{order_id}", auth_token=auth.token)
    except ApiError as e:
        if e.status == 404:
            raise HTTPException(status_code=404, detail=ERROR_ORDER_NOT_FOUND)
        raise api_error_to_http(e)
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        return payload["data"]
    return payload
