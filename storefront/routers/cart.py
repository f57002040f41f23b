"""
Cart Router

Shopping cart endpoints. The cart itself lives in storage under the
browser session; product snapshots come from the catalog API.
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from storefront.api_client import ApiClient
from storefront.cart import CartStore
from storefront.checkout import CheckoutTotals
from storefront.errors import ApiError, ERROR_PRODUCT_NOT_FOUND
from storefront.logging import get_logger
from storefront.models import Product
from .deps import api_error_to_http, get_cart, get_shop_api
from .models import AddToCartRequest, UpdateCartItemRequest

logger = get_logger(__name__)

router = APIRouter(tags=["cart"])


def _format_cart_response(store: CartStore) -> dict:
    """Cart items plus checkout totals."""
    response = store.to_dict()
    response["totals"] = CheckoutTotals.from_items(store.items).to_dict()
    response["is_empty"] = len(store) == 0
    return response


@router.get("/cart")
def get_cart_contents(store: CartStore = Depends(get_cart)):
    """Get the session's cart."""
    return _format_cart_response(store)


@router.post("/cart/items")
async def add_to_cart(
    request: AddToCartRequest,
    store: CartStore = Depends(get_cart),
    client: ApiClient = Depends(get_shop_api),
):
    """Add a product (snapshot fetched from the catalog)."""
    try:
        payload = await client.get(f"/products/{request.product_id}")
    except ApiError as e:
        if e.status == 404:
            raise HTTPException(status_code=404, detail=ERROR_PRODUCT_NOT_FOUND)
        raise api_error_to_http(e)

    data = payload.get("data", payload) if isinstance(payload, dict) else payload
    try:
        product = Product.model_validate(data)
    except ValidationError as e:
        logger.error("Catalog returned an unreadable product: %s", e)
        raise HTTPException(status_code=502, detail="Catalog returned an invalid product")

    await run_in_threadpool(store.add_item, product, request.quantity)
    return _format_cart_response(store)


@router.patch("/cart/items/{product_id}")
def update_cart_item(
    product_id: str,
    request: UpdateCartItemRequest,
    store: CartStore = Depends(get_cart),
):
    """Update item quantity (0 or less removes it)."""
    store.update_quantity(product_id, request.quantity)
    return _format_cart_response(store)


@router.delete("/cart/items/{product_id}")
def remove_cart_item(product_id: str, store: CartStore = Depends(get_cart)):
    """Remove item from cart."""
    store.remove_item(product_id)
    return _format_cart_response(store)


@router.delete("/cart")
def clear_cart(store: CartStore = Depends(get_cart)):
    """Empty the cart."""
    store.clear_cart()
    return _format_cart_response(store)
