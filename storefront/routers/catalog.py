"""
Catalog Router

Public product listing and detail, proxied from the shop API with
pagination normalized for the storefront.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.api_client import ApiClient
from storefront.catalog import (
    BRAND_FILTER_OPTIONS,
    BRAND_OPTIONS,
    CATEGORY_FILTER_OPTIONS,
    CATEGORY_OPTIONS,
    normalize_filter,
)
from storefront.errors import ApiError, ERROR_PRODUCT_NOT_FOUND
from storefront.pagination import paginated_response
from .deps import api_error_to_http, get_shop_api

router = APIRouter(tags=["catalog"])


@router.get("/products")
async def list_products(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    search: Optional[str] = None,
    brand: Optional[str] = None,
    category: Optional[str] = None,
    client: ApiClient = Depends(get_shop_api),
):
    """Product listing with filters ("all" means unfiltered)."""
    query = {
        "page": page,
        "per_page": per_page,
        "search": (search or "").strip() or None,
        "brand": normalize_filter(brand),
        "category": normalize_filter(category),
    }
    try:
        payload = await client.get("/products", query=query)
    except ApiError as e:
        raise api_error_to_http(e)
    return paginated_response(payload, page_size=per_page)


@router.get("/products/{product_id}")
async def get_product(product_id: str, client: ApiClient = Depends(get_shop_api)):
    """Single product."""
    try:
        payload = await client.get(f"/products/{product_id}")
    except ApiError as e:
        if e.status == 404:
            raise HTTPException(status_code=404, detail=ERROR_PRODUCT_NOT_FOUND)
        raise api_error_to_http(e)
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        return payload["data"]
    return payload


@router.get("/catalog/options")
def get_catalog_options():
    """Category and brand options for filters and product forms."""
    return {
        "categories": CATEGORY_OPTIONS,
        "brands": BRAND_OPTIONS,
        "category_filters": CATEGORY_FILTER_OPTIONS,
        "brand_filters": BRAND_FILTER_OPTIONS,
    }
