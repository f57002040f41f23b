"""
Pulse Storefront Core

This package contains the storefront backend components:
- db: key-value storage (Upstash Redis or in-memory)
- cart: versioned, persisted shopping cart
- api_client: async client for the external shop API
- auth: session store and route guards
- checkout: order totals and payload
- routers: FastAPI endpoints

Note: Imports are lazy so that importing the package does not
open storage connections or read API configuration.
"""

__all__ = [
    "get_storage",
    "get_api_client",
    "get_cart_store",
]


def __getattr__(name):
    """Lazy attribute access for clean serverless loading."""
    if name == "get_storage":
        from storefront.db import get_storage
        return get_storage
    elif name == "get_api_client":
        from storefront.api_client import get_api_client
        return get_api_client
    elif name == "get_cart_store":
        from storefront.cart import get_cart_store
        return get_cart_store
    raise AttributeError(f"module 'storefront' has no attribute '{name}'")
