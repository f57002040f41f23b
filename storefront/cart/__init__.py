"""Cart package: line items, versioned storage record, and store."""
from .models import LineItem, normalize_product_id, snapshot_product
from .migrations import CART_SCHEMA_VERSION, MIGRATIONS, CartMigrationError, migrate
from .storage import CartRecordError, decode_cart, encode_cart
from .service import CartStore, DEFAULT_CART_KEY, get_cart_store

__all__ = [
    "LineItem",
    "normalize_product_id",
    "snapshot_product",
    "CART_SCHEMA_VERSION",
    "MIGRATIONS",
    "CartMigrationError",
    "migrate",
    "CartRecordError",
    "decode_cart",
    "encode_cart",
    "CartStore",
    "DEFAULT_CART_KEY",
    "get_cart_store",
]
