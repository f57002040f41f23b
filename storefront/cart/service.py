"""Cart store: in-memory line items kept in sync with a storage record."""
from decimal import Decimal
from typing import Any, Optional

from storefront.db import KeyValueStorage, StorageKeys, TTL, get_storage
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.money import normalize_price, round_money, to_float

from .models import LineItem, coerce_quantity, normalize_product_id, snapshot_product
from .storage import CartRecordError, decode_cart, encode_cart

logger = get_logger(__name__)

DEFAULT_CART_KEY = "pulse-cart"


class CartStore:
    """
    Shopping cart persisted under a single storage key.

    All mutation goes through add_item / remove_item / update_quantity /
    clear_cart; each one writes the full collection back to storage.
    Invalid input (missing product id, non-positive quantity) is
    ignored rather than raised.

    Usage:
        store = CartStore(get_storage(), StorageKeys.cart_key(session_id))
        store.add_item({"id": 42, "name": "Pixel 9", "price": "799.00"})
        store.update_quantity("42", 2)
        store.clear_cart()
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = DEFAULT_CART_KEY,
        ttl: Optional[int] = None,
    ):
        self._storage = storage
        self._key = key
        self._ttl = ttl
        self._items: list[LineItem] = self._load()

    # ==================== PERSISTENCE ====================

    def _load(self) -> list[LineItem]:
        """Read the stored record; anything unreadable yields an empty cart."""
        try:
            raw = self._storage.get_item(self._key)
        except Exception as e:
            logger.error("Failed to read cart %s: %s", sanitize_id_for_logging(self._key), e)
            return []

        if not raw:
            return []

        try:
            return decode_cart(raw)
        except CartRecordError as e:
            logger.warning("Corrupted cart record %s: %s", sanitize_id_for_logging(self._key), e)
            try:
                self._storage.remove_item(self._key)
            except Exception as remove_error:
                logger.warning("Failed to drop corrupted cart record: %s", remove_error)
            return []

    def _persist(self) -> None:
        """Write the full collection back (failures are logged, not raised)."""
        try:
            self._storage.set_item(self._key, encode_cart(self._items), ttl=self._ttl)
        except Exception as e:
            logger.warning("Failed to save cart %s: %s", sanitize_id_for_logging(self._key), e)

    def _find(self, product_id: str) -> Optional[LineItem]:
        return next((item for item in self._items if item.product_id == product_id), None)

    # ==================== MUTATIONS ====================

    def add_item(self, product: Any, quantity: Any = 1) -> None:
        """
        Add `quantity` units of a product.

        An existing line item for the same id has its quantity increased;
        its captured unit price and snapshot are kept.
        """
        snapshot = snapshot_product(product)
        if snapshot is None:
            return
        product_id = normalize_product_id(snapshot.get("id"))
        qty = coerce_quantity(quantity)
        if product_id is None or qty is None or qty <= 0:
            return

        existing = self._find(product_id)
        if existing:
            existing.quantity += qty
        else:
            snapshot["id"] = product_id
            self._items.append(
                LineItem(
                    product=snapshot,
                    quantity=qty,
                    unit_price=normalize_price(snapshot.get("price")),
                )
            )
        self._persist()

    def remove_item(self, product_id: Any) -> None:
        """Remove the line item for a product (no-op when absent)."""
        normalized = normalize_product_id(product_id)
        if normalized is None:
            return
        remaining = [item for item in self._items if item.product_id != normalized]
        if len(remaining) == len(self._items):
            return
        self._items = remaining
        self._persist()

    def update_quantity(self, product_id: Any, quantity: Any) -> None:
        """Overwrite a line item's quantity; zero or less removes it."""
        qty = coerce_quantity(quantity)
        if qty is None:
            return
        if qty <= 0:
            self.remove_item(product_id)
            return

        normalized = normalize_product_id(product_id)
        if normalized is None:
            return
        existing = self._find(normalized)
        if existing is None or existing.quantity == qty:
            return
        existing.quantity = qty
        self._persist()

    def clear_cart(self) -> None:
        """Empty the cart (after a successful checkout)."""
        self._items = []
        self._persist()

    # ==================== READS ====================

    @property
    def key(self) -> str:
        return self._key

    @property
    def items(self) -> list[LineItem]:
        """Copies of the line items, in insertion order."""
        return [item.copy() for item in self._items]

    def get_item(self, product_id: Any) -> Optional[LineItem]:
        normalized = normalize_product_id(product_id)
        if normalized is None:
            return None
        item = self._find(normalized)
        return item.copy() if item else None

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def subtotal(self) -> Decimal:
        return round_money(sum((item.line_total for item in self._items), Decimal("0")))

    def __len__(self) -> int:
        return len(self._items)

    def to_dict(self) -> dict:
        """JSON-friendly view for API responses."""
        return {
            "items": [
                {
                    "product_id": item.product_id,
                    "product": item.product,
                    "quantity": item.quantity,
                    "unit_price": to_float(item.unit_price),
                    "line_total": to_float(item.line_total),
                }
                for item in self._items
            ],
            "total_quantity": self.total_quantity,
            "subtotal": to_float(self.subtotal),
        }


def get_cart_store(session_id: str, storage: Optional[KeyValueStorage] = None) -> CartStore:
    """Build the cart store for a browser session."""
    return CartStore(
        storage if storage is not None else get_storage(),
        StorageKeys.cart_key(session_id),
        ttl=TTL.CART,
    )
