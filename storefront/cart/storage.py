"""Serialization of the cart to its versioned storage record."""
import json
from typing import Iterable

from .migrations import CART_SCHEMA_VERSION, CartMigrationError, migrate
from .models import LineItem


class CartRecordError(ValueError):
    """Stored cart record is unreadable."""


def encode_cart(items: Iterable[LineItem]) -> str:
    """Serialize line items to the storage record."""
    return json.dumps({
        "state": {"items": [item.to_dict() for item in items]},
        "version": CART_SCHEMA_VERSION,
    })


def decode_cart(raw: str) -> list[LineItem]:
    """
    Parse a storage record, migrating older versions forward.

    Entries that break cart invariants (no product id, non-positive
    quantity) are dropped; entries sharing an id are merged.

    Raises:
        CartRecordError: record is not valid JSON, has the wrong shape,
            or cannot be migrated
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise CartRecordError(f"invalid JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("state"), dict):
        raise CartRecordError("record has no state object")

    version = data.get("version", 0)
    if isinstance(version, bool) or not isinstance(version, int):
        raise CartRecordError(f"invalid version tag: {version!r}")

    try:
        state = migrate(data["state"], version)
    except (CartMigrationError, TypeError, AttributeError) as e:
        raise CartRecordError(str(e)) from e

    raw_items = state.get("items", [])
    if not isinstance(raw_items, list):
        raise CartRecordError("items is not a list")

    items: dict[str, LineItem] = {}
    for entry in raw_items:
        try:
            item = LineItem.from_dict(entry)
        except (KeyError, TypeError, ValueError):
            continue
        product_id = item.product_id
        if product_id is None or item.quantity <= 0:
            continue
        item.product["id"] = product_id
        if product_id in items:
            items[product_id].quantity += item.quantity
        else:
            items[product_id] = item
    return list(items.values())
