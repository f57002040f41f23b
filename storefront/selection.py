"""Remembers the product a shopper or admin last opened, per scope."""
import json
import time
from typing import Any, Literal, Optional

from storefront.cart.models import normalize_product_id, snapshot_product
from storefront.db import KeyValueStorage, TTL
from storefront.logging import get_logger

logger = get_logger(__name__)

SelectionScope = Literal["storefront", "admin"]
SELECTION_SCOPES = ("storefront", "admin")


class ProductSelection:
    """Single stored selection shared by both scopes; reads filter by scope."""

    def __init__(self, storage: KeyValueStorage, key: str):
        self._storage = storage
        self._key = key

    def remember(self, product: Any, scope: SelectionScope) -> Optional[dict]:
        snapshot = snapshot_product(product)
        if snapshot is None:
            return None
        product_id = normalize_product_id(snapshot.get("id"))
        if product_id is None:
            return None
        payload = {
            "id": product_id,
            "scope": scope,
            "snapshot": snapshot,
            "updated_at": int(time.time() * 1000),
        }
        self._storage.set_item(self._key, json.dumps(payload), ttl=TTL.SELECTION)
        return payload

    def read(self, scope: SelectionScope) -> Optional[dict]:
        raw = self._storage.get_item(self._key)
        if not raw:
            return None
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Ignoring unreadable product selection")
            return None
        if not isinstance(parsed, dict) or parsed.get("scope") != scope:
            return None
        return parsed

    def clear(self) -> None:
        self._storage.remove_item(self._key)
