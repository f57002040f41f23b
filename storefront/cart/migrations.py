"""
Schema migrations for the persisted cart record.

Each entry in MIGRATIONS upgrades a stored state from its key version
to the next one. To change the stored shape, add a step for the
current version and bump CART_SCHEMA_VERSION.
"""
from typing import Any, Callable

from .models import coerce_quantity, normalize_product_id

CART_SCHEMA_VERSION = 1

Migration = Callable[[dict[str, Any]], dict[str, Any]]


class CartMigrationError(ValueError):
    """Stored cart cannot be brought to the current schema."""


def _upgrade_v0_items(state: dict[str, Any]) -> dict[str, Any]:
    """
    v0 -> v1: snake_case fields, string ids, integer quantities.

    v0 records were written by the browser store, which kept the captured
    price as `unitPrice`. Entries without a usable id or a positive whole
    quantity are dropped; entries sharing an id are merged.
    """
    merged: dict[str, dict[str, Any]] = {}
    for raw in state.get("items") or []:
        if not isinstance(raw, dict) or not isinstance(raw.get("product"), dict):
            continue
        product_id = normalize_product_id(raw["product"].get("id"))
        quantity = coerce_quantity(raw.get("quantity"))
        if product_id is None or quantity is None or quantity <= 0:
            continue
        if product_id in merged:
            merged[product_id]["quantity"] += quantity
            continue

        entry = {key: value for key, value in raw.items() if key != "unitPrice"}
        if "unit_price" not in entry and "unitPrice" in raw:
            entry["unit_price"] = raw["unitPrice"]
        entry["product"] = {**raw["product"], "id": product_id}
        entry["quantity"] = quantity
        merged[product_id] = entry
    return {**state, "items": list(merged.values())}


MIGRATIONS: dict[int, Migration] = {
    0: _upgrade_v0_items,
}


def migrate(state: dict[str, Any], version: int) -> dict[str, Any]:
    """
    Apply migrations in order from `version` up to CART_SCHEMA_VERSION.

    Raises:
        CartMigrationError: version is newer than the code or a step is missing
    """
    if version > CART_SCHEMA_VERSION:
        raise CartMigrationError(
            f"Stored cart version {version} is newer than supported {CART_SCHEMA_VERSION}"
        )
    while version < CART_SCHEMA_VERSION:
        step = MIGRATIONS.get(version)
        if step is None:
            raise CartMigrationError(f"No cart migration from version {version}")
        state = step(state)
        version += 1
    return state
