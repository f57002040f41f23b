"""Cart models with Decimal-based pricing."""
import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Optional

from pydantic import BaseModel

from storefront.services.money import normalize_price, round_money, multiply

ProductSnapshot = dict[str, Any]


def normalize_product_id(value: Any) -> Optional[str]:
    """
    Canonical string form of a product identifier.

    42, 42.0, Decimal("42") and " 42 " all become "42". Returns None
    for values that cannot identify a product.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            return None
        return str(int(value)) if value == value.to_integral_value() else str(value.normalize())
    if isinstance(value, str):
        return value.strip() or None
    return None


def coerce_quantity(value: Any) -> Optional[int]:
    """Integer quantity, or None when the value is not a whole number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def snapshot_product(product: Any) -> Optional[ProductSnapshot]:
    """Copy a product (mapping or pydantic model) into a plain dict."""
    if isinstance(product, BaseModel):
        return product.model_dump(mode="json")
    if isinstance(product, Mapping):
        return dict(product)
    return None


@dataclass
class LineItem:
    """One product's entry in the cart."""
    product: ProductSnapshot
    quantity: int
    unit_price: Decimal = field(default_factory=lambda: Decimal("0"))

    def __post_init__(self):
        self.unit_price = normalize_price(self.unit_price)

    @property
    def product_id(self) -> Optional[str]:
        return normalize_product_id(self.product.get("id"))

    @property
    def line_total(self) -> Decimal:
        """Total price for all units."""
        return round_money(multiply(self.unit_price, self.quantity))

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "product": dict(self.product),
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        """
        Create from a stored dictionary.

        Raises:
            KeyError, TypeError, ValueError: malformed entry
        """
        product = data["product"]
        if not isinstance(product, Mapping):
            raise TypeError("product snapshot must be an object")
        quantity = data["quantity"]
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise TypeError("quantity must be an integer")
        return cls(
            product=dict(product),
            quantity=quantity,
            unit_price=normalize_price(data.get("unit_price")),
        )

    def copy(self) -> "LineItem":
        return LineItem(product=dict(self.product), quantity=self.quantity, unit_price=self.unit_price)
