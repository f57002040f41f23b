"""
Checkout - order totals and payload built from the cart.

Totals:
- subtotal: sum of captured unit price x quantity
- shipping: flat rate once the cart has a value
- tax: percentage of subtotal
"""
import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.api_client import ApiClient
from storefront.cart import CartStore, LineItem
from storefront.errors import CheckoutError, ERROR_CART_EMPTY
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.services.money import multiply, percent, round_money, to_float

logger = get_logger(__name__)

SHIPPING_FLAT_RATE = Decimal("15")
TAX_RATE_PERCENT = Decimal("8")


class ShippingDetails(BaseModel):
    """Checkout form fields."""
    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    phone: str = ""
    address1: str = Field(min_length=1)
    address2: str = ""
    city: str = Field(min_length=1)
    state: str = ""
    postal_code: str = ""
    country: str = ""
    notes: Optional[str] = None


@dataclass
class CheckoutTotals:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    grand_total: Decimal

    @classmethod
    def from_items(cls, items: Iterable[LineItem]) -> "CheckoutTotals":
        subtotal = sum((multiply(item.unit_price, item.quantity) for item in items), Decimal("0"))
        shipping = SHIPPING_FLAT_RATE if subtotal > 0 else Decimal("0")
        tax = percent(subtotal, TAX_RATE_PERCENT)
        grand_total = subtotal + shipping + tax
        return cls(
            subtotal=round_money(subtotal),
            shipping=round_money(shipping),
            tax=round_money(tax),
            grand_total=round_money(grand_total),
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "subtotal": to_float(self.subtotal),
            "shipping": to_float(self.shipping),
            "tax": to_float(self.tax),
            "grand_total": to_float(self.grand_total),
        }


def build_order_payload(details: ShippingDetails, items: list[LineItem]) -> dict[str, Any]:
    """Order body for POST /orders."""
    totals = CheckoutTotals.from_items(items)
    payload = details.model_dump(exclude={"notes"})
    if details.notes:
        payload["notes"] = details.notes
    payload.update({
        "subtotal": to_float(totals.subtotal),
        "tax_total": to_float(totals.tax),
        "shipping_total": to_float(totals.shipping),
        "grand_total": to_float(totals.grand_total),
        "items": [
            {
                "product_id": item.product_id,
                "quantity": item.quantity,
                "unit_price": to_float(round_money(item.unit_price)),
            }
            for item in items
        ],
    })
    return payload


async def place_order(
    store: CartStore,
    details: ShippingDetails,
    client: ApiClient,
    auth_token: Optional[str],
) -> dict[str, Any]:
    """
    Submit the cart as an order; the cart is cleared only on success.

    Raises:
        CheckoutError: cart is empty
        ApiError: order API rejected the order (cart left intact)
    """
    items = store.items
    if not items:
        raise CheckoutError(ERROR_CART_EMPTY)

    payload = build_order_payload(details, items)
    response = await client.post("/orders", body=payload, auth_token=auth_token)
    order = response.get("data", response) if isinstance(response, dict) else response

    await asyncio.to_thread(store.clear_cart)
    order_id = order.get("id") if isinstance(order, dict) else None
    logger.info("Order %s placed (%d items)", sanitize_id_for_logging(order_id), len(items))

    return {"order": order, "totals": CheckoutTotals.from_items(items).to_dict()}
