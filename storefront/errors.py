"""
Common errors and error messages.

Centralized error messages to avoid string duplication, plus the
ApiError raised by the REST client and helpers that turn any error
into copy that can be shown to a shopper.
"""

from typing import Any, Optional

from storefront.logging import get_logger

logger = get_logger(__name__)

# Cart errors
ERROR_CART_EMPTY = "Your cart is empty"

# Product errors
ERROR_PRODUCT_NOT_FOUND = "Product not found"

# Order errors
ERROR_ORDER_NOT_FOUND = "Order not found"
ERROR_ORDER_FAILED = "Payment failed"

# Auth errors
ERROR_UNAUTHORIZED = "Sign in required"
ERROR_FORBIDDEN = "You do not have access to this page"

# Generic errors
ERROR_UPSTREAM_UNAVAILABLE = "Shop service is unavailable"
ERROR_INTERNAL = "Something went wrong"
ERROR_TRY_AGAIN = "Please try again."


class ApiError(Exception):
    """Error response (or transport failure) from the shop API."""

    def __init__(
        self,
        message: str,
        status: int,
        type: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.type = type
        self.details = details

    def __repr__(self) -> str:
        return f"ApiError(status={self.status}, message={self.message!r})"


class CheckoutError(Exception):
    """Order could not be built from the current cart."""


def is_api_error(error: Any) -> bool:
    return isinstance(error, ApiError)


def to_user_message(error: Any) -> Optional[str]:
    """
    Turn an error into copy suitable for a shopper.

    Returns None when nothing readable can be extracted.
    """
    if isinstance(error, ApiError):
        return error.message
    if isinstance(error, BaseException):
        message = str(error)
        return message or None
    if isinstance(error, str):
        return error
    return None


def handle_error(
    error: Any,
    title: str = ERROR_INTERNAL,
    fallback_message: str = ERROR_TRY_AGAIN,
    notify: bool = True,
) -> str:
    """
    Normalize an unknown error into user-friendly copy.

    Args:
        error: Exception, string or anything else
        title: Headline for the notice
        fallback_message: Used when the error carries no message
        notify: Log the notice at warning level

    Returns:
        Message to show to the shopper
    """
    message = to_user_message(error) or fallback_message
    if notify:
        logger.warning("%s: %s", title, message)
    return message
