"""
Storefront API Pydantic Models

Request bodies shared by the routers.
"""
from typing import Any, Union

from pydantic import BaseModel


# ==================== CART MODELS ====================

class AddToCartRequest(BaseModel):
    product_id: Union[str, int]
    quantity: int = 1


class UpdateCartItemRequest(BaseModel):
    quantity: int  # 0 or less removes the item


# ==================== AUTH MODELS ====================

class LoginRequest(BaseModel):
    email: str
    password: str


# ==================== SELECTION MODELS ====================

class RememberSelectionRequest(BaseModel):
    product: dict[str, Any]
