"""Shop API models - Pydantic models for the entities the storefront reads."""
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

Role = Literal["administrator", "customer"]


class User(BaseModel):
    """Signed-in user as returned by /me and /login."""
    model_config = ConfigDict(extra="ignore")

    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    role: Role = "customer"

    @field_validator("id", mode="before")
    @classmethod
    def id_to_str(cls, v):
        return str(v) if v is not None else v

    @property
    def is_admin(self) -> bool:
        return self.role == "administrator"


class Product(BaseModel):
    """Catalog product snapshot. Unknown fields are kept as-is."""
    model_config = ConfigDict(extra="allow")

    id: Union[str, int]
    name: str
    brand: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Union[str, int, float, None] = None
    image_url: Optional[str] = None
    image_path: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
