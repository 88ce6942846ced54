"""Product DTOs for the Service Layer.

Immutable Pydantic v2 contracts between the API layer and
``ProductService``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.products.models import ProductStatus


class CreateProductDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    price: Decimal
    description: str = ""
    stock_quantity: int = 0
    promo_price: Optional[Decimal] = None
    image_url: str = ""
    status: str = ProductStatus.ACTIVE

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Name must not be empty.")
        return v.strip()

    @field_validator("price")
    @classmethod
    def price_must_be_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Price cannot be negative.")
        return v

    @field_validator("stock_quantity")
    @classmethod
    def stock_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Stock quantity cannot be negative.")
        return v

    @model_validator(mode="after")
    def promo_below_price(self):
        if self.promo_price is not None and self.promo_price >= self.price:
            raise ValueError("Promotional price must be lower than price.")
        return self


class UpdateProductDTO(BaseModel):
    """Partial update: only supplied fields are applied.

    ``clear_promotion`` removes the promotional price (``promo_price=None``
    alone means "unchanged").
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    price: Optional[Decimal] = None
    description: Optional[str] = None
    stock_quantity: Optional[int] = None
    status: Optional[str] = None
    promo_price: Optional[Decimal] = None
    clear_promotion: bool = False
    image_url: Optional[str] = None

    @field_validator("price")
    @classmethod
    def price_must_be_non_negative(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise ValueError("Price cannot be negative.")
        return v

    @field_validator("stock_quantity")
    @classmethod
    def stock_must_be_non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("Stock quantity cannot be negative.")
        return v

    @field_validator("status")
    @classmethod
    def known_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in ProductStatus.values:
            raise ValueError(f"Unknown product status '{v}'.")
        return v
