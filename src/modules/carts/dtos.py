"""Cart DTOs.

``CartTotalsDTO`` is a snapshot computed on every call from live product
prices; it is never stored.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class CartLineDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    product_name: str
    unit_price: Decimal
    is_on_promotion: bool
    quantity: int
    line_total: Decimal
    available: bool


class VendorSubtotalDTO(BaseModel):
    """Lines of one boutique and what they cost."""

    model_config = ConfigDict(frozen=True)

    boutique_id: UUID
    boutique_name: str
    items: List[CartLineDTO]
    item_count: int
    subtotal: Decimal
    delivery_fee_estimate: Decimal


class CartTotalsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    shopper_id: str
    vendors: List[VendorSubtotalDTO]
    item_count: int
    grand_total: Decimal
    estimated_delivery_total: Decimal


class CartLineChangeDTO(BaseModel):
    """Outcome of adding to / resizing a cart line.

    ``clamped`` is set when the requested quantity exceeded the stock and
    the line was capped at ``quantity``.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    quantity: int
    requested_quantity: int
    clamped: bool
