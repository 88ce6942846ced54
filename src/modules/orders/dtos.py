"""Order DTOs for the Service Layer.

Immutable Pydantic v2 contracts:

- ``CheckoutDTO`` / ``DeliveryAddressDTO``: checkout input.
- ``LineConflictDTO``: why a boutique group could not be committed.
- ``OrderSummaryDTO`` / ``CheckoutResultDTO``: checkout output.
- ``InvoiceDTO`` / ``InvoiceLineDTO``: invoice document content.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.orders.constants import DeliveryMode, PaymentMethod

IDEMPOTENCY_KEY_MAX_LENGTH = 255

if TYPE_CHECKING:
    from modules.orders.models import Order


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class DeliveryAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    full_name: str = Field(default="", max_length=150)
    phone: str = Field(default="", max_length=30)
    street: str = Field(default="", max_length=255)
    city: str = Field(default="", max_length=100)
    postal_code: str = Field(default="", max_length=20)
    country: str = Field(default="", max_length=100)
    instructions: str = ""

    @property
    def is_complete(self) -> bool:
        return all(
            value.strip() for value in (self.full_name, self.phone, self.street, self.city)
        )


class CheckoutDTO(BaseModel):
    """Checkout request.

    Validates:
    - ``delivery_mode`` and ``payment_method`` are known values.
    - A delivery address (name, phone, street, city) is given unless the
      order is collected in store.
    - Address fields and the idempotency key fit their stored columns.
    """

    model_config = ConfigDict(frozen=True)

    delivery_mode: str
    payment_method: str
    delivery_address: DeliveryAddressDTO = DeliveryAddressDTO()
    notes: str = ""
    idempotency_key: Optional[str] = Field(
        default=None, max_length=IDEMPOTENCY_KEY_MAX_LENGTH
    )

    @field_validator("delivery_mode")
    @classmethod
    def known_delivery_mode(cls, v: str) -> str:
        if v not in DeliveryMode.values:
            raise ValueError(f"Unknown delivery mode '{v}'.")
        return v

    @field_validator("payment_method")
    @classmethod
    def known_payment_method(cls, v: str) -> str:
        if v not in PaymentMethod.values:
            raise ValueError(f"Unknown payment method '{v}'.")
        return v

    @field_validator("idempotency_key")
    @classmethod
    def blank_key_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def address_required_for_delivery(self):
        if (
            self.delivery_mode != DeliveryMode.STORE_PICKUP
            and not self.delivery_address.is_complete
        ):
            raise ValueError(
                "Delivery address needs full_name, phone, street and city."
            )
        return self


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class LineConflictDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    boutique_id: UUID
    reason: str
    requested: int
    available: int


class OrderSummaryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    reference: str
    boutique_id: UUID
    status: str
    payment_status: str
    subtotal: Decimal
    delivery_fee: Decimal
    total_amount: Decimal
    created_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> OrderSummaryDTO:
        return cls(
            id=order.id,
            reference=order.reference,
            boutique_id=order.boutique_id,
            status=order.status,
            payment_status=order.payment_status,
            subtotal=order.subtotal,
            delivery_fee=order.delivery_fee,
            total_amount=order.total_amount,
            created_at=order.created_at,
        )


class CheckoutResultDTO(BaseModel):
    """Orders committed by a checkout and the groups that were rejected.

    ``replayed`` is set when an idempotent retry returned earlier orders.
    """

    model_config = ConfigDict(frozen=True)

    orders: List[OrderSummaryDTO]
    conflicts: List[LineConflictDTO] = []
    replayed: bool = False


class InvoiceLineDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    description: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class InvoiceDTO(BaseModel):
    """Invoice content; a pure function of the stored order."""

    model_config = ConfigDict(frozen=True)

    number: str
    order_id: UUID
    order_reference: str
    issue_date: date
    boutique_id: UUID
    boutique_name: str
    shopper_id: str
    customer_name: str
    customer_address: List[str]
    lines: List[InvoiceLineDTO]
    subtotal: Decimal
    delivery_mode: str
    delivery_fee: Decimal
    total_amount: Decimal
    payment_method: str
    payment_status: str
