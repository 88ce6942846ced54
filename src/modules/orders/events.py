"""Domain events for the Orders bounded context.

Events carry the ids their consumers need (shopper, boutique owner), so
handlers do not have to reload the order.
"""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised once per order committed by checkout."""

    reference: str = ""
    shopper_id: str = ""
    boutique_id: str = ""
    boutique_owner_id: str = ""
    total_amount: str = "0.00"


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised on every order status transition."""

    reference: str = ""
    shopper_id: str = ""
    boutique_owner_id: str = ""
    old_status: str = ""
    new_status: str = ""
    actor_id: str = ""
    actor_role: str = ""
    payment_status: str = ""
    reason: str = ""


@dataclass(frozen=True)
class PaymentStatusChanged(DomainEvent):
    """Raised when an order's payment status changes."""

    reference: str = ""
    shopper_id: str = ""
    boutique_owner_id: str = ""
    old_status: str = ""
    new_status: str = ""
    actor_role: str = ""
