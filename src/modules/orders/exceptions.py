"""Order domain exceptions.

Raised by the checkout orchestrator and the order state machine; the
envelope exception handler maps each to its HTTP status by family.
"""

from __future__ import annotations

from typing import Any, Dict, List

from shared.domain.exceptions import (
    AccessDenied,
    BusinessRuleViolation,
    ConflictError,
    EntityNotFound,
)


class OrderNotFound(EntityNotFound):
    """The requested order does not exist."""


class OrderAccessDenied(AccessDenied):
    """The actor is neither the shopper, the boutique owner, nor an admin."""


class InvalidTransition(BusinessRuleViolation):
    """The status change is not reachable or not allowed for the actor's role."""


class InvalidPaymentTransition(BusinessRuleViolation):
    """The payment status change is not allowed."""


class InvalidPaymentContext(BusinessRuleViolation):
    """The order's status does not allow recording this payment status."""


class InvoiceUnavailable(BusinessRuleViolation):
    """Cancelled or refused orders have no invoice."""


class EmptyCart(BusinessRuleViolation):
    """Checkout was requested on a cart without lines."""

    default_message = "The cart is empty."


class StockConflict(ConflictError):
    """No boutique group of the cart could be committed."""

    def __init__(self, conflicts: List[Dict[str, Any]]) -> None:
        self.conflicts = conflicts
        super().__init__(
            "No order could be created: insufficient stock or availability.",
            details={"conflicts": conflicts},
        )
