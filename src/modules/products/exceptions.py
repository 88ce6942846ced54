"""Product domain exceptions."""

from __future__ import annotations

from shared.domain.exceptions import BusinessRuleViolation, EntityNotFound


class ProductNotFound(EntityNotFound):
    """The requested product does not exist or has been soft-deleted."""


class ProductUnavailable(BusinessRuleViolation):
    """The product cannot be sold: inactive, out of stock, or its boutique is closed."""


class InvalidPromotion(BusinessRuleViolation):
    """The promotional price is not strictly lower than the base price."""
