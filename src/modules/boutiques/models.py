"""Boutique (vendor) record.

The vendor account itself lives in the Identity Service; ``owner_id`` is the
user id it issued.  A boutique carries the delivery parameters used to price
orders placed with it.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.boutiques.constants import (
    DEFAULT_DELIVERY_FEE,
    DEFAULT_EXPRESS_DELIVERY_FEE,
    DEFAULT_FREE_DELIVERY_THRESHOLD,
    DeliveryMode,
)
from modules.core.models import SoftDeleteModel


class Boutique(SoftDeleteModel):
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True, default="")
    owner_id = models.CharField(max_length=64, unique=True)
    is_active = models.BooleanField(default=True)
    delivery_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=DEFAULT_DELIVERY_FEE,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    free_delivery_threshold = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=DEFAULT_FREE_DELIVERY_THRESHOLD,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    express_delivery_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=DEFAULT_EXPRESS_DELIVERY_FEE,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    class Meta:
        db_table = "boutiques"
        ordering = ["name"]

    @property
    def is_open(self) -> bool:
        """Whether the boutique can currently sell."""
        return self.is_active and not self.is_deleted

    def delivery_fee_for(self, mode: str, subtotal: Decimal) -> Decimal:
        """Delivery fee charged for an order of *subtotal* shipped with *mode*.

        Standard delivery is free once the subtotal reaches the threshold;
        express delivery is never waived.
        """
        if mode == DeliveryMode.STORE_PICKUP:
            return Decimal("0.00")
        if mode == DeliveryMode.EXPRESS:
            return self.express_delivery_fee
        if subtotal >= self.free_delivery_threshold:
            return Decimal("0.00")
        return self.delivery_fee

    def __str__(self) -> str:
        return self.name
