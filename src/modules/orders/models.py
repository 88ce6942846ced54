"""Order, OrderItem, OrderStatusHistory and the daily reference counter.

Business rules implemented:
- One order per boutique; line prices are frozen at checkout and lines are
  never edited afterwards.
- ``reference`` is sequential per day (``CMD-YYYYMMDD-NNNNNN``); the
  counter is incremented with an atomic ``F()`` update.
- Every status change appends an ``OrderStatusHistory`` row; history rows
  are never updated or deleted.
- Shopper and vendor accounts live in the Identity Service: orders keep
  their ids, not foreign keys.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import (
    ORDER_REFERENCE_PREFIX,
    STATUS_TIMESTAMP_FIELDS,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    DeliveryMode,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from shared.domain.events import DomainEventMixin

MONEY = {"max_digits": 12, "decimal_places": 2}


class OrderReferenceCounter(models.Model):
    """Last reference number handed out for a calendar day."""

    day = models.DateField(primary_key=True)
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "order_reference_counters"

    @classmethod
    def next_reference(cls) -> str:
        today = timezone.localdate()
        with transaction.atomic():
            cls.objects.get_or_create(day=today)
            cls.objects.filter(day=today).update(last_value=F("last_value") + 1)
            value = cls.objects.filter(day=today).values_list(
                "last_value", flat=True
            )[0]
        return f"{ORDER_REFERENCE_PREFIX}-{today:%Y%m%d}-{value:06d}"

    def __str__(self) -> str:
        return f"{self.day}: {self.last_value}"


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root: what one shopper bought from one boutique."""

    reference = models.CharField(max_length=24, unique=True, editable=False)
    shopper_id = models.CharField(max_length=64, db_index=True)
    boutique = models.ForeignKey(
        "boutiques.Boutique",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    status_reason = models.TextField(blank=True, default="")

    delivery_mode = models.CharField(max_length=20, choices=DeliveryMode.choices)
    delivery_full_name = models.CharField(max_length=150, blank=True, default="")
    delivery_phone = models.CharField(max_length=30, blank=True, default="")
    delivery_street = models.CharField(max_length=255, blank=True, default="")
    delivery_city = models.CharField(max_length=100, blank=True, default="")
    delivery_postal_code = models.CharField(max_length=20, blank=True, default="")
    delivery_country = models.CharField(max_length=100, blank=True, default="")
    delivery_instructions = models.TextField(blank=True, default="")
    notes = models.TextField(blank=True, default="")

    subtotal = models.DecimalField(**MONEY, default=Decimal("0.00"))
    delivery_fee = models.DecimalField(**MONEY, default=Decimal("0.00"))
    total_amount = models.DecimalField(**MONEY, default=Decimal("0.00"))

    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    payment_reference = models.CharField(max_length=100, blank=True, default="")
    paid_at = models.DateTimeField(null=True, blank=True)

    preparing_at = models.DateTimeField(null=True, blank=True)
    ready_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    refused_at = models.DateTimeField(null=True, blank=True)
    invoice_issued_at = models.DateTimeField(null=True, blank=True)

    checkout_key = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(fields=["boutique", "status"], name="orders_boutique_idx"),
            models.Index(
                fields=["shopper_id", "checkout_key"], name="orders_checkout_key_idx"
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def stamp_status(self, status: str, at=None) -> None:
        """Record when the order entered *status*."""
        field = STATUS_TIMESTAMP_FIELDS.get(status)
        if field:
            setattr(self, field, at or timezone.now())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.reference:
            self.reference = OrderReferenceCounter.next_reference()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.reference} ({self.status})"


class OrderItem(BaseModel):
    """Order line with the product name and price frozen at checkout."""

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    product_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(**MONEY)
    line_total = models.DecimalField(**MONEY, editable=False)

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self._state.adding:
            raise ValidationError("Order lines are immutable once created.")
        self.line_total = self.unit_price * self.quantity
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity} ({self.line_total})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``actor_id`` is empty and ``actor_role`` is ``system`` for changes made
    by the platform itself.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    actor_id = models.CharField(max_length=64, blank=True, default="")
    actor_role = models.CharField(max_length=20, blank=True, default="")
    reason = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["order", "created_at"], name="osh_order_created_idx"),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self._state.adding:
            raise ValidationError("Status history entries cannot be modified.")
        super().save(*args, **kwargs)

    def delete(self, *args: Any, **kwargs: Any):
        raise ValidationError("Status history entries cannot be deleted.")

    def __str__(self) -> str:
        return f"{self.order_id}: {self.old_status} -> {self.new_status}"
