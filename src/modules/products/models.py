"""Product sold by a boutique.

Business rules implemented:
- Price is non-negative; a promotional price, when set, is strictly lower.
- Stock quantity never goes negative (check constraint; the inventory
  ledger only decrements through a conditional UPDATE).
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel

logger = structlog.get_logger(__name__)


class ProductStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class Product(SoftDeleteModel):
    boutique = models.ForeignKey(
        "boutiques.Boutique",
        on_delete=models.PROTECT,
        related_name="products",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    promo_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        default=None,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    stock_quantity = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=20,
        choices=ProductStatus.choices,
        default=ProductStatus.ACTIVE,
    )
    image_url = models.URLField(max_length=500, blank=True, default="")

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["status"], name="products_status_idx"),
            models.Index(fields=["boutique", "status"], name="products_boutique_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="products_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(stock_quantity__gte=0),
                name="products_stock_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(promo_price__isnull=True)
                | models.Q(promo_price__lt=models.F("price")),
                name="products_promo_below_price",
            ),
        ]

    @property
    def is_on_promotion(self) -> bool:
        return self.promo_price is not None

    @property
    def effective_price(self) -> Decimal:
        """Price charged right now: the promotional price when one is set."""
        return self.promo_price if self.promo_price is not None else self.price

    @property
    def is_sellable(self) -> bool:
        """Active, not deleted, in stock and offered by an open boutique."""
        return (
            self.status == ProductStatus.ACTIVE
            and not self.is_deleted
            and self.stock_quantity > 0
            and self.boutique.is_open
        )

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price cannot be negative."})
        if self.promo_price is not None and self.price is not None:
            if self.promo_price >= self.price:
                raise ValidationError(
                    {"promo_price": "Promotional price must be lower than price."}
                )

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product.created",
                product_id=str(self.id),
                boutique_id=str(self.boutique_id),
            )

    def __str__(self) -> str:
        return self.name
