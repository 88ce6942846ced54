"""Shopper cart and its lines.

A shopper owns exactly one cart, created on first use and kept across
sessions.  A product appears at most once per cart; adding it again merges
the quantities into the existing line.
"""

from __future__ import annotations

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel


class Cart(BaseModel):
    shopper_id = models.CharField(max_length=64, unique=True)

    class Meta:
        db_table = "carts"

    def __str__(self) -> str:
        return f"Cart({self.shopper_id})"


class CartElement(BaseModel):
    cart = models.ForeignKey(
        "carts.Cart",
        on_delete=models.CASCADE,
        related_name="elements",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="cart_elements",
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "cart_elements"
        ordering = ["added_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["cart", "product"],
                name="cart_elements_unique_product",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="cart_elements_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity}"
