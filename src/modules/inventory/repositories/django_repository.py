"""Django ORM stock repository.

Both mutations are single ``UPDATE ... SET stock_quantity = stock_quantity
± n`` statements; the decrement carries ``stock_quantity >= n`` in its
``WHERE`` clause, so two concurrent reservations can never both succeed on
the last units, on any database backend.
"""

from __future__ import annotations

from typing import Optional

from django.core.exceptions import ValidationError
from django.db.models import F
from django.utils import timezone

from modules.inventory.repositories.interfaces import IStockRepository
from modules.products.models import Product


class StockDjangoRepository(IStockRepository):
    def decrement_if_available(self, product_id: str, quantity: int) -> bool:
        updated = Product.objects.filter(
            id=product_id,
            deleted_at__isnull=True,
            stock_quantity__gte=quantity,
        ).update(
            stock_quantity=F("stock_quantity") - quantity,
            updated_at=timezone.now(),
        )
        return updated == 1

    def increment(self, product_id: str, quantity: int) -> bool:
        # Soft-deleted products still get their units back
        updated = Product.objects.filter(id=product_id).update(
            stock_quantity=F("stock_quantity") + quantity,
            updated_at=timezone.now(),
        )
        return updated == 1

    def current_stock(self, product_id: str) -> Optional[int]:
        try:
            return (
                Product.objects.alive()
                .filter(id=product_id)
                .values_list("stock_quantity", flat=True)
                .first()
            )
        except (ValueError, ValidationError):
            return None
