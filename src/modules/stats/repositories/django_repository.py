from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.db.models import Count, Q, Sum

from modules.boutiques.models import Boutique
from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.models import Order, OrderItem
from modules.products.models import Product, ProductStatus
from modules.stats.repositories.interfaces import IStatisticsRepository

SETTLED = Q(status=OrderStatus.DELIVERED, payment_status=PaymentStatus.PAID)


def _orders(boutique_id: Optional[str]):
    queryset = Order.objects.all()
    if boutique_id:
        queryset = queryset.filter(boutique_id=boutique_id)
    return queryset


class StatisticsDjangoRepository(IStatisticsRepository):
    def count_by_status(self, boutique_id: Optional[str] = None) -> Dict[str, int]:
        rows = _orders(boutique_id).order_by().values("status").annotate(n=Count("id"))
        return {row["status"]: row["n"] for row in rows}

    def count_by_payment_status(
        self, boutique_id: Optional[str] = None
    ) -> Dict[str, int]:
        rows = _orders(boutique_id).order_by().values("payment_status").annotate(
            n=Count("id")
        )
        return {row["payment_status"]: row["n"] for row in rows}

    def revenue(self, boutique_id: Optional[str] = None) -> Decimal:
        total = _orders(boutique_id).filter(SETTLED).aggregate(total=Sum("subtotal"))
        return total["total"] or Decimal("0.00")

    def product_counts(self, boutique_id: str, low_stock_threshold: int) -> Dict[str, int]:
        return Product.objects.alive().filter(boutique_id=boutique_id).aggregate(
            total=Count("id"),
            active=Count("id", filter=Q(status=ProductStatus.ACTIVE)),
            low_stock=Count(
                "id",
                filter=Q(
                    status=ProductStatus.ACTIVE,
                    stock_quantity__lte=low_stock_threshold,
                ),
            ),
        )

    def top_products(self, boutique_id: str, limit: int) -> List[Dict[str, Any]]:
        rows = (
            OrderItem.objects.filter(
                order__boutique_id=boutique_id,
                order__status=OrderStatus.DELIVERED,
                order__payment_status=PaymentStatus.PAID,
            )
            .values("product_id", "product_name")
            .annotate(quantity_sold=Sum("quantity"), revenue=Sum("line_total"))
            .order_by("-quantity_sold", "product_name")[:limit]
        )
        return list(rows)

    def boutique_counts(self) -> Dict[str, int]:
        return Boutique.objects.alive().aggregate(
            total=Count("id"),
            active=Count("id", filter=Q(is_active=True)),
        )

    def top_boutique(self) -> Optional[Dict[str, Any]]:
        return (
            Order.objects.filter(SETTLED)
            .values("boutique_id", "boutique__name")
            .annotate(revenue=Sum("subtotal"))
            .order_by("-revenue")
            .first()
        )

    def live_boutiques(self) -> List[Boutique]:
        return list(Boutique.objects.alive().order_by("name"))
