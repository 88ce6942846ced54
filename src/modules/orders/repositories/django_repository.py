"""Django ORM implementation of the Order repository.

Concurrency control on transitions uses ``select_for_update()`` on the
order row; stock is not touched here (see ``modules.inventory``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        data = dict(data)
        items = data.pop("items")
        order = Order(**data)
        order.save()

        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=item["product_id"],
                    product_name=item["product_name"],
                    quantity=item["quantity"],
                    unit_price=item["unit_price"],
                    line_total=item["unit_price"] * item["quantity"],
                )
                for item in items
            ]
        )
        logger.info(
            "order.persisted",
            order_id=str(order.id),
            reference=order.reference,
            item_count=len(items),
        )
        return order

    def get_by_id(self, id: str) -> Optional[Order]:
        """Order with boutique, lines and history loaded; ``None`` if missing."""
        try:
            return self.queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        try:
            return (
                Order.objects.select_for_update()
                .select_related("boutique")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def save(self, entity: Order, update_fields: Optional[List[str]] = None) -> Order:
        entity.save(update_fields=update_fields)
        return entity

    def add_history(
        self,
        order: Order,
        new_status: str,
        old_status: Optional[str] = None,
        actor_id: str = "",
        actor_role: str = "",
        reason: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order=order,
            old_status=old_status,
            new_status=new_status,
            actor_id=actor_id,
            actor_role=actor_role,
            reason=reason,
        )
        logger.info(
            "order.history_added",
            order_id=str(order.id),
            old_status=old_status,
            new_status=new_status,
        )
        return history

    def history(self, order: Order) -> List[OrderStatusHistory]:
        return list(OrderStatusHistory.objects.filter(order=order))

    def list_by_checkout_key(self, shopper_id: str, key: str) -> List[Order]:
        return list(
            self.queryset({"shopper_id": shopper_id, "checkout_key": key}).order_by(
                "created_at"
            )
        )

    def queryset(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = Order.objects.select_related("boutique").prefetch_related(
            "items", "status_history"
        )
        if filters:
            queryset = queryset.filter(**filters)
        return queryset
