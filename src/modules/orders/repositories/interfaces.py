"""Order repository interface.

Extends ``IRepository[Order]`` with what the Order aggregate needs:
creation with frozen lines, row locking for transitions, the append-only
status history and checkout idempotency look-ups.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its lines.

        ``data`` holds the order fields plus ``items``: a list of dicts with
        ``product_id``, ``product_name``, ``quantity`` and ``unit_price``.
        """

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def save(self, entity: Order, update_fields: Optional[List[str]] = None) -> Order:
        """Persist an order."""

    @abstractmethod
    def add_history(
        self,
        order: Order,
        new_status: str,
        old_status: Optional[str] = None,
        actor_id: str = "",
        actor_role: str = "",
        reason: str = "",
    ) -> OrderStatusHistory:
        """Append a status change to the order's audit trail."""

    @abstractmethod
    def history(self, order: Order) -> List[OrderStatusHistory]:
        """Audit trail, oldest first."""

    @abstractmethod
    def list_by_checkout_key(self, shopper_id: str, key: str) -> List[Order]:
        """Orders created by one checkout request of a shopper."""

    @abstractmethod
    def queryset(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        """Orders with their relations loaded, optionally filtered."""
