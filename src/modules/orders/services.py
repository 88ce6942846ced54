"""Order service layer: the order status state machine and payment status.

Every command locks the order row (``SELECT FOR UPDATE``) before reading
its state, so transitions on one order are serialized.  Side effects run in
the same transaction as the status change; domain events are delivered
only after commit.

Business rules enforced:
- Transitions follow ``VALID_TRANSITIONS`` restricted by the actor's role
  (``ROLE_TRANSITIONS``).
- Cancellation and refusal give the reserved stock back exactly once (the
  resulting state is terminal) and refund a settled payment.
- Delivery issues the invoice.
- ``paye`` can only be recorded on a ready or delivered order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.db import models, transaction
from django.utils import timezone

from modules.orders.constants import (
    PAYABLE_ORDER_STATES,
    PAYMENT_TRANSITIONS,
    ROLE_PAYMENT_STATUSES,
    ROLE_TRANSITIONS,
    STATUS_TIMESTAMP_FIELDS,
    STOCK_RELEASING_STATES,
    OrderStatus,
    PaymentStatus,
)
from modules.orders.events import OrderStatusChanged, PaymentStatusChanged
from modules.orders.exceptions import (
    InvalidPaymentContext,
    InvalidPaymentTransition,
    InvalidTransition,
    OrderAccessDenied,
    OrderNotFound,
)
from shared.infrastructure.bus import event_bus

if TYPE_CHECKING:
    from modules.core.identity import Actor
    from modules.inventory.services import InventoryLedger
    from modules.orders.models import Order, OrderStatusHistory
    from modules.orders.repositories.interfaces import IOrderRepository


logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for the order lifecycle."""

    def __init__(
        self,
        order_repository: IOrderRepository,
        ledger: InventoryLedger,
    ) -> None:
        self._order_repo = order_repository
        self._ledger = ledger

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def transition(
        self,
        order_id: UUID | str,
        actor: Actor,
        target_status: str,
        reason: str = "",
    ) -> Order:
        """Move an order to *target_status*.

        Raises:
            OrderNotFound: the order does not exist.
            OrderAccessDenied: the actor takes no part in the order.
            InvalidTransition: the move is unreachable from the current
                status or not allowed for the actor's role.
        """
        order = self._locked_order(order_id)
        self._ensure_participant(order, actor)

        log = logger.bind(
            order_id=str(order.id),
            current_status=order.status,
            new_status=target_status,
            actor_role=actor.role,
        )

        if not order.can_transition_to(target_status):
            log.warning("order.invalid_transition")
            raise InvalidTransition(
                f"Cannot transition from {order.status} to {target_status}."
            )
        allowed = ROLE_TRANSITIONS.get(actor.role, {}).get(order.status, set())
        if target_status not in allowed:
            log.warning("order.transition_not_allowed_for_role")
            raise InvalidTransition(
                f"Role {actor.role} cannot move an order from {order.status} "
                f"to {target_status}."
            )

        now = timezone.now()
        old_status = order.status
        old_payment_status = order.payment_status
        order.status = target_status
        order.stamp_status(target_status, now)
        fields = ["status", STATUS_TIMESTAMP_FIELDS[target_status]]

        if target_status in STOCK_RELEASING_STATES:
            self._release_stock(order)
            order.status_reason = reason
            fields.append("status_reason")
            # paye needs pret/livre and no release starts there; only payment
            # state written outside this service reaches the refund
            if order.payment_status == PaymentStatus.PAID:
                order.payment_status = PaymentStatus.REFUNDED
                fields.append("payment_status")
                log.info("order.payment_refunded")

        if target_status == OrderStatus.DELIVERED:
            order.invoice_issued_at = now
            fields.append("invoice_issued_at")
            log.info("order.invoice_issued")

        self._order_repo.save(order, update_fields=fields)
        self._order_repo.add_history(
            order,
            new_status=target_status,
            old_status=old_status,
            actor_id=actor.user_id,
            actor_role=actor.role,
            reason=reason,
        )

        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                reference=order.reference,
                shopper_id=order.shopper_id,
                boutique_owner_id=order.boutique.owner_id,
                old_status=old_status,
                new_status=target_status,
                actor_id=actor.user_id,
                actor_role=actor.role,
                payment_status=order.payment_status,
                reason=reason,
            )
        )
        if order.payment_status != old_payment_status:
            order.add_domain_event(
                self._payment_event(order, old_payment_status, actor.role)
            )
        event_bus.publish_on_commit(order.pull_domain_events())

        log.info("order.status_updated")
        return self._order_repo.get_by_id(str(order.id))

    def cancel(self, order_id: UUID | str, actor: Actor, reason: str = "") -> Order:
        """Cancel an order (``annule``); see ``transition``."""
        return self.transition(order_id, actor, OrderStatus.CANCELLED, reason)

    @transaction.atomic
    def record_payment(
        self,
        order_id: UUID | str,
        actor: Actor,
        status: str,
        reference: Optional[str] = None,
    ) -> Order:
        """Record the payment status reported by a trusted caller.

        Recording the status already in place changes nothing.

        Raises:
            OrderNotFound: the order does not exist.
            OrderAccessDenied: the actor takes no part in the order, or a
                shopper records a status other than ``paye``/``echoue``.
            InvalidPaymentContext: ``paye`` on an order that is not ready or
                delivered.
            InvalidPaymentTransition: the payment status cannot move there.
        """
        order = self._locked_order(order_id)
        self._ensure_participant(order, actor)

        log = logger.bind(
            order_id=str(order.id),
            current_payment_status=order.payment_status,
            new_payment_status=status,
            order_status=order.status,
        )

        if status not in PaymentStatus.values:
            raise InvalidPaymentTransition(f"Unknown payment status '{status}'.")
        if status not in ROLE_PAYMENT_STATUSES.get(actor.role, set()):
            log.warning("order.payment_not_allowed_for_role", actor_role=actor.role)
            raise OrderAccessDenied(
                f"Role {actor.role} cannot record payment status {status}."
            )
        if status == order.payment_status:
            log.info("order.payment_unchanged")
            return self._order_repo.get_by_id(str(order.id))
        if status == PaymentStatus.PAID and order.status not in PAYABLE_ORDER_STATES:
            log.warning("order.payment_invalid_context")
            raise InvalidPaymentContext(
                f"Order {order.reference} cannot be paid while {order.status}."
            )
        if status not in PAYMENT_TRANSITIONS.get(order.payment_status, set()):
            log.warning("order.payment_invalid_transition")
            raise InvalidPaymentTransition(
                f"Cannot move payment from {order.payment_status} to {status}."
            )

        old_payment_status = order.payment_status
        order.payment_status = status
        fields = ["payment_status"]
        if status == PaymentStatus.PAID:
            order.paid_at = timezone.now()
            fields.append("paid_at")
        if reference:
            order.payment_reference = reference
            fields.append("payment_reference")
        self._order_repo.save(order, update_fields=fields)

        order.add_domain_event(self._payment_event(order, old_payment_status, actor.role))
        event_bus.publish_on_commit(order.pull_domain_events())

        log.info("order.payment_recorded")
        return self._order_repo.get_by_id(str(order.id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: UUID | str, actor: Actor) -> Order:
        """Raises ``OrderNotFound`` / ``OrderAccessDenied``."""
        order = self._order_repo.get_by_id(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        self._ensure_participant(order, actor)
        return order

    def list_orders(
        self, actor: Actor, filters: Optional[Dict[str, Any]] = None
    ) -> models.QuerySet:
        """Orders visible to *actor*: own purchases, own boutique, or all."""
        scope: Dict[str, Any] = {}
        if actor.is_shopper:
            scope["shopper_id"] = actor.user_id
        elif actor.is_vendor:
            scope["boutique__owner_id"] = actor.user_id
        elif not actor.is_admin:
            return self._order_repo.queryset().none()
        return self._order_repo.queryset({**scope, **(filters or {})})

    def get_history(
        self, order_id: UUID | str, actor: Actor
    ) -> List[OrderStatusHistory]:
        order = self.get_order(order_id, actor)
        return self._order_repo.history(order)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _locked_order(self, order_id: UUID | str) -> Order:
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    @staticmethod
    def _ensure_participant(order: Order, actor: Actor) -> None:
        if actor.is_admin:
            return
        if actor.is_shopper and order.shopper_id == actor.user_id:
            return
        if actor.is_vendor and order.boutique.owner_id == actor.user_id:
            return
        logger.warning(
            "order.access_denied",
            order_id=str(order.id),
            user_id=actor.user_id,
            role=actor.role,
        )
        raise OrderAccessDenied("You do not take part in this order.")

    def _release_stock(self, order: Order) -> None:
        for item in order.items.order_by("product_id"):
            self._ledger.restore(item.product_id, item.quantity)

    @staticmethod
    def _payment_event(
        order: Order, old_status: str, actor_role: str
    ) -> PaymentStatusChanged:
        return PaymentStatusChanged(
            aggregate_id=order.id,
            reference=order.reference,
            shopper_id=order.shopper_id,
            boutique_owner_id=order.boutique.owner_id,
            old_status=old_status,
            new_status=order.payment_status,
            actor_role=actor_role,
        )


def default_order_service() -> OrderService:
    from modules.inventory.services import default_ledger
    from modules.orders.repositories.django_repository import OrderDjangoRepository

    return OrderService(order_repository=OrderDjangoRepository(), ledger=default_ledger())
