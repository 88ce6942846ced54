"""Order event handlers that fan out notifications.

Handlers run after the order change has committed.  Each recipient's
notification is written in its own savepoint; a failure is logged as
``notification.dispatch_failed`` and never reaches the order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

import structlog
from django.db import transaction

from modules.core.identity import Role
from modules.notifications.models import NotificationType
from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.events import OrderCreated, OrderStatusChanged, PaymentStatusChanged
from shared.domain.bus import IEventHandler

if TYPE_CHECKING:
    from modules.notifications.services import NotificationService

logger = structlog.get_logger(__name__)

STATUS_MESSAGES: Dict[str, str] = {
    OrderStatus.PREPARING: "Votre commande {reference} est en cours de préparation.",
    OrderStatus.READY: "Votre commande {reference} est prête.",
    OrderStatus.DELIVERED: "Votre commande {reference} a été livrée.",
    OrderStatus.CANCELLED: "Votre commande {reference} a été annulée.",
    OrderStatus.REFUSED: "Votre commande {reference} a été refusée par la boutique.",
}

PAY_ACTION = "payer"


class _NotificationHandler:
    def __init__(self, service_factory) -> None:
        self._service_factory = service_factory

    def _send(
        self,
        recipient_id: str,
        type: str,
        title: str,
        message: str,
        payload: Dict[str, Any],
    ) -> None:
        if not recipient_id:
            return
        try:
            with transaction.atomic():
                self._service_factory().notify(
                    recipient_id, type, title, message, payload
                )
        except Exception:
            logger.exception(
                "notification.dispatch_failed",
                recipient_id=recipient_id,
                type=type,
                order_id=payload.get("order_id"),
            )


class OrderCreatedHandler(_NotificationHandler, IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        payload = {
            "order_id": str(event.aggregate_id),
            "reference": event.reference,
            "status": OrderStatus.PENDING,
        }
        self._send(
            event.boutique_owner_id,
            NotificationType.ORDER,
            "Nouvelle commande",
            f"Nouvelle commande {event.reference} d'un montant de {event.total_amount}.",
            payload,
        )
        self._send(
            event.shopper_id,
            NotificationType.ORDER,
            "Commande enregistrée",
            f"Votre commande {event.reference} a bien été enregistrée.",
            payload,
        )


class OrderStatusChangedHandler(_NotificationHandler, IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        payload: Dict[str, Any] = {
            "order_id": str(event.aggregate_id),
            "reference": event.reference,
            "status": event.new_status,
        }
        if (
            event.new_status == OrderStatus.READY
            and event.payment_status != PaymentStatus.PAID
        ):
            payload["action"] = PAY_ACTION

        template = STATUS_MESSAGES.get(event.new_status)
        if template:
            self._send(
                event.shopper_id,
                NotificationType.ORDER,
                "Suivi de commande",
                template.format(reference=event.reference),
                payload,
            )

        if event.new_status == OrderStatus.CANCELLED and event.actor_role == Role.SHOPPER:
            self._send(
                event.boutique_owner_id,
                NotificationType.ORDER,
                "Commande annulée",
                f"Le client a annulé la commande {event.reference}.",
                {**payload, "reason": event.reason},
            )


class PaymentStatusChangedHandler(
    _NotificationHandler, IEventHandler[PaymentStatusChanged]
):
    def handle(self, event: PaymentStatusChanged) -> None:
        label = PaymentStatus(event.new_status).label.lower()
        payload = {
            "order_id": str(event.aggregate_id),
            "reference": event.reference,
            "payment_status": event.new_status,
        }
        message = f"Paiement de la commande {event.reference} : {label}."
        self._send(
            event.shopper_id, NotificationType.PAYMENT, "Paiement", message, payload
        )
        self._send(
            event.boutique_owner_id,
            NotificationType.PAYMENT,
            "Paiement",
            message,
            payload,
        )


def _service() -> NotificationService:
    from modules.notifications.services import default_notification_service

    return default_notification_service()


order_created_handler = OrderCreatedHandler(_service)
order_status_changed_handler = OrderStatusChangedHandler(_service)
payment_status_changed_handler = PaymentStatusChangedHandler(_service)
