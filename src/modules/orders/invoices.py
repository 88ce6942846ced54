"""Invoice generator.

An invoice is derived from the stored order on every request and never
persisted: lines use the prices frozen at checkout, so generating it twice
yields the same document.  Only ``invoice_issued_at`` (set on delivery) is
stored, by the state machine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.template.loader import render_to_string
from django.utils import timezone

from modules.orders.constants import (
    INVOICE_NUMBER_PREFIX,
    DeliveryMode,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from modules.orders.dtos import InvoiceDTO, InvoiceLineDTO
from modules.orders.exceptions import InvoiceUnavailable

if TYPE_CHECKING:
    from modules.core.identity import Actor
    from modules.orders.models import Order
    from modules.orders.services import OrderService

logger = structlog.get_logger(__name__)

UNAVAILABLE_STATES = {OrderStatus.CANCELLED, OrderStatus.REFUSED}
TEMPLATE_NAME = "orders/invoice.txt"


def invoice_number(order: Order) -> str:
    return f"{INVOICE_NUMBER_PREFIX}{order.reference}"


def build_invoice(order: Order) -> InvoiceDTO:
    """Invoice content for *order*.

    Raises:
        InvoiceUnavailable: the order was cancelled or refused.
    """
    if order.status in UNAVAILABLE_STATES:
        raise InvoiceUnavailable(
            f"Order {order.reference} is {order.status}: no invoice is available."
        )

    if order.delivery_mode == DeliveryMode.STORE_PICKUP:
        address = [DeliveryMode(order.delivery_mode).label]
    else:
        address = [
            line
            for line in (
                order.delivery_street,
                f"{order.delivery_postal_code} {order.delivery_city}".strip(),
                order.delivery_country,
            )
            if line
        ]

    return InvoiceDTO(
        number=invoice_number(order),
        order_id=order.id,
        order_reference=order.reference,
        issue_date=timezone.localdate(order.created_at),
        boutique_id=order.boutique_id,
        boutique_name=order.boutique.name,
        shopper_id=order.shopper_id,
        customer_name=order.delivery_full_name or order.shopper_id,
        customer_address=address,
        lines=[
            InvoiceLineDTO(
                product_id=item.product_id,
                description=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=item.line_total,
            )
            for item in order.items.all()
        ],
        subtotal=order.subtotal,
        delivery_mode=order.delivery_mode,
        delivery_fee=order.delivery_fee,
        total_amount=order.total_amount,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
    )


def render_invoice(invoice: InvoiceDTO) -> bytes:
    """Plain-text invoice document."""
    context = {
        "invoice": invoice,
        "delivery_mode_label": DeliveryMode(invoice.delivery_mode).label,
        "payment_method_label": PaymentMethod(invoice.payment_method).label,
        "payment_status_label": PaymentStatus(invoice.payment_status).label,
    }
    return render_to_string(TEMPLATE_NAME, context).encode("utf-8")


def invoice_filename(invoice: InvoiceDTO) -> str:
    return f"facture-{invoice.order_reference}.txt"


class InvoiceService:
    """Resolves the order for an actor and produces its invoice."""

    def __init__(self, order_service: OrderService) -> None:
        self._orders = order_service

    def generate(self, order_id: str, actor: Actor) -> InvoiceDTO:
        order = self._orders.get_order(order_id, actor)
        invoice = build_invoice(order)
        logger.info(
            "invoice.generated",
            order_id=str(order.id),
            number=invoice.number,
        )
        return invoice
