from decimal import Decimal

import pytest

from modules.orders.constants import DeliveryMode, OrderStatus
from modules.orders.exceptions import InvoiceUnavailable, OrderAccessDenied
from modules.orders.invoices import (
    InvoiceService,
    build_invoice,
    invoice_filename,
    render_invoice,
)

pytestmark = pytest.mark.unit


@pytest.fixture()
def order(place_order, shopper, boutique, make_product):
    p1 = make_product(boutique, name="P1", price="40.00")
    p2 = make_product(boutique, name="P2", price="15.00")
    (order,) = place_order(shopper, (p1, 1), (p2, 2))
    return order


class TestBuildInvoice:
    def test_content_matches_order(self, order, boutique):
        invoice = build_invoice(order)

        assert invoice.number == f"FAC-{order.reference}"
        assert invoice.order_reference == order.reference
        assert invoice.boutique_name == boutique.name
        assert [(l.description, l.quantity, l.line_total) for l in invoice.lines] == [
            ("P1", 1, Decimal("40.00")),
            ("P2", 2, Decimal("30.00")),
        ]
        assert invoice.subtotal == Decimal("70.00")
        assert invoice.delivery_fee == Decimal("0.00")
        assert invoice.total_amount == Decimal("70.00")
        assert invoice.customer_address == [DeliveryMode.STORE_PICKUP.label]

    def test_is_a_pure_function_of_the_order(self, order):
        assert build_invoice(order) == build_invoice(order)

    def test_issue_date_is_order_date(self, order):
        from django.utils import timezone

        assert build_invoice(order).issue_date == timezone.localdate(order.created_at)

    def test_unavailable_for_cancelled_order(self, order_service, order, shopper):
        order_service.cancel(order.id, shopper)
        order.refresh_from_db()
        with pytest.raises(InvoiceUnavailable):
            build_invoice(order)

    def test_unavailable_for_refused_order(self, order_service, order, vendor):
        order_service.transition(order.id, vendor, OrderStatus.REFUSED)
        order.refresh_from_db()
        with pytest.raises(InvoiceUnavailable):
            build_invoice(order)


class TestRenderInvoice:
    def test_document_lists_lines_and_totals(self, order):
        invoice = build_invoice(order)
        document = render_invoice(invoice).decode("utf-8")

        assert invoice.number in document
        assert "P1" in document and "P2" in document
        assert "70.00" in document

    def test_filename(self, order):
        assert invoice_filename(build_invoice(order)) == f"facture-{order.reference}.txt"


class TestInvoiceService:
    def test_participant_gets_invoice(self, order_service, order, vendor):
        invoice = InvoiceService(order_service).generate(str(order.id), vendor)
        assert invoice.order_id == order.id

    def test_outsider_denied(self, order_service, order, other_shopper):
        with pytest.raises(OrderAccessDenied):
            InvoiceService(order_service).generate(str(order.id), other_shopper)
