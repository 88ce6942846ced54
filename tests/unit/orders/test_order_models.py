from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from modules.orders.constants import OrderStatus
from modules.orders.dtos import CheckoutDTO, DeliveryAddressDTO
from modules.orders.models import Order, OrderReferenceCounter

pytestmark = pytest.mark.unit


class TestOrderReference:
    def test_daily_sequence(self):
        today = timezone.localdate()
        first = OrderReferenceCounter.next_reference()
        second = OrderReferenceCounter.next_reference()
        assert first == f"CMD-{today:%Y%m%d}-000001"
        assert second == f"CMD-{today:%Y%m%d}-000002"


class TestOrderStateHelpers:
    @pytest.mark.parametrize(
        "current, target, allowed",
        [
            (OrderStatus.PENDING, OrderStatus.PREPARING, True),
            (OrderStatus.PENDING, OrderStatus.CANCELLED, True),
            (OrderStatus.PREPARING, OrderStatus.REFUSED, True),
            (OrderStatus.READY, OrderStatus.CANCELLED, False),
            (OrderStatus.DELIVERED, OrderStatus.CANCELLED, False),
            (OrderStatus.CANCELLED, OrderStatus.PENDING, False),
        ],
    )
    def test_can_transition_to(self, current, target, allowed):
        assert Order(status=current).can_transition_to(target) is allowed

    def test_terminal_states(self):
        assert Order(status=OrderStatus.REFUSED).is_terminal
        assert not Order(status=OrderStatus.READY).is_terminal

    def test_stamp_status_sets_matching_timestamp(self):
        order = Order(status=OrderStatus.PENDING)
        order.stamp_status(OrderStatus.READY)
        assert order.ready_at is not None
        assert order.delivered_at is None


class TestOrderItems:
    def test_lines_are_immutable(self, place_order, shopper, product):
        (order,) = place_order(shopper, (product, 2))
        item = order.items.get()
        item.unit_price = Decimal("1.00")
        with pytest.raises(ValidationError):
            item.save()


class TestCheckoutDTO:
    def test_pickup_needs_no_address(self):
        dto = CheckoutDTO(delivery_mode="retrait_boutique", payment_method="especes")
        assert not dto.delivery_address.is_complete

    def test_unknown_payment_method(self):
        with pytest.raises(ValueError):
            CheckoutDTO(delivery_mode="retrait_boutique", payment_method="cheque")

    def test_blank_idempotency_key_ignored(self):
        dto = CheckoutDTO(
            delivery_mode="retrait_boutique",
            payment_method="especes",
            idempotency_key="   ",
        )
        assert dto.idempotency_key is None

    def test_complete_address(self):
        address = DeliveryAddressDTO(
            full_name="A", phone="1", street="Rue 1", city="Toamasina"
        )
        dto = CheckoutDTO(
            delivery_mode="livraison_express",
            payment_method="mobile",
            delivery_address=address,
        )
        assert dto.delivery_address.city == "Toamasina"
