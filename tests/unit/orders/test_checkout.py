from decimal import Decimal

import pytest
from django.db import DatabaseError

from modules.carts.models import CartElement
from modules.orders.constants import DeliveryMode, OrderStatus, PaymentMethod, PaymentStatus
from modules.orders.dtos import CheckoutDTO, DeliveryAddressDTO
from modules.orders.exceptions import EmptyCart, StockConflict
from modules.orders.models import Order, OrderStatusHistory
from modules.products.models import Product

pytestmark = pytest.mark.unit

ADDRESS = DeliveryAddressDTO(
    full_name="Rina Rakoto",
    phone="+261 34 00 000 00",
    street="Lot II A 12",
    city="Antananarivo",
    postal_code="101",
    country="Madagascar",
)


def _pickup(**kwargs):
    return CheckoutDTO(
        delivery_mode=DeliveryMode.STORE_PICKUP,
        payment_method=PaymentMethod.CASH,
        **kwargs,
    )


class TestCheckoutSplitsByBoutique:
    def test_one_order_per_boutique(
        self,
        cart_service,
        checkout_service,
        shopper,
        boutique,
        other_boutique,
        make_product,
    ):
        bag = make_product(boutique, name="Sac", price="20.00", stock=5)
        tea = make_product(other_boutique, name="Thé", price="8.50", stock=5)
        cart_service.add_item(shopper.user_id, bag.id, 2)
        cart_service.add_item(shopper.user_id, tea.id, 1)

        result = checkout_service.checkout(shopper.user_id, _pickup())

        assert len(result.orders) == 2
        assert result.conflicts == []
        assert {o.boutique_id for o in result.orders} == {boutique.id, other_boutique.id}
        assert all(o.status == OrderStatus.PENDING for o in result.orders)
        assert all(o.payment_status == PaymentStatus.PENDING for o in result.orders)
        assert cart_service.count_items(shopper.user_id) == 0

    def test_prices_frozen_at_checkout(self, place_order, shopper, product):
        (order,) = place_order(shopper, (product, 3))

        Product.objects.filter(id=product.id).update(price=Decimal("99.00"))

        item = order.items.get()
        assert item.unit_price == Decimal("20.00")
        assert item.line_total == Decimal("60.00")
        assert item.product_name == "Sac en cuir"
        assert order.subtotal == Decimal("60.00")

    def test_promotional_price_charged(self, place_order, shopper, boutique, make_product):
        promo = make_product(boutique, price="30.00", promo_price=Decimal("24.00"))
        (order,) = place_order(shopper, (promo, 2))
        assert order.items.get().unit_price == Decimal("24.00")

    def test_stock_decremented(self, place_order, shopper, product):
        place_order(shopper, (product, 4))
        product.refresh_from_db()
        assert product.stock_quantity == 6

    def test_reference_format_and_initial_history(self, place_order, shopper, product):
        (order,) = place_order(shopper, (product, 1))
        assert order.reference.startswith("CMD-")
        assert len(order.reference) == len("CMD-YYYYMMDD-000001")
        history = OrderStatusHistory.objects.get(order=order)
        assert history.old_status is None
        assert history.new_status == OrderStatus.PENDING
        assert history.actor_id == shopper.user_id

    def test_references_are_sequential(
        self, place_order, shopper, other_shopper, product
    ):
        (first,) = place_order(shopper, (product, 1))
        (second,) = place_order(other_shopper, (product, 1))
        assert int(second.reference[-6:]) == int(first.reference[-6:]) + 1


class TestCheckoutScenario:
    def test_pickup_order_of_two_products(
        self, cart_service, checkout_service, shopper, boutique, make_product
    ):
        p1 = make_product(boutique, name="P1", price="40.00", stock=5)
        p2 = make_product(boutique, name="P2", price="15.00", stock=5)
        cart_service.add_item(shopper.user_id, p1.id, 1)
        cart_service.add_item(shopper.user_id, p2.id, 2)

        result = checkout_service.checkout(shopper.user_id, _pickup())

        (summary,) = result.orders
        assert summary.subtotal == Decimal("70.00")
        assert summary.delivery_fee == Decimal("0.00")
        assert summary.total_amount == Decimal("70.00")
        p1.refresh_from_db()
        p2.refresh_from_db()
        assert (p1.stock_quantity, p2.stock_quantity) == (4, 3)


class TestDeliveryFees:
    def _checkout(self, cart_service, checkout_service, shopper, product, qty, mode):
        cart_service.add_item(shopper.user_id, product.id, qty)
        dto = CheckoutDTO(
            delivery_mode=mode,
            payment_method=PaymentMethod.MOBILE,
            delivery_address=ADDRESS,
        )
        return checkout_service.checkout(shopper.user_id, dto).orders[0]

    def test_standard_below_threshold(
        self, cart_service, checkout_service, shopper, product
    ):
        order = self._checkout(
            cart_service, checkout_service, shopper, product, 2, DeliveryMode.STANDARD
        )
        assert order.delivery_fee == Decimal("5.00")
        assert order.total_amount == Decimal("45.00")

    def test_standard_free_from_threshold(
        self, cart_service, checkout_service, shopper, product
    ):
        order = self._checkout(
            cart_service, checkout_service, shopper, product, 3, DeliveryMode.STANDARD
        )
        assert order.delivery_fee == Decimal("0.00")

    def test_express(self, cart_service, checkout_service, shopper, product):
        order = self._checkout(
            cart_service, checkout_service, shopper, product, 3, DeliveryMode.EXPRESS
        )
        assert order.delivery_fee == Decimal("10.00")
        assert order.total_amount == Decimal("70.00")

    def test_address_snapshot_stored(
        self, cart_service, checkout_service, shopper, product
    ):
        summary = self._checkout(
            cart_service, checkout_service, shopper, product, 1, DeliveryMode.STANDARD
        )
        order = Order.objects.get(id=summary.id)
        assert order.delivery_city == "Antananarivo"
        assert order.delivery_full_name == "Rina Rakoto"

    def test_delivery_requires_address(self):
        with pytest.raises(ValueError):
            CheckoutDTO(
                delivery_mode=DeliveryMode.STANDARD,
                payment_method=PaymentMethod.CASH,
            )

    def test_address_longer_than_column_rejected(self):
        with pytest.raises(ValueError):
            DeliveryAddressDTO(full_name="R" * 151)

    def test_idempotency_key_longer_than_column_rejected(self):
        with pytest.raises(ValueError):
            _pickup(idempotency_key="k" * 256)


class TestCheckoutFailures:
    def test_empty_cart(self, checkout_service, shopper):
        with pytest.raises(EmptyCart):
            checkout_service.checkout(shopper.user_id, _pickup())

    def test_all_groups_fail_changes_nothing(
        self, cart_service, checkout_service, shopper, product
    ):
        cart_service.add_item(shopper.user_id, product.id, 4)
        Product.objects.filter(id=product.id).update(stock_quantity=2)

        with pytest.raises(StockConflict) as exc_info:
            checkout_service.checkout(shopper.user_id, _pickup())

        (conflict,) = exc_info.value.conflicts
        assert conflict["reason"] == "insufficient_stock"
        assert conflict["requested"] == 4
        assert conflict["available"] == 2
        assert Order.objects.count() == 0
        product.refresh_from_db()
        assert product.stock_quantity == 2
        assert cart_service.count_items(shopper.user_id) == 4

    def test_failing_boutique_rolls_back_alone(
        self,
        cart_service,
        checkout_service,
        shopper,
        boutique,
        other_boutique,
        make_product,
    ):
        bag = make_product(boutique, name="Sac", stock=5)
        belt = make_product(boutique, name="Ceinture", stock=5)
        tea = make_product(other_boutique, name="Thé", stock=5)
        cart_service.add_item(shopper.user_id, bag.id, 2)
        cart_service.add_item(shopper.user_id, belt.id, 3)
        cart_service.add_item(shopper.user_id, tea.id, 1)
        Product.objects.filter(id=belt.id).update(stock_quantity=1)

        result = checkout_service.checkout(shopper.user_id, _pickup())

        assert [o.boutique_id for o in result.orders] == [other_boutique.id]
        assert [c.product_id for c in result.conflicts] == [belt.id]
        bag.refresh_from_db()
        belt.refresh_from_db()
        assert bag.stock_quantity == 5
        assert belt.stock_quantity == 1
        assert not Order.objects.filter(boutique=boutique).exists()
        remaining = set(
            CartElement.objects.filter(cart__shopper_id=shopper.user_id).values_list(
                "product_id", flat=True
            )
        )
        assert remaining == {bag.id, belt.id}

    def test_committed_group_leaves_cart_before_later_group_errors(
        self,
        cart_service,
        checkout_service,
        shopper,
        boutique,
        other_boutique,
        make_product,
        monkeypatch,
    ):
        bag = make_product(boutique, name="Sac", stock=5)
        tea = make_product(other_boutique, name="Thé", stock=5)
        cart_service.add_item(shopper.user_id, bag.id, 2)
        cart_service.add_item(shopper.user_id, tea.id, 1)

        repo = checkout_service._product_repo
        real_get = repo.get_with_boutique
        calls = []

        def flaky_get(product_id):
            calls.append(product_id)
            if len(calls) > 1:
                raise DatabaseError("connection lost")
            return real_get(product_id)

        monkeypatch.setattr(repo, "get_with_boutique", flaky_get)

        with pytest.raises(DatabaseError):
            checkout_service.checkout(shopper.user_id, _pickup())

        (order,) = Order.objects.all()
        committed = order.items.get().product_id
        remaining = set(
            CartElement.objects.filter(cart__shopper_id=shopper.user_id).values_list(
                "product_id", flat=True
            )
        )
        assert committed not in remaining
        assert remaining == {bag.id, tea.id} - {committed}

    def test_unavailable_product_reported(
        self, cart_service, checkout_service, shopper, product
    ):
        cart_service.add_item(shopper.user_id, product.id, 1)
        product.delete()

        with pytest.raises(StockConflict) as exc_info:
            checkout_service.checkout(shopper.user_id, _pickup())

        assert exc_info.value.conflicts[0]["reason"] == "unavailable"


class TestCheckoutIdempotency:
    def test_same_key_returns_same_orders(
        self, cart_service, checkout_service, shopper, product
    ):
        cart_service.add_item(shopper.user_id, product.id, 2)
        first = checkout_service.checkout(shopper.user_id, _pickup(idempotency_key="k-1"))

        cart_service.add_item(shopper.user_id, product.id, 1)
        retry = checkout_service.checkout(shopper.user_id, _pickup(idempotency_key="k-1"))

        assert retry.replayed
        assert [o.id for o in retry.orders] == [o.id for o in first.orders]
        assert Order.objects.count() == 1
        product.refresh_from_db()
        assert product.stock_quantity == 8

    def test_key_is_scoped_to_shopper(
        self, cart_service, checkout_service, shopper, other_shopper, product
    ):
        cart_service.add_item(shopper.user_id, product.id, 1)
        checkout_service.checkout(shopper.user_id, _pickup(idempotency_key="shared"))
        cart_service.add_item(other_shopper.user_id, product.id, 1)

        result = checkout_service.checkout(
            other_shopper.user_id, _pickup(idempotency_key="shared")
        )

        assert not result.replayed
        assert Order.objects.count() == 2
