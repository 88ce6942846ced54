from uuid import uuid4

import pytest

from modules.inventory.exceptions import InsufficientStock, InvalidQuantity
from modules.inventory.services import default_ledger
from modules.products.exceptions import ProductNotFound

pytestmark = pytest.mark.unit


@pytest.fixture()
def ledger():
    return default_ledger()


class TestReserveAndDecrement:
    def test_decrements_stock(self, ledger, product):
        ledger.reserve_and_decrement(product.id, 4)
        product.refresh_from_db()
        assert product.stock_quantity == 6

    def test_can_take_the_last_unit(self, ledger, product):
        ledger.reserve_and_decrement(product.id, 10)
        assert ledger.available(product.id) == 0

    def test_never_oversells(self, ledger, product):
        with pytest.raises(InsufficientStock) as exc_info:
            ledger.reserve_and_decrement(product.id, 11)
        assert exc_info.value.requested == 11
        assert exc_info.value.available == 10
        product.refresh_from_db()
        assert product.stock_quantity == 10

    def test_sequential_reservations_stop_at_zero(self, ledger, product):
        outcomes = []
        for _ in range(4):
            try:
                ledger.reserve_and_decrement(product.id, 3)
                outcomes.append("ok")
            except InsufficientStock:
                outcomes.append("conflict")
        assert outcomes == ["ok", "ok", "ok", "conflict"]
        assert ledger.available(product.id) == 1

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_rejects_non_positive_quantity(self, ledger, product, quantity):
        with pytest.raises(InvalidQuantity):
            ledger.reserve_and_decrement(product.id, quantity)

    def test_unknown_product(self, ledger):
        with pytest.raises(ProductNotFound):
            ledger.reserve_and_decrement(uuid4(), 1)


class TestRestore:
    def test_gives_units_back(self, ledger, product):
        ledger.reserve_and_decrement(product.id, 6)
        ledger.restore(product.id, 6)
        assert ledger.available(product.id) == 10

    def test_restores_soft_deleted_product(self, ledger, product):
        ledger.reserve_and_decrement(product.id, 2)
        product.delete()
        ledger.restore(product.id, 2)
        product.refresh_from_db()
        assert product.stock_quantity == 10

    def test_unknown_product(self, ledger):
        with pytest.raises(ProductNotFound):
            ledger.restore(uuid4(), 1)
