from decimal import Decimal

import pytest

from modules.boutiques.constants import DeliveryMode
from modules.boutiques.models import Boutique

pytestmark = pytest.mark.unit


class TestBaseModel:
    def test_primary_key_is_uuid7(self, boutique):
        assert boutique.id.version == 7

    def test_partial_save_refreshes_updated_at(self, boutique):
        before = boutique.updated_at
        boutique.name = "Renamed"
        boutique.save(update_fields=["name"])
        boutique.refresh_from_db()
        assert boutique.name == "Renamed"
        assert boutique.updated_at >= before


class TestSoftDelete:
    def test_deleted_rows_leave_alive_queryset(self, boutique):
        boutique.delete()
        assert boutique.is_deleted
        assert not Boutique.objects.alive().filter(id=boutique.id).exists()
        assert Boutique.objects.filter(id=boutique.id).exists()

    def test_second_delete_is_noop(self, boutique):
        boutique.delete()
        assert boutique.delete() == (0, {})


class TestBoutiqueDeliveryFee:
    def test_pickup_is_free(self, boutique):
        assert boutique.delivery_fee_for(DeliveryMode.STORE_PICKUP, Decimal("10")) == 0

    def test_standard_below_threshold_pays_fee(self, boutique):
        fee = boutique.delivery_fee_for(DeliveryMode.STANDARD, Decimal("49.99"))
        assert fee == Decimal("5.00")

    def test_standard_free_at_threshold(self, boutique):
        assert boutique.delivery_fee_for(DeliveryMode.STANDARD, Decimal("50.00")) == 0

    def test_express_never_waived(self, boutique):
        fee = boutique.delivery_fee_for(DeliveryMode.EXPRESS, Decimal("500.00"))
        assert fee == Decimal("10.00")

    def test_inactive_boutique_is_closed(self, make_boutique):
        closed = make_boutique("vendor-9", is_active=False)
        assert not closed.is_open
