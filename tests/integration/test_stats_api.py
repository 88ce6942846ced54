import pytest

from modules.orders.constants import OrderStatus

pytestmark = pytest.mark.integration


class TestStatsApi:
    def test_vendor_statistics(self, client_for, vendor, place_order, shopper, product):
        place_order(shopper, (product, 2))

        response = client_for(vendor).get("/api/v1/stats/boutique/")

        assert response.status_code == 200
        orders = response.data["data"]["orders"]
        assert orders["order_count"] == 1
        assert orders["orders_by_status"][OrderStatus.PENDING] == 1
        assert orders["revenue"] == "0.00"

    def test_vendor_without_boutique_gets_404(self, client_for, other_vendor):
        response = client_for(other_vendor).get("/api/v1/stats/boutique/")
        assert response.status_code == 404

    def test_global_statistics_for_admin(self, client_for, admin, boutique):
        response = client_for(admin).get("/api/v1/stats/global/")
        assert response.status_code == 200
        assert response.data["data"]["boutique_count"] == 1
        assert response.data["data"]["top_boutique"] is None

    def test_vendor_cannot_read_global(self, client_for, vendor):
        assert client_for(vendor).get("/api/v1/stats/global/").status_code == 403
