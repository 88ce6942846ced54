import pytest

from modules.products.models import Product

pytestmark = pytest.mark.integration


class TestProductReads:
    def test_list_visible_to_shoppers(self, client_for, shopper, product):
        response = client_for(shopper).get("/api/v1/products/")
        assert response.status_code == 200
        assert response.data["data"]["count"] == 1
        assert response.data["data"]["results"][0]["name"] == product.name

    def test_filter_by_promotion(self, client_for, shopper, product, boutique, make_product):
        make_product(boutique, name="Promo", price="30.00", promo_price="25.00")
        data = client_for(shopper).get("/api/v1/products/?on_promotion=true").data
        assert [p["name"] for p in data["data"]["results"]] == ["Promo"]

    def test_retrieve_unknown_returns_404(self, client_for, shopper):
        response = client_for(shopper).get(
            "/api/v1/products/00000000-0000-0000-0000-000000000000/"
        )
        assert response.status_code == 404


class TestProductWrites:
    def test_vendor_creates_product(self, client_for, vendor, boutique):
        response = client_for(vendor).post(
            "/api/v1/products/",
            {"name": "Lampe", "price": "35.00", "stock_quantity": 4},
            format="json",
        )
        assert response.status_code == 201
        assert response.data["data"]["boutique_id"] == str(boutique.id)

    def test_promotion_not_below_price_rejected(self, client_for, vendor, boutique):
        response = client_for(vendor).post(
            "/api/v1/products/",
            {"name": "Lampe", "price": "35.00", "promo_price": "40.00"},
            format="json",
        )
        assert response.status_code == 400
        assert response.data["data"]["errors"]

    def test_null_promo_price_ends_promotion(self, client_for, vendor, product):
        client = client_for(vendor)
        client.patch(
            f"/api/v1/products/{product.id}/", {"promo_price": "15.00"}, format="json"
        )
        response = client.patch(
            f"/api/v1/products/{product.id}/", {"promo_price": None}, format="json"
        )
        assert response.status_code == 200
        assert response.data["data"]["is_on_promotion"] is False

    def test_other_vendor_gets_403(self, client_for, other_vendor, product):
        response = client_for(other_vendor).patch(
            f"/api/v1/products/{product.id}/", {"name": "Volé"}, format="json"
        )
        assert response.status_code == 403

    def test_delete_is_soft(self, client_for, vendor, product):
        response = client_for(vendor).delete(f"/api/v1/products/{product.id}/")
        assert response.status_code == 204
        assert Product.objects.filter(id=product.id, deleted_at__isnull=False).exists()
