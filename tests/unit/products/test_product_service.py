from decimal import Decimal

import pytest

from modules.boutiques.exceptions import BoutiqueNotFound, NotBoutiqueOwner
from modules.boutiques.repositories.django_repository import BoutiqueDjangoRepository
from modules.products.dtos import CreateProductDTO, UpdateProductDTO
from modules.products.exceptions import InvalidPromotion, ProductNotFound
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return ProductService(
        repository=ProductDjangoRepository(),
        boutique_repository=BoutiqueDjangoRepository(),
    )


class TestCreateProduct:
    def test_created_in_vendor_boutique(self, service, vendor, boutique):
        product = service.create_product(
            vendor,
            CreateProductDTO(name="Montre", price=Decimal("80.00"), stock_quantity=3),
        )
        assert product.boutique_id == boutique.id
        assert product.stock_quantity == 3

    def test_vendor_without_boutique(self, service, other_vendor):
        with pytest.raises(BoutiqueNotFound):
            service.create_product(
                other_vendor, CreateProductDTO(name="Montre", price=Decimal("80.00"))
            )


class TestUpdateProduct:
    def test_promotion_set_and_cleared(self, service, vendor, product):
        updated = service.update_product(
            vendor, str(product.id), UpdateProductDTO(promo_price=Decimal("15.00"))
        )
        assert updated.is_on_promotion
        assert updated.effective_price == Decimal("15.00")

        cleared = service.update_product(
            vendor, str(product.id), UpdateProductDTO(clear_promotion=True)
        )
        assert not cleared.is_on_promotion
        assert cleared.effective_price == Decimal("20.00")

    def test_promotion_must_stay_below_price(self, service, vendor, product):
        with pytest.raises(InvalidPromotion):
            service.update_product(
                vendor, str(product.id), UpdateProductDTO(promo_price=Decimal("20.00"))
            )

    def test_lowering_price_under_promotion_rejected(self, service, vendor, product):
        service.update_product(
            vendor, str(product.id), UpdateProductDTO(promo_price=Decimal("15.00"))
        )
        with pytest.raises(InvalidPromotion):
            service.update_product(
                vendor, str(product.id), UpdateProductDTO(price=Decimal("12.00"))
            )

    def test_other_vendor_cannot_edit(self, service, other_vendor, product):
        with pytest.raises(NotBoutiqueOwner):
            service.update_product(
                other_vendor, str(product.id), UpdateProductDTO(name="Volé")
            )

    def test_admin_can_edit_any_product(self, service, admin, product):
        updated = service.update_product(
            admin, str(product.id), UpdateProductDTO(stock_quantity=0)
        )
        assert updated.stock_quantity == 0


class TestDeleteProduct:
    def test_soft_deletes(self, service, vendor, product):
        service.delete_product(vendor, str(product.id))
        assert Product.objects.filter(id=product.id, deleted_at__isnull=False).exists()
        with pytest.raises(ProductNotFound):
            service.get_product(str(product.id))

    def test_list_excludes_deleted(self, service, vendor, product, boutique, make_product):
        kept = make_product(boutique, name="Ceinture")
        service.delete_product(vendor, str(product.id))
        assert list(service.list_products()) == [kept]
