from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from modules.products.dtos import CreateProductDTO, UpdateProductDTO
from modules.products.models import Product, ProductStatus

pytestmark = pytest.mark.unit


class TestProductModel:
    def test_effective_price_prefers_promotion(self, boutique, make_product):
        product = make_product(boutique, price="40.00", promo_price=Decimal("30.00"))
        assert product.is_on_promotion
        assert product.effective_price == Decimal("30.00")

    def test_sellable_requires_stock(self, boutique, make_product):
        assert not make_product(boutique, stock=0).is_sellable

    def test_sellable_requires_active_status(self, boutique, make_product):
        assert not make_product(boutique, status=ProductStatus.INACTIVE).is_sellable

    def test_sellable_requires_open_boutique(self, make_boutique, make_product):
        closed = make_boutique("vendor-closed", is_active=False)
        assert not make_product(closed).is_sellable

    def test_clean_rejects_promotion_not_below_price(self, boutique):
        product = Product(boutique=boutique, name="X", price=Decimal("10.00"))
        product.promo_price = Decimal("10.00")
        with pytest.raises(ValidationError):
            product.clean()

    def test_database_refuses_negative_stock(self, product):
        with pytest.raises(IntegrityError), transaction.atomic():
            Product.objects.filter(id=product.id).update(stock_quantity=-1)


class TestProductDtos:
    def test_create_rejects_promotion_above_price(self):
        with pytest.raises(ValueError):
            CreateProductDTO(
                name="Robe", price=Decimal("10.00"), promo_price=Decimal("12.00")
            )

    def test_create_strips_name(self):
        assert CreateProductDTO(name="  Robe ", price=Decimal("1")).name == "Robe"

    def test_update_rejects_unknown_status(self):
        with pytest.raises(ValueError):
            UpdateProductDTO(status="archived")
