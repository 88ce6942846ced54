from decimal import Decimal

import jwt
import pytest
from django.conf import settings
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.boutiques.models import Boutique
from modules.core.identity import Actor, Role
from modules.products.models import Product, ProductStatus

SHOPPER_ID = "shopper-1"
VENDOR_ID = "vendor-1"
ADMIN_ID = "admin-1"


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


# ---------------------------------------------------------------------------
# Actors
# ---------------------------------------------------------------------------


@pytest.fixture()
def shopper():
    return Actor(user_id=SHOPPER_ID, role=Role.SHOPPER)


@pytest.fixture()
def other_shopper():
    return Actor(user_id="shopper-2", role=Role.SHOPPER)


@pytest.fixture()
def vendor():
    return Actor(user_id=VENDOR_ID, role=Role.VENDOR)


@pytest.fixture()
def other_vendor():
    return Actor(user_id="vendor-2", role=Role.VENDOR)


@pytest.fixture()
def admin():
    return Actor(user_id=ADMIN_ID, role=Role.ADMIN)


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_boutique():
    def _make(owner_id=VENDOR_ID, name=None, **kwargs):
        return Boutique.objects.create(
            owner_id=owner_id,
            name=name or f"Boutique {owner_id}",
            **kwargs,
        )

    return _make


@pytest.fixture()
def make_product():
    def _make(boutique, name="Produit", price="10.00", stock=10, **kwargs):
        kwargs.setdefault("status", ProductStatus.ACTIVE)
        return Product.objects.create(
            boutique=boutique,
            name=name,
            price=Decimal(price),
            stock_quantity=stock,
            **kwargs,
        )

    return _make


@pytest.fixture()
def boutique(make_boutique):
    return make_boutique(VENDOR_ID, name="Boutique Alpha")


@pytest.fixture()
def other_boutique(make_boutique):
    return make_boutique("vendor-2", name="Boutique Beta")


@pytest.fixture()
def product(boutique, make_product):
    return make_product(boutique, name="Sac en cuir", price="20.00", stock=10)


# ---------------------------------------------------------------------------
# API clients
# ---------------------------------------------------------------------------


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def client_for():
    """APIClient force-authenticated as the given actor."""

    def _client(actor):
        client = APIClient()
        client.force_authenticate(user=actor)
        return client

    return _client


@pytest.fixture()
def identity_token():
    """Bearer token signed the way the Identity Service signs it."""

    def _token(sub=SHOPPER_ID, role=Role.SHOPPER, secret=None, **claims):
        payload = {"sub": sub, settings.IDENTITY_ROLE_CLAIM: role, **claims}
        return jwt.encode(
            payload,
            secret or settings.IDENTITY_SHARED_SECRET,
            algorithm="HS256",
        )

    return _token


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@pytest.fixture()
def cart_service():
    from modules.carts.repositories.django_repository import CartDjangoRepository
    from modules.carts.services import CartService
    from modules.products.repositories.django_repository import (
        ProductDjangoRepository,
    )

    return CartService(
        cart_repository=CartDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


@pytest.fixture()
def checkout_service():
    from modules.orders.checkout import default_checkout_service

    return default_checkout_service()


@pytest.fixture()
def order_service():
    from modules.orders.services import default_order_service

    return default_order_service()


@pytest.fixture()
def place_order(cart_service, checkout_service):
    """Fill the shopper's cart with ``(product, quantity)`` lines and check out.

    Returns the created orders, reloaded from the database.
    """
    from modules.orders.constants import DeliveryMode, PaymentMethod
    from modules.orders.dtos import CheckoutDTO
    from modules.orders.models import Order

    def _place(actor, *lines, delivery_mode=DeliveryMode.STORE_PICKUP, key=None):
        for product, quantity in lines:
            cart_service.add_item(actor.user_id, product.id, quantity)
        result = checkout_service.checkout(
            actor.user_id,
            CheckoutDTO(
                delivery_mode=delivery_mode,
                payment_method=PaymentMethod.CASH,
                idempotency_key=key,
            ),
        )
        return [Order.objects.get(id=summary.id) for summary in result.orders]

    return _place
