"""Django ORM implementation of the Cart repository."""

from __future__ import annotations

from typing import Iterable, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db.models import Sum

from modules.carts.models import Cart, CartElement
from modules.carts.repositories.interfaces import ICartRepository

logger = structlog.get_logger(__name__)


class CartDjangoRepository(ICartRepository):
    """Concrete Cart repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Cart]:
        try:
            return Cart.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def save(self, entity: Cart) -> Cart:
        entity.save()
        return entity

    def get_or_create_for_shopper(self, shopper_id: str) -> Cart:
        cart, created = Cart.objects.get_or_create(shopper_id=shopper_id)
        if created:
            logger.info("cart.created", shopper_id=shopper_id, cart_id=str(cart.id))
        return cart

    def elements(self, cart: Cart) -> List[CartElement]:
        return list(
            CartElement.objects.filter(cart=cart).select_related("product__boutique")
        )

    def get_element(self, cart: Cart, product_id: str) -> Optional[CartElement]:
        try:
            return (
                CartElement.objects.filter(cart=cart, product_id=product_id)
                .select_related("product__boutique")
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def add_element(self, cart: Cart, product_id: str, quantity: int) -> CartElement:
        element = CartElement.objects.create(
            cart=cart, product_id=product_id, quantity=quantity
        )
        return element

    def set_quantity(self, element: CartElement, quantity: int) -> CartElement:
        element.quantity = quantity
        element.save(update_fields=["quantity"])
        return element

    def remove_element(self, element: CartElement) -> None:
        element.delete()

    def remove_products(self, cart: Cart, product_ids: Iterable[str]) -> int:
        removed, _ = CartElement.objects.filter(
            cart=cart, product_id__in=list(product_ids)
        ).delete()
        return removed

    def clear(self, cart: Cart) -> int:
        removed, _ = CartElement.objects.filter(cart=cart).delete()
        return removed

    def count_items(self, cart: Cart) -> int:
        total = CartElement.objects.filter(cart=cart).aggregate(total=Sum("quantity"))
        return total["total"] or 0
