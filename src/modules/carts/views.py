"""Cart API views (shopper role only).

Quantities are validated by the service so that negative values surface as
``InvalidQuantity`` in the envelope, like every other business error.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.carts.serializers import (
    AddCartItemSerializer,
    CartElementSerializer,
    UpdateCartItemSerializer,
)
from modules.carts.services import CartService
from modules.core.permissions import IsShopper
from modules.core.responses import envelope
from modules.products.repositories.django_repository import ProductDjangoRepository


class CartViewSet(ViewSet):
    permission_classes = [IsShopper]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CartService(
            cart_repository=CartDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

    def retrieve(self, request: Request) -> Response:
        """GET /api/v1/cart/"""
        shopper_id = request.user.user_id
        cart = self._service.get_cart(shopper_id)
        elements = self._service.get_elements(shopper_id)
        return envelope(
            {
                "id": str(cart.id),
                "shopper_id": cart.shopper_id,
                "items": CartElementSerializer(elements, many=True).data,
            }
        )

    def clear(self, request: Request) -> Response:
        """DELETE /api/v1/cart/"""
        removed = self._service.clear(request.user.user_id)
        return envelope({"removed": removed}, message="Cart cleared.")

    def totals(self, request: Request) -> Response:
        """GET /api/v1/cart/totals/"""
        totals = self._service.compute_totals(request.user.user_id)
        return envelope(totals.model_dump(mode="json"))

    def count(self, request: Request) -> Response:
        """GET /api/v1/cart/count/"""
        return envelope({"count": self._service.count_items(request.user.user_id)})

    def add_item(self, request: Request) -> Response:
        """POST /api/v1/cart/items/"""
        serializer = AddCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        element, change = self._service.add_item(
            request.user.user_id,
            serializer.validated_data["product_id"],
            serializer.validated_data["quantity"],
        )
        message = "Quantity capped at available stock." if change.clamped else None
        return envelope(
            {
                "item": CartElementSerializer(element).data,
                **change.model_dump(mode="json"),
            },
            message=message or "Product added to cart.",
            status=status.HTTP_201_CREATED,
        )

    def update_item(self, request: Request, product_id: str) -> Response:
        """PATCH /api/v1/cart/items/{product_id}/"""
        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        change = self._service.update_quantity(
            request.user.user_id, product_id, serializer.validated_data["quantity"]
        )
        return envelope(change.model_dump(mode="json"))

    def remove_item(self, request: Request, product_id: str) -> Response:
        """DELETE /api/v1/cart/items/{product_id}/"""
        self._service.remove_item(request.user.user_id, product_id)
        return envelope(message="Product removed from cart.")
