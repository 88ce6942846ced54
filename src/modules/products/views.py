"""Product API views.

Reads are open to every authenticated role; writes are reserved to vendors
(on their own boutique) and the mall administrator.  Domain errors propagate
to the envelope exception handler.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.boutiques.repositories.django_repository import BoutiqueDjangoRepository
from modules.core.dtos import build_dto
from modules.core.permissions import IsVendorOrAdmin
from modules.core.responses import envelope
from modules.products.dtos import CreateProductDTO, UpdateProductDTO
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer, ProductWriteSerializer
from modules.products.services import ProductService


class ProductViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for Product CRUD operations."""

    filterset_class = ProductFilter
    search_fields = ["name", "description"]
    ordering_fields = ["name", "price", "stock_quantity", "created_at"]
    ordering = ["name", "id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Product.objects.none()
    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(
            repository=ProductDjangoRepository(),
            boutique_repository=BoutiqueDjangoRepository(),
        )

    def get_permissions(self):
        if self.action in {"create", "partial_update", "destroy"}:
            return [IsVendorOrAdmin()]
        return [IsAuthenticated()]

    def get_queryset(self):
        return self._service.list_products()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        product = self._service.get_product(pk)
        return envelope(ProductSerializer(product).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = build_dto(CreateProductDTO, **serializer.validated_data)
        product = self._service.create_product(request.user, dto)
        return envelope(
            ProductSerializer(product).data,
            message="Product created.",
            status=status.HTTP_201_CREATED,
        )

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/

        Sending ``"promo_price": null`` ends the promotion.
        """
        serializer = ProductWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        clear_promotion = "promo_price" in data and data["promo_price"] is None
        dto = build_dto(UpdateProductDTO, clear_promotion=clear_promotion, **data)
        product = self._service.update_product(request.user, pk, dto)
        return envelope(ProductSerializer(product).data, message="Product updated.")

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/"""
        self._service.delete_product(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
