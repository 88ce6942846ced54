"""Order API views.

Exposes checkout, the order state machine, payment recording and invoices.
Services raise domain errors; the envelope exception handler turns them
into HTTP responses, so the views hold no error branches.
"""

from __future__ import annotations

from django.http import HttpResponse
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.dtos import build_dto
from modules.core.permissions import IsShopper
from modules.core.responses import envelope
from modules.orders.checkout import default_checkout_service
from modules.orders.dtos import CheckoutDTO
from modules.orders.filters import OrderFilter
from modules.orders.invoices import InvoiceService, invoice_filename, render_invoice
from modules.orders.models import Order
from modules.orders.serializers import (
    CancelSerializer,
    CheckoutSerializer,
    OrderListSerializer,
    OrderSerializer,
    PaymentSerializer,
    StatusChangeSerializer,
    StatusHistorySerializer,
)
from modules.orders.services import default_order_service


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Does **not** extend ``ModelViewSet``: all ORM access goes through the
    service/repository layer.
    """

    queryset = Order.objects.none()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    search_fields = ["reference", "delivery_full_name"]
    ordering_fields = ["created_at", "total_amount", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = default_order_service()
        self._checkout = default_checkout_service()
        self._invoices = InvoiceService(self._service)

    def get_permissions(self):
        if self.action == "checkout":
            return [IsShopper()]
        return [IsAuthenticated()]

    def get_throttles(self) -> list[BaseThrottle]:
        self.throttle_scope = "checkout" if self.action == "checkout" else None
        return super().get_throttles()

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Order.objects.none()
        return self._service.list_orders(self.request.user)

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    @action(detail=False, methods=["post"])
    def checkout(self, request: Request) -> Response:
        """POST /api/v1/orders/checkout/

        Supports idempotent retries via the ``Idempotency-Key`` header:
        200 with the earlier orders when the key was already used, 201 for
        a fresh checkout.
        """
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        dto = build_dto(
            CheckoutDTO,
            delivery_mode=data["delivery_mode"],
            payment_method=data["payment_method"],
            delivery_address=data.get("delivery_address") or {},
            notes=data.get("notes", ""),
            idempotency_key=request.headers.get("Idempotency-Key"),
        )
        result = self._checkout.checkout(request.user.user_id, dto)
        if result.replayed:
            return envelope(
                result.model_dump(mode="json"),
                message="Orders already created for this key.",
            )
        message = (
            "Orders created."
            if not result.conflicts
            else "Orders partially created: some products are unavailable."
        )
        return envelope(
            result.model_dump(mode="json"),
            message=message,
            status=status.HTTP_201_CREATED,
        )

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/ (scoped to the caller's role)."""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        order = self._service.get_order(pk, request.user)
        return envelope(OrderSerializer(order).data)

    @action(detail=True, methods=["get"])
    def history(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/history/"""
        entries = self._service.get_history(pk, request.user)
        return envelope(StatusHistorySerializer(entries, many=True).data)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/status/"""
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.transition(
            pk,
            request.user,
            serializer.validated_data["status"],
            serializer.validated_data["reason"],
        )
        return envelope(OrderSerializer(order).data, message="Status updated.")

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/"""
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.cancel(
            pk, request.user, serializer.validated_data["reason"]
        )
        return envelope(OrderSerializer(order).data, message="Order cancelled.")

    @action(detail=True, methods=["post"])
    def payment(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/payment/"""
        serializer = PaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.record_payment(
            pk,
            request.user,
            serializer.validated_data["status"],
            serializer.validated_data["reference"],
        )
        return envelope(OrderSerializer(order).data, message="Payment recorded.")

    # ------------------------------------------------------------------
    # Invoice
    # ------------------------------------------------------------------

    @action(detail=True, methods=["get"])
    def invoice(self, request: Request, pk: str | None = None) -> HttpResponse:
        """GET /api/v1/orders/{pk}/invoice/ (plain-text attachment)."""
        invoice = self._invoices.generate(pk, request.user)
        response = HttpResponse(
            render_invoice(invoice), content_type="text/plain; charset=utf-8"
        )
        response["Content-Disposition"] = (
            f'attachment; filename="{invoice_filename(invoice)}"'
        )
        return response
