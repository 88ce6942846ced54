"""Order DRF serializers for API input/output.

Shopper and vendor accounts are exposed as ids; everything else comes from
the snapshot stored on the order.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import DeliveryMode, PaymentMethod
from modules.orders.models import Order, OrderItem, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class DeliveryAddressSerializer(serializers.Serializer):
    full_name = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=150
    )
    phone = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=30
    )
    street = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=255
    )
    city = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=100
    )
    postal_code = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=20
    )
    country = serializers.CharField(
        required=False, allow_blank=True, default="", max_length=100
    )
    instructions = serializers.CharField(required=False, allow_blank=True, default="")


class CheckoutSerializer(serializers.Serializer):
    delivery_mode = serializers.ChoiceField(choices=DeliveryMode.choices)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    delivery_address = DeliveryAddressSerializer(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.CharField()
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class PaymentSerializer(serializers.Serializer):
    status = serializers.CharField()
    reference = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, default=None,
        max_length=100,
    )


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "quantity",
            "unit_price",
            "line_total",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "actor_id",
            "actor_role",
            "reason",
            "created_at",
        ]
        read_only_fields = fields


class DeliveryAddressOutputSerializer(serializers.Serializer):
    full_name = serializers.CharField(source="delivery_full_name")
    phone = serializers.CharField(source="delivery_phone")
    street = serializers.CharField(source="delivery_street")
    city = serializers.CharField(source="delivery_city")
    postal_code = serializers.CharField(source="delivery_postal_code")
    country = serializers.CharField(source="delivery_country")
    instructions = serializers.CharField(source="delivery_instructions")


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with lines and history."""

    boutique_id = serializers.UUIDField(read_only=True)
    boutique_name = serializers.CharField(source="boutique.name", read_only=True)
    delivery_address = DeliveryAddressOutputSerializer(source="*", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "reference",
            "shopper_id",
            "boutique_id",
            "boutique_name",
            "status",
            "status_reason",
            "delivery_mode",
            "delivery_address",
            "notes",
            "subtotal",
            "delivery_fee",
            "total_amount",
            "payment_method",
            "payment_status",
            "payment_reference",
            "paid_at",
            "preparing_at",
            "ready_at",
            "delivered_at",
            "cancelled_at",
            "refused_at",
            "invoice_issued_at",
            "created_at",
            "updated_at",
            "items",
            "status_history",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists (no nested relations)."""

    boutique_id = serializers.UUIDField(read_only=True)
    boutique_name = serializers.CharField(source="boutique.name", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "reference",
            "shopper_id",
            "boutique_id",
            "boutique_name",
            "status",
            "payment_status",
            "total_amount",
            "created_at",
        ]
        read_only_fields = fields
