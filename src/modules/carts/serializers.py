"""Cart DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.carts.models import CartElement


class AddCartItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(required=False, default=1)


class UpdateCartItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class CartElementSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    boutique_id = serializers.UUIDField(source="product.boutique_id", read_only=True)
    unit_price = serializers.DecimalField(
        source="product.effective_price",
        max_digits=10,
        decimal_places=2,
        read_only=True,
    )
    stock_quantity = serializers.IntegerField(
        source="product.stock_quantity", read_only=True
    )
    image_url = serializers.CharField(source="product.image_url", read_only=True)

    class Meta:
        model = CartElement
        fields = [
            "id",
            "product_id",
            "product_name",
            "boutique_id",
            "unit_price",
            "quantity",
            "stock_quantity",
            "image_url",
            "added_at",
        ]
        read_only_fields = fields
