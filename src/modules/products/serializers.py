"""Product DRF serializers for API input/output."""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product, ProductStatus


class ProductSerializer(serializers.ModelSerializer):
    """Read serializer for the Product resource."""

    boutique_id = serializers.UUIDField(read_only=True)
    boutique_name = serializers.CharField(source="boutique.name", read_only=True)
    effective_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, read_only=True
    )
    is_on_promotion = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "boutique_id",
            "boutique_name",
            "name",
            "description",
            "price",
            "promo_price",
            "effective_price",
            "is_on_promotion",
            "stock_quantity",
            "status",
            "image_url",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProductWriteSerializer(serializers.Serializer):
    """Validates product create/update payloads.

    Business validation (promotion below price) happens in the DTOs and
    the service.
    """

    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    promo_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    stock_quantity = serializers.IntegerField(min_value=0, required=False)
    status = serializers.ChoiceField(choices=ProductStatus.choices, required=False)
    image_url = serializers.URLField(max_length=500, required=False, allow_blank=True)
