"""Delivery parameters offered by boutiques."""

from decimal import Decimal

from django.db import models


class DeliveryMode(models.TextChoices):
    STORE_PICKUP = "retrait_boutique", "Retrait en boutique"
    STANDARD = "livraison_standard", "Livraison standard"
    EXPRESS = "livraison_express", "Livraison express"


DEFAULT_DELIVERY_FEE = Decimal("5.00")
DEFAULT_FREE_DELIVERY_THRESHOLD = Decimal("50.00")
DEFAULT_EXPRESS_DELIVERY_FEE = Decimal("10.00")
