"""Django ORM implementation of the Product repository.

Methods return ``None`` for missing entities; the Service Layer decides how
to report them.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Product]:
        try:
            return Product.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_with_boutique(self, id: str) -> Optional[Product]:
        try:
            return (
                Product.objects.alive().select_related("boutique").filter(id=id).first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = Product.objects.alive().select_related("boutique")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: Product) -> Product:
        entity.save()
        logger.info(
            "product.saved",
            product_id=str(entity.id),
            boutique_id=str(entity.boutique_id),
        )
        return entity

    def delete(self, id: str) -> bool:
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        logger.info("product.soft_deleted", product_id=str(id))
        return True
