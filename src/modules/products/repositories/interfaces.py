"""Product repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Product]":
        """List live products with optional ORM look-ups."""

    @abstractmethod
    def get_with_boutique(self, id: str) -> Optional[Product]:
        """Retrieve a live product with its boutique loaded."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Soft-delete a product."""
