"""Product service layer (Use Cases).

Vendors manage the catalogue of their own boutique; the mall administrator
may edit any product.  Every authenticated role can read.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import models, transaction

from modules.boutiques.exceptions import NotBoutiqueOwner
from modules.boutiques.services import BoutiqueService
from modules.products.exceptions import InvalidPromotion, ProductNotFound
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.boutiques.repositories.interfaces import IBoutiqueRepository
    from modules.core.identity import Actor
    from modules.products.dtos import CreateProductDTO, UpdateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = (
    "name",
    "price",
    "description",
    "stock_quantity",
    "status",
    "promo_price",
    "image_url",
)


class ProductService:
    """Application service for Product use-cases."""

    def __init__(
        self,
        repository: IProductRepository,
        boutique_repository: IBoutiqueRepository,
    ) -> None:
        self._repo = repository
        self._boutique_repo = boutique_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, actor: Actor, dto: CreateProductDTO) -> Product:
        """Add a product to the catalogue of the vendor's boutique.

        Raises:
            BoutiqueNotFound: the vendor has no boutique.
        """
        boutique = BoutiqueService(self._boutique_repo).get_for_owner(actor.user_id)

        product = Product(
            boutique=boutique,
            name=dto.name,
            description=dto.description,
            price=dto.price,
            promo_price=dto.promo_price,
            stock_quantity=dto.stock_quantity,
            image_url=dto.image_url,
            status=dto.status,
        )
        product = self._repo.save(product)
        logger.info(
            "product.created_by_vendor",
            product_id=str(product.id),
            boutique_id=str(boutique.id),
        )
        return product

    @transaction.atomic
    def update_product(self, actor: Actor, id: str, dto: UpdateProductDTO) -> Product:
        """Apply the supplied fields to a product.

        Raises:
            ProductNotFound: the product does not exist.
            NotBoutiqueOwner: the vendor does not own the product's boutique.
            InvalidPromotion: the resulting promotional price is not below price.
        """
        product = self._owned_product(actor, id)
        for field in UPDATABLE_FIELDS:
            value = getattr(dto, field)
            if value is not None:
                setattr(product, field, value)
        if dto.clear_promotion:
            product.promo_price = None

        if product.promo_price is not None and product.promo_price >= product.price:
            raise InvalidPromotion("Promotional price must be lower than price.")

        product = self._repo.save(product)
        logger.info("product.updated", product_id=str(product.id))
        return product

    @transaction.atomic
    def delete_product(self, actor: Actor, id: str) -> None:
        self._owned_product(actor, id)
        self._repo.delete(id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        return self._repo.list(filters)

    def get_product(self, id: str) -> Product:
        """Raises ``ProductNotFound`` when the product does not exist."""
        product = self._repo.get_with_boutique(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        return product

    def _owned_product(self, actor: Actor, id: str) -> Product:
        product = self.get_product(id)
        if actor.is_admin:
            return product
        if product.boutique.owner_id != actor.user_id:
            logger.warning(
                "product.ownership_denied",
                product_id=str(id),
                user_id=actor.user_id,
            )
            raise NotBoutiqueOwner("This product belongs to another boutique.")
        return product
