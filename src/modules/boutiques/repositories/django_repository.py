from __future__ import annotations

from typing import Optional

import structlog
from django.core.exceptions import ValidationError

from modules.boutiques.models import Boutique
from modules.boutiques.repositories.interfaces import IBoutiqueRepository

logger = structlog.get_logger(__name__)


class BoutiqueDjangoRepository(IBoutiqueRepository):
    """Concrete Boutique repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Boutique]:
        try:
            return Boutique.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_owner(self, owner_id: str) -> Optional[Boutique]:
        return Boutique.objects.alive().filter(owner_id=owner_id).first()

    def save(self, entity: Boutique) -> Boutique:
        entity.save()
        logger.info("boutique.saved", boutique_id=str(entity.id))
        return entity
