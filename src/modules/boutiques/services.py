from __future__ import annotations

from typing import TYPE_CHECKING

from modules.boutiques.exceptions import BoutiqueNotFound

if TYPE_CHECKING:
    from modules.boutiques.models import Boutique
    from modules.boutiques.repositories.interfaces import IBoutiqueRepository


class BoutiqueService:
    def __init__(self, repository: IBoutiqueRepository) -> None:
        self._repo = repository

    def get_for_owner(self, owner_id: str) -> Boutique:
        """Boutique run by the vendor account *owner_id*.

        Raises:
            BoutiqueNotFound: the vendor has no boutique.
        """
        boutique = self._repo.get_by_owner(owner_id)
        if not boutique:
            raise BoutiqueNotFound(f"No boutique registered for vendor {owner_id}.")
        return boutique
