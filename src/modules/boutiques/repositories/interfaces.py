from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.boutiques.models import Boutique


class IBoutiqueRepository(IRepository["Boutique"]):
    """Repository contract for boutiques."""

    @abstractmethod
    def get_by_owner(self, owner_id: str) -> Optional[Boutique]:
        """Retrieve the live boutique owned by a vendor account."""
