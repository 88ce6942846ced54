"""Stock repository interface.

Stock lives on the product row; this contract exposes only the atomic
operations the ledger needs, never a read-modify-write.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class IStockRepository(ABC):
    @abstractmethod
    def decrement_if_available(self, product_id: str, quantity: int) -> bool:
        """Subtract *quantity* only if at least that much is in stock.

        Returns ``False`` (and changes nothing) otherwise.
        """

    @abstractmethod
    def increment(self, product_id: str, quantity: int) -> bool:
        """Add *quantity* back; ``False`` when the product row is gone."""

    @abstractmethod
    def current_stock(self, product_id: str) -> Optional[int]:
        """Stock of a live product, ``None`` when it does not exist."""
