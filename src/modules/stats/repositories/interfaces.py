"""Read-only aggregate queries over committed orders and products."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Optional


class IStatisticsRepository(ABC):
    @abstractmethod
    def count_by_status(self, boutique_id: Optional[str] = None) -> Dict[str, int]:
        """Orders per order status."""

    @abstractmethod
    def count_by_payment_status(
        self, boutique_id: Optional[str] = None
    ) -> Dict[str, int]:
        """Orders per payment status."""

    @abstractmethod
    def revenue(self, boutique_id: Optional[str] = None) -> Decimal:
        """Sum of subtotals of delivered and paid orders."""

    @abstractmethod
    def product_counts(self, boutique_id: str, low_stock_threshold: int) -> Dict[str, int]:
        """``total``, ``active`` and ``low_stock`` live product counts."""

    @abstractmethod
    def top_products(self, boutique_id: str, limit: int) -> List[Dict[str, Any]]:
        """Best sellers by quantity over delivered and paid orders."""

    @abstractmethod
    def boutique_counts(self) -> Dict[str, int]:
        """``total`` and ``active`` live boutiques."""

    @abstractmethod
    def top_boutique(self) -> Optional[Dict[str, Any]]:
        """Boutique with the highest revenue, if any has revenue."""

    @abstractmethod
    def live_boutiques(self) -> List[Any]:
        """Every boutique that has not been soft-deleted."""
