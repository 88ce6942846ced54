"""Statistics rollups over committed orders and products.

Rollups are computed with aggregate queries and cached as snapshots by the
``stats.refresh_snapshots`` task.  Readers take a cached snapshot when one
exists and compute live otherwise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional

import structlog
from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from modules.orders.constants import OrderStatus, PaymentStatus
from modules.stats.dtos import (
    GlobalStatisticsDTO,
    OrderRollupDTO,
    ProductRollupDTO,
    TopBoutiqueDTO,
    TopProductDTO,
    VendorStatisticsDTO,
)

if TYPE_CHECKING:
    from modules.boutiques.models import Boutique
    from modules.stats.repositories.interfaces import IStatisticsRepository

logger = structlog.get_logger(__name__)

LOW_STOCK_THRESHOLD = 5
TOP_PRODUCTS_LIMIT = 5
GLOBAL_SNAPSHOT_KEY = "stats:global"


def vendor_snapshot_key(boutique_id) -> str:
    return f"stats:boutique:{boutique_id}"


def _zero_filled(counts: Dict[str, int], choices) -> Dict[str, int]:
    return {value: counts.get(value, 0) for value in choices.values}


class StatisticsService:
    def __init__(self, repository: IStatisticsRepository) -> None:
        self._repo = repository

    def _order_rollup(self, boutique_id: Optional[str] = None) -> OrderRollupDTO:
        by_status = _zero_filled(self._repo.count_by_status(boutique_id), OrderStatus)
        by_payment = _zero_filled(
            self._repo.count_by_payment_status(boutique_id), PaymentStatus
        )
        return OrderRollupDTO(
            order_count=sum(by_status.values()),
            orders_by_status=by_status,
            payments_by_status=by_payment,
            revenue=self._repo.revenue(boutique_id),
        )

    def vendor_statistics(self, boutique: Boutique) -> VendorStatisticsDTO:
        """Live rollup for a single boutique."""
        boutique_id = str(boutique.id)
        products = self._repo.product_counts(boutique_id, LOW_STOCK_THRESHOLD)
        top = self._repo.top_products(boutique_id, TOP_PRODUCTS_LIMIT)
        return VendorStatisticsDTO(
            boutique_id=boutique.id,
            boutique_name=boutique.name,
            orders=self._order_rollup(boutique_id),
            products=ProductRollupDTO(**products),
            top_products=[TopProductDTO(**row) for row in top],
            generated_at=timezone.now(),
        )

    def global_statistics(self) -> GlobalStatisticsDTO:
        """Live rollup across every boutique of the mall."""
        boutiques = self._repo.boutique_counts()
        best = self._repo.top_boutique()
        top_boutique = None
        if best:
            top_boutique = TopBoutiqueDTO(
                boutique_id=best["boutique_id"],
                boutique_name=best["boutique__name"],
                revenue=best["revenue"],
            )
        return GlobalStatisticsDTO(
            orders=self._order_rollup(),
            boutique_count=boutiques["total"],
            active_boutique_count=boutiques["active"],
            top_boutique=top_boutique,
            generated_at=timezone.now(),
        )

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def vendor_snapshot(self, boutique: Boutique) -> VendorStatisticsDTO:
        cached = cache.get(vendor_snapshot_key(boutique.id))
        if cached is not None:
            return VendorStatisticsDTO.model_validate(cached)
        return self.vendor_statistics(boutique)

    def global_snapshot(self) -> GlobalStatisticsDTO:
        cached = cache.get(GLOBAL_SNAPSHOT_KEY)
        if cached is not None:
            return GlobalStatisticsDTO.model_validate(cached)
        return self.global_statistics()

    def refresh_snapshots(self) -> int:
        """Recompute and cache every rollup. Returns the boutiques refreshed."""
        ttl = settings.STATS_SNAPSHOT_TTL
        refreshed = 0
        for boutique in self._repo.live_boutiques():
            stats = self.vendor_statistics(boutique)
            cache.set(
                vendor_snapshot_key(boutique.id), stats.model_dump(mode="json"), ttl
            )
            refreshed += 1
        cache.set(
            GLOBAL_SNAPSHOT_KEY, self.global_statistics().model_dump(mode="json"), ttl
        )
        logger.info("stats.snapshots_refreshed", boutiques=refreshed)
        return refreshed


def default_statistics_service() -> StatisticsService:
    from modules.stats.repositories.django_repository import (
        StatisticsDjangoRepository,
    )

    return StatisticsService(StatisticsDjangoRepository())
