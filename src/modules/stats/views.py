"""Statistics API views: vendor rollup of the caller's boutique, global for admins."""

from __future__ import annotations

from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.boutiques.repositories.django_repository import BoutiqueDjangoRepository
from modules.boutiques.services import BoutiqueService
from modules.core.permissions import IsMallAdmin, IsVendor
from modules.core.responses import envelope
from modules.stats.services import default_statistics_service


class BoutiqueStatisticsView(APIView):
    permission_classes = [IsVendor]

    def get(self, request: Request) -> Response:
        """GET /api/v1/stats/boutique/"""
        boutique = BoutiqueService(BoutiqueDjangoRepository()).get_for_owner(
            request.user.user_id
        )
        stats = default_statistics_service().vendor_snapshot(boutique)
        return envelope(stats.model_dump(mode="json"))


class GlobalStatisticsView(APIView):
    permission_classes = [IsMallAdmin]

    def get(self, request: Request) -> Response:
        """GET /api/v1/stats/global/"""
        stats = default_statistics_service().global_snapshot()
        return envelope(stats.model_dump(mode="json"))
