import structlog
from celery import shared_task

from modules.stats.services import default_statistics_service

logger = structlog.get_logger(__name__)


@shared_task(name="stats.refresh_snapshots")
def refresh_snapshots() -> int:
    """Periodic refresh of the cached statistics snapshots (Celery beat)."""
    return default_statistics_service().refresh_snapshots()
