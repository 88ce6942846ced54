from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.notifications.models import Notification


class INotificationRepository(IRepository["Notification"]):
    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Notification:
        """Persist a new notification."""

    @abstractmethod
    def get_for_recipient(
        self, notification_id: str, recipient_id: str
    ) -> Optional[Notification]:
        """The notification if it exists and belongs to *recipient_id*."""

    @abstractmethod
    def list_for_recipient(
        self, recipient_id: str, unread_only: bool, limit: int
    ) -> List[Notification]:
        """Newest first, at most *limit* entries."""

    @abstractmethod
    def count_unread(self, recipient_id: str) -> int:
        """Number of unread notifications."""

    @abstractmethod
    def mark_all_read(self, recipient_id: str) -> int:
        """Mark every unread notification read; returns how many changed."""
