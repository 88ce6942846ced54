"""Notification service: creation and the recipient's read operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.utils import timezone

from modules.notifications.exceptions import NotificationNotFound

if TYPE_CHECKING:
    from modules.notifications.models import Notification
    from modules.notifications.repositories.interfaces import (
        INotificationRepository,
    )

logger = structlog.get_logger(__name__)

LIST_LIMIT = 50


class NotificationService:
    def __init__(self, repository: INotificationRepository) -> None:
        self._repo = repository

    def notify(
        self,
        recipient_id: str,
        type: str,
        title: str,
        message: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        notification = self._repo.create(
            {
                "recipient_id": recipient_id,
                "type": type,
                "title": title,
                "message": message,
                "payload": payload or {},
            }
        )
        logger.info(
            "notification.created",
            notification_id=str(notification.id),
            recipient_id=recipient_id,
            type=type,
        )
        return notification

    def list(
        self, recipient_id: str, unread_only: bool = False, limit: int = LIST_LIMIT
    ) -> List[Notification]:
        """Newest first, capped at ``LIST_LIMIT``."""
        return self._repo.list_for_recipient(
            recipient_id, unread_only, min(limit, LIST_LIMIT)
        )

    def count_unread(self, recipient_id: str) -> int:
        return self._repo.count_unread(recipient_id)

    def mark_read(self, notification_id: str, recipient_id: str) -> Notification:
        """Mark one notification read; marking it again changes nothing.

        Raises:
            NotificationNotFound: unknown id, or owned by someone else.
        """
        notification = self._repo.get_for_recipient(notification_id, recipient_id)
        if not notification:
            raise NotificationNotFound(f"Notification {notification_id} not found.")
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = timezone.now()
            self._repo.save(notification)
            logger.info("notification.read", notification_id=str(notification.id))
        return notification

    def mark_all_read(self, recipient_id: str) -> int:
        updated = self._repo.mark_all_read(recipient_id)
        logger.info("notification.all_read", recipient_id=recipient_id, updated=updated)
        return updated


def default_notification_service() -> NotificationService:
    from modules.notifications.repositories.django_repository import (
        NotificationDjangoRepository,
    )

    return NotificationService(NotificationDjangoRepository())
