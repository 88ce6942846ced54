from __future__ import annotations

from typing import Any, Dict, List, Optional

from django.core.exceptions import ValidationError
from django.utils import timezone

from modules.notifications.models import Notification
from modules.notifications.repositories.interfaces import INotificationRepository


class NotificationDjangoRepository(INotificationRepository):
    """Concrete Notification repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Notification]:
        try:
            return Notification.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def save(self, entity: Notification) -> Notification:
        entity.save()
        return entity

    def create(self, data: Dict[str, Any]) -> Notification:
        return Notification.objects.create(**data)

    def get_for_recipient(
        self, notification_id: str, recipient_id: str
    ) -> Optional[Notification]:
        try:
            return Notification.objects.filter(
                id=notification_id, recipient_id=recipient_id
            ).first()
        except (ValueError, ValidationError):
            return None

    def list_for_recipient(
        self, recipient_id: str, unread_only: bool, limit: int
    ) -> List[Notification]:
        queryset = Notification.objects.filter(recipient_id=recipient_id)
        if unread_only:
            queryset = queryset.filter(is_read=False)
        return list(queryset[:limit])

    def count_unread(self, recipient_id: str) -> int:
        return Notification.objects.filter(
            recipient_id=recipient_id, is_read=False
        ).count()

    def mark_all_read(self, recipient_id: str) -> int:
        return Notification.objects.filter(
            recipient_id=recipient_id, is_read=False
        ).update(is_read=True, read_at=timezone.now(), updated_at=timezone.now())
