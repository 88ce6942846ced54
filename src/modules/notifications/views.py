"""Notification API views (every authenticated role reads its own)."""

from __future__ import annotations

from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.core.responses import envelope
from modules.notifications.serializers import NotificationSerializer
from modules.notifications.services import default_notification_service

TRUTHY = {"1", "true", "yes", "on"}


class NotificationViewSet(ViewSet):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = default_notification_service()

    def list(self, request: Request) -> Response:
        """GET /api/v1/notifications/?unread=true"""
        unread_only = request.query_params.get("unread", "").lower() in TRUTHY
        notifications = self._service.list(request.user.user_id, unread_only=unread_only)
        return envelope(NotificationSerializer(notifications, many=True).data)

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request: Request) -> Response:
        """GET /api/v1/notifications/unread-count/"""
        return envelope({"count": self._service.count_unread(request.user.user_id)})

    @action(detail=True, methods=["post"])
    def read(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/notifications/{pk}/read/"""
        notification = self._service.mark_read(pk, request.user.user_id)
        return envelope(NotificationSerializer(notification).data)

    @action(detail=False, methods=["post"], url_path="read-all")
    def read_all(self, request: Request) -> Response:
        """POST /api/v1/notifications/read-all/"""
        updated = self._service.mark_all_read(request.user.user_id)
        return envelope({"updated": updated}, message="Notifications marked as read.")
