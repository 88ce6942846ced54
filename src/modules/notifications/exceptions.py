from __future__ import annotations

from shared.domain.exceptions import EntityNotFound


class NotificationNotFound(EntityNotFound):
    """No notification with this id belongs to the recipient."""
