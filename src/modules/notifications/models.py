"""Per-recipient notification records (pull model)."""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel


class NotificationType(models.TextChoices):
    ORDER = "order", "Commande"
    PAYMENT = "payment", "Paiement"
    PROMOTION = "promotion", "Promotion"
    SYSTEM = "system", "Système"


class Notification(BaseModel):
    recipient_id = models.CharField(max_length=64)
    type = models.CharField(max_length=20, choices=NotificationType.choices)
    title = models.CharField(max_length=200)
    message = models.TextField()
    payload = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["recipient_id", "is_read", "-created_at"],
                name="notif_recipient_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.recipient_id}: {self.title}"
