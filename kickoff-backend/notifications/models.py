import uuid

from django.conf import settings
from django.db import models


class Notification(models.Model):
    """In-app notification; mirrored to the user's websocket group and push."""

    TYPE_PROMOTED = "promoted"
    TYPE_DEMOTED = "demoted"
    TYPE_GAME_OPEN = "game_open"
    TYPE_BROADCAST = "broadcast"

    NOTIFICATION_TYPES = [
        (TYPE_PROMOTED, "Promoted to active roster"),
        (TYPE_DEMOTED, "Moved to standby"),
        (TYPE_GAME_OPEN, "Registration open"),
        (TYPE_BROADCAST, "Broadcast"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    notification_type = models.CharField(max_length=50, choices=NOTIFICATION_TYPES)
    title = models.CharField(max_length=200)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)  # game_id, registration_id, ...
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "read", "-created_at"], name="notif_user_read_created_idx"),
            models.Index(fields=["user", "-created_at"], name="notif_user_created_idx"),
        ]

    def __str__(self):
        return f"{self.notification_type} for {self.user_id} ({'read' if self.read else 'unread'})"

    def mark_as_read(self):
        self.read = True
        self.save(update_fields=["read"])
