from django.conf import settings
from django.db import models


class Notification(models.Model):
    """In-app notification delivered to a single user."""

    class Type(models.TextChoices):
        SUBMISSION_APPROVED = "SUBMISSION_APPROVED", "Submission approved"
        SUBMISSION_REJECTED = "SUBMISSION_REJECTED", "Submission rejected"
        PAYOUT_REQUESTED = "PAYOUT_REQUESTED", "Payout requested"
        PAYOUT_PROCESSED = "PAYOUT_PROCESSED", "Payout processed"
        CAMPAIGN_COMPLETED = "CAMPAIGN_COMPLETED", "Campaign completed"
        NEW_CAMPAIGN_AVAILABLE = "NEW_CAMPAIGN_AVAILABLE", "New campaign available"
        SYSTEM_UPDATE = "SYSTEM_UPDATE", "System update"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=32, choices=Type.choices)
    title = models.CharField(max_length=200)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "notification"
        ordering = ("-created_at",)
        indexes = [
            models.Index(fields=("user", "read", "-created_at"), name="notification_user_read_idx"),
        ]

    def __str__(self):
        return f"{self.type} -> {self.user_id}"
