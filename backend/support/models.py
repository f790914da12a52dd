from django.conf import settings
from django.db import models


class SupportTicket(models.Model):
    class Category(models.TextChoices):
        VERIFICATION = "VERIFICATION", "Verification"
        PAYOUTS = "PAYOUTS", "Payouts"
        CAMPAIGN = "CAMPAIGN", "Campaign"
        BONUS = "BONUS", "Bonus"
        OTHER = "OTHER", "Other"

    class Status(models.TextChoices):
        OPEN = "OPEN", "Open"
        IN_PROGRESS = "IN_PROGRESS", "In progress"
        RESOLVED = "RESOLVED", "Resolved"
        CLOSED = "CLOSED", "Closed"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="support_tickets")
    category = models.CharField(max_length=16, choices=Category.choices)
    subject = models.CharField(max_length=200)
    message = models.TextField(max_length=2000)
    image_url = models.URLField(max_length=500, blank=True, null=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.OPEN, db_index=True)
    admin_response = models.TextField(blank=True, null=True)
    responded_at = models.DateTimeField(null=True, blank=True)
    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="answered_tickets",
    )
    user_reply = models.TextField(max_length=1000, blank=True, null=True)
    user_reply_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "support_ticket"
        ordering = ("-created_at",)

    def __str__(self):
        return f"#{self.pk} {self.subject} ({self.status})"
