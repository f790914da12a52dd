from decimal import Decimal

from django.conf import settings
from django.db import models


class Platform(models.TextChoices):
    TIKTOK = "TIKTOK", "TikTok"
    YOUTUBE = "YOUTUBE", "YouTube"
    INSTAGRAM = "INSTAGRAM", "Instagram"
    TWITTER = "TWITTER", "Twitter / X"


class Campaign(models.Model):
    """A brand campaign with a budget that clippers earn against per 1,000 views."""

    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        SCHEDULED = "SCHEDULED", "Scheduled"
        ACTIVE = "ACTIVE", "Active"
        PAUSED = "PAUSED", "Paused"
        COMPLETED = "COMPLETED", "Completed"
        CANCELLED = "CANCELLED", "Cancelled"

    title = models.CharField(max_length=200)
    description = models.TextField()
    creator = models.CharField(max_length=200, help_text="Brand or agency running the campaign")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_campaigns",
    )
    budget = models.DecimalField(max_digits=12, decimal_places=2)
    spent = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    reserved_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Part of the budget held back from clip earnings (fees, bonuses)",
    )
    payout_rate = models.DecimalField(max_digits=10, decimal_places=2, help_text="USD per 1,000 views")
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.DRAFT, db_index=True)
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    target_platforms = models.JSONField(default=list, blank=True)
    requirements = models.JSONField(default=list, blank=True)
    featured_image = models.URLField(max_length=500, blank=True, null=True)
    content_folder_url = models.URLField(max_length=500, blank=True, null=True)
    hidden = models.BooleanField(default=False)
    is_test = models.BooleanField(default=False)
    team_update = models.TextField(blank=True, null=True)
    team_update_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    completion_reason = models.CharField(max_length=500, blank=True, null=True)
    budget_reached_at = models.DateTimeField(null=True, blank=True)
    budget_reached_views = models.BigIntegerField(null=True, blank=True)
    client_access_token = models.CharField(max_length=64, unique=True, null=True, blank=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "campaign"
        ordering = ("-created_at",)
        indexes = [
            models.Index(fields=("status", "-created_at"), name="campaign_status_idx"),
            models.Index(fields=("deleted_at",), name="campaign_deleted_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"

    @property
    def effective_budget(self) -> Decimal:
        return max(Decimal("0.00"), (self.budget or Decimal("0.00")) - (self.reserved_amount or Decimal("0.00")))

    @property
    def remaining_budget(self) -> Decimal:
        return max(Decimal("0.00"), self.effective_budget - (self.spent or Decimal("0.00")))

    @property
    def progress_percentage(self) -> float:
        if not self.effective_budget:
            return 0.0
        return round(float(self.spent / self.effective_budget * 100), 2)

    @property
    def is_archived(self) -> bool:
        return self.deleted_at is not None
