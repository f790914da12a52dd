from decimal import Decimal

from django.conf import settings
from django.db import models

from campaigns.models import Platform


class Clip(models.Model):
    """A published post whose views are tracked once its submission is approved."""

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        INACTIVE = "INACTIVE", "Inactive"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="clips")
    url = models.URLField(max_length=500)
    platform = models.CharField(max_length=16, choices=Platform.choices)
    title = models.CharField(max_length=300, blank=True, default="")
    views = models.BigIntegerField(default=0)
    likes = models.BigIntegerField(default=0)
    shares = models.BigIntegerField(default=0)
    earnings = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "clip"
        ordering = ("-created_at",)
        indexes = [
            models.Index(fields=("user", "-created_at"), name="clip_user_idx"),
        ]

    def __str__(self):
        return f"{self.platform} clip {self.url}"


class ClipSubmission(models.Model):
    """A clipper's claim that a clip was posted for a campaign."""

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        APPROVED = "APPROVED", "Approved"
        REJECTED = "REJECTED", "Rejected"
        PAID = "PAID", "Paid"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="submissions")
    campaign = models.ForeignKey("campaigns.Campaign", on_delete=models.CASCADE, related_name="submissions")
    clip = models.OneToOneField(
        Clip,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="submission",
    )
    clip_url = models.URLField(max_length=500)
    platform = models.CharField(max_length=16, choices=Platform.choices)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING, db_index=True)
    rejection_reason = models.CharField(max_length=500, blank=True, null=True)
    initial_views = models.BigIntegerField(default=0)
    final_earnings = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    payout_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_submissions",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "clip_submission"
        ordering = ("-created_at",)
        constraints = [
            models.UniqueConstraint(fields=("campaign", "clip_url"), name="unique_campaign_clip_url"),
        ]
        indexes = [
            models.Index(fields=("campaign", "status"), name="submission_campaign_status"),
            models.Index(fields=("user", "-created_at"), name="submission_user_idx"),
        ]

    def __str__(self):
        return f"Submission<{self.pk} {self.status} {self.clip_url}>"
