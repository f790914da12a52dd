from decimal import Decimal

from django.conf import settings
from django.db import models

from campaigns.models import Platform


class ViewTracking(models.Model):
    """Append-only snapshot of a clip's view count at scrape time."""

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="view_snapshots")
    clip = models.ForeignKey("submissions.Clip", on_delete=models.CASCADE, related_name="view_tracking")
    views = models.BigIntegerField()
    platform = models.CharField(max_length=16, choices=Platform.choices)
    date = models.DateField()
    scraped_at = models.DateTimeField(db_index=True)

    class Meta:
        db_table = "view_tracking"
        ordering = ("-scraped_at",)
        indexes = [
            models.Index(fields=("clip", "-scraped_at"), name="view_tracking_clip_idx"),
            models.Index(fields=("user", "date"), name="view_tracking_user_date"),
        ]

    def __str__(self):
        return f"{self.clip_id}: {self.views} @ {self.scraped_at:%Y-%m-%d %H:%M}"


class CronJobLog(models.Model):
    """Run record for scheduled jobs; a recent RUNNING row doubles as a lock."""

    class Status(models.TextChoices):
        RUNNING = "RUNNING", "Running"
        SUCCESS = "SUCCESS", "Success"
        PARTIAL_SUCCESS = "PARTIAL_SUCCESS", "Partial success"
        FAILED = "FAILED", "Failed"
        SKIPPED = "SKIPPED", "Skipped"

    job_name = models.CharField(max_length=64, db_index=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.RUNNING)
    started_at = models.DateTimeField()
    completed_at = models.DateTimeField(null=True, blank=True)
    duration_seconds = models.FloatField(null=True, blank=True)
    clips_processed = models.PositiveIntegerField(default=0)
    clips_successful = models.PositiveIntegerField(default=0)
    clips_failed = models.PositiveIntegerField(default=0)
    earnings_calculated = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    details = models.JSONField(default=dict, blank=True)
    error_message = models.TextField(blank=True, null=True)

    class Meta:
        db_table = "cron_job_log"
        ordering = ("-started_at",)
        indexes = [
            models.Index(fields=("job_name", "status", "-started_at"), name="cron_log_job_status"),
        ]

    def __str__(self):
        return f"{self.job_name} {self.status} {self.started_at:%Y-%m-%d %H:%M}"
