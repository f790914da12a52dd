from rest_framework import serializers

from .models import CronJobLog, ViewTracking


class ViewTrackingSerializer(serializers.ModelSerializer):
    class Meta:
        model = ViewTracking
        fields = ["id", "clip", "views", "platform", "date", "scraped_at"]
        read_only_fields = fields


class CronJobLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = CronJobLog
        fields = [
            "id",
            "job_name",
            "status",
            "started_at",
            "completed_at",
            "duration_seconds",
            "clips_processed",
            "clips_successful",
            "clips_failed",
            "earnings_calculated",
            "details",
            "error_message",
        ]
        read_only_fields = fields
