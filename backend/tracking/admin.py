from django.contrib import admin

from .models import CronJobLog, ViewTracking


@admin.register(ViewTracking)
class ViewTrackingAdmin(admin.ModelAdmin):
    list_display = ("id", "clip", "user", "platform", "views", "scraped_at")
    list_filter = ("platform", "date")
    search_fields = ("clip__url", "user__username")
    readonly_fields = ("user", "clip", "views", "platform", "date", "scraped_at")
    date_hierarchy = "scraped_at"


@admin.register(CronJobLog)
class CronJobLogAdmin(admin.ModelAdmin):
    list_display = (
        "job_name",
        "status",
        "started_at",
        "duration_seconds",
        "clips_processed",
        "clips_failed",
        "earnings_calculated",
    )
    list_filter = ("job_name", "status")
    readonly_fields = [field.name for field in CronJobLog._meta.fields]
    ordering = ("-started_at",)
