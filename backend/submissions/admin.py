from django.contrib import admin

from .models import Clip, ClipSubmission


@admin.register(Clip)
class ClipAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "platform", "views", "earnings", "status", "updated_at")
    list_filter = ("platform", "status")
    search_fields = ("url", "title", "user__username")
    readonly_fields = ("created_at", "updated_at")


@admin.register(ClipSubmission)
class ClipSubmissionAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "campaign", "platform", "status", "initial_views", "created_at")
    list_filter = ("status", "platform")
    search_fields = ("clip_url", "user__username", "campaign__title")
    raw_id_fields = ("user", "campaign", "clip", "reviewed_by")
    readonly_fields = ("created_at", "updated_at", "reviewed_at", "paid_at")
