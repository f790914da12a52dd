from django.contrib import admin

from .models import Campaign


@admin.register(Campaign)
class CampaignAdmin(admin.ModelAdmin):
    list_display = ("title", "creator", "status", "budget", "spent", "payout_rate", "start_date", "is_test", "hidden")
    list_filter = ("status", "is_test", "hidden")
    search_fields = ("title", "creator", "description")
    ordering = ("-created_at",)
    readonly_fields = (
        "spent", "completed_at", "completion_reason", "budget_reached_at", "budget_reached_views",
        "client_access_token", "created_at", "updated_at",
    )
    fieldsets = (
        (None, {"fields": ("title", "description", "creator", "created_by", "status")}),
        ("Budget", {"fields": ("budget", "reserved_amount", "spent", "payout_rate")}),
        ("Schedule", {"fields": ("start_date", "end_date")}),
        ("Content", {"fields": ("target_platforms", "requirements", "featured_image", "content_folder_url", "team_update")}),
        ("Visibility", {"fields": ("hidden", "is_test", "deleted_at", "client_access_token")}),
        ("Completion", {"fields": ("completed_at", "completion_reason", "budget_reached_at", "budget_reached_views")}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )
