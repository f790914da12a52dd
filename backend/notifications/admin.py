from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("created_at", "user", "type", "title", "read")
    list_filter = ("type", "read")
    search_fields = ("title", "message", "user__username", "user__email")
    ordering = ("-created_at",)
