from django.contrib import admin

from .models import SupportTicket


@admin.register(SupportTicket)
class SupportTicketAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "category", "subject", "status", "created_at", "responded_at")
    list_filter = ("status", "category")
    search_fields = ("subject", "message", "user__username")
    raw_id_fields = ("user", "responded_by")
    readonly_fields = ("created_at", "updated_at", "user_reply", "user_reply_at")
