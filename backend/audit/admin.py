from django.contrib import admin

from .models import ApiAccessLog


@admin.register(ApiAccessLog)
class ApiAccessLogAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "user", "method", "path", "status_code", "campaign_id")
    list_filter = ("method", "status_code")
    search_fields = ("path", "action", "request_id", "ip_address", "user__username")
    date_hierarchy = "timestamp"
    readonly_fields = [field.name for field in ApiAccessLog._meta.fields]
    fieldsets = (
        (None, {"fields": ("timestamp", "user", "campaign_id")}),
        ("Request", {"fields": ("method", "path", "action", "payload")}),
        ("Response", {"fields": ("status_code", "response")}),
        ("Client", {"fields": ("ip_address", "user_agent", "request_id")}),
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
