from rest_framework import serializers

from .models import ApiAccessLog

SECTION_LABELS = {
    "account": "Account",
    "campaigns": "Campaigns",
    "submissions": "Submissions",
    "tracking": "Tracking",
    "cron": "Scheduler",
    "payouts": "Payouts",
    "support": "Support",
    "notifications": "Notifications",
    "audit": "Activity log",
}


class ApiAccessLogSerializer(serializers.ModelSerializer):
    user = serializers.SerializerMethodField()
    section = serializers.SerializerMethodField()
    request_summary = serializers.SerializerMethodField()

    class Meta:
        model = ApiAccessLog
        fields = (
            "id",
            "timestamp",
            "user",
            "method",
            "path",
            "action",
            "status_code",
            "campaign_id",
            "section",
            "request_summary",
            "response",
            "request_id",
        )
        read_only_fields = fields

    def get_user(self, obj):
        user = obj.user
        if not user:
            return None
        return {"id": user.pk, "username": user.username, "email": user.email}

    def get_section(self, obj) -> str:
        parts = [part for part in (obj.path or "").split("/") if part]
        if len(parts) < 2 or parts[0] != "api":
            return "Other"
        return SECTION_LABELS.get(parts[1], parts[1].replace("-", " ").title())

    def get_request_summary(self, obj) -> str:
        method = (obj.method or "").upper() or "REQUEST"
        label = obj.action or self.get_section(obj)
        return f"{method} {label} -> {obj.status_code}"
