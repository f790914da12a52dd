from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from .models import Campaign, Platform
from .services import initial_status


class CampaignSerializer(serializers.ModelSerializer):
    """Campaign as shown to clippers."""

    remaining_budget = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    progress_percentage = serializers.FloatField(read_only=True)

    class Meta:
        model = Campaign
        fields = (
            "id", "title", "description", "creator", "budget", "spent", "remaining_budget",
            "progress_percentage", "payout_rate", "status", "start_date", "end_date",
            "target_platforms", "requirements", "featured_image", "content_folder_url",
            "team_update", "team_update_at", "completed_at", "created_at",
        )
        read_only_fields = fields


class AdminCampaignSerializer(serializers.ModelSerializer):
    """Full campaign representation for admins. Status changes go through the status machine."""

    remaining_budget = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    effective_budget = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    progress_percentage = serializers.FloatField(read_only=True)
    is_archived = serializers.BooleanField(read_only=True)
    submission_count = serializers.IntegerField(read_only=True, default=0)
    client_portal_url = serializers.SerializerMethodField()

    class Meta:
        model = Campaign
        fields = (
            "id", "title", "description", "creator", "created_by", "budget", "spent", "reserved_amount",
            "effective_budget", "remaining_budget", "progress_percentage", "payout_rate", "status",
            "start_date", "end_date", "target_platforms", "requirements", "featured_image",
            "content_folder_url", "hidden", "is_test", "team_update", "team_update_at",
            "completed_at", "completion_reason", "budget_reached_at", "budget_reached_views",
            "client_access_token", "client_portal_url", "is_archived", "deleted_at",
            "submission_count", "created_at", "updated_at",
        )
        read_only_fields = (
            "id", "created_by", "spent", "team_update", "team_update_at", "completed_at",
            "completion_reason", "budget_reached_at", "budget_reached_views", "client_access_token",
            "deleted_at", "created_at", "updated_at",
        )
        extra_kwargs = {"status": {"required": False}}

    def get_client_portal_url(self, obj):
        if not obj.client_access_token:
            return None
        return f"{settings.CLIENT_PORTAL_BASE_URL.rstrip('/')}/client/{obj.client_access_token}"

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Title is required.")
        return value

    def validate_description(self, value):
        if len(value.strip()) < 10:
            raise serializers.ValidationError("Description must be at least 10 characters.")
        return value

    def validate_budget(self, value):
        if value <= 0:
            raise serializers.ValidationError("Budget must be greater than zero.")
        return value

    def validate_payout_rate(self, value):
        if value <= 0:
            raise serializers.ValidationError("Payout rate must be greater than zero.")
        return value

    def validate_status(self, value):
        if self.instance is None and value not in (
            Campaign.Status.DRAFT, Campaign.Status.SCHEDULED, Campaign.Status.ACTIVE
        ):
            raise serializers.ValidationError("New campaigns start as DRAFT, SCHEDULED or ACTIVE.")
        return value

    def validate_reserved_amount(self, value):
        if value < 0:
            raise serializers.ValidationError("Reserved amount cannot be negative.")
        return value

    def validate_target_platforms(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Expected a list of platforms.")
        normalized = []
        for item in value:
            platform = str(item).upper()
            if platform == "X":
                platform = Platform.TWITTER
            if platform not in Platform.values:
                raise serializers.ValidationError(f"Unsupported platform: {item}")
            if platform not in normalized:
                normalized.append(str(platform))
        return normalized

    def validate_requirements(self, value):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("Requirements must be a list of strings.")
        return [item.strip() for item in value if item.strip()]

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end <= start:
            raise serializers.ValidationError({"end_date": "End date must be after the start date."})

        budget = attrs.get("budget", getattr(self.instance, "budget", None))
        reserved = attrs.get("reserved_amount", getattr(self.instance, "reserved_amount", Decimal("0.00")))
        if budget is not None and reserved is not None and reserved > budget:
            raise serializers.ValidationError({"reserved_amount": "Reserved amount cannot exceed the budget."})
        return attrs

    def create(self, validated_data):
        validated_data["status"] = initial_status(validated_data.get("status"), validated_data.get("start_date"))
        return super().create(validated_data)

    def update(self, instance, validated_data):
        # Status transitions are applied by the view through the status machine.
        validated_data.pop("status", None)
        return super().update(instance, validated_data)


class StatusChangeSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=400)


class TeamUpdateSerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=2000)
