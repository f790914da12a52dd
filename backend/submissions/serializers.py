from decimal import Decimal

from rest_framework import serializers

from campaigns.models import Platform

from .models import Clip, ClipSubmission
from .services import normalize_platform, views_gained


class ClipSerializer(serializers.ModelSerializer):
    class Meta:
        model = Clip
        fields = ["id", "url", "platform", "title", "views", "likes", "shares", "earnings", "status", "updated_at"]
        read_only_fields = fields


class SubmissionCreateSerializer(serializers.Serializer):
    campaign = serializers.IntegerField(min_value=1)
    clip_url = serializers.CharField(max_length=500)
    platform = serializers.CharField(max_length=16, required=False, allow_blank=True)

    def validate_clip_url(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Clip URL is required.")
        return value

    def validate_platform(self, value):
        platform = normalize_platform(value)
        if platform and platform not in Platform.values:
            raise serializers.ValidationError(f"Unsupported platform: {value}")
        return platform


class ClipSubmissionSerializer(serializers.ModelSerializer):
    campaign_title = serializers.CharField(source="campaign.title", read_only=True)
    views = serializers.SerializerMethodField()
    earnings = serializers.SerializerMethodField()
    views_gained = serializers.SerializerMethodField()

    class Meta:
        model = ClipSubmission
        fields = [
            "id",
            "campaign",
            "campaign_title",
            "clip_url",
            "platform",
            "status",
            "rejection_reason",
            "initial_views",
            "views",
            "views_gained",
            "earnings",
            "payout_amount",
            "paid_at",
            "reviewed_at",
            "created_at",
        ]
        read_only_fields = fields

    def get_views(self, obj):
        return obj.clip.views if obj.clip_id else 0

    def get_earnings(self, obj):
        return str(obj.clip.earnings if obj.clip_id else Decimal("0.00"))

    def get_views_gained(self, obj):
        return views_gained(obj)


class AdminSubmissionSerializer(ClipSubmissionSerializer):
    user_id = serializers.IntegerField(source="user.id", read_only=True)
    username = serializers.CharField(source="user.username", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)
    reviewed_by = serializers.CharField(source="reviewed_by.username", read_only=True, default=None)
    clip = ClipSerializer(read_only=True)

    class Meta(ClipSubmissionSerializer.Meta):
        fields = ClipSubmissionSerializer.Meta.fields + [
            "user_id",
            "username",
            "email",
            "reviewed_by",
            "final_earnings",
            "clip",
            "updated_at",
        ]
        read_only_fields = fields


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True)


class MarkPaidSerializer(serializers.Serializer):
    payout_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
