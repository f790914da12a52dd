from rest_framework import serializers

from .models import SupportTicket


class SupportTicketSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="user.username", read_only=True)
    responded_by = serializers.CharField(source="responded_by.username", read_only=True, default=None)

    class Meta:
        model = SupportTicket
        fields = [
            "id",
            "username",
            "category",
            "subject",
            "message",
            "image_url",
            "status",
            "admin_response",
            "responded_at",
            "responded_by",
            "user_reply",
            "user_reply_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TicketCreateSerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=SupportTicket.Category.choices)
    subject = serializers.CharField(min_length=5, max_length=200)
    message = serializers.CharField(min_length=10, max_length=2000)
    image_url = serializers.URLField(max_length=500, required=False, allow_blank=True, allow_null=True)


class TicketAdminUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=SupportTicket.Status.choices, required=False)
    admin_response = serializers.CharField(max_length=2000, required=False, allow_blank=True)

    def validate(self, attrs):
        if "status" not in attrs and not (attrs.get("admin_response") or "").strip():
            raise serializers.ValidationError("Provide a status or a response.")
        return attrs


class TicketReplySerializer(serializers.Serializer):
    reply = serializers.CharField(min_length=1, max_length=1000)
