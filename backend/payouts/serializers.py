from decimal import Decimal

from rest_framework import serializers

from .models import PaymentMethod, Payout, PayoutRequest
from .services import ACTION_APPROVE, ACTION_COMPLETE, ACTION_REJECT, ACTION_REVERT


class PayoutSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payout
        fields = [
            "id",
            "amount",
            "net_amount",
            "fee_amount",
            "currency",
            "method",
            "status",
            "paypal_email",
            "transaction_id",
            "processed_at",
        ]
        read_only_fields = fields


class PayoutRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = PayoutRequest
        fields = [
            "id",
            "amount",
            "payment_method",
            "payment_details",
            "status",
            "requested_at",
            "processed_at",
            "transaction_id",
            "notes",
            "platform_fee_rate",
            "platform_fee_amount",
            "net_amount",
        ]
        read_only_fields = fields


class AdminPayoutRequestSerializer(PayoutRequestSerializer):
    user_id = serializers.IntegerField(source="user.id", read_only=True)
    username = serializers.CharField(source="user.username", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)
    user_balance = serializers.DecimalField(
        source="user.total_earnings", max_digits=12, decimal_places=2, read_only=True
    )
    processed_by = serializers.CharField(source="processed_by.username", read_only=True, default=None)
    payout = PayoutSerializer(read_only=True)

    class Meta(PayoutRequestSerializer.Meta):
        fields = PayoutRequestSerializer.Meta.fields + [
            "user_id",
            "username",
            "email",
            "user_balance",
            "processed_by",
            "payout",
        ]
        read_only_fields = fields


class PayoutRequestCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.PAYPAL)
    payment_details = serializers.CharField(max_length=500)


class ProcessPayoutSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=[ACTION_APPROVE, ACTION_REJECT, ACTION_COMPLETE, ACTION_REVERT])
    transaction_id = serializers.CharField(max_length=128, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    platform_fee_rate = serializers.DecimalField(max_digits=5, decimal_places=4, required=False, allow_null=True)
