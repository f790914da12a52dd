from django.contrib import admin

from .models import Payout, PayoutRequest


@admin.register(PayoutRequest)
class PayoutRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "amount", "payment_method", "status", "requested_at", "processed_at")
    list_filter = ("status", "payment_method")
    search_fields = ("user__username", "user__email", "payment_details", "transaction_id")
    raw_id_fields = ("user", "processed_by", "payout")
    readonly_fields = ("requested_at",)


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "amount", "net_amount", "fee_amount", "method", "status", "processed_at")
    list_filter = ("status", "method")
    search_fields = ("user__username", "transaction_id", "paypal_email")
    raw_id_fields = ("user",)
