from decimal import Decimal

from django.conf import settings
from django.db import models


class PaymentMethod(models.TextChoices):
    PAYPAL = "PAYPAL", "PayPal"
    BANK_TRANSFER = "BANK_TRANSFER", "Bank transfer"
    STRIPE = "STRIPE", "Stripe"
    USDC = "USDC", "USDC"
    BITCOIN = "BITCOIN", "Bitcoin"


class Payout(models.Model):
    """Money actually sent to a clipper."""

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        COMPLETED = "COMPLETED", "Completed"
        FAILED = "FAILED", "Failed"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="payouts")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    net_amount = models.DecimalField(max_digits=12, decimal_places=2)
    fee_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="USD")
    method = models.CharField(max_length=16, choices=PaymentMethod.choices)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.COMPLETED)
    paypal_email = models.EmailField(blank=True, null=True)
    transaction_id = models.CharField(max_length=128)
    processed_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "payout"
        ordering = ("-processed_at",)

    def __str__(self):
        return f"Payout<{self.user_id} {self.amount} {self.currency}>"


class PayoutRequest(models.Model):
    """A clipper's request to withdraw part of their balance."""

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        APPROVED = "APPROVED", "Approved"
        PROCESSING = "PROCESSING", "Processing"
        COMPLETED = "COMPLETED", "Completed"
        REJECTED = "REJECTED", "Rejected"
        CANCELLED = "CANCELLED", "Cancelled"

    OPEN_STATUSES = (Status.PENDING, Status.APPROVED, Status.PROCESSING)

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="payout_requests")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_method = models.CharField(max_length=16, choices=PaymentMethod.choices, default=PaymentMethod.PAYPAL)
    payment_details = models.CharField(max_length=500)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING, db_index=True)
    requested_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="processed_payout_requests",
    )
    transaction_id = models.CharField(max_length=128, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    platform_fee_rate = models.DecimalField(max_digits=5, decimal_places=4, null=True, blank=True)
    platform_fee_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    net_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    payout = models.OneToOneField(
        Payout,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="request",
    )

    class Meta:
        db_table = "payout_request"
        ordering = ("-requested_at",)
        indexes = [
            models.Index(fields=("user", "status"), name="payout_request_user_status"),
        ]

    def __str__(self):
        return f"PayoutRequest<{self.pk} {self.user_id} {self.amount} {self.status}>"
