"""Payout request lifecycle.

Clippers withdraw from ``User.total_earnings``. A request is checked against
the balance when it is made and again, under a row lock, when an admin
completes it; only completion moves money out of the balance.
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from backend.exceptions import ConflictError, NotFoundError, ServiceError
from notifications.models import Notification
from notifications.services import notify, notify_admins

from .models import PaymentMethod, Payout, PayoutRequest
from .observability import PAYOUT_AMOUNT, PAYOUT_TRANSITIONS, log_payout_event

LOGGER = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")
Status = PayoutRequest.Status

ACTION_APPROVE = "approve"
ACTION_REJECT = "reject"
ACTION_COMPLETE = "complete"
ACTION_REVERT = "revert"

ALLOWED_ACTIONS = {
    Status.PENDING: frozenset({ACTION_APPROVE, ACTION_REJECT}),
    Status.APPROVED: frozenset({ACTION_COMPLETE, ACTION_REJECT, ACTION_REVERT}),
    Status.PROCESSING: frozenset({ACTION_COMPLETE, ACTION_REJECT, ACTION_REVERT}),
}


class PayoutError(ServiceError):
    default_code = "PAYOUT_ERROR"


class PayoutRequestNotFound(NotFoundError):
    default_code = "PAYOUT_REQUEST_NOT_FOUND"


class OpenPayoutRequestExists(ConflictError):
    default_code = "PAYOUT_REQUEST_OPEN"


class InvalidPayoutAction(ConflictError):
    default_code = "INVALID_PAYOUT_ACTION"


def _minimum() -> Decimal:
    return Decimal(str(settings.PAYOUT_MINIMUM_AMOUNT))


def _lock_request(request_id, user=None) -> PayoutRequest:
    qs = PayoutRequest.objects.select_for_update().filter(pk=request_id)
    if user is not None:
        qs = qs.filter(user=user)
    payout_request = qs.first()
    if payout_request is None:
        raise PayoutRequestNotFound("Payout request not found.")
    return payout_request


def request_payout(user, amount: Decimal, payment_method: str, payment_details: str) -> PayoutRequest:
    """Open a withdrawal request for part of the user's balance."""
    amount = Decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    minimum = _minimum()
    if amount < minimum:
        raise PayoutError(f"Minimum payout is ${minimum}.", code="BELOW_MINIMUM", details={"minimum": str(minimum)})

    if payment_method != PaymentMethod.PAYPAL:
        raise PayoutError("Only PayPal payouts are currently supported.", code="UNSUPPORTED_PAYMENT_METHOD")

    payment_details = (payment_details or "").strip()
    try:
        validate_email(payment_details)
    except ValidationError:
        raise PayoutError("Enter the PayPal email address to pay.", code="INVALID_PAYPAL_EMAIL")

    User = get_user_model()
    with transaction.atomic():
        locked_user = User.objects.select_for_update().get(pk=user.pk)
        if amount > locked_user.total_earnings:
            raise PayoutError(
                "Requested amount exceeds your available balance.",
                code="INSUFFICIENT_BALANCE",
                details={"available": str(locked_user.total_earnings)},
            )
        if PayoutRequest.objects.filter(user=locked_user, status__in=PayoutRequest.OPEN_STATUSES).exists():
            raise OpenPayoutRequestExists("You already have a payout request in progress.")

        payout_request = PayoutRequest.objects.create(
            user=locked_user,
            amount=amount,
            payment_method=payment_method,
            payment_details=payment_details,
        )
        if not locked_user.paypal_email:
            locked_user.paypal_email = payment_details
            locked_user.save(update_fields=["paypal_email", "updated_at"])

    PAYOUT_TRANSITIONS.labels(action="request", status=Status.PENDING).inc()
    log_payout_event(message="Payout requested", request_id=payout_request.pk, user_id=user.pk,
                     extra={"amount": str(amount)})
    notify_admins(
        Notification.Type.PAYOUT_REQUESTED,
        "New payout request",
        f"{user.username} requested a ${amount} PayPal payout.",
        {"payout_request_id": payout_request.pk, "amount": str(amount)},
    )
    notify(
        user,
        Notification.Type.PAYOUT_REQUESTED,
        "Payout requested",
        f"We received your request for ${amount}. You will be notified once it is processed.",
        {"payout_request_id": payout_request.pk, "amount": str(amount)},
    )
    return payout_request


def cancel_payout_request(request_id, user) -> PayoutRequest:
    with transaction.atomic():
        payout_request = _lock_request(request_id, user=user)
        if payout_request.status != Status.PENDING:
            raise InvalidPayoutAction("Only pending payout requests can be cancelled.")
        payout_request.status = Status.CANCELLED
        payout_request.save(update_fields=["status"])
    PAYOUT_TRANSITIONS.labels(action="cancel", status=Status.CANCELLED).inc()
    log_payout_event(message="Payout request cancelled", request_id=payout_request.pk, user_id=user.pk)
    return payout_request


def _fee_rate(value) -> Decimal:
    if value is None:
        return Decimal(str(settings.PAYOUT_DEFAULT_FEE_RATE))
    rate = Decimal(str(value))
    if rate < 0 or rate > 1:
        raise PayoutError("Platform fee rate must be between 0 and 1.", code="INVALID_FEE_RATE")
    return rate


def _complete(payout_request: PayoutRequest, transaction_id: Optional[str], fee_rate, now) -> None:
    transaction_id = (transaction_id or "").strip()
    if not transaction_id:
        raise PayoutError("A transaction id is required to complete a payout.", code="TRANSACTION_ID_REQUIRED")
    rate = _fee_rate(fee_rate)

    User = get_user_model()
    clipper = User.objects.select_for_update().get(pk=payout_request.user_id)
    amount = payout_request.amount
    if amount > clipper.total_earnings:
        raise PayoutError(
            "User balance is lower than the requested amount.",
            code="INSUFFICIENT_BALANCE",
            details={"available": str(clipper.total_earnings)},
        )

    fee = (amount * rate).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    net = amount - fee
    clipper.total_earnings = max(Decimal("0.00"), clipper.total_earnings - amount)
    clipper.save(update_fields=["total_earnings", "updated_at"])

    payout = Payout.objects.create(
        user=clipper,
        amount=amount,
        net_amount=net,
        fee_amount=fee,
        method=payout_request.payment_method,
        status=Payout.Status.COMPLETED,
        paypal_email=payout_request.payment_details
        if payout_request.payment_method == PaymentMethod.PAYPAL else None,
        transaction_id=transaction_id,
        processed_at=now,
    )
    payout_request.status = Status.COMPLETED
    payout_request.transaction_id = transaction_id
    payout_request.platform_fee_rate = rate
    payout_request.platform_fee_amount = fee
    payout_request.net_amount = net
    payout_request.payout = payout
    PAYOUT_AMOUNT.labels(method=payout_request.payment_method).inc(float(amount))


def process_payout_request(request_id, admin, action: str, *, transaction_id: Optional[str] = None,
                           notes: Optional[str] = None, fee_rate=None) -> PayoutRequest:
    """Apply an admin ``action`` (approve, reject, complete, revert) to a request."""
    now = timezone.now()
    with transaction.atomic():
        payout_request = _lock_request(request_id)
        allowed = ALLOWED_ACTIONS.get(payout_request.status, frozenset())
        if action not in allowed:
            raise InvalidPayoutAction(
                f"Cannot {action} a {payout_request.status} payout request.",
                details={"status": payout_request.status, "allowed": sorted(allowed)},
            )

        if action == ACTION_APPROVE:
            payout_request.status = Status.APPROVED
        elif action == ACTION_REJECT:
            payout_request.status = Status.REJECTED
        elif action == ACTION_COMPLETE:
            _complete(payout_request, transaction_id, fee_rate, now)

        if action == ACTION_REVERT:
            payout_request.status = Status.PENDING
            payout_request.processed_at = None
            payout_request.processed_by = None
            payout_request.transaction_id = None
            payout_request.platform_fee_rate = None
            payout_request.platform_fee_amount = None
            payout_request.net_amount = None
        else:
            payout_request.processed_at = now
            payout_request.processed_by = admin
        if notes is not None:
            payout_request.notes = notes
        payout_request.save()

    PAYOUT_TRANSITIONS.labels(action=action, status=payout_request.status).inc()
    log_payout_event(
        message="Payout request processed",
        request_id=payout_request.pk,
        user_id=payout_request.user_id,
        actor=admin.pk,
        extra={"action": action, "status": payout_request.status},
    )
    _notify_clipper(payout_request, action)
    return payout_request


def _notify_clipper(payout_request: PayoutRequest, action: str) -> None:
    amount = payout_request.amount
    messages = {
        ACTION_APPROVE: ("Payout approved", f"Your ${amount} payout was approved and will be sent shortly."),
        ACTION_REJECT: (
            "Payout rejected",
            f"Your ${amount} payout request was rejected."
            + (f" {payout_request.notes}" if payout_request.notes else ""),
        ),
        ACTION_COMPLETE: (
            "Payout sent",
            f"${payout_request.net_amount} was sent to {payout_request.payment_details}.",
        ),
        ACTION_REVERT: ("Payout back in review", f"Your ${amount} payout request is pending review again."),
    }
    title, message = messages[action]
    notify(
        payout_request.user,
        Notification.Type.PAYOUT_PROCESSED,
        title,
        message,
        {"payout_request_id": payout_request.pk, "status": payout_request.status},
    )


def payout_summary(top: int = 10) -> Dict[str, Any]:
    """Admin totals across requests, completed payouts and clipper balances."""
    User = get_user_model()
    by_status = {value: {"count": 0, "amount": Decimal("0.00")} for value in Status.values}
    for row in PayoutRequest.objects.values("status").annotate(count=Count("id"), amount=Sum("amount")):
        by_status[row["status"]] = {"count": row["count"], "amount": row["amount"] or Decimal("0.00")}

    completed = PayoutRequest.objects.filter(status=Status.COMPLETED).aggregate(
        fees=Sum("platform_fee_amount"), net=Sum("net_amount")
    )
    outstanding = User.objects.aggregate(total=Sum("total_earnings"))["total"] or Decimal("0.00")
    top_balances = list(
        User.objects.filter(total_earnings__gt=0)
        .order_by("-total_earnings")
        .values("id", "username", "email", "paypal_email", "total_earnings")[:top]
    )
    return {
        "requests": by_status,
        "total_fees_collected": completed["fees"] or Decimal("0.00"),
        "total_net_paid": completed["net"] or Decimal("0.00"),
        "outstanding_balances": outstanding,
        "top_balances": top_balances,
    }
