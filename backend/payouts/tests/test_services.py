from decimal import Decimal

import pytest

from notifications.models import Notification
from payouts.models import Payout, PayoutRequest
from payouts.services import (
    InvalidPayoutAction,
    OpenPayoutRequestExists,
    PayoutError,
    PayoutRequestNotFound,
    cancel_payout_request,
    payout_summary,
    process_payout_request,
    request_payout,
)

PAYPAL = "PAYPAL"


@pytest.fixture
def funded_clipper(make_user):
    return make_user("funded", total_earnings=Decimal("100.00"))


@pytest.mark.django_db
@pytest.mark.parametrize(
    "amount, method, details, code",
    [
        (Decimal("5.00"), PAYPAL, "me@example.com", "BELOW_MINIMUM"),
        (Decimal("50.00"), "BANK_TRANSFER", "GB00 0000", "UNSUPPORTED_PAYMENT_METHOD"),
        (Decimal("50.00"), PAYPAL, "not-an-email", "INVALID_PAYPAL_EMAIL"),
        (Decimal("150.00"), PAYPAL, "me@example.com", "INSUFFICIENT_BALANCE"),
    ],
)
def test_request_payout_validation(funded_clipper, amount, method, details, code):
    with pytest.raises(PayoutError) as exc:
        request_payout(funded_clipper, amount, method, details)

    assert exc.value.code == code
    assert not PayoutRequest.objects.exists()


@pytest.mark.django_db
def test_request_payout_keeps_balance_until_completed(funded_clipper, admin_user):
    payout_request = request_payout(funded_clipper, Decimal("40"), PAYPAL, "pay@example.com")

    assert payout_request.status == PayoutRequest.Status.PENDING
    assert payout_request.amount == Decimal("40.00")
    funded_clipper.refresh_from_db()
    assert funded_clipper.total_earnings == Decimal("100.00")
    assert funded_clipper.paypal_email == "pay@example.com"
    assert Notification.objects.filter(user=admin_user, type=Notification.Type.PAYOUT_REQUESTED).exists()
    assert Notification.objects.filter(user=funded_clipper, type=Notification.Type.PAYOUT_REQUESTED).exists()


@pytest.mark.django_db
def test_only_one_open_request(funded_clipper):
    request_payout(funded_clipper, Decimal("30.00"), PAYPAL, "pay@example.com")

    with pytest.raises(OpenPayoutRequestExists) as exc:
        request_payout(funded_clipper, Decimal("30.00"), PAYPAL, "pay@example.com")

    assert exc.value.code == "PAYOUT_REQUEST_OPEN"
    assert exc.value.status_code == 409


@pytest.mark.django_db
def test_complete_deducts_balance_and_records_fee(funded_clipper, admin_user):
    payout_request = request_payout(funded_clipper, Decimal("50.00"), PAYPAL, "pay@example.com")
    process_payout_request(payout_request.pk, admin_user, "approve")

    completed = process_payout_request(payout_request.pk, admin_user, "complete", transaction_id="TX-1",
                                       fee_rate=Decimal("0.10"))

    assert completed.status == PayoutRequest.Status.COMPLETED
    assert completed.platform_fee_amount == Decimal("5.00")
    assert completed.net_amount == Decimal("45.00")
    assert completed.processed_by == admin_user
    funded_clipper.refresh_from_db()
    assert funded_clipper.total_earnings == Decimal("50.00")

    payout = Payout.objects.get(pk=completed.payout_id)
    assert payout.status == Payout.Status.COMPLETED
    assert payout.amount == Decimal("50.00")
    assert payout.net_amount == Decimal("45.00")
    assert payout.paypal_email == "pay@example.com"
    assert payout.transaction_id == "TX-1"


@pytest.mark.django_db
def test_complete_requires_transaction_id(funded_clipper, admin_user):
    payout_request = request_payout(funded_clipper, Decimal("50.00"), PAYPAL, "pay@example.com")
    process_payout_request(payout_request.pk, admin_user, "approve")

    with pytest.raises(PayoutError) as exc:
        process_payout_request(payout_request.pk, admin_user, "complete", transaction_id="  ")

    assert exc.value.code == "TRANSACTION_ID_REQUIRED"


@pytest.mark.django_db
def test_complete_rechecks_balance(funded_clipper, admin_user):
    payout_request = request_payout(funded_clipper, Decimal("80.00"), PAYPAL, "pay@example.com")
    process_payout_request(payout_request.pk, admin_user, "approve")
    type(funded_clipper).objects.filter(pk=funded_clipper.pk).update(total_earnings=Decimal("10.00"))

    with pytest.raises(PayoutError) as exc:
        process_payout_request(payout_request.pk, admin_user, "complete", transaction_id="TX-2")

    assert exc.value.code == "INSUFFICIENT_BALANCE"
    payout_request.refresh_from_db()
    assert payout_request.status == PayoutRequest.Status.APPROVED


@pytest.mark.django_db
def test_invalid_fee_rate(funded_clipper, admin_user):
    payout_request = request_payout(funded_clipper, Decimal("50.00"), PAYPAL, "pay@example.com")
    process_payout_request(payout_request.pk, admin_user, "approve")

    with pytest.raises(PayoutError) as exc:
        process_payout_request(payout_request.pk, admin_user, "complete", transaction_id="TX", fee_rate="1.5")

    assert exc.value.code == "INVALID_FEE_RATE"


@pytest.mark.django_db
def test_revert_returns_request_to_pending(funded_clipper, admin_user):
    payout_request = request_payout(funded_clipper, Decimal("50.00"), PAYPAL, "pay@example.com")
    process_payout_request(payout_request.pk, admin_user, "approve")

    reverted = process_payout_request(payout_request.pk, admin_user, "revert")

    assert reverted.status == PayoutRequest.Status.PENDING
    assert reverted.processed_by is None
    assert reverted.processed_at is None


@pytest.mark.django_db
def test_finished_requests_accept_no_actions(funded_clipper, admin_user):
    payout_request = request_payout(funded_clipper, Decimal("50.00"), PAYPAL, "pay@example.com")
    process_payout_request(payout_request.pk, admin_user, "reject", notes="Account under review")

    with pytest.raises(InvalidPayoutAction):
        process_payout_request(payout_request.pk, admin_user, "approve")
    with pytest.raises(InvalidPayoutAction):
        process_payout_request(payout_request.pk, admin_user, "revert")

    rejection = Notification.objects.get(user=funded_clipper, type=Notification.Type.PAYOUT_PROCESSED)
    assert "Account under review" in rejection.message


@pytest.mark.django_db
def test_cancel_only_pending(funded_clipper, admin_user, make_user):
    payout_request = request_payout(funded_clipper, Decimal("50.00"), PAYPAL, "pay@example.com")

    with pytest.raises(PayoutRequestNotFound):
        cancel_payout_request(payout_request.pk, make_user())

    cancelled = cancel_payout_request(payout_request.pk, funded_clipper)
    assert cancelled.status == PayoutRequest.Status.CANCELLED

    with pytest.raises(InvalidPayoutAction):
        cancel_payout_request(payout_request.pk, funded_clipper)


@pytest.mark.django_db
def test_payout_summary(funded_clipper, admin_user):
    payout_request = request_payout(funded_clipper, Decimal("50.00"), PAYPAL, "pay@example.com")
    process_payout_request(payout_request.pk, admin_user, "approve")
    process_payout_request(payout_request.pk, admin_user, "complete", transaction_id="TX", fee_rate="0.2")

    summary = payout_summary()

    assert summary["requests"]["COMPLETED"]["count"] == 1
    assert summary["total_fees_collected"] == Decimal("10.00")
    assert summary["total_net_paid"] == Decimal("40.00")
    assert summary["outstanding_balances"] == Decimal("50.00")
    assert summary["top_balances"][0]["username"] == "funded"
