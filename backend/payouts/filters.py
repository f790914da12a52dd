from django_filters import rest_framework as filters

from .models import PaymentMethod, PayoutRequest


class AdminPayoutRequestFilter(filters.FilterSet):
    status = filters.ChoiceFilter(field_name="status", choices=PayoutRequest.Status.choices)
    payment_method = filters.ChoiceFilter(field_name="payment_method", choices=PaymentMethod.choices)
    user = filters.NumberFilter(field_name="user_id")
    requested_after = filters.DateTimeFilter(field_name="requested_at", lookup_expr="gte")

    class Meta:
        model = PayoutRequest
        fields = ["status", "payment_method", "user", "requested_after"]
