import logging

from django_filters import rest_framework as filters
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle

from accounts.permissions import IsAdminRole

from .filters import AdminPayoutRequestFilter
from .models import Payout, PayoutRequest
from .serializers import (
    AdminPayoutRequestSerializer,
    PayoutRequestCreateSerializer,
    PayoutRequestSerializer,
    PayoutSerializer,
    ProcessPayoutSerializer,
)
from .services import cancel_payout_request, payout_summary, process_payout_request, request_payout

logger = logging.getLogger(__name__)


class PayoutRequestRateThrottle(UserRateThrottle):
    scope = "payout_request"


class PayoutRequestViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, mixins.CreateModelMixin,
                           viewsets.GenericViewSet):
    """A clipper's own withdrawal requests."""

    serializer_class = PayoutRequestSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return PayoutRequest.objects.filter(user=self.request.user).order_by("-requested_at")

    def get_throttles(self):
        if self.action == "create":
            return [PayoutRequestRateThrottle()]
        return super().get_throttles()

    def create(self, request, *args, **kwargs):
        serializer = PayoutRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        payout_request = request_payout(
            request.user, data["amount"], data["payment_method"], data["payment_details"]
        )
        return Response(PayoutRequestSerializer(payout_request).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        payout_request = cancel_payout_request(self.get_object().pk, request.user)
        return Response(PayoutRequestSerializer(payout_request).data)

    @action(detail=False, methods=["get"])
    def history(self, request):
        payouts = Payout.objects.filter(user=request.user).order_by("-processed_at")
        page = self.paginate_queryset(payouts)
        if page is not None:
            return self.get_paginated_response(PayoutSerializer(page, many=True).data)
        return Response(PayoutSerializer(payouts, many=True).data)


class AdminPayoutRequestViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Payout processing for admins."""

    serializer_class = AdminPayoutRequestSerializer
    permission_classes = [IsAdminRole]
    filterset_class = AdminPayoutRequestFilter
    filter_backends = [filters.DjangoFilterBackend, SearchFilter, OrderingFilter]
    search_fields = ["user__username", "user__email", "payment_details", "transaction_id"]
    ordering_fields = ["requested_at", "amount", "status"]
    ordering = ["-requested_at"]

    def get_queryset(self):
        return PayoutRequest.objects.select_related("user", "processed_by", "payout")

    @action(detail=True, methods=["post"])
    def process(self, request, pk=None):
        serializer = ProcessPayoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        payout_request = process_payout_request(
            self.get_object().pk,
            request.user,
            data["action"],
            transaction_id=data.get("transaction_id"),
            notes=data.get("notes"),
            fee_rate=data.get("platform_fee_rate"),
        )
        return Response(self.get_serializer(self.get_queryset().get(pk=payout_request.pk)).data)

    @action(detail=False, methods=["get"])
    def summary(self, request):
        return Response(payout_summary())
