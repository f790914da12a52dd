from __future__ import annotations

from django_filters import rest_framework as filters
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import ReadOnlyModelViewSet

from accounts.permissions import IsAdminRole

from .activity import recent_activity, request_summary
from .models import ApiAccessLog
from .serializers import ApiAccessLogSerializer

MAX_FEED_ITEMS = 100
MAX_SUMMARY_HOURS = 24 * 30


def _bounded_int(raw, default: int, upper: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return max(1, min(value, upper))


class ApiAccessLogFilter(filters.FilterSet):
    start = filters.IsoDateTimeFilter(field_name="timestamp", lookup_expr="gte")
    end = filters.IsoDateTimeFilter(field_name="timestamp", lookup_expr="lte")
    method = filters.CharFilter(field_name="method", lookup_expr="iexact")
    action = filters.CharFilter(field_name="action", lookup_expr="icontains")
    path = filters.CharFilter(field_name="path", lookup_expr="istartswith")
    min_status = filters.NumberFilter(field_name="status_code", lookup_expr="gte")

    class Meta:
        model = ApiAccessLog
        fields = ["method", "status_code", "action", "campaign_id", "user", "path", "min_status"]


class ApiAccessLogViewSet(ReadOnlyModelViewSet):
    """API activity. Admins see every request; other users only their own."""

    serializer_class = ApiAccessLogSerializer
    permission_classes = [IsAuthenticated]
    queryset = ApiAccessLog.objects.select_related("user")
    filterset_class = ApiAccessLogFilter
    filter_backends = [filters.DjangoFilterBackend, OrderingFilter]
    ordering_fields = ["timestamp", "status_code"]
    ordering = ["-timestamp"]

    def get_queryset(self):
        qs = super().get_queryset()
        if not getattr(self.request.user, "is_admin", False):
            qs = qs.filter(user=self.request.user)
        return qs

    @action(detail=False, methods=["get"], permission_classes=[IsAdminRole])
    def activity(self, request):
        """Marketplace activity feed: signups, submissions, payout requests, view updates."""
        limit = _bounded_int(request.query_params.get("limit"), 20, MAX_FEED_ITEMS)
        return Response({"results": recent_activity(limit)})

    @action(detail=False, methods=["get"], permission_classes=[IsAdminRole])
    def summary(self, request):
        hours = _bounded_int(request.query_params.get("hours"), 24, MAX_SUMMARY_HOURS)
        return Response(request_summary(hours))
