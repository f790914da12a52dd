import logging
from dataclasses import asdict

from django.db import transaction
from django.db.models import Count
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes, throttle_classes
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import SimpleRateThrottle
from django_filters import rest_framework as filters

from accounts.permissions import IsAdminRole

from .filters import AdminCampaignFilter, CampaignFilter
from .models import Campaign
from .serializers import AdminCampaignSerializer, CampaignSerializer, StatusChangeSerializer, TeamUpdateSerializer
from .services import (
    CampaignError,
    change_status,
    check_campaign_completion,
    delete_campaign,
    ensure_client_token,
    manually_complete_campaign,
    near_completion_campaigns,
    restore_campaign,
    set_team_update,
    sync_campaign_spend,
    visible_campaigns,
)
from .services.reporting import (
    build_client_report,
    campaign_analytics,
    campaign_for_token,
    leaderboard,
    platform_overview,
    public_stats,
)

LOGGER = logging.getLogger(__name__)


class ClientPortalRateThrottle(SimpleRateThrottle):
    """Per-IP limit on the unauthenticated client report."""

    scope = "client_portal"

    def get_cache_key(self, request, view):
        return self.cache_format % {"scope": self.scope, "ident": self.get_ident(request)}


class CampaignViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Campaigns open to clippers. Lists ACTIVE campaigns unless ``?status=`` is given."""

    serializer_class = CampaignSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = CampaignFilter
    filter_backends = [filters.DjangoFilterBackend, SearchFilter]
    search_fields = ["title", "creator", "description"]

    def get_queryset(self):
        qs = visible_campaigns().order_by("-created_at")
        if self.action == "list" and "status" not in self.request.query_params:
            qs = qs.filter(status=Campaign.Status.ACTIVE)
        return qs


class AdminCampaignViewSet(viewsets.ModelViewSet):
    """Campaign management for admins."""

    serializer_class = AdminCampaignSerializer
    permission_classes = [IsAdminRole]
    filterset_class = AdminCampaignFilter
    filter_backends = [filters.DjangoFilterBackend, SearchFilter, OrderingFilter]
    search_fields = ["title", "creator"]
    ordering_fields = ["created_at", "budget", "spent", "start_date"]
    ordering = ["-created_at"]

    def get_queryset(self):
        qs = Campaign.objects.annotate(submission_count=Count("submissions"))
        if self.action == "list" and "archived" not in self.request.query_params:
            qs = qs.filter(deleted_at__isnull=True)
        return qs

    def perform_create(self, serializer):
        campaign = serializer.save(created_by=self.request.user)
        LOGGER.info(
            "Campaign created",
            extra={"campaign_id": campaign.pk, "status": campaign.status, "actor_id": self.request.user.pk},
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        target_status = serializer.validated_data.get("status")
        with transaction.atomic():
            campaign = serializer.save()
            if target_status and target_status != campaign.status:
                change_status(campaign, target_status, reason=request.data.get("completion_reason"))
        return Response(self.get_serializer(self.get_queryset().get(pk=campaign.pk)).data)

    def destroy(self, request, *args, **kwargs):
        campaign = self.get_object()
        hard = str(request.query_params.get("hard", "")).lower() in {"1", "true", "yes"}
        result = delete_campaign(campaign, hard=hard)
        if result is None:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return Response(self.get_serializer(result).data)

    @action(detail=True, methods=["post"])
    def restore(self, request, pk=None):
        campaign = restore_campaign(self.get_object())
        return Response(self.get_serializer(campaign).data)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        campaign = manually_complete_campaign(self.get_object(), serializer.validated_data.get("reason"))
        return Response(self.get_serializer(campaign).data)

    @action(detail=True, methods=["post"], url_path="team-update")
    def team_update(self, request, pk=None):
        serializer = TeamUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        campaign = set_team_update(self.get_object(), serializer.validated_data.get("message"))
        return Response(self.get_serializer(campaign).data)

    @action(detail=True, methods=["get", "post"], url_path="client-token")
    def client_token(self, request, pk=None):
        campaign = self.get_object()
        regenerate = request.method == "POST" and bool(request.data.get("regenerate"))
        if request.method == "POST" or campaign.client_access_token:
            ensure_client_token(campaign, regenerate=regenerate)
        data = self.get_serializer(campaign).data
        return Response({
            "client_access_token": data["client_access_token"],
            "client_portal_url": data["client_portal_url"],
        })

    @action(detail=True, methods=["get"])
    def analytics(self, request, pk=None):
        return Response(campaign_analytics(self.get_object()))

    @action(detail=True, methods=["post"], url_path="sync-spend")
    def sync_spend(self, request, pk=None):
        result = sync_campaign_spend(self.get_object())
        return Response({key: str(value) for key, value in result.items()})

    @action(detail=False, methods=["get"], url_path="completion-check")
    def completion_check(self, request):
        try:
            near_threshold = float(request.query_params.get("threshold", 80))
        except ValueError:
            near_threshold = None
        if near_threshold is None or not 0 <= near_threshold <= 100:
            raise CampaignError("threshold must be a number between 0 and 100.", code="INVALID_THRESHOLD")
        return Response({
            "campaigns": [asdict(check) for check in check_campaign_completion()],
            "near_completion": [asdict(check) for check in near_completion_campaigns(near_threshold)],
        })

    @action(detail=False, methods=["get"])
    def overview(self, request):
        return Response(platform_overview())


@api_view(["GET"])
@permission_classes([AllowAny])
@throttle_classes([ClientPortalRateThrottle])
def client_report_view(request, token):
    """
    Token protected campaign report for the brand. No login required.
    """
    campaign = campaign_for_token(token)
    return Response(build_client_report(campaign))


@api_view(["GET"])
@permission_classes([AllowAny])
def public_stats_view(request):
    return Response(public_stats())


@api_view(["GET"])
@permission_classes([AllowAny])
def leaderboard_view(request):
    try:
        limit = min(max(int(request.query_params.get("limit", 10)), 1), 50)
    except ValueError:
        limit = 10
    return Response({"results": leaderboard(limit)})

