import hmac
import logging

from django.conf import settings
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from django_filters import rest_framework as filters
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole
from backend.exceptions import ServiceError
from submissions.models import Clip, ClipSubmission

from .history import clip_view_history, clip_view_stats
from .jobs import run_campaign_activation_job, run_view_tracking_job
from .models import CronJobLog
from .serializers import CronJobLogSerializer
from .tracker import track_single_clip

logger = logging.getLogger(__name__)


def cron_request_authorized(request) -> bool:
    """``Authorization: Bearer <CRON_SECRET>``; every caller is allowed when no secret is set."""
    secret = settings.CRON_SECRET
    if not secret:
        return True
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return False
    return hmac.compare_digest(token.strip(), secret)


@method_decorator(csrf_exempt, name="dispatch")
class CronJobView(APIView):
    """Base for scheduler-invoked endpoints (GET and POST both run the job)."""

    authentication_classes = []
    permission_classes = []
    http_method_names = ["get", "post"]
    job_name = ""

    def run_job(self):
        raise NotImplementedError

    def get(self, request, *args, **kwargs):
        if not cron_request_authorized(request):
            logger.warning(f"Rejected unauthorised {self.job_name} cron call")
            return Response({"error": "Unauthorized"}, status=status.HTTP_401_UNAUTHORIZED)
        try:
            summary = self.run_job()
        except Exception as exc:
            logger.exception(f"{self.job_name} cron run failed")
            return Response(
                {"status": CronJobLog.Status.FAILED, "error": str(exc)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response(summary)

    def post(self, request, *args, **kwargs):
        return self.get(request, *args, **kwargs)


class ViewTrackingCronView(CronJobView):
    job_name = "view-tracking"

    def run_job(self):
        return run_view_tracking_job()


class CampaignActivationCronView(CronJobView):
    job_name = "campaign-activation"

    def run_job(self):
        return run_campaign_activation_job()


class CronJobLogFilter(filters.FilterSet):
    job_name = filters.CharFilter(field_name="job_name")
    status = filters.ChoiceFilter(field_name="status", choices=CronJobLog.Status.choices)
    started_after = filters.DateTimeFilter(field_name="started_at", lookup_expr="gte")

    class Meta:
        model = CronJobLog
        fields = ["job_name", "status", "started_after"]


class CronJobLogViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Admin view of scheduled job runs, plus a manual trigger."""

    queryset = CronJobLog.objects.all().order_by("-started_at")
    serializer_class = CronJobLogSerializer
    permission_classes = [IsAdminRole]
    filterset_class = CronJobLogFilter

    @action(detail=False, methods=["post"])
    def trigger(self, request):
        logger.info(f"View tracking triggered manually by user {request.user.pk}")
        summary = run_view_tracking_job()
        code = status.HTTP_409_CONFLICT if summary["status"] == CronJobLog.Status.SKIPPED else status.HTTP_200_OK
        return Response(summary, status=code)


class ClipTrackingViewSet(viewsets.GenericViewSet):
    """Per-clip view history, growth stats and manual refresh for admins."""

    queryset = Clip.objects.select_related("submission")
    permission_classes = [IsAdminRole]

    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        clip = self.get_object()
        return Response({"clip_id": clip.pk, "url": clip.url, "history": clip_view_history(clip)})

    @action(detail=True, methods=["get"])
    def stats(self, request, pk=None):
        return Response(clip_view_stats(self.get_object()))

    @action(detail=True, methods=["post"])
    def refresh(self, request, pk=None):
        clip = self.get_object()
        submission = ClipSubmission.objects.select_related("clip", "campaign").filter(clip=clip).first()
        if submission is None:
            raise ServiceError("Clip has no submission to track.", code="CLIP_NOT_SUBMITTED")
        result = track_single_clip(submission)
        payload = {
            "clip_id": clip.pk,
            "success": result.success,
            "previous_views": result.previous_views,
            "current_views": result.current_views,
            "views_gained": result.views_gained,
            "earnings_added": str(result.earnings_added),
            "provider": result.provider,
            "error": result.error,
        }
        return Response(payload, status=status.HTTP_200_OK if result.success else status.HTTP_502_BAD_GATEWAY)
