import logging

from django_filters import rest_framework as filters
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle

from accounts.permissions import IsAdminRole

from .filters import AdminSubmissionFilter, SubmissionFilter
from .models import ClipSubmission
from .serializers import (
    AdminSubmissionSerializer,
    ClipSubmissionSerializer,
    MarkPaidSerializer,
    RejectSerializer,
    SubmissionCreateSerializer,
)
from .services import (
    approve_submission,
    clip_analytics,
    clipper_dashboard,
    create_submission,
    delete_submission,
    mark_submission_paid,
    reject_submission,
)

logger = logging.getLogger(__name__)


class SubmissionCreateRateThrottle(UserRateThrottle):
    scope = "submission_create"


class SubmissionViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, mixins.CreateModelMixin,
                        mixins.DestroyModelMixin, viewsets.GenericViewSet):
    """A clipper's own submissions."""

    serializer_class = ClipSubmissionSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = SubmissionFilter
    filter_backends = [filters.DjangoFilterBackend, OrderingFilter]
    ordering_fields = ["created_at", "status"]
    ordering = ["-created_at"]

    def get_queryset(self):
        return ClipSubmission.objects.filter(user=self.request.user).select_related("campaign", "clip")

    def get_throttles(self):
        if self.action == "create":
            return [SubmissionCreateRateThrottle()]
        return super().get_throttles()

    def create(self, request, *args, **kwargs):
        serializer = SubmissionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        submission = create_submission(
            request.user,
            data["campaign"],
            data["clip_url"],
            platform=data.get("platform"),
        )
        return Response(ClipSubmissionSerializer(submission).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        delete_submission(self.get_object(), request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def dashboard(self, request):
        return Response(clipper_dashboard(request.user))

    @action(detail=True, methods=["get"])
    def analytics(self, request, pk=None):
        return Response(clip_analytics(self.get_object()))


class AdminSubmissionViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, mixins.DestroyModelMixin,
                             viewsets.GenericViewSet):
    """Submission review queue for admins."""

    serializer_class = AdminSubmissionSerializer
    permission_classes = [IsAdminRole]
    filterset_class = AdminSubmissionFilter
    filter_backends = [filters.DjangoFilterBackend, SearchFilter, OrderingFilter]
    search_fields = ["clip_url", "user__username", "user__email", "campaign__title"]
    ordering_fields = ["created_at", "status", "reviewed_at"]
    ordering = ["-created_at"]

    def get_queryset(self):
        return ClipSubmission.objects.select_related("campaign", "clip", "user", "reviewed_by")

    def destroy(self, request, *args, **kwargs):
        delete_submission(self.get_object(), request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def _respond(self, submission):
        return Response(self.get_serializer(self.get_queryset().get(pk=submission.pk)).data)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        submission = approve_submission(self.get_object().pk, request.user)
        return self._respond(submission)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        submission = reject_submission(self.get_object().pk, request.user, serializer.validated_data.get("reason"))
        return self._respond(submission)

    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request, pk=None):
        serializer = MarkPaidSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        submission = mark_submission_paid(
            self.get_object().pk, request.user, serializer.validated_data["payout_amount"]
        )
        return self._respond(submission)

    @action(detail=True, methods=["get"])
    def analytics(self, request, pk=None):
        return Response(clip_analytics(self.get_object()))
