from django_filters import rest_framework as filters
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import IsAdminRole, IsOwnerOrAdmin

from .models import SupportTicket
from .serializers import (
    SupportTicketSerializer,
    TicketAdminUpdateSerializer,
    TicketCreateSerializer,
    TicketReplySerializer,
)
from .services import admin_update_ticket, create_ticket, user_reply


class TicketFilter(filters.FilterSet):
    status = filters.ChoiceFilter(field_name="status", choices=SupportTicket.Status.choices)
    category = filters.ChoiceFilter(field_name="category", choices=SupportTicket.Category.choices)

    class Meta:
        model = SupportTicket
        fields = ["status", "category"]


class SupportTicketViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, mixins.CreateModelMixin,
                           viewsets.GenericViewSet):
    """Own tickets for clippers; every ticket for admins."""

    serializer_class = SupportTicketSerializer
    permission_classes = [IsAuthenticated, IsOwnerOrAdmin]
    filterset_class = TicketFilter
    filter_backends = [filters.DjangoFilterBackend, SearchFilter]
    search_fields = ["subject", "message", "user__username"]

    def get_queryset(self):
        qs = SupportTicket.objects.select_related("user", "responded_by").order_by("-created_at")
        if getattr(self.request.user, "is_admin", False):
            return qs
        return qs.filter(user=self.request.user)

    def create(self, request, *args, **kwargs):
        serializer = TicketCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ticket = create_ticket(request.user, **serializer.validated_data)
        return Response(SupportTicketSerializer(ticket).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch"], permission_classes=[IsAdminRole], url_path="admin-update")
    def admin_update(self, request, pk=None):
        serializer = TicketAdminUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ticket = admin_update_ticket(
            self.get_object().pk,
            request.user,
            status=serializer.validated_data.get("status"),
            response=serializer.validated_data.get("admin_response"),
        )
        return Response(SupportTicketSerializer(ticket).data)

    @action(detail=True, methods=["post"])
    def reply(self, request, pk=None):
        serializer = TicketReplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ticket = user_reply(self.get_object().pk, request.user, serializer.validated_data["reply"])
        return Response(SupportTicketSerializer(ticket).data)
