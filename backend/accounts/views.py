import logging

from django.contrib.auth import login, logout
from django.db import transaction
from django.db.models import Count, Q
from django.middleware.csrf import get_token
from django.views.decorators.csrf import ensure_csrf_cookie
from django_filters import rest_framework as filters
from rest_framework import mixins, status, viewsets
from rest_framework.authtoken.models import Token
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from .models import User
from .permissions import IsAdminRole
from .serializers import (
    AdminUserSerializer,
    PasswordChangeSerializer,
    RoleUpdateSerializer,
    UserLoginSerializer,
    UserProfileSerializer,
    UserRegistrationSerializer,
    UserUpdateSerializer,
)

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    """
    User registration endpoint
    """
    serializer = UserRegistrationSerializer(data=request.data)

    if serializer.is_valid():
        user = serializer.save()
        token, created = Token.objects.get_or_create(user=user)

        return Response({
            'success': True,
            'message': 'User created successfully',
            'user': UserProfileSerializer(user).data,
            'token': token.key
        }, status=status.HTTP_201_CREATED)

    return Response({
        'success': False,
        'message': 'Registration failed',
        'errors': serializer.errors
    }, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """
    User login endpoint
    """
    serializer = UserLoginSerializer(data=request.data)

    if serializer.is_valid():
        user = serializer.validated_data['user']
        token, created = Token.objects.get_or_create(user=user)

        # Session login for the browsable API and Django admin
        login(request, user)

        return Response({
            'success': True,
            'message': 'Login successful',
            'user': UserProfileSerializer(user).data,
            'token': token.key
        }, status=status.HTTP_200_OK)

    return Response({
        'success': False,
        'message': 'Login failed',
        'errors': serializer.errors
    }, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    """
    User logout endpoint
    """
    Token.objects.filter(user=request.user).delete()
    logout(request)

    return Response({
        'success': True,
        'message': 'Logout successful'
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def profile_view(request):
    serializer = UserProfileSerializer(request.user)

    return Response({
        'success': True,
        'user': serializer.data
    }, status=status.HTTP_200_OK)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def profile_update_view(request):
    """
    Update user profile
    """
    serializer = UserUpdateSerializer(
        request.user,
        data=request.data,
        partial=request.method == 'PATCH',
        context={'request': request}
    )

    if serializer.is_valid():
        user = serializer.save()

        return Response({
            'success': True,
            'message': 'Profile updated successfully',
            'user': UserProfileSerializer(user).data
        }, status=status.HTTP_200_OK)

    return Response({
        'success': False,
        'message': 'Profile update failed',
        'errors': serializer.errors
    }, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password_view(request):
    """
    Change user password and rotate the API token
    """
    serializer = PasswordChangeSerializer(
        data=request.data,
        context={'request': request}
    )

    if serializer.is_valid():
        serializer.save()

        with transaction.atomic():
            Token.objects.filter(user=request.user).delete()
            token = Token.objects.create(user=request.user)

        return Response({
            'success': True,
            'message': 'Password changed successfully',
            'token': token.key
        }, status=status.HTTP_200_OK)

    return Response({
        'success': False,
        'message': 'Password change failed',
        'errors': serializer.errors
    }, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def verify_token_view(request):
    return Response({
        'success': True,
        'message': 'Token is valid',
        'user': UserProfileSerializer(request.user).data
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([AllowAny])
@ensure_csrf_cookie
def csrf_token_view(request):
    """
    Get CSRF token for frontend requests.
    """
    return Response({
        'csrfToken': get_token(request)
    }, status=status.HTTP_200_OK)


class AdminUserFilter(filters.FilterSet):
    role = filters.CharFilter(field_name="role", lookup_expr="iexact")
    is_active = filters.BooleanFilter(field_name="is_active")

    class Meta:
        model = User
        fields = ["role", "is_active"]


class AdminUserViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """User management for admins."""

    serializer_class = AdminUserSerializer
    permission_classes = [IsAdminRole]
    filterset_class = AdminUserFilter
    filter_backends = [filters.DjangoFilterBackend, SearchFilter, OrderingFilter]
    search_fields = ["username", "email", "display_name", "first_name", "last_name"]
    ordering_fields = ["total_earnings", "total_views", "date_joined", "username"]
    ordering = ["-date_joined"]

    def get_queryset(self):
        return User.objects.annotate(
            submission_count=Count("submissions", distinct=True),
            approved_submission_count=Count(
                "submissions", filter=Q(submissions__status="APPROVED"), distinct=True
            ),
            payout_request_count=Count("payout_requests", distinct=True),
        )

    @action(detail=True, methods=["post", "patch"], url_path="role")
    def set_role(self, request, pk=None):
        target = self.get_object()
        serializer = RoleUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        role = serializer.validated_data["role"]

        if target.pk == request.user.pk and role != User.Role.ADMIN:
            return Response(
                {"code": "CANNOT_DEMOTE_SELF", "message": "You cannot remove your own admin role."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        target.role = role
        target.is_staff = role == User.Role.ADMIN or target.is_superuser
        target.save(update_fields=["role", "is_staff", "updated_at"])
        logger.info(
            "User role changed",
            extra={"target_user_id": target.pk, "role": role, "actor_id": request.user.pk},
        )
        return Response(self.get_serializer(self.get_queryset().get(pk=target.pk)).data)
