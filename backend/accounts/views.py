"""
Accounts app views.

All views follow the **Thin View** pattern: validate input via
serializers, delegate to the service layer, and return the result
wrapped in a DRF ``Response``.  **No business logic** resides here.

View Map
--------
- ``RegisterView``  — POST /auth/register/
- ``LoginView``     — POST /auth/login/
- ``MeView``        — GET / PATCH /me/
- ``UserViewSet``   — /users/  (list, retrieve, destroy, role, status)
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from core.domain.access import require_role

from .models import UserRole
from .serializers import (
    EmailTokenObtainPairSerializer,
    MeUpdateSerializer,
    RegisterRequestSerializer,
    SetRoleSerializer,
    SetStatusSerializer,
    TokenResponseSerializer,
    UserDetailSerializer,
    UserFilterSerializer,
    UserListSerializer,
)
from .services import (
    CurrentUserService,
    UserManagementService,
    UserRegistrationService,
)


# ═══════════════════════════════════════════════════════════════════
#  Authentication Views
# ═══════════════════════════════════════════════════════════════════


class RegisterView(generics.CreateAPIView):
    """
    POST /api/accounts/auth/register/

    Public endpoint.  Creates a new ``citizen`` account in ``pending``
    status.

    Request body  → ``RegisterRequestSerializer``
    Response body → ``UserDetailSerializer`` (201 Created)
    """

    permission_classes = [AllowAny]
    authentication_classes: list = []
    serializer_class = RegisterRequestSerializer

    @extend_schema(
        summary="Register a citizen account",
        responses={
            201: OpenApiResponse(response=UserDetailSerializer, description="User created."),
            400: OpenApiResponse(description="Validation error."),
            409: OpenApiResponse(description="E-mail already registered."),
        },
        tags=["Auth"],
    )
    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserRegistrationService.register_user(dict(serializer.validated_data))
        response_serializer = UserDetailSerializer(user)
        return Response(response_serializer.data, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    POST /api/accounts/auth/login/

    Public endpoint.  Authenticates with e-mail (case-insensitive) and
    password and returns a JWT pair plus the user profile.
    """

    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(
        summary="Log in with e-mail and password",
        request=EmailTokenObtainPairSerializer,
        responses={
            200: OpenApiResponse(response=TokenResponseSerializer, description="Token pair issued."),
            400: OpenApiResponse(description="Invalid credentials."),
        },
        tags=["Auth"],
    )
    def post(self, request: Request) -> Response:
        serializer = EmailTokenObtainPairSerializer(
            data=request.data,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)

        payload = dict(serializer.validated_data)
        payload["user"] = UserDetailSerializer(serializer.user).data

        return Response(payload, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  Current User ("Me") View
# ═══════════════════════════════════════════════════════════════════


class MeView(APIView):
    """
    GET   /api/accounts/me/ → Retrieve current user profile.
    PATCH /api/accounts/me/ → Update own display name.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Current user profile",
        responses={200: UserDetailSerializer},
        tags=["Auth"],
    )
    def get(self, request: Request) -> Response:
        user = CurrentUserService.get_profile(request.user)
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Update current user profile",
        request=MeUpdateSerializer,
        responses={200: UserDetailSerializer},
        tags=["Auth"],
    )
    def patch(self, request: Request) -> Response:
        serializer = MeUpdateSerializer(
            instance=request.user, data=request.data, partial=True,
        )
        serializer.is_valid(raise_exception=True)
        user = CurrentUserService.update_profile(
            request.user, serializer.validated_data,
        )
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)


# ═══════════════════════════════════════════════════════════════════
#  User Management ViewSet
# ═══════════════════════════════════════════════════════════════════


class UserViewSet(viewsets.ViewSet):
    """
    /api/accounts/users/

    Administrative user management.  Every action is admin-only; the
    role checks live in ``UserManagementService`` (list/retrieve use
    ``require_role`` directly since they are pure reads).
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List users",
        parameters=[
            OpenApiParameter(name="role", type=str, location=OpenApiParameter.QUERY, description="Filter by role."),
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, description="Filter by account status."),
            OpenApiParameter(name="search", type=str, location=OpenApiParameter.QUERY, description="Partial match on e-mail or full name."),
        ],
        responses={200: UserListSerializer(many=True)},
        tags=["Users"],
    )
    def list(self, request: Request) -> Response:
        require_role(request.user, UserRole.ADMIN, message="Only admins can list users.")
        filter_serializer = UserFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)

        qs = UserManagementService.list_users(**filter_serializer.validated_data)
        return Response(UserListSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Retrieve a user",
        responses={200: UserDetailSerializer, 404: OpenApiResponse(description="Not found.")},
        tags=["Users"],
    )
    def retrieve(self, request: Request, pk: str = None) -> Response:
        require_role(request.user, UserRole.ADMIN, message="Only admins can view users.")
        user = UserManagementService.get_user(int(pk))
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Delete a user",
        responses={
            204: OpenApiResponse(description="Deleted."),
            409: OpenApiResponse(description="User is still referenced."),
        },
        tags=["Users"],
    )
    def destroy(self, request: Request, pk: str = None) -> Response:
        UserManagementService.delete_user(user_id=int(pk), performed_by=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="Change a user's role",
        request=SetRoleSerializer,
        responses={200: UserDetailSerializer},
        tags=["Users"],
    )
    @action(detail=True, methods=["patch"], url_path="role")
    def role(self, request: Request, pk: str = None) -> Response:
        serializer = SetRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserManagementService.set_role(
            user_id=int(pk),
            role=serializer.validated_data["role"],
            performed_by=request.user,
        )
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Change a user's account status",
        request=SetStatusSerializer,
        responses={200: UserDetailSerializer},
        tags=["Users"],
    )
    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request: Request, pk: str = None) -> Response:
        serializer = SetStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = UserManagementService.set_status(
            user_id=int(pk),
            status=serializer.validated_data["status"],
            performed_by=request.user,
        )
        return Response(UserDetailSerializer(user).data, status=status.HTTP_200_OK)
