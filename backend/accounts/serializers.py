"""
Accounts app serializers.

Contains all Request and Response serializers for the accounts API.
Serializers handle field definitions, read/write constraints, and
basic validation.  **No business logic** lives here — all domain
rules are delegated to ``services.py``.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth import authenticate, get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import UserRole, UserStatus

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
#  Authentication Serializers
# ═══════════════════════════════════════════════════════════════════


class RegisterRequestSerializer(serializers.Serializer):
    """
    Validates citizen self-registration data.

    The ``password`` field is write-only and is hashed by the service
    layer.  Role and status are never accepted from the client.
    """

    email = serializers.EmailField(max_length=254)
    full_name = serializers.CharField(max_length=120)
    password = serializers.CharField(
        write_only=True,
        min_length=8,
        style={"input_type": "password"},
        help_text="Minimum 8 characters.",
    )
    password_confirm = serializers.CharField(
        write_only=True,
        style={"input_type": "password"},
        help_text="Must match 'password'.",
    )

    def validate_full_name(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Full name may not be blank.")
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs["password"] != attrs["password_confirm"]:
            raise serializers.ValidationError(
                {"password_confirm": "Passwords do not match."}
            )
        attrs.pop("password_confirm")
        return attrs


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    SimpleJWT serializer that authenticates with ``email`` + ``password``
    and adds the user's ``role`` as a custom claim so clients can render
    role-specific UI without an extra request.
    """

    username_field = "email"

    @classmethod
    def get_token(cls, user) -> Any:
        token = super().get_token(user)
        token["role"] = user.role
        return token

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        user = authenticate(
            request=self.context.get("request"),
            email=attrs.get("email"),
            password=attrs.get("password"),
        )

        if user is None:
            raise serializers.ValidationError(
                {"detail": "Invalid credentials."},
                code="authentication",
            )

        refresh = self.get_token(user)
        self.user = user
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


# ═══════════════════════════════════════════════════════════════════
#  User Serializers
# ═══════════════════════════════════════════════════════════════════


class UserListSerializer(serializers.ModelSerializer):
    """Compact user row for admin listings."""

    class Meta:
        model = User
        fields = ["id", "email", "full_name", "role", "status"]
        read_only_fields = fields


class UserDetailSerializer(serializers.ModelSerializer):
    """
    Full user representation (used in retrieve, me, login and
    registration responses).
    """

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "full_name",
            "role",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TokenResponseSerializer(serializers.Serializer):
    """Shape of the login response: token pair plus the user profile."""

    access = serializers.CharField(read_only=True)
    refresh = serializers.CharField(read_only=True)
    user = UserDetailSerializer(read_only=True)


class UserFilterSerializer(serializers.Serializer):
    """Query-param filters for ``GET /users/``."""

    role = serializers.ChoiceField(choices=UserRole.choices, required=False)
    status = serializers.ChoiceField(choices=UserStatus.choices, required=False)
    search = serializers.CharField(required=False, allow_blank=True)


class SetRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(
        choices=UserRole.choices,
        help_text="New role: citizen, authority or admin.",
    )


class SetStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=UserStatus.choices,
        help_text="New account status: pending, active or suspended.",
    )


class MeUpdateSerializer(serializers.ModelSerializer):
    """
    Allows the authenticated user to update their display name.
    E-mail, role and status are not self-modifiable.
    """

    class Meta:
        model = User
        fields = ["full_name"]
