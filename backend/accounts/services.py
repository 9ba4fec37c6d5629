"""
Accounts Service Layer.

This module is the **single source of truth** for all business logic
within the ``accounts`` app.  Views must remain *thin*: they validate
input through serializers, call a service method, and return the result
wrapped in a DRF ``Response``.

Architecture
------------
- ``UserRegistrationService``  — citizen self-registration.
- ``AuthenticationService``    — e-mail login + JWT issuance.
- ``UserManagementService``    — admin listing, role/status changes, deletion.
- ``CurrentUserService``       — "Me" endpoint helpers.
"""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import authenticate as django_authenticate
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError, Q, QuerySet, RestrictedError
from rest_framework_simplejwt.tokens import RefreshToken

from core.domain.access import require_role
from core.domain.exceptions import Conflict, DomainError, NotFound

from .models import UserRole, UserStatus

User = get_user_model()
logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  Registration Service
# ═══════════════════════════════════════════════════════════════════


class UserRegistrationService:
    """
    Encapsulates the citizen self-registration flow.

    New accounts are always ``citizen`` / ``pending``; an admin promotes
    them later through ``UserManagementService``.
    """

    @staticmethod
    def register_user(validated_data: dict[str, Any]) -> User:
        """
        Create a new citizen account.

        Parameters
        ----------
        validated_data : dict
            Cleaned data from ``RegisterRequestSerializer`` containing
            ``email``, ``full_name`` and ``password``.

        Returns
        -------
        User
            The newly created user.

        Raises
        ------
        core.domain.exceptions.Conflict
            If the e-mail is already registered (compared
            case-insensitively).
        """
        validated_data.pop("password_confirm", None)
        password = validated_data.pop("password")
        email = User.objects.normalize_email(validated_data.pop("email"))

        if User.objects.filter(email__iexact=email).exists():
            raise Conflict("A user with this email already exists.")

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    email=email,
                    password=password,
                    role=UserRole.CITIZEN,
                    status=UserStatus.PENDING,
                    **validated_data,
                )
        except IntegrityError:
            raise Conflict("A user with this email already exists.")

        logger.info("Registered citizen user #%d", user.pk)
        return user


# ═══════════════════════════════════════════════════════════════════
#  Authentication Service
# ═══════════════════════════════════════════════════════════════════


class AuthenticationService:
    """Handles e-mail login and JWT token generation."""

    @staticmethod
    def authenticate(email: str, password: str) -> User | None:
        """
        Validate credentials and return the user if successful.

        Returns ``None`` when the e-mail is unknown, the password is
        wrong, or the account is suspended.
        """
        return django_authenticate(email=email, password=password)

    @staticmethod
    def generate_tokens(user: User) -> dict[str, str]:
        """
        Issue a JWT access/refresh token pair for the given user.

        Returns
        -------
        dict
            ``{"access": "<token>", "refresh": "<token>"}``.
        """
        refresh = RefreshToken.for_user(user)
        refresh["role"] = user.role
        return {
            "access": str(refresh.access_token),
            "refresh": str(refresh),
        }


# ═══════════════════════════════════════════════════════════════════
#  User Management Service
# ═══════════════════════════════════════════════════════════════════


class UserManagementService:
    """
    Administrative operations on users: listing, role and status changes,
    and deletion.  Every mutating method requires an ``admin`` actor.
    """

    @staticmethod
    def list_users(
        *,
        role: str | None = None,
        status: str | None = None,
        search: str | None = None,
    ) -> QuerySet[User]:
        """
        Return a filtered queryset of users.

        Parameters
        ----------
        role : str, optional
            Filter by ``UserRole`` value.
        status : str, optional
            Filter by ``UserStatus`` value.
        search : str, optional
            Case-insensitive search across ``email`` and ``full_name``.
        """
        qs = User.objects.all()

        if role:
            qs = qs.filter(role=role)
        if status:
            qs = qs.filter(status=status)
        if search:
            qs = qs.filter(
                Q(email__icontains=search)
                | Q(full_name__icontains=search)
            )

        return qs.order_by("id")

    @staticmethod
    def get_user(user_id: int) -> User:
        try:
            return User.objects.get(pk=user_id)
        except User.DoesNotExist:
            raise NotFound(f"User with id {user_id} not found.")

    @staticmethod
    def set_role(*, user_id: int, role: str, performed_by: User) -> User:
        """
        Change a user's role.

        Raises
        ------
        PermissionDenied
            If ``performed_by`` is not an admin.
        DomainError
            If an admin tries to change their own role.
        NotFound
            If the target user does not exist.
        """
        require_role(performed_by, UserRole.ADMIN, message="Only admins can change user roles.")
        target_user = UserManagementService.get_user(user_id)

        if target_user.pk == performed_by.pk:
            raise DomainError("You cannot change your own role.")

        previous = target_user.role
        target_user.role = role
        target_user.save(update_fields=["role", "updated_at"])

        logger.info(
            "User #%d role changed %s → %s by admin #%d",
            target_user.pk,
            previous,
            role,
            performed_by.pk,
        )
        return target_user

    @staticmethod
    def set_status(*, user_id: int, status: str, performed_by: User) -> User:
        """
        Change a user's account status (activate, suspend, ...).

        Raises
        ------
        PermissionDenied
            If ``performed_by`` is not an admin.
        DomainError
            If an admin tries to suspend themselves.
        """
        require_role(performed_by, UserRole.ADMIN, message="Only admins can change user status.")
        target_user = UserManagementService.get_user(user_id)

        if target_user.pk == performed_by.pk and status == UserStatus.SUSPENDED:
            raise DomainError("You cannot suspend your own account.")

        target_user.status = status
        target_user.save(update_fields=["status", "updated_at"])

        logger.info(
            "User #%d status set to %s by admin #%d",
            target_user.pk,
            status,
            performed_by.pk,
        )
        return target_user

    @staticmethod
    def delete_user(*, user_id: int, performed_by: User) -> None:
        """
        Permanently delete a user.

        A user cannot be removed while complaints, status-log entries,
        comments or assignments reference them.

        Raises
        ------
        PermissionDenied
            If ``performed_by`` is not an admin.
        Conflict
            If the user is still referenced.
        """
        require_role(performed_by, UserRole.ADMIN, message="Only admins can delete users.")
        target_user = UserManagementService.get_user(user_id)

        if target_user.pk == performed_by.pk:
            raise DomainError("You cannot delete your own account.")

        try:
            with transaction.atomic():
                target_user.delete()
        except (ProtectedError, RestrictedError):
            raise Conflict(
                f"User {user_id} is referenced by complaints, status history, "
                "comments or assignments and cannot be deleted."
            )

        logger.info("User #%d deleted by admin #%d", user_id, performed_by.pk)


# ═══════════════════════════════════════════════════════════════════
#  Current User Service
# ═══════════════════════════════════════════════════════════════════


class CurrentUserService:
    """Helpers for the ``/me/`` endpoint."""

    @staticmethod
    def get_profile(user: User) -> User:
        return user

    @staticmethod
    def update_profile(user: User, validated_data: dict[str, Any]) -> User:
        """Update the caller's own mutable fields (currently ``full_name``)."""
        update_fields = []
        for key, value in validated_data.items():
            setattr(user, key, value)
            update_fields.append(key)

        if update_fields:
            update_fields.append("updated_at")
            user.save(update_fields=update_fields)
        return user
