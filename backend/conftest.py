"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_user`` factory fixture for creating test users.
  - ``auth_header`` fixture for authenticated requests (JWT).
"""

from __future__ import annotations

import pytest
from rest_framework.test import APIClient


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def create_user(db):
    """
    Factory fixture that creates an active user with sensible defaults.

    Usage::

        def test_something(create_user):
            citizen = create_user()
            officer = create_user(role="authority", full_name="Ada Officer")
    """
    from accounts.models import User, UserRole, UserStatus

    _counter = 0

    def _factory(
        *,
        email: str | None = None,
        full_name: str | None = None,
        password: str = "TestPass123!",
        role: str = UserRole.CITIZEN,
        status: str = UserStatus.ACTIVE,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if email is None:
            email = f"user{_counter}@test.local"
        if full_name is None:
            full_name = f"Test User {_counter}"

        return User.objects.create_user(
            email=email,
            password=password,
            full_name=full_name,
            role=role,
            status=status,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def auth_header(create_user):
    """
    Returns a helper that creates a user and returns an ``Authorization``
    header dict with a valid JWT access token.

    Usage::

        def test_protected(auth_header, api_client):
            header = auth_header(role="admin")
            api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
            resp = api_client.get("/api/core/reports/complaints-by-status/")
            assert resp.status_code == 200

    The returned dict looks like::

        {"Authorization": "Bearer eyJ..."}
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(**user_kwargs) -> dict[str, str]:
        user = create_user(**user_kwargs)
        token = AccessToken.for_user(user)
        return {"Authorization": f"Bearer {token}"}

    return _make
