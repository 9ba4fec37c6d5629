"""
Smoke tests — verify that Django boots, URL routing resolves, and
the core domain modules are importable.
"""

from __future__ import annotations

import pytest
from django.urls import resolve, reverse


# ════════════════════════════════════════════════════════════════════
#  URL Routing Smoke Tests
# ════════════════════════════════════════════════════════════════════

class TestURLRouting:
    """Ensure all top-level app URL names resolve."""

    EXPECTED_URLS = [
        # (url_name, expected_path)
        ("accounts:register",                  "/api/accounts/auth/register/"),
        ("accounts:login",                     "/api/accounts/auth/login/"),
        ("accounts:me",                        "/api/accounts/me/"),
        ("complaint-list",                     "/api/complaints/"),
        ("zone-list",                          "/api/zones/"),
        ("category-list",                      "/api/categories/"),
        ("core:report-complaints-by-status",   "/api/core/reports/complaints-by-status/"),
        ("core:report-resolved-durations",     "/api/core/reports/resolved-durations/"),
        ("core:system-constants",              "/api/core/constants/"),
        ("core:notification-list",             "/api/core/notifications/"),
    ]

    @pytest.mark.parametrize("url_name,expected_path", EXPECTED_URLS)
    def test_url_reverses(self, url_name: str, expected_path: str):
        assert reverse(url_name) == expected_path

    @pytest.mark.parametrize("url_name,expected_path", EXPECTED_URLS)
    def test_url_resolve_matches_view(self, url_name: str, expected_path: str):
        match = resolve(expected_path)
        assert match.func is not None

    def test_detail_actions_reverse(self):
        assert reverse("complaint-change-status", args=[7]) == "/api/complaints/7/status/"
        assert reverse("complaint-assign", args=[7]) == "/api/complaints/7/assign/"
        assert reverse("complaint-status-log", args=[7]) == "/api/complaints/7/status-log/"
        assert (
            reverse("core:notification-mark-delivered", args=[3])
            == "/api/core/notifications/3/delivered/"
        )


# ════════════════════════════════════════════════════════════════════
#  Core Domain Module Import Tests
# ════════════════════════════════════════════════════════════════════

class TestCoreDomainImports:
    """Verify that shared domain utility modules are importable."""

    def test_import_exceptions(self):
        from core.domain.exceptions import (
            Conflict,
            DomainError,
            InvalidAssignee,
            NotFound,
            PermissionDenied,
        )
        assert issubclass(InvalidAssignee, DomainError)
        assert issubclass(Conflict, DomainError)
        assert issubclass(PermissionDenied, DomainError)
        assert issubclass(NotFound, DomainError)

    def test_import_notifications(self):
        from core.domain.notifications import NotificationService
        assert hasattr(NotificationService, "create")

    def test_import_transactions(self):
        from core.domain.transactions import lock_for_update, run_with_retry
        assert callable(run_with_retry)
        assert callable(lock_for_update)


@pytest.mark.django_db
def test_schema_endpoint_renders(api_client):
    resp = api_client.get("/api/schema/")
    assert resp.status_code == 200


def test_sqlite_writers_lock_at_begin(settings):
    db = settings.DATABASES["default"]
    if db["ENGINE"] != "django.db.backends.sqlite3":
        pytest.skip("SQLite-only setting")
    assert db["OPTIONS"]["transaction_mode"] == "IMMEDIATE"
    assert db["OPTIONS"]["timeout"] > 0
