"""
Core app URL configuration.

URL prefix (registered in ``backend/urls.py``)::

    path('api/core/', include('core.urls'))

Endpoint summary
----------------
GET  /api/core/reports/complaints-by-status/    — Totals per complaint status.
GET  /api/core/reports/resolved-durations/      — Hours-to-resolve per resolved complaint.
GET  /api/core/constants/                       — Enum values for client dropdowns.
GET  /api/core/notifications/                   — Caller's notifications.
POST /api/core/notifications/{id}/delivered/    — Mark a notification delivered.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

app_name = "core"

router = DefaultRouter()
router.register(
    prefix=r"notifications",
    viewset=views.NotificationViewSet,
    basename="notification",
)

urlpatterns = [
    # ── Reports ──────────────────────────────────────────────────────
    path(
        "reports/complaints-by-status/",
        views.ComplaintsByStatusReportView.as_view(),
        name="report-complaints-by-status",
    ),
    path(
        "reports/resolved-durations/",
        views.ResolvedDurationsReportView.as_view(),
        name="report-resolved-durations",
    ),

    # ── System Constants / Enums ─────────────────────────────────────
    path(
        "constants/",
        views.SystemConstantsView.as_view(),
        name="system-constants",
    ),

    # ── Notifications (router-generated URLs) ────────────────────────
    path("", include(router.urls)),
]
