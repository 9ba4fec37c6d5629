"""
Core app services — **Service Layer**.

Contains cross-app reporting and lookup logic.  Views delegate all
business logic to the service classes defined here, keeping views thin
and ensuring testability.

Cross-app imports
-----------------
The core app is the only app that queries models owned by other apps.
To keep ``core`` importable before the other apps are loaded, those
models are resolved lazily with ``apps.get_model`` inside the methods
that need them, never at module level.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from django.apps import apps
from django.db.models import Avg, Count, Max, Min, QuerySet
from django.utils import timezone

from core.domain.access import require_role
from core.domain.exceptions import NotFound

if TYPE_CHECKING:
    from accounts.models import User
    from core.models import Notification

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════════
#  Complaint Reporting Service
# ════════════════════════════════════════════════════════════════════

class ComplaintReportingService:
    """
    Reads the SQL reporting views ``vw_complaints_by_status`` and
    ``vw_resolved_durations`` through their unmanaged models.

    The views are recomputed by the database on every query; nothing is
    cached here.  Reports are restricted to authorities and admins.
    """

    def __init__(self, user: User) -> None:
        from accounts.models import STAFF_ROLES

        require_role(user, *STAFF_ROLES, message="Only authorities and admins can view reports.")
        self.user = user

    # ── Public API ──────────────────────────────────────────────────

    def complaints_by_status(self) -> list[dict[str, Any]]:
        """
        One row per status that currently has complaints, with its
        human-readable label.  Statuses with no complaints are omitted,
        matching the underlying ``GROUP BY``.
        """
        from complaints.models import ComplaintStatus

        ComplaintStatusTotal = apps.get_model("complaints", "ComplaintStatusTotal")
        label_map = dict(ComplaintStatus.choices)

        return [
            {
                "status": row.status,
                "label": label_map.get(row.status, row.status),
                "total": row.total,
            }
            for row in ComplaintStatusTotal.objects.order_by("status")
        ]

    def resolved_durations(self) -> dict[str, Any]:
        """
        Hours from filing to resolution for every complaint currently in
        ``resolved`` status, plus summary figures over those rows.
        """
        ResolvedDuration = apps.get_model("complaints", "ResolvedDuration")

        qs = ResolvedDuration.objects.order_by("complaint_id")
        summary = qs.aggregate(
            count=Count("complaint_id"),
            average_hours=Avg("hours_to_resolve"),
            min_hours=Min("hours_to_resolve"),
            max_hours=Max("hours_to_resolve"),
        )

        return {
            **summary,
            "results": [
                {
                    "complaint_id": row.complaint_id,
                    "hours_to_resolve": row.hours_to_resolve,
                }
                for row in qs
            ],
        }


# ════════════════════════════════════════════════════════════════════
#  System Constants Service
# ════════════════════════════════════════════════════════════════════

class SystemConstantsService:
    """
    Gathers all enumerated domains into a single dict for API clients.

    This service is **stateless** — it does not depend on the requesting
    user.  All constants are public information needed by clients to
    render dropdowns and labels.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        """Return all system constants as a dict."""
        from accounts.models import UserRole, UserStatus
        from complaints.models import ComplaintStatus, EvidenceType, PriorityLevel

        to_list = SystemConstantsService._choices_to_list

        return {
            "user_roles": to_list(UserRole),
            "user_statuses": to_list(UserStatus),
            "complaint_statuses": to_list(ComplaintStatus),
            "evidence_types": to_list(EvidenceType),
            "priority_levels": to_list(PriorityLevel),
        }

    @staticmethod
    def _choices_to_list(
        choices_class: type,
    ) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` class to a list of
        ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]


# ═══════════════════════════════════════════════════════════════════
#  Notification Service
# ═══════════════════════════════════════════════════════════════════

class NotificationService:
    """
    Handles listing a user's notifications and stamping them delivered.

    Creation lives in ``core.domain.notifications.NotificationService``.
    """

    def __init__(self, user: Any) -> None:
        self.user = user

    def list_notifications(self, *, undelivered_only: bool = False) -> QuerySet[Notification]:
        """Return ``self.user``'s notifications, most recent first."""
        from core.models import Notification

        qs = Notification.objects.filter(user=self.user)
        if undelivered_only:
            qs = qs.filter(delivered_at__isnull=True)
        return qs.order_by("-created_at", "-id")

    def mark_as_delivered(self, notification_id: int) -> Notification:
        """
        Stamp ``delivered_at`` on one of ``self.user``'s notifications.

        Calling it again keeps the first delivery time.

        Raises:
            NotFound: If the notification does not exist or belongs to
                      another user.
        """
        from core.models import Notification

        try:
            notification = Notification.objects.get(pk=notification_id, user=self.user)
        except Notification.DoesNotExist:
            raise NotFound(f"Notification with id {notification_id} not found.")

        if not notification.is_delivered:
            notification.delivered_at = timezone.now()
            notification.save(update_fields=["delivered_at"])
            logger.info(
                "Notification #%d marked delivered for user #%d",
                notification.pk,
                self.user.pk,
            )
        return notification
