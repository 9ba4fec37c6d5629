"""
core.domain.notifications — writes ``Notification`` rows for complaint events.

Views call this after the service transaction has committed.

Notes
-----
* **Synchronous** — rows are written in the calling thread.  Delivery
  (e-mail, push, ...) is a separate concern that reads undelivered rows
  and stamps ``delivered_at``.
* **Recipients** — one ``User`` or any iterable; ``None`` entries and
  the actor are dropped.
* **Template codes** — the message text is rendered by the delivery
  side from ``template_code`` + ``payload``; unknown codes are accepted
  but logged.

Usage::

    from core.domain.notifications import NotificationService

    NotificationService.create(
        actor=request.user,
        recipients=complaint.reporter,
        template_code="complaint_status_changed",
        payload={"from_status": "created", "to_status": "validated"},
        complaint=complaint,
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

from django.db import models

if TYPE_CHECKING:
    from accounts.models import User
    from complaints.models import Complaint
    from core.models import Notification

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "email"

# template_code → human-readable subject used by delivery workers.
TEMPLATES: dict[str, str] = {
    "complaint_status_changed": "Your complaint changed status",
    "complaint_assigned":       "A complaint was assigned to you",
    "complaint_commented":      "New comment on your complaint",
}


class NotificationService:
    """Fan-out of one event to its recipients."""

    @classmethod
    def create(
        cls,
        *,
        actor: User,
        recipients: User | Iterable[User],
        template_code: str,
        payload: dict[str, Any] | None = None,
        complaint: Complaint | None = None,
        channel: str = DEFAULT_CHANNEL,
    ) -> list[Notification]:
        """
        Create one ``Notification`` per recipient.

        Args:
            actor:         The user who performed the action.  Never
                           notified about their own actions.
            recipients:    A single ``User`` or iterable of ``User``
                           instances.
            template_code: Key into ``TEMPLATES``.
            payload:       JSON-serialisable context for the template.
            complaint:     Optional complaint the notification is about.
            channel:       Delivery channel (``email`` by default).

        Returns:
            List of created ``Notification`` instances.
        """
        from core.models import Notification  # deferred until the app registry is ready

        if isinstance(recipients, models.Model):
            recipients = [recipients]
        else:
            recipients = list(recipients)

        recipients = [r for r in recipients if r is not None and r.pk != actor.pk]
        if not recipients:
            logger.debug(
                "No recipients for template=%s by actor=%s",
                template_code,
                actor.pk,
            )
            return []

        if template_code not in TEMPLATES:
            logger.warning("Unknown notification template_code=%s", template_code)

        notifications = Notification.objects.bulk_create(
            [
                Notification(
                    user=recipient,
                    complaint=complaint,
                    channel=channel,
                    template_code=template_code,
                    payload=payload,
                )
                for recipient in recipients
            ]
        )

        logger.info(
            "Created %d notification(s) [%s] by actor=%s",
            len(notifications),
            template_code,
            actor.pk,
        )
        return notifications
