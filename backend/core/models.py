"""
Core app models.

Provides abstract base models and the cross-app ``Notification`` table.
"""

from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """
    Abstract base model that provides self-updating ``created_at`` and
    ``updated_at`` timestamp fields for every concrete child model.

    ``updated_at`` is refreshed on every ``save()``; services that use
    ``update_fields`` must list it explicitly.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
    )

    class Meta:
        abstract = True


class Notification(models.Model):
    """
    Outbound message queued for a user about one of their complaints
    (status change, new assignment, ...).

    Rows are written by ``core.domain.notifications.NotificationService``;
    a delivery worker (out of scope) stamps ``delivered_at`` once the
    message has left through ``channel``.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
        verbose_name="Recipient",
    )
    complaint = models.ForeignKey(
        "complaints.Complaint",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notifications",
        verbose_name="Complaint",
    )
    channel = models.CharField(
        max_length=30,
        default="email",
        verbose_name="Channel",
    )
    template_code = models.CharField(
        max_length=60,
        verbose_name="Template Code",
    )
    payload = models.JSONField(
        null=True,
        blank=True,
        verbose_name="Payload",
    )
    delivered_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Delivered At",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )

    class Meta:
        db_table = "notifications"
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="idx_notifications_user"),
        ]

    def __str__(self):
        return f"[{self.user_id}] {self.template_code}"

    @property
    def is_delivered(self) -> bool:
        return self.delivered_at is not None
