"""
Core app serializers.

Response serializers for the reporting, constants, and notification
endpoints.  Reporting and constants payloads are plain dicts built by
``core.services``; only ``NotificationSerializer`` wraps a model.
"""

from __future__ import annotations

from rest_framework import serializers


# ════════════════════════════════════════════════════════════════════
#  Reports
# ════════════════════════════════════════════════════════════════════

class ComplaintsByStatusSerializer(serializers.Serializer):
    """One row of ``vw_complaints_by_status``."""

    status = serializers.CharField(help_text="Complaint status value.")
    label = serializers.CharField(help_text="Human-readable status label.")
    total = serializers.IntegerField(help_text="Number of complaints in this status.")


class ResolvedDurationItemSerializer(serializers.Serializer):
    complaint_id = serializers.IntegerField()
    hours_to_resolve = serializers.FloatField(
        help_text="Hours between filing and resolution.",
    )


class ResolvedDurationsSerializer(serializers.Serializer):
    """
    Response for ``GET /api/core/reports/resolved-durations/``.

    Summary fields are ``null`` when no complaint is resolved yet.
    """

    count = serializers.IntegerField()
    average_hours = serializers.FloatField(allow_null=True)
    min_hours = serializers.FloatField(allow_null=True)
    max_hours = serializers.FloatField(allow_null=True)
    results = ResolvedDurationItemSerializer(many=True)


# ════════════════════════════════════════════════════════════════════
#  System Constants / Enums
# ════════════════════════════════════════════════════════════════════

class ChoiceItemSerializer(serializers.Serializer):
    """
    A single value/label pair for one enum option.

    Example::

        {"value": "in_progress", "label": "In Progress"}
    """

    value = serializers.CharField(
        help_text="Machine-readable value to send in API requests.",
    )
    label = serializers.CharField(
        help_text="Human-readable display label.",
    )


class SystemConstantsSerializer(serializers.Serializer):
    """Response for ``GET /api/core/constants/``."""

    user_roles = ChoiceItemSerializer(many=True)
    user_statuses = ChoiceItemSerializer(many=True)
    complaint_statuses = ChoiceItemSerializer(many=True)
    evidence_types = ChoiceItemSerializer(many=True)
    priority_levels = ChoiceItemSerializer(many=True)


# ════════════════════════════════════════════════════════════════════
#  Notifications
# ════════════════════════════════════════════════════════════════════

class NotificationSerializer(serializers.Serializer):
    """Read-only representation of a queued ``Notification``."""

    id = serializers.IntegerField(read_only=True)
    complaint_id = serializers.IntegerField(read_only=True, allow_null=True)
    channel = serializers.CharField(read_only=True)
    template_code = serializers.CharField(read_only=True)
    payload = serializers.JSONField(read_only=True, allow_null=True)
    delivered_at = serializers.DateTimeField(read_only=True, allow_null=True)
    created_at = serializers.DateTimeField(read_only=True)
