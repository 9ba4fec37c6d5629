"""
Complaints app serializers.

Contains all Request and Response serializers for the Complaints API.
Serializers handle field definitions, read/write constraints, and
field-level validation only.  **No business logic or status transitions
live here** — those belong in ``services.py``.

Structure
---------
1. Filter / query-param serializers
2. Complaint read serializers (list, detail)
3. Complaint write serializers (create, status change, assignment)
4. Sub-resource serializers (status log, assignment, evidence, comment)
5. Catalog serializers (zone, category)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from rest_framework import serializers

from .models import (
    Complaint,
    ComplaintAssignment,
    ComplaintComment,
    ComplaintEvidence,
    ComplaintStatus,
    ComplaintStatusLog,
    EvidenceType,
    IncidentCategory,
    PriorityLevel,
    Zone,
)


class _UserSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    full_name = serializers.CharField()
    role = serializers.CharField()


# ═══════════════════════════════════════════════════════════════════
#  1. Filter / Query-Parameter Serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintFilterSerializer(serializers.Serializer):
    """
    Validates query-parameter filters for ``GET /api/complaints/``.

    All fields are optional.  The view passes the validated dict directly
    to ``ComplaintQueryService.get_filtered_queryset``.
    """

    status = serializers.ChoiceField(choices=ComplaintStatus.choices, required=False)
    priority = serializers.ChoiceField(choices=PriorityLevel.choices, required=False)
    category = serializers.IntegerField(required=False, min_value=1)
    zone = serializers.IntegerField(required=False, min_value=1)
    reporter = serializers.IntegerField(required=False, min_value=1)
    assigned_to_me = serializers.BooleanField(default=False)
    search = serializers.CharField(required=False, max_length=140, allow_blank=False)


# ═══════════════════════════════════════════════════════════════════
#  2. Complaint Read Serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintListSerializer(serializers.ModelSerializer):
    """Compact representation for the list endpoint."""

    status_display = serializers.CharField(source="get_status_display", read_only=True)
    category_name = serializers.CharField(source="category.name", read_only=True)

    class Meta:
        model = Complaint
        fields = [
            "id",
            "title",
            "status",
            "status_display",
            "priority",
            "category",
            "category_name",
            "zone",
            "reporter",
            "is_public",
            "created_at",
            "resolved_at",
        ]
        read_only_fields = fields


class ComplaintDetailSerializer(serializers.ModelSerializer):
    """
    Full complaint representation including the reporter summary and the
    currently active assignment (if any).
    """

    status_display = serializers.CharField(source="get_status_display", read_only=True)
    reporter = _UserSummarySerializer(read_only=True)
    category_name = serializers.CharField(source="category.name", read_only=True)
    zone_name = serializers.CharField(source="zone.name", read_only=True, default=None)
    active_assignment = serializers.SerializerMethodField()

    class Meta:
        model = Complaint
        fields = [
            "id",
            "title",
            "description",
            "status",
            "status_display",
            "priority",
            "category",
            "category_name",
            "zone",
            "zone_name",
            "latitude",
            "longitude",
            "address",
            "is_public",
            "reporter",
            "active_assignment",
            "created_at",
            "updated_at",
            "resolved_at",
        ]
        read_only_fields = fields

    def get_active_assignment(self, obj: Complaint) -> dict | None:
        assignment = obj.active_assignment
        if assignment is None:
            return None
        return ComplaintAssignmentSerializer(assignment).data


# ═══════════════════════════════════════════════════════════════════
#  3. Complaint Write Serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintCreateSerializer(serializers.ModelSerializer):
    """
    Validates data for filing a new complaint.

    ``reporter`` and ``status`` are set by the service, never by the
    client.
    """

    latitude = serializers.DecimalField(
        max_digits=9, decimal_places=6, required=False, allow_null=True,
        min_value=Decimal("-90"), max_value=Decimal("90"),
    )
    longitude = serializers.DecimalField(
        max_digits=9, decimal_places=6, required=False, allow_null=True,
        min_value=Decimal("-180"), max_value=Decimal("180"),
    )

    class Meta:
        model = Complaint
        fields = [
            "title",
            "description",
            "category",
            "priority",
            "latitude",
            "longitude",
            "address",
            "zone",
            "is_public",
        ]

    def validate_title(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Title may not be blank.")
        return value

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        has_lat = attrs.get("latitude") is not None
        has_lng = attrs.get("longitude") is not None
        if has_lat != has_lng:
            raise serializers.ValidationError(
                "latitude and longitude must be provided together."
            )
        return attrs


class StatusChangeSerializer(serializers.Serializer):
    """Body of ``POST /api/complaints/{id}/status/``."""

    status = serializers.ChoiceField(
        choices=ComplaintStatus.choices,
        help_text="Target status. Any value is allowed for authorities and admins.",
    )
    comment = serializers.CharField(
        allow_blank=True,
        allow_null=True,
        default=None,
        help_text="Optional note recorded in the status log.",
    )


class AssignAuthoritySerializer(serializers.Serializer):
    """Body of ``POST /api/complaints/{id}/assign/``."""

    authority_id = serializers.IntegerField(
        min_value=1,
        help_text="PK of a user with the 'authority' role.",
    )


# ═══════════════════════════════════════════════════════════════════
#  4. Sub-resource Serializers
# ═══════════════════════════════════════════════════════════════════


class ComplaintStatusLogSerializer(serializers.ModelSerializer):
    changed_by = _UserSummarySerializer(read_only=True)

    class Meta:
        model = ComplaintStatusLog
        fields = ["id", "from_status", "to_status", "changed_by", "comment", "changed_at"]
        read_only_fields = fields


class ComplaintAssignmentSerializer(serializers.ModelSerializer):
    authority = _UserSummarySerializer(read_only=True)

    class Meta:
        model = ComplaintAssignment
        fields = ["id", "complaint", "authority", "assigned_at", "unassigned_at", "is_active"]
        read_only_fields = fields


class ComplaintEvidenceSerializer(serializers.ModelSerializer):
    """Evidence is referenced by URL; uploads are handled elsewhere."""

    type = serializers.ChoiceField(choices=EvidenceType.choices, default=EvidenceType.IMAGE)
    url = serializers.URLField(max_length=2000)

    class Meta:
        model = ComplaintEvidence
        fields = ["id", "url", "type", "metadata", "created_at"]
        read_only_fields = ["id", "created_at"]

    def validate_metadata(self, value: Any) -> Any:
        if value is not None and not isinstance(value, dict):
            raise serializers.ValidationError("metadata must be a JSON object.")
        return value


class ComplaintCommentSerializer(serializers.ModelSerializer):
    author = _UserSummarySerializer(read_only=True)

    class Meta:
        model = ComplaintComment
        fields = ["id", "author", "body", "is_internal", "created_at"]
        read_only_fields = ["id", "author", "created_at"]

    def validate_body(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Comment body may not be blank.")
        return value


# ═══════════════════════════════════════════════════════════════════
#  5. Catalog Serializers
# ═══════════════════════════════════════════════════════════════════


class ZoneSerializer(serializers.ModelSerializer):
    parent = serializers.PrimaryKeyRelatedField(
        queryset=Zone.objects.all(),
        required=False,
        allow_null=True,
    )

    class Meta:
        model = Zone
        fields = ["id", "name", "code", "parent"]
        read_only_fields = ["id"]

    def validate_code(self, value: str | None) -> str | None:
        # Blank codes are stored as NULL so several zones may omit one.
        if value is not None and not value.strip():
            return None
        return value


class IncidentCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = IncidentCategory
        fields = ["id", "name", "description"]
        read_only_fields = ["id"]
