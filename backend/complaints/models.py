"""
Complaints app models.

Covers the urban-complaint lifecycle: a citizen files a complaint in a
category (optionally inside a zone), authorities triage it by moving it
through ``complaint_status`` values and by assigning themselves or a
colleague, and every status change is appended to an immutable log.

Also defines two unmanaged models backed by the SQL reporting views
``vw_complaints_by_status`` and ``vw_resolved_durations``.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q

from core.domain.exceptions import DomainError
from core.models import TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class ComplaintStatus(models.TextChoices):
    """
    The ``complaint_status`` domain.

    No transition graph is enforced between these values; any
    authority or admin may move a complaint to any of them.
    """

    CREATED = "created", "Created"
    VALIDATED = "validated", "Validated"
    IN_REVIEW = "in_review", "In Review"
    IN_EXECUTION = "in_execution", "In Execution"
    RESOLVED = "resolved", "Resolved"
    REJECTED = "rejected", "Rejected"
    ARCHIVED = "archived", "Archived"


class PriorityLevel(models.TextChoices):
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"


class EvidenceType(models.TextChoices):
    IMAGE = "image", "Image"
    VIDEO = "video", "Video"
    DOCUMENT = "document", "Document"


# ────────────────────────────────────────────────────────────────────
# Catalog
# ────────────────────────────────────────────────────────────────────

class Zone(models.Model):
    """
    City zone or sector.  Zones may nest (``parent``); deleting a parent
    detaches its children instead of removing them.
    """

    name = models.CharField(
        max_length=100,
        verbose_name="Name",
    )
    code = models.CharField(
        max_length=50,
        unique=True,
        null=True,
        blank=True,
        verbose_name="Code",
    )
    parent = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="children",
        verbose_name="Parent Zone",
    )

    class Meta:
        db_table = "zones"
        verbose_name = "Zone"
        verbose_name_plural = "Zones"
        ordering = ["name"]

    def __str__(self):
        return self.code or self.name


class IncidentCategory(models.Model):
    """Kind of urban incident (pothole, broken street light, ...)."""

    name = models.CharField(
        max_length=80,
        unique=True,
        verbose_name="Name",
    )
    description = models.CharField(
        max_length=200,
        blank=True,
        null=True,
        verbose_name="Description",
    )

    class Meta:
        db_table = "incident_categories"
        verbose_name = "Incident Category"
        verbose_name_plural = "Incident Categories"
        ordering = ["name"]

    def __str__(self):
        return self.name


# ────────────────────────────────────────────────────────────────────
# Complaint
# ────────────────────────────────────────────────────────────────────

class Complaint(TimeStampedModel):
    """
    Central entity of the system — a citizen's report of an urban issue.

    * ``status`` is a cached copy of the latest ``ComplaintStatusLog``
      entry, kept in sync by ``ComplaintStatusService``.
    * ``resolved_at`` is stamped the first time the complaint reaches
      ``resolved`` and is never cleared afterwards.
    """

    reporter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.RESTRICT,
        related_name="complaints",
        verbose_name="Reporter",
    )
    title = models.CharField(
        max_length=140,
        verbose_name="Title",
    )
    description = models.TextField(
        verbose_name="Description",
    )
    category = models.ForeignKey(
        IncidentCategory,
        on_delete=models.RESTRICT,
        related_name="complaints",
        verbose_name="Category",
    )
    status = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        default=ComplaintStatus.CREATED,
        verbose_name="Current Status",
    )
    priority = models.CharField(
        max_length=10,
        choices=PriorityLevel.choices,
        null=True,
        blank=True,
        verbose_name="Priority",
    )

    # ── Where the issue is ──────────────────────────────────────────
    latitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        verbose_name="Latitude",
    )
    longitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        verbose_name="Longitude",
    )
    address = models.CharField(
        max_length=200,
        null=True,
        blank=True,
        verbose_name="Address",
    )
    zone = models.ForeignKey(
        Zone,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="complaints",
        verbose_name="Zone",
    )

    is_public = models.BooleanField(
        default=True,
        verbose_name="Publicly Visible",
    )
    resolved_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Resolved At",
    )

    class Meta:
        db_table = "complaints"
        verbose_name = "Complaint"
        verbose_name_plural = "Complaints"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="idx_complaints_status"),
            models.Index(fields=["-created_at"], name="idx_complaints_created_at"),
        ]

    def __str__(self):
        return f"Complaint #{self.pk} — {self.title}"

    @property
    def is_resolved(self) -> bool:
        return self.status == ComplaintStatus.RESOLVED

    @property
    def active_assignment(self):
        """The current active ``ComplaintAssignment`` or ``None``."""
        return self.assignments.filter(is_active=True).first()


class ComplaintEvidence(models.Model):
    """A photo, video or document attached to a complaint, stored by URL."""

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="evidence",
        verbose_name="Complaint",
    )
    url = models.TextField(
        verbose_name="URL",
    )
    type = models.CharField(
        max_length=10,
        choices=EvidenceType.choices,
        default=EvidenceType.IMAGE,
        verbose_name="Evidence Type",
    )
    metadata = models.JSONField(
        null=True,
        blank=True,
        verbose_name="Metadata",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )

    class Meta:
        db_table = "complaint_evidence"
        verbose_name = "Complaint Evidence"
        verbose_name_plural = "Complaint Evidence"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.get_type_display()} for complaint #{self.complaint_id}"


# ────────────────────────────────────────────────────────────────────
# Status history
# ────────────────────────────────────────────────────────────────────

class StatusLogQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise DomainError("Complaint status log entries are immutable.")


class ComplaintStatusLog(models.Model):
    """
    Immutable audit trail of every status transition for a complaint.

    ``from_status`` is ``None`` only for entries written before the
    complaint had a status.  Ordering by ``changed_at`` reconstructs the
    full history.  Rows can only disappear together with their complaint.
    """

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="status_logs",
        verbose_name="Complaint",
    )
    from_status = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        null=True,
        blank=True,
        verbose_name="Previous Status",
    )
    to_status = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        verbose_name="New Status",
    )
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.RESTRICT,
        related_name="complaint_status_changes",
        verbose_name="Changed By",
    )
    comment = models.TextField(
        null=True,
        blank=True,
        verbose_name="Comment",
    )
    changed_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Changed At",
    )

    objects = StatusLogQuerySet.as_manager()

    class Meta:
        db_table = "complaint_status_log"
        verbose_name = "Complaint Status Log"
        verbose_name_plural = "Complaint Status Logs"
        ordering = ["changed_at", "id"]
        indexes = [
            models.Index(fields=["complaint", "-changed_at"], name="idx_statuslog_complaint_at"),
        ]

    def __str__(self):
        return f"#{self.complaint_id}: {self.from_status} → {self.to_status}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise DomainError("Complaint status log entries are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise DomainError("Complaint status log entries cannot be deleted.")


# ────────────────────────────────────────────────────────────────────
# Assignment & comments
# ────────────────────────────────────────────────────────────────────

class ComplaintAssignment(models.Model):
    """
    Links a complaint to the authority handling it over
    ``[assigned_at, unassigned_at)``.

    At most one row per complaint has ``is_active=True``; the partial
    unique constraint ``uq_assignment_active`` rejects a second one.
    """

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="assignments",
        verbose_name="Complaint",
    )
    authority = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.RESTRICT,
        related_name="complaint_assignments",
        verbose_name="Authority",
    )
    assigned_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Assigned At",
    )
    unassigned_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Unassigned At",
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name="Active",
    )

    class Meta:
        db_table = "complaint_assignments"
        verbose_name = "Complaint Assignment"
        verbose_name_plural = "Complaint Assignments"
        ordering = ["assigned_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["complaint"],
                condition=Q(is_active=True),
                name="uq_assignment_active",
            ),
        ]
        indexes = [
            models.Index(
                fields=["authority"],
                condition=Q(is_active=True),
                name="idx_assignment_authority",
            ),
        ]

    def __str__(self):
        state = "active" if self.is_active else "ended"
        return f"#{self.complaint_id} → user {self.authority_id} ({state})"


class ComplaintComment(models.Model):
    """
    Discussion entry on a complaint.  ``is_internal`` comments are
    staff-only notes hidden from citizens.
    """

    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="comments",
        verbose_name="Complaint",
    )
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.RESTRICT,
        related_name="complaint_comments",
        verbose_name="Author",
    )
    body = models.TextField(
        verbose_name="Body",
    )
    is_internal = models.BooleanField(
        default=False,
        verbose_name="Internal",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )

    class Meta:
        db_table = "complaint_comments"
        verbose_name = "Complaint Comment"
        verbose_name_plural = "Complaint Comments"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"Comment by {self.author_id} on #{self.complaint_id}"


# ────────────────────────────────────────────────────────────────────
# Reporting views (read-only, created by migration 0002)
# ────────────────────────────────────────────────────────────────────

class ComplaintStatusTotal(models.Model):
    """Row of ``vw_complaints_by_status``: number of complaints per status."""

    status = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        primary_key=True,
    )
    total = models.IntegerField()

    class Meta:
        managed = False
        db_table = "vw_complaints_by_status"
        ordering = ["status"]


class ResolvedDuration(models.Model):
    """Row of ``vw_resolved_durations``: hours from filing to resolution."""

    complaint_id = models.BigIntegerField(primary_key=True)
    hours_to_resolve = models.FloatField()

    class Meta:
        managed = False
        db_table = "vw_resolved_durations"
        ordering = ["complaint_id"]
