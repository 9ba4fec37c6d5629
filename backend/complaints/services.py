"""
Complaints app Service Layer.

This module is the **single source of truth** for all business logic
in the ``complaints`` app.  Views must remain thin: validate input via
serializers, call a service method, and return the result wrapped in
a DRF ``Response``.

Architecture
------------
- ``ComplaintQueryService``        — Role-scoped querysets & retrieval.
- ``ComplaintCreationService``     — Filing a new complaint.
- ``ComplaintStatusService``       — Status transitions + audit log.
- ``ComplaintAssignmentService``   — One-active-assignment handover.
- ``ComplaintNotificationService`` — Post-commit notifications for the API.
- ``ComplaintEvidenceService``     — Evidence attachments.
- ``ComplaintCommentService``      — Public and internal comments.
- ``ComplaintDeletionService``     — Admin hard delete (cascades).
- ``CatalogService``               — Zones and incident categories.

Status model
------------
Any ``authority`` or ``admin`` user may move a complaint to any value of
``ComplaintStatus``; there is no allowed-transition graph.  Every change
appends a ``ComplaintStatusLog`` row in the same transaction that
updates ``Complaint.status``, and ``resolved_at`` is stamped the first
time the complaint reaches ``resolved``.

Assignment model
----------------
Exactly zero or one ``ComplaintAssignment`` per complaint has
``is_active=True``.  Reassignment closes the previous row
(``unassigned_at``) and opens a new one while holding the complaint row
lock; the partial unique constraint ``uq_assignment_active`` rejects any
concurrent second activation, in which case the whole operation is
retried up to ``settings.COMPLAINT_ASSIGNMENT_MAX_RETRIES`` times.
"""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q, QuerySet, RestrictedError
from django.utils import timezone

from accounts.models import STAFF_ROLES, UserRole
from core.domain.access import ScopeConfig, apply_role_scope, require_role
from core.domain.exceptions import (
    Conflict,
    DomainError,
    InvalidAssignee,
    NotFound,
    PermissionDenied,
)
from core.domain.notifications import NotificationService
from core.domain.transactions import lock_for_update, run_with_retry

from .models import (
    Complaint,
    ComplaintAssignment,
    ComplaintComment,
    ComplaintEvidence,
    ComplaintStatus,
    ComplaintStatusLog,
    IncidentCategory,
    Zone,
)

User = get_user_model()
logger = logging.getLogger(__name__)

DEFAULT_ASSIGNMENT_RETRIES = 3

# ── Role-scoped queryset configuration for complaint visibility ─────
_COMPLAINT_SCOPE_CONFIG: ScopeConfig = {
    UserRole.ADMIN: lambda qs, u: qs,
    UserRole.AUTHORITY: lambda qs, u: qs,
    UserRole.CITIZEN: lambda qs, u: qs.filter(Q(is_public=True) | Q(reporter=u)),
}


def _get_acting_user(user_id: int) -> User:
    try:
        return User.objects.get(pk=user_id)
    except User.DoesNotExist:
        raise NotFound(f"User with id {user_id} not found.")


def _is_staff(user: Any) -> bool:
    return bool(getattr(user, "can_triage", False))


# ═══════════════════════════════════════════════════════════════════
#  Complaint Query Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintQueryService:
    """
    Constructs role-scoped, filtered querysets for listing complaints.

    Citizens see public complaints plus their own private ones;
    authorities and admins see everything.  A complaint outside the
    caller's scope is reported as *not found*, never as forbidden.
    """

    @staticmethod
    def get_filtered_queryset(
        requesting_user: Any,
        filters: dict[str, Any],
    ) -> QuerySet[Complaint]:
        """
        Build a role-scoped, filtered queryset of ``Complaint`` objects.

        Parameters
        ----------
        requesting_user : User
            From ``request.user``.
        filters : dict
            Cleaned query-parameter dict from ``ComplaintFilterSerializer``.
            Supported keys:
            - ``status``          : str  (``ComplaintStatus`` value)
            - ``priority``        : str  (``PriorityLevel`` value)
            - ``category``        : int  (category PK)
            - ``zone``            : int  (zone PK)
            - ``reporter``        : int  (user PK)
            - ``assigned_to_me``  : bool (active assignment to the caller)
            - ``search``          : str  (title / description / address)

        Returns
        -------
        QuerySet[Complaint]
        """
        qs = apply_role_scope(
            Complaint.objects.all(),
            requesting_user,
            scope_config=_COMPLAINT_SCOPE_CONFIG,
        )

        if filters.get("status"):
            qs = qs.filter(status=filters["status"])
        if filters.get("priority"):
            qs = qs.filter(priority=filters["priority"])
        if filters.get("category"):
            qs = qs.filter(category_id=filters["category"])
        if filters.get("zone"):
            qs = qs.filter(zone_id=filters["zone"])
        if filters.get("reporter"):
            qs = qs.filter(reporter_id=filters["reporter"])
        if filters.get("assigned_to_me"):
            qs = qs.filter(
                assignments__authority=requesting_user,
                assignments__is_active=True,
            )
        if filters.get("search"):
            term = filters["search"]
            qs = qs.filter(
                Q(title__icontains=term)
                | Q(description__icontains=term)
                | Q(address__icontains=term)
            )

        return qs.select_related("reporter", "category", "zone").order_by("-created_at", "-id")

    @staticmethod
    def get_visible_complaint(requesting_user: Any, complaint_id: int) -> Complaint:
        """
        Return a single complaint if the caller may see it.

        Raises
        ------
        NotFound
            If the complaint does not exist or is outside the caller's
            scope.
        """
        qs = apply_role_scope(
            Complaint.objects.select_related("reporter", "category", "zone"),
            requesting_user,
            scope_config=_COMPLAINT_SCOPE_CONFIG,
        )
        try:
            return qs.get(pk=complaint_id)
        except Complaint.DoesNotExist:
            raise NotFound(f"Complaint with id {complaint_id} not found.")

    @staticmethod
    def get_status_history(requesting_user: Any, complaint_id: int) -> QuerySet[ComplaintStatusLog]:
        """Status log of a visible complaint, oldest entry first."""
        complaint = ComplaintQueryService.get_visible_complaint(requesting_user, complaint_id)
        return (
            complaint.status_logs
            .select_related("changed_by")
            .order_by("changed_at", "id")
        )

    @staticmethod
    def get_assignment_history(requesting_user: Any, complaint_id: int) -> QuerySet[ComplaintAssignment]:
        """Every assignment (active and closed) of a visible complaint."""
        complaint = ComplaintQueryService.get_visible_complaint(requesting_user, complaint_id)
        return (
            complaint.assignments
            .select_related("authority")
            .order_by("assigned_at", "id")
        )


# ═══════════════════════════════════════════════════════════════════
#  Complaint Creation Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintCreationService:
    """Handles filing a new complaint."""

    @staticmethod
    @transaction.atomic
    def create_complaint(
        validated_data: dict[str, Any],
        requesting_user: Any,
    ) -> Complaint:
        """
        File a new complaint on behalf of ``requesting_user``.

        The complaint starts in ``created`` status with no assignment.

        Parameters
        ----------
        validated_data : dict
            Cleaned data from ``ComplaintCreateSerializer``.
            Required: ``title``, ``description``, ``category``.
            Optional: ``priority``, ``latitude``, ``longitude``,
            ``address``, ``zone``, ``is_public``.
        requesting_user : User
            Becomes the complaint's ``reporter``.

        Raises
        ------
        DomainError
            If only one of ``latitude`` / ``longitude`` is given.
        """
        data = dict(validated_data)
        has_lat = data.get("latitude") is not None
        has_lng = data.get("longitude") is not None
        if has_lat != has_lng:
            raise DomainError("Latitude and longitude must be provided together.")

        complaint = Complaint.objects.create(
            reporter=requesting_user,
            status=ComplaintStatus.CREATED,
            **data,
        )

        logger.info(
            "Complaint #%d filed by user #%d in category #%d",
            complaint.pk,
            requesting_user.pk,
            complaint.category_id,
        )
        return complaint


# ═══════════════════════════════════════════════════════════════════
#  Complaint Status Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintStatusService:
    """Moves complaints between statuses and keeps the audit log."""

    @staticmethod
    def change_status(
        complaint_id: int,
        acting_user_id: int,
        new_status: str,
        comment: str | None = None,
    ) -> Complaint:
        """Transition a complaint and return it; see ``record_transition``."""
        return ComplaintStatusService.record_transition(
            complaint_id, acting_user_id, new_status, comment,
        ).complaint

    @staticmethod
    @transaction.atomic
    def record_transition(
        complaint_id: int,
        acting_user_id: int,
        new_status: str,
        comment: str | None = None,
    ) -> ComplaintStatusLog:
        """
        Transition a complaint to ``new_status``.

        Locks the complaint row, appends a ``ComplaintStatusLog`` entry
        ``(from_status, new_status, actor, comment)`` and updates the
        complaint in the same transaction.

        Parameters
        ----------
        complaint_id : int
        acting_user_id : int
            Must reference an ``authority`` or ``admin`` user.
        new_status : str
            Any ``ComplaintStatus`` value.  The same value as the current
            status is accepted and still logged.
        comment : str, optional
            Free-text note stored on the log entry.

        Returns
        -------
        ComplaintStatusLog
            The new log entry; ``entry.complaint`` is the updated complaint.

        Raises
        ------
        DomainError
            If ``new_status`` is not a ``ComplaintStatus`` value.
        NotFound
            If the complaint or the acting user does not exist.
        PermissionDenied
            If the acting user is neither an authority nor an admin.
        """
        if new_status not in ComplaintStatus.values:
            raise DomainError(f"'{new_status}' is not a valid complaint status.")

        complaint = lock_for_update(Complaint, complaint_id)
        actor = _get_acting_user(acting_user_id)
        require_role(
            actor,
            *STAFF_ROLES,
            message=f"User {actor.pk} is not allowed to change complaint status.",
        )

        from_status = complaint.status
        entry = ComplaintStatusLog.objects.create(
            complaint=complaint,
            from_status=from_status,
            to_status=new_status,
            changed_by=actor,
            comment=comment,
        )

        complaint.status = new_status
        update_fields = ["status", "updated_at"]
        if complaint.is_resolved and complaint.resolved_at is None:
            complaint.resolved_at = timezone.now()
            update_fields.append("resolved_at")
        complaint.save(update_fields=update_fields)

        logger.info(
            "Complaint #%d status %s → %s by user #%d",
            complaint.pk,
            from_status,
            new_status,
            actor.pk,
        )
        return entry


# ═══════════════════════════════════════════════════════════════════
#  Complaint Assignment Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintAssignmentService:
    """Hands a complaint over to an authority user."""

    @staticmethod
    def assign_authority(
        complaint_id: int,
        authority_user_id: int,
        acting_user_id: int,
    ) -> ComplaintAssignment:
        """
        Make ``authority_user_id`` the single active handler of a complaint.

        Any currently active assignment is closed (``is_active=False``,
        ``unassigned_at=now``) before the new one is inserted, all while
        the complaint row is locked.  No status-log entry is written.

        Returns
        -------
        ComplaintAssignment
            The new active assignment.

        Raises
        ------
        NotFound
            If the acting user or the complaint does not exist.
        PermissionDenied
            If the acting user is neither an authority nor an admin.
        InvalidAssignee
            If the target user does not exist or is not an authority.
        Conflict
            If concurrent reassignments kept winning the race after all
            retries.
        """
        actor = _get_acting_user(acting_user_id)
        require_role(
            actor,
            *STAFF_ROLES,
            message=f"User {actor.pk} is not allowed to assign complaints.",
        )

        assignee = User.objects.filter(pk=authority_user_id).first()
        if assignee is None or not assignee.is_authority:
            raise InvalidAssignee(assignee_id=authority_user_id)

        attempts = getattr(
            settings, "COMPLAINT_ASSIGNMENT_MAX_RETRIES", DEFAULT_ASSIGNMENT_RETRIES,
        )
        assignment = run_with_retry(
            ComplaintAssignmentService._reassign,
            complaint_id,
            assignee,
            attempts=attempts,
            conflict_message=(
                f"Complaint {complaint_id} is being reassigned concurrently; "
                "please retry."
            ),
        )

        logger.info(
            "Complaint #%d assigned to authority #%d by user #%d",
            complaint_id,
            assignee.pk,
            actor.pk,
        )
        return assignment

    @staticmethod
    def _reassign(complaint_id: int, assignee: Any) -> ComplaintAssignment:
        """One attempt: must run inside ``transaction.atomic``."""
        complaint = lock_for_update(Complaint, complaint_id)

        ComplaintAssignment.objects.filter(
            complaint=complaint,
            is_active=True,
        ).update(is_active=False, unassigned_at=timezone.now())

        return ComplaintAssignment.objects.create(
            complaint=complaint,
            authority=assignee,
            is_active=True,
        )


# ═══════════════════════════════════════════════════════════════════
#  Complaint Notification Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintNotificationService:
    """
    Queues notifications after a status change or assignment has been
    committed.  Called by the views, never from inside the transactional
    operations above.
    """

    @staticmethod
    def status_changed(entry: ComplaintStatusLog, actor: Any) -> None:
        """Tell the reporter about one status-log entry."""
        complaint = entry.complaint
        NotificationService.create(
            actor=actor,
            recipients=complaint.reporter,
            template_code="complaint_status_changed",
            payload={
                "complaint_id": complaint.pk,
                "title": complaint.title,
                "from_status": entry.from_status,
                "to_status": entry.to_status,
            },
            complaint=complaint,
        )

    @staticmethod
    def assigned(assignment: ComplaintAssignment, actor: Any) -> None:
        NotificationService.create(
            actor=actor,
            recipients=assignment.authority,
            template_code="complaint_assigned",
            payload={
                "complaint_id": assignment.complaint_id,
                "title": assignment.complaint.title,
            },
            complaint=assignment.complaint,
        )


# ═══════════════════════════════════════════════════════════════════
#  Evidence Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintEvidenceService:
    """Attach and list evidence (stored by URL) for a complaint."""

    @staticmethod
    def list_evidence(requesting_user: Any, complaint_id: int) -> QuerySet[ComplaintEvidence]:
        complaint = ComplaintQueryService.get_visible_complaint(requesting_user, complaint_id)
        return complaint.evidence.order_by("created_at", "id")

    @staticmethod
    @transaction.atomic
    def add_evidence(
        requesting_user: Any,
        complaint_id: int,
        validated_data: dict[str, Any],
    ) -> ComplaintEvidence:
        """
        Attach evidence to a complaint.

        Only the reporter and staff (authority/admin) may add evidence.

        Raises
        ------
        NotFound
            If the complaint is not visible to the caller.
        PermissionDenied
            If the caller is neither the reporter nor staff.
        """
        complaint = ComplaintQueryService.get_visible_complaint(requesting_user, complaint_id)
        if complaint.reporter_id != requesting_user.pk and not _is_staff(requesting_user):
            raise PermissionDenied("Only the reporter or staff can attach evidence.")

        evidence = ComplaintEvidence.objects.create(complaint=complaint, **validated_data)

        logger.info(
            "Evidence #%d (%s) added to complaint #%d by user #%d",
            evidence.pk,
            evidence.type,
            complaint.pk,
            requesting_user.pk,
        )
        return evidence


# ═══════════════════════════════════════════════════════════════════
#  Comment Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintCommentService:
    """
    Comments on complaints.  Internal comments are staff-only notes and
    are never returned to citizens.
    """

    @staticmethod
    def list_comments(requesting_user: Any, complaint_id: int) -> QuerySet[ComplaintComment]:
        complaint = ComplaintQueryService.get_visible_complaint(requesting_user, complaint_id)
        qs = complaint.comments.select_related("author").order_by("created_at", "id")
        if not _is_staff(requesting_user):
            qs = qs.filter(is_internal=False)
        return qs

    @staticmethod
    @transaction.atomic
    def add_comment(
        requesting_user: Any,
        complaint_id: int,
        body: str,
        is_internal: bool = False,
    ) -> ComplaintComment:
        """
        Post a comment on a complaint.

        Citizens may only comment on their own complaints and never
        internally.  A public comment by someone other than the reporter
        notifies the reporter.

        Raises
        ------
        NotFound
            If the complaint is not visible to the caller.
        PermissionDenied
            If a citizen comments on someone else's complaint or tries to
            post an internal comment.
        """
        complaint = ComplaintQueryService.get_visible_complaint(requesting_user, complaint_id)
        staff = _is_staff(requesting_user)

        if is_internal and not staff:
            raise PermissionDenied("Only authorities and admins can post internal comments.")
        if not staff and complaint.reporter_id != requesting_user.pk:
            raise PermissionDenied("You can only comment on your own complaints.")

        comment = ComplaintComment.objects.create(
            complaint=complaint,
            author=requesting_user,
            body=body,
            is_internal=is_internal,
        )

        if not is_internal:
            NotificationService.create(
                actor=requesting_user,
                recipients=complaint.reporter,
                template_code="complaint_commented",
                payload={"complaint_id": complaint.pk, "comment_id": comment.pk},
                complaint=complaint,
            )

        logger.info(
            "Comment #%d (internal=%s) on complaint #%d by user #%d",
            comment.pk,
            is_internal,
            complaint.pk,
            requesting_user.pk,
        )
        return comment


# ═══════════════════════════════════════════════════════════════════
#  Deletion Service
# ═══════════════════════════════════════════════════════════════════


class ComplaintDeletionService:

    @staticmethod
    @transaction.atomic
    def delete_complaint(requesting_user: Any, complaint_id: int) -> None:
        """
        Hard-delete a complaint together with its evidence, comments,
        status log, assignments and notifications.  Admin only.
        """
        require_role(requesting_user, UserRole.ADMIN, message="Only admins can delete complaints.")
        complaint = lock_for_update(Complaint, complaint_id)
        complaint.delete()

        logger.info("Complaint #%d deleted by admin #%d", complaint_id, requesting_user.pk)


# ═══════════════════════════════════════════════════════════════════
#  Catalog Service (zones & incident categories)
# ═══════════════════════════════════════════════════════════════════


class CatalogService:
    """
    Reference data used when filing complaints.  Anyone authenticated
    may read; only admins may write.
    """

    # ── Zones ────────────────────────────────────────────────────────

    @staticmethod
    def list_zones() -> QuerySet[Zone]:
        return Zone.objects.select_related("parent").order_by("name", "id")

    @staticmethod
    def get_zone(zone_id: int) -> Zone:
        try:
            return Zone.objects.select_related("parent").get(pk=zone_id)
        except Zone.DoesNotExist:
            raise NotFound(f"Zone with id {zone_id} not found.")

    @staticmethod
    def _check_zone_parent(zone: Zone | None, parent: Zone | None) -> None:
        """Reject a parent that would make ``zone`` its own ancestor."""
        if zone is None or parent is None:
            return
        node = parent
        while node is not None:
            if node.pk == zone.pk:
                raise DomainError("A zone cannot be its own ancestor.")
            node = node.parent

    @staticmethod
    @transaction.atomic
    def create_zone(requesting_user: Any, validated_data: dict[str, Any]) -> Zone:
        require_role(requesting_user, UserRole.ADMIN, message="Only admins can manage zones.")
        try:
            with transaction.atomic():
                zone = Zone.objects.create(**validated_data)
        except IntegrityError:
            raise Conflict("A zone with this code already exists.")
        logger.info("Zone #%d (%s) created by admin #%d", zone.pk, zone.name, requesting_user.pk)
        return zone

    @staticmethod
    @transaction.atomic
    def update_zone(
        requesting_user: Any,
        zone_id: int,
        validated_data: dict[str, Any],
    ) -> Zone:
        require_role(requesting_user, UserRole.ADMIN, message="Only admins can manage zones.")
        zone = CatalogService.get_zone(zone_id)
        if "parent" in validated_data:
            CatalogService._check_zone_parent(zone, validated_data["parent"])

        for key, value in validated_data.items():
            setattr(zone, key, value)
        try:
            with transaction.atomic():
                zone.save()
        except IntegrityError:
            raise Conflict("A zone with this code already exists.")

        logger.info("Zone #%d updated by admin #%d", zone.pk, requesting_user.pk)
        return zone

    @staticmethod
    @transaction.atomic
    def delete_zone(requesting_user: Any, zone_id: int) -> None:
        """Delete a zone; child zones and complaints are detached."""
        require_role(requesting_user, UserRole.ADMIN, message="Only admins can manage zones.")
        zone = CatalogService.get_zone(zone_id)
        zone.delete()
        logger.info("Zone #%d deleted by admin #%d", zone_id, requesting_user.pk)

    # ── Incident categories ──────────────────────────────────────────

    @staticmethod
    def list_categories() -> QuerySet[IncidentCategory]:
        return IncidentCategory.objects.order_by("name")

    @staticmethod
    def get_category(category_id: int) -> IncidentCategory:
        try:
            return IncidentCategory.objects.get(pk=category_id)
        except IncidentCategory.DoesNotExist:
            raise NotFound(f"Incident category with id {category_id} not found.")

    @staticmethod
    @transaction.atomic
    def create_category(requesting_user: Any, validated_data: dict[str, Any]) -> IncidentCategory:
        require_role(requesting_user, UserRole.ADMIN, message="Only admins can manage categories.")
        try:
            with transaction.atomic():
                category = IncidentCategory.objects.create(**validated_data)
        except IntegrityError:
            raise Conflict("An incident category with this name already exists.")
        logger.info("Category #%d (%s) created by admin #%d", category.pk, category.name, requesting_user.pk)
        return category

    @staticmethod
    @transaction.atomic
    def update_category(
        requesting_user: Any,
        category_id: int,
        validated_data: dict[str, Any],
    ) -> IncidentCategory:
        require_role(requesting_user, UserRole.ADMIN, message="Only admins can manage categories.")
        category = CatalogService.get_category(category_id)
        for key, value in validated_data.items():
            setattr(category, key, value)
        try:
            with transaction.atomic():
                category.save()
        except IntegrityError:
            raise Conflict("An incident category with this name already exists.")
        logger.info("Category #%d updated by admin #%d", category.pk, requesting_user.pk)
        return category

    @staticmethod
    @transaction.atomic
    def delete_category(requesting_user: Any, category_id: int) -> None:
        """
        Delete an incident category.

        Raises
        ------
        Conflict
            If complaints are still filed under the category.
        """
        require_role(requesting_user, UserRole.ADMIN, message="Only admins can manage categories.")
        category = CatalogService.get_category(category_id)
        try:
            category.delete()
        except RestrictedError:
            raise Conflict(
                f"Incident category {category_id} is used by complaints and cannot be deleted."
            )
        logger.info("Category #%d deleted by admin #%d", category_id, requesting_user.pk)
