"""
Model-level behaviour: delete rules between tables, case-insensitive
e-mail uniqueness and the SQL reporting views.
"""

from __future__ import annotations

from datetime import timedelta

from django.db import IntegrityError, transaction
from django.db.models import RestrictedError
from django.test import TestCase

from accounts.models import User, UserRole, UserStatus
from complaints.models import (
    Complaint,
    ComplaintAssignment,
    ComplaintComment,
    ComplaintEvidence,
    ComplaintStatus,
    ComplaintStatusLog,
    ComplaintStatusTotal,
    IncidentCategory,
    ResolvedDuration,
    Zone,
)
from complaints.services import ComplaintAssignmentService, ComplaintStatusService
from core.models import Notification


class TestDeleteRules(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(
            email="rules_admin@city.test", password="Rules!Pass1", full_name="Rules Admin",
            role=UserRole.ADMIN, status=UserStatus.ACTIVE,
        )
        cls.handler = User.objects.create_user(
            email="rules_handler@city.test", password="Rules!Pass1", full_name="Rules Handler",
            role=UserRole.AUTHORITY, status=UserStatus.ACTIVE,
        )
        cls.citizen = User.objects.create_user(
            email="rules_citizen@city.test", password="Rules!Pass1", full_name="Rules Citizen",
            status=UserStatus.ACTIVE,
        )
        cls.category = IncidentCategory.objects.create(name="Trash")
        cls.zone = Zone.objects.create(name="Downtown", code="DT")

    def _populated_complaint(self) -> Complaint:
        complaint = Complaint.objects.create(
            reporter=self.citizen, title="Overflowing bins", description="-",
            category=self.category, zone=self.zone,
        )
        ComplaintEvidence.objects.create(complaint=complaint, url="https://img.test/1.jpg")
        ComplaintComment.objects.create(complaint=complaint, author=self.citizen, body="Still there")
        ComplaintStatusService.change_status(complaint.pk, self.admin.pk, ComplaintStatus.VALIDATED)
        ComplaintAssignmentService.assign_authority(complaint.pk, self.handler.pk, self.admin.pk)
        Notification.objects.create(user=self.citizen, complaint=complaint, template_code="complaint_status_changed")
        return complaint

    def test_deleting_complaint_cascades_to_children(self):
        complaint = self._populated_complaint()
        complaint.delete()

        self.assertFalse(ComplaintEvidence.objects.exists())
        self.assertFalse(ComplaintComment.objects.exists())
        self.assertFalse(ComplaintStatusLog.objects.exists())
        self.assertFalse(ComplaintAssignment.objects.exists())
        self.assertFalse(Notification.objects.exists())

    def test_deleting_reporter_is_restricted(self):
        self._populated_complaint()
        with self.assertRaises(RestrictedError):
            with transaction.atomic():
                self.citizen.delete()
        self.assertTrue(User.objects.filter(pk=self.citizen.pk).exists())

    def test_deleting_assigned_authority_is_restricted(self):
        self._populated_complaint()
        with self.assertRaises(RestrictedError):
            with transaction.atomic():
                self.handler.delete()

    def test_deleting_category_in_use_is_restricted(self):
        self._populated_complaint()
        with self.assertRaises(RestrictedError):
            with transaction.atomic():
                self.category.delete()

    def test_deleting_zone_detaches_complaints(self):
        complaint = self._populated_complaint()
        self.zone.delete()
        complaint.refresh_from_db()
        self.assertIsNone(complaint.zone_id)

    def test_deleting_parent_zone_orphans_children(self):
        parent = Zone.objects.create(name="North")
        child = Zone.objects.create(name="North-East", parent=parent)
        parent.delete()
        child.refresh_from_db()
        self.assertIsNone(child.parent_id)


class TestUserEmailUniqueness(TestCase):

    def test_email_is_stored_lowercase(self):
        user = User.objects.create_user(email="  Mixed.Case@City.Test ", password="x", full_name="Mixed")
        self.assertEqual(user.email, "mixed.case@city.test")

    def test_case_variant_is_rejected(self):
        User.objects.create_user(email="dup@city.test", password="x", full_name="First")
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                User.objects.create_user(email="DUP@City.Test", password="x", full_name="Second")

    def test_suspended_user_is_inactive(self):
        user = User.objects.create_user(
            email="susp@city.test", password="x", full_name="Susp", status=UserStatus.SUSPENDED,
        )
        self.assertFalse(user.is_active)
        pending = User.objects.create_user(email="pend@city.test", password="x", full_name="Pend")
        self.assertEqual(pending.status, UserStatus.PENDING)
        self.assertTrue(pending.is_active)

    def test_role_predicates(self):
        citizen = User.objects.create_user(email="pred_c@city.test", password="x", full_name="C")
        authority = User.objects.create_user(
            email="pred_a@city.test", password="x", full_name="A", role=UserRole.AUTHORITY,
        )
        admin = User.objects.create_user(
            email="pred_ad@city.test", password="x", full_name="Ad", role=UserRole.ADMIN,
        )

        self.assertEqual([u.can_triage for u in (citizen, authority, admin)], [False, True, True])
        self.assertEqual([u.is_authority for u in (citizen, authority, admin)], [False, True, False])
        self.assertEqual([u.is_staff for u in (citizen, authority, admin)], [False, False, True])


class TestReportingViews(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(
            email="views_admin@city.test", password="Views!Pass1", full_name="Views Admin",
            role=UserRole.ADMIN, status=UserStatus.ACTIVE,
        )
        cls.category = IncidentCategory.objects.create(name="Sidewalk")

    def _complaint(self, title: str) -> Complaint:
        return Complaint.objects.create(
            reporter=self.admin, title=title, description="-", category=self.category,
        )

    def test_complaints_by_status_counts(self):
        self._complaint("a")
        self._complaint("b")
        c = self._complaint("c")
        ComplaintStatusService.change_status(c.pk, self.admin.pk, ComplaintStatus.REJECTED)

        totals = {row.status: row.total for row in ComplaintStatusTotal.objects.all()}
        self.assertEqual(totals, {ComplaintStatus.CREATED: 2, ComplaintStatus.REJECTED: 1})

    def test_resolved_durations_only_lists_resolved_complaints(self):
        resolved = self._complaint("resolved")
        Complaint.objects.filter(pk=resolved.pk).update(
            created_at=resolved.created_at - timedelta(hours=5),
        )
        ComplaintStatusService.change_status(resolved.pk, self.admin.pk, ComplaintStatus.RESOLVED)

        reopened = self._complaint("reopened")
        ComplaintStatusService.change_status(reopened.pk, self.admin.pk, ComplaintStatus.RESOLVED)
        ComplaintStatusService.change_status(reopened.pk, self.admin.pk, ComplaintStatus.IN_REVIEW)

        self._complaint("open")

        rows = list(ResolvedDuration.objects.all())
        self.assertEqual([row.complaint_id for row in rows], [resolved.pk])
        self.assertAlmostEqual(rows[0].hours_to_resolve, 5.0, places=2)
