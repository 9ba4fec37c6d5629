"""
Integration tests for the core endpoints.

Scope in this file:
- GET  /api/core/constants/
- GET  /api/core/reports/complaints-by-status/
- GET  /api/core/reports/resolved-durations/
- GET  /api/core/notifications/
- POST /api/core/notifications/{id}/delivered/
"""

from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import User, UserRole, UserStatus
from complaints.models import Complaint, ComplaintStatus, IncidentCategory
from complaints.services import ComplaintStatusService
from core.domain.notifications import NotificationService
from core.models import Notification


class TestSystemConstants(TestCase):

    def test_constants_are_public_and_complete(self):
        resp = APIClient().get(reverse("core:system-constants"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        self.assertEqual(
            set(resp.data),
            {"user_roles", "user_statuses", "complaint_statuses", "evidence_types", "priority_levels"},
        )
        self.assertEqual(
            [item["value"] for item in resp.data["complaint_statuses"]],
            ["created", "validated", "in_review", "in_execution", "resolved", "rejected", "archived"],
        )
        self.assertEqual(
            [item["value"] for item in resp.data["user_roles"]],
            ["citizen", "authority", "admin"],
        )
        self.assertIn({"value": "in_review", "label": "In Review"}, resp.data["complaint_statuses"])


class TestReports(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(
            email="reports_admin@city.test", password="Rep0rts!Pass", full_name="Reports Admin",
            role=UserRole.ADMIN, status=UserStatus.ACTIVE,
        )
        cls.authority = User.objects.create_user(
            email="reports_authority@city.test", password="Rep0rts!Pass", full_name="Reports Authority",
            role=UserRole.AUTHORITY, status=UserStatus.ACTIVE,
        )
        cls.citizen = User.objects.create_user(
            email="reports_citizen@city.test", password="Rep0rts!Pass", full_name="Reports Citizen",
            status=UserStatus.ACTIVE,
        )
        category = IncidentCategory.objects.create(name="Parks")

        cls.open_complaint = Complaint.objects.create(
            reporter=cls.citizen, title="Broken swing", description="-", category=category,
        )
        cls.resolved_complaint = Complaint.objects.create(
            reporter=cls.citizen, title="Dead tree", description="-", category=category,
        )
        Complaint.objects.filter(pk=cls.resolved_complaint.pk).update(
            created_at=cls.resolved_complaint.created_at - timedelta(hours=12),
        )
        ComplaintStatusService.change_status(
            cls.resolved_complaint.pk, cls.admin.pk, ComplaintStatus.RESOLVED,
        )

    def setUp(self):
        self.client = APIClient()

    def test_complaints_by_status(self):
        self.client.force_authenticate(user=self.authority)
        resp = self.client.get(reverse("core:report-complaints-by-status"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [(row["status"], row["label"], row["total"]) for row in resp.data],
            [("created", "Created", 1), ("resolved", "Resolved", 1)],
        )

    def test_resolved_durations(self):
        self.client.force_authenticate(user=self.admin)
        resp = self.client.get(reverse("core:report-resolved-durations"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["count"], 1)
        self.assertEqual(resp.data["results"][0]["complaint_id"], self.resolved_complaint.pk)
        self.assertAlmostEqual(resp.data["results"][0]["hours_to_resolve"], 12.0, places=2)
        self.assertAlmostEqual(resp.data["average_hours"], 12.0, places=2)

    def test_citizens_cannot_read_reports(self):
        self.client.force_authenticate(user=self.citizen)
        for name in ("core:report-complaints-by-status", "core:report-resolved-durations"):
            resp = self.client.get(reverse(name))
            self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)


class TestNotifications(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(
            email="notif_admin@city.test", password="N0tif!Pass", full_name="Notif Admin",
            role=UserRole.ADMIN, status=UserStatus.ACTIVE,
        )
        cls.citizen = User.objects.create_user(
            email="notif_citizen@city.test", password="N0tif!Pass", full_name="Notif Citizen",
            status=UserStatus.ACTIVE,
        )
        cls.other = User.objects.create_user(
            email="notif_other@city.test", password="N0tif!Pass", full_name="Notif Other",
            status=UserStatus.ACTIVE,
        )
        category = IncidentCategory.objects.create(name="Pests")
        cls.complaint = Complaint.objects.create(
            reporter=cls.citizen, title="Rats", description="-", category=category,
        )

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=self.citizen)

    def test_status_change_via_api_notifies_reporter_only(self):
        self.client.force_authenticate(user=self.admin)
        resp = self.client.post(
            reverse("complaint-change-status", args=[self.complaint.pk]),
            {"status": "in_review"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        self.assertEqual(Notification.objects.count(), 1)
        self.client.force_authenticate(user=self.citizen)
        resp = self.client.get(reverse("core:notification-list"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]["template_code"], "complaint_status_changed")
        self.assertEqual(resp.data[0]["complaint_id"], self.complaint.pk)
        self.assertIsNone(resp.data[0]["delivered_at"])

    def test_mark_delivered_is_idempotent(self):
        notification = NotificationService.create(
            actor=self.admin,
            recipients=self.citizen,
            template_code="complaint_assigned",
            complaint=self.complaint,
        )[0]
        url = reverse("core:notification-mark-delivered", args=[notification.pk])

        first = self.client.post(url)
        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(first.data["delivered_at"])

        second = self.client.post(url)
        self.assertEqual(second.data["delivered_at"], first.data["delivered_at"])

        resp = self.client.get(reverse("core:notification-list"), {"undelivered": "true"})
        self.assertEqual(resp.data, [])

    def test_cannot_touch_someone_elses_notification(self):
        notification = Notification.objects.create(
            user=self.other, complaint=self.complaint, template_code="complaint_commented",
        )
        resp = self.client.post(reverse("core:notification-mark-delivered", args=[notification.pk]))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        notification.refresh_from_db()
        self.assertIsNone(notification.delivered_at)

    def test_actor_is_never_notified(self):
        created = NotificationService.create(
            actor=self.citizen,
            recipients=[self.citizen, self.other],
            template_code="complaint_commented",
            complaint=self.complaint,
        )
        self.assertEqual([n.user_id for n in created], [self.other.pk])
