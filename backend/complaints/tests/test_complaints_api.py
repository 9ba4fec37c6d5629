"""
Integration tests for the complaint endpoints.

Flow under test
---------------
1. A citizen files a complaint (``created``).
2. An admin validates it; the reporter gets a status notification.
3. An admin assigns an authority, then reassigns to another one.
4. The assigned authority resolves it.
5. Status log and assignment history reflect every step.

Plus visibility rules for citizens, evidence, comments and HTTP mapping
of the domain errors.
"""

from __future__ import annotations

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import User, UserRole, UserStatus
from complaints.models import (
    Complaint,
    ComplaintAssignment,
    ComplaintStatus,
    ComplaintStatusLog,
    IncidentCategory,
    Zone,
)
from core.models import Notification


def _user(email: str, role: str = UserRole.CITIZEN) -> User:
    return User.objects.create_user(
        email=email,
        password="Api!Pass123",
        full_name=email.split("@")[0].title(),
        role=role,
        status=UserStatus.ACTIVE,
    )


class ComplaintApiTestBase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.citizen = _user("alice@city.test")
        cls.neighbour = _user("bob@city.test")
        cls.handler = _user("hank@city.test", UserRole.AUTHORITY)
        cls.second_handler = _user("hilda@city.test", UserRole.AUTHORITY)
        cls.admin = _user("root@city.test", UserRole.ADMIN)
        cls.category = IncidentCategory.objects.create(name="Road damage")
        cls.zone = Zone.objects.create(name="Old Town", code="OT")

    def setUp(self):
        self.client = APIClient()

    def _as(self, user: User) -> APIClient:
        self.client.force_authenticate(user=user)
        return self.client

    def _file(self, user: User, **overrides) -> dict:
        payload = {
            "title": "Collapsed kerb",
            "description": "The kerb outside no. 12 has collapsed.",
            "category": self.category.pk,
            "zone": self.zone.pk,
            "priority": "high",
            "latitude": "51.507351",
            "longitude": "-0.127758",
            "address": "12 High Street",
        }
        payload.update(overrides)
        resp = self._as(user).post(reverse("complaint-list"), payload, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        return resp.data


class TestComplaintLifecycle(ComplaintApiTestBase):

    def test_full_lifecycle(self):
        created = self._file(self.citizen)
        complaint_id = created["id"]
        self.assertEqual(created["status"], ComplaintStatus.CREATED)
        self.assertIsNone(created["resolved_at"])
        self.assertIsNone(created["active_assignment"])

        # 2. admin validates
        resp = self._as(self.admin).post(
            reverse("complaint-change-status", args=[complaint_id]),
            {"status": "validated", "comment": "looks legit"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=resp.data)
        self.assertEqual(resp.data["status"], ComplaintStatus.VALIDATED)

        notification = Notification.objects.get(user=self.citizen, template_code="complaint_status_changed")
        self.assertEqual(notification.complaint_id, complaint_id)
        self.assertEqual(notification.payload["from_status"], "created")
        self.assertEqual(notification.payload["to_status"], "validated")

        # 3. assign then reassign
        resp = self.client.post(
            reverse("complaint-assign", args=[complaint_id]),
            {"authority_id": self.handler.pk},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertTrue(resp.data["is_active"])
        self.assertTrue(
            Notification.objects.filter(user=self.handler, template_code="complaint_assigned").exists()
        )

        resp = self.client.post(
            reverse("complaint-assign", args=[complaint_id]),
            {"authority_id": self.second_handler.pk},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        self.assertEqual(
            ComplaintAssignment.objects.filter(complaint_id=complaint_id, is_active=True).count(), 1,
        )

        # 4. assigned authority resolves
        resp = self._as(self.second_handler).post(
            reverse("complaint-change-status", args=[complaint_id]),
            {"status": "resolved"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK, msg=resp.data)
        self.assertIsNotNone(resp.data["resolved_at"])
        self.assertEqual(resp.data["active_assignment"]["authority"]["id"], self.second_handler.pk)

        # 5. histories
        resp = self._as(self.citizen).get(reverse("complaint-status-log", args=[complaint_id]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [(row["from_status"], row["to_status"]) for row in resp.data],
            [("created", "validated"), ("validated", "resolved")],
        )
        self.assertEqual(resp.data[0]["comment"], "looks legit")
        self.assertEqual(resp.data[0]["changed_by"]["id"], self.admin.pk)

        resp = self.client.get(reverse("complaint-assignments", args=[complaint_id]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [(row["authority"]["id"], row["is_active"]) for row in resp.data],
            [(self.handler.pk, False), (self.second_handler.pk, True)],
        )
        self.assertIsNotNone(resp.data[0]["unassigned_at"])

    def test_citizen_cannot_change_status(self):
        complaint_id = self._file(self.citizen)["id"]
        resp = self._as(self.citizen).post(
            reverse("complaint-change-status", args=[complaint_id]),
            {"status": "resolved"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn("detail", resp.data)
        self.assertFalse(ComplaintStatusLog.objects.filter(complaint_id=complaint_id).exists())
        self.assertFalse(Notification.objects.filter(template_code="complaint_status_changed").exists())

    def test_unknown_status_value_is_400(self):
        complaint_id = self._file(self.citizen)["id"]
        resp = self._as(self.admin).post(
            reverse("complaint-change-status", args=[complaint_id]),
            {"status": "closed"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_change_on_missing_complaint_is_404(self):
        resp = self._as(self.admin).post(
            reverse("complaint-change-status", args=[424242]),
            {"status": "validated"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_assigning_a_citizen_is_400_and_creates_nothing(self):
        complaint_id = self._file(self.citizen)["id"]
        resp = self._as(self.admin).post(
            reverse("complaint-assign", args=[complaint_id]),
            {"authority_id": self.neighbour.pk},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(ComplaintAssignment.objects.exists())

    def test_citizen_cannot_assign(self):
        complaint_id = self._file(self.citizen)["id"]
        resp = self._as(self.citizen).post(
            reverse("complaint-assign", args=[complaint_id]),
            {"authority_id": self.handler.pk},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_unauthenticated_request_is_rejected(self):
        resp = self.client.get(reverse("complaint-list"))
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)


class TestComplaintFilingAndVisibility(ComplaintApiTestBase):

    def test_coordinates_must_come_together(self):
        resp = self._as(self.citizen).post(
            reverse("complaint-list"),
            {
                "title": "Half located",
                "description": "-",
                "category": self.category.pk,
                "latitude": "10.0",
            },
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_latitude_out_of_range_is_rejected(self):
        resp = self._as(self.citizen).post(
            reverse("complaint-list"),
            {
                "title": "Off the map",
                "description": "-",
                "category": self.category.pk,
                "latitude": "95.0",
                "longitude": "10.0",
            },
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reporter_is_the_caller(self):
        created = self._file(self.citizen)
        complaint = Complaint.objects.get(pk=created["id"])
        self.assertEqual(complaint.reporter_id, self.citizen.pk)
        self.assertEqual(created["reporter"]["id"], self.citizen.pk)

    def test_private_complaint_hidden_from_other_citizens(self):
        private = self._file(self.citizen, is_public=False, title="Private matter")
        public = self._file(self.citizen, title="Public matter")

        resp = self._as(self.neighbour).get(reverse("complaint-list"))
        ids = {row["id"] for row in resp.data}
        self.assertIn(public["id"], ids)
        self.assertNotIn(private["id"], ids)

        resp = self.client.get(reverse("complaint-detail", args=[private["id"]]))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

        resp = self._as(self.handler).get(reverse("complaint-detail", args=[private["id"]]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

    def test_list_filters(self):
        first = self._file(self.citizen, title="Broken bench")
        self._file(self.citizen, title="Graffiti wall", priority="low")

        resp = self._as(self.admin).get(reverse("complaint-list"), {"search": "bench"})
        self.assertEqual([row["id"] for row in resp.data], [first["id"]])

        resp = self.client.get(reverse("complaint-list"), {"priority": "low"})
        self.assertEqual(len(resp.data), 1)

        self.client.post(
            reverse("complaint-assign", args=[first["id"]]),
            {"authority_id": self.handler.pk},
            format="json",
        )
        resp = self._as(self.handler).get(reverse("complaint-list"), {"assigned_to_me": "true"})
        self.assertEqual([row["id"] for row in resp.data], [first["id"]])

    def test_invalid_filter_value_is_400(self):
        resp = self._as(self.admin).get(reverse("complaint-list"), {"status": "closed"})
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_admin_can_delete(self):
        complaint_id = self._file(self.citizen)["id"]

        resp = self._as(self.handler).delete(reverse("complaint-detail", args=[complaint_id]))
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        resp = self._as(self.admin).delete(reverse("complaint-detail", args=[complaint_id]))
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Complaint.objects.filter(pk=complaint_id).exists())


class TestEvidenceAndComments(ComplaintApiTestBase):

    def test_reporter_attaches_and_lists_evidence(self):
        complaint_id = self._file(self.citizen)["id"]
        url = reverse("complaint-evidence", args=[complaint_id])

        resp = self._as(self.citizen).post(
            url,
            {"url": "https://cdn.city.test/kerb.jpg", "type": "image", "metadata": {"w": 800}},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)

        resp = self.client.get(url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]["metadata"], {"w": 800})

    def test_other_citizen_cannot_attach_evidence_to_public_complaint(self):
        complaint_id = self._file(self.citizen)["id"]
        resp = self._as(self.neighbour).post(
            reverse("complaint-evidence", args=[complaint_id]),
            {"url": "https://cdn.city.test/x.jpg"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_internal_comments_are_hidden_from_citizens(self):
        complaint_id = self._file(self.citizen)["id"]
        url = reverse("complaint-comments", args=[complaint_id])

        resp = self._as(self.handler).post(url, {"body": "Crew booked", "is_internal": True}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)
        resp = self.client.post(url, {"body": "We are on it"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, msg=resp.data)

        self.assertEqual(
            Notification.objects.filter(user=self.citizen, template_code="complaint_commented").count(), 1,
        )

        resp = self._as(self.citizen).get(url)
        self.assertEqual([row["body"] for row in resp.data], ["We are on it"])

        resp = self._as(self.admin).get(url)
        self.assertEqual(len(resp.data), 2)

    def test_citizen_cannot_post_internal_comment(self):
        complaint_id = self._file(self.citizen)["id"]
        resp = self._as(self.citizen).post(
            reverse("complaint-comments", args=[complaint_id]),
            {"body": "secret", "is_internal": True},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_citizen_cannot_comment_on_someone_elses_complaint(self):
        complaint_id = self._file(self.citizen)["id"]
        resp = self._as(self.neighbour).post(
            reverse("complaint-comments", args=[complaint_id]),
            {"body": "me too"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
