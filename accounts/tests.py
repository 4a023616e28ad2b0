"""Smoke tests for the profile API and actor authentication."""
from __future__ import annotations

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from .directory import ProfileDirectory
from .models import Profile
from .permissions import has_permission


class ProfileApiTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        self.admin = Profile.objects.create(full_name="Ada Admin", role=Profile.ADMIN)
        self.client.credentials(HTTP_X_ACTOR_ID=str(self.admin.pk))

    def test_create_profile(self) -> None:
        payload = {"full_name": "Casey Tech", "email": "casey@example.com", "role": "maintenance"}
        response = self.client.post(reverse("profile-list"), payload, format="json")
        self.assertEqual(response.status_code, 201)

        response = self.client.get(reverse("profile-list"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 2)

    def test_staff_lists_assignable_profiles(self) -> None:
        Profile.objects.create(full_name="Bob Tech", role=Profile.MAINTENANCE)
        Profile.objects.create(full_name="Old Tech", role=Profile.MAINTENANCE, is_active=False)
        Profile.objects.create(full_name="Rita Reporter", role=Profile.REPORTER)

        response = self.client.get(reverse("profile-staff"))

        self.assertEqual([row["full_name"] for row in response.data], ["Ada Admin", "Bob Tech"])

    def test_reporter_cannot_create_profiles(self) -> None:
        reporter = Profile.objects.create(full_name="Rita Reporter", role=Profile.REPORTER)
        self.client.credentials(HTTP_X_ACTOR_ID=str(reporter.pk))

        response = self.client.post(
            reverse("profile-list"), {"full_name": "Eve", "role": "admin"}, format="json"
        )

        self.assertEqual(response.status_code, 403)


class ActorAuthenticationTests(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()

    def test_missing_header(self) -> None:
        self.assertEqual(self.client.get(reverse("profile-list")).status_code, 401)

    def test_malformed_header(self) -> None:
        self.client.credentials(HTTP_X_ACTOR_ID="not-a-uuid")
        self.assertEqual(self.client.get(reverse("profile-list")).status_code, 401)

    def test_inactive_actor(self) -> None:
        retired = Profile.objects.create(full_name="Retired", role=Profile.ADMIN, is_active=False)
        self.client.credentials(HTTP_X_ACTOR_ID=str(retired.pk))
        self.assertEqual(self.client.get(reverse("profile-list")).status_code, 401)

    def test_health_is_public(self) -> None:
        self.assertEqual(self.client.get(reverse("maintenance-health")).status_code, 200)


class PermissionTableTests(TestCase):
    def test_role_table(self) -> None:
        director = Profile(full_name="Sid", role=Profile.SUB_DIRECTOR)
        tech = Profile(full_name="Bob", role=Profile.MAINTENANCE)

        self.assertTrue(has_permission(director, "canViewAnalytics"))
        self.assertFalse(has_permission(director, "canUpdateTickets"))
        self.assertTrue(has_permission(tech, "canUpdateTickets"))
        self.assertFalse(has_permission(tech, "canViewAllTickets"))
        self.assertFalse(has_permission(None, "canCreateTickets"))

    def test_directory_resolves_in_one_query(self) -> None:
        bob = Profile.objects.create(full_name="Bob", role=Profile.MAINTENANCE)

        with self.assertNumQueries(1):
            directory = ProfileDirectory([bob.pk, None])

        self.assertEqual(directory.resolve(str(bob.pk)).name, "Bob")
        self.assertIsNone(directory.resolve(None))
