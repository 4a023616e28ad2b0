"""API tests for the maintenance ticket service."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone
from io import StringIO
from unittest import mock

import requests
from django.core.management import CommandError, call_command
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import Profile

from .models import (
    AuditLogImmutableError,
    PreventiveTask,
    Property,
    Ticket,
    TicketAuditLog,
    TicketComment,
    TicketExpense,
    Unit,
)
from .services import (
    average_resolution_hours,
    comment_body_with_media,
    extract_media,
    next_occurrence,
    ticket_age,
)
from .tasks import notify_ticket_assigned, notify_ticket_created


class TicketApiTestCase(TestCase):
    def setUp(self) -> None:
        self.client = APIClient()
        self.admin = Profile.objects.create(full_name="Ada Admin", role=Profile.ADMIN)
        self.tech = Profile.objects.create(
            full_name="Bob Tech", role=Profile.MAINTENANCE, telegram_chat_id="chat-bob"
        )
        self.reporter = Profile.objects.create(full_name="Rita Reporter", role=Profile.REPORTER)
        self.property = Property.objects.create(name="Harbor View")
        self.unit = Unit.objects.create(property=self.property, name="2B")

    def act_as(self, profile: Profile) -> None:
        self.client.credentials(HTTP_X_ACTOR_ID=str(profile.pk))

    def make_ticket(self, **overrides) -> Ticket:
        fields = {
            "property": self.property,
            "unit": self.unit,
            "category": "plumbing",
            "priority": Ticket.MEDIUM,
            "description": "Kitchen sink is leaking",
            "created_by": self.reporter,
        }
        fields.update(overrides)
        return Ticket.objects.create(**fields)

    def actions_for(self, ticket: Ticket) -> list[str]:
        return list(
            TicketAuditLog.objects.filter(ticket=ticket).order_by("created_at").values_list("action", flat=True)
        )


class TicketCreateTests(TicketApiTestCase):
    def test_requires_actor(self) -> None:
        response = self.client.get(reverse("ticket-list"))
        self.assertEqual(response.status_code, 401)

    def test_unknown_actor_rejected(self) -> None:
        self.client.credentials(HTTP_X_ACTOR_ID="5b0c6f6e-7a3f-4f4a-9c8e-111111111111")
        response = self.client.get(reverse("ticket-list"))
        self.assertEqual(response.status_code, 401)

    def test_create_ticket_writes_audit_comment_and_attachments(self) -> None:
        self.act_as(self.reporter)
        payload = {
            "property": str(self.property.pk),
            "unit": str(self.unit.pk),
            "type": "corrective",
            "category": "plumbing",
            "priority": "high",
            "description": "Water leaking under the sink",
            "initial_comment": "  Started this morning  ",
            "attachments": [
                {"url": "https://files.test/leak.jpg", "kind": "image"},
                {"url": "https://files.test/leak.mp4", "kind": "video"},
            ],
        }

        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            response = self.client.post(reverse("ticket-list"), payload, format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], Ticket.REPORTED)
        self.assertEqual(len(callbacks), 1)

        ticket = Ticket.objects.get(pk=response.data["id"])
        self.assertEqual(ticket.created_by, self.reporter)
        log = TicketAuditLog.objects.get(ticket=ticket)
        self.assertEqual(log.action, "created")
        self.assertEqual(log.to_value, {"status": "reported"})

        comment = TicketComment.objects.get(ticket=ticket)
        self.assertEqual(
            comment.body,
            "Started this morning\n\n![Image](https://files.test/leak.jpg)\n[Video](https://files.test/leak.mp4)",
        )
        self.assertEqual(ticket.attachments.count(), 2)

    def test_short_description_rejected(self) -> None:
        self.act_as(self.reporter)
        payload = {"property": str(self.property.pk), "category": "wifi", "description": "short"}

        response = self.client.post(reverse("ticket-list"), payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("description", response.data)

    def test_unit_must_belong_to_property(self) -> None:
        self.act_as(self.reporter)
        other = Property.objects.create(name="Elm Court")
        payload = {
            "property": str(other.pk),
            "unit": str(self.unit.pk),
            "category": "wifi",
            "description": "Router keeps dropping",
        }

        response = self.client.post(reverse("ticket-list"), payload, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("unit", response.data)


class TicketListTests(TicketApiTestCase):
    def test_role_scoping(self) -> None:
        mine = self.make_ticket()
        assigned = self.make_ticket(created_by=self.admin, assigned_to=self.tech, status=Ticket.ASSIGNED)

        self.act_as(self.reporter)
        ids = [row["id"] for row in self.client.get(reverse("ticket-list")).data["results"]]
        self.assertEqual(ids, [str(mine.pk)])

        self.act_as(self.tech)
        ids = [row["id"] for row in self.client.get(reverse("ticket-list")).data["results"]]
        self.assertEqual(ids, [str(assigned.pk)])

        self.act_as(self.admin)
        self.assertEqual(self.client.get(reverse("ticket-list")).data["count"], 2)

    def test_filters(self) -> None:
        self.make_ticket(priority=Ticket.URGENT, category="electricity", description="Sparks from the outlet")
        self.make_ticket(priority=Ticket.LOW)
        self.make_ticket(type=Ticket.PREVENTIVE, description="Quarterly AC service")
        self.act_as(self.admin)

        response = self.client.get(reverse("ticket-list"), {"urgent_only": "true"})
        self.assertEqual(response.data["count"], 1)

        response = self.client.get(reverse("ticket-list"), {"priority": "low,urgent"})
        self.assertEqual(response.data["count"], 2)

        response = self.client.get(reverse("ticket-list"), {"type": "preventive"})
        self.assertEqual(response.data["count"], 1)

        response = self.client.get(reverse("ticket-list"), {"search": "harbor"})
        self.assertEqual(response.data["count"], 2)

        response = self.client.get(reverse("ticket-list"), {"property_id": "nope"})
        self.assertEqual(response.status_code, 400)

    def test_out_of_scope_ticket_is_not_found(self) -> None:
        ticket = self.make_ticket(created_by=self.admin)
        self.act_as(self.reporter)

        response = self.client.get(reverse("ticket-detail", args=[ticket.pk]))

        self.assertEqual(response.status_code, 404)


class TicketUpdateTests(TicketApiTestCase):
    def test_assignee_moves_reported_ticket_to_assigned(self) -> None:
        ticket = self.make_ticket()
        self.act_as(self.admin)

        response = self.client.patch(
            reverse("ticket-detail", args=[ticket.pk]),
            {"assigned_to": str(self.tech.pk), "priority": "urgent"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], Ticket.ASSIGNED)
        self.assertCountEqual(
            self.actions_for(ticket), ["status_changed", "priority_changed", "assigned_to_changed"]
        )
        assignment = TicketAuditLog.objects.get(ticket=ticket, action="assigned_to_changed")
        self.assertEqual(assignment.to_value["assigned_to_name"], "Bob Tech")
        status_log = TicketAuditLog.objects.get(ticket=ticket, action="status_changed")
        self.assertEqual(status_log.from_value, {"status": "reported"})
        self.assertEqual(status_log.to_value, {"status": "assigned"})

    def test_explicit_status_wins_over_auto_assign(self) -> None:
        ticket = self.make_ticket()
        self.act_as(self.admin)

        response = self.client.patch(
            reverse("ticket-detail", args=[ticket.pk]),
            {"assigned_to": str(self.tech.pk), "status": "in_progress"},
            format="json",
        )

        self.assertEqual(response.data["status"], Ticket.IN_PROGRESS)

    def test_unchanged_fields_write_nothing(self) -> None:
        ticket = self.make_ticket()
        self.act_as(self.admin)

        self.client.patch(reverse("ticket-detail", args=[ticket.pk]), {"priority": "medium"}, format="json")

        self.assertEqual(self.actions_for(ticket), [])

    def test_resolving_stamps_resolved_at(self) -> None:
        ticket = self.make_ticket(assigned_to=self.tech, status=Ticket.ASSIGNED)
        self.act_as(self.tech)

        response = self.client.post(
            reverse("ticket-set-status", args=[ticket.pk]), {"status": "resolved"}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        ticket.refresh_from_db()
        self.assertIsNotNone(ticket.resolved_at)
        log = TicketAuditLog.objects.get(ticket=ticket)
        self.assertEqual(log.from_value, {"status": "assigned"})

    def test_maintenance_cannot_touch_unassigned_ticket(self) -> None:
        ticket = self.make_ticket(created_by=self.tech)
        self.act_as(self.tech)

        response = self.client.post(
            reverse("ticket-set-status", args=[ticket.pk]), {"status": "resolved"}, format="json"
        )

        self.assertIn(response.status_code, {403, 404})

    def test_assign_and_unassign(self) -> None:
        ticket = self.make_ticket()
        self.act_as(self.admin)

        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            response = self.client.post(
                reverse("ticket-assign", args=[ticket.pk]), {"user_id": str(self.tech.pk)}, format="json"
            )
        self.assertEqual(response.data["status"], Ticket.ASSIGNED)
        self.assertEqual(len(callbacks), 1)

        response = self.client.post(reverse("ticket-assign", args=[ticket.pk]), {"user_id": None}, format="json")
        self.assertEqual(response.data["status"], Ticket.REPORTED)

        logs = TicketAuditLog.objects.filter(ticket=ticket, action="assigned").order_by("created_at")
        self.assertEqual(logs[0].to_value["assigned_to_name"], "Bob Tech")
        self.assertIsNone(logs[1].to_value["assigned_to_user_id"])

    def test_cannot_assign_to_reporter(self) -> None:
        ticket = self.make_ticket()
        self.act_as(self.admin)

        response = self.client.post(
            reverse("ticket-assign", args=[ticket.pk]), {"user_id": str(self.reporter.pk)}, format="json"
        )

        self.assertEqual(response.status_code, 400)

    def test_only_admin_deletes(self) -> None:
        ticket = self.make_ticket()
        self.act_as(self.reporter)
        self.assertEqual(self.client.delete(reverse("ticket-detail", args=[ticket.pk])).status_code, 403)

        self.act_as(self.admin)
        self.assertEqual(self.client.delete(reverse("ticket-detail", args=[ticket.pk])).status_code, 204)
        self.assertFalse(Ticket.objects.filter(pk=ticket.pk).exists())


class TicketActivityTests(TicketApiTestCase):
    def test_comment_writes_audit(self) -> None:
        ticket = self.make_ticket()
        self.act_as(self.reporter)

        response = self.client.post(
            reverse("ticket-comments", args=[ticket.pk]), {"body": "  Still dripping  "}, format="json"
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["body"], "Still dripping")
        log = TicketAuditLog.objects.get(ticket=ticket)
        self.assertEqual((log.action, log.to_value), ("comment_added", {"body": "Still dripping"}))

    def test_blank_comment_rejected(self) -> None:
        ticket = self.make_ticket()
        self.act_as(self.reporter)

        response = self.client.post(reverse("ticket-comments", args=[ticket.pk]), {"body": "   "}, format="json")

        self.assertEqual(response.status_code, 400)

    def test_evidence_writes_audit(self) -> None:
        ticket = self.make_ticket()
        self.act_as(self.reporter)

        response = self.client.post(
            reverse("ticket-evidence", args=[ticket.pk]),
            {"url": "https://files.test/after.jpg", "kind": "image"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.actions_for(ticket), ["evidence_added"])

    def test_expense_lifecycle(self) -> None:
        ticket = self.make_ticket(assigned_to=self.tech, status=Ticket.ASSIGNED)
        self.act_as(self.tech)

        response = self.client.post(
            reverse("ticket-expenses", args=[ticket.pk]),
            {"description": "Replacement trap", "amount": "18.40"},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        expense_id = response.data["id"]

        response = self.client.delete(reverse("ticket-remove-expense", args=[ticket.pk, expense_id]))
        self.assertEqual(response.status_code, 204)
        self.assertFalse(TicketExpense.objects.exists())

        removed = TicketAuditLog.objects.get(ticket=ticket, action="expense_removed")
        self.assertEqual(removed.from_value["description"], "Replacement trap")
        self.assertEqual(removed.from_value["amount"], "18.40")
        self.assertIsNone(removed.to_value)

    def test_expense_amount_must_be_positive(self) -> None:
        ticket = self.make_ticket()
        self.act_as(self.reporter)

        response = self.client.post(
            reverse("ticket-expenses", args=[ticket.pk]), {"description": "Refund", "amount": "-5"}, format="json"
        )

        self.assertEqual(response.status_code, 400)

    def test_timeline_endpoint(self) -> None:
        ticket = self.make_ticket(created_at=timezone.now() - timedelta(days=2))
        self.act_as(self.admin)
        self.client.post(reverse("ticket-assign", args=[ticket.pk]), {"user_id": str(self.tech.pk)}, format="json")
        self.client.post(reverse("ticket-set-status", args=[ticket.pk]), {"status": "in_progress"}, format="json")

        response = self.client.get(reverse("ticket-timeline", args=[ticket.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 3)
        self.assertIsNone(response.data["empty_state"])
        results = response.data["results"]
        self.assertEqual([row["action"] for row in results], ["status_changed", "assigned", "created"])
        self.assertEqual(results[0]["text"], "Changed status from assigned → in progress")
        self.assertEqual(results[2]["actor_name"], "Rita Reporter")
        self.assertTrue(results[2]["synthesized"])

        response = self.client.get(reverse("ticket-timeline", args=[ticket.pk]), {"limit": 1, "offset": 1})
        self.assertEqual([row["action"] for row in response.data["results"]], ["assigned"])

    def test_timeline_survives_deleted_actor(self) -> None:
        ghost = Profile.objects.create(full_name="Gone Soon", role=Profile.HOUSEKEEPER)
        ticket = self.make_ticket()
        TicketAuditLog.objects.create(ticket=ticket, actor=ghost, action="comment_added", to_value={"body": "hi"})
        ghost.delete()
        self.act_as(self.admin)

        response = self.client.get(reverse("ticket-timeline", args=[ticket.pk]))

        self.assertEqual(response.status_code, 200)
        names = [row["actor_name"] for row in response.data["results"]]
        self.assertIn("Unknown", names)

    def test_timeline_credits_deleted_creator_as_unknown(self) -> None:
        ticket = self.make_ticket()
        self.reporter.delete()
        self.act_as(self.admin)

        response = self.client.get(reverse("ticket-timeline", args=[ticket.pk]))

        self.assertEqual(response.status_code, 200)
        created = response.data["results"][0]
        self.assertEqual((created["action"], created["actor_name"]), ("created", "Unknown"))

    def test_audit_log_is_append_only(self) -> None:
        ticket = self.make_ticket()
        log = TicketAuditLog.objects.create(ticket=ticket, actor=self.admin, action="created")

        log.action = "edited"
        with self.assertRaises(AuditLogImmutableError):
            log.save()
        with self.assertRaises(AuditLogImmutableError):
            log.delete()

    def test_stats(self) -> None:
        created = timezone.now() - timedelta(hours=10)
        self.make_ticket(created_at=created, status=Ticket.RESOLVED, resolved_at=created + timedelta(hours=4))
        self.make_ticket(priority=Ticket.URGENT)
        self.act_as(self.admin)

        response = self.client.get(reverse("ticket-stats"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total"], 2)
        self.assertEqual(response.data["byStatus"]["resolved"], 1)
        self.assertEqual(response.data["openUrgent"], 1)
        self.assertEqual(response.data["averageResolutionHours"], 4)

        self.act_as(self.tech)
        self.assertEqual(self.client.get(reverse("ticket-stats")).status_code, 403)


class PreventiveTaskTests(TicketApiTestCase):
    def test_generate_creates_ticket_and_advances_schedule(self) -> None:
        scheduled = timezone.now() + timedelta(days=3)
        task = PreventiveTask.objects.create(
            property=self.property,
            unit=self.unit,
            category="ac",
            description="Clean the AC filters",
            recurrence_type=PreventiveTask.WEEKS,
            recurrence_interval=2,
            next_scheduled_at=scheduled,
            assigned_to=self.tech,
            created_by=self.admin,
        )
        self.act_as(self.admin)

        response = self.client.post(reverse("preventive-task-generate", args=[task.pk]), format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["type"], Ticket.PREVENTIVE)
        self.assertEqual(response.data["status"], Ticket.ASSIGNED)
        ticket = Ticket.objects.get(pk=response.data["id"])
        self.assertEqual(self.actions_for(ticket), ["created", "assigned"])

        task.refresh_from_db()
        self.assertIsNotNone(task.last_generated_at)
        self.assertEqual(task.next_scheduled_at, scheduled + timedelta(weeks=2))

    def test_paused_task_conflicts(self) -> None:
        task = PreventiveTask.objects.create(
            property=self.property,
            category="cleaning",
            description="Deep clean lobby",
            is_active=False,
        )
        self.act_as(self.admin)

        response = self.client.post(reverse("preventive-task-generate", args=[task.pk]), format="json")

        self.assertEqual(response.status_code, 409)
        self.assertFalse(Ticket.objects.exists())

    def test_create_and_list(self) -> None:
        self.act_as(self.admin)
        payload = {
            "property": str(self.property.pk),
            "category": "pest_control",
            "description": "Monthly pest inspection",
            "recurrence_type": "months",
            "recurrence_interval": 1,
            "assigned_to": str(self.tech.pk),
        }

        response = self.client.post(reverse("preventive-task-list"), payload, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["created_by"], self.admin.pk)

        response = self.client.get(reverse("preventive-task-list"), {"property_id": str(self.property.pk)})
        self.assertEqual(len(response.data), 1)

    def test_sub_director_cannot_manage_schedules(self) -> None:
        self.act_as(Profile.objects.create(full_name="Sid Director", role=Profile.SUB_DIRECTOR))

        response = self.client.post(reverse("preventive-task-list"), {}, format="json")

        self.assertEqual(response.status_code, 403)


class WebhookTaskTests(TicketApiTestCase):
    @override_settings(TICKET_CREATED_WEBHOOK_URL="")
    @mock.patch("tickets.tasks.requests.post")
    def test_missing_url_skips_post(self, mock_post: mock.Mock) -> None:
        ticket = self.make_ticket()

        notify_ticket_created(str(ticket.pk))

        mock_post.assert_not_called()

    @override_settings(TICKET_CREATED_WEBHOOK_URL="https://hooks.test/created")
    @mock.patch("tickets.tasks.requests.post")
    def test_created_payload(self, mock_post: mock.Mock) -> None:
        Profile.objects.create(full_name="Hana House", role=Profile.HOUSEKEEPER, telegram_chat_id="chat-hk")
        Profile.objects.create(full_name="Sid Director", role=Profile.SUB_DIRECTOR, telegram_chat_id="chat-sd")
        ticket = self.make_ticket(priority=Ticket.URGENT)

        notify_ticket_created(str(ticket.pk))

        url = mock_post.call_args.args[0]
        payload = mock_post.call_args.kwargs["json"]
        self.assertEqual(url, "https://hooks.test/created")
        self.assertEqual(payload["created_by"], "Rita Reporter")
        self.assertEqual(payload["housekeeper_telegram_chat_id"], "chat-hk")
        self.assertEqual(payload["sub_director_telegram_chat_id"], "chat-sd")

    @override_settings(TICKET_ASSIGNED_WEBHOOK_URL="https://hooks.test/assigned")
    @mock.patch("tickets.tasks.requests.post")
    def test_assigned_payload(self, mock_post: mock.Mock) -> None:
        ticket = self.make_ticket(assigned_to=self.tech, status=Ticket.ASSIGNED)

        notify_ticket_assigned(str(ticket.pk), str(self.admin.pk))

        payload = mock_post.call_args.kwargs["json"]
        self.assertEqual(payload["user_telegram_chat_id"], "chat-bob")
        self.assertEqual(payload["assigned_by"], "Ada Admin")
        self.assertNotIn("sub_director_telegram_chat_id", payload)

    @override_settings(TICKET_ASSIGNED_WEBHOOK_URL="https://hooks.test/assigned")
    @mock.patch("tickets.tasks.requests.post")
    def test_assignee_without_chat_is_skipped(self, mock_post: mock.Mock) -> None:
        quiet = Profile.objects.create(full_name="Quiet Tech", role=Profile.MAINTENANCE)
        ticket = self.make_ticket(assigned_to=quiet, status=Ticket.ASSIGNED)

        notify_ticket_assigned(str(ticket.pk))

        mock_post.assert_not_called()

    @override_settings(TICKET_CREATED_WEBHOOK_URL="https://hooks.test/created")
    @mock.patch("tickets.tasks.notify_ticket_created.retry", side_effect=RuntimeError("retry"))
    @mock.patch("tickets.tasks.requests.post", side_effect=requests.ConnectionError("down"))
    def test_failed_post_retries(self, mock_post: mock.Mock, mock_retry: mock.Mock) -> None:
        ticket = self.make_ticket()

        with self.assertRaises(RuntimeError):
            notify_ticket_created(str(ticket.pk))

        mock_retry.assert_called_once()


class HelperTests(SimpleTestCase):
    def test_ticket_age_labels(self) -> None:
        now = datetime(2024, 3, 10, 12, tzinfo=dt_timezone.utc)
        self.assertEqual(ticket_age(now - timedelta(minutes=30), now).label, "Just now")
        self.assertEqual(ticket_age(now - timedelta(hours=5), now).label, "5h ago")
        old = ticket_age(now - timedelta(days=3), now)
        self.assertEqual(old.label, "3d ago")
        self.assertTrue(old.is_overdue)
        self.assertFalse(ticket_age(now - timedelta(hours=48), now).is_overdue)

    def test_average_resolution(self) -> None:
        start = datetime(2024, 1, 1, tzinfo=dt_timezone.utc)
        pairs = [(start, start + timedelta(hours=2)), (start, start + timedelta(hours=5)), (start, None)]
        self.assertEqual(average_resolution_hours(pairs), 4)
        self.assertEqual(average_resolution_hours([]), 0)

    def test_next_occurrence(self) -> None:
        now = datetime(2024, 1, 31, 9, tzinfo=dt_timezone.utc)
        self.assertEqual(next_occurrence("days", 3, None, now), now + timedelta(days=3))
        self.assertEqual(next_occurrence("months", 1, None, now), datetime(2024, 2, 29, 9, tzinfo=dt_timezone.utc))
        overdue = now - timedelta(days=10)
        self.assertEqual(next_occurrence("weeks", 1, overdue, now), now + timedelta(weeks=1))

    def test_comment_media_round_trip(self) -> None:
        body = comment_body_with_media(
            "See photos",
            [
                {"url": "https://files.test/a.jpg", "kind": "image"},
                {"url": "https://files.test/invoice.pdf", "kind": "invoice"},
            ],
        )
        self.assertEqual(body, "See photos\n\n![Image](https://files.test/a.jpg)")
        self.assertEqual(
            extract_media(body), [{"kind": "image", "url": "https://files.test/a.jpg", "alt": "Image"}]
        )


class PrintTimelineCommandTests(TicketApiTestCase):
    def test_prints_newest_first(self) -> None:
        ticket = self.make_ticket()
        TicketAuditLog.objects.create(
            ticket=ticket, actor=self.tech, action="comment_added", to_value={"body": "On my way"}
        )
        out = StringIO()

        call_command("print_timeline", str(ticket.pk), stdout=out)

        lines = out.getvalue().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].endswith('Bob Tech: Added a comment: "On my way"'))
        self.assertTrue(lines[1].endswith("Rita Reporter: Created the ticket"))

    def test_rejects_bad_id(self) -> None:
        with self.assertRaises(CommandError):
            call_command("print_timeline", "not-a-uuid", stdout=StringIO())
