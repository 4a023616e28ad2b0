"""Tests for the ticket activity timeline."""
from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from django.test import SimpleTestCase

from accounts.directory import Actor, StaticDirectory

from .timeline import (
    EMPTY_MESSAGE,
    Assigned,
    CompositeChange,
    ExpenseAdded,
    StatusChanged,
    UnknownChange,
    build_timeline,
    parse_details,
    render_details,
    render_lines,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _ticket(created_at=T0, created_by_id="u-alice"):
    return SimpleNamespace(created_at=created_at, created_by_id=created_by_id)


def _entry(entry_id, action, created_at, actor_id="u-alice", from_value=None, to_value=None):
    return SimpleNamespace(
        id=entry_id,
        action=action,
        created_at=created_at,
        actor_id=actor_id,
        from_value=from_value,
        to_value=to_value,
    )


class TimelineBuilderTests(SimpleTestCase):
    def setUp(self) -> None:
        self.directory = StaticDirectory(
            {
                "u-alice": Actor(name="Alice", role="reporter"),
                "u-bob": Actor(name="Bob", role="maintenance"),
            }
        )

    def test_synthesizes_creation_when_log_is_empty(self) -> None:
        timeline = build_timeline(_ticket(), [], self.directory)

        self.assertEqual(len(timeline), 1)
        event = timeline.events[0]
        self.assertEqual(event.action, "created")
        self.assertEqual(event.timestamp, T0)
        self.assertEqual(event.actor.name, "Alice")
        self.assertTrue(event.synthesized)
        self.assertIsNone(timeline.empty_message)

    def test_does_not_duplicate_logged_creation(self) -> None:
        entries = [_entry("a1", "created", T0, to_value={"status": "reported"})]

        timeline = build_timeline(_ticket(), entries, self.directory)

        created = [event for event in timeline if event.action == "created"]
        self.assertEqual(len(created), 1)
        self.assertFalse(created[0].synthesized)

    def test_orders_newest_first(self) -> None:
        t1, t2, t3 = (T0 + timedelta(days=n) for n in (1, 2, 3))
        entries = [
            _entry("a2", "comment_added", t2, to_value={"body": "two"}),
            _entry("a1", "comment_added", t1, to_value={"body": "one"}),
            _entry("a3", "comment_added", t3, to_value={"body": "three"}),
        ]

        timeline = build_timeline(_ticket(), entries, self.directory)

        self.assertEqual([event.timestamp for event in timeline], [t3, t2, t1, T0])
        self.assertTrue(timeline.events[-1].synthesized)

    def test_output_does_not_depend_on_input_order(self) -> None:
        same_time = T0 + timedelta(hours=5)
        entries = [
            _entry("a1", "status_changed", same_time, to_value={"status": "assigned"}),
            _entry("a2", "priority_changed", same_time, to_value={"priority": "high"}),
            _entry("a3", "comment_added", T0 + timedelta(hours=6), to_value={"body": "hi"}),
            _entry("a4", "comment_added", T0, to_value={"body": "same time as creation"}),
        ]
        expected = [event.id for event in build_timeline(_ticket(), entries, self.directory)]

        shuffler = random.Random(7)
        for _ in range(10):
            shuffled = entries[:]
            shuffler.shuffle(shuffled)
            result = [event.id for event in build_timeline(_ticket(), shuffled, self.directory)]
            self.assertEqual(result, expected)

        # The synthesized creation sorts after a logged entry at the same instant.
        self.assertEqual(expected[-2:], ["a4", None])

    def test_unresolved_actor_falls_back(self) -> None:
        entries = [
            _entry("a1", "comment_added", T0 + timedelta(hours=1), actor_id="u-gone", to_value={"body": "x"}),
            _entry("a2", "comment_added", T0 + timedelta(hours=2), actor_id=None, to_value={"body": "y"}),
        ]

        timeline = build_timeline(_ticket(created_by_id="u-deleted"), entries, self.directory)

        self.assertEqual([event.actor.name for event in timeline], ["System", "Unknown", "Unknown"])
        self.assertEqual(timeline.events[1].text, 'Added a comment: "x"')

    def test_status_change_renders_both_values(self) -> None:
        entries = [
            _entry(
                "a1",
                "status_changed",
                T0 + timedelta(hours=1),
                from_value={"status": "reported"},
                to_value={"status": "assigned"},
            )
        ]

        text = build_timeline(_ticket(), entries, self.directory).events[0].text

        self.assertIn("reported", text)
        self.assertIn("assigned", text)
        self.assertLess(text.index("reported"), text.index("assigned"))
        self.assertEqual(text, "Changed status from reported → assigned")

    def test_unknown_action_is_humanized(self) -> None:
        entries = [_entry("a1", "custom_future_action", T0 + timedelta(hours=1))]

        event = build_timeline(_ticket(), entries, self.directory).events[0]

        self.assertEqual(event.text, "custom future action")
        self.assertEqual(event.kind, "other")
        self.assertIsInstance(event.details, UnknownChange)

    def test_end_to_end_scenario(self) -> None:
        entries = [
            _entry(
                "a1",
                "assigned",
                datetime(2024, 1, 2, tzinfo=timezone.utc),
                actor_id="u-alice",
                to_value={"assigned_to_user_id": "u-bob", "assigned_to_name": "Bob"},
            ),
            _entry(
                "a2",
                "status_changed",
                datetime(2024, 1, 3, tzinfo=timezone.utc),
                actor_id="u-bob",
                from_value={"status": "assigned"},
                to_value={"status": "resolved"},
            ),
        ]

        timeline = build_timeline(_ticket(), entries, self.directory)

        self.assertEqual([event.action for event in timeline], ["status_changed", "assigned", "created"])
        self.assertEqual(timeline.events[1].text, "Assigned to Bob")
        created = timeline.events[2]
        self.assertTrue(created.synthesized)
        self.assertEqual(created.actor.name, "Alice")
        self.assertEqual(created.timestamp, T0)

    def test_resolution_is_never_synthesized(self) -> None:
        ticket = SimpleNamespace(
            created_at=T0, created_by_id="u-alice", resolved_at=T0 + timedelta(days=1)
        )

        timeline = build_timeline(ticket, [], self.directory)

        self.assertEqual([event.action for event in timeline], ["created"])

    def test_legacy_tag_with_creation_is_not_duplicated(self) -> None:
        entries = [
            _entry("a1", "created, status_changed", T0, to_value={"status": "reported"}),
            _entry("a2", "  created ", T0 + timedelta(hours=1)),
        ]

        for entry in entries:
            timeline = build_timeline(_ticket(), [entry], self.directory)
            self.assertEqual(len(timeline), 1)
            self.assertFalse(timeline.events[0].synthesized)

    def test_deleted_creator_is_unknown(self) -> None:
        timeline = build_timeline(_ticket(created_by_id=None), [], self.directory)

        self.assertEqual(timeline.events[0].actor.name, "Unknown")
        self.assertTrue(timeline.events[0].synthesized)

    def test_empty_state_without_activity(self) -> None:
        timeline = build_timeline(_ticket(created_at=None), [], self.directory)

        self.assertEqual(timeline.events, [])
        self.assertEqual(timeline.empty_message, EMPTY_MESSAGE)
        self.assertEqual(render_lines(timeline), [EMPTY_MESSAGE])


class RenderDetailsTests(SimpleTestCase):
    def test_malformed_payloads_render_placeholders(self) -> None:
        details = parse_details("status_changed", "not-a-dict", None)

        self.assertEqual(details, StatusChanged(None, None))
        self.assertEqual(render_details(details), "Changed status from None → None")

    def test_in_progress_is_humanized(self) -> None:
        details = parse_details("status_changed", {"status": "in_progress"}, {"status": "resolved"})

        self.assertEqual(render_details(details), "Changed status from in progress → resolved")

    def test_unassignment(self) -> None:
        details = parse_details("assigned_to_changed", None, {"assigned_to_user_id": None})

        self.assertEqual(details, Assigned(None, None))
        self.assertEqual(render_details(details), "Unassigned ticket")

    def test_expense_amounts(self) -> None:
        added = parse_details(
            "expense_added",
            None,
            {"description": "Filter", "amount": "12.5", "attachment_url": "https://files.test/r.pdf"},
        )
        self.assertIsInstance(added, ExpenseAdded)
        self.assertEqual(render_details(added), "Added expense: Filter - $12.50 (Receipt)")

        removed = parse_details("expense_removed", {"description": "Filter", "amount": "oops"}, None)
        self.assertEqual(render_details(removed), "Removed expense: Filter ($0.00)")

    def test_huge_amount_still_renders(self) -> None:
        entries = [
            _entry("a1", "expense_added", T0 + timedelta(hours=1), to_value={"description": "x", "amount": 1e30}),
            _entry("a2", "expense_removed", T0 + timedelta(hours=2), from_value={"description": "y", "amount": "1e40"}),
        ]

        timeline = build_timeline(_ticket(), entries, StaticDirectory())

        self.assertTrue(timeline.events[0].text.startswith("Removed expense: y ($1,000,000"))
        self.assertTrue(timeline.events[1].text.startswith("Added expense: x - $1,000,000"))
        self.assertTrue(timeline.events[1].text.endswith(".00"))

    def test_evidence_and_description(self) -> None:
        evidence = parse_details("evidence_added", None, {"url": "https://files.test/a.png", "kind": "image"})
        self.assertEqual(render_details(evidence), "Uploaded evidence (image)")
        self.assertEqual(
            render_details(parse_details("description_changed", {}, {})), "Updated the description"
        )

    def test_comma_joined_legacy_tags(self) -> None:
        details = parse_details(
            "status_changed, priority_changed",
            {"status": "reported", "priority": "low"},
            {"status": "assigned", "priority": "urgent"},
        )

        self.assertIsInstance(details, CompositeChange)
        self.assertEqual(
            render_details(details),
            "Changed status from reported → assigned; Changed priority from low → urgent",
        )
