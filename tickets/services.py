"""Ticket mutations and the reads that back the ticket pages.

Every mutation runs in one transaction together with its audit entries.
Webhook notifications are queued only after that transaction commits.
"""
from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from accounts.directory import ProfileDirectory
from accounts.models import Profile
from accounts.permissions import has_permission

from . import audit
from .models import (
    PreventiveTask,
    Ticket,
    TicketAttachment,
    TicketAuditLog,
    TicketComment,
    TicketExpense,
)
from .tasks import notify_ticket_assigned, notify_ticket_created
from .timeline import Timeline, build_timeline

logger = logging.getLogger(__name__)

TRACKED_FIELDS = ("status", "priority", "assigned_to", "category", "description")

IMAGE_LINE = re.compile(r"^!\[(.*?)\]\((.*?)\)$")
VIDEO_LINE = re.compile(r"^\[Video\]\((.*?)\)$")


class TicketError(Exception):
    """A ticket operation was rejected for a business reason."""


def _after_commit(task, *args: Any) -> None:
    transaction.on_commit(lambda: task.delay(*args))


def scope_tickets(queryset: QuerySet, profile: Profile) -> QuerySet:
    """Restrict tickets to what the acting role may see."""

    if has_permission(profile, "canViewAllTickets"):
        return queryset
    if profile.role == Profile.MAINTENANCE:
        return queryset.filter(assigned_to=profile)
    return queryset.filter(created_by=profile)


def can_modify_ticket(profile: Profile, ticket: Ticket) -> bool:
    if not has_permission(profile, "canUpdateTickets"):
        return False
    if profile.role == Profile.MAINTENANCE:
        return ticket.assigned_to_id == profile.pk
    if profile.role == Profile.REPORTER:
        return ticket.created_by_id == profile.pk
    return True


def comment_body_with_media(body: str, attachments: Iterable[Dict[str, str]]) -> str:
    """Append inline image/video markup for each uploaded attachment."""

    lines = []
    for attachment in attachments:
        if attachment.get("kind") == TicketAttachment.IMAGE:
            lines.append(f"![Image]({attachment['url']})")
        elif attachment.get("kind") == TicketAttachment.VIDEO:
            lines.append(f"[Video]({attachment['url']})")
    if not lines:
        return body
    return body + "\n\n" + "\n".join(lines)


def extract_media(body: str) -> List[Dict[str, str]]:
    """Find the image and video links embedded in a comment body."""

    media: List[Dict[str, str]] = []
    for line in body.splitlines():
        line = line.strip()
        image = IMAGE_LINE.match(line)
        if image:
            media.append({"kind": TicketAttachment.IMAGE, "url": image.group(2), "alt": image.group(1)})
            continue
        video = VIDEO_LINE.match(line)
        if video:
            media.append({"kind": TicketAttachment.VIDEO, "url": video.group(1)})
    return media


def create_ticket(actor: Profile, data: Dict[str, Any]) -> Ticket:
    """Persist a new ticket with its creation audit entry and first comment."""

    data = dict(data)
    initial_comment = (data.pop("initial_comment", "") or "").strip()
    attachments = data.pop("attachments", []) or []

    with transaction.atomic():
        ticket = Ticket.objects.create(
            property=data["property"],
            unit=data.get("unit"),
            type=data.get("type", Ticket.CORRECTIVE),
            category=data["category"],
            priority=data.get("priority", Ticket.MEDIUM),
            description=data["description"],
            requires_spend=data.get("requires_spend", False),
            status=Ticket.REPORTED,
            created_by=actor,
        )
        audit.record(ticket, actor, TicketAuditLog.CREATED, None, {"status": Ticket.REPORTED})

        if initial_comment:
            TicketComment.objects.create(
                ticket=ticket,
                author=actor,
                body=comment_body_with_media(initial_comment, attachments),
            )

        TicketAttachment.objects.bulk_create(
            [
                TicketAttachment(ticket=ticket, url=item["url"], kind=item["kind"], uploaded_by=actor)
                for item in attachments
            ]
        )

    _after_commit(notify_ticket_created, str(ticket.pk))
    logger.info("Ticket %s created by %s", ticket.pk, actor.pk)
    return ticket


def _snapshot(ticket: Ticket) -> Dict[str, Any]:
    return {
        "status": ticket.status,
        "priority": ticket.priority,
        "assigned_to": str(ticket.assigned_to_id) if ticket.assigned_to_id else None,
        "category": ticket.category,
        "description": ticket.description,
    }


def update_ticket(actor: Profile, ticket: Ticket, changes: Dict[str, Any]) -> Ticket:
    """Apply field changes and write one audit entry per changed field.

    Setting an assignee on a ``reported`` ticket without an explicit status
    moves it to ``assigned``.
    """

    with transaction.atomic():
        ticket = Ticket.objects.select_for_update().get(pk=ticket.pk)
        before = _snapshot(ticket)
        changes = dict(changes)

        if changes.get("assigned_to") and ticket.status == Ticket.REPORTED and not changes.get("status"):
            changes["status"] = Ticket.ASSIGNED

        for name, value in changes.items():
            setattr(ticket, name, value)
        ticket.stamp_lifecycle()
        ticket.save()

        after = _snapshot(ticket)
        extra: Dict[str, Dict[str, Any]] = {}
        if ticket.assigned_to_id:
            extra["assigned_to"] = {
                "assigned_to_user_id": str(ticket.assigned_to_id),
                "assigned_to_name": ticket.assigned_to.full_name,
            }
        else:
            extra["assigned_to"] = {"assigned_to_user_id": None}
        audit.record_field_changes(ticket, actor, before, after, TRACKED_FIELDS, extra)

    if after["assigned_to"] and after["assigned_to"] != before["assigned_to"]:
        _after_commit(notify_ticket_assigned, str(ticket.pk), str(actor.pk))
    return ticket


def set_status(actor: Profile, ticket: Ticket, status: str) -> Ticket:
    with transaction.atomic():
        ticket = Ticket.objects.select_for_update().get(pk=ticket.pk)
        previous = ticket.status
        ticket.status = status
        ticket.stamp_lifecycle()
        ticket.save(update_fields=["status", "resolved_at", "closed_at", "updated_at"])
        audit.record(
            ticket,
            actor,
            TicketAuditLog.STATUS_CHANGED,
            {"status": previous},
            {"status": status},
        )
    return ticket


def assign_ticket(actor: Profile, ticket: Ticket, assignee: Optional[Profile]) -> Ticket:
    """Assign (or unassign) a ticket and move it to assigned (or reported)."""

    with transaction.atomic():
        ticket = Ticket.objects.select_for_update().get(pk=ticket.pk)
        ticket.assigned_to = assignee
        ticket.status = Ticket.ASSIGNED if assignee else Ticket.REPORTED
        ticket.save(update_fields=["assigned_to", "status", "updated_at"])
        audit.record(
            ticket,
            actor,
            TicketAuditLog.ASSIGNED,
            None,
            {
                "assigned_to_user_id": str(assignee.pk) if assignee else None,
                "assigned_to_name": assignee.full_name if assignee else "Unknown",
            },
        )

    if assignee is not None:
        _after_commit(notify_ticket_assigned, str(ticket.pk), str(actor.pk))
    return ticket


def add_comment(actor: Profile, ticket: Ticket, body: str) -> TicketComment:
    body = (body or "").strip()
    if not body:
        raise TicketError("Comment cannot be empty")

    with transaction.atomic():
        comment = TicketComment.objects.create(ticket=ticket, author=actor, body=body)
        audit.record(ticket, actor, TicketAuditLog.COMMENT_ADDED, None, {"body": body})
    return comment


def add_evidence(actor: Profile, ticket: Ticket, url: str, kind: str) -> TicketAttachment:
    with transaction.atomic():
        attachment = TicketAttachment.objects.create(
            ticket=ticket, url=url, kind=kind, uploaded_by=actor
        )
        audit.record(ticket, actor, TicketAuditLog.EVIDENCE_ADDED, None, {"url": url, "kind": kind})
    return attachment


def add_expense(
    actor: Profile,
    ticket: Ticket,
    description: str,
    amount: Decimal,
    attachment_url: Optional[str] = None,
) -> TicketExpense:
    with transaction.atomic():
        expense = TicketExpense.objects.create(
            ticket=ticket,
            description=description,
            amount=amount,
            attachment_url=attachment_url or None,
            created_by=actor,
        )
        audit.record(
            ticket,
            actor,
            TicketAuditLog.EXPENSE_ADDED,
            None,
            {"description": description, "amount": str(amount), "attachment_url": attachment_url or None},
        )
    return expense


def delete_expense(actor: Profile, expense: TicketExpense) -> None:
    """Remove an expense, keeping its prior state in the audit log."""

    with transaction.atomic():
        snapshot = expense.snapshot()
        ticket = expense.ticket
        expense.delete()
        audit.record(ticket, actor, TicketAuditLog.EXPENSE_REMOVED, snapshot, None)


def ticket_timeline(ticket: Ticket) -> Timeline:
    """Read the full audit log for ``ticket`` and build its timeline."""

    entries = list(TicketAuditLog.objects.filter(ticket=ticket))
    directory = ProfileDirectory([entry.actor_id for entry in entries] + [ticket.created_by_id])
    return build_timeline(ticket, entries, directory)


@dataclass(frozen=True)
class TicketAge:
    hours: int
    label: str
    is_overdue: bool


def ticket_age(created_at: datetime, now: Optional[datetime] = None) -> TicketAge:
    now = now or timezone.now()
    elapsed = now - created_at
    hours = int(elapsed.total_seconds() // 3600)
    if hours < 1:
        label = "Just now"
    elif hours < 24:
        label = f"{hours}h ago"
    else:
        label = f"{elapsed.days}d ago"
    return TicketAge(hours=hours, label=label, is_overdue=hours > settings.TICKET_OVERDUE_HOURS)


def average_resolution_hours(pairs: Iterable[Tuple[datetime, Optional[datetime]]]) -> int:
    """Average whole hours from creation to resolution over resolved tickets."""

    durations = [
        int((resolved - created).total_seconds() // 3600)
        for created, resolved in pairs
        if resolved is not None
    ]
    if not durations:
        return 0
    return round(sum(durations) / len(durations))


def _add_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def next_occurrence(
    recurrence_type: str, interval: int, previous: Optional[datetime], now: datetime
) -> datetime:
    """Advance a schedule by one interval from the later of ``previous`` and ``now``."""

    base = max(previous, now) if previous is not None else now
    if recurrence_type == PreventiveTask.DAYS:
        return base + timedelta(days=interval)
    if recurrence_type == PreventiveTask.WEEKS:
        return base + timedelta(weeks=interval)
    if recurrence_type == PreventiveTask.MONTHS:
        return _add_months(base, interval)
    raise TicketError(f"Unsupported recurrence type: {recurrence_type}")


def generate_from_preventive(actor: Profile, task: PreventiveTask) -> Ticket:
    """Fire a preventive schedule into a new ticket and advance the schedule."""

    with transaction.atomic():
        task = PreventiveTask.objects.select_for_update().get(pk=task.pk)
        if not task.is_active:
            raise TicketError("Preventive task is paused")

        ticket = Ticket.objects.create(
            property_id=task.property_id,
            unit_id=task.unit_id,
            type=Ticket.PREVENTIVE,
            category=task.category,
            priority=Ticket.MEDIUM,
            description=task.description,
            status=Ticket.ASSIGNED if task.assigned_to_id else Ticket.REPORTED,
            assigned_to_id=task.assigned_to_id,
            created_by=actor,
        )
        audit.record(ticket, actor, TicketAuditLog.CREATED, None, {"status": Ticket.REPORTED})
        if task.assigned_to_id:
            audit.record(
                ticket,
                actor,
                TicketAuditLog.ASSIGNED,
                None,
                {
                    "assigned_to_user_id": str(task.assigned_to_id),
                    "assigned_to_name": task.assigned_to.full_name,
                },
            )

        now = timezone.now()
        task.last_generated_at = now
        task.next_scheduled_at = next_occurrence(
            task.recurrence_type, task.recurrence_interval, task.next_scheduled_at, now
        )
        task.save(update_fields=["last_generated_at", "next_scheduled_at", "updated_at"])

    _after_commit(notify_ticket_created, str(ticket.pk))
    if task.assigned_to_id:
        _after_commit(notify_ticket_assigned, str(ticket.pk), str(actor.pk))
    logger.info("Preventive task %s generated ticket %s", task.pk, ticket.pk)
    return ticket
