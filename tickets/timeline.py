"""Build the activity timeline shown on a ticket.

The timeline merges the ticket's audit log with events implied by the ticket
itself. Only the creation event is ever synthesized: older tickets predate
audit logging, so their log may lack a ``created`` entry. Resolution and
closure are never synthesized; the ``status_changed`` entries already
describe them.

Everything here is a pure function of the ticket snapshot, the audit
entries and an :class:`~accounts.directory.ActorDirectory`. Bad payloads and
unresolvable actors degrade to placeholders instead of raising.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from accounts.directory import Actor, ActorDirectory

SYSTEM_ACTOR = Actor(name="System")
UNKNOWN_ACTOR = Actor(name="Unknown")
EMPTY_MESSAGE = "No activity yet"
PLACEHOLDER = "None"

CREATED = "created"


@dataclass(frozen=True)
class Created:
    status: Optional[str] = None


@dataclass(frozen=True)
class StatusChanged:
    from_status: Optional[str]
    to_status: Optional[str]


@dataclass(frozen=True)
class PriorityChanged:
    from_priority: Optional[str]
    to_priority: Optional[str]


@dataclass(frozen=True)
class Assigned:
    user_id: Optional[str]
    user_name: Optional[str]


@dataclass(frozen=True)
class CategoryChanged:
    from_category: Optional[str]
    to_category: Optional[str]


@dataclass(frozen=True)
class DescriptionChanged:
    pass


@dataclass(frozen=True)
class CommentAdded:
    body: str = ""


@dataclass(frozen=True)
class EvidenceAdded:
    url: Optional[str]
    kind: Optional[str]


@dataclass(frozen=True)
class ExpenseAdded:
    description: Optional[str]
    amount: Decimal
    attachment_url: Optional[str]


@dataclass(frozen=True)
class ExpenseRemoved:
    description: Optional[str]
    amount: Decimal


@dataclass(frozen=True)
class UnknownChange:
    action: str
    from_value: Mapping[str, Any] = field(default_factory=dict)
    to_value: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CompositeChange:
    """Legacy rows that packed several changes into one comma-joined tag."""

    parts: Tuple["Details", ...]


Details = Union[
    Created,
    StatusChanged,
    PriorityChanged,
    Assigned,
    CategoryChanged,
    DescriptionChanged,
    CommentAdded,
    EvidenceAdded,
    ExpenseAdded,
    ExpenseRemoved,
    UnknownChange,
    CompositeChange,
]


@dataclass(frozen=True)
class TimelineEvent:
    id: Optional[str]
    action: str
    timestamp: datetime
    actor: Actor
    details: Details
    kind: str
    text: str
    synthesized: bool = False


@dataclass(frozen=True)
class Timeline:
    events: List[TimelineEvent]

    @property
    def empty_message(self) -> Optional[str]:
        return EMPTY_MESSAGE if not self.events else None

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self):
        return iter(self.events)


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _amount(value: Any) -> Decimal:
    try:
        amount = Decimal(str(value)) if value not in (None, "") else Decimal("0")
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return amount if amount.is_finite() else Decimal("0")


def parse_details(action: str, from_value: Any, to_value: Any) -> Details:
    """Turn a raw action tag and its JSON snapshots into a typed payload."""

    tags = [tag.strip() for tag in (action or "").split(",") if tag.strip()]
    if len(tags) > 1:
        return CompositeChange(parts=tuple(parse_details(tag, from_value, to_value) for tag in tags))

    tag = tags[0] if tags else ""
    before = _as_mapping(from_value)
    after = _as_mapping(to_value)

    if tag == CREATED:
        return Created(status=_text(after.get("status")))
    if tag == "status_changed":
        return StatusChanged(_text(before.get("status")), _text(after.get("status")))
    if tag == "priority_changed":
        return PriorityChanged(_text(before.get("priority")), _text(after.get("priority")))
    if tag in ("assigned", "assigned_to_changed"):
        return Assigned(_text(after.get("assigned_to_user_id")), _text(after.get("assigned_to_name")))
    if tag == "category_changed":
        return CategoryChanged(_text(before.get("category")), _text(after.get("category")))
    if tag == "description_changed":
        return DescriptionChanged()
    if tag == "comment_added":
        return CommentAdded(body=_text(after.get("body")) or "")
    if tag == "evidence_added":
        return EvidenceAdded(_text(after.get("url")), _text(after.get("kind")))
    if tag == "expense_added":
        return ExpenseAdded(
            _text(after.get("description")),
            _amount(after.get("amount")),
            _text(after.get("attachment_url")),
        )
    if tag == "expense_removed":
        return ExpenseRemoved(_text(before.get("description")), _amount(before.get("amount")))
    return UnknownChange(action=tag or (action or ""), from_value=before, to_value=after)


def _humanize(value: Optional[str]) -> str:
    if not value:
        return PLACEHOLDER
    return value.replace("_", " ")


def _money(amount: Decimal) -> str:
    try:
        return "${:,.2f}".format(amount)
    except (InvalidOperation, ValueError):
        return "$0.00"


def render_details(details: Details) -> str:
    """Describe a payload as one line of activity text."""

    if isinstance(details, Created):
        return "Created the ticket"
    if isinstance(details, StatusChanged):
        return f"Changed status from {_humanize(details.from_status)} → {_humanize(details.to_status)}"
    if isinstance(details, PriorityChanged):
        return f"Changed priority from {_humanize(details.from_priority)} → {_humanize(details.to_priority)}"
    if isinstance(details, Assigned):
        if details.user_id:
            return f"Assigned to {details.user_name or 'User'}"
        return "Unassigned ticket"
    if isinstance(details, CategoryChanged):
        return f"Changed category from {_humanize(details.from_category)} → {_humanize(details.to_category)}"
    if isinstance(details, DescriptionChanged):
        return "Updated the description"
    if isinstance(details, CommentAdded):
        return f'Added a comment: "{details.body}"'
    if isinstance(details, EvidenceAdded):
        return f"Uploaded evidence ({details.kind or 'file'})"
    if isinstance(details, ExpenseAdded):
        text = f"Added expense: {details.description or PLACEHOLDER} - {_money(details.amount)}"
        if details.attachment_url:
            text += " (Receipt)"
        return text
    if isinstance(details, ExpenseRemoved):
        return f"Removed expense: {details.description or PLACEHOLDER} ({_money(details.amount)})"
    if isinstance(details, CompositeChange):
        return "; ".join(render_details(part) for part in details.parts)
    return _humanize(details.action) if details.action else "Unknown activity"


_KINDS = {
    Created: "created",
    StatusChanged: "status",
    PriorityChanged: "priority",
    Assigned: "assignment",
    CategoryChanged: "category",
    DescriptionChanged: "edit",
    CommentAdded: "comment",
    EvidenceAdded: "evidence",
    ExpenseAdded: "expense",
    ExpenseRemoved: "expense",
}


def classify(details: Details) -> str:
    """Pick the display kind a client uses to choose an icon."""

    if isinstance(details, CompositeChange):
        return classify(details.parts[0]) if details.parts else "other"
    return _KINDS.get(type(details), "other")


def _resolve_actor(directory: ActorDirectory, actor_id: Any) -> Actor:
    if actor_id is None:
        return SYSTEM_ACTOR
    actor = directory.resolve(actor_id)
    return actor if actor is not None else UNKNOWN_ACTOR


def _event(
    *,
    event_id: Optional[str],
    action: str,
    timestamp: datetime,
    actor: Actor,
    from_value: Any,
    to_value: Any,
    synthesized: bool = False,
) -> TimelineEvent:
    details = parse_details(action, from_value, to_value)
    return TimelineEvent(
        id=event_id,
        action=action,
        timestamp=timestamp,
        actor=actor,
        details=details,
        kind=classify(details),
        text=render_details(details),
        synthesized=synthesized,
    )


def _is_creation(details: Details) -> bool:
    if isinstance(details, CompositeChange):
        return any(_is_creation(part) for part in details.parts)
    return isinstance(details, Created)


def _sort_key(event: TimelineEvent) -> Tuple[datetime, bool, str]:
    return (event.timestamp, not event.synthesized, event.id or "")


def build_timeline(ticket: Any, entries: Iterable[Any], directory: ActorDirectory) -> Timeline:
    """Merge audit entries with a synthesized creation event, newest first.

    ``ticket`` needs ``created_by_id`` and ``created_at``. Each entry needs
    ``id``, ``actor_id``, ``action``, ``from_value``, ``to_value`` and
    ``created_at``.
    """

    events: List[TimelineEvent] = []
    for entry in entries:
        if getattr(entry, "created_at", None) is None:
            continue
        events.append(
            _event(
                event_id=_text(getattr(entry, "id", None)),
                action=getattr(entry, "action", "") or "",
                timestamp=entry.created_at,
                actor=_resolve_actor(directory, getattr(entry, "actor_id", None)),
                from_value=getattr(entry, "from_value", None),
                to_value=getattr(entry, "to_value", None),
            )
        )

    has_creation = any(_is_creation(event.details) for event in events)
    created_at = getattr(ticket, "created_at", None)
    if not has_creation and created_at is not None:
        creator_id = getattr(ticket, "created_by_id", None)
        # A ticket always has a creator; a missing one was deleted.
        creator = _resolve_actor(directory, creator_id) if creator_id is not None else UNKNOWN_ACTOR
        events.append(
            _event(
                event_id=None,
                action=CREATED,
                timestamp=created_at,
                actor=creator,
                from_value=None,
                to_value={"created_by": _text(creator_id)} if creator_id is not None else None,
                synthesized=True,
            )
        )

    events.sort(key=_sort_key, reverse=True)
    return Timeline(events=events)


def render_lines(timeline: Timeline, timestamp_format: str = "%Y-%m-%d %H:%M") -> Sequence[str]:
    """Plain-text rendering, one line per event, used by logs and exports."""

    if not timeline.events:
        return [EMPTY_MESSAGE]
    return [
        f"{event.timestamp.strftime(timestamp_format)} {event.actor.name}: {event.text}"
        for event in timeline.events
    ]
