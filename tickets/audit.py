"""Append entries to the ticket audit log."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from django.core.serializers.json import DjangoJSONEncoder

from .models import Ticket, TicketAuditLog

logger = logging.getLogger(__name__)


def _json_safe(value: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    return json.loads(json.dumps(value, cls=DjangoJSONEncoder))


def record(
    ticket: Ticket,
    actor: Any,
    action: str,
    from_value: Optional[Dict[str, Any]] = None,
    to_value: Optional[Dict[str, Any]] = None,
) -> TicketAuditLog:
    """Persist one audit entry. Call inside the mutation's transaction."""

    entry = TicketAuditLog.objects.create(
        ticket=ticket,
        actor_id=getattr(actor, "pk", actor),
        action=action,
        from_value=_json_safe(from_value),
        to_value=_json_safe(to_value),
    )
    logger.debug("Audit %s recorded for ticket %s by %s", action, ticket.pk, entry.actor_id)
    return entry


def record_field_changes(
    ticket: Ticket,
    actor: Any,
    before: Dict[str, Any],
    after: Dict[str, Any],
    fields: Iterable[str],
    extra_to: Optional[Dict[str, Dict[str, Any]]] = None,
) -> List[TicketAuditLog]:
    """Write one ``<field>_changed`` entry per field whose value changed."""

    entries: List[TicketAuditLog] = []
    for name in fields:
        if before.get(name) == after.get(name):
            continue
        action = f"{name}_changed"
        to_value = {name: after.get(name)}
        to_value.update((extra_to or {}).get(name, {}))
        entries.append(record(ticket, actor, action, {name: before.get(name)}, to_value))
    return entries
