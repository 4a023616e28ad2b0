"""Background tasks that fan ticket events out to the automation webhooks."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from celery import shared_task
from django.conf import settings

from accounts.models import Profile

from .models import Ticket

logger = logging.getLogger(__name__)


def _first_chat_id(role: str) -> Optional[str]:
    profile = (
        Profile.objects.filter(role=role, is_active=True)
        .exclude(telegram_chat_id="")
        .order_by("created_at")
        .first()
    )
    return profile.telegram_chat_id if profile else None


def build_created_payload(ticket) -> Dict[str, Any]:
    """Translate a new ticket into the ``ticket_created`` webhook body."""

    creator = ticket.created_by
    payload: Dict[str, Any] = {
        "ticket_id": str(ticket.pk),
        "created_by": creator.full_name if creator else "System",
        "created_by_id": str(ticket.created_by_id) if ticket.created_by_id else None,
        "category": ticket.category,
        "description": ticket.description,
        "priority": ticket.priority,
    }
    housekeeper_chat = _first_chat_id(Profile.HOUSEKEEPER)
    if housekeeper_chat:
        payload["housekeeper_telegram_chat_id"] = housekeeper_chat
    if ticket.priority == Ticket.URGENT:
        director_chat = _first_chat_id(Profile.SUB_DIRECTOR)
        if director_chat:
            payload["sub_director_telegram_chat_id"] = director_chat
    return payload


def build_assigned_payload(ticket, assigned_by: Optional[Profile]) -> Optional[Dict[str, Any]]:
    """Translate an assignment into the ``ticket_assigned`` webhook body.

    Returns ``None`` when the assignee has no chat to notify.
    """

    assignee = ticket.assigned_to
    if assignee is None or not assignee.telegram_chat_id:
        return None
    payload: Dict[str, Any] = {
        "ticket_id": str(ticket.pk),
        "assigned_by": assigned_by.full_name if assigned_by else "System",
        "category": ticket.category,
        "description": ticket.description,
        "priority": ticket.priority,
        "user_id": str(assignee.pk),
        "user_telegram_chat_id": assignee.telegram_chat_id,
    }
    if ticket.priority == Ticket.URGENT:
        director_chat = _first_chat_id(Profile.SUB_DIRECTOR)
        if director_chat:
            payload["sub_director_telegram_chat_id"] = director_chat
    return payload


def _post(task, url: str, payload: Dict[str, Any], event: str) -> None:
    try:
        response = requests.post(url, json=payload, timeout=settings.SERVICE_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Webhook %s for ticket %s failed: %s", event, payload.get("ticket_id"), exc)
        if task.request.retries >= task.max_retries:
            logger.error("Giving up on webhook %s for ticket %s", event, payload.get("ticket_id"))
            return
        raise task.retry(exc=exc, countdown=min(60, 2 ** task.request.retries))
    logger.info("Webhook %s delivered for ticket %s", event, payload.get("ticket_id"))


@shared_task(bind=True, max_retries=3, default_retry_delay=5)
def notify_ticket_created(self, ticket_id: str) -> None:
    """Post a new ticket to the creation webhook."""

    url = settings.TICKET_CREATED_WEBHOOK_URL
    if not url:
        logger.warning("TICKET_CREATED_WEBHOOK_URL is not set")
        return
    ticket = Ticket.objects.select_related("created_by").filter(pk=ticket_id).first()
    if ticket is None:
        logger.warning("Ticket %s does not exist", ticket_id)
        return
    _post(self, url, build_created_payload(ticket), "ticket_created")


@shared_task(bind=True, max_retries=3, default_retry_delay=5)
def notify_ticket_assigned(self, ticket_id: str, assigned_by_id: Optional[str] = None) -> None:
    """Post an assignment to the assignment webhook."""

    url = settings.TICKET_ASSIGNED_WEBHOOK_URL
    if not url:
        logger.warning("TICKET_ASSIGNED_WEBHOOK_URL is not set")
        return
    ticket = Ticket.objects.select_related("assigned_to").filter(pk=ticket_id).first()
    if ticket is None:
        logger.warning("Ticket %s does not exist", ticket_id)
        return
    assigned_by = Profile.objects.filter(pk=assigned_by_id).first() if assigned_by_id else None
    payload = build_assigned_payload(ticket, assigned_by)
    if payload is None:
        logger.info("Assignee of ticket %s has no chat id, skipping", ticket_id)
        return
    _post(self, url, payload, "ticket_assigned")
