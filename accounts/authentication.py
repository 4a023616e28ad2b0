"""Resolve the acting profile from the header forwarded by the gateway."""
from __future__ import annotations

import logging
import uuid
from typing import Optional, Tuple

from rest_framework import authentication, exceptions

from .models import Profile

logger = logging.getLogger(__name__)

ACTOR_HEADER = "X-Actor-Id"


class ActorHeaderAuthentication(authentication.BaseAuthentication):
    """Trust the ``X-Actor-Id`` header set by the authenticating gateway."""

    def authenticate(self, request) -> Optional[Tuple[Profile, None]]:  # type: ignore[override]
        raw = request.headers.get(ACTOR_HEADER)
        if not raw:
            return None

        try:
            actor_id = uuid.UUID(raw.strip())
        except ValueError:
            raise exceptions.AuthenticationFailed("Malformed actor id.")

        profile = Profile.objects.filter(id=actor_id).first()
        if profile is None or not profile.is_active:
            logger.warning("Rejected request for unknown or inactive actor %s", actor_id)
            raise exceptions.AuthenticationFailed("Unknown or inactive actor.")
        return profile, None

    def authenticate_header(self, request) -> str:  # type: ignore[override]
        return ACTOR_HEADER
