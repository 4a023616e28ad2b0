"""Actor lookup used when rendering ticket activity."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Protocol

from .models import Profile


@dataclass(frozen=True)
class Actor:
    """Display metadata for the person credited with an event."""

    name: str
    role: Optional[str] = None


class ActorDirectory(Protocol):
    def resolve(self, actor_id: Any) -> Optional[Actor]:
        """Return the actor for ``actor_id`` or ``None`` when it no longer resolves."""
        ...


class StaticDirectory:
    """In-memory directory keyed by actor id."""

    def __init__(self, actors: Optional[Dict[Any, Actor]] = None) -> None:
        self._actors: Dict[str, Actor] = {
            str(key): value for key, value in (actors or {}).items()
        }

    def resolve(self, actor_id: Any) -> Optional[Actor]:
        if actor_id is None:
            return None
        return self._actors.get(str(actor_id))


class ProfileDirectory(StaticDirectory):
    """Directory backed by :class:`Profile` rows, loaded in one query."""

    def __init__(self, actor_ids: Iterable[Any]) -> None:
        ids = {actor_id for actor_id in actor_ids if actor_id is not None}
        profiles = Profile.objects.filter(id__in=ids).only("id", "full_name", "role")
        super().__init__(
            {profile.id: Actor(name=profile.full_name, role=profile.role) for profile in profiles}
        )
