from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from groupchat.domain.events import topics
from groupchat.domain.events.base import Event


def _collaboration(data: dict[str, Any]) -> tuple[str, str]:
    collaboration = data.get("collaboration") or {}
    return str(collaboration.get("objectType", "")), str(collaboration.get("id", ""))


def _members(raw: Any) -> tuple[Any, ...]:
    return tuple(raw or ())


@dataclass(frozen=True, slots=True)
class CollaborationCreated(Event):
    """An externally owned collaboration came into existence."""

    TOPIC: ClassVar[str] = topics.COLLABORATION_CREATED

    collaboration_object_type: str
    collaboration_id: str
    title: str | None
    members: tuple[Any, ...]

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> CollaborationCreated:
        object_type, collaboration_id = _collaboration(data)
        return cls(
            collaboration_object_type=object_type,
            collaboration_id=collaboration_id,
            title=data.get("title"),
            members=_members(data.get("members")),
        )


@dataclass(frozen=True, slots=True)
class CollaborationUpdated(Event):
    """Membership or title of a collaboration changed.

    Member entries are either bare ids or ``{"id", "objectType"}`` objects.
    """

    TOPIC: ClassVar[str] = topics.COLLABORATION_UPDATED

    collaboration_object_type: str
    collaboration_id: str
    new_members: tuple[Any, ...]
    delete_members: tuple[Any, ...]
    title: str | None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> CollaborationUpdated:
        object_type, collaboration_id = _collaboration(data)
        return cls(
            collaboration_object_type=object_type,
            collaboration_id=collaboration_id,
            new_members=_members(data.get("newMembers")),
            delete_members=_members(data.get("deleteMembers")),
            title=data.get("title"),
        )
