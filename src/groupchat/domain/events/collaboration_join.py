from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from groupchat.domain.events import topics
from groupchat.domain.events.base import Event


@dataclass(frozen=True, slots=True)
class CollaborationJoin(Event):
    """A member joined an externally owned collaboration."""

    TOPIC: ClassVar[str] = topics.COLLABORATION_JOIN

    collaboration_object_type: str
    collaboration_id: str
    target: str

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> CollaborationJoin:
        collaboration = data.get("collaboration") or {}
        return cls(
            collaboration_object_type=str(collaboration.get("objectType", "")),
            collaboration_id=str(collaboration.get("id", "")),
            target=str(data.get("target", "")),
        )
