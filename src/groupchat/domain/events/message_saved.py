from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar
from uuid import UUID

from groupchat.domain.events import topics
from groupchat.domain.events.base import Event


@dataclass(frozen=True, slots=True)
class MessageSaved(Event):
    """Carries the saved message with creator and mentions expanded to member records."""

    TOPIC: ClassVar[str] = topics.MESSAGE_SAVED

    conversation_id: UUID
    message: dict[str, Any]
