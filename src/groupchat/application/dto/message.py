from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from groupchat.domain.entities.message import Attachment
from groupchat.domain.value_objects.enums import MessageType


@dataclass(frozen=True, slots=True)
class MessageDraft:
    """Input of the message-received entry point, user-authored or synthesized."""

    conversation_id: UUID
    creator: UUID
    text: str | None = None
    type: MessageType = MessageType.TEXT
    subtype: str | None = None
    attachments: list[Attachment] = field(default_factory=list)
    user_mentions: list[UUID] = field(default_factory=list)
    moderate: bool = False
    id: UUID | None = None
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class MessagePageDTO:
    limit: int = 30
    offset: int = 0
    before: UUID | None = None
