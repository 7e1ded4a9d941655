from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Attachment:
    id: UUID
    name: str
    content_type: str
    length: int


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    conversation_id: UUID
    creator: UUID
    type: str
    text: str | None
    created_at: datetime
    subtype: str | None = None
    attachments: tuple[Attachment, ...] = ()
    user_mentions: tuple[UUID, ...] = ()
    moderate: bool = False


@dataclass(frozen=True, slots=True)
class AttachmentRecord:
    """One entry of a conversation's flattened attachment index."""

    id: UUID
    message_id: UUID
    creator: UUID
    creation_date: datetime
    name: str
    content_type: str
    length: int
