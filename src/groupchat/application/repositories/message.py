from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from groupchat.domain.entities.message import AttachmentRecord, Message


class MessageReader(Protocol):
    async def get_by_id(self, message_id: UUID) -> Message | None: ...

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        before: datetime | None = None,
        offset: int = 0,
        limit: int = 30,
    ) -> list[Message]:
        """Non-moderated messages, newest first."""
        ...

    async def list_attachments(
        self,
        conversation_id: UUID,
        *,
        offset: int = 0,
        count: int = 10,
    ) -> list[AttachmentRecord]:
        """Slice of the attachments of non-moderated messages, oldest message first."""
        ...


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message: ...
