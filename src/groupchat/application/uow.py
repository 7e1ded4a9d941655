from __future__ import annotations

from types import TracebackType
from typing import Protocol, Self

from groupchat.application.repositories.conversation import (
    ConversationReader,
    ConversationWriter,
    ParticipantWriter,
)
from groupchat.application.repositories.message import MessageReader, MessageWriter
from groupchat.application.repositories.outbox import OutboxWriter
from groupchat.application.repositories.read_state import ReadStateWriter


class UnitOfWork(Protocol):
    conversations: ConversationReader
    conversations_w: ConversationWriter
    participants_w: ParticipantWriter
    messages: MessageReader
    messages_w: MessageWriter
    read_state_w: ReadStateWriter
    outbox: OutboxWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...

    async def __aenter__(self) -> Self: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Roll back on error; storage driver errors are re-raised as StorageError."""
        ...
