from __future__ import annotations

from typing import Protocol
from uuid import UUID

from groupchat.application.dto.conversation import ConversationFilterDTO
from groupchat.domain.entities.conversation import (
    CollaborationTuple,
    Conversation,
    LastMessage,
    MemberRef,
    TextSetting,
)


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: UUID) -> Conversation | None: ...

    async def get_by_collaboration(
        self, collaboration: CollaborationTuple
    ) -> Conversation | None:
        """Find the collaboration-type conversation bound to an external group."""
        ...

    async def get_default_channel(self, domain_id: UUID) -> Conversation | None: ...

    async def find_by_members(
        self,
        conversation_type: str,
        members: frozenset[MemberRef],
        name: str | None,
    ) -> Conversation | None:
        """Find a conversation whose member set equals ``members`` exactly.

        ``name=None`` matches only unnamed conversations.
        """
        ...

    async def list_filtered(self, filters: ConversationFilterDTO) -> list[Conversation]: ...

    async def count_filtered(self, filters: ConversationFilterDTO) -> int: ...


class ConversationWriter(Protocol):
    async def create(self, conversation: Conversation) -> Conversation:
        """Insert the conversation together with its members."""
        ...

    async def create_default_if_not_exists(
        self, conversation: Conversation
    ) -> tuple[Conversation, bool]:
        """Insert a domain default channel. Return (conversation, created)."""
        ...

    async def update_settings(
        self,
        conversation_id: UUID,
        *,
        name: str | None = None,
        topic: TextSetting | None = None,
        purpose: TextSetting | None = None,
    ) -> bool: ...

    async def record_message(
        self, conversation_id: UUID, last_message: LastMessage
    ) -> int | None:
        """Increment numOfMessage and overwrite last_message in one statement.

        Returns the new message count, or None when the conversation is gone.
        """
        ...

    async def delete(self, conversation_id: UUID) -> bool: ...


class ParticipantWriter(Protocol):
    async def add_many(
        self, conversation_id: UUID, members: list[MemberRef]
    ) -> list[MemberRef]:
        """Add-to-set. Returns only the members that were not already present."""
        ...

    async def remove_many(self, conversation_id: UUID, members: list[MemberRef]) -> None: ...
