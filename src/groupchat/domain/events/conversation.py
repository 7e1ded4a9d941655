from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar
from uuid import UUID

from groupchat.domain.events import topics
from groupchat.domain.events.base import Event


@dataclass(frozen=True, slots=True)
class ConversationCreated(Event):
    TOPIC: ClassVar[str] = topics.CONVERSATION_CREATED

    conversation_id: UUID
    type: str
    mode: str
    name: str | None
    creator: UUID | None
    members: list[UUID] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ConversationUpdated(Event):
    TOPIC: ClassVar[str] = topics.CONVERSATION_UPDATED

    conversation_id: UUID
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ConversationTopicUpdated(Event):
    TOPIC: ClassVar[str] = topics.CONVERSATION_TOPIC_UPDATED

    conversation_id: UUID
    topic: dict[str, Any]


@dataclass(frozen=True, slots=True)
class ConversationDeleted(Event):
    TOPIC: ClassVar[str] = topics.CONVERSATION_DELETED

    conversation_id: UUID


@dataclass(frozen=True, slots=True)
class MemberAddedInConversation(Event):
    TOPIC: ClassVar[str] = topics.MEMBER_ADDED_IN_CONVERSATION

    conversation_id: UUID
    member_id: UUID
    object_type: str
