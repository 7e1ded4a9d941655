from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from groupchat.domain.entities.conversation import CollaborationTuple, MemberRef
from groupchat.domain.value_objects.enums import ConversationMode, ConversationType


@dataclass(frozen=True, slots=True)
class CreateConversationDTO:
    type: ConversationType
    mode: ConversationMode = ConversationMode.CHANNEL
    members: list[MemberRef] = field(default_factory=list)
    name: str | None = None
    topic: str | None = None
    purpose: str | None = None
    creator: UUID | None = None
    collaboration: CollaborationTuple | None = None
    domain_id: UUID | None = None
    moderate: bool = False


@dataclass(frozen=True, slots=True)
class UpdateConversationDTO:
    """Fields left as ``None`` are not touched."""

    name: str | None = None
    purpose: str | None = None
    topic: str | None = None


@dataclass(frozen=True, slots=True)
class ConversationFilterDTO:
    types: tuple[ConversationType, ...] = ()
    mode: ConversationMode | None = None
    member_id: UUID | None = None
    include_moderated: bool = False
    by_last_activity: bool = False
    limit: int | None = 20
    offset: int = 0


@dataclass(frozen=True, slots=True)
class CollaborationModificationsDTO:
    new_members: list[MemberRef] = field(default_factory=list)
    delete_members: list[MemberRef] = field(default_factory=list)
    title: str | None = None
