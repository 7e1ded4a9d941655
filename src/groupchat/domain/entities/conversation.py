from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from groupchat.domain.value_objects.enums import ObjectType


@dataclass(frozen=True, slots=True)
class MemberRef:
    id: UUID
    object_type: str = ObjectType.USER


@dataclass(frozen=True, slots=True)
class TextSetting:
    """A topic or purpose together with the member who set it."""

    value: str
    creator: UUID | None = None


@dataclass(frozen=True, slots=True)
class CollaborationTuple:
    object_type: str
    id: str


@dataclass(frozen=True, slots=True)
class LastMessage:
    text: str | None
    creator: UUID
    user_mentions: tuple[UUID, ...]
    date: datetime


@dataclass(frozen=True, slots=True)
class Conversation:
    id: UUID
    type: str
    mode: str
    name: str | None
    created_at: datetime
    updated_at: datetime
    topic: TextSetting | None = None
    purpose: TextSetting | None = None
    creator: UUID | None = None
    members: tuple[MemberRef, ...] = ()
    collaboration: CollaborationTuple | None = None
    domain_id: UUID | None = None
    is_default: bool = False
    num_of_message: int = 0
    num_of_readed_message: dict[UUID, int] = field(default_factory=dict)
    last_message: LastMessage | None = None
    moderate: bool = False

    def has_member(self, member_id: UUID) -> bool:
        return any(m.id == member_id for m in self.members)

    def unread_count(self, member_id: UUID) -> int:
        return max(self.num_of_message - self.num_of_readed_message.get(member_id, 0), 0)
