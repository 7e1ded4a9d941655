"""Shared test fixtures: in-memory implementations of the repository ports."""
from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable
from uuid import UUID

import pytest

from groupchat.application.dto.conversation import ConversationFilterDTO
from groupchat.application.dto.principal import Principal
from groupchat.application.ports.bus import EventHandler
from groupchat.application.ports.links import ResourceLink
from groupchat.application.repositories.outbox import OutboxRecord
from groupchat.domain.entities.conversation import (
    CollaborationTuple,
    Conversation,
    LastMessage,
    MemberRef,
    TextSetting,
)
from groupchat.domain.entities.member import MemberRecord
from groupchat.domain.entities.message import Attachment, AttachmentRecord, Message
from groupchat.domain.events.base import Event
from groupchat.domain.value_objects.enums import (
    ConversationMode,
    ConversationType,
    MessageType,
    ParticipantKind,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def user_principal() -> Principal:
    return Principal(kind=ParticipantKind.USER, subject_id=uuid.uuid4(), roles=[])


@pytest.fixture
def admin_principal() -> Principal:
    return Principal(kind=ParticipantKind.ADMIN, subject_id=uuid.uuid4(), roles=["admin"])


def make_conversation(
    *,
    conversation_id: UUID | None = None,
    type: str = ConversationType.OPEN,
    mode: str = ConversationMode.CHANNEL,
    name: str | None = "general",
    members: Iterable[UUID] = (),
    creator: UUID | None = None,
    collaboration: CollaborationTuple | None = None,
    num_of_message: int = 0,
    moderate: bool = False,
    created_at: datetime | None = None,
    last_message_at: datetime | None = None,
) -> Conversation:
    created_at = created_at or datetime.now(timezone.utc)
    last_message = None
    if last_message_at is not None:
        last_message = LastMessage(
            text="hi", creator=creator or uuid.uuid4(), user_mentions=(), date=last_message_at,
        )
    return Conversation(
        id=conversation_id or uuid.uuid4(),
        type=type,
        mode=mode,
        name=name,
        created_at=created_at,
        updated_at=created_at,
        creator=creator,
        members=tuple(MemberRef(id=m) for m in members),
        collaboration=collaboration,
        num_of_message=num_of_message,
        last_message=last_message,
        moderate=moderate,
    )


def make_message(
    *,
    conversation_id: UUID,
    text: str = "hello",
    creator: UUID | None = None,
    created_at: datetime | None = None,
    attachments: Iterable[Attachment] = (),
    moderate: bool = False,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        creator=creator or uuid.uuid4(),
        type=MessageType.TEXT,
        text=text,
        created_at=created_at or datetime.now(timezone.utc),
        attachments=tuple(attachments),
        moderate=moderate,
    )


def make_attachment(name: str = "file.txt") -> Attachment:
    return Attachment(id=uuid.uuid4(), name=name, content_type="text/plain", length=12)


def seconds(n: int) -> datetime:
    return T0 + timedelta(seconds=n)


def _matches(c: Conversation, filters: ConversationFilterDTO) -> bool:
    if filters.types and c.type not in filters.types:
        return False
    if filters.mode is not None and c.mode != filters.mode:
        return False
    if not filters.include_moderated and c.moderate:
        return False
    if filters.member_id is not None and not c.has_member(filters.member_id):
        return False
    return True


@dataclass
class FakeConversationReader:
    _store: dict[UUID, Conversation] = field(default_factory=dict)

    def put(self, conversation: Conversation) -> Conversation:
        self._store[conversation.id] = conversation
        return conversation

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        return self._store.get(conversation_id)

    async def get_by_collaboration(self, collaboration: CollaborationTuple) -> Conversation | None:
        for c in self._store.values():
            if c.type == ConversationType.COLLABORATION and c.collaboration == collaboration:
                return c
        return None

    async def get_default_channel(self, domain_id: UUID) -> Conversation | None:
        for c in self._store.values():
            if c.is_default and c.domain_id == domain_id:
                return c
        return None

    async def find_by_members(
        self, conversation_type: str, members: frozenset[MemberRef], name: str | None,
    ) -> Conversation | None:
        for c in sorted(self._store.values(), key=lambda c: c.created_at):
            if c.type == conversation_type and frozenset(c.members) == members and c.name == name:
                return c
        return None

    async def list_filtered(self, filters: ConversationFilterDTO) -> list[Conversation]:
        items = [c for c in self._store.values() if _matches(c, filters)]
        items.sort(key=lambda c: c.created_at, reverse=True)
        if filters.by_last_activity:
            floor = datetime.min.replace(tzinfo=timezone.utc)
            items.sort(
                key=lambda c: c.last_message.date if c.last_message else floor,
                reverse=True,
            )
        end = None if filters.limit is None else filters.offset + filters.limit
        return items[filters.offset:end]

    async def count_filtered(self, filters: ConversationFilterDTO) -> int:
        return sum(1 for c in self._store.values() if _matches(c, filters))


@dataclass
class FakeConversationWriter:
    _reader: FakeConversationReader

    def _replace(self, conversation_id: UUID, **changes: Any) -> Conversation | None:
        current = self._reader._store.get(conversation_id)
        if current is None:
            return None
        updated = dataclasses.replace(current, **changes)
        self._reader._store[conversation_id] = updated
        return updated

    async def create(self, conversation: Conversation) -> Conversation:
        return self._reader.put(conversation)

    async def create_default_if_not_exists(
        self, conversation: Conversation,
    ) -> tuple[Conversation, bool]:
        existing = await self._reader.get_default_channel(conversation.domain_id)
        if existing is not None:
            return existing, False
        return self._reader.put(conversation), True

    async def update_settings(
        self,
        conversation_id: UUID,
        *,
        name: str | None = None,
        topic: TextSetting | None = None,
        purpose: TextSetting | None = None,
    ) -> bool:
        changes: dict[str, Any] = {}
        if name is not None:
            changes["name"] = name
        if topic is not None:
            changes["topic"] = topic
        if purpose is not None:
            changes["purpose"] = purpose
        return self._replace(conversation_id, **changes) is not None

    async def record_message(self, conversation_id: UUID, last_message: LastMessage) -> int | None:
        current = self._reader._store.get(conversation_id)
        if current is None:
            return None
        updated = self._replace(
            conversation_id,
            num_of_message=current.num_of_message + 1,
            last_message=last_message,
        )
        return updated.num_of_message if updated else None

    async def delete(self, conversation_id: UUID) -> bool:
        return self._reader._store.pop(conversation_id, None) is not None


@dataclass
class FakeParticipantWriter:
    _reader: FakeConversationReader

    async def add_many(self, conversation_id: UUID, members: list[MemberRef]) -> list[MemberRef]:
        current = self._reader._store.get(conversation_id)
        if current is None:
            return []
        added = [m for m in dict.fromkeys(members) if m not in current.members]
        self._reader._store[conversation_id] = dataclasses.replace(
            current, members=current.members + tuple(added),
        )
        return added

    async def remove_many(self, conversation_id: UUID, members: list[MemberRef]) -> None:
        current = self._reader._store.get(conversation_id)
        if current is None:
            return
        self._reader._store[conversation_id] = dataclasses.replace(
            current, members=tuple(m for m in current.members if m not in members),
        )


@dataclass
class FakeReadStateWriter:
    _reader: FakeConversationReader

    async def max_merge(self, conversation_id: UUID, member_ids: list[UUID], count: int) -> None:
        current = self._reader._store.get(conversation_id)
        if current is None:
            return
        counters = dict(current.num_of_readed_message)
        for member_id in member_ids:
            counters[member_id] = max(counters.get(member_id, 0), count)
        self._reader._store[conversation_id] = dataclasses.replace(
            current, num_of_readed_message=counters,
        )


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)

    async def get_by_id(self, message_id: UUID) -> Message | None:
        return next((m for m in self._messages if m.id == message_id), None)

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        before: datetime | None = None,
        offset: int = 0,
        limit: int = 30,
    ) -> list[Message]:
        items = [
            m for m in self._messages
            if m.conversation_id == conversation_id
            and not m.moderate
            and (before is None or m.created_at < before)
        ]
        items.sort(key=lambda m: (m.created_at, m.id), reverse=True)
        return items[offset:offset + limit]

    async def list_attachments(
        self,
        conversation_id: UUID,
        *,
        offset: int = 0,
        count: int = 10,
    ) -> list[AttachmentRecord]:
        messages = sorted(
            (m for m in self._messages if m.conversation_id == conversation_id and not m.moderate),
            key=lambda m: (m.created_at, m.id),
        )
        flattened = [
            AttachmentRecord(
                id=a.id,
                message_id=m.id,
                creator=m.creator,
                creation_date=m.created_at,
                name=a.name,
                content_type=a.content_type,
                length=a.length,
            )
            for m in messages
            for a in m.attachments
        ]
        return flattened[offset:offset + count]


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    async def create(self, message: Message) -> Message:
        self._reader._messages.append(message)
        return message


@dataclass
class FakeOutboxWriter:
    _events: list[Event] = field(default_factory=list)

    @property
    def topics(self) -> list[str]:
        return [e.TOPIC for e in self._events]

    async def add(self, event: Event) -> None:
        self._events.append(event)

    async def fetch_pending(self, batch_size: int) -> list[OutboxRecord]:
        return [
            OutboxRecord(id=i, topic=e.TOPIC, payload=e.to_payload(), attempts=0)
            for i, e in enumerate(self._events[:batch_size], start=1)
        ]

    async def mark_sent(self, ids: list[int]) -> None:
        pass

    async def mark_failed(self, record_id: int, next_retry_at: datetime, error: str = "") -> None:
        pass


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    conversations: FakeConversationReader = field(default_factory=FakeConversationReader)
    conversations_w: FakeConversationWriter | None = None
    participants_w: FakeParticipantWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    read_state_w: FakeReadStateWriter | None = None
    outbox: FakeOutboxWriter = field(default_factory=FakeOutboxWriter)
    commits: int = 0
    rollbacks: int = 0

    def __post_init__(self) -> None:
        if self.conversations_w is None:
            self.conversations_w = FakeConversationWriter(self.conversations)
        if self.participants_w is None:
            self.participants_w = FakeParticipantWriter(self.conversations)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)
        if self.read_state_w is None:
            self.read_state_w = FakeReadStateWriter(self.conversations)

    @property
    def _committed(self) -> bool:
        return self.commits > 0

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1

    async def __aenter__(self) -> FakeUoW:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            await self.rollback()


@dataclass
class FakeDirectory:
    _records: dict[UUID, MemberRecord] = field(default_factory=dict)

    async def get_many(self, member_ids: Iterable[UUID]) -> dict[UUID, MemberRecord]:
        return {
            member_id: self._records.get(member_id) or MemberRecord(id=member_id)
            for member_id in member_ids
        }

    async def save(self, record: MemberRecord) -> None:
        self._records[record.id] = record


@dataclass
class FakeLinks:
    _links: set[ResourceLink] = field(default_factory=set)

    async def exists(self, link: ResourceLink) -> bool:
        return link in self._links


@dataclass
class FakeSubscriber:
    handlers: dict[str, list[EventHandler]] = field(default_factory=dict)

    def subscribe(self, topic: str, handler: EventHandler) -> None:
        self.handlers.setdefault(topic, []).append(handler)

    async def emit(self, topic: str, payload: dict[str, Any]) -> None:
        for handler in self.handlers.get(topic, []):
            await handler(payload)
