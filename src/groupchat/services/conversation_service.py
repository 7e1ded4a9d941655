from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from groupchat.application.dto.conversation import (
    ConversationFilterDTO,
    CreateConversationDTO,
    UpdateConversationDTO,
)
from groupchat.application.exceptions import NotFoundError
from groupchat.application.uow import UnitOfWork
from groupchat.domain.entities.conversation import Conversation, MemberRef, TextSetting
from groupchat.domain.events.conversation import (
    ConversationCreated,
    ConversationDeleted,
    ConversationTopicUpdated,
    ConversationUpdated,
    MemberAddedInConversation,
)
from groupchat.domain.value_objects.enums import ConversationMode, ConversationType
from groupchat.services import message_service

logger = logging.getLogger(__name__)


def _is_deduplicated(data: CreateConversationDTO) -> bool:
    return data.type == ConversationType.CONFIDENTIAL or data.mode == ConversationMode.PRIVATE


def _created_event(conversation: Conversation) -> ConversationCreated:
    return ConversationCreated(
        conversation_id=conversation.id,
        type=conversation.type,
        mode=conversation.mode,
        name=conversation.name,
        creator=conversation.creator,
        members=[m.id for m in conversation.members],
    )


async def create_conversation(
    data: CreateConversationDTO,
    uow: UnitOfWork,
) -> Conversation:
    """Create a conversation, or return the existing one with the same members and name.

    Confidential and private conversations are deduplicated on
    (type, member set, name); an unnamed conversation only matches
    unnamed ones.
    """
    members = tuple(dict.fromkeys(data.members))
    async with uow:
        if _is_deduplicated(data):
            existing = await uow.conversations.find_by_members(
                data.type, frozenset(members), data.name,
            )
            if existing is not None:
                logger.debug("Reusing conversation %s for %d member(s)", existing.id, len(members))
                return existing

        now = datetime.now(timezone.utc)
        conversation = Conversation(
            id=uuid.uuid4(),
            type=data.type,
            mode=data.mode,
            name=data.name,
            created_at=now,
            updated_at=now,
            topic=TextSetting(data.topic, data.creator) if data.topic is not None else None,
            purpose=TextSetting(data.purpose, data.creator) if data.purpose is not None else None,
            creator=data.creator,
            members=members,
            collaboration=data.collaboration,
            domain_id=data.domain_id,
            moderate=data.moderate,
        )
        conversation = await uow.conversations_w.create(conversation)
        await uow.outbox.add(_created_event(conversation))
        await uow.commit()

    logger.info("Conversation %s created (type=%s mode=%s)", conversation.id, data.type, data.mode)
    return conversation


async def get_conversation(
    conversation_id: uuid.UUID,
    uow: UnitOfWork,
) -> Conversation:
    async with uow:
        conversation = await uow.conversations.get_by_id(conversation_id)
    if conversation is None:
        raise NotFoundError(f"No such conversation {conversation_id}")
    return conversation


async def list_conversations(
    filters: ConversationFilterDTO,
    uow: UnitOfWork,
) -> tuple[list[Conversation], int]:
    """Return one page of matching conversations and the total match count."""
    async with uow:
        items = await uow.conversations.list_filtered(filters)
        total = await uow.conversations.count_filtered(filters)
    return items, total


async def update_conversation(
    conversation_id: uuid.UUID,
    patch: UpdateConversationDTO,
    actor_id: uuid.UUID | None,
    uow: UnitOfWork,
) -> Conversation:
    topic = TextSetting(patch.topic, actor_id) if patch.topic is not None else None
    purpose = TextSetting(patch.purpose, actor_id) if patch.purpose is not None else None

    async with uow:
        found = await uow.conversations_w.update_settings(
            conversation_id, name=patch.name, topic=topic, purpose=purpose,
        )
        if not found:
            raise NotFoundError(f"No such conversation {conversation_id}")

        changes: dict[str, object] = {}
        if patch.name is not None:
            changes["name"] = patch.name
        if purpose is not None:
            changes["purpose"] = {"value": purpose.value, "creator": purpose.creator}
        if changes:
            await uow.outbox.add(
                ConversationUpdated(conversation_id=conversation_id, changes=changes)
            )
        if topic is not None:
            await uow.outbox.add(
                ConversationTopicUpdated(
                    conversation_id=conversation_id,
                    topic={"value": topic.value, "creator": topic.creator},
                )
            )

        conversation = await uow.conversations.get_by_id(conversation_id)
        await uow.commit()

    if conversation is None:
        raise NotFoundError(f"No such conversation {conversation_id}")
    return conversation


async def remove_conversation(
    conversation_id: uuid.UUID,
    uow: UnitOfWork,
) -> None:
    async with uow:
        deleted = await uow.conversations_w.delete(conversation_id)
        if not deleted:
            raise NotFoundError(f"No such conversation {conversation_id}")
        await uow.outbox.add(ConversationDeleted(conversation_id=conversation_id))
        await uow.commit()
    logger.info("Conversation %s removed", conversation_id)


async def mark_read_up_to(
    member_id: uuid.UUID,
    conversation_id: uuid.UUID,
    uow: UnitOfWork,
) -> None:
    """Catch the member's read counter up with the stored message count."""
    await message_service.mark_all_as_read_by_id(member_id, conversation_id, uow)


async def add_member(
    conversation_id: uuid.UUID,
    member: MemberRef,
    uow: UnitOfWork,
) -> Conversation:
    """Add a member; a newcomer starts with no unread history."""
    async with uow:
        if await uow.conversations.get_by_id(conversation_id) is None:
            raise NotFoundError(f"No such conversation {conversation_id}")
        added = await uow.participants_w.add_many(conversation_id, [member])
        for ref in added:
            await uow.outbox.add(
                MemberAddedInConversation(
                    conversation_id=conversation_id,
                    member_id=ref.id,
                    object_type=ref.object_type,
                )
            )
        conversation = await uow.conversations.get_by_id(conversation_id)
        await uow.commit()

    if conversation is None:
        raise NotFoundError(f"No such conversation {conversation_id}")

    if added:
        await message_service.mark_all_as_read([ref.id for ref in added], conversation, uow)
    return conversation


async def remove_member(
    conversation_id: uuid.UUID,
    member: MemberRef,
    uow: UnitOfWork,
) -> Conversation:
    async with uow:
        if await uow.conversations.get_by_id(conversation_id) is None:
            raise NotFoundError(f"No such conversation {conversation_id}")
        await uow.participants_w.remove_many(conversation_id, [member])
        conversation = await uow.conversations.get_by_id(conversation_id)
        await uow.commit()

    if conversation is None:
        raise NotFoundError(f"No such conversation {conversation_id}")
    return conversation


async def create_default_channel(
    domain_id: uuid.UUID,
    uow: UnitOfWork,
    *,
    name: str = "general",
    topic: str | None = None,
    purpose: str | None = None,
) -> Conversation:
    """Return the domain's default channel, creating it on first use."""
    async with uow:
        existing = await uow.conversations.get_default_channel(domain_id)
        if existing is not None:
            return existing

        now = datetime.now(timezone.utc)
        conversation = Conversation(
            id=uuid.uuid4(),
            type=ConversationType.OPEN,
            mode=ConversationMode.CHANNEL,
            name=name,
            created_at=now,
            updated_at=now,
            topic=TextSetting(topic) if topic is not None else None,
            purpose=TextSetting(purpose) if purpose is not None else None,
            domain_id=domain_id,
            is_default=True,
        )
        conversation, created = await uow.conversations_w.create_default_if_not_exists(conversation)
        if created:
            await uow.outbox.add(_created_event(conversation))
        await uow.commit()

    if created:
        logger.info("Default channel %s created for domain %s", conversation.id, domain_id)
    return conversation


async def ensure_default_channels(
    member_id: uuid.UUID,
    domain_ids: list[uuid.UUID],
    uow: UnitOfWork,
    *,
    name: str = "general",
    topic: str | None = None,
    purpose: str | None = None,
) -> list[Conversation]:
    """Bootstrap the default channel of each domain and join the member to it."""
    channels = []
    for domain_id in domain_ids:
        channel = await create_default_channel(
            domain_id, uow, name=name, topic=topic, purpose=purpose,
        )
        if not channel.has_member(member_id):
            channel = await add_member(channel.id, MemberRef(id=member_id), uow)
        channels.append(channel)
    return channels
