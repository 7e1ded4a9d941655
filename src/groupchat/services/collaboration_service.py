"""Keeps collaboration-type conversations in step with the externally owned group."""
from __future__ import annotations

import logging

from groupchat.application.dto.conversation import (
    CollaborationModificationsDTO,
    CreateConversationDTO,
)
from groupchat.application.exceptions import NotFoundError
from groupchat.application.ports.directory import MemberDirectory
from groupchat.application.uow import UnitOfWork
from groupchat.domain.entities.conversation import CollaborationTuple, Conversation, MemberRef
from groupchat.domain.entities.member import MemberRecord
from groupchat.domain.value_objects.enums import ConversationType
from groupchat.services import conversation_service, message_service

logger = logging.getLogger(__name__)


def _not_found(collaboration: CollaborationTuple) -> NotFoundError:
    return NotFoundError(
        f"No conversation for collaboration {collaboration.object_type}:{collaboration.id}"
    )


async def get_conversation_by_collaboration(
    collaboration: CollaborationTuple,
    uow: UnitOfWork,
    directory: MemberDirectory,
) -> tuple[Conversation, list[MemberRecord]]:
    """Return the conversation and its members resolved to directory records."""
    async with uow:
        conversation = await uow.conversations.get_by_collaboration(collaboration)
    if conversation is None:
        raise _not_found(collaboration)

    records = await directory.get_many(m.id for m in conversation.members)
    members = [
        records.get(m.id) or MemberRecord(id=m.id, object_type=m.object_type)
        for m in conversation.members
    ]
    return conversation, members


async def update_conversation(
    collaboration: CollaborationTuple,
    modifications: CollaborationModificationsDTO,
    uow: UnitOfWork,
) -> Conversation:
    async with uow:
        conversation = await uow.conversations.get_by_collaboration(collaboration)
        if conversation is None:
            raise _not_found(collaboration)

        if modifications.new_members:
            await uow.participants_w.add_many(conversation.id, modifications.new_members)
        if modifications.delete_members:
            await uow.participants_w.remove_many(conversation.id, modifications.delete_members)
        if modifications.title:
            await uow.conversations_w.update_settings(conversation.id, name=modifications.title)

        updated = await uow.conversations.get_by_id(conversation.id)
        await uow.commit()

    if updated is None:
        raise _not_found(collaboration)
    logger.info(
        "Collaboration conversation %s updated: +%d -%d",
        updated.id, len(modifications.new_members), len(modifications.delete_members),
    )
    if modifications.new_members:
        await message_service.mark_all_as_read(
            [m.id for m in modifications.new_members], updated, uow,
        )
    return updated


async def ensure_conversation(
    collaboration: CollaborationTuple,
    members: list[MemberRef],
    uow: UnitOfWork,
    *,
    title: str | None = None,
) -> Conversation:
    """Return the conversation bound to the collaboration, creating it on first sight."""
    async with uow:
        existing = await uow.conversations.get_by_collaboration(collaboration)
    if existing is not None:
        logger.debug(
            "Collaboration %s:%s already has conversation %s",
            collaboration.object_type, collaboration.id, existing.id,
        )
        return existing

    return await conversation_service.create_conversation(
        CreateConversationDTO(
            type=ConversationType.COLLABORATION,
            members=members,
            name=title,
            collaboration=collaboration,
        ),
        uow,
    )
