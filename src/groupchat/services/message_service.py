from __future__ import annotations

import logging
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Iterable

from groupchat.application.dto.message import MessageDraft, MessagePageDTO
from groupchat.application.exceptions import NotFoundError
from groupchat.application.ports.directory import MemberDirectory
from groupchat.application.ports.links import ResourceLink, ResourceLinkChecker, ResourceTuple
from groupchat.application.uow import UnitOfWork
from groupchat.domain.entities.conversation import Conversation, LastMessage
from groupchat.domain.entities.member import MemberRecord
from groupchat.domain.entities.message import AttachmentRecord, Message
from groupchat.domain.events.base import jsonable
from groupchat.domain.events.message_saved import MessageSaved
from groupchat.domain.value_objects.enums import STAR_LINK_TYPE, ObjectType
from groupchat.domain.value_objects.ids import MENTION_RE

logger = logging.getLogger(__name__)


def extract_mentions(text: str | None) -> list[uuid.UUID]:
    """Member ids mentioned as ``@<uuid>``, in order of first appearance."""
    if not text:
        return []
    return list(dict.fromkeys(uuid.UUID(raw) for raw in MENTION_RE.findall(text)))


def _saved_payload(message: Message, members: dict[uuid.UUID, MemberRecord]) -> dict[str, Any]:
    def expand(member_id: uuid.UUID) -> dict[str, Any]:
        record = members.get(member_id) or MemberRecord(id=member_id)
        return asdict(record)

    payload = asdict(message)
    payload["creator"] = expand(message.creator)
    payload["user_mentions"] = [expand(m) for m in message.user_mentions]
    return jsonable(payload)


async def create_message(
    draft: MessageDraft,
    uow: UnitOfWork,
    directory: MemberDirectory,
) -> Message:
    """Persist a message and apply its side effects on the owning conversation.

    In one transaction: bump the conversation's message count and last-message
    snapshot, insert the message, catch the author's read counter up and
    enqueue ``message.saved``. Raises NotFoundError when the conversation is gone.
    """
    mentions = list(dict.fromkeys([*draft.user_mentions, *extract_mentions(draft.text)]))
    created_at = draft.created_at or datetime.now(timezone.utc)
    message = Message(
        id=draft.id or uuid.uuid4(),
        conversation_id=draft.conversation_id,
        creator=draft.creator,
        type=draft.type,
        text=draft.text,
        created_at=created_at,
        subtype=draft.subtype,
        attachments=tuple(draft.attachments),
        user_mentions=tuple(mentions),
        moderate=draft.moderate,
    )
    members = await directory.get_many([message.creator, *mentions])

    async with uow:
        count = await uow.conversations_w.record_message(
            message.conversation_id,
            LastMessage(
                text=message.text,
                creator=message.creator,
                user_mentions=message.user_mentions,
                date=created_at,
            ),
        )
        if count is None:
            raise NotFoundError(f"No such conversation {message.conversation_id}")

        message = await uow.messages_w.create(message)
        await uow.read_state_w.max_merge(message.conversation_id, [message.creator], count)
        await uow.outbox.add(
            MessageSaved(
                conversation_id=message.conversation_id,
                message=_saved_payload(message, members),
            )
        )
        await uow.commit()

    logger.debug("Message %s saved in %s (count=%d)", message.id, message.conversation_id, count)
    return message


async def get_message(
    message_id: uuid.UUID,
    uow: UnitOfWork,
) -> tuple[Message, Conversation]:
    """Return the message together with the conversation it belongs to."""
    async with uow:
        message = await uow.messages.get_by_id(message_id)
        if message is None:
            raise NotFoundError(f"No such message {message_id}")
        conversation = await uow.conversations.get_by_id(message.conversation_id)
    if conversation is None:
        raise NotFoundError(f"No such conversation {message.conversation_id}")
    return message, conversation


async def list_messages(
    conversation_id: uuid.UUID,
    page: MessagePageDTO,
    uow: UnitOfWork,
) -> list[Message]:
    """Window of ``page.limit`` messages ending ``page.offset`` messages from the newest.

    With ``page.before`` only messages strictly older than that message are
    considered. The window is returned oldest first.
    """
    async with uow:
        before = None
        if page.before is not None:
            cursor = await uow.messages.get_by_id(page.before)
            if cursor is None or cursor.conversation_id != conversation_id:
                raise NotFoundError(
                    f"No such message {page.before} in conversation {conversation_id}"
                )
            before = cursor.created_at
        newest_first = await uow.messages.list_messages(
            conversation_id, before=before, offset=page.offset, limit=page.limit,
        )
    return list(reversed(newest_first))


async def list_attachments(
    conversation_id: uuid.UUID,
    *,
    limit: int,
    offset: int,
    uow: UnitOfWork,
) -> list[AttachmentRecord]:
    """Attachments ``[offset, limit)`` of the conversation, oldest message first.

    ``limit`` is an end index into the flattened attachment sequence, not a count.
    """
    async with uow:
        return await uow.messages.list_attachments(
            conversation_id, offset=offset, count=max(limit - offset, 0),
        )


async def is_starred_by(
    message: Message,
    member_id: uuid.UUID,
    links: ResourceLinkChecker,
) -> bool:
    link = ResourceLink(
        source=ResourceTuple(object_type=ObjectType.USER, id=str(member_id)),
        target=ResourceTuple(object_type=ObjectType.MESSAGE, id=str(message.id)),
        type=STAR_LINK_TYPE,
    )
    return await links.exists(link)


async def mark_all_as_read_by_id(
    member_id: uuid.UUID,
    conversation_id: uuid.UUID,
    uow: UnitOfWork,
) -> None:
    async with uow:
        conversation = await uow.conversations.get_by_id(conversation_id)
        if conversation is None:
            raise NotFoundError(f"No such conversation {conversation_id}")
        await uow.read_state_w.max_merge(
            conversation_id, [member_id], conversation.num_of_message,
        )
        await uow.commit()


async def mark_all_as_read(
    member_ids: Iterable[uuid.UUID],
    conversation: Conversation,
    uow: UnitOfWork,
) -> None:
    """Raise each member's read counter to the conversation's message count."""
    ids = list(dict.fromkeys(member_ids))
    if not ids:
        return
    async with uow:
        await uow.read_state_w.max_merge(conversation.id, ids, conversation.num_of_message)
        await uow.commit()
