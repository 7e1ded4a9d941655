"""Consumer for collaboration and user events coming from other systems via Redis Streams."""
from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import redis.asyncio as aioredis

from groupchat.application.dto.message import MessageDraft
from groupchat.application.ports.directory import MemberDirectory
from groupchat.application.uow import UnitOfWork
from groupchat.config import settings
from groupchat.domain.entities.member import MemberRecord
from groupchat.domain.entities.message import Message
from groupchat.domain.events import topics
from groupchat.domain.value_objects.enums import ObjectType
from groupchat.infrastructure.bus.redis_streams import RedisStreamSubscriber
from groupchat.infrastructure.db.session import AsyncSessionLocal
from groupchat.infrastructure.db.uow import SqlAlchemyUoW
from groupchat.infrastructure.directory.redis_directory import RedisMemberDirectory
from groupchat.listeners.collaboration_sync import CollaborationSyncListener
from groupchat.listeners.join_conversation import JoinConversationSystemMessageListener
from groupchat.services import message_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def session_uow() -> AsyncIterator[UnitOfWork]:
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUoW(session)


def message_received(directory: MemberDirectory):
    """Entry point shared with user-authored messages: one session per message."""

    async def _on_message(draft: MessageDraft) -> Message:
        async with AsyncSessionLocal() as session:
            uow = SqlAlchemyUoW(session)
            message = await message_service.create_message(draft, uow, directory)
        logger.info("System message %s posted in %s", message.id, message.conversation_id)
        return message

    return _on_message


def user_updated(directory: MemberDirectory):
    async def _on_user_updated(data: dict[str, Any]) -> None:
        raw_id = data.get("id") or data.get("user_id")
        if not raw_id:
            logger.warning("user.updated event without id, skipping")
            return
        record = MemberRecord(
            id=uuid.UUID(str(raw_id)),
            object_type=data.get("objectType") or ObjectType.USER,
            display_name=data.get("display_name"),
            email=data.get("email"),
        )
        await directory.save(record)
        logger.debug("Member %s refreshed in directory", record.id)

    return _on_user_updated


async def run_consumer() -> None:
    redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    consumer_name = f"consumer-{uuid.uuid4().hex[:8]}"
    directory = RedisMemberDirectory(redis, settings.MEMBER_DIRECTORY_PREFIX)

    subscriber = RedisStreamSubscriber(
        redis=redis,
        stream=settings.COLLABORATION_EVENTS_STREAM,
        group=settings.COLLABORATION_EVENTS_GROUP,
        consumer=consumer_name,
    )
    JoinConversationSystemMessageListener(subscriber, message_received(directory)).start()
    CollaborationSyncListener(subscriber, session_uow).start()
    subscriber.subscribe(topics.USER_UPDATED, user_updated(directory))

    await subscriber.start()
    logger.info("Collaboration events consumer started (%s)", consumer_name)

    try:
        while True:
            await asyncio.sleep(3600)
    except asyncio.CancelledError:
        pass
    finally:
        await subscriber.stop()
        await redis.aclose()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(run_consumer())


if __name__ == "__main__":
    main()
