"""Redis Streams subscriber for events owned by other systems."""
from __future__ import annotations

import asyncio
import logging

import redis.asyncio as aioredis

from groupchat.application.exceptions import BadRequestError
from groupchat.application.ports.bus import EventHandler
from groupchat.infrastructure.bus.serializer import deserialize_event

logger = logging.getLogger(__name__)

_POISON_ERRORS = (BadRequestError, KeyError, ValueError)


class RedisStreamSubscriber:
    """XREADGROUP-based consumer for one stream + consumer group, dispatching by topic.

    Implements application.ports.bus.EventSubscriber. Entries are expected to
    carry a single ``event`` field holding a serialized envelope.
    """

    def __init__(
        self,
        redis: aioredis.Redis,
        stream: str,
        group: str,
        consumer: str,
        *,
        batch_size: int = 10,
        block_ms: int = 5000,
    ) -> None:
        self._redis = redis
        self._stream = stream
        self._group = group
        self._consumer = consumer
        self._batch_size = batch_size
        self._block_ms = block_ms
        self._handlers: dict[str, list[EventHandler]] = {}
        self._task: asyncio.Task[None] | None = None

    def subscribe(self, topic: str, handler: EventHandler) -> None:
        self._handlers.setdefault(topic, []).append(handler)
        logger.debug("Handler registered for %s", topic)

    async def ensure_group(self) -> None:
        try:
            await self._redis.xgroup_create(
                self._stream, self._group, id="$", mkstream=True
            )
            logger.info("Created consumer group %s on %s", self._group, self._stream)
        except aioredis.ResponseError as e:
            if "BUSYGROUP" in str(e):
                logger.debug("Consumer group %s already exists", self._group)
            else:
                raise

    async def start(self) -> None:
        await self.ensure_group()
        self._task = asyncio.create_task(self._consume(), name="redis-stream-subscriber")
        logger.info("Stream subscriber started: stream=%s group=%s", self._stream, self._group)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Stream subscriber stopped")

    async def dispatch(self, fields: dict[str, str]) -> None:
        topic, data = deserialize_event(fields["event"])
        handlers = self._handlers.get(topic)
        if not handlers:
            logger.debug("No handler for %s, skipping", topic)
            return
        for handler in handlers:
            await handler(data)

    async def handle_entry(self, msg_id: str, fields: dict[str, str]) -> None:
        """Dispatch one entry and ack it unless a handler failed for a retryable reason.

        Entries that can never succeed (undecodable envelope, malformed payload)
        are acked and logged so they do not stay in the pending list.
        """
        try:
            await self.dispatch(fields)
        except _POISON_ERRORS:
            logger.warning("Dropping malformed stream message %s", msg_id, exc_info=True)
        except Exception:
            logger.exception("Error processing stream message %s", msg_id)
            return
        await self._redis.xack(self._stream, self._group, msg_id)

    async def _consume(self) -> None:
        while True:
            try:
                entries = await self._redis.xreadgroup(
                    groupname=self._group,
                    consumername=self._consumer,
                    streams={self._stream: ">"},
                    count=self._batch_size,
                    block=self._block_ms,
                )
                if not entries:
                    continue
                for _stream_name, messages in entries:
                    for msg_id, fields in messages:
                        await self.handle_entry(msg_id, fields)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Stream subscriber error, retrying in 5s")
                await asyncio.sleep(5)
