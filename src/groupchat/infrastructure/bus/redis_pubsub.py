"""Redis Pub/Sub publish side: one channel per topic."""
from __future__ import annotations

import logging
from typing import Any

import redis.asyncio as aioredis

from groupchat.infrastructure.bus.serializer import serialize_event

logger = logging.getLogger(__name__)


class RedisPubSubPublisher:
    """Implements application.ports.bus.EventPublisher."""

    def __init__(self, redis: aioredis.Redis, channel_prefix: str = "") -> None:
        self._redis = redis
        self._prefix = channel_prefix

    def channel_for(self, topic: str) -> str:
        return f"{self._prefix}{topic}"

    async def publish(self, topic: str, payload: dict[str, Any]) -> None:
        raw = serialize_event(topic, payload)
        receivers = await self._redis.publish(self.channel_for(topic), raw)
        logger.debug("Published %s to %d subscriber(s)", topic, receivers)
