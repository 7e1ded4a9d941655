"""Resource-link lookups. Links are stored as Redis sets of target ids:
``{prefix}{type}:{source_type}:{source_id}`` -> {"{target_type}:{target_id}", ...}
"""
from __future__ import annotations

import redis.asyncio as aioredis

from groupchat.application.ports.links import ResourceLink


class RedisResourceLinkChecker:
    """Implements application.ports.links.ResourceLinkChecker."""

    def __init__(self, redis: aioredis.Redis, prefix: str = "") -> None:
        self._redis = redis
        self._prefix = prefix

    async def exists(self, link: ResourceLink) -> bool:
        key = f"{self._prefix}{link.type}:{link.source.object_type}:{link.source.id}"
        member = f"{link.target.object_type}:{link.target.id}"
        return bool(await self._redis.sismember(key, member))
