"""Member directory backed by Redis hashes, one hash per member."""
from __future__ import annotations

import logging
from typing import Iterable
from uuid import UUID

import redis.asyncio as aioredis

from groupchat.domain.entities.member import MemberRecord
from groupchat.domain.value_objects.enums import ObjectType

logger = logging.getLogger(__name__)


class RedisMemberDirectory:
    """Implements application.ports.directory.MemberDirectory."""

    def __init__(self, redis: aioredis.Redis, prefix: str = "") -> None:
        self._redis = redis
        self._prefix = prefix

    def _key(self, member_id: UUID) -> str:
        return f"{self._prefix}{member_id}"

    async def get_many(self, member_ids: Iterable[UUID]) -> dict[UUID, MemberRecord]:
        ids = list(dict.fromkeys(member_ids))
        if not ids:
            return {}
        async with self._redis.pipeline(transaction=False) as pipe:
            for member_id in ids:
                pipe.hgetall(self._key(member_id))
            rows = await pipe.execute()

        result: dict[UUID, MemberRecord] = {}
        for member_id, row in zip(ids, rows):
            if not row:
                logger.debug("Member %s not in directory, using bare record", member_id)
                result[member_id] = MemberRecord(id=member_id)
                continue
            result[member_id] = MemberRecord(
                id=member_id,
                object_type=row.get("object_type") or ObjectType.USER,
                display_name=row.get("display_name") or None,
                email=row.get("email") or None,
            )
        return result

    async def save(self, record: MemberRecord) -> None:
        mapping = {"object_type": str(record.object_type)}
        if record.display_name:
            mapping["display_name"] = record.display_name
        if record.email:
            mapping["email"] = record.email
        await self._redis.hset(self._key(record.id), mapping=mapping)
