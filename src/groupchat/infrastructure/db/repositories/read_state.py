from __future__ import annotations

from uuid import UUID

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from groupchat.infrastructure.db.models.read_state import ReadStateModel


class ReadStateWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def max_merge(
        self,
        conversation_id: UUID,
        member_ids: list[UUID],
        count: int,
    ) -> None:
        # one row per member: ON CONFLICT cannot touch the same row twice
        unique_ids = list(dict.fromkeys(member_ids))
        if not unique_ids:
            return
        stmt = pg_insert(ReadStateModel).values(
            [
                {
                    "conversation_id": conversation_id,
                    "member_id": member_id,
                    "read_count": count,
                }
                for member_id in unique_ids
            ]
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_read_state_member",
            set_={
                "read_count": func.greatest(ReadStateModel.read_count, stmt.excluded.read_count),
                "updated_at": func.now(),
            },
        )
        await self._session.execute(stmt)
