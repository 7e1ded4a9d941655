from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, tuple_
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from groupchat.domain.entities.conversation import MemberRef
from groupchat.infrastructure.db.models.participant import ParticipantModel


class ParticipantWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_many(
        self, conversation_id: UUID, members: list[MemberRef]
    ) -> list[MemberRef]:
        if not members:
            return []
        stmt = (
            pg_insert(ParticipantModel)
            .values(
                [
                    {
                        "conversation_id": conversation_id,
                        "object_type": m.object_type,
                        "member_id": m.id,
                    }
                    for m in dict.fromkeys(members)
                ]
            )
            .on_conflict_do_nothing(constraint="uq_participant_member")
            .returning(ParticipantModel.object_type, ParticipantModel.member_id)
        )
        result = await self._session.execute(stmt)
        inserted = {MemberRef(id=row.member_id, object_type=row.object_type) for row in result}
        return [m for m in dict.fromkeys(members) if m in inserted]

    async def remove_many(self, conversation_id: UUID, members: list[MemberRef]) -> None:
        if not members:
            return
        stmt = delete(ParticipantModel).where(
            ParticipantModel.conversation_id == conversation_id,
            tuple_(ParticipantModel.object_type, ParticipantModel.member_id).in_(
                [(m.object_type, m.id) for m in members]
            ),
        )
        await self._session.execute(stmt)
