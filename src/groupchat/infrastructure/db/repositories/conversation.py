from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import Select, delete, func, select, text, tuple_, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from groupchat.application.dto.conversation import ConversationFilterDTO
from groupchat.domain.entities.conversation import (
    CollaborationTuple,
    Conversation,
    LastMessage,
    MemberRef,
    TextSetting,
)
from groupchat.domain.value_objects.enums import ConversationType
from groupchat.infrastructure.db.mappers import conversation as mapper
from groupchat.infrastructure.db.models.conversation import ConversationModel
from groupchat.infrastructure.db.models.participant import ParticipantModel


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        stmt = (
            select(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .execution_options(populate_existing=True)
        )
        return await self._one_or_none(stmt)

    async def get_by_collaboration(
        self, collaboration: CollaborationTuple
    ) -> Conversation | None:
        stmt = (
            select(ConversationModel)
            .where(
                ConversationModel.type == ConversationType.COLLABORATION,
                ConversationModel.collaboration_object_type == collaboration.object_type,
                ConversationModel.collaboration_id == collaboration.id,
            )
            .execution_options(populate_existing=True)
        )
        return await self._one_or_none(stmt)

    async def get_default_channel(self, domain_id: UUID) -> Conversation | None:
        stmt = (
            select(ConversationModel)
            .where(
                ConversationModel.domain_id == domain_id,
                ConversationModel.is_default.is_(True),
            )
            .execution_options(populate_existing=True)
        )
        return await self._one_or_none(stmt)

    async def find_by_members(
        self,
        conversation_type: str,
        members: frozenset[MemberRef],
        name: str | None,
    ) -> Conversation | None:
        keys = [(m.object_type, m.id) for m in members]

        total = (
            select(func.count(ParticipantModel.id))
            .where(ParticipantModel.conversation_id == ConversationModel.id)
            .scalar_subquery()
        )
        stmt = select(ConversationModel).where(
            ConversationModel.type == conversation_type,
            total == len(keys),
        )
        if keys:
            matching = (
                select(func.count(ParticipantModel.id))
                .where(
                    ParticipantModel.conversation_id == ConversationModel.id,
                    tuple_(ParticipantModel.object_type, ParticipantModel.member_id).in_(keys),
                )
                .scalar_subquery()
            )
            stmt = stmt.where(matching == len(keys))
        # NULL never equals a string, so the unnamed class is matched explicitly
        if name is None:
            stmt = stmt.where(ConversationModel.name.is_(None))
        else:
            stmt = stmt.where(ConversationModel.name == name)

        stmt = stmt.order_by(ConversationModel.created_at.asc()).limit(1)
        return await self._one_or_none(stmt)

    async def list_filtered(self, filters: ConversationFilterDTO) -> list[Conversation]:
        stmt = self._filtered(filters)
        if filters.by_last_activity:
            stmt = stmt.order_by(
                ConversationModel.last_message_at.desc().nullslast(),
                ConversationModel.created_at.desc(),
                ConversationModel.id,
            )
        else:
            stmt = stmt.order_by(ConversationModel.created_at.desc(), ConversationModel.id)
        if filters.offset:
            stmt = stmt.offset(filters.offset)
        if filters.limit is not None:
            stmt = stmt.limit(filters.limit)
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def count_filtered(self, filters: ConversationFilterDTO) -> int:
        stmt = select(func.count()).select_from(self._filtered(filters).subquery())
        result = await self._session.execute(stmt)
        return result.scalar_one()

    def _filtered(self, filters: ConversationFilterDTO) -> Select[tuple[ConversationModel]]:
        stmt = select(ConversationModel)
        if filters.types:
            stmt = stmt.where(ConversationModel.type.in_([t.value for t in filters.types]))
        if filters.mode is not None:
            stmt = stmt.where(ConversationModel.mode == filters.mode.value)
        if not filters.include_moderated:
            stmt = stmt.where(ConversationModel.moderate.is_(False))
        if filters.member_id is not None:
            stmt = stmt.where(
                ConversationModel.id.in_(
                    select(ParticipantModel.conversation_id).where(
                        ParticipantModel.member_id == filters.member_id
                    )
                )
            )
        return stmt

    async def _one_or_none(self, stmt: Select[tuple[ConversationModel]]) -> Conversation | None:
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return mapper.model_to_entity(model) if model else None


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, conversation: Conversation) -> Conversation:
        model = mapper.entity_to_model(conversation)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def create_default_if_not_exists(
        self, conversation: Conversation
    ) -> tuple[Conversation, bool]:
        """Insert a default channel; the partial unique index settles concurrent bootstraps."""
        values = {
            "id": conversation.id,
            "type": conversation.type,
            "mode": conversation.mode,
            "name": conversation.name,
            "topic_value": conversation.topic.value if conversation.topic else None,
            "purpose_value": conversation.purpose.value if conversation.purpose else None,
            "domain_id": conversation.domain_id,
            "is_default": True,
            "created_at": conversation.created_at,
            "updated_at": conversation.updated_at,
        }
        stmt = (
            pg_insert(ConversationModel)
            .values(**values)
            .on_conflict_do_nothing(
                index_elements=[ConversationModel.domain_id],
                index_where=text("is_default"),
            )
            .returning(ConversationModel.id)
        )
        result = await self._session.execute(stmt)
        created = result.scalar_one_or_none() is not None

        existing = await self._session.execute(
            select(ConversationModel)
            .where(
                ConversationModel.domain_id == conversation.domain_id,
                ConversationModel.is_default.is_(True),
            )
            .execution_options(populate_existing=True)
        )
        return mapper.model_to_entity(existing.scalar_one()), created

    async def update_settings(
        self,
        conversation_id: UUID,
        *,
        name: str | None = None,
        topic: TextSetting | None = None,
        purpose: TextSetting | None = None,
    ) -> bool:
        values: dict[str, Any] = {}
        if name is not None:
            values["name"] = name
        if topic is not None:
            values["topic_value"] = topic.value
            values["topic_creator"] = topic.creator
        if purpose is not None:
            values["purpose_value"] = purpose.value
            values["purpose_creator"] = purpose.creator
        if not values:
            return True

        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .values(**values)
            .returning(ConversationModel.id)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def record_message(
        self, conversation_id: UUID, last_message: LastMessage
    ) -> int | None:
        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .values(
                num_of_message=ConversationModel.num_of_message + 1,
                last_message_text=last_message.text,
                last_message_creator=last_message.creator,
                last_message_mentions=[str(m) for m in last_message.user_mentions],
                last_message_at=last_message.date,
            )
            .returning(ConversationModel.num_of_message)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete(self, conversation_id: UUID) -> bool:
        stmt = (
            delete(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .returning(ConversationModel.id)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None
