from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from groupchat.domain.entities.message import AttachmentRecord, Message
from groupchat.infrastructure.db.mappers import message as mapper
from groupchat.infrastructure.db.models.message import MessageAttachmentModel, MessageModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, message_id: UUID) -> Message | None:
        result = await self._session.get(MessageModel, message_id)
        return mapper.model_to_entity(result) if result else None

    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        before: datetime | None = None,
        offset: int = 0,
        limit: int = 30,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(
                MessageModel.conversation_id == conversation_id,
                MessageModel.moderate.is_(False),
            )
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
            .offset(offset)
            .limit(limit)
        )
        if before is not None:
            stmt = stmt.where(MessageModel.created_at < before)
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_attachments(
        self,
        conversation_id: UUID,
        *,
        offset: int = 0,
        count: int = 10,
    ) -> list[AttachmentRecord]:
        if count <= 0:
            return []
        stmt = (
            select(
                MessageAttachmentModel,
                MessageModel.creator,
                MessageModel.created_at,
            )
            .join(MessageModel, MessageModel.id == MessageAttachmentModel.message_id)
            .where(
                MessageModel.conversation_id == conversation_id,
                MessageModel.moderate.is_(False),
            )
            .order_by(
                MessageModel.created_at.asc(),
                MessageModel.id.asc(),
                MessageAttachmentModel.position.asc(),
            )
            .offset(offset)
            .limit(count)
        )
        result = await self._session.execute(stmt)
        return [
            AttachmentRecord(
                id=attachment.attachment_id,
                message_id=attachment.message_id,
                creator=creator,
                creation_date=created_at,
                name=attachment.name,
                content_type=attachment.content_type,
                length=attachment.length,
            )
            for attachment, creator, created_at in result.all()
        ]


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)
