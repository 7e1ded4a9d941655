from __future__ import annotations

from uuid import UUID

from groupchat.domain.entities.message import Attachment, Message
from groupchat.infrastructure.db.models.message import MessageAttachmentModel, MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        creator=model.creator,
        type=model.type,
        subtype=model.subtype,
        text=model.text,
        attachments=tuple(
            Attachment(
                id=a.attachment_id,
                name=a.name,
                content_type=a.content_type,
                length=a.length,
            )
            for a in model.attachments
        ),
        user_mentions=tuple(UUID(m) for m in model.user_mentions or []),
        moderate=model.moderate,
        created_at=model.created_at,
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        conversation_id=entity.conversation_id,
        creator=entity.creator,
        type=entity.type,
        subtype=entity.subtype,
        text=entity.text,
        user_mentions=[str(m) for m in entity.user_mentions],
        moderate=entity.moderate,
        created_at=entity.created_at,
        attachments=[
            MessageAttachmentModel(
                position=position,
                attachment_id=a.id,
                name=a.name,
                content_type=a.content_type,
                length=a.length,
            )
            for position, a in enumerate(entity.attachments)
        ],
    )
