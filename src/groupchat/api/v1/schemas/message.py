from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from groupchat.domain.value_objects.enums import MessageType


class AttachmentSchema(BaseModel):
    id: UUID
    name: str
    content_type: str
    length: int = Field(ge=0)

    model_config = {"from_attributes": True}


class SendMessageRequest(BaseModel):
    text: str | None = None
    type: MessageType = MessageType.TEXT
    attachments: list[AttachmentSchema] = Field(default_factory=list)


class MessageResponse(BaseModel):
    id: UUID
    conversation_id: UUID
    creator: UUID
    type: MessageType
    subtype: str | None
    text: str | None
    attachments: list[AttachmentSchema]
    user_mentions: list[UUID]
    moderate: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class MessageDetailResponse(MessageResponse):
    is_starred: bool = False


class CreatorRef(BaseModel):
    id: UUID


class AttachmentRecordResponse(BaseModel):
    id: UUID
    message_id: UUID
    creator: CreatorRef
    creation_date: datetime
    name: str
    content_type: str
    length: int
