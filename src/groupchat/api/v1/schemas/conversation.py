from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from groupchat.domain.value_objects.enums import ConversationMode, ConversationType


class TextSettingSchema(BaseModel):
    value: str
    creator: UUID | None = None

    model_config = {"from_attributes": True}


class MemberRefSchema(BaseModel):
    id: UUID
    object_type: str

    model_config = {"from_attributes": True}


class CollaborationSchema(BaseModel):
    object_type: str
    id: str

    model_config = {"from_attributes": True}


class LastMessageSchema(BaseModel):
    text: str | None
    creator: UUID
    user_mentions: list[UUID]
    date: datetime

    model_config = {"from_attributes": True}


class ConversationResponse(BaseModel):
    id: UUID
    type: ConversationType
    mode: ConversationMode
    name: str | None
    topic: TextSettingSchema | None
    purpose: TextSettingSchema | None
    creator: UUID | None
    members: list[MemberRefSchema]
    collaboration: CollaborationSchema | None
    domain_id: UUID | None
    is_default: bool
    num_of_message: int
    num_of_readed_message: dict[UUID, int]
    last_message: LastMessageSchema | None
    moderate: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CreateConversationRequest(BaseModel):
    type: ConversationType = ConversationType.OPEN
    mode: ConversationMode = ConversationMode.CHANNEL
    name: str | None = None
    topic: str | None = None
    purpose: str | None = None
    members: list[UUID] = Field(default_factory=list)
    domain_id: UUID | None = None


class UpdateConversationRequest(BaseModel):
    name: str | None = None
    purpose: str | None = None


class UpdateTopicRequest(BaseModel):
    value: str


class MemberRecordSchema(BaseModel):
    id: UUID
    object_type: str
    display_name: str | None = None
    email: str | None = None

    model_config = {"from_attributes": True}


class CollaborationConversationResponse(ConversationResponse):
    """Conversation with its members resolved to directory records."""

    members: list[MemberRecordSchema]
