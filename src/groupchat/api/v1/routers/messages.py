from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, status

from groupchat.api.deps import (
    CurrentPrincipal,
    DirectoryDep,
    LinksDep,
    ReadableConversation,
    UoWDep,
    WritableConversation,
)
from groupchat.api.v1.schemas.message import (
    AttachmentRecordResponse,
    CreatorRef,
    MessageDetailResponse,
    MessageResponse,
    SendMessageRequest,
)
from groupchat.application.dto.message import MessageDraft, MessagePageDTO
from groupchat.application.policies.permissions import assert_can_read
from groupchat.config import settings
from groupchat.domain.entities.message import Attachment
from groupchat.services import message_service

router = APIRouter(prefix="/api/v1/chat", tags=["messages"])


@router.get("/conversations/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation: ReadableConversation,
    uow: UoWDep,
    limit: int = Query(settings.MESSAGES_PAGE_LIMIT, ge=1, le=200),
    offset: int = Query(0, ge=0),
    before: UUID | None = Query(None),
) -> list[MessageResponse]:
    messages = await message_service.list_messages(
        conversation.id, MessagePageDTO(limit=limit, offset=offset, before=before), uow,
    )
    return [MessageResponse.model_validate(m, from_attributes=True) for m in messages]


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    body: SendMessageRequest,
    conversation: WritableConversation,
    principal: CurrentPrincipal,
    uow: UoWDep,
    directory: DirectoryDep,
) -> MessageResponse:
    draft = MessageDraft(
        conversation_id=conversation.id,
        creator=principal.subject_id,
        text=body.text,
        type=body.type,
        attachments=[
            Attachment(id=a.id, name=a.name, content_type=a.content_type, length=a.length)
            for a in body.attachments
        ],
    )
    msg = await message_service.create_message(draft, uow, directory)
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.get(
    "/conversations/{conversation_id}/attachments",
    response_model=list[AttachmentRecordResponse],
)
async def list_attachments(
    conversation: ReadableConversation,
    uow: UoWDep,
    limit: int = Query(settings.ATTACHMENTS_PAGE_LIMIT, ge=0),
    offset: int = Query(0, ge=0),
) -> list[AttachmentRecordResponse]:
    records = await message_service.list_attachments(
        conversation.id, limit=limit, offset=offset, uow=uow,
    )
    return [
        AttachmentRecordResponse(
            id=r.id,
            message_id=r.message_id,
            creator=CreatorRef(id=r.creator),
            creation_date=r.creation_date,
            name=r.name,
            content_type=r.content_type,
            length=r.length,
        )
        for r in records
    ]


@router.get("/messages/{message_id}", response_model=MessageDetailResponse)
async def get_message(
    message_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    links: LinksDep,
) -> MessageDetailResponse:
    message, conversation = await message_service.get_message(message_id, uow)
    assert_can_read(principal, conversation)
    starred = await message_service.is_starred_by(message, principal.subject_id, links)
    detail = MessageDetailResponse.model_validate(message, from_attributes=True)
    return detail.model_copy(update={"is_starred": starred})
