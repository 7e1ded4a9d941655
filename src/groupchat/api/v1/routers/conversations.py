from __future__ import annotations

from fastapi import APIRouter, Query, Response, status

from groupchat.api.deps import (
    CurrentPrincipal,
    MemberIdDep,
    ReadableConversation,
    RemovableConversation,
    UoWDep,
    UpdatableConversation,
)
from groupchat.api.v1.schemas.conversation import (
    ConversationResponse,
    CreateConversationRequest,
    UpdateConversationRequest,
    UpdateTopicRequest,
)
from groupchat.application.dto.conversation import (
    ConversationFilterDTO,
    CreateConversationDTO,
    UpdateConversationDTO,
)
from groupchat.application.policies.permissions import assert_can_create
from groupchat.config import settings
from groupchat.domain.entities.conversation import MemberRef
from groupchat.domain.value_objects.enums import ConversationMode, ConversationType
from groupchat.services import conversation_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["conversations"])

ITEMS_COUNT_HEADER = "X-Items-Count"


@router.get("", response_model=list[ConversationResponse])
async def list_conversations(
    response: Response,
    principal: CurrentPrincipal,
    uow: UoWDep,
    limit: int = Query(settings.CONVERSATIONS_PAGE_LIMIT, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> list[ConversationResponse]:
    """Open channels. The default channels of the caller's domains are bootstrapped first."""
    await conversation_service.ensure_default_channels(
        principal.subject_id,
        principal.domains,
        uow,
        name=settings.DEFAULT_CHANNEL_NAME,
        topic=settings.DEFAULT_CHANNEL_TOPIC,
        purpose=settings.DEFAULT_CHANNEL_PURPOSE,
    )
    filters = ConversationFilterDTO(
        types=(ConversationType.OPEN,),
        mode=ConversationMode.CHANNEL,
        limit=limit,
        offset=offset,
    )
    items, total = await conversation_service.list_conversations(filters, uow)
    response.headers[ITEMS_COUNT_HEADER] = str(total)
    return [ConversationResponse.model_validate(c, from_attributes=True) for c in items]


@router.post("", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    body: CreateConversationRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationResponse:
    assert_can_create(body.mode, channels_only=settings.CREATE_CHANNELS_ONLY)
    members = [MemberRef(id=principal.subject_id)]
    members += [MemberRef(id=member_id) for member_id in body.members]
    conv = await conversation_service.create_conversation(
        CreateConversationDTO(
            type=body.type,
            mode=body.mode,
            members=members,
            name=body.name,
            topic=body.topic,
            purpose=body.purpose,
            creator=principal.subject_id,
            domain_id=body.domain_id,
        ),
        uow,
    )
    return ConversationResponse.model_validate(conv, from_attributes=True)


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(conversation: ReadableConversation) -> ConversationResponse:
    return ConversationResponse.model_validate(conversation, from_attributes=True)


@router.put("/{conversation_id}", response_model=ConversationResponse)
async def update_conversation(
    body: UpdateConversationRequest,
    conversation: UpdatableConversation,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationResponse:
    conv = await conversation_service.update_conversation(
        conversation.id,
        UpdateConversationDTO(name=body.name, purpose=body.purpose),
        principal.subject_id,
        uow,
    )
    return ConversationResponse.model_validate(conv, from_attributes=True)


@router.put("/{conversation_id}/topic", response_model=ConversationResponse)
async def update_topic(
    body: UpdateTopicRequest,
    conversation: UpdatableConversation,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationResponse:
    conv = await conversation_service.update_conversation(
        conversation.id,
        UpdateConversationDTO(topic=body.value),
        principal.subject_id,
        uow,
    )
    return ConversationResponse.model_validate(conv, from_attributes=True)


@router.delete("/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_conversation(conversation: RemovableConversation, uow: UoWDep) -> None:
    await conversation_service.remove_conversation(conversation.id, uow)


@router.put("/{conversation_id}/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_member(
    conversation: UpdatableConversation,
    member_id: MemberIdDep,
    uow: UoWDep,
) -> None:
    await conversation_service.add_member(conversation.id, MemberRef(id=member_id), uow)


@router.delete("/{conversation_id}/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    conversation: UpdatableConversation,
    member_id: MemberIdDep,
    uow: UoWDep,
) -> None:
    await conversation_service.remove_member(conversation.id, MemberRef(id=member_id), uow)


@router.post("/{conversation_id}/readed", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(
    conversation: ReadableConversation,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> None:
    await conversation_service.mark_read_up_to(principal.subject_id, conversation.id, uow)
