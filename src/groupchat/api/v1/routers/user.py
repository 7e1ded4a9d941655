from __future__ import annotations

from fastapi import APIRouter, Query, Response

from groupchat.api.deps import CurrentPrincipal, UoWDep
from groupchat.api.v1.routers.conversations import ITEMS_COUNT_HEADER
from groupchat.api.v1.schemas.conversation import ConversationResponse
from groupchat.application.dto.conversation import ConversationFilterDTO
from groupchat.config import settings
from groupchat.domain.value_objects.enums import ConversationType
from groupchat.services import conversation_service

router = APIRouter(prefix="/api/v1/chat/user", tags=["user"])


async def _list_for_member(
    filters: ConversationFilterDTO, response: Response, uow: UoWDep,
) -> list[ConversationResponse]:
    items, total = await conversation_service.list_conversations(filters, uow)
    response.headers[ITEMS_COUNT_HEADER] = str(total)
    return [ConversationResponse.model_validate(c, from_attributes=True) for c in items]


@router.get("/conversations", response_model=list[ConversationResponse])
async def list_my_conversations(
    response: Response,
    principal: CurrentPrincipal,
    uow: UoWDep,
    limit: int = Query(settings.CONVERSATIONS_PAGE_LIMIT, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> list[ConversationResponse]:
    """Conversations the caller belongs to, most recent activity first."""
    filters = ConversationFilterDTO(
        member_id=principal.subject_id,
        by_last_activity=True,
        limit=limit,
        offset=offset,
    )
    return await _list_for_member(filters, response, uow)


@router.get("/conversations/private", response_model=list[ConversationResponse])
async def list_my_private_conversations(
    response: Response,
    principal: CurrentPrincipal,
    uow: UoWDep,
    limit: int = Query(settings.CONVERSATIONS_PAGE_LIMIT, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> list[ConversationResponse]:
    """Non-moderated confidential conversations the caller belongs to."""
    filters = ConversationFilterDTO(
        types=(ConversationType.CONFIDENTIAL,),
        member_id=principal.subject_id,
        by_last_activity=True,
        limit=limit,
        offset=offset,
    )
    return await _list_for_member(filters, response, uow)
