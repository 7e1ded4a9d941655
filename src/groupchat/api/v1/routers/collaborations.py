from __future__ import annotations

from fastapi import APIRouter

from groupchat.api.deps import CurrentPrincipal, DirectoryDep, UoWDep
from groupchat.api.v1.schemas.conversation import (
    CollaborationConversationResponse,
    ConversationResponse,
    MemberRecordSchema,
)
from groupchat.application.policies.permissions import assert_can_read
from groupchat.domain.entities.conversation import CollaborationTuple
from groupchat.services import collaboration_service

router = APIRouter(prefix="/api/v1/chat/collaborations", tags=["collaborations"])


@router.get(
    "/{object_type}/{collaboration_id}/conversation",
    response_model=CollaborationConversationResponse,
)
async def get_collaboration_conversation(
    object_type: str,
    collaboration_id: str,
    principal: CurrentPrincipal,
    uow: UoWDep,
    directory: DirectoryDep,
) -> CollaborationConversationResponse:
    conversation, members = await collaboration_service.get_conversation_by_collaboration(
        CollaborationTuple(object_type=object_type, id=collaboration_id), uow, directory,
    )
    assert_can_read(principal, conversation)
    base = ConversationResponse.model_validate(conversation, from_attributes=True)
    return CollaborationConversationResponse(
        **base.model_dump(exclude={"members"}),
        members=[MemberRecordSchema.model_validate(m) for m in members],
    )
