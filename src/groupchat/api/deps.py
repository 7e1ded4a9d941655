"""FastAPI dependency injection helpers."""
from __future__ import annotations

import uuid
from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from groupchat.application.dto.principal import Principal
from groupchat.application.exceptions import BadRequestError
from groupchat.application.policies.permissions import (
    assert_can_read,
    assert_can_remove,
    assert_can_update,
    assert_can_write,
)
from groupchat.application.ports.auth import TokenVerifier
from groupchat.application.ports.directory import MemberDirectory
from groupchat.application.ports.links import ResourceLinkChecker
from groupchat.application.uow import UnitOfWork
from groupchat.config import settings
from groupchat.domain.entities.conversation import Conversation
from groupchat.infrastructure.auth.hs256_verifier import HS256Verifier
from groupchat.infrastructure.db.session import AsyncSessionLocal
from groupchat.infrastructure.db.uow import SqlAlchemyUoW
from groupchat.infrastructure.directory.redis_directory import RedisMemberDirectory
from groupchat.infrastructure.links.redis_links import RedisResourceLinkChecker
from groupchat.services import conversation_service

_bearer_scheme = HTTPBearer()


async def get_uow() -> AsyncIterator[UnitOfWork]:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        try:
            yield uow
        finally:
            await session.close()


UoWDep = Annotated[UnitOfWork, Depends(get_uow)]


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)
    return _verifier


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
) -> Principal:
    verifier = get_verifier()
    try:
        return await verifier.verify(credentials.credentials)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def get_directory(request: Request) -> MemberDirectory:
    return RedisMemberDirectory(request.app.state.redis, settings.MEMBER_DIRECTORY_PREFIX)


def get_links(request: Request) -> ResourceLinkChecker:
    return RedisResourceLinkChecker(request.app.state.redis, settings.RESOURCE_LINKS_PREFIX)


DirectoryDep = Annotated[MemberDirectory, Depends(get_directory)]
LinksDep = Annotated[ResourceLinkChecker, Depends(get_links)]


# Conversation loading + permission checks, one dependency per operation kind.

async def load_conversation(conversation_id: uuid.UUID, uow: UoWDep) -> Conversation:
    return await conversation_service.get_conversation(conversation_id, uow)


LoadedConversation = Annotated[Conversation, Depends(load_conversation)]


async def readable_conversation(
    conversation: LoadedConversation, principal: CurrentPrincipal,
) -> Conversation:
    return assert_can_read(principal, conversation)


async def writable_conversation(
    conversation: LoadedConversation, principal: CurrentPrincipal,
) -> Conversation:
    return assert_can_write(principal, conversation)


async def updatable_conversation(
    conversation: LoadedConversation, principal: CurrentPrincipal,
) -> Conversation:
    return assert_can_update(principal, conversation)


async def removable_conversation(
    conversation: LoadedConversation, principal: CurrentPrincipal,
) -> Conversation:
    return assert_can_remove(principal, conversation)


ReadableConversation = Annotated[Conversation, Depends(readable_conversation)]
WritableConversation = Annotated[Conversation, Depends(writable_conversation)]
UpdatableConversation = Annotated[Conversation, Depends(updatable_conversation)]
RemovableConversation = Annotated[Conversation, Depends(removable_conversation)]


def parse_member_id(member_id: str) -> uuid.UUID:
    if not member_id.strip():
        raise BadRequestError("Member id is required")
    try:
        return uuid.UUID(member_id)
    except ValueError as exc:
        raise BadRequestError(f"Invalid member id {member_id}") from exc


MemberIdDep = Annotated[uuid.UUID, Depends(parse_member_id)]
