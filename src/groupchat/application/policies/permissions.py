"""Conversation access predicates.

Open conversations are readable and writable by anyone; every other type is
gated on membership. Only the creator may remove a conversation.
"""
from __future__ import annotations

from groupchat.application.dto.principal import Principal
from groupchat.application.exceptions import ForbiddenError
from groupchat.domain.entities.conversation import Conversation
from groupchat.domain.value_objects.enums import ConversationMode, ConversationType


def user_can_read(principal: Principal, conversation: Conversation) -> bool:
    if principal.is_admin or conversation.type == ConversationType.OPEN:
        return True
    return conversation.has_member(principal.subject_id)


def user_can_write(principal: Principal, conversation: Conversation) -> bool:
    return user_can_read(principal, conversation)


def user_can_update(principal: Principal, conversation: Conversation) -> bool:
    return user_can_read(principal, conversation)


def user_can_remove(principal: Principal, conversation: Conversation) -> bool:
    if principal.is_admin:
        return True
    return conversation.creator is not None and conversation.creator == principal.subject_id


def assert_can_read(principal: Principal, conversation: Conversation) -> Conversation:
    if not user_can_read(principal, conversation):
        raise ForbiddenError(f"Can not read conversation {conversation.id}")
    return conversation


def assert_can_write(principal: Principal, conversation: Conversation) -> Conversation:
    if not user_can_write(principal, conversation):
        raise ForbiddenError(f"Can not write conversation {conversation.id}")
    return conversation


def assert_can_update(principal: Principal, conversation: Conversation) -> Conversation:
    if not user_can_update(principal, conversation):
        raise ForbiddenError(f"Can not update conversation {conversation.id}")
    return conversation


def assert_can_remove(principal: Principal, conversation: Conversation) -> Conversation:
    if not user_can_remove(principal, conversation):
        raise ForbiddenError(f"Can not remove conversation {conversation.id}")
    return conversation


def assert_can_create(mode: ConversationMode, *, channels_only: bool) -> None:
    if channels_only and mode != ConversationMode.CHANNEL:
        raise ForbiddenError("Can not create a conversation which is not a channel")
