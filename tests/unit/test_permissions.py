from __future__ import annotations

import uuid

import pytest

from groupchat.application.exceptions import ForbiddenError
from groupchat.application.policies.permissions import (
    assert_can_create,
    assert_can_read,
    assert_can_remove,
    user_can_read,
    user_can_update,
    user_can_write,
)
from groupchat.domain.value_objects.enums import ConversationMode, ConversationType
from tests.conftest import make_conversation


def test_open_conversation_is_readable_and_writable_by_anyone(user_principal):
    conv = make_conversation(type=ConversationType.OPEN)

    assert user_can_read(user_principal, conv)
    assert user_can_write(user_principal, conv)
    assert user_can_update(user_principal, conv)


def test_confidential_conversation_is_members_only(user_principal):
    outsider_view = make_conversation(type=ConversationType.CONFIDENTIAL)
    member_view = make_conversation(
        type=ConversationType.CONFIDENTIAL, members=[user_principal.subject_id],
    )

    assert not user_can_read(user_principal, outsider_view)
    assert user_can_read(user_principal, member_view)
    with pytest.raises(ForbiddenError) as exc_info:
        assert_can_read(user_principal, outsider_view)
    assert exc_info.value.detail == f"Can not read conversation {outsider_view.id}"


def test_only_creator_can_remove(user_principal, admin_principal):
    mine = make_conversation(creator=user_principal.subject_id)
    theirs = make_conversation(creator=uuid.uuid4(), members=[user_principal.subject_id])

    assert assert_can_remove(user_principal, mine) == mine
    assert assert_can_remove(admin_principal, theirs) == theirs
    with pytest.raises(ForbiddenError):
        assert_can_remove(user_principal, theirs)


def test_create_restricted_to_channels():
    assert_can_create(ConversationMode.PRIVATE, channels_only=False)
    assert_can_create(ConversationMode.CHANNEL, channels_only=True)
    with pytest.raises(ForbiddenError):
        assert_can_create(ConversationMode.PRIVATE, channels_only=True)
