from __future__ import annotations

import logging
import uuid

import pytest

from groupchat.application.dto.message import MessageDraft
from groupchat.application.exceptions import BadRequestError
from groupchat.domain.value_objects.enums import MessageSubtype, MessageType
from groupchat.listeners.join_conversation import JoinConversationSystemMessageListener
from groupchat.services import message_service
from tests.conftest import FakeDirectory, FakeSubscriber, FakeUoW, make_conversation


def _join_event(object_type: str, collaboration_id: str, target: str) -> dict:
    return {"collaboration": {"objectType": object_type, "id": collaboration_id}, "target": target}


def test_start_subscribes_once():
    subscriber = FakeSubscriber()

    async def on_message(draft: MessageDraft) -> None:
        pass

    listener = JoinConversationSystemMessageListener(subscriber, on_message)
    listener.start()
    listener.start()

    assert listener.subscribed is True
    assert len(subscriber.handlers["collaboration.join"]) == 1


@pytest.mark.asyncio
async def test_conversation_join_builds_system_message():
    subscriber = FakeSubscriber()
    received: list[MessageDraft] = []

    async def on_message(draft: MessageDraft) -> None:
        received.append(draft)

    JoinConversationSystemMessageListener(subscriber, on_message).start()
    member, conversation_id = uuid.uuid4(), uuid.uuid4()

    await subscriber.emit(
        "collaboration.join",
        _join_event("chat.conversation", str(conversation_id), str(member)),
    )

    assert received == [
        MessageDraft(
            conversation_id=conversation_id,
            creator=member,
            text=f"@{member} has joined the conversation.",
            type=MessageType.TEXT,
            subtype=MessageSubtype.CONVERSATION_JOIN,
            user_mentions=[member],
        )
    ]


@pytest.mark.asyncio
async def test_other_collaborations_are_skipped(caplog):
    subscriber = FakeSubscriber()
    received: list[MessageDraft] = []

    async def on_message(draft: MessageDraft) -> None:
        received.append(draft)

    JoinConversationSystemMessageListener(subscriber, on_message).start()

    with caplog.at_level(logging.DEBUG, logger="groupchat.listeners.join_conversation"):
        await subscriber.emit("collaboration.join", _join_event("community", "1", "someone"))

    assert received == []
    assert any("is not a conversation, skipping" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_malformed_target_is_rejected():
    subscriber = FakeSubscriber()

    async def on_message(draft: MessageDraft) -> None:
        pass

    JoinConversationSystemMessageListener(subscriber, on_message).start()

    with pytest.raises(BadRequestError):
        await subscriber.emit(
            "collaboration.join", _join_event("chat.conversation", str(uuid.uuid4()), "456"),
        )


@pytest.mark.asyncio
async def test_join_goes_through_message_pipeline():
    uow = FakeUoW()
    directory = FakeDirectory()
    member = uuid.uuid4()
    conv = uow.conversations.put(make_conversation(members=[member], num_of_message=2))
    subscriber = FakeSubscriber()

    async def on_message(draft: MessageDraft) -> None:
        await message_service.create_message(draft, uow, directory)

    JoinConversationSystemMessageListener(subscriber, on_message).start()
    await subscriber.emit(
        "collaboration.join", _join_event("chat.conversation", str(conv.id), str(member)),
    )
    await subscriber.emit(
        "collaboration.join", _join_event("community", str(conv.id), str(member)),
    )

    assert len(uow.messages._messages) == 1
    msg = uow.messages._messages[0]
    assert msg.subtype == MessageSubtype.CONVERSATION_JOIN
    assert msg.user_mentions == (member,)
    stored = uow.conversations._store[conv.id]
    assert stored.num_of_message == 3
    assert stored.last_message.text == f"@{member} has joined the conversation."
    assert uow.outbox.topics == ["message.saved"]
