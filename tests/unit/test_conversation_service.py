from __future__ import annotations

import dataclasses
import uuid

import pytest

from groupchat.application.dto.conversation import (
    ConversationFilterDTO,
    CreateConversationDTO,
    UpdateConversationDTO,
)
from groupchat.application.exceptions import NotFoundError
from groupchat.domain.entities.conversation import MemberRef, TextSetting
from groupchat.domain.value_objects.enums import ConversationMode, ConversationType
from groupchat.services import conversation_service
from tests.conftest import FakeUoW, make_conversation, seconds


def _confidential(members, name=None) -> CreateConversationDTO:
    return CreateConversationDTO(
        type=ConversationType.CONFIDENTIAL,
        mode=ConversationMode.CHANNEL,
        members=[MemberRef(id=m) for m in members],
        name=name,
    )


@pytest.mark.asyncio
async def test_create_conversation_publishes_created_event():
    uow = FakeUoW()
    creator = uuid.uuid4()

    conv = await conversation_service.create_conversation(
        CreateConversationDTO(
            type=ConversationType.OPEN,
            members=[MemberRef(id=creator)],
            name="random",
            topic="anything",
            creator=creator,
        ),
        uow,
    )

    assert conv.num_of_message == 0
    assert conv.num_of_readed_message == {}
    assert conv.topic == TextSetting("anything", creator)
    assert uow.conversations._store[conv.id] == conv
    assert uow.outbox.topics == ["conversation.created"]
    assert uow.outbox._events[0].members == [creator]
    assert uow._committed is True


@pytest.mark.asyncio
async def test_create_confidential_returns_existing_for_same_members():
    uow = FakeUoW()
    a, b = uuid.uuid4(), uuid.uuid4()

    first = await conversation_service.create_conversation(_confidential([a, b]), uow)
    second = await conversation_service.create_conversation(_confidential([b, a, b]), uow)

    assert second.id == first.id
    assert len(uow.conversations._store) == 1
    assert uow.outbox.topics == ["conversation.created"]


@pytest.mark.asyncio
async def test_dedup_treats_each_name_as_its_own_class():
    uow = FakeUoW()
    members = [uuid.uuid4(), uuid.uuid4()]

    unnamed = await conversation_service.create_conversation(_confidential(members), uow)
    x = await conversation_service.create_conversation(_confidential(members, "x"), uow)
    y = await conversation_service.create_conversation(_confidential(members, "y"), uow)
    empty = await conversation_service.create_conversation(_confidential(members, ""), uow)

    assert len({unnamed.id, x.id, y.id, empty.id}) == 4
    again = await conversation_service.create_conversation(_confidential(members, "x"), uow)
    assert again.id == x.id
    again_unnamed = await conversation_service.create_conversation(_confidential(members), uow)
    assert again_unnamed.id == unnamed.id


@pytest.mark.asyncio
async def test_dedup_requires_exact_member_set():
    uow = FakeUoW()
    a, b, c = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()

    pair = await conversation_service.create_conversation(_confidential([a, b]), uow)
    trio = await conversation_service.create_conversation(_confidential([a, b, c]), uow)

    assert pair.id != trio.id


@pytest.mark.asyncio
async def test_private_mode_is_deduplicated_open_channel_is_not():
    uow = FakeUoW()
    members = [MemberRef(id=uuid.uuid4())]
    private = CreateConversationDTO(
        type=ConversationType.OPEN, mode=ConversationMode.PRIVATE, members=members,
    )
    channel = CreateConversationDTO(type=ConversationType.OPEN, members=members, name="c")

    p1 = await conversation_service.create_conversation(private, uow)
    p2 = await conversation_service.create_conversation(private, uow)
    c1 = await conversation_service.create_conversation(channel, uow)
    c2 = await conversation_service.create_conversation(channel, uow)

    assert p1.id == p2.id
    assert c1.id != c2.id


@pytest.mark.asyncio
async def test_get_conversation_not_found():
    uow = FakeUoW()
    missing = uuid.uuid4()

    with pytest.raises(NotFoundError) as exc_info:
        await conversation_service.get_conversation(missing, uow)

    assert str(missing) in exc_info.value.detail


@pytest.mark.asyncio
async def test_list_conversations_excludes_moderated_and_counts_total():
    uow = FakeUoW()
    for i in range(5):
        uow.conversations.put(make_conversation(created_at=seconds(i)))
    uow.conversations.put(make_conversation(created_at=seconds(10), moderate=True))

    items, total = await conversation_service.list_conversations(
        ConversationFilterDTO(limit=2, offset=1), uow,
    )

    assert total == 5
    assert [c.created_at for c in items] == [seconds(3), seconds(2)]
    assert all(not c.moderate for c in items)


@pytest.mark.asyncio
async def test_my_conversations_sorted_by_last_activity():
    uow = FakeUoW()
    me = uuid.uuid4()
    quiet_old = uow.conversations.put(make_conversation(members=[me], created_at=seconds(1)))
    busy = uow.conversations.put(
        make_conversation(members=[me], created_at=seconds(2), last_message_at=seconds(50)),
    )
    less_busy = uow.conversations.put(
        make_conversation(members=[me], created_at=seconds(3), last_message_at=seconds(40)),
    )
    quiet_new = uow.conversations.put(make_conversation(members=[me], created_at=seconds(4)))
    uow.conversations.put(make_conversation(members=[uuid.uuid4()], created_at=seconds(5)))

    items, total = await conversation_service.list_conversations(
        ConversationFilterDTO(member_id=me, by_last_activity=True), uow,
    )

    assert total == 4
    assert [c.id for c in items] == [busy.id, less_busy.id, quiet_new.id, quiet_old.id]


@pytest.mark.asyncio
async def test_rename_publishes_updated_event():
    uow = FakeUoW()
    conv = uow.conversations.put(make_conversation(name="old"))

    updated = await conversation_service.update_conversation(
        conv.id, UpdateConversationDTO(name="new"), None, uow,
    )

    assert updated.name == "new"
    assert uow.outbox.topics == ["conversation.updated"]
    assert uow.outbox._events[0].changes == {"name": "new"}


@pytest.mark.asyncio
async def test_topic_change_publishes_topic_updated_event():
    uow = FakeUoW()
    actor = uuid.uuid4()
    conv = uow.conversations.put(make_conversation())

    updated = await conversation_service.update_conversation(
        conv.id, UpdateConversationDTO(topic="release planning"), actor, uow,
    )

    assert updated.topic == TextSetting("release planning", actor)
    assert uow.outbox.topics == ["conversation.topic_updated"]
    assert uow.outbox._events[0].to_payload()["topic"] == {
        "value": "release planning",
        "creator": str(actor),
    }


@pytest.mark.asyncio
async def test_update_missing_conversation_raises():
    uow = FakeUoW()

    with pytest.raises(NotFoundError):
        await conversation_service.update_conversation(
            uuid.uuid4(), UpdateConversationDTO(name="x"), None, uow,
        )
    assert uow.outbox.topics == []
    assert uow.rollbacks == 1


@pytest.mark.asyncio
async def test_remove_conversation():
    uow = FakeUoW()
    conv = uow.conversations.put(make_conversation())

    await conversation_service.remove_conversation(conv.id, uow)

    assert conv.id not in uow.conversations._store
    assert uow.outbox.topics == ["conversation.deleted"]
    with pytest.raises(NotFoundError):
        await conversation_service.remove_conversation(conv.id, uow)


@pytest.mark.asyncio
async def test_mark_read_up_to_never_decreases():
    uow = FakeUoW()
    member, ahead = uuid.uuid4(), uuid.uuid4()
    conv = make_conversation(members=[member, ahead], num_of_message=5)
    uow.conversations.put(
        dataclasses.replace(conv, num_of_readed_message={member: 3, ahead: 9}),
    )

    await conversation_service.mark_read_up_to(member, conv.id, uow)
    await conversation_service.mark_read_up_to(ahead, conv.id, uow)

    counters = uow.conversations._store[conv.id].num_of_readed_message
    assert counters == {member: 5, ahead: 9}


@pytest.mark.asyncio
async def test_mark_read_up_to_missing_conversation():
    uow = FakeUoW()

    with pytest.raises(NotFoundError):
        await conversation_service.mark_read_up_to(uuid.uuid4(), uuid.uuid4(), uow)


@pytest.mark.asyncio
async def test_create_default_channel_is_idempotent():
    uow = FakeUoW()
    domain_id = uuid.uuid4()

    first = await conversation_service.create_default_channel(
        domain_id, uow, name="general", purpose="everyone",
    )
    second = await conversation_service.create_default_channel(domain_id, uow)

    assert first.id == second.id
    assert first.is_default is True
    assert first.type == ConversationType.OPEN
    assert first.mode == ConversationMode.CHANNEL
    assert first.purpose == TextSetting("everyone")
    assert uow.outbox.topics == ["conversation.created"]


@pytest.mark.asyncio
async def test_add_member_publishes_once_and_catches_up_counter():
    uow = FakeUoW()
    newcomer = uuid.uuid4()
    conv = uow.conversations.put(make_conversation(num_of_message=12))

    await conversation_service.add_member(conv.id, MemberRef(id=newcomer), uow)
    await conversation_service.add_member(conv.id, MemberRef(id=newcomer), uow)

    stored = uow.conversations._store[conv.id]
    assert stored.members == (MemberRef(id=newcomer),)
    assert stored.num_of_readed_message[newcomer] == 12
    assert uow.outbox.topics == ["conversation.member_added"]


@pytest.mark.asyncio
async def test_remove_member():
    uow = FakeUoW()
    stays, leaves = uuid.uuid4(), uuid.uuid4()
    conv = uow.conversations.put(make_conversation(members=[stays, leaves]))

    updated = await conversation_service.remove_member(conv.id, MemberRef(id=leaves), uow)

    assert updated.members == (MemberRef(id=stays),)


@pytest.mark.asyncio
async def test_ensure_default_channels_joins_member():
    uow = FakeUoW()
    member = uuid.uuid4()
    existing_domain, new_domain = uuid.uuid4(), uuid.uuid4()
    busy = dataclasses.replace(
        make_conversation(num_of_message=7), domain_id=existing_domain, is_default=True,
    )
    uow.conversations.put(busy)

    channels = await conversation_service.ensure_default_channels(
        member, [existing_domain, new_domain], uow,
    )

    assert [c.domain_id for c in channels] == [existing_domain, new_domain]
    assert all(c.has_member(member) for c in channels)
    assert uow.conversations._store[busy.id].num_of_readed_message[member] == 7
    assert uow.outbox.topics == [
        "conversation.member_added",
        "conversation.created",
        "conversation.member_added",
    ]
