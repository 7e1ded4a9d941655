"""Turns collaboration-join events into "has joined" system messages."""
from __future__ import annotations

import logging
import uuid
from typing import Any, Awaitable, Callable

from groupchat.application.dto.message import MessageDraft
from groupchat.application.exceptions import BadRequestError
from groupchat.application.ports.bus import EventSubscriber
from groupchat.domain.events import topics
from groupchat.domain.events.collaboration_join import CollaborationJoin
from groupchat.domain.value_objects.enums import MessageSubtype, MessageType, ObjectType

logger = logging.getLogger(__name__)

MessageReceived = Callable[[MessageDraft], Awaitable[Any]]


def _parse_uuid(raw: str, field: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw)
    except ValueError as exc:
        raise BadRequestError(f"Invalid {field} in collaboration join event: {raw!r}") from exc


def build_join_message(event: CollaborationJoin) -> MessageDraft:
    member_id = _parse_uuid(event.target, "target")
    return MessageDraft(
        conversation_id=_parse_uuid(event.collaboration_id, "collaboration id"),
        creator=member_id,
        text=f"@{member_id} has joined the conversation.",
        type=MessageType.TEXT,
        subtype=MessageSubtype.CONVERSATION_JOIN,
        user_mentions=[member_id],
    )


class JoinConversationSystemMessageListener:
    """Subscribes once to ``collaboration.join`` and hands join messages to ``on_message``."""

    def __init__(self, subscriber: EventSubscriber, on_message: MessageReceived) -> None:
        self._subscriber = subscriber
        self._on_message = on_message
        self._subscribed = False

    @property
    def subscribed(self) -> bool:
        return self._subscribed

    def start(self) -> None:
        if self._subscribed:
            return
        self._subscriber.subscribe(topics.COLLABORATION_JOIN, self.handle)
        self._subscribed = True
        logger.info("Listening to %s", topics.COLLABORATION_JOIN)

    async def handle(self, payload: dict[str, Any]) -> None:
        event = CollaborationJoin.from_payload(payload)
        logger.debug("Received join of %s on %s:%s", event.target,
                     event.collaboration_object_type, event.collaboration_id)

        if event.collaboration_object_type != ObjectType.CONVERSATION:
            logger.debug(
                "Collaboration %s:%s is not a conversation, skipping",
                event.collaboration_object_type, event.collaboration_id,
            )
            return

        await self._on_message(build_join_message(event))
