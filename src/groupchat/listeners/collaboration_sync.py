"""Mirrors collaboration lifecycle events onto collaboration-bound conversations."""
from __future__ import annotations

import logging
import uuid
from contextlib import AbstractAsyncContextManager
from typing import Any, Callable

from groupchat.application.dto.conversation import CollaborationModificationsDTO
from groupchat.application.exceptions import BadRequestError, NotFoundError
from groupchat.application.ports.bus import EventSubscriber
from groupchat.application.uow import UnitOfWork
from groupchat.domain.entities.conversation import CollaborationTuple, MemberRef
from groupchat.domain.events import topics
from groupchat.domain.events.collaboration_sync import CollaborationCreated, CollaborationUpdated
from groupchat.domain.value_objects.enums import ObjectType
from groupchat.services import collaboration_service

logger = logging.getLogger(__name__)

UoWScope = Callable[[], AbstractAsyncContextManager[UnitOfWork]]


def parse_member(raw: Any) -> MemberRef:
    if isinstance(raw, dict):
        raw_id, object_type = raw.get("id"), raw.get("objectType") or ObjectType.USER
    else:
        raw_id, object_type = raw, ObjectType.USER
    try:
        return MemberRef(id=uuid.UUID(str(raw_id)), object_type=object_type)
    except ValueError as exc:
        raise BadRequestError(f"Invalid member in collaboration event: {raw!r}") from exc


def _collaboration(object_type: str, collaboration_id: str) -> CollaborationTuple | None:
    # A conversation-backed collaboration is the conversation itself.
    if not object_type or not collaboration_id or object_type == ObjectType.CONVERSATION:
        return None
    return CollaborationTuple(object_type=object_type, id=collaboration_id)


class CollaborationSyncListener:
    """Creates and updates COLLABORATION conversations from collaboration events.

    Each event is handled in its own unit of work obtained from ``uow_scope``.
    """

    def __init__(self, subscriber: EventSubscriber, uow_scope: UoWScope) -> None:
        self._subscriber = subscriber
        self._uow_scope = uow_scope
        self._subscribed = False

    @property
    def subscribed(self) -> bool:
        return self._subscribed

    def start(self) -> None:
        if self._subscribed:
            return
        self._subscriber.subscribe(topics.COLLABORATION_CREATED, self.handle_created)
        self._subscriber.subscribe(topics.COLLABORATION_UPDATED, self.handle_updated)
        self._subscribed = True
        logger.info(
            "Listening to %s, %s", topics.COLLABORATION_CREATED, topics.COLLABORATION_UPDATED,
        )

    async def handle_created(self, payload: dict[str, Any]) -> None:
        event = CollaborationCreated.from_payload(payload)
        collaboration = _collaboration(event.collaboration_object_type, event.collaboration_id)
        if collaboration is None:
            logger.debug("Ignoring creation of %s:%s",
                         event.collaboration_object_type, event.collaboration_id)
            return

        members = [parse_member(m) for m in event.members]
        async with self._uow_scope() as uow:
            conversation = await collaboration_service.ensure_conversation(
                collaboration, members, uow, title=event.title,
            )
        logger.info("Collaboration %s:%s bound to conversation %s",
                    collaboration.object_type, collaboration.id, conversation.id)

    async def handle_updated(self, payload: dict[str, Any]) -> None:
        event = CollaborationUpdated.from_payload(payload)
        collaboration = _collaboration(event.collaboration_object_type, event.collaboration_id)
        if collaboration is None:
            logger.debug("Ignoring update of %s:%s",
                         event.collaboration_object_type, event.collaboration_id)
            return

        modifications = CollaborationModificationsDTO(
            new_members=[parse_member(m) for m in event.new_members],
            delete_members=[parse_member(m) for m in event.delete_members],
            title=event.title,
        )
        async with self._uow_scope() as uow:
            try:
                await collaboration_service.update_conversation(collaboration, modifications, uow)
            except NotFoundError:
                logger.debug("Collaboration %s:%s has no conversation, skipping",
                             collaboration.object_type, collaboration.id)
