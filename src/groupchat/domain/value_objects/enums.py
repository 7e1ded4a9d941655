from __future__ import annotations

from enum import StrEnum


class ConversationType(StrEnum):
    OPEN = "open"
    CONFIDENTIAL = "confidential"
    COLLABORATION = "collaboration"


class ConversationMode(StrEnum):
    CHANNEL = "channel"
    PRIVATE = "private"


class ParticipantKind(StrEnum):
    USER = "user"
    ADMIN = "admin"


class MessageType(StrEnum):
    TEXT = "text"
    FILE = "file"
    SYSTEM = "system"


class MessageSubtype(StrEnum):
    CONVERSATION_JOIN = "conversation_join"


class ObjectType(StrEnum):
    """objectType values used in member references and resource tuples."""

    USER = "user"
    CONVERSATION = "chat.conversation"
    MESSAGE = "chat.message"


STAR_LINK_TYPE = "star"
