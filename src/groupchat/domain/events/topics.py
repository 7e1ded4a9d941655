"""Event bus topic names."""
from __future__ import annotations

CONVERSATION_CREATED = "conversation.created"
CONVERSATION_UPDATED = "conversation.updated"
CONVERSATION_TOPIC_UPDATED = "conversation.topic_updated"
CONVERSATION_DELETED = "conversation.deleted"
MEMBER_ADDED_IN_CONVERSATION = "conversation.member_added"
MESSAGE_SAVED = "message.saved"
COLLABORATION_JOIN = "collaboration.join"
USER_UPDATED = "user.updated"
COLLABORATION_CREATED = "collaboration.created"
COLLABORATION_UPDATED = "collaboration.updated"
