"""Import all models so Base.metadata sees every table."""
from groupchat.infrastructure.db.models.conversation import ConversationModel
from groupchat.infrastructure.db.models.message import MessageAttachmentModel, MessageModel
from groupchat.infrastructure.db.models.outbox import OutboxMessageModel
from groupchat.infrastructure.db.models.participant import ParticipantModel
from groupchat.infrastructure.db.models.read_state import ReadStateModel

__all__ = [
    "ConversationModel",
    "MessageAttachmentModel",
    "MessageModel",
    "OutboxMessageModel",
    "ParticipantModel",
    "ReadStateModel",
]
