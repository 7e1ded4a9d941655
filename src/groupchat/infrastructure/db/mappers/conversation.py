from __future__ import annotations

from uuid import UUID

from groupchat.domain.entities.conversation import (
    CollaborationTuple,
    Conversation,
    LastMessage,
    MemberRef,
    TextSetting,
)
from groupchat.infrastructure.db.models.conversation import ConversationModel
from groupchat.infrastructure.db.models.participant import ParticipantModel


def model_to_entity(model: ConversationModel) -> Conversation:
    return Conversation(
        id=model.id,
        type=model.type,
        mode=model.mode,
        name=model.name,
        topic=_setting(model.topic_value, model.topic_creator),
        purpose=_setting(model.purpose_value, model.purpose_creator),
        creator=model.creator,
        members=tuple(
            MemberRef(id=p.member_id, object_type=p.object_type) for p in model.participants
        ),
        collaboration=(
            CollaborationTuple(model.collaboration_object_type, model.collaboration_id)
            if model.collaboration_object_type is not None and model.collaboration_id is not None
            else None
        ),
        domain_id=model.domain_id,
        is_default=model.is_default,
        num_of_message=model.num_of_message,
        num_of_readed_message={r.member_id: r.read_count for r in model.read_states},
        last_message=(
            LastMessage(
                text=model.last_message_text,
                creator=model.last_message_creator,
                user_mentions=tuple(UUID(m) for m in model.last_message_mentions or []),
                date=model.last_message_at,
            )
            if model.last_message_at is not None and model.last_message_creator is not None
            else None
        ),
        moderate=model.moderate,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_model(entity: Conversation) -> ConversationModel:
    return ConversationModel(
        id=entity.id,
        type=entity.type,
        mode=entity.mode,
        name=entity.name,
        topic_value=entity.topic.value if entity.topic else None,
        topic_creator=entity.topic.creator if entity.topic else None,
        purpose_value=entity.purpose.value if entity.purpose else None,
        purpose_creator=entity.purpose.creator if entity.purpose else None,
        creator=entity.creator,
        collaboration_object_type=entity.collaboration.object_type if entity.collaboration else None,
        collaboration_id=entity.collaboration.id if entity.collaboration else None,
        domain_id=entity.domain_id,
        is_default=entity.is_default,
        num_of_message=entity.num_of_message,
        moderate=entity.moderate,
        last_message_text=entity.last_message.text if entity.last_message else None,
        last_message_creator=entity.last_message.creator if entity.last_message else None,
        last_message_mentions=(
            [str(m) for m in entity.last_message.user_mentions] if entity.last_message else None
        ),
        last_message_at=entity.last_message.date if entity.last_message else None,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
        participants=[
            ParticipantModel(member_id=m.id, object_type=m.object_type) for m in entity.members
        ],
        read_states=[],
    )


def _setting(value: str | None, creator: UUID | None) -> TextSetting | None:
    if value is None:
        return None
    return TextSetting(value=value, creator=creator)
