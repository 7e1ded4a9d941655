from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, Index, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from groupchat.infrastructure.db.base import Base


class ConversationModel(Base):
    __tablename__ = "conversations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="open")
    mode: Mapped[str] = mapped_column(String(20), nullable=False, default="channel")
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    topic_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    topic_creator: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    purpose_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    purpose_creator: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    creator: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    collaboration_object_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    collaboration_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    domain_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    is_default: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    num_of_message: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0"),
    )
    moderate: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    last_message_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_message_creator: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    last_message_mentions: Mapped[list[Any] | None] = mapped_column(JSONB, nullable=True)
    last_message_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
        onupdate=text("now()"),
    )

    # relationships
    participants = relationship(
        "ParticipantModel",
        back_populates="conversation",
        lazy="selectin",
        order_by="ParticipantModel.id",
        passive_deletes=True,
    )
    read_states = relationship("ReadStateModel", lazy="selectin", passive_deletes=True)
    messages = relationship("MessageModel", back_populates="conversation", lazy="noload")

    __table_args__ = (
        UniqueConstraint(
            "collaboration_object_type",
            "collaboration_id",
            name="uq_conversations_collaboration",
        ),
        Index(
            "uq_conversations_default_channel",
            "domain_id",
            unique=True,
            postgresql_where=text("is_default"),
        ),
        Index("ix_conversations_type_name", "type", "name"),
        Index("ix_conversations_last_message", last_message_at.desc(), created_at.desc()),
    )
