from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from groupchat.domain.value_objects.enums import ObjectType


@dataclass(frozen=True, slots=True)
class MemberRecord:
    id: UUID
    object_type: str = ObjectType.USER
    display_name: str | None = None
    email: str | None = None
