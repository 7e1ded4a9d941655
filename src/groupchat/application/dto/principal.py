from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from groupchat.domain.value_objects.enums import ParticipantKind


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT."""

    kind: ParticipantKind
    subject_id: UUID
    roles: list[str] = field(default_factory=list)
    domains: list[UUID] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return self.kind == ParticipantKind.ADMIN or "admin" in self.roles
