from __future__ import annotations

from typing import Iterable, Protocol
from uuid import UUID

from groupchat.domain.entities.member import MemberRecord


class MemberDirectory(Protocol):
    async def get_many(self, member_ids: Iterable[UUID]) -> dict[UUID, MemberRecord]:
        """Resolve member ids. Unknown ids map to a bare record."""
        ...

    async def save(self, record: MemberRecord) -> None: ...
