from __future__ import annotations

from typing import Protocol
from uuid import UUID


class ReadStateWriter(Protocol):
    async def max_merge(
        self,
        conversation_id: UUID,
        member_ids: list[UUID],
        count: int,
    ) -> None:
        """Set each member's read counter to max(current, count)."""
        ...
