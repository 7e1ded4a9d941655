from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class ResourceTuple:
    object_type: str
    id: str


@dataclass(frozen=True, slots=True)
class ResourceLink:
    source: ResourceTuple
    target: ResourceTuple
    type: str


class ResourceLinkChecker(Protocol):
    async def exists(self, link: ResourceLink) -> bool: ...
