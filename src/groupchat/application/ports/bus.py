from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol

EventHandler = Callable[[dict[str, Any]], Awaitable[None]]


class EventPublisher(Protocol):
    async def publish(self, topic: str, payload: dict[str, Any]) -> None: ...


class EventSubscriber(Protocol):
    def subscribe(self, topic: str, handler: EventHandler) -> None: ...
