from __future__ import annotations

from typing import Awaitable, Callable, Optional, Protocol

DeliverCallback = Callable[[str, bytes], Awaitable[None]]


class Subscriber(Protocol):
    async def subscribe(self, pattern: str, callback: DeliverCallback, qos: int = 0) -> None: ...


class Sender(Protocol):
    async def send(self, address: str, payload: Optional[bytes] = None) -> None: ...
