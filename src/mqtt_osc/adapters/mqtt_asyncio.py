from __future__ import annotations

from collections.abc import AsyncIterable
from typing import Any, Optional

import asyncio_mqtt as mqtt
from paho.mqtt.client import topic_matches_sub

from mqtt_osc.domain.ports import DeliverCallback, Subscriber
from mqtt_osc.runtime.logging import TRACE, Logger


def payload_bytes(payload: Any) -> Optional[bytes]:
    """Normalize an asyncio-mqtt payload to bytes (``None`` when unsupported)."""

    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, bytearray):
        return bytes(payload)
    if isinstance(payload, str):
        return payload.encode("utf-8")
    if payload is None:
        return b""
    return None


class AsyncioMQTTSubscriber(Subscriber):
    """Subscriber implementation backed by an asyncio-mqtt client.

    Messages are routed to callbacks with paho's ``topic_matches_sub``, i.e.
    the broker's own wildcard semantics. One message is delivered to every
    subscription it matches.
    """

    def __init__(self, client: mqtt.Client, *, logger: Logger) -> None:
        self._client = client
        self._logger = logger
        self._subscriptions: list[tuple[str, DeliverCallback]] = []

    @property
    def patterns(self) -> tuple[str, ...]:
        return tuple(pattern for pattern, _ in self._subscriptions)

    async def subscribe(self, pattern: str, callback: DeliverCallback, qos: int = 0) -> None:
        self._subscriptions.append((pattern, callback))
        await self._client.subscribe(pattern, qos=qos)
        self._logger.info("mqtt.subscribed", extra={"mqtt_topic": pattern, "qos": qos})

    async def pump(self, messages: AsyncIterable[Any]) -> None:
        """Deliver messages from an open ``client.messages()`` stream until it ends."""

        async for message in messages:
            topic = str(message.topic)
            payload = payload_bytes(message.payload)
            if payload is None:
                self._logger.warning(
                    "mqtt.payload.unsupported",
                    extra={"topic": topic, "payload_type": type(message.payload).__name__},
                )
                continue
            self._logger.log(TRACE, "mqtt.message", extra={"topic": topic, "size": len(payload)})
            await self.deliver(topic, payload)

    async def deliver(self, topic: str, payload: bytes) -> int:
        """Invoke every callback whose subscription matches ``topic``."""

        delivered = 0
        for pattern, callback in self._subscriptions:
            if not topic_matches_sub(pattern, topic):
                continue
            delivered += 1
            try:
                await callback(topic, payload)
            except Exception as exc:  # pragma: no cover - safety net
                self._logger.error(
                    "mqtt.callback.error",
                    extra={"mqtt_topic": pattern, "topic": topic, "error": str(exc)},
                    exc_info=exc,
                )
        if not delivered:
            self._logger.warning("mqtt.message.unrouted", extra={"topic": topic})
        return delivered


__all__ = ["AsyncioMQTTSubscriber", "payload_bytes"]
