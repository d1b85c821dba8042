"""MQTT to OSC relay service: connect, subscribe handlers, pump messages."""

from __future__ import annotations

import asyncio
from typing import Mapping, Optional

import asyncio_mqtt as mqtt

from mqtt_osc.adapters.mqtt_asyncio import AsyncioMQTTSubscriber
from mqtt_osc.adapters.osc import OSCUDPSender
from mqtt_osc.config.models import RelaySettings
from mqtt_osc.domain.errors import TransportError
from mqtt_osc.domain.handler import Handler
from mqtt_osc.domain.ports import Sender
from mqtt_osc.runtime.logging import Logger
from mqtt_osc.runtime.registry import DispatchRegistry, HookLike


class Relay:
    """Forward MQTT messages to OSC according to the configured handlers.

    Handlers are initialized before the first connection attempt. Each
    connection subscribes all of them again; when the connection drops the
    registry returns them to the initialized state and the relay reconnects
    with exponential backoff (unless ``reconnect`` is disabled).
    """

    def __init__(
        self,
        settings: RelaySettings,
        *,
        logger: Logger,
        hooks: Optional[Mapping[str, HookLike]] = None,
        sender: Optional[Sender] = None,
    ) -> None:
        self._settings = settings
        self._logger = logger
        self._hooks = dict(hooks or {})
        self._sender = sender
        self._registry = DispatchRegistry(logger=logger, on_init_error=settings.on_handler_error)
        self._initialized = False
        self._backoff = settings.reconnect_min_delay

    @property
    def registry(self) -> DispatchRegistry:
        return self._registry

    def initialize(self) -> tuple[Handler, ...]:
        """Initialize all handlers; raises ``ConfigurationError`` under the abort policy."""

        if self._initialized:
            return self._registry.handlers
        self._registry.initialize(self._settings.handlers, self._hooks)
        if not self._registry.handlers:
            self._logger.warning("relay.handlers.empty")
        if self._sender is None:
            try:
                self._sender = OSCUDPSender(
                    self._settings.osc_host,
                    self._settings.osc_port,
                    logger=self._logger,
                    payload_type=self._settings.osc_payload_type,
                )
            except OSError as exc:
                self._logger.critical(
                    "relay.osc.unavailable",
                    extra={"osc_host": self._settings.osc_host, "osc_port": self._settings.osc_port, "error": str(exc)},
                )
                raise TransportError(
                    f"cannot reach OSC target {self._settings.osc_host}:{self._settings.osc_port}: {exc}"
                ) from exc
        self._initialized = True
        return self._registry.handlers

    def _client(self) -> mqtt.Client:
        s = self._settings
        return mqtt.Client(
            hostname=s.mqtt_host,
            port=s.mqtt_port,
            username=s.mqtt_user,
            password=s.mqtt_password,
            client_id=s.mqtt_client_id,
            keepalive=s.mqtt_keepalive,
        )

    async def run_once(self) -> None:
        """Run one connection session until the message stream ends or fails."""

        if self._sender is None:
            raise RuntimeError("initialize() must run before connecting")
        s = self._settings
        async with self._client() as client:
            self._logger.info("relay.mqtt.connected", extra={"host": s.mqtt_host, "port": s.mqtt_port})
            self._backoff = s.reconnect_min_delay
            async with client.messages() as messages:
                subscriber = AsyncioMQTTSubscriber(client, logger=self._logger)
                await self._registry.activate(subscriber, self._sender, qos=s.mqtt_qos)
                await subscriber.pump(messages)

    async def run(self) -> None:
        """Serve forever (or until the first failure when reconnect is off)."""

        self.initialize()
        s = self._settings
        while True:
            self._logger.info(
                "relay.mqtt.connect",
                extra={"host": s.mqtt_host, "port": s.mqtt_port, "client_id": s.mqtt_client_id},
            )
            try:
                await self.run_once()
                self._logger.warning("relay.mqtt.stream_closed", extra={"host": s.mqtt_host})
                if not s.reconnect:
                    return
            except mqtt.MqttError as exc:
                if not s.reconnect:
                    self._logger.critical(
                        "relay.mqtt.failed",
                        extra={"host": s.mqtt_host, "port": s.mqtt_port, "error": str(exc)},
                    )
                    raise TransportError(f"MQTT error, {exc}") from exc
                self._logger.warning(
                    "relay.mqtt.disconnected", extra={"error": str(exc), "backoff": self._backoff}
                )
            finally:
                self._registry.deactivate()

            await asyncio.sleep(self._backoff)
            self._backoff = min(self._backoff * 2.0, s.reconnect_max_delay)


__all__ = ["Relay"]
