from __future__ import annotations

from enum import Enum
from functools import partial
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from mqtt_osc.config.models import HandlerConfig
from mqtt_osc.domain.errors import ConfigurationError
from mqtt_osc.domain.handler import Handler, OscCommand
from mqtt_osc.domain.hooks import AuxDataHook, as_hook
from mqtt_osc.domain.ports import Sender, Subscriber

from .logging import Logger

HookLike = Union[AuxDataHook, Callable[[str, str], Mapping[str, Any]]]


class HandlerState(str, Enum):
    INITIALIZED = "initialized"
    ACTIVE = "active"


class InitFailurePolicy(str, Enum):
    """What to do when one handler fails to initialize."""

    ABORT = "abort"  # raise and stop startup
    SKIP = "skip"  # warn and continue without the handler


class DispatchRegistry:
    """Own the relay handlers, subscribe them and route delivered events."""

    def __init__(
        self,
        *,
        logger: Logger,
        on_init_error: InitFailurePolicy | str = InitFailurePolicy.ABORT,
    ) -> None:
        self._logger = logger
        self._policy = InitFailurePolicy(on_init_error)
        self._handlers: list[Handler] = []
        self._active: set[str] = set()

    @property
    def handlers(self) -> tuple[Handler, ...]:
        return tuple(self._handlers)

    @property
    def active(self) -> tuple[Handler, ...]:
        return tuple(h for h in self._handlers if h.name in self._active)

    def state(self, handler: Handler) -> HandlerState:
        if handler.name in self._active:
            return HandlerState.ACTIVE
        return HandlerState.INITIALIZED

    def initialize(
        self,
        configs: Iterable[HandlerConfig],
        hooks: Optional[Mapping[str, HookLike]] = None,
    ) -> list[Handler]:
        """Build a handler per config entry, attaching hooks by handler name.

        Returns the handlers that initialized. With the ``abort`` policy the
        first :class:`ConfigurationError` is re-raised after logging.
        """

        hooks = dict(hooks or {})
        built: list[Handler] = []
        for config in configs:
            name = self._unique_name(config.key)
            try:
                hook = as_hook(hooks.pop(config.key)) if config.key in hooks else None
                handler = Handler.build(
                    config.mqtt_topic,
                    config.osc_address,
                    logger=self._logger,
                    relay_payload=config.relay_payload,
                    hook=hook,
                    name=name,
                )
            except ConfigurationError as exc:
                if self._policy is InitFailurePolicy.ABORT:
                    self._logger.error(
                        "registry.handler.init_failed",
                        extra={"handler": name, "mqtt_topic": config.mqtt_topic, "error": str(exc)},
                    )
                    raise
                self._logger.warning(
                    "registry.handler.skipped",
                    extra={"handler": name, "mqtt_topic": config.mqtt_topic, "error": str(exc)},
                )
                continue
            self._handlers.append(handler)
            built.append(handler)

        for unused in hooks:
            self._logger.warning("registry.hook.unused", extra={"handler": unused})
        return built

    def add(self, handler: Handler) -> None:
        if any(h.name == handler.name for h in self._handlers):
            raise ConfigurationError(f"duplicate handler name {handler.name!r}")
        self._handlers.append(handler)

    def _unique_name(self, base: str) -> str:
        taken = {h.name for h in self._handlers}
        if base not in taken:
            return base
        suffix = 2
        while f"{base}[{suffix}]" in taken:
            suffix += 1
        return f"{base}[{suffix}]"

    async def activate(self, subscriber: Subscriber, sender: Sender, *, qos: int = 0) -> None:
        """Subscribe every initialized handler's pattern verbatim."""

        for handler in self._handlers:
            if handler.name in self._active:
                continue
            await subscriber.subscribe(handler.topic, partial(self.deliver, handler, sender), qos=qos)
            self._active.add(handler.name)
            self._logger.info(
                "registry.handler.active",
                extra={"handler": handler.name, "mqtt_topic": handler.topic, "qos": qos},
            )

    def deactivate(self) -> None:
        """Return all handlers to the initialized state (subscriptions are gone)."""

        if self._active:
            self._logger.info("registry.deactivated", extra={"count": len(self._active)})
        self._active.clear()

    async def deliver(self, handler: Handler, sender: Sender, topic: str, payload: bytes) -> None:
        """Transport callback for one handler's subscription."""

        if handler.name not in self._active:
            self._logger.warning("registry.handler.inactive", extra={"handler": handler.name, "topic": topic})
            return
        command = handler.process(topic, payload)
        if command is None:
            return
        await self._send(handler, sender, command)

    def dispatch(self, topic: str, payload: bytes) -> list[OscCommand]:
        """Translate one event through every active handler whose pattern matches.

        Routing here uses the handlers' own matchers instead of the transport.
        """

        commands: list[OscCommand] = []
        for handler in self.active:
            if not handler.pattern.matches(topic):
                continue
            command = handler.process(topic, payload)
            if command is not None:
                commands.append(command)
        return commands

    async def _send(self, handler: Handler, sender: Sender, command: OscCommand) -> None:
        try:
            await sender.send(command.address, command.payload)
        except Exception as exc:  # outbound failures never stop other handlers
            self._logger.error(
                "registry.send.failed",
                extra={"handler": handler.name, "osc_address": command.address, "error": str(exc)},
            )
            return
        self._logger.debug(
            "registry.send.ok",
            extra={
                "handler": handler.name,
                "osc_address": command.address,
                "payload_size": None if command.payload is None else len(command.payload),
            },
        )


__all__ = ["DispatchRegistry", "HandlerState", "InitFailurePolicy"]
