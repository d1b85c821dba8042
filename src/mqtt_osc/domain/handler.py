from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Tuple

from .errors import HookFailure, MatchFailure, RenderFailure
from .hooks import AuxDataHook, call_hook, reserved_keys, validate_hook
from .pattern import TopicPattern
from .template import AddressTemplate, capture_data

if TYPE_CHECKING:  # pragma: no cover
    from mqtt_osc.runtime.logging import Logger


@dataclass(frozen=True, slots=True)
class OscCommand:
    """Outbound OSC message produced by a handler for one event."""

    address: str
    payload: Optional[bytes] = None


@dataclass(frozen=True, slots=True)
class Handler:
    """One MQTT topic pattern bound to one OSC address template.

    Instances are only created through :meth:`build`, which compiles the
    pattern and template and validates the hook. A built handler is immutable
    and may process events from several tasks at once.
    """

    name: str
    pattern: TopicPattern
    template: AddressTemplate
    relay_payload: bool
    hook: Optional[AuxDataHook]
    logger: "Logger" = field(repr=False, compare=False)

    @classmethod
    def build(
        cls,
        mqtt_topic: str,
        osc_address: str,
        *,
        logger: "Logger",
        relay_payload: bool = False,
        hook: Optional[AuxDataHook] = None,
        name: Optional[str] = None,
    ) -> "Handler":
        """Initialize a handler; raises ``ConfigurationError`` on any invalid part."""

        pattern = TopicPattern.compile(mqtt_topic)
        template = AddressTemplate.compile(osc_address, capture_count=pattern.wildcard_count)
        if hook is not None:
            validate_hook(hook)
        handler = cls(
            name=name or mqtt_topic,
            pattern=pattern,
            template=template,
            relay_payload=relay_payload,
            hook=hook,
            logger=logger,
        )
        logger.debug(
            "handler.initialized",
            extra={
                "handler": handler.name,
                "mqtt_topic": mqtt_topic,
                "osc_address": osc_address,
                "wildcards": pattern.wildcard_count,
                "relay_payload": relay_payload,
            },
        )
        return handler

    @property
    def topic(self) -> str:
        return self.pattern.source

    def captures(self, topic: str) -> Tuple[str, ...]:
        found = self.pattern.match(topic)
        if found is None:
            raise MatchFailure(f"topic {topic!r} does not match pattern {self.pattern.source!r}")
        return found

    def template_data(self, topic: str, payload: bytes, captures: Tuple[str, ...]) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.hook is not None:
            aux = call_hook(self.hook, topic, payload.decode("utf-8", errors="replace"))
            collisions = reserved_keys(aux)
            if collisions:
                self.logger.warning(
                    "handler.hook.reserved_keys",
                    extra={"handler": self.name, "topic": topic, "keys": collisions},
                )
            data.update(aux)
        data.update(capture_data(captures))
        return data

    def render(self, topic: str, payload: bytes) -> OscCommand:
        """Translate one event, raising the matching failure type on error."""

        captures = self.captures(topic)
        address = self.template.render(self.template_data(topic, payload, captures))
        return OscCommand(address=address, payload=payload if self.relay_payload else None)

    def process(self, topic: str, payload: bytes) -> Optional[OscCommand]:
        """Translate one event; failures are logged and yield ``None``."""

        self.logger.debug("handler.triggered", extra={"handler": self.name, "topic": topic})
        try:
            return self.render(topic, payload)
        except MatchFailure as exc:
            self.logger.warning(
                "handler.match.failed",
                extra={"handler": self.name, "topic": topic, "error": str(exc)},
            )
        except HookFailure as exc:
            self.logger.error(
                "handler.hook.failed",
                extra={"handler": self.name, "topic": topic, "error": str(exc)},
            )
        except RenderFailure as exc:
            self.logger.error(
                "handler.render.failed",
                extra={"handler": self.name, "topic": topic, "error": str(exc)},
            )
        return None


__all__ = ["Handler", "OscCommand"]
