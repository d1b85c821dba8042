"""Pydantic models for the relay settings file."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class HandlerConfig(BaseModel):
    """One ``handlers`` entry: an MQTT topic pattern mapped to an OSC address.

    Attributes:
        mqtt_topic: Topic pattern, ``+`` or ``*`` capture one level
        osc_address: Address template, e.g. ``/light/{capture_1}/turn-on``
        relay_payload: Forward the raw MQTT payload as the OSC argument
        name: Handler name used to attach hooks (defaults to ``mqtt_topic``)
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    mqtt_topic: str = Field(..., min_length=1)
    osc_address: str = Field(..., min_length=1)
    relay_payload: bool = False
    name: Optional[str] = Field(default=None, min_length=1)

    @property
    def key(self) -> str:
        return self.name or self.mqtt_topic


class RelaySettings(BaseModel):
    """Complete relay configuration as stored in the YAML file."""

    model_config = ConfigDict(extra="forbid")

    mqtt_host: str = "127.0.0.1"
    mqtt_port: int = Field(default=1883, ge=1, le=65535)
    mqtt_client_id: str = "mqtt-osc-relay"
    mqtt_user: Optional[str] = None
    mqtt_password: Optional[str] = Field(default=None, repr=False)
    mqtt_qos: int = Field(default=1, ge=0, le=2)
    mqtt_keepalive: int = Field(default=60, ge=1, le=3600)
    reconnect: bool = True
    reconnect_min_delay: float = Field(default=1.0, ge=0.1)
    reconnect_max_delay: float = Field(default=8.0, ge=0.1)
    osc_host: str = "127.0.0.1"
    osc_port: int = Field(default=8000, ge=1, le=65535)
    osc_payload_type: Literal["string", "blob", "auto"] = "string"
    on_handler_error: Literal["abort", "skip"] = "abort"
    handlers: list[HandlerConfig] = Field(default_factory=list)

    @field_validator("reconnect_max_delay")
    @classmethod
    def validate_reconnect_delays(cls, v: float, info: ValidationInfo) -> float:
        """Ensure reconnect_max_delay >= reconnect_min_delay."""
        min_delay = info.data.get("reconnect_min_delay")
        if min_delay is not None and v < min_delay:
            raise ValueError(
                f"reconnect_max_delay ({v}) must be >= reconnect_min_delay ({min_delay})"
            )
        return v


__all__ = ["HandlerConfig", "RelaySettings"]
