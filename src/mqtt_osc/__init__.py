"""Relay MQTT topic updates to OSC addresses."""

from mqtt_osc.config import HandlerConfig, RelaySettings, load_settings
from mqtt_osc.domain import (
    AddressTemplate,
    AuxDataHook,
    ConfigurationError,
    FunctionHook,
    Handler,
    OscCommand,
    TopicPattern,
)
from mqtt_osc.relay import Relay
from mqtt_osc.runtime.registry import DispatchRegistry, HandlerState, InitFailurePolicy

__version__ = "0.1.0"

__all__ = [
    "AddressTemplate",
    "AuxDataHook",
    "ConfigurationError",
    "DispatchRegistry",
    "FunctionHook",
    "Handler",
    "HandlerConfig",
    "HandlerState",
    "InitFailurePolicy",
    "OscCommand",
    "Relay",
    "RelaySettings",
    "TopicPattern",
    "load_settings",
]
