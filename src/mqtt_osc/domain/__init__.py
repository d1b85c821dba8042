"""Topic-pattern matching and OSC address templating."""

from .errors import (
    ConfigurationError,
    HookFailure,
    MatchFailure,
    RelayError,
    RenderFailure,
    SettingsError,
    TransportError,
)
from .handler import Handler, OscCommand
from .hooks import AuxDataHook, FunctionHook, as_hook
from .pattern import TopicPattern
from .ports import DeliverCallback, Sender, Subscriber
from .template import AddressTemplate, capture_key, is_reserved_key

__all__ = [
    "AddressTemplate",
    "AuxDataHook",
    "ConfigurationError",
    "DeliverCallback",
    "FunctionHook",
    "Handler",
    "HookFailure",
    "MatchFailure",
    "OscCommand",
    "RelayError",
    "RenderFailure",
    "Sender",
    "SettingsError",
    "Subscriber",
    "TopicPattern",
    "TransportError",
    "as_hook",
    "capture_key",
    "is_reserved_key",
]
