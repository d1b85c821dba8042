"""Error taxonomy for the relay."""

from __future__ import annotations


class RelayError(Exception):
    """Base class for all relay errors."""


class ConfigurationError(RelayError):
    """A handler could not be initialized (bad pattern, template or hook)."""


class SettingsError(RelayError):
    """The settings file could not be read, parsed or validated."""


class MatchFailure(RelayError):
    """A delivered topic does not fit the handler's pattern."""


class HookFailure(RelayError):
    """The auxiliary data hook raised or returned unusable data."""


class RenderFailure(RelayError):
    """The address template could not be rendered for an event."""


class TransportError(RelayError):
    """The MQTT transport failed in a way that stops the relay."""


__all__ = [
    "ConfigurationError",
    "HookFailure",
    "MatchFailure",
    "RelayError",
    "RenderFailure",
    "SettingsError",
    "TransportError",
]
