"""Relay configuration: settings models and YAML loading."""

from mqtt_osc.config.loader import (
    default_settings,
    dump_settings,
    load_settings,
    parse_settings,
    write_default_config,
)
from mqtt_osc.config.models import HandlerConfig, RelaySettings

__all__ = [
    "HandlerConfig",
    "RelaySettings",
    "default_settings",
    "dump_settings",
    "load_settings",
    "parse_settings",
    "write_default_config",
]
