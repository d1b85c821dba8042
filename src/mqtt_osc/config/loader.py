"""Read and write relay settings files (YAML) with environment overrides."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from mqtt_osc.domain.errors import SettingsError

from .models import HandlerConfig, RelaySettings

logger = logging.getLogger(__name__)

# Environment variable -> settings field
ENV_OVERRIDES: dict[str, str] = {
    "MQTT_HOST": "mqtt_host",
    "MQTT_PORT": "mqtt_port",
    "MQTT_CLIENT_ID": "mqtt_client_id",
    "MQTT_USER": "mqtt_user",
    "MQTT_PASSWORD": "mqtt_password",
    "OSC_HOST": "osc_host",
    "OSC_PORT": "osc_port",
}


def default_settings() -> RelaySettings:
    """Settings written by ``mqtt-osc config``."""

    return RelaySettings(
        mqtt_host="127.0.0.1",
        mqtt_port=1883,
        mqtt_client_id="mqtt-osc-relay",
        mqtt_user="user",
        mqtt_password="secret",
        handlers=[
            HandlerConfig(
                mqtt_topic="/light/+/on",
                osc_address="/light/{capture_1}/turn-on",
            )
        ],
    )


def _env_values(env: Mapping[str, str]) -> dict[str, str]:
    return {field: env[var] for var, field in ENV_OVERRIDES.items() if env.get(var) not in (None, "")}


def parse_settings(text: str, *, env: Optional[Mapping[str, str]] = None, source: str = "<string>") -> RelaySettings:
    try:
        raw: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SettingsError(f"error parsing configuration from {source}: {exc}") from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise SettingsError(f"configuration in {source} must be a mapping, got {type(raw).__name__}")

    overrides = _env_values(os.environ if env is None else env)
    if overrides:
        logger.debug("config.env.overrides", extra={"fields": sorted(overrides)})
        raw = {**raw, **overrides}

    try:
        return RelaySettings.model_validate(raw)
    except ValidationError as exc:
        raise SettingsError(f"invalid configuration in {source}: {exc}") from exc


def load_settings(path: str | Path, *, env: Optional[Mapping[str, str]] = None) -> RelaySettings:
    """Load settings from a YAML file; raises :class:`SettingsError`."""

    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SettingsError(f"error loading configuration from {path}: {exc}") from exc
    return parse_settings(text, env=env, source=str(path))


def dump_settings(settings: RelaySettings) -> str:
    return yaml.safe_dump(settings.model_dump(exclude_none=True), sort_keys=False)


def write_default_config(path: str | Path, *, force: bool = False) -> Path:
    """Write :func:`default_settings` to ``path`` unless it already exists."""

    path = Path(path)
    if path.exists() and not force:
        raise SettingsError(f"refusing to overwrite existing file {path}")
    try:
        path.write_text(dump_settings(default_settings()), encoding="utf-8")
    except OSError as exc:
        raise SettingsError(f"couldn't write config to {path}: {exc}") from exc
    return path


__all__ = [
    "ENV_OVERRIDES",
    "default_settings",
    "dump_settings",
    "load_settings",
    "parse_settings",
    "write_default_config",
]
