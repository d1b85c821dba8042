"""Auxiliary data hooks attached to handlers by the embedding program."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol, runtime_checkable

from .errors import ConfigurationError, HookFailure
from .template import is_reserved_key


@runtime_checkable
class AuxDataHook(Protocol):
    """Provide extra template data for one event.

    ``aux_data`` receives the concrete topic and the payload decoded as text
    and returns a mapping merged into the template data. Keys shaped like
    ``capture_<n>`` are reserved for wildcard captures.
    """

    def aux_data(self, topic: str, payload: str) -> Mapping[str, Any]: ...


class FunctionHook:
    """Adapt a plain ``(topic, payload) -> mapping`` callable to :class:`AuxDataHook`."""

    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[[str, str], Mapping[str, Any]]) -> None:
        self._fn = fn

    def aux_data(self, topic: str, payload: str) -> Mapping[str, Any]:
        return self._fn(topic, payload)

    def __repr__(self) -> str:
        return f"FunctionHook({getattr(self._fn, '__qualname__', self._fn)!r})"


def as_hook(value: AuxDataHook | Callable[[str, str], Mapping[str, Any]]) -> AuxDataHook:
    if isinstance(value, AuxDataHook):
        return value
    if callable(value):
        return FunctionHook(value)
    raise ConfigurationError(f"auxiliary data hook must be callable, got {type(value).__name__}")


def reserved_keys(data: Mapping[Any, Any]) -> list[str]:
    return sorted(key for key in data if isinstance(key, str) and is_reserved_key(key))


def _check_shape(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"expected a mapping, got {type(data).__name__}")
    bad = [key for key in data if not isinstance(key, str)]
    if bad:
        raise TypeError(f"keys must be strings, got {bad!r}")
    return data


def validate_hook(hook: AuxDataHook) -> None:
    """Probe ``hook`` with empty inputs and reject reserved keys.

    Hooks whose key set depends on the topic or payload are only partially
    covered by this probe; :func:`call_hook` re-checks every event.
    """

    try:
        data = _check_shape(hook.aux_data("", ""))
    except TypeError as exc:
        raise ConfigurationError(f"auxiliary data hook {hook!r} returned unusable data: {exc}") from exc
    except Exception as exc:
        raise ConfigurationError(f"auxiliary data hook {hook!r} failed during validation: {exc}") from exc

    collisions = reserved_keys(data)
    if collisions:
        raise ConfigurationError(
            f"auxiliary data hook {hook!r} returns reserved key(s) {collisions}; "
            "keys shaped like 'capture_<n>' hold wildcard captures"
        )


def call_hook(hook: AuxDataHook, topic: str, payload: str) -> Mapping[str, Any]:
    """Run ``hook`` for a live event, wrapping any failure in :class:`HookFailure`."""

    try:
        return _check_shape(hook.aux_data(topic, payload))
    except Exception as exc:
        raise HookFailure(f"auxiliary data hook {hook!r} failed: {exc}") from exc


__all__ = [
    "AuxDataHook",
    "FunctionHook",
    "as_hook",
    "call_hook",
    "reserved_keys",
    "validate_hook",
]
