"""OSC address templates and the reserved capture-key namespace.

Templates use ``str.format`` placeholders resolved against a mapping, e.g.
``/light/{capture_1}/turn-on``. Capture *i* of the topic pattern is exposed
as ``capture_<i>``; keys of that shape are reserved for captures.
"""

from __future__ import annotations

import re
import string
from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Sequence

from .errors import ConfigurationError, RenderFailure

CAPTURE_PREFIX = "capture_"

_RESERVED_KEY = re.compile(r"capture_([0-9]+)")
_FIELD_ROOT = re.compile(r"[^.\[]*")
_CONVERSIONS = {None, "r", "s", "a"}
_FORMATTER = string.Formatter()


def capture_key(index: int) -> str:
    """Reserved template key for the 1-indexed capture ``index``."""

    return f"{CAPTURE_PREFIX}{index}"


def is_reserved_key(key: str) -> bool:
    return _RESERVED_KEY.fullmatch(key) is not None


def capture_data(captures: Sequence[str]) -> dict[str, str]:
    return {capture_key(i): value for i, value in enumerate(captures, start=1)}


def _iter_fields(source: str, depth: int = 0) -> Iterable[tuple[str, Optional[str]]]:
    # Nested placeholders may only appear inside format specs, one level deep.
    for _literal, field_name, format_spec, conversion in _FORMATTER.parse(source):
        if field_name is None:
            continue
        yield field_name, conversion
        if format_spec and depth < 1:
            yield from _iter_fields(format_spec, depth + 1)


@dataclass(frozen=True, slots=True)
class AddressTemplate:
    """Compiled OSC address template."""

    source: str
    keys: FrozenSet[str]

    @classmethod
    def compile(cls, source: str, *, capture_count: Optional[int] = None) -> "AddressTemplate":
        """Parse ``source`` once and collect the data keys it references.

        When ``capture_count`` is given, references to captures beyond the
        pattern's wildcard count are rejected up front.
        """

        if not source:
            raise ConfigurationError("OSC address template must not be empty")
        try:
            fields = list(_iter_fields(source))
        except ValueError as exc:
            raise ConfigurationError(f"invalid OSC address template {source!r}: {exc}") from exc

        keys: set[str] = set()
        for field_name, conversion in fields:
            root = _FIELD_ROOT.match(field_name).group(0)  # type: ignore[union-attr]
            if not root or root.isdigit():
                raise ConfigurationError(
                    f"invalid OSC address template {source!r}: positional placeholders are not supported"
                )
            if conversion not in _CONVERSIONS:
                raise ConfigurationError(
                    f"invalid OSC address template {source!r}: unknown conversion '!{conversion}'"
                )
            reserved = _RESERVED_KEY.fullmatch(root)
            if reserved:
                index = int(reserved.group(1))
                # captures are only ever stored under the unpadded key
                if root != capture_key(index):
                    raise ConfigurationError(
                        f"invalid OSC address template {source!r}: write {root} as {capture_key(index)}"
                    )
                if capture_count is not None and (index < 1 or index > capture_count):
                    raise ConfigurationError(
                        f"OSC address template {source!r} references {root} "
                        f"but the topic pattern has {capture_count} wildcard(s)"
                    )
            keys.add(root)
        return cls(source=source, keys=frozenset(keys))

    def render(self, data: Mapping[str, Any]) -> str:
        """Render against ``data``; raises :class:`RenderFailure` on any error."""

        try:
            rendered = self.source.format_map(data)
        except KeyError as exc:
            raise RenderFailure(f"unresolved placeholder {exc.args[0]!r} in {self.source!r}") from exc
        except Exception as exc:  # values format themselves and may raise anything
            raise RenderFailure(f"failed to render {self.source!r}: {exc}") from exc
        if not rendered:
            raise RenderFailure(f"template {self.source!r} rendered an empty address")
        return rendered


__all__ = [
    "AddressTemplate",
    "CAPTURE_PREFIX",
    "capture_data",
    "capture_key",
    "is_reserved_key",
]
