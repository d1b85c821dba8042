"""Compile MQTT subscription patterns into capture matchers.

A pattern is split on ``/``. Literal segments must match verbatim, while
the single-level wildcards ``+`` and ``*`` capture exactly one topic segment
(which may be empty). Captures are returned in left-to-right order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .errors import ConfigurationError

DELIMITER = "/"
WILDCARD_MARKERS = frozenset({"+", "*"})
MULTI_LEVEL_WILDCARD = "#"

_CAPTURE_TOKEN = "([^/]*)"


@dataclass(frozen=True, slots=True)
class TopicPattern:
    """Immutable compiled form of a subscription pattern."""

    source: str
    segments: Tuple[str, ...]
    wildcard_count: int
    regex: re.Pattern[str] = field(repr=False, compare=False)

    @classmethod
    def compile(cls, source: str) -> "TopicPattern":
        """Compile ``source`` or raise :class:`ConfigurationError`."""

        if not source:
            raise ConfigurationError("topic pattern must not be empty")
        if "\x00" in source:
            raise ConfigurationError(f"topic pattern {source!r} contains a NUL character")

        segments = tuple(source.split(DELIMITER))
        parts: list[str] = []
        wildcards = 0
        for index, segment in enumerate(segments):
            if segment in WILDCARD_MARKERS:
                parts.append(_CAPTURE_TOKEN)
                wildcards += 1
                continue
            if MULTI_LEVEL_WILDCARD in segment:
                raise ConfigurationError(
                    f"topic pattern {source!r}: multi-level wildcard '#' is not supported"
                )
            if any(marker in segment for marker in WILDCARD_MARKERS):
                raise ConfigurationError(
                    f"topic pattern {source!r}: segment {index + 1} ({segment!r}) mixes a wildcard with other characters"
                )
            parts.append(re.escape(segment))

        regex = re.compile(DELIMITER.join(parts))
        return cls(source=source, segments=segments, wildcard_count=wildcards, regex=regex)

    def match(self, topic: str) -> Optional[Tuple[str, ...]]:
        """Return the captured wildcard values for ``topic`` or ``None``."""

        found = self.regex.fullmatch(topic)
        if found is None:
            return None
        return found.groups()

    def matches(self, topic: str) -> bool:
        return self.regex.fullmatch(topic) is not None


__all__ = ["DELIMITER", "TopicPattern", "WILDCARD_MARKERS"]
