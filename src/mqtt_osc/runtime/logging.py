"""Runtime logging utilities and protocol definitions."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any, Dict, Protocol

import orjson

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Logger(Protocol):
    """Minimal logger protocol injected into the relay components."""

    def log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None: ...


_RESERVED_RECORD_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
}


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logs; ``extra`` fields become top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_ATTRS or key.startswith("_"):
                continue
            payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        if record.stack_info:
            payload["stack"] = record.stack_info

        def _default(obj: Any) -> Any:
            if isinstance(obj, (bytes, bytearray)):
                return bytes(obj).decode("utf-8", errors="replace")
            return repr(obj)

        return orjson.dumps(payload, default=_default).decode()


def configure_logging(level: str | int = "INFO", *, name: str = "mqtt-osc", json_format: bool = True) -> logging.Logger:
    """Install one stream handler on the root logger and return the named logger."""

    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    return logging.getLogger(name)


__all__ = ["Logger", "JsonFormatter", "TRACE", "configure_logging"]
