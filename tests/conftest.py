"""Shared pytest fixtures for mqtt-osc tests."""

from __future__ import annotations

from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from mqtt_osc.config.loader import ENV_OVERRIDES


class CaptureLogger:
    """Logger double recording event names and ``extra`` payloads per level."""

    def __init__(self) -> None:
        self.records: list[dict[str, Any]] = []

    def _record(self, level: str, msg: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        self.records.append({"level": level, "msg": msg, "args": args, "extra": kwargs.get("extra", {})})

    def log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        self._record(f"level{level}", msg, args, kwargs)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._record("debug", msg, args, kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._record("info", msg, args, kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._record("warning", msg, args, kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._record("error", msg, args, kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._record("critical", msg, args, kwargs)

    def events(self, level: Optional[str] = None) -> list[str]:
        return [r["msg"] for r in self.records if level is None or r["level"] == level]


class RecordingSender:
    """Sender double collecting every (address, payload) pair."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, Optional[bytes]]] = []

    async def send(self, address: str, payload: Optional[bytes] = None) -> None:
        self.sent.append((address, payload))


class RecordingSubscriber:
    """Subscriber double keeping the registered callbacks by pattern."""

    def __init__(self) -> None:
        self.subscriptions: list[tuple[str, Any, int]] = []

    async def subscribe(self, pattern: str, callback: Any, qos: int = 0) -> None:
        self.subscriptions.append((pattern, callback, qos))

    def callback_for(self, pattern: str) -> Any:
        for subscribed, callback, _qos in self.subscriptions:
            if subscribed == pattern:
                return callback
        raise KeyError(pattern)


@pytest.fixture
def logger() -> CaptureLogger:
    return CaptureLogger()


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def subscriber() -> RecordingSubscriber:
    return RecordingSubscriber()


@pytest.fixture
def mock_mqtt_client() -> MagicMock:
    """Mock asyncio_mqtt.Client for unit testing without a broker."""
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    client.subscribe = AsyncMock()
    client.publish = AsyncMock()
    return client


def _make_message(topic: str, payload: Any) -> MagicMock:
    message = MagicMock()
    message.topic = topic
    message.payload = payload
    return message


@pytest.fixture
def make_message():
    """Factory for asyncio-mqtt message doubles."""
    return _make_message


class MessageStream:
    """Async iterable standing in for ``client.messages()``."""

    def __init__(self, messages: list[Any]) -> None:
        self._messages = messages

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for message in self._messages:
            yield message


@pytest.fixture
def message_stream():
    """Factory for async message streams."""
    return MessageStream


@pytest.fixture(autouse=True)
def reset_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear environment overrides so tests only see their own settings."""
    for var in ENV_OVERRIDES:
        monkeypatch.delenv(var, raising=False)


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test (no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires MQTT broker)"
    )
