"""Unit tests for the asyncio-mqtt subscriber adapter."""

import pytest

from mqtt_osc.adapters.mqtt_asyncio import AsyncioMQTTSubscriber, payload_bytes


class Collector:
    def __init__(self) -> None:
        self.events: list[tuple[str, bytes]] = []

    async def __call__(self, topic: str, payload: bytes) -> None:
        self.events.append((topic, payload))


@pytest.mark.parametrize(
    "payload,expected",
    [
        (b"raw", b"raw"),
        (bytearray(b"ba"), b"ba"),
        ("on", b"on"),
        (None, b""),
        (42, None),
    ],
)
def test_payload_bytes(payload, expected):
    assert payload_bytes(payload) == expected


@pytest.mark.asyncio
async def test_subscribe_forwards_to_client(mock_mqtt_client, logger):
    subscriber = AsyncioMQTTSubscriber(mock_mqtt_client, logger=logger)

    await subscriber.subscribe("light/+/on", Collector(), qos=1)

    mock_mqtt_client.subscribe.assert_awaited_once_with("light/+/on", qos=1)
    assert subscriber.patterns == ("light/+/on",)
    assert "mqtt.subscribed" in logger.events("info")


@pytest.mark.asyncio
async def test_pump_routes_by_subscription(mock_mqtt_client, logger, make_message, message_stream):
    subscriber = AsyncioMQTTSubscriber(mock_mqtt_client, logger=logger)
    lights, doors = Collector(), Collector()
    await subscriber.subscribe("light/+/on", lights)
    await subscriber.subscribe("door/+", doors)

    await subscriber.pump(
        message_stream(
            [
                make_message("light/kitchen/on", b"1"),
                make_message("door/front", "open"),
                make_message("light/kitchen/off", b"0"),
            ]
        )
    )

    assert lights.events == [("light/kitchen/on", b"1")]
    assert doors.events == [("door/front", b"open")]
    assert logger.events("warning") == ["mqtt.message.unrouted"]


@pytest.mark.asyncio
async def test_overlapping_subscriptions_each_receive(mock_mqtt_client, logger):
    subscriber = AsyncioMQTTSubscriber(mock_mqtt_client, logger=logger)
    first, second = Collector(), Collector()
    await subscriber.subscribe("a/+", first)
    await subscriber.subscribe("a/x", second)

    assert await subscriber.deliver("a/x", b"") == 2
    assert first.events == second.events == [("a/x", b"")]


@pytest.mark.asyncio
async def test_unsupported_payload_is_skipped(mock_mqtt_client, logger, make_message, message_stream):
    subscriber = AsyncioMQTTSubscriber(mock_mqtt_client, logger=logger)
    collector = Collector()
    await subscriber.subscribe("a/+", collector)

    await subscriber.pump(message_stream([make_message("a/x", 3.5)]))

    assert collector.events == []
    assert "mqtt.payload.unsupported" in logger.events("warning")


@pytest.mark.asyncio
async def test_callback_exception_is_isolated(mock_mqtt_client, logger):
    subscriber = AsyncioMQTTSubscriber(mock_mqtt_client, logger=logger)
    collector = Collector()

    async def broken(topic, payload):
        raise RuntimeError("boom")

    await subscriber.subscribe("a/+", broken)
    await subscriber.subscribe("a/+", collector)

    await subscriber.deliver("a/x", b"p")

    assert collector.events == [("a/x", b"p")]
    assert "mqtt.callback.error" in logger.events("error")
