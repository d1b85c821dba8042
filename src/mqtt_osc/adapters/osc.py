"""OSC output over UDP backed by python-osc."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pythonosc.udp_client import SimpleUDPClient

from mqtt_osc.domain.ports import Sender
from mqtt_osc.runtime.logging import Logger

PayloadType = Literal["string", "blob", "auto"]

_BOOLEANS = {"true": True, "false": False}


def osc_arguments(payload: Optional[bytes], payload_type: PayloadType = "string") -> list[Any]:
    """Convert a relayed MQTT payload into OSC message arguments.

    ``string`` sends UTF-8 text (a blob when the bytes are not valid UTF-8),
    ``blob`` always sends the raw bytes and ``auto`` tries int, float and
    ``true``/``false`` before falling back to text.
    """

    if payload is None:
        return []
    if payload_type == "blob":
        return [payload]
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError:
        return [payload]
    if payload_type == "string":
        return [text]

    stripped = text.strip()
    for convert in (int, float):
        try:
            return [convert(stripped)]
        except ValueError:
            pass
    lowered = stripped.lower()
    if lowered in _BOOLEANS:
        return [_BOOLEANS[lowered]]
    return [text]


class OSCUDPSender(Sender):
    """Send rendered OSC addresses to one UDP endpoint."""

    def __init__(
        self,
        host: str,
        port: int,
        *,
        logger: Logger,
        payload_type: PayloadType = "string",
        client: Optional[SimpleUDPClient] = None,
    ) -> None:
        self._host = host
        self._port = port
        self._logger = logger
        self._payload_type = payload_type
        self._client = client or SimpleUDPClient(host, port)

    async def send(self, address: str, payload: Optional[bytes] = None) -> None:
        args = osc_arguments(payload, self._payload_type)
        self._client.send_message(address, args)
        self._logger.debug(
            "osc.sent",
            extra={"osc_address": address, "osc_target": f"{self._host}:{self._port}", "argc": len(args)},
        )


__all__ = ["OSCUDPSender", "PayloadType", "osc_arguments"]
