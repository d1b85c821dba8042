"""Adapter implementations bridging domain ports to infrastructure."""

from .mqtt_asyncio import AsyncioMQTTSubscriber
from .osc import OSCUDPSender

__all__ = ["AsyncioMQTTSubscriber", "OSCUDPSender"]
