"""Real-time order event delivery"""

from app.realtime.broadcaster import Broadcaster, Channel, ChannelClosed
from app.realtime.client import ConnectionState, OrderUpdatesClient, backoff_delay_ms
from app.realtime.stream import get_broadcaster, stream_channel

__all__ = [
    "Broadcaster",
    "Channel",
    "ChannelClosed",
    "ConnectionState",
    "OrderUpdatesClient",
    "backoff_delay_ms",
    "get_broadcaster",
    "stream_channel",
]
