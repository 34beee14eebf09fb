"""In-process fan-out of order events to connected dashboards"""

import asyncio
import time
import uuid
from typing import Optional, Set
import structlog

from app.config import settings
from app.realtime.sse import CONNECTED, HEARTBEAT, format_event

logger = structlog.get_logger()


class ChannelClosed(Exception):
    """Write attempted on a channel whose connection has gone away"""


class Channel:
    """
    One subscriber's outbound stream.
    Frames are buffered in a bounded queue; a full buffer drops the frame
    for this subscriber only.
    """

    def __init__(self, buffer_size: int):
        self.id = uuid.uuid4().hex[:12]
        self.closed = False
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=buffer_size)

    def send(self, frame: str) -> bool:
        """Queue a frame. Returns False if it was dropped, raises if closed."""
        if self.closed:
            raise ChannelClosed(self.id)
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            return False
        return True

    async def receive(self) -> Optional[str]:
        """Next frame, or None once the channel is closed"""
        if self.closed and self._queue.empty():
            return None
        return await self._queue.get()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        # Wake a pending receive() with the end-of-stream marker
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(None)


class Broadcaster:
    """
    Registry of open subscriber channels.

    Delivery is at-most-once with no replay: a channel only sees frames
    published while it is registered.
    """

    def __init__(self, buffer_size: Optional[int] = None):
        self.buffer_size = buffer_size or settings.realtime_channel_buffer
        self._channels: Set[Channel] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._channels)

    def subscribe(self) -> Channel:
        channel = Channel(self.buffer_size)
        self._channels.add(channel)
        channel.send(format_event(CONNECTED, {}))

        logger.info("Subscriber connected", channel_id=channel.id, subscribers=len(self._channels))
        return channel

    def unsubscribe(self, channel: Channel) -> None:
        self._channels.discard(channel)
        channel.close()

        logger.info("Subscriber disconnected", channel_id=channel.id, subscribers=len(self._channels))

    def publish(self, event: str, payload: dict) -> int:
        """Write the event to every channel. Returns the number of channels that accepted it."""
        frame = format_event(event, payload)
        delivered = 0

        # Iterate a snapshot so dead channels can be dropped mid-pass
        for channel in list(self._channels):
            try:
                if channel.send(frame):
                    delivered += 1
                else:
                    logger.warning("Subscriber buffer full, event dropped", channel_id=channel.id, event_name=event)
            except ChannelClosed:
                self._channels.discard(channel)
                logger.info("Removed closed subscriber", channel_id=channel.id)

        logger.debug("Event published", event_name=event, delivered=delivered)
        return delivered

    def heartbeat(self) -> int:
        return self.publish(HEARTBEAT, {"timestamp": int(time.time() * 1000)})

    async def run_heartbeat(self, interval: Optional[float] = None) -> None:
        """Publish heartbeats forever; cancel the task to stop"""
        interval = interval or settings.realtime_heartbeat_seconds
        while True:
            await asyncio.sleep(interval)
            self.heartbeat()

    def close(self) -> None:
        for channel in list(self._channels):
            self.unsubscribe(channel)
