"""Bridges broadcaster channels to HTTP responses"""

from typing import AsyncIterator

from fastapi import Request

from app.realtime.broadcaster import Broadcaster, Channel


def get_broadcaster(request: Request) -> Broadcaster:
    """The application's broadcaster, created at startup"""
    return request.app.state.broadcaster


async def stream_channel(broadcaster: Broadcaster, channel: Channel) -> AsyncIterator[str]:
    """Yield frames until the channel closes; the client going away unsubscribes it"""
    try:
        while True:
            frame = await channel.receive()
            if frame is None:
                break
            yield frame
    finally:
        broadcaster.unsubscribe(channel)
