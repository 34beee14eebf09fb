"""Subscription client for the order event stream, with reconnect backoff"""

import asyncio
import enum
from typing import Awaitable, Callable, Optional
import httpx
import structlog

from app.config import settings
from app.realtime.sse import (
    CONNECTED,
    HEARTBEAT,
    ORDER_ASSIGNED,
    ORDER_CREATED,
    ORDER_STATUS_CHANGED,
    iter_events,
)

logger = structlog.get_logger()

EventHandler = Callable[[dict], None]
Callback = Callable[[], None]


class ConnectionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


def backoff_delay_ms(attempt: int, base_ms: int = 1000, max_ms: int = 30000) -> int:
    """Exponential reconnect delay for the given zero-based attempt, capped"""
    return min(base_ms * 2 ** attempt, max_ms)


class OrderUpdatesClient:
    """
    Keeps one subscription to ``/api/orders/sse`` open for a dashboard session.

    Every order event invalidates the cached order view (``on_invalidate``)
    before the event-specific handler runs; payloads are hints, the view is
    expected to refetch. When the stream drops the client reconnects with
    exponential backoff until ``max_attempts`` consecutive failures, after
    which ``gave_up`` is set and the caller relies on polling at
    ``poll_interval``.
    """

    def __init__(
        self,
        url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        on_order_created: Optional[EventHandler] = None,
        on_order_status_changed: Optional[EventHandler] = None,
        on_order_assigned: Optional[EventHandler] = None,
        on_connected: Optional[Callback] = None,
        on_disconnected: Optional[Callback] = None,
        on_invalidate: Optional[Callback] = None,
        max_attempts: Optional[int] = None,
        base_delay_ms: Optional[int] = None,
        max_delay_ms: Optional[int] = None,
        poll_interval_connected: Optional[float] = None,
        poll_interval_disconnected: Optional[float] = None,
    ):
        self.url = url
        self.on_order_created = on_order_created
        self.on_order_status_changed = on_order_status_changed
        self.on_order_assigned = on_order_assigned
        self.on_connected = on_connected
        self.on_disconnected = on_disconnected
        self.on_invalidate = on_invalidate

        self.max_attempts = max_attempts if max_attempts is not None else settings.client_max_reconnect_attempts
        self.base_delay_ms = base_delay_ms or settings.client_reconnect_base_ms
        self.max_delay_ms = max_delay_ms or settings.client_reconnect_max_ms
        self.poll_interval_connected = poll_interval_connected or settings.client_poll_interval_connected_seconds
        self.poll_interval_disconnected = (
            poll_interval_disconnected or settings.client_poll_interval_disconnected_seconds
        )

        self.state = ConnectionState.DISCONNECTED
        self.reconnect_attempts = 0
        self.gave_up = False

        self._http = http_client
        self._owns_http = http_client is None
        self._task: Optional[asyncio.Task] = None
        self._reconnect_handle: Optional[asyncio.TimerHandle] = None
        self._closed = False

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    @property
    def poll_interval(self) -> float:
        """Refetch interval for the order view: relaxed while the stream is healthy"""
        if self.is_connected:
            return self.poll_interval_connected
        return self.poll_interval_disconnected

    def connect(self) -> None:
        """Open the stream unless torn down or already open/opening"""
        if self._closed:
            return
        if self._task is not None and not self._task.done():
            return

        self._reconnect_handle = None
        self.state = ConnectionState.CONNECTING

        if self._http is None:
            self._http = httpx.AsyncClient(timeout=httpx.Timeout(10.0, read=None))

        self._task = asyncio.get_running_loop().create_task(self._listen())

    async def close(self) -> None:
        """Tear down: no reconnect or callback fires after this returns"""
        self._closed = True

        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

        self.state = ConnectionState.DISCONNECTED

        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None

    async def run_refetch_loop(self, refetch: Callable[[], Awaitable[None]]) -> None:
        """Periodically refetch the order view at the current poll interval until closed"""
        while not self._closed:
            await refetch()
            await asyncio.sleep(self.poll_interval)

    async def _listen(self) -> None:
        try:
            async with self._http.stream(
                "GET",
                self.url,
                headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"},
            ) as response:
                if response.status_code != 200:
                    logger.warning("Order stream rejected", url=self.url, status_code=response.status_code)
                else:
                    async for event, data in iter_events(response.aiter_lines()):
                        if self._closed:
                            return
                        self._dispatch(event, data)
                    logger.info("Order stream ended by server", url=self.url)
        except httpx.HTTPError as e:
            logger.warning("Order stream transport error", url=self.url, error=str(e))

        if not self._closed:
            self._handle_disconnect()

    def _dispatch(self, event: str, data: dict) -> None:
        if event == CONNECTED:
            self.reconnect_attempts = 0
            self.gave_up = False
            self.state = ConnectionState.CONNECTED
            logger.info("Order stream connected", url=self.url)
            self._notify(self.on_connected)
            return

        if event == HEARTBEAT:
            return

        handlers = {
            ORDER_CREATED: self.on_order_created,
            ORDER_STATUS_CHANGED: self.on_order_status_changed,
            ORDER_ASSIGNED: self.on_order_assigned,
        }
        if event not in handlers:
            logger.debug("Ignoring unknown order event", event_name=event)
            return

        self._notify(self.on_invalidate)
        self._notify(handlers[event], data)

    def _handle_disconnect(self) -> None:
        self.state = ConnectionState.DISCONNECTED
        self._notify(self.on_disconnected)

        if self.reconnect_attempts >= self.max_attempts:
            self.gave_up = True
            logger.warning(
                "Order stream reconnect attempts exhausted, falling back to polling",
                attempts=self.reconnect_attempts,
                poll_interval=self.poll_interval,
            )
            return

        delay = backoff_delay_ms(self.reconnect_attempts, self.base_delay_ms, self.max_delay_ms)
        self.reconnect_attempts += 1
        logger.info("Scheduling order stream reconnect", attempt=self.reconnect_attempts, delay_ms=delay)

        self._reconnect_handle = asyncio.get_running_loop().call_later(delay / 1000, self.connect)

    def _notify(self, callback, *args) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception("Order update callback failed")
