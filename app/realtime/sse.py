"""Server-sent event framing"""

import json
from typing import AsyncIterable, AsyncIterator, Tuple

CONNECTED = "connected"
HEARTBEAT = "heartbeat"
ORDER_CREATED = "order_created"
ORDER_STATUS_CHANGED = "order_status_changed"
ORDER_ASSIGNED = "order_assigned"


def format_event(event: str, payload: dict) -> str:
    """Encode one frame: ``event:`` line, ``data:`` line, blank line"""
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


async def iter_events(lines: AsyncIterable[str]) -> AsyncIterator[Tuple[str, dict]]:
    """Decode ``(event, data)`` pairs from a stream of text lines"""
    event = "message"
    data_lines = []

    async for line in lines:
        line = line.rstrip("\r\n")

        if not line:
            if data_lines:
                raw = "\n".join(data_lines)
                try:
                    data = json.loads(raw)
                except ValueError:
                    data = {"raw": raw}
                yield event, data
            event = "message"
            data_lines = []
            continue

        if line.startswith(":"):
            continue

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "event":
            event = value
        elif field == "data":
            data_lines.append(value)
