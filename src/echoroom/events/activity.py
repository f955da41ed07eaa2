"""Recent lifecycle activity, collected from the event bus."""

from __future__ import annotations

import logging
from collections import deque
from datetime import UTC, datetime
from typing import Any

from echoroom.events.bus import EventBus
from echoroom.events.types import EventType

logger = logging.getLogger(__name__)


class ActivityFeed:
    """Bounded history of lifecycle events; the oldest entries drop off first.

    The server and the CLI demo attach one to their bus. The server exposes it
    as ``er://activity`` and in the review prompt.
    """

    def __init__(self, history_length: int = 100) -> None:
        self._entries: deque[dict[str, Any]] = deque(maxlen=history_length)

    def attach(self, bus: EventBus) -> ActivityFeed:
        bus.on_all(self.record)
        return self

    async def record(self, event_type: EventType, data: dict[str, Any]) -> None:
        self._entries.append({
            "event": event_type.value,
            "at": datetime.now(UTC).isoformat(),
            "data": dict(data),
        })
        logger.debug("Activity %s: %s", event_type.value, data)

    def recent(self, limit: int = 20, event_type: EventType | None = None) -> list[dict[str, Any]]:
        """Most recent entries first, optionally for a single event type."""
        entries = [
            e for e in reversed(self._entries)
            if event_type is None or e["event"] == event_type.value
        ]
        return entries[:max(limit, 0)]

    def __len__(self) -> int:
        return len(self._entries)
