"""In-process async event bus for idea lifecycle events."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable, Coroutine
from typing import Any

from echoroom.events.types import EventType

logger = logging.getLogger(__name__)

Listener = Callable[[EventType, dict[str, Any]], Coroutine[Any, Any, None]]


class EventBus:
    """Fans engine events out to in-process listeners.

    Listeners run in registration order, type-specific ones before global ones.
    A failing listener is logged and never fails the engine that emitted.
    """

    def __init__(self) -> None:
        self._listeners: dict[EventType, list[Listener]] = defaultdict(list)
        self._global_listeners: list[Listener] = []

    def on(self, event_type: EventType, listener: Listener) -> None:
        """Subscribe to one event type."""
        self._listeners[event_type].append(listener)

    def on_all(self, listener: Listener) -> None:
        """Subscribe to every lifecycle event."""
        self._global_listeners.append(listener)

    async def emit(self, event_type: EventType, data: dict[str, Any] | None = None) -> None:
        data = data or {}
        listeners = self._listeners.get(event_type, []) + self._global_listeners
        if not listeners:
            return

        logger.debug("Dispatching %s to %d listener(s)", event_type.value, len(listeners))
        for listener in listeners:
            try:
                await listener(event_type, data)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Listener failed for %s", event_type.value)
