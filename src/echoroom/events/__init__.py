"""EchoRoom event system."""

from echoroom.events.activity import ActivityFeed
from echoroom.events.bus import EventBus
from echoroom.events.types import EventType

__all__ = ["ActivityFeed", "EventBus", "EventType"]
