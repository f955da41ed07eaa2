"""EchoRoom storage layer."""

from echoroom.storage.base import RecordStore
from echoroom.storage.memory_store import InMemoryStore

__all__ = ["InMemoryStore", "RecordStore"]
