"""In-memory event sink"""

import threading
from typing import List

from rebound.infrastructure.events.base import EventSink, RetryEvent


class MemoryEventSink(EventSink):
    """Collects events in a list, e.g. for tests or post-call inspection"""

    def __init__(self):
        self._lock = threading.Lock()
        self._events: List[RetryEvent] = []

    def record(self, event: RetryEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[RetryEvent]:
        with self._lock:
            return list(self._events)

    def named(self, name: str) -> List[RetryEvent]:
        """Get events with the given name"""
        return [e for e in self.events if e.name == name]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
