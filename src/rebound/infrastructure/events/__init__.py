"""Structured event sinks"""

from rebound.infrastructure.events.base import EventSink, RetryEvent
from rebound.infrastructure.events.logging_sink import JSONFormatter, LoggingEventSink
from rebound.infrastructure.events.memory import MemoryEventSink

__all__ = ["EventSink", "RetryEvent", "LoggingEventSink", "MemoryEventSink", "JSONFormatter"]
