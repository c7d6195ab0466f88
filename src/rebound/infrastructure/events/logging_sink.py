"""Event sink backed by the logging module"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from rebound.infrastructure.events.base import EventSink, RetryEvent

EVENT_FIELDS = ("event", "url", "status", "error", "attempt", "wait", "next_wait", "retries", "timestamp")


class LoggingEventSink(EventSink):
    """Forwards events to a logger, event fields passed as ``extra``"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("rebound.events")

    def record(self, event: RetryEvent) -> None:
        extra = event.fields()
        extra["event"] = extra.pop("name")
        self.logger.log(event.level, event.message, extra=extra)


class JSONFormatter(logging.Formatter):
    """Format log records as JSON, surfacing event fields when present."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EVENT_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)
