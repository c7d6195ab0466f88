"""Structured event model and sink interface"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class RetryEvent:
    """One observable step of a retried request"""

    name: str  # "retry", "error" or "done"
    level: int
    url: str
    message: str
    status: Optional[int] = None
    error: Optional[str] = None
    attempt: Optional[int] = None
    wait: Optional[float] = None  # Seconds slept before this attempt
    next_wait: Optional[float] = None  # Seconds to sleep before the next attempt
    retries: Optional[int] = None
    timestamp: str = field(default_factory=_now)

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)

    def fields(self) -> Dict[str, Any]:
        """Event fields without the message, skipping unset values"""
        data = asdict(self)
        data.pop("message")
        data.pop("level")
        return {k: v for k, v in data.items() if v is not None}


class EventSink(ABC):
    """Receives structured events from the retry loop"""

    @abstractmethod
    def record(self, event: RetryEvent) -> None:
        """Record an event

        Args:
            event: Event to record
        """
        pass
