"""Cancellation and deadline propagation for a single logical call."""

from __future__ import annotations

import threading
import time
from typing import Optional


class CancellationToken:
    """Deadline plus explicit cancel flag shared by the backoff sleep and the transport.

    A token with no deadline only expires when ``cancel()`` is called.
    """

    def __init__(self, deadline: Optional[float] = None, *, clock=time.monotonic):
        """Initialize token

        Args:
            deadline: Absolute deadline on ``clock`` (None for no deadline)
            clock: Monotonic clock used to evaluate the deadline
        """
        self._deadline = deadline
        self._clock = clock
        self._event = threading.Event()

    @classmethod
    def with_timeout(cls, seconds: float, *, clock=time.monotonic) -> "CancellationToken":
        """Create a token that expires ``seconds`` from now"""
        return cls(clock() + seconds, clock=clock)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """True once cancelled explicitly or past the deadline"""
        return self._event.is_set() or self.remaining() == 0.0

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, None when there is no deadline"""
        if self._event.is_set():
            return 0.0
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def reason(self) -> str:
        return "context canceled" if self._event.is_set() else "context deadline exceeded"

    def sleep(self, seconds: float) -> None:
        """Sleep up to ``seconds``, waking early on cancellation or at the deadline

        Waits beyond ``threading.TIMEOUT_MAX`` (an infinite backoff included)
        last until the token is cancelled.
        """
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        if seconds <= 0:
            return
        self._event.wait(seconds if seconds < threading.TIMEOUT_MAX else None)
