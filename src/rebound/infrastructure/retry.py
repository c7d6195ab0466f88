"""Backoff policy built on tenacity.

The retry decision is made on the attempt *result* rather than on exceptions:
the transport never raises, it reports a status (the internal sentinel for
failures) and the loop retries server errors and transport failures.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable, Optional

from tenacity import RetryCallState, Retrying, after_nothing, retry_if_result, stop_after_attempt

from rebound.domain.config.retry import RetryConfig
from rebound.domain.errors import TransportError
from rebound.domain.models.attempt_result import AttemptResult

logger = logging.getLogger(__name__)

SERVER_ERROR_THRESHOLD = 500


def should_retry_status(status: int) -> bool:
    """Check if an attempt with this status should be retried."""
    # Anything below 500 is resolved: success or a client error the caller handles
    return status >= SERVER_ERROR_THRESHOLD


def backoff_seconds(retry_config: RetryConfig, attempt_index: int) -> float:
    """Wait before the attempt with 0-based ``attempt_index``.

    Exponential growth is seeded at attempt 1, so with interval 1 and rate 2
    the waits are 0, 2, 4, 8, ...  A wait too large for a float is infinite.
    """
    if attempt_index <= 0 or retry_config.interval_seconds == 0 or retry_config.backoff_rate == 0:
        return 0.0
    try:
        return retry_config.interval_seconds * (retry_config.backoff_rate ** attempt_index)
    except OverflowError:
        return math.inf


def should_retry_result(result: AttemptResult) -> bool:
    """Check if an attempt should be retried.

    Only server errors and transport failures are transient; encoding,
    request construction and body read failures are returned at once.
    """
    if result.error is not None:
        return isinstance(result.error, TransportError)
    return should_retry_status(result.status)


def create_retrying(
    retry_config: RetryConfig,
    *,
    after: Optional[Callable[[RetryCallState], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Retrying:
    """Create a tenacity controller for the attempt loop.

    Args:
        retry_config: Retry configuration
        after: Called once for every attempt that is going to be retried
            (including the last one, before the stop check)
        sleep: Sleep function used between attempts

    Returns:
        Retrying instance; calling it returns the last AttemptResult, also
        when attempts are exhausted
    """

    def _wait(retry_state: RetryCallState) -> float:
        # attempt_number is 1 after the first call, so the next wait is rate^1
        return backoff_seconds(retry_config, retry_state.attempt_number)

    def _last_result(retry_state: RetryCallState) -> AttemptResult:
        logger.debug(f"Giving up after {retry_state.attempt_number} attempts")
        return retry_state.outcome.result()

    return Retrying(
        stop=stop_after_attempt(retry_config.max_attempts),
        wait=_wait,
        retry=retry_if_result(should_retry_result),
        after=after if after is not None else after_nothing,
        sleep=sleep,
        retry_error_callback=_last_result,
    )
