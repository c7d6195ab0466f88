"""Retry orchestrator - runs one logical request through the backoff loop"""

import json
import logging
from typing import Any, Callable, Optional, Type

from pydantic import BaseModel, ValidationError
from tenacity import RetryCallState

from rebound.domain.config.request import RequestConfig
from rebound.domain.errors import (
    INTERNAL_STATUS_REQUEST_ERROR,
    DecodeError,
    ReboundError,
    RetriesExhaustedError,
)
from rebound.domain.models.attempt_result import AttemptResult
from rebound.domain.models.outcome import Outcome
from rebound.infrastructure.cancellation import CancellationToken
from rebound.infrastructure.events.base import EventSink, RetryEvent
from rebound.infrastructure.events.logging_sink import LoggingEventSink
from rebound.infrastructure.http_client import TransportInvoker
from rebound.infrastructure.retry import backoff_seconds, create_retrying

logger = logging.getLogger(__name__)


class RetryOrchestrator:
    """Calls the transport under the backoff policy and decodes the final response.

    Attempts are strictly sequential. A status below 500 resolves the call at
    once; 5xx answers and transport failures are retried until
    ``max_attempts`` is reached.
    """

    def __init__(
        self,
        invoker: Optional[TransportInvoker] = None,
        sink: Optional[EventSink] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """Initialize orchestrator

        Args:
            invoker: Transport used for each attempt
            sink: Receiver of retry/error/done events (logs them if None)
            sleep: Sleep function for backoff waits (defaults to the
                cancellation token's interruptible sleep)
        """
        self.invoker = invoker or TransportInvoker()
        self.sink = sink or LoggingEventSink()
        self._sleep = sleep

    def execute(
        self,
        config: RequestConfig,
        payload: Any = None,
        *,
        cancel: Optional[CancellationToken] = None,
        response_model: Optional[Type[BaseModel]] = None,
    ) -> Outcome:
        """Execute a request with retries

        Args:
            config: Request configuration
            payload: JSON-serializable request body
            cancel: Cancellation token observed by sleeps and network calls
            response_model: Optional pydantic model to decode the body into

        Returns:
            Outcome with the HTTP status and decoded value, or the internal
            sentinel status and the error
        """
        token = cancel or CancellationToken()
        logger.debug(f"Executing {config.method} {config.url} (max_attempts={config.retry.max_attempts})")
        retry_config = config.retry
        retries = 0
        attempts = 0

        def _after_attempt(retry_state: RetryCallState) -> None:
            nonlocal retries
            retries += 1
            result: AttemptResult = retry_state.outcome.result()
            attempt = retry_state.attempt_number
            self.sink.record(
                RetryEvent(
                    name="retry",
                    level=logging.WARNING,
                    message="retrying request",
                    url=config.url,
                    status=result.status,
                    error=str(result.error) if result.error else None,
                    attempt=retries,
                    wait=backoff_seconds(retry_config, attempt - 1),
                    next_wait=backoff_seconds(retry_config, attempt),
                )
            )

        retrying = create_retrying(
            retry_config,
            after=_after_attempt,
            sleep=self._sleep if self._sleep is not None else token.sleep,
        )

        def _attempt() -> AttemptResult:
            nonlocal attempts
            attempts += 1
            return self.invoker.invoke(config, payload, cancel=token)

        result: AttemptResult = retrying(_attempt)

        if result.error is not None:
            return self._fail(config, result.error, attempts, retries)

        if result.is_server_error:
            error = RetriesExhaustedError(
                f"retries exhausted after {attempts} attempts, last status {result.status}",
                url=config.url,
                last_status=result.status,
                attempts=attempts,
            )
            return self._fail(config, error, attempts, retries)

        try:
            value = decode_body(result.body, response_model)
        except DecodeError as e:
            e.url = config.url
            e.http_status = result.status
            self.sink.record(
                RetryEvent(
                    name="error",
                    level=logging.ERROR,
                    message="failed to decode response",
                    url=config.url,
                    status=result.status,
                    error=str(e),
                    attempt=attempts,
                    retries=retries,
                )
            )
            return Outcome(
                status=INTERNAL_STATUS_REQUEST_ERROR,
                error=e,
                attempts=attempts,
                retries=retries,
            )

        self.sink.record(
            RetryEvent(
                name="done",
                level=logging.DEBUG,
                message="request done",
                url=config.url,
                status=result.status,
                attempt=attempts,
                retries=retries,
            )
        )
        return Outcome(status=result.status, value=value, attempts=attempts, retries=retries)

    def _fail(self, config: RequestConfig, error: ReboundError, attempts: int, retries: int) -> Outcome:
        self.sink.record(
            RetryEvent(
                name="error",
                level=logging.ERROR,
                message="error calling api",
                url=config.url,
                status=getattr(error, "last_status", error.status),
                error=str(error),
                attempt=attempts,
                retries=retries,
            )
        )
        return Outcome(
            status=INTERNAL_STATUS_REQUEST_ERROR,
            error=error,
            attempts=attempts,
            retries=retries,
        )


def decode_body(body: Optional[bytes], response_model: Optional[Type[BaseModel]] = None) -> Any:
    """Decode a JSON response body

    Args:
        body: Raw response body
        response_model: Optional pydantic model to validate against

    Returns:
        Decoded value (None for an empty body)

    Raises:
        DecodeError: If the body is not valid JSON or does not fit the model
    """
    if not body or not body.strip():
        return None
    try:
        if response_model is not None:
            return response_model.model_validate_json(body)
        return json.loads(body)
    except (ValueError, ValidationError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise DecodeError(f"failed to decode response: {e}") from e
