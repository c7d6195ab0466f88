"""Rest client - fluent, immutable front end to the retry orchestrator"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Type

from pydantic import BaseModel

from rebound.application.retry_orchestrator import RetryOrchestrator
from rebound.domain.config.request import RequestConfig
from rebound.domain.models.outcome import Outcome
from rebound.infrastructure.cancellation import CancellationToken
from rebound.infrastructure.events.base import EventSink
from rebound.infrastructure.http_client import TransportInvoker


class Requester(ABC):
    """Abstract client that can make HTTP requests"""

    @abstractmethod
    def do(
        self,
        payload: Any = None,
        *,
        cancel: Optional[CancellationToken] = None,
        response_model: Optional[Type[BaseModel]] = None,
    ) -> Outcome:
        """Make a request

        Args:
            payload: JSON-serializable request body
            cancel: Optional cancellation token
            response_model: Optional pydantic model to decode the body into

        Returns:
            Request outcome
        """
        pass


class RestClient(Requester):
    """Client that makes HTTP requests with retry and backoff.

    Every ``with_*`` call returns a new client; the receiver is left unchanged,
    so a configured client can be shared between threads.

    Example:
        client = (
            RestClient()
            .with_method("GET")
            .with_url("http://localhost:8080")
            .with_max_attempts(3)
            .with_interval_seconds(1)
            .with_backoff_rate(2)
        )
        outcome = client.do()
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        *,
        invoker: Optional[TransportInvoker] = None,
        sink: Optional[EventSink] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.config = config or RequestConfig()
        self._invoker = invoker
        self._sink = sink
        self._sleep = sleep
        self._orchestrator = RetryOrchestrator(invoker=invoker, sink=sink, sleep=sleep)

    def _with_config(self, config: RequestConfig) -> "RestClient":
        return RestClient(config, invoker=self._invoker, sink=self._sink, sleep=self._sleep)

    def with_method(self, method: str) -> "RestClient":
        return self._with_config(self.config.with_method(method))

    def with_url(self, url: str) -> "RestClient":
        return self._with_config(self.config.with_url(url))

    def with_header(self, name: str, value: str) -> "RestClient":
        """Add or replace a single header"""
        headers = dict(self.config.headers)
        headers[name] = value
        return self._with_config(self.config.with_headers(headers))

    def with_headers(self, headers: Dict[str, str]) -> "RestClient":
        """Replace all headers"""
        return self._with_config(self.config.with_headers(headers))

    def with_timeout(self, timeout: float) -> "RestClient":
        return self._with_config(self.config.with_timeout(timeout))

    def with_max_attempts(self, max_attempts: int) -> "RestClient":
        return self._with_config(self.config.with_max_attempts(max_attempts))

    def with_interval_seconds(self, interval_seconds: float) -> "RestClient":
        return self._with_config(self.config.with_interval_seconds(interval_seconds))

    def with_backoff_rate(self, backoff_rate: float) -> "RestClient":
        return self._with_config(self.config.with_backoff_rate(backoff_rate))

    def do(
        self,
        payload: Any = None,
        *,
        cancel: Optional[CancellationToken] = None,
        response_model: Optional[Type[BaseModel]] = None,
    ) -> Outcome:
        return self._orchestrator.execute(
            self.config, payload, cancel=cancel, response_model=response_model
        )
