"""Request configuration model."""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rebound.domain.config.retry import RetryConfig


class RequestConfig(BaseModel):
    """Configuration of a single logical HTTP call.

    Values are immutable; the ``with_*`` helpers return a new config so one
    instance can be shared between concurrent calls.

    Attributes:
        method: HTTP verb
        url: Target endpoint
        headers: Headers attached identically to every attempt
        timeout: Per-attempt network timeout in seconds (0 = no explicit cap)
        retry: Retry policy
    """

    method: str = "GET"
    url: str = ""
    headers: Dict[str, str] = Field(default_factory=dict)
    timeout: float = Field(0.0, ge=0.0)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def effective_timeout(self) -> Optional[float]:
        """Timeout to hand to the transport, None when uncapped"""
        return self.timeout if self.timeout > 0 else None

    def with_method(self, method: str) -> "RequestConfig":
        return self._replace(method=method)

    def with_url(self, url: str) -> "RequestConfig":
        return self._replace(url=url)

    def with_headers(self, headers: Dict[str, str]) -> "RequestConfig":
        return self._replace(headers=dict(headers))

    def with_timeout(self, timeout: float) -> "RequestConfig":
        return self._replace(timeout=timeout)

    def with_max_attempts(self, max_attempts: int) -> "RequestConfig":
        return self._replace_retry(max_attempts=max_attempts)

    def with_interval_seconds(self, interval_seconds: float) -> "RequestConfig":
        return self._replace_retry(interval_seconds=interval_seconds)

    def with_backoff_rate(self, backoff_rate: float) -> "RequestConfig":
        return self._replace_retry(backoff_rate=backoff_rate)

    def _replace_retry(self, **changes) -> "RequestConfig":
        retry = self.retry.model_dump()
        retry.update(changes)
        return self._replace(retry=retry)

    def _replace(self, **changes) -> "RequestConfig":
        # model_copy skips validation, rebuild so field constraints still apply
        data = self.model_dump()
        data.update(changes)
        return RequestConfig(**data)
