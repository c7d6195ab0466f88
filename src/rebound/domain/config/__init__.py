"""Configuration models with Pydantic validation."""

from rebound.domain.config.app import AppConfig
from rebound.domain.config.log import LoggingConfig
from rebound.domain.config.request import RequestConfig
from rebound.domain.config.retry import RetryConfig

__all__ = [
    "AppConfig",
    "LoggingConfig",
    "RequestConfig",
    "RetryConfig",
]
