"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from rebound.domain.config.log import LoggingConfig
from rebound.domain.config.request import RequestConfig


class AppConfig(BaseModel):
    """Main application configuration.

    This is the root configuration model that aggregates all configuration sections.
    Validation is performed at load time to fail fast on configuration errors.

    Attributes:
        request: Request and retry configuration
        logging: Log output configuration
        deadline: Overall deadline in seconds for one call, across all attempts
    """

    request: RequestConfig = Field(default_factory=RequestConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    deadline: float = Field(60.0, gt=0.0)

    model_config = ConfigDict(
        validate_assignment=True,  # Validate on attribute assignment
        extra="forbid",  # Reject unknown fields
        json_schema_extra={
            "example": {
                "request": {
                    "method": "GET",
                    "url": "http://localhost:8080",
                    "headers": {"Content-Type": "application/json"},
                    "timeout": 10.0,
                    "retry": {
                        "max_attempts": 3,
                        "interval_seconds": 1.0,
                        "backoff_rate": 2.0,
                    },
                },
                "logging": {
                    "level": "INFO",
                    "format": "json",
                },
                "deadline": 60.0,
            }
        },
    )
