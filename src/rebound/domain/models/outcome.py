"""Outcome model - terminal result of a retried request"""

from dataclasses import dataclass
from typing import Any, Optional

from rebound.domain.errors import ReboundError


@dataclass(frozen=True)
class Outcome:
    """Result of executing a request with retries"""

    status: int  # HTTP status, or the internal sentinel on failure
    value: Any = None  # Decoded response body
    error: Optional[ReboundError] = None
    attempts: int = 0  # Transport calls made
    retries: int = 0  # Attempts that answered >= 500 or failed in transport

    @property
    def is_successful(self) -> bool:
        """Check if the request resolved without error"""
        return self.error is None

    def raise_for_error(self) -> "Outcome":
        """Raise the stored error, if any

        Returns:
            The outcome itself when it is successful
        """
        if self.error is not None:
            raise self.error
        return self
