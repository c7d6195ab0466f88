"""AttemptResult model - outcome of a single HTTP call"""

from dataclasses import dataclass
from typing import Optional

from rebound.domain.errors import INTERNAL_STATUS_REQUEST_ERROR, ReboundError


@dataclass(frozen=True)
class AttemptResult:
    """Result of one transport call"""

    status: int
    body: Optional[bytes] = None  # Only set on a completed HTTP exchange
    error: Optional[ReboundError] = None

    @classmethod
    def failed(cls, error: ReboundError) -> "AttemptResult":
        """Build a result for a failure that produced no HTTP status"""
        return cls(status=INTERNAL_STATUS_REQUEST_ERROR, body=None, error=error)

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500
