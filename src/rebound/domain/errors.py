"""Error kinds reported by a request.

Every failure that is not a real HTTP status carries the reserved
``INTERNAL_STATUS_REQUEST_ERROR`` code so callers can tell them apart from
server answers.
"""

from __future__ import annotations

from typing import Optional

INTERNAL_STATUS_REQUEST_ERROR = 999


class ReboundError(Exception):
    """Base class for request failures."""

    kind = "error"

    def __init__(self, message: str, *, url: Optional[str] = None):
        super().__init__(message)
        self.url = url
        self.status = INTERNAL_STATUS_REQUEST_ERROR


class EncodingError(ReboundError):
    """Request payload could not be serialized to JSON."""

    kind = "encoding"


class RequestConstructionError(ReboundError):
    """Method, URL or headers could not form a valid request."""

    kind = "request_construction"


class TransportError(ReboundError):
    """Network failure, including timeouts and cancellation."""

    kind = "transport"

    def __init__(self, message: str, *, url: Optional[str] = None, timed_out: bool = False):
        super().__init__(message, url=url)
        self.timed_out = timed_out


class ResponseReadError(ReboundError):
    """Response body could not be read."""

    kind = "response_read"


class DecodeError(ReboundError):
    """HTTP exchange succeeded but the body does not match the expected shape."""

    kind = "decode"

    def __init__(self, message: str, *, url: Optional[str] = None, http_status: Optional[int] = None):
        super().__init__(message, url=url)
        self.http_status = http_status


class RetriesExhaustedError(ReboundError):
    """Every attempt answered with a server error."""

    kind = "retries_exhausted"

    def __init__(self, message: str, *, url: Optional[str] = None, last_status: int, attempts: int):
        super().__init__(message, url=url)
        self.last_status = last_status
        self.attempts = attempts
