"""HTTP transport: executes exactly one call (requests).

Failures are reported, not raised: every error path yields an AttemptResult
with the internal sentinel status and no body.
"""

from __future__ import annotations

import json
import logging
import re
import threading
import time
from typing import Any, Dict, Optional, Tuple

import requests

from rebound.domain.config.request import RequestConfig
from rebound.domain.errors import (
    EncodingError,
    ReboundError,
    RequestConstructionError,
    ResponseReadError,
    TransportError,
)
from rebound.domain.models.attempt_result import AttemptResult
from rebound.infrastructure.cancellation import CancellationToken

logger = logging.getLogger(__name__)

# RFC 7230 token
HTTP_TOKEN = re.compile(r"[!#$%&'*+.^_`|~0-9A-Za-z-]+")

# How often a pending body read checks the deadline and the token
BODY_POLL_SECONDS = 0.05


def encode_payload(payload: Any) -> Optional[bytes]:
    """Serialize the request payload as JSON.

    Args:
        payload: JSON-serializable value, or None for no body

    Returns:
        Encoded body, or None when there is nothing to send

    Raises:
        EncodingError: If the payload cannot be serialized
    """
    if payload is None:
        return None
    try:
        return json.dumps(payload, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"error encoding request: {e}") from e


class TransportInvoker:
    """Executes one HTTP request per ``invoke`` call."""

    def __init__(self, session: Optional[requests.Session] = None):
        """Initialize invoker

        Args:
            session: Session used to send requests (a new one per call if None)
        """
        self._session = session

    def invoke(
        self,
        config: RequestConfig,
        payload: Any = None,
        *,
        cancel: Optional[CancellationToken] = None,
    ) -> AttemptResult:
        """Send one request and read the whole response body.

        The per-attempt timeout (capped by the token's deadline) bounds the
        whole exchange, body read included.

        Args:
            config: Request configuration
            payload: JSON-serializable request body
            cancel: Optional token whose deadline caps the network timeout

        Returns:
            AttemptResult with the HTTP status and body, or the sentinel
            status and the error
        """
        try:
            body = encode_payload(payload)
            prepared = self._prepare(config, body)
            status, content = self._send(config, prepared, cancel)
        except ReboundError as e:
            logger.error(f"Request to {config.url} failed: {e}")
            return AttemptResult.failed(e)
        return AttemptResult(status=status, body=content)

    def _prepare(self, config: RequestConfig, body: Optional[bytes]) -> requests.PreparedRequest:
        if not HTTP_TOKEN.fullmatch(config.method):
            raise RequestConstructionError(
                f"error creating request: invalid method {config.method!r}", url=config.url
            )
        headers: Dict[str, str] = dict(config.headers)
        if body is not None and not any(k.lower() == "content-type" for k in headers):
            headers["Content-Type"] = "application/json"
        try:
            return requests.Request(
                method=config.method,
                url=config.url,
                headers=headers,
                data=body,
            ).prepare()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise RequestConstructionError(f"error creating request: {e}", url=config.url) from e

    def _send(
        self,
        config: RequestConfig,
        prepared: requests.PreparedRequest,
        cancel: Optional[CancellationToken],
    ) -> Tuple[int, bytes]:
        timeout = self._timeout(config, cancel)
        deadline = None if timeout is None else time.monotonic() + timeout
        session = self._session or requests.Session()
        try:
            try:
                response = session.send(prepared, timeout=timeout, stream=True)
            except requests.exceptions.Timeout as e:
                raise TransportError(
                    f"error making request: context deadline exceeded ({e})",
                    url=config.url,
                    timed_out=True,
                ) from e
            except requests.exceptions.RequestException as e:
                raise TransportError(f"error making request: {e}", url=config.url) from e
            except ValueError as e:
                # urllib3 rejects some malformed requests only when writing them
                raise RequestConstructionError(f"error creating request: {e}", url=config.url) from e

            content = self._read_body(config, response, deadline, cancel)
        finally:
            if self._session is None:
                session.close()

        logger.debug(f"HTTP {config.method} {config.url} -> {response.status_code}")
        return response.status_code, content

    def _read_body(
        self,
        config: RequestConfig,
        response: requests.Response,
        deadline: Optional[float],
        cancel: Optional[CancellationToken],
    ) -> bytes:
        """Read the whole body, giving up at the attempt deadline or on cancellation.

        requests only bounds each socket read, so a server trickling bytes
        would otherwise hold the attempt open indefinitely. The read runs on
        a daemon thread that also closes the response.
        """
        done = threading.Event()
        box: Dict[str, Any] = {}

        def _read() -> None:
            try:
                box["content"] = response.content
            except Exception as e:
                box["error"] = e
            finally:
                response.close()
                done.set()

        threading.Thread(target=_read, name="rebound-body-reader", daemon=True).start()

        while not done.wait(BODY_POLL_SECONDS):
            if cancel is not None and cancel.cancelled:
                reason = cancel.reason()
            elif deadline is not None and time.monotonic() >= deadline:
                reason = "context deadline exceeded"
            else:
                continue
            raise TransportError(f"error reading response: {reason}", url=config.url, timed_out=True)

        error = box.get("error")
        if isinstance(error, (requests.exceptions.RequestException, OSError)):
            raise ResponseReadError(f"error reading response: {error}", url=config.url) from error
        if error is not None:
            raise error
        return box["content"]

    def _timeout(self, config: RequestConfig, cancel: Optional[CancellationToken]) -> Optional[float]:
        timeout = config.effective_timeout
        if cancel is None:
            return timeout
        if cancel.cancelled:
            raise TransportError(
                f"error making request: {cancel.reason()}",
                url=config.url,
                timed_out=True,
            )
        remaining = cancel.remaining()
        if remaining is None:
            return timeout
        return remaining if timeout is None else min(timeout, remaining)
