"""Shared fixtures"""

from __future__ import annotations

import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable, List, Tuple, Union
from unittest.mock import Mock

import pytest

from rebound.domain.models.attempt_result import AttemptResult
from rebound.infrastructure.http_client import TransportInvoker

# (method, path, headers, body) -> (status, response body, delay seconds)
Responder = Callable[[str, str, dict, bytes], Tuple[int, Union[str, bytes], float]]


def _serve(servers: List[ThreadingHTTPServer], handler) -> str:
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    servers.append(server)
    return f"http://127.0.0.1:{server.server_address[1]}"


@pytest.fixture
def http_server():
    """Start local HTTP servers driven by a responder function; returns their base URL"""
    servers: List[ThreadingHTTPServer] = []

    def _start(respond: Responder) -> str:
        class Handler(BaseHTTPRequestHandler):
            def _handle(self):
                length = int(self.headers.get("Content-Length") or 0)
                body = self.rfile.read(length) if length else b""
                status, payload, delay = respond(self.command, self.path, dict(self.headers), body)
                if delay:
                    time.sleep(delay)
                data = payload.encode("utf-8") if isinstance(payload, str) else payload
                try:
                    self.send_response(status)
                    self.send_header("Content-Type", "application/json")
                    self.send_header("Content-Length", str(len(data)))
                    self.end_headers()
                    self.wfile.write(data)
                except (BrokenPipeError, ConnectionResetError):
                    pass

            do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = _handle

            def log_message(self, *args):
                pass

        return _serve(servers, Handler)

    yield _start

    for server in servers:
        server.shutdown()
        server.server_close()


@pytest.fixture
def trickle_server():
    """Start a server that sends headers at once, then the body one byte at a time"""
    servers: List[ThreadingHTTPServer] = []

    def _start(body: bytes, interval: float) -> str:
        class Handler(BaseHTTPRequestHandler):
            def do_GET(self):
                try:
                    self.send_response(200)
                    self.send_header("Content-Type", "application/json")
                    self.send_header("Content-Length", str(len(body)))
                    self.end_headers()
                    self.wfile.flush()
                    for i in range(len(body)):
                        time.sleep(interval)
                        self.wfile.write(body[i : i + 1])
                        self.wfile.flush()
                except (BrokenPipeError, ConnectionResetError):
                    pass

            def log_message(self, *args):
                pass

        return _serve(servers, Handler)

    yield _start

    for server in servers:
        server.shutdown()
        server.server_close()


@pytest.fixture
def fake_invoker():
    """Transport double; set ``invoke.side_effect`` / ``return_value`` per test"""
    invoker = Mock(spec=TransportInvoker)
    invoker.invoke.return_value = AttemptResult(status=200, body=b"{}")
    return invoker


@pytest.fixture
def sleeps():
    """Sleep recorder that never blocks"""

    class _Recorder(list):
        def __call__(self, seconds):
            self.append(float(seconds))

    return _Recorder()
