"""Shared fixtures for the probe test suite.

Provide configuration factories, MockTransport-driven evaluation helpers and
a throwaway local HTTP server for tests that need a real socket.
"""
import asyncio
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable, Generator

import httpx
import pytest

from checkhttp.core.deadline import Deadline
from checkhttp.core.engine import Engine
from checkhttp.core.models import CheckResult, Config, Failure, Success
from checkhttp.core.runner import Runner
from checkhttp.core.transport import build_client
from checkhttp.reporters.console import Log

PROXY_VARIABLES = ("http_proxy", "https_proxy", "no_proxy", "all_proxy")

# ==============================================================================
# CONFIGURATION FIXTURES
# ==============================================================================


@pytest.fixture
def config() -> Config:
    """Plain-HTTP configuration aimed at example.com:80 with fast retries."""
    return Config(address="example.com", hostname="example.com", port=80,
                  interim=0.0, wait_for_interval=0.0)


@pytest.fixture
def no_proxy_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove proxy environment variables so connections go direct."""
    for name in PROXY_VARIABLES:
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(name.upper(), raising=False)


# ==============================================================================
# MOCK TRANSPORT HELPERS
# ==============================================================================


def evaluate(config: Config, handler: Callable, logger: Log | None = None) -> Success | Failure:
    """Run one evaluator attempt against a MockTransport handler."""
    async def _attempt():
        async with build_client(config, transport=httpx.MockTransport(handler)) as client:
            return await Engine(config, client, logger).request()
    return asyncio.run(_attempt())


def orchestrate(config: Config, handler: Callable, deadline: float | None = None,
                logger: Log | None = None) -> tuple[CheckResult, int]:
    """Run the retry loop against a MockTransport handler.

    Returns:
        The final verdict and the number of attempts made.
    """
    async def _run():
        async with build_client(config, transport=httpx.MockTransport(handler)) as client:
            runner = Runner(config, client, logger)
            limit = Deadline(deadline) if deadline is not None else None
            return await runner.run(limit), runner.attempts
    return asyncio.run(_run())


def responses(*codes: int) -> Callable:
    """Handler replying with the given status codes in order, then the last one."""
    remaining = list(codes)

    def handler(request: httpx.Request) -> httpx.Response:
        code = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        return httpx.Response(code, content=b"body")
    return handler


# ==============================================================================
# LOCAL SERVER
# ==============================================================================


class RecordingHandler(BaseHTTPRequestHandler):
    """Answer every GET with a fixed page and remember what was asked."""

    def do_GET(self):
        self.server.seen.append({
            "host": self.headers.get("Host"),
            "path": self.path,
            "user_agent": self.headers.get("User-Agent"),
        })
        if self.path == "/moved":
            self.send_response(301)
            self.send_header("Location", "/elsewhere")
            self.send_header("Content-Length", "0")
            self.end_headers()
            return
        body = b"hello from the backend"
        self.send_response(200)
        self.send_header("Content-Type", "text/plain")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def local_server(no_proxy_env) -> Generator[ThreadingHTTPServer, None, None]:
    """Serve RecordingHandler on an ephemeral 127.0.0.1 port.

    Yields:
        ThreadingHTTPServer: running server; ``server.seen`` lists requests.
    """
    server = ThreadingHTTPServer(("127.0.0.1", 0), RecordingHandler)
    server.seen = []
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
        thread.join()


@pytest.fixture
def server_config(local_server: ThreadingHTTPServer) -> Config:
    """Dial the local server while naming a virtual host in the Host header."""
    return Config(address="127.0.0.1", hostname="virtual.example",
                  port=local_server.server_address[1], timeout=5.0, interim=0.0)


