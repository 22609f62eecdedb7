"""Single-request evaluator.

One attempt builds the request, sends it, streams the body into a fresh
:class:`CappedSink` and runs the checkers over the result. Every outcome,
including transport and read errors, comes back as a :class:`Success` or
:class:`Failure`; nothing is raised to the caller.
"""

import asyncio
import time

import httpx

from checkhttp.checkers.base import BaseChecker, header_block, status_line
from checkhttp.checkers.content import ContentChecker
from checkhttp.checkers.status import StatusChecker
from checkhttp.core.deadline import Deadline
from checkhttp.core.errors import BufferFullError, ConfigError
from checkhttp.core.models import Config, Failure, Success, Verdict
from checkhttp.core.request import build_request
from checkhttp.core.sink import CappedSink
from checkhttp.reporters.console import Log


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def format_ok(matched: list[str], size: int, elapsed: float) -> str:
    return (f"HTTP OK - {', '.join(matched)} - {size} bytes in {elapsed:.3f} second response time"
            f" | time={elapsed:f}s;;;0.000000 size={size}B;;;0")


class Engine:
    def __init__(self, config: Config, client: httpx.AsyncClient, logger: Log | None = None):
        self.config = config
        self.client = client
        self.logger = logger or Log(verbose=config.verbose)
        self.checkers: list[BaseChecker] = [StatusChecker(config.port, config.expect)]
        if config.expect_bytes:
            self.checkers.append(ContentChecker(config.port, config.expect_bytes))

    @staticmethod
    async def _drain(response: httpx.Response, sink: CappedSink) -> None:
        async for chunk in response.aiter_bytes():
            sink.write(chunk)

    def _request_error(self, request: httpx.Request, detail: str) -> Failure:
        return Failure(
            f'HTTP CRITICAL - Error in request: {request.method} "{request.url}": {detail}',
            Verdict.CRITICAL,
        )

    async def request(self, deadline: Deadline | None = None) -> Success | Failure:
        config = self.config
        try:
            req = build_request(config)
        except (ConfigError, httpx.InvalidURL, UnicodeEncodeError) as exc:
            return Failure(f"Error in building request: {_describe(exc)}", Verdict.UNKNOWN)
        self.logger.dump_request(req)

        if deadline is None:
            deadline = Deadline(config.deadline)
        # the attempt gets the configured timeout, never more than the run has left
        budget = Deadline(deadline.budget(config.timeout))

        start = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self.client.send(req, stream=True), timeout=budget.remaining())
        except asyncio.TimeoutError:
            return self._request_error(req, "timeout exceeded while awaiting headers")
        except httpx.HTTPError as exc:
            return self._request_error(req, _describe(exc))

        sink = CappedSink(config.max_buffer_size, no_discard=config.no_discard)
        try:
            self.logger.dump_response(response)
            await asyncio.wait_for(self._drain(response, sink), timeout=budget.remaining())
        except asyncio.TimeoutError:
            return Failure("HTTP CRITICAL - Error in read response: timeout exceeded while reading body",
                           Verdict.CRITICAL)
        except (httpx.HTTPError, BufferFullError) as exc:
            return Failure(f"HTTP CRITICAL - Error in read response: {_describe(exc)}",
                           Verdict.CRITICAL)
        finally:
            await response.aclose()
        elapsed = time.perf_counter() - start

        body = sink.getvalue()
        self.logger.dump_body(body)
        matched = []
        for checker in self.checkers:
            result = checker.check(response, body)
            if isinstance(result, Failure):
                return result
            matched.append(result)

        # reported size covers status line and headers as well as the body
        sink.record(f"{status_line(response)}\r\n\r\n".encode("latin-1", errors="replace"))
        sink.record(header_block(response.headers))
        return Success(format_ok(matched, sink.size, elapsed), sink.size, elapsed)
