"""Tests for the diagnostic console logger."""
import io

import httpx

from checkhttp.core.models import Failure, Success, Verdict
from checkhttp.reporters.console import Log


def test_silent_by_default():
    stream = io.StringIO()
    log = Log(stream=stream)

    log.info("hidden")
    log.attempt(1, Success("HTTP OK - fine", 10, 0.1))
    log.dump_request(httpx.Request("GET", "http://example.com/"))

    assert stream.getvalue() == ""


def test_attempt_lines_carry_the_number_and_message():
    stream = io.StringIO()
    log = Log(verbose=1, stream=stream)

    log.attempt(1, Success("HTTP OK - fine", 10, 0.1))
    log.attempt(2, Failure("HTTP CRITICAL - broken", Verdict.CRITICAL))

    lines = stream.getvalue().splitlines()
    assert "[SUCCESS]" in lines[0] and lines[0].endswith("request[1]: HTTP OK - fine")
    assert "[FAIL]" in lines[1] and lines[1].endswith("request[2]: HTTP CRITICAL - broken")


def test_debug_needs_two_levels():
    stream = io.StringIO()

    Log(verbose=1, stream=stream).debug("dial")
    assert stream.getvalue() == ""

    Log(verbose=2, stream=stream).debug("dial")
    assert "[DEBUG]" in stream.getvalue() and "dial" in stream.getvalue()


def test_request_dump_shows_request_line_and_headers():
    stream = io.StringIO()
    request = httpx.Request("POST", "http://example.com/api?x=1", headers={"User-Agent": "probe"})

    Log(verbose=1, stream=stream).dump_request(request)

    out = stream.getvalue()
    assert "POST /api?x=1 HTTP/1.1" in out
    assert "Host: example.com" in out
    assert "User-Agent: probe" in out
