"""Body content expectation."""

import httpx

from checkhttp.checkers.base import BaseChecker, quote
from checkhttp.core.models import Failure, Verdict


class ContentChecker(BaseChecker):
    """Expected bytes must appear somewhere in the retained body.

    Only the retained prefix is searched, so content past max-buffer-size
    never matches.
    """

    name = "Response body"

    def __init__(self, port: int, expected: bytes):
        super().__init__(port)
        self.expected = expected

    def check(self, response: httpx.Response, body: bytes) -> str | Failure:
        if self.expected not in body:
            return Failure(
                f"HTTP CRITICAL - HTTP response body Not matched {quote(self.expected)} "
                f"from host on port {self.port}",
                Verdict.CRITICAL,
            )
        return f"Response body matched {quote(self.expected)}"
