"""Status line expectation: explicit token list or default ranges."""

import httpx

from checkhttp.checkers.base import BaseChecker, status_line
from checkhttp.core.models import Failure, Verdict


class StatusChecker(BaseChecker):

    name = "Status line"

    def __init__(self, port: int, expect: str = ""):
        super().__init__(port)
        self.expect = expect
        self.tokens = [t.strip() for t in expect.split(",") if t.strip()]

    def match(self, line: str) -> str | None:
        """First expected token found in the status line, if any."""
        for token in self.tokens:
            if token in line:
                return token
        return None

    def _invalid(self, level: Verdict, line: str) -> Failure:
        return Failure(
            f"HTTP {level.name} - Invalid HTTP response received from host on port {self.port}: {line}",
            level,
        )

    def check(self, response: httpx.Response, body: bytes) -> str | Failure:
        line = status_line(response)
        if self.tokens:
            if self.match(line) is None:
                return self._invalid(Verdict.CRITICAL, line)
            return f'Status line output "{line}" matched "{self.expect}"'

        code = response.status_code
        if 200 <= code < 400:
            return line
        if 400 <= code < 500:
            return self._invalid(Verdict.WARNING, line)
        return self._invalid(Verdict.CRITICAL, line)
