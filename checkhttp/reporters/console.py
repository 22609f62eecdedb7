import sys
from datetime import datetime

import httpx
from colorama import Fore, Style, just_fix_windows_console

from checkhttp.checkers.base import header_block, status_line
from checkhttp.core.models import Failure, Success

just_fix_windows_console()


class Log:
    """Diagnostic output on stderr; stdout stays reserved for the summary.

    verbose 0 prints nothing, 1 adds attempt lines and request/response
    dumps, 2 adds transport details.
    """

    def __init__(self, verbose: int = 0, stream=None):
        self.verbose = verbose
        self.stream = stream

    def _time(self):
        return datetime.now().strftime("[%H:%M:%S]")

    def _fmt(self, level: str, color: str):
        return f"{self._time()} {color}[{level}]{Style.RESET_ALL}"

    def _emit(self, text: str):
        print(text, file=self.stream or sys.stderr)

    def info(self, msg: str):
        if self.verbose >= 1:
            self._emit(f"{self._fmt('INFO', Fore.CYAN)} {msg}")

    def warn(self, msg: str):
        if self.verbose >= 1:
            self._emit(f"{self._fmt('WARNING', Fore.YELLOW)} {msg}")

    def ok(self, msg: str):
        if self.verbose >= 1:
            self._emit(f"{self._fmt('SUCCESS', Fore.GREEN)} {msg}")

    def fail(self, msg: str):
        if self.verbose >= 1:
            self._emit(f"{self._fmt('FAIL', Fore.RED)} {msg}")

    def debug(self, msg: str):
        if self.verbose >= 2:
            self._emit(f"{self._fmt('DEBUG', Fore.MAGENTA)} {msg}")

    def attempt(self, number: int, result: Success | Failure):
        line = f"request[{number}]: {result.message}"
        if result.ok:
            self.ok(line)
        else:
            self.fail(line)

    # ── raw dumps ───────────────────────────────────────────────

    @staticmethod
    def _headers(headers: httpx.Headers) -> str:
        return header_block(headers).decode("latin-1")

    def dump_request(self, request: httpx.Request):
        if self.verbose < 1:
            return
        target = request.url.raw_path.decode("ascii", errors="replace")
        head = f"{request.method} {target} HTTP/1.1\r\n{self._headers(request.headers)}"
        self.info(f"request:\n{head}")

    def dump_response(self, response: httpx.Response):
        if self.verbose < 1:
            return
        self.info(f"response:\n{status_line(response)}\r\n{self._headers(response.headers)}")

    def dump_body(self, body: bytes):
        self.debug(f"retained body ({len(body)} bytes):\n"
                   f"{Fore.MAGENTA}{body.decode('utf-8', errors='replace')}{Style.RESET_ALL}")
