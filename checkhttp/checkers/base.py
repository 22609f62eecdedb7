"""Abstract base for response expectations."""

import json
from abc import ABC, abstractmethod

import httpx

from checkhttp.core.models import Failure


def status_line(response: httpx.Response) -> str:
    return f"{response.http_version} {response.status_code} {response.reason_phrase}"


def quote(data: bytes) -> str:
    """Double-quoted, escaped rendering of expected content for messages."""
    return json.dumps(data.decode("utf-8", errors="replace"), ensure_ascii=False)


class BaseChecker(ABC):
    """Every checker inspects one finished response.

    ``check`` returns a short note describing what matched, or a
    :class:`Failure` carrying the verdict for this attempt.
    """

    name: str = "Unnamed Checker"

    def __init__(self, port: int):
        self.port = port

    @abstractmethod
    def check(self, response: httpx.Response, body: bytes) -> str | Failure:
        ...


def header_block(headers: httpx.Headers) -> bytes:
    """Headers as sent on the wire, one ``Name: value\\r\\n`` line each."""
    return b"".join(k + b": " + v + b"\r\n" for k, v in headers.raw)
