"""Shared data models for the HTTP probe."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class Verdict(IntEnum):
    """Monitoring-plugin status; the value is the process exit code."""
    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


@dataclass(frozen=True)
class Config:
    """Resolved settings for one run.

    ``address``/``port`` is where the connection goes, ``hostname`` is what
    the Host header (and SNI, if enabled) says.
    """
    address: str
    hostname: str
    port: int
    ssl: bool = False
    method: str = "GET"
    uri: str = "/"
    timeout: float = 10.0
    max_buffer_size: int = 1_000_000
    no_discard: bool = False
    expect: str = ""
    expect_bytes: bytes = b""
    user_agent: str = "check_http"
    authorization: str = ""
    sni: bool = False
    tls_max: Optional[str] = None    # "1.0", "1.1", "1.2", "1.3"
    address_family: Optional[int] = None  # 4, 6 or None for either
    proxy: str = ""
    consecutive: int = 1
    interim: float = 1.0
    wait_for: bool = False
    wait_for_interval: float = 2.0
    wait_for_max: float = 0.0
    verbose: int = 0

    @property
    def scheme(self) -> str:
        return "https" if self.ssl else "http"

    @property
    def deadline(self) -> float:
        """Overall run budget in seconds."""
        if self.wait_for_max > 0:
            return self.wait_for_max
        return self.timeout + 3.0


@dataclass(frozen=True)
class Success:
    """One attempt that passed every expectation."""
    message: str
    size: int
    elapsed: float

    ok = True


@dataclass(frozen=True)
class Failure:
    """One attempt that did not pass, with its severity."""
    message: str
    verdict: Verdict

    ok = False


@dataclass(frozen=True)
class CheckResult:
    """The single verdict produced by a run."""
    verdict: Verdict
    message: str

    def __str__(self):
        return self.message
