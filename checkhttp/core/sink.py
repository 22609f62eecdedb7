"""Capped response sink: bounded buffering with exact byte accounting."""

from checkhttp.core.errors import BufferFullError


class CappedSink:
    """Collect a response body while holding at most ``cap`` bytes.

    ``size`` always counts every byte written, even the ones dropped once
    the cap is reached. With ``no_discard`` set, crossing the cap raises
    :class:`BufferFullError` instead of truncating.
    """

    def __init__(self, cap: int, no_discard: bool = False):
        self.cap = cap
        self.no_discard = no_discard
        self.size = 0
        self._buffer = bytearray()

    def write(self, chunk: bytes) -> int:
        self.size += len(chunk)
        if self.size > self.cap and self.no_discard:
            raise BufferFullError("could not write body buffer. buffer is full")
        self._keep(chunk)
        return len(chunk)

    def record(self, chunk: bytes) -> None:
        """Count and keep metadata bytes; never raises, truncates at the cap."""
        self.size += len(chunk)
        self._keep(chunk)

    def _keep(self, chunk: bytes) -> None:
        room = self.cap - len(self._buffer)
        if room > 0:
            self._buffer += chunk[:room]

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def __len__(self):
        return len(self._buffer)
