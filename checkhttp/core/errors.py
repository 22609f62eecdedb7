"""Exceptions raised before or outside a classified attempt."""


class ConfigError(ValueError):
    """Invalid or inconsistent configuration; always reported as UNKNOWN."""


class BufferFullError(Exception):
    """Response body exceeded max-buffer-size while no-discard is set."""
