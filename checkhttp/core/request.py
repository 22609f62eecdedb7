"""Build the probe request from a resolved configuration."""

import httpx

from checkhttp.core.errors import ConfigError
from checkhttp.core.models import Config


def target_url(config: Config) -> str:
    return f"{config.scheme}://{config.hostname}{config.uri}"


def split_authorization(value: str) -> tuple[str, str]:
    """Split ``user:password`` on the first colon."""
    user, sep, password = value.partition(":")
    if not sep:
        raise ConfigError("invalid authorization args")
    return user, password


def build_request(config: Config) -> httpx.Request:
    """Return the request for one attempt: no body, User-Agent always set.

    Raises ConfigError for a malformed authorization string and
    httpx.InvalidURL when hostname and uri do not form a URL.
    """
    request = httpx.Request(
        config.method,
        target_url(config),
        headers={"User-Agent": config.user_agent},
    )
    if config.authorization:
        user, password = split_authorization(config.authorization)
        # BasicAuth sets the Authorization header before yielding
        request = next(httpx.BasicAuth(user, password).auth_flow(request))
    return request


def split_host_port(value: str) -> tuple[str, int | None]:
    """Split ``host[:port]``; IPv6 literals need brackets to carry a port.

    Raises ConfigError when a port is present but not numeric.
    """
    host, port = value, ""
    if value.startswith("["):
        end = value.find("]")
        if end == -1:
            raise ConfigError(f"missing ']' in address {value!r}")
        host, rest = value[1:end], value[end + 1:]
        if rest:
            if not rest.startswith(":"):
                raise ConfigError(f"unexpected {rest!r} after address {value!r}")
            port = rest[1:]
    elif value.count(":") == 1:
        host, port = value.split(":")
    if not port:
        return host, None
    if not port.isdigit():
        raise ConfigError(f"invalid port {port!r} in {value!r}")
    return host, int(port)
