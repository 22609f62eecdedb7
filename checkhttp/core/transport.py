"""Connection policy for the probe.

The client built here always opens its TCP connection to the configured
address and port, whatever host the request URL (and therefore the Host
header) names. On top of that it pins the address family, relaxes
certificate checks, applies SNI and TLS version limits, routes through a
proxy and sets per-phase timeouts. One client serves every attempt of a run.
"""

import ipaddress
import socket
import ssl
import urllib.request

import httpcore
import httpx

from checkhttp.core.errors import ConfigError
from checkhttp.core.models import Config
from checkhttp.core.request import split_host_port

KEEPALIVE_EXPIRY = 30.0
EXPECT_CONTINUE_GRACE = 1.0

_TLS_VERSIONS = {
    "1.0": ssl.TLSVersion.TLSv1,
    "1.1": ssl.TLSVersion.TLSv1_1,
    "1.2": ssl.TLSVersion.TLSv1_2,
    "1.3": ssl.TLSVersion.TLSv1_3,
}
# binding to the wildcard address of a family restricts the dial to it
_LOCAL_ADDRESS = {4: "0.0.0.0", 6: "::"}
_SOCKET_OPTIONS = [(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)]


class PinnedStream(httpcore.AsyncNetworkStream):
    """Delegating stream that controls the server name sent on TLS upgrade."""

    def __init__(self, stream: httpcore.AsyncNetworkStream, server_name: str | None):
        self._stream = stream
        self.server_name = server_name

    async def read(self, max_bytes: int, timeout: float | None = None) -> bytes:
        return await self._stream.read(max_bytes, timeout=timeout)

    async def write(self, buffer: bytes, timeout: float | None = None) -> None:
        await self._stream.write(buffer, timeout=timeout)

    async def aclose(self) -> None:
        await self._stream.aclose()

    async def start_tls(self, ssl_context, server_hostname=None, timeout=None):
        stream = await self._stream.start_tls(
            ssl_context, server_hostname=self.server_name, timeout=timeout)
        return PinnedStream(stream, self.server_name)

    def get_extra_info(self, info: str):
        return self._stream.get_extra_info(info)


class PinnedBackend(httpcore.AnyIOBackend):
    """Network backend that dials one fixed address for every origin."""

    def __init__(self, address: str, port: int, server_name: str | None = None, log=None):
        self.address = address
        self.port = port
        self.server_name = server_name
        self.log = log

    async def connect_tcp(self, host, port, timeout=None, local_address=None, socket_options=None):
        if self.log:
            self.log.debug(f"dial {host}:{port} -> {self.address}:{self.port}"
                           f" (bind {local_address or 'any'})")
        stream = await super().connect_tcp(
            self.address, self.port, timeout=timeout,
            local_address=local_address, socket_options=socket_options)
        return PinnedStream(stream, self.server_name)


def make_ssl_context(config: Config) -> ssl.SSLContext:
    """Unverified TLS context, optionally pinned to one protocol version.

    1.0 and 1.1 pin both ends of the range; 1.2 and 1.3 only cap it.
    """
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    if config.tls_max:
        version = _TLS_VERSIONS.get(config.tls_max)
        if version is None:
            raise ConfigError(f"unsupported TLS version {config.tls_max!r}")
        if config.tls_max in ("1.0", "1.1"):
            context.minimum_version = version
            # legacy protocols are refused at the default security level
            context.set_ciphers("DEFAULT:@SECLEVEL=0")
        context.maximum_version = version
    return context


def _parse_proxy(value: str) -> httpx.URL:
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as exc:
        raise ConfigError(f"Error while parsing Proxy URL. Error was: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigError(f"Error while parsing Proxy URL. Error was: unsupported proxy {value!r}")
    return url


def _is_loopback(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ipaddress.ip_address(host).is_loopback
    except ValueError:
        return False


def select_proxy(config: Config) -> httpx.URL | None:
    """Explicit --proxy wins; otherwise honour http(s)_proxy and no_proxy."""
    if config.proxy:
        return _parse_proxy(config.proxy)
    host, _ = split_host_port(config.hostname)
    if _is_loopback(host) or urllib.request.proxy_bypass_environment(host):
        return None
    value = urllib.request.getproxies_environment().get(config.scheme)
    if not value:
        return None
    if "://" not in value:
        value = f"http://{value}"
    return _parse_proxy(value)


class ProbeTransport(httpx.AsyncHTTPTransport):
    """HTTP/1.1 transport whose connection pool dials ``config.address``."""

    def __init__(self, config: Config, log=None):
        ssl_context = make_ssl_context(config)
        proxy = select_proxy(config)
        local_address = _LOCAL_ADDRESS.get(config.address_family)
        super().__init__(
            verify=ssl_context, local_address=local_address,
            limits=httpx.Limits(keepalive_expiry=KEEPALIVE_EXPIRY))

        server_name = split_host_port(config.hostname)[0] if config.sni else None
        backend = PinnedBackend(config.address, config.port, server_name=server_name, log=log)
        options = dict(
            ssl_context=ssl_context,
            keepalive_expiry=KEEPALIVE_EXPIRY,
            http1=True,
            http2=False,
            local_address=local_address,
            network_backend=backend,
            socket_options=_SOCKET_OPTIONS,
        )
        if proxy is None:
            self._pool = httpcore.AsyncConnectionPool(**options)
        else:
            if log:
                log.debug(f"proxy {proxy.scheme}://{proxy.host}:{proxy.port or ''}")
            auth = (proxy.username, proxy.password) if proxy.username else None
            self._pool = httpcore.AsyncHTTPProxy(
                proxy_url=httpcore.URL(
                    scheme=proxy.raw_scheme, host=proxy.raw_host,
                    port=proxy.port, target=proxy.raw_path),
                proxy_auth=auth,
                **options,
            )


def build_timeout(config: Config) -> httpx.Timeout:
    return httpx.Timeout(config.timeout, write=config.timeout + EXPECT_CONTINUE_GRACE)


def build_client(config: Config, transport: httpx.AsyncBaseTransport | None = None,
                 log=None) -> httpx.AsyncClient:
    """Client for a whole run. Redirects are never followed.

    Raises ConfigError for bad proxy or TLS settings.
    """
    if transport is None:
        transport = ProbeTransport(config, log=log)
    return httpx.AsyncClient(
        transport=transport,
        timeout=build_timeout(config),
        follow_redirects=False,
        trust_env=False,
    )
