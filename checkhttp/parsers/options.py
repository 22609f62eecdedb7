"""Command-line options and their resolution into a Config."""

import argparse
import base64

import humanfriendly

from checkhttp.core.errors import ConfigError
from checkhttp.core.models import Config
from checkhttp.core.request import split_authorization, split_host_port

TLS_VERSIONS = ("1.0", "1.1", "1.2", "1.3")


class OptionParser(argparse.ArgumentParser):
    """Raise ConfigError instead of exiting; exit code 2 would read as CRITICAL."""

    def error(self, message):
        raise ConfigError(message)


def duration(value: str) -> float:
    """Humanized timespan ("10s", "500ms", "2m") in seconds."""
    try:
        return humanfriendly.parse_timespan(value)
    except humanfriendly.InvalidTimespan as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> OptionParser:
    p = OptionParser(prog="check_http", add_help=False,
                     description="HTTP(S) health check for Nagios-compatible monitoring")
    p.add_argument("-h", "--help", action="store_true", help="Show this help message")
    p.add_argument("--timeout", type=duration, default="10s",
                   help="Timeout to wait for connection")
    p.add_argument("--max-buffer-size", default="1MB",
                   help="Max buffer size to read response body")
    p.add_argument("--no-discard", action="store_true",
                   help="raise error when the response body is larger then max-buffer-size")
    p.add_argument("--consecutive", type=int, default=1,
                   help="number of consecutive successful requests required")
    p.add_argument("--interim", type=duration, default="1s",
                   help="interval time after successful request for consecutive mode")
    p.add_argument("--wait-for", action="store_true",
                   help="retry until successful when enabled")
    p.add_argument("--wait-for-interval", type=duration, default="2s",
                   help="retry interval")
    p.add_argument("--wait-for-max", type=duration, default=0.0,
                   help="time to wait for success")
    p.add_argument("-H", "--hostname", default="", help="Host name using Host headers")
    p.add_argument("-I", "--IP-address", dest="ip_address", default="",
                   help="IP address or Host name")
    p.add_argument("-p", "--port", type=int, default=0, help="Port number")
    p.add_argument("-j", "--method", default="GET", help="Set HTTP Method")
    p.add_argument("-u", "--uri", default="/", help="URI to request")
    p.add_argument("-e", "--expect", default="",
                   help="Comma-delimited list of expected HTTP response status")
    p.add_argument("-s", "--string", default="", help="String to expect in the content")
    p.add_argument("--base64-string", default="",
                   help="Base64 Encoded string to expect the content")
    p.add_argument("-A", "--useragent", default="check_http", help="UserAgent to be sent")
    p.add_argument("-a", "--authorization", default="",
                   help="username:password on sites with basic authentication")
    p.add_argument("-S", "--ssl", action="store_true", help="use https")
    p.add_argument("--sni", action="store_true", help="enable SNI")
    p.add_argument("--tls-max", choices=TLS_VERSIONS, help="maximum supported TLS version")
    p.add_argument("-4", dest="tcp4", action="store_true", help="use tcp4 only")
    p.add_argument("-6", dest="tcp6", action="store_true", help="use tcp6 only")
    p.add_argument("-V", "--version", action="store_true", help="Show version")
    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="Show verbose output (-v, -vv)")
    p.add_argument("--proxy", default="", help="Proxy that should be used")
    return p


def resolve_target(hostname: str, address: str, port: int, ssl: bool) -> tuple[str, str, int]:
    """Fill in whichever of Host header value, dial address and port is missing.

    >>> resolve_target("example.com:8443", "", 0, False)
    ('example.com:8443', 'example.com', 8443)
    """
    hostname = hostname or address
    host, host_port = split_host_port(hostname)
    if address:
        address, address_port = split_host_port(address)
    else:
        address, address_port = host, None
    if not port:
        port = host_port or address_port or (443 if ssl else 80)
    if not 0 < port < 65536:
        raise ConfigError(f"invalid port {port}")
    return hostname, address, port


def resolve(args: argparse.Namespace) -> Config:
    """Validate parsed options in the order the checks are reported."""
    try:
        buffer_size = humanfriendly.parse_size(args.max_buffer_size)
    except humanfriendly.InvalidSize as exc:
        raise ConfigError(f"Could not parse max-buffer-size: {exc}") from exc

    if args.wait_for and not args.wait_for_max:
        raise ConfigError("wait-for-max is required when wait-for is enabled")

    if args.string and args.base64_string:
        raise ConfigError("Both string and base64-string are specified")
    expect_bytes = args.string.encode("utf-8")
    if args.base64_string:
        try:
            expect_bytes = base64.b64decode(args.base64_string, validate=True)
        except ValueError as exc:
            raise ConfigError(f"Failed decode base64-string: {exc}") from exc

    if args.tcp4 and args.tcp6:
        raise ConfigError("Both tcp4 and tcp6 are specified")
    if args.sni and not args.hostname:
        raise ConfigError("hostname is required when use sni")
    if not args.hostname and not args.ip_address:
        raise ConfigError("Specify either hostname or ipaddress")
    if args.authorization:
        split_authorization(args.authorization)

    hostname, address, port = resolve_target(args.hostname, args.ip_address, args.port, args.ssl)
    family = 4 if args.tcp4 else 6 if args.tcp6 else None
    return Config(
        address=address,
        hostname=hostname,
        port=port,
        ssl=args.ssl,
        method=args.method,
        uri=args.uri or "/",
        timeout=args.timeout,
        max_buffer_size=buffer_size,
        no_discard=args.no_discard,
        expect=args.expect,
        expect_bytes=expect_bytes,
        user_agent=args.useragent,
        authorization=args.authorization,
        sni=args.sni,
        tls_max=args.tls_max,
        address_family=family,
        proxy=args.proxy,
        consecutive=args.consecutive,
        interim=args.interim,
        wait_for=args.wait_for,
        wait_for_interval=args.wait_for_interval,
        wait_for_max=args.wait_for_max,
        verbose=args.verbose,
    )


def parse_args(argv: list[str]) -> Config:
    return resolve(build_parser().parse_args(argv))
