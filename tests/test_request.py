"""Tests for request construction and host/port splitting."""
import base64
from dataclasses import replace

import pytest

from checkhttp.core.errors import ConfigError
from checkhttp.core.request import build_request, split_authorization, split_host_port


def test_request_targets_host_header_value_and_uri(config):
    request = build_request(replace(config, hostname="example.com:8443", uri="/status?full=1"))

    assert str(request.url) == "http://example.com:8443/status?full=1"
    assert request.headers["Host"] == "example.com:8443"
    assert request.method == "GET"
    assert request.content == b""


def test_https_scheme_and_method(config):
    request = build_request(replace(config, ssl=True, method="HEAD"))

    assert request.url.scheme == "https"
    assert request.method == "HEAD"


def test_user_agent_is_always_set(config):
    assert build_request(config).headers["User-Agent"] == "check_http"
    assert build_request(replace(config, user_agent="probe/2")).headers["User-Agent"] == "probe/2"


def test_basic_auth_splits_on_first_colon(config):
    request = build_request(replace(config, authorization="user:pa:ss"))

    expected = base64.b64encode(b"user:pa:ss").decode()
    assert request.headers["Authorization"] == f"Basic {expected}"


def test_authorization_without_colon_is_rejected(config):
    with pytest.raises(ConfigError, match="invalid authorization args"):
        build_request(replace(config, authorization="user"))


def test_split_authorization():
    assert split_authorization("user:") == ("user", "")
    assert split_authorization("a:b:c") == ("a", "b:c")


@pytest.mark.parametrize("value,expected", [
    ("example.com", ("example.com", None)),
    ("example.com:8443", ("example.com", 8443)),
    ("192.0.2.10:81", ("192.0.2.10", 81)),
    ("[2001:db8::1]:8080", ("2001:db8::1", 8080)),
    ("[2001:db8::1]", ("2001:db8::1", None)),
    ("2001:db8::1", ("2001:db8::1", None)),
])
def test_split_host_port(value, expected):
    assert split_host_port(value) == expected


@pytest.mark.parametrize("value", ["example.com:http", "[::1", "[::1]x"])
def test_split_host_port_rejects_garbage(value):
    with pytest.raises(ConfigError):
        split_host_port(value)
