"""Tests for request descriptors and auth/header parsing."""

from __future__ import annotations

import base64

import pytest

from saturator._internal.errors import ConfigError
from saturator.request.descriptor import (
    API_KEY_HEADER,
    Auth,
    AuthScheme,
    HttpMethod,
    RequestDescriptor,
    parse_auth,
    parse_header,
)


class TestParseAuth:
    def test_bearer(self):
        auth = parse_auth("bearer:abc123")
        assert auth == Auth(scheme=AuthScheme.BEARER, credential="abc123")
        assert auth.header() == ("Authorization", "Bearer abc123")

    def test_oauth2_uses_bearer_header(self):
        auth = parse_auth("OAuth2:tok")
        assert auth.scheme is AuthScheme.OAUTH2
        assert auth.header() == ("Authorization", "Bearer tok")

    def test_apikey(self):
        auth = parse_auth("apikey:k-1")
        assert auth.header() == (API_KEY_HEADER, "k-1")

    def test_basic_keeps_password_colons(self):
        auth = parse_auth("basic:alice:pa:ss")
        assert auth.credential == "alice:pa:ss"
        expected = base64.b64encode(b"alice:pa:ss").decode("ascii")
        assert auth.header() == ("Authorization", f"Basic {expected}")

    def test_basic_requires_user_and_password(self):
        with pytest.raises(ConfigError, match="user:password"):
            parse_auth("basic:alice")

    def test_unknown_scheme(self):
        with pytest.raises(ConfigError, match="unknown auth scheme"):
            parse_auth("digest:abc")

    @pytest.mark.parametrize("raw", ["bearer", "bearer:", ""])
    def test_missing_credential(self, raw: str):
        with pytest.raises(ConfigError, match="scheme:credential"):
            parse_auth(raw)


class TestParseHeader:
    def test_name_and_value_are_stripped(self):
        assert parse_header("  X-Trace :  abc ") == ("X-Trace", "abc")

    def test_value_may_contain_colons(self):
        assert parse_header("Referer: http://example.com:8080/") == (
            "Referer",
            "http://example.com:8080/",
        )

    def test_empty_value_allowed(self):
        assert parse_header("X-Empty:") == ("X-Empty", "")

    @pytest.mark.parametrize("raw", ["no-colon", ": value", ""])
    def test_invalid(self, raw: str):
        with pytest.raises(ConfigError, match="Name: value"):
            parse_header(raw)


class TestRequestDescriptor:
    def test_defaults(self):
        descriptor = RequestDescriptor(url="http://localhost/")
        assert descriptor.method is HttpMethod.GET
        assert descriptor.timeout == 30.0
        assert descriptor.build_headers() == {}

    def test_content_type_only_with_body(self):
        without_body = RequestDescriptor(url="http://x/", content_type="application/json")
        with_body = RequestDescriptor(
            url="http://x/", body="{}", content_type="application/json"
        )
        assert "Content-Type" not in without_body.build_headers()
        assert with_body.build_headers()["Content-Type"] == "application/json"

    def test_auth_overrides_custom_authorization_header(self):
        descriptor = RequestDescriptor(
            url="http://x/",
            headers=(("Authorization", "Custom x"), ("X-One", "1")),
            auth=Auth(scheme=AuthScheme.BEARER, credential="t"),
        )
        headers = descriptor.build_headers()
        assert headers["Authorization"] == "Bearer t"
        assert headers["X-One"] == "1"
