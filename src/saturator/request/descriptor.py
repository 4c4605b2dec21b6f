"""Request descriptors: what every unit of a batch sends to the target."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum

from saturator._internal.errors import ConfigError
from saturator._internal.types import HeaderPair, Headers


class HttpMethod(str, Enum):
    """HTTP methods supported by the load generator."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class AuthScheme(str, Enum):
    """Authentication schemes accepted by ``--auth``."""

    BEARER = "bearer"
    OAUTH2 = "oauth2"
    APIKEY = "apikey"
    BASIC = "basic"


API_KEY_HEADER = "X-API-Key"


@dataclass(frozen=True)
class Auth:
    """Credential attached to every request of a run.

    Attributes:
        scheme: How the credential is presented to the server.
        credential: Token, API key, or ``user:password`` for basic auth.
    """

    scheme: AuthScheme
    credential: str

    def header(self) -> HeaderPair:
        """Return the ``(name, value)`` header carrying this credential."""
        if self.scheme in (AuthScheme.BEARER, AuthScheme.OAUTH2):
            return "Authorization", f"Bearer {self.credential}"
        if self.scheme is AuthScheme.APIKEY:
            return API_KEY_HEADER, self.credential
        encoded = base64.b64encode(self.credential.encode("utf-8")).decode("ascii")
        return "Authorization", f"Basic {encoded}"


@dataclass(frozen=True)
class RequestDescriptor:
    """Immutable description of the request sent by every execution unit.

    Shared read-only by all concurrent units of a batch.

    Attributes:
        url: Absolute target URL.
        method: HTTP method.
        auth: Optional credential.
        headers: Custom headers in command-line order.
        body: Optional request body.
        content_type: Content type sent along with ``body``.
        timeout: Per-request timeout in seconds.
    """

    url: str
    method: HttpMethod = HttpMethod.GET
    auth: Auth | None = None
    headers: tuple[HeaderPair, ...] = field(default_factory=tuple)
    body: str | None = None
    content_type: str | None = None
    timeout: float = 30.0

    def build_headers(self) -> Headers:
        """Merge custom headers, the auth header and the content type.

        Later entries win on name clashes: custom headers are applied first,
        then auth, then the content type (only when a body is sent).
        """
        headers: Headers = {}
        for name, value in self.headers:
            headers[name] = value
        if self.auth is not None:
            name, value = self.auth.header()
            headers[name] = value
        if self.body is not None and self.content_type:
            headers["Content-Type"] = self.content_type
        return headers


def parse_auth(raw: str) -> Auth:
    """Parse a ``scheme:credential`` string into an ``Auth``.

    Basic auth keeps everything after the first colon, so
    ``basic:alice:s3cret`` yields the credential ``alice:s3cret``.

    Raises:
        ConfigError: On an unknown scheme, a missing credential, or a basic
            credential without a ``user:password`` shape.
    """
    scheme_name, sep, credential = raw.partition(":")
    if not sep or not credential:
        msg = f"auth must look like 'scheme:credential', got: {raw!r}"
        raise ConfigError(msg)

    try:
        scheme = AuthScheme(scheme_name.strip().lower())
    except ValueError:
        choices = ", ".join(s.value for s in AuthScheme)
        msg = f"unknown auth scheme {scheme_name!r}, choose from: {choices}"
        raise ConfigError(msg) from None

    if scheme is AuthScheme.BASIC and ":" not in credential:
        msg = "basic auth credential must be 'user:password'"
        raise ConfigError(msg)

    return Auth(scheme=scheme, credential=credential)


def parse_header(raw: str) -> HeaderPair:
    """Parse a ``Name: value`` string into a header pair.

    Raises:
        ConfigError: If there is no colon or the name is empty.
    """
    name, sep, value = raw.partition(":")
    name = name.strip()
    if not sep or not name:
        msg = f"header must look like 'Name: value', got: {raw!r}"
        raise ConfigError(msg)
    return name, value.strip()
