"""Exception hierarchy for the ThreatConnect client.

Every failure raised by :mod:`tcsys` derives from ``ThreatConnectError`` and
carries a ``kind`` tag, so callers can either catch a specific subclass or
branch on ``err.kind``:

    >>> try:
    ...     client.get("/indicators")
    ... except ApiError as e:
    ...     if e.is_auth_error:
    ...         print("check clock skew and credentials")
"""

from __future__ import annotations

SNIPPET_LENGTH = 200


def _snippet(text: str, limit: int = SNIPPET_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class ThreatConnectError(Exception):
    """Base class for all client errors."""

    kind = "error"


class ConfigError(ThreatConnectError):
    """Raised when credentials are missing or the config file is unreadable."""

    kind = "config"


class SigningError(ThreatConnectError):
    """Raised when the secret key cannot be used as an HMAC key."""

    kind = "signing"


class TransportError(ThreatConnectError):
    """Raised on connection, TLS, timeout or truncated-body failures.

    The original ``requests`` exception is chained as ``__cause__``.
    """

    kind = "transport"


class ApiError(ThreatConnectError):
    """The server answered with a non-2xx status.

    ``body`` is the raw response text; it is not parsed since error pages
    may be HTML or plain text.
    """

    kind = "api"

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"API Error {status}: {_snippet(body)}")

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status < 600

    @property
    def is_auth_error(self) -> bool:
        # 401 usually means a bad signature or clock skew
        return self.status in (401, 403)


class DecodeError(ThreatConnectError):
    """A 2xx body could not be decoded into the requested type."""

    kind = "decode"

    def __init__(self, body: str, diagnostic: str) -> None:
        self.body = body
        self.diagnostic = diagnostic
        super().__init__(f"Failed to decode response: {diagnostic} (body: {self.snippet!r})")

    @property
    def snippet(self) -> str:
        return _snippet(self.body)
