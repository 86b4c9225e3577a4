"""Request signing for the ThreatConnect v3 API.

ThreatConnect authenticates API-token requests with an HMAC-SHA256 signature
over ``"{path_and_query}:{method}:{timestamp}"``. The path and query string
signed must be byte-identical to the ones sent on the request line, so both
are derived from a single ``CanonicalRequest``.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Union
from urllib.parse import urlencode

import requests

from .errors import SigningError

API_PATH = "/api/v3"

# Characters left unescaped in query values (TQL filters use them heavily)
QUERY_SAFE_CHARS = "(),"

QueryParams = Union[Sequence[tuple[str, str]], Mapping[str, str]]


def encode_query(params: QueryParams | None) -> str:
    """Encode ``params`` into the query string used for both URL and signature.

    Order is preserved. Returns an empty string when there is nothing to encode.
    """
    if not params:
        return ""
    pairs = list(params.items()) if isinstance(params, Mapping) else list(params)
    return urlencode(pairs, safe=QUERY_SAFE_CHARS)


def _prepared_path(path: str) -> str:
    # host is irrelevant to path normalization
    return requests.Request("GET", f"https://localhost{path}").prepare().path_url


def canonical_path(endpoint: str) -> str:
    """Return ``/api/v3{endpoint}`` exactly as requests will put it on the request line.

    requests (via urllib3) percent-encodes spaces and non-ASCII characters,
    uppercases escapes and drops dot segments, so the signature must cover
    the normalized form rather than the raw endpoint.
    """
    path = _prepared_path(f"{API_PATH}{endpoint}")
    if _prepared_path(path) != path:
        raise ValueError(f"Endpoint has no stable encoding: {endpoint!r}")
    return path


@dataclass(frozen=True)
class CanonicalRequest:
    method: str
    path: str
    query: str
    timestamp: int

    @classmethod
    def for_endpoint(
        cls, method: str, endpoint: str, params: QueryParams | None, timestamp: int
    ) -> CanonicalRequest:
        if not endpoint.startswith("/"):
            raise ValueError(f"Endpoint must start with '/': {endpoint!r}")
        if "?" in endpoint or "#" in endpoint:
            raise ValueError(f"Endpoint must not carry a query or fragment: {endpoint!r}")
        return cls(
            method=method.upper(),
            path=canonical_path(endpoint),
            query=encode_query(params),
            timestamp=int(timestamp),
        )

    @property
    def path_and_query(self) -> str:
        if self.query:
            return f"{self.path}?{self.query}"
        return self.path

    @property
    def message(self) -> str:
        return build_signing_message(self.path_and_query, self.method, self.timestamp)


def build_signing_message(path_and_query: str, method: str, timestamp: int) -> str:
    return f"{path_and_query}:{method}:{timestamp}"


def sign(
    secret_key: str | bytes,
    method: str,
    path_and_query: str,
    timestamp: int,
    access_id: str,
) -> str:
    """Return the ``Authorization`` header value for a request.

    Args:
        secret_key: Shared API secret
        method: Uppercase HTTP verb, e.g. ``"GET"``
        path_and_query: Fully resolved ``/api/v3...`` path with optional ``?query``
        timestamp: Unix time in whole seconds
        access_id: API access id, echoed in the header

    Raises:
        SigningError: If the secret cannot be used as an HMAC key
    """
    try:
        if isinstance(secret_key, str):
            key = secret_key.encode("utf-8")
        elif isinstance(secret_key, (bytes, bytearray)):
            key = bytes(secret_key)
        else:
            raise TypeError(f"expected str or bytes, got {type(secret_key).__name__}")
        mac = hmac.new(key, digestmod=hashlib.sha256)
    except (TypeError, ValueError) as e:
        raise SigningError(f"Secret key is not usable as an HMAC key: {e}") from e

    message = build_signing_message(path_and_query, method, timestamp)
    mac.update(message.encode("utf-8"))
    digest = base64.b64encode(mac.digest()).decode("ascii")
    return f"TC {access_id}:{digest}"


def sign_request(secret_key: str | bytes, access_id: str, request: CanonicalRequest) -> str:
    return sign(secret_key, request.method, request.path_and_query, request.timestamp, access_id)


def build_auth_headers(signature: str, timestamp: int) -> dict[str, str]:
    return {
        "Authorization": signature,
        "Timestamp": str(timestamp),
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
