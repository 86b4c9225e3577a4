from __future__ import annotations

import dataclasses
import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .auth import CanonicalRequest, QueryParams, build_auth_headers, sign_request
from .config import Config, Identity
from .errors import ApiError, ConfigError, DecodeError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def build_session(pool_maxsize: int = 10) -> requests.Session:
    """Session with a pooled adapter and no automatic retries.

    A retried request would reuse a stale timestamp, so each ``get`` maps to
    exactly one network call.
    """
    sess = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=pool_maxsize,
        pool_maxsize=pool_maxsize,
        max_retries=Retry(total=0, read=False, raise_on_status=False),
    )
    sess.mount("http://", adapter)
    sess.mount("https://", adapter)
    return sess


@dataclass(frozen=True)
class SignedRequest:
    url: str
    headers: dict[str, str]
    canonical: CanonicalRequest


def decode_payload(payload: Any, response_type: Callable[..., T] | None) -> T | Any:
    if response_type is None:
        return payload
    from_dict = getattr(response_type, "from_dict", None)
    if from_dict is not None:
        return from_dict(payload)
    if dataclasses.is_dataclass(response_type) and isinstance(payload, dict):
        return response_type(**payload)
    return response_type(payload)


@dataclass
class ThreatConnectClient:
    """Signed GET client for the ThreatConnect v3 REST API.

    The identity is immutable and every per-request value lives in locals,
    so one client can be shared between threads.

    Examples:
        >>> client = ThreatConnectClient.from_env()
        >>> owners = client.get("/security/owners")
        >>> hosts = client.get("/indicators", [("tql", 'typeName in ("Host")')])
    """

    identity: Identity
    timeout: float | None = 30.0
    session: requests.Session | None = None
    clock: Callable[[], float] = time.time
    strict: bool = True
    base_url: str = field(init=False)

    def __post_init__(self) -> None:
        if self.strict:
            missing = self.identity.missing_fields()
            if missing:
                raise ConfigError(f"Identity has empty fields: {', '.join(missing)}")
        self.base_url = self.identity.base_url
        if self.session is None:
            self.session = build_session()

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> ThreatConnectClient:
        config.validate()
        return cls(identity=config.identity(), **kwargs)

    @classmethod
    def from_env(cls, **kwargs: Any) -> ThreatConnectClient:
        return cls.from_config(Config.load(), **kwargs)

    def __enter__(self) -> ThreatConnectClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self.session is not None:
            self.session.close()

    def build_request(
        self, endpoint: str, params: QueryParams | None = None, method: str = "GET"
    ) -> SignedRequest:
        """Sign a request for ``endpoint`` at the current clock time without sending it."""
        timestamp = int(self.clock())
        canonical = CanonicalRequest.for_endpoint(method, endpoint, params, timestamp)
        signature = sign_request(self.identity.secret_key, self.identity.access_id, canonical)
        url = f"https://{self.identity.instance}.threatconnect.com{canonical.path_and_query}"
        return SignedRequest(
            url=url,
            headers=build_auth_headers(signature, canonical.timestamp),
            canonical=canonical,
        )

    def get(
        self,
        endpoint: str,
        params: QueryParams | None = None,
        response_type: Callable[..., T] | None = None,
    ) -> T | Any:
        """Perform one signed GET and decode the JSON body.

        Args:
            endpoint: Path below ``/api/v3``, starting with ``/``
            params: Ordered query parameters
            response_type: Target type; ``None`` returns the parsed JSON

        Raises:
            TransportError: Connection, timeout or truncated body
            ApiError: Non-2xx status
            DecodeError: 2xx body that is not valid JSON for ``response_type``
        """
        request = self.build_request(endpoint, params)
        logger.debug(f"GET {request.url}")

        try:
            # URL is already encoded; passing params= would re-encode the query
            res = self.session.get(request.url, headers=request.headers, timeout=self.timeout)
            body = res.text
        except requests.exceptions.RequestException as e:
            logger.error(f"Transport failure for GET {request.url}: {e}")
            raise TransportError(f"GET {request.url} failed: {e}") from e

        logger.debug(f"Response {res.status_code} for GET {request.url}")
        if not 200 <= res.status_code < 300:
            logger.error(f"API Error {res.status_code}: {body}")
            raise ApiError(res.status_code, body)

        try:
            payload = json.loads(body)
            return decode_payload(payload, response_type)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.error(f"Failed to decode response from {request.url}: {e}")
            raise DecodeError(body, str(e)) from e
