"""Signed HTTP client for the ThreatConnect v3 REST API.

This package provides:
- HMAC-SHA256 request signing (``tcsys.auth``)
- A thin GET client with typed errors (``tcsys.client``)
- Credential loading from config.toml, .env and environment (``tcsys.config``)
"""

from tcsys.auth import CanonicalRequest, encode_query, sign
from tcsys.client import ThreatConnectClient
from tcsys.config import Config, Identity
from tcsys.errors import (
    ApiError,
    ConfigError,
    DecodeError,
    SigningError,
    ThreatConnectError,
    TransportError,
)

__all__ = [
    "ApiError",
    "CanonicalRequest",
    "Config",
    "ConfigError",
    "DecodeError",
    "Identity",
    "SigningError",
    "ThreatConnectClient",
    "ThreatConnectError",
    "TransportError",
    "encode_query",
    "sign",
]
