from __future__ import annotations

import os
from unittest.mock import Mock

import pytest

from tcsys.config import Identity

ENV_KEYS = ["TC_ACCESS_ID", "TC_SECRET_KEY", "TC_INSTANCE", "XDG_CONFIG_HOME"]

FIXED_TIMESTAMP = 1700000000


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from real credentials, config files and .env."""
    original_values = {key: os.environ[key] for key in ENV_KEYS if key in os.environ}
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)

    yield tmp_path

    # .env loading writes to os.environ directly
    for key in ENV_KEYS:
        os.environ.pop(key, None)
    os.environ.update(original_values)


@pytest.fixture
def identity():
    return Identity(access_id="12345678901234567890", secret_key="s3cr3t", instance="acme")


@pytest.fixture
def fixed_clock():
    return Mock(return_value=float(FIXED_TIMESTAMP))


def _make_response(status_code: int = 200, text: str = "{}") -> Mock:
    response = Mock()
    response.status_code = status_code
    response.text = text
    return response


@pytest.fixture
def make_response():
    """Factory for fake requests.Response objects."""
    return _make_response


@pytest.fixture
def mock_session():
    session = Mock()
    session.get.return_value = _make_response(200, '{"data": [], "status": "Success"}')
    return session


@pytest.fixture
def sample_indicators_payload():
    """Sample /indicators response matching the ThreatConnect v3 envelope."""
    return {
        "data": [
            {
                "id": 101,
                "type": "Host",
                "summary": "bad.example.com",
                "rating": 3.0,
                "confidence": 85,
                "dateAdded": "2024-01-15T10:00:00Z",
                "lastModified": "2024-01-16T08:30:00Z",
                "ownerName": "Acme Intel",
                "webLink": "https://acme.threatconnect.com/auth/indicators/details/host.xhtml?host=bad.example.com",
                "privateFlag": False,
            },
            {
                "id": 102,
                "type": "Address",
                "summary": "203.0.113.7",
                "rating": 5.0,
                "confidence": 100,
                "ownerName": "Acme Intel",
            },
        ],
        "status": "Success",
        "count": 2,
    }
