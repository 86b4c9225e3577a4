"""Typed views over common ThreatConnect v3 payloads.

Each model exposes ``from_dict`` so it can be passed as ``response_type`` to
:meth:`tcsys.client.ThreatConnectClient.get`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

_INDICATOR_FIELDS = {
    "id": "id",
    "type": "type",
    "summary": "summary",
    "rating": "rating",
    "confidence": "confidence",
    "dateAdded": "date_added",
    "lastModified": "last_modified",
    "ownerName": "owner_name",
    "webLink": "web_link",
}


@dataclass
class Indicator:
    id: int
    type: str
    summary: str
    rating: float | None = None
    confidence: int | None = None
    date_added: str | None = None
    last_modified: str | None = None
    owner_name: str | None = None
    web_link: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Indicator:
        if not isinstance(data, dict):
            raise TypeError(f"Indicator expects an object, got {type(data).__name__}")
        known = {attr: data[key] for key, attr in _INDICATOR_FIELDS.items() if key in data}
        extra = {k: v for k, v in data.items() if k not in _INDICATOR_FIELDS}
        return cls(**known, extra=extra)


@dataclass
class ApiListResponse:
    """The ``{"data": [...], "status": ..., "count": ..., "next": ...}`` envelope."""

    data: list[Any]
    status: str | None = None
    count: int | None = None
    next: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ApiListResponse:
        if not isinstance(data, dict):
            raise TypeError(f"List response expects an object, got {type(data).__name__}")
        if "data" not in data:
            raise KeyError("data")
        if not isinstance(data["data"], list):
            raise TypeError(f"'data' must be a list, got {type(data['data']).__name__}")
        return cls(
            data=list(data["data"]),
            status=data.get("status"),
            count=data.get("count"),
            next=data.get("next"),
        )


@dataclass
class IndicatorList(ApiListResponse):
    """List envelope whose ``data`` items are decoded as :class:`Indicator`."""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IndicatorList:
        base = ApiListResponse.from_dict(data)
        return cls(
            data=[Indicator.from_dict(item) for item in base.data],
            status=base.status,
            count=base.count,
            next=base.next,
        )
