"""
servermock Models

Immutable values exchanged between the endpoint registry, the request log
and the HTTP dispatch handler:

- JsonBody: a configured response body and its JSON encoding
- MockResponse: what to send back for a registered endpoint
- MockRequest: one captured inbound call
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional

from fastapi.encoders import jsonable_encoder
from starlette.datastructures import Headers

from ..common import safe_json_parse

JSON_MEDIA_TYPE = 'application/json'


def _frozen_mapping(values: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return MappingProxyType(dict(values or {}))


def _header_mapping(values: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return Headers(headers=dict(values or {}))


@dataclass(frozen=True)
class JsonBody:
    """
    Opaque JSON-serializable response body.

    Wraps anything jsonable_encoder understands (dicts, lists, scalars,
    dataclasses, pydantic models). Encoding happens only in encode(), so a
    value that cannot be serialized fails there and nowhere else.

    Example:
        body = JsonBody({'Message': 'Response 1'})
        body.encode()  # b'{"Message":"Response 1"}'
    """

    value: Any

    def encode(self) -> bytes:
        """
        Serialize the wrapped value to UTF-8 JSON.

        Raises:
            ValueError, TypeError: If the value is not JSON-serializable
        """
        return json.dumps(
            jsonable_encoder(self.value),
            ensure_ascii=False,
            separators=(',', ':')
        ).encode('utf-8')


@dataclass(frozen=True)
class MockResponse:
    """Canned response served for a matched endpoint."""

    body: Optional[JsonBody] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    status_code: int = 200
    delay_ms: int = 0

    def __post_init__(self):
        object.__setattr__(self, 'headers', _frozen_mapping(self.headers))

    @property
    def has_body(self) -> bool:
        return self.body is not None


@dataclass(frozen=True)
class MockRequest:
    """
    Captured record of one inbound call.

    Recorded whether or not the call matched an endpoint. Headers are a
    read-only, case-insensitive mapping, so headers['X-Request-ID'] and
    headers['x-request-id'] are the same lookup. For repeated header names
    or query keys the last value wins.
    """

    method: str
    path: str
    payload: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=dict)
    query_parameters: Mapping[str, str] = field(default_factory=dict)
    received_at: datetime = field(default_factory=datetime.now, compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'method', self.method.upper())
        object.__setattr__(self, 'headers', _header_mapping(self.headers))
        object.__setattr__(self, 'query_parameters', _frozen_mapping(self.query_parameters))

    def json(self, default: Any = None) -> Any:
        """Parse the payload as JSON, returning default when absent or invalid."""
        return safe_json_parse(self.payload, default=default)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'method': self.method,
            'path': self.path,
            'payload': self.payload,
            'headers': dict(self.headers),
            'query_parameters': dict(self.query_parameters),
            'received_at': self.received_at.isoformat()
        }
