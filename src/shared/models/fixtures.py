"""Protocol test fixture Pydantic v2 data models.

Fixtures are read from the ``smithy.test#httpRequestTests`` and
``smithy.test#httpResponseTests`` traits.  Field aliases follow the
camelCase spelling used in model documents.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, Field

REQUEST_TESTS_TRAIT = "smithy.test#httpRequestTests"
RESPONSE_TESTS_TRAIT = "smithy.test#httpResponseTests"


class AppliesTo(str, Enum):
    """Which side of a protocol a fixture is meant for."""
    CLIENT = "client"
    SERVER = "server"


class HttpMessageTestCase(BaseModel):
    """Fields shared by request and response fixtures."""
    id: str
    protocol: str
    documentation: str | None = None
    params: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
    forbid_headers: list[str] = Field(default_factory=list, alias="forbidHeaders")
    require_headers: list[str] = Field(default_factory=list, alias="requireHeaders")
    body: str | None = None
    body_media_type: str | None = Field(default=None, alias="bodyMediaType")
    applies_to: AppliesTo | None = Field(default=None, alias="appliesTo")

    model_config = {"populate_by_name": True, "frozen": True, "extra": "ignore"}


class HttpRequestTestCase(HttpMessageTestCase):
    """A request fixture: params in, expected wire request out."""
    method: str | None = None
    uri: str | None = None
    host: str | None = None
    resolved_host: str | None = Field(default=None, alias="resolvedHost")
    query_params: list[str] = Field(default_factory=list, alias="queryParams")
    forbid_query_params: list[str] = Field(
        default_factory=list, alias="forbidQueryParams"
    )
    require_query_params: list[str] = Field(
        default_factory=list, alias="requireQueryParams"
    )


class HttpResponseTestCase(HttpMessageTestCase):
    """A response fixture: wire response in, expected modeled value out."""
    code: int | None = None


HttpTestCase = Union[HttpRequestTestCase, HttpResponseTestCase]
