"""Tests for the model and fixture Pydantic data models."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.shared.models.fixtures import (
    AppliesTo,
    HttpRequestTestCase,
    HttpResponseTestCase,
)
from src.shared.models.smithy import MemberShape, Shape, ShapeRef, ShapeType


class TestHttpRequestTestCase:
    def test_camel_case_aliases(self):
        case = HttpRequestTestCase.model_validate(
            {
                "id": "SayHello",
                "protocol": "example.protocol#restJson1",
                "method": "POST",
                "uri": "/greet",
                "queryParams": ["a=b"],
                "forbidQueryParams": ["c"],
                "requireQueryParams": ["d"],
                "forbidHeaders": ["X-Forbidden"],
                "requireHeaders": ["X-Required"],
                "bodyMediaType": "application/json",
                "resolvedHost": "api.example.com",
                "appliesTo": "client",
            }
        )
        assert case.query_params == ["a=b"]
        assert case.forbid_query_params == ["c"]
        assert case.require_query_params == ["d"]
        assert case.forbid_headers == ["X-Forbidden"]
        assert case.require_headers == ["X-Required"]
        assert case.body_media_type == "application/json"
        assert case.resolved_host == "api.example.com"
        assert case.applies_to is AppliesTo.CLIENT

    def test_expectation_fields_are_optional(self):
        case = HttpRequestTestCase(id="Bare", protocol="p")
        assert case.method is None
        assert case.uri is None
        assert case.params == {}
        assert case.headers == {}

    def test_id_and_protocol_are_required(self):
        with pytest.raises(ValidationError):
            HttpRequestTestCase.model_validate({"id": "NoProtocol"})

    def test_fixtures_are_frozen(self):
        case = HttpRequestTestCase(id="Frozen", protocol="p")
        with pytest.raises(ValidationError):
            case.method = "GET"

    def test_unknown_keys_ignored(self):
        case = HttpRequestTestCase.model_validate(
            {"id": "Vendor", "protocol": "p", "vendorParams": {"x": 1}}
        )
        assert case.id == "Vendor"


class TestHttpResponseTestCase:
    def test_code(self):
        case = HttpResponseTestCase(id="Ok", protocol="p", code=200)
        assert case.code == 200

    def test_invalid_applies_to(self):
        with pytest.raises(ValidationError):
            HttpResponseTestCase.model_validate(
                {"id": "Bad", "protocol": "p", "appliesTo": "both"}
            )


class TestShape:
    def test_name_strips_namespace(self):
        shape = Shape(shape_id="example.greeting#GreetingOperation", type=ShapeType.OPERATION)
        assert shape.name == "GreetingOperation"

    def test_is_error(self):
        shape = Shape(
            shape_id="ns#Missing",
            type="structure",
            traits={"smithy.api#error": "client"},
        )
        assert shape.is_error
        assert not shape.is_sparse

    def test_is_sparse(self):
        shape = Shape(
            shape_id="ns#Names",
            type="list",
            member={"name": "member", "target": "smithy.api#String"},
            traits={"smithy.api#sparse": {}},
        )
        assert shape.is_sparse
        assert not shape.is_error

    def test_required_member(self):
        member = MemberShape(
            name="id", target="smithy.api#String", traits={"smithy.api#required": {}}
        )
        assert member.required
        assert not MemberShape(name="x", target="smithy.api#String").required

    def test_lifecycle_operations_in_canonical_order(self):
        shape = Shape.model_validate(
            {
                "shape_id": "ns#Resource",
                "type": "resource",
                "list": {"target": "ns#ListThings"},
                "read": {"target": "ns#GetThing"},
                "create": {"target": "ns#CreateThing"},
            }
        )
        assert [ref.target for ref in shape.lifecycle_operations()] == [
            "ns#CreateThing",
            "ns#GetThing",
            "ns#ListThings",
        ]

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            Shape(shape_id="ns#Odd", type="widget")

    def test_shape_ref(self):
        assert ShapeRef(target="ns#A").target == "ns#A"
