"""Tests for the wire-level assertion builder."""
from __future__ import annotations

from src.protocol_tests.assertions import write_request_assertions
from src.protocol_tests.writer import CodeWriter
from src.shared.config import GeneratorSettings
from src.shared.models.fixtures import HttpRequestTestCase
from tests.fixtures import REST_JSON


def _lines(case: HttpRequestTestCase, settings: GeneratorSettings) -> list[str]:
    writer = CodeWriter()
    write_request_assertions(writer, case, settings)
    return writer.contents().splitlines()


def _case(**kwargs) -> HttpRequestTestCase:
    return HttpRequestTestCase(
        id="Case", protocol=REST_JSON, method="GET", uri="/things", **kwargs
    )


class TestRequestAssertions:
    def test_minimal_fixture(self, settings):
        assert _lines(_case(), settings) == [
            'checks = WireChecks("request")',
            "checks.equal(\"method\", 'GET', r.method)",
            "checks.equal(\"path\", '/things', request_path(r))",
            "checks.body(r.content, None, None)",
            "checks.verify()",
        ]

    def test_every_expectation_is_checked(self, settings):
        case = _case(
            resolved_host="api.example.com",
            query_params=["a=1"],
            forbid_query_params=["b"],
            require_query_params=["c"],
            headers={"X-Flag": "on"},
            forbid_headers=["X-Gone"],
            require_headers=["X-Any"],
            body="{}",
            body_media_type="application/json",
        )
        assert _lines(case, settings) == [
            'checks = WireChecks("request")',
            "checks.equal(\"method\", 'GET', r.method)",
            "checks.equal(\"path\", '/things', request_path(r))",
            "checks.equal(\"host\", 'api.example.com', r.url.host)",
            "checks.query_params(r, ['a=1'])",
            "checks.forbid_query_params(r, ['b'])",
            "checks.require_query_params(r, ['c'])",
            "checks.headers(r.headers, {'X-Flag': 'on'})",
            "checks.forbid_headers(r.headers, ['X-Gone'])",
            "checks.require_headers(r.headers, ['X-Any'])",
            "checks.body(r.content, '{}', 'application/json')",
            "checks.verify()",
        ]

    def test_unlisted_keys_forbidden(self):
        settings = GeneratorSettings(unlisted_keys="forbid")
        case = _case(
            query_params=["tag%20name=x", "flag"],
            require_query_params=["page"],
            headers={"X-Flag": "on"},
            require_headers=["X-Any"],
        )
        lines = _lines(case, settings)
        assert "checks.only_query_params(r, ['tag name', 'flag', 'page'])" in lines
        assert "checks.only_headers(r.headers, ['X-Flag', 'X-Any'])" in lines

    def test_unlisted_keys_ignored_by_default(self, settings):
        lines = _lines(_case(query_params=["a=1"], headers={"X-Flag": "on"}), settings)
        assert not any("only_" in line for line in lines)

    def test_verify_is_last(self, settings):
        assert _lines(_case(headers={"X-Flag": "on"}), settings)[-1] == "checks.verify()"

    def test_custom_request_variable(self, settings):
        writer = CodeWriter()
        write_request_assertions(writer, _case(), settings, request_var="captured_request")
        assert "captured_request.method" in writer.contents()
