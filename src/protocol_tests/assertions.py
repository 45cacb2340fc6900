"""Renders wire-level assertions for generated protocol tests.

Each expected field becomes one statement against a ``WireChecks``
collector defined in the harness preamble, so a test reports every
mismatching field instead of stopping at the first one.

Query parameters and headers follow a three-way policy: listed pairs must
match, forbidden keys must be absent, required keys must be present.  Keys
the fixture does not mention are ignored unless ``unlisted_keys`` is set to
``forbid``.
"""

from __future__ import annotations

from urllib.parse import unquote

from src.protocol_tests.writer import CodeWriter
from src.shared.config import GeneratorSettings
from src.shared.models.fixtures import HttpMessageTestCase, HttpRequestTestCase


def write_request_assertions(
    writer: CodeWriter,
    case: HttpRequestTestCase,
    settings: GeneratorSettings,
    request_var: str = "r",
) -> None:
    """Compare the captured request in *request_var* with *case*."""
    lit = writer.literal
    writer.write('checks = WireChecks("request")')
    writer.write(f'checks.equal("method", {lit(case.method)}, {request_var}.method)')
    writer.write(f'checks.equal("path", {lit(case.uri)}, request_path({request_var}))')
    if case.resolved_host:
        writer.write(
            f'checks.equal("host", {lit(case.resolved_host)}, {request_var}.url.host)'
        )

    if case.query_params:
        writer.write(f"checks.query_params({request_var}, {lit(case.query_params)})")
    if case.forbid_query_params:
        writer.write(
            f"checks.forbid_query_params({request_var}, {lit(case.forbid_query_params)})"
        )
    if case.require_query_params:
        writer.write(
            f"checks.require_query_params({request_var}, {lit(case.require_query_params)})"
        )
    if settings.unlisted_keys == "forbid":
        allowed = _query_keys(case.query_params) + list(case.require_query_params)
        writer.write(f"checks.only_query_params({request_var}, {lit(allowed)})")

    _write_header_assertions(writer, case, settings, f"{request_var}.headers")
    writer.write(
        f"checks.body({request_var}.content, {lit(case.body)}, "
        f"{lit(case.body_media_type)})"
    )
    writer.write("checks.verify()")


def _write_header_assertions(
    writer: CodeWriter,
    case: HttpMessageTestCase,
    settings: GeneratorSettings,
    headers_expr: str,
) -> None:
    lit = writer.literal
    if case.headers:
        writer.write(f"checks.headers({headers_expr}, {lit(dict(case.headers))})")
    if case.forbid_headers:
        writer.write(f"checks.forbid_headers({headers_expr}, {lit(case.forbid_headers)})")
    if case.require_headers:
        writer.write(
            f"checks.require_headers({headers_expr}, {lit(case.require_headers)})"
        )
    if settings.unlisted_keys == "forbid":
        allowed = list(case.headers) + list(case.require_headers)
        writer.write(f"checks.only_headers({headers_expr}, {lit(allowed)})")


def _query_keys(query_params: list[str]) -> list[str]:
    return [unquote(param.partition("=")[0]) for param in query_params]
