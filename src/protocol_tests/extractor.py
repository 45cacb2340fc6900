"""Collects the protocol test fixtures attached to a service's operations.

Traversal is pure and ordered: operations in containment order (see
:meth:`ModelIndex.operations_of`), fixtures in declaration order, errors in
the order the operation declares them.  Identical models therefore always
yield identical sequences.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from src.protocol_tests.model_loader import ModelIndex
from src.shared.errors import ModelLoadError
from src.shared.models.fixtures import (
    REQUEST_TESTS_TRAIT,
    RESPONSE_TESTS_TRAIT,
    HttpRequestTestCase,
    HttpResponseTestCase,
)
from src.shared.models.smithy import Shape

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractedOperation:
    """The fixtures found on one operation and on its errors."""

    operation: Shape
    request_tests: tuple[HttpRequestTestCase, ...] = ()
    response_tests: tuple[HttpResponseTestCase, ...] = ()
    error_tests: tuple[tuple[Shape, HttpResponseTestCase], ...] = ()

    @property
    def fixture_count(self) -> int:
        return len(self.request_tests) + len(self.response_tests) + len(self.error_tests)


def extract_fixtures(index: ModelIndex, service: Shape) -> list[ExtractedOperation]:
    """Return the fixtures of every operation contained in *service*."""
    extracted: list[ExtractedOperation] = []
    for operation in index.operations_of(service):
        error_tests = tuple(
            (error, case)
            for error in index.errors_of(operation)
            for case in response_tests_of(error)
        )
        item = ExtractedOperation(
            operation=operation,
            request_tests=request_tests_of(operation),
            response_tests=response_tests_of(operation),
            error_tests=error_tests,
        )
        logger.debug(
            "Found %d protocol tests on %s", item.fixture_count, operation.shape_id
        )
        extracted.append(item)
    return extracted


def request_tests_of(shape: Shape) -> tuple[HttpRequestTestCase, ...]:
    return tuple(
        _parse_case(HttpRequestTestCase, shape, raw)
        for raw in _trait_cases(shape, REQUEST_TESTS_TRAIT)
    )


def response_tests_of(shape: Shape) -> tuple[HttpResponseTestCase, ...]:
    return tuple(
        _parse_case(HttpResponseTestCase, shape, raw)
        for raw in _trait_cases(shape, RESPONSE_TESTS_TRAIT)
    )


def _trait_cases(shape: Shape, trait: str) -> list[Any]:
    cases = shape.traits.get(trait) or []
    if not isinstance(cases, list):
        raise ModelLoadError(detail=f"{trait} on {shape.shape_id} must be a list")
    return cases


def _parse_case(case_type: type, shape: Shape, raw: Any) -> Any:
    try:
        return case_type.model_validate(raw)
    except ValidationError as exc:
        raise ModelLoadError(
            detail=f"Malformed protocol test on {shape.shape_id}: {exc}"
        ) from exc
