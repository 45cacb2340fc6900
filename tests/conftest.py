"""Shared test fixtures for the protocol test generator suite."""
from __future__ import annotations

from typing import Any

import pytest

from src.protocol_tests.model_loader import ModelIndex, parse_model
from src.shared.config import GeneratorSettings
from tests.fixtures import FIXTURES_DIR, load_model_document


@pytest.fixture
def model_document() -> dict[str, Any]:
    """A mutable copy of the sample greeting model."""
    return load_model_document()


@pytest.fixture
def model_index(model_document: dict[str, Any]) -> ModelIndex:
    return parse_model(model_document)


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> GeneratorSettings:
    """Settings pointing generated modules at the sample client."""
    for name in (
        "PROTOCOL_TESTS_CLIENT_PACKAGE",
        "PROTOCOL_TESTS_MODELS_MODULE",
        "PROTOCOL_TESTS_OUTPUT_DIR",
        "PROTOCOL_TESTS_DEFAULT_HOST",
        "PROTOCOL_TESTS_UNLISTED_KEYS",
        "PROTOCOL_TESTS_SKIP_TESTS",
    ):
        monkeypatch.delenv(name, raising=False)
    return GeneratorSettings(client_package="greeting_client")


@pytest.fixture
def client_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make ``greeting_client`` importable for generated modules."""
    monkeypatch.syspath_prepend(str(FIXTURES_DIR))
