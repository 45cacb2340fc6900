"""Test fixtures for protocol test generation.

Provides a sample model and a client to run generated modules against:
- greeting_model.json: Smithy JSON AST with request, response and error
  protocol tests for two protocols
- greeting_client/: hand-written async httpx client for that model
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

FIXTURES_DIR = Path(__file__).parent

REST_JSON = "example.protocol#restJson1"
AWS_JSON = "example.protocol#awsJson1_0"
SERVICE_ID = "example.greeting#GreetingService"

_MODEL_CACHE: dict[str, Any] = {}


def fixture_path(name: str) -> Path:
    """Return the absolute path to a named fixture file."""
    path = FIXTURES_DIR / name
    if not path.exists():
        raise FileNotFoundError(f"Fixture not found: {path}")
    return path


def load_model_document() -> dict[str, Any]:
    """Load a fresh, mutable copy of the sample model document."""
    if "greeting" not in _MODEL_CACHE:
        _MODEL_CACHE["greeting"] = json.loads(
            fixture_path("greeting_model.json").read_text(encoding="utf-8")
        )
    return copy.deepcopy(_MODEL_CACHE["greeting"])
