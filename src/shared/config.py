"""Generator configuration management using pydantic-settings."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from src.shared.errors import ConfigurationError


class GeneratorSettings(BaseSettings):
    """Settings for one protocol test generation run."""
    log_level: str = Field(default="info", validation_alias="PROTOCOL_TESTS_LOG_LEVEL")
    client_package: str = Field(
        default="client", validation_alias="PROTOCOL_TESTS_CLIENT_PACKAGE"
    )
    models_module: str = Field(
        default="models", validation_alias="PROTOCOL_TESTS_MODELS_MODULE"
    )
    output_dir: str = Field(
        default="tests/functional", validation_alias="PROTOCOL_TESTS_OUTPUT_DIR"
    )
    default_host: str = Field(
        default="example.com", validation_alias="PROTOCOL_TESTS_DEFAULT_HOST"
    )
    # Query parameters and headers not named by a fixture are either ignored
    # or asserted absent.
    unlisted_keys: Literal["ignore", "forbid"] = Field(
        default="ignore", validation_alias="PROTOCOL_TESTS_UNLISTED_KEYS"
    )
    skip_tests: list[str] = Field(
        default_factory=list, validation_alias="PROTOCOL_TESTS_SKIP_TESTS"
    )

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


def load_settings(
    path: Path | str | None = None, **overrides: Any
) -> GeneratorSettings:
    """Load generator settings from a YAML file.

    Missing keys fall back to environment variables and then defaults.
    Unknown keys are silently ignored so that forward-compatible config
    files work.  Keyword *overrides* that are not ``None`` win over both.

    Raises:
        ConfigurationError: The file is not a mapping or holds invalid values.
    """
    raw: dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ConfigurationError(
                    detail=f"Config file {path} must contain a mapping"
                )
            raw.update(loaded)

    raw.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return GeneratorSettings(**raw)
    except ValidationError as exc:
        raise ConfigurationError(detail=f"Invalid generator settings: {exc}") from exc
