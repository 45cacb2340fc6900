"""Custom exception classes for protocol test generation."""
from __future__ import annotations


class GenerationError(Exception):
    """Base generation error.

    Every subclass marks a defect in the model or configuration that must
    reach the model author, so none of them are caught inside the generator.
    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class ModelLoadError(GenerationError):
    """The model document could not be read or parsed."""

    def __init__(self, detail: str = "Model could not be loaded") -> None:
        super().__init__(detail=detail)


class UnknownShapeError(GenerationError):
    """A shape id was referenced but never defined."""

    def __init__(self, shape_id: str) -> None:
        self.shape_id = shape_id
        super().__init__(detail=f"Unknown shape: {shape_id}")


class DuplicateFixtureError(GenerationError):
    """Two fixtures would produce the same test in one generated file."""

    def __init__(self, test_name: str, protocol: str) -> None:
        self.test_name = test_name
        self.protocol = protocol
        super().__init__(
            detail=f"Duplicate protocol test '{test_name}' for protocol {protocol}"
        )


class IncompleteFixtureError(GenerationError):
    """A fixture lacks an expectation field its protocol requires."""

    def __init__(self, fixture_id: str, field: str) -> None:
        self.fixture_id = fixture_id
        self.field = field
        super().__init__(
            detail=f"Protocol test '{fixture_id}' is missing required field '{field}'"
        )


class FixtureParameterError(GenerationError):
    """Fixture params do not fit the shape they are rendered against."""

    def __init__(self, detail: str = "Invalid fixture parameters") -> None:
        super().__init__(detail=detail)


class ConfigurationError(GenerationError):
    """Settings or command-line options are unusable."""

    def __init__(self, detail: str = "Invalid configuration") -> None:
        super().__init__(detail=detail)
