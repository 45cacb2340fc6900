"""Generation context and the lazily allocated per-protocol test file."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from src.protocol_tests.model_loader import ModelIndex
from src.protocol_tests.symbols import SymbolProvider
from src.protocol_tests.writer import CodeWriter
from src.shared.config import GeneratorSettings
from src.shared.errors import DuplicateFixtureError, GenerationError
from src.shared.models.smithy import Shape

logger = logging.getLogger(__name__)

_STUB_PATH = Path(__file__).parent / "resources" / "protocol_test_stub.py"
_SEPARATORS = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class GeneratedFile:
    """One finished generated test module."""

    path: PurePosixPath
    contents: str


@dataclass
class TestFile:
    """An open, append-only generated test module."""

    __test__ = False

    path: PurePosixPath
    writer: CodeWriter = field(default_factory=CodeWriter)
    test_names: set[str] = field(default_factory=set)

    def claim_test_name(self, name: str, protocol: str) -> None:
        """Reserve *name*; a second claim is a model-authoring defect."""
        if name in self.test_names:
            raise DuplicateFixtureError(name, protocol)
        self.test_names.add(name)

    @property
    def test_count(self) -> int:
        return len(self.test_names)

    def close(self) -> GeneratedFile:
        return GeneratedFile(path=self.path, contents=self.writer.contents())


@dataclass
class GenerationContext:
    """Everything one generation run threads through the renderers.

    ``test_file`` stays ``None`` until :class:`TestFileAllocator` sees the
    first accepted fixture, so a run without matching fixtures never creates
    a file.
    """

    index: ModelIndex
    service: Shape
    protocol: str
    settings: GeneratorSettings
    symbols: SymbolProvider
    test_file: TestFile | None = None
    operation: Shape | None = None
    error: Shape | None = None

    def require_file(self) -> TestFile:
        """Return the allocated test file.

        Raises
        ------
        GenerationError
            When rendering is attempted before allocation.
        """
        if self.test_file is None:
            raise GenerationError(
                detail=f"No test file allocated for protocol {self.protocol}"
            )
        return self.test_file

    def require_error(self) -> Shape:
        """Return the error shape whose fixtures are being rendered.

        Raises
        ------
        GenerationError
            When no error is being rendered.
        """
        if self.error is None:
            raise GenerationError(detail="No error shape set for error response rendering")
        return self.error


def protocol_test_path(protocol: str, output_dir: str) -> PurePosixPath:
    """``example.protocol#restJson1`` -> ``<output_dir>/test_example_protocol_restjson1.py``."""
    base = _SEPARATORS.sub("_", protocol.lower()).strip("_")
    return PurePosixPath(output_dir) / f"test_{base}.py"


def read_stub() -> str:
    """The static harness preamble shared by every generated test module."""
    return _STUB_PATH.read_text(encoding="utf-8")


class TestFileAllocator:
    """Creates the context's test file on first use and writes its preamble."""

    __test__ = False

    def __init__(self, stub: str | None = None) -> None:
        self._stub = stub if stub is not None else read_stub()

    def ensure(self, context: GenerationContext) -> TestFile:
        if context.test_file is not None:
            return context.test_file

        test_file = TestFile(
            path=protocol_test_path(context.protocol, context.settings.output_dir)
        )
        writer = test_file.writer
        writer.write('"""Generated HTTP protocol tests.')
        writer.write("")
        writer.write(f"Service: {context.service.shape_id}")
        writer.write(f"Protocol: {context.protocol}")
        writer.write("")
        writer.write("Do not edit: regenerate from the model instead.")
        writer.write('"""')
        writer.write("")
        writer.write_raw(self._stub)
        writer.blank_lines(1)
        writer.write("# Client under test")
        for line in context.symbols.client_imports(context.service):
            writer.write(line)
        writer.blank_lines(2)

        context.test_file = test_file
        logger.info(
            "Allocated protocol test file %s for %s", test_file.path, context.protocol
        )
        return test_file
