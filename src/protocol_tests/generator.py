"""HTTP protocol test generator.

Generates pytest modules from the ``smithy.test#httpRequestTests`` and
``smithy.test#httpResponseTests`` fixtures attached to a service's
operations and errors.  Each generated test asserts that the client's
serializers build the expected HTTP request, or that its deserializers turn
an HTTP response into the expected output or error, without any network
I/O.

Only fixtures for the selected protocol are rendered.  The output module
is allocated on the first matching fixture, so a protocol without fixtures
produces no file at all.  Generation is deterministic: an unchanged model
always yields byte-identical modules.
"""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path, PurePosixPath
from typing import Iterable

from src.protocol_tests.context import (
    GeneratedFile,
    GenerationContext,
    TestFileAllocator,
)
from src.protocol_tests.extractor import extract_fixtures
from src.protocol_tests.model_loader import ModelIndex
from src.protocol_tests.protocol_filter import should_render
from src.protocol_tests.request_tests import render_request_test
from src.protocol_tests.response_tests import (
    render_error_response_test,
    render_response_test,
)
from src.protocol_tests.symbols import SymbolProvider
from src.shared.config import GeneratorSettings
from src.shared.errors import ConfigurationError

logger = logging.getLogger(__name__)


class ProtocolTestGenerator:
    """Generates one protocol's test module for a service."""

    def __init__(
        self,
        index: ModelIndex,
        settings: GeneratorSettings | None = None,
        service_id: str | None = None,
        allocator: TestFileAllocator | None = None,
    ) -> None:
        self._index = index
        self._settings = settings or GeneratorSettings()
        self._service = index.service(service_id)
        self._symbols = SymbolProvider(self._settings)
        self._allocator = allocator or TestFileAllocator()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self, protocol: str) -> set[GeneratedFile]:
        """Render every fixture of *protocol*; return at most one file.

        Raises
        ------
        DuplicateFixtureError
            When two fixtures map to the same test in the module.
        IncompleteFixtureError
            When a fixture lacks a field the HTTP tests need.
        FixtureParameterError
            When fixture params do not fit the operation's shapes.
        """
        context = GenerationContext(
            index=self._index,
            service=self._service,
            protocol=protocol,
            settings=self._settings,
            symbols=self._symbols,
        )

        for item in extract_fixtures(self._index, self._service):
            context.operation = item.operation
            # 1. Request serialization tests
            for case in item.request_tests:
                if should_render(case, protocol):
                    self._allocator.ensure(context)
                    render_request_test(context, case)
            # 2. Response deserialization tests
            for case in item.response_tests:
                if should_render(case, protocol):
                    self._allocator.ensure(context)
                    render_response_test(context, case)
            # 3. Error discrimination tests
            for error, case in item.error_tests:
                if should_render(case, protocol):
                    context.error = error
                    self._allocator.ensure(context)
                    render_error_response_test(context, case)
            context.error = None

        if context.test_file is None:
            logger.info(
                "No protocol tests for %s on %s", protocol, self._service.shape_id
            )
            return set()

        logger.info(
            "Generated %d protocol tests for %s in %s",
            context.test_file.test_count,
            protocol,
            context.test_file.path,
        )
        return {context.test_file.close()}

    def fixture_counts(self) -> Counter[str]:
        """Count client-side fixtures per protocol across the service."""
        counts: Counter[str] = Counter()
        for item in extract_fixtures(self._index, self._service):
            cases = list(item.request_tests) + list(item.response_tests)
            cases += [case for _, case in item.error_tests]
            for case in cases:
                if should_render(case, case.protocol):
                    counts[case.protocol] += 1
        return counts


def generate(
    index: ModelIndex,
    protocol: str,
    settings: GeneratorSettings | None = None,
    service_id: str | None = None,
) -> set[GeneratedFile]:
    """Generate the protocol test module for *protocol*, if it has fixtures."""
    return ProtocolTestGenerator(index, settings, service_id).generate(protocol)


def generate_all(
    index: ModelIndex,
    protocols: Iterable[str],
    settings: GeneratorSettings | None = None,
    service_id: str | None = None,
) -> dict[str, GeneratedFile]:
    """Generate one module per protocol that has fixtures, keyed by protocol.

    Raises
    ------
    ConfigurationError
        When two protocol ids normalize to the same module name.
    """
    generator = ProtocolTestGenerator(index, settings, service_id)
    files: dict[str, GeneratedFile] = {}
    owners: dict[PurePosixPath, str] = {}
    for protocol in dict.fromkeys(protocols):
        for generated in generator.generate(protocol):
            if generated.path in owners:
                raise ConfigurationError(
                    detail=(
                        f"Protocols {owners[generated.path]} and {protocol} "
                        f"both map to {generated.path}"
                    )
                )
            owners[generated.path] = protocol
            files[protocol] = generated
    return files


def write_generated_files(files: Iterable[GeneratedFile], root: Path | str) -> list[Path]:
    """Write *files* below *root*, replacing earlier generations."""
    written: list[Path] = []
    for generated in sorted(files, key=lambda f: str(f.path)):
        target = Path(root) / generated.path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(generated.contents, encoding="utf-8")
        written.append(target)
        logger.info("Wrote %s", target)
    return written
