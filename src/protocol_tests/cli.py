"""Command-line entry point for the protocol test generator.

Thin adapter around :func:`src.protocol_tests.generator.generate_all`:
loads the model and settings, writes the generated modules, and reports
the outcome.  Generation errors exit with status 1.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from src.protocol_tests import display
from src.protocol_tests.generator import (
    ProtocolTestGenerator,
    generate_all,
    write_generated_files,
)
from src.protocol_tests.model_loader import load_model
from src.shared.config import load_settings
from src.shared.errors import GenerationError
from src.shared.logging import new_run_id, setup_logging

logger = logging.getLogger(__name__)

__version__ = "0.1.0"

app = typer.Typer(
    name="protocol-tests",
    help="Generate HTTP protocol conformance tests from an API model.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"protocol-tests {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Generate HTTP protocol conformance tests from an API model."""


@app.command()
def generate(
    model: Path = typer.Argument(..., help="Smithy JSON AST model (.json, .yaml)."),
    protocol: List[str] = typer.Option(
        ..., "--protocol", "-p", help="Protocol shape id; repeat for several."
    ),
    service: Optional[str] = typer.Option(
        None, "--service", "-s", help="Service shape id when the model has several."
    ),
    output_dir: Optional[str] = typer.Option(
        None, "--output", "-o", help="Directory for generated modules, relative to --root."
    ),
    client_package: Optional[str] = typer.Option(
        None, "--client-package", help="Import name of the generated client."
    ),
    root: Path = typer.Option(Path("."), "--root", help="Project root to write into."),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML settings file."
    ),
) -> None:
    """Generate one pytest module per protocol that has fixtures."""
    try:
        settings = load_settings(
            config, output_dir=output_dir, client_package=client_package
        )
        setup_logging("protocol-tests", settings.log_level, logger_name="src")
        run_id = new_run_id()
        logger.info("Starting protocol test generation run %s", run_id)

        index = load_model(model)
        generated = generate_all(index, protocol, settings, service)
        write_generated_files(generated.values(), root)
    except GenerationError as exc:
        display.print_error_panel(exc)
        raise typer.Exit(code=1) from exc

    results = {name: generated.get(name) for name in dict.fromkeys(protocol)}
    display.print_generation_table(results, root)


@app.command()
def fixtures(
    model: Path = typer.Argument(..., help="Smithy JSON AST model (.json, .yaml)."),
    service: Optional[str] = typer.Option(
        None, "--service", "-s", help="Service shape id when the model has several."
    ),
) -> None:
    """List client-side protocol fixtures per protocol."""
    try:
        index = load_model(model)
        generator = ProtocolTestGenerator(index, service_id=service)
        service_id = index.service(service).shape_id
        counts = generator.fixture_counts()
    except GenerationError as exc:
        display.print_error_panel(exc)
        raise typer.Exit(code=1) from exc

    display.print_fixture_counts(service_id, counts)


if __name__ == "__main__":
    app()
