"""Rich-based terminal output for the protocol test CLI.

Uses a module-level :class:`~rich.console.Console` singleton so that every
command formats output the same way.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from src.protocol_tests.context import GeneratedFile

# ---------------------------------------------------------------------------
# Module-level Console singleton
# ---------------------------------------------------------------------------

_console = Console()


def print_generation_table(
    files: dict[str, GeneratedFile | None], root: Path | None = None
) -> None:
    """Print one row per requested protocol with its module and test count."""
    table = Table(title="Protocol tests", show_lines=False)
    table.add_column("Protocol", style="cyan")
    table.add_column("File")
    table.add_column("Tests", justify="right")

    for protocol, generated in files.items():
        if generated is None:
            table.add_row(protocol, Text("no fixtures", style="dim"), "0")
            continue
        path = str(Path(root) / generated.path) if root is not None else str(generated.path)
        table.add_row(protocol, path, str(count_tests(generated)))

    _console.print(table)


def print_fixture_counts(service_id: str, counts: Counter[str]) -> None:
    table = Table(title=f"Fixtures on {service_id}")
    table.add_column("Protocol", style="cyan")
    table.add_column("Fixtures", justify="right")
    for protocol, count in sorted(counts.items()):
        table.add_row(protocol, str(count))
    if not counts:
        table.add_row(Text("none", style="dim"), "0")
    _console.print(table)


def print_error_panel(error: str | Exception) -> None:
    """Print a red panel describing a fatal generation error."""
    _console.print(
        Panel(
            Text(str(error), style="bold red"),
            title="Protocol test generation failed",
            border_style="red",
        )
    )


def count_tests(generated: GeneratedFile) -> int:
    """Count the ``async def test_*`` functions in a generated module."""
    return sum(
        1 for line in generated.contents.splitlines() if line.startswith("async def test_")
    )
