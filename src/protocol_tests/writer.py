"""Indentation-scoped source writer for generated Python modules."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

_INDENT = "    "


class CodeWriter:
    """Append-only line buffer with block indentation.

    Lines are never rewritten once emitted; :meth:`contents` renders the
    buffer with a single trailing newline.
    """

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._level = 0

    def write(self, line: str = "") -> CodeWriter:
        """Write one line (or several, split on newlines) at the current level."""
        for part in line.split("\n"):
            self._lines.append(f"{_INDENT * self._level}{part}" if part else "")
        return self

    def write_raw(self, text: str) -> CodeWriter:
        """Write *text* verbatim, ignoring the current indentation."""
        self._lines.extend(text.rstrip("\n").split("\n"))
        return self

    def write_comment(self, text: str) -> CodeWriter:
        for part in text.strip().splitlines():
            self.write(f"# {part}".rstrip())
        return self

    def indent(self) -> CodeWriter:
        self._level += 1
        return self

    def dedent(self) -> CodeWriter:
        if self._level == 0:
            raise ValueError("Cannot dedent below column zero")
        self._level -= 1
        return self

    @contextmanager
    def block(self, header: str, close: str | None = None) -> Iterator[CodeWriter]:
        """Write *header*, indent the body, then write *close* if given.

        Usage::

            with writer.block("def test_x():"):
                writer.write("assert True")
        """
        self.write(header)
        self.indent()
        try:
            yield self
        finally:
            self.dedent()
        if close is not None:
            self.write(close)

    def blank_lines(self, count: int = 2) -> CodeWriter:
        """Ensure the buffer ends with exactly *count* blank lines."""
        while self._lines and self._lines[-1] == "":
            self._lines.pop()
        self._lines.extend([""] * count)
        return self

    @staticmethod
    def literal(value: Any) -> str:
        """Quote a plain value as a Python literal."""
        return repr(value)

    def contents(self) -> str:
        lines = list(self._lines)
        while lines and lines[-1] == "":
            lines.pop()
        return "\n".join(lines) + "\n"
