"""Formatters applied to every generated unit before it is written.

``GofmtFormatter`` pipes the text through the ``gofmt`` executable, which
both canonicalizes layout and rejects structurally invalid code.
``SyntaxCheckFormatter`` only re-parses the text with tree-sitter-go; it is
meant for machines without a Go toolchain and leaves the layout untouched.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass

from .errors import FormatError
from .go_parser import find_syntax_error, new_parser

FORMATTERS = ("gofmt", "syntax")


# ---------------------------------------------------------------------------
# Result dataclass
# ---------------------------------------------------------------------------

@dataclass
class FormatResult:
    """Result of running gofmt on one unit."""
    ok: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    @property
    def error(self) -> str:
        return self.stderr.strip() or f"gofmt failed with exit code {self.returncode}"


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------

class GofmtFormatter:
    """Subprocess wrapper for gofmt."""

    def __init__(self, gofmt: str = "gofmt", *, timeout: int = 30):
        self.gofmt = gofmt
        self.timeout = timeout

    def _run(self, text: str) -> FormatResult:
        try:
            proc = subprocess.run(
                [self.gofmt],
                input=text,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            return FormatResult(
                ok=False,
                stderr=f"Command not found: {self.gofmt}",
                returncode=-1,
            )
        except subprocess.TimeoutExpired:
            return FormatResult(
                ok=False,
                stderr=f"Command timed out after {self.timeout}s",
                returncode=-1,
            )

        return FormatResult(
            ok=proc.returncode == 0,
            stdout=proc.stdout,
            stderr=proc.stderr,
            returncode=proc.returncode,
        )

    def format(self, text: str, *, name: str = "") -> str:
        result = self._run(text)
        if not result.ok:
            raise FormatError(f"{name or '<unit>'}: {result.error}")
        return result.stdout


class SyntaxCheckFormatter:
    """Reject text that tree-sitter-go cannot parse; otherwise return it as is."""

    def format(self, text: str, *, name: str = "") -> str:
        tree = new_parser().parse(text.encode("utf-8"))
        if tree.root_node.has_error:
            bad = find_syntax_error(tree.root_node) or tree.root_node
            row, column = bad.start_point
            raise FormatError(f"{name or '<unit>'}:{row + 1}:{column + 1}: syntax error")
        return text if text.endswith("\n") else text + "\n"


def make_formatter(kind: str = "gofmt", *, gofmt: str = "gofmt"):
    """Build the formatter selected on the command line."""
    if kind == "gofmt":
        return GofmtFormatter(gofmt)
    if kind == "syntax":
        return SyntaxCheckFormatter()
    raise ValueError(f"Unknown formatter: {kind} (expected one of {', '.join(FORMATTERS)})")
