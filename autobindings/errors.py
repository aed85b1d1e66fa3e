"""Exception types raised by the generator.

Every failure is fatal for the run: the CLI turns an ``AutobindingsError``
into exit code 1, the MCP server into an ``{"error": ...}`` payload.
"""

from __future__ import annotations


class AutobindingsError(Exception):
    """Base class for generator failures."""


class ParseError(AutobindingsError):
    """Raised when a Go source file cannot be read or parsed."""


class TagError(AutobindingsError):
    """Raised when a struct tag uses an unsupported layout."""


class RenderError(AutobindingsError):
    """Raised when a generation unit cannot be rendered from its inputs."""


class FormatError(AutobindingsError):
    """Raised when rendered text is rejected by the formatter."""


class FileWriteError(AutobindingsError):
    """Raised when a generated file cannot be written."""
