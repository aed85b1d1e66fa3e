"""MCP server exposing the autobindings generator to AI assistants.

Usage:
    python -m autobindings.server --formatter gofmt

Claude Code config (.mcp.json):
    {
      "mcpServers": {
        "autobindings": {
          "command": "autobindings-mcp",
          "args": ["--formatter", "syntax"]
        }
      }
    }
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from mcp.server import FastMCP

from .binders import apply_enum_binders
from .emitter import (
    DEFAULT_BINDING_IMPORT,
    build_mappings,
    generate_units,
    render_record,
    write_units,
)
from .errors import AutobindingsError
from .go_parser import parse_source_file
from .gofmt_client import FORMATTERS, make_formatter
from .mapping import build_record_mapping

# ---------------------------------------------------------------------------
# Global state, set once at startup
# ---------------------------------------------------------------------------

_formatter_kind = "gofmt"
_gofmt = "gofmt"
_binding_import = DEFAULT_BINDING_IMPORT

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _json(obj: Any) -> str:
    return json.dumps(obj, indent=2)


def _error(msg: str, **extra: Any) -> str:
    return _json({"error": msg, **extra})


def _formatter():
    return make_formatter(_formatter_kind, gofmt=_gofmt)

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------

server = FastMCP(
    name="autobindings",
    instructions="""\
autobindings MCP Server: generates binding.FieldMap accessors for Go structs.

For every struct in a Go file the generator writes `<struct>_bindings.go`
with a `FieldMap(request *http.Request) binding.FieldMap` method. Fields map
to their `json` tag name (or their own name); `json:"-"` drops a field.
Fields tagged `protobuf:"...,enum=pkg.Type"` get a binder that looks the form
value up in `Type_value`; slice fields accept comma-separated values. Each
enum type of the file's package also gets `<enum>_enum_bindings.go` with a
`MarshalText` method.

## Typical Workflow

1. `list_structs`: see what the generator will pick up
2. `get_field_mappings`: check external keys and enum binders per field
3. `preview_bindings`: render one struct without writing anything
4. `generate_bindings`: write all files
""",
)


@server.tool()
def list_structs(path: str) -> str:
    """List the structs and fields of a Go source file.

    Args:
        path: Path to the Go file.

    Returns:
        JSON with the package name and every struct with its fields and tags.
    """
    try:
        parsed = parse_source_file(path)
    except AutobindingsError as e:
        return _error(str(e))
    return _json(parsed.to_dict())


@server.tool()
def get_field_mappings(path: str) -> str:
    """Show the field mapping the generator derives for each struct.

    Args:
        path: Path to the Go file.

    Returns:
        JSON with, per struct, each mapped field's external key and binder
        kind (scalar or collection) when the field is enum-bound.
    """
    try:
        parsed = parse_source_file(path)
        records = build_mappings(parsed)
    except AutobindingsError as e:
        return _error(str(e))

    return _json({
        "package": parsed.package,
        "structs": [
            {
                "name": r.struct.name,
                "receiver": r.receiver,
                "mappings": r.mapping.to_dict(),
                "excluded": [
                    f.name for f in r.struct.fields if f.name not in r.mapping
                ],
                "enums": [
                    {
                        "field": e.field_name,
                        "enum_type": e.enum_type,
                        "is_collection": e.is_collection,
                    }
                    for e in r.enums
                ],
            }
            for r in records
        ],
    })


@server.tool()
def preview_bindings(path: str, struct: str = "") -> str:
    """Render the bindings file of one struct without writing it.

    Args:
        path: Path to the Go file.
        struct: Struct name. Empty string picks the first struct in the file.

    Returns:
        JSON with the generated filename and text.
    """
    try:
        parsed = parse_source_file(path)
        if not struct:
            units = generate_units(
                parsed, _formatter(), preview=True, binding_import=_binding_import,
            )
            if not units:
                return _error(f"No structs found in {path}")
            return _json({"ok": True, **units[0].to_dict()})

        found = parsed.struct(struct)
        if found is None:
            return _error(f"Struct '{struct}' not found in {path}")
        record = apply_enum_binders(build_record_mapping(found, parsed.package))
        unit = render_record(
            parsed.package, record, _formatter(), binding_import=_binding_import,
        )
    except AutobindingsError as e:
        return _error(str(e))
    return _json({"ok": True, **unit.to_dict()})


@server.tool()
def generate_bindings(path: str, output_dir: str = "") -> str:
    """Generate and write all bindings and enum files for a Go file.

    Args:
        path: Path to the Go file.
        output_dir: Destination directory. Empty string uses the directory
            of the input file.

    Returns:
        JSON with the list of written files.
    """
    source = Path(path)
    target = Path(output_dir) if output_dir else source.resolve().parent
    try:
        parsed = parse_source_file(source)
        units = generate_units(parsed, _formatter(), binding_import=_binding_import)
        written = write_units(units, target)
    except AutobindingsError as e:
        return _error(str(e))
    return _json({
        "ok": True,
        "package": parsed.package,
        "files": [str(p) for p in written],
        "count": len(written),
    })


def main():
    parser = argparse.ArgumentParser(
        description="MCP server wrapping the autobindings generator",
    )
    parser.add_argument(
        "--formatter",
        choices=FORMATTERS,
        default="gofmt",
        help="Formatter applied to generated units (default: gofmt)",
    )
    parser.add_argument(
        "--gofmt",
        default="gofmt",
        help="Path to the gofmt executable (default: gofmt on PATH)",
    )
    parser.add_argument(
        "--binding-import",
        default=DEFAULT_BINDING_IMPORT,
        help=f"Import path of the binding package (default: {DEFAULT_BINDING_IMPORT})",
    )

    args = parser.parse_args()

    global _formatter_kind, _gofmt, _binding_import
    _formatter_kind = args.formatter
    _gofmt = args.gofmt
    _binding_import = args.binding_import
    print(f"autobindings MCP server initialized (formatter: {_formatter_kind})", file=sys.stderr)

    server.run("stdio")


if __name__ == "__main__":
    main()
