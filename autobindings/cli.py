"""Command-line front end.

Usage:
    autobindings -file profile.go            # writes *_bindings.go into cwd
    autobindings -file profile.go -print     # prints the first struct only
    python -m autobindings profile.go --formatter syntax --output-dir gen/
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO

from .emitter import DEFAULT_BINDING_IMPORT, generate_units, write_units
from .errors import AutobindingsError
from .go_parser import parse_source_file
from .gofmt_client import FORMATTERS, make_formatter

USAGE = "Usage : autobindings -file {file_name}\nExample: autobindings -file file.go"


@dataclass
class GeneratorOptions:
    """Settings of one generator run."""
    source: Optional[Path] = None
    print_only: bool = False
    output_dir: Path = Path(".")
    formatter: str = "gofmt"
    gofmt: str = "gofmt"
    binding_import: str = DEFAULT_BINDING_IMPORT


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autobindings",
        description="Generate binding.FieldMap accessors for the structs of a Go file",
    )
    parser.add_argument("source", nargs="?", type=Path, help="Input Go file")
    parser.add_argument(
        "-file", "--file",
        dest="file",
        type=Path,
        default=None,
        help="Input Go file (same as the positional argument)",
    )
    parser.add_argument(
        "-print", "--print",
        dest="print_only",
        action="store_true",
        help="Print the first struct's bindings to stdout instead of writing files",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory for generated files (default: current directory)",
    )
    parser.add_argument(
        "--formatter",
        choices=FORMATTERS,
        default="gofmt",
        help="gofmt (default) or syntax (tree-sitter check only, no Go toolchain needed)",
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
    return parser


def parse_options(argv: Optional[list[str]] = None) -> GeneratorOptions:
    args = build_arg_parser().parse_args(argv)
    return GeneratorOptions(
        source=args.file or args.source,
        print_only=args.print_only,
        output_dir=args.output_dir,
        formatter=args.formatter,
        gofmt=args.gofmt,
        binding_import=args.binding_import,
    )


def run(options: GeneratorOptions, *, out: Optional[TextIO] = None) -> list[Path]:
    """Generate the units for `options.source`; return the written paths."""
    out = out or sys.stdout
    parsed = parse_source_file(options.source)
    print(f"Parsed {len(parsed.structs)} structs from {parsed.path}", file=sys.stderr)

    formatter = make_formatter(options.formatter, gofmt=options.gofmt)
    units = generate_units(
        parsed,
        formatter,
        preview=options.print_only,
        binding_import=options.binding_import,
    )

    if options.print_only:
        for unit in units:
            out.write(unit.text)
        return []

    written = write_units(units, options.output_dir)
    for path in written:
        print(f"  Wrote {path}", file=sys.stderr)
    return written


def main(argv: Optional[list[str]] = None) -> int:
    options = parse_options(argv)

    if options.source is None:
        print(USAGE)
        return 0

    try:
        run(options)
    except AutobindingsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
