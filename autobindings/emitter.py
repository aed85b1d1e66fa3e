"""Render and write the generated Go units.

Per struct ``Profile`` the generator emits ``profile_bindings.go``::

    func (p *Profile) FieldMap(request *http.Request) binding.FieldMap {
        return binding.FieldMap{
            &p.Name: "Name",
            &p.Role: binding.Field{...},
        }
    }

and per enum type ``ProtoRole`` of the same package
``protorole_enum_bindings.go`` with a ``MarshalText`` method. All units of a
run are rendered and formatted before the first file is written.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .binders import apply_enum_binders
from .errors import FileWriteError, RenderError
from .go_parser import ParsedSource
from .mapping import RecordMapping, build_record_mapping

DEFAULT_BINDING_IMPORT = "github.com/ykevinc/binding"

_HEADER_COMMENT = (
    "/*",
    "This is an autogenerated file by autobindings",
    "*/",
)

_RE_IDENT = re.compile(r"^[A-Za-z_]\w*$")


@dataclass(frozen=True)
class GenerationUnit:
    """One generated file."""
    filename: str
    text: str
    kind: str  # "bindings" or "enum"

    def to_dict(self) -> dict:
        return {"filename": self.filename, "kind": self.kind, "text": self.text}


def bindings_filename(struct_name: str) -> str:
    return f"{struct_name.lower()}_bindings.go"


def enum_filename(enum_type: str) -> str:
    return f"{enum_type.lower()}_enum_bindings.go"


def _require_identifier(name: str, what: str) -> None:
    if not _RE_IDENT.match(name):
        raise RenderError(f"invalid {what}: {name!r}")


def _preamble(package: str) -> list[str]:
    return [f"package {package}", "", *_HEADER_COMMENT, ""]


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------

def render_bindings_unit(
    package: str,
    record: RecordMapping,
    *,
    binding_import: str = DEFAULT_BINDING_IMPORT,
) -> str:
    """Render the FieldMap method of one struct."""
    _require_identifier(package, "package name")
    _require_identifier(record.struct.name, "struct name")
    if not binding_import:
        raise RenderError("empty binding import path")

    imports = [binding_import, "net/http"]
    if record.needs_collection_support:
        imports.append("strings")

    lines = _preamble(package)
    lines.append("import (")
    lines.extend(f'\t"{path}"' for path in sorted(imports))
    lines.append(")")
    lines.append("")

    receiver = record.receiver
    lines.append(
        f"func ({receiver} *{record.struct.name}) "
        "FieldMap(request *http.Request) binding.FieldMap {"
    )
    if len(record.mapping) == 0:
        lines.append("\treturn binding.FieldMap{}")
    else:
        lines.append("\treturn binding.FieldMap{")
        for field_name, entry in record.mapping.items():
            expression = entry.render(receiver, indent=2)
            lines.append(f"\t\t&{receiver}.{field_name}: {expression},")
        lines.append("\t}")
    lines.append("}")
    return "\n".join(lines) + "\n"


def render_enum_unit(package: str, enum_type: str) -> str:
    """Render the MarshalText method of one enum type."""
    _require_identifier(package, "package name")
    _require_identifier(enum_type, "enum type")

    lines = _preamble(package)
    lines.extend([
        f"func (e {enum_type}) MarshalText() ([]byte, error) {{",
        "\treturn []byte(e.String()), nil",
        "}",
    ])
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def build_mappings(parsed: ParsedSource) -> list[RecordMapping]:
    """Map every struct of a parsed file, enum binders applied."""
    return [
        apply_enum_binders(build_record_mapping(s, parsed.package))
        for s in parsed.structs
    ]


def render_record(
    package: str,
    record: RecordMapping,
    formatter,
    *,
    binding_import: str = DEFAULT_BINDING_IMPORT,
) -> GenerationUnit:
    filename = bindings_filename(record.struct.name)
    text = render_bindings_unit(package, record, binding_import=binding_import)
    return GenerationUnit(filename, formatter.format(text, name=filename), "bindings")


def generate_units(
    parsed: ParsedSource,
    formatter,
    *,
    preview: bool = False,
    binding_import: str = DEFAULT_BINDING_IMPORT,
) -> list[GenerationUnit]:
    """Render and format every unit of a parsed file.

    In preview mode only the first struct is mapped and rendered.
    Enum units are produced once per enum type declared in the current
    package; Go does not allow methods on types of other packages.
    """
    units: list[GenerationUnit] = []
    seen_enums: set[str] = set()

    for struct in parsed.structs:
        record = apply_enum_binders(build_record_mapping(struct, parsed.package))
        bindings = render_record(
            parsed.package, record, formatter, binding_import=binding_import,
        )
        if preview:
            return [bindings]

        for binding in record.enums:
            enum_type = binding.enum_type
            if enum_type in seen_enums or "." in enum_type:
                continue
            seen_enums.add(enum_type)
            filename = enum_filename(enum_type)
            text = render_enum_unit(parsed.package, enum_type)
            units.append(GenerationUnit(filename, formatter.format(text, name=filename), "enum"))

        units.append(bindings)

    return units


def write_units(units: list[GenerationUnit], output_dir: str | Path = ".") -> list[Path]:
    """Write units into `output_dir`, one file each."""
    output_dir = Path(output_dir)
    written: list[Path] = []
    for unit in units:
        path = output_dir / unit.filename
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(unit.text, encoding="utf-8")
        except OSError as e:
            raise FileWriteError(f"Cannot write {path}: {e}") from e
        written.append(path)
    return written
