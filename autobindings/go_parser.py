"""Parse Go source files to extract package name and struct declarations.

Uses tree-sitter-go, so only the shapes the generator cares about are read:
- Package: ``package mypkg``
- Structs: ``type Name struct { ... }``, alone or inside a ``type ( ... )`` group
- Fields: ``Name Type `tag```; ``A, B Type`` yields one field per name;
  embedded fields (no name) are dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from .errors import ParseError

GO_LANGUAGE = Language(tree_sitter_go.language())

_COLLECTION_TYPES = ("slice_type", "array_type")


@dataclass(frozen=True)
class GoType:
    """Declared type of a struct field."""
    text: str
    is_collection: bool = False
    element: str = ""  # element type text for slices and arrays


@dataclass(frozen=True)
class GoField:
    """A named struct field."""
    name: str
    type: GoType
    tag: Optional[str] = None  # raw literal, delimiters included


@dataclass(frozen=True)
class GoStruct:
    """A top-level struct type declaration."""
    name: str
    fields: tuple[GoField, ...] = ()


@dataclass
class ParsedSource:
    """All extracted information from one Go source file."""
    path: str = ""
    package: str = ""
    structs: list[GoStruct] = field(default_factory=list)

    def struct(self, name: str) -> Optional[GoStruct]:
        for s in self.structs:
            if s.name == name:
                return s
        return None

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "package": self.package,
            "struct_count": len(self.structs),
            "structs": [
                {
                    "name": s.name,
                    "fields": [
                        {
                            "name": f.name,
                            "type": f.type.text,
                            "is_collection": f.type.is_collection,
                            "element": f.type.element,
                            "tag": f.tag,
                        }
                        for f in s.fields
                    ],
                }
                for s in self.structs
            ],
        }


# ---------------------------------------------------------------------------
# tree-sitter helpers
# ---------------------------------------------------------------------------

def new_parser() -> Parser:
    """Return a tree-sitter parser for Go."""
    return Parser(GO_LANGUAGE)


def find_syntax_error(node: Node) -> Optional[Node]:
    """Return the first ERROR or MISSING node below `node`, if any."""
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = find_syntax_error(child)
            if found is not None:
                return found
    return None


def _text(node: Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8")


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def parse_source(text: str, *, path: str = "") -> ParsedSource:
    """Parse Go source text and extract its package name and structs."""
    source = text.encode("utf-8")
    tree = new_parser().parse(source)
    root = tree.root_node

    if root.has_error:
        bad = find_syntax_error(root) or root
        row, column = bad.start_point
        where = f"{path}:" if path else "line "
        raise ParseError(f"{where}{row + 1}:{column + 1}: syntax error")

    result = ParsedSource(path=path)

    for child in root.named_children:
        if child.type == "package_clause":
            for ident in child.named_children:
                if ident.type == "package_identifier":
                    result.package = _text(ident, source)
        elif child.type == "type_declaration":
            for spec in child.named_children:
                struct = _parse_type_spec(spec, source)
                if struct is not None:
                    result.structs.append(struct)

    if not result.package:
        raise ParseError(f"{path or '<source>'}: missing package clause")

    return result


def _parse_type_spec(spec: Node, source: bytes) -> Optional[GoStruct]:
    """Return the struct declared by a type_spec, or None for other kinds."""
    # type_alias (type A = B) is a separate node kind and never matches
    if spec.type != "type_spec":
        return None
    type_node = spec.child_by_field_name("type")
    if type_node is None or type_node.type != "struct_type":
        return None

    name = _text(spec.child_by_field_name("name"), source)
    fields: list[GoField] = []
    for body in type_node.named_children:
        if body.type == "field_declaration_list":
            for decl in body.named_children:
                if decl.type == "field_declaration":
                    fields.extend(_parse_field_declaration(decl, source))
    return GoStruct(name=name, fields=tuple(fields))


def _parse_field_declaration(decl: Node, source: bytes) -> list[GoField]:
    names = decl.children_by_field_name("name")
    if not names:
        return []

    type_node = decl.child_by_field_name("type")
    tag_node = decl.child_by_field_name("tag")
    go_type = _parse_type(type_node, source)
    tag = _text(tag_node, source) if tag_node is not None else None

    return [GoField(name=_text(n, source), type=go_type, tag=tag) for n in names]


def _parse_type(node: Node, source: bytes) -> GoType:
    if node.type in _COLLECTION_TYPES:
        element = node.child_by_field_name("element")
        return GoType(
            text=_text(node, source),
            is_collection=True,
            element=_text(element, source) if element is not None else "",
        )
    return GoType(text=_text(node, source))


def parse_source_file(path: str | Path) -> ParsedSource:
    """Parse a Go source file from disk."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"Cannot read {path}: {e}") from e
    return parse_source(text, path=str(path))
