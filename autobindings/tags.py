"""Interpret Go struct tags.

Two tag keys matter:

- ``json:"name,opts"`` gives the external key of a field; ``json:"-"``
  removes the field from the mapping.
- ``protobuf:"...,enum=pkg.Type"`` marks the field as a protobuf enum whose
  textual form is looked up in ``Type_value``.

Tags are split on whitespace, so quoted values containing spaces are not
supported. The enum type name runs to the end of its segment; a segment with
more options after ``enum=`` is rejected.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .errors import TagError
from .go_parser import GoField

_RE_ENUM_TYPE = re.compile(r"^[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)?$")


@dataclass(frozen=True)
class EnumBinding:
    """A field bound to a protobuf enum name/value table."""
    field_name: str
    enum_type: str  # unqualified when declared in the current package
    is_collection: bool = False


@dataclass(frozen=True)
class FieldTag:
    """Result of interpreting one field's tag."""
    external_key: Optional[str]  # None when the field is excluded
    enum: Optional[EnumBinding] = None

    @property
    def excluded(self) -> bool:
        return self.external_key is None


def tag_segments(raw: str) -> list[str]:
    """Split a raw tag literal into ``key:"value"`` segments."""
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] == "`":
        raw = raw[1:-1]
    elif len(raw) >= 2 and raw[0] == raw[-1] == '"':
        raw = raw[1:-1].replace('\\"', '"')
    return raw.split()


def lookup(raw: str, key: str) -> Optional[str]:
    """Return the unquoted value of `key` in a raw tag, or None."""
    prefix = key + ":"
    for segment in tag_segments(raw):
        if segment.startswith(prefix):
            return segment[len(prefix):].strip('"`')
    return None


def interpret_field(field: GoField, package: str) -> FieldTag:
    """Derive the external key and optional enum binding of a field."""
    if field.tag is None:
        return FieldTag(external_key=field.name)

    external_key: Optional[str] = field.name
    json_value = lookup(field.tag, "json")
    if json_value is not None:
        if json_value == "-":
            external_key = None
        else:
            # options after the comma (omitempty, string) do not rename
            external_key = json_value.split(",", 1)[0] or field.name

    return FieldTag(
        external_key=external_key,
        enum=_enum_binding(field, package),
    )


def _enum_binding(field: GoField, package: str) -> Optional[EnumBinding]:
    value = lookup(field.tag, "protobuf")
    if value is None:
        return None
    pos = value.find("enum=")
    if pos < 0:
        return None

    enum_type = value[pos + len("enum="):]
    if not _RE_ENUM_TYPE.match(enum_type):
        raise TagError(
            f"field {field.name}: cannot read enum type from {value!r}; "
            "enum= must be the last protobuf option"
        )

    if package and enum_type.startswith(package + "."):
        enum_type = enum_type[len(package) + 1:]

    return EnumBinding(
        field_name=field.name,
        enum_type=enum_type,
        is_collection=field.type.is_collection,
    )
