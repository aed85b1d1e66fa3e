"""Build the field-to-external-key mapping of a struct.

The mapping is filled in two stages. ``build_record_mapping`` stores a plain
``KeyEntry`` for every field that is not excluded by its tag; afterwards the
binder stage replaces the entry of each enum-bound field through
``FieldMapping.override``. Entries are never merged.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, Union

from .go_parser import GoStruct
from .tags import EnumBinding, interpret_field

if TYPE_CHECKING:
    from .binders import EnumBinder


def go_string(value: str) -> str:
    """Quote `value` as a Go interpreted string literal."""
    return json.dumps(value, ensure_ascii=False)


@dataclass(frozen=True)
class KeyEntry:
    """A field mapped to a literal external key."""
    key: str

    def render(self, receiver: str, indent: int = 0) -> str:
        return go_string(self.key)


@dataclass(frozen=True)
class BinderEntry:
    """A field mapped to a synthesized enum binder."""
    binder: "EnumBinder"

    def render(self, receiver: str, indent: int = 0) -> str:
        return self.binder.render(receiver, indent)


MappingEntry = Union[KeyEntry, BinderEntry]


class FieldMapping:
    """Field name -> emission entry, in field declaration order."""

    def __init__(self) -> None:
        self._entries: dict[str, MappingEntry] = {}

    def set_key(self, field_name: str, key: str) -> None:
        self._entries[field_name] = KeyEntry(key)

    def override(self, field_name: str, binder: "EnumBinder") -> None:
        """Replace the entry of an already mapped field with a binder."""
        if field_name not in self._entries:
            raise KeyError(f"field {field_name} is not mapped")
        self._entries[field_name] = BinderEntry(binder)

    def get(self, field_name: str) -> MappingEntry | None:
        return self._entries.get(field_name)

    def key_for(self, field_name: str) -> str:
        """Return the external key of a field, looking through binders."""
        entry = self._entries[field_name]
        if isinstance(entry, BinderEntry):
            return entry.binder.form_key
        return entry.key

    def items(self) -> Iterator[tuple[str, MappingEntry]]:
        return iter(self._entries.items())

    def __contains__(self, field_name: object) -> bool:
        return field_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def to_dict(self) -> dict[str, dict]:
        result: dict[str, dict] = {}
        for name, entry in self._entries.items():
            if isinstance(entry, BinderEntry):
                result[name] = {
                    "key": entry.binder.form_key,
                    "binder": entry.binder.kind,
                    "enum_type": entry.binder.enum_type,
                }
            else:
                result[name] = {"key": entry.key}
        return result


@dataclass
class RecordMapping:
    """Mapping state of one struct, handed from stage to stage."""
    struct: GoStruct
    receiver: str
    mapping: FieldMapping
    enums: list[EnumBinding] = field(default_factory=list)

    @property
    def needs_collection_support(self) -> bool:
        return any(e.is_collection for e in self.enums)


def receiver_name(struct_name: str) -> str:
    """Receiver identifier used in generated methods (``Profile`` -> ``p``)."""
    return struct_name[0].lower()


def build_record_mapping(struct: GoStruct, package: str) -> RecordMapping:
    """Map every named field of `struct` to its external key."""
    mapping = FieldMapping()
    enums: list[EnumBinding] = []

    for f in struct.fields:
        tag = interpret_field(f, package)
        if tag.excluded:
            continue
        mapping.set_key(f.name, tag.external_key)
        if tag.enum is not None:
            enums.append(tag.enum)

    return RecordMapping(
        struct=struct,
        receiver=receiver_name(struct.name),
        mapping=mapping,
        enums=enums,
    )
