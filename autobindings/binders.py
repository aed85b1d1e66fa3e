"""Synthesize ``binding.Field`` binders for protobuf enum fields.

A binder turns the raw form value of a field into the enum value found in the
generated ``<Type>_value`` table and reports unknown names as
``binding.DeserializationError``. Collection fields accept a comma-separated
list; every bad token is reported and the others are still appended.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from .mapping import RecordMapping, go_string
from .tags import EnumBinding

BINDER_SIGNATURE = "func(fieldName string, formVals []string, errs binding.Errors) binding.Errors"


def _field_literal(form_key: str, body: list[str], indent: int) -> str:
    """Wrap binder body lines into a ``binding.Field`` composite literal.

    The first line carries no indentation since it continues the map entry
    line; every other line is indented relative to `indent` tabs.
    """
    pad = "\t" * indent
    lines = [
        "binding.Field{",
        f"{pad}\tForm: {go_string(form_key)},",
        f"{pad}\tBinder: {BINDER_SIGNATURE} {{",
    ]
    lines.extend(f"{pad}\t\t{line}" for line in body)
    lines.append(f"{pad}\t}},")
    lines.append(f"{pad}}}")
    return "\n".join(lines)


@dataclass(frozen=True)
class ScalarEnumBinder:
    field_name: str
    enum_type: str
    form_key: str

    kind: ClassVar[str] = "scalar"

    def render(self, receiver: str, indent: int = 0) -> str:
        target = f"{receiver}.{self.field_name}"
        body = [
            f"val, ok := {self.enum_type}_value[formVals[0]]",
            "if !ok {",
            "\terrs.Add([]string{fieldName}, binding.DeserializationError, formVals[0])",
            "\treturn errs",
            "}",
            f"{target} = {self.enum_type}(val)",
            "return errs",
        ]
        return _field_literal(self.form_key, body, indent)


@dataclass(frozen=True)
class CollectionEnumBinder:
    field_name: str
    enum_type: str
    form_key: str

    kind: ClassVar[str] = "collection"

    def render(self, receiver: str, indent: int = 0) -> str:
        target = f"{receiver}.{self.field_name}"
        body = [
            'vals := strings.Split(formVals[0], ",")',
            f"{target} = make([]{self.enum_type}, 0, len(vals))",
            "for _, formVal := range vals {",
            f"\tval, ok := {self.enum_type}_value[formVal]",
            "\tif !ok {",
            "\t\terrs.Add([]string{fieldName}, binding.DeserializationError, formVal)",
            "\t\tcontinue",
            "\t}",
            f"\t{target} = append({target}, {self.enum_type}(val))",
            "}",
            "return errs",
        ]
        return _field_literal(self.form_key, body, indent)


EnumBinder = Union[ScalarEnumBinder, CollectionEnumBinder]


def synthesize_binder(binding: EnumBinding, form_key: str) -> EnumBinder:
    """Pick the binder variant for an enum-bound field."""
    cls = CollectionEnumBinder if binding.is_collection else ScalarEnumBinder
    return cls(
        field_name=binding.field_name,
        enum_type=binding.enum_type,
        form_key=form_key,
    )


def apply_enum_binders(record: RecordMapping) -> RecordMapping:
    """Override the plain key of every enum-bound field with its binder."""
    for binding in record.enums:
        form_key = record.mapping.key_for(binding.field_name)
        record.mapping.override(binding.field_name, synthesize_binder(binding, form_key))
    return record
