#!/usr/bin/env python3
"""
Purpose:
    Defines the FieldType enumeration for DuetDocs schemas, along with helpers
    for parsing, value-kind mapping, and introspection of field types.
"""

from __future__ import annotations

from enum import Enum

from duetdocs.core.values import ValueKind


class FieldType(str, Enum):
    """
    Supported field types in a DuetDocs schema.

    - text    : textual scalar
    - number  : numeric scalar (int or float)
    - boolean : true/false scalar
    - enum    : string constrained to a fixed set of options
    - date    : calendar date or timestamp
    - invalid : unrecognized/unsupported type (returned by `parse`)
    """

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"
    DATE = "date"
    INVALID = "invalid"

    # --- Parsing helpers --- #

    @classmethod
    def parse(cls, value: str | FieldType | None) -> FieldType:
        """
        Coerce arbitrary input to a `FieldType`.

        - `FieldType` instance → returned as-is
        - `None` or unknown strings → `FieldType.INVALID`
        - strings are trimmed and lowercased before lookup

        Examples
        --------
        >>> FieldType.parse(" Text ")
        <FieldType.TEXT: 'text'>
        >>> FieldType.parse(None)
        <FieldType.INVALID: 'invalid'>
        >>> FieldType.parse("list")
        <FieldType.INVALID: 'invalid'>
        """
        if isinstance(value, FieldType):
            return value
        if value is None:
            return cls.INVALID
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.INVALID

    @classmethod
    def try_parse(cls, value: str | FieldType | None) -> FieldType | None:
        """
        Like `parse`, but returns `None` for unknowns instead of `FieldType.INVALID`.
        """
        ft = cls.parse(value)
        return None if ft is cls.INVALID else ft

    # --- Introspection helpers --- #

    def accepts(self, kind: ValueKind) -> bool:
        """True if a value of `kind` is type-compatible with this field type."""
        return kind in _ACCEPTED_KINDS.get(self, frozenset())

    def is_numeric(self) -> bool:
        """True if the field is numeric (`number`)."""
        return self is FieldType.NUMBER


# Dates are also accepted as ISO-8601 strings (normalized on validation)
_ACCEPTED_KINDS: dict[FieldType, frozenset[ValueKind]] = {
    FieldType.TEXT: frozenset({ValueKind.STRING}),
    FieldType.NUMBER: frozenset({ValueKind.NUMBER}),
    FieldType.BOOLEAN: frozenset({ValueKind.BOOLEAN}),
    FieldType.ENUM: frozenset({ValueKind.STRING}),
    FieldType.DATE: frozenset({ValueKind.DATE, ValueKind.STRING}),
}
