#!/usr/bin/env python3
"""
Purpose:
    Closed tagged union for document field values.

    Arbitrary JSON-ish input (from an LLM or a UI) is classified exactly once into
    a `Value` whose `kind` is one of a fixed set, so schema type checks can branch
    on the kind exhaustively instead of scattering `isinstance` tests.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any


class ValueKind(str, Enum):
    """
    Kinds of values a document may be handed.

    - string  : textual scalar
    - number  : int or float (never bool)
    - boolean : true/false
    - date    : `datetime.date` or `datetime.datetime`
    - object  : structured value (mapping or array)
    - absent  : null / no value
    """

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    OBJECT = "object"
    ABSENT = "absent"


@dataclass(frozen=True)
class Value:
    """A raw value tagged with its `ValueKind`."""
    kind: ValueKind
    raw: Any = None

    @classmethod
    def of(cls, raw: Any) -> "Value":
        """
        Classify a raw Python value.

        Examples
        --------
        >>> Value.of(True).kind
        <ValueKind.BOOLEAN: 'boolean'>
        >>> Value.of(3).kind
        <ValueKind.NUMBER: 'number'>
        >>> Value.of(None).kind
        <ValueKind.ABSENT: 'absent'>
        """
        if isinstance(raw, Value):
            return raw
        if raw is None:
            return cls(ValueKind.ABSENT)
        # bool is a subclass of int; check it first
        if isinstance(raw, bool):
            return cls(ValueKind.BOOLEAN, raw)
        if isinstance(raw, (int, float)):
            return cls(ValueKind.NUMBER, raw)
        if isinstance(raw, str):
            return cls(ValueKind.STRING, raw)
        if isinstance(raw, date):
            return cls(ValueKind.DATE, raw)
        return cls(ValueKind.OBJECT, raw)

    @property
    def type_name(self) -> str:
        """Human-readable type name used in error messages."""
        if self.kind is ValueKind.OBJECT and isinstance(self.raw, (list, tuple)):
            return "array"
        if self.kind is ValueKind.ABSENT:
            return "null"
        return self.kind.value


# --- JSON helpers --- #

def to_jsonable(raw: Any) -> Any:
    """Convert a stored value to something `json.dumps` accepts (dates → ISO-8601)."""
    if isinstance(raw, (datetime, date)):
        return raw.isoformat()
    if isinstance(raw, dict):
        return {str(k): to_jsonable(v) for k, v in raw.items()}
    if isinstance(raw, (list, tuple)):
        return [to_jsonable(v) for v in raw]
    return raw


def parse_iso_date(text: str) -> date | datetime:
    """
    Parse an ISO-8601 date or datetime string.

    Plain dates ('2024-05-01') stay `date`; anything with a time part becomes `datetime`.

    Raises:
        ValueError: if the string is not ISO-8601.
    """
    s = text.strip()
    if len(s) == 10:
        return date.fromisoformat(s)
    # fromisoformat only learned the UTC designator in 3.11
    if s[-1:] in ("Z", "z"):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s)
