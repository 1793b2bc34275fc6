#!/usr/bin/env python3
"""
Purpose:
    Error taxonomy for DuetDocs.

    - SchemaError: a value (or field reference) was rejected by the schema.
    - PatchError: a patch operation is structurally unusable (bad path, bad verb).

    Every error carries the offending field id (or operation index) together with
    the concrete expected/actual values, so callers never see a bare "invalid".
"""
from __future__ import annotations

from typing import Any, Sequence


def _num(value: float | int) -> str:
    """Render a number without a spurious trailing '.0'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, int) and value.bit_length() > 64:
        # huge ints (legal JSON) are not spelled out digit by digit
        return f"{'-' if value < 0 else ''}<{value.bit_length()}-bit integer>"
    return str(value)


# --- Schema errors --- #

class SchemaError(ValueError):
    """Base class for values rejected by a schema."""

    def __init__(self, field_id: str, message: str):
        self.field_id = field_id
        super().__init__(message)


class UnknownFieldError(SchemaError):
    def __init__(self, field_id: str):
        super().__init__(field_id, f"Unknown field: {field_id}")


class TypeMismatchError(SchemaError):
    def __init__(self, field_id: str, expected: str, got: str):
        self.expected = expected
        self.got = got
        super().__init__(field_id, f"Field '{field_id}' expected {expected}, got {got}")


class InvalidEnumValueError(SchemaError):
    def __init__(self, field_id: str, allowed: Sequence[str], got: Any):
        self.allowed = list(allowed)
        self.got = got
        super().__init__(
            field_id,
            f"Field '{field_id}' must be one of: {', '.join(self.allowed)} (got {got!r})",
        )


class BelowMinimumError(SchemaError):
    def __init__(self, field_id: str, minimum: float, got: float | int):
        self.minimum = minimum
        self.got = got
        super().__init__(field_id, f"Field '{field_id}' value {_num(got)} is below minimum {_num(minimum)}")


class AboveMaximumError(SchemaError):
    def __init__(self, field_id: str, maximum: float, got: float | int):
        self.maximum = maximum
        self.got = got
        super().__init__(field_id, f"Field '{field_id}' value {_num(got)} is above maximum {_num(maximum)}")


class TooShortError(SchemaError):
    def __init__(self, field_id: str, min_length: int, got: int):
        self.min_length = min_length
        self.got = got
        super().__init__(
            field_id,
            f"Field '{field_id}' must be at least {min_length} characters (got {got})",
        )


class TooLongError(SchemaError):
    def __init__(self, field_id: str, max_length: int, got: int):
        self.max_length = max_length
        self.got = got
        super().__init__(
            field_id,
            f"Field '{field_id}' must be at most {max_length} characters (got {got})",
        )


class PatternMismatchError(SchemaError):
    def __init__(self, field_id: str, pattern: str, got: str):
        self.pattern = pattern
        self.got = got
        super().__init__(field_id, f"Field '{field_id}' value {got!r} does not match pattern {pattern!r}")


class RequiredFieldMissingError(SchemaError):
    def __init__(self, field_id: str):
        super().__init__(field_id, f"Required field '{field_id}' is missing")


# --- Patch structural errors --- #

class PatchError(ValueError):
    """Base class for structurally unusable patch operations."""

    def __init__(self, index: int, message: str):
        self.index = index
        super().__init__(message)


class MalformedPathError(PatchError):
    def __init__(self, index: int, path: Any):
        self.path = path
        super().__init__(index, f"Malformed path {path!r}: expected '/<fieldId>'")


class UnsupportedOperationError(PatchError):
    def __init__(self, index: int, op: Any, supported: Sequence[str]):
        self.op = op
        self.supported = list(supported)
        super().__init__(
            index,
            f"Unsupported operation {op!r}: expected one of {', '.join(self.supported)}",
        )
