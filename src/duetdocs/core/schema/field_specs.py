#!/usr/bin/env python3
"""
Purpose:
    Defines Pydantic specification models for each supported DuetDocs field
    type, plus the optional per-field constraint block (`FieldValidation`).
"""

from __future__ import annotations

import re
from typing import Annotated, Literal, Optional, Union, List
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# --- Per-type spec models --- #

class TextSpec(BaseModel):
    """Specification for a text field."""
    model_config = ConfigDict(frozen=True, extra="forbid")
    kind: Literal["text"] = "text"


class NumberSpec(BaseModel):
    """Specification for a numeric field (int or float)."""
    model_config = ConfigDict(frozen=True, extra="forbid")
    kind: Literal["number"] = "number"


class BooleanSpec(BaseModel):
    """Specification for a boolean field."""
    model_config = ConfigDict(frozen=True, extra="forbid")
    kind: Literal["boolean"] = "boolean"


class EnumSpec(BaseModel):
    """Specification for an enum field (string constrained to fixed options)."""
    model_config = ConfigDict(frozen=True, extra="forbid")
    kind: Literal["enum"] = "enum"
    options: List[str] = Field(
        min_length=1,
        description="Allowed enum values (non-empty list).",
    )


class DateSpec(BaseModel):
    """Specification for a date field (date/datetime or ISO-8601 string)."""
    model_config = ConfigDict(frozen=True, extra="forbid")
    kind: Literal["date"] = "date"


# --- Discriminated union of all per-type specs --- #
# Used by FieldDescriptor to accept/validate the correct spec model
# based on the 'kind' key.

FieldSpec = Annotated[
    Union[TextSpec, NumberSpec, BooleanSpec, EnumSpec, DateSpec],
    Field(discriminator="kind"),
]


# --- Constraints --- #

class FieldValidation(BaseModel):
    """
    Optional constraints attached to a field.

    Each constraint only applies to the value kinds it is meaningful for:
    numeric bounds to numbers, length bounds and pattern to strings. `required`
    rejects an absent (null) value.
    """
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    min: Optional[float] = Field(default=None, description="Inclusive lower bound for numbers.")
    max: Optional[float] = Field(default=None, description="Inclusive upper bound for numbers.")
    min_length: Optional[int] = Field(default=None, ge=0, alias="minLength", description="Minimum string length.")
    max_length: Optional[int] = Field(default=None, ge=0, alias="maxLength", description="Maximum string length.")
    pattern: Optional[str] = Field(default=None, description="Regex applied to string values only.")
    required: bool = Field(default=False, description="Reject null/absent values.")

    @field_validator("pattern")
    @classmethod
    def _compile_pattern(cls, v: Optional[str]) -> Optional[str]:
        """Reject patterns that are not valid regular expressions."""
        if v is None:
            return v
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid 'pattern' {v!r}: {e}") from e
        return v

    @model_validator(mode="after")
    def _check_bounds(self) -> "FieldValidation":
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"'min' ({self.min}) must not exceed 'max' ({self.max})")
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            raise ValueError(
                f"'minLength' ({self.min_length}) must not exceed 'maxLength' ({self.max_length})"
            )
        return self

    def describe(self) -> List[str]:
        """Constraint fragments like 'min: 500' for prompt/context rendering."""
        parts: List[str] = []
        if self.min is not None:
            parts.append(f"min: {_fmt(self.min)}")
        if self.max is not None:
            parts.append(f"max: {_fmt(self.max)}")
        if self.min_length is not None:
            parts.append(f"minLength: {self.min_length}")
        if self.max_length is not None:
            parts.append(f"maxLength: {self.max_length}")
        if self.pattern is not None:
            parts.append(f"pattern: {self.pattern}")
        if self.required:
            parts.append("required")
        return parts


# Flat authoring keys that are packed into `FieldValidation`
VALIDATION_KEYS: frozenset[str] = frozenset({"min", "max", "minLength", "maxLength", "pattern", "required"})


def _fmt(n: float) -> str:
    return str(int(n)) if float(n).is_integer() else str(n)
