#!/usr/bin/env python3
"""
Purpose:
    Defines the DocumentSchema model for DuetDocs: the immutable description of
    a document type's fields, shared read-only by every Document of that type.
"""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from duetdocs.core.annotated_types import DisplayName
from duetdocs.core.constants import DEFAULT_TEXT_ENCODING, SUPPORTED_SCHEMA_EXT
from duetdocs.core.errors import UnknownFieldError
from duetdocs.core.schema.field_descriptor import FieldDescriptor


# --- Model --- #

class DocumentSchema(BaseModel):
    """
    Schema of a document type.

    Fields:
    -------
    name:
        Display name of the document type (e.g. "Budget").
    version:
        Integer schema revision, starting at 1.
    fields:
        Ordered `FieldDescriptor` entries; ids are unique.

    Example
    -------
    >>> schema = DocumentSchema(name="Budget", fields=[
    ...     {"id": "targetCalories", "type": "number", "min": 500, "max": 5000},
    ... ])
    >>> schema.field_named("targetCalories").fieldtype
    <FieldType.NUMBER: 'number'>
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: DisplayName = Field(..., description="Document type name.")
    version: int = Field(default=1, ge=1, description="Schema revision.")
    fields: Tuple[FieldDescriptor, ...] = Field(default_factory=tuple, description="Ordered field list.")

    # --- Normalization / Validation --- #

    @model_validator(mode="after")
    def _post_init(self) -> "DocumentSchema":
        details = self._dup_details(fd.id for fd in self.fields)
        if details:
            raise ValueError(f"Duplicate field ids: {details}")
        return self

    @staticmethod
    def _dup_details(ids: Iterable[str]) -> str | None:
        counts = Counter(ids)
        dups = [(n, c) for n, c in sorted(counts.items()) if c > 1]
        if not dups:
            return None
        return ", ".join(f"{n} ×{c}" for n, c in dups)

    # --- Lookup --- #

    def field_named(self, field_id: str) -> Optional[FieldDescriptor]:
        """Return the field with this id, or None when the schema does not declare it."""
        for fd in self.fields:
            if fd.id == field_id:
                return fd
        return None

    @property
    def field_ids(self) -> List[str]:
        """Field ids in declaration order."""
        return [fd.id for fd in self.fields]

    # --- Validation --- #

    def validate_value(self, field_id: str, value: Any) -> Any:
        """
        Check `value` for the field `field_id` and return its normalized form.

        Raises:
            UnknownFieldError: the schema declares no such field.
            SchemaError: the value fails the field's type check or constraints.
        """
        fd = self.field_named(field_id)
        if fd is None:
            raise UnknownFieldError(field_id)
        return fd.check(value)

    def default_values(self) -> Dict[str, Any]:
        """Defaults of every field that declares one (fields without a default are omitted)."""
        return {fd.id: fd.check(fd.default) for fd in self.fields if fd.default is not None}

    # --- Presentation --- #

    @property
    def description(self) -> str:
        """
        Multi-line summary of the schema for LLM context.

        Example:
            Schema: Budget (v1)
            Fields:
              - targetCalories (number): Target Calories [min: 500, max: 5000]
        """
        lines = [f"Schema: {self.name} (v{self.version})", "Fields:"]
        for fd in self.fields:
            line = f"  - {fd.id} ({fd.type_description}): {fd.label}"
            constraints = fd.validation.describe() if fd.validation else []
            if constraints:
                line += f" [{', '.join(constraints)}]"
            lines.append(line)
        return "\n".join(lines) + "\n"

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to the flat authoring JSON shape accepted by `from_file`."""
        return json.dumps(self.model_dump(), indent=indent, ensure_ascii=False)

    # --- File IO --- #

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "DocumentSchema":
        """
        Load a DocumentSchema from a JSON file.

        Raises:
            FileNotFoundError: if the file does not exist
            ValueError: if the file extension is not supported
            ValidationError: if the payload fails model validation
        """
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"The file {str(p)!r} does not exist")
        if p.suffix.lower() not in SUPPORTED_SCHEMA_EXT:
            raise ValueError(
                f"Invalid schema file extension for {p.name!r}; expected one of {sorted(SUPPORTED_SCHEMA_EXT)}"
            )
        data = json.loads(p.read_text(encoding=DEFAULT_TEXT_ENCODING))
        return cls.model_validate(data)
