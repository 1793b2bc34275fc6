#!/usr/bin/env python3
"""
Purpose:
    Represents a live DuetDocs document: the mutable value store bound to an
    immutable DocumentSchema, mutated only through `apply_patch`, with an
    append-only history of every successful patch.
"""
from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import yaml

from duetdocs.core.annotated_types import normalize_source_label
from duetdocs.core.constants import (
    DEFAULT_TEXT_ENCODING,
    NOT_SET_PLACEHOLDER,
    SOURCE_USER,
    SUPPORTED_VALUES_EXT,
)
from duetdocs.core.document.history import PatchHistoryEntry
from duetdocs.core.formatting import format_value
from duetdocs.core.patch.engine import PatchRejected, PatchResult, plan_patch
from duetdocs.core.patch.ops import JsonPatchOp
from duetdocs.core.schema.document_schema import DocumentSchema
from duetdocs.core.values import to_jsonable


class Document:
    """
    A schema-bound document.

    Typical use:
        >>> doc = Document(schema)
        >>> result = doc.apply_patch([{"op": "replace", "path": "/title", "value": "Q3"}], source="user")
        >>> result.success, doc.get("title")
        (True, 'Q3')

    Every key in the value mapping is a field declared by the schema. A rejected
    patch leaves the mapping exactly as it was. Access to one document is
    serialized by an internal re-entrant lock.
    """

    def __init__(self, schema: DocumentSchema, values: Optional[Mapping[str, Any]] = None):
        """
        Args:
            schema: the document type.
            values: initial values; when omitted, the schema defaults are used.

        Raises:
            UnknownFieldError: `values` names a field the schema does not declare.
            SchemaError: an initial value fails validation.
        """
        self._schema = schema
        self._lock = threading.RLock()
        self._history: List[PatchHistoryEntry] = []
        if values is None:
            self._values: Dict[str, Any] = schema.default_values()
        else:
            self._values = {k: schema.validate_value(k, v) for k, v in values.items()}

    # --- IO --- #

    @classmethod
    def from_file(cls, schema: DocumentSchema, path: Union[str, Path]) -> "Document":
        """
        Create a document whose initial values are loaded from a .json/.yml/.yaml file.

        Raises:
            FileNotFoundError: if the file does not exist
            ValueError: if the extension is unsupported or the file is not a mapping
            SchemaError: if a value fails validation
        """
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"The file {str(p)!r} does not exist")
        if p.suffix.lower() not in SUPPORTED_VALUES_EXT:
            raise ValueError(
                f"Invalid values file extension for {p.name!r}; expected one of {sorted(SUPPORTED_VALUES_EXT)}"
            )
        data = yaml.safe_load(p.read_text(encoding=DEFAULT_TEXT_ENCODING)) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Values file {p.name!r} must contain a mapping of field ids to values")
        return cls(schema, values=data)

    # --- Read access --- #

    @property
    def schema(self) -> DocumentSchema:
        return self._schema

    def get(self, field_id: str) -> Any:
        """Current value of `field_id`, or None when unset or undeclared."""
        with self._lock:
            return self._values.get(field_id)

    def values(self) -> Dict[str, Any]:
        """Copy of the current value mapping, in schema field order."""
        with self._lock:
            return {fid: self._values[fid] for fid in self._schema.field_ids if fid in self._values}

    def export_json(self, indent: Optional[int] = 2) -> str:
        """
        Serialize the current values as a JSON object (unset fields are omitted).

        Dates are written as ISO-8601 strings, which `apply_patch` accepts back.
        """
        return json.dumps(to_jsonable(self.values()), indent=indent, ensure_ascii=False)

    def to_patch(self) -> List[JsonPatchOp]:
        """Current values expressed as `replace` operations (one per set field)."""
        return [JsonPatchOp.replace(fid, to_jsonable(v)) for fid, v in self.values().items()]

    def intent_summary(self) -> str:
        """One 'label: value' line per field, in schema order; unset fields read 'not set'."""
        with self._lock:
            lines = []
            for fd in self._schema.fields:
                value = self._values.get(fd.id)
                shown = NOT_SET_PLACEHOLDER if value is None else format_value(value)
                lines.append(f"{fd.label}: {shown}")
            return "\n".join(lines)

    # --- History --- #

    def history(self) -> List[PatchHistoryEntry]:
        """Successful patches, oldest first."""
        with self._lock:
            return list(self._history)

    def clear_history(self) -> None:
        """Discard every history entry."""
        with self._lock:
            self._history.clear()

    # --- Mutation gateway --- #

    def apply_patch(
        self,
        operations: Iterable[Union[JsonPatchOp, Mapping[str, Any]]],
        source: str = SOURCE_USER,
    ) -> PatchResult:
        """
        Validate and apply `operations` atomically.

        The whole sequence is planned (dry run) first; values are committed only
        if every operation passes. On success one history entry is appended; a
        failed attempt changes nothing and is not recorded.

        Never raises for rejected data: the first violation is reported in the result.
        A blank `source` label is rejected the same way, before any operation is looked at.
        """
        try:
            source = normalize_source_label(source)
        except ValueError as e:
            return PatchResult(success=False, error=str(e))

        operations = list(operations)
        with self._lock:
            try:
                plan = plan_patch(self._schema, operations)
            except PatchRejected as e:
                return PatchResult.rejected(e)

            entry = PatchHistoryEntry(source=source, operations=plan.operations, applied=len(plan))
            self._values = plan.apply_to(self._values)
            self._history.append(entry)
            return PatchResult.ok(len(plan))

    def __repr__(self) -> str:
        return f"Document(schema={self._schema.name!r}, values={self.values()!r})"
