#!/usr/bin/env python3
"""
Purpose:
    The patch engine: a pure dry-run planner that validates an entire operation
    sequence against a schema before anything is committed, and the result
    record handed back to callers.

    Nothing here mutates a document or performs I/O; `Document.apply_patch`
    owns the commit step.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from duetdocs.core.errors import PatchError, SchemaError, UnsupportedOperationError
from duetdocs.core.patch.ops import JsonPatchOp, PatchOpKind, parse_path
from duetdocs.core.schema.document_schema import DocumentSchema


# --- Rejection --- #

class PatchRejected(Exception):
    """
    First violation found while planning a patch.

    Wraps the underlying `PatchError`/`SchemaError` with the operation index and
    (when resolvable) the targeted field id.
    """

    def __init__(self, index: int, path: Any, field_id: Optional[str], cause: Exception):
        self.index = index
        self.path = path
        self.field_id = field_id
        self.cause = cause
        super().__init__(f"Operation {index} ({path}): {cause}")


# --- Plan --- #

@dataclass(frozen=True)
class StagedWrite:
    """A validated, normalized value waiting to be committed."""
    index: int
    field_id: str
    value: Any


@dataclass(frozen=True)
class PatchPlan:
    """Fully validated patch: the canonical operations and the writes they imply, in order."""
    operations: Tuple[JsonPatchOp, ...]
    writes: Tuple[StagedWrite, ...]

    def __len__(self) -> int:
        return len(self.writes)

    def apply_to(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Return a new mapping with every write applied in order; `values` is not modified."""
        updated = dict(values)
        for w in self.writes:
            updated[w.field_id] = w.value
        return updated


def plan_patch(schema: DocumentSchema, operations: Iterable[JsonPatchOp | Mapping[str, Any]]) -> PatchPlan:
    """
    Validate every operation in `operations` (dry run) and return the plan.

    Per operation:
        1) the verb must be `replace` or `add`
        2) the path must be `/<fieldId>`
        3) the field must exist in `schema`
        4) the value must pass `schema.validate_value`

    Raises:
        PatchRejected: at the first violation; nothing has been committed.
    """
    canonical: list[JsonPatchOp] = []
    writes: list[StagedWrite] = []

    for index, raw in enumerate(operations):
        op, path, value = _read_operation(raw)
        field_id: Optional[str] = None
        try:
            kind = PatchOpKind.try_parse(op)
            if kind is None:
                raise UnsupportedOperationError(index, op, PatchOpKind.names())
            field_id = parse_path(index, path)
            normalized = schema.validate_value(field_id, value)
        except (PatchError, SchemaError) as e:
            raise PatchRejected(index, path, field_id, e) from e

        canonical.append(JsonPatchOp(op=kind.value, path=path, value=value))
        writes.append(StagedWrite(index=index, field_id=field_id, value=normalized))

    return PatchPlan(operations=tuple(canonical), writes=tuple(writes))


def _read_operation(raw: Any) -> tuple[Any, Any, Any]:
    """Pull (op, path, value) out of a JsonPatchOp or a plain mapping."""
    if isinstance(raw, JsonPatchOp):
        return raw.op, raw.path, raw.value
    if isinstance(raw, Mapping):
        return raw.get("op"), raw.get("path"), raw.get("value")
    return None, None, None


# --- Result --- #

class PatchResult(BaseModel):
    """
    Outcome of one `apply_patch` call.

    On failure `applied` is 0 and `error` carries the first violation, with
    `failed_index`/`failed_field` identifying where it happened.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    applied: int = Field(default=0, ge=0)
    error: Optional[str] = None
    failed_index: Optional[int] = None
    failed_field: Optional[str] = None

    @classmethod
    def ok(cls, applied: int) -> "PatchResult":
        return cls(success=True, applied=applied)

    @classmethod
    def rejected(cls, exc: PatchRejected) -> "PatchResult":
        return cls(
            success=False,
            applied=0,
            error=str(exc),
            failed_index=exc.index,
            failed_field=exc.field_id,
        )
