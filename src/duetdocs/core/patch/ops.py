#!/usr/bin/env python3
"""
Purpose:
    JSON Patch operation model for DuetDocs: the supported verbs, the operation
    record itself, and the single-segment path parser.

    Only a restricted subset of RFC 6902 is supported: `replace` and `add` on
    top-level fields, where `add` behaves exactly like `replace` (no array-index
    or structural insertion). `remove`, `move`, `copy` and `test` are rejected.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from duetdocs.core.constants import PATCH_PATH_RE
from duetdocs.core.errors import MalformedPathError


class PatchOpKind(str, Enum):
    """Supported patch verbs."""

    REPLACE = "replace"
    ADD = "add"

    @classmethod
    def try_parse(cls, value: Any) -> Optional[PatchOpKind]:
        """Return the verb for `value`, or None when unsupported (case-sensitive, as in RFC 6902)."""
        if isinstance(value, PatchOpKind):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None

    @classmethod
    def names(cls) -> List[str]:
        return [k.value for k in cls]


class JsonPatchOp(BaseModel):
    """
    One patch operation as received on the wire.

    `op` and `path` are kept as plain strings here; whether they are usable is
    decided by the patch engine so that a bad verb or path is reported as a
    rejected operation rather than an undecodable payload.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    op: str = Field(..., description="Operation verb ('replace' or 'add').")
    path: str = Field(..., description="JSON Pointer to a top-level field, e.g. '/title'.")
    value: Any = Field(..., description="New value (any JSON value).")

    @classmethod
    def replace(cls, field_id: str, value: Any) -> "JsonPatchOp":
        """Build a `replace` operation targeting `/<field_id>`."""
        return cls(op=PatchOpKind.REPLACE.value, path=f"/{field_id}", value=value)


def parse_path(index: int, path: Any) -> str:
    """
    Extract the field id from a single-segment JSON Pointer.

    RFC 6901 escapes (`~1` → `/`, `~0` → `~`) are decoded.

    Raises:
        MalformedPathError: empty path, missing leading slash, or more than one segment.

    Examples:
        >>> parse_path(0, "/targetCalories")
        'targetCalories'
    """
    if not isinstance(path, str):
        raise MalformedPathError(index, path)
    m = PATCH_PATH_RE.fullmatch(path)
    if not m:
        raise MalformedPathError(index, path)
    return m.group(1).replace("~1", "/").replace("~0", "~")
