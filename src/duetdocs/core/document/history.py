#!/usr/bin/env python3
"""
Pydantic model for patch history entries in DuetDocs.

One entry is appended per successful `Document.apply_patch` call.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field

from duetdocs.core.annotated_types import SourceLabel
from duetdocs.core.patch.ops import JsonPatchOp


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PatchHistoryEntry(BaseModel):
    """
    Audit record of one applied patch.

    Fields
    ------
    timestamp:
        When the patch was committed (UTC, timezone-aware).
    source:
        Origin label, normalized to lowercase (e.g. "llm", "user").
    operations:
        The operations exactly as applied, in order.
    applied:
        Number of operations committed.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=_utcnow)
    source: SourceLabel = Field(..., description="Origin of the patch.")
    operations: Tuple[JsonPatchOp, ...] = Field(default_factory=tuple)
    applied: int = Field(default=0, ge=0)

    @property
    def fields_touched(self) -> list[str]:
        """Field ids targeted by this entry, in first-touch order."""
        return list(dict.fromkeys(op.path.lstrip("/") for op in self.operations))
