#!/usr/bin/env python3
"""
Formatting helpers for DuetDocs.

- Stable, minimal one-line formatting for Pydantic v2 `ValidationError`.
- Display rendering of stored field values for summaries and LLM context.
"""
from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Iterable, List, Sequence

from duetdocs.core.values import to_jsonable


# --- Public API --- #

def format_pydantic_errors_simple(exc: Exception) -> List[str]:
    """
    Return stable one-line messages from a Pydantic v2 ValidationError.

    Example:
        fields[1].id: Value error, The 'id' key is not set

    Falls back to the first line of str(exc) if `exc.errors()` isn't available.
    """
    errors: Sequence[dict[str, Any]] | None = None

    if hasattr(exc, "errors") and callable(getattr(exc, "errors")):
        errors = exc.errors()  # type: ignore[assignment]

    if not errors:
        return [str(exc).splitlines()[0]]

    msgs: List[str] = []
    for err in errors:
        loc = err.get("loc", ())
        msg = err.get("msg", "Validation error")
        path = _format_error_loc(loc)
        msgs.append(f"{path}: {msg}")
    return msgs


def format_value(value: Any) -> str:
    """
    Render a stored value for humans.

    Examples:
        1800.0               -> "1800"
        True                 -> "true"
        date(2024, 5, 1)     -> "2024-05-01"
        {"a": 1}             -> '{"a": 1}'
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(to_jsonable(value), ensure_ascii=False)
    return str(value)


# --- Internals --- #

def _format_error_loc(loc: Iterable[Any]) -> str:
    """
    Convert a Pydantic error `loc` tuple into a dotted path with index suffixes.

    Examples:
        ('fields', 1, 'id') -> "fields[1].id"
        (0, 'op')           -> "[0].op"
        ()                  -> "<root>"
    """
    parts: List[str] = []
    for seg in loc:
        if isinstance(seg, int):
            if parts:
                parts[-1] = f"{parts[-1]}[{seg}]"
            else:
                parts.append(f"[{seg}]")
        else:
            parts.append(str(seg))
    return ".".join(parts) if parts else "<root>"
