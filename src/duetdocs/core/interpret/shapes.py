#!/usr/bin/env python3
"""
Purpose:
    Accepted payload shapes for agent responses and the ordered chain used to
    normalize them into a canonical patch plus optional message.

    Priority:
        1) {"patch": [...], "message": "..."}   preferred
        2) [{"op": ..., "path": ..., "value": ...}, ...]   bare patch array
        3) {"edits": [{"field": ..., "value": ...}], "message": "..."}   legacy

    Matching is structural only: the first shape that decodes wins, even if the
    schema later rejects its values.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from duetdocs.core.constants import CODE_FENCE_RE
from duetdocs.core.patch.ops import JsonPatchOp


# --- Envelope models --- #

class PatchEnvelope(BaseModel):
    """Preferred shape."""
    model_config = ConfigDict(extra="ignore")
    patch: List[JsonPatchOp]
    message: Optional[str] = None


class LegacyEdit(BaseModel):
    """One `{field, value}` pair of the legacy shape."""
    model_config = ConfigDict(extra="ignore")
    field: str
    value: Any = Field(...)


class LegacyEnvelope(BaseModel):
    """Legacy shape; each edit becomes a `replace` at `/<field>`."""
    model_config = ConfigDict(extra="ignore")
    edits: List[LegacyEdit]
    message: Optional[str] = None


_BARE_PATCH = TypeAdapter(List[JsonPatchOp])


# --- Decoded payload --- #

@dataclass(frozen=True)
class DecodedPayload:
    """Canonical form of a recognized payload."""
    shape: str
    operations: Tuple[JsonPatchOp, ...]
    message: Optional[str] = None


Matcher = Callable[[Any], Optional[DecodedPayload]]


def _match_patch_envelope(data: Any) -> Optional[DecodedPayload]:
    if not isinstance(data, dict):
        return None
    try:
        env = PatchEnvelope.model_validate(data)
    except ValidationError:
        return None
    return DecodedPayload("patch", tuple(env.patch), env.message)


def _match_bare_array(data: Any) -> Optional[DecodedPayload]:
    if not isinstance(data, list):
        return None
    try:
        ops = _BARE_PATCH.validate_python(data)
    except ValidationError:
        return None
    return DecodedPayload("array", tuple(ops), None)


def _match_legacy_edits(data: Any) -> Optional[DecodedPayload]:
    if not isinstance(data, dict):
        return None
    try:
        env = LegacyEnvelope.model_validate(data)
    except ValidationError:
        return None
    ops = tuple(JsonPatchOp.replace(e.field, e.value) for e in env.edits)
    return DecodedPayload("edits", ops, env.message)


# Ordered (name, matcher) chain; first structural match wins
PAYLOAD_SHAPES: Tuple[Tuple[str, Matcher], ...] = (
    ("patch", _match_patch_envelope),
    ("array", _match_bare_array),
    ("edits", _match_legacy_edits),
)


# --- Public API --- #

def decode_json_text(text: Union[str, bytes]) -> Any:
    """
    Decode agent output into a JSON value.

    Markdown code fences are stripped first.

    Raises:
        ValueError: the text is not UTF-8, is empty, or is not valid JSON.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValueError("Invalid JSON encoding") from e
    cleaned = CODE_FENCE_RE.sub("", text).strip()
    if not cleaned:
        raise ValueError("Empty response")
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e.msg} (line {e.lineno}, col {e.colno})") from e
    except ValueError as e:
        # e.g. integer literals beyond the interpreter's int/str digit limit
        raise ValueError(f"Invalid JSON: {e}") from e


def extract_message(data: Any) -> Optional[str]:
    """Top-level string `message`, independent of which patch shape matched."""
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return None


def match_payload(data: Any) -> Optional[DecodedPayload]:
    """Try each shape in priority order; None when no shape matches."""
    for _name, matcher in PAYLOAD_SHAPES:
        decoded = matcher(data)
        if decoded is not None:
            return decoded
    return None
