#!/usr/bin/env python3

from typing import Annotated
from pydantic import BeforeValidator


# --- Normalizers --- #

def _normalize_display_name(v) -> str:
    """
    Normalize a human-facing name:
    - convert to str
    - strip whitespace
    - reject empty
    """
    s = "" if v is None else str(v).strip()
    if not s:
        raise ValueError("Invalid name: must be a non-empty string")
    return s


def normalize_source_label(v) -> str:
    """
    Normalize a patch source label ("llm", "user", ...):
    - strip whitespace
    - lowercase
    - reject empty
    """
    s = "" if v is None else str(v).strip().lower()
    if not s:
        raise ValueError("Invalid source: must be a non-empty string")
    return s


# --- Reusable Annotated types --- #

DisplayName = Annotated[str, BeforeValidator(_normalize_display_name)]
SourceLabel = Annotated[str, BeforeValidator(normalize_source_label)]
