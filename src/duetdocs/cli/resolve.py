#!/usr/bin/env python3
from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from duetdocs.core.app_context import AppContext
from duetdocs.core.constants import SUPPORTED_SCHEMA_EXT
from duetdocs.core.formatting import format_pydantic_errors_simple
from duetdocs.core.schema.document_schema import DocumentSchema


class SchemaResolutionError(LookupError):
    pass


def resolve_schema(ref: str, ctx: AppContext) -> DocumentSchema:
    """Resolve a schema argument: a path to a .json file, else a registry name."""
    p = Path(ref)
    if p.suffix.lower() in SUPPORTED_SCHEMA_EXT and p.exists():
        try:
            return DocumentSchema.from_file(p)
        except ValidationError as e:
            raise SchemaResolutionError(
                f"Invalid schema {str(p)!r}: " + "; ".join(format_pydantic_errors_simple(e))
            ) from e
    schema = ctx.schemas.get(ref)
    if schema is None:
        raise SchemaResolutionError(f"Schema {ref!r} not found (not a file, not in schema_paths)")
    return schema
