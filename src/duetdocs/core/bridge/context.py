#!/usr/bin/env python3
"""
Purpose:
    Human-readable context strings describing a document for an LLM prompt:
    fields, types, constraints, current values, and the reply format.

    Read-only traversal of the schema and the document's current values.
"""
from __future__ import annotations

from duetdocs.core.constants import NOT_SET_PLACEHOLDER
from duetdocs.core.document.document import Document
from duetdocs.core.formatting import format_value
from duetdocs.core.patch.ops import PatchOpKind


_REPLY_FORMAT = """\
You can:
1. EDIT fields - when the user wants to change values
2. ANALYZE - when the user asks questions, use current values to provide insights

To edit fields, respond with JSON containing:
- "patch": JSON Patch array (RFC 6902) for edits
- "message": optional insight or analysis (null if just editing)

JSON Patch format: [{{"op": "replace", "path": "/fieldName", "value": newValue}}]
Supported ops: {ops}. Paths address a single top-level field.

Examples:
- Edit: {{"patch": [{{"op": "replace", "path": "/{example}", "value": ...}}], "message": null}}
- Insight only: {{"patch": [], "message": "Based on your current values..."}}"""


def describe_fields(document: Document) -> str:
    """One line per field: id, type, label and constraints."""
    lines = []
    for fd in document.schema.fields:
        line = f"  - {fd.id} ({fd.type_description}): {fd.label}"
        if fd.validation is not None:
            for part in fd.validation.describe():
                line += f", {part}"
        lines.append(line)
    return "\n".join(lines)


def describe_values(document: Document) -> str:
    """One line per field with its current value (or '(not set)')."""
    lines = []
    for fd in document.schema.fields:
        value = document.get(fd.id)
        shown = f"({NOT_SET_PLACEHOLDER})" if value is None else format_value(value)
        lines.append(f"  {fd.id}: {shown} ({fd.label})")
    return "\n".join(lines)


def get_context(document: Document) -> str:
    """Full context block: schema, fields, current values and the reply format."""
    example = document.schema.fields[0].id if document.schema.fields else "fieldName"
    reply = _REPLY_FORMAT.format(ops=", ".join(PatchOpKind.names()), example=example)
    return (
        f"Schema: {document.schema.name}\n"
        f"Fields:\n{describe_fields(document)}\n\n"
        f"Current Values:\n{describe_values(document)}\n\n"
        f"{reply}\n"
    )


def get_compact_context(document: Document) -> str:
    """Short three-line context for constrained prompts."""
    pairs = []
    for fd in document.schema.fields:
        value = document.get(fd.id)
        pairs.append(f"{fd.id}={'nil' if value is None else format_value(value)}")
    return (
        f"Document: {document.schema.name}\n"
        f"Fields: {', '.join(pairs)}\n"
        'Edit: [{"op": "replace", "path": "/field", "value": X}]'
    )
