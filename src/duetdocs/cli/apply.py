#!/usr/bin/env python3
from __future__ import annotations

import sys
from pathlib import Path

import structlog

from duetdocs.cli.resolve import SchemaResolutionError, resolve_schema
from duetdocs.core.app_context import AppContext
from duetdocs.core.bridge.bridge import LLMBridge
from duetdocs.core.constants import DEFAULT_TEXT_ENCODING
from duetdocs.core.document.document import Document
from duetdocs.core.errors import SchemaError

logger = structlog.get_logger()


def register(subparsers):
    parser = subparsers.add_parser("apply", help="Apply an LLM response (JSON Patch payload) to a document.")
    parser.add_argument("schema", help="Schema name or path")
    parser.add_argument("response", help="File holding the raw response text ('-' for stdin).")
    parser.add_argument("--values", help="Initial values (.json/.yml/.yaml); defaults to schema defaults.")
    parser.add_argument("--source", default=None, help="History source label (default from config).")
    parser.add_argument("--summary", action="store_true", help="Print 'label: value' lines instead of JSON.")
    parser.set_defaults(func=apply_response)


def apply_response(args, ctx: AppContext) -> int:
    try:
        schema = resolve_schema(args.schema, ctx)
    except SchemaResolutionError as e:
        print(str(e))
        return 1

    try:
        doc = Document.from_file(schema, args.values) if args.values else Document(schema)
    except (OSError, ValueError) as e:
        # SchemaError is a ValueError; keep its field-specific message
        kind = "Invalid initial value" if isinstance(e, SchemaError) else "Could not load values"
        print(f"{kind}: {e}")
        return 1

    try:
        text = _read_response(args.response)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Could not read response: {e}")
        return 1
    source = args.source or ctx.default_source
    result = LLMBridge(doc).apply_response(text, source=source)

    if not result.is_success:
        print(result.status_message)
        return 1

    if result.status_message:
        print(result.status_message)
    if result.message:
        print(f"Message: {result.message}")
    print(doc.intent_summary() if args.summary else doc.export_json())
    logger.debug("apply_complete", schema=schema.name, applied=result.edits_applied, source=source)
    return 0


def _read_response(ref: str) -> str:
    if ref == "-":
        return sys.stdin.read()
    return Path(ref).read_text(encoding=DEFAULT_TEXT_ENCODING)
