#!/usr/bin/env python3
import json

from duetdocs.cli.resolve import SchemaResolutionError, resolve_schema
from duetdocs.core.app_context import AppContext
from duetdocs.core.bridge.tool import build_tool_descriptor


def register(subparsers):
    sp = subparsers.add_parser("schema", help="Schema utilities")
    sps = sp.add_subparsers(dest="schema_cmd")

    # default when user runs: `duetdocs schema`
    def schema_default(args, ctx: AppContext) -> int:
        sp.print_help()
        return 1
    sp.set_defaults(func=schema_default)

    lp = sps.add_parser("list", help="List schemas")
    lp.add_argument("--all", action="store_true", help="Include invalid schemas")
    lp.add_argument("--json", action="store_true", help="JSON output")
    lp.set_defaults(func=list_schemas)

    dp = sps.add_parser("describe", help="Describe a schema's fields and constraints")
    dp.add_argument("schema", help="Schema name or path")
    dp.set_defaults(func=describe_schema)

    tp = sps.add_parser("tool", help="Print the edit tool descriptor (function-calling JSON)")
    tp.add_argument("schema", help="Schema name or path")
    tp.set_defaults(func=tool_schema)


def list_schemas(args, ctx: AppContext) -> int:
    entries = ctx.schemas.entries() if args.all else ctx.schemas.valid_entries()

    if args.json:
        payload = [{
            "name": e.name,
            "valid": e.valid,
            "path": str(e.path),
            "version": e.version,
            "reason": e.reason,
        } for e in entries]
        print(json.dumps(payload, indent=2))
        return 0 if payload else 1

    if not entries:
        print("No schemas found.")
        return 1

    print("Schemas Found:")
    for e in sorted(entries, key=lambda x: (not x.valid, x.name)):
        brief = e.reason.splitlines()[0] if e.reason else ""
        status = "✓ valid" if e.valid else f"✗ invalid ({brief})"
        ver = f" v{e.version}" if e.version else ""
        print(f"  - {e.name:24} {status:35}  {e.path}{ver}")
    return 0


def describe_schema(args, ctx: AppContext) -> int:
    try:
        schema = resolve_schema(args.schema, ctx)
    except SchemaResolutionError as e:
        print(str(e))
        return 1
    print(schema.description, end="")
    return 0


def tool_schema(args, ctx: AppContext) -> int:
    try:
        schema = resolve_schema(args.schema, ctx)
    except SchemaResolutionError as e:
        print(str(e))
        return 1
    print(build_tool_descriptor(schema).to_json())
    return 0
