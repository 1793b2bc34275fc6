#!/usr/bin/env python3

import argparse
import sys

from duetdocs.core.app_context import build_context
from duetdocs.cli import apply, config, schema


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="duetdocs", description="DuetDocs CLI Toolkit")
    parser.add_argument(
        "--schema-root",
        action="append",
        default=None,
        help="Override schema roots for this run (can be used multiple times).",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Register subcommands (they should accept ctx)
    schema.register(subparsers)
    apply.register(subparsers)
    config.register(subparsers)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if hasattr(args, "func"):
        ctx = build_context(schema_roots=args.schema_root)
        return args.func(args, ctx)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
