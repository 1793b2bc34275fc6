#!/usr/bin/env python3
"""
Core constants used across DuetDocs.

- Field identity: allowed field id pattern (every id must be a valid one-segment patch path).
- Patch sources: labels recorded in the history log.
- File handling: supported extensions and default text encoding.
- Presentation: placeholders used when rendering unset values.
"""

import re
from typing import Final

# --- DuetDocs constants --- #

# Schema files are JSON only
SUPPORTED_SCHEMA_EXT: Final[frozenset[str]] = frozenset({".json"})

# Initial value files for documents
SUPPORTED_VALUES_EXT: Final[frozenset[str]] = frozenset({".json", ".yml", ".yaml"})

# Default text encoding
DEFAULT_TEXT_ENCODING: Final[str] = "utf-8"

# Patch origins recorded in history entries
SOURCE_USER: Final[str] = "user"
SOURCE_LLM: Final[str] = "llm"

# Rendered for fields with no current value
NOT_SET_PLACEHOLDER: Final[str] = "not set"

# External resource identity prefix (resource URI = prefix + lowercased schema name)
RESOURCE_URI_PREFIX: Final[str] = "kit://documents/"


# --- Regular Expressions --- #

# Matches valid field ids: leading letter/underscore, then letters/numbers/underscores
FIELD_ID_ALLOWED_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Patch path: exactly one segment after a leading slash
PATCH_PATH_RE: re.Pattern[str] = re.compile(r"^/([^/]+)$")

# Markdown code fences LLMs like to wrap JSON in
CODE_FENCE_RE: re.Pattern[str] = re.compile(r"```[a-zA-Z]*\n?|```\n?")
