#!/usr/bin/env python3
"""
DuetDocs configuration loader.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Final, List

from duetdocs.core.constants import SOURCE_USER
from duetdocs.core.utils import merge_dicts, load_json_file

# --- Defaults & locations --- #

DEFAULT_CONFIG: Final[Dict[str, Any]] = {
    "schema_paths": [str(Path("./document_schemas").resolve())],
    "logging": {"level": "INFO", "json": False},
    "patch": {"default_source": SOURCE_USER},
}

GLOBAL_CONFIG_PATH: Final[Path] = Path.home() / ".config" / "duetdocs" / "config.json"

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


# --- Public API --- #

def load_config() -> Dict[str, Any]:
    """
    Load DuetDocs configuration with layered precedence.

    Order:
        1. Built-in defaults
        2. Global config (~/.config/duetdocs/config.json)
        3. Project config (./duetdocs.json)
        4. Environment overrides:
           - DUETDOCS_SCHEMA_PATHS (pathsep-separated list)
           - DUETDOCS_LOG_LEVEL
           - DUETDOCS_LOG_JSON (1/true/yes/on)

    Returns:
        A merged configuration dictionary.
    """
    # 1) start with defaults
    config = copy.deepcopy(DEFAULT_CONFIG)

    # 2) global config
    config = merge_dicts(config, load_json_file(GLOBAL_CONFIG_PATH))

    # 3) project config
    project_path = Path.cwd() / "duetdocs.json"
    config = merge_dicts(config, load_json_file(project_path))

    # 4) environment overrides
    schema_paths_env = os.getenv("DUETDOCS_SCHEMA_PATHS")
    if schema_paths_env:
        config["schema_paths"] = _split_paths_env(schema_paths_env)

    log_level_env = os.getenv("DUETDOCS_LOG_LEVEL")
    if log_level_env:
        config.setdefault("logging", {})["level"] = log_level_env

    log_json_env = os.getenv("DUETDOCS_LOG_JSON")
    if log_json_env:
        config.setdefault("logging", {})["json"] = log_json_env.strip().lower() in _TRUTHY

    return config


# --- Internals --- #

def _split_paths_env(value: str) -> List[str]:
    """
    Split a path-list env var on os.pathsep, trimming empties and expanding '~'.

    Example:
        "a:~/b:/tmp" on Unix  -> ["a", "/home/user/b", "/tmp"] (no resolve here)
    """
    parts = [p.strip() for p in value.split(os.pathsep)]
    return [str(Path(p).expanduser()) for p in parts if p]
