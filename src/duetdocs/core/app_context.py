#!/usr/bin/env python3
"""
Purpose:
    Wires together the DuetDocs application context by merging configuration,
    configuring logging, and initializing the schema registry.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from duetdocs.core.config import load_config
from duetdocs.core.constants import SOURCE_USER
from duetdocs.core.logging_config import setup_logging
from duetdocs.core.schema.registry import SchemaRegistry


# --- Data model --- #

@dataclass(frozen=True)
class AppContext:
    """Immutable container for configuration and the schema registry."""
    config: Dict[str, Any]
    schemas: SchemaRegistry

    @property
    def default_source(self) -> str:
        return self.config.get("patch", {}).get("default_source", SOURCE_USER)


# --- Factory --- #

def build_context(
    *,
    config: Optional[Dict[str, Any]] = None,
    schema_roots: Optional[Iterable[Path]] = None,
    preload: bool = True,
    configure_logging: bool = True,
) -> AppContext:
    """
    Build an `AppContext`.

    Args:
        config:
            Pre-merged configuration. If omitted, `load_config()` is used.
        schema_roots:
            Optional override for schema search paths. Defaults to `config['schema_paths']`.
        preload:
            If True, eagerly loads the registry; otherwise, caller may load later.
        configure_logging:
            If True, applies `config['logging']` via `setup_logging`.

    Returns:
        AppContext: immutable bundle of config and schema registry.
    """
    cfg = config or load_config()

    if configure_logging:
        log_cfg = cfg.get("logging", {})
        setup_logging(json_mode=bool(log_cfg.get("json", False)), level=str(log_cfg.get("level", "INFO")))

    schema_paths = [Path(p) for p in (schema_roots or cfg.get("schema_paths", []))]
    schema_registry = SchemaRegistry(schema_paths)

    if preload:
        schema_registry.load(clear=True)

    return AppContext(config=cfg, schemas=schema_registry)
