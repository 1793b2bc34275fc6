#!/usr/bin/env python3
"""
Purpose:
    Discovers DuetDocs schema files under one or more roots and serves the
    usable schema for each document type by name.

    Two files declaring the same (case-insensitive) schema name compete: the
    higher `version` wins and a newer modification time breaks ties. Losers and
    unparsable files stay visible as invalid entries so the CLI can report them.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional

import structlog
from pydantic import ValidationError

from duetdocs.core.constants import SUPPORTED_SCHEMA_EXT
from duetdocs.core.formatting import format_pydantic_errors_simple
from duetdocs.core.schema.document_schema import DocumentSchema

logger = structlog.get_logger()

REASON_SELECTED = "kept"
REASON_SUPERSEDED = "duplicate-dropped"


@dataclass(frozen=True)
class SchemaEntry:
    """
    One schema file seen during a scan.

    `name` is the lookup key (lowercased schema name, or the file stem when the
    file did not parse). `label` keeps the schema's display name.
    """
    name: str
    path: Path
    valid: bool
    reason: Optional[str] = None
    version: Optional[int] = None
    label: Optional[str] = None
    field_count: int = 0


class _Candidate(NamedTuple):
    path: Path
    mtime: float
    schema: DocumentSchema

    def rank(self) -> tuple:
        return (self.schema.version, self.mtime, str(self.path))

    def entry(self, name: str, valid: bool, reason: str) -> SchemaEntry:
        return SchemaEntry(
            name=name,
            path=self.path,
            valid=valid,
            reason=reason,
            version=self.schema.version,
            label=self.schema.name,
            field_count=len(self.schema.fields),
        )


class SchemaRegistry:
    """Case-insensitive catalogue of the document schemas found under `roots`."""

    def __init__(self, roots: Iterable[Path]):
        self._roots = [Path(r) for r in roots]
        self._selected: Dict[str, _Candidate] = {}
        self._entries: List[SchemaEntry] = []
        self._loaded = False

    # --- Loading --- #

    def load(self, *, clear: bool = True) -> None:
        """
        Scan every root and rebuild the catalogue.

        Args:
            clear: drop previous results first; with False a rescan adds to them.
        """
        if clear:
            self._selected.clear()
            self._entries.clear()

        contenders: Dict[str, List[_Candidate]] = {}
        for path in self._schema_files():
            candidate = self._read(path)
            if candidate is not None:
                contenders.setdefault(self.key(candidate.schema.name), []).append(candidate)

        for name, group in contenders.items():
            group.sort(key=_Candidate.rank, reverse=True)
            winner, superseded = group[0], group[1:]
            self._selected[name] = winner
            self._entries.append(winner.entry(name, True, REASON_SELECTED))
            for c in superseded:
                logger.info("schema_superseded", schema=name, path=str(c.path), kept=str(winner.path))
                self._entries.append(c.entry(name, False, REASON_SUPERSEDED))

        self._loaded = True
        logger.debug("schema_registry_loaded", roots=[str(r) for r in self._roots], schemas=self.names())

    # --- Query API --- #

    @staticmethod
    def key(schema_name: str) -> str:
        return schema_name.strip().lower()

    def get(self, schema_name: str) -> Optional[DocumentSchema]:
        """Selected schema for `schema_name`, or None."""
        c = self._selected.get(self.key(schema_name))
        return c.schema if c else None

    def require(self, schema_name: str) -> DocumentSchema:
        """Like `get` but raises LookupError when nothing usable is registered."""
        schema = self.get(schema_name)
        if schema is None:
            raise LookupError(f"Schema {schema_name!r} not found")
        return schema

    def names(self) -> List[str]:
        return sorted(self._selected)

    def entries(self) -> List[SchemaEntry]:
        return list(self._entries)

    def valid_entries(self) -> List[SchemaEntry]:
        return [e for e in self._entries if e.valid]

    def invalid_entries(self) -> List[SchemaEntry]:
        return [e for e in self._entries if not e.valid]

    def get_entry(self, name: str) -> Optional[SchemaEntry]:
        key = self.key(name)
        return next((e for e in self._entries if e.valid and e.name == key), None)

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def roots(self) -> List[Path]:
        return list(self._roots)

    # --- Internals --- #

    def _schema_files(self) -> Iterator[Path]:
        for root in self._roots:
            if not root.is_dir():
                continue
            for p in sorted(root.rglob("*")):
                if p.is_file() and p.suffix.lower() in SUPPORTED_SCHEMA_EXT:
                    yield p.resolve()

    def _read(self, path: Path) -> Optional[_Candidate]:
        """Parse one file; failures become invalid entries and yield None."""
        try:
            schema = DocumentSchema.from_file(path)
        except ValidationError as e:
            reason = "; ".join(format_pydantic_errors_simple(e))
        except (OSError, ValueError) as e:
            reason = str(e)
        else:
            return _Candidate(path, path.stat().st_mtime, schema)

        logger.warning("schema_file_invalid", path=str(path), reason=reason)
        self._entries.append(SchemaEntry(name=path.stem.lower(), path=path, valid=False, reason=reason))
        return None
