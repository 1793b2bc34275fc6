#!/usr/bin/env python3
"""
Purpose:
    Boundary between a Document and an LLM caller: context generation, the
    edit tool descriptor, and applying raw responses. This is the layer that
    logs; the document and patch engine underneath stay silent.
"""
from __future__ import annotations

from typing import List, Optional, Union

import structlog
from structlog.typing import FilteringBoundLogger

from duetdocs.core.bridge.context import get_compact_context, get_context
from duetdocs.core.bridge.resource import DocumentResource
from duetdocs.core.bridge.tool import ToolDescriptor, build_tool_descriptor
from duetdocs.core.constants import SOURCE_LLM
from duetdocs.core.document.document import Document
from duetdocs.core.document.history import PatchHistoryEntry
from duetdocs.core.interpret.interpreter import InterpretationResult, ResponseInterpreter

logger = structlog.get_logger()


class LLMBridge:
    """
    Convenience facade over one Document.

    Args:
        document: the document being edited.
        log: structlog logger for response handling; defaults to this module's logger.
            Pass `quiet=True` to disable logging entirely.
    """

    def __init__(
        self,
        document: Document,
        log: Optional[FilteringBoundLogger] = None,
        *,
        quiet: bool = False,
    ):
        self._document = document
        bound = None if quiet else (log or logger).bind(document=document.schema.name)
        self._interpreter = ResponseInterpreter(document, logger=bound)

    @property
    def document(self) -> Document:
        return self._document

    # --- Context --- #

    def context(self) -> str:
        return get_context(self._document)

    def compact_context(self) -> str:
        return get_compact_context(self._document)

    # --- Tooling --- #

    def tool_descriptor(self) -> ToolDescriptor:
        return build_tool_descriptor(self._document.schema)

    def resource(self) -> DocumentResource:
        return DocumentResource(self._document)

    # --- Edits --- #

    def apply_response(self, text: Union[str, bytes], source: str = SOURCE_LLM) -> InterpretationResult:
        """Interpret and apply a raw LLM response."""
        return self._interpreter.interpret(text, source=source)

    def history(self) -> List[PatchHistoryEntry]:
        return self._document.history()

    def clear_history(self) -> None:
        self._document.clear_history()
