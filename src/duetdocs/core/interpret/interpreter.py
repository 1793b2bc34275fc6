#!/usr/bin/env python3
"""
Purpose:
    Turns raw agent (LLM) response text into a patch applied to a Document and
    reports a closed three-way outcome: success, validation error, or parse error.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from structlog.typing import FilteringBoundLogger

from duetdocs.core.constants import SOURCE_LLM
from duetdocs.core.document.document import Document
from duetdocs.core.interpret.shapes import decode_json_text, extract_message, match_payload


class InterpretationStatus(str, Enum):
    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    PARSE_ERROR = "parse_error"


class InterpretationResult(BaseModel):
    """
    Outcome of interpreting one response.

    - success:          the payload was recognized and applied (`edits_applied` may be 0)
    - validation_error: the payload was recognized but the schema rejected a value
    - parse_error:      no accepted shape was recognized (or the text was not JSON)
    """

    model_config = ConfigDict(frozen=True)

    status: InterpretationStatus
    edits_applied: int = Field(default=0, ge=0)
    message: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, edits_applied: int, message: Optional[str] = None) -> "InterpretationResult":
        return cls(status=InterpretationStatus.SUCCESS, edits_applied=edits_applied, message=message)

    @classmethod
    def validation_error(cls, reason: str) -> "InterpretationResult":
        return cls(status=InterpretationStatus.VALIDATION_ERROR, reason=reason)

    @classmethod
    def parse_error(cls, reason: str) -> "InterpretationResult":
        return cls(status=InterpretationStatus.PARSE_ERROR, reason=reason)

    @property
    def is_success(self) -> bool:
        return self.status is InterpretationStatus.SUCCESS

    @property
    def status_message(self) -> str:
        """Short line for a status bar; empty for a successful response with no edits."""
        if self.status is InterpretationStatus.SUCCESS:
            return f"Applied {self.edits_applied} edit(s)" if self.edits_applied > 0 else ""
        if self.status is InterpretationStatus.VALIDATION_ERROR:
            return f"Validation failed: {self.reason}"
        return f"Could not parse response: {self.reason}"


class ResponseInterpreter:
    """
    Normalizes agent responses for one Document and routes them through
    `Document.apply_patch`.

    Args:
        document: the target document.
        logger: optional structlog logger; when omitted nothing is logged.
    """

    def __init__(self, document: Document, logger: Optional[FilteringBoundLogger] = None):
        self._document = document
        self._log = logger

    @property
    def document(self) -> Document:
        return self._document

    def interpret(self, text: Union[str, bytes], source: str = SOURCE_LLM) -> InterpretationResult:
        """Decode `text`, match the first accepted shape, and apply its patch."""
        if self._log is not None:
            preview = text[:200] if isinstance(text, str) else repr(text[:200])
            self._log.debug("interpret_response", preview=preview, source=source)

        try:
            data = decode_json_text(text)
        except ValueError as e:
            return self._finish(InterpretationResult.parse_error(str(e)))

        decoded = match_payload(data)
        if decoded is None:
            return self._finish(InterpretationResult.parse_error("Could not parse response as JSON Patch"))

        message = decoded.message if decoded.message is not None else extract_message(data)
        result = self._document.apply_patch(decoded.operations, source=source)
        if self._log is not None:
            self._log.debug(
                "patch_applied",
                shape=decoded.shape,
                operations=len(decoded.operations),
                success=result.success,
                applied=result.applied,
            )
        if not result.success:
            return self._finish(InterpretationResult.validation_error(result.error or "Unknown error"))
        return self._finish(InterpretationResult.success(result.applied, message))

    def _finish(self, outcome: InterpretationResult) -> InterpretationResult:
        if self._log is not None and not outcome.is_success:
            self._log.info("interpret_rejected", status=outcome.status.value, reason=outcome.reason)
        return outcome
