#!/usr/bin/env python3
import json

import pytest
import structlog
from structlog.testing import capture_logs

from duetdocs.core.document.document import Document
from duetdocs.core.interpret.interpreter import (
    InterpretationResult,
    InterpretationStatus,
    ResponseInterpreter,
)
from duetdocs.core.schema.document_schema import DocumentSchema


def _doc() -> Document:
    schema = DocumentSchema.model_validate({
        "name": "Budget",
        "fields": [
            {"id": "targetCalories", "label": "Target Calories", "type": "number", "min": 500, "max": 5000},
            {"id": "notes", "label": "Notes"},
        ],
    })
    return Document(schema)


def _interp(doc=None, **kw):
    return ResponseInterpreter(doc or _doc(), **kw)


# --- Success paths --- #

def test_patch_envelope_applied_with_message():
    it = _interp()
    text = json.dumps({
        "patch": [{"op": "replace", "path": "/targetCalories", "value": 1800}],
        "message": "Lowered your target",
    })
    result = it.interpret(text)
    assert result.status is InterpretationStatus.SUCCESS
    assert result.edits_applied == 1
    assert result.message == "Lowered your target"
    assert it.document.get("targetCalories") == 1800


def test_legacy_edits_applied():
    it = _interp()
    result = it.interpret('{"edits":[{"field":"targetCalories","value":2000}]}')
    assert result.is_success
    assert result.edits_applied == 1
    assert it.document.get("targetCalories") == 2000


def test_bare_array_applied():
    it = _interp()
    result = it.interpret('[{"op":"add","path":"/notes","value":"hi"}]')
    assert result.is_success
    assert it.document.get("notes") == "hi"


def test_fenced_response_applied():
    it = _interp()
    result = it.interpret('```json\n{"patch":[{"op":"replace","path":"/notes","value":"x"}]}\n```')
    assert result.is_success
    assert result.edits_applied == 1


def test_insight_only_response():
    it = _interp()
    result = it.interpret('{"patch": [], "message": "Your plan looks balanced."}')
    assert result.is_success
    assert result.edits_applied == 0
    assert result.message == "Your plan looks balanced."
    assert result.status_message == ""


def test_source_recorded_in_history():
    doc = _doc()
    _interp(doc).interpret('[{"op":"replace","path":"/notes","value":"a"}]')
    _interp(doc).interpret('[{"op":"replace","path":"/notes","value":"b"}]', source="user")
    assert [h.source for h in doc.history()] == ["llm", "user"]


# --- Validation errors --- #

def test_out_of_range_is_validation_error_and_document_unchanged():
    doc = _doc()
    doc.apply_patch([{"op": "replace", "path": "/targetCalories", "value": 1800}])
    result = _interp(doc).interpret('{"patch":[{"op":"replace","path":"/targetCalories","value":6000}]}')
    assert result.status is InterpretationStatus.VALIDATION_ERROR
    assert result.edits_applied == 0
    assert "above maximum 5000" in result.reason
    assert doc.get("targetCalories") == 1800


@pytest.mark.parametrize("op", [
    {"op": "remove", "path": "/notes", "value": None},
    {"op": "replace", "path": "/notes/0", "value": "x"},
    {"op": "replace", "path": "/unknown", "value": "x"},
])
def test_recognized_but_rejected_ops_are_validation_errors(op):
    result = _interp().interpret(json.dumps({"patch": [op]}))
    assert result.status is InterpretationStatus.VALIDATION_ERROR


# --- Parse errors --- #

@pytest.mark.parametrize("text", [
    "",
    "Sure! I updated your calories.",
    '{"message": "no patch here"}',
    '{"edits": "nope"}',
    "[1, 2, 3]",
])
def test_unrecognized_responses_are_parse_errors(text):
    doc = _doc()
    result = _interp(doc).interpret(text)
    assert result.status is InterpretationStatus.PARSE_ERROR
    assert result.reason
    assert doc.history() == []


def test_no_shape_reason():
    result = _interp().interpret('{"foo": 1}')
    assert result.reason == "Could not parse response as JSON Patch"


# --- Result --- #

@pytest.mark.parametrize("result,expected", [
    (InterpretationResult.success(2), "Applied 2 edit(s)"),
    (InterpretationResult.success(0, "hi"), ""),
    (InterpretationResult.validation_error("bad"), "Validation failed: bad"),
    (InterpretationResult.parse_error("Empty response"), "Could not parse response: Empty response"),
])
def test_status_message(result, expected):
    assert result.status_message == expected


# --- Logging --- #

def test_silent_without_logger():
    with capture_logs() as logs:
        _interp().interpret("not json")
    assert logs == []


def test_logs_rejections_with_logger():
    with capture_logs() as logs:
        _interp(logger=structlog.get_logger()).interpret("not json")
    rejected = [e for e in logs if e["event"] == "interpret_rejected"]
    assert len(rejected) == 1
    assert rejected[0]["status"] == "parse_error"
    assert rejected[0]["log_level"] == "info"


def test_oversized_number_is_validation_error():
    doc = _doc()
    text = '{"patch":[{"op":"replace","path":"/targetCalories","value":' + "9" * 400 + "}]}"
    result = _interp(doc).interpret(text)
    assert result.status is InterpretationStatus.VALIDATION_ERROR
    assert "above maximum 5000" in result.reason
    assert doc.get("targetCalories") is None


@pytest.mark.parametrize("source", ["", "   "])
def test_blank_source_is_validation_error(source):
    doc = _doc()
    result = _interp(doc).interpret('[{"op":"replace","path":"/notes","value":"a"}]', source=source)
    assert result.status is InterpretationStatus.VALIDATION_ERROR
    assert "Invalid source" in result.reason
    assert doc.history() == []
