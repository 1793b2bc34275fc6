#!/usr/bin/env python3
import json

import structlog
from structlog.testing import capture_logs

from duetdocs.core.bridge.bridge import LLMBridge
from duetdocs.core.bridge.resource import DocumentResource
from duetdocs.core.document.document import Document
from duetdocs.core.interpret.interpreter import InterpretationStatus
from duetdocs.core.schema.document_schema import DocumentSchema


def _doc(name: str = "Budget") -> Document:
    schema = DocumentSchema.model_validate({
        "name": name,
        "fields": [
            {"id": "targetCalories", "label": "Target Calories", "type": "number", "min": 500, "max": 5000},
        ],
    })
    return Document(schema)


# --- Resource --- #

def test_resource_uri_and_content():
    doc = _doc("Budget")
    doc.apply_patch([{"op": "replace", "path": "/targetCalories", "value": 1800}])
    res = DocumentResource(doc)
    assert res.uri == "kit://documents/budget"
    assert json.loads(res.content) == {"targetCalories": 1800}


def test_resource_edit_tool_uses_input_schema_key():
    tool = DocumentResource(_doc()).edit_tool.to_dict()
    assert tool["name"] == "edit_budget"
    assert tool["description"] == "Edit the Budget document"
    assert tool["inputSchema"]["required"] == ["patch"]


# --- Bridge --- #

def test_bridge_round_trip():
    doc = _doc()
    bridge = LLMBridge(doc, quiet=True)

    assert "Current Values:" in bridge.context()
    assert bridge.compact_context().startswith("Document: Budget\n")
    assert bridge.tool_descriptor().name == "edit_budget"
    assert bridge.resource().uri == "kit://documents/budget"

    result = bridge.apply_response('{"patch":[{"op":"replace","path":"/targetCalories","value":1800}]}')
    assert result.status is InterpretationStatus.SUCCESS
    assert bridge.document.get("targetCalories") == 1800
    assert [h.source for h in bridge.history()] == ["llm"]

    bridge.clear_history()
    assert bridge.history() == []


def test_bridge_rejection_leaves_document_unchanged():
    doc = _doc()
    bridge = LLMBridge(doc, quiet=True)
    bridge.apply_response('[{"op":"replace","path":"/targetCalories","value":1800}]')
    result = bridge.apply_response('[{"op":"replace","path":"/targetCalories","value":6000}]')
    assert result.status is InterpretationStatus.VALIDATION_ERROR
    assert doc.get("targetCalories") == 1800


def test_bridge_logs_bound_document_name():
    with capture_logs() as logs:
        LLMBridge(_doc(), log=structlog.get_logger()).apply_response("nope")
    rejected = [e for e in logs if e["event"] == "interpret_rejected"]
    assert rejected and rejected[0]["document"] == "Budget"


def test_quiet_bridge_logs_nothing():
    with capture_logs() as logs:
        LLMBridge(_doc(), log=structlog.get_logger(), quiet=True).apply_response("nope")
    assert logs == []
