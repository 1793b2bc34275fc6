#!/usr/bin/env python3
import json
import threading
from datetime import date

import pytest

from duetdocs.core.constants import DEFAULT_TEXT_ENCODING
from duetdocs.core.document.document import Document
from duetdocs.core.errors import TypeMismatchError, UnknownFieldError
from duetdocs.core.patch.ops import JsonPatchOp
from duetdocs.core.schema.document_schema import DocumentSchema


def _schema() -> DocumentSchema:
    return DocumentSchema.model_validate({
        "name": "Budget",
        "fields": [
            {"id": "targetCalories", "label": "Target Calories", "type": "number",
             "min": 500, "max": 5000, "default": 2000},
            {"id": "mode", "label": "Mode", "type": "enum", "options": ["cut", "bulk"]},
            {"id": "vegan", "label": "Vegan", "type": "boolean"},
            {"id": "start", "label": "Start", "type": "date"},
        ],
    })


def _replace(field_id, value):
    return {"op": "replace", "path": f"/{field_id}", "value": value}


# --- Construction --- #

def test_new_document_uses_schema_defaults():
    doc = Document(_schema())
    assert doc.values() == {"targetCalories": 2000}
    assert doc.get("mode") is None
    assert doc.history() == []


def test_initial_values_are_validated_and_normalized():
    doc = Document(_schema(), values={"start": "2024-05-01", "vegan": True})
    assert doc.get("start") == date(2024, 5, 1)
    assert doc.get("targetCalories") is None


def test_initial_values_unknown_field_raises():
    with pytest.raises(UnknownFieldError):
        Document(_schema(), values={"calories": 1})


def test_initial_values_null_rejected():
    with pytest.raises(TypeMismatchError):
        Document(_schema(), values={"mode": None})


# --- apply_patch --- #

def test_replace_within_bounds_succeeds():
    doc = Document(_schema())
    result = doc.apply_patch([_replace("targetCalories", 1800)])
    assert result.success is True
    assert result.applied == 1
    assert doc.get("targetCalories") == 1800


def test_out_of_range_rejected_and_value_kept():
    doc = Document(_schema())
    doc.apply_patch([_replace("targetCalories", 1800)])

    result = doc.apply_patch([_replace("targetCalories", 6000)])

    assert result.success is False
    assert result.applied == 0
    assert "above maximum 5000" in result.error
    assert result.failed_field == "targetCalories"
    assert doc.get("targetCalories") == 1800


@pytest.mark.parametrize("source", ["", "   ", None])
def test_blank_source_rejected_without_applying(source):
    doc = Document(_schema())
    result = doc.apply_patch([_replace("targetCalories", 1800)], source=source)
    assert result.success is False
    assert result.applied == 0
    assert "Invalid source" in result.error
    assert result.failed_index is None
    assert doc.get("targetCalories") == 2000
    assert doc.history() == []


def test_source_label_is_normalized():
    doc = Document(_schema())
    assert doc.apply_patch([_replace("mode", "cut")], source="  LLM ").success
    assert doc.history()[0].source == "llm"


def test_patch_is_atomic():
    doc = Document(_schema())
    before = doc.values()
    result = doc.apply_patch([
        _replace("mode", "cut"),
        _replace("vegan", True),
        _replace("targetCalories", "lots"),
    ])
    assert result.success is False
    assert result.failed_index == 2
    assert doc.values() == before
    assert doc.history() == []


def test_same_field_twice_last_write_wins():
    doc = Document(_schema())
    result = doc.apply_patch([_replace("mode", "cut"), _replace("mode", "bulk")])
    assert result.applied == 2
    assert doc.get("mode") == "bulk"


def test_same_field_twice_second_invalid_rolls_back_both():
    doc = Document(_schema())
    doc.apply_patch([_replace("mode", "cut")])
    result = doc.apply_patch([_replace("mode", "bulk"), _replace("mode", "keto")])
    assert result.success is False
    assert doc.get("mode") == "cut"


def test_add_behaves_like_replace():
    doc = Document(_schema())
    result = doc.apply_patch([{"op": "add", "path": "/vegan", "value": False}])
    assert result.success is True
    assert doc.get("vegan") is False


def test_unknown_field_rejected():
    doc = Document(_schema())
    result = doc.apply_patch([_replace("calories", 1)])
    assert result.success is False
    assert "Unknown field: calories" in result.error


@pytest.mark.parametrize("op", ["remove", "move", "copy", "test"])
def test_unsupported_verbs_rejected(op):
    doc = Document(_schema())
    result = doc.apply_patch([{"op": op, "path": "/mode", "value": "cut"}])
    assert result.success is False
    assert "Unsupported operation" in result.error


def test_empty_patch_succeeds_and_is_recorded():
    doc = Document(_schema())
    result = doc.apply_patch([])
    assert result.success is True
    assert result.applied == 0
    assert len(doc.history()) == 1


# --- History --- #

def test_history_grows_by_one_per_success_only():
    doc = Document(_schema())
    doc.apply_patch([_replace("mode", "cut")], source="user")
    doc.apply_patch([_replace("mode", "nope")], source="llm")
    doc.apply_patch([JsonPatchOp.replace("vegan", True), _replace("mode", "bulk")], source="LLM")

    history = doc.history()
    assert len(history) == 2
    assert [h.source for h in history] == ["user", "llm"]
    assert history[1].applied == 2
    assert history[1].fields_touched == ["vegan", "mode"]
    assert history[0].timestamp <= history[1].timestamp


def test_history_is_a_copy_and_clear_empties_it():
    doc = Document(_schema())
    doc.apply_patch([_replace("mode", "cut")])
    doc.history().clear()
    assert len(doc.history()) == 1

    doc.clear_history()
    assert doc.history() == []
    assert doc.get("mode") == "cut"


# --- Export & summaries --- #

def test_export_json_omits_unset_and_writes_iso_dates():
    doc = Document(_schema(), values={"targetCalories": 1800, "start": date(2024, 5, 1)})
    assert json.loads(doc.export_json()) == {"targetCalories": 1800, "start": "2024-05-01"}


def test_export_reapplies_to_fresh_document():
    doc = Document(_schema())
    doc.apply_patch([_replace("mode", "bulk"), _replace("start", "2024-05-01"), _replace("vegan", False)])

    fresh = Document(_schema(), values={})
    exported = json.loads(doc.export_json())
    result = fresh.apply_patch([_replace(k, v) for k, v in exported.items()])

    assert result.success is True
    assert fresh.values() == doc.values()


def test_to_patch_matches_values():
    doc = Document(_schema(), values={"mode": "cut", "start": "2024-05-01"})
    ops = doc.to_patch()
    assert [(o.path, o.value) for o in ops] == [("/mode", "cut"), ("/start", "2024-05-01")]


def test_values_follow_schema_order():
    doc = Document(_schema(), values={})
    doc.apply_patch([_replace("vegan", True), _replace("mode", "cut")])
    assert list(doc.values()) == ["mode", "vegan"]


def test_intent_summary():
    doc = Document(_schema())
    doc.apply_patch([_replace("vegan", True), _replace("targetCalories", 1800.0)])
    assert doc.intent_summary() == (
        "Target Calories: 1800\n"
        "Mode: not set\n"
        "Vegan: true\n"
        "Start: not set"
    )


# --- Files --- #

def test_from_file_yaml(tmp_path):
    p = tmp_path / "values.yaml"
    p.write_text("mode: bulk\nvegan: true\n", encoding=DEFAULT_TEXT_ENCODING)
    doc = Document.from_file(_schema(), p)
    assert doc.values() == {"mode": "bulk", "vegan": True}


def test_from_file_empty_yaml_gives_empty_document(tmp_path):
    p = tmp_path / "values.yml"
    p.write_text("", encoding=DEFAULT_TEXT_ENCODING)
    assert Document.from_file(_schema(), p).values() == {}


@pytest.mark.parametrize("name,content,exc", [
    ("values.txt", "mode: cut", ValueError),
    ("values.yaml", "- a\n- b\n", ValueError),
])
def test_from_file_rejects_bad_input(tmp_path, name, content, exc):
    p = tmp_path / name
    p.write_text(content, encoding=DEFAULT_TEXT_ENCODING)
    with pytest.raises(exc):
        Document.from_file(_schema(), p)


def test_from_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        Document.from_file(_schema(), tmp_path / "nope.yaml")


# --- Concurrency --- #

def test_concurrent_patches_all_recorded():
    doc = Document(_schema())

    def worker(n):
        for i in range(25):
            doc.apply_patch([_replace("targetCalories", 500 + n * 100 + i)], source=f"w{n}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(doc.history()) == 100
    assert 500 <= doc.get("targetCalories") <= 5000
