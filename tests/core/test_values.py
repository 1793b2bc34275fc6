#!/usr/bin/env python3
from datetime import date, datetime, timezone

import pytest

from duetdocs.core.values import Value, ValueKind, parse_iso_date, to_jsonable


# --- Classification --- #

@pytest.mark.parametrize("raw,kind", [
    ("hello", ValueKind.STRING),
    ("", ValueKind.STRING),
    (1, ValueKind.NUMBER),
    (1.5, ValueKind.NUMBER),
    (True, ValueKind.BOOLEAN),
    (False, ValueKind.BOOLEAN),
    (date(2024, 5, 1), ValueKind.DATE),
    (datetime(2024, 5, 1, 12, 0), ValueKind.DATE),
    ({"a": 1}, ValueKind.OBJECT),
    ([1, 2], ValueKind.OBJECT),
    (None, ValueKind.ABSENT),
])
def test_value_of_classifies(raw, kind):
    assert Value.of(raw).kind is kind


def test_value_of_is_idempotent():
    v = Value.of(3)
    assert Value.of(v) is v


@pytest.mark.parametrize("raw,name", [
    ([1], "array"),
    ({"a": 1}, "object"),
    (None, "null"),
    ("x", "string"),
    (True, "boolean"),
])
def test_type_name(raw, name):
    assert Value.of(raw).type_name == name


# --- JSON helpers --- #

def test_to_jsonable_converts_dates_recursively():
    payload = {"d": date(2024, 1, 2), "nested": [datetime(2024, 1, 2, 3, 4, 5)], "n": 1}
    assert to_jsonable(payload) == {"d": "2024-01-02", "nested": ["2024-01-02T03:04:05"], "n": 1}


def test_parse_iso_date_plain_and_datetime():
    assert parse_iso_date("2024-05-01") == date(2024, 5, 1)
    assert type(parse_iso_date("2024-05-01")) is date
    assert parse_iso_date("2024-05-01T10:30:00+00:00") == datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc)


def test_parse_iso_date_rejects_garbage():
    with pytest.raises(ValueError):
        parse_iso_date("next tuesday")


@pytest.mark.parametrize("raw", ["2024-05-01T10:30:00Z", "2024-05-01T10:30:00z", " 2024-05-01T10:30:00Z "])
def test_parse_iso_date_accepts_utc_designator(raw):
    assert parse_iso_date(raw) == datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc)
