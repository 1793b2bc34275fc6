#!/usr/bin/env python3
import json

import duetdocs.core.app_context as app_context
from duetdocs.core.app_context import build_context
from duetdocs.core.constants import DEFAULT_TEXT_ENCODING


def _write_schema(root, name):
    root.mkdir(parents=True, exist_ok=True)
    (root / f"{name}.json").write_text(
        json.dumps({"name": name, "fields": [{"id": "title"}]}), encoding=DEFAULT_TEXT_ENCODING
    )


def test_build_context_uses_config_schema_paths(tmp_path):
    _write_schema(tmp_path / "schemas", "Notes")
    ctx = build_context(config={"schema_paths": [str(tmp_path / "schemas")]}, configure_logging=False)
    assert ctx.schemas.loaded is True
    assert ctx.schemas.names() == ["notes"]


def test_schema_roots_override_config(tmp_path):
    _write_schema(tmp_path / "a", "Alpha")
    _write_schema(tmp_path / "b", "Beta")
    ctx = build_context(
        config={"schema_paths": [str(tmp_path / "a")]},
        schema_roots=[tmp_path / "b"],
        configure_logging=False,
    )
    assert ctx.schemas.names() == ["beta"]
    assert ctx.schemas.roots == [tmp_path / "b"]


def test_no_preload(tmp_path):
    ctx = build_context(config={"schema_paths": [str(tmp_path)]}, preload=False, configure_logging=False)
    assert ctx.schemas.loaded is False


def test_default_source(tmp_path):
    ctx = build_context(config={"schema_paths": []}, preload=False, configure_logging=False)
    assert ctx.default_source == "user"
    ctx = build_context(
        config={"schema_paths": [], "patch": {"default_source": "editor"}},
        preload=False,
        configure_logging=False,
    )
    assert ctx.default_source == "editor"


def test_logging_configured_from_config(monkeypatch):
    calls = []
    monkeypatch.setattr(app_context, "setup_logging", lambda **kw: calls.append(kw))
    build_context(config={"schema_paths": [], "logging": {"level": "DEBUG", "json": True}}, preload=False)
    assert calls == [{"json_mode": True, "level": "DEBUG"}]


def test_load_config_used_when_no_config(monkeypatch, tmp_path):
    monkeypatch.setattr(app_context, "load_config", lambda: {"schema_paths": [str(tmp_path)]})
    ctx = build_context(preload=False, configure_logging=False)
    assert ctx.config == {"schema_paths": [str(tmp_path)]}
