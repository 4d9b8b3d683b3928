import json

import pytest

from n8nflow.schema.cache import (
    list_cached_schemas,
    read_all_schemas,
    read_schema,
    schema_dir,
    write_schema,
)


def test_write_then_list_and_read(tmp_path):
    write_schema({"name": "n8n-nodes-base.slack", "version": 2}, tmp_path)
    write_schema({"name": "n8n-nodes-base.if", "version": [1, 2]}, tmp_path)

    assert (tmp_path / "n8n-nodes-base.slack.json").is_file()
    assert list_cached_schemas(tmp_path) == ["n8n-nodes-base.if", "n8n-nodes-base.slack"]
    assert read_schema("n8n-nodes-base.slack", tmp_path)["version"] == 2
    assert [s["name"] for s in read_all_schemas(tmp_path)] == ["n8n-nodes-base.if", "n8n-nodes-base.slack"]


def test_missing_directory_is_empty(tmp_path):
    assert list_cached_schemas(tmp_path / "missing") == []
    assert read_all_schemas(tmp_path / "missing") == []


def test_missing_record(tmp_path):
    with pytest.raises(FileNotFoundError, match="n8n-nodes-base.nope"):
        read_schema("n8n-nodes-base.nope", tmp_path)


def test_malformed_record_rejected(tmp_path):
    (tmp_path / "broken.json").write_text(json.dumps({"name": "broken", "version": "one"}), encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid node type schema"):
        read_all_schemas(tmp_path)


def test_schema_dir_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("N8N_SCHEMA_DIR", str(tmp_path))
    assert schema_dir() == tmp_path
    assert schema_dir("explicit") != tmp_path
