# n8nflow/schema/cache.py
"""
Local cache of n8n node-type schema records, one JSON file per type:

    schemas/n8n-nodes-base.slack.json
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import ValidationError, validate

from n8nflow.utils.io import PathLike, read_json, to_path, write_json

DEFAULT_SCHEMA_DIR = "schemas"

# Only the fields the compiler relies on; records carry much more.
NODE_TYPE_SCHEMA = {
    "type": "object",
    "required": ["name", "version"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "version": {
            "anyOf": [
                {"type": "number"},
                {"type": "array", "items": {"type": "number"}, "minItems": 1},
            ]
        },
        "defaultVersion": {"type": "number"},
    },
    "additionalProperties": True,
}


def schema_dir(path: Optional[PathLike] = None) -> Path:
    """Explicit path, else N8N_SCHEMA_DIR, else ./schemas."""
    return to_path(path or os.getenv("N8N_SCHEMA_DIR", DEFAULT_SCHEMA_DIR))


def _filename(node_type: str) -> str:
    return f"{node_type}.json"


def write_schema(node_type: Dict[str, Any], directory: Optional[PathLike] = None) -> Path:
    _check_record(node_type, source=node_type.get("name", "<unnamed>"))
    return write_json(schema_dir(directory) / _filename(node_type["name"]), node_type)


def read_schema(node_type: str, directory: Optional[PathLike] = None) -> Dict[str, Any]:
    path = schema_dir(directory) / _filename(node_type)
    if not path.is_file():
        raise FileNotFoundError(f"Schema not found in cache: {node_type}")
    record = read_json(path)
    _check_record(record, source=str(path))
    return record


def list_cached_schemas(directory: Optional[PathLike] = None) -> List[str]:
    """Node type names present in the cache; empty when the directory is missing."""
    d = schema_dir(directory)
    if not d.is_dir():
        return []
    return sorted(p.name[: -len(".json")] for p in d.glob("*.json"))


def read_all_schemas(directory: Optional[PathLike] = None) -> List[Dict[str, Any]]:
    return [read_schema(name, directory) for name in list_cached_schemas(directory)]


def _check_record(record: Any, source: str) -> None:
    try:
        validate(instance=record, schema=NODE_TYPE_SCHEMA)
    except ValidationError as e:
        raise ValueError(f"Invalid node type schema in {source}: {e.message}") from e
