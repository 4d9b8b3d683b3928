# n8nflow/utils/io.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

import yaml

PathLike = Union[str, Path]


def to_path(p: PathLike) -> Path:
    """Convert string-like to pathlib.Path."""
    return p if isinstance(p, Path) else Path(p)


def ensure_parent(path: PathLike) -> Path:
    """Ensure parent directory exists for a file path."""
    p = to_path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def read_json(path: PathLike) -> Any:
    with to_path(path).open("r", encoding="utf-8") as f:
        return json.load(f)


def write_json(path: PathLike, data: Any, indent: int = 2) -> Path:
    """Write JSON atomically (temp file then replace), pretty-formatted."""
    p = ensure_parent(path)
    tmp = p.with_suffix(p.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=indent)
        f.write("\n")
    tmp.replace(p)
    return p


def read_yaml(path: PathLike) -> Any:
    with to_path(path).open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_any(path: PathLike) -> Any:
    """
    Load structured data by extension:
      - .json -> JSON
      - .yaml/.yml -> YAML
    """
    p = to_path(path)
    suf = p.suffix.lower()
    if suf == ".json":
        return read_json(p)
    if suf in (".yaml", ".yml"):
        return read_yaml(p)
    raise ValueError(f"Unsupported extension: {suf} for {p}")
