# n8nflow/compiler/schema_registry.py
"""
typeVersion lookup backed by the local schema cache.

The registry is loaded once and reused for every compilation. Concurrent
callers of load() await the same in-flight task.
"""
from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from n8nflow.schema.cache import read_all_schemas
from n8nflow.utils.io import PathLike
from n8nflow.utils.logger import get_logger

logger = get_logger("schema_registry")

FALLBACK_TYPE_VERSION = 1


class SchemaRegistryNotLoadedError(RuntimeError):
    pass


def default_version(schema: Dict[str, Any]) -> float:
    """defaultVersion if present, else the highest declared version."""
    if schema.get("defaultVersion") is not None:
        return schema["defaultVersion"]
    versions = schema["version"]
    if not isinstance(versions, list):
        versions = [versions]
    return max(versions)


class SchemaRegistry:
    def __init__(
        self,
        schema_dir: Optional[PathLike] = None,
        loader: Optional[Callable[[], List[Dict[str, Any]]]] = None,
    ):
        self._loader = loader or (lambda: read_all_schemas(schema_dir))
        self._versions: Optional[Dict[str, float]] = None
        self._loading: Optional[asyncio.Task] = None

    @property
    def loaded(self) -> bool:
        return self._versions is not None

    async def load(self) -> Dict[str, float]:
        if self._versions is not None:
            return self._versions
        if self._loading is None:
            self._loading = asyncio.ensure_future(self._load())
        try:
            return await asyncio.shield(self._loading)
        finally:
            # a failed load is not memoized; the next caller retries
            if self._loading is not None and self._loading.done() and self._versions is None:
                self._loading = None

    async def _load(self) -> Dict[str, float]:
        schemas = await asyncio.to_thread(self._loader)
        versions = {s["name"]: default_version(s) for s in schemas}
        self._versions = versions
        logger.debug("loaded typeVersions for %d node types", len(versions))
        return versions

    def get_type_version(self, node_type: str) -> float:
        if self._versions is None:
            raise SchemaRegistryNotLoadedError(
                "Schema registry not loaded. Call `await registry.load()` before get_type_version()"
            )
        return self._versions.get(node_type, FALLBACK_TYPE_VERSION)


# Process-wide registry used when the caller does not supply one.
default_registry = SchemaRegistry()
