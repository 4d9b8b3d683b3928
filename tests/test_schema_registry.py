import asyncio
import threading

import pytest

from n8nflow.compiler.schema_registry import (
    SchemaRegistry,
    SchemaRegistryNotLoadedError,
    default_version,
)
from n8nflow.schema.cache import write_schema


def test_default_version_prefers_explicit_default():
    assert default_version({"name": "x", "version": [1, 2, 3], "defaultVersion": 2}) == 2


def test_default_version_uses_max_of_list():
    assert default_version({"name": "x", "version": [1, 4.2, 3]}) == 4.2


def test_default_version_single_number():
    assert default_version({"name": "x", "version": 3}) == 3


def test_lookup_before_load_is_fatal(registry):
    with pytest.raises(SchemaRegistryNotLoadedError):
        registry.get_type_version("n8n-nodes-base.set")


def test_versions_after_load(registry):
    asyncio.run(registry.load())
    assert registry.loaded
    assert registry.get_type_version("n8n-nodes-base.if") == 2
    assert registry.get_type_version("n8n-nodes-base.set") == 3.4
    assert registry.get_type_version("n8n-nodes-base.httpRequest") == 4.2


def test_unknown_type_falls_back_to_one(registry):
    asyncio.run(registry.load())
    assert registry.get_type_version("community.unknownNode") == 1


def test_concurrent_loads_share_one_read():
    calls = []
    gate = threading.Event()

    def loader():
        calls.append(1)
        gate.wait(timeout=5)
        return [{"name": "a", "version": 1}]

    reg = SchemaRegistry(loader=loader)

    async def main():
        tasks = [asyncio.create_task(reg.load()) for _ in range(5)]
        await asyncio.sleep(0.05)
        gate.set()
        return await asyncio.gather(*tasks)

    results = asyncio.run(main())
    assert len(calls) == 1
    assert all(r is results[0] for r in results)

    asyncio.run(reg.load())
    assert len(calls) == 1


def test_failed_load_is_retried():
    attempts = []

    def loader():
        attempts.append(1)
        if len(attempts) == 1:
            raise OSError("disk gone")
        return [{"name": "a", "version": [1, 2]}]

    reg = SchemaRegistry(loader=loader)
    with pytest.raises(OSError):
        asyncio.run(reg.load())
    assert not reg.loaded

    asyncio.run(reg.load())
    assert reg.get_type_version("a") == 2
    assert len(attempts) == 2


def test_loads_from_schema_directory(tmp_path):
    write_schema({"name": "n8n-nodes-base.slack", "version": [1, 2, 2.1], "displayName": "Slack"}, tmp_path)
    write_schema({"name": "n8n-nodes-base.code", "version": [1, 2], "defaultVersion": 2}, tmp_path)

    reg = SchemaRegistry(tmp_path)
    asyncio.run(reg.load())
    assert reg.get_type_version("n8n-nodes-base.slack") == 2.1
    assert reg.get_type_version("n8n-nodes-base.code") == 2


def test_missing_schema_directory_loads_empty(tmp_path):
    reg = SchemaRegistry(tmp_path / "nope")
    asyncio.run(reg.load())
    assert reg.get_type_version("n8n-nodes-base.slack") == 1
