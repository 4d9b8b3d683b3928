# n8nflow/compiler/compiler.py
"""
Workflow compiler: builder graph -> n8n workflow JSON.

    registry = SchemaRegistry("schemas")
    document = await compile_workflow(wf, registry=registry)
"""
from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from jsonschema import Draft7Validator

from n8nflow.compiler.connections import build_connections
from n8nflow.compiler.layout import calculate_topology_positions
from n8nflow.compiler.schema import WORKFLOW_DOCUMENT_SCHEMA
from n8nflow.compiler.schema_registry import SchemaRegistry, default_registry
from n8nflow.compiler.validation import ValidationIssue, validate_workflow
from n8nflow.utils.logger import get_logger

logger = get_logger("compiler")

ON_ERROR_CONTINUE = "continueErrorOutput"


class WorkflowValidationError(ValueError):
    """Raised by compile_workflow when the graph has validation errors."""

    def __init__(self, errors: List[ValidationIssue]):
        self.errors = list(errors)
        lines = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"Workflow validation failed with {len(self.errors)} error(s):\n{lines}")


async def compile_workflow(graph, registry: Optional[SchemaRegistry] = None) -> Dict[str, Any]:
    """
    Compile a workflow graph into n8n's import format.

    Args:
        graph: object exposing `name`, `get_nodes()` and `get_connections()`
               (a WorkflowBuilder)
        registry: typeVersion source; the process-wide registry by default

    Returns:
        {"name", "nodes", "connections", "active": False, "settings": {}}

    Raises:
        WorkflowValidationError: the graph has one or more validation errors
    """
    registry = registry or default_registry
    await registry.load()

    nodes = graph.get_nodes()
    connections = graph.get_connections()

    if nodes:
        result = validate_workflow(nodes, connections)
        if not result.valid:
            raise WorkflowValidationError(result.errors)
        for w in result.warnings:
            logger.warning("%s: %s", graph.name, w)

    positions = calculate_topology_positions(nodes, connections)
    error_sources = {c.source for c in connections if c.connection_type == "error"}

    compiled_nodes = [
        _compile_node(n, registry, positions[n.name], n.name in error_sources)
        for n in nodes
    ]

    document = {
        "name": graph.name,
        "nodes": compiled_nodes,
        "connections": build_connections(connections),
        "active": False,
        "settings": {},
    }
    logger.debug(
        "compiled %r: %d nodes, %d connections",
        graph.name, len(compiled_nodes), len(connections),
    )
    return document


def _compile_node(node, registry: SchemaRegistry, position: List[int], has_error_output: bool) -> Dict[str, Any]:
    parameters = dict(node.parameters or {})
    if has_error_output:
        parameters["onError"] = ON_ERROR_CONTINUE

    out: Dict[str, Any] = {
        "id": str(uuid.uuid4()),
        "name": node.name,
        "type": node.type,
        "typeVersion": registry.get_type_version(node.type),
        "position": list(position),
        "parameters": parameters,
    }
    if node.credentials:
        out["credentials"] = {k: dict(v) for k, v in node.credentials.items()}
    return out


def check_document(document: Dict[str, Any]) -> List[str]:
    """Schema-check a compiled document; returns [SCHEMA] messages, empty if OK."""
    validator = Draft7Validator(WORKFLOW_DOCUMENT_SCHEMA)
    issues = []
    for e in sorted(validator.iter_errors(document), key=lambda e: [str(p) for p in e.absolute_path]):
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        issues.append(f"[SCHEMA] {where}: {e.message}")
    return issues
