# n8nflow/compiler/validation.py
"""
Structural validation of a workflow graph before compilation.

Every check runs and issues accumulate, so authors see all problems from one
pass. Problems are returned as data; nothing here raises for a bad graph.
"""
from __future__ import annotations

import json
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from n8nflow.utils.graph import has_trigger, is_trigger_type

NO_TRIGGER = "NO_TRIGGER"
ORPHAN_NODE = "ORPHAN_NODE"
INVALID_CONNECTION = "INVALID_CONNECTION"
INVALID_OUTPUT_INDEX = "INVALID_OUTPUT_INDEX"
MISSING_CREDENTIALS = "MISSING_CREDENTIALS"
INVALID_REF = "INVALID_REF"

# Output count per node type; None means the type has a variable number of
# outputs. Types not listed impose no bound.
MAX_OUTPUTS: Dict[str, Optional[int]] = {
    "n8n-nodes-base.if": 2,                 # true / false
    "n8n-nodes-base.splitInBatches": 2,     # done / loop
    "n8n-nodes-base.switch": None,          # one output per rule
}

# Node references inside expressions, matched on the JSON-serialized
# parameters (double quotes appear escaped there). The name runs to the
# quote that opened it, so the other quote may appear inside:
#   $node["Webhook"].json   $node['Webhook'].json   $('Webhook').item
_NODE_REF_RE = re.compile(
    r"""\$node\[\s*(\\?["'])(.+?)\1\s*\]"""
    r"""|\$\(\s*(\\?["'])(.+?)\3\s*\)"""
)
_JS_ESCAPE_RE = re.compile(r"\\(.)")


@dataclass
class ValidationIssue:
    type: str       # "error" | "warning"
    code: str
    message: str
    node: Optional[str] = None

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


@dataclass
class ValidationResult:
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def error(self, code: str, message: str, node: Optional[str] = None) -> None:
        self.errors.append(ValidationIssue("error", code, message, node))

    def warning(self, code: str, message: str, node: Optional[str] = None) -> None:
        self.warnings.append(ValidationIssue("warning", code, message, node))


def validate_workflow(nodes: Sequence, connections: Sequence) -> ValidationResult:
    """
    Validate graph structure and references.

    Args:
        nodes: WorkflowNode-like objects (name, type, parameters, credentials)
        connections: WorkflowConnection-like objects

    Returns:
        ValidationResult; `valid` is False iff at least one error was found.
    """
    result = ValidationResult()
    if not nodes:
        return result

    names = [n.name for n in nodes]
    known = set(names)
    by_name = {n.name: n for n in nodes}

    # 1) Trigger presence
    if not has_trigger(nodes):
        result.error(
            NO_TRIGGER,
            "Workflow has no trigger node (expected a trigger, webhook or schedule type)",
        )

    # 2) Orphans
    outgoing = Counter(c.source for c in connections)
    incoming = Counter(c.target for c in connections)
    multi_node = len(nodes) > 1
    for n in nodes:
        if is_trigger_type(n.type):
            if multi_node and outgoing[n.name] == 0:
                result.error(
                    ORPHAN_NODE,
                    f'Trigger node "{n.name}" has no outgoing connections',
                    n.name,
                )
        elif incoming[n.name] == 0:
            result.error(
                ORPHAN_NODE,
                f'Node "{n.name}" has no incoming connections and will never run',
                n.name,
            )

    # 3) Dangling connection endpoints
    for c in connections:
        if c.source not in known:
            result.error(
                INVALID_CONNECTION,
                f'Connection references unknown source: "{c.source}"',
                c.source,
            )
        if c.target not in known:
            result.error(
                INVALID_CONNECTION,
                f'Connection references unknown target: "{c.target}"',
                c.target,
            )

    # 4) Output index bounds for fixed-output types
    for c in connections:
        src = by_name.get(c.source)
        if src is None:
            continue
        limit = MAX_OUTPUTS.get(src.type)
        if limit is not None and c.output_index >= limit:
            result.error(
                INVALID_OUTPUT_INDEX,
                f'Node "{c.source}" ({src.type}) has {limit} outputs; '
                f"output index {c.output_index} is out of range",
                c.source,
            )

    # 5) Credentials are environment-specific
    for n in nodes:
        if n.credentials:
            kinds = ", ".join(sorted(n.credentials))
            result.warning(
                MISSING_CREDENTIALS,
                f'Node "{n.name}" uses credentials ({kinds}); '
                "make sure the referenced credential ids exist in the target n8n instance",
                n.name,
            )

    # 6) Expression references to unknown nodes
    for n in nodes:
        for ref in _referenced_nodes(n.parameters):
            if ref not in known:
                result.error(
                    INVALID_REF,
                    f'Node "{n.name}" references unknown node "{ref}" in an expression',
                    n.name,
                )

    return result


def _referenced_nodes(parameters) -> List[str]:
    """Distinct node names referenced from expressions, in order of appearance."""
    if not parameters:
        return []
    text = json.dumps(parameters, ensure_ascii=False, default=str)
    seen: Dict[str, None] = {}
    for m in _NODE_REF_RE.finditer(text):
        seen.setdefault(_unescape(m.group(2) or m.group(4)), None)
    return list(seen)


def _unescape(raw: str) -> str:
    # undo the JSON escaping, then the string-literal escaping inside the expression
    try:
        raw = json.loads(f'"{raw}"')
    except ValueError:
        pass
    return _JS_ESCAPE_RE.sub(r"\1", raw)
