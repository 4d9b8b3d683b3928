# n8nflow/builder/workflow.py
"""
Fluent workflow builder.

    wf = workflow("My Workflow")
    hook = wf.trigger("Webhook", "n8n-nodes-base.webhook", {"httpMethod": "POST"})
    slack = wf.node("Send Slack", "n8n-nodes-base.slack", {"text": "Hello"})
    wf.connect(hook, slack)

The builder owns its node/connection lists; get_nodes() and get_connections()
hand out deep copies so a compile in flight never sees later edits.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jsonschema import ValidationError, validate

from n8nflow.compiler.schema import GRAPH_INPUT_SCHEMA

CONNECTION_TYPES = ("main", "error")


@dataclass(frozen=True)
class NodeRef:
    name: str


@dataclass
class WorkflowNode:
    name: str
    type: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    credentials: Optional[Dict[str, Dict[str, str]]] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WorkflowNode":
        return cls(
            name=d["name"],
            type=d["type"],
            parameters=copy.deepcopy(d.get("parameters") or {}),
            credentials=copy.deepcopy(d.get("credentials")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "type": self.type, "parameters": self.parameters}
        if self.credentials:
            out["credentials"] = self.credentials
        return out


@dataclass
class WorkflowConnection:
    source: str
    target: str
    output_index: int = 0
    input_index: int = 0
    connection_type: str = "main"

    def __post_init__(self):
        if self.connection_type not in CONNECTION_TYPES:
            raise ValueError(
                f"Unknown connection type {self.connection_type!r}; expected one of {', '.join(CONNECTION_TYPES)}"
            )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WorkflowConnection":
        return cls(
            source=d["from"],
            target=d["to"],
            output_index=int(d.get("outputIndex", 0)),
            input_index=int(d.get("inputIndex", 0) or 0),
            connection_type=d.get("connectionType") or "main",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.source,
            "to": self.target,
            "outputIndex": self.output_index,
            "inputIndex": self.input_index,
            "connectionType": self.connection_type,
        }


class WorkflowBuilder:
    def __init__(self, name: str):
        self.name = name
        self._nodes: List[WorkflowNode] = []
        self._connections: List[WorkflowConnection] = []
        self._names: set = set()

    # ---------- nodes ----------

    def _add_node(self, name: str, type: str, parameters: Optional[Dict[str, Any]],
                  credentials: Optional[Dict[str, Dict[str, str]]]) -> NodeRef:
        if name in self._names:
            raise ValueError(
                f'Node name "{name}" is duplicate. Each node must have a unique name within the workflow.'
            )
        self._names.add(name)
        self._nodes.append(WorkflowNode(name, type, copy.deepcopy(parameters or {}), copy.deepcopy(credentials)))
        return NodeRef(name)

    def trigger(self, name: str, type: str, parameters: Optional[Dict[str, Any]] = None,
                credentials: Optional[Dict[str, Dict[str, str]]] = None) -> NodeRef:
        return self._add_node(name, type, parameters, credentials)

    def node(self, name: str, type: str, parameters: Optional[Dict[str, Any]] = None,
             credentials: Optional[Dict[str, Dict[str, str]]] = None) -> NodeRef:
        return self._add_node(name, type, parameters, credentials)

    # ---------- connections ----------

    def _check_ref(self, ref: NodeRef, role: str) -> None:
        if ref.name not in self._names:
            raise ValueError(
                f'Unknown node: "{ref.name}". Cannot connect {role} a node that doesn\'t exist in the workflow.'
            )

    def connect(self, source: NodeRef, target: NodeRef, output_index: int = 0, input_index: int = 0) -> None:
        self._check_ref(source, "from")
        self._check_ref(target, "to")
        if output_index < 0 or input_index < 0:
            raise ValueError("output_index and input_index must be non-negative")
        self._connections.append(WorkflowConnection(source.name, target.name, output_index, input_index))

    def connect_error(self, source: NodeRef, target: NodeRef) -> None:
        """Route the source node's error output to target."""
        self._check_ref(source, "from")
        self._check_ref(target, "to")
        self._connections.append(WorkflowConnection(source.name, target.name, 0, 0, "error"))

    # ---------- read accessors ----------

    def get_nodes(self) -> List[WorkflowNode]:
        return copy.deepcopy(self._nodes)

    def get_connections(self) -> List[WorkflowConnection]:
        return copy.deepcopy(self._connections)

    # ---------- serialized graph format ----------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkflowBuilder":
        """
        Load a graph from {name, nodes: [...], connections: [...]}.

        Only the shape is checked here; dangling references are left for the
        validator so they are reported together with every other issue.
        """
        try:
            validate(instance=data, schema=GRAPH_INPUT_SCHEMA)
        except ValidationError as e:
            raise ValueError(f"Malformed workflow graph: {e.message}") from e

        wf = cls(data["name"])
        for nd in data["nodes"]:
            node = WorkflowNode.from_dict(nd)
            if node.name in wf._names:
                raise ValueError(f'Node name "{node.name}" is duplicate.')
            wf._names.add(node.name)
            wf._nodes.append(node)
        wf._connections = [WorkflowConnection.from_dict(c) for c in data.get("connections") or []]
        return wf

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "nodes": [n.to_dict() for n in self._nodes],
            "connections": [c.to_dict() for c in self._connections],
        }


def workflow(name: str) -> WorkflowBuilder:
    """Create a new workflow builder."""
    return WorkflowBuilder(name)
