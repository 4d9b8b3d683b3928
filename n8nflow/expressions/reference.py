# n8nflow/expressions/reference.py
"""
References to node output data, rendered as n8n expressions.

    ref("Webhook").out.body.name        ->  $node['Webhook'].json.body.name
    str(ref("Webhook").out.items[0])    ->  ={{ $node['Webhook'].json.items[0] }}
"""
from __future__ import annotations

import re
from typing import Tuple, Union

Segment = Union[str, int]

_DIGITS_RE = re.compile(r"^\d+$")


def _node_literal(name: str) -> str:
    """Quoted node name; double quotes when the name holds a single quote."""
    q = '"' if "'" in name and '"' not in name else "'"
    return q + name.replace("\\", "\\\\").replace(q, "\\" + q) + q


class NodeOutput:
    """Path into a node's JSON output; attribute and item access extend it."""

    __slots__ = ("_node", "_path")

    def __init__(self, node: str, path: Tuple[Segment, ...] = ()):
        self._node = node
        self._path = path

    def __getattr__(self, name: str) -> "NodeOutput":
        if name.startswith("__"):
            raise AttributeError(name)
        return NodeOutput(self._node, self._path + (name,))

    def __getitem__(self, key: Segment) -> "NodeOutput":
        return NodeOutput(self._node, self._path + (key,))

    @property
    def expression(self) -> str:
        """Bare expression, for embedding in larger expressions."""
        parts = []
        for seg in self._path:
            if isinstance(seg, int) or _DIGITS_RE.match(str(seg)):
                parts.append(f"[{seg}]")
            else:
                parts.append(f".{seg}")
        return f"$node[{_node_literal(self._node)}].json{''.join(parts)}"

    def __str__(self) -> str:
        return f"={{{{ {self.expression} }}}}"

    def __repr__(self) -> str:
        return f"NodeOutput({self.expression!r})"


class NodeReference:
    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    @property
    def out(self) -> NodeOutput:
        return NodeOutput(self.name)


def ref(node_name: str) -> NodeReference:
    return NodeReference(node_name)
