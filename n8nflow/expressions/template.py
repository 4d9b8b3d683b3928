# n8nflow/expressions/template.py
from __future__ import annotations

from typing import Any

from n8nflow.expressions.reference import NodeOutput


def _quote(text: str) -> str:
    return "'" + text.replace("\\", "\\\\").replace("'", "\\'") + "'"


def expr(*parts: Any) -> str:
    """
    Join literal text and node references into one n8n expression.

        expr("Hello ", ref("Webhook").out.name)
        -> ={{ 'Hello ' + $node['Webhook'].json.name }}

    A single literal part is returned unchanged (no expression needed).
    """
    if len(parts) == 1 and not isinstance(parts[0], NodeOutput):
        return str(parts[0])

    pieces = []
    for p in parts:
        if isinstance(p, NodeOutput):
            pieces.append(p.expression)
        elif p == "":
            continue
        else:
            pieces.append(_quote(str(p)))
    return "={{ " + " + ".join(pieces) + " }}"
