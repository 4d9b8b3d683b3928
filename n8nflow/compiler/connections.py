# n8nflow/compiler/connections.py
from __future__ import annotations

from typing import Any, Dict, List, Sequence

from n8nflow.builder.workflow import WorkflowConnection


def build_connections(connections: Sequence) -> Dict[str, Dict[str, List[List[Dict[str, Any]]]]]:
    """
    Re-shape a flat connection list into n8n's nested format:

      connections[<source>][<"main"|"error">][<outputIndex>] -> [
          {"node": <target>, "type": <"main"|"error">, "index": <inputIndex>}, ...
      ]

    Skipped output ports are filled with empty lists. Targets within a port
    keep the order of the input list.
    """
    out: Dict[str, Dict[str, List[List[Dict[str, Any]]]]] = {}
    for c in connections:
        ctype = c.connection_type or "main"
        ports = out.setdefault(c.source, {}).setdefault(ctype, [])
        while len(ports) <= c.output_index:
            ports.append([])
        ports[c.output_index].append({
            "node": c.target,
            "type": ctype,
            "index": c.input_index or 0,
        })
    return out


def flatten_connections(compiled: Dict[str, Dict[str, List[List[Dict[str, Any]]]]]) -> List[WorkflowConnection]:
    """Inverse of build_connections: nested n8n connections back to a flat list."""
    flat: List[WorkflowConnection] = []
    for source, streams in compiled.items():
        for ctype, ports in streams.items():
            for output_index, hops in enumerate(ports):
                for hop in hops:
                    flat.append(WorkflowConnection(
                        source=source,
                        target=hop["node"],
                        output_index=output_index,
                        input_index=hop.get("index", 0),
                        connection_type=ctype,
                    ))
    return flat
