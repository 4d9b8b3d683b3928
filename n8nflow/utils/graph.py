# n8nflow/utils/graph.py
from typing import Iterable, List

import networkx as nx

TRIGGER_KEYS = ("trigger", "webhook", "cron", "schedule", "interval")


def is_trigger_type(node_type: str) -> bool:
    """Heuristic trigger detection by node type name (n8n naming convention)."""
    t = (node_type or "").lower()
    return any(k in t for k in TRIGGER_KEYS)


def has_trigger(nodes: Iterable) -> bool:
    return any(is_trigger_type(n.type) for n in nodes)


def build_graph(nodes: List, connections: List) -> nx.DiGraph:
    """
    Build a directed graph keyed by node name, nodes added in input order.

    Connections whose endpoints are not known node names are skipped, so the
    result only ever contains declared nodes. Parallel connections between the
    same pair (different ports, main + error) collapse into one edge.
    """
    G = nx.DiGraph()
    for n in nodes:
        G.add_node(n.name, type=n.type)

    for c in connections:
        if c.source not in G or c.target not in G:
            continue
        G.add_edge(c.source, c.target)
    return G
