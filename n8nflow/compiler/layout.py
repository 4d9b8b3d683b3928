# n8nflow/compiler/layout.py
"""
Canvas layout for compiled workflows.

Columns follow data flow left to right: a node's column is its longest
distance from a root (a node without incoming connections), so merge nodes
land one column right of their deepest input. Rows stack nodes of one column
in BFS discovery order.
"""
from __future__ import annotations

from collections import deque
from typing import Dict, List, Sequence

import networkx as nx

from n8nflow.utils.graph import build_graph

SPACING_X = 300
SPACING_Y = 200
START_X = 100
START_Y = 100


def calculate_topology_positions(nodes: Sequence, connections: Sequence) -> Dict[str, List[int]]:
    """
    Compute an [x, y] canvas position per node name.

    Nodes not reachable from any root (e.g. a pure cycle) are placed together
    in one column right of the deepest reached node.
    """
    if not nodes:
        return {}

    G = build_graph(list(nodes), list(connections))
    roots = [n for n in G.nodes if G.in_degree(n) == 0]

    order = _bfs_order(G, roots)
    depth = _longest_path_depth(G.subgraph(order), order)

    columns: Dict[int, List[str]] = {}
    for name in order:
        columns.setdefault(depth[name], []).append(name)

    reached = set(order)
    orphans = [n for n in G.nodes if n not in reached]
    if orphans:
        orphan_col = max(columns) + 1 if columns else 0
        columns.setdefault(orphan_col, []).extend(orphans)

    positions: Dict[str, List[int]] = {}
    for col, names in columns.items():
        for row, name in enumerate(names):
            positions[name] = [START_X + col * SPACING_X, START_Y + row * SPACING_Y]
    return positions


def _bfs_order(G: nx.DiGraph, roots: List[str]) -> List[str]:
    """Discovery order of a BFS started from all roots at once."""
    visited = set(roots)
    order = list(roots)
    q = deque(roots)
    while q:
        cur = q.popleft()
        for nxt in G.successors(cur):
            if nxt not in visited:
                visited.add(nxt)
                order.append(nxt)
                q.append(nxt)
    return order


def _longest_path_depth(G: nx.DiGraph, order: List[str]) -> Dict[str, int]:
    """
    Longest distance from a root for every node of G.

    Cycles are collapsed into their strongly connected component first; all
    members of a cycle share the component's depth. This differs from a plain
    BFS max-depth walk, which would spread a reachable cycle over several
    columns; on acyclic graphs both give the same columns.
    """
    if not order:
        return {}
    Gc = nx.condensation(G)
    comp_of: Dict[str, int] = Gc.graph["mapping"]

    comp_depth: Dict[int, int] = {}
    for c in nx.topological_sort(Gc):
        preds = [comp_depth[p] + 1 for p in Gc.predecessors(c)]
        comp_depth[c] = max(preds, default=0)

    return {name: comp_depth[comp_of[name]] for name in order}

