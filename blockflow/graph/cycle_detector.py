"""Cycle diagnostics for flow graphs.

A pre-flight check, independent of the sequencer, that finds an actual cycle
and renders it as a readable chain of block names, so a user sees which
connection to remove before any block runs.
"""

from dataclasses import dataclass, field

from blockflow.graph.edge import EdgeSpec
from blockflow.graph.node import NodeSpec


@dataclass
class CycleInfo:
    """Outcome of cycle detection."""

    has_cycle: bool
    cycle_nodes: list[str] = field(default_factory=list)
    cycle_edges: list[str] = field(default_factory=list)
    cycle_path: list[str] | None = None


def detect_cycle(nodes: list[NodeSpec], edges: list[EdgeSpec]) -> CycleInfo:
    """
    Find a directed cycle using depth-first search.

    Every unvisited node starts a fresh search, so each disconnected component
    is checked on its own. The returned path walks the loop once and repeats
    its first node at the end, e.g. ``["a", "b", "c", "a"]``.
    """
    adjacency: dict[str, list[str]] = {n.id: [] for n in nodes}
    for edge in edges:
        if edge.source in adjacency and edge.target in adjacency:
            adjacency[edge.source].append(edge.target)

    visited: set[str] = set()
    on_path: set[str] = set()
    cycle_path: list[str] = []

    for node in nodes:
        if node.id in visited:
            continue

        # Explicit stack of (node_id, next neighbour index) mirrors recursion
        path: list[str] = [node.id]
        stack: list[tuple[str, int]] = [(node.id, 0)]
        visited.add(node.id)
        on_path.add(node.id)

        while stack and not cycle_path:
            current, index = stack[-1]
            neighbours = adjacency[current]
            if index >= len(neighbours):
                stack.pop()
                on_path.discard(current)
                path.pop()
                continue

            stack[-1] = (current, index + 1)
            neighbour = neighbours[index]
            if neighbour not in visited:
                visited.add(neighbour)
                on_path.add(neighbour)
                path.append(neighbour)
                stack.append((neighbour, 0))
            elif neighbour in on_path:
                start = path.index(neighbour)
                cycle_path = path[start:] + [neighbour]

        if cycle_path:
            break

    if not cycle_path:
        return CycleInfo(has_cycle=False)

    steps = set(zip(cycle_path, cycle_path[1:], strict=False))
    cycle_edges = [e.id for e in edges if (e.source, e.target) in steps]

    return CycleInfo(
        has_cycle=True,
        cycle_nodes=list(cycle_path),
        cycle_edges=cycle_edges,
        cycle_path=cycle_path,
    )


def describe_cycle(cycle_info: CycleInfo, nodes: list[NodeSpec]) -> str:
    """Render a detected cycle as a human-readable message."""
    if not cycle_info.has_cycle or not cycle_info.cycle_path:
        return "No cycle detected"

    node_map = {n.id: n for n in nodes}
    names = [
        node_map[node_id].display_name if node_id in node_map else node_id
        for node_id in cycle_info.cycle_path
    ]
    return (
        "Circular dependency detected:\n"
        + " → ".join(names)
        + "\n\nThis creates an infinite loop that cannot be executed."
    )
