"""
Topological sort - determines the execution order of a flow.

Kahn's algorithm with a FIFO queue seeded in node order, so the result is
stable: among nodes that become ready together, the one listed first in the
flow runs first.
"""

import logging
from collections import deque

from blockflow.errors import CycleError
from blockflow.graph.edge import EdgeSpec
from blockflow.graph.node import NodeSpec

logger = logging.getLogger(__name__)


def topological_sort(nodes: list[NodeSpec], edges: list[EdgeSpec]) -> list[str]:
    """
    Compute an execution order for a flow graph.

    Edges with a missing endpoint are skipped (and logged) rather than
    failing, since this may run without prior validation. Parallel edges
    between the same pair count as one dependency.

    Args:
        nodes: All nodes in the flow
        edges: All edges connecting the nodes

    Returns:
        Node IDs in an order where every node follows all its predecessors

    Raises:
        CycleError: if some nodes can never become ready because they sit on
            (or downstream of) a directed cycle
    """
    if not nodes:
        return []

    adjacency: dict[str, list[str]] = {n.id: [] for n in nodes}
    in_degree: dict[str, int] = {n.id: 0 for n in nodes}
    seen_pairs: set[tuple[str, str]] = set()

    for edge in edges:
        if edge.source not in adjacency or edge.target not in adjacency:
            logger.warning(
                f"Skipping edge '{edge.id}' with missing endpoint "
                f"({edge.source} → {edge.target})"
            )
            continue
        pair = (edge.source, edge.target)
        if pair in seen_pairs:
            continue
        seen_pairs.add(pair)
        adjacency[edge.source].append(edge.target)
        in_degree[edge.target] += 1

    incoming = dict(in_degree)
    queue = deque(node_id for node_id, degree in in_degree.items() if degree == 0)
    order: list[str] = []

    while queue:
        current = queue.popleft()
        order.append(current)
        for neighbour in adjacency[current]:
            in_degree[neighbour] -= 1
            if in_degree[neighbour] == 0:
                queue.append(neighbour)

    if len(order) == len(in_degree):
        return order

    placed = set(order)
    remaining = [node_id for node_id in in_degree if node_id not in placed]
    implicated = [node_id for node_id in remaining if incoming[node_id] > 0]

    if not implicated:
        # Only isolated nodes are left; they have no ordering constraints
        order.extend(remaining)
        return order

    labels = {n.id: n.display_name for n in nodes}
    chain_ids = implicated if len(implicated) > 1 else implicated * 2
    chain = " → ".join(labels[node_id] for node_id in chain_ids)
    raise CycleError(
        f"Cycle detected in flow graph. Cannot execute: {chain}",
        node_ids=implicated,
    )
