"""Structural validation for flow graphs.

Checks the raw node/edge lists before anything runs so that a malformed
graph (dangling edge endpoints, self-loops) is rejected up front, and reports
non-blocking issues (orphaned nodes, duplicate edges) as warnings.
"""

import logging
from collections import deque
from dataclasses import dataclass, field

from blockflow.graph.edge import EdgeSpec
from blockflow.graph.node import NodeSpec

logger = logging.getLogger(__name__)


@dataclass
class GraphStats:
    """Counts gathered while validating a graph."""

    node_count: int = 0
    edge_count: int = 0
    valid_edges: int = 0
    orphaned_nodes: list[str] = field(default_factory=list)
    disconnected_components: int = 0


@dataclass
class GraphValidationResult:
    """Result of graph validation: errors (blocking) and warnings (informational)."""

    errors: list[str]
    warnings: list[str]
    stats: GraphStats

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @property
    def error(self) -> str:
        """Combined error message."""
        return "; ".join(self.errors) if self.errors else ""


def _count_components(nodes: list[NodeSpec], edges: list[EdgeSpec], node_ids: set[str]) -> int:
    """Count weakly connected components, treating edges as undirected."""
    neighbours: dict[str, list[str]] = {n.id: [] for n in nodes}
    for edge in edges:
        if edge.source in node_ids and edge.target in node_ids:
            neighbours[edge.source].append(edge.target)
            neighbours[edge.target].append(edge.source)

    visited: set[str] = set()
    components = 0
    for node in nodes:
        if node.id in visited:
            continue
        components += 1
        queue = deque([node.id])
        visited.add(node.id)
        while queue:
            current = queue.popleft()
            for other in neighbours[current]:
                if other not in visited:
                    visited.add(other)
                    queue.append(other)
    return components


def validate_graph(nodes: list[NodeSpec], edges: list[EdgeSpec]) -> GraphValidationResult:
    """
    Validate the structure of a flow graph.

    Args:
        nodes: All nodes in the flow
        edges: All edges connecting the nodes

    Returns:
        GraphValidationResult with errors, warnings and stats. The inputs are
        not modified, so validating the same graph twice gives the same result.
    """
    errors: list[str] = []
    warnings: list[str] = []
    node_map = {n.id: n for n in nodes}
    node_ids = set(node_map)

    valid_edges = 0
    for edge in edges:
        if edge.source not in node_ids:
            errors.append(f'Edge "{edge.id}" references non-existent source node: {edge.source}')
        if edge.target not in node_ids:
            errors.append(f'Edge "{edge.id}" references non-existent target node: {edge.target}')
        if edge.source in node_ids and edge.target in node_ids:
            valid_edges += 1

    for edge in edges:
        if edge.is_self_loop:
            errors.append(
                f'Self-loop detected on node "{edge.source}". A block cannot connect to itself.'
            )

    connected: set[str] = set()
    for edge in edges:
        connected.add(edge.source)
        connected.add(edge.target)
    orphaned = [n.id for n in nodes if n.id not in connected]
    if orphaned:
        names = ", ".join(f'"{node_map[node_id].label or node_id}"' for node_id in orphaned)
        warnings.append(f"Found {len(orphaned)} disconnected node(s): {names}")

    seen_pairs: set[tuple[str, str]] = set()
    for edge in edges:
        pair = (edge.source, edge.target)
        if pair in seen_pairs:
            warnings.append(f"Duplicate edge detected: {edge.source} → {edge.target}")
        seen_pairs.add(pair)

    stats = GraphStats(
        node_count=len(nodes),
        edge_count=len(edges),
        valid_edges=valid_edges,
        orphaned_nodes=orphaned,
        disconnected_components=_count_components(nodes, edges, node_ids),
    )
    return GraphValidationResult(errors=errors, warnings=warnings, stats=stats)


def log_validation_results(
    result: GraphValidationResult,
    log: logging.Logger | None = None,
) -> None:
    """Write a validation report to the log."""
    log = log or logger
    stats = result.stats
    log.info(
        f"Graph validation: {'valid' if result.is_valid else 'INVALID'} "
        f"(nodes={stats.node_count}, edges={stats.edge_count}, "
        f"valid_edges={stats.valid_edges}, components={stats.disconnected_components})"
    )
    for err in result.errors:
        log.error(f"   • {err}")
    for warning in result.warnings:
        log.warning(f"   ⚠ {warning}")
