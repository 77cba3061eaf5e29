"""
Edge Protocol - How nodes connect in a flow graph.

An edge states that the output of ``source`` feeds the input of ``target``.
Several edges may share a target (fan-in) or a source (fan-out).

Edges are not checked when they are added: a graph may temporarily hold
dangling references, self-loops or cycles while a user edits it. Legality is
established when the flow runs (see ``graph.validator`` and
``graph.topological_sort``).
"""

from typing import Any

from pydantic import BaseModel, Field, model_validator

from blockflow.graph.node import NodeSpec


class EdgeSpec(BaseModel):
    """
    Specification for an edge between nodes.

    Example:
        EdgeSpec(id="e1", source="prompt-1", target="model-1")
    """

    id: str = ""
    source: str = Field(description="Source node ID")
    target: str = Field(description="Target node ID")

    model_config = {"extra": "allow"}

    @model_validator(mode="after")
    def _default_id(self) -> "EdgeSpec":
        if not self.id:
            self.id = f"e-{self.source}-{self.target}"
        return self

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


class FlowGraph(BaseModel):
    """
    A set of nodes and edges.

    Node ids and edge ids are unique within a graph. The graph need not be
    connected or acyclic.
    """

    nodes: list[NodeSpec] = Field(default_factory=list, description="All node specifications")
    edges: list[EdgeSpec] = Field(default_factory=list, description="All edge specifications")

    model_config = {"extra": "allow"}

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "FlowGraph":
        seen_nodes: set[str] = set()
        for node in self.nodes:
            if node.id in seen_nodes:
                raise ValueError(f"Duplicate node id: '{node.id}'")
            seen_nodes.add(node.id)

        seen_edges: set[str] = set()
        for edge in self.edges:
            if edge.id in seen_edges:
                raise ValueError(f"Duplicate edge id: '{edge.id}'")
            seen_edges.add(edge.id)
        return self

    @property
    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    def get_node(self, node_id: str) -> NodeSpec | None:
        """Get a node by ID."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> EdgeSpec | None:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def get_outgoing_edges(self, node_id: str) -> list[EdgeSpec]:
        """Get all edges leaving a node."""
        return [e for e in self.edges if e.source == node_id]

    def get_incoming_edges(self, node_id: str) -> list[EdgeSpec]:
        """Get all edges entering a node."""
        return [e for e in self.edges if e.target == node_id]

    def detect_fan_in_nodes(self) -> dict[str, list[str]]:
        """
        Detect nodes that receive from multiple sources.

        Returns:
            Dict mapping target_node_id -> list of source_node_ids
        """
        fan_ins: dict[str, list[str]] = {}
        for node in self.nodes:
            incoming = self.get_incoming_edges(node.id)
            if len(incoming) > 1:
                fan_ins[node.id] = [e.source for e in incoming]
        return fan_ins

    def add_node(self, node: NodeSpec) -> NodeSpec:
        if self.get_node(node.id) is not None:
            raise ValueError(f"Duplicate node id: '{node.id}'")
        self.nodes.append(node)
        return node

    def add_edge(self, edge: EdgeSpec) -> EdgeSpec:
        if self.get_edge(edge.id) is not None:
            raise ValueError(f"Duplicate edge id: '{edge.id}'")
        self.edges.append(edge)
        return edge

    def remove_node(self, node_id: str) -> NodeSpec | None:
        """Remove a node together with every edge touching it."""
        node = self.get_node(node_id)
        if node is None:
            return None
        self.nodes = [n for n in self.nodes if n.id != node_id]
        self.edges = [e for e in self.edges if e.source != node_id and e.target != node_id]
        return node

    def remove_edge(self, edge_id: str) -> EdgeSpec | None:
        edge = self.get_edge(edge_id)
        if edge is not None:
            self.edges = [e for e in self.edges if e.id != edge_id]
        return edge

    def update_config(self, node_id: str, **changes: Any) -> NodeSpec:
        """Merge ``changes`` into a node's config."""
        node = self.get_node(node_id)
        if node is None:
            raise KeyError(f"Node '{node_id}' not found")
        node.config = {**node.config, **changes}
        return node
