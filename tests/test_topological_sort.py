"""
Tests for the topological sequencer.
"""

import logging

import pytest

from blockflow.errors import CycleError
from blockflow.graph.edge import EdgeSpec
from blockflow.graph.node import NodeSpec
from blockflow.graph.topological_sort import topological_sort


def nodes_of(*ids: str) -> list[NodeSpec]:
    return [NodeSpec(id=node_id) for node_id in ids]


def edge(source: str, target: str, edge_id: str = "") -> EdgeSpec:
    return EdgeSpec(id=edge_id, source=source, target=target)


def assert_respects_edges(order: list[str], edges: list[EdgeSpec]) -> None:
    position = {node_id: i for i, node_id in enumerate(order)}
    for e in edges:
        if e.source in position and e.target in position:
            assert position[e.source] < position[e.target], f"{e.source} must precede {e.target}"


def test_empty_graph_returns_empty_order():
    assert topological_sort([], []) == []


def test_prompt_then_output():
    nodes = [NodeSpec(id="p1", type="prompt"), NodeSpec(id="o1", type="output")]
    edges = [edge("p1", "o1", "e1")]

    assert topological_sort(nodes, edges) == ["p1", "o1"]


def test_three_node_cycle_raises_with_every_node_named():
    nodes = nodes_of("a", "b", "c")
    edges = [edge("a", "b"), edge("b", "c"), edge("c", "a")]

    with pytest.raises(CycleError) as exc_info:
        topological_sort(nodes, edges)

    message = str(exc_info.value)
    assert message.startswith("Cycle detected in flow graph. Cannot execute: ")
    for node_id in ("a", "b", "c"):
        assert node_id in message
    assert exc_info.value.node_ids == ["a", "b", "c"]


def test_cycle_message_uses_labels():
    nodes = [
        NodeSpec(id="a", type="prompt", label="Draft"),
        NodeSpec(id="b", type="model"),
    ]
    edges = [edge("a", "b"), edge("b", "a")]

    with pytest.raises(CycleError, match="Draft → model"):
        topological_sort(nodes, edges)


def test_self_loop_is_reported_as_a_chain():
    nodes = [NodeSpec(id="p", type="prompt")]

    with pytest.raises(CycleError) as exc_info:
        topological_sort(nodes, [edge("p", "p")])

    assert str(exc_info.value) == "Cycle detected in flow graph. Cannot execute: prompt → prompt"
    assert exc_info.value.node_ids == ["p"]


def test_node_downstream_of_cycle_is_implicated():
    nodes = nodes_of("start", "a", "b", "tail")
    edges = [edge("start", "a"), edge("a", "b"), edge("b", "a"), edge("b", "tail")]

    with pytest.raises(CycleError) as exc_info:
        topological_sort(nodes, edges)

    assert exc_info.value.node_ids == ["a", "b", "tail"]


def test_isolated_node_is_kept_alongside_chain():
    nodes = nodes_of("orphan", "x", "y")
    edges = [edge("x", "y")]

    order = topological_sort(nodes, edges)

    assert sorted(order) == ["orphan", "x", "y"]
    assert_respects_edges(order, edges)


def test_order_is_stable_by_node_position():
    nodes = nodes_of("c", "a", "b")
    assert topological_sort(nodes, []) == ["c", "a", "b"]

    nodes = nodes_of("root", "left", "right", "join")
    edges = [edge("root", "right"), edge("root", "left"), edge("left", "join"), edge("right", "join")]
    # right was connected first, so it becomes ready first
    assert topological_sort(nodes, edges) == ["root", "right", "left", "join"]


def test_duplicate_edges_count_as_one_dependency():
    nodes = nodes_of("a", "b", "c")
    edges = [edge("a", "b", "e1"), edge("a", "b", "e2"), edge("b", "c")]

    assert topological_sort(nodes, edges) == ["a", "b", "c"]


def test_dangling_edges_are_skipped_and_logged(caplog):
    nodes = nodes_of("a", "b")
    edges = [edge("a", "b"), edge("a", "missing", "e-bad")]

    with caplog.at_level(logging.WARNING, logger="blockflow.graph.topological_sort"):
        order = topological_sort(nodes, edges)

    assert order == ["a", "b"]
    assert "e-bad" in caplog.text


def test_diamond_respects_every_edge():
    nodes = nodes_of("d", "c", "b", "a")
    edges = [edge("a", "b"), edge("a", "c"), edge("b", "d"), edge("c", "d")]

    order = topological_sort(nodes, edges)

    assert sorted(order) == ["a", "b", "c", "d"]
    assert_respects_edges(order, edges)


def test_inputs_are_not_modified():
    nodes = nodes_of("a", "b")
    edges = [edge("a", "b")]
    snapshot = ([n.model_dump() for n in nodes], [e.model_dump() for e in edges])

    topological_sort(nodes, edges)

    assert ([n.model_dump() for n in nodes], [e.model_dump() for e in edges]) == snapshot
