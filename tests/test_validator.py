"""
Tests for structural graph validation.
"""

import logging

from blockflow.graph.edge import EdgeSpec
from blockflow.graph.node import NodeSpec
from blockflow.graph.validator import log_validation_results, validate_graph


def test_valid_chain_has_no_errors_or_warnings():
    nodes = [NodeSpec(id="a"), NodeSpec(id="b")]
    edges = [EdgeSpec(id="e1", source="a", target="b")]

    result = validate_graph(nodes, edges)

    assert result.is_valid
    assert result.errors == []
    assert result.warnings == []
    assert result.stats.valid_edges == 1
    assert result.stats.disconnected_components == 1


def test_missing_target_is_one_error():
    nodes = [NodeSpec(id="a")]
    edges = [EdgeSpec(id="e1", source="a", target="missing")]

    result = validate_graph(nodes, edges)

    assert not result.is_valid
    assert result.errors == ['Edge "e1" references non-existent target node: missing']
    assert result.stats.valid_edges == 0


def test_missing_source_is_reported():
    nodes = [NodeSpec(id="b")]
    edges = [EdgeSpec(id="e1", source="ghost", target="b")]

    result = validate_graph(nodes, edges)

    assert result.errors == ['Edge "e1" references non-existent source node: ghost']


def test_self_loop_is_an_error():
    nodes = [NodeSpec(id="a")]
    edges = [EdgeSpec(id="e1", source="a", target="a")]

    result = validate_graph(nodes, edges)

    assert result.errors == [
        'Self-loop detected on node "a". A block cannot connect to itself.'
    ]


def test_orphan_is_a_single_warning():
    nodes = [NodeSpec(id="orphan"), NodeSpec(id="x"), NodeSpec(id="y")]
    edges = [EdgeSpec(source="x", target="y")]

    result = validate_graph(nodes, edges)

    assert result.is_valid
    assert result.warnings == ['Found 1 disconnected node(s): "orphan"']
    assert result.stats.orphaned_nodes == ["orphan"]
    assert result.stats.disconnected_components == 2


def test_orphan_warning_uses_labels():
    nodes = [NodeSpec(id="n1", label="Notes"), NodeSpec(id="n2")]

    result = validate_graph(nodes, [])

    assert result.warnings == ['Found 2 disconnected node(s): "Notes", "n2"']


def test_each_duplicate_edge_is_warned():
    nodes = [NodeSpec(id="a"), NodeSpec(id="b")]
    edges = [
        EdgeSpec(id="e1", source="a", target="b"),
        EdgeSpec(id="e2", source="a", target="b"),
        EdgeSpec(id="e3", source="a", target="b"),
    ]

    result = validate_graph(nodes, edges)

    assert result.is_valid
    assert result.warnings == ["Duplicate edge detected: a → b"] * 2


def test_components_ignore_edge_direction():
    nodes = [NodeSpec(id=i) for i in ("a", "b", "c", "d", "e")]
    edges = [
        EdgeSpec(source="a", target="c"),
        EdgeSpec(source="b", target="c"),
        EdgeSpec(source="e", target="d"),
    ]

    result = validate_graph(nodes, edges)

    assert result.stats.disconnected_components == 2
    assert result.stats.node_count == 5
    assert result.stats.edge_count == 3


def test_validation_is_idempotent():
    nodes = [NodeSpec(id="a"), NodeSpec(id="lonely")]
    edges = [
        EdgeSpec(id="e1", source="a", target="missing"),
        EdgeSpec(id="e2", source="a", target="a"),
    ]

    first = validate_graph(nodes, edges)
    second = validate_graph(nodes, edges)

    assert first == second


def test_log_validation_results_writes_errors_and_warnings(caplog):
    nodes = [NodeSpec(id="a"), NodeSpec(id="b")]
    edges = [EdgeSpec(id="e1", source="a", target="zzz")]
    result = validate_graph(nodes, edges)

    with caplog.at_level(logging.INFO, logger="blockflow.graph.validator"):
        log_validation_results(result)

    assert "INVALID" in caplog.text
    assert "non-existent target node: zzz" in caplog.text
    assert "disconnected node(s)" in caplog.text
