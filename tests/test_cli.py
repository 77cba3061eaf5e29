"""
Tests for the blockflow command line.
"""

import json
import logging

import pytest

from blockflow.cli import build_parser, main


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def write_flow(tmp_path, nodes, edges, name="flow.json"):
    path = tmp_path / name
    path.write_text(json.dumps({"id": "f1", "name": "Test", "nodes": nodes, "edges": edges}))
    return path


def run_cli(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(["--log-level", "ERROR", "--log-format", "human", *argv])
    return exc_info.value.code


PROMPT_TO_OUTPUT = (
    [
        {"id": "p1", "type": "prompt", "config": {"template": "Hello {who}", "variables": {"who": "there"}}},
        {"id": "o1", "type": "output"},
    ],
    [{"id": "e1", "source": "p1", "target": "o1"}],
)


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_validate_accepts_good_flow(tmp_path, capsys):
    path = write_flow(tmp_path, *PROMPT_TO_OUTPUT)

    assert run_cli(["validate", str(path)]) == 0

    out = capsys.readouterr().out
    assert "Execution order: p1 → o1" in out
    assert "✓ Flow is valid" in out


def test_validate_reports_cycle(tmp_path, capsys):
    nodes = [{"id": "a", "type": "output"}, {"id": "b", "type": "output"}]
    edges = [{"source": "a", "target": "b"}, {"source": "b", "target": "a"}]
    path = write_flow(tmp_path, nodes, edges)

    assert run_cli(["validate", str(path)]) == 1

    out = capsys.readouterr().out
    assert "Circular dependency detected" in out


def test_validate_reports_unknown_block_type(tmp_path, capsys):
    path = write_flow(tmp_path, [{"id": "x", "type": "teleporter"}], [])

    assert run_cli(["validate", str(path)]) == 1
    assert "Unknown block type: teleporter" in capsys.readouterr().out


def test_run_prints_results(tmp_path, capsys):
    path = write_flow(tmp_path, *PROMPT_TO_OUTPUT)

    assert run_cli(["run", str(path)]) == 0

    captured = capsys.readouterr()
    assert json.loads(captured.out) == {"p1": "Hello there", "o1": "Hello there"}
    assert "✓ p1: success" in captured.err


def test_run_failure_exits_nonzero(tmp_path, capsys):
    nodes = [{"id": "c", "type": "condition", "config": {"operator": "between"}}]
    path = write_flow(tmp_path, nodes, [])

    assert run_cli(["run", str(path)]) == 1

    captured = capsys.readouterr()
    assert "Run failed: Condition evaluation failed" in captured.err
    assert json.loads(captured.out)["c"]["error"].startswith("Condition evaluation failed")


def test_missing_and_malformed_files(tmp_path, capsys):
    assert run_cli(["run", str(tmp_path / "nope.json")]) == 1
    assert "Flow file not found" in capsys.readouterr().err

    bad = tmp_path / "bad.json"
    bad.write_text("{oops")
    assert run_cli(["validate", str(bad)]) == 1
    assert "Failed to parse flow JSON" in capsys.readouterr().err


def test_blocks_lists_bundled_kinds(capsys):
    assert run_cli(["blocks"]) == 0

    out = capsys.readouterr().out
    for block_type in ("prompt", "model", "webSearch", "textFormatter"):
        assert block_type in out
