"""
Command-line interface for blockflow.

Usage:
    blockflow validate flows/summarise.json
    blockflow run flows/summarise.json
    blockflow blocks
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from blockflow.blocks.base import BlockContext
from blockflow.blocks.registry import default_registry
from blockflow.config import RuntimeConfig, get_log_level
from blockflow.errors import FlowError, FlowFormatError
from blockflow.graph.executor import FlowExecutor
from blockflow.observability import configure_logging
from blockflow.storage.serializer import read_flow_file

_STATUS_MARKERS = {"running": "▶", "success": "✓", "error": "✗"}


def _load(path: Path):
    try:
        return read_flow_file(path)
    except FileNotFoundError:
        print(f"Flow file not found: {path}", file=sys.stderr)
    except FlowFormatError as e:
        print(str(e), file=sys.stderr)
    return None


def cmd_validate(args: argparse.Namespace) -> int:
    flow = _load(args.file)
    if flow is None:
        return 1

    report = FlowExecutor(registry=default_registry()).preflight(flow.nodes, flow.edges)
    stats = report.validation.stats
    print(f"Flow: {flow.name} ({flow.id})")
    print(
        f"Nodes: {stats.node_count}  Edges: {stats.edge_count}  "
        f"Components: {stats.disconnected_components}"
    )
    for error in report.validation.errors:
        print(f"  ERROR   {error}")
    for warning in report.validation.warnings:
        print(f"  WARNING {warning}")
    for block_type in report.unknown_types:
        print(f"  ERROR   Unknown block type: {block_type}")
    if report.cycle.has_cycle:
        print(report.cycle_description)
    if report.order:
        print(f"Execution order: {' → '.join(report.order)}")

    if not report.can_run:
        print("✗ Flow cannot run")
        return 1
    print("✓ Flow is valid")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    flow = _load(args.file)
    if flow is None:
        return 1

    def on_progress(node_id: str, status: str, payload: Any = None) -> None:
        line = f"{_STATUS_MARKERS.get(status, '?')} {node_id}: {status}"
        if status == "error":
            line = f"{line} ({payload})"
        print(line, file=sys.stderr)

    executor = FlowExecutor(context=BlockContext(config=RuntimeConfig()))
    try:
        results = asyncio.run(executor.execute(flow.nodes, flow.edges, on_progress=on_progress))
    except FlowError as e:
        print(f"Run failed: {e}", file=sys.stderr)
        partial = getattr(e, "results", None)
        if partial:
            print(json.dumps(partial, indent=2, default=str))
        return 1

    print(json.dumps(results, indent=2, default=str))
    return 0


def cmd_blocks(args: argparse.Namespace) -> int:
    registry = default_registry()
    for block_type in registry.types():
        definition = registry.get(block_type)
        print(f"{block_type:<16} {definition.label:<16} {definition.description}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blockflow",
        description="Validate and run block flow graphs",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: LOG_LEVEL or config, else INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["auto", "json", "human"],
        default="auto",
        help="Log output format",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_cmd = subparsers.add_parser("validate", help="Check a flow file without running it")
    validate_cmd.add_argument("file", type=Path, help="Path to a flow JSON file")
    validate_cmd.set_defaults(func=cmd_validate)

    run_cmd = subparsers.add_parser("run", help="Run a flow file and print the results")
    run_cmd.add_argument("file", type=Path, help="Path to a flow JSON file")
    run_cmd.set_defaults(func=cmd_run)

    blocks_cmd = subparsers.add_parser("blocks", help="List registered block kinds")
    blocks_cmd.set_defaults(func=cmd_blocks)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level or get_log_level(), format=args.log_format)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
