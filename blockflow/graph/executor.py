"""
Flow Executor - Runs flow graphs.

The executor:
1. Validates the graph (structural errors stop the run, warnings do not)
2. Sequences the nodes with a topological sort
3. Executes each node once, in order, feeding it its predecessors' outputs
4. Reports progress through a callback, the event bus and ``stream()``
5. Returns the result map, or raises on the first failing node
"""

import asyncio
import contextlib
import inspect
import logging
import time
import uuid
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from blockflow.blocks.base import BlockContext
from blockflow.blocks.registry import BlockRegistry, default_registry
from blockflow.errors import (
    CycleError,
    FlowError,
    GraphValidationError,
    NodeExecutionError,
    UnknownBlockTypeError,
)
from blockflow.graph.cycle_detector import CycleInfo, describe_cycle, detect_cycle
from blockflow.graph.edge import EdgeSpec
from blockflow.graph.node import NodeSpec
from blockflow.graph.topological_sort import topological_sort
from blockflow.graph.validator import GraphValidationResult, log_validation_results, validate_graph
from blockflow.observability import set_trace_context
from blockflow.runtime.event_bus import EventBus

ProgressCallback = Callable[..., Any]


class ExecutionStatus(StrEnum):
    IDLE = "idle"
    VALIDATING = "validating"
    SEQUENCING = "sequencing"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ProgressEvent:
    """One node status change: running, success (payload = output) or error (payload = message)."""

    node_id: str
    status: str
    payload: Any = None


@dataclass
class RunFinished:
    """Last item yielded by ``FlowExecutor.stream``."""

    results: dict[str, Any] = field(default_factory=dict)
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def status(self) -> ExecutionStatus:
        return ExecutionStatus.COMPLETED if self.error is None else ExecutionStatus.FAILED


@dataclass
class PreflightReport:
    """Everything known about a graph before running it."""

    validation: GraphValidationResult
    cycle: CycleInfo
    order: list[str] | None = None
    unknown_types: list[str] = field(default_factory=list)
    cycle_description: str = ""

    @property
    def can_run(self) -> bool:
        return self.validation.is_valid and not self.cycle.has_cycle and not self.unknown_types


def gather_input(node_id: str, edges: list[EdgeSpec], results: dict[str, Any]) -> Any:
    """
    Input for a node from its predecessors' outputs.

    No incoming edge gives None, exactly one gives that predecessor's output
    as-is, and several give a dict keyed by source id in edge order.
    """
    incoming = [edge for edge in edges if edge.target == node_id]
    if not incoming:
        return None
    if len(incoming) == 1:
        return results.get(incoming[0].source)
    return {edge.source: results.get(edge.source) for edge in incoming}


class FlowExecutor:
    """
    Executes flow graphs.

    Example:
        executor = FlowExecutor(event_bus=bus)
        results = await executor.execute(nodes, edges, on_progress=print)

    A single executor may run any number of flows, concurrently or not. Run
    state (result map, status) lives in each call; only the block context
    (and so the memory store) is shared across calls.

    Progress callbacks are observers: an exception raised by one is logged
    and the run carries on.
    """

    def __init__(
        self,
        registry: BlockRegistry | None = None,
        context: BlockContext | None = None,
        event_bus: EventBus | None = None,
    ):
        self.registry = registry if registry is not None else default_registry()
        self.context = context or BlockContext()
        self.event_bus = event_bus
        self.logger = logging.getLogger(__name__)

    def _log_status(self, status: ExecutionStatus, run_id: str) -> None:
        self.logger.debug(f"Run {run_id}: {status}", extra={"status": str(status)})

    async def _report(
        self, on_progress: ProgressCallback | None, node_id: str, status: str, payload: Any = None
    ) -> None:
        if on_progress is None:
            return
        try:
            if status == "running":
                result = on_progress(node_id, status)
            else:
                result = on_progress(node_id, status, payload)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self.logger.error(
                f"Progress callback failed for {node_id} ({status}): {e}",
                extra={"event": "progress_callback_failed"},
            )

    def preflight(self, nodes: list[NodeSpec], edges: list[EdgeSpec]) -> PreflightReport:
        """Validate, look for cycles and check block types without running anything."""
        validation = validate_graph(nodes, edges)
        cycle = detect_cycle(nodes, edges)
        unknown = sorted({node.type for node in nodes if node.type not in self.registry})

        order = None
        if validation.is_valid and not cycle.has_cycle:
            order = topological_sort(nodes, edges)

        return PreflightReport(
            validation=validation,
            cycle=cycle,
            order=order,
            unknown_types=unknown,
            cycle_description=describe_cycle(cycle, nodes),
        )

    async def execute(
        self,
        nodes: list[NodeSpec],
        edges: list[EdgeSpec],
        on_progress: ProgressCallback | None = None,
        run_id: str | None = None,
    ) -> dict[str, Any]:
        """
        Execute a flow graph.

        Args:
            nodes: All nodes in the flow
            edges: All edges connecting the nodes
            on_progress: Called as ``(node_id, "running")``, then
                ``(node_id, "success", output)`` or ``(node_id, "error", message)``.
                May be a plain function or a coroutine function.
            run_id: Correlation id for logs and events (generated if omitted)

        Returns:
            Map of node id -> output for every node

        Raises:
            GraphValidationError: The graph has structural errors
            CycleError: The graph contains a cycle
            NodeExecutionError: A node failed; ``results`` holds the partial map
        """
        run_id = run_id or f"run_{uuid.uuid4().hex[:12]}"
        set_trace_context(run_id=run_id, node_id=None)
        bus = self.event_bus

        self._log_status(ExecutionStatus.VALIDATING, run_id)
        validation = validate_graph(nodes, edges)
        log_validation_results(validation, self.logger)
        for warning in validation.warnings:
            if bus:
                await bus.emit_validation_warning(run_id, warning)
        if not validation.is_valid:
            error = GraphValidationError(validation.errors)
            self._log_status(ExecutionStatus.FAILED, run_id)
            if bus:
                await bus.emit_run_failed(run_id, str(error))
            raise error

        self._log_status(ExecutionStatus.SEQUENCING, run_id)
        try:
            order = topological_sort(nodes, edges)
        except CycleError as e:
            self.logger.error(str(e))
            self._log_status(ExecutionStatus.FAILED, run_id)
            if bus:
                await bus.emit_run_failed(run_id, str(e))
            raise

        node_map = {node.id: node for node in nodes}
        results: dict[str, Any] = {}

        self._log_status(ExecutionStatus.EXECUTING, run_id)
        self.logger.info(
            f"Executing {len(order)} node(s): {' → '.join(order)}",
            extra={"event": "run_started"},
        )
        if bus:
            await bus.emit_run_started(run_id, order)

        try:
            for node_id in order:
                await self._run_node(node_map[node_id], edges, results, on_progress, run_id)
        except Exception as e:
            self._log_status(ExecutionStatus.FAILED, run_id)
            if bus:
                failed_node = e.node_id if isinstance(e, NodeExecutionError) else None
                message = e.message if isinstance(e, NodeExecutionError) else str(e)
                await bus.emit_run_failed(run_id, message, node_id=failed_node)
            raise
        finally:
            set_trace_context(node_id=None)

        self._log_status(ExecutionStatus.COMPLETED, run_id)
        if bus:
            await bus.emit_run_completed(run_id, results)
        return results

    async def _run_node(
        self,
        node: NodeSpec,
        edges: list[EdgeSpec],
        results: dict[str, Any],
        on_progress: ProgressCallback | None,
        run_id: str,
    ) -> None:
        """Execute one node, storing its output (or error marker) in ``results``."""
        node_id = node.id
        bus = self.event_bus
        set_trace_context(node_id=node_id)
        await self._report(on_progress, node_id, "running")
        if bus:
            await bus.emit_node_running(run_id, node_id, node.type)

        start = time.perf_counter()
        try:
            definition = self.registry.get(node.type)
            if definition is None:
                raise UnknownBlockTypeError(node.type)
            node_input = gather_input(node_id, edges, results)
            output = await definition.execute(node, node_input, self.context)
        except Exception as e:
            message = str(e) or type(e).__name__
            results[node_id] = {"error": message}
            self.logger.error(
                f"✗ {node.display_name} failed: {message}",
                extra={"event": "node_failed", "block_type": node.type},
            )
            await self._report(on_progress, node_id, "error", message)
            if bus:
                await bus.emit_node_failed(run_id, node_id, message)
            raise NodeExecutionError(node_id, message, results) from e

        latency_ms = int((time.perf_counter() - start) * 1000)
        results[node_id] = output
        self.logger.info(
            f"✓ {node.display_name} completed",
            extra={
                "event": "node_succeeded",
                "block_type": node.type,
                "latency_ms": latency_ms,
            },
        )
        await self._report(on_progress, node_id, "success", output)
        if bus:
            await bus.emit_node_succeeded(run_id, node_id, output)

    async def stream(
        self, nodes: list[NodeSpec], edges: list[EdgeSpec]
    ) -> AsyncIterator[ProgressEvent | RunFinished]:
        """
        Run a flow and yield progress as it happens.

        Yields ``ProgressEvent`` items and finishes with one ``RunFinished``.
        Errors are delivered in ``RunFinished.error`` rather than raised.
        Closing the iterator early cancels the run.
        """
        queue: asyncio.Queue[ProgressEvent | RunFinished] = asyncio.Queue()

        def on_progress(node_id: str, status: str, payload: Any = None) -> None:
            queue.put_nowait(ProgressEvent(node_id, status, payload))

        async def run() -> None:
            try:
                results = await self.execute(nodes, edges, on_progress)
            except FlowError as e:
                queue.put_nowait(RunFinished(results=getattr(e, "results", {}), error=e))
            except Exception as e:
                self.logger.exception("Flow run crashed")
                queue.put_nowait(RunFinished(error=e))
            else:
                queue.put_nowait(RunFinished(results=results))

        task = asyncio.create_task(run())
        try:
            while True:
                item = await queue.get()
                yield item
                if isinstance(item, RunFinished):
                    break
        finally:
            if not task.done():
                task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
