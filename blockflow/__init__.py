"""
blockflow - validate, sequence and run flow graphs of typed blocks.

A flow is a directed graph whose nodes are blocks (prompt, model, tool, ...)
and whose edges carry one block's output into another's input. The executor
checks the graph, orders it topologically and runs each block once.

Example:
    from blockflow import EdgeSpec, FlowExecutor, NodeSpec

    nodes = [NodeSpec(id="p", type="prompt"), NodeSpec(id="o", type="output")]
    edges = [EdgeSpec(source="p", target="o")]
    results = await FlowExecutor().execute(nodes, edges)
"""

from blockflow.blocks import BlockContext, BlockDefinition, BlockRegistry, default_registry, register_block
from blockflow.errors import (
    BlockError,
    CycleError,
    FlowError,
    FlowFormatError,
    GraphValidationError,
    NodeExecutionError,
    UnknownBlockTypeError,
)
from blockflow.graph import (
    CycleInfo,
    EdgeSpec,
    FlowGraph,
    GraphValidationResult,
    NodeSpec,
    describe_cycle,
    detect_cycle,
    topological_sort,
    validate_graph,
)
from blockflow.graph.executor import (
    ExecutionStatus,
    FlowExecutor,
    PreflightReport,
    ProgressEvent,
    RunFinished,
)
from blockflow.runtime import EventBus, FlowEvent, FlowEventType, MemoryStore
from blockflow.storage import FlowDocument, load_flow_from_json, save_flow_to_json

__version__ = "0.1.0"

__all__ = [
    # Graph
    "NodeSpec",
    "EdgeSpec",
    "FlowGraph",
    "validate_graph",
    "GraphValidationResult",
    "detect_cycle",
    "describe_cycle",
    "CycleInfo",
    "topological_sort",
    # Execution
    "FlowExecutor",
    "ExecutionStatus",
    "PreflightReport",
    "ProgressEvent",
    "RunFinished",
    # Blocks
    "BlockContext",
    "BlockDefinition",
    "BlockRegistry",
    "default_registry",
    "register_block",
    # Runtime
    "EventBus",
    "FlowEvent",
    "FlowEventType",
    "MemoryStore",
    # Storage
    "FlowDocument",
    "save_flow_to_json",
    "load_flow_from_json",
    # Errors
    "FlowError",
    "GraphValidationError",
    "CycleError",
    "UnknownBlockTypeError",
    "NodeExecutionError",
    "BlockError",
    "FlowFormatError",
]
