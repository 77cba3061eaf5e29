"""Graph structures: nodes, edges, validation, cycle diagnostics and sequencing.

The executor lives in ``blockflow.graph.executor`` (also exported from
``blockflow``); it is not imported here because it depends on the block
package, which in turn depends on these models.
"""

from blockflow.graph.cycle_detector import CycleInfo, describe_cycle, detect_cycle
from blockflow.graph.edge import EdgeSpec, FlowGraph
from blockflow.graph.node import NodeSpec
from blockflow.graph.topological_sort import topological_sort
from blockflow.graph.validator import (
    GraphStats,
    GraphValidationResult,
    log_validation_results,
    validate_graph,
)

__all__ = [
    # Models
    "NodeSpec",
    "EdgeSpec",
    "FlowGraph",
    # Validation
    "GraphStats",
    "GraphValidationResult",
    "validate_graph",
    "log_validation_results",
    # Cycles
    "CycleInfo",
    "detect_cycle",
    "describe_cycle",
    # Sequencing
    "topological_sort",
]
