"""Exception types raised by the flow engine and bundled blocks."""

from typing import Any


class FlowError(Exception):
    """Base class for every error raised by blockflow."""


class GraphValidationError(FlowError):
    """Raised when a flow graph has structural errors and cannot run."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(f"Invalid flow graph: {'; '.join(self.errors)}")


class CycleError(FlowError):
    """Raised when the sequencer finds a genuine cycle."""

    def __init__(self, message: str, node_ids: list[str] | None = None):
        super().__init__(message)
        self.node_ids = list(node_ids or [])


class UnknownBlockTypeError(FlowError):
    """Raised when a node's type has no registered block definition."""

    def __init__(self, block_type: str):
        self.block_type = block_type
        super().__init__(f"Unknown block type: {block_type}")


class NodeExecutionError(FlowError):
    """
    Raised when a node fails and the run is aborted.

    Carries the partial result map so callers can inspect what succeeded
    before the failure.
    """

    def __init__(self, node_id: str, message: str, results: dict[str, Any] | None = None):
        self.node_id = node_id
        self.message = message
        self.results = dict(results or {})
        super().__init__(message)


class BlockError(FlowError):
    """Raised by block implementations for invalid config or failed work."""


class FlowFormatError(FlowError):
    """Raised when a serialized flow document cannot be parsed."""
