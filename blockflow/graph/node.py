"""
Node Protocol - A typed block placed on the flow canvas.

A node is passive data: which block kind it is (``type``), how that block is
configured (``config``) and an optional human label. Behavior lives in the
block registry, never on the node itself.
"""

from typing import Any

from pydantic import BaseModel, Field


class NodeSpec(BaseModel):
    """
    Specification for a node in a flow graph.

    Example:
        NodeSpec(
            id="p1",
            type="prompt",
            label="Summarise",
            config={"template": "Summarise {input}", "include_input": True},
        )
    """

    id: str
    type: str = Field(default="", description="Block kind tag used for registry lookup")
    config: dict[str, Any] = Field(default_factory=dict)
    label: str | None = Field(default=None, description="Human-readable name shown to users")

    model_config = {"extra": "allow"}

    @property
    def display_name(self) -> str:
        """Label, falling back to the block type, falling back to the id."""
        return self.label or self.type or self.id
