"""Output block: marks the end of a flow and passes its input through."""

from typing import Any

from blockflow.blocks.base import BlockContext, BlockDefinition
from blockflow.blocks.registry import register_block
from blockflow.graph.node import NodeSpec


@register_block()
class OutputBlock(BlockDefinition):
    block_type = "output"
    label = "Output"
    description = "Display the final result"
    default_config = {"display_format": "text"}

    async def execute(self, node: NodeSpec, input: Any, context: BlockContext) -> Any:
        # Rendering according to display_format is the caller's job
        return input
