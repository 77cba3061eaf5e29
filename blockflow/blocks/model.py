"""Model block: sends its input as a prompt to an LLM."""

import logging
from typing import Any

from blockflow.blocks.base import BlockContext, BlockDefinition
from blockflow.blocks.registry import register_block
from blockflow.blocks.values import to_text
from blockflow.errors import BlockError
from blockflow.graph.node import NodeSpec

logger = logging.getLogger(__name__)


@register_block()
class ModelBlock(BlockDefinition):
    """
    Execute an AI model with the given prompt.

    The provider comes from the block context, so tests and hosts can swap in
    any ``LLMProvider``. Config: ``model``, ``temperature``, ``max_tokens`` and
    an optional ``system`` prompt.
    """

    block_type = "model"
    label = "AI Model"
    description = "Execute an AI model with the given prompt"
    default_config = {
        "model": "openrouter/anthropic/claude-3.5-sonnet",
        "temperature": 0.7,
        "max_tokens": 1024,
    }

    async def execute(self, node: NodeSpec, input: Any, context: BlockContext) -> str:
        config = self.resolve_config(node)
        model = config.get("model") or context.config.model
        temperature = float(config.get("temperature", context.config.temperature))
        max_tokens = int(config.get("max_tokens", context.config.max_tokens))

        prompt = to_text(input) if input is not None else ""
        if not prompt.strip():
            raise BlockError("Model execution failed: prompt is empty")

        try:
            response = await context.get_llm().complete(
                messages=[{"role": "user", "content": prompt}],
                model=model,
                system=config.get("system", ""),
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            raise BlockError(f"Model execution failed: {e}") from e

        logger.info(
            f"Model {response.model} returned {response.output_tokens} tokens",
            extra={"node_id": node.id},
        )
        return response.content
