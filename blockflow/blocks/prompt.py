"""Prompt block: fills a text template from its input and static variables."""

from typing import Any

from blockflow.blocks.base import BlockContext, BlockDefinition
from blockflow.blocks.registry import register_block
from blockflow.blocks.values import format_scalar, to_text
from blockflow.graph.node import NodeSpec


@register_block()
class PromptBlock(BlockDefinition):
    """
    Render a prompt template.

    Placeholders are filled in priority order:
    1. ``include_input``: the whole input replaces ``input_placeholder``
    2. keys of a dict input (a fan-in input is keyed by predecessor id)
    3. static ``variables`` from config, as fallbacks
    """

    block_type = "prompt"
    label = "Prompt"
    description = "Create a prompt template with variables that accept input from connected blocks"
    default_config = {
        "template": "Explain {topic} in simple terms.",
        "variables": {"topic": "quantum computing"},
        "include_input": False,
        "input_placeholder": "{input}",
    }

    async def execute(self, node: NodeSpec, input: Any, context: BlockContext) -> str:
        config = self.resolve_config(node)
        prompt = str(config.get("template", ""))
        variables = config.get("variables") or {}
        placeholder = config.get("input_placeholder") or "{input}"

        if config.get("include_input", False) and input is not None:
            prompt = prompt.replace(placeholder, to_text(input, indent=2))

        if isinstance(input, dict):
            for key, value in input.items():
                prompt = prompt.replace(f"{{{key}}}", format_scalar(value))

        for key, value in variables.items():
            prompt = prompt.replace(f"{{{key}}}", format_scalar(value))

        return prompt
