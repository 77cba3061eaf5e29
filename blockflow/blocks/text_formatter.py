"""Text formatter block: string transformations on its input."""

import re
from collections.abc import Callable
from typing import Any

from blockflow.blocks.base import BlockContext, BlockDefinition
from blockflow.blocks.registry import register_block
from blockflow.blocks.values import to_text
from blockflow.errors import BlockError
from blockflow.graph.node import NodeSpec


def _capitalize(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" "))


def _slugify(text: str) -> str:
    slug = text.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


_SIMPLE_OPERATIONS: dict[str, Callable[[str], Any]] = {
    "uppercase": str.upper,
    "lowercase": str.lower,
    "trim": str.strip,
    "capitalize": _capitalize,
    "length": len,
    "reverse": lambda text: text[::-1],
    "removeSpaces": lambda text: re.sub(r"\s+", "", text),
    "slugify": _slugify,
}


@register_block()
class TextFormatterBlock(BlockDefinition):
    """
    Format and transform text.

    ``text_operation`` picks one of: uppercase, lowercase, trim, capitalize,
    replace (regex ``find_text`` -> ``replace_with``), split / join on
    ``separator``, template (``{input}`` in ``text_template``), length,
    reverse, removeSpaces, slugify. Unknown operations return the text
    unchanged. The legacy ``operation`` / ``template`` keys are honoured.
    """

    block_type = "textFormatter"
    label = "Text Formatter"
    description = "Format and transform text with various operations"
    default_config = {
        "text_operation": "uppercase",
        "find_text": "",
        "replace_with": "",
        "separator": ",",
        "text_template": "{input}",
    }

    async def execute(self, node: NodeSpec, input: Any, context: BlockContext) -> Any:
        config = self.resolve_config(node)
        # Legacy keys apply only when the node does not set the current ones
        operation = node.config.get("text_operation") or node.config.get("operation")
        operation = operation or config.get("text_operation") or "uppercase"
        template = node.config.get("text_template") or node.config.get("template")
        template = template or config.get("text_template") or "{input}"
        separator = config.get("separator") or ","
        text = to_text(input)

        if operation in _SIMPLE_OPERATIONS:
            return _SIMPLE_OPERATIONS[operation](text)

        if operation == "replace":
            find_text = config.get("find_text", "")
            if not find_text:
                raise BlockError(
                    "Text formatting failed: Find text is required for replace operation"
                )
            try:
                return re.sub(find_text, str(config.get("replace_with", "")), text)
            except re.error as e:
                raise BlockError(f"Text formatting failed: {e}") from e

        if operation == "split":
            return text.split(separator)

        if operation == "join":
            if isinstance(input, list):
                return separator.join(to_text(item) for item in input)
            return text

        if operation == "template":
            return template.replace("{input}", text)

        return text
