"""Text extractor block: pulls a substring out of its input."""

import re
from typing import Any

from blockflow.blocks.base import BlockContext, BlockDefinition
from blockflow.blocks.registry import register_block
from blockflow.blocks.values import to_text
from blockflow.errors import BlockError
from blockflow.graph.node import NodeSpec


@register_block()
class TextExtractorBlock(BlockDefinition):
    """
    Extract text using a regex or a pair of delimiters.

    ``regex`` returns the first capture group, else the whole match, else "".
    Matching is case-insensitive. ``between`` returns the stripped text
    between ``start_delimiter`` and the next ``end_delimiter``.
    """

    block_type = "textExtractor"
    label = "Text Extractor"
    description = "Extract text using regex or delimiters"
    default_config = {
        "extraction_type": "regex",
        "pattern": r"(?<=Summary: ).*",
        "start_delimiter": "",
        "end_delimiter": "",
    }

    async def execute(self, node: NodeSpec, input: Any, context: BlockContext) -> str:
        config = self.resolve_config(node)
        extraction_type = config.get("extraction_type", "regex")
        text = to_text(input)

        if not text.strip():
            return ""

        if extraction_type == "regex":
            pattern = config.get("pattern", r"(?<=Summary: ).*")
            try:
                match = re.search(pattern, text, re.IGNORECASE)
            except re.error as e:
                raise BlockError(f"Regex error: {e}") from e
            if match is None:
                return ""
            if match.groups() and match.group(1) is not None:
                return match.group(1)
            return match.group(0)

        if extraction_type == "between":
            start = config.get("start_delimiter", "")
            end = config.get("end_delimiter", "")
            if not start or not end:
                raise BlockError("Start and end delimiters are required for 'between' extraction")
            start_idx = text.find(start)
            if start_idx == -1:
                return ""
            after_start = start_idx + len(start)
            end_idx = text.find(end, after_start)
            if end_idx == -1:
                return ""
            return text[after_start:end_idx].strip()

        raise BlockError(f"Unsupported extraction type: {extraction_type}")
