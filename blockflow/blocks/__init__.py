"""
Bundled block kinds.

Importing this package registers every bundled block in the global registry.
"""

from blockflow.blocks import (  # noqa: F401  (registration side effects)
    condition,
    datasource,
    file_reader,
    memory,
    model,
    output,
    prompt,
    text_extractor,
    text_formatter,
    tool,
    web_search,
)
from blockflow.blocks.base import BlockContext, BlockDefinition
from blockflow.blocks.registry import BlockRegistry, default_registry, register_block

block_registry = BlockRegistry.global_registry()

__all__ = [
    "BlockContext",
    "BlockDefinition",
    "BlockRegistry",
    "block_registry",
    "default_registry",
    "register_block",
]
