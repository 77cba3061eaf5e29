"""
Block Registry: block type -> definition.

Each block module registers its definition at import time, so adding a block
kind never requires touching the executor.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from blockflow.blocks.base import BlockDefinition

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=type[BlockDefinition])


class BlockRegistry:
    """Maps a block type tag to its definition."""

    _global: BlockRegistry | None = None

    def __init__(self) -> None:
        self._blocks: dict[str, BlockDefinition] = {}

    @classmethod
    def global_registry(cls) -> BlockRegistry:
        if cls._global is None:
            cls._global = cls()
        return cls._global

    def register(self, definition: BlockDefinition) -> None:
        """Register a definition; a later registration for the same type wins."""
        block_type = (definition.block_type or "").strip()
        if not block_type:
            raise ValueError("block_type must be non-empty")
        if block_type in self._blocks:
            logger.debug(f"Replacing block definition for '{block_type}'")
        self._blocks[block_type] = definition

    def get(self, block_type: str) -> BlockDefinition | None:
        return self._blocks.get(block_type)

    def get_all(self) -> list[BlockDefinition]:
        return list(self._blocks.values())

    def types(self) -> list[str]:
        return sorted(self._blocks)

    def __contains__(self, block_type: str) -> bool:
        return block_type in self._blocks

    def __len__(self) -> int:
        return len(self._blocks)


def register_block(registry: BlockRegistry | None = None):
    """Class decorator: instantiate a definition and register it."""

    def decorator(cls: D) -> D:
        reg = registry or BlockRegistry.global_registry()
        reg.register(cls())
        return cls

    return decorator


def default_registry() -> BlockRegistry:
    """The process-wide registry with every bundled block kind loaded."""
    import blockflow.blocks  # noqa: F401  (registers bundled blocks)

    return BlockRegistry.global_registry()
