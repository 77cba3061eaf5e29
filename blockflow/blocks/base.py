"""
Block base types: the definition contract and the per-run context.

Every block kind is a ``BlockDefinition`` subclass registered under its type
tag. The executor resolves a node's definition by that tag and awaits
``execute(node, input, context)``; it never branches on the block type.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, ClassVar

import httpx

from blockflow.config import RuntimeConfig
from blockflow.graph.node import NodeSpec
from blockflow.llm.provider import LLMProvider
from blockflow.runtime.memory_store import MemoryStore


@dataclass
class BlockContext:
    """
    Dependencies handed to every block execution.

    Attributes:
        memory: Key-value store used by memory blocks; owned by the host, so
            it outlives a single run
        http: Shared HTTP client; when None, blocks open a short-lived one
        llm: Provider for model blocks; when None, one is built from config
        config: Runtime configuration (model defaults, HTTP timeout, ...)
    """

    memory: MemoryStore = field(default_factory=MemoryStore)
    http: httpx.AsyncClient | None = None
    llm: LLMProvider | None = None
    config: RuntimeConfig = field(default_factory=RuntimeConfig)

    @asynccontextmanager
    async def http_client(self, timeout: float | None = None) -> AsyncIterator[httpx.AsyncClient]:
        """Yield the shared client, or a temporary one closed on exit."""
        if self.http is not None:
            yield self.http
            return
        async with httpx.AsyncClient(timeout=timeout or self.config.http_timeout) as client:
            yield client

    def get_llm(self) -> LLMProvider:
        if self.llm is None:
            from blockflow.llm.litellm import LiteLLMProvider

            self.llm = LiteLLMProvider(
                model=self.config.model,
                api_key=self.config.api_key,
                api_base=self.config.api_base,
            )
        return self.llm


class BlockDefinition(ABC):
    """
    A block kind: metadata plus async behavior.

    Subclasses set the class attributes and implement ``execute``. Instances
    are stateless; anything that must persist between runs goes through the
    context.
    """

    block_type: ClassVar[str] = ""
    label: ClassVar[str] = ""
    description: ClassVar[str] = ""
    default_config: ClassVar[dict[str, Any]] = {}

    def resolve_config(self, node: NodeSpec) -> dict[str, Any]:
        """Defaults overlaid with the node's own config; keys set on the node win."""
        return {**deepcopy(self.default_config), **node.config}

    @abstractmethod
    async def execute(self, node: NodeSpec, input: Any, context: BlockContext) -> Any:
        """
        Run the block.

        Args:
            node: The node being executed (id, type, config)
            input: None (no predecessors), a predecessor's output (one edge) or
                a dict of predecessor id -> output (fan-in)
            context: Per-run dependencies

        Returns:
            The block output, recorded in the run's result map
        """
        ...

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.block_type,
            "label": self.label,
            "description": self.description,
            "default_config": deepcopy(self.default_config),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(block_type={self.block_type!r})"
