"""Memory block: reads and writes the context's MemoryStore."""

from typing import Any

from blockflow.blocks.base import BlockContext, BlockDefinition
from blockflow.blocks.registry import register_block
from blockflow.errors import BlockError
from blockflow.graph.node import NodeSpec

CLEAR_ALL = "*"


@register_block()
class MemoryBlock(BlockDefinition):
    """
    Store and retrieve data in memory.

    Operations: ``set`` (config value, else input), ``get``, ``append`` (input
    onto a list) and ``clear`` (one key, or every key with ``*``). Values
    persist for as long as the host keeps the same store.
    """

    block_type = "memory"
    label = "Memory"
    description = "Store and retrieve data in memory"
    default_config = {"operation": "set", "key": "data", "value": None}

    async def execute(self, node: NodeSpec, input: Any, context: BlockContext) -> Any:
        config = self.resolve_config(node)
        operation = config.get("operation") or "set"
        key = config.get("key") or "data"
        store = context.memory

        if operation == "set":
            value = config.get("value")
            data = value if value is not None else input
            store.set(key, data)
            return {"success": True, "operation": "set", "key": key, "value": data}

        if operation == "get":
            if key not in store:
                return {"success": False, "error": f'Key "{key}" not found in memory'}
            return store.get(key)

        if operation == "append":
            length = store.append(key, input)
            return {"success": True, "operation": "append", "key": key, "array_length": length}

        if operation == "clear":
            if key == CLEAR_ALL:
                store.clear()
                return {"success": True, "operation": "clear", "cleared": "all"}
            store.delete(key)
            return {"success": True, "operation": "clear", "key": key}

        raise BlockError(f"Memory operation failed: Unknown operation: {operation}")
