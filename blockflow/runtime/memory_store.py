"""
Memory Store - Key-value state shared by memory blocks.

One store is owned by the host application and handed to every run through
the block context, so values written in one run are visible to the next run
that uses the same store. Runs that share a store concurrently see each
other's writes; there is no isolation between them.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class MemoryChange:
    """Record of a write to the store."""

    key: str
    operation: str
    old_value: Any
    new_value: Any
    timestamp: float = field(default_factory=time.time)


class MemoryStore:
    """
    In-process key-value store.

    Example:
        store = MemoryStore()
        store.set("topic", "graphs")
        store.append("history", "first")
        store.get("topic")  # "graphs"
    """

    def __init__(self, initial: dict[str, Any] | None = None, max_history: int = 1000):
        self._data: dict[str, Any] = dict(initial or {})
        self._history: list[MemoryChange] = []
        self._max_history = max_history

    def _record(self, key: str, operation: str, old_value: Any, new_value: Any) -> None:
        self._history.append(MemoryChange(key, operation, old_value, new_value))
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history :]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        old = self._data.get(key)
        self._data[key] = value
        self._record(key, "set", old, value)
        logger.debug(f"Memory set '{key}'")

    def append(self, key: str, value: Any) -> int:
        """Append to the list stored at ``key`` (replacing non-lists); return its length."""
        current = self._data.get(key, _MISSING)
        items = list(current) if isinstance(current, list) else []
        items.append(value)
        self._data[key] = items
        self._record(key, "append", None if current is _MISSING else current, items)
        return len(items)

    def delete(self, key: str) -> bool:
        if key not in self._data:
            return False
        old = self._data.pop(key)
        self._record(key, "delete", old, None)
        return True

    def clear(self) -> None:
        self._data.clear()
        self._record("*", "clear", None, None)
        logger.debug("Memory cleared")

    def snapshot(self) -> dict[str, Any]:
        """Return a shallow copy of all stored values."""
        return dict(self._data)

    def get_history(self, key: str | None = None, limit: int = 100) -> list[MemoryChange]:
        """Most recent changes first, optionally filtered by key."""
        changes = self._history[::-1]
        if key is not None:
            changes = [c for c in changes if c.key == key]
        return changes[:limit]
