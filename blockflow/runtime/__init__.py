"""Runtime support for flow runs: the progress event bus and shared memory."""

from blockflow.runtime.event_bus import EventBus, FlowEvent, FlowEventType, Subscription
from blockflow.runtime.memory_store import MemoryChange, MemoryStore

__all__ = [
    "EventBus",
    "FlowEvent",
    "FlowEventType",
    "Subscription",
    "MemoryStore",
    "MemoryChange",
]
