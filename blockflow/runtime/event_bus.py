"""
Event Bus - Pub/sub channel for flow run progress.

The executor publishes typed events for every state change of a run and of
each node. UIs, loggers and tests subscribe instead of handing the executor a
closure.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class FlowEventType(StrEnum):
    """Types of events that can be published."""

    # Run lifecycle
    RUN_STARTED = "run_started"
    RUN_COMPLETED = "run_completed"
    RUN_FAILED = "run_failed"

    # Pre-flight
    VALIDATION_WARNING = "validation_warning"

    # Node lifecycle
    NODE_RUNNING = "node_running"
    NODE_SUCCEEDED = "node_succeeded"
    NODE_FAILED = "node_failed"

    CUSTOM = "custom"


@dataclass
class FlowEvent:
    """An event emitted during a flow run."""

    type: FlowEventType
    run_id: str
    node_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "type": self.type.value,
            "run_id": self.run_id,
            "node_id": self.node_id,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }


EventHandler = Callable[[FlowEvent], Awaitable[None]]


@dataclass
class Subscription:
    """A subscription to events."""

    id: str
    event_types: set[FlowEventType]
    handler: EventHandler
    filter_run: str | None = None  # Only receive events from this run
    filter_node: str | None = None  # Only receive events about this node


class EventBus:
    """
    Pub/sub event bus for flow progress.

    Example:
        bus = EventBus()

        async def on_node_done(event: FlowEvent):
            print(f"{event.node_id} -> {event.data['output']}")

        bus.subscribe([FlowEventType.NODE_SUCCEEDED], on_node_done)
        executor = FlowExecutor(event_bus=bus)
        await executor.execute(nodes, edges)
    """

    def __init__(
        self,
        max_history: int = 1000,
        max_concurrent_handlers: int = 10,
    ):
        """
        Initialize event bus.

        Args:
            max_history: Maximum events to keep in history
            max_concurrent_handlers: Maximum concurrent handler executions
        """
        self._subscriptions: dict[str, Subscription] = {}
        self._event_history: list[FlowEvent] = []
        self._max_history = max_history
        self._semaphore = asyncio.Semaphore(max_concurrent_handlers)
        self._subscription_counter = 0
        self._lock = asyncio.Lock()

    def subscribe(
        self,
        event_types: list[FlowEventType],
        handler: EventHandler,
        filter_run: str | None = None,
        filter_node: str | None = None,
    ) -> str:
        """
        Subscribe to events.

        Returns:
            Subscription ID (use to unsubscribe)
        """
        self._subscription_counter += 1
        sub_id = f"sub_{self._subscription_counter}"

        self._subscriptions[sub_id] = Subscription(
            id=sub_id,
            event_types=set(event_types),
            handler=handler,
            filter_run=filter_run,
            filter_node=filter_node,
        )
        logger.debug(f"Subscription {sub_id} registered for {event_types}")
        return sub_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """Remove a subscription; True if it existed."""
        if subscription_id in self._subscriptions:
            del self._subscriptions[subscription_id]
            logger.debug(f"Subscription {subscription_id} removed")
            return True
        return False

    async def publish(self, event: FlowEvent) -> None:
        """Record an event and deliver it to all matching subscribers."""
        async with self._lock:
            self._event_history.append(event)
            if len(self._event_history) > self._max_history:
                self._event_history = self._event_history[-self._max_history :]

        handlers = [s.handler for s in self._subscriptions.values() if self._matches(s, event)]
        if handlers:
            await self._execute_handlers(event, handlers)

    def _matches(self, subscription: Subscription, event: FlowEvent) -> bool:
        if event.type not in subscription.event_types:
            return False
        if subscription.filter_run and subscription.filter_run != event.run_id:
            return False
        if subscription.filter_node and subscription.filter_node != event.node_id:
            return False
        return True

    async def _execute_handlers(self, event: FlowEvent, handlers: list[EventHandler]) -> None:
        """Execute handlers concurrently; a failing handler never breaks the run."""

        async def run_handler(handler: EventHandler) -> None:
            async with self._semaphore:
                try:
                    await handler(event)
                except Exception as e:
                    logger.error(f"Handler error for {event.type}: {e}")

        await asyncio.gather(*[run_handler(h) for h in handlers], return_exceptions=True)

    # === CONVENIENCE PUBLISHERS ===

    async def emit_run_started(self, run_id: str, order: list[str]) -> None:
        await self.publish(
            FlowEvent(type=FlowEventType.RUN_STARTED, run_id=run_id, data={"order": list(order)})
        )

    async def emit_run_completed(self, run_id: str, results: dict[str, Any]) -> None:
        await self.publish(
            FlowEvent(
                type=FlowEventType.RUN_COMPLETED, run_id=run_id, data={"results": dict(results)}
            )
        )

    async def emit_run_failed(self, run_id: str, error: str, node_id: str | None = None) -> None:
        await self.publish(
            FlowEvent(
                type=FlowEventType.RUN_FAILED,
                run_id=run_id,
                node_id=node_id,
                data={"error": error},
            )
        )

    async def emit_validation_warning(self, run_id: str, warning: str) -> None:
        await self.publish(
            FlowEvent(
                type=FlowEventType.VALIDATION_WARNING, run_id=run_id, data={"warning": warning}
            )
        )

    async def emit_node_running(self, run_id: str, node_id: str, block_type: str) -> None:
        await self.publish(
            FlowEvent(
                type=FlowEventType.NODE_RUNNING,
                run_id=run_id,
                node_id=node_id,
                data={"block_type": block_type},
            )
        )

    async def emit_node_succeeded(self, run_id: str, node_id: str, output: Any) -> None:
        await self.publish(
            FlowEvent(
                type=FlowEventType.NODE_SUCCEEDED,
                run_id=run_id,
                node_id=node_id,
                data={"output": output},
            )
        )

    async def emit_node_failed(self, run_id: str, node_id: str, error: str) -> None:
        await self.publish(
            FlowEvent(
                type=FlowEventType.NODE_FAILED,
                run_id=run_id,
                node_id=node_id,
                data={"error": error},
            )
        )

    # === QUERY OPERATIONS ===

    def get_history(
        self,
        event_type: FlowEventType | None = None,
        run_id: str | None = None,
        limit: int = 100,
    ) -> list[FlowEvent]:
        """
        Get event history with optional filtering.

        Returns:
            List of matching events (most recent first)
        """
        events = self._event_history[::-1]
        if event_type:
            events = [e for e in events if e.type == event_type]
        if run_id:
            events = [e for e in events if e.run_id == run_id]
        return events[:limit]

    def get_stats(self) -> dict:
        """Get event bus statistics."""
        type_counts: dict[str, int] = {}
        for event in self._event_history:
            type_counts[event.type.value] = type_counts.get(event.type.value, 0) + 1

        return {
            "total_events": len(self._event_history),
            "subscriptions": len(self._subscriptions),
            "events_by_type": type_counts,
        }

    # === WAITING OPERATIONS ===

    async def wait_for(
        self,
        event_type: FlowEventType,
        run_id: str | None = None,
        node_id: str | None = None,
        timeout: float | None = None,
    ) -> FlowEvent | None:
        """
        Wait for a specific event to occur.

        Returns:
            The event if received, None on timeout
        """
        result: FlowEvent | None = None
        event_received = asyncio.Event()

        async def handler(event: FlowEvent) -> None:
            nonlocal result
            result = event
            event_received.set()

        sub_id = self.subscribe(
            event_types=[event_type],
            handler=handler,
            filter_run=run_id,
            filter_node=node_id,
        )

        try:
            if timeout:
                try:
                    await asyncio.wait_for(event_received.wait(), timeout=timeout)
                except TimeoutError:
                    return None
            else:
                await event_received.wait()
            return result
        finally:
            self.unsubscribe(sub_id)
