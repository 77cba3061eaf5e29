"""
Tests for the flow event bus.
"""

import asyncio

import pytest

from blockflow.runtime.event_bus import EventBus, FlowEvent, FlowEventType


@pytest.mark.asyncio
async def test_subscriber_receives_matching_events_only():
    bus = EventBus()
    received = []

    async def handler(event: FlowEvent):
        received.append(event)

    bus.subscribe([FlowEventType.NODE_SUCCEEDED], handler, filter_run="run-1")

    await bus.emit_node_succeeded("run-1", "a", 1)
    await bus.emit_node_succeeded("run-2", "b", 2)
    await bus.emit_node_failed("run-1", "c", "boom")

    assert [(e.run_id, e.node_id, e.data) for e in received] == [("run-1", "a", {"output": 1})]


@pytest.mark.asyncio
async def test_node_filter_and_unsubscribe():
    bus = EventBus()
    received = []

    async def handler(event: FlowEvent):
        received.append(event.node_id)

    sub_id = bus.subscribe([FlowEventType.NODE_RUNNING], handler, filter_node="b")
    await bus.emit_node_running("r", "a", "prompt")
    await bus.emit_node_running("r", "b", "prompt")

    assert bus.unsubscribe(sub_id) is True
    assert bus.unsubscribe(sub_id) is False
    await bus.emit_node_running("r", "b", "prompt")

    assert received == ["b"]


@pytest.mark.asyncio
async def test_failing_handler_does_not_break_publish():
    bus = EventBus()
    received = []

    async def broken(event: FlowEvent):
        raise RuntimeError("handler bug")

    async def healthy(event: FlowEvent):
        received.append(event.type)

    bus.subscribe([FlowEventType.RUN_STARTED], broken)
    bus.subscribe([FlowEventType.RUN_STARTED], healthy)

    await bus.emit_run_started("r", ["a"])

    assert received == [FlowEventType.RUN_STARTED]


@pytest.mark.asyncio
async def test_history_is_most_recent_first_and_bounded():
    bus = EventBus(max_history=3)
    for i in range(5):
        await bus.emit_node_running("r", f"n{i}", "output")

    history = bus.get_history()

    assert [e.node_id for e in history] == ["n4", "n3", "n2"]
    assert bus.get_stats()["total_events"] == 3
    assert bus.get_stats()["events_by_type"] == {"node_running": 3}


@pytest.mark.asyncio
async def test_wait_for_returns_event_or_none_on_timeout():
    bus = EventBus()

    async def finish_later():
        await asyncio.sleep(0.01)
        await bus.emit_run_completed("r", {"a": 1})

    task = asyncio.create_task(finish_later())
    event = await bus.wait_for(FlowEventType.RUN_COMPLETED, run_id="r", timeout=1.0)
    await task

    assert event is not None
    assert event.data == {"results": {"a": 1}}
    assert await bus.wait_for(FlowEventType.RUN_FAILED, timeout=0.01) is None


def test_event_to_dict():
    event = FlowEvent(type=FlowEventType.NODE_FAILED, run_id="r", node_id="n", data={"error": "x"})

    data = event.to_dict()

    assert data["type"] == "node_failed"
    assert data["node_id"] == "n"
    assert data["data"] == {"error": "x"}
    assert "timestamp" in data
