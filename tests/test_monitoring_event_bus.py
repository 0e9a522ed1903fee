#tests/test_monitoring_event_bus.py
"""
Tests for monitoring.bus.EventBus

Covers:
- Plan lifecycle events reach every subscriber in publish order
- Unsubscribe, including from inside a callback
- Concurrent publishers from worker threads
- A failing subscriber does not starve the others
- to_dict() renders the event type by name
"""

from __future__ import annotations

import json
import threading
from typing import List

from monitoring.bus import EventBus
from monitoring.events import EventType, MonitoringEvent


def plan_event(ts: float, action: str = "mine", kind: EventType = EventType.PLAN_CREATED) -> MonitoringEvent:
    return MonitoringEvent(
        ts=ts,
        module="tasks.registry",
        event_type=kind,
        message=f"{action} planned",
        payload={"action": action},
        correlation_id=action,
    )


def test_subscribers_see_events_in_publish_order():
    bus = EventBus()
    first: List[str] = []
    second: List[EventType] = []
    bus.subscribe(lambda evt: first.append(evt.payload["action"]))
    bus.subscribe(lambda evt: second.append(evt.event_type))

    bus.publish(plan_event(1.0, "mine"))
    bus.publish(plan_event(2.0, "minecart", EventType.PLAN_BLOCKED))
    bus.publish(plan_event(3.0, "guard", EventType.PLAN_FAILED))

    assert first == ["mine", "minecart", "guard"]
    assert second == [EventType.PLAN_CREATED, EventType.PLAN_BLOCKED, EventType.PLAN_FAILED]


def test_unsubscribe_from_inside_callback():
    bus = EventBus()
    seen: List[float] = []

    def once(evt: MonitoringEvent) -> None:
        seen.append(evt.ts)
        bus.unsubscribe(once)

    bus.subscribe(once)
    bus.publish(plan_event(1.0))
    bus.publish(plan_event(2.0))

    assert seen == [1.0]


def test_clear_drops_all_subscribers():
    bus = EventBus()
    seen: List[MonitoringEvent] = []
    bus.subscribe(seen.append)
    bus.clear()
    bus.publish(plan_event(1.0))
    assert seen == []


def test_concurrent_worker_publishers():
    bus = EventBus()
    per_thread = 50
    received: List[MonitoringEvent] = []
    lock = threading.Lock()

    def subscriber(evt: MonitoringEvent) -> None:
        with lock:
            received.append(evt)

    bus.subscribe(subscriber)

    def worker(name: str) -> None:
        for i in range(per_thread):
            bus.publish(plan_event(float(i), name, EventType.WORKER_COMPLETED))

    threads = [threading.Thread(target=worker, args=(name,)) for name in ("astar", "scorer", "calc")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(received) == 3 * per_thread
    for name in ("astar", "scorer", "calc"):
        stamps = [e.ts for e in received if e.payload["action"] == name]
        assert stamps == sorted(stamps)


def test_event_bus_isolates_failing_subscriber():
    bus = EventBus()
    received: List[MonitoringEvent] = []

    def broken(evt: MonitoringEvent) -> None:
        raise RuntimeError("boom")

    bus.subscribe(broken)
    bus.subscribe(received.append)

    bus.publish(plan_event(1.0, "eat"))

    assert [e.payload["action"] for e in received] == ["eat"]


def test_event_bus_unsubscribe_unknown_is_noop():
    bus = EventBus()
    bus.unsubscribe(lambda evt: None)
    bus.publish(plan_event(1.0))


def test_to_dict_is_json_safe():
    data = plan_event(4.5, "trade", EventType.PLAN_BLOCKED).to_dict()
    assert data["event_type"] == "PLAN_BLOCKED"
    assert json.loads(json.dumps(data))["correlation_id"] == "trade"
