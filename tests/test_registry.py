#tests/test_registry.py
"""
Tests for tasks.registry.PlannerRegistry.

Covers:
- Registration validation and lookup
- None for missing tasks, unknown actions and crashing planners
- Bias applied after planning
- Monitoring events per plan outcome
- Executor dispatch with in-process fallback
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import List

import pytest

from monitoring.bus import EventBus
from monitoring.events import EventType, MonitoringEvent
from tasks import DEFAULT_PLANNERS, create_default_registry
from tasks.helpers import blocked_plan, create_plan
from tasks.registry import PlannerRegistry, run_planner_by_path


def ok_planner(task, context=None):
    return create_plan(task, "Do the thing", estimated_duration=1000)


def blocked_planner(task, context=None):
    return blocked_plan(task, "Cannot", error="Missing tool")


def crashing_planner(task, context=None):
    raise RuntimeError("planner exploded")


class FailingExecutor:
    def __init__(self) -> None:
        self.calls = 0

    def submit(self, fn, *args, **kwargs) -> Future:
        self.calls += 1
        future: Future = Future()
        future.set_exception(OSError("worker died"))
        return future


class InlineExecutor:
    def __init__(self) -> None:
        self.calls = 0

    def submit(self, fn, *args, **kwargs) -> Future:
        self.calls += 1
        future: Future = Future()
        future.set_result(fn(*args, **kwargs))
        return future


def _events(bus: EventBus) -> List[MonitoringEvent]:
    seen: List[MonitoringEvent] = []
    bus.subscribe(seen.append)
    return seen


@pytest.mark.parametrize("action, handler", [("", ok_planner), (None, ok_planner), ("x", "not callable")])
def test_register_rejects_bad_input(action, handler):
    with pytest.raises(ValueError):
        PlannerRegistry().register(action, handler)


def test_lookup_helpers():
    registry = PlannerRegistry()
    registry.register("dance", ok_planner)

    assert registry.has_planner("dance")
    assert not registry.has_planner("sing")
    assert not registry.has_planner(None)
    assert registry.get_planner("dance") is ok_planner
    assert registry.list_registered_planners() == ["dance"]


@pytest.mark.parametrize("task", [None, "dance", ["dance"], {"action": "sing"}, {"action": None}])
def test_plan_task_returns_none_for_unplannable_input(task):
    registry = PlannerRegistry()
    registry.register("dance", ok_planner)
    assert registry.plan_task(task, {}) is None


def test_crashing_planner_yields_none_and_failure_event():
    bus = EventBus()
    seen = _events(bus)
    registry = PlannerRegistry(bus=bus)
    registry.register("boom", crashing_planner)

    assert registry.plan_task({"action": "boom"}, {}) is None
    assert seen[-1].event_type == EventType.PLAN_FAILED
    assert seen[-1].payload["error"] == "planner exploded"


@pytest.mark.parametrize("context", [["x"], 5, "hungry"])
def test_malformed_context_yields_none_and_failure_event(context):
    bus = EventBus()
    seen = _events(bus)
    registry = PlannerRegistry(bus=bus)
    registry.register("dance", ok_planner)

    assert registry.plan_task({"action": "dance"}, context) is None
    assert [e.event_type for e in seen] == [EventType.PLAN_FAILED]
    assert seen[0].correlation_id == "dance"


def test_plan_events_follow_plan_status():
    bus = EventBus()
    seen = _events(bus)
    registry = PlannerRegistry(bus=bus)
    registry.register("dance", ok_planner)
    registry.register("stuck", blocked_planner)

    registry.plan_task({"action": "dance"}, {})
    registry.plan_task({"action": "stuck"}, {})

    assert [e.event_type for e in seen] == [EventType.PLAN_CREATED, EventType.PLAN_BLOCKED]
    assert seen[0].correlation_id == "dance"
    assert seen[1].payload["status"] == "blocked"


def test_bias_is_applied_unless_disabled():
    task = {"action": "dance", "metadata": {"preferredTraits": ["graceful"]}}
    context = {"npc": {"personalityTraits": ["graceful"]}}

    registry = PlannerRegistry()
    registry.register("dance", ok_planner)
    biased = registry.plan_task(task, context)
    assert biased.estimated_duration == 950
    assert biased.personality_bias["matches"] == ["graceful"]

    plain = PlannerRegistry(apply_bias=False)
    plain.register("dance", ok_planner)
    assert plain.plan_task(task, context).estimated_duration == 1000


def test_parallel_planner_runs_on_executor():
    executor = InlineExecutor()
    registry = PlannerRegistry(executor=executor, timeout_s=1.0)
    registry.register("mine", DEFAULT_PLANNERS["mine"], module_path="tasks.plan_mine",
                      export_name="plan_mine_task", parallel=True)

    plan = registry.plan_task({"action": "mine", "details": "coal"}, {})
    assert executor.calls == 1
    assert plan is not None
    assert plan.action == "mine"


def test_executor_failure_falls_back_in_process():
    executor = FailingExecutor()
    registry = PlannerRegistry(executor=executor, timeout_s=1.0)
    registry.register("dance", ok_planner, module_path=__name__, export_name="ok_planner", parallel=True)

    plan = registry.plan_task({"action": "dance"}, {})
    assert executor.calls == 1
    assert plan is not None
    assert plan.summary == "Do the thing"


def test_non_parallel_planner_skips_executor():
    executor = InlineExecutor()
    registry = PlannerRegistry(executor=executor)
    registry.register("dance", ok_planner)
    registry.plan_task({"action": "dance"}, {})
    assert executor.calls == 0


def test_run_planner_by_path_missing_export():
    with pytest.raises(LookupError):
        run_planner_by_path("tasks.plan_mine", "no_such_planner", {"action": "mine"}, {})


def test_default_registry_registers_all_actions():
    registry = create_default_registry()
    assert sorted(registry.list_registered_planners()) == sorted(DEFAULT_PLANNERS)
