#tests/test_runtime_simulator.py
"""
Tests for runtime_client.simulator on a ManualScheduler.

Covers:
- Event timing: hazards at min + d*i, follow-ups half a delay later,
  completion at min + d*(N+1)
- Directive-driven follow-up events (pause, support, tools)
- Cancellation and re-execution of the same envelope
"""

from __future__ import annotations

from typing import Any, List, Tuple

from env.schema import EnvelopeSettings, SimulatorSettings
from envelope.adapter import EnvelopeAdapter
from runtime_client.simulator import ManualScheduler, RuntimeSimulator


def _simulator(delay: int = 40, minimum: int = 20) -> Tuple[RuntimeSimulator, ManualScheduler, List[Tuple[int, Any]]]:
    scheduler = ManualScheduler()
    simulator = RuntimeSimulator(SimulatorSettings(event_delay_ms=delay, minimum_delay_ms=minimum), scheduler=scheduler)
    timeline: List[Tuple[int, Any]] = []
    simulator.on("event", lambda event: timeline.append((scheduler.now_ms, event)))
    return simulator, scheduler, timeline


def _envelope(watchers, npc="npc-1", issued=1000):
    return {"action": "mine", "npc": npc, "issuedAt": issued, "metadata": {"watchers": watchers, "plan": {"summary": "x"}}}


def test_plan_is_announced_immediately():
    simulator, scheduler, _ = _simulator()
    plans = []
    simulator.on("plan", plans.append)

    ack = simulator.execute(_envelope([]))
    assert ack == {"plan": {"summary": "x"}, "watchers": [], "envelopeId": "npc-1:1000", "deferCompletion": True}
    assert plans[0]["npcId"] == "npc-1"
    assert plans[0]["plan"] == {"summary": "x"}


def test_event_timing_with_watchers():
    simulator, scheduler, timeline = _simulator(delay=40, minimum=20)
    watchers = [
        {"hazard": "lava", "severity": "critical", "response": {"action": "pause"}},
        {"hazard": "mob", "severity": "high"},
    ]
    simulator.execute(_envelope(watchers))
    scheduler.run_all()

    stamps = [(ms, event["type"]) for ms, event in timeline]
    assert stamps == [
        (20, "hazard_detected"),
        (20, "status"),           # pause directive
        (40, "status"),           # mitigation at 20 + max(10, 40 // 2)
        (60, "hazard_detected"),
        (140, "task_complete"),   # 20 + 40 * (2 + 1)
    ]
    assert timeline[1][1]["status"] == "pause"
    assert timeline[2][1]["status"] == "resume"
    assert timeline[3][1]["severity"] == "high"
    assert all(event["envelopeId"] == "npc-1:1000" for _, event in timeline)
    assert simulator.active_tasks() == []


def test_short_delay_keeps_ten_ms_mitigation_gap():
    simulator, scheduler, timeline = _simulator(delay=4, minimum=0)
    simulator.execute(_envelope([{"hazard": "lava", "response": {"action": "reroute", "resume": "reroute"}}]))
    scheduler.run_all()

    mitigation = [(ms, e) for ms, e in timeline if e["type"] == "status" and e["status"] == "reroute"]
    assert mitigation[0][0] == 10


def test_support_and_tool_requests():
    simulator, scheduler, timeline = _simulator()
    simulator.execute(
        _envelope(
            [
                {"hazard": "creeper", "response": {"action": "request_support"}},
                {"hazard": "tool_break", "response": {"action": "request_tools", "request": {"item": "pickaxe"}}},
            ]
        )
    )
    scheduler.run_all()
    kinds = [event["type"] for _, event in timeline]
    assert "support_request" in kinds
    assert "request_tools" in kinds
    assert kinds[-1] == "task_complete"


def test_cancel_stops_pending_events():
    simulator, scheduler, timeline = _simulator()
    ack = simulator.execute(_envelope([{"hazard": "lava"}]))
    scheduler.advance(25)
    simulator.cancel(ack["envelopeId"])
    scheduler.run_all()

    kinds = [event["type"] for _, event in timeline]
    assert kinds == ["hazard_detected", "task_cancelled"]
    assert scheduler.pending == 0


def test_re_executing_envelope_replaces_timers():
    simulator, scheduler, timeline = _simulator()
    envelope = _envelope([])
    simulator.execute(envelope)
    scheduler.advance(10)
    simulator.execute(envelope)
    scheduler.run_all()

    assert [event["type"] for _, event in timeline] == ["task_complete"]


def test_simulates_adapter_envelope_end_to_end():
    adapter = EnvelopeAdapter(EnvelopeSettings(), clock=lambda: 5000)
    envelope = adapter.build_envelope(
        {"action": "mine", "details": "diamond", "npcId": "npc-9", "metadata": {"hazards": ["lava"]}}
    )
    simulator, scheduler, timeline = _simulator()
    simulator.execute(envelope)
    scheduler.run_all()

    assert timeline[0][1]["hazard"] == "lava"
    assert timeline[0][1]["npcId"] == "npc-9"
    assert timeline[-1][1] == {
        "type": "task_complete",
        "npcId": "npc-9",
        "success": True,
        "action": "complete",
        "envelopeId": "npc-9:5000",
    }
