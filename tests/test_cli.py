# tests/test_cli.py
"""
Smoke tests for cli.plan_cli.

Runs main() against temporary JSON files and checks exit codes and the
rendered output.
"""

from __future__ import annotations

import json
from pathlib import Path

from cli.plan_cli import main, simulate
from env.loader import load_runtime_settings
from envelope.adapter import EnvelopeAdapter


def _write(tmp_path: Path, name: str, data) -> str:
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_plan_as_json(tmp_path: Path, capsys):
    task = _write(tmp_path, "task.json", {"action": "eat"})
    context = _write(tmp_path, "ctx.json", {"hungerState": {"hunger": 2}, "inventory": [{"name": "bread", "count": 2}]})

    assert main([task, "--context", context, "--json"]) == 0
    out = capsys.readouterr().out
    assert '"action": "eat"' in out
    assert "eat_food" in out


def test_blocked_plan_exits_one(tmp_path: Path, capsys):
    task = _write(tmp_path, "task.json", {"action": "minecart", "destination": {"x": 50, "y": 64, "z": 0}})
    assert main([task]) == 1
    assert "No minecart in inventory" in capsys.readouterr().out


def test_unknown_action_exits_two(tmp_path: Path, capsys):
    task = _write(tmp_path, "task.json", {"action": "fly"})
    assert main([task]) == 2
    assert "No planner" in capsys.readouterr().out


def test_envelope_and_simulation_output(tmp_path: Path, capsys):
    task = _write(
        tmp_path,
        "task.json",
        {"action": "mine", "details": "diamond", "npcId": "npc-1", "metadata": {"hazards": ["lava"]}},
    )
    assert main([task, "--envelope", "--simulate"]) == 0
    out = capsys.readouterr().out
    assert "mindcraftce run" in out
    assert "hazard_detected" in out
    assert "task_complete" in out


def test_simulate_collects_timed_events():
    settings = load_runtime_settings()
    envelope = EnvelopeAdapter(settings.envelope, clock=lambda: 1).build_envelope({"action": "move", "npcId": "npc-2"})
    events = simulate(envelope, settings)
    assert [e["type"] for e in events] == ["task_complete"]
    assert events[0]["at"] == settings.simulator.minimum_delay_ms + settings.simulator.event_delay_ms
    assert events[0]["npcId"] == "npc-2"
