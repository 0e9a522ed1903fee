#tests/test_envelope_adapter.py
"""
Tests for envelope.adapter.

Covers:
- Command round-trip (parse_command inverts build_command)
- issuedAt strictly increasing with a frozen clock, shared across adapters
- Input validation (non-mapping task, foreign command)
- open_chest auto-close default and pass-through for unknown actions
- Tags, priority normalization and envelope ids
"""

from __future__ import annotations

import pytest

from env.schema import EnvelopeSettings
from envelope.adapter import EnvelopeAdapter, envelope_id, normalize_task_priority


def _adapter(now=1_700_000_000_000, **settings):
    return EnvelopeAdapter(EnvelopeSettings(**settings), clock=lambda: now)


def test_command_round_trip():
    adapter = _adapter()
    task = {
        "action": "craft",
        "details": "craft torch",
        "npcId": "npc-3",
        "priority": "HIGH",
        "metadata": {"quantity": 4},
    }
    command = adapter(task)
    assert command.startswith("mindcraftce run {")

    envelope = adapter.parse_command(command)
    assert envelope["version"] == "1.0"
    assert envelope["action"] == "craft"
    assert envelope["npc"] == "npc-3"
    assert envelope["priority"] == "high"
    assert envelope["metadata"]["output"] == "torch"
    assert envelope["metadata"]["quantity"] == 4
    assert envelope["metadata"]["workstation"] == "crafting_table"


def test_round_trip_matches_built_envelope_except_timestamp():
    adapter = _adapter()
    task = {"action": "move", "target": {"x": 1, "y": 2, "z": 3}}
    built = adapter.build_envelope(task)
    parsed = adapter.parse_command(adapter(task))

    built.pop("issuedAt")
    parsed.pop("issuedAt")
    assert parsed == built


def test_issued_at_strictly_increases_with_frozen_clock():
    adapter = _adapter(now=5000)
    stamps = [adapter.build_envelope({"action": "move"})["issuedAt"] for _ in range(5)]
    assert stamps == [5000, 5001, 5002, 5003, 5004]


def test_issued_at_is_shared_between_adapters():
    first, second = _adapter(now=1000), _adapter(now=1000)
    a = [first.build_envelope({"action": "move", "npcId": "n1"}) for _ in range(3)]
    b = second.build_envelope({"action": "move", "npcId": "n1"})

    assert [e["issuedAt"] for e in a] == [1000, 1001, 1002]
    assert b["issuedAt"] == 1003
    assert envelope_id(b) not in {envelope_id(e) for e in a}


def test_issued_at_never_goes_back_when_a_clock_lags():
    ahead, behind = _adapter(now=9000), _adapter(now=100)
    assert ahead.build_envelope({"action": "move"})["issuedAt"] == 9000
    assert behind.build_envelope({"action": "move"})["issuedAt"] == 9001


def test_custom_prefix_and_version():
    adapter = _adapter(prefix="npcctl", version="2.1")
    command = adapter({"action": "move"})
    assert command.startswith("npcctl run ")
    assert adapter.parse_command(command)["version"] == "2.1"


def test_non_mapping_task_raises_type_error():
    with pytest.raises(TypeError):
        _adapter().build_envelope(["move"])


@pytest.mark.parametrize("command", ["other run {}", "mindcraftce run [1, 2]", 42])
def test_parse_command_rejects_foreign_commands(command):
    with pytest.raises(ValueError):
        _adapter().parse_command(command)


def test_optional_fields_are_omitted_but_npc_is_null():
    envelope = _adapter().build_envelope({"action": "move"})
    assert "details" not in envelope
    assert "target" not in envelope
    assert "tags" not in envelope
    assert envelope["npc"] is None
    assert envelope["priority"] == "normal"


def test_open_chest_defaults_auto_close_from_settings():
    envelope = _adapter().build_envelope({"action": "open_chest", "metadata": {"mode": "deposit"}})
    assert envelope["metadata"] == {"mode": "deposit", "items": [], "autoClose": True}

    envelope = _adapter(default_auto_close=False).build_envelope({"action": "open_chest"})
    assert envelope["metadata"]["autoClose"] is False
    assert envelope["metadata"]["mode"] == "inspect"


def test_unknown_action_copies_metadata():
    metadata = {"foo": {"bar": [1, 2]}}
    envelope = _adapter().build_envelope({"action": "dance", "metadata": metadata})
    assert envelope["metadata"] == metadata
    assert envelope["metadata"] is not metadata
    assert envelope["metadata"]["foo"] is not metadata["foo"]


def test_tags_are_listed():
    adapter = _adapter()
    assert adapter.build_envelope({"action": "move", "metadata": {"tags": "scout"}})["tags"] == ["scout"]
    assert adapter.build_envelope({"action": "move", "metadata": {"tags": ("a", "b")}})["tags"] == ["a", "b"]


def test_build_does_not_mutate_task():
    task = {"action": "mine", "details": "diamond", "metadata": {"hazards": ["lava"]}, "target": {"x": 1}}
    _adapter().build_envelope(task)
    assert task == {"action": "mine", "details": "diamond", "metadata": {"hazards": ["lava"]}, "target": {"x": 1}}


@pytest.mark.parametrize(
    "value, expected",
    [("critical", "critical"), (" Low ", "low"), ("urgent", "normal"), (None, "normal"), (3, "normal")],
)
def test_normalize_task_priority(value, expected):
    assert normalize_task_priority(value) == expected


def test_envelope_id_prefers_explicit_ids():
    assert envelope_id({"envelopeId": "env-1", "id": "x"}) == "env-1"
    assert envelope_id({"id": 9}) == "9"
    assert envelope_id({"npc": "npc-2", "issuedAt": 77}) == "npc-2:77"
    assert envelope_id({"npc": None, "issuedAt": 77}) == "npc:77"
