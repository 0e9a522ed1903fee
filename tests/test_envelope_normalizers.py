#tests/test_envelope_normalizers.py
"""
Tests for envelope.normalizers and the mining vocabulary behind them.

Covers:
- Closed-vocabulary normalizers and their aliases
- Mine metadata: resource inference, hazards, watchers, operation plan
- Hazard directive resolution (exact type beats generic)
- Equip / dig builders dropping None keys
"""

from __future__ import annotations

import pytest

from domain.mining import build_hazard_watchers, normalize_mining_directives, resolve_hazard_directive
from envelope.normalizers import (
    build_dig_metadata,
    build_equip_metadata,
    build_mining_metadata,
    infer_envelope_resource,
    normalize_chest_mode,
    normalize_combat_style,
    normalize_equip_slot,
    normalize_equipment_goal,
    normalize_inventory_mode,
    normalize_usage_type,
    normalize_weapon_type,
)


@pytest.mark.parametrize(
    "func, value, expected",
    [
        (normalize_chest_mode, "deposit", "deposit"),
        (normalize_chest_mode, "loot", "inspect"),
        (normalize_chest_mode, " DEPOSIT ", "deposit"),
        (normalize_chest_mode, "Withdraw", "withdraw"),
        (normalize_inventory_mode, "check", "summary"),
        (normalize_inventory_mode, "find", "locate"),
        (normalize_inventory_mode, "COUNT", "count"),
        (normalize_inventory_mode, None, "summary"),
        (normalize_combat_style, "tank", "defensive"),
        (normalize_combat_style, "healer", "support"),
        (normalize_combat_style, "wild", "balanced"),
        (normalize_weapon_type, "longbow", "ranged"),
        (normalize_weapon_type, "diamond sword", "melee"),
        (normalize_weapon_type, None, None),
        (normalize_equip_slot, "weapon", "main_hand"),
        (normalize_equip_slot, "shield", "off_hand"),
        (normalize_equip_slot, "tail", None),
        (normalize_usage_type, "healing potion", "heal"),
        (normalize_usage_type, "eat quickly", "consume"),
        (normalize_usage_type, "wave around", "utility"),
        (normalize_equipment_goal, "max damage", "best_attack"),
        (normalize_equipment_goal, None, "balanced"),
    ],
)
def test_vocabulary_normalizers(func, value, expected):
    assert func(value) == expected


def test_infer_envelope_resource_from_details():
    assert infer_envelope_resource("mine diamond at (30,12,-4)") == {"block": "minecraft:diamond", "priority": "primary"}
    assert infer_envelope_resource(None) is None


def test_mining_metadata_with_lava_hazard():
    task = {"action": "mine", "details": "diamond", "target": {"x": 30, "y": 12, "z": -4}}
    metadata = build_mining_metadata(
        {"hazards": ["lava"], "tools": ["iron_pickaxe"], "strategy": "branch"},
        task,
    )

    assert metadata["resource"]["block"] == "minecraft:diamond"
    assert metadata["hazards"][0]["type"] == "lava"
    assert metadata["hazards"][0]["severity"] == "critical"
    assert metadata["tools"] == [{"item": "iron_pickaxe", "count": 1}]
    assert metadata["strategy"] == "branch_mining"
    assert metadata["priority"] == "primary"
    assert metadata["watchers"][0]["hazard"] == "lava"
    assert "deposit" not in metadata
    assert "note" not in metadata

    steps = [op["step"] for op in metadata["plan"]["operations"]]
    assert steps == ["strategy", "survey", "mitigate", "extract"]
    assert metadata["plan"]["hazards"] == ["lava (critical)"]


def test_mining_plan_includes_deposit_when_given():
    metadata = build_mining_metadata({"deposit": {"x": 0, "y": 64, "z": 0}}, {"details": "iron ore"})
    operations = metadata["plan"]["operations"]
    assert operations[-1]["step"] == "deposit"
    assert "(0, 64, 0)" in operations[-1]["description"]


def test_mining_directives_defaults():
    directives = normalize_mining_directives(None)
    assert directives["hazards"] == []
    assert directives["depletion"] == {"action": "continue"}
    assert directives["toolFailure"] == {"action": "request_tools"}
    assert directives["resume"] == {"action": "resume"}
    assert directives["fallback"] == {"action": "pause"}


def test_exact_hazard_directive_beats_generic():
    entries = [
        {"type": "any", "action": "pause"},
        {"type": "lava", "severity": "critical", "action": "retreat"},
        {"type": "lava", "action": "pause"},
    ]
    assert resolve_hazard_directive({"type": "lava", "severity": "critical"}, entries)["action"] == "retreat"
    assert resolve_hazard_directive({"type": "lava", "severity": "low"}, entries)["action"] == "pause"
    assert resolve_hazard_directive({"type": "gravel"}, entries)["type"] == "any"
    assert resolve_hazard_directive({"type": "lava"}, []) is None


def test_watchers_default_severity():
    watchers = build_hazard_watchers([{"type": "mob"}], {"hazards": []})
    assert watchers == [{"hazard": "mob", "severity": "moderate"}]


def test_equip_metadata_drops_missing_keys():
    metadata = build_equip_metadata({"slot": "weapon", "item": "iron_sword"}, {"npcId": "npc-1"})
    assert metadata["npc"] == "npc-1"
    assert metadata["slot"] == "main_hand"
    assert metadata["item"] == {"item": "iron_sword", "count": 1}
    assert "priority" not in metadata
    assert "category" not in metadata


def test_dig_metadata_has_watchers_for_hazards():
    metadata = build_dig_metadata({"hazards": ["lava"], "strategy": "stairs down"}, {})
    assert metadata["strategy"] == "staircase"
    assert metadata["watchers"][0]["hazard"] == "lava"
