#tests/test_task_helpers.py
"""
Tests for tasks.helpers.

Covers:
- Total, idempotent item-name normalization
- Quantity resolution
- Target rendering
- Inventory queries over every accepted inventory shape
- Plan / step builders (de-duplication, clamped durations)
"""

from __future__ import annotations

import math

import pytest

from spec.types import UNSPECIFIED_ITEM, Inventory, PlanContext
from tasks.helpers import (
    blocked_plan,
    count_inventory_items,
    create_plan,
    create_step,
    describe_target,
    extract_inventory,
    failed_plan,
    format_requirement_list,
    has_inventory_item,
    normalize_item_name,
    resolve_quantity,
    seconds_to_ms,
    target_position,
)


class Named:
    def __init__(self, name):
        self.name = name


ODD_INPUTS = [
    None,
    True,
    False,
    "",
    "   ",
    "  Oak   PLANKS ",
    42,
    3.5,
    float("nan"),
    float("inf"),
    {"name": "Iron Ingot"},
    {"item": "torch"},
    {"id": 7},
    {"other": "x"},
    ["list"],
    Named("Golden Apple"),
    object(),
]


@pytest.mark.parametrize("value", ODD_INPUTS)
def test_normalize_item_name_is_total_and_idempotent(value):
    once = normalize_item_name(value)
    assert isinstance(once, str)
    assert once
    assert normalize_item_name(once) == once


def test_normalize_item_name_examples():
    assert normalize_item_name("  Oak   PLANKS ") == "oak planks"
    assert normalize_item_name({"name": "Iron Ingot"}) == "iron ingot"
    assert normalize_item_name(Named("Golden Apple")) == "golden apple"
    assert normalize_item_name(None) == UNSPECIFIED_ITEM
    assert normalize_item_name(float("nan")) == UNSPECIFIED_ITEM
    assert normalize_item_name(12) == "12"


@pytest.mark.parametrize(
    "value, fallback, expected",
    [
        (5, None, 5),
        (2.9, None, 2),
        ("7", None, 7),
        (" 3.2 ", None, 3),
        ({"count": 4}, None, 4),
        ({"quantity": "6"}, None, 6),
        (0, 1, 1),
        (-3, None, None),
        ("abc", 9, 9),
        (float("inf"), 2, 2),
        (True, 1, 1),
        (None, None, None),
    ],
)
def test_resolve_quantity(value, fallback, expected):
    assert resolve_quantity(value, fallback) == expected


@pytest.mark.parametrize(
    "target, expected",
    [
        ({"x": 30, "y": 12, "z": -4}, "(30,12,-4)"),
        ({"x": 1.5, "y": 64, "z": 0}, "(1.5,64,0)"),
        ({"x": 0, "y": 70, "z": 0, "dimension": "the_nether"}, "(0,70,0) in the_nether"),
        ({"position": {"x": 1, "y": 2, "z": 3}}, "(1,2,3)"),
        ({"name": "Village Well"}, "Village Well"),
        ("  north gate ", "north gate"),
        ("", "the designated location"),
        (None, "the designated location"),
        ({"x": "a", "y": 1, "z": 2}, "the designated location"),
        (17, "the designated location"),
    ],
)
def test_describe_target(target, expected):
    assert describe_target(target) == expected


def test_target_position_reads_nested_position():
    assert target_position({"position": {"x": 1, "y": 2, "z": 3}}) == {"x": 1.0, "y": 2.0, "z": 3.0}
    assert target_position({"name": "spawn"}) is None
    assert target_position(None) is None


@pytest.mark.parametrize(
    "raw",
    [
        [{"name": "bread", "count": 3}, {"name": "Bread", "count": 2}],
        {"bread": 5},
        {"bread": {"count": 5}},
        {"slots": [{"item": "minecraft:bread", "count": 5}]},
        {"items": [{"name": "bread", "quantity": 5}]},
    ],
)
def test_inventory_shapes_count_the_same(raw):
    assert count_inventory_items(raw, "bread") == 5
    assert has_inventory_item(raw, "bread", 5)
    assert not has_inventory_item(raw, "bread", 6)


def test_inventory_queries_never_raise_on_junk():
    for junk in (None, 3, "bread", object(), [None, 7, {"count": 2}]):
        assert count_inventory_items(junk, "bread") == 0
        assert has_inventory_item(junk, "bread") is False
    assert has_inventory_item({"bread": 1}, None) is False


def test_extract_inventory_from_context_and_npc():
    assert extract_inventory({"inventory": {"torch": 4}}) == [{"name": "torch", "count": 4}]
    assert extract_inventory({"npc": {"inventory": ["stick"]}}) == [{"name": "stick", "count": 1}]
    assert extract_inventory(PlanContext({"inventory": []})) == []
    assert extract_inventory(None) == []


def test_inventory_matches_namespaced_and_spaced_names():
    inventory = Inventory.from_raw([{"name": "minecraft:oak_planks", "count": 10}])
    assert inventory.count("Oak Planks") == 10
    assert inventory.totals() == {"oak_planks": 10}


def test_format_requirement_list_skips_unknown_entries():
    items = [{"name": "iron_ingot", "count": 3}, "oak_planks", {"count": 2}, {"item": "torch", "quantity": 2}]
    assert format_requirement_list(items) == "3 iron_ingot, oak_planks, 2 torch"
    assert format_requirement_list("nope") == ""


def test_create_step_defaults():
    step = create_step("", description="", metadata={"keep": 1, "drop": None}, command="  ")
    assert step.title == "Step"
    assert step.type == "generic"
    assert step.description == "Step"
    assert step.metadata == {"keep": 1}
    assert step.command is None


def test_create_plan_deduplicates_resources_and_clamps_duration():
    plan = create_plan(
        {"action": "gather", "priority": "urgent"},
        "Gather things",
        resources=["Oak Log", "oak log", None, "", "stone"],
        risks=["fall", "fall", " "],
        estimated_duration=-50,
    )
    assert plan.resources == ["oak log", "stone"]
    assert UNSPECIFIED_ITEM not in plan.resources
    assert plan.risks == ["fall"]
    assert plan.estimated_duration == 0
    assert plan.priority == "normal"
    assert plan.ok

    nan_plan = create_plan({"action": "gather"}, "x", estimated_duration=math.nan)
    assert nan_plan.estimated_duration == 0


def test_create_plan_reads_preferred_traits():
    plan = create_plan({"action": "guard", "metadata": {"preferredTraits": ["Brave", "loyal"]}}, "Guard")
    assert plan.preferred_traits == ["brave", "loyal"]


def test_blocked_and_failed_plans():
    blocked = blocked_plan({"action": "door"}, "Open door", error="Locked", suggestion="Use a button",
                           requiresRedstone=True)
    assert blocked.status == "blocked"
    assert not blocked.ok
    assert blocked.estimated_duration == 0
    data = blocked.to_dict()
    assert data["error"] == "Locked"
    assert data["suggestion"] == "Use a button"
    assert data["requiresRedstone"] is True

    failed = failed_plan({"action": "climb"}, "Climb", error="No target position specified")
    assert failed.status == "failed"
    assert failed.suggestion is None
    assert "suggestion" not in failed.to_dict()


def test_plan_to_dict_uses_wire_keys():
    plan = create_plan({"action": "eat", "npcId": "npc-7"}, "Eat", estimated_duration=1200)
    data = plan.to_dict()
    assert data["estimatedDuration"] == 1200
    assert data["task"]["npcId"] == "npc-7"
    assert "status" not in data


@pytest.mark.parametrize("seconds, expected", [(1.6, 1600), ("2", 2000), (-1, 0), (None, 0), (math.inf, 0)])
def test_seconds_to_ms(seconds, expected):
    assert seconds_to_ms(seconds) == expected
