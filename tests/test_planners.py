#tests/test_planners.py
"""
Planner coverage for all twenty actions.

Covers:
- Every default action plans without crashing (registry returns a Plan)
- Plans are deterministic, JSON-serializable and keep their invariants
  (unique resources without the sentinel, non-negative durations)
- Guard / interact / door / scaffolding / minecart / ranged / throw
  failure and blocked paths
- Throw range cap, fall damage, trident return and splash radius
- Trade blocked on missing payment; sleep mob radius and bed headroom
- Combat target priority and stance fallback
- Build scaffolding threshold, estimators and 10% material overhead
"""

from __future__ import annotations

import json

import pytest

from domain.templates import (
    estimate_lighting,
    estimate_roof,
    estimate_walls,
    generate_material_estimate,
    with_overhead,
)
from spec.types import UNSPECIFIED_ITEM
from tasks import DEFAULT_PLANNERS, has_planner, plan_task
from tasks.plan_climb import assess_vertical_route
from tasks.plan_combat import prioritize_enemies
from tasks.plan_sleep import check_bed_clearance, check_nearby_mobs
from tasks.plan_throw import assess_throw_attempt, calculate_splash_effect


ORIGIN = {"x": 0, "y": 64, "z": 0}

CASES = {
    "build": (
        {"action": "build", "details": "small watchtower",
         "metadata": {"dimensions": {"length": 5, "width": 5, "height": 12}}, "target": {"x": 10, "y": 64, "z": 10}},
        {"inventory": [{"name": "oak_planks", "count": 64}]},
    ),
    "mine": (
        {"action": "mine", "details": "iron ore", "target": {"x": 5, "y": 20, "z": 5},
         "metadata": {"tool": "stone_pickaxe", "dropOff": {"x": 0, "y": 64, "z": 0}, "depth": 20}},
        {"inventory": [{"name": "stone_pickaxe", "count": 1}, {"name": "torch", "count": 32}]},
    ),
    "explore": (
        {"action": "explore", "metadata": {"biome": "desert", "structure": "desert temple", "radius": 300}},
        {"position": ORIGIN},
    ),
    "gather": (
        {"action": "gather", "metadata": {"resource": "wheat", "quantity": 32, "fieldSize": 20},
         "target": {"x": 20, "y": 64, "z": -8}},
        {"inventory": [{"name": "wheat_seeds", "count": 40}], "biome": "plains"},
    ),
    "guard": (
        {"action": "guard", "target": {"name": "village gate"}, "metadata": {"duration": 10}},
        {"inventory": [{"name": "iron_sword", "count": 1}]},
    ),
    "craft": (
        {"action": "craft", "metadata": {"item": "torch", "quantity": 4}},
        {"inventory": [{"name": "coal", "count": 4}, {"name": "stick", "count": 4}]},
    ),
    "interact": (
        {"action": "interact", "target": {"x": 3, "y": 64, "z": 2},
         "metadata": {"container": "chest", "transfer": {"store": ["cobblestone"]}}},
        {},
    ),
    "combat": (
        {"action": "combat", "metadata": {"targetEntity": "zombie", "count": 3}, "target": {"x": 12, "y": 64, "z": 4}},
        {"inventory": [{"name": "iron_sword", "count": 1}, {"name": "shield", "count": 1}]},
    ),
    "eat": (
        {"action": "eat"},
        {"hungerState": {"hunger": 12, "saturation": 2}, "inventory": [{"name": "cooked_beef", "count": 4}]},
    ),
    "sleep": (
        {"action": "sleep", "bed": {"position": {"x": 1, "y": 64, "z": 1}, "type": "white_bed"}},
        {"dimension": "overworld", "timeOfDay": 14000, "position": ORIGIN},
    ),
    "door": (
        {"action": "door", "door": "oak_door", "doorAction": "open", "target": {"x": 10, "y": 64, "z": 0}},
        {"position": ORIGIN},
    ),
    "climb": (
        {"action": "climb", "target": {"x": 0, "y": 74, "z": 0}},
        {"position": ORIGIN, "inventory": [{"name": "ladder", "count": 16}]},
    ),
    "redstone": (
        {"action": "redstone", "component": {"type": "lever", "state": "off"}, "redstoneAction": "toggle"},
        {},
    ),
    "throw": (
        {"action": "throw", "item": "snowball", "target": {"x": 6, "y": 64, "z": 0}},
        {"position": ORIGIN, "inventory": [{"name": "snowball", "count": 16}]},
    ),
    "trade": (
        {"action": "trade", "want": "bread", "villager": {"profession": "farmer", "level": "novice"}},
        {"inventory": {"emerald": 10}},
    ),
    "minecart": (
        {"action": "minecart", "destination": {"x": 200, "y": 64, "z": 0}},
        {"position": ORIGIN, "inventory": [{"name": "minecart", "count": 1}]},
    ),
    "display": (
        {"action": "display", "item": "diamond_sword", "target": {"x": 2, "y": 65, "z": 0}},
        {"inventory": [{"name": "item_frame", "count": 1}, {"name": "diamond_sword", "count": 1}]},
    ),
    "composter": (
        {"action": "composter", "amount": 1},
        {"inventory": [{"name": "pumpkin", "count": 10}, {"name": "composter", "count": 1}]},
    ),
    "scaffolding": (
        {"action": "scaffolding", "purpose": "quick_ascent"},
        {"inventory": [{"name": "scaffolding", "count": 64}]},
    ),
    "ranged": (
        {"action": "ranged", "weapon": "bow", "target": {"x": 20, "y": 64, "z": 0}},
        {"position": ORIGIN, "inventory": [{"name": "bow", "count": 1}, {"name": "arrow", "count": 32}]},
    ),
}


def test_every_default_action_has_a_case():
    assert set(CASES) == set(DEFAULT_PLANNERS)
    assert len(DEFAULT_PLANNERS) == 20
    for action in DEFAULT_PLANNERS:
        assert has_planner(action)


@pytest.mark.parametrize("action", sorted(CASES))
def test_planner_produces_plan_with_invariants(action):
    task, context = CASES[action]
    plan = plan_task(task, context)

    assert plan is not None, f"planner for {action} crashed"
    assert plan.action == action
    assert plan.summary
    assert plan.estimated_duration >= 0
    assert len(plan.resources) == len(set(plan.resources))
    assert UNSPECIFIED_ITEM not in plan.resources

    data = plan.to_dict()
    json.dumps(data)
    assert data["estimatedDuration"] == plan.estimated_duration


@pytest.mark.parametrize("action", sorted(CASES))
def test_planner_is_deterministic(action):
    task, context = CASES[action]
    first = plan_task(task, context)
    second = plan_task(task, context)
    assert first is not None
    assert first.to_dict() == second.to_dict()


@pytest.mark.parametrize("action", sorted(CASES))
def test_planner_survives_empty_input(action):
    plan = plan_task({"action": action}, None)
    assert plan is not None
    assert plan.estimated_duration >= 0


@pytest.mark.parametrize("action", sorted(CASES))
def test_planner_does_not_mutate_inputs(action):
    task, context = CASES[action]
    task_before = json.dumps(task, sort_keys=True)
    context_before = json.dumps(context, sort_keys=True)
    plan_task(task, context)
    assert json.dumps(task, sort_keys=True) == task_before
    assert json.dumps(context, sort_keys=True) == context_before


def test_guard_without_target_fails():
    plan = plan_task({"action": "guard"}, {})
    assert plan.status == "failed"
    assert plan.error == "Task target is required for guard planning"


def test_guard_with_target_has_core_steps():
    plan = plan_task({"action": "guard", "target": {"x": 1, "y": 64, "z": 1}}, {})
    assert plan.ok
    titles = plan.step_titles()
    for title in ("Move to post", "Hold position", "Report"):
        assert title in titles


def test_interact_without_target_fails():
    plan = plan_task({"action": "interact"}, {})
    assert plan.status == "failed"
    assert plan.error == "Task must have a target location"


def test_iron_door_requires_redstone():
    plan = plan_task({"action": "door", "door": {"type": "iron_door", "position": {"x": 1, "y": 64, "z": 1}}}, {})
    assert plan.status == "blocked"
    data = plan.to_dict()
    assert data["requiresRedstone"] is True
    assert plan.suggestion == "Place a button next to the door"


def test_door_navigates_when_far():
    task, context = CASES["door"]
    plan = plan_task(task, context)
    assert plan.step_titles() == ["navigate_to_door", "interact_door"]
    assert plan.outcome["newState"] == "open"


def test_scaffolding_shortfall_is_blocked():
    plan = plan_task({"action": "scaffolding", "purpose": "quick_ascent"}, {"inventory": []})
    assert plan.status == "blocked"
    assert "Insufficient scaffolding" in plan.error
    assert plan.to_dict()["craft"]["string"] >= 1


def test_scaffolding_unknown_pattern_fails():
    plan = plan_task({"action": "scaffolding", "pattern": "moon_base"}, {"inventory": [{"name": "scaffolding", "count": 64}]})
    assert plan.status == "failed"
    assert plan.to_dict()["availableOptions"]


def test_minecart_without_cart_is_blocked():
    plan = plan_task({"action": "minecart", "destination": {"x": 50, "y": 64, "z": 0}}, {"inventory": []})
    assert plan.status == "blocked"
    assert plan.error == "No minecart in inventory"


def test_minecart_without_destination_fails():
    plan = plan_task({"action": "minecart"}, {"inventory": [{"name": "minecart", "count": 1}]})
    assert plan.status == "failed"


def test_ranged_needs_arrows():
    plan = plan_task({"action": "ranged", "weapon": "bow"}, {"inventory": [{"name": "bow", "count": 1}]})
    assert plan.status == "blocked"
    assert "arrow" in plan.error


def test_ranged_invalid_weapon_fails():
    plan = plan_task({"action": "ranged", "weapon": "slingshot"}, {})
    assert plan.status == "failed"


def test_throw_non_throwable_fails():
    plan = plan_task({"action": "throw", "item": "cobblestone"}, {"inventory": [{"name": "cobblestone", "count": 1}]})
    assert plan.status == "failed"
    assert "not a throwable item" in plan.error


def test_throw_cooldown_uses_injected_clock():
    context = {
        "inventory": [{"name": "ender_pearl", "count": 2}],
        "playerState": {"lastThrow": 10_000},
    }
    blocked = assess_throw_attempt("ender_pearl", context, now_ms=10_200)
    assert blocked["canThrow"] is False
    assert any(b.startswith("Cooldown") for b in blocked["blockers"])

    ready = assess_throw_attempt("ender_pearl", context, now_ms=20_000)
    assert ready["canThrow"] is True


def test_climb_prefers_available_ladders():
    assessment = assess_vertical_route({"x": 0, "y": 64, "z": 0}, {"x": 0, "y": 74, "z": 0}, [{"name": "ladder", "count": 16}])
    assert assessment["direction"] == "up"
    assert assessment["distance"] == 10
    assert assessment["recommended"] == "ladder"


def test_climb_without_materials_is_blocked():
    plan = plan_task({"action": "climb", "target": {"x": 0, "y": 80, "z": 0}}, {"position": ORIGIN})
    assert plan.status == "blocked"
    assert plan.error == "No climbing method available"


def test_redstone_lever_toggles_on():
    task, context = CASES["redstone"]
    plan = plan_task(task, context)
    assert plan.ok
    assert plan.steps[0].title == "toggle_lever"
    assert plan.steps[0].metadata["newState"] == "on"


def test_sleep_in_overworld_at_night_succeeds():
    task, context = CASES["sleep"]
    plan = plan_task(task, context)
    assert plan.ok


# -- throw ---------------------------------------------------------------

def _throw(item, target, **extra):
    task = {"action": "throw", "item": item, "target": target, **extra}
    return plan_task(task, {"inventory": [{"name": item, "count": 4}]})


def test_throw_beyond_range_is_blocked():
    plan = _throw("ender_pearl", {"x": 200, "y": 0, "z": 0})
    assert plan.status == "blocked"
    assert plan.error == "Target too far (200.0 blocks, max 120)"


def test_ender_pearl_warns_about_fall_damage():
    plan = _throw("ender_pearl", {"x": 30, "y": 0, "z": 0})
    assert plan.ok
    assert "Teleport deals 5 fall damage." in plan.risks
    assert "Will take 5 fall damage on teleport" in plan.warnings
    assert plan.resources == ["ender_pearl"]


def test_trident_is_not_consumed():
    plan = _throw("trident", {"x": 10, "y": 0, "z": 0})
    assert plan.ok
    assert plan.resources == []
    assert plan.outcome["consumed"] is False
    throw_step = plan.find_step("throw_item")
    assert throw_step.metadata["consumesItem"] is False
    assert throw_step.metadata["note"] == "Trident will return if loyalty enchantment"


def test_splash_potion_reports_radius():
    plan = _throw("splash_potion_of_healing", {"x": 6, "y": 0, "z": 0})
    assert plan.ok
    impact = plan.find_step("impact")
    assert impact.metadata["splashEffect"]["radius"] == 4
    assert impact.metadata["splashEffect"]["lingering"] is False

    lingering = calculate_splash_effect({"x": 0, "y": 0, "z": 0}, "lingering_potion")
    assert lingering["radius"] == 3
    assert lingering["lingering"] is True
    assert lingering["lingerDuration"] == 30


# -- trade ---------------------------------------------------------------

def test_trade_without_payment_is_blocked():
    task = {"action": "trade", "item": "enchanted_book",
            "villager": {"profession": "librarian", "level": "novice"}}
    plan = plan_task(task, {"inventory": {"emerald": {"count": 2}}})
    assert plan.status == "blocked"
    assert plan.error == "Insufficient items for trade"
    assert plan.suggestion == "Gather 5 emerald, 1 book"
    assert plan.to_dict()["required"] == {
        "emerald": {"need": 5, "have": 2},
        "book": {"need": 1, "have": 0},
    }


# -- sleep ---------------------------------------------------------------

def test_hostiles_count_within_eight_across_five_up():
    entities = [
        {"type": "zombie", "position": {"x": 8, "y": 64, "z": 0}},
        {"type": "zombie", "position": {"x": 0, "y": 70, "z": 0}},
        {"type": "skeleton", "position": {"x": 6, "y": 64, "z": 6}},
        {"type": "creeper", "position": {"x": 0, "y": 59, "z": 3}},
        {"type": "cow", "position": {"x": 1, "y": 64, "z": 1}},
    ]
    check = check_nearby_mobs(ORIGIN, entities)
    assert check["safe"] is False
    assert [m["type"] for m in check["hostileMobs"]] == ["zombie", "creeper"]
    assert check["message"] == "Cannot sleep: 2 hostile mob(s) nearby"

    assert check_nearby_mobs(ORIGIN, entities[4:])["safe"] is True


@pytest.mark.parametrize("world, issues", [
    ({"blocksAbove": ["air", "air"]}, []),
    ({"blocksAbove": ["white_carpet", "air"]}, []),
    ({"blocksAbove": ["stone"]},
     ["Block at +1: stone is obstructing bed", "Insufficient clearance above bed (0/2 blocks)"]),
    ({"blocksAbove": ["air", "oak_leaves"]},
     ["Block at +2: oak_leaves is obstructing bed", "Insufficient clearance above bed (1/2 blocks)"]),
    ({"blocksAbove": ["air", "air"], "surrounding": ["stone"] * 8},
     ["Bed is too enclosed: risk of suffocation"]),
])
def test_bed_clearance(world, issues):
    check = check_bed_clearance(world)
    assert check["issues"] == issues
    assert check["accessible"] is (not issues)


SLEEP_AT_BED = {"action": "sleep", "bed": {"type": "red_bed", "position": {"x": 2, "y": 64, "z": 2}}}


def test_sleep_blocked_by_nearby_zombie():
    context = {
        "timeOfDay": 18000,
        "position": ORIGIN,
        "nearbyEntities": [{"type": "zombie", "position": {"x": 3, "y": 64, "z": 4}}],
    }
    plan = plan_task(SLEEP_AT_BED, context)
    assert plan.status == "blocked"
    assert plan.error == "Cannot sleep: 1 hostile mob(s) nearby"
    assert plan.suggestion == "Clear 1 hostile mob(s) within 8 blocks of bed"
    assert plan.to_dict()["threats"][0]["distance"] == 5


def test_sleep_blocked_by_low_ceiling():
    context = {"timeOfDay": 18000, "position": ORIGIN, "worldData": {"blocksAbove": ["stone"]}}
    plan = plan_task(SLEEP_AT_BED, context)
    assert plan.status == "blocked"
    assert plan.error == "Block at +1: stone is obstructing bed"
    assert plan.suggestion == "Clear the space above the bed before sleeping"


# -- combat --------------------------------------------------------------

def test_enemies_ranked_by_explicit_then_profile_priority():
    order = prioritize_enemies(["zombie", "skeleton", "enderman", "creeper"], ["zombie"])
    assert [e["name"] for e in order] == ["zombie", "creeper", "enderman", "skeleton"]


def test_combat_plan_records_priority_order():
    task = {"action": "combat", "targetEntity": "zombie",
            "enemyTypes": ["skeleton", "creeper"], "priorityTargets": ["skeleton"]}
    plan = plan_task(task, {})
    assert plan.metadata["priorityOrder"] == ["skeleton", "creeper", "zombie"]


@pytest.mark.parametrize("extra, stance", [
    ({}, "guard"),
    ({"tactic": "ranged volley"}, "ranged"),
    ({"tactic": "ranged volley", "stance": "stealth"}, "stealth"),
])
def test_combat_stance_fallback(extra, stance):
    plan = plan_task({"action": "combat", "targetEntity": "zombie", **extra}, {})
    assert plan.metadata["stance"] == stance


# -- build ---------------------------------------------------------------

@pytest.mark.parametrize("dimensions, scaffolding", [("9x7x7", True), ("9x7x6", False)])
def test_scaffolding_only_above_six_blocks(dimensions, scaffolding):
    task = {"action": "build", "details": "cabin", "metadata": {"dimensions": dimensions}}
    plan = plan_task(task, {})
    assert ("Place scaffolding" in plan.step_titles()) is scaffolding


def test_wall_roof_and_lighting_estimates():
    assert estimate_walls(7, 5, 4) == {"walls": 18, "doors": 1, "windows": 6, "corners": 16}
    assert estimate_roof(10, 6, "flat") == 60
    assert estimate_roof(10, 6, "pitched") == 90
    assert estimate_roof(10, 6, "battlements") == 48
    assert estimate_roof(10, 6, "onion") == 60
    assert estimate_lighting(10, 6, 8) == 15


@pytest.mark.parametrize("amount, padded", [(100, 110), (60, 66), (26, 29), (0, 0)])
def test_material_overhead_is_ten_percent_rounded_up(amount, padded):
    assert with_overhead(amount) == padded


def test_castle_bill_of_materials():
    estimate = generate_material_estimate(10, 6, 5, "battlements")
    materials = estimate["materials"]
    assert materials["oak_planks"] == 118
    assert materials["cobblestone"] == 66
    assert materials["torch"] == 8
    assert materials["glass_pane"] == 5
    assert materials["oak_door"] == 2
