#tests/test_planner_supplements.py
"""
Tests for the calculators exposed next to the planners.

Covers:
- Rail material and travel-time estimates
- Scaffolding support validation
- Edibility and the sleep window
- Crossbow load time and redstone activation duration
- Trade search, emerald budgeting and emerald acquisition
- Construction helpers: airlock, ladder column, rail line, auto-composter
- Ender pearl teleport and crossbow loading plans
- `mode` routes the main action planners to these construction plans
"""

from __future__ import annotations

import pytest

from tasks import plan_task
from tasks.plan_climb import plan_ladder_construction
from tasks.plan_composter import plan_auto_composter
from tasks.plan_door import plan_airlock_construction
from tasks.plan_eat import can_eat
from tasks.plan_minecart import calculate_rail_requirements, calculate_travel_time, plan_rail_construction
from tasks.plan_ranged import calculate_crossbow_load_time, plan_crossbow_load
from tasks.plan_redstone import get_activation_duration, plan_redstone_circuit
from tasks.plan_scaffolding import validate_scaffolding_placement
from tasks.plan_sleep import validate_sleep_time
from tasks.plan_throw import plan_ender_pearl_teleport
from tasks.plan_trade import calculate_emerald_needs, find_best_trade, plan_emerald_acquisition


def test_rail_requirements_on_flat_track():
    rails = calculate_rail_requirements(100)
    assert rails["poweredRails"] == 3
    assert rails["regularRails"] == 97
    assert rails["materials"] == {"iron_ingot": 42, "gold_ingot": 6, "stick": 7, "redstone_dust": 1}


def test_rail_requirements_uphill_needs_powered_rails():
    rails = calculate_rail_requirements(20, {"uphillBlocks": 10})
    assert rails["poweredRails"] == 11
    assert rails["regularRails"] == 9
    assert rails["totalRails"] == 20


def test_travel_time_at_average_speed():
    travel = calculate_travel_time(640)
    assert travel["averageSpeed"] == pytest.approx(6.4)
    assert travel["travelTime"] == pytest.approx(100.0)
    assert travel["travelTimeFormatted"] == "1m 40s"


def test_scaffolding_needs_support():
    assert validate_scaffolding_placement({})["valid"] is False

    edge = validate_scaffolding_placement({"nearbyScaffolding": [{"distance": 5}]})
    assert edge["valid"] is True
    assert any("Near edge" in w for w in edge["warnings"])

    too_far = validate_scaffolding_placement({"nearbyScaffolding": [{"distance": 7}]})
    assert too_far["valid"] is False


@pytest.mark.parametrize(
    "food, hunger, expected",
    [("golden_apple", 20, True), ("bread", 20, False), ("bread", 10, True)],
)
def test_can_eat(food, hunger, expected):
    assert can_eat(food, hunger) is expected


@pytest.mark.parametrize(
    "ticks, storm, expected",
    [(12000, False, False), (13000, False, True), (37000, False, True), (6000, True, True), (23459, False, False)],
)
def test_sleep_window(ticks, storm, expected):
    assert validate_sleep_time(ticks, storm)["canSleep"] is expected


def test_quick_charge_three_crossbow():
    load = calculate_crossbow_load_time(3)
    assert load["actualLoadTime"] == 0.5
    assert load["reductionPercent"] == 60
    assert load["shotsPerMinute"] == 120


def test_activation_duration():
    assert get_activation_duration("lever") == "indefinite"
    assert get_activation_duration("stone_button") == 1.0


def test_find_best_trade_picks_cheapest_offer():
    villagers = [
        {"profession": "farmer", "level": "novice"},
        {"profession": "librarian", "level": "apprentice"},
    ]
    best = find_best_trade("enchanted_book", villagers)
    assert best["profession"] == "librarian"
    assert best["level"] == "apprentice"
    assert best["cost"] == 5

    assert find_best_trade("netherite_ingot", villagers) is None
    assert find_best_trade("paper", None) is None


def test_emerald_needs_counts_only_emerald_costs():
    trades = [
        {"buy": "emerald", "buyCount": {"min": 5, "max": 64}, "sell": "enchanted_book", "buy2": "book", "buy2Count": 1},
        {"buy": "wheat", "buyCount": 20, "sell": "emerald"},
    ]
    needs = calculate_emerald_needs(trades, [{"name": "emerald", "count": 3}])

    assert needs["totalNeeded"] == 5
    assert needs["currentAmount"] == 3
    assert needs["shortage"] == 2
    assert needs["sufficient"] is False
    assert needs["breakdown"][0]["trade"] == "5 emerald + 1 book -> 1 enchanted_book"
    assert needs["breakdown"][1]["emeraldCost"] == 0


def test_emerald_acquisition_sells_held_goods():
    context = {
        "inventory": [{"name": "wheat", "count": 45}],
        "nearbyVillagers": [{"profession": "farmer", "level": "novice"}],
    }
    plan = plan_emerald_acquisition({"action": "trade", "amount": 3}, context)

    assert plan.ok
    assert plan.step_titles() == ["trade_1"]
    assert plan.steps[0].description == "Trade 2x 20 wheat for 2 emeralds"
    assert plan.outcome["emeraldsAcquired"] == 2
    assert plan.outcome["surplus"] == -1
    assert plan.risks == ["Only 2 of 3 emeralds reachable with current inventory."]


def test_emerald_acquisition_without_buyers_is_blocked():
    plan = plan_emerald_acquisition({"action": "trade"}, {"inventory": [{"name": "wheat", "count": 45}]})
    assert plan.status == "blocked"
    assert plan.error == "No villagers want items in inventory"


def test_airlock_uses_two_spaced_doors():
    plan = plan_airlock_construction({"action": "door", "position": {"x": 5, "y": 64, "z": 5}}, {})
    assert plan.ok
    assert plan.step_titles() == ["gather_materials", "build_structure", "place_doors", "add_lighting"]
    assert plan.steps[2].metadata == {"doorCount": 2, "spacing": 2}
    assert plan.resources == ["oak_door", "building_blocks", "torch"]
    assert plan.outcome["mobProof"] is True


def test_ladder_column_needs_enough_ladders_and_a_wall():
    short = plan_ladder_construction({"action": "climb", "height": 12}, {"inventory": [{"name": "ladder", "count": 5}]})
    assert short.status == "blocked"
    assert short.error == "Need 12 ladders, have 5"
    assert short.suggestion == "Craft 3 more ladder recipes (7 sticks each)"

    stocked = {"inventory": [{"name": "ladder", "count": 12}]}
    no_wall = plan_ladder_construction({"action": "climb", "height": 12}, {**stocked, "worldData": {"behindBlock": "air"}})
    assert no_wall.status == "blocked"
    assert no_wall.error == "Cannot place ladders here"

    plan = plan_ladder_construction({"action": "climb", "height": 12}, {**stocked, "worldData": {"behindBlock": "stone"}})
    assert plan.ok
    assert plan.step_titles() == ["select_ladders", "place_ladder_column"]
    assert plan.estimated_duration == 6000
    assert plan.outcome["laddersUsed"] == 12


RAIL_TASK = {
    "action": "minecart",
    "start": {"x": 0, "y": 64, "z": 0},
    "end": {"x": 16, "y": 64, "z": 0},
    "optimal": False,
}


def test_rail_construction_blocks_without_materials():
    plan = plan_rail_construction(RAIL_TASK, {"inventory": []})
    assert plan.status == "blocked"
    assert plan.error == "Insufficient materials"
    assert len(plan.to_dict()["missingMaterials"]) == 4


def test_rail_construction_with_materials():
    inventory = [
        {"name": "iron_ingot", "count": 6},
        {"name": "gold_ingot", "count": 6},
        {"name": "stick", "count": 1},
        {"name": "redstone_dust", "count": 1},
    ]
    plan = plan_rail_construction(RAIL_TASK, {"inventory": inventory})

    assert plan.ok
    assert plan.step_titles() == [
        "build_loading_station",
        "lay_rails",
        "add_redstone_power",
        "build_unloading_station",
        "test_route",
    ]
    assert plan.steps[1].metadata["poweredRails"] == 1
    assert plan.steps[1].metadata["regularRails"] == 15
    assert plan.estimated_duration == 32000
    assert plan.outcome["routeLength"] == 16


def test_rail_construction_needs_both_ends():
    plan = plan_rail_construction({"action": "minecart", "end": {"x": 5, "y": 64, "z": 0}}, {})
    assert plan.status == "failed"


def test_auto_composter_scales_composters_with_throughput():
    inventory = [
        {"name": "composter", "count": 2},
        {"name": "hopper", "count": 4},
        {"name": "chest", "count": 2},
    ]
    plan = plan_auto_composter({"action": "composter", "throughput": 1000}, {"inventory": inventory})

    assert plan.ok
    assert len(plan.steps) == 9
    assert plan.steps[-1].title == "test_system"
    assert plan.resources == ["composter", "hopper", "chest"]
    assert plan.outcome["throughput"] == 1636
    assert plan.outcome["design"]["compostersNeeded"] == 2


def test_auto_composter_without_parts_is_blocked():
    plan = plan_auto_composter({}, {})
    assert plan.status == "blocked"
    assert plan.error == "Insufficient materials"


def test_ender_pearl_teleport_reports_fall_damage():
    plan = plan_ender_pearl_teleport(
        {"action": "throw", "destination": {"x": 30, "y": 64, "z": 40}},
        {"position": {"x": 0, "y": 64, "z": 0}},
    )
    assert plan.ok
    assert plan.step_titles() == ["prepare_teleport", "throw_pearl", "teleport"]
    assert plan.outcome["distance"] == pytest.approx(50.0)
    assert plan.outcome["fallDamage"] == 5
    assert plan.risks == ["Teleport deals 5 fall damage."]

    assert plan_ender_pearl_teleport({"action": "throw"}, {}).status == "failed"


def test_crossbow_load_plan_uses_quick_charge():
    context = {"inventory": [{"name": "crossbow", "count": 1, "enchantments": {"quick_charge": 2}}]}
    plan = plan_crossbow_load({"action": "ranged"}, context)

    assert plan.ok
    assert plan.estimated_duration == 750
    assert plan.outcome["shotsPerMinute"] == 80
    assert plan.steps[0].metadata["note"] == "Quick Charge 2 reduces load time by 40%"

    assert plan_crossbow_load({"action": "ranged"}, {"inventory": []}).error == "No crossbow in inventory"


LADDER_CONTEXT = {"inventory": [{"name": "ladder", "count": 12}], "worldData": {"behindBlock": "stone"}}
CROSSBOW_CONTEXT = {"inventory": [{"name": "crossbow", "count": 1}]}
COMPOSTER_CONTEXT = {"inventory": [{"name": "composter", "count": 2}, {"name": "hopper", "count": 4},
                                   {"name": "chest", "count": 2}]}
FARMER_CONTEXT = {"inventory": [{"name": "wheat", "count": 45}],
                  "nearbyVillagers": [{"profession": "farmer", "level": "novice"}]}


@pytest.mark.parametrize("task, context, direct", [
    ({"action": "trade", "mode": "emeralds", "amount": 3}, FARMER_CONTEXT, plan_emerald_acquisition),
    ({"action": "throw", "mode": "teleport", "destination": {"x": 30, "y": 64, "z": 40}},
     {"position": {"x": 0, "y": 64, "z": 0}}, plan_ender_pearl_teleport),
    ({"action": "door", "doorAction": "airlock", "position": {"x": 5, "y": 64, "z": 5}}, {},
     plan_airlock_construction),
    ({"action": "climb", "mode": "build_ladder", "height": 12}, LADDER_CONTEXT, plan_ladder_construction),
    ({**RAIL_TASK, "mode": "build rail"}, {"inventory": []}, plan_rail_construction),
    ({"action": "ranged", "mode": "load"}, CROSSBOW_CONTEXT, plan_crossbow_load),
    ({"action": "composter", "mode": "Automatic", "throughput": 1000}, COMPOSTER_CONTEXT, plan_auto_composter),
    ({"action": "redstone", "mode": "circuit"}, {}, plan_redstone_circuit),
])
def test_mode_routes_action_to_construction_planner(task, context, direct):
    routed = plan_task(task, context)
    expected = direct(task, context)
    assert routed.summary == expected.summary
    assert routed.step_titles() == expected.step_titles()
    assert routed.status == expected.status


def test_unknown_mode_keeps_the_regular_planner():
    task = {"action": "climb", "mode": "sideways", "target": {"x": 0, "y": 80, "z": 0}}
    plan = plan_task(task, {"position": {"x": 0, "y": 64, "z": 0}})
    assert plan.error == "No climbing method available"
