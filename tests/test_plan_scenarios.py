#tests/test_plan_scenarios.py
"""
End-to-end planning scenarios through the default registry.

Covers:
- Mining diamonds with a lava hazard, plus the matching envelope
- Building from the basic_house template
- Eating at critical hunger
- Sleeping in the Nether (blocked, dangerous)
- Composting wheat into bone meal
- Trading with a novice librarian
"""

from __future__ import annotations

from envelope.adapter import EnvelopeAdapter
from env.schema import EnvelopeSettings
from tasks import plan_task


MINE_TASK = {
    "action": "mine",
    "details": "diamond at (30,12,-4)",
    "target": {"x": 30, "y": 12, "z": -4},
    "metadata": {"hazards": ["lava"], "tools": ["iron_pickaxe"], "strategy": "branch"},
}


def test_mine_diamond_plan():
    plan = plan_task(MINE_TASK, {})

    assert plan is not None
    assert plan.status is None
    assert plan.ok
    assert "iron_pickaxe" in plan.resources
    assert "diamond" in plan.resources

    strategy = plan.find_step("Apply strategy")
    assert strategy is not None
    assert "branch_mining" in strategy.description

    survey = plan.find_step("Survey site")
    assert survey is not None
    assert "(30,12,-4)" in survey.description

    mitigate = plan.find_step("Mitigate hazard")
    assert mitigate is not None
    assert mitigate.metadata["hazard"] == "lava (critical)"

    assert plan.find_step("Extract") is not None
    assert plan.find_step("Deposit") is None


def test_mine_diamond_envelope():
    adapter = EnvelopeAdapter(EnvelopeSettings())
    envelope = adapter.build_envelope(MINE_TASK)

    assert envelope["action"] == "mine"
    assert envelope["metadata"]["strategy"] == "branch_mining"
    assert envelope["metadata"]["watchers"][0]["hazard"] == "lava"
    assert envelope["metadata"]["resource"]["block"] == "minecraft:diamond"


def test_build_basic_house_template():
    task = {
        "action": "build",
        "metadata": {"template": "basic_house", "orientation": "north"},
        "target": {"x": 0, "y": 64, "z": 0},
    }
    plan = plan_task(task, {})

    assert plan is not None
    assert "Using template: Basic House (residential)." in plan.notes
    assert plan.estimated_duration == 18000
    assert "oak_planks" in plan.resources

    survey = plan.find_step("Survey site")
    assert survey is not None
    assert "north" in survey.description


def test_eat_with_critical_hunger():
    context = {
        "hungerState": {"hunger": 2, "saturation": 0},
        "inventory": [{"name": "bread", "count": 3}],
    }
    plan = plan_task({"action": "eat"}, context)

    assert plan is not None
    assert plan.ok
    assert plan.priority == "high"
    assert plan.steps[0].title == "find_safe_location"

    last = plan.steps[-1]
    assert last.title == "eat_food"
    assert last.metadata["hungerRestored"] == 5
    assert last.metadata["saturationRestored"] == 6


def test_sleep_in_nether_is_blocked_and_dangerous():
    context = {"dimension": "the_nether", "timeOfDay": 18000, "isThunderstorm": False}
    task = {"action": "sleep", "bed": {"position": {"x": 1, "y": 64, "z": 1}, "type": "red_bed"}}
    plan = plan_task(task, context)

    assert plan is not None
    assert plan.status == "blocked"

    data = plan.to_dict()
    assert data["danger"] is True
    assert data["explosionPower"] == 5
    assert "Danger: attempting to sleep will cause an explosion!" in data["warnings"]


def test_compost_wheat_into_two_bonemeal():
    context = {"inventory": [{"name": "wheat", "count": 22}]}
    plan = plan_task({"action": "composter", "amount": 2}, context)

    assert plan is not None
    assert plan.ok

    compost = plan.find_step("compost_wheat")
    assert compost is not None
    assert compost.metadata["count"] == 22
    assert compost.metadata["chance"] == 0.65
    assert plan.outcome["itemsComposted"] == 22


def test_trade_emeralds_for_enchanted_book():
    task = {
        "action": "trade",
        "item": "enchanted_book",
        "villager": {"profession": "librarian", "level": "novice"},
    }
    context = {"inventory": {"emerald": {"count": 30}, "book": {"count": 1}}}
    plan = plan_task(task, context)

    assert plan is not None
    assert plan.ok
    assert plan.steps[-1].title == "confirm_trade"

    trade = plan.outcome["trade"]
    assert trade["sell"] == "enchanted_book"
    assert trade["buy"] == "emerald"
    assert trade["buyCount"] == 5
    assert trade["buy2"] == "book"
    assert trade["buy2Count"] == 1
