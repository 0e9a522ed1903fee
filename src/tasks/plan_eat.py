# src/tasks/plan_eat.py
"""
Eating planner plus the hunger helpers it relies on.

- can_eat / calculate_eating_outcome: per-food rules
- get_best_food_choice: ranks edible inventory by restoration per second
- assess_hunger_situation: hunger level -> urgency + recommendations
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from domain.foods import (
    DEFAULT_HUNGER_STATE,
    HARMFUL_EFFECTS,
    MAX_HUNGER,
    REGENERATION_HUNGER_THRESHOLD,
    REGENERATION_SATURATION_THRESHOLD,
    get_food_profile,
)
from spec.types import Inventory, Plan, PlanContext, TaskRequest

from .helpers import create_plan, create_step, failed_plan, normalize_item_name, seconds_to_ms


# hunger <= value -> urgency
URGENCY_LEVELS = (
    (3, "critical"),
    (6, "high"),
    (12, "medium"),
    (17, "low"),
)
EFFECT_BONUS = 5
SELECT_FOOD_MS = 500
FIND_SAFE_LOCATION_MS = 3000


def _number(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _hunger_state(raw: Any) -> Dict[str, float]:
    raw = raw if isinstance(raw, Mapping) else {}
    return {
        key: _number(raw.get(key), default)
        for key, default in DEFAULT_HUNGER_STATE.items()
    }


def _clean(value: float) -> Any:
    rounded = round(value, 2)
    return int(rounded) if float(rounded).is_integer() else rounded


def can_eat(food: Any, hunger: Any = MAX_HUNGER) -> bool:
    """True iff the food is always edible or hunger is below the maximum."""
    profile = get_food_profile(food)
    if profile is None:
        return False
    if profile.get("alwaysEdible"):
        return True
    return _number(hunger, MAX_HUNGER) < MAX_HUNGER


def calculate_eating_outcome(food: Any, hunger_state: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    profile = get_food_profile(food)
    if profile is None:
        return {"success": False, "error": "Not a valid food item"}

    current = _hunger_state(hunger_state)
    new_hunger = min(MAX_HUNGER, current["hunger"] + profile["hunger"])
    # saturation never exceeds the hunger bar
    new_saturation = min(new_hunger, current["saturation"] + profile["saturation"])

    effects = []
    for effect in profile["effects"]:
        entry = {
            "type": effect["type"],
            "duration": effect.get("duration", 0),
            "amplifier": effect.get("amplifier", 0),
        }
        if "chance" in effect:
            entry["chance"] = effect["chance"]
        effects.append(entry)

    return {
        "success": True,
        "previous": {"hunger": _clean(current["hunger"]), "saturation": _clean(current["saturation"])},
        "new": {
            "hunger": _clean(new_hunger),
            "saturation": _clean(new_saturation),
            "exhaustion": _clean(current["exhaustion"]),
        },
        "restored": {
            "hunger": _clean(new_hunger - current["hunger"]),
            "saturation": _clean(new_saturation - current["saturation"]),
        },
        "eatTime": profile["eatTime"],
        "effects": effects,
        "returnItem": profile.get("returnItem"),
        "category": profile["category"],
    }


def get_best_food_choice(
    inventory: Any,
    hunger_state: Optional[Mapping[str, Any]] = None,
    preferences: Optional[Mapping[str, Any]] = None,
) -> Optional[Dict[str, Any]]:
    """
    Highest scoring edible item in `inventory`, or None.

    Score is (restored hunger + restored saturation) / eat time, with a bonus
    per beneficial effect when `preferEffects` is set. Raw meat and dangerous
    food are skipped unless the preferences allow them.
    """
    prefs = dict(preferences or {})
    avoid_raw = prefs.get("avoidRaw", True) is not False
    avoid_dangerous = prefs.get("avoidDangerous", True) is not False
    prefer_effects = bool(prefs.get("preferEffects", False))

    state = _hunger_state(hunger_state)
    items = inventory if isinstance(inventory, Inventory) else Inventory.from_raw(inventory)

    choices = []
    for item in items:
        profile = get_food_profile(item.name)
        if profile is None or not can_eat(item.name, state["hunger"]):
            continue
        if avoid_raw and profile["category"] == "raw_meat":
            continue
        if avoid_dangerous and profile["category"] == "dangerous":
            continue

        outcome = calculate_eating_outcome(item.name, state)
        eat_time = profile["eatTime"] or 1.0
        score = (outcome["restored"]["hunger"] + outcome["restored"]["saturation"]) / eat_time
        if prefer_effects:
            beneficial = [e for e in outcome["effects"] if e["type"] not in HARMFUL_EFFECTS]
            score += len(beneficial) * EFFECT_BONUS

        choices.append(
            {
                "name": normalize_item_name(item.name),
                "count": item.count,
                "food": profile,
                "outcome": outcome,
                "score": round(score, 4),
            }
        )

    if not choices:
        return None
    # stable: ties keep inventory order
    choices.sort(key=lambda c: -c["score"])
    return choices[0]


def assess_hunger_situation(hunger_state: Optional[Mapping[str, Any]] = None, inventory: Any = None) -> Dict[str, Any]:
    current = _hunger_state(hunger_state)
    hunger = current["hunger"]
    saturation = current["saturation"]

    urgency = "none"
    for ceiling, level in URGENCY_LEVELS:
        if hunger <= ceiling:
            urgency = level
            break

    recommendations: List[str] = []
    if urgency == "critical":
        recommendations.append("Starving: eat immediately or take damage.")
    elif urgency == "high":
        recommendations.append("Very hungry: eat soon to avoid starvation.")
    elif urgency == "medium":
        recommendations.append("Moderately hungry: consider eating.")
    elif urgency == "low":
        recommendations.append("Slightly hungry: eat when convenient.")

    can_regenerate = (
        hunger >= REGENERATION_HUNGER_THRESHOLD and saturation >= REGENERATION_SATURATION_THRESHOLD
    )
    if not can_regenerate and hunger < MAX_HUNGER:
        recommendations.append("Cannot regenerate health: hunger below threshold.")

    best = get_best_food_choice(inventory, current)
    if best is None and urgency != "none":
        recommendations.append("No suitable food in inventory: gather food urgently.")
    if saturation < 2 and hunger > 6:
        recommendations.append("Low saturation: hunger will deplete faster.")

    return {
        "urgency": urgency,
        "hungerLevel": _clean(hunger),
        "saturationLevel": _clean(saturation),
        "percentFull": _clean(hunger / MAX_HUNGER * 100),
        "canRegenerate": can_regenerate,
        "availableFood": best is not None,
        "bestFood": best["name"] if best else None,
        "recommendations": recommendations,
    }


def _context_hunger_state(ctx: PlanContext) -> Dict[str, Any]:
    raw = ctx.get("hungerState") or ctx.npc.get("hungerState")
    if isinstance(raw, Mapping):
        return dict(raw)
    npc = ctx.npc
    if "hunger" in npc or "food" in npc:
        return {
            "hunger": npc.get("hunger", npc.get("food")),
            "saturation": npc.get("saturation"),
        }
    return dict(DEFAULT_HUNGER_STATE)


def plan_eat_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    inventory = ctx.inventory
    hunger_state = _context_hunger_state(ctx)
    assessment = assess_hunger_situation(hunger_state, inventory)
    critical = assessment["urgency"] == "critical"
    priority = "high" if critical else request.priority

    requested = request.option("food", "item")
    if requested:
        profile = get_food_profile(requested)
        name = normalize_item_name(requested)
        if profile is None:
            return failed_plan(
                request,
                f"Cannot eat {name}.",
                error=f"'{name}' is not a valid food item",
                priority=priority,
            )
        if not inventory.has(requested):
            return failed_plan(
                request,
                f"No {name} available to eat.",
                error=f"No {name} in inventory",
                suggestion=f"Gather or craft {name} first",
                priority=priority,
            )
        if not can_eat(requested, hunger_state.get("hunger")):
            return failed_plan(request, "Hunger is already full.", error="Hunger is already full", priority=priority)
        choice = {"name": name, "food": profile, "outcome": calculate_eating_outcome(requested, hunger_state)}
    else:
        choice = get_best_food_choice(inventory, hunger_state, request.option("preferences"))
        if choice is None:
            return failed_plan(
                request,
                "No suitable food to eat.",
                error="No suitable food available in inventory",
                suggestion="Gather food: crops, hunt animals, or fish",
                priority=priority,
            )

    outcome = choice["outcome"]
    food_name = choice["name"]

    steps = []
    if critical:
        steps.append(
            create_step(
                title="find_safe_location",
                type="movement",
                description="Find safe location to eat",
                metadata={"reason": "Critical hunger: avoid combat during eating"},
            )
        )
    steps.append(
        create_step(
            title="select_food",
            type="inventory",
            description=f"Select {food_name} from inventory",
            metadata={"item": food_name, "slot": "main_hand"},
        )
    )
    steps.append(
        create_step(
            title="eat_food",
            type="action",
            description=f"Eat {food_name}",
            metadata={
                "item": food_name,
                "duration": outcome["eatTime"],
                "interruptible": False,
                "hungerRestored": outcome["restored"]["hunger"],
                "saturationRestored": outcome["restored"]["saturation"],
                "effects": outcome["effects"],
                "returnItem": outcome["returnItem"],
            },
        )
    )
    if outcome["returnItem"]:
        steps.append(
            create_step(
                title="collect_container",
                type="inventory",
                description=f"Collect {outcome['returnItem']}",
                metadata={"item": outcome["returnItem"]},
            )
        )

    duration = seconds_to_ms(outcome["eatTime"]) + SELECT_FOOD_MS + (FIND_SAFE_LOCATION_MS if critical else 0)

    warnings: List[str] = []
    if choice["food"]["category"] == "dangerous":
        warnings = [
            f"Eating {food_name} will cause {effect['type']} for {effect['duration']}s"
            for effect in outcome["effects"]
        ]

    plan = create_plan(
        task=request,
        summary="Eat food to restore hunger",
        steps=steps,
        estimated_duration=duration,
        resources=[food_name, outcome["returnItem"]],
        notes=assessment["recommendations"],
        metadata={"urgency": assessment["urgency"], "safety": "Find safe location first" if critical else "normal"},
        priority=priority,
    )
    plan.outcome = {
        "food": food_name,
        "previous": outcome["previous"],
        "new": outcome["new"],
        "restored": outcome["restored"],
        "effects": outcome["effects"],
        "assessment": assessment,
    }
    plan.warnings = warnings
    return plan
