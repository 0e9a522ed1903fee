# src/tasks/plan_throw.py
"""
Throwing planner: snowballs, eggs, ender pearls, potions, tridents and
fire charges.
"""

from __future__ import annotations

import math
import time
from typing import Any, Dict, List, Mapping, Optional

from domain.throwables import (
    ACCURACY_BY_MOVEMENT,
    ENDER_PEARL_COOLDOWN,
    GRAVITY_PER_TICK,
    HIT_EFFECTS,
    LOW_TRIDENT_DURABILITY,
    MAX_THROW_DISTANCE,
    SITUATION_PRIORITIES,
    SPLASH_POTION_RADIUS,
    get_throwable_info,
    is_throwable,
)
from spec.types import Inventory, Plan, PlanContext, TaskRequest

from .helpers import (
    blocked_plan,
    create_plan,
    create_step,
    describe_target,
    failed_plan,
    normalize_item_name,
    planning_mode,
    target_position,
)

THROW_MS = 1000
TELEPORT_MS = 2000

ORIGIN = {"x": 0.0, "y": 0.0, "z": 0.0}


def calculate_trajectory(start: Any, target: Any, item: Any, player_state: Any = None) -> Dict[str, Any]:
    """
    Straight-line flight estimate.

    Items with gravity fly an arc; flight time is distance over launch
    velocity (ticks). Targets beyond 120 blocks are out of reach.
    """
    throwable = get_throwable_info(item)
    if throwable is None:
        return {"error": "Invalid throwable item"}

    a = target_position(start) or ORIGIN
    b = target_position(target) or a
    dx, dy, dz = b["x"] - a["x"], b["y"] - a["y"], b["z"] - a["z"]
    horizontal = math.sqrt(dx * dx + dz * dz)
    total = math.sqrt(dx * dx + dy * dy + dz * dz)

    state = player_state if isinstance(player_state, Mapping) else {}
    accuracy = ACCURACY_BY_MOVEMENT.get(str(state.get("movement") or "standing"), 1.0)

    return {
        "distance": total,
        "horizontalDistance": horizontal,
        "verticalDistance": abs(dy),
        "velocity": throwable["velocity"],
        "gravity": GRAVITY_PER_TICK if throwable["gravity"] else 0,
        "flightTime": total / throwable["velocity"],
        "accuracy": accuracy,
        "hitChance": accuracy * 100,
        "trajectory": "arc" if throwable["gravity"] else "straight",
        "willReach": total <= MAX_THROW_DISTANCE,
    }


def calculate_splash_effect(impact: Any, potion: Any) -> Dict[str, Any]:
    throwable = get_throwable_info(potion) or {}
    radius = throwable.get("splashRadius") or SPLASH_POTION_RADIUS
    return {
        "centerPoint": impact,
        "radius": radius,
        "affectedArea": math.pi * radius * radius,
        "potencyAtCenter": 1.0,
        "potencyAtEdge": 0.25,
        "lingering": throwable.get("type") == "lingering_potion",
        "lingerDuration": throwable.get("lingerDuration", 0),
    }


def assess_throw_attempt(item: Any, context: Any = None, now_ms: Optional[float] = None) -> Dict[str, Any]:
    """
    Blockers and warnings for throwing `item` right now.

    `playerState.lastThrow` is an epoch timestamp in milliseconds and is
    compared against `now_ms` (wall clock when omitted) for cooldowns.
    """
    ctx = PlanContext.coerce(context)
    throwable = get_throwable_info(item)
    name = normalize_item_name(item)
    assessment: Dict[str, Any] = {"canThrow": True, "blockers": [], "warnings": []}

    if throwable is None:
        assessment["canThrow"] = False
        assessment["blockers"].append(f"{name} is not throwable")
        return assessment

    if not ctx.inventory.has(name):
        assessment["canThrow"] = False
        assessment["blockers"].append(f"No {name} in inventory")

    state = ctx.get("playerState") or {}
    last_throw = state.get("lastThrow") if isinstance(state, Mapping) else None
    if throwable["cooldown"] > 0 and isinstance(last_throw, (int, float)):
        now = now_ms if now_ms is not None else time.time() * 1000
        elapsed = (now - last_throw) / 1000
        if elapsed < throwable["cooldown"]:
            assessment["canThrow"] = False
            assessment["blockers"].append(f"Cooldown: {throwable['cooldown'] - elapsed:.1f}s remaining")

    kind = throwable["name"]
    if kind == "trident":
        held = ctx.inventory.find("trident")
        if held is not None and held.durability is not None:
            if held.durability <= 0:
                assessment["canThrow"] = False
                assessment["blockers"].append("Trident is broken")
            elif held.durability < LOW_TRIDENT_DURABILITY:
                assessment["warnings"].append(
                    f"Trident durability low: {held.durability}/{throwable['durability']}"
                )
        if ctx.get("tridentHasRiptide"):
            if ctx.get("isRaining") or ctx.get("inWater"):
                assessment["warnings"].append("Will launch player with trident")
            else:
                assessment["canThrow"] = False
                assessment["blockers"].append("Riptide trident requires rain or water")

    if kind == "ender_pearl":
        assessment["warnings"].append(f"Will take {throwable['fallDamage']} fall damage on teleport")

    return assessment


def get_best_throwable(inventory: Any = None, situation: str = "combat") -> Optional[Dict[str, Any]]:
    """First held throwable matching the situation's preference list."""
    inv = Inventory.from_raw(inventory)
    held = [item for item in inv if is_throwable(item.name)]
    if not held:
        return None

    for preferred in SITUATION_PRIORITIES.get(situation, SITUATION_PRIORITIES["combat"]):
        for item in held:
            if preferred in item.key:
                return {
                    "name": item.name,
                    "count": item.count or 1,
                    "info": get_throwable_info(item.name),
                    "situation": situation,
                }

    first = held[0]
    return {"name": first.name, "count": first.count or 1, "info": get_throwable_info(first.name), "situation": "general"}


def plan_throw_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    if planning_mode(request) == "teleport":
        return plan_ender_pearl_teleport(request, context)
    ctx = PlanContext.coerce(context)

    raw_item = request.option("item", "throwable")
    if not raw_item:
        best = get_best_throwable(ctx.inventory, request.option("situation") or "combat")
        raw_item = best["name"] if best else None
    if not raw_item:
        return failed_plan(request, "Throw item", error="No throwable item specified")

    item = normalize_item_name(raw_item).replace(" ", "_")
    summary = f"Throw {item}"
    throwable = get_throwable_info(item)
    if throwable is None:
        return failed_plan(
            request,
            summary,
            error=f"{item} is not a throwable item",
            suggestion="Try: snowball, egg, ender_pearl, splash_potion, trident",
        )

    assessment = assess_throw_attempt(item, ctx)
    if not assessment["canThrow"]:
        plan = blocked_plan(
            request,
            summary,
            error="; ".join(assessment["blockers"]),
            blockers=assessment["blockers"],
        )
        plan.warnings = assessment["warnings"]
        return plan

    target = target_position(request.target)
    trajectory = None
    if target is not None:
        trajectory = calculate_trajectory(ctx.position or ORIGIN, target, item, ctx.get("playerState"))
        if not trajectory["willReach"]:
            return blocked_plan(
                request,
                summary,
                error=f"Target too far ({trajectory['distance']:.1f} blocks, max {MAX_THROW_DISTANCE})",
            )

    kind = throwable["name"]
    steps = [create_step("select_throwable", "inventory", f"Select {item} from inventory",
                         {"item": item, "slot": "main_hand"})]
    if target is not None:
        steps.append(
            create_step(
                "aim_at_target",
                "aim",
                f"Aim at {describe_target(target)}",
                {
                    "target": target,
                    "trajectory": trajectory["trajectory"],
                    "distance": trajectory["distance"],
                    "accuracy": trajectory["accuracy"],
                },
            )
        )

    note = None
    if throwable["type"] == "teleport_projectile":
        note = "Will teleport to impact location"
    elif throwable["type"] == "splash_potion":
        note = f"Affects {SPLASH_POTION_RADIUS}-block radius"
    elif kind == "trident" and not throwable["consumesOnThrow"]:
        note = "Trident will return if loyalty enchantment"
    steps.append(
        create_step(
            "throw_item",
            "action",
            f"Throw {item}",
            {
                "item": item,
                "velocity": throwable["velocity"],
                "gravity": throwable["gravity"],
                "consumesItem": throwable["consumesOnThrow"],
                "note": note,
            },
        )
    )

    if target is not None:
        splash = None
        if throwable["type"] in ("splash_potion", "lingering_potion"):
            splash = calculate_splash_effect(target, item)
        steps.append(
            create_step(
                "impact",
                "observation",
                "Projectile impacts target",
                {
                    "effects": [dict(e) for e in throwable["effects"]],
                    "hitEffects": dict(HIT_EFFECTS.get(kind, {})),
                    "splashEffect": splash,
                },
            )
        )

    risks: List[str] = []
    if kind == "ender_pearl":
        risks.append(f"Teleport deals {throwable['fallDamage']} fall damage.")

    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=THROW_MS,
        resources=[item] if throwable["consumesOnThrow"] else [],
        risks=risks,
        metadata={"safety": "medium_fall_damage" if kind == "ender_pearl" else "normal"},
        priority="high" if request.option("urgent") else None,
    )
    plan.warnings = assessment["warnings"]
    plan.outcome = {
        "item": item,
        "itemType": throwable["type"],
        "consumed": throwable["consumesOnThrow"],
        "trajectory": trajectory,
        "effects": [dict(e) for e in throwable["effects"]],
    }
    return plan


def plan_ender_pearl_teleport(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    destination = target_position(request.option("destination") or request.target)
    if destination is None:
        return failed_plan(request, "Ender pearl teleport", error="No destination specified for ender pearl teleport")

    start = ctx.position and target_position(ctx.position) or ORIGIN
    distance = math.sqrt(sum((destination[axis] - start[axis]) ** 2 for axis in ("x", "y", "z")))
    fall_damage = get_throwable_info("ender_pearl")["fallDamage"]
    where = describe_target(destination)

    steps = [
        create_step(
            "prepare_teleport",
            "preparation",
            "Prepare ender pearl teleport",
            {"distance": distance, "fallDamage": fall_damage, "warning": f"Will take {fall_damage} fall damage"},
        ),
        create_step("throw_pearl", "action", f"Throw ender pearl to {where}",
                    {"item": "ender_pearl", "destination": destination}),
        create_step("teleport", "movement", "Teleport on impact",
                    {"newPosition": destination, "fallDamage": fall_damage}),
    ]
    plan = create_plan(
        task=request,
        summary=f"Teleport to {where}",
        steps=steps,
        estimated_duration=TELEPORT_MS,
        resources=["ender_pearl"],
        risks=[f"Teleport deals {fall_damage} fall damage."],
        metadata={"safety": "medium_fall_damage"},
    )
    plan.outcome = {
        "method": "ender_pearl",
        "distance": distance,
        "fallDamage": fall_damage,
        "cooldown": ENDER_PEARL_COOLDOWN,
    }
    return plan
