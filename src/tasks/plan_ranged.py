# src/tasks/plan_ranged.py
"""
Bow and crossbow attacks.

Weapon enchantments are read from the inventory entry
(`{"bow": {"count": 1, "enchantments": {"power": 3}}}`).
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

from domain.ranged import (
    AIM_HIGH_DISTANCE,
    BOW_FULL_CHARGE_SECONDS,
    CRITICAL_MULTIPLIER,
    CROSSBOW_BASE_LOAD_SECONDS,
    DEFAULT_ARROW_DAMAGE,
    MAX_RANGED_DAMAGE,
    POWER_BONUS_PER_LEVEL,
    QUICK_CHARGE_LOAD_SECONDS,
    RANGED_TACTICS,
    get_arrow_info,
    get_ranged_weapon_info,
)
from spec.types import Plan, PlanContext, TaskRequest

from .helpers import (
    blocked_plan,
    create_plan,
    create_step,
    describe_target,
    failed_plan,
    planning_mode,
    seconds_to_ms,
    target_position,
)

ATTACK_MS = 5000
ORIGIN = {"x": 0.0, "y": 0.0, "z": 0.0}
ARROW_RECIPE = "1 flint + 1 stick + 1 feather = 4 arrows"


def calculate_shot_damage(weapon: Any, conditions: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    (weapon + arrow) * charge * power * critical, rounded to one decimal.

    Only bows scale with charge; crossbows always fire at full strength.
    """
    info = get_ranged_weapon_info(weapon)
    if info is None:
        return {"error": "Invalid weapon"}
    conditions = conditions or {}

    arrow = get_arrow_info(conditions.get("arrowType")) if conditions.get("arrowType") else None
    arrow_damage = arrow["damage"] if arrow else DEFAULT_ARROW_DAMAGE
    charge = float(conditions.get("chargePercent") or 1.0) if info["type"] == "bow" else 1.0
    power_level = int(conditions.get("powerLevel") or 0)
    power = 1 + power_level * POWER_BONUS_PER_LEVEL
    critical = bool(conditions.get("critical"))
    crit = CRITICAL_MULTIPLIER if critical else 1.0

    total = (info["damage"] + arrow_damage) * charge * power * crit
    return {
        "weapon": info["name"],
        "baseDamage": info["damage"],
        "arrowDamage": arrow_damage,
        "chargeModifier": charge,
        "powerLevel": power_level,
        "powerMultiplier": power,
        "critical": critical,
        "criticalMultiplier": crit,
        "totalDamage": round(total, 1),
        "maxPossible": MAX_RANGED_DAMAGE,
    }


def calculate_crossbow_load_time(quick_charge: int = 0) -> Dict[str, Any]:
    level = int(quick_charge or 0)
    load = QUICK_CHARGE_LOAD_SECONDS.get(level, CROSSBOW_BASE_LOAD_SECONDS)
    reduction = CROSSBOW_BASE_LOAD_SECONDS - load
    return {
        "quickChargeLevel": level,
        "baseLoadTime": CROSSBOW_BASE_LOAD_SECONDS,
        "actualLoadTime": load,
        "reduction": reduction,
        "reductionPercent": round(reduction / CROSSBOW_BASE_LOAD_SECONDS * 100),
        "shotsPerMinute": int(60 // load),
    }


def get_best_ranged_tactic(situation: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Multishot for crowds, sniper beyond 40 blocks, quick shots inside 15, else strafe."""
    situation = situation or {}
    enemies = situation.get("enemyCount") or 1
    distance = situation.get("distance")
    distance = 20 if distance is None else distance
    weapon = _weapon_key(situation.get("weapon") or "bow")
    enchantments = situation.get("enchantments") or {}

    if enemies >= 3 and weapon == "crossbow" and enchantments.get("multishot"):
        tactic, reason = "multishot_crowd", "Multiple enemies in range"
    elif distance > 40:
        tactic, reason = "sniper", "Long range engagement"
    elif distance < 15:
        tactic, reason = "quick_shot", "Close range - prioritize fire rate"
    else:
        tactic, reason = "strafe_shooting", "Standard engagement"
    return {"tactic": tactic, **RANGED_TACTICS[tactic], "reason": reason}


def _weapon_key(weapon: Any) -> str:
    info = get_ranged_weapon_info(weapon)
    return info["name"] if info else ""


def check_ammo_requirements(weapon: Any, enchantments: Optional[Mapping[str, Any]] = None,
                            arrow_type: Any = "arrow") -> Dict[str, Any]:
    """Infinity bows keep normal arrows; tipped arrows are always consumed."""
    info = get_ranged_weapon_info(weapon)
    if info is None:
        return {"error": "Invalid weapon"}
    enchantments = enchantments or {}
    arrow_type = arrow_type or "arrow"
    arrow = get_arrow_info(arrow_type)

    infinity = info["type"] == "bow" and bool(enchantments.get("infinity"))
    tipped = bool(arrow and arrow["type"] == "tipped")
    consumes = tipped or not infinity
    return {
        "weapon": info["name"],
        "arrowType": arrow["name"] if arrow else str(arrow_type),
        "consumesArrow": consumes,
        "hasInfinity": infinity and not tipped,
        "note": "Infinity doesn't work with tipped arrows" if infinity and tipped else None,
        "arrowsNeeded": "1 per shot" if consumes else "1 arrow (infinite)",
    }


def _distance(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    return math.sqrt(sum((b[axis] - a[axis]) ** 2 for axis in ("x", "y", "z")))


def plan_ranged_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    if planning_mode(request) == "load":
        return plan_crossbow_load(request, context)
    ctx = PlanContext.coerce(context)

    weapon_name = request.option("weapon") or "bow"
    weapon = get_ranged_weapon_info(weapon_name)
    if weapon is None:
        return failed_plan(request, "Ranged attack", error=f"Invalid ranged weapon: {weapon_name}",
                           suggestion="Use bow or crossbow")

    kind = weapon["name"]
    summary = f"Attack with {kind}"
    inventory = ctx.inventory
    held = inventory.find(kind)
    if held is None:
        return blocked_plan(request, summary, error=f"No {kind} in inventory",
                            suggestion=f"Craft {kind} ({weapon['recipe']})")

    enchantments = dict(held.enchantments)
    ammo = check_ammo_requirements(kind, enchantments, request.option("arrowType") or "arrow")
    if ammo["consumesArrow"] and not inventory.has(ammo["arrowType"]):
        return blocked_plan(request, summary, error=f"No {ammo['arrowType']} in inventory",
                            suggestion=f"Craft arrows ({ARROW_RECIPE})")

    target = target_position(request.option("position") or request.target)
    origin = target_position(ctx.position) or ORIGIN
    distance = _distance(origin, target) if target else None
    tactic = None
    if target:
        tactic = get_best_ranged_tactic(
            {
                "weapon": kind,
                "distance": distance,
                "enemyCount": request.option("enemyCount") or 1,
                "enchantments": enchantments,
            }
        )

    steps = [create_step("equip_weapon", "equipment", f"Equip {kind}", {"weapon": kind, "slot": "main_hand"})]
    duration = ATTACK_MS
    if weapon["type"] == "crossbow":
        load = calculate_crossbow_load_time(enchantments.get("quick_charge", 0))
        duration += seconds_to_ms(load["actualLoadTime"])
        steps.append(
            create_step(
                "load_crossbow",
                "preparation",
                f"Load crossbow ({load['actualLoadTime']:g}s)",
                {"loadTime": load["actualLoadTime"], "action": "hold_right_click",
                 "quickChargeLevel": load["quickChargeLevel"]},
            )
        )
    if target:
        steps.append(
            create_step(
                "aim_at_target",
                "combat",
                f"Aim at {describe_target(target)}",
                {
                    "target": target,
                    "distance": round(distance),
                    "compensation": "Aim slightly above target for arc" if distance > AIM_HIGH_DISTANCE
                    else "Direct aim",
                },
            )
        )
    if weapon["type"] == "bow":
        steps.append(
            create_step(
                "charge_and_shoot",
                "combat",
                "Charge bow and release (1 second for full power)",
                {"chargeTime": BOW_FULL_CHARGE_SECONDS, "action": "hold_and_release", "fullCharge": True,
                 "tactic": tactic["tactic"] if tactic else "standard"},
            )
        )
    else:
        piercing = enchantments.get("piercing")
        steps.append(
            create_step(
                "shoot_crossbow",
                "combat",
                "Fire loaded crossbow",
                {
                    "action": "right_click",
                    "multishot": "Fires 3 arrows" if enchantments.get("multishot") else None,
                    "piercing": f"Pierces {piercing} entities" if piercing else None,
                },
            )
        )

    damage = calculate_shot_damage(
        kind, {"powerLevel": enchantments.get("power", 0), "chargePercent": 1.0, "arrowType": ammo["arrowType"]}
    )
    notes = [ammo["note"]] if ammo["note"] else []
    extra = {"tactic": tactic} if tactic else {}
    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=duration,
        resources=[kind, ammo["arrowType"]],
        risks=["Ranged combat: keep distance and watch for flanking mobs."],
        notes=notes,
        metadata={"safety": "ranged_combat"},
        **extra,
    )
    plan.outcome = {
        "weapon": kind,
        "ammo": ammo["arrowType"],
        "damage": damage["totalDamage"],
        "distance": round(distance) if distance is not None else None,
        "tactic": tactic["tactic"] if tactic else "standard",
    }
    return plan


def plan_crossbow_load(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    crossbow = ctx.inventory.find("crossbow")
    if crossbow is None:
        return blocked_plan(request, "Load crossbow", error="No crossbow in inventory")

    level = int(crossbow.enchantments.get("quick_charge", 0) or 0)
    load = calculate_crossbow_load_time(level)
    steps = [
        create_step(
            "hold_right_click",
            "preparation",
            "Hold right-click to load crossbow",
            {
                "duration": load["actualLoadTime"],
                "quickChargeLevel": level,
                "note": f"Quick Charge {level} reduces load time by {load['reductionPercent']}%" if level else None,
            },
        )
    ]
    plan = create_plan(
        task=request,
        summary="Load crossbow",
        steps=steps,
        estimated_duration=seconds_to_ms(load["actualLoadTime"]),
        resources=["crossbow"],
    )
    plan.outcome = {"loadTime": load["actualLoadTime"], "shotsPerMinute": load["shotsPerMinute"]}
    return plan
