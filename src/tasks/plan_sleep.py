# src/tasks/plan_sleep.py
"""
Sleep planner.

Validation runs four independent checks (time window, dimension, nearby
hostiles, bed clearance); any failure blocks the plan. Sleeping outside
the Overworld is flagged as dangerous because the bed detonates.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from domain.sleep import (
    ALLOWED_DIMENSIONS,
    ALLOWED_MOBS,
    BED_RECIPE_HINT,
    BED_TYPES,
    EXPLOSION_POWER,
    MAX_SOLID_NEIGHBOURS,
    MIN_HEADROOM,
    MOB_RADIUS,
    MOB_VERTICAL_RADIUS,
    PHANTOM_THRESHOLD_DAYS,
    RESPAWN_MESSAGE,
    SLEEP_TICKS,
    SLEEP_WINDOW_END,
    SLEEP_WINDOW_START,
    THUNDERSTORM_OVERRIDE,
    TICKS_PER_SECOND,
    WAKE_TICKS,
)
from domain.lookup import table_key
from spec.types import Plan, PlanContext, TaskRequest

from .helpers import blocked_plan, create_plan, create_step, describe_target, failed_plan, normalize_item_name

NAVIGATE_THRESHOLD = 3
NAVIGATE_MS = 4000
PLACE_BED_MS = 1500


def _number(value: Any, default: float = 0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _point(value: Any) -> Dict[str, float]:
    value = value if isinstance(value, Mapping) else {}
    return {axis: _number(value.get(axis)) for axis in ("x", "y", "z")}


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def validate_sleep_time(time_of_day: Any, is_thunderstorm: bool = False) -> Dict[str, Any]:
    """Sleeping is allowed inside [12541, 23458] ticks, or anytime in a thunderstorm."""
    if is_thunderstorm and THUNDERSTORM_OVERRIDE:
        return {"canSleep": True, "reason": "thunderstorm", "message": "You can sleep during thunderstorms"}
    ticks = _number(time_of_day) % 24000
    if SLEEP_WINDOW_START <= ticks <= SLEEP_WINDOW_END:
        return {"canSleep": True, "reason": "nighttime", "message": "Good time to sleep"}
    return {
        "canSleep": False,
        "reason": "daytime",
        "message": "You can only sleep at night or during thunderstorms",
    }


def validate_dimension(dimension: Any = "overworld") -> Dict[str, Any]:
    key = table_key(dimension or "overworld")
    if key in ALLOWED_DIMENSIONS:
        return {"allowed": True, "behavior": "sleep", "message": "Safe to sleep in this dimension"}

    behavior = "block"
    message = "Cannot sleep in this dimension"
    if "nether" in key:
        behavior = "explode"
        message = "Beds explode in the Nether!"
    elif "end" in key:
        behavior = "explode"
        message = "Beds explode in the End!"

    result = {"allowed": False, "behavior": behavior, "message": message}
    if behavior == "explode":
        result["explosionPower"] = EXPLOSION_POWER
        result["warning"] = "Danger: attempting to sleep will cause an explosion!"
    return result


def check_nearby_mobs(position: Any, entities: Optional[Sequence[Any]] = None) -> Dict[str, Any]:
    """Hostiles within 8 blocks horizontally and 5 vertically prevent sleep."""
    origin = _point(position)
    hostiles = []
    for entity in entities or ():
        if not isinstance(entity, Mapping) or not entity.get("type") or not isinstance(entity.get("position"), Mapping):
            continue
        kind = table_key(entity["type"])
        if kind in ALLOWED_MOBS:
            continue
        pos = _point(entity["position"])
        horizontal = math.hypot(pos["x"] - origin["x"], pos["z"] - origin["z"])
        vertical = abs(pos["y"] - origin["y"])
        if horizontal <= MOB_RADIUS and vertical <= MOB_VERTICAL_RADIUS:
            hostiles.append({"type": kind, "distance": round(horizontal, 2), "position": dict(entity["position"])})

    return {
        "safe": not hostiles,
        "hostileMobs": hostiles,
        "message": f"Cannot sleep: {len(hostiles)} hostile mob(s) nearby" if hostiles else "Area is safe",
    }


def _obstructs(block: Any) -> bool:
    return bool(block) and block != "air" and "carpet" not in str(block)


def check_bed_clearance(world_data: Any) -> Dict[str, Any]:
    """Two clear blocks above the bed and not fully boxed in."""
    world = world_data if isinstance(world_data, Mapping) else {}
    issues: List[str] = []

    above = list(world.get("blocksAbove") or [])
    clear = 0
    for index in range(MIN_HEADROOM):
        block = above[index] if index < len(above) else None
        if _obstructs(block):
            issues.append(f"Block at +{index + 1}: {block} is obstructing bed")
            break
        clear += 1
    if clear < MIN_HEADROOM:
        issues.append(f"Insufficient clearance above bed ({clear}/{MIN_HEADROOM} blocks)")

    solid = [b for b in world.get("surrounding") or [] if _obstructs(b) and "bed" not in str(b)]
    if len(solid) >= MAX_SOLID_NEIGHBOURS:
        issues.append("Bed is too enclosed: risk of suffocation")

    return {"accessible": not issues, "issues": issues}


def calculate_sleep_benefits(player_state: Any = None) -> Dict[str, Any]:
    state = player_state if isinstance(player_state, Mapping) else {}
    previous_risk = _number(state.get("daysSinceRest")) >= PHANTOM_THRESHOLD_DAYS
    messages = [RESPAWN_MESSAGE]
    if previous_risk:
        messages.append("Phantom spawn timer reset")
    return {
        "respawnSet": True,
        "phantomCounterReset": True,
        "timeSkipped": True,
        "newTimeOfDay": 0,
        "daysSinceRest": 0,
        "previousPhantomRisk": previous_risk,
        "newPhantomRisk": False,
        "messages": messages,
    }


def validate_sleep_attempt(ctx: PlanContext, bed_position: Any = None) -> Dict[str, Any]:
    environment = ctx.environment
    blockers: List[str] = []
    warnings: List[str] = []
    result: Dict[str, Any] = {"allowed": True, "blockers": blockers, "warnings": warnings, "dangerous": False}

    time_of_day = ctx.get("timeOfDay", default=environment.get("timeOfDay", 0))
    thunder = bool(ctx.get("isThunderstorm", default=environment.get("isThunderstorm", False)))
    time_check = validate_sleep_time(time_of_day, thunder)
    if not time_check["canSleep"]:
        blockers.append(time_check["message"])
        result["timeBlocked"] = True

    dimension = ctx.get("dimension", default=environment.get("dimension", "overworld"))
    dim_check = validate_dimension(dimension)
    if not dim_check["allowed"]:
        blockers.append(dim_check["message"])
        if dim_check["behavior"] == "explode":
            warnings.append(dim_check["warning"])
            result["dangerous"] = True
            result["explosionPower"] = dim_check["explosionPower"]

    entities = ctx.get("nearbyEntities", default=environment.get("nearbyEntities", []))
    mob_check = check_nearby_mobs(ctx.position, entities if isinstance(entities, list) else [])
    if not mob_check["safe"]:
        blockers.append(mob_check["message"])
        result["hostileMobs"] = mob_check["hostileMobs"]

    world_data = ctx.get("worldData")
    if bed_position is not None and world_data is not None:
        clearance = check_bed_clearance(world_data)
        blockers.extend(clearance["issues"])

    result["allowed"] = not blockers
    return result


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------

def plan_sleep_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    bed = request.option("bed")
    bed_location: Optional[Dict[str, Any]] = None
    bed_type = None
    needs_placement = False

    if isinstance(bed, Mapping) and isinstance(bed.get("position"), Mapping):
        bed_location = dict(bed["position"])
        bed_type = normalize_item_name(bed.get("type") or "bed")
    elif request.option("nearestBed"):
        nearest = ctx.get("nearestBedLocation")
        if not isinstance(nearest, Mapping):
            return failed_plan(
                request,
                "Sleep in bed",
                error="No bed found nearby",
                suggestion="Place a bed or move to an existing bed",
            )
        bed_location = dict(nearest)
        bed_type = "bed"
    else:
        bed_type = next((name for name in BED_TYPES if ctx.inventory.has(name)), None)
        if bed_type is None:
            return failed_plan(request, "Sleep in bed", error="No bed available", suggestion=BED_RECIPE_HINT)
        needs_placement = True

    validation = validate_sleep_attempt(ctx, bed_location)
    if not validation["allowed"]:
        extra: Dict[str, Any] = {"blockers": validation["blockers"]}
        if validation["dangerous"]:
            suggestion = "Do not attempt to sleep: return to the Overworld first"
            extra["danger"] = True
            extra["explosionPower"] = validation["explosionPower"]
        elif validation.get("timeBlocked"):
            suggestion = "Wait until nighttime (after sunset) or during a thunderstorm"
        elif validation.get("hostileMobs"):
            hostiles = validation["hostileMobs"]
            suggestion = f"Clear {len(hostiles)} hostile mob(s) within {MOB_RADIUS} blocks of bed"
            extra["threats"] = [
                {"type": m["type"], "distance": round(m["distance"]), "position": m["position"]}
                for m in hostiles
            ]
        else:
            suggestion = "Clear the space above the bed before sleeping"

        plan = blocked_plan(
            request,
            "Sleep in bed",
            error=validation["blockers"][0],
            suggestion=suggestion,
            **extra,
        )
        plan.warnings = list(validation["warnings"])
        return plan

    benefits = calculate_sleep_benefits(ctx.get("playerState"))
    position = ctx.position or {"x": 0, "y": 0, "z": 0}
    duration = SLEEP_TICKS * 1000 // TICKS_PER_SECOND + WAKE_TICKS * 1000 // TICKS_PER_SECOND

    steps = []
    if needs_placement:
        steps.append(
            create_step(
                title="place_bed",
                type="placement",
                description=f"Place {bed_type} on ground",
                metadata={
                    "item": bed_type,
                    "position": request.option("placePosition") or "current",
                    "validation": {"requireFlat": True, "requireSupport": True, "checkClearance": True},
                },
            )
        )
        duration += PLACE_BED_MS

    if bed_location:
        start = _point(position)
        end = _point(bed_location)
        distance = math.hypot(end["x"] - start["x"], end["z"] - start["z"])
        if distance > NAVIGATE_THRESHOLD:
            steps.append(
                create_step(
                    title="navigate_to_bed",
                    type="movement",
                    description=f"Navigate to bed at {describe_target(bed_location)}",
                    metadata={"target": bed_location, "maxDistance": 2, "pathfinding": "direct"},
                )
            )
            duration += NAVIGATE_MS

    entities = ctx.get("nearbyEntities")
    if request.option("clearHostiles") and isinstance(entities, list):
        hostiles = [
            e for e in entities
            if isinstance(e, Mapping) and e.get("hostile") and _number(e.get("distance"), math.inf) <= MOB_RADIUS
        ]
        if hostiles:
            steps.append(
                create_step(
                    title="clear_hostiles",
                    type="combat",
                    description=f"Clear {len(hostiles)} hostile mob(s) before sleeping",
                    metadata={"targets": hostiles, "priority": "high"},
                )
            )

    steps.append(
        create_step(
            title="sleep",
            type="action",
            description="Lie down in bed and sleep",
            metadata={
                "bed": bed_location or "placed_bed",
                "duration": SLEEP_TICKS / TICKS_PER_SECOND,
                "interruptible": True,
                "interruptConditions": ["hostile_mob_nearby", "player_damage", "bed_destroyed"],
            },
        )
    )
    steps.append(
        create_step(
            title="wake_up",
            type="action",
            description="Wake up at dawn",
            metadata={"newTimeOfDay": 0, "wakeDelay": WAKE_TICKS / TICKS_PER_SECOND},
        )
    )

    plan = create_plan(
        task=request,
        summary="Sleep in bed",
        steps=steps,
        estimated_duration=duration,
        resources=[bed_type] if needs_placement else [],
        notes=benefits["messages"],
        metadata={"safety": "check_environment", "needsPlacement": needs_placement},
        benefits=benefits,
    )
    plan.outcome = {
        "respawnPointSet": benefits["respawnSet"],
        "phantomCounterReset": benefits["phantomCounterReset"],
        "timeSkipped": "night_to_dawn",
        "newTimeOfDay": 0,
        "messages": benefits["messages"],
    }
    return plan
