# src/tasks/plan_door.py
"""
Door / trapdoor / fence gate planner, plus the security assessment and
airlock construction helpers.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional

from domain.doors import (
    AIRLOCK_PATTERN,
    INTERACTION_TIME_S,
    MAX_INTERACTION_DISTANCE,
    REDSTONE_MECHANISMS,
    SAFE_LIGHT_LEVEL,
    get_door_info,
    requires_redstone,
)
from spec.types import Plan, PlanContext, TaskRequest

from .helpers import (
    blocked_plan,
    create_plan,
    create_step,
    describe_target,
    failed_plan,
    normalize_item_name,
    seconds_to_ms,
    target_position,
)

DOOR_ACTIONS = ("open", "close", "toggle")
NAVIGATE_MS = 3000


def _distance(a: Optional[Mapping[str, float]], b: Optional[Mapping[str, float]]) -> float:
    if not a or not b:
        return 0.0
    return math.sqrt(sum((float(a.get(k, 0)) - float(b.get(k, 0))) ** 2 for k in ("x", "y", "z")))


def _door_block(request: TaskRequest, ctx: PlanContext) -> Optional[Dict[str, Any]]:
    raw = request.option("door") or ctx.get("targetDoor")
    if isinstance(raw, Mapping):
        block = dict(raw)
    elif isinstance(raw, str):
        block = {"type": raw}
    else:
        return None
    if "position" not in block and target_position(request.target):
        block["position"] = target_position(request.target)
    return block


def validate_door_interaction(door_block: Any) -> Dict[str, Any]:
    """Door must be a known type that opens by hand."""
    blockers: List[str] = []
    result: Dict[str, Any] = {"canInteract": True, "blockers": blockers}
    if not isinstance(door_block, Mapping) or not door_block.get("type"):
        blockers.append("No door found at target location")
    elif get_door_info(door_block["type"]) is None:
        blockers.append(f"{door_block['type']} is not a valid door")
    elif requires_redstone(door_block["type"]):
        result["requiresRedstone"] = True
        blockers.append(f"{normalize_item_name(door_block['type'])} can only be opened with redstone")
        result["suggestions"] = [
            "Place a button next to the door",
            "Use a lever for permanent opening",
            "Add a pressure plate for automatic opening",
        ]
    result["canInteract"] = not blockers
    return result


def determine_door_state_change(door_block: Mapping[str, Any], action: str = "toggle") -> Dict[str, Any]:
    current = "open" if door_block.get("open") else "closed"
    if action == "open":
        new = "open"
    elif action == "close":
        new = "closed"
    else:
        new = "closed" if current == "open" else "open"
    return {
        "currentState": current,
        "newState": new,
        "changed": current != new,
        "action": "opening" if new == "open" else "closing",
    }


def plan_redstone_activation(mechanism: str = "button") -> Dict[str, Any]:
    profile = REDSTONE_MECHANISMS.get(mechanism, REDSTONE_MECHANISMS["button"])
    activation = {"mechanism": mechanism if mechanism in REDSTONE_MECHANISMS else "button"}
    activation.update({k: list(v) if isinstance(v, tuple) else v for k, v in profile.items()})
    return activation


def assess_door_security(setup: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Security level plus vulnerabilities and fixes for a door installation."""
    setup = dict(setup or {})
    vulnerabilities: List[str] = []
    recommendations: List[str] = []
    features: List[str] = []

    door = get_door_info(setup.get("doorType") or "oak_door")
    if door is None:
        return {"securityLevel": "none", "vulnerabilities": ["Invalid door type"], "recommendations": []}

    level = "low"
    if door["material"] == "iron":
        level = "high"
    elif door["material"] == "wood":
        level = "medium"
        if door.get("zombieBreakable"):
            vulnerabilities.append("Zombies can break wooden doors on hard difficulty")
            recommendations.append("Consider using iron door or fence gate")
        if setup.get("nearVillagers"):
            vulnerabilities.append("Villagers can open wooden doors")
            recommendations.append("Use iron door or fence gate to prevent villager entry")

    if setup.get("airlockSetup"):
        level = "high"
        features.append("Airlock prevents mob entry")

    light = setup.get("lightLevel")
    if isinstance(light, (int, float)) and not isinstance(light, bool) and light < SAFE_LIGHT_LEVEL:
        vulnerabilities.append("Low light level allows mob spawning near door")
        recommendations.append(f"Add torches or other light sources (light level {SAFE_LIGHT_LEVEL}+)")

    if door.get("requiresPower"):
        mechanism = setup.get("redstoneMechanism")
        if not mechanism:
            vulnerabilities.append("Iron door has no activation mechanism")
            recommendations.append("Add button, lever, or pressure plate")
        elif mechanism == "pressure_plate":
            vulnerabilities.append("Pressure plates can be triggered by mobs")
            recommendations.append("Use button or lever for more control")

    assessment = {"securityLevel": level, "vulnerabilities": vulnerabilities, "recommendations": recommendations}
    if features:
        assessment["features"] = features
    return assessment


def plan_airlock_construction(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)
    door_type = normalize_item_name(request.option("doorType") or "oak_door")
    position = target_position(request.option("position") or request.target) or ctx.position
    count = AIRLOCK_PATTERN["doorCount"]
    spacing = AIRLOCK_PATTERN["spacing"]

    steps = [
        create_step(
            title="gather_materials",
            type="preparation",
            description=f"Gather materials: {count} {door_type}, blocks for walls",
            metadata={"materials": {door_type: count, "building_blocks": 20, "torches": 4}},
        ),
        create_step(
            title="build_structure",
            type="construction",
            description=f"Build airlock structure ({spacing} blocks deep)",
            metadata={"dimensions": {"width": 3, "depth": spacing + 2, "height": 3}, "position": position},
        ),
        create_step(
            title="place_doors",
            type="placement",
            description=f"Place {count} doors with {spacing} blocks between",
            metadata={"doorCount": count, "spacing": spacing},
        ),
        create_step(
            title="add_lighting",
            type="placement",
            description=f"Add torches inside airlock (light level {SAFE_LIGHT_LEVEL}+)",
            metadata={"torches": 4},
        ),
    ]
    plan = create_plan(
        task=request,
        summary="Construct mob-proof airlock",
        steps=steps,
        estimated_duration=60000,
        resources=[door_type, "building_blocks", "torch"],
        metadata={"complexity": "medium"},
    )
    plan.outcome = {"structure": "airlock", "security": "high", "mobProof": True, "doorCount": count}
    return plan


def plan_door_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    operation = str(request.option("doorAction", "operation", "mode") or "toggle").lower()
    if operation == "airlock":
        return plan_airlock_construction(request, ctx)
    if operation not in DOOR_ACTIONS:
        operation = "toggle"

    door_block = _door_block(request, ctx)
    if door_block is None:
        return failed_plan(
            request,
            f"{operation} door",
            error="No door specified",
            suggestion="Target a door or provide door location",
        )

    validation = validate_door_interaction(door_block)
    if not validation["canInteract"]:
        extra: Dict[str, Any] = {"blockers": validation["blockers"]}
        suggestion = None
        if validation.get("requiresRedstone"):
            extra["requiresRedstone"] = True
            extra["suggestions"] = validation["suggestions"]
            extra["redstonePlan"] = plan_redstone_activation("button")
            suggestion = validation["suggestions"][0]
        return blocked_plan(request, f"{operation} door", error=validation["blockers"][0], suggestion=suggestion, **extra)

    door = get_door_info(door_block["type"])
    change = determine_door_state_change(door_block, operation)
    position = target_position(door_block.get("position"))
    player = ctx.position or {"x": 0, "y": 0, "z": 0}

    steps = []
    duration = seconds_to_ms(INTERACTION_TIME_S)
    distance = _distance(position, player)
    if position and distance > MAX_INTERACTION_DISTANCE:
        steps.append(
            create_step(
                title="navigate_to_door",
                type="movement",
                description=f"Move to {door['type']} at {describe_target(position)}",
                metadata={"target": position, "maxDistance": 3, "distance": round(distance, 1)},
            )
        )
        duration += NAVIGATE_MS

    if change["changed"]:
        steps.append(
            create_step(
                title="interact_door",
                type="interaction",
                description=f"{change['action'].capitalize()} {door['type'].replace('_', ' ')}",
                metadata={
                    "door": position,
                    "currentState": change["currentState"],
                    "newState": change["newState"],
                    "interactionTime": INTERACTION_TIME_S,
                },
            )
        )
    else:
        steps.append(
            create_step(
                title="no_change",
                type="report",
                description=f"Door is already {change['currentState']}",
                metadata={"skip": True},
            )
        )

    notes = []
    if request.option("assessSecurity"):
        security = assess_door_security(
            {
                "doorType": door["name"],
                "nearVillagers": request.option("nearVillagers"),
                "lightLevel": ctx.get("lightLevel"),
                "redstoneMechanism": request.option("redstoneMechanism"),
            }
        )
        notes.extend(security["recommendations"])

    plan = create_plan(
        task=request,
        summary=f"{operation.capitalize()} {door['name']}",
        steps=steps,
        estimated_duration=duration,
        notes=notes,
    )
    plan.outcome = {
        "doorType": door["type"],
        "previousState": change["currentState"],
        "newState": change["newState"],
        "changed": change["changed"],
    }
    return plan
