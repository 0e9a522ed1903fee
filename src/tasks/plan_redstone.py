# src/tasks/plan_redstone.py
"""
Redstone component activation and small circuit construction.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from domain.lookup import table_key
from domain.redstone import (
    ACTIVATION_TIME_S,
    CAN_ACTIVATE,
    CIRCUIT_USE_CASES,
    DUST_ESTIMATE,
    get_component_info,
)
from spec.types import Plan, PlanContext, TaskRequest

from .helpers import blocked_plan, create_plan, create_step, failed_plan, planning_mode, seconds_to_ms

REDSTONE_ACTIONS = ("activate", "deactivate", "toggle")
CIRCUIT_BUILD_MS = 120000


def validate_component_placement(component: Any, world_data: Any = None) -> Dict[str, Any]:
    """Surface, support, tripwire span and free-cell checks for placing a component."""
    world = world_data if isinstance(world_data, Mapping) else {}
    issues: List[str] = []
    warnings: List[str] = []

    if not component:
        return {"valid": False, "issues": ["Invalid component"], "warnings": warnings}
    spec = dict(component) if isinstance(component, Mapping) else {"type": component}
    info = get_component_info(spec.get("type"))
    if info is None:
        return {"valid": False, "issues": [f"Unknown component type: {spec.get('type')}"], "warnings": warnings}

    name = info["name"]
    surface = spec.get("surface") or "wall"
    allowed = info["canBePlacedOn"]
    if surface not in allowed and "any" not in allowed:
        issues.append(f"{name} cannot be placed on {surface}")

    if surface in ("wall", "floor"):
        support = world.get("supportBlock")
        if not support or support == "air":
            issues.append(f"{name} requires a solid block for support")

    if info["type"] == "tripwire":
        if not world.get("oppositeHook"):
            warnings.append("Tripwire needs two hooks with string between them")
        span = world.get("distance") or 0
        if isinstance(span, (int, float)) and span > info["maxDistance"]:
            issues.append(f"Tripwire hooks too far apart (max {info['maxDistance']} blocks)")

    current = world.get("currentBlock") or "air"
    if current != "air":
        issues.append(f"Position occupied by {current}")

    return {"valid": not issues, "issues": issues, "warnings": warnings}


def get_activation_duration(component: Any) -> Union[float, str]:
    """Seconds the signal lasts, or "indefinite" for latching components."""
    info = get_component_info(component)
    if info is None:
        return 0
    if info.get("staysActivated"):
        return "indefinite"
    return info.get("activationDuration", 0)


def get_activatable_blocks(component: Any) -> List[str]:
    info = get_component_info(component)
    if info is None:
        return []
    return list(CAN_ACTIVATE.get(info["type"], ()))


def design_redstone_circuit(purpose: Any) -> Dict[str, Any]:
    key = table_key(purpose)
    use_case = CIRCUIT_USE_CASES.get(key)
    if use_case is None:
        return {"error": "Unknown circuit purpose", "availablePurposes": list(CIRCUIT_USE_CASES)}
    return {
        "purpose": key,
        "description": use_case["purpose"],
        "components": [{"type": c, "count": 1, "info": get_component_info(c)} for c in use_case["components"]],
        "placement": use_case["placement"],
        "additionalMaterials": ["redstone_dust"],
        "estimatedComplexity": use_case["complexity"],
        "steps": list(use_case["steps"]),
    }


def _component_target(request: TaskRequest, ctx: PlanContext) -> Optional[Dict[str, Any]]:
    raw = request.option("component") or ctx.get("targetComponent")
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, str) and raw.strip():
        return {"type": raw}
    return None


def plan_redstone_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    if planning_mode(request) == "circuit":
        return plan_redstone_circuit(request, context)
    ctx = PlanContext.coerce(context)

    operation = str(request.option("redstoneAction", "operation") or "activate").lower()
    if operation not in REDSTONE_ACTIONS:
        operation = "activate"
    summary = f"{operation.capitalize()} redstone component"

    target = _component_target(request, ctx)
    if target is None:
        return failed_plan(
            request,
            summary,
            error="No redstone component specified",
            suggestion="Target a lever, button, or pressure plate",
        )

    info = get_component_info(target.get("type"))
    if info is None:
        return failed_plan(request, summary, error=f"'{target.get('type')}' is not a valid redstone component")

    name = info["name"]
    label = name.replace("_", " ")
    kind = info["type"]
    if kind == "switch":
        current = str(target.get("state") or "off")
        if operation == "toggle":
            new = "off" if current == "on" else "on"
        else:
            new = "on" if operation == "activate" else "off"
        step = create_step(
            "toggle_lever",
            "interaction",
            f"Toggle lever {new.upper()}",
            {
                "component": target,
                "currentState": current,
                "newState": new,
                "duration": "indefinite",
                "powerOutput": info["powerOutput"],
            },
        )
    elif kind == "button":
        step = create_step(
            "press_button",
            "interaction",
            f"Press {label}",
            {
                "component": target,
                "activationDuration": info["activationDuration"],
                "powerOutput": info["powerOutput"],
                "note": f"Button will stay activated for {info['activationDuration']}s",
            },
        )
    elif kind == "pressure_plate":
        step = create_step(
            "step_on_plate",
            "interaction",
            f"Step on {label}",
            {
                "component": target,
                "activatedBy": list(info["activatedBy"]),
                "deactivationDelay": info["deactivationDelay"],
                "note": "Plate will deactivate when weight is removed",
            },
        )
    elif kind == "target":
        step = create_step(
            "shoot_target",
            "combat",
            "Hit target block with projectile",
            {
                "component": target,
                "powerOutput": "1-15 based on accuracy",
                "note": "Closer to center = higher signal strength",
            },
        )
    else:
        step = create_step(
            "interact_component",
            "interaction",
            f"Interact with {label}",
            {"component": target, "interactionType": info["activation"]},
        )

    duration = get_activation_duration(name)
    plan = create_plan(
        task=request,
        summary=summary,
        steps=[step],
        estimated_duration=seconds_to_ms(ACTIVATION_TIME_S) + 400,
        resources=[],
    )
    plan.outcome = {
        "componentType": kind,
        "activation": info["activation"],
        "powerOutput": info["powerOutput"],
        "duration": duration,
        "canActivate": get_activatable_blocks(name),
    }
    return plan


def plan_redstone_circuit(task: Any, context: Any = None) -> Plan:
    """Build a reference circuit (`purpose`, default door_opener) from inventory."""
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    purpose = request.option("purpose") or "door_opener"
    design = design_redstone_circuit(purpose)
    if "error" in design:
        return failed_plan(
            request,
            "Build redstone circuit",
            error=design["error"],
            suggestion=f"Available purposes: {', '.join(design['availablePurposes'])}",
        )

    summary = f"Build {design['purpose']} circuit"
    needed: Dict[str, int] = {}
    for component in design["components"]:
        needed[component["type"]] = needed.get(component["type"], 0) + component["count"]
    needed["redstone_dust"] = DUST_ESTIMATE

    inventory = ctx.inventory
    missing = []
    for item, count in needed.items():
        have = inventory.count(item)
        if item == "redstone_dust":
            have += inventory.count("redstone")
        if have < count:
            missing.append(f"{item} (need {count}, have {have})")
    if missing:
        return blocked_plan(
            request,
            summary,
            error="Missing materials",
            suggestion=f"Gather {', '.join(missing)}",
            missingMaterials=missing,
        )

    total = len(design["steps"])
    steps = [
        create_step(f"circuit_step_{i}", "construction", text, {"stepNumber": i, "totalSteps": total})
        for i, text in enumerate(design["steps"], start=1)
    ]
    steps.append(create_step("test_circuit", "validation", "Test circuit activation", {"purpose": design["purpose"]}))

    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=CIRCUIT_BUILD_MS,
        resources=list(needed),
        metadata={"complexity": design["estimatedComplexity"]},
    )
    plan.outcome = {
        "circuitPurpose": design["purpose"],
        "components": [c["type"] for c in design["components"]],
        "complexity": design["estimatedComplexity"],
    }
    return plan
