# src/tasks/plan_guard.py
"""
Guard / defensive assignment planner.
"""

from __future__ import annotations

from typing import Any, List

from domain.combat import (
    DEFAULT_ARMOR,
    DEFAULT_GUARD_STANCE,
    DEFAULT_PRIMARY_WEAPON,
    DEFAULT_SECONDARY_WEAPON,
)
from spec.types import Plan, PlanContext, TaskRequest

from .combat_utils import optional_name, suggest_defensive_setup, validate_equipment
from .helpers import (
    create_plan,
    create_step,
    describe_target,
    failed_plan,
    format_requirement_list,
    normalize_item_name,
    resolve_quantity,
)


DEFAULT_ALARM = "bell"
DEFAULT_REPORT_CADENCE = "regular"

BASE_DURATION_MS = 10000
SHIFT_MINUTE_MS = 600
DEFAULT_SHIFT_MS = 4000


def plan_guard_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    if not request.target:
        return failed_plan(
            request,
            "Guard assignment needs a post to hold.",
            error="Task target is required for guard planning",
            suggestion="Provide a target position or named location to guard.",
        )

    target_description = describe_target(request.target)
    patrol_raw = request.option("patrol")
    patrol_route = [describe_target(p) for p in patrol_raw] if isinstance(patrol_raw, (list, tuple)) else []
    shift_minutes = resolve_quantity(request.option("duration", "shift"), None)
    backup = optional_name(request.option("support"))
    alarm = normalize_item_name(request.option("alarm") or DEFAULT_ALARM)
    stance = normalize_item_name(request.option("stance") or DEFAULT_GUARD_STANCE)

    equipment = [
        normalize_item_name(request.option("primaryWeapon") or DEFAULT_PRIMARY_WEAPON),
        normalize_item_name(request.option("secondaryWeapon") or DEFAULT_SECONDARY_WEAPON),
        DEFAULT_ARMOR,
    ]
    validation = validate_equipment(equipment, ctx)
    missing = validation["missing"]

    steps = []

    if missing:
        equip = f"Acquire missing equipment ({format_requirement_list(missing)}) before heading out."
    else:
        equip = f"Equip {', '.join(equipment)} before heading out."
    steps.append(
        create_step(
            title="Equip gear",
            type="preparation",
            description=equip,
            metadata={"equipment": equipment, "missing": missing, "validation": validation},
        )
    )

    potions_raw = request.option("potions")
    if potions_raw:
        seq = potions_raw if isinstance(potions_raw, (list, tuple)) else [potions_raw]
        potions = [normalize_item_name(p) for p in seq]
        steps.append(
            create_step(
                title="Brew buffs",
                type="preparation",
                description=f"Carry helpful potions ({', '.join(potions)}) for prolonged engagements.",
                metadata={"potions": potions},
            )
        )

    steps.append(
        create_step(
            title="Move to post",
            type="movement",
            description=f"Travel to guard position at {target_description}.",
            metadata={"stance": stance},
        )
    )

    fortify = request.option("fortify")
    if fortify:
        time_available = min(shift_minutes * 0.3, 20) if shift_minutes else 15
        setup = suggest_defensive_setup(request.option("threatLevel") or "medium", time_available)
        kinds = ", ".join(rec["type"] for rec in setup["recommendations"])
        steps.append(
            create_step(
                title="Fortify area",
                type="construction",
                description=f"Fortify area: {kinds}. Estimated setup: {setup['estimatedTime']} minutes.",
                metadata={
                    "fortify": fortify,
                    "defensiveSetup": setup,
                    "recommendations": setup["recommendations"],
                },
            )
        )

    if patrol_route:
        steps.append(
            create_step(
                title="Patrol",
                type="action",
                description=f"Follow patrol route: {' -> '.join(patrol_route)}, watching for hostile mobs.",
                metadata={"route": patrol_route},
            )
        )
    else:
        steps.append(
            create_step(
                title="Hold position",
                type="action",
                description=f"Monitor the area around {target_description} and engage threats as necessary.",
            )
        )

    if shift_minutes:
        steps.append(
            create_step(
                title="Maintain watch",
                type="timed",
                description=(
                    f"Maintain {stance} stance for {shift_minutes} minutes, "
                    "rotating patrol cycles as needed."
                ),
                metadata={"duration": shift_minutes},
            )
        )

    if backup:
        steps.append(
            create_step(
                title="Coordinate backup",
                type="communication",
                description=f"Stay in contact with {backup} for reinforcements or relief.",
                metadata={"backup": backup},
            )
        )

    steps.append(
        create_step(
            title="Set alarm",
            type="preparation",
            description=f"Ensure alarm mechanism ({alarm}) is functional for quick alerts.",
            metadata={"alarm": alarm},
        )
    )
    steps.append(
        create_step(
            title="Report",
            type="report",
            description="Communicate status updates or threats detected while on guard duty.",
            metadata={"cadence": request.option("reportCadence") or DEFAULT_REPORT_CADENCE},
        )
    )

    duration = BASE_DURATION_MS + (shift_minutes * SHIFT_MINUTE_MS if shift_minutes else DEFAULT_SHIFT_MS)

    risks: List[str] = []
    if missing:
        risks.append("Guard may be under-equipped for threats.")
    if request.option("highThreat"):
        risks.append("High threat level expected; keep escape route ready.")

    notes: List[str] = []
    if request.option("rotation"):
        notes.append(f"Guard rotation: {request.option('rotation')}.")
    if request.option("safeZone"):
        notes.append(f"Fallback point: {describe_target(request.option('safeZone'))}.")

    return create_plan(
        task=request,
        summary=f"Guard {target_description} with regular status updates.",
        steps=steps,
        estimated_duration=duration,
        resources=[*equipment, backup, alarm],
        risks=risks,
        notes=notes,
    )
