# src/tasks/plan_scaffolding.py
"""
Scaffolding construction planner.

A pattern is either given (`pattern`) or chosen from the build purpose
(`purpose`, default quick_ascent). Block counts come from the pattern
formulas in domain.climbing.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping

from domain.climbing import (
    BAMBOO_PER_CRAFT,
    HIGH_ALTITUDE,
    SCAFFOLDING_DESIGNS,
    SCAFFOLDING_PATTERNS,
    SCAFFOLDING_YIELD,
    STRING_PER_CRAFT,
    SUPPORT_RANGE,
    calculate_scaffolding_needs,
)
from domain.lookup import table_key
from spec.types import Plan, PlanContext, TaskRequest

from .helpers import blocked_plan, create_plan, create_step, failed_plan, seconds_to_ms


def validate_scaffolding_placement(world_data: Any = None) -> Dict[str, Any]:
    """Scaffolding needs a solid block or other scaffolding within 6 blocks."""
    world = world_data if isinstance(world_data, Mapping) else {}
    warnings: List[str] = []
    suggestions: List[str] = []
    valid = True

    nearby = [s for s in world.get("nearbyScaffolding") or [] if isinstance(s, Mapping)]
    solids = world.get("nearbySolidBlocks") or []
    if not nearby and not solids:
        valid = False
        warnings.append(f"No support within {SUPPORT_RANGE} blocks: scaffolding will fall")
        suggestions.append("Place scaffolding adjacent to solid block or existing scaffolding")

    distances = [float(s["distance"]) for s in nearby if isinstance(s.get("distance"), (int, float))]
    if distances:
        closest = min(distances)
        shown = int(closest) if closest.is_integer() else closest
        if closest > SUPPORT_RANGE:
            valid = False
            warnings.append(f"Too far from support ({shown} blocks, max {SUPPORT_RANGE})")
        elif closest >= SUPPORT_RANGE - 1:
            warnings.append(f"Near edge of support range ({shown}/{SUPPORT_RANGE} blocks)")
            suggestions.append("Add support column soon")

    height = world.get("heightFromGround") or 0
    if isinstance(height, (int, float)) and height > HIGH_ALTITUDE:
        warnings.append("Building at high altitude: be careful")
        suggestions.append("Consider using safety cage or water bucket for emergency")

    return {"valid": valid, "warnings": warnings, "suggestions": suggestions}


def design_scaffolding_structure(purpose: Any, requirements: Any = None) -> Dict[str, Any]:
    key = table_key(purpose)
    design = SCAFFOLDING_DESIGNS.get(key)
    if design is None:
        return {"error": "Unknown purpose", "availablePurposes": list(SCAFFOLDING_DESIGNS)}

    dimensions = dict(design["dimensions"])
    if isinstance(requirements, Mapping):
        dimensions.update({k: v for k, v in requirements.items() if k in ("width", "length", "height")})
        area = requirements.get("area")
        if design["pattern"] == "working_platform" and isinstance(area, (int, float)) and area > 0:
            side = max(1, int(math.ceil(math.sqrt(area))))
            dimensions.update(width=side, length=side)

    needs = calculate_scaffolding_needs(design["pattern"], dimensions)
    pattern = SCAFFOLDING_PATTERNS[design["pattern"]]
    return {
        "purpose": key,
        "pattern": design["pattern"],
        "description": design["description"],
        "scaffoldingNeeded": needs["scaffoldingNeeded"],
        "buildTime": needs["buildTime"],
        "difficulty": pattern["difficulty"],
        "steps": list(pattern["steps"]),
        "dimensions": dimensions,
        "additionalMaterials": {"water_bucket": needs["waterBuckets"]} if needs.get("waterBuckets") else {},
    }


def craft_suggestion(shortfall: int) -> Dict[str, int]:
    """6 bamboo + 1 string craft 6 scaffolding."""
    crafts = math.ceil(shortfall / SCAFFOLDING_YIELD)
    return {"crafts": crafts, "bamboo": crafts * BAMBOO_PER_CRAFT, "string": crafts * STRING_PER_CRAFT}


def plan_scaffolding_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    pattern_name = request.option("pattern")
    if pattern_name:
        needs = calculate_scaffolding_needs(pattern_name, request.option("dimensions") or {})
        if "error" in needs:
            return failed_plan(
                request,
                "Build scaffolding",
                error=f"Unknown scaffolding pattern '{pattern_name}'",
                suggestion=f"Use one of: {', '.join(needs['availablePatterns'])}",
                availableOptions=needs["availablePatterns"],
            )
        profile = SCAFFOLDING_PATTERNS[needs["pattern"]]
        design = {
            "purpose": "custom",
            "pattern": needs["pattern"],
            "scaffoldingNeeded": needs["scaffoldingNeeded"],
            "buildTime": needs["buildTime"],
            "difficulty": profile["difficulty"],
            "steps": list(profile["steps"]),
            "additionalMaterials": {"water_bucket": needs["waterBuckets"]} if needs.get("waterBuckets") else {},
        }
    else:
        design = design_scaffolding_structure(request.option("purpose") or "quick_ascent", request.option("requirements"))
        if "error" in design:
            return failed_plan(
                request,
                "Build scaffolding",
                error=design["error"],
                suggestion=f"Use one of: {', '.join(design['availablePurposes'])}",
                availableOptions=design["availablePurposes"],
            )

    summary = f"Build {design['pattern']} scaffolding"
    needed = design["scaffoldingNeeded"]
    available = ctx.inventory.count("scaffolding")
    if available < needed:
        craft = craft_suggestion(needed - available)
        return blocked_plan(
            request,
            summary,
            error=f"Insufficient scaffolding (need {needed}, have {available})",
            suggestion=f"Craft more scaffolding: need {craft['bamboo']} bamboo + {craft['string']} string",
            craft=craft,
        )

    steps = []
    placement = validate_scaffolding_placement(ctx.get("worldData")) if ctx.get("worldData") else None
    if placement and placement["warnings"]:
        steps.append(
            create_step(
                "check_support",
                "analysis",
                "; ".join(placement["warnings"]),
                {"valid": placement["valid"], "suggestions": placement["suggestions"]},
            )
        )

    total = len(design["steps"])
    for index, text in enumerate(design["steps"], start=1):
        steps.append(
            create_step(f"build_step_{index}", "construction", text, {"stepNumber": index, "totalSteps": total})
        )
    steps.append(
        create_step(
            "safety_check",
            "safety",
            "Remember: hold sneak to descend quickly without fall damage",
            {
                "safety": "Always have water bucket as backup",
                "removal": "Break bottom scaffolding to remove entire structure",
            },
        )
    )

    risks = []
    if placement and not placement["valid"]:
        risks.append("Placement lacks support; scaffolding may collapse.")

    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=seconds_to_ms(design["buildTime"]),
        resources=["scaffolding", *design["additionalMaterials"]],
        risks=risks,
        metadata={"complexity": design["difficulty"], "scaffoldingNeeded": needed},
    )
    plan.outcome = {
        "structure": design["pattern"],
        "scaffoldingUsed": needed,
        "buildTime": design["buildTime"],
        "purpose": design["purpose"],
    }
    return plan
