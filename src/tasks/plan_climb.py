# src/tasks/plan_climb.py
"""
Vertical traversal planner: ladders, scaffolding, water landings, bubble
columns and natural vines.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional

from domain.climbing import (
    CLIMB_SPEEDS,
    EXHAUSTION_PER_BLOCK,
    HIGH_FALL_RISK_HEIGHT,
    INVALID_LADDER_WALLS,
    LADDER_STICKS,
    LADDER_YIELD,
    WATER_LANDING_S,
    get_climbable_info,
)
from spec.types import Inventory, Plan, PlanContext, TaskRequest

from .helpers import blocked_plan, create_plan, create_step, failed_plan, planning_mode, seconds_to_ms, target_position


def calculate_climb_duration(climbable: Any, distance: float, direction: str = "up") -> Dict[str, Any]:
    info = get_climbable_info(climbable)
    if info is None:
        return {"error": "Invalid climbable type"}

    speed = CLIMB_SPEEDS["climbing_down" if direction == "down" else "climbing_up"]
    if info["type"] == "scaffolding":
        speed = CLIMB_SPEEDS["scaffolding_down_sneak" if direction == "down" else "scaffolding_up"]

    return {
        "distance": distance,
        "direction": direction,
        "speed": speed,
        "duration": round(distance / speed, 2),
        "exhaustion": round(distance * EXHAUSTION_PER_BLOCK, 3),
        "climbableType": info["name"],
    }


def validate_ladder_placement(world_data: Any = None) -> Dict[str, Any]:
    """Ladders need a solid wall behind them and a free cell."""
    world = world_data if isinstance(world_data, Mapping) else {}
    issues: List[str] = []

    wall = world.get("behindBlock")
    if not wall or wall == "air":
        return {"valid": False, "issues": ["Ladders require a solid block behind them"]}
    if any(bad in str(wall) for bad in INVALID_LADDER_WALLS):
        issues.append(f"Cannot place ladder on {wall}")

    current = world.get("currentBlock") or "air"
    if current not in ("air", "water"):
        issues.append(f"Position occupied by {current}")

    return {"valid": not issues, "issues": issues}


def _stacked_option(method: str, inventory: Inventory, distance: float, direction: str) -> Optional[Dict[str, Any]]:
    available = inventory.count(method)
    if available <= 0:
        return None
    needed = int(distance)
    if available >= needed:
        option = {
            "method": method,
            "available": True,
            "duration": calculate_climb_duration(method, distance, direction)["duration"],
            "materialsNeeded": {method: needed},
            "materialsAvailable": {method: available},
            "difficulty": "easy",
            "safety": "high",
        }
        if method == "scaffolding":
            option["advantages"] = ["Faster than ladders", "Easy to remove", "No wall required"]
        return option
    if method == "ladder":
        return {
            "method": method,
            "available": False,
            "materialsNeeded": {method: needed},
            "materialsAvailable": {method: available},
            "shortfall": needed - available,
        }
    return None


def assess_vertical_route(start: Any, end: Any, inventory: Any = None, world_data: Any = None) -> Dict[str, Any]:
    """Available ways to cover the vertical distance, fastest first."""
    start_pos = target_position(start) or {"x": 0, "y": 0, "z": 0}
    end_pos = target_position(end) or start_pos
    inv = inventory if isinstance(inventory, Inventory) else Inventory.from_raw(inventory)
    world = world_data if isinstance(world_data, Mapping) else {}

    distance = abs(end_pos["y"] - start_pos["y"])
    direction = "up" if end_pos["y"] > start_pos["y"] else "down"
    options: List[Dict[str, Any]] = []

    for method in ("ladder", "scaffolding"):
        option = _stacked_option(method, inv, distance, direction)
        if option:
            options.append(option)

    has_water = inv.has("water_bucket")
    has_kelp = inv.has("kelp")
    if direction == "down" and has_water:
        options.append(
            {
                "method": "water_bucket_landing",
                "available": True,
                "duration": WATER_LANDING_S,
                "materialsNeeded": {"water_bucket": 1},
                "difficulty": "medium",
                "safety": "high",
                "note": "Place water at bottom, fall into it",
            }
        )
    if direction == "up" and has_water and has_kelp and inv.has("soul_sand"):
        options.append(
            {
                "method": "soul_sand_bubble_column",
                "available": True,
                "duration": round(distance / CLIMB_SPEEDS["water_column_up"], 2),
                "materialsNeeded": {"soul_sand": 1, "water_bucket": 1, "kelp": int(distance)},
                "difficulty": "medium",
                "safety": "very_high",
                "advantages": ["Fastest upward travel", "No exhaustion", "Hands-free"],
            }
        )
    if direction == "down" and has_water and has_kelp and inv.has("magma_block"):
        options.append(
            {
                "method": "magma_bubble_column",
                "available": True,
                "duration": round(distance / CLIMB_SPEEDS["water_column_down"], 2),
                "materialsNeeded": {"magma_block": 1, "water_bucket": 1, "kelp": int(distance)},
                "difficulty": "medium",
                "safety": "medium",
                "warnings": ["Causes damage without protection"],
                "note": "Use boat or sneak to avoid damage",
            }
        )
    if world.get("biome") == "jungle" and world.get("hasNaturalVines"):
        options.append(
            {
                "method": "natural_vines",
                "available": True,
                "duration": round(distance / CLIMB_SPEEDS["climbing_up"], 2),
                "materialsNeeded": {},
                "difficulty": "easy",
                "safety": "medium",
                "note": "Use existing vines in jungle",
            }
        )

    options.sort(key=lambda o: o.get("duration") or 999)
    best = next((o for o in options if o["available"]), None)
    assessment = {
        "distance": distance,
        "direction": direction,
        "options": options,
        "recommended": best["method"] if best else None,
    }
    if best is None:
        assessment["suggestion"] = (
            f"Gather materials: ladders ({LADDER_STICKS} sticks = {LADDER_YIELD} ladders) or scaffolding"
        )
    return assessment


def _method_steps(option: Mapping[str, Any], distance: int, direction: str, remove_after: bool) -> List[Any]:
    method = option["method"]
    duration = option["duration"]
    if method == "ladder":
        return [
            create_step(
                "place_ladders",
                "placement",
                f"Place {distance} ladders on wall",
                {"item": "ladder", "count": distance, "placement": "vertical_column", "requiresWall": True},
            ),
            create_step(
                "climb_ladders",
                "movement",
                f"Climb {direction} {distance} blocks",
                {"method": "ladder", "distance": distance, "direction": direction, "duration": duration},
            ),
        ]
    if method == "scaffolding":
        steps = [
            create_step(
                "place_scaffolding",
                "placement",
                f"Place {distance} scaffolding blocks",
                {"item": "scaffolding", "count": distance, "placement": "vertical_tower", "requiresWall": False},
            ),
            create_step(
                "climb_scaffolding",
                "movement",
                f"Climb {direction} {distance} blocks",
                {
                    "method": "scaffolding",
                    "distance": distance,
                    "direction": direction,
                    "duration": duration,
                    "note": "Hold sneak for fast descent" if direction == "down" else None,
                },
            ),
        ]
        if remove_after:
            steps.append(
                create_step(
                    "remove_scaffolding",
                    "cleanup",
                    "Remove scaffolding by breaking bottom block",
                    {"item": "scaffolding", "recoverCount": distance},
                )
            )
        return steps
    if method == "water_bucket_landing":
        return [
            create_step("prepare_water", "preparation", "Hold water bucket", {"item": "water_bucket"}),
            create_step(
                "descend_with_water",
                "movement",
                f"Fall {distance} blocks and place water before landing",
                {"method": "water_mlg", "distance": distance, "timing": "critical", "duration": duration},
            ),
        ]
    if method in ("soul_sand_bubble_column", "magma_bubble_column"):
        base = "soul sand" if method == "soul_sand_bubble_column" else "magma block"
        return [
            create_step(
                "build_water_column",
                "construction",
                f"Create water column with {base} at bottom",
                {"materials": option["materialsNeeded"], "height": distance},
            ),
            create_step(
                "use_bubble_column",
                "movement",
                f"Ride bubble column {direction} {distance} blocks",
                {"method": method, "distance": distance, "duration": duration},
            ),
        ]
    return [
        create_step("locate_vines", "analysis", "Find suitable vines", {"biome": "jungle"}),
        create_step(
            "climb_vines",
            "movement",
            f"Climb {direction} using natural vines",
            {"method": "vines", "distance": distance, "duration": duration},
        ),
    ]


def plan_climb_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    if planning_mode(request) == "build_ladder":
        return plan_ladder_construction(request, context)
    ctx = PlanContext.coerce(context)

    target = target_position(request.target or request.option("position"))
    if target is None:
        return failed_plan(request, "Climb", error="No target position specified")

    player = ctx.position or {"x": 0, "y": 0, "z": 0}
    assessment = assess_vertical_route(player, target, ctx.inventory, ctx.get("worldData"))
    distance = int(math.ceil(assessment["distance"]))
    direction = assessment["direction"]
    summary = f"Climb {direction} {distance} blocks"

    if assessment["recommended"] is None:
        needed = assessment["options"][0]["materialsNeeded"] if assessment["options"] else {"ladder": distance}
        return blocked_plan(
            request,
            summary,
            error="No climbing method available",
            suggestion=assessment["suggestion"],
            materialsNeeded=needed,
        )

    chosen = next(o for o in assessment["options"] if o["method"] == assessment["recommended"])
    steps = _method_steps(chosen, distance, direction, bool(request.option("removeAfter")))

    risks = []
    notes = []
    if distance > HIGH_FALL_RISK_HEIGHT and direction == "up":
        risks.append("High fall risk on a tall climb.")
        notes.extend(
            [
                "Place water bucket at bottom as safety net",
                "Hold forward continuously while climbing",
            ]
        )

    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=seconds_to_ms(chosen["duration"]),
        resources=list(chosen.get("materialsNeeded", {})),
        risks=risks,
        notes=notes,
        metadata={"safety": "high_fall_risk" if distance > HIGH_FALL_RISK_HEIGHT else "normal"},
    )
    plan.outcome = {
        "method": chosen["method"],
        "distance": distance,
        "direction": direction,
        "duration": chosen["duration"],
        "startY": player.get("y", 0),
        "endY": target["y"],
    }
    return plan


def plan_ladder_construction(task: Any, context: Any = None) -> Plan:
    """Ladder column of `height` blocks against an existing wall."""
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    height = request.option("height") or 10
    height = int(height) if isinstance(height, (int, float)) and not isinstance(height, bool) and height > 0 else 10
    position = target_position(request.option("position") or request.target) or ctx.position
    available = ctx.inventory.count("ladder")
    summary = f"Construct {height}-block ladder"

    if available < height:
        recipes = math.ceil((height - available) / LADDER_YIELD)
        return blocked_plan(
            request,
            summary,
            error=f"Need {height} ladders, have {available}",
            suggestion=f"Craft {recipes} more ladder recipes ({LADDER_STICKS} sticks each)",
        )

    wall = validate_ladder_placement(ctx.get("worldData"))
    if not wall["valid"]:
        return blocked_plan(request, summary, error="Cannot place ladders here", issues=wall["issues"])

    steps = [
        create_step("select_ladders", "inventory", f"Select {height} ladders from inventory",
                    {"item": "ladder", "count": height}),
        create_step(
            "place_ladder_column",
            "placement",
            f"Place {height} ladders vertically on wall",
            {"startPosition": position, "height": height, "direction": "upward", "requiresWall": True},
        ),
    ]
    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=height * 500,
        resources=["ladder"],
        metadata={"complexity": "easy"},
    )
    plan.outcome = {
        "structure": "ladder_column",
        "height": height,
        "laddersUsed": height,
        "climbDuration": calculate_climb_duration("ladder", height, "up")["duration"],
    }
    return plan
