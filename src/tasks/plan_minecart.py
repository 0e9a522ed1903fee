# src/tasks/plan_minecart.py
"""
Minecart rides and rail line construction.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

from domain.lookup import table_key
from domain.minecarts import (
    AVERAGE_SPEED_FACTOR,
    BUILD_SECONDS_PER_BLOCK,
    FLAT_POWER_SPACING,
    GOLD_PER_POWERED_CRAFT,
    IRON_PER_RAIL_CRAFT,
    LONG_ROUTE,
    MAX_SPEED,
    MINECART_IRON,
    OPTIMAL_POWER_SPACING,
    POWERED_RAILS_PER_CRAFT,
    RAILS_PER_CRAFT,
    STATION_DESIGNS,
    TORCH_POWER_RANGE,
    get_minecart_info,
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

BOARDING_MS = 3000
ORIGIN = {"x": 0.0, "y": 0.0, "z": 0.0}


def calculate_rail_requirements(distance: Any, terrain: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Rails and crafting materials for a line of `distance` blocks.

    Uphill blocks each need a powered rail; flat track gets one every 38
    blocks, or every 8 when `optimal` is set.
    """
    terrain = terrain or {}
    distance = max(0, int(distance or 0))
    uphill = max(0, int(terrain.get("uphillBlocks") or 0))
    downhill = max(0, int(terrain.get("downhillBlocks") or 0))
    flat = max(0, distance - uphill - downhill)

    spacing = OPTIMAL_POWER_SPACING if terrain.get("optimal") else FLAT_POWER_SPACING
    powered = uphill + math.ceil(flat / spacing) + math.ceil(downhill / FLAT_POWER_SPACING)
    powered = min(powered, distance)
    regular = distance - powered

    iron = math.ceil(regular / RAILS_PER_CRAFT) * IRON_PER_RAIL_CRAFT
    gold = math.ceil(powered / POWERED_RAILS_PER_CRAFT) * GOLD_PER_POWERED_CRAFT
    return {
        "distance": distance,
        "elevation": terrain.get("elevation") or 0,
        "regularRails": regular,
        "poweredRails": powered,
        "totalRails": distance,
        "materials": {
            "iron_ingot": iron,
            "gold_ingot": gold,
            "stick": math.ceil(distance / RAILS_PER_CRAFT),
            "redstone_dust": math.ceil(powered / POWERED_RAILS_PER_CRAFT),
        },
        "estimatedCost": {"iron": iron, "gold": gold, "totalValue": f"{iron} iron + {gold} gold"},
    }


def calculate_travel_time(distance: Any) -> Dict[str, Any]:
    """Travel at 80% of the powered-rail top speed."""
    distance = max(0.0, float(distance or 0))
    average = MAX_SPEED * AVERAGE_SPEED_FACTOR
    seconds = distance / average
    return {
        "distance": distance,
        "averageSpeed": average,
        "maxSpeed": MAX_SPEED,
        "travelTime": seconds,
        "travelTimeFormatted": f"{int(seconds // 60)}m {int(seconds % 60)}s",
    }


def design_minecart_station(station_type: Any) -> Dict[str, Any]:
    key = table_key(station_type)
    design = STATION_DESIGNS.get(key)
    if design is None:
        return {"error": "Unknown station type", "availableTypes": list(STATION_DESIGNS)}
    out = {
        "type": key,
        "description": design["description"],
        "components": [name for name in design["materials"] if name != "building_blocks"],
        "dimensions": dict(design["dimensions"]),
        "buildSteps": list(design["buildSteps"]),
        "materials": dict(design["materials"]),
        "complexity": design["complexity"],
    }
    if "speedBoost" in design:
        out["speedBoost"] = design["speedBoost"]
    return out


def plan_rail_route(start: Any, end: Any, optimal: bool = True) -> Dict[str, Any]:
    a = target_position(start) or ORIGIN
    b = target_position(end) or a
    dx, dz = b["x"] - a["x"], b["z"] - a["z"]
    elevation = b["y"] - a["y"]
    distance = int(math.ceil(math.sqrt(dx * dx + dz * dz)))

    terrain = {
        "elevation": elevation,
        "uphillBlocks": abs(elevation) if elevation > 0 else 0,
        "downhillBlocks": abs(elevation) if elevation < 0 else 0,
        "optimal": optimal,
    }
    recommendations = []
    if elevation > 0:
        recommendations.append("Route goes uphill - requires more powered rails")
    elif elevation < 0:
        recommendations.append("Route goes downhill - use brakes at destination")
    if distance > LONG_ROUTE:
        recommendations.append("Long route - consider mid-point station")
    recommendations.append(
        f"Using optimal powered rail spacing (every {OPTIMAL_POWER_SPACING} blocks)"
        if optimal
        else f"Using minimal powered rails (every {FLAT_POWER_SPACING} blocks)"
    )

    return {
        "start": a,
        "end": b,
        "distance": distance,
        "elevation": elevation,
        "railRequirements": calculate_rail_requirements(distance, terrain),
        "travelTime": calculate_travel_time(distance),
        "stations": {"start": {"type": "loading", "position": a}, "end": {"type": "unloading", "position": b}},
        "recommendations": recommendations,
    }


def plan_minecart_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    if planning_mode(request) == "build_rail":
        return plan_rail_construction(request, context)
    ctx = PlanContext.coerce(context)

    destination = target_position(request.option("destination") or request.target)
    if destination is None:
        return failed_plan(request, "Ride minecart", error="No destination specified for minecart ride")

    cart_name = request.option("minecart") or "minecart"
    cart = get_minecart_info(cart_name)
    if cart is None:
        return failed_plan(
            request,
            "Ride minecart",
            error=f"Invalid minecart type: {cart_name}",
            suggestion="Try: minecart, chest_minecart, hopper_minecart",
        )

    kind = cart["name"]
    summary = f"Ride minecart to {describe_target(destination)}"
    if not ctx.inventory.has(kind):
        return blocked_plan(
            request,
            summary,
            error=f"No {kind} in inventory",
            suggestion=f"Craft {kind} ({MINECART_IRON} iron ingots)",
        )

    route = plan_rail_route(ctx.position or ORIGIN, destination, optimal=True)
    travel = route["travelTime"]
    steps = [
        create_step("place_minecart", "placement", f"Place {kind} on rails", {"item": kind, "requiresRails": True}),
        create_step(
            "enter_minecart",
            "interaction",
            "Right-click minecart to enter",
            {
                "action": "right_click",
                "controls": {"forward": "W key to accelerate", "backward": "S key to brake", "exit": "Shift to exit"},
            },
        ),
        create_step(
            "travel",
            "movement",
            f"Travel {route['distance']} blocks to destination",
            {"distance": route["distance"], "travelTime": travel["travelTime"], "averageSpeed": travel["averageSpeed"]},
        ),
        create_step("exit_minecart", "interaction", "Exit minecart at destination",
                    {"action": "press_shift", "collectMinecart": True}),
    ]

    risks = []
    if cart["type"] == "explosive":
        risks.append("TNT minecart detonates on activator rails, fire or fall damage.")

    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=BOARDING_MS + seconds_to_ms(travel["travelTime"]),
        resources=[kind],
        risks=risks,
        notes=route["recommendations"],
    )
    plan.outcome = {
        "minecartType": kind,
        "destination": destination,
        "route": route,
        "travelTime": travel["travelTimeFormatted"],
    }
    return plan


def plan_rail_construction(task: Any, context: Any = None) -> Plan:
    """Rail line from `start` (default: current position) to `end` / `destination`."""
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    start = target_position(request.option("start")) or ctx.position
    end = target_position(request.option("end", "destination") or request.target)
    if start is None or end is None:
        return failed_plan(request, "Build rail line", error="Need both start and end positions for rail construction")

    optimal = request.option("optimal") is not False
    route = plan_rail_route(start, end, optimal=optimal)
    requirements = route["railRequirements"]
    materials = requirements["materials"]
    summary = f"Build {route['distance']}-block rail line"

    inventory = ctx.inventory
    missing = [
        f"{item}: need {count}, have {inventory.count(item)}"
        for item, count in materials.items()
        if count > 0 and inventory.count(item) < count
    ]
    if missing:
        return blocked_plan(
            request,
            summary,
            error="Insufficient materials",
            suggestion=f"Gather {', '.join(missing)}",
            missingMaterials=missing,
            materialSummary=materials,
        )

    steps = [
        create_step("build_loading_station", "construction", "Build loading station at start",
                    {"station": design_minecart_station("loading"), "position": route["start"]}),
        create_step(
            "lay_rails",
            "construction",
            f"Lay {route['distance']} blocks of rails",
            {
                "regularRails": requirements["regularRails"],
                "poweredRails": requirements["poweredRails"],
                "spacing": f"powered rail every {OPTIMAL_POWER_SPACING if optimal else FLAT_POWER_SPACING} blocks",
            },
        ),
    ]
    if route["elevation"] > 0:
        steps.append(
            create_step(
                "place_uphill_powered_rails",
                "construction",
                f"Place powered rails for {route['elevation']:g}-block climb",
                {"uphillBlocks": route["elevation"], "note": "Every uphill block needs a powered rail"},
            )
        )
    steps.extend(
        [
            create_step(
                "add_redstone_power",
                "construction",
                "Add redstone power sources",
                {
                    "redstoneTorches": math.ceil(requirements["poweredRails"] / TORCH_POWER_RANGE),
                    "placement": "underneath or beside powered rails",
                },
            ),
            create_step("build_unloading_station", "construction", "Build unloading station at destination",
                        {"station": design_minecart_station("unloading"), "position": route["end"]}),
            create_step("test_route", "validation", "Test minecart route", {"testRide": True, "checkSpeed": True}),
        ]
    )

    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=seconds_to_ms(route["distance"] * BUILD_SECONDS_PER_BLOCK),
        resources=[item for item, count in materials.items() if count > 0],
        notes=route["recommendations"],
        metadata={"complexity": "medium" if route["elevation"] else "easy"},
    )
    plan.outcome = {
        "routeLength": route["distance"],
        "elevation": route["elevation"],
        "travelTime": route["travelTime"]["travelTimeFormatted"],
        "materialsUsed": materials,
    }
    return plan
