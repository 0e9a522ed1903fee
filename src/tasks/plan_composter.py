# src/tasks/plan_composter.py
"""
Bone meal production with a composter.

Inventory items are spent highest fill chance first until the expected
yield reaches the target; when even the whole inventory cannot reach it
the plan is blocked.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping

from domain.composting import (
    COMPOSTER_RECIPE,
    HOPPER_ITEMS_PER_SECOND,
    MIXED_ITEMS_PER_BONEMEAL,
    calculate_composting_efficiency,
    get_compostable_info,
    items_per_bonemeal,
)
from spec.types import Inventory, Plan, PlanContext, TaskRequest

from .helpers import blocked_plan, create_plan, create_step, planning_mode, resolve_quantity, seconds_to_ms

COMPOST_SECONDS_PER_ITEM = 0.25
BASE_COMPOST_MS = 3000
AUTO_COMPOSTER_MS = 180000
DEFAULT_THROUGHPUT = 10


def find_compostable_items(inventory: Any = None) -> List[Dict[str, Any]]:
    """Held compostables, highest chance first (stable for equal chances)."""
    found = []
    for item in Inventory.from_raw(inventory):
        info = get_compostable_info(item.name)
        if info is None or item.count <= 0:
            continue
        found.append(
            {
                "name": info["itemName"],
                "count": item.count,
                "chance": info["chance"],
                "efficiency": calculate_composting_efficiency(item.name, item.count),
            }
        )
    found.sort(key=lambda entry: entry["chance"], reverse=True)
    return found


def plan_bonemeal_production(target: int, inventory: Any = None) -> Dict[str, Any]:
    compostables = find_compostable_items(inventory)
    if not compostables:
        return {
            "achievable": False,
            "error": "No compostable items in inventory",
            "suggestion": "Gather crops, seeds, or plant matter",
            "items": [],
            "expectedBonemeal": 0,
        }

    production: Dict[str, Any] = {"targetBonemeal": target, "items": [], "totalItemsUsed": 0, "expectedBonemeal": 0}
    for entry in compostables:
        if production["expectedBonemeal"] >= target:
            break
        remaining = target - production["expectedBonemeal"]
        use = min(math.ceil(remaining * items_per_bonemeal(entry["chance"])), entry["count"])
        expected = calculate_composting_efficiency(entry["name"], use)["expectedBonemeal"]
        production["items"].append(
            {"name": entry["name"], "count": use, "chance": entry["chance"], "expectedBonemeal": expected}
        )
        production["totalItemsUsed"] += use
        production["expectedBonemeal"] += expected

    production["achievable"] = production["expectedBonemeal"] >= target
    return production


def design_auto_composter(throughput: float = DEFAULT_THROUGHPUT) -> Dict[str, Any]:
    """
    Hopper-fed composter stack sized for `throughput` bone meal per hour.

    One composter fed at 2.5 items/s with mixed items yields about 818
    bone meal per hour; larger targets add composters.
    """
    per_hour = HOPPER_ITEMS_PER_SECOND / MIXED_ITEMS_PER_BONEMEAL * 3600
    composters = max(1, math.ceil(throughput / per_hour))
    design: Dict[str, Any] = {
        "throughput": throughput,
        "components": [
            {"item": "composter", "count": composters},
            {"item": "hopper", "count": composters * 2},
            {"item": "chest", "count": 2},
            {"item": "building_blocks", "count": 20},
        ],
        "dimensions": {"width": 3, "length": 5, "height": 4},
        "buildSteps": [
            "Place output chest on ground",
            "Place hopper on top of chest (shift-click)",
            "Place composter on top of hopper",
            "Place input hopper on top of composter",
            "Place input chest on top of input hopper",
            "Fill input chest with compostable items",
            "Bonemeal will automatically collect in output chest",
        ],
        "performance": {
            "itemsProcessedPerHour": HOPPER_ITEMS_PER_SECOND * 3600,
            "bonemealPerHour": int(per_hour) * composters,
            "achievesThroughput": per_hour * composters >= throughput,
        },
        "compostersNeeded": composters,
    }
    if composters > 1:
        design["multiComposter"] = True
        design["buildSteps"].append(f"Scale to {composters} composters for desired throughput")
    return design


def _explicit_items(raw: Any) -> List[Dict[str, Any]]:
    out = []
    for entry in raw if isinstance(raw, (list, tuple)) else []:
        name = entry.get("name") if isinstance(entry, Mapping) else entry
        info = get_compostable_info(name)
        if info is None:
            continue
        count = resolve_quantity(entry, 1) if isinstance(entry, Mapping) else 1
        out.append({"name": info["itemName"], "count": count, "chance": info["chance"]})
    return out


def plan_composter_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    if planning_mode(request) == "automatic":
        return plan_auto_composter(request, context)
    ctx = PlanContext.coerce(context)

    target = resolve_quantity(request.option("bonemeal", "amount", "quantity"), 1) or 1
    summary = f"Produce {target} bonemeal"
    inventory = ctx.inventory

    items = _explicit_items(request.option("items"))
    if not items:
        production = plan_bonemeal_production(target, inventory)
        if "error" in production:
            return blocked_plan(request, summary, error=production["error"],
                                suggestion="Gather crops, seeds, saplings, or plant matter")
        if not production["achievable"]:
            return blocked_plan(
                request,
                summary,
                error=f"Cannot produce {target} bonemeal with available items",
                suggestion=f"Can produce ~{production['expectedBonemeal']} bonemeal; gather more compostables",
                available=production["expectedBonemeal"],
                itemsNeeded=production["items"],
            )
        items = production["items"]

    steps = []
    notes = []
    if request.option("existingComposter"):
        pass
    elif inventory.has("composter"):
        steps.append(create_step("place_composter", "placement", "Place composter on ground",
                                 {"item": "composter", "requiresFlatSurface": True}))
    else:
        steps.append(
            create_step(
                "locate_composter",
                "preparation",
                "Use a nearby composter or craft one",
                {"item": "composter", "recipe": COMPOSTER_RECIPE},
            )
        )
        notes.append(f"No composter in inventory; craft one from {COMPOSTER_RECIPE} if none is nearby.")

    for item in items:
        steps.append(
            create_step(
                f"compost_{item['name']}",
                "interaction",
                f"Add {item['count']} {item['name']} to composter ({item['chance'] * 100:.0f}% fill chance)",
                {"item": item["name"], "count": item["count"], "chance": item["chance"],
                 "action": "right_click_composter"},
            )
        )
    steps.append(
        create_step(
            "collect_bonemeal",
            "collection",
            f"Collect {target} bonemeal when ready",
            {"output": "bone_meal", "count": target, "note": "Composter is ready when filled to top (level 7)"},
        )
    )

    total = sum(item["count"] for item in items)
    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=BASE_COMPOST_MS + seconds_to_ms(total * COMPOST_SECONDS_PER_ITEM),
        resources=[item["name"] for item in items],
        notes=notes,
    )
    plan.outcome = {
        "targetBonemeal": target,
        "itemsComposted": total,
        "itemTypes": [item["name"] for item in items],
    }
    return plan


def plan_auto_composter(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    throughput = request.option("throughput")
    if not isinstance(throughput, (int, float)) or isinstance(throughput, bool) or throughput <= 0:
        throughput = DEFAULT_THROUGHPUT
    design = design_auto_composter(throughput)
    summary = f"Build automated composter ({throughput:g} bonemeal/hour)"

    inventory = ctx.inventory
    missing = [
        f"{c['item']}: need {c['count']}, have {inventory.count(c['item'])}"
        for c in design["components"]
        if c["item"] != "building_blocks" and inventory.count(c["item"]) < c["count"]
    ]
    if missing:
        return blocked_plan(
            request,
            summary,
            error="Insufficient materials",
            suggestion=f"Gather {', '.join(missing)}",
            missingMaterials=missing,
        )

    total = len(design["buildSteps"])
    steps = [
        create_step(f"build_step_{i}", "construction", text, {"stepNumber": i, "totalSteps": total})
        for i, text in enumerate(design["buildSteps"], start=1)
    ]
    steps.append(
        create_step(
            "test_system",
            "validation",
            "Test automated composter",
            {"testItems": "Add test items to input chest", "verify": "Check bonemeal appears in output chest"},
        )
    )
    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=AUTO_COMPOSTER_MS,
        resources=[c["item"] for c in design["components"] if c["item"] != "building_blocks"],
        notes=["Bring about 20 building blocks for the frame."],
        metadata={"complexity": "medium"},
    )
    plan.outcome = {"throughput": design["performance"]["bonemealPerHour"], "design": design}
    return plan
