# src/tasks/plan_display.py
"""
Decorative displays.

The `display` action dispatches on `display` (metadata or top level):
`item_frame` (default), `armor_stand` or `showcase`.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Sequence

from domain.displays import (
    ARMOR_SLOTS,
    ARMOR_STAND_POSES,
    DISPLAY_ITEMS,
    GENERIC_MATERIALS,
    ROTATION_DEGREES,
    SHOWCASE_TYPES,
    calculate_item_frame_grid,
    get_armor_stand_pose,
)
from domain.lookup import table_key
from spec.types import Plan, PlanContext, TaskRequest

from .helpers import blocked_plan, create_plan, create_step, describe_target, failed_plan, seconds_to_ms, target_position

ITEM_FRAME_MS = 5000
ARMOR_STAND_MS = 15000
SHOWCASE_SECONDS_PER_ITEM = 10


def _placement(request: TaskRequest, ctx: PlanContext):
    return target_position(request.option("position") or request.target or ctx.get("targetPosition"))


def design_display_showcase(showcase_type: Any, items: Sequence[Any] = ()) -> Dict[str, Any]:
    key = table_key(showcase_type)
    profile = SHOWCASE_TYPES.get(key)
    if profile is None:
        return {"error": "Unknown showcase type", "availableTypes": list(SHOWCASE_TYPES)}

    count = len(items)
    design: Dict[str, Any] = {
        "type": key,
        "purpose": profile["purpose"],
        "displayType": profile["display"],
        "placement": profile["placement"],
        "items": count,
        "buildSteps": list(profile["buildSteps"]),
    }
    if key == "item_showcase":
        design["materials"] = {"item_frame": count, "torch": math.ceil(count / 4)}
    elif key == "map_wall":
        side = math.ceil(math.sqrt(count))
        grid = calculate_item_frame_grid(side, side)
        design["grid"] = grid
        design["buildSteps"].insert(0, f"Place {grid['totalFrames']} item frames in {side}x{side} grid")
        design["materials"] = dict(grid["materials"])
    elif key == "armor_display":
        design["materials"] = {"armor_stand": 1, "armor_pieces": 4, "weapon": 1}
    elif key == "statue":
        design["materials"] = {"armor_stand": 1, "building_blocks": 4, "torch": 2}
        design["poses"] = list(ARMOR_STAND_POSES)
    else:
        design["materials"] = {
            "item_frame": math.ceil(count * 0.7),
            "armor_stand": math.ceil(count * 0.3),
            "sign": count,
            "chest": 1,
            "torch": 4,
        }
    return design


def plan_item_frame_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)
    summary = "Place and fill item frame"
    frame = "glow_item_frame" if request.option("glow") else "item_frame"

    if not ctx.inventory.has(frame):
        return blocked_plan(
            request,
            summary,
            error=f"No {frame.replace('_', ' ')} in inventory",
            suggestion=f"Craft {frame.replace('_', ' ')} ({DISPLAY_ITEMS[frame]['recipe']})",
        )

    item = request.option("item")
    if item and not ctx.inventory.has(item):
        return blocked_plan(request, summary, error=f"No {item} to display")

    position = _placement(request, ctx)
    steps = [
        create_step(
            "place_frame",
            "placement",
            f"Place item frame at {describe_target(position)}" if position else "Place item frame on wall",
            {"item": frame, "position": position, "surface": "wall_floor_or_ceiling", "requiresSolidBlock": True},
        )
    ]

    rotation = request.option("rotation")
    rotation = int(rotation) % 8 if isinstance(rotation, (int, float)) and not isinstance(rotation, bool) else None
    if item:
        steps.append(create_step("add_item", "interaction", f"Right-click frame with {item}",
                                 {"item": item, "action": "right_click"}))
        if rotation:
            steps.append(
                create_step(
                    "rotate_item",
                    "interaction",
                    f"Rotate item {rotation * ROTATION_DEGREES} degrees",
                    {"rotations": rotation, "action": "right_click_empty_hand"},
                )
            )

    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=ITEM_FRAME_MS,
        resources=[frame, item] if item else [frame],
    )
    plan.outcome = {"display": frame, "item": item or "empty", "rotation": rotation or 0}
    return plan


def plan_armor_stand_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)
    summary = "Place and configure armor stand"

    if not ctx.inventory.has("armor_stand"):
        return blocked_plan(
            request,
            summary,
            error="No armor stand in inventory",
            suggestion=f"Craft armor stand ({DISPLAY_ITEMS['armor_stand']['recipe']})",
        )

    armor = request.option("armor")
    armor = dict(armor) if isinstance(armor, Mapping) else {}
    missing = [armor[piece] for piece, _ in ARMOR_SLOTS if armor.get(piece) and not ctx.inventory.has(armor[piece])]

    position = _placement(request, ctx)
    steps = [
        create_step(
            "place_armor_stand",
            "placement",
            f"Place armor stand at {describe_target(position)}" if position else "Place armor stand on floor",
            {"item": "armor_stand", "position": position, "requiresFlatSurface": True},
        )
    ]
    for piece, slot in ARMOR_SLOTS:
        if armor.get(piece):
            steps.append(create_step(f"equip_{piece}", "equipment", f"Right-click with {armor[piece]}",
                                     {"slot": slot, "item": armor[piece]}))

    main_hand = request.option("mainHand")
    if main_hand:
        steps.append(create_step("equip_weapon", "equipment", f"Right-click with {main_hand}",
                                 {"slot": "mainHand", "item": main_hand}))

    pose = table_key(request.option("pose") or "default") or "default"
    pose_data = get_armor_stand_pose(pose)
    if pose != "default" and pose_data:
        steps.append(
            create_step(
                "set_pose",
                "configuration",
                f"Set armor stand to '{pose}' pose",
                {"pose": pose, "poseData": pose_data, "note": "Requires commands or pose editor tool"},
            )
        )

    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=ARMOR_STAND_MS,
        resources=["armor_stand", *[v for v in armor.values() if v], *([main_hand] if main_hand else [])],
    )
    if missing:
        plan.warnings = [f"Missing armor: {', '.join(missing)}"]
    plan.outcome = {
        "display": "armor_stand",
        "armor": armor,
        "pose": pose if pose_data else "default",
        "equipped": len([v for v in armor.values() if v]),
    }
    return plan


def plan_display_showcase(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    showcase = request.option("showcase", "showcaseType") or "item_showcase"
    items = request.option("items") or []
    items = list(items) if isinstance(items, (list, tuple)) else [items]
    design = design_display_showcase(showcase, items)
    if "error" in design:
        return failed_plan(
            request,
            "Build display showcase",
            error=design["error"],
            suggestion=f"Use one of: {', '.join(design['availableTypes'])}",
            availableTypes=design["availableTypes"],
        )

    summary = f"Build {design['type']} display"
    inventory = ctx.inventory
    missing: List[str] = [
        f"{material}: need {count}, have {inventory.count(material)}"
        for material, count in design["materials"].items()
        if material not in GENERIC_MATERIALS and count > 0 and inventory.count(material) < count
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
        create_step(f"showcase_step_{i}", "construction", text, {"stepNumber": i, "totalSteps": total})
        for i, text in enumerate(design["buildSteps"], start=1)
    ]
    generic = [m for m in design["materials"] if m in GENERIC_MATERIALS]
    plan = create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=seconds_to_ms(len(items) * SHOWCASE_SECONDS_PER_ITEM),
        resources=[m for m, c in design["materials"].items() if c > 0 and m not in GENERIC_MATERIALS],
        notes=[f"Also bring: {', '.join(generic)}"] if generic else [],
        metadata={"complexity": "medium" if design["type"] == "map_wall" else "easy"},
    )
    plan.outcome = {"showcaseType": design["type"], "itemsDisplayed": len(items), "design": design}
    return plan


def plan_display_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    mode = table_key(request.option("display") or "item_frame")
    if mode == "armor_stand":
        return plan_armor_stand_task(request, context)
    if mode == "showcase" or mode in SHOWCASE_TYPES:
        if mode in SHOWCASE_TYPES and not request.option("showcase", "showcaseType"):
            request = replace(request, metadata={**request.metadata, "showcase": mode})
        return plan_display_showcase(request, context)
    return plan_item_frame_task(request, context)
