# src/tasks/plan_craft.py
"""
Crafting / processing planner.

Handles plain crafting tables plus furnaces, smokers, brewing stands,
smithing tables, anvils and stonecutters. Stock targets decide how many
items to make; prerequisite sub-components are ordered through a task
graph.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Mapping, Optional

import networkx as nx

from spec.types import UNSPECIFIED_ITEM, Plan, PlanContext, TaskRequest

from .graph import TaskGraph, create_task_node
from .helpers import (
    count_inventory_items,
    create_plan,
    create_step,
    describe_target,
    format_requirement_list,
    has_inventory_item,
    normalize_item_name,
    resolve_quantity,
)

log = logging.getLogger(__name__)


def _name_list(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        names = [normalize_item_name(v) for v in value]
    elif isinstance(value, Mapping):
        names = [normalize_item_name(v) for v in value.values()]
    elif value:
        names = [normalize_item_name(value)]
    else:
        names = []
    return [n for n in names if n != UNSPECIFIED_ITEM]


def determine_station_profile(station: str, request: TaskRequest) -> Dict[str, Any]:
    """Process type, verb, fuel needs and collection notes for a workstation."""
    fuel_options = _name_list(request.option("fuel", "fuels", "requiredFuel"))

    if "furnace" in station or "smoker" in station:
        return {
            "type": "smelting",
            "verb": "smoke" if "smoker" in station else "smelt",
            "command": None,
            "requires_fuel": True,
            "fuel_options": fuel_options or ["coal", "charcoal", "logs"],
            "items_per_fuel": resolve_quantity(request.option("itemsPerFuel"), 8) or 8,
            "items_per_operation": resolve_quantity(request.option("itemsPerOperation"), 1) or 1,
            "post_collection": f"Collect finished {request.option('output') or 'items'} from the {station}.",
            "notes": "Furnace operations consume fuel; ensure hopper outputs aren't clogged.",
        }
    if "brewing" in station:
        return {
            "type": "brewing",
            "verb": "brew",
            "command": None,
            "requires_fuel": True,
            "fuel_options": fuel_options or ["blaze powder"],
            "fuel_per_batch": resolve_quantity(request.option("fuelPerBatch"), 1) or 1,
            "bottles_per_batch": resolve_quantity(request.option("bottlesPerBatch"), 3) or 3,
            "post_collection": "Collect finished potions and clear the brewing stand.",
            "notes": "Brewing requires blaze powder fuel and filled bottles; queue reagents in order.",
        }
    if "smithing" in station:
        template = normalize_item_name(request.option("template", "smithingTemplate"))
        return {
            "type": "smithing",
            "verb": "reforge",
            "command": None,
            "requires_fuel": False,
            "template": None if template == UNSPECIFIED_ITEM else template,
            "notes": "Ensure the smithing template and upgrade material are available before reforging.",
        }
    if "anvil" in station:
        return {
            "type": "anvil",
            "verb": "combine",
            "command": None,
            "requires_fuel": False,
            "xp_cost": resolve_quantity(request.option("xpCost"), None),
            "notes": "Combining items on an anvil consumes XP levels and damages the anvil over time.",
        }
    if "stonecutter" in station:
        return {
            "type": "stonecutting",
            "verb": "cut",
            "command": None,
            "requires_fuel": False,
            "notes": "Stonecutting converts blocks efficiently; confirm exact patterns before cutting.",
        }
    return {
        "type": "crafting",
        "verb": "craft",
        "command": "/craft",
        "requires_fuel": False,
        "notes": request.option("notes"),
    }


def _requirement(entry: Any) -> Optional[Dict[str, Any]]:
    if isinstance(entry, str):
        return {"name": normalize_item_name(entry)}
    if isinstance(entry, Mapping):
        return {
            "name": normalize_item_name(entry.get("name") or entry.get("item") or entry.get("id")),
            "count": resolve_quantity(entry.get("count", entry.get("quantity")), None),
        }
    return None


def parse_ingredients(request: TaskRequest) -> List[Dict[str, Any]]:
    """Ingredient list from `ingredients`, then a `recipe` mapping, then the details."""
    raw = request.option("ingredients")
    if isinstance(raw, (list, tuple)):
        parsed = [r for r in (_requirement(e) for e in raw) if r]
        if parsed:
            return parsed

    recipe = request.option("recipe")
    if isinstance(recipe, Mapping) and recipe:
        return [
            {"name": normalize_item_name(name), "count": resolve_quantity(count, None)}
            for name, count in recipe.items()
        ]

    return [{"name": normalize_item_name(request.option("primaryIngredient") or request.details or "materials")}]


def resolve_craft_quantity(request: TaskRequest, current_stock: int) -> Dict[str, Any]:
    """
    Number of items to craft.

    The largest of the base quantity, the gap to the minimum stock, the gap
    to the desired stock and an exact override, plus the buffer.
    """
    base = resolve_quantity(request.option("quantity", "count"), 1) or 1
    minimum = resolve_quantity(request.option("maintainMinimum", "minStock", "maintain"), None)
    desired = resolve_quantity(request.option("desiredStock", "targetStock", "restockTarget"), None)
    buffer = resolve_quantity(request.option("buffer", "extra"), 0) or 0
    exact = resolve_quantity(request.option("exactQuantity"), None)

    quantity = base
    reasons: List[str] = []
    if minimum and current_stock < minimum:
        quantity = max(quantity, minimum - current_stock)
        reasons.append(f"inventory below minimum ({current_stock}/{minimum})")
    if desired and current_stock + quantity < desired:
        quantity = max(quantity, desired - current_stock)
        reasons.append(f"target stock of {desired} requires {desired - current_stock}")
    if exact:
        quantity = max(quantity, exact)
        reasons.append(f"exact quantity override to {exact}")
    if buffer > 0:
        quantity += buffer
        reasons.append(f"include buffer of {buffer}")

    return {
        "quantity": max(1, quantity),
        "reasons": reasons,
        "minimum": minimum,
        "desired": desired,
        "buffer": buffer,
    }


def build_subcomponent_graph(item: str, raw: Any) -> Optional[TaskGraph]:
    """
    Graph with the crafted item as root and one node per sub-component.

    Each sub-component may list `requires` (other sub-component names);
    every sub-component gates the final craft.
    """
    if isinstance(raw, Mapping):
        entries = [{"name": name, "count": count} for name, count in raw.items()]
    elif isinstance(raw, (list, tuple)):
        entries = list(raw)
    else:
        return None

    graph = TaskGraph()
    root = graph.add_node(create_task_node("craft", f"Craft {item}", {"item": item}, id=f"craft:{item}"))
    ids: Dict[str, str] = {}
    requires: Dict[str, List[str]] = {}
    for entry in entries:
        parsed = _requirement(entry)
        if not parsed or parsed["name"] == UNSPECIFIED_ITEM:
            continue
        name = parsed["name"]
        node_id = graph.add_node(
            create_task_node(
                "craft",
                f"Craft {name}",
                {"item": name, "count": parsed.get("count")},
                id=f"craft:{name}",
            )
        )
        ids[name] = node_id
        deps = entry.get("requires") if isinstance(entry, Mapping) else None
        requires[name] = _name_list(deps)

    for name, node_id in ids.items():
        graph.add_dependency(node_id, root)
        for dep in requires[name]:
            if dep in ids:
                graph.add_dependency(ids[dep], node_id)
    graph.set_root(root)
    return graph


def plan_craft_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    item = normalize_item_name(request.option("item") or request.details)
    station = normalize_item_name(request.option("station") or "crafting table")
    storage = normalize_item_name(request.option("storage", "dropOff") or "nearest chest")
    target_description = describe_target(request.target)
    automation = bool(request.option("automation") or request.option("autocrafter"))
    profile = determine_station_profile(station, request)

    inventory = ctx.inventory
    current_stock = count_inventory_items(inventory, item)
    stock = resolve_craft_quantity(request, current_stock)
    quantity = stock["quantity"]
    reasons = stock["reasons"]

    ingredients = parse_ingredients(request)
    missing = []
    for ing in ingredients:
        if ing["name"] == UNSPECIFIED_ITEM:
            continue
        needed = (ing.get("count") or 1) * quantity
        if not has_inventory_item(inventory, ing["name"], needed):
            missing.append({"name": ing["name"], "count": needed})

    scaled = [
        {"name": ing["name"], "count": ing["count"] * quantity if ing.get("count") else None}
        for ing in ingredients
    ]

    steps = []
    if stock["minimum"] or stock["desired"] or stock["buffer"] or reasons:
        reason_text = "; ".join(reasons) or "Maintain healthy stock levels before heading out"
        steps.append(
            create_step(
                title="Assess stock levels",
                type="analysis",
                description=f"Inventory shows {current_stock} {item}. {reason_text}.",
                metadata={
                    "currentStock": current_stock,
                    "maintainMinimum": stock["minimum"],
                    "desiredStock": stock["desired"],
                    "buffer": stock["buffer"],
                    "plannedQuantity": quantity,
                },
            )
        )

    if missing:
        steps.append(
            create_step(
                title="Restock ingredients",
                type="inventory",
                description=f"Acquire missing components for {item}: {format_requirement_list(missing)}.",
                metadata={"ingredients": ingredients, "missing": missing, "quantity": quantity},
            )
        )
    else:
        summary = format_requirement_list(scaled)
        steps.append(
            create_step(
                title="Verify ingredients",
                type="inventory",
                description=(
                    f"Confirm ingredients for {item} x{quantity}: {summary}."
                    if summary
                    else f"Confirm ingredients for {item} x{quantity} are available."
                ),
                metadata={"ingredients": ingredients, "missing": missing, "quantity": quantity},
            )
        )

    risks: List[str] = []
    graph = build_subcomponent_graph(item, request.option("subcomponents"))
    if graph is not None and len(graph) > 1:
        try:
            order = [n for n in graph.topological_order() if n != graph.root_id]
        except nx.NetworkXUnfeasible:
            log.warning("Sub-component dependencies for %s contain a cycle", item)
            order = [node["id"] for node in graph.to_dict()["nodes"] if node["id"] != graph.root_id]
            risks.append("Sub-component dependencies are circular; craft order may need manual review.")
        subcomponents = []
        for node_id in order:
            node = graph.get_node(node_id)
            subcomponents.append({"name": node["metadata"]["item"], "count": node["metadata"].get("count")})
        steps.append(
            create_step(
                title="Craft subcomponents",
                type="preparation",
                description=f"Craft prerequisite parts ({format_requirement_list(subcomponents)}).",
                metadata={"subcomponents": subcomponents, "order": order},
            )
        )

    steps.append(
        create_step(
            title="Move to workstation",
            type="movement",
            description=f"Travel to {station} located at {target_description}.",
            metadata={"station": station, "process": profile["type"]},
        )
    )

    fuel_status = None
    if profile["requires_fuel"]:
        operations = max(
            1, math.ceil(quantity * profile.get("items_per_operation", 1) / profile.get("items_per_fuel", 1))
        )
        fuel_needed = max(profile.get("fuel_per_batch", 1), operations)
        options = profile["fuel_options"]
        has_fuel = any(has_inventory_item(inventory, option, fuel_needed) for option in options)
        fuel_status = {"fuelNeeded": fuel_needed, "fuelOptions": options, "hasFuel": has_fuel}
        steps.append(
            create_step(
                title="Load fuel",
                type="inventory",
                description=(
                    f"Insert approximately {fuel_needed} {', '.join(options) or 'fuel'} "
                    f"into the {station} to power the process."
                ),
                metadata={"fuelOptions": options, "fuelNeeded": fuel_needed},
            )
        )
        if profile["type"] == "brewing":
            per_batch = profile["bottles_per_batch"]
            bottles = max(1, math.ceil(quantity / per_batch) * per_batch)
            steps.append(
                create_step(
                    title="Prep bottles",
                    type="inventory",
                    description=(
                        f"Fill and place {bottles} water bottles plus initial reagents into the brewing stand."
                    ),
                    metadata={"bottlesNeeded": bottles},
                )
            )
        if profile["type"] == "smelting":
            steps.append(
                create_step(
                    title="Queue inputs",
                    type="inventory",
                    description=f"Load raw ingredients for {item} into the {station} input slots.",
                    metadata={"ingredients": ingredients, "quantity": quantity},
                )
            )

    if profile["type"] == "smithing" and profile.get("template"):
        steps.append(
            create_step(
                title="Slot smithing template",
                type="preparation",
                description=(
                    f"Place the {profile['template']} template into the smithing table "
                    "before combining materials."
                ),
                metadata={"template": profile["template"]},
            )
        )
    if profile["type"] == "anvil" and profile.get("xp_cost"):
        steps.append(
            create_step(
                title="Verify XP levels",
                type="analysis",
                description=(
                    f"Ensure at least {profile['xp_cost']} XP levels are available "
                    "to complete the anvil combination."
                ),
                metadata={"xpCost": profile["xp_cost"]},
            )
        )

    if automation:
        steps.append(
            create_step(
                title="Configure automation",
                type="configuration",
                description=f"Load the recipe into the {station} autocrafter and prime input buffers.",
            )
        )

    verb = profile["verb"]
    command = None
    if profile["command"] == "/craft":
        command = f"/craft {'_'.join(item.split())}"
        if quantity > 1:
            command += f" {quantity}"
    steps.append(
        create_step(
            title="Craft item",
            type="action",
            description=(
                f"Use the {station} to {verb} {quantity}x {item}, arranging ingredients per recipe."
                if quantity > 1
                else f"Use the {station} to {verb} {item}, arranging ingredients per recipe."
            ),
            command=command,
        )
    )

    if profile.get("post_collection"):
        steps.append(
            create_step(
                title="Collect output",
                type="action",
                description=profile["post_collection"],
                metadata={"station": station},
            )
        )
    if request.option("qualityCheck"):
        steps.append(
            create_step(
                title="Inspect output",
                type="quality",
                description=f"Verify enchantments or durability on the crafted {item} before delivery.",
            )
        )
    steps.append(
        create_step(
            title="Store output",
            type="storage",
            description=f"Place the crafted {item} into the {storage} and report quantity produced.",
            metadata={"container": storage, "quantity": quantity},
        )
    )

    duration = 8000 + len(ingredients) * 1500 + max(0, quantity - 1) * 1200

    if missing:
        risks.append("Insufficient ingredients could delay crafting.")
    if fuel_status and not fuel_status["hasFuel"]:
        risks.append("Fuel reserves are low; gather additional fuel before processing.")
    if stock["minimum"] and current_stock + quantity < stock["minimum"]:
        risks.append(f"Even after crafting, stock may remain below minimum ({stock['minimum']}).")
    if automation:
        risks.append("Autocrafter misconfiguration may waste materials.")
    if profile["type"] == "anvil":
        risks.append("Combining items may reduce anvil durability; prepare a backup anvil.")
    if profile["type"] == "brewing":
        risks.append("Brewing sequences are timing-sensitive; avoid swapping reagents mid-cycle.")

    notes: List[str] = []
    if request.option("deliverTo"):
        notes.append(f"Deliver finished items to {request.option('deliverTo')}.")
    if request.option("recipeBook"):
        notes.append("Ensure the recipe book is unlocked for this item.")
    if request.option("upcomingUse"):
        notes.append(f"Crafting supports upcoming need: {request.option('upcomingUse')}.")
    if reasons:
        notes.append(f"Quantity rationale: {'; '.join(reasons)}.")
    if profile.get("notes"):
        notes.append(profile["notes"])
    if fuel_status and fuel_status["fuelOptions"]:
        notes.append(
            f"Fuel options: {', '.join(fuel_status['fuelOptions'])}; estimated need {fuel_status['fuelNeeded']}."
        )

    resources = [item, station, storage, *(i["name"] for i in ingredients), *profile.get("fuel_options", ())]
    if profile.get("template"):
        resources.append(profile["template"])

    return create_plan(
        task=request,
        summary=(
            f"Craft {quantity}x {item} using the {station}."
            if quantity > 1
            else f"Craft {item} using the {station}."
        ),
        steps=steps,
        estimated_duration=duration,
        resources=resources,
        risks=risks,
        notes=notes,
        metadata={"quantity": quantity, "currentStock": current_stock, "process": profile["type"]},
        task_graph=graph if graph is not None and len(graph) > 1 else None,
    )
