# src/tasks/plan_build.py
"""
Construction planner.

Templates (`metadata.template` / `blueprint` / `structure`) supply
dimensions, a bill of materials and feature flags; explicit metadata always
overrides them. Without explicit materials the bill is estimated from the
footprint.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from domain.templates import apply_template, find_building_template, generate_material_estimate
from spec.types import UNSPECIFIED_ITEM, Plan, PlanContext, Step, TaskRequest

from .helpers import (
    create_plan,
    create_step,
    describe_target,
    format_requirement_list,
    normalize_item_name,
    resolve_quantity,
)


BUILD_TIME_BASE = 14000
BUILD_TIME_PER_BLOCK = 90
BUILD_TIME_TALL_STRUCTURE = 4000
TALL_STRUCTURE_THRESHOLD = 10
VOLUME_TIME_MULTIPLIER = 5
SCAFFOLDING_HEIGHT_THRESHOLD = 6


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------

def parse_dimensions(metadata: Mapping[str, Any]) -> Optional[Dict[str, Optional[int]]]:
    """
    `{length, width, height}` from "LxWxH" / "LxW" strings or explicit keys.

    Returns None when the footprint is missing or any dimension is invalid.
    """
    raw = metadata.get("dimensions") or metadata.get("dimension") or ""
    if isinstance(raw, str) and "x" in raw:
        parts: List[int] = []
        for part in raw.split("x"):
            try:
                value = int(part.strip())
            except ValueError:
                continue
            if value > 0:
                parts.append(value)
        if len(parts) == 3:
            return {"length": parts[0], "width": parts[1], "height": parts[2]}
        if len(parts) == 2:
            return {
                "length": parts[0],
                "width": parts[1],
                "height": resolve_quantity(metadata.get("height"), None),
            }

    for key in ("length", "width"):
        value = metadata.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value <= 0:
            return None

    length = resolve_quantity(metadata.get("length"), None)
    width = resolve_quantity(metadata.get("width"), None)
    height_raw = metadata.get("height", metadata.get("floors"))
    if isinstance(height_raw, (int, float)) and not isinstance(height_raw, bool) and height_raw < 0:
        return None
    height = resolve_quantity(height_raw, None)
    if length and width:
        return {"length": length, "width": width, "height": height}
    return None


def estimate_materials_from_dimensions(
    dimensions: Mapping[str, Any], metadata: Mapping[str, Any]
) -> List[Dict[str, Any]]:
    primary = metadata.get("primaryMaterial") or metadata.get("buildingMaterial") or "oak_planks"
    estimate = generate_material_estimate(
        dimensions.get("length") or 0,
        dimensions.get("width") or 0,
        dimensions.get("height"),
        roof_style=metadata.get("roofStyle") or "pitched",
        foundation=metadata.get("foundation") is not False,
        floors=resolve_quantity(metadata.get("floors"), 1),
        material=primary,
        roof_material=metadata.get("roofMaterial") or metadata.get("primaryMaterial") or "oak_planks",
        foundation_material=metadata.get("foundationMaterial") or "cobblestone",
        include_interior=metadata.get("interior") is not False,
    )
    if not estimate:
        return []
    return [
        {"name": normalize_item_name(name), "count": count}
        for name, count in estimate["materials"].items()
        if count > 0
    ]


def normalize_materials(
    request: TaskRequest, metadata: Mapping[str, Any], dimensions: Optional[Mapping[str, Any]]
) -> List[Dict[str, Any]]:
    explicit = metadata.get("materials") if isinstance(metadata.get("materials"), list) else []
    quantities = metadata.get("materialQuantities") or metadata.get("materialCounts") or {}
    normalized: List[Dict[str, Any]] = []
    for entry in explicit:
        if isinstance(entry, str):
            normalized.append(
                {"name": normalize_item_name(entry), "count": resolve_quantity(quantities.get(entry), None)}
            )
        elif isinstance(entry, Mapping):
            normalized.append(
                {
                    "name": normalize_item_name(entry.get("name") or entry.get("item")),
                    "count": resolve_quantity(entry.get("count", entry.get("quantity")), None),
                }
            )
    if normalized:
        return normalized

    if dimensions:
        estimated = estimate_materials_from_dimensions(dimensions, metadata)
        if estimated:
            return estimated

    fallback = normalize_item_name(metadata.get("primaryMaterial") or request.details or "building blocks")
    return [{"name": fallback, "count": resolve_quantity(metadata.get("quantity", metadata.get("blocks")), None)}]


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------

def plan_build_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)
    inventory = ctx.inventory

    template_name = request.option("template", "blueprint", "structure")
    template = find_building_template(template_name)
    metadata: Dict[str, Any] = apply_template(request.metadata, template) if template else dict(request.metadata)

    blueprint = normalize_item_name(
        metadata.get("blueprint")
        or metadata.get("structure")
        or (template["name"] if template else None)
        or request.details
    )
    target_description = describe_target(request.target)
    orientation_raw = metadata.get("orientation") or metadata.get("facing")
    orientation = normalize_item_name(orientation_raw) if orientation_raw else ""
    dimensions = parse_dimensions(metadata)
    height = resolve_quantity(metadata.get("height", metadata.get("floors")), None)
    if height is None and dimensions:
        height = dimensions.get("height")

    floor_area = dimensions["length"] * dimensions["width"] if dimensions else None
    enclosed_height = (dimensions.get("height") if dimensions else None) or height
    enclosed_volume = floor_area * enclosed_height if floor_area and enclosed_height else None

    materials = normalize_materials(request, metadata, dimensions)
    missing = [
        req for req in materials
        if req["name"] != UNSPECIFIED_ITEM and not inventory.has(req["name"], req.get("count") or 1)
    ]
    material_summary = format_requirement_list(materials)
    missing_summary = format_requirement_list(missing)
    block_count = sum(req.get("count") or 0 for req in materials)

    tall = bool(height and height > SCAFFOLDING_HEIGHT_THRESHOLD)
    tools: List[str] = []

    def add_tool(name: str) -> None:
        if name not in tools:
            tools.append(name)

    if tall:
        add_tool("scaffolding")
    if metadata.get("terrain") == "rocky" or metadata.get("foundation") == "stone":
        add_tool("pickaxe")
    if metadata.get("terrain") == "forest" or metadata.get("clearTrees"):
        add_tool("axe")
    if metadata.get("terrain") == "sand" or metadata.get("levelGround"):
        add_tool("shovel")
    if metadata.get("includesRedstone"):
        add_tool("redstone toolkit")
    if metadata.get("lighting") or metadata.get("buildAtNight"):
        add_tool("torches")
    missing_tools = [t for t in tools if not inventory.has(t)]

    steps: List[Step] = []

    # -- preparation -------------------------------------------------------
    if tools:
        if missing_tools:
            tool_description = f"Gather tools before departure: {format_requirement_list(missing_tools)}."
        else:
            tool_description = f"Confirm required tools are on hand: {format_requirement_list(tools)}."
        steps.append(
            create_step(
                "Prepare tools" if missing_tools else "Verify tools",
                "inventory",
                tool_description,
                {"required": tools, "missing": missing_tools},
            )
        )

    reference = metadata.get("blueprintReference") or metadata.get("blueprintUrl")
    if reference:
        steps.append(
            create_step(
                "Review blueprint",
                "planning",
                f"Load {reference} and verify dimensions before construction begins.",
            )
        )

    if missing:
        material_description = (
            f"Obtain missing resources: {missing_summary}. Stage extras near the build site."
            if missing_summary
            else "Obtain missing resources before heading to the site."
        )
    else:
        material_description = (
            f"Confirm required materials are ready: {material_summary}."
            if material_summary
            else "Confirm required materials are ready for the build."
        )
    steps.append(
        create_step(
            "Restock materials" if missing else "Verify materials",
            "inventory",
            material_description,
            {"materials": materials, "missing": missing},
        )
    )

    # -- survey / site -----------------------------------------------------
    if orientation:
        survey = (
            f"Inspect {target_description} to ensure the area is clear, mark foundation corners, "
            f"and align the main entrance toward {orientation}."
        )
    else:
        survey = f"Inspect {target_description} to ensure the area is clear for building and mark foundation corners."
    steps.append(create_step("Survey site", "planning", survey))

    if metadata.get("terrain") == "uneven" or metadata.get("levelGround"):
        steps.append(
            create_step(
                "Prepare terrain",
                "preparation",
                f"Clear vegetation and level ground to support the {blueprint} footprint.",
            )
        )

    steps.append(
        create_step(
            "Stage materials",
            "collection",
            f"Move materials on-site, placing staging chests or shulker boxes for {blueprint}.",
            {"materials": materials},
        )
    )

    if metadata.get("perimeter") or metadata.get("threatLevel") == "high":
        steps.append(
            create_step(
                "Secure perimeter",
                "safety",
                "Place perimeter lighting and temporary barricades to prevent mob interference during construction.",
                {"recommended": ["torches", "fences"]},
            )
        )

    # -- construction ------------------------------------------------------
    steps.append(
        create_step(
            "Lay foundation",
            "construction",
            f"Outline the {blueprint} footprint and reinforce the base with durable blocks.",
        )
    )
    if tall:
        steps.append(
            create_step(
                "Place scaffolding",
                "safety",
                f"Set up scaffolding and guard rails to safely build up to {height} blocks high.",
            )
        )
    steps.append(
        create_step(
            "Assemble structure",
            "construction",
            f"Build the {blueprint} layer by layer, checking alignment with the blueprint after each level.",
        )
    )
    if metadata.get("roofStyle") or metadata.get("requiresRoof"):
        steps.append(
            create_step(
                "Install roof",
                "construction",
                f"Shape the roof using the {metadata.get('roofStyle') or 'specified'} style, "
                "ensuring overhangs and lighting prevent mob spawns.",
            )
        )
    if metadata.get("includesRedstone"):
        steps.append(
            create_step(
                "Install redstone",
                "automation",
                "Wire redstone components and test circuits before sealing access panels.",
            )
        )

    # -- finishing ---------------------------------------------------------
    steps.append(
        create_step(
            "Finish and inspect",
            "inspection",
            "Add lighting, doors, and final touches, then verify the structure matches the blueprint and meets safety checks.",
        )
    )
    if metadata.get("interior") is not False:
        steps.append(
            create_step(
                "Outfit interior",
                "decoration",
                "Place furnishings, storage, and lighting, verifying accessibility and spawn-proofing inside the structure.",
            )
        )
    if metadata.get("cleanup") is not False:
        steps.append(
            create_step(
                "Cleanup site",
                "cleanup",
                "Remove scaffolding, excess materials, and restore surrounding terrain.",
            )
        )

    # -- duration / risks / notes ------------------------------------------
    if template:
        estimated = template["estimated_duration"]
    else:
        estimated = (
            BUILD_TIME_BASE
            + block_count * BUILD_TIME_PER_BLOCK
            + (BUILD_TIME_TALL_STRUCTURE if height and height > TALL_STRUCTURE_THRESHOLD else 0)
            + (enclosed_volume * VOLUME_TIME_MULTIPLIER if enclosed_volume else 0)
        )

    risks: List[str] = []
    if tall:
        risks.append("Elevated work area increases fall damage risk.")
    if metadata.get("environment") == "nether":
        risks.append("Building in the Nether requires fire resistance and ghast-proofing.")
    if metadata.get("weather") == "stormy":
        risks.append("Stormy weather may cause lightning strikes; add lightning rods and shelter.")
    if metadata.get("threatLevel") == "high":
        risks.append("Hostile mobs likely to interrupt construction; maintain perimeter defenses.")
    if floor_area:
        risks.append(f"Large footprint (~{floor_area} blocks) increases build time and supply demand.")
    if template and template["difficulty"] == "hard":
        risks.append(f"{template['name']} is rated as a hard build; expect increased complexity.")
    if template and template["difficulty"] == "expert":
        risks.append(f"{template['name']} is rated as expert difficulty; advanced knowledge required.")

    notes: List[str] = []
    if template:
        notes.append(f"Using template: {template['name']} ({template['category']}).")
    if orientation:
        notes.append(f"Align entrance toward {orientation}.")
    if metadata.get("deadline"):
        notes.append(f"Requested completion before {metadata['deadline']}.")
    if floor_area:
        notes.append(f"Estimated footprint area: {floor_area} blocks.")
    if enclosed_volume:
        notes.append(f"Approximate enclosed volume: {enclosed_volume} blocks.")
    if missing_tools:
        notes.append(f"Acquire missing tools: {format_requirement_list(missing_tools)}.")
    if template and template.get("features"):
        notes.append(f"Key features: {', '.join(template['features'])}.")

    return create_plan(
        request,
        f"Construct {blueprint} at {target_description}.",
        steps=steps,
        estimated_duration=estimated,
        resources=[req["name"] for req in materials] + tools,
        risks=risks,
        notes=notes,
        metadata={
            "template": template["name"] if template else None,
            "dimensions": dimensions,
            "materials": materials,
        } if template or dimensions else None,
    )
