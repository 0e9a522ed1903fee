# src/tasks/plan_explore.py
"""
Exploration / scouting planner.

Biome profile + optional structure profile + navigation strategy drive the
supply list, step sequence, duration and risk lines.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from domain.biomes import get_biome_profile
from domain.navigation import calculate_exploration_duration, determine_best_strategy
from domain.structures import get_structure_profile
from spec.types import Plan, PlanContext, TaskRequest

from .helpers import (
    create_plan,
    create_step,
    describe_target,
    format_requirement_list,
    has_inventory_item,
    normalize_item_name,
    resolve_quantity,
)


def _supply_entries(raw: Any) -> List[Any]:
    if isinstance(raw, (list, tuple)):
        return list(raw)
    if isinstance(raw, Mapping):
        return [{"name": name, "count": count} for name, count in raw.items()]
    if raw:
        return [raw]
    return []


def _normalize_supply(item: Any) -> Dict[str, Any]:
    if isinstance(item, Mapping):
        name = normalize_item_name(item.get("name") or item.get("item") or item.get("id"))
        entry: Dict[str, Any] = {"name": name}
        count = resolve_quantity(item.get("count", item.get("quantity")), None)
        if count:
            entry["count"] = count
        return entry
    return {"name": normalize_item_name(item)}


def plan_explore_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    target_description = describe_target(request.target)
    biome_name = normalize_item_name(request.option("biome") or ctx.get("biome") or "plains")
    structure_raw = request.option("structure")
    structure_name = normalize_item_name(structure_raw) if structure_raw else None
    radius = resolve_quantity(request.option("radius", "range"), None)
    transport = normalize_item_name(request.option("transport") or "foot")
    preferred_tool = normalize_item_name(request.option("tool") or "map")

    poi_raw = request.option("pointsOfInterest")
    poi = [normalize_item_name(p) for p in poi_raw] if isinstance(poi_raw, (list, tuple)) else []

    biome = get_biome_profile(biome_name)
    structure = get_structure_profile(structure_name)
    strategy = determine_best_strategy(biome, structure, request.option("navigationStrategy"))

    # ------------------------------------------------------------------
    # Supplies: biome kit, structure preparations, strategy requirements,
    # then whatever the task asked for. First occurrence of a name wins.
    # ------------------------------------------------------------------
    all_supplies = [
        *biome.get("supplies", ()),
        *(structure.get("preparations", ()) if structure else ()),
        *strategy.get("requirements", ()),
        *_supply_entries(request.option("supplies")),
    ]
    supplies: List[Dict[str, Any]] = []
    seen = set()
    for raw in all_supplies:
        entry = _normalize_supply(raw)
        if entry["name"] in seen:
            continue
        seen.add(entry["name"])
        supplies.append(entry)

    missing = [s for s in supplies if not has_inventory_item(ctx.inventory, s["name"])]

    category = biome.get("category", "unknown")
    steps = []

    if structure:
        prep = f"Prepare for {structure['rarity']} structure hunting in {category} biome. "
    else:
        prep = f"Prepare for {category} biome exploration. "
    if missing:
        prep += f"Stock up on: {format_requirement_list(missing)}."
    else:
        prep += f"Verify you have: {format_requirement_list(supplies) or 'expedition supplies'}."

    steps.append(
        create_step(
            title="Prepare expedition",
            type="preparation",
            description=prep,
            metadata={
                "biome": biome_name,
                "structure": structure_name,
                "supplies": supplies,
                "missing": missing,
            },
        )
    )

    considerations = list(biome.get("special_considerations", ()))
    if considerations:
        steps.append(
            create_step(
                title="Review biome hazards",
                type="preparation",
                description=f"{category} biome notes: {'; '.join(considerations)}.",
                metadata={"biome": biome_name, "considerations": considerations},
            )
        )

    if structure and structure.get("navigation_tips"):
        tips = list(structure["navigation_tips"])
        steps.append(
            create_step(
                title=f"Locate {structure_name}",
                type="preparation",
                description=f"Tips for finding {structure_name}: {'; '.join(tips)}.",
                metadata={"structure": structure_name, "tips": tips},
            )
        )

    steps.append(
        create_step(
            title=f"Execute {strategy['name']}",
            type="navigation",
            description=(
                f"{strategy['description']} - {strategy['technique']}. "
                f"Tips: {'; '.join(strategy['tips'])}."
            ),
            metadata={
                "strategy": strategy["name"],
                "efficiency": strategy["efficiency"],
                "requirements": list(strategy["requirements"]),
            },
        )
    )

    steps.append(
        create_step(
            title="Calibrate navigation tools",
            type="preparation",
            description=(
                f"Ensure {preferred_tool}, compass, and coordinates (F3) are ready for "
                f"{strategy['name'].lower()}."
            ),
            metadata={"tool": preferred_tool, "strategy": strategy["name"]},
        )
    )

    traversal = biome.get("traversal_speed", 1.0)
    if transport != "foot":
        bonus = "Good terrain for fast travel." if traversal >= 0.8 else "Difficult terrain may slow travel."
        steps.append(
            create_step(
                title="Ready transport",
                type="preparation",
                description=f"Prepare {transport} for travel. {bonus}",
                metadata={"transport": transport, "terrainSpeed": traversal},
            )
        )

    search_radius = (structure.get("search_radius") if structure else None) or radius
    if structure and structure.get("search_radius"):
        scope = f"Search within {structure['search_radius']} block radius"
    elif radius:
        scope = f"Explore within {radius} block radius"
    else:
        scope = "Explore the region"

    steps.append(
        create_step(
            title="Travel and explore",
            type="movement",
            description=(
                f"{scope} of {target_description} using {strategy['name']}. "
                "Mark waypoints and safe routes."
            ),
            metadata={
                "radius": search_radius,
                "transport": transport,
                "strategy": strategy["name"],
                "biome": biome_name,
            },
        )
    )

    if structure:
        cues = list(structure.get("visual_cues", ()))
        steps.append(
            create_step(
                title=f"Search for {structure_name}",
                type="observation",
                description=(
                    f"Look for visual cues: {', '.join(cues) or 'anything unusual'}. "
                    f"Detectable from ~{structure.get('detectable_from', 0)} blocks away."
                ),
                metadata={
                    "structure": structure_name,
                    "visualCues": cues,
                    "detectableRange": structure.get("detectable_from"),
                },
            )
        )

    if request.option("mapOutChunks"):
        steps.append(
            create_step(
                title="Map chunks",
                type="observation",
                description="Chart chunk boundaries and update locator maps for the region.",
            )
        )

    resources_seen = list(biome.get("resources", ()))
    if poi:
        survey = f"Document specific points of interest: {', '.join(poi)}."
    elif structure:
        survey = (
            f"Document {structure_name} location, loot ({', '.join(structure.get('loot', ())) or 'none listed'}), "
            f"and dangers ({', '.join(structure.get('dangers', ())) or 'none listed'})."
        )
    else:
        survey = (
            f"Document notable terrain, resources ({', '.join(resources_seen) or 'local materials'}), "
            "and any structures found."
        )
    steps.append(
        create_step(
            title="Survey and document",
            type="observation",
            description=survey,
            metadata={"poi": poi, "structure": structure_name, "biomeResources": resources_seen},
        )
    )

    complexity = biome.get("navigation_complexity", "medium")
    waypoints = request.option("waypoints")
    if waypoints or complexity == "very_high":
        steps.append(
            create_step(
                title="Place waypoints",
                type="action",
                description=(
                    "Drop markers or beacons at strategic spots. "
                    f"Critical for {complexity} complexity terrain."
                ),
                metadata={"waypoints": waypoints, "navigationComplexity": complexity},
            )
        )

    hostiles = list(biome.get("hostile_mobs", ()))
    watch = f" Watch for {', '.join(hostiles[:3])}." if hostiles else ""
    steps.append(
        create_step(
            title="Return safely",
            type="movement",
            description=f"Follow marked waypoints back to base.{watch}",
            metadata={"biome": biome_name, "hostiles": hostiles},
        )
    )

    loot = list(structure.get("loot", ())) if structure else []
    loot_line = f" Loot collected: {', '.join(loot)}." if loot else ""
    steps.append(
        create_step(
            title="Report findings",
            type="report",
            description=f"Share coordinates, screenshots, and notes.{loot_line}",
            metadata={
                "report": request.option("reportFormat") or "summary",
                "structure": structure_name,
            },
        )
    )

    duration = calculate_exploration_duration(search_radius, biome, strategy)

    resources = [preferred_tool, transport]
    resources += [s["name"] for s in supplies]
    resources += list(strategy.get("requirements", ()))

    # ------------------------------------------------------------------
    # Risks / notes
    # ------------------------------------------------------------------
    risks: List[str] = []
    weather_hazards = list(biome.get("weather_hazards", ()))
    if weather_hazards:
        risks.append(f"{category} biome hazards: {', '.join(weather_hazards)}.")

    dimension = biome.get("dimension")
    if dimension == "nether":
        risks.append("Nether environment: fire resistance essential, no natural water, bed explosions.")
    elif dimension == "end":
        risks.append("End dimension: void death is permanent, endermen everywhere, bring blocks.")

    if structure and structure.get("dangers"):
        risks.append(f"{structure_name} dangers: {', '.join(structure['dangers'])}.")
    if hostiles:
        risks.append(f"Hostile mobs in {biome_name}: {', '.join(hostiles)}.")

    difficulty = biome.get("difficulty")
    if difficulty in ("hard", "very_hard", "extreme"):
        risks.append(f"High difficulty ({difficulty}) - bring backup supplies and armor.")
    if request.option("nightRun"):
        risks.append("Night exploration significantly increases hostile mob encounters.")
    if complexity in ("very_high", "extreme"):
        risks.append(f"{complexity} navigation complexity - easy to get lost, mark paths clearly.")

    notes = [
        f"Using {strategy['name']} ({round(strategy['efficiency'] * 100)}% efficiency, "
        f"{strategy['coverage']} coverage).",
        f"Terrain traversal speed: {round(traversal * 100)}% of normal.",
    ]
    if structure:
        notes.append(
            f"{structure_name} rarity: {structure['rarity']}, "
            f"finding difficulty: {structure['finding_difficulty']}."
        )
        if structure.get("worth_revisiting"):
            notes.append(f"{structure_name} worth marking for future visits.")
    if request.option("returnBy"):
        notes.append(f"Return before {request.option('returnBy')}.")
    if request.option("lootPriority"):
        notes.append(f"Priority loot: {request.option('lootPriority')}.")

    if structure:
        summary = f"Explore {biome_name} biome to locate {structure_name} near {target_description}."
    else:
        summary = f"Explore {biome_name} biome near {target_description} using {strategy['name']}."

    return create_plan(
        task=request,
        summary=summary,
        steps=steps,
        estimated_duration=duration,
        resources=resources,
        risks=risks,
        notes=notes,
        metadata={
            "biome": biome_name,
            "structure": structure_name,
            "strategy": strategy["name"],
            "searchRadius": search_radius,
        },
    )
