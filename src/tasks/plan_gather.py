# src/tasks/plan_gather.py
"""
Gathering planner (crops, logs, stone, ores).

Resource and tool profiles give efficiency and replanting defaults; biome,
Y-level and weather profiles feed the hazard assessment and the duration
model.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional

from domain.biomes import get_gather_biome_profile, get_weather_profile, y_level_category
from domain.hazards import assess_environmental_hazards, generate_safety_recommendations
from domain.resources import (
    assess_tool_condition,
    calculate_durability_cost,
    calculate_tool_efficiency,
    get_resource_profile,
    get_tool_profile,
    is_tool_appropriate,
)
from spec.types import UNSPECIFIED_ITEM, Plan, PlanContext, Step, TaskRequest

from .helpers import (
    create_plan,
    create_step,
    describe_target,
    format_requirement_list,
    has_inventory_item,
    normalize_item_name,
    resolve_quantity,
)


BASE_TIME_PER_UNIT = 250
BASE_POST_TIME = 2000


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

def extract_gather_parameters(request: TaskRequest) -> Dict[str, Any]:
    """Normalized gathering parameters with resource-profile defaults."""
    resource = normalize_item_name(request.option("resource") or request.details or "resources")
    profile = get_resource_profile(resource)

    tool = normalize_item_name(request.option("tool") or profile.get("primary_tool") or "hand")
    backups_raw = request.option("backupTools")
    if isinstance(backups_raw, (list, tuple)):
        backup_tools = [normalize_item_name(t) for t in backups_raw]
    else:
        backup_tools = [normalize_item_name(t) for t in profile.get("backup_tools", ())]

    replant = request.option("replant")
    if replant is None:
        replant = profile.get("replantable", False)
    replant_item = None
    if replant:
        replant_item = normalize_item_name(
            request.option("replantItem", "seed") or profile.get("seed") or f"{resource}_seeds"
        )

    maturity = request.option("maturity") or ("fully grown" if profile["type"] == "crop" else None)
    default_yield = (
        profile.get("yield_per_plot") or profile.get("yield_per_tree") or profile.get("yield_per_block") or 1
    )

    processing_raw = request.option("processing")
    if isinstance(processing_raw, (list, tuple)):
        processing = [normalize_item_name(p) for p in processing_raw]
    else:
        processing = list(profile.get("processing_options", ()))

    weather_sensitive = request.option("weatherSensitive")
    if weather_sensitive is None:
        weather_sensitive = profile.get("weather_sensitive", False)

    return {
        "resource": resource,
        "profile": profile,
        "tool": tool,
        "backup_tools": backup_tools,
        "target_description": describe_target(request.target),
        "storage": normalize_item_name(request.option("storage") or "storage chest"),
        "quantity": resolve_quantity(request.option("quantity", "count"), None),
        "method": normalize_item_name(request.option("method") or "manual harvest"),
        "replant": bool(replant),
        "replant_item": replant_item,
        "harvest_window": request.option("window", "timing"),
        "maturity": maturity,
        "field_size": resolve_quantity(request.option("fieldSize"), None),
        # Fractional table yields (1.5 per plot) survive unless overridden.
        "yield_per_plot": resolve_quantity(request.option("yieldPerPlot"), None) or default_yield,
        "processing": processing,
        "weather_sensitive": bool(weather_sensitive),
        "schedule": request.option("schedule"),
        "compost_extras": bool(request.option("compostExtras")),
        "report": request.option("report") is not False,
        "supplies": request.option("supplies"),
    }


def analyze_environment(request: TaskRequest, ctx: PlanContext) -> Dict[str, Any]:
    target = request.target if isinstance(request.target, Mapping) else {}
    y_level = target.get("y")
    if y_level is None:
        position = ctx.position or {}
        y_level = position.get("y")
        if y_level is None and isinstance(ctx.get("location"), Mapping):
            y_level = ctx.get("location").get("y")

    biome = request.option("biome") or ctx.get("biome") or target.get("biome") or "plains"
    weather = request.option("weather") or ctx.get("weather") or "clear"
    time_of_day = request.option("timeOfDay") or ctx.get("timeOfDay") or "day"
    is_night = time_of_day in ("night", "midnight")

    light_level = request.option("lightLevel")
    if light_level is None:
        light_level = ctx.get("lightLevel")
    if light_level is None:
        light_level = 4 if is_night else 15

    return {
        "y_level": y_level,
        "y_level_info": y_level_category(y_level),
        "biome": normalize_item_name(biome),
        "biome_profile": get_gather_biome_profile(biome),
        "weather_profile": get_weather_profile(weather),
        "time_of_day": time_of_day,
        "is_night": is_night,
        "light_level": light_level,
    }


def resource_optimality(profile: Mapping[str, Any], env: Mapping[str, Any]) -> Dict[str, Optional[bool]]:
    biome = env.get("biome_profile")
    y_info = env.get("y_level_info")
    if not biome or not y_info:
        return {"biomeOptimal": None, "yLevelOptimal": None}
    optimal = y_info.get("optimal_for", ())
    return {
        "biomeOptimal": profile.get("name") in biome.get("optimal_for", ()),
        "yLevelOptimal": profile.get("type") in optimal or profile.get("name") in optimal,
    }


def check_inventory_requirements(params: Mapping[str, Any], ctx: PlanContext) -> Dict[str, Any]:
    inventory = ctx.inventory
    tool = params["tool"]
    quantity = params["quantity"]

    tool_profile = get_tool_profile(tool)
    tool_item = inventory.find(tool)
    condition = assess_tool_condition(tool_item)

    missing_tools = [
        name for name in [tool, *params["backup_tools"]] if not has_inventory_item(inventory, name)
    ]
    replant_quantity = params["field_size"] or quantity or 1
    needs_replant = bool(
        params["replant"]
        and params["replant_item"]
        and not has_inventory_item(inventory, params["replant_item"], replant_quantity)
    )

    durability_cost = calculate_durability_cost(tool_profile, quantity) if quantity else None
    sufficient = True
    if condition and condition.get("percentage") is not None and durability_cost:
        sufficient = condition["percentage"] / 100 * tool_profile["durability"] > durability_cost

    return {
        "has_primary_tool": has_inventory_item(inventory, tool),
        "tool_profile": tool_profile,
        "tool_condition": condition,
        "tool_efficiency": calculate_tool_efficiency(tool_profile, params["profile"]),
        "tool_appropriate": is_tool_appropriate(tool_profile, params["profile"]),
        "missing_tools": missing_tools,
        "needs_replant_supplies": needs_replant,
        "replant_quantity": replant_quantity,
        "durability_cost": durability_cost,
        "sufficient_durability": sufficient,
    }


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

def _preparation_steps(params: Mapping[str, Any], check: Mapping[str, Any]) -> List[Step]:
    steps: List[Step] = []
    tool = params["tool"]
    backups = params["backup_tools"]

    if check["missing_tools"]:
        missing = [{"name": name, "count": 1} for name in check["missing_tools"]]
        steps.append(
            create_step(
                title="Obtain tools",
                type="preparation",
                description=f"Obtain or craft required tools: {format_requirement_list(missing)}.",
                metadata={"tool": tool, "backupTools": backups, "missing": check["missing_tools"]},
            )
        )
    else:
        warnings = []
        condition = check["tool_condition"]
        if condition and condition.get("status") == "low":
            warnings.append(f"{tool} is at {round(condition['percentage'])}% durability")
        if not check["sufficient_durability"]:
            warnings.append("may not have enough durability for planned gathering")
        warning_text = f" Warning: {', '.join(warnings)}." if warnings else ""
        backup_text = f" and backups ({', '.join(backups)})" if backups else ""
        steps.append(
            create_step(
                title="Prepare gear",
                type="preparation",
                description=f"Check durability on {tool}{backup_text} before departing.{warning_text}",
                metadata={
                    "tool": tool,
                    "backupTools": backups,
                    "toolCondition": condition,
                    "sufficientDurability": check["sufficient_durability"],
                },
            )
        )

    if check["needs_replant_supplies"]:
        steps.append(
            create_step(
                title="Gather replanting stock",
                type="inventory",
                description=(
                    f"Restock {check['replant_quantity']} {params['replant_item']} so fields "
                    "can be replanted after harvesting."
                ),
                metadata={"item": params["replant_item"], "amount": check["replant_quantity"]},
            )
        )

    supplies = params["supplies"]
    if supplies:
        if isinstance(supplies, Mapping):
            listed = [{"name": name, "count": count} for name, count in supplies.items()]
        elif isinstance(supplies, (list, tuple)):
            listed = list(supplies)
        else:
            listed = [supplies]
        steps.append(
            create_step(
                title="Pack supplies",
                type="inventory",
                description=f"Carry supportive items ({format_requirement_list(listed) or 'supportive items'}).",
                metadata={"supplies": listed},
            )
        )
    return steps


def _harvest_steps(params: Mapping[str, Any], check: Mapping[str, Any]) -> List[Step]:
    resource = params["resource"]
    steps = [
        create_step(
            title="Travel",
            type="movement",
            description=f"Head to {params['target_description']} where {resource} can be collected.",
            metadata={"destination": params["target_description"]},
        )
    ]

    maturity = params["maturity"]
    window = params["harvest_window"]
    if maturity or window:
        parts = []
        if maturity:
            parts.append(f"Confirm {resource} are {maturity}")
        if window:
            parts.append(f"work within the preferred window ({window})")
        steps.append(
            create_step(
                title="Inspect field",
                type="survey",
                description=" and ".join(parts) + ".",
                metadata={"maturity": maturity, "window": window},
            )
        )

    efficiency = check["tool_efficiency"]
    if efficiency > 2.0:
        efficiency_note = " (high efficiency)"
    elif efficiency < 1.0:
        efficiency_note = " (low efficiency)"
    else:
        efficiency_note = ""

    quantity = params["quantity"]
    if quantity:
        description = (
            f"Collect approximately {quantity} {resource} using the {params['tool']}"
            f"{efficiency_note} via {params['method']}."
        )
    else:
        description = (
            f"Collect {resource} efficiently using the {params['tool']}{efficiency_note} "
            f"via {params['method']}."
        )
    steps.append(
        create_step(
            title="Harvest",
            type="collection",
            description=description,
            metadata={
                "tool": params["tool"],
                "quantity": quantity,
                "method": params["method"],
                "efficiency": efficiency,
            },
        )
    )

    if params["replant"]:
        steps.append(
            create_step(
                title="Replant",
                type="maintenance",
                description=(
                    f"Replant {params['replant_item'] or 'seeds or saplings'} to sustain future "
                    f"{resource} harvests."
                ),
                metadata={"item": params["replant_item"]},
            )
        )
    return steps


def _post_harvest_steps(params: Mapping[str, Any]) -> List[Step]:
    resource = params["resource"]
    steps: List[Step] = []
    if params["processing"]:
        steps.append(
            create_step(
                title="Process yield",
                type="processing",
                description=(
                    f"Process gathered items into {', '.join(params['processing'])}, such as "
                    "composting extras or crafting blocks."
                ),
                metadata={"processing": params["processing"]},
            )
        )
    steps.append(
        create_step(
            title="Sort",
            type="inventory",
            description=f"Organize gathered {resource} in inventory, converting to blocks or bundles if useful.",
        )
    )
    steps.append(
        create_step(
            title="Store",
            type="storage",
            description=f"Deliver {resource} to the {params['storage']} and update counts.",
            metadata={"container": params["storage"], "quantity": params["quantity"]},
        )
    )
    if params["compost_extras"]:
        steps.append(
            create_step(
                title="Compost surplus",
                type="processing",
                description=f"Convert excess or spoiled {resource} into bone meal before closing out the run.",
                metadata={"method": "compost"},
            )
        )
    if params["report"]:
        steps.append(
            create_step(
                title="Report",
                type="report",
                description="Share totals gathered and note regrowth timers or hazards encountered.",
            )
        )
    return steps


# ---------------------------------------------------------------------------
# Duration
# ---------------------------------------------------------------------------

def calculate_gather_duration(
    params: Mapping[str, Any],
    check: Mapping[str, Any],
    env: Mapping[str, Any],
    target: Any,
) -> Dict[str, Any]:
    """
    Preparation + travel + gathering + replanting + processing + storage,
    with tool, weather, biome and depth modifiers on the gathering rate.
    """
    quantity = params["quantity"]
    has_tool = check["has_primary_tool"]

    tool_mod = 1.0 / max(check["tool_efficiency"], 0.5) if has_tool else 2.0
    weather_mod = 1.0 / env["weather_profile"].get("movement_modifier", 1.0)

    biome_mod = 1.0
    biome = env.get("biome_profile")
    if biome:
        if "navigation_difficulty" in biome.get("hazards", ()):
            biome_mod *= 1.2
        if "steep_terrain" in biome.get("hazards", ()):
            biome_mod *= 1.3
        if biome.get("name") == "forest":
            biome_mod *= 1.1

    depth_mod = {"deep": 1.3, "deepslate": 1.5, "shallow": 1.1}.get(
        (env.get("y_level_info") or {}).get("category"), 1.0
    )

    per_unit = BASE_TIME_PER_UNIT * tool_mod * weather_mod * biome_mod * depth_mod
    gather_time = quantity * per_unit if quantity else 3500
    prep_time = 5000 + (0 if has_tool else 5000)

    travel_time = 2000.0
    if isinstance(target, Mapping):
        x, z = target.get("x"), target.get("z")
        if isinstance(x, (int, float)) and isinstance(z, (int, float)):
            travel_time = min(math.sqrt(x ** 2 + z ** 2) * 50, 60000)
    travel_time *= weather_mod

    replant_time = params["field_size"] * 100 if params["replant"] and params["field_size"] else 0
    processing_time = (quantity or 0) * 50 if params["processing"] else 0

    total = prep_time + travel_time + gather_time + replant_time + processing_time + BASE_POST_TIME
    return {
        "total": int(round(total)),
        "breakdown": {
            "preparation": int(round(prep_time)),
            "travel": int(round(travel_time)),
            "gathering": int(round(gather_time)),
            "replanting": int(round(replant_time)),
            "processing": int(round(processing_time)),
            "storage": BASE_POST_TIME,
        },
        "modifiers": {"tool": tool_mod, "weather": weather_mod, "biome": biome_mod, "yLevel": depth_mod},
    }


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------

def plan_gather_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    params = extract_gather_parameters(request)
    env = analyze_environment(request, ctx)
    check = check_inventory_requirements(params, ctx)
    hazards = assess_environmental_hazards(params["profile"], env, check["tool_condition"])
    recommendations = generate_safety_recommendations(hazards)

    steps: List[Step] = []
    serious = [h for h in hazards if h["severity"] in ("critical", "high")]
    if serious:
        top = ", ".join(r["action"] for r in recommendations[:3])
        steps.append(
            create_step(
                title="Safety briefing",
                type="preparation",
                description=f"Review hazards and safety measures. Key mitigations: {top}.",
                metadata={"hazards": [h["type"] for h in serious], "safetyMeasures": recommendations},
            )
        )
    steps += _preparation_steps(params, check)
    steps += _harvest_steps(params, check)
    steps += _post_harvest_steps(params)

    duration = calculate_gather_duration(params, check, env, request.target)
    resource = params["resource"]
    tool = params["tool"]
    efficiency = check["tool_efficiency"]

    resources = [resource, tool, *params["backup_tools"]]
    if params["replant_item"]:
        resources.append(params["replant_item"])

    risks: List[str] = []
    if not check["has_primary_tool"]:
        risks.append(f"Missing primary tool ({tool}) could slow gathering significantly.")
    if not check["tool_appropriate"]:
        risks.append(f"Tool {tool} may not be effective for {resource}.")
    if check["needs_replant_supplies"]:
        risks.append(f"Insufficient {params['replant_item']} to fully replant after harvesting.")
    if efficiency < 0.8:
        risks.append(f"Low tool efficiency ({round(efficiency * 100)}%) will increase gathering time.")
    for hazard in hazards:
        if hazard["severity"] == "critical":
            risks.append(f"CRITICAL: {hazard['description']}")
    for hazard in hazards:
        if hazard["severity"] == "high":
            risks.append(hazard["description"])

    optimality = resource_optimality(params["profile"], env)
    y_level = env["y_level"]
    if optimality["biomeOptimal"] is False:
        risks.append(f"{resource} is not optimal for {env['biome']} biome - reduced yields possible.")
    if optimality["yLevelOptimal"] is False:
        risks.append(f"Y-level {y_level} is not optimal for {resource} - consider relocating.")

    notes: List[str] = []
    if y_level is not None:
        category = (env["y_level_info"] or {}).get("category", "unknown")
        notes.append(f"Operating in {env['biome']} biome at Y={y_level} ({category} level).")
    weather = env["weather_profile"]
    if weather["type"] != "clear":
        slowdown = round((1 - weather["movement_modifier"]) * 100)
        notes.append(f"Weather: {weather['type']} - expect {slowdown}% slower movement.")
    if params["weather_sensitive"]:
        notes.append("Avoid harvesting during rain to protect crops.")
    if params["schedule"]:
        notes.append(f"Preferred harvest schedule: {params['schedule']}.")
    if params["harvest_window"]:
        notes.append(f"Aim to harvest during {params['harvest_window']} for peak yields.")

    field_size = params["field_size"]
    if field_size:
        quantity = params["quantity"]
        estimated = quantity or round(params["yield_per_plot"] * field_size)
        biome = env["biome_profile"]
        if biome and params["profile"]["type"] == "crop":
            estimated = round(estimated * biome["crop_growth_rate"])
        if estimated:
            notes.append(f"Expect roughly {estimated} items from {field_size} plots.")
        else:
            notes.append(f"Field area covers approximately {field_size} plots.")

    if efficiency > 2.0:
        notes.append(f"High tool efficiency ({round(efficiency * 100)}%) will speed up gathering.")
    if duration["total"] > 60000:
        notes.append(
            f"Estimated duration: ~{round(duration['total'] / 60000)} minutes "
            f"(gathering: {round(duration['breakdown']['gathering'] / 1000)}s)."
        )

    env_summary = f" in {env['biome']} (Y={y_level})" if y_level is not None else ""
    environment_record = {"biome": env["biome"], "yLevel": y_level, "weather": weather["type"], "optimality": optimality}

    return create_plan(
        task=request,
        summary=f"Gather {resource} at {params['target_description']}{env_summary}.",
        steps=steps,
        estimated_duration=duration["total"],
        resources=[r for r in resources if r and r != UNSPECIFIED_ITEM],
        risks=risks,
        notes=notes,
        metadata={
            "durationBreakdown": duration["breakdown"],
            "safetyRecommendations": recommendations,
            "environmentalContext": environment_record,
            "hazards": [
                {"type": h["type"], "severity": h["severity"], "description": h["description"]}
                for h in hazards
            ],
            "toolEfficiency": efficiency,
            "resourceOptimality": optimality,
        },
    )
