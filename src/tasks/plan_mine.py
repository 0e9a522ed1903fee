# src/tasks/plan_mine.py
"""
Mining planner.

Combines three sources into one ordered plan:

  - support supplies and tool telemetry (gear check, replacement steps)
  - mining style selection (task hint > method > context > autonomy > default)
  - the hazard directive / watcher system shared with the envelope adapter
    (strategy, survey, mitigate, extract, deposit operations)
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from domain.mining import (
    DEFAULT_SUPPORT_SUPPLIES,
    MINING_STYLE_OPTIONS,
    build_hazard_watchers,
    build_mining_operations,
    find_mining_style,
    normalize_hazards,
    normalize_mining_directives,
)
from domain.vocab import (
    infer_resource_from_details,
    normalize_item_list,
    normalize_mining_strategy,
    normalize_priority_rank,
)
from spec.types import UNSPECIFIED_ITEM, Plan, PlanContext, Step, TaskRequest

from .helpers import (
    create_plan,
    create_step,
    describe_target,
    extract_environmental_signals,
    format_requirement_list,
    normalize_item_name,
    resolve_quantity,
    resolve_tool_integrity,
)


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------

def _requirement_list(values: Any) -> List[Dict[str, Any]]:
    if not isinstance(values, (list, tuple)):
        return []
    out: List[Dict[str, Any]] = []
    for item in values:
        if isinstance(item, str):
            out.append({"name": normalize_item_name(item)})
        elif isinstance(item, Mapping):
            entry: Dict[str, Any] = {"name": normalize_item_name(item.get("name") or item.get("item"))}
            count = resolve_quantity(item.get("count", item.get("quantity")), None)
            if count:
                entry["count"] = count
            out.append(entry)
    return out


def _resolve_resource(request: TaskRequest) -> str:
    explicit = request.option("resource", "ore", "block")
    if explicit:
        return normalize_item_name(explicit)
    inferred = infer_resource_from_details(request.details)
    if inferred:
        return inferred
    return normalize_item_name(request.details)


def _resolve_tools(request: TaskRequest) -> List[str]:
    names: List[str] = []
    listed = request.option("tools")
    if isinstance(listed, str):
        listed = [listed]
    for entry in listed or []:
        name = normalize_item_name(entry)
        if name != UNSPECIFIED_ITEM and name not in names:
            names.append(name)
    single = request.option("tool")
    if single:
        name = normalize_item_name(single)
        if name not in names:
            names.insert(0, name)
    return names


def determine_mining_style(
    request: TaskRequest,
    ctx: PlanContext,
    method_hint: Optional[str],
    depth: Optional[int],
    quantity: Optional[int],
    hazards: List[str],
) -> Dict[str, Any]:
    """Pick a mining style and record why it was chosen."""
    preferences = ctx.get("preferences", default={})
    strategy = ctx.get("strategy", default={})
    hint = (
        request.option("style", "pattern", "layout")
        or (preferences.get("mineStyle") or preferences.get("miningStyle") if isinstance(preferences, Mapping) else None)
        or ctx.get("mineStyle")
        or (strategy.get("miningStyle") if isinstance(strategy, Mapping) else None)
    )

    chosen = find_mining_style(hint)
    source = "task" if chosen else None
    reasons: List[str] = []

    if chosen is None and method_hint:
        chosen = find_mining_style(method_hint)
        source = "method" if chosen else None

    if chosen is None:
        chosen = find_mining_style(ctx.get("desiredStyle") or ctx.environment.get("mineStyle"))
        source = "context" if chosen else None

    hazard_set = set(hazards)
    if chosen is None and quantity is not None and quantity >= 192:
        chosen = find_mining_style("strip mine")
        source = "autonomy"
        reasons.append(f"Large quota ({quantity}) benefits from strip mining coverage.")

    if chosen is None and depth is not None:
        if depth <= 16:
            chosen = find_mining_style("vertical shaft")
            source = "autonomy"
            reasons.append(f"Deep target level (Y{depth}) favors a vertical shaft for speed.")
        elif depth < 40:
            chosen = find_mining_style("staircase")
            source = "autonomy"
            reasons.append(f"Moderate depth (Y{depth}) supports a staircase descent.")

    if chosen is None and hazard_set & {"surface", "ravine", "open pit"}:
        chosen = find_mining_style("quarry")
        source = "autonomy"
        reasons.append("Surface exposure suggests an open quarry approach.")

    if chosen is None and hazard_set & {"gravel", "sand"}:
        chosen = find_mining_style("staircase")
        source = "autonomy"
        reasons.append("Loose gravel hazards call for a controlled staircase dig.")

    if chosen is None:
        chosen = find_mining_style("staircase")
        source = "default"
        reasons.append("Defaulting to staircase for balanced access and safety.")

    style = dict(chosen)
    style["rationale"] = " ".join(reasons) or style.get("rationale", "")
    style["source"] = source
    return style


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------

def plan_mine_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)
    inventory = ctx.inventory

    target_description = describe_target(request.target)
    resource = _resolve_resource(request)
    tools = _resolve_tools(request)
    tool = tools[0] if tools else "pickaxe"
    backup_tool = request.option("backupTool", "secondaryTool")
    backup_tool = normalize_item_name(backup_tool) if backup_tool else None
    drop_off = request.option("dropOff", "deposit", "dropoff")
    quantity = resolve_quantity(request.option("quantity", "count"), None)
    depth = resolve_quantity(request.option("depth", "yLevel"), None)

    raw_hazards = request.option("hazards") or []
    if not isinstance(raw_hazards, (list, tuple)):
        raw_hazards = [raw_hazards]
    hazard_names = [
        normalize_item_name(h.get("type") or h.get("name") if isinstance(h, Mapping) else h)
        for h in raw_hazards
    ]
    hazards = normalize_hazards(raw_hazards)
    directives = normalize_mining_directives(request.option("directives"))
    watchers = build_hazard_watchers(hazards, directives)

    strategy = normalize_mining_strategy(request.option("strategy", "method"))
    reinforcements = _requirement_list(request.option("reinforcements"))
    supplies = [dict(s) for s in DEFAULT_SUPPORT_SUPPLIES] + _requirement_list(request.option("supplies"))
    anchor_point = request.option("anchorPoint", "respawnAnchor")
    escort = request.option("escort")

    signals = extract_environmental_signals(ctx)
    style = determine_mining_style(
        request, ctx, request.option("method", "strategy"), depth, quantity, hazard_names
    )
    method = style.get("method") or "branch"
    integrity = resolve_tool_integrity(tool, ctx)
    backup_integrity = resolve_tool_integrity(backup_tool, ctx) if backup_tool else None

    missing_support = [
        s for s in supplies
        if s.get("name") and not inventory.has(s["name"], s.get("count") or 1)
    ]
    has_primary = inventory.has(tool)
    has_backup = inventory.has(backup_tool) if backup_tool else True
    percent = integrity["percent"]

    steps: List[Step] = []

    # -- preparation -------------------------------------------------------
    supply_summary = format_requirement_list(supplies) or "support supplies"
    if missing_support:
        missing_summary = format_requirement_list(missing_support)
        stock_description = (
            f"Restock essential supplies ({missing_summary})."
            if missing_summary
            else "Restock essential supplies before descending."
        )
    else:
        stock_description = f"Confirm support supplies are packed: {supply_summary}."
    steps.append(
        create_step(
            "Stock supplies",
            "inventory",
            stock_description,
            {"supplies": supplies, "missing": missing_support},
        )
    )

    if reinforcements:
        steps.append(
            create_step(
                "Stage reinforcements",
                "preparation",
                f"Pack building blocks for shoring: {format_requirement_list(reinforcements) or 'reinforcement blocks'}.",
                {"reinforcements": reinforcements},
            )
        )

    if percent is not None:
        suffix = f" (~{round(percent * 100)}% durability)"
    elif integrity["durability"] is not None:
        suffix = f" ({integrity['durability']} durability remaining)"
    else:
        suffix = ""
    if integrity["broken"]:
        gear_description = (
            f"Primary {tool} is marked as broken; coordinate a replacement immediately before entering the mine."
        )
    elif has_primary:
        gear_description = f"Inspect {tool}{suffix} and equip it before entering the mine."
    else:
        gear_description = f"Retrieve or craft a suitable {tool} before entering the mine."
    steps.append(
        create_step("Gear check", "preparation", gear_description, {"tool": tool, "backupTool": backup_tool})
    )

    if integrity["broken"]:
        steps.append(
            create_step(
                "Replace primary tool",
                "crafting",
                f"Tool monitoring flagged the {tool} as broken. Craft or retrieve a replacement before proceeding underground.",
                {"tool": tool, "trigger": "durability_zero", "origin": integrity["origin"], "autoCraft": True},
            )
        )
    elif percent is not None and percent < 0.2:
        steps.append(
            create_step(
                "Stage backup tool",
                "preparation",
                f"Primary {tool} durability is low (~{round(percent * 100)}%). Stage materials or a backup before descent.",
                {"tool": tool, "durability": percent},
            )
        )

    if backup_tool and backup_integrity and backup_integrity["broken"]:
        steps.append(
            create_step(
                "Restore backup tool",
                "crafting",
                f"Backup {backup_tool} is unavailable; craft or retrieve a replacement to cover failures mid-run.",
                {"tool": backup_tool, "trigger": "backup_tool_broken", "origin": backup_integrity["origin"]},
            )
        )

    # -- planning / survey -------------------------------------------------
    rationale = style.get("rationale")
    steps.append(
        create_step(
            "Select mining style",
            "planning",
            f"Default to the {style['label']} pattern{': ' + rationale if rationale else ''}. "
            "Confirm with players if a different style is requested.",
            {
                "style": style["id"],
                "method": method,
                "rationale": rationale or None,
                "selectionSource": style["source"],
                "options": MINING_STYLE_OPTIONS,
            },
        )
    )

    resource_entry = {"block": resource, "priority": normalize_priority_rank(request.option("priority") or request.priority)}
    operations = build_mining_operations(
        resource_entry,
        target_description,
        strategy,
        hazards,
        normalize_item_list(tools),
        drop_off,
        watchers,
    )
    operation_steps = {op["step"]: op for op in operations}

    if strategy:
        steps.append(
            create_step(
                "Apply strategy",
                "planning",
                operation_steps["strategy"]["description"],
                {"operation": "strategy", "strategy": strategy},
            )
        )

    steps.append(
        create_step(
            "Survey site",
            "safety",
            operation_steps["survey"]["description"],
            {"operation": "survey", "hazards": operation_steps["survey"].get("hazards")},
        )
    )

    if signals["lowLight"]:
        steps.append(
            create_step(
                "Stabilize lighting",
                "safety",
                f"Bridge detected low light (level {signals['lightLevel']}); place torches every few blocks before digging deeper.",
                {"trigger": "low_light", "lightLevel": signals["lightLevel"]},
                command="place_torches",
            )
        )

    # -- travel ------------------------------------------------------------
    steps.append(
        create_step(
            "Navigate",
            "movement",
            f"Travel to {target_description} using safe pathing and align the entrance with the {style['label']} layout.",
        )
    )

    has_bed = inventory.has("bed")
    if anchor_point or has_bed:
        steps.append(
            create_step(
                "Secure exit",
                "safety",
                f"Set spawn or anchor at {anchor_point} and mark a clear return path."
                if anchor_point
                else "Place a temporary bed near the mine entrance and mark the route back.",
                {"anchor": anchor_point or "bed"},
            )
        )

    if escort:
        steps.append(
            create_step(
                "Coordinate escort",
                "coordination",
                f"Meet with {escort} before descent and assign overwatch positions.",
                {"escort": escort},
            )
        )

    if depth and depth < 20:
        steps.append(
            create_step(
                "Stabilize shaft",
                "safety",
                f"Install support beams and ladder access while descending to Y{depth}.",
            )
        )

    for op in operations:
        if op["step"] != "mitigate":
            continue
        steps.append(
            create_step(
                "Mitigate hazard",
                "safety",
                op["description"],
                {
                    "operation": "mitigate",
                    "hazard": op["hazard"],
                    "mitigation": op.get("mitigation"),
                    "response": op.get("response"),
                },
            )
        )

    lava_threat = signals["lava"] or "lava" in hazard_names or "lava pool" in hazard_names
    if lava_threat:
        steps.append(
            create_step(
                "Lava contingency",
                "safety",
                "Bridge detected active lava nearby. Deploy water or non-flammable blocks immediately and retreat if containment fails."
                if signals["lava"]
                else "Carry a water bucket or fire resistance potion and block off exposed lava before mining.",
                {
                    "trigger": "lava_detected" if signals["lava"] else "lava_expected",
                    "recommended": ["water bucket", "non-flammable blocks"],
                },
                command="retreat",
            )
        )

    if signals["gravel"] or "gravel" in hazard_names or "gravel pocket" in hazard_names:
        steps.append(
            create_step(
                "Gravel collapse plan",
                "safety",
                "Bridge detected unstable gravel overhead; brace ceilings, dig from the top down, and retreat if collapse begins."
                if signals["gravel"]
                else "Expect gravel pockets; brace ceilings and dig from above to prevent suffocation.",
                {"trigger": "gravel_detected" if signals["gravel"] else "gravel_expected"},
                command="retreat" if signals["gravel"] else None,
            )
        )

    # -- primary action ----------------------------------------------------
    extract = operation_steps["extract"]
    if quantity:
        mine_description = (
            f"Mine approximately {quantity} blocks of {resource} using the {style['label']} pattern ({method})."
        )
    else:
        mine_description = (
            f"Mine the {resource} following the {style['label']} pattern ({method}), "
            "reinforcing ceilings and sealing hazards."
        )
    steps.append(
        create_step(
            "Extract",
            "action",
            f"{extract['description']}. {mine_description}",
            {
                "operation": "extract",
                "method": method,
                "quantity": quantity,
                "style": style["id"],
                "tools": extract.get("tools"),
            },
        )
    )

    if reinforcements:
        steps.append(
            create_step(
                "Shore tunnels",
                "safety",
                "Place reinforcement blocks along long corridors and above exposed ceilings as you mine.",
                {"reinforcements": reinforcements},
            )
        )

    if request.option("requiresSilkTouch"):
        steps.append(
            create_step("Apply silk touch", "quality", f"Use a silk touch tool on {resource} blocks that should stay intact.")
        )

    # -- post-action -------------------------------------------------------
    steps.append(
        create_step(
            "Collect drops",
            "collection",
            f"Collect the dropped items and ensure inventory space for {resource}.",
        )
    )

    if request.option("autoSmelt") or "ore" in resource:
        steps.append(
            create_step(
                "Process ore",
                "processing",
                f"Smelt or blast {resource} at a furnace array before storage if time allows.",
                {"smelt": True},
            )
        )

    if drop_off:
        steps.append(
            create_step(
                "Deposit",
                "storage",
                operation_steps["deposit"]["description"],
                {"operation": "deposit", "container": drop_off},
            )
        )

    steps.append(
        create_step(
            "Log findings",
            "report",
            f"Report yields ({inventory.count(resource)} currently on hand) and note any hazards or new branches discovered.",
        )
    )

    # -- duration / resources / risks / notes ------------------------------
    estimated = 11000 + (quantity * 500 if quantity else 4000) + int(style.get("duration_modifier") or 0)

    resources = [resource, *tools] if tools else [resource, tool]
    resources += [s["name"] for s in supplies]
    resources += [r["name"] for r in reinforcements]
    resources += list(style.get("recommended_supplies") or [])

    risks: List[str] = []
    if "cave" in hazard_names:
        risks.append("Unlit caves may spawn hostile mobs.")
    if "gravel" in hazard_names:
        risks.append("Falling gravel or sand could suffocate the miner.")
    for hazard in hazards:
        if hazard["severity"] == "critical":
            risks.append(f"Critical {hazard['type']} hazard expected near the work site.")
    if signals["lowLight"]:
        risks.append("Low light flagged by the bridge could allow hostile mobs to spawn.")
    if signals["lava"]:
        risks.append("Active lava detected; ensure retreat routes remain clear.")
    if signals["gravel"]:
        risks.append("Detected loose gravel overhead may collapse unexpectedly.")
    if backup_tool and not has_backup:
        risks.append(f"No functional backup {backup_tool} is available if the primary breaks.")
    if integrity["broken"]:
        risks.append(f"Primary {tool} is currently unusable and must be replaced.")
    elif percent is not None and percent < 0.2:
        risks.append(f"Primary {tool} durability is low (~{round(percent * 100)}%).")
    if backup_tool and backup_integrity and backup_integrity["broken"]:
        risks.append(f"Backup {backup_tool} is broken; there is no redundancy if the primary fails.")
    if not reinforcements and ("ravine" in hazard_names or "unstable ceiling" in hazard_names):
        risks.append("Lack of reinforcement blocks increases collapse risk.")
    if style.get("risk"):
        risks.append(style["risk"])

    notes: List[str] = []
    if request.option("beacon"):
        notes.append(f"Activate haste beacon at {request.option('beacon')}.")
    if request.option("chunkBoundary"):
        notes.append(f"Stay within chunk {request.option('chunkBoundary')} to avoid missing the lode.")
    if reinforcements:
        notes.append("Use staged reinforcements to seal side tunnels once depleted.")
    if escort:
        notes.append(f"Escort {escort} provides backup; maintain line-of-sight while mining.")
    notes.append(f"Selected style: {style['label']}{': ' + rationale if rationale else ''}.")
    notes.append(f"Style selection source: {style['source']}.")
    if signals["lowLight"]:
        notes.append("Bridge flagged insufficient lighting; prioritize torch placement.")
    if signals["lava"]:
        notes.append("Retreat command armed for lava detection events.")
    if signals["gravel"]:
        notes.append("Monitor gravel sensors and shore ceilings before tunneling upward.")
    if integrity["origin"]:
        notes.append(f"Tool telemetry source: {integrity['origin']}.")
    if backup_integrity and backup_integrity["origin"]:
        notes.append(f"Backup tool telemetry source: {backup_integrity['origin']}.")

    return create_plan(
        request,
        f"Mine {resource} at {target_description} using the {style['label']} pattern.",
        steps=steps,
        estimated_duration=estimated,
        resources=resources,
        risks=risks,
        notes=notes,
        metadata={
            "strategy": strategy,
            "style": style["id"],
            "directives": directives,
            "watchers": watchers,
            "operations": operations,
        },
    )
