# src/envelope/normalizers.py
"""
Action-keyed metadata normalizers for outbound envelopes.

Each builder maps a free-form metadata bag onto the closed vocabularies
the runtime understands and drops keys whose value would be None.
Unknown actions keep their metadata as given.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Mapping, Optional

from domain.mining import (
    build_hazard_watchers,
    build_mining_operations,
    normalize_hazards,
    normalize_mining_directives,
    normalize_mitigations,
)
from domain.vocab import (
    describe_hazard,
    extract_rally_point,
    infer_resource_from_details,
    is_number,
    normalize_item_descriptor,
    normalize_item_list,
    normalize_mining_strategy,
    normalize_positive_integer,
    normalize_priority_rank,
    normalize_string_array,
    strip_none,
)

CHEST_MODES = ("deposit", "withdraw", "inspect")
INVENTORY_MODES = ("summary", "locate", "count", "missing", "open", "manage")
INVENTORY_VIEWS = ("overview", "hotbar", "equipment", "crafting", "materials")
INVENTORY_SCOPES = ("self", "npc", "chest", "storage", "area")
INVENTORY_PRIORITY_LEVELS = ("critical", "high", "medium", "low", "junk")
COMBAT_STYLES = ("melee", "ranged", "defensive", "support", "balanced")
COMBAT_STYLE_ALIASES = {"tank": "defensive", "healer": "support", "hybrid": "balanced"}
WEAPON_TYPES = ("melee", "ranged", "magic", "hybrid")
ITEM_USAGE_TYPES = ("heal", "buff", "attack", "utility", "tool", "place", "consume", "equip", "interact")
EQUIP_SLOTS = ("main_hand", "off_hand", "head", "chest", "legs", "feet", "hotbar", "accessory")
LOADOUT_PRIORITIES = ("primary", "secondary", "backup")
DIG_STRATEGIES = ("clear", "tunnel", "staircase", "quarry", "strip", "pillar")
EQUIPMENT_GOALS = ("best_defense", "best_attack", "balanced", "specialized")

# details substring -> workstation; first match wins
WORKSTATION_HINTS = (
    ("blast furnace", "blast_furnace"),
    ("furnace", "furnace"),
    ("smith", "smithing_table"),
    ("loom", "loom"),
    ("anvil", "anvil"),
    ("brewing", "brewing_stand"),
    ("stonecutter", "stonecutter"),
)
CRAFT_OUTPUT_PATTERN = re.compile(r"craft(?:ing)?\s+([\w:]+)", re.IGNORECASE)


def _lower(value: Any) -> str:
    return str(value).strip().lower() if value is not None else ""


def _as_list(value: Any) -> List[Any]:
    if not value:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _flag(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _number(value: Any) -> Optional[float]:
    return value if is_number(value) else None


def _first_match(text: str, rules, default):
    for needles, result in rules:
        if any(n in text for n in needles):
            return result
    return default


# ---------------------------------------------------------------------------
# Vocabulary normalizers
# ---------------------------------------------------------------------------

def normalize_chest_mode(mode: Any) -> str:
    value = _lower(mode)
    return value if value in CHEST_MODES else "inspect"


def normalize_inventory_mode(mode: Any) -> str:
    value = _lower(mode)
    if value in INVENTORY_MODES:
        return value
    return {"check": "summary", "find": "locate"}.get(value, "summary")


def normalize_inventory_scope(scope: Any, task: Mapping[str, Any]) -> str:
    value = _lower(scope)
    if value in INVENTORY_SCOPES:
        return value
    target = task.get("target")
    if isinstance(target, Mapping) and target.get("dimension"):
        return "area"
    return "self"


def normalize_inventory_view(view: Any) -> Optional[str]:
    value = _lower(view)
    return value if value in INVENTORY_VIEWS else None


def normalize_inventory_priority_level(priority: Any) -> Optional[str]:
    if not priority:
        return None
    value = _lower(priority)
    if value in INVENTORY_PRIORITY_LEVELS:
        return value
    return _first_match(
        value,
        ((("high",), "high"), (("critical",), "critical"), (("medium", "mid"), "medium"),
         (("low",), "low"), (("junk", "trash"), "junk")),
        None,
    )


def normalize_combat_style(style: Any) -> str:
    value = _lower(style)
    if value in COMBAT_STYLES:
        return value
    return COMBAT_STYLE_ALIASES.get(value, "balanced")


def normalize_weapon_type(weapon_type: Any) -> Optional[str]:
    if not weapon_type:
        return None
    value = _lower(weapon_type)
    if value in WEAPON_TYPES:
        return value
    if "bow" in value:
        return "ranged"
    if "sword" in value or "axe" in value:
        return "melee"
    return value


def normalize_usage_type(usage: Any) -> Optional[str]:
    if not usage:
        return None
    value = _lower(usage)
    if value in ITEM_USAGE_TYPES:
        return value
    return _first_match(
        value,
        (
            (("heal",), "heal"),
            (("buff", "potion"), "buff"),
            (("attack", "weapon"), "attack"),
            (("tool",), "tool"),
            (("place", "build"), "place"),
            (("equip",), "equip"),
            (("consume", "eat"), "consume"),
            (("interact",), "interact"),
        ),
        "utility",
    )


def normalize_equip_slot(slot: Any) -> Optional[str]:
    value = _lower(slot)
    if value in EQUIP_SLOTS:
        return value
    if value in ("weapon", "main"):
        return "main_hand"
    if value in ("offhand", "shield"):
        return "off_hand"
    return None


def normalize_loadout_priority(priority: Any) -> Optional[str]:
    if not priority:
        return None
    value = _lower(priority)
    if value in LOADOUT_PRIORITIES:
        return value
    return _first_match(
        value,
        ((("backup", "spare"), "backup"), (("primary", "main"), "primary"), (("secondary", "alt"), "secondary")),
        None,
    )


def normalize_dig_strategy(strategy: Any) -> Optional[str]:
    if not strategy:
        return None
    value = _lower(strategy)
    if value in DIG_STRATEGIES:
        return value
    return _first_match(
        value,
        (
            (("strip",), "strip"),
            (("stair",), "staircase"),
            (("shaft", "tunnel"), "tunnel"),
            (("quarry",), "quarry"),
            (("pillar",), "pillar"),
            (("clear",), "clear"),
        ),
        value,
    )


def normalize_equipment_goal(goal: Any) -> str:
    value = _lower(goal)
    if value in EQUIPMENT_GOALS:
        return value
    return _first_match(
        value,
        ((("defense", "tank"), "best_defense"), (("attack", "damage"), "best_attack"), (("special",), "specialized")),
        "balanced",
    )


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------

def normalize_target_descriptor(target: Any) -> Optional[Dict[str, Any]]:
    if not target:
        return None
    if isinstance(target, str):
        return {"name": target}
    if not isinstance(target, Mapping):
        return None

    out: Dict[str, Any] = {}
    for key in ("id", "name", "type", "entity"):
        if target.get(key):
            out[key] = str(target[key])

    for source in (target.get("position"), target):
        if isinstance(source, Mapping) and any(source.get(axis) is not None for axis in "xyz"):
            out["position"] = strip_none({axis: _number(source.get(axis)) for axis in "xyz"})
            break

    if not out and target.get("target"):
        return normalize_target_descriptor(target["target"])
    return out or None


def normalize_combat_target(target: Any) -> Any:
    if not target:
        return "unknown"
    if isinstance(target, str):
        return target
    if isinstance(target, Mapping):
        name = target.get("name") or target.get("id") or target.get("entity") or target.get("type") or "unknown"
        return strip_none(
            {
                "name": name,
                "type": target.get("type") or target.get("category") or "entity",
                "level": target.get("level") or None,
            }
        )
    return "unknown"


def normalize_support_plan(support: Any) -> List[str]:
    if isinstance(support, bool):
        return ["provide_cover"] if support else []
    if isinstance(support, (list, tuple)):
        return [str(entry) for entry in support if entry]
    if isinstance(support, str) and support.strip():
        return [support.strip()]
    return []


def normalize_combat_loadout(loadout: Any, preferred, backup, healing) -> Optional[Dict[str, Any]]:
    if not isinstance(loadout, Mapping):
        if preferred or backup or healing:
            return strip_none(
                {"preferredWeapons": preferred or None, "backupWeapons": backup or None, "healingItems": healing or None}
            )
        return None

    out = dict(loadout)
    if not out.get("preferredWeapons") and preferred:
        out["preferredWeapons"] = preferred
    if not out.get("backupWeapons") and backup:
        out["backupWeapons"] = backup
    if not out.get("healingItems") and healing:
        out["healingItems"] = healing
    if out.get("priority"):
        out["priority"] = normalize_loadout_priority(out["priority"])
    if isinstance(out.get("strategy"), str):
        out["strategy"] = out["strategy"].lower()
    return strip_none(out)


def normalize_inventory_focus(focus: Any) -> List[Dict[str, Any]]:
    out = []
    for entry in _as_list(focus):
        if isinstance(entry, str):
            out.append({"item": entry})
        elif isinstance(entry, Mapping):
            name = entry.get("item") or entry.get("id") or entry.get("name")
            descriptor = strip_none(
                {
                    "item": str(name) if name else None,
                    "tag": str(entry["tag"]) if entry.get("tag") else None,
                    "note": entry.get("note") or None,
                }
            )
            if descriptor:
                out.append(descriptor)
    return out


def normalize_inventory_priority_entry(entry: Any) -> Optional[Dict[str, Any]]:
    if not entry:
        return None
    if isinstance(entry, str):
        return {"item": entry, "priority": "high"}
    if not isinstance(entry, Mapping):
        return None

    name = entry.get("item") or entry.get("id") or entry.get("name")
    out = strip_none(
        {
            "item": str(name) if name else None,
            "tag": str(entry["tag"]) if entry.get("tag") else None,
            "category": str(entry["category"]) if entry.get("category") else None,
            "priority": normalize_inventory_priority_level(entry.get("priority")),
        }
    )
    for key in ("minCount", "maxCount", "desired", "desiredCount"):
        value = entry.get(key)
        if is_number(value) and value >= 0:
            out[key] = value
    if entry.get("actions"):
        out["actions"] = normalize_string_array(entry["actions"])
    return out or None


def normalize_inventory_filter(entry: Any) -> Optional[Dict[str, Any]]:
    if not entry:
        return None
    if isinstance(entry, str):
        return {"tag": entry[4:]} if entry.startswith("tag:") else {"item": entry}
    if not isinstance(entry, Mapping):
        return None
    out = strip_none(
        {
            "item": entry.get("item") or entry.get("id") or entry.get("name") or None,
            "tag": entry.get("tag") or None,
            "minCount": _number(entry.get("minCount")),
            "maxCount": _number(entry.get("maxCount")),
            "preferred": True if entry.get("preferred") else None,
        }
    )
    return out or None


def normalize_dig_area(area: Any, task: Mapping[str, Any]) -> Dict[str, Any]:
    if not isinstance(area, Mapping):
        return strip_none({"shape": "clear", "origin": extract_rally_point(task.get("target"))})

    out = strip_none(
        {
            "shape": normalize_dig_strategy(area.get("shape") or area.get("type") or "clear") or "clear",
            "origin": extract_rally_point(area.get("origin") or task.get("target")),
            "depth": _number(area.get("depth")),
            "levels": _number(area.get("levels")),
            "bounds": area.get("bounds") or None,
        }
    )
    dimensions = area.get("dimensions")
    if isinstance(dimensions, Mapping):
        out["dimensions"] = {
            key: dimensions[key] for key in ("width", "height", "length", "radius") if is_number(dimensions.get(key))
        }
    return out


def normalize_resource_descriptor(resource: Any) -> Optional[Dict[str, Any]]:
    if not resource:
        return None
    if isinstance(resource, str):
        return {"block": resource, "priority": "primary"}
    if not isinstance(resource, Mapping):
        return None
    block = (resource.get("block") or resource.get("ore") or resource.get("material")
             or resource.get("id") or resource.get("name") or resource.get("tag"))
    if not block:
        return None
    quantity = resource.get("quantity") if resource.get("quantity") is not None else resource.get("count")
    return strip_none(
        {
            "block": block,
            "priority": normalize_priority_rank(resource.get("priority")),
            "quantity": normalize_positive_integer(quantity, None),
            "tag": resource.get("tag"),
            "depthRange": resource.get("depthRange"),
            "note": resource.get("note") or None,
        }
    )


def normalize_mining_target(target: Any) -> Optional[Dict[str, Any]]:
    base = normalize_resource_descriptor(target)
    if base is None or not isinstance(target, Mapping):
        return base
    avoid = target.get("avoidHazards")
    base.pop("depthRange", None)
    base.pop("tag", None)
    base.update(
        strip_none(
            {
                "minDepth": _number(target.get("minDepth")),
                "maxDepth": _number(target.get("maxDepth")),
                "requiresSilkTouch": _flag(target.get("requiresSilkTouch")),
                "avoidHazards": [str(h) for h in avoid if h] if isinstance(avoid, (list, tuple)) else None,
                "path": target.get("path") or None,
            }
        )
    )
    return base


def infer_envelope_resource(details: Any) -> Optional[Dict[str, Any]]:
    """Namespaced resource ("minecraft:diamond") named in free-form details."""
    found = infer_resource_from_details(details)
    if found is None:
        return None
    return {"block": found if ":" in found else f"minecraft:{found}", "priority": "primary"}


# ---------------------------------------------------------------------------
# Action builders
# ---------------------------------------------------------------------------

def build_chest_metadata(metadata: Mapping[str, Any], task: Mapping[str, Any], auto_close: bool) -> Dict[str, Any]:
    return strip_none(
        {
            "mode": normalize_chest_mode(metadata.get("mode")),
            "items": normalize_item_list(metadata.get("items")) if isinstance(metadata.get("items"), list) else [],
            "autoClose": metadata["autoClose"] if isinstance(metadata.get("autoClose"), bool) else auto_close,
            "note": metadata.get("note") or None,
        }
    )


def infer_craft_output(metadata: Mapping[str, Any], task: Mapping[str, Any]) -> str:
    if metadata.get("output"):
        return metadata["output"]
    match = CRAFT_OUTPUT_PATTERN.search(str(task.get("details") or ""))
    return match.group(1) if match else "unknown"


def resolve_workstation(explicit: Any, task: Mapping[str, Any]) -> str:
    if explicit:
        return explicit
    details = str(task.get("details") or "").lower()
    return next((station for hint, station in WORKSTATION_HINTS if hint in details), "crafting_table")


def build_craft_metadata(metadata: Mapping[str, Any], task: Mapping[str, Any]) -> Dict[str, Any]:
    recipe = metadata.get("recipe")
    if not isinstance(recipe, list):
        recipe = metadata.get("ingredients") if isinstance(metadata.get("ingredients"), list) else []
    return strip_none(
        {
            "output": infer_craft_output(metadata, task),
            "quantity": normalize_positive_integer(metadata.get("quantity"), 1),
            "workstation": resolve_workstation(metadata.get("workstation"), task),
            "recipe": normalize_item_list(recipe),
            "tools": normalize_item_list(metadata.get("tools")),
            "priority": normalize_inventory_priority_level(metadata.get("priority")),
            "autoCraft": _flag(metadata.get("autoCraft")),
            "tags": _as_list(metadata.get("tags")),
            "note": metadata.get("note") or None,
        }
    )


def build_combat_metadata(metadata: Mapping[str, Any], task: Mapping[str, Any]) -> Dict[str, Any]:
    target = normalize_combat_target(metadata.get("target") or task.get("details"))
    preferred = normalize_item_list(metadata.get("preferredWeapons"))
    backup = normalize_item_list(metadata.get("backupWeapons"))
    healing = normalize_item_list(metadata.get("healingItems"))
    target_type = metadata.get("targetType") or (target.get("type") if isinstance(target, Mapping) else None)
    return strip_none(
        {
            "target": target,
            "targetType": target_type or "entity",
            "style": normalize_combat_style(metadata.get("style") or metadata.get("strategy")),
            "rallyPoint": extract_rally_point(task.get("target")),
            "weapons": normalize_item_list(metadata.get("weapons")),
            "preferredWeapons": preferred,
            "backupWeapons": backup,
            "potions": normalize_item_list(metadata.get("potions")),
            "healingItems": healing,
            "weaponType": normalize_weapon_type(metadata.get("weaponType")),
            "support": normalize_support_plan(metadata.get("support")),
            "tactics": _as_list(metadata.get("tactics")),
            "priority": metadata.get("priority") or task.get("priority") or "normal",
            "loadout": normalize_combat_loadout(metadata.get("loadout"), preferred, backup, healing),
            "note": metadata.get("note") or None,
        }
    )


def build_inventory_metadata(metadata: Mapping[str, Any], task: Mapping[str, Any]) -> Dict[str, Any]:
    filters = metadata.get("filters")
    return strip_none(
        {
            "mode": normalize_inventory_mode(metadata.get("mode")),
            "scope": normalize_inventory_scope(metadata.get("scope"), task),
            "view": normalize_inventory_view(metadata.get("view")),
            "includeEmpty": metadata["includeEmpty"] if isinstance(metadata.get("includeEmpty"), bool) else False,
            "focus": normalize_inventory_focus(metadata.get("focus")),
            "priorities": [
                p for p in (normalize_inventory_priority_entry(e) for e in _as_list(metadata.get("priorities"))) if p
            ],
            "filters": [f for f in (normalize_inventory_filter(e) for e in filters) if f]
            if isinstance(filters, list)
            else [],
            "summary": metadata.get("summary") or None,
            "note": metadata.get("note") or None,
        }
    )


def build_inventory_open_metadata(metadata: Mapping[str, Any], task: Mapping[str, Any]) -> Dict[str, Any]:
    base = build_inventory_metadata({**metadata, "mode": metadata.get("mode") or "open"}, task)
    base.update(
        strip_none(
            {
                "actions": normalize_string_array(metadata.get("actions")),
                "autoSort": _flag(metadata.get("autoSort")),
                "includeEquipment": _flag(metadata.get("includeEquipment")),
            }
        )
    )
    return base


def build_inventory_management_metadata(metadata: Mapping[str, Any], task: Mapping[str, Any]) -> Dict[str, Any]:
    base = build_inventory_metadata({**metadata, "mode": metadata.get("mode") or "manage"}, task)
    return strip_none(
        {
            "mode": base.get("mode") or "manage",
            "scope": base.get("scope"),
            "view": base.get("view"),
            "focus": base.get("focus"),
            "priorities": base.get("priorities"),
            "includeEmpty": base.get("includeEmpty"),
            "filters": base.get("filters"),
            "restock": normalize_item_list(metadata.get("restock")),
            "discard": normalize_item_list(metadata.get("discard")),
            "ensure": normalize_item_list(metadata.get("ensure")),
            "actions": normalize_string_array(metadata.get("actions")),
            "autoSort": _flag(metadata.get("autoSort")),
            "lockSlots": normalize_string_array(metadata.get("lockSlots")),
            "summary": base.get("summary"),
            "note": metadata.get("note") or base.get("note"),
        }
    )


def build_use_item_metadata(metadata: Mapping[str, Any], task: Mapping[str, Any]) -> Dict[str, Any]:
    return strip_none(
        {
            "item": normalize_item_descriptor(metadata.get("item")),
            "usage": normalize_usage_type(metadata.get("usage") or metadata.get("purpose")),
            "target": normalize_target_descriptor(metadata.get("target"))
            or normalize_target_descriptor(task.get("target")),
            "quantity": normalize_positive_integer(metadata.get("quantity"), None),
            "cooldown": _number(metadata.get("cooldown")),
            "healAmount": _number(metadata.get("healAmount")),
            "conditions": normalize_string_array(metadata.get("conditions")),
            "fallbacks": normalize_item_list(metadata.get("fallbacks")),
            "note": metadata.get("note") or None,
        }
    )


def build_equip_metadata(metadata: Mapping[str, Any], task: Mapping[str, Any]) -> Dict[str, Any]:
    return strip_none(
        {
            "npc": task.get("npcId") or None,
            "slot": normalize_equip_slot(metadata.get("slot")),
            "item": normalize_item_descriptor(metadata.get("item")),
            "candidates": normalize_item_list(metadata.get("candidates")),
            "category": metadata.get("category") or None,
            "preferred": normalize_item_list(metadata.get("preferred")),
            "backups": normalize_item_list(metadata.get("backups")),
            "priority": normalize_loadout_priority(metadata.get("priority")),
            "requirements": normalize_string_array(metadata.get("requirements")),
            "note": metadata.get("note") or None,
        }
    )


def build_dig_metadata(metadata: Mapping[str, Any], task: Mapping[str, Any]) -> Dict[str, Any]:
    hazards = normalize_hazards(metadata.get("hazards")) if isinstance(metadata.get("hazards"), list) else []
    directives = normalize_mining_directives(metadata.get("statusDirectives"))
    return strip_none(
        {
            "area": normalize_dig_area(metadata.get("area"), task),
            "depth": _number(metadata.get("depth")),
            "layers": normalize_positive_integer(metadata.get("layers"), None),
            "strategy": normalize_dig_strategy(metadata.get("strategy")),
            "hazards": hazards,
            "mitigation": normalize_mitigations(metadata.get("mitigations")) if isinstance(metadata.get("mitigations"), list)
            else [],
            "tools": normalize_item_list(metadata.get("tools")),
            "directives": directives,
            "watchers": build_hazard_watchers(hazards, directives),
            "note": metadata.get("note") or None,
        }
    )


def build_equipment_assessment(metadata: Mapping[str, Any], task: Mapping[str, Any]) -> Dict[str, Any]:
    target = task.get("target")
    dimension = target.get("dimension") if isinstance(target, Mapping) else None
    return strip_none(
        {
            "goal": normalize_equipment_goal(metadata.get("goal")),
            "criteria": [str(c) for c in _as_list(metadata.get("criteria")) if c],
            "preferredStyle": normalize_combat_style(metadata.get("preferredStyle") or metadata.get("style")),
            "candidates": normalize_item_list(metadata.get("candidates"))
            if isinstance(metadata.get("candidates"), list)
            else [],
            "minimumTier": metadata.get("minimumTier") or None,
            "allowCrafting": _flag(metadata.get("allowCrafting")),
            "origin": metadata.get("origin") or (f"dimension:{dimension}" if dimension else None),
            "note": metadata.get("note") or None,
        }
    )


def _render_location(target: Any) -> str:
    if isinstance(target, Mapping) and all(target.get(axis) is not None for axis in "xyz"):
        return "(" + ", ".join(str(target[axis]) for axis in "xyz") + ")"
    return "the target"


def build_mining_plan(
    resource: Optional[Mapping[str, Any]],
    targets: List[Dict[str, Any]],
    hazards: List[Dict[str, Any]],
    tools: List[Dict[str, Any]],
    directives: Mapping[str, Any],
    watchers: List[Dict[str, Any]],
    strategy: Optional[str],
    deposit: Any,
    task: Mapping[str, Any],
) -> Dict[str, Any]:
    """
    Plan annotation for mine envelopes: the same operation sequence the
    mining planner produces, built from fresh copies of the normalized data.
    """
    primary = resource or (targets[0] if targets else {"block": "target resources"})
    operations = build_mining_operations(
        resource=primary,
        location=_render_location(task.get("target")),
        strategy=strategy,
        hazards=hazards,
        tools=tools,
        deposit=deposit,
        watchers=watchers,
    )
    return {
        "summary": f"Mine {primary.get('block')} while following mitigation plans",
        "operations": operations,
        "directives": directives,
        "hazards": [describe_hazard(h) for h in hazards],
    }


def build_mining_metadata(metadata: Mapping[str, Any], task: Mapping[str, Any]) -> Dict[str, Any]:
    descriptor = next((metadata[k] for k in ("resource", "ore", "block") if metadata.get(k) is not None), None)
    resource = (normalize_resource_descriptor(descriptor) if descriptor
                else infer_envelope_resource(task.get("details")))

    raw_targets = metadata.get("targets")
    if isinstance(raw_targets, list):
        targets = [t for t in (normalize_mining_target(v) for v in raw_targets) if t]
    else:
        targets = [normalize_mining_target(resource)] if resource else []

    hazards = normalize_hazards(metadata.get("hazards")) if isinstance(metadata.get("hazards"), list) else []
    if isinstance(metadata.get("mitigations"), list):
        mitigation = normalize_mitigations(metadata["mitigations"])
    else:
        mitigation = normalize_mitigations(metadata.get("safetyPlan"))
    tools = normalize_item_list(metadata.get("tools")) if isinstance(metadata.get("tools"), list) else []
    directives = normalize_mining_directives(metadata.get("statusDirectives"))
    watchers = build_hazard_watchers(hazards, directives)
    strategy = normalize_mining_strategy(metadata.get("strategy"))
    deposit = metadata.get("deposit") or metadata.get("dropoff") or None

    return strip_none(
        {
            "resource": resource,
            "targets": targets,
            "hazards": hazards,
            "mitigation": mitigation,
            "tools": tools,
            "priority": normalize_priority_rank(metadata.get("priority") or task.get("priority")),
            "strategy": strategy,
            "deposit": deposit,
            "lightLevel": metadata.get("lightLevel"),
            "tunnelPlan": metadata.get("tunnelPlan") or None,
            "scout": metadata.get("scout") or None,
            "directives": directives,
            "watchers": watchers,
            "plan": build_mining_plan(resource, targets, hazards, tools, directives, watchers, strategy, deposit, task),
            "note": metadata.get("note") or None,
        }
    )


MetadataBuilder = Callable[[Mapping[str, Any], Mapping[str, Any]], Dict[str, Any]]

METADATA_BUILDERS: Dict[str, MetadataBuilder] = {
    "open_inventory": build_inventory_open_metadata,
    "craft": build_craft_metadata,
    "mine": build_mining_metadata,
    "fight": build_combat_metadata,
    "check_inventory": build_inventory_metadata,
    "manage_inventory": build_inventory_management_metadata,
    "use_item": build_use_item_metadata,
    "equip_item": build_equip_metadata,
    "dig": build_dig_metadata,
    "assess_equipment": build_equipment_assessment,
}
