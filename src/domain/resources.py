# src/domain/resources.py
"""
Gatherable resources and harvesting tools.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

from .lookup import lookup, lookup_entry, table_key


def _crop(seed: str, stages: int, yield_per_plot: float, processing, weather_sensitive=False):
    return {
        "type": "crop",
        "primary_tool": "hoe",
        "harvest_tool": "hand",
        "replantable": True,
        "seed": seed,
        "maturity_stages": stages,
        "maturity_time": 24000,
        "yield_per_plot": yield_per_plot,
        "processing_options": tuple(processing),
        "weather_sensitive": weather_sensitive,
    }


def _log(sapling: str, per_tree: int):
    return {
        "type": "wood",
        "primary_tool": "axe",
        "backup_tools": ("hand",),
        "replantable": True,
        "seed": sapling,
        "maturity_time": 60000,
        "yield_per_tree": per_tree,
        "processing_options": ("planks", "charcoal"),
        "weather_sensitive": False,
    }


def _block(min_tier: str, processing=()):
    return {
        "type": "mining",
        "primary_tool": "pickaxe",
        "min_tool_tier": min_tier,
        "replantable": False,
        "yield_per_block": 1,
        "processing_options": tuple(processing),
        "weather_sensitive": False,
    }


RESOURCE_PROFILES: Mapping[str, Mapping[str, Any]] = {
    "wheat": _crop("wheat_seeds", 8, 1.5, ("bread", "hay_bale"), weather_sensitive=True),
    "carrots": _crop("carrot", 8, 2.5, ()),
    "potatoes": _crop("potato", 8, 2.5, ("baked_potato",)),
    "beetroots": _crop("beetroot_seeds", 4, 1.5, ("beetroot_soup",)),
    "oak_log": _log("oak_sapling", 6),
    "birch_log": _log("birch_sapling", 6),
    "spruce_log": _log("spruce_sapling", 8),
    "stone": _block("wooden", ("smooth_stone",)),
    "cobblestone": _block("wooden", ("stone", "stone_bricks")),
    "coal_ore": _block("wooden"),
    "iron_ore": _block("stone", ("iron_ingot",)),
    "gold_ore": _block("iron", ("gold_ingot",)),
    "diamond_ore": _block("iron"),
}

GENERIC_RESOURCE: Mapping[str, Any] = {
    "type": "generic",
    "primary_tool": "hand",
    "backup_tools": (),
    "replantable": False,
    "yield_per_block": 1,
    "processing_options": (),
    "weather_sensitive": False,
}


def get_resource_profile(name: Any) -> Dict[str, Any]:
    """Profile copy carrying the requested `name`; unknown resources are generic."""
    found = lookup_entry(RESOURCE_PROFILES, name)
    profile = found[1] if found else GENERIC_RESOURCE
    return {**profile, "name": table_key(name) or "resources"}


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------

_TIER_STATS = {
    "wooden": (2.0, 59),
    "stone": (3.0, 131),
    "iron": (4.0, 250),
    "diamond": (6.0, 1561),
}
_AXE_EFFICIENCY = {
    "wooden": {"wood": 1.0, "leaves": 0.5},
    "stone": {"wood": 1.5, "leaves": 0.6},
    "iron": {"wood": 2.0, "leaves": 0.7},
    "diamond": {"wood": 3.0, "leaves": 0.8},
}
_PICKAXE = {
    "wooden": (1.0, ("stone", "coal_ore")),
    "stone": (1.5, ("stone", "coal_ore", "iron_ore")),
    "iron": (2.0, ("stone", "coal_ore", "iron_ore", "gold_ore", "diamond_ore")),
    "diamond": (3.0, ("stone", "coal_ore", "iron_ore", "gold_ore", "diamond_ore", "obsidian")),
}


def _build_tool_profiles() -> Dict[str, Dict[str, Any]]:
    tools: Dict[str, Dict[str, Any]] = {}
    for tier, (speed, durability) in _TIER_STATS.items():
        tools[f"{tier}_axe"] = {
            "type": "axe",
            "tier": tier,
            "speed_multiplier": speed,
            "durability": durability,
            "efficiency": dict(_AXE_EFFICIENCY[tier]),
            "durability_per_use": 1,
        }
        mining, mineable = _PICKAXE[tier]
        tools[f"{tier}_pickaxe"] = {
            "type": "pickaxe",
            "tier": tier,
            "speed_multiplier": speed,
            "durability": durability,
            "efficiency": {"mining": mining},
            "durability_per_use": 1,
            "mineable": mineable,
        }
        tools[f"{tier}_hoe"] = {
            "type": "hoe",
            "tier": tier,
            "speed_multiplier": 1.0,
            "durability": durability,
            "efficiency": {"crop": 1.0},
            "durability_per_use": 1,
        }
    tools["hand"] = {
        "type": "hand",
        "tier": "none",
        "speed_multiplier": 1.0,
        "durability": math.inf,
        "efficiency": {"wood": 0.2, "mining": 0.1, "crop": 1.0},
        "durability_per_use": 0,
    }
    return tools


TOOL_PROFILES: Mapping[str, Mapping[str, Any]] = _build_tool_profiles()


def get_tool_profile(name: Any) -> Mapping[str, Any]:
    """Exact or normalized match only; "pickaxe" alone is not a tool tier."""
    return lookup(TOOL_PROFILES, name, substring=False) or TOOL_PROFILES["hand"]


def calculate_tool_efficiency(tool: Mapping[str, Any], resource: Mapping[str, Any]) -> float:
    """Per-type efficiency (1.0 when unlisted) times the tool's speed multiplier."""
    efficiency = tool.get("efficiency", {}).get(resource.get("type"), 1.0)
    return efficiency * tool.get("speed_multiplier", 1.0)


def is_tool_appropriate(tool: Mapping[str, Any], resource: Mapping[str, Any]) -> bool:
    kind = resource.get("type")
    if kind == "mining" and tool.get("type") == "pickaxe":
        return resource.get("name") in tool.get("mineable", ())
    if kind == "wood":
        return tool.get("type") in ("axe", "hand")
    return True


def calculate_durability_cost(tool: Mapping[str, Any], quantity: int) -> int:
    if math.isinf(tool.get("durability", math.inf)):
        return 0
    return int(tool.get("durability_per_use", 1) * quantity)


def assess_tool_condition(item: Any) -> Optional[Dict[str, Any]]:
    """
    `{status, percentage}` for an inventory item with durability telemetry.

    good > 75% > fair > 40% > low > 15% > critical.
    """
    if item is None:
        return None
    durability = item.durability if item.durability is not None else item.max_durability
    maximum = item.max_durability if item.max_durability is not None else durability
    if durability is None or not maximum:
        return {"status": "unknown", "percentage": None}
    percentage = durability / maximum * 100
    if percentage > 75:
        status = "good"
    elif percentage > 40:
        status = "fair"
    elif percentage > 15:
        status = "low"
    else:
        status = "critical"
    return {"status": status, "percentage": percentage}
