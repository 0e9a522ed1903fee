# src/domain/climbing.py
"""
Climbable blocks, vertical movement speeds and scaffolding patterns.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

from .lookup import lookup_key


CLIMBABLE_TYPES: Mapping[str, Mapping[str, Any]] = {
    "ladder": {
        "type": "ladder",
        "climbSpeed": 0.15,
        "requiresSupport": True,
        "supportSide": "back",
        "crafting": {"materials": ("stick",), "quantity": {"stick": 7}, "yield": 3},
    },
    "vine": {"type": "vine", "climbSpeed": 0.15, "requiresSupport": False, "supportSide": "any", "natural": True},
    "weeping_vines": {
        "type": "vine",
        "climbSpeed": 0.15,
        "requiresSupport": False,
        "supportSide": "top",
        "direction": "downward",
        "dimension": "nether",
        "natural": True,
    },
    "twisting_vines": {
        "type": "vine",
        "climbSpeed": 0.15,
        "requiresSupport": False,
        "supportSide": "bottom",
        "direction": "upward",
        "dimension": "nether",
        "natural": True,
    },
    "scaffolding": {
        "type": "scaffolding",
        "climbSpeed": 0.2,
        "requiresSupport": False,
        "maxUnsupportedHeight": 6,
        "quickDescend": True,
        "crafting": {"materials": ("bamboo", "string"), "quantity": {"bamboo": 6, "string": 1}, "yield": 6},
    },
}

# blocks per second
CLIMB_SPEEDS = {
    "climbing_up": 2.35,
    "climbing_down": 2.35,
    "scaffolding_up": 2.5,
    "scaffolding_down_sneak": 6.0,
    "water_column_up": 3.5,
    "water_column_down": 13.0,
}
EXHAUSTION_PER_BLOCK = 0.01
HIGH_FALL_RISK_HEIGHT = 20
WATER_LANDING_S = 2

LADDER_YIELD = 3
LADDER_STICKS = 7
INVALID_LADDER_WALLS = ("carpet", "torch", "sign", "banner")

# scaffolding
SUPPORT_RANGE = 6
MAX_STACK_HEIGHT = 64
HIGH_ALTITUDE = 20
SCAFFOLDING_YIELD = 6
BAMBOO_PER_CRAFT = 6
STRING_PER_CRAFT = 1

SCAFFOLDING_PATTERNS: Mapping[str, Mapping[str, Any]] = {
    "simple_tower": {
        "type": "vertical",
        "buildTime": 0.5,
        "difficulty": "easy",
        "steps": (
            "Look straight up",
            "Hold jump and place scaffolding rapidly",
            "Scaffolding will stack automatically",
            "Sneak to descend quickly",
        ),
    },
    "working_platform": {
        "type": "horizontal",
        "buildTime": 1,
        "difficulty": "easy",
        "steps": (
            "Build central tower to working height",
            "Place scaffolding outward in all directions",
            f"Maximum {SUPPORT_RANGE} blocks from nearest support",
            "Add support columns if extending further",
        ),
    },
    "bridge_with_supports": {
        "type": "bridge",
        "buildTime": 2,
        "supportSpacing": SUPPORT_RANGE,
        "difficulty": "medium",
        "steps": (
            f"Build support column every {SUPPORT_RANGE} blocks",
            "Each column should reach bridge height",
            "Connect columns with horizontal scaffolding",
            "Build 2-wide for comfortable passage",
        ),
    },
    "spiral_staircase": {
        "type": "spiral",
        "buildTime": 3,
        "difficulty": "hard",
        "steps": (
            "Build center column",
            "Place scaffolding in spiral pattern around center",
            "Each rotation should gain 2-3 blocks height",
            "Add railings for safety",
        ),
    },
    "mob_proof_cage": {
        "type": "cage",
        "buildTime": 5,
        "difficulty": "medium",
        "steps": (
            "Build 4 corner towers to full height",
            "Connect corners with scaffolding walls",
            "Add roof using scaffolding",
            "Leave entrance gap with scaffolding door",
            "Mobs cannot spawn on scaffolding",
        ),
    },
    "waterlogged_column": {
        "type": "water",
        "buildTime": 1,
        "difficulty": "easy",
        "waterBuckets": 1,
        "steps": (
            "Place scaffolding column from bottom to top",
            "Pour water bucket at top",
            "Water flows down through scaffolding",
            "Creates climbable water column",
        ),
    },
}

SCAFFOLDING_SYNONYMS = {
    "tower": "simple_tower",
    "platform": "working_platform",
    "bridge": "bridge_with_supports",
    "spiral": "spiral_staircase",
    "staircase": "spiral_staircase",
    "cage": "mob_proof_cage",
    "waterlogged": "waterlogged_column",
    "water": "waterlogged_column",
}

# purpose -> (pattern, default dimensions, description)
SCAFFOLDING_DESIGNS: Mapping[str, Mapping[str, Any]] = {
    "quick_ascent": {"pattern": "simple_tower", "dimensions": {"height": 20}, "description": "Fastest way to build up"},
    "work_platform": {
        "pattern": "working_platform",
        "dimensions": {"width": 3, "length": 3},
        "description": "Stable platform for building",
    },
    "bridge": {"pattern": "bridge_with_supports", "dimensions": {"length": 20}, "description": "Cross gaps safely"},
    "safe_ascent": {
        "pattern": "spiral_staircase",
        "dimensions": {"height": 20},
        "description": "Safest way up with gradual climb",
    },
    "mob_shelter": {
        "pattern": "mob_proof_cage",
        "dimensions": {"width": 3, "length": 3, "height": 3},
        "description": "Temporary shelter from mobs",
    },
}


def get_climbable_info(name: Any) -> Optional[Dict[str, Any]]:
    key = lookup_key(CLIMBABLE_TYPES, name, substring=False)
    return {"name": key, **CLIMBABLE_TYPES[key]} if key else None


def resolve_scaffolding_pattern(name: Any) -> Optional[str]:
    return lookup_key(SCAFFOLDING_PATTERNS, name, synonyms=SCAFFOLDING_SYNONYMS)


def _dim(dimensions: Mapping[str, Any], key: str, default: int) -> int:
    value = dimensions.get(key)
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def calculate_scaffolding_needs(pattern: Any, dimensions: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Blocks and build seconds for a pattern; unknown patterns return an error record."""
    key = resolve_scaffolding_pattern(pattern)
    if key is None:
        return {"error": "Unknown pattern", "availablePatterns": list(SCAFFOLDING_PATTERNS)}

    dims = dict(dimensions or {})
    profile = SCAFFOLDING_PATTERNS[key]
    result: Dict[str, Any] = {"pattern": key, "type": profile["type"], "difficulty": profile["difficulty"]}

    if key == "simple_tower":
        needed = _dim(dims, "height", 10)
    elif key == "working_platform":
        needed = _dim(dims, "width", 3) * _dim(dims, "length", 3)
    elif key == "bridge_with_supports":
        length = _dim(dims, "length", 20)
        height = _dim(dims, "height", 10)
        supports = math.ceil(length / profile["supportSpacing"])
        needed = length * 2 + supports * height
        result["supports"] = supports
    elif key == "spiral_staircase":
        needed = _dim(dims, "height", 20) * 8
    elif key == "mob_proof_cage":
        width = _dim(dims, "width", 3)
        length = _dim(dims, "length", 3)
        height = _dim(dims, "height", 3)
        needed = 2 * (width + length) * height + width * length
    else:
        needed = _dim(dims, "height", 10)
        result["waterBuckets"] = profile["waterBuckets"]

    result["scaffoldingNeeded"] = needed
    result["buildTime"] = needed * profile["buildTime"]
    return result
