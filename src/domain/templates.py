# src/domain/templates.py
"""
Building templates and the dimension-based material calculator.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

from .lookup import lookup, table_key


BUILDING_TEMPLATES: Mapping[str, Mapping[str, Any]] = {
    # Residential
    "basic_house": {
        "name": "Basic House",
        "category": "residential",
        "dimensions": {"length": 7, "width": 7, "height": 5},
        "materials": {
            "oak_planks": 220,
            "glass_pane": 16,
            "oak_door": 1,
            "torch": 12,
            "crafting_table": 1,
            "bed": 1,
        },
        "difficulty": "easy",
        "estimated_duration": 18000,
        "roof_style": "pitched",
        "interior": True,
        "features": ("lighting", "basic_furnishings"),
    },
    "cottage": {
        "name": "Cottage",
        "category": "residential",
        "dimensions": {"length": 9, "width": 7, "height": 6},
        "materials": {
            "spruce_planks": 280,
            "cobblestone": 120,
            "glass_pane": 20,
            "spruce_door": 1,
            "torch": 16,
            "furnace": 1,
            "chest": 3,
        },
        "difficulty": "easy",
        "estimated_duration": 24000,
        "roof_style": "pitched",
        "interior": True,
        "foundation": "stone",
        "features": ("chimney", "storage", "lighting"),
    },
    # Defensive
    "watchtower": {
        "name": "Watchtower",
        "category": "defensive",
        "dimensions": {"length": 5, "width": 5, "height": 15},
        "materials": {"stone_bricks": 450, "ladder": 14, "torch": 20, "fence": 16},
        "difficulty": "medium",
        "estimated_duration": 45000,
        "requires_scaffolding": True,
        "threat_level": "medium",
        "features": ("elevated_platform", "perimeter_fence"),
    },
    "castle_tower": {
        "name": "Castle Tower",
        "category": "defensive",
        "dimensions": {"length": 9, "width": 9, "height": 20},
        "materials": {
            "stone_bricks": 900,
            "cobblestone": 400,
            "oak_planks": 120,
            "iron_door": 1,
            "ladder": 18,
            "torch": 30,
        },
        "difficulty": "hard",
        "estimated_duration": 90000,
        "requires_scaffolding": True,
        "foundation": "stone",
        "roof_style": "battlements",
        "features": ("arrow_slits", "spiral_stairs", "battlements"),
    },
    "fortress_wall": {
        "name": "Fortress Wall",
        "category": "defensive",
        "dimensions": {"length": 30, "width": 3, "height": 8},
        "materials": {"stone_bricks": 720, "cobblestone": 200, "torch": 15},
        "difficulty": "medium",
        "estimated_duration": 50000,
        "features": ("battlements", "guard_posts"),
    },
    # Agricultural
    "basic_farm": {
        "name": "Basic Farm",
        "category": "agricultural",
        "dimensions": {"length": 9, "width": 9, "height": 0},
        "materials": {
            "dirt": 81,
            "water_bucket": 1,
            "fence": 36,
            "fence_gate": 1,
            "hoe": 1,
            "seeds": 64,
        },
        "difficulty": "easy",
        "estimated_duration": 15000,
        "terrain": "flat",
        "level_ground": True,
        "features": ("irrigation", "fencing"),
    },
    "redstone_farm": {
        "name": "Automated Redstone Farm",
        "category": "agricultural",
        "dimensions": {"length": 15, "width": 15, "height": 4},
        "materials": {
            "redstone": 64,
            "observer": 12,
            "hopper": 8,
            "dispenser": 4,
            "chest": 4,
            "building_blocks": 300,
        },
        "difficulty": "expert",
        "estimated_duration": 60000,
        "includes_redstone": True,
        "level_ground": True,
        "features": ("automation", "collection_system", "water_distribution"),
    },
    # Storage / utility
    "warehouse": {
        "name": "Warehouse",
        "category": "storage",
        "dimensions": {"length": 15, "width": 12, "height": 6},
        "materials": {
            "oak_planks": 450,
            "stone": 200,
            "chest": 27,
            "torch": 24,
            "oak_door": 2,
        },
        "difficulty": "medium",
        "estimated_duration": 55000,
        "interior": True,
        "roof_style": "flat",
        "features": ("organized_storage", "lighting", "large_entrance"),
    },
    "enchanting_room": {
        "name": "Enchanting Room",
        "category": "utility",
        "dimensions": {"length": 7, "width": 7, "height": 5},
        "materials": {
            "obsidian": 4,
            "diamond": 2,
            "book": 15,
            "bookshelf": 15,
            "carpet": 30,
            "torch": 8,
        },
        "difficulty": "medium",
        "estimated_duration": 35000,
        "interior": True,
        "features": ("bookshelves", "enchanting_table", "ambient_lighting"),
    },
    # Monumental / transport
    "nether_portal_hub": {
        "name": "Nether Portal Hub",
        "category": "monumental",
        "dimensions": {"length": 11, "width": 11, "height": 8},
        "materials": {
            "obsidian": 40,
            "stone_bricks": 400,
            "nether_bricks": 100,
            "torch": 20,
            "flint_and_steel": 1,
        },
        "difficulty": "hard",
        "estimated_duration": 65000,
        "environment": "overworld_nether",
        "features": ("multiple_portals", "safe_room", "storage"),
    },
    "sky_bridge": {
        "name": "Sky Bridge",
        "category": "monumental",
        "dimensions": {"length": 100, "width": 3, "height": 0},
        "materials": {"cobblestone": 300, "fence": 200, "torch": 25},
        "difficulty": "medium",
        "estimated_duration": 40000,
        "requires_scaffolding": True,
        "threat_level": "low",
        "features": ("safety_railings", "lighting"),
    },
}

# Template property -> task metadata key it fills when absent.
TEMPLATE_METADATA_KEYS = {
    "roof_style": "roofStyle",
    "foundation": "foundation",
    "difficulty": "difficulty",
    "requires_scaffolding": "requiresScaffolding",
    "includes_redstone": "includesRedstone",
    "interior": "interior",
    "level_ground": "levelGround",
    "terrain": "terrain",
    "threat_level": "threatLevel",
    "environment": "environment",
    "features": "features",
}

_TEMPLATE_NAMES = {table_key(t["name"]): key for key, t in BUILDING_TEMPLATES.items()}


def find_building_template(name: Any) -> Optional[Mapping[str, Any]]:
    """Template by key or display name ("Basic House"); None when unknown."""
    if not name or not isinstance(name, str):
        return None
    return lookup(BUILDING_TEMPLATES, name, synonyms=_TEMPLATE_NAMES, substring=False)


def apply_template(metadata: Mapping[str, Any], template: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge template defaults under `metadata`.

    Explicit metadata always wins; the input mapping is not modified.
    """
    merged = dict(metadata)
    dims = template.get("dimensions") or {}
    if dims and "dimensions" not in merged and "length" not in merged:
        merged["length"] = dims["length"]
        merged["width"] = dims["width"]
        if dims.get("height", 0) > 0:
            merged.setdefault("height", dims["height"])

    if template.get("materials") and not merged.get("materials"):
        merged["materials"] = [
            {"name": name, "count": count} for name, count in template["materials"].items()
        ]

    for prop, key in TEMPLATE_METADATA_KEYS.items():
        value = template.get(prop)
        if value is None:
            continue
        if key == "interior":
            merged.setdefault(key, value)
        elif not merged.get(key):
            merged[key] = list(value) if isinstance(value, tuple) else value
    return merged


# ---------------------------------------------------------------------------
# Material calculator
# ---------------------------------------------------------------------------

MATERIAL_OVERHEAD = 0.1


def estimate_walls(
    length: int,
    width: int,
    height: int,
    door_count: int = 1,
    window_count: Optional[int] = None,
    hollow: bool = True,
) -> Dict[str, int]:
    """Perimeter wall blocks minus the inner ring and door / window openings."""
    perimeter = 2 * (length + width)
    wall_area = perimeter * height
    blocks = wall_area - (2 * (length - 2) + 2 * (width - 2)) * height if hollow else wall_area
    windows = window_count if window_count is not None else perimeter // 4
    net = max(0, blocks - door_count * 2 - windows * 2)
    return {"walls": net, "doors": door_count, "windows": windows, "corners": height * 4}


def estimate_roof(length: int, width: int, style: str = "flat") -> int:
    area = length * width
    styles = {
        "flat": area,
        "pitched": math.ceil(area * 1.5),
        "steep": math.ceil(area * 1.8),
        "dome": math.ceil(math.pi * (max(length, width) / 2) ** 2 * 1.2),
        "battlements": math.ceil(1.5 * 2 * (length + width)),
    }
    return styles.get(style, styles["flat"])


def estimate_foundation(length: int, width: int, depth: int = 1) -> int:
    return length * width * depth


def estimate_floors(length: int, width: int, floors: int = 1) -> int:
    return max(1, length - 2) * max(1, width - 2) * floors


def estimate_lighting(length: int, width: int, height: int = 1) -> int:
    """One torch per 8 floor blocks, per 4-block storey."""
    floors = max(1, height // 4)
    return math.ceil(length * width / 8 * floors)


def with_overhead(amount: int, buffer: float = MATERIAL_OVERHEAD) -> int:
    # Round first so 60 * 1.1 stays 66 instead of ceiling 66.00000000000001.
    return math.ceil(round(amount * (1 + buffer), 6))


def generate_material_estimate(
    length: int,
    width: int,
    height: Optional[int] = None,
    roof_style: str = "pitched",
    foundation: bool = True,
    floors: int = 1,
    material: str = "oak_planks",
    roof_material: str = "oak_planks",
    foundation_material: str = "cobblestone",
    include_interior: bool = True,
) -> Optional[Dict[str, Any]]:
    """
    Bill of materials for a rectangular building.

    Returns `{"materials": {name: count}, "breakdown": {...}}` or None for
    non-positive footprints.
    """
    if not length or not width or length <= 0 or width <= 0:
        return None
    height = height if height is not None else 5

    walls = estimate_walls(length, width, height, door_count=2, window_count=(length + width) // 3)
    roof = estimate_roof(length, width, roof_style)
    foundation_blocks = estimate_foundation(length, width, 1)
    flooring = estimate_floors(length, width, max(1, floors - 1))
    lighting = estimate_lighting(length, width, height)

    materials: Dict[str, int] = {material: with_overhead(walls["walls"])}
    materials[roof_material] = materials.get(roof_material, 0) + with_overhead(roof)
    if foundation and foundation_material:
        materials[foundation_material] = materials.get(foundation_material, 0) + with_overhead(foundation_blocks)
    if include_interior and flooring > 0:
        materials[material] = materials.get(material, 0) + with_overhead(flooring)
    materials["torch"] = lighting
    materials["glass_pane"] = walls["windows"]
    materials[f"{material.split('_')[0]}_door"] = walls["doors"]

    return {
        "materials": materials,
        "breakdown": {
            "walls": walls["walls"],
            "roof": roof,
            "foundation": foundation_blocks,
            "flooring": flooring,
            "lighting": lighting,
        },
    }
