# src/domain/displays.py
"""
Item frames, armor stands, poses and showcase layouts.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from .lookup import lookup_key


ROTATION_DEGREES = 45
ROTATION_STEPS = 8
ARMOR_SLOTS = (("helmet", "head"), ("chestplate", "chest"), ("leggings", "legs"), ("boots", "feet"))

# items with no single inventory identity; listed, never inventory-checked
GENERIC_MATERIALS = frozenset({"armor_pieces", "weapon", "building_blocks"})

DISPLAY_ITEMS: Mapping[str, Mapping[str, Any]] = {
    "item_frame": {
        "type": "wall_display",
        "rotations": ROTATION_STEPS,
        "canGlow": False,
        "placement": ("wall", "floor", "ceiling"),
        "recipe": "8 sticks + 1 leather",
    },
    "glow_item_frame": {
        "type": "wall_display",
        "rotations": ROTATION_STEPS,
        "canGlow": True,
        "placement": ("wall", "floor", "ceiling"),
        "recipe": "1 item frame + 1 glow ink sac",
    },
    "armor_stand": {
        "type": "entity_display",
        "slots": ("head", "chest", "legs", "feet", "mainHand", "offHand"),
        "canPose": True,
        "canBeInvisible": True,
        "placement": ("floor",),
        "recipe": "6 sticks + 1 stone slab",
    },
}

DISPLAY_SYNONYMS = {"frame": "item_frame", "glow_frame": "glow_item_frame", "stand": "armor_stand"}


def _pose(head, body, left_arm, right_arm, left_leg, right_leg) -> Dict[str, Dict[str, int]]:
    parts = ("head", "body", "leftArm", "rightArm", "leftLeg", "rightLeg")
    return {
        part: dict(zip("xyz", angles))
        for part, angles in zip(parts, (head, body, left_arm, right_arm, left_leg, right_leg))
    }


ARMOR_STAND_POSES: Mapping[str, Mapping[str, Mapping[str, int]]] = {
    "default": _pose((0, 0, 0), (0, 0, 0), (-10, 0, -10), (-15, 0, 10), (-1, 0, -1), (1, 0, 1)),
    "walking": _pose((0, 10, 0), (0, 0, 0), (-20, 0, 0), (20, 0, 0), (30, 0, 0), (-30, 0, 0)),
    "running": _pose((10, 0, 0), (10, 0, 0), (-40, 0, 0), (40, 0, 0), (50, 0, 0), (-50, 0, 0)),
    "sneaking": _pose((20, 0, 0), (20, 0, 0), (-10, 0, -5), (-10, 0, 5), (40, 0, -5), (40, 0, 5)),
    "blocking": _pose((0, 0, 0), (0, 0, 0), (-90, 45, 0), (-90, 0, 0), (0, 0, 0), (0, 0, 0)),
    "pointing": _pose((0, 20, 0), (0, 10, 0), (-10, 0, 0), (-90, 0, 0), (0, 0, 0), (5, 0, 0)),
    "saluting": _pose((0, 0, 0), (0, 0, 0), (-10, 0, 0), (-110, 30, 0), (0, 0, 0), (0, 0, 0)),
    "dabbing": _pose((0, -20, 0), (0, -10, 0), (-10, 180, 0), (-110, 20, 0), (0, 0, 0), (0, 0, 0)),
    "sitting": _pose((0, 0, 0), (0, 0, 0), (-80, -10, 0), (-80, 10, 0), (90, 10, 0), (90, -10, 0)),
}

SHOWCASE_TYPES: Mapping[str, Mapping[str, Any]] = {
    "item_showcase": {
        "display": "item_frame",
        "purpose": "Show off rare items, tools, or trophies",
        "placement": "wall",
        "buildSteps": (
            "Choose wall location with good lighting",
            "Place item frames in desired pattern",
            "Right-click frames to add items",
            "Right-click to rotate items to desired angle",
        ),
    },
    "map_wall": {
        "display": "item_frame",
        "purpose": "Create large map displays",
        "placement": "wall_grid",
        "buildSteps": (
            "Fill frames with maps in correct order",
            "Maps should be numbered/connected for large display",
        ),
    },
    "armor_display": {
        "display": "armor_stand",
        "purpose": "Showcase armor sets",
        "placement": "floor",
        "buildSteps": (
            "Place armor stand on floor",
            "Right-click with helmet to equip head",
            "Right-click with chestplate to equip chest",
            "Right-click with leggings to equip legs",
            "Right-click with boots to equip feet",
            "Optional: Add weapon to hand",
        ),
    },
    "statue": {
        "display": "armor_stand",
        "purpose": "Create decorative statues",
        "placement": "floor",
        "buildSteps": (
            "Place armor stand on floor",
            "Equip armor/items as desired",
            "Use pose editor or commands to set pose",
            "Optional: Make invisible (requires commands)",
            "Add lighting or pedestal",
        ),
    },
    "shop_display": {
        "display": "both",
        "purpose": "Display items for trading",
        "placement": "mixed",
        "buildSteps": (
            "Place item frames for product display",
            "Place armor stands for armor showcase",
            "Add signs with prices",
            "Add chest for purchases",
            "Light area well",
        ),
    },
}


def get_display_info(name: Any) -> Optional[Dict[str, Any]]:
    key = lookup_key(DISPLAY_ITEMS, name, synonyms=DISPLAY_SYNONYMS, substring=False)
    return {"name": key, **DISPLAY_ITEMS[key]} if key else None


def get_armor_stand_pose(name: Any) -> Optional[Dict[str, Any]]:
    key = lookup_key(ARMOR_STAND_POSES, name, substring=False)
    return {part: dict(angles) for part, angles in ARMOR_STAND_POSES[key].items()} if key else None


def calculate_item_frame_grid(rows: int, columns: int, start: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Frames laid left to right, top to bottom, from `start` on one wall."""
    origin = start or {}
    x0, y0, z0 = (origin.get(axis, 0) for axis in ("x", "y", "z"))
    frames: List[Dict[str, Any]] = [
        {
            "position": {"x": x0 + col, "y": y0 - row, "z": z0},
            "row": row,
            "column": col,
            "index": row * columns + col,
        }
        for row in range(rows)
        for col in range(columns)
    ]
    return {
        "rows": rows,
        "columns": columns,
        "totalFrames": rows * columns,
        "frames": frames,
        "dimensions": {"width": columns, "height": rows},
        "materials": {"item_frame": rows * columns},
    }
