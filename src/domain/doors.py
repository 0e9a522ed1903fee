# src/domain/doors.py
"""
Doors, trapdoors and fence gates.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .lookup import lookup_key


WOOD_TYPES = (
    "oak", "spruce", "birch", "jungle", "acacia", "dark_oak",
    "mangrove", "cherry", "bamboo", "crimson", "warped",
)


def _wooden(kind: str) -> Dict[str, Any]:
    profile: Dict[str, Any] = {
        "type": kind,
        "material": "wood",
        "openMethod": "hand_or_redstone",
        "stackSize": 64,
    }
    if kind == "door":
        profile["zombieBreakable"] = True
    if kind == "trapdoor":
        profile["waterloggable"] = True
    return profile


DOOR_TYPES: Dict[str, Mapping[str, Any]] = {}
for _wood in WOOD_TYPES:
    DOOR_TYPES[f"{_wood}_door"] = _wooden("door")
    DOOR_TYPES[f"{_wood}_trapdoor"] = _wooden("trapdoor")
    DOOR_TYPES[f"{_wood}_fence_gate"] = _wooden("fence_gate")
DOOR_TYPES["iron_door"] = {
    "type": "door",
    "material": "iron",
    "openMethod": "redstone_only",
    "zombieBreakable": False,
    "requiresPower": True,
    "stackSize": 64,
}
DOOR_TYPES["iron_trapdoor"] = {
    "type": "trapdoor",
    "material": "iron",
    "openMethod": "redstone_only",
    "waterloggable": True,
    "requiresPower": True,
    "stackSize": 64,
}

DOOR_SYNONYMS = {
    "door": "oak_door",
    "wooden_door": "oak_door",
    "trapdoor": "oak_trapdoor",
    "gate": "oak_fence_gate",
    "fence_gate": "oak_fence_gate",
}

MAX_INTERACTION_DISTANCE = 4
INTERACTION_TIME_S = 0.15
SAFE_LIGHT_LEVEL = 7

REDSTONE_MECHANISMS: Mapping[str, Mapping[str, Any]] = {
    "button": {"placement": "adjacent_to_door", "duration": 1.0, "materials": ("button",), "automatic": False},
    "lever": {"placement": "adjacent_to_door", "duration": "until_toggled", "materials": ("lever",), "automatic": False},
    "pressure_plate": {
        "placement": "in_front_of_door",
        "duration": "while_pressed",
        "materials": ("pressure_plate",),
        "automatic": True,
        "warning": "Mobs may trigger pressure plate",
    },
    "tripwire": {
        "placement": "in_front_of_door_with_hooks",
        "duration": "while_triggered",
        "materials": ("tripwire_hook", "string"),
        "automatic": True,
        "complexity": "medium",
    },
}

AIRLOCK_PATTERN = {
    "description": "Two doors with space between for mob-proof entry",
    "doorCount": 2,
    "spacing": 2,
    "mechanism": "manual_or_pressure_plate",
}


def get_door_info(name: Any) -> Optional[Dict[str, Any]]:
    key = lookup_key(DOOR_TYPES, name, synonyms=DOOR_SYNONYMS, substring=False)
    return {"name": key, **DOOR_TYPES[key]} if key else None


def is_door(name: Any) -> bool:
    return get_door_info(name) is not None


def can_open_by_hand(name: Any) -> bool:
    door = get_door_info(name)
    return bool(door) and door["openMethod"] == "hand_or_redstone"


def requires_redstone(name: Any) -> bool:
    door = get_door_info(name)
    return bool(door) and door["openMethod"] == "redstone_only"
