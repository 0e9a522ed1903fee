# src/domain/redstone.py
"""
Interactive redstone components and reference circuit designs.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .doors import WOOD_TYPES
from .lookup import lookup_key


MAX_POWER = 15
INTERACTION_DISTANCE = 4
ACTIVATION_TIME_S = 0.1
DUST_ESTIMATE = 10


def _button(material: str, seconds: float) -> Dict[str, Any]:
    return {
        "type": "button",
        "activation": "press",
        "state": "momentary",
        "powerOutput": MAX_POWER,
        "activationDuration": seconds,
        "staysActivated": False,
        "canBePlacedOn": ("wall", "floor"),
        "material": material,
    }


def _plate(material: str) -> Dict[str, Any]:
    return {
        "type": "pressure_plate",
        "activation": "step_on",
        "state": "weight_activated",
        "powerOutput": MAX_POWER,
        "deactivationDelay": 0.25,
        "activatedBy": ("player", "mob", "item"),
        "canBePlacedOn": ("floor",),
        "material": material,
    }


REDSTONE_COMPONENTS: Dict[str, Mapping[str, Any]] = {
    "lever": {
        "type": "switch",
        "activation": "toggle",
        "state": "on_off",
        "powerOutput": MAX_POWER,
        "staysActivated": True,
        "canBePlacedOn": ("wall", "floor", "ceiling"),
    },
    "stone_button": _button("stone", 1.0),
    "polished_blackstone_button": _button("stone", 1.0),
    "stone_pressure_plate": _plate("stone"),
    "polished_blackstone_pressure_plate": _plate("stone"),
    "light_weighted_pressure_plate": {
        **_plate("gold"),
        "state": "weight_sensitive",
        "powerOutput": "variable",
        "deactivationDelay": 0,
        "maxEntities": 15,
    },
    "heavy_weighted_pressure_plate": {
        **_plate("iron"),
        "state": "weight_sensitive",
        "powerOutput": "variable",
        "deactivationDelay": 0,
        "maxEntities": 150,
    },
    "tripwire_hook": {
        "type": "tripwire",
        "activation": "walk_through",
        "state": "triggered",
        "powerOutput": MAX_POWER,
        "deactivationDelay": 0.15,
        "requiresString": True,
        "maxDistance": 40,
        "canBePlacedOn": ("wall",),
    },
    "redstone_torch": {
        "type": "power_source",
        "activation": "always_on",
        "state": "constant",
        "powerOutput": MAX_POWER,
        "staysActivated": True,
        "canBePlacedOn": ("wall", "floor"),
        "burnout": True,
    },
    "redstone_block": {
        "type": "power_source",
        "activation": "always_on",
        "state": "constant",
        "powerOutput": MAX_POWER,
        "staysActivated": True,
        "canBePlacedOn": ("any",),
    },
    "target": {
        "type": "target",
        "activation": "hit_by_projectile",
        "state": "momentary",
        "powerOutput": "variable",
        "activationDuration": 1.0,
        "staysActivated": False,
        "canBePlacedOn": ("any",),
    },
    "lectern": {
        "type": "comparator_output",
        "activation": "book_page_turn",
        "state": "analog",
        "powerOutput": "variable",
        "requiresBook": True,
        "canBePlacedOn": ("floor",),
    },
    "daylight_detector": {
        "type": "sensor",
        "activation": "daylight",
        "state": "analog",
        "powerOutput": "variable",
        "invertible": True,
        "canBePlacedOn": ("floor",),
    },
    "observer": {
        "type": "sensor",
        "activation": "block_update",
        "state": "momentary",
        "powerOutput": MAX_POWER,
        "activationDuration": 0.1,
        "canBePlacedOn": ("any",),
    },
    "lightning_rod": {
        "type": "sensor",
        "activation": "lightning_strike",
        "state": "momentary",
        "powerOutput": MAX_POWER,
        "activationDuration": 0.4,
        "canBePlacedOn": ("floor",),
    },
    "sculk_sensor": {
        "type": "sensor",
        "activation": "vibration",
        "state": "momentary",
        "powerOutput": "variable",
        "activationDuration": 2.0,
        "range": 8,
        "canBePlacedOn": ("any",),
    },
}
for _wood in WOOD_TYPES:
    # wooden buttons stay pressed longer
    REDSTONE_COMPONENTS[f"{_wood}_button"] = _button("wood", 1.5)
    REDSTONE_COMPONENTS[f"{_wood}_pressure_plate"] = _plate("wood")

COMPONENT_SYNONYMS = {
    "button": "stone_button",
    "pressure_plate": "stone_pressure_plate",
    "plate": "stone_pressure_plate",
    "tripwire": "tripwire_hook",
    "switch": "lever",
}

CAN_ACTIVATE: Mapping[str, tuple] = {
    "switch": ("door", "trapdoor", "piston", "dispenser", "dropper", "hopper", "redstone_lamp", "tnt", "note_block"),
    "button": ("door", "trapdoor", "piston", "dispenser", "dropper", "note_block"),
    "pressure_plate": ("door", "trapdoor", "piston", "dispenser", "dropper", "tnt"),
    "tripwire": ("dispenser", "dropper", "piston", "tnt", "note_block"),
}

CIRCUIT_USE_CASES: Mapping[str, Mapping[str, Any]] = {
    "door_opener": {
        "components": ("button", "lever"),
        "placement": "adjacent_to_door",
        "purpose": "Open doors (especially iron doors)",
        "complexity": "easy",
        "steps": (
            "Place button or lever adjacent to door",
            "Optionally add redstone dust for remote activation",
        ),
    },
    "trap_trigger": {
        "components": ("pressure_plate", "tripwire"),
        "placement": "floor_or_passage",
        "purpose": "Detect entity movement",
        "complexity": "medium",
        "steps": (
            "Place pressure plate or tripwire hooks",
            "Connect to dispenser or piston with redstone",
            "Load dispenser with arrows or fill piston chamber",
        ),
    },
    "hidden_entrance": {
        "components": ("lever", "button"),
        "placement": "concealed",
        "purpose": "Secret door activation",
        "complexity": "hard",
        "steps": (
            "Conceal lever or button near entrance",
            "Run redstone behind walls to piston door",
            "Test activation and ensure door closes properly",
        ),
    },
    "automatic_farm": {
        "components": ("observer", "redstone_torch"),
        "placement": "near_crops",
        "purpose": "Detect crop growth and harvest",
        "complexity": "hard",
        "steps": (
            "Place observers facing crops",
            "Connect observers to pistons with redstone",
            "Add water channels for crop collection",
        ),
    },
    "mob_trap": {
        "components": ("pressure_plate", "piston", "redstone"),
        "placement": "trap_area",
        "purpose": "Activate pistons to kill mobs",
        "complexity": "medium",
        "steps": (
            "Place pressure plate in the trap area",
            "Run redstone to the pistons",
            "Test the trap from a safe distance",
        ),
    },
    "night_light": {
        "components": ("daylight_detector", "redstone_lamp"),
        "placement": "outdoor_or_indoor",
        "purpose": "Automatic lighting at night",
        "complexity": "easy",
        "steps": (
            "Place daylight detector",
            "Right-click to invert (optional)",
            "Connect to redstone lamps",
        ),
    },
}


def get_component_info(name: Any) -> Optional[Dict[str, Any]]:
    key = lookup_key(REDSTONE_COMPONENTS, name, synonyms=COMPONENT_SYNONYMS, substring=False)
    return {"name": key, **REDSTONE_COMPONENTS[key]} if key else None


def is_redstone_component(name: Any) -> bool:
    return get_component_info(name) is not None
