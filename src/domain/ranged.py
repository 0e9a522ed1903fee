# src/domain/ranged.py
"""
Bows, crossbows, arrows and ranged tactics.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .lookup import lookup_key, table_key


BOW_FULL_CHARGE_SECONDS = 1.0
CROSSBOW_BASE_LOAD_SECONDS = 1.25
QUICK_CHARGE_LOAD_SECONDS = {0: 1.25, 1: 1.0, 2: 0.75, 3: 0.5}
DEFAULT_ARROW_DAMAGE = 2
POWER_BONUS_PER_LEVEL = 0.25
CRITICAL_MULTIPLIER = 1.5
MAX_RANGED_DAMAGE = 25
MAX_ARROW_RANGE = 120
AIM_HIGH_DISTANCE = 20

RANGED_WEAPONS: Mapping[str, Mapping[str, Any]] = {
    "bow": {
        "type": "bow",
        "damage": 9,
        "durability": 384,
        "chargeTime": {"short": 0.5, "medium": 1.0, "full": BOW_FULL_CHARGE_SECONDS},
        "velocity": {"minimum": 3.0, "maximum": 53.0},
        "effectiveRange": 50,
        "enchantments": {
            "power": {"maxLevel": 5, "effect": "+25% damage per level"},
            "punch": {"maxLevel": 2, "effect": "+3 blocks knockback per level"},
            "flame": {"maxLevel": 1, "effect": "Sets target on fire for 5 seconds"},
            "infinity": {"maxLevel": 1, "effect": "Never consumes normal arrows", "incompatible": ("mending",)},
            "unbreaking": {"maxLevel": 3, "effect": "Increases durability"},
            "mending": {"maxLevel": 1, "effect": "Repairs with XP", "incompatible": ("infinity",)},
        },
        "recipe": "3 sticks + 3 string",
    },
    "crossbow": {
        "type": "crossbow",
        "damage": 9,
        "durability": 326,
        "chargeTime": {"base": CROSSBOW_BASE_LOAD_SECONDS},
        "velocity": 65.0,
        "effectiveRange": 65,
        "enchantments": {
            "quick_charge": {"maxLevel": 3, "effect": "Reduces load time by 0.25s per level"},
            "multishot": {"maxLevel": 1, "effect": "Shoots 3 arrows in spread", "incompatible": ("piercing",)},
            "piercing": {"maxLevel": 4, "effect": "Arrows pierce X entities", "incompatible": ("multishot",)},
            "unbreaking": {"maxLevel": 3, "effect": "Increases durability"},
            "mending": {"maxLevel": 1, "effect": "Repairs with XP"},
        },
        "preloadable": True,
        "recipe": "3 sticks + 2 string + 1 iron ingot + 1 tripwire hook",
    },
}

ARROW_TYPES: Mapping[str, Mapping[str, Any]] = {
    "arrow": {"type": "normal", "damage": DEFAULT_ARROW_DAMAGE, "materials": ("flint", "stick", "feather")},
    "spectral_arrow": {
        "type": "spectral",
        "damage": DEFAULT_ARROW_DAMAGE,
        "materials": ("arrow", "glowstone_dust"),
        "effect": "Glowing effect for 10 seconds",
    },
    "tipped_arrow": {
        "type": "tipped",
        "damage": DEFAULT_ARROW_DAMAGE,
        "materials": ("arrow", "lingering_potion"),
        "effect": "Applies potion effect on hit",
        "ignoresInfinity": True,
    },
}

ACCURACY_BY_MOVEMENT = {
    "standing": 1.0,
    "walking": 0.95,
    "sprinting": 0.85,
    "jumping": 0.75,
    "in_air": 0.70,
}

RANGED_TACTICS: Mapping[str, Mapping[str, Any]] = {
    "strafe_shooting": {"description": "Move side to side while shooting", "accuracy": 0.95, "difficulty": "easy"},
    "quick_shot": {"description": "Rapid fire with partial charges", "accuracy": 0.85, "difficulty": "medium"},
    "sniper": {"description": "Fully charged shots from distance", "accuracy": 1.0, "difficulty": "hard"},
    "multishot_crowd": {
        "description": "Crossbow multishot for groups",
        "accuracy": 1.0,
        "targets": 3,
        "difficulty": "medium",
        "requiresEnchant": "multishot",
    },
}

RANGED_SYNONYMS = {"longbow": "bow", "xbow": "crossbow"}


def get_ranged_weapon_info(name: Any) -> Optional[Dict[str, Any]]:
    key = lookup_key(RANGED_WEAPONS, name, synonyms=RANGED_SYNONYMS, substring=False)
    return {"name": key, **RANGED_WEAPONS[key]} if key else None


def get_arrow_info(name: Any) -> Optional[Dict[str, Any]]:
    """Arrow row; potion arrows ("arrow_of_poison", "tipped_arrow_slowness") map to tipped."""
    key = table_key(name)
    if key in ARROW_TYPES:
        return {"name": key, **ARROW_TYPES[key]}
    if key and ("tipped_arrow" in key or "arrow_of" in key):
        return {"name": key, **ARROW_TYPES["tipped_arrow"], "variant": key}
    return None
