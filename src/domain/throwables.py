# src/domain/throwables.py
"""
Throwable items and projectile physics.

Velocities are blocks per tick; durations and cooldowns are seconds.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .lookup import lookup_key, table_key


THROWABLE_ITEMS: Mapping[str, Mapping[str, Any]] = {
    "snowball": {
        "type": "projectile",
        "damage": 0,
        "damageToBlaze": 3,
        "velocity": 1.5,
        "gravity": True,
        "stackSize": 16,
        "effects": (),
        "cooldown": 0,
        "consumesOnThrow": True,
    },
    "egg": {
        "type": "projectile",
        "damage": 0,
        "velocity": 1.5,
        "gravity": True,
        "stackSize": 16,
        "effects": ({"type": "spawn_chicken", "chance": 0.125},),
        "cooldown": 0,
        "consumesOnThrow": True,
    },
    "ender_pearl": {
        "type": "teleport_projectile",
        "damage": 0,
        "fallDamage": 5,
        "velocity": 1.5,
        "gravity": True,
        "stackSize": 16,
        "effects": ({"type": "teleport_on_impact"},),
        "cooldown": 1.0,
        "consumesOnThrow": True,
    },
    "eye_of_ender": {
        "type": "finder_projectile",
        "damage": 0,
        "velocity": 0.5,
        "gravity": False,
        "stackSize": 64,
        "effects": ({"type": "locate_stronghold"},),
        "cooldown": 0,
        "consumesOnThrow": True,
        "breakChance": 0.2,
        "duration": 2.0,
    },
    "experience_bottle": {
        "type": "projectile",
        "damage": 0,
        "velocity": 1.5,
        "gravity": True,
        "stackSize": 64,
        "effects": ({"type": "spawn_xp_orbs", "amount": {"min": 3, "max": 11}},),
        "cooldown": 0,
        "consumesOnThrow": True,
    },
    "splash_water_bottle": {
        "type": "splash_potion",
        "damage": 0,
        "velocity": 1.5,
        "gravity": True,
        "stackSize": 1,
        "effects": (
            {"type": "extinguish_fire", "radius": 2},
            {"type": "damage_blaze", "damage": 1},
            {"type": "damage_enderman", "damage": 1},
        ),
        "cooldown": 0,
        "consumesOnThrow": True,
        "splashRadius": 4,
    },
    "splash_potion": {
        "type": "splash_potion",
        "damage": 0,
        "velocity": 1.5,
        "gravity": True,
        "stackSize": 1,
        "effects": (),
        "cooldown": 0,
        "consumesOnThrow": True,
        "splashRadius": 4,
        "variants": (
            "healing", "harming", "regeneration", "swiftness", "slowness",
            "strength", "weakness", "poison", "fire_resistance", "water_breathing",
            "invisibility", "night_vision", "leaping", "turtle_master", "slow_falling",
        ),
    },
    "lingering_potion": {
        "type": "lingering_potion",
        "damage": 0,
        "velocity": 1.5,
        "gravity": True,
        "stackSize": 1,
        "effects": (),
        "cooldown": 0,
        "consumesOnThrow": True,
        "splashRadius": 3,
        "lingerDuration": 30,
        "cloudRadius": 3,
    },
    "trident": {
        "type": "weapon_projectile",
        "damage": 8,
        "thrownDamage": 8,
        "velocity": 2.5,
        "gravity": True,
        "stackSize": 1,
        "effects": (),
        "cooldown": 1.0,
        "consumesOnThrow": False,
        "durability": 250,
        "enchantments": {
            "loyalty": "Returns to player after throw",
            "riptide": "Launch player with trident in rain/water",
            "channeling": "Summon lightning on hit during thunderstorm",
            "impaling": "Extra damage to aquatic mobs",
        },
    },
    "fire_charge": {
        "type": "projectile",
        "damage": 5,
        "velocity": 1.0,
        "gravity": False,
        "stackSize": 64,
        "effects": ({"type": "set_fire", "duration": 5}, {"type": "ignite_tnt"}, {"type": "light_campfire"}),
        "cooldown": 0,
        "consumesOnThrow": True,
    },
}

ACCURACY_BY_MOVEMENT = {"standing": 1.0, "moving": 0.95, "jumping": 0.90, "sprinting": 0.85}
GRAVITY_PER_TICK = 0.03
AIR_RESISTANCE = 0.99
MAX_THROW_DISTANCE = 120
SPLASH_POTION_RADIUS = 4
ENDER_PEARL_COOLDOWN = 1.0
LOW_TRIDENT_DURABILITY = 10

HIT_EFFECTS: Mapping[str, Mapping[str, str]] = {
    "snowball": {"entity": "knockback_small", "block": "particle_effect", "sound": "entity.snowball.throw"},
    "egg": {"entity": "particle_effect", "block": "particle_effect", "sound": "entity.egg.throw"},
    "ender_pearl": {"entity": "teleport_player", "block": "teleport_player", "sound": "entity.enderman.teleport"},
    "splash_potion": {
        "entity": "apply_potion_effect",
        "block": "splash_particles",
        "sound": "entity.splash_potion.break",
    },
    "trident": {"entity": "damage_and_knockback", "block": "stick_in_block", "sound": "item.trident.throw"},
}

# situation -> throwables to prefer, in order
SITUATION_PRIORITIES: Mapping[str, tuple] = {
    "combat": ("splash_potion", "trident", "snowball"),
    "teleport": ("ender_pearl",),
    "xp_farming": ("experience_bottle",),
    "fire_starting": ("fire_charge",),
    "exploration": ("eye_of_ender",),
    "distraction": ("snowball", "egg"),
}


def get_throwable_info(name: Any) -> Optional[Dict[str, Any]]:
    """Exact or normalized key; `splash_potion_of_x` style names map to the potion family."""
    key = lookup_key(THROWABLE_ITEMS, name, substring=False)
    if key is None:
        text = table_key(name)
        if "lingering_potion" in text:
            key = "lingering_potion"
        elif "splash_potion" in text:
            key = "splash_potion"
    return {"name": key, **THROWABLE_ITEMS[key]} if key else None


def is_throwable(name: Any) -> bool:
    return get_throwable_info(name) is not None
