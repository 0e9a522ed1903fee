# src/domain/foods.py
"""
Nutrition profiles and hunger rules.

`chance` on an effect is informational only; planning treats every listed
effect as applied.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .lookup import lookup, table_key


MAX_HUNGER = 20
MAX_SATURATION = 20.0
DEFAULT_HUNGER_STATE = {"hunger": 20, "saturation": 5.0, "exhaustion": 0.0}

REGENERATION_HUNGER_THRESHOLD = 18
REGENERATION_SATURATION_THRESHOLD = 0.1

HARMFUL_EFFECTS = frozenset({"poison", "hunger", "nausea"})


def _food(hunger, saturation, category, eat_time=1.6, effects=(), stack_size=64, **extra):
    profile = {
        "hunger": hunger,
        "saturation": saturation,
        "eatTime": eat_time,
        "effects": tuple(effects),
        "category": category,
        "stackSize": stack_size,
    }
    profile.update(extra)
    return profile


def _effect(type, duration=0, amplifier=0, **extra):
    return {"type": type, "duration": duration, "amplifier": amplifier, **extra}


FOODS: Mapping[str, Mapping[str, Any]] = {
    # crops and fruit
    "apple": _food(4, 2.4, "fruit"),
    "golden_apple": _food(
        4, 9.6, "special",
        effects=(_effect("regeneration", 5, 1), _effect("absorption", 120, 0)),
        alwaysEdible=True,
    ),
    "enchanted_golden_apple": _food(
        4, 9.6, "legendary",
        effects=(
            _effect("regeneration", 20, 4),
            _effect("absorption", 120, 3),
            _effect("resistance", 300, 0),
            _effect("fire_resistance", 300, 0),
        ),
        alwaysEdible=True,
    ),
    "carrot": _food(3, 3.6, "vegetable"),
    "golden_carrot": _food(6, 14.4, "special"),
    "potato": _food(1, 0.6, "vegetable"),
    "baked_potato": _food(5, 6.0, "cooked"),
    "poisonous_potato": _food(2, 1.2, "dangerous", effects=(_effect("poison", 5, 0, chance=0.6),)),
    "beetroot": _food(1, 1.2, "vegetable"),
    "beetroot_soup": _food(6, 7.2, "meal", stack_size=1, returnItem="bowl"),
    "sweet_berries": _food(2, 1.2, "fruit"),
    "glow_berries": _food(2, 1.2, "fruit"),
    "melon_slice": _food(2, 1.2, "fruit"),
    # baked goods
    "bread": _food(5, 6.0, "baked"),
    "cookie": _food(2, 0.4, "baked"),
    "cake": _food(14, 2.8, "baked", eat_time=0, stack_size=1, sliceable=True, slices=7),
    "pumpkin_pie": _food(8, 4.8, "baked"),
    # raw meat
    "beef": _food(3, 1.8, "raw_meat", cookable="cooked_beef"),
    "porkchop": _food(3, 1.8, "raw_meat", cookable="cooked_porkchop"),
    "chicken": _food(
        2, 1.2, "raw_meat", effects=(_effect("hunger", 30, 0, chance=0.3),), cookable="cooked_chicken"
    ),
    "mutton": _food(2, 1.2, "raw_meat", cookable="cooked_mutton"),
    "rabbit": _food(3, 1.8, "raw_meat", cookable="cooked_rabbit"),
    # cooked meat
    "cooked_beef": _food(8, 12.8, "cooked_meat"),
    "cooked_porkchop": _food(8, 12.8, "cooked_meat"),
    "cooked_chicken": _food(6, 7.2, "cooked_meat"),
    "cooked_mutton": _food(6, 9.6, "cooked_meat"),
    "cooked_rabbit": _food(5, 6.0, "cooked_meat"),
    # fish
    "cod": _food(2, 0.4, "raw_fish", cookable="cooked_cod"),
    "salmon": _food(2, 0.4, "raw_fish", cookable="cooked_salmon"),
    "tropical_fish": _food(1, 0.2, "raw_fish"),
    "pufferfish": _food(
        1, 0.2, "dangerous",
        effects=(_effect("poison", 60, 1), _effect("hunger", 15, 2), _effect("nausea", 15, 0)),
    ),
    "cooked_cod": _food(5, 6.0, "cooked_fish"),
    "cooked_salmon": _food(6, 9.6, "cooked_fish"),
    # soups
    "mushroom_stew": _food(6, 7.2, "meal", stack_size=1, returnItem="bowl"),
    "rabbit_stew": _food(10, 12.0, "meal", stack_size=1, returnItem="bowl"),
    "suspicious_stew": _food(6, 7.2, "special", stack_size=1, returnItem="bowl"),
    # other
    "rotten_flesh": _food(4, 0.8, "dangerous", effects=(_effect("hunger", 30, 0, chance=0.8),)),
    "spider_eye": _food(2, 3.2, "dangerous", effects=(_effect("poison", 5, 0),)),
    "chorus_fruit": _food(4, 2.4, "special", effects=({"type": "teleport", "range": 8},), alwaysEdible=True),
    "dried_kelp": _food(1, 0.6, "vegetable", eat_time=0.865),
    "honey_bottle": _food(6, 1.2, "special", eat_time=2.0, effects=({"type": "cure_poison"},),
                          stack_size=16, returnItem="glass_bottle"),
}

FOOD_SYNONYMS: Mapping[str, str] = {
    "raw_beef": "beef",
    "steak": "cooked_beef",
    "raw_porkchop": "porkchop",
    "raw_chicken": "chicken",
    "raw_mutton": "mutton",
    "raw_rabbit": "rabbit",
    "raw_cod": "cod",
    "raw_salmon": "salmon",
    "melon": "melon_slice",
    "berries": "sweet_berries",
    "kelp": "dried_kelp",
}


def get_food_profile(name: Any) -> Optional[Dict[str, Any]]:
    """Exact or synonym match only; "cooked_beef" must never resolve to "beef"."""
    key = table_key(name)
    if not key:
        return None
    profile = lookup(FOODS, key, synonyms=FOOD_SYNONYMS, substring=False)
    return dict(profile) if profile is not None else None


def is_edible(name: Any) -> bool:
    return get_food_profile(name) is not None
