# src/domain/biomes.py
"""
Biome, Y-level and weather profiles.

Two biome tables live here: the exploration profiles (traversal speed,
structures, hostile mobs, supplies) and the gathering profiles (growth and
spawn rates, optimal resources). Both are keyed by the canonical biome id.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .lookup import lookup, lookup_key


# ---------------------------------------------------------------------------
# Exploration profiles
# ---------------------------------------------------------------------------

BIOME_PROFILES: Mapping[str, Mapping[str, Any]] = {
    # Overworld, temperate
    "plains": {
        "dimension": "overworld",
        "category": "temperate",
        "terrain": "flat",
        "difficulty": "easy",
        "visibility": "excellent",
        "hostile_mobs": ("zombie", "skeleton", "creeper", "spider"),
        "passive_mobs": ("cow", "sheep", "pig", "chicken", "horse"),
        "resources": ("grass", "flowers", "villages"),
        "structures": ("village", "pillager_outpost", "ruined_portal"),
        "traversal_speed": 1.0,
        "navigation_complexity": "low",
        "supplies": ("food", "torches", "bed"),
        "special_considerations": (
            "Ideal for horse travel",
            "Villages common",
            "Flat terrain good for mapping",
        ),
        "weather_hazards": ("thunderstorm",),
    },
    "forest": {
        "dimension": "overworld",
        "category": "temperate",
        "terrain": "varied",
        "difficulty": "medium",
        "visibility": "limited",
        "hostile_mobs": ("zombie", "skeleton", "creeper", "spider", "witch"),
        "passive_mobs": ("cow", "sheep", "pig", "chicken", "wolf"),
        "resources": ("oak_log", "birch_log", "flowers", "mushrooms"),
        "structures": ("woodland_mansion", "ruined_portal"),
        "traversal_speed": 0.7,
        "navigation_complexity": "medium",
        "supplies": ("food", "torches", "bed", "axe"),
        "special_considerations": (
            "Dense trees limit visibility",
            "Easy to get lost",
            "Abundant wood resources",
        ),
        "weather_hazards": ("thunderstorm", "darkness"),
    },
    "taiga": {
        "dimension": "overworld",
        "category": "cold",
        "terrain": "hilly",
        "difficulty": "medium",
        "visibility": "moderate",
        "hostile_mobs": ("zombie", "skeleton", "creeper", "spider", "wolf"),
        "passive_mobs": ("wolf", "fox", "rabbit"),
        "resources": ("spruce_log", "ferns", "sweet_berries"),
        "structures": ("village", "pillager_outpost", "igloo"),
        "traversal_speed": 0.8,
        "navigation_complexity": "medium",
        "supplies": ("food", "torches", "bed", "warm_clothing"),
        "special_considerations": ("Wolves can be hostile", "Sweet berries useful", "Cold climate"),
        "weather_hazards": ("snow", "freezing"),
    },
    "desert": {
        "dimension": "overworld",
        "category": "dry",
        "terrain": "flat_sandy",
        "difficulty": "medium",
        "visibility": "excellent",
        "hostile_mobs": ("zombie", "skeleton", "creeper", "spider", "husk"),
        "passive_mobs": ("rabbit",),
        "resources": ("sand", "sandstone", "cactus", "dead_bush"),
        "structures": ("desert_temple", "village", "desert_well", "ruined_portal"),
        "traversal_speed": 0.9,
        "navigation_complexity": "low",
        "supplies": ("food", "water_bucket", "torches", "bed"),
        "special_considerations": (
            "Husks don't burn in daylight",
            "Temples contain loot",
            "Limited food sources",
        ),
        "weather_hazards": ("heat", "no_water"),
    },
    "jungle": {
        "dimension": "overworld",
        "category": "lush",
        "terrain": "dense",
        "difficulty": "hard",
        "visibility": "very_limited",
        "hostile_mobs": ("zombie", "skeleton", "creeper", "spider", "ocelot"),
        "passive_mobs": ("parrot", "ocelot", "panda"),
        "resources": ("jungle_log", "bamboo", "cocoa_beans", "melons"),
        "structures": ("jungle_temple", "ruined_portal"),
        "traversal_speed": 0.5,
        "navigation_complexity": "very_high",
        "supplies": ("food", "torches", "bed", "axe", "shears", "compass"),
        "special_considerations": (
            "Extremely difficult navigation",
            "Jungle temples have traps",
            "Bamboo useful for scaffolding",
        ),
        "weather_hazards": ("heavy_rain", "darkness"),
    },
    "swamp": {
        "dimension": "overworld",
        "category": "wet",
        "terrain": "waterlogged",
        "difficulty": "medium",
        "visibility": "limited",
        "hostile_mobs": ("zombie", "skeleton", "creeper", "spider", "slime", "witch"),
        "passive_mobs": ("frog",),
        "resources": ("oak_log", "vines", "lily_pads", "mushrooms", "slime_balls"),
        "structures": ("swamp_hut", "ruined_portal"),
        "traversal_speed": 0.6,
        "navigation_complexity": "high",
        "supplies": ("food", "torches", "bed", "boat", "potion_of_night_vision"),
        "special_considerations": (
            "Witch huts dangerous",
            "Slimes spawn at night",
            "Water slows movement",
        ),
        "weather_hazards": ("heavy_rain", "flooding"),
    },
    "mountains": {
        "dimension": "overworld",
        "category": "highland",
        "terrain": "steep",
        "difficulty": "hard",
        "visibility": "excellent",
        "hostile_mobs": ("zombie", "skeleton", "creeper", "spider", "goat"),
        "passive_mobs": ("goat", "llama"),
        "resources": ("stone", "emerald_ore", "iron_ore", "coal_ore"),
        "structures": ("mineshaft", "ruined_portal"),
        "traversal_speed": 0.4,
        "navigation_complexity": "very_high",
        "supplies": ("food", "torches", "bed", "pickaxe", "water_bucket", "blocks"),
        "special_considerations": (
            "Fall damage risk",
            "Goats can knock you off",
            "Mining opportunities",
        ),
        "weather_hazards": ("height", "steep_cliffs"),
    },
    "ocean": {
        "dimension": "overworld",
        "category": "aquatic",
        "terrain": "water",
        "difficulty": "hard",
        "visibility": "limited_underwater",
        "hostile_mobs": ("drowned", "guardian", "elder_guardian"),
        "passive_mobs": ("cod", "salmon", "dolphin", "turtle"),
        "resources": ("kelp", "sea_grass", "prismarine", "sponge"),
        "structures": ("ocean_monument", "shipwreck", "ocean_ruins", "buried_treasure"),
        "traversal_speed": 0.3,
        "navigation_complexity": "very_high",
        "supplies": (
            "food",
            "boat",
            "potion_of_water_breathing",
            "potion_of_night_vision",
            "door",
        ),
        "special_considerations": (
            "Breathing underwater critical",
            "Monuments very dangerous",
            "Dolphins help navigation",
        ),
        "weather_hazards": ("drowning", "darkness_underwater"),
    },
    # Nether
    "nether_wastes": {
        "dimension": "nether",
        "category": "hellish",
        "terrain": "varied",
        "difficulty": "very_hard",
        "visibility": "moderate",
        "hostile_mobs": ("zombie_pigman", "ghast", "magma_cube", "skeleton"),
        "passive_mobs": (),
        "resources": ("netherrack", "glowstone", "nether_quartz"),
        "structures": ("nether_fortress", "bastion_remnant", "ruined_portal"),
        "traversal_speed": 0.7,
        "navigation_complexity": "high",
        "supplies": ("food", "fire_resistance_potion", "bow", "blocks", "flint_and_steel"),
        "special_considerations": (
            "Ghasts destroy terrain",
            "Fire hazards everywhere",
            "No natural water",
        ),
        "weather_hazards": ("lava", "fire", "ghast_fireballs"),
    },
    "crimson_forest": {
        "dimension": "nether",
        "category": "hellish",
        "terrain": "forested",
        "difficulty": "hard",
        "visibility": "limited",
        "hostile_mobs": ("hoglin", "piglin", "zombified_piglin"),
        "passive_mobs": ("strider",),
        "resources": ("crimson_stem", "crimson_fungus", "weeping_vines", "shroomlight"),
        "structures": ("bastion_remnant", "ruined_portal"),
        "traversal_speed": 0.6,
        "navigation_complexity": "medium",
        "supplies": ("food", "fire_resistance_potion", "gold_armor", "blocks"),
        "special_considerations": (
            "Piglins trade gold",
            "Hoglins very dangerous",
            "Dense vegetation",
        ),
        "weather_hazards": ("lava", "hoglin_attacks"),
    },
    "soul_sand_valley": {
        "dimension": "nether",
        "category": "hellish",
        "terrain": "slow",
        "difficulty": "very_hard",
        "visibility": "moderate",
        "hostile_mobs": ("ghast", "skeleton", "enderman"),
        "passive_mobs": ("strider",),
        "resources": ("soul_sand", "soul_soil", "basalt", "nether_fossils"),
        "structures": ("nether_fortress", "bastion_remnant"),
        "traversal_speed": 0.3,
        "navigation_complexity": "high",
        "supplies": ("food", "fire_resistance_potion", "bow", "soul_speed_boots", "blocks"),
        "special_considerations": (
            "Soul sand drastically slows movement",
            "Many ghasts",
            "Eerie atmosphere",
        ),
        "weather_hazards": ("lava", "slow_terrain", "ghast_fireballs"),
    },
    # End
    "the_end": {
        "dimension": "end",
        "category": "void",
        "terrain": "floating",
        "difficulty": "extreme",
        "visibility": "good",
        "hostile_mobs": ("enderman", "ender_dragon", "shulker"),
        "passive_mobs": (),
        "resources": ("end_stone", "chorus_fruit", "purpur", "shulker_shells"),
        "structures": ("end_city", "end_ship"),
        "traversal_speed": 0.8,
        "navigation_complexity": "extreme",
        "supplies": ("food", "ender_pearls", "bow", "blocks", "slow_falling_potion", "pumpkin"),
        "special_considerations": (
            "Void death instant",
            "Endermen everywhere",
            "Shulkers levitate you",
        ),
        "weather_hazards": ("void", "enderman_aggro", "shulker_levitation"),
    },
    # Rare
    "mushroom_fields": {
        "dimension": "overworld",
        "category": "rare",
        "terrain": "varied",
        "difficulty": "easy",
        "visibility": "excellent",
        "hostile_mobs": (),
        "passive_mobs": ("mooshroom",),
        "resources": ("mycelium", "mushrooms", "mooshroom"),
        "structures": (),
        "traversal_speed": 1.0,
        "navigation_complexity": "low",
        "supplies": ("food", "bed"),
        "special_considerations": (
            "No hostile mobs spawn",
            "Very rare biome",
            "Mushroom soup renewable",
        ),
        "weather_hazards": (),
    },
    "ice_spikes": {
        "dimension": "overworld",
        "category": "frozen",
        "terrain": "spiky",
        "difficulty": "medium",
        "visibility": "excellent",
        "hostile_mobs": ("zombie", "skeleton", "creeper", "spider", "stray"),
        "passive_mobs": ("polar_bear", "rabbit"),
        "resources": ("packed_ice", "ice", "snow"),
        "structures": ("igloo",),
        "traversal_speed": 0.9,
        "navigation_complexity": "medium",
        "supplies": ("food", "torches", "bed", "warm_clothing", "pickaxe"),
        "special_considerations": (
            "Packed ice valuable",
            "Polar bears hostile if provoked",
            "Very cold",
        ),
        "weather_hazards": ("freezing", "ice"),
    },
}

DEFAULT_BIOME_PROFILE: Mapping[str, Any] = {
    "dimension": "overworld",
    "category": "unknown",
    "terrain": "varied",
    "difficulty": "medium",
    "visibility": "moderate",
    "hostile_mobs": (),
    "passive_mobs": (),
    "resources": (),
    "structures": (),
    "traversal_speed": 1.0,
    "navigation_complexity": "medium",
    "supplies": ("food", "torches", "bed"),
    "special_considerations": (),
    "weather_hazards": (),
}

BIOME_SYNONYMS = {
    "nether": "nether_wastes",
    "end": "the_end",
    "mountain": "mountains",
    "extreme_hills": "mountains",
    "windswept_hills": "mountains",
    "swampland": "swamp",
    "deep_ocean": "ocean",
    "mushroom_island": "mushroom_fields",
}


def get_biome_profile(name: Any) -> Mapping[str, Any]:
    """Exploration profile for a biome; unknown biomes get the neutral default."""
    return lookup(BIOME_PROFILES, name, synonyms=BIOME_SYNONYMS) or DEFAULT_BIOME_PROFILE


def resolve_biome_key(name: Any) -> Optional[str]:
    return lookup_key(BIOME_PROFILES, name, synonyms=BIOME_SYNONYMS)


# ---------------------------------------------------------------------------
# Gathering profiles
# ---------------------------------------------------------------------------

GATHER_BIOME_PROFILES: Mapping[str, Mapping[str, Any]] = {
    "plains": {
        "crop_growth_rate": 1.0,
        "tree_growth_rate": 1.0,
        "hostile_mob_spawn_rate": 0.7,
        "rain_chance": 0.3,
        "optimal_for": ("wheat", "carrots", "potatoes", "beetroots"),
        "hazards": ("low", "open_terrain"),
    },
    "forest": {
        "crop_growth_rate": 0.9,
        "tree_growth_rate": 1.2,
        "hostile_mob_spawn_rate": 0.9,
        "rain_chance": 0.4,
        "optimal_for": ("oak_log", "birch_log", "spruce_log"),
        "hazards": ("medium", "dense_foliage", "navigation_difficulty"),
    },
    "taiga": {
        "crop_growth_rate": 0.8,
        "tree_growth_rate": 1.1,
        "hostile_mob_spawn_rate": 0.8,
        "rain_chance": 0.5,
        "optimal_for": ("spruce_log",),
        "hazards": ("medium", "wolves", "cold"),
    },
    "desert": {
        "crop_growth_rate": 0.7,
        "tree_growth_rate": 0.5,
        "hostile_mob_spawn_rate": 1.0,
        "rain_chance": 0.0,
        "optimal_for": (),
        "hazards": ("high", "husks", "heat", "navigation_difficulty"),
    },
    "mountains": {
        "crop_growth_rate": 0.6,
        "tree_growth_rate": 0.8,
        "hostile_mob_spawn_rate": 0.6,
        "rain_chance": 0.5,
        "optimal_for": ("stone", "coal_ore", "iron_ore"),
        "hazards": ("very_high", "fall_damage", "steep_terrain", "weather_exposure"),
    },
    "caves": {
        "crop_growth_rate": 0.0,
        "tree_growth_rate": 0.0,
        "hostile_mob_spawn_rate": 1.5,
        "rain_chance": 0.0,
        "optimal_for": ("stone", "coal_ore", "iron_ore", "gold_ore", "diamond_ore"),
        "hazards": (
            "very_high",
            "hostile_mobs",
            "fall_damage",
            "lava",
            "darkness",
            "navigation_difficulty",
        ),
    },
    "underground": {
        "crop_growth_rate": 0.0,
        "tree_growth_rate": 0.0,
        "hostile_mob_spawn_rate": 1.8,
        "rain_chance": 0.0,
        "optimal_for": ("iron_ore", "gold_ore", "diamond_ore"),
        "hazards": ("extreme", "hostile_mobs", "fall_damage", "lava", "suffocation", "getting_lost"),
    },
}


def get_gather_biome_profile(name: Any) -> Optional[Dict[str, Any]]:
    """
    Gathering profile with its resolved `name`.

    Unknown biomes fall back to the plains profile named "unknown";
    empty input returns None.
    """
    if not name:
        return None
    key = lookup_key(GATHER_BIOME_PROFILES, name, synonyms={"cave": "caves", "mountain": "mountains"})
    if key is None:
        return {**GATHER_BIOME_PROFILES["plains"], "name": "unknown"}
    return {**GATHER_BIOME_PROFILES[key], "name": key}


# ---------------------------------------------------------------------------
# Y levels
# ---------------------------------------------------------------------------

# Ordered: the first band containing y wins.
Y_LEVEL_PROFILES: Mapping[str, Mapping[str, Any]] = {
    "surface": {"min": 62, "max": 320, "lighting": "natural", "mob_spawn_risk": "medium", "optimal_for": ("crop", "wood")},
    "elevated": {"min": 90, "max": 320, "lighting": "natural", "mob_spawn_risk": "low", "optimal_for": ("wood",)},
    "shallow": {"min": 40, "max": 62, "lighting": "mixed", "mob_spawn_risk": "high", "optimal_for": ("coal_ore", "iron_ore", "stone")},
    "mid_depth": {"min": 0, "max": 40, "lighting": "artificial", "mob_spawn_risk": "very_high", "optimal_for": ("iron_ore", "gold_ore", "coal_ore")},
    "deep": {"min": -16, "max": 0, "lighting": "artificial", "mob_spawn_risk": "very_high", "optimal_for": ("iron_ore", "gold_ore", "diamond_ore")},
    "deepslate": {"min": -64, "max": -16, "lighting": "artificial", "mob_spawn_risk": "extreme", "optimal_for": ("diamond_ore", "gold_ore")},
}


def y_level_category(y: Any) -> Optional[Dict[str, Any]]:
    """`{category, min, max, ...}` for the band containing `y`, else None."""
    if not isinstance(y, (int, float)) or isinstance(y, bool):
        return None
    for category, profile in Y_LEVEL_PROFILES.items():
        if profile["min"] <= y <= profile["max"]:
            return {"category": category, **profile}
    return None


# ---------------------------------------------------------------------------
# Weather
# ---------------------------------------------------------------------------

WEATHER_CONDITIONS: Mapping[str, Mapping[str, Any]] = {
    "clear": {
        "type": "clear",
        "crop_growth_modifier": 1.0,
        "visibility_modifier": 1.0,
        "mob_spawn_modifier": 1.0,
        "lightning_risk": False,
        "movement_modifier": 1.0,
    },
    "rain": {
        "type": "rain",
        "crop_growth_modifier": 1.1,
        "visibility_modifier": 0.8,
        "mob_spawn_modifier": 0.7,
        "lightning_risk": True,
        "movement_modifier": 0.95,
    },
    "thunderstorm": {
        "type": "thunderstorm",
        "crop_growth_modifier": 1.1,
        "visibility_modifier": 0.6,
        "mob_spawn_modifier": 1.5,
        "lightning_risk": True,
        "movement_modifier": 0.9,
    },
    "snow": {
        "type": "snow",
        "crop_growth_modifier": 0.8,
        "visibility_modifier": 0.7,
        "mob_spawn_modifier": 1.0,
        "lightning_risk": False,
        "movement_modifier": 0.85,
    },
}

WEATHER_SYNONYMS = {"rainy": "rain", "raining": "rain", "storm": "thunderstorm", "thunder": "thunderstorm", "snowing": "snow", "sunny": "clear"}


def get_weather_profile(weather: Any) -> Mapping[str, Any]:
    if not weather:
        return WEATHER_CONDITIONS["clear"]
    found = lookup(WEATHER_CONDITIONS, weather, synonyms=WEATHER_SYNONYMS, substring=False)
    return found or WEATHER_CONDITIONS["clear"]
