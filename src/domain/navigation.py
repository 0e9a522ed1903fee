# src/domain/navigation.py
"""
Exploration navigation strategies and the strategy selector.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from .lookup import lookup


NAVIGATION_STRATEGIES: Mapping[str, Mapping[str, Any]] = {
    # Basic patterns
    "grid_search": {
        "name": "Grid Search",
        "description": "Systematic grid pattern covering area methodically",
        "efficiency": 0.95,
        "coverage": "complete",
        "difficulty": "easy",
        "best_for": ("plains", "desert", "flat_terrain"),
        "technique": "Move in parallel lines, spacing 50-100 blocks apart",
        "requirements": ("compass", "coordinates"),
        "tips": (
            "Mark starting point clearly",
            "Maintain consistent spacing",
            "Use F3 to track coordinates",
            "Place markers every 100 blocks",
        ),
    },
    "spiral_search": {
        "name": "Spiral Search",
        "description": "Expanding spiral from center point",
        "efficiency": 0.85,
        "coverage": "complete",
        "difficulty": "medium",
        "best_for": ("centered_search", "structure_hunting"),
        "technique": "Start at center, move outward in expanding square spiral",
        "requirements": ("compass", "starting_point"),
        "tips": (
            "Mark center with beacon/tower",
            "Increase spiral size gradually",
            "Good for finding nearby structures",
            "Use coordinates to track pattern",
        ),
    },
    "random_walk": {
        "name": "Random Walk",
        "description": "Random direction changes, exploring organically",
        "efficiency": 0.4,
        "coverage": "incomplete",
        "difficulty": "easy",
        "best_for": ("casual_exploration", "biome_hunting"),
        "technique": "Travel in random directions, following interesting features",
        "requirements": ("compass", "waypoint_markers"),
        "tips": (
            "Leave breadcrumb trail",
            "Note coordinates periodically",
            "Low efficiency but good for discovery",
            "Easy to get lost",
        ),
    },
    # Advanced
    "nether_highway_search": {
        "name": "Nether Highway Search",
        "description": "Build protected pathways in Nether for fast travel",
        "efficiency": 0.7,
        "coverage": "linear",
        "difficulty": "hard",
        "best_for": ("nether_fortress", "long_distance_travel"),
        "technique": "Build enclosed tunnel along axis, search perpendicular",
        "requirements": ("blocks", "pickaxe", "fire_resistance"),
        "tips": (
            "Build along Z axis for fortresses",
            "Protect from ghasts with walls",
            "Branch out perpendicular every 100 blocks",
            "Light up to prevent spawns",
        ),
    },
    "cartographer_map": {
        "name": "Cartographer Map Tracking",
        "description": "Use explorer maps from cartographer villagers",
        "efficiency": 1.0,
        "coverage": "targeted",
        "difficulty": "easy",
        "best_for": ("woodland_mansion", "ocean_monument"),
        "technique": "Trade with cartographer, follow map to structure",
        "requirements": ("emeralds", "village", "map"),
        "tips": (
            "Find cartographer villager",
            "Trade for explorer map",
            "Follow white marker",
            "Prepare for long journey",
        ),
    },
    "ender_eye_tracking": {
        "name": "Eye of Ender Tracking",
        "description": "Use eyes of ender to locate stronghold",
        "efficiency": 1.0,
        "coverage": "targeted",
        "difficulty": "medium",
        "best_for": ("stronghold",),
        "technique": "Throw eyes, follow direction, triangulate position",
        "requirements": ("eyes_of_ender", "blocks", "pickaxe"),
        "tips": (
            "Bring 12+ eyes of ender",
            "Throw every 20 blocks when close",
            "Eyes break 20% of time",
            "Dig down when eye goes into ground",
        ),
    },
    # Terrain specific
    "ocean_exploration": {
        "name": "Ocean Exploration",
        "description": "Systematic ocean floor scanning",
        "efficiency": 0.6,
        "coverage": "moderate",
        "difficulty": "hard",
        "best_for": ("ocean_monument", "shipwreck", "ruins"),
        "technique": "Boat on surface, dive periodically to scan floor",
        "requirements": ("boat", "water_breathing", "night_vision"),
        "tips": (
            "Use dolphin's grace for speed",
            "Night vision helps underwater",
            "Monuments visible from surface",
            "Check for guardian spawns",
        ),
    },
    "cave_exploration": {
        "name": "Cave Exploration",
        "description": "Safe systematic cave network exploration",
        "efficiency": 0.5,
        "coverage": "moderate",
        "difficulty": "medium",
        "best_for": ("mineshaft", "dungeons", "ores"),
        "technique": "Torches on right, explore all branches",
        "requirements": ("torches", "pickaxe", "armor", "food"),
        "tips": (
            "Torches on right wall going in",
            "Mark dead ends with crosses",
            "Bring extra torches",
            "Listen for mob/minecart sounds",
        ),
    },
    "island_hopping": {
        "name": "Island Hopping",
        "description": "Bridge between End islands systematically",
        "efficiency": 0.7,
        "coverage": "moderate",
        "difficulty": "extreme",
        "best_for": ("end_city", "chorus_fruit"),
        "technique": "Build bridges between outer islands",
        "requirements": ("blocks", "ender_pearls", "slow_falling_potions"),
        "tips": (
            "Always build with blocks beneath you",
            "Keep ender pearls for emergencies",
            "Slow falling saves from void",
            "Mark bridges for return trip",
        ),
    },
    "systematic_clearing": {
        "name": "Systematic Clearing",
        "description": "Clear vegetation to reveal hidden structures",
        "efficiency": 0.8,
        "coverage": "complete",
        "difficulty": "hard",
        "best_for": ("jungle_temple", "dense_forest"),
        "technique": "Clear trees/vegetation in grid pattern",
        "requirements": ("axe", "shears", "time"),
        "tips": (
            "Work in sections",
            "Look for unnatural blocks",
            "Jungle temples have mossy cobble",
            "Very time consuming",
        ),
    },
    # Speed
    "ice_highway": {
        "name": "Ice Highway Travel",
        "description": "Use blue ice for super fast travel",
        "efficiency": 0.9,
        "coverage": "linear",
        "difficulty": "medium",
        "best_for": ("long_distance", "speed"),
        "technique": "Build ice path, use boat for 8x speed",
        "requirements": ("blue_ice", "boat"),
        "tips": (
            "Blue ice fastest (boats reach 72 m/s)",
            "Build in Nether for 8x overworld distance",
            "Protect from mobs",
            "Corners slow you down",
        ),
    },
    "elytra_search": {
        "name": "Elytra Aerial Search",
        "description": "Fly over terrain for rapid scouting",
        "efficiency": 0.95,
        "coverage": "high",
        "difficulty": "medium",
        "best_for": ("any_overworld", "biome_hunting"),
        "technique": "Fly high, scan terrain below",
        "requirements": ("elytra", "rockets", "high_altitude"),
        "tips": (
            "Fly at cloud level for best view",
            "Bring lots of rockets",
            "Mark locations with coordinates",
            "Watch for anti-air (phantoms)",
        ),
    },
}

STRATEGY_SYNONYMS = {
    "grid": "grid_search",
    "spiral": "spiral_search",
    "random": "random_walk",
    "highway": "nether_highway_search",
    "map": "cartographer_map",
    "eye": "ender_eye_tracking",
    "ocean": "ocean_exploration",
    "cave": "cave_exploration",
    "island": "island_hopping",
    "clearing": "systematic_clearing",
    "ice": "ice_highway",
    "elytra": "elytra_search",
}


def get_navigation_strategy(name: Any) -> Mapping[str, Any]:
    """Strategy record by name; anything unknown resolves to grid search."""
    found = lookup(NAVIGATION_STRATEGIES, name, synonyms=STRATEGY_SYNONYMS, substring=False)
    return found or NAVIGATION_STRATEGIES["grid_search"]


def determine_best_strategy(
    biome: Mapping[str, Any],
    structure: Optional[Mapping[str, Any]] = None,
    requested: Any = None,
) -> Mapping[str, Any]:
    """
    Pick a navigation strategy.

    A structure's own search strategy wins, then an explicit request, then
    the biome: flat terrain favours a grid, very complex terrain systematic
    clearing, the Nether highways, the End island hopping. Spiral search
    otherwise.
    """
    if structure and structure.get("search_strategy"):
        return get_navigation_strategy(structure["search_strategy"])
    if requested:
        return get_navigation_strategy(requested)

    if biome.get("terrain") in ("flat", "flat_sandy"):
        return NAVIGATION_STRATEGIES["grid_search"]
    if biome.get("navigation_complexity") == "very_high":
        return NAVIGATION_STRATEGIES["systematic_clearing"]
    if biome.get("dimension") == "nether":
        return NAVIGATION_STRATEGIES["nether_highway_search"]
    if biome.get("dimension") == "end":
        return NAVIGATION_STRATEGIES["island_hopping"]
    return NAVIGATION_STRATEGIES["spiral_search"]


def calculate_exploration_duration(
    radius: Optional[float],
    biome: Optional[Mapping[str, Any]],
    strategy: Optional[Mapping[str, Any]],
) -> int:
    """10 s base plus 100 ms per block of radius, slowed by terrain and strategy."""
    radius_time = radius * 100 if radius else 5000
    traversal = (biome or {}).get("traversal_speed") or 1.0
    efficiency = (strategy or {}).get("efficiency") or 0.8
    return int(math.floor(10000 + radius_time / traversal / efficiency))
