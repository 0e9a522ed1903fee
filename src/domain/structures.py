# src/domain/structures.py
"""
Structure profiles used when an exploration task hunts for a structure.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .lookup import lookup_entry


STRUCTURE_PROFILES: Mapping[str, Mapping[str, Any]] = {
    # Settlements
    "village": {
        "biomes": ("plains", "desert", "savanna", "taiga", "snowy_tundra"),
        "rarity": "common",
        "finding_difficulty": "easy",
        "search_strategy": "grid_search",
        "visual_cues": ("buildings", "paths", "farms", "lights_at_night"),
        "detectable_from": 100,
        "search_radius": 500,
        "loot": ("crops", "tools", "weapons", "armor", "emeralds"),
        "dangers": ("pillagers", "iron_golem"),
        "preparations": ("trading_items", "defense_gear"),
        "navigation_tips": ("Follow paths", "Look for smoke from chimneys", "Check plains first"),
        "worth_revisiting": True,
    },
    "pillager_outpost": {
        "biomes": ("plains", "desert", "savanna", "taiga"),
        "rarity": "uncommon",
        "finding_difficulty": "medium",
        "search_strategy": "spiral_search",
        "visual_cues": ("tall_tower", "cages", "banners"),
        "detectable_from": 120,
        "search_radius": 600,
        "loot": ("crossbows", "arrows", "dark_oak_logs"),
        "dangers": ("pillagers", "vindicators", "ravagers"),
        "preparations": ("armor", "weapons", "shields", "golden_apples"),
        "navigation_tips": ("Look for tall structures", "Often near villages", "Approach with caution"),
        "worth_revisiting": False,
    },
    # Temples
    "desert_temple": {
        "biomes": ("desert",),
        "rarity": "uncommon",
        "finding_difficulty": "medium",
        "search_strategy": "grid_search",
        "visual_cues": ("orange_terracotta", "pyramid_shape", "symmetrical"),
        "detectable_from": 80,
        "search_radius": 800,
        "loot": ("diamonds", "emeralds", "gold", "enchanted_books", "horse_armor"),
        "dangers": ("tnt_trap", "fall_damage"),
        "preparations": ("shovel", "pickaxe", "torches", "caution"),
        "navigation_tips": ("Search flat desert areas", "Look for orange terracotta", "Disarm TNT trap"),
        "worth_revisiting": False,
    },
    "jungle_temple": {
        "biomes": ("jungle",),
        "rarity": "rare",
        "finding_difficulty": "hard",
        "search_strategy": "systematic_clearing",
        "visual_cues": ("cobblestone", "mossy_cobblestone", "vines"),
        "detectable_from": 30,
        "search_radius": 1000,
        "loot": ("diamonds", "emeralds", "gold", "iron"),
        "dangers": ("arrow_trap", "dispenser_trap"),
        "preparations": ("axe", "shears", "torches", "caution"),
        "navigation_tips": ("Cut through dense jungle", "Look for moss stone", "Very hard to spot"),
        "worth_revisiting": False,
    },
    # Rare
    "woodland_mansion": {
        "biomes": ("dark_forest",),
        "rarity": "very_rare",
        "finding_difficulty": "extreme",
        "search_strategy": "cartographer_map",
        "visual_cues": ("large_building", "dark_oak", "cobblestone"),
        "detectable_from": 150,
        "search_radius": 20000,
        "loot": ("totems_of_undying", "diamonds", "emeralds", "enchanted_books"),
        "dangers": ("vindicators", "evokers", "vexes"),
        "preparations": ("full_armor", "weapons", "shields", "food", "totems"),
        "navigation_tips": ("Use cartographer map", "Extremely far", "Prepare for long journey"),
        "worth_revisiting": True,
    },
    "ocean_monument": {
        "biomes": ("ocean", "deep_ocean"),
        "rarity": "rare",
        "finding_difficulty": "hard",
        "search_strategy": "ocean_exploration",
        "visual_cues": ("prismarine", "large_structure", "guardians"),
        "detectable_from": 60,
        "search_radius": 1500,
        "loot": ("sponges", "prismarine", "gold_blocks", "sea_lanterns"),
        "dangers": ("guardians", "elder_guardians", "mining_fatigue", "drowning"),
        "preparations": ("water_breathing_potions", "night_vision_potions", "armor", "food"),
        "navigation_tips": ("Search deep ocean", "Look for guardian spawns", "Prepare for underwater combat"),
        "worth_revisiting": True,
    },
    # Nether
    "nether_fortress": {
        "biomes": ("nether_wastes", "soul_sand_valley"),
        "rarity": "uncommon",
        "finding_difficulty": "medium",
        "search_strategy": "nether_highway_search",
        "visual_cues": ("nether_brick", "bridges", "towers"),
        "detectable_from": 100,
        "search_radius": 800,
        "loot": ("nether_wart", "blaze_rods", "diamonds", "horse_armor"),
        "dangers": ("blazes", "wither_skeletons", "lava"),
        "preparations": ("fire_resistance", "armor", "bow", "blocks"),
        "navigation_tips": ("Travel along Z axis", "Look for dark brick", "Build bridges"),
        "worth_revisiting": True,
    },
    "bastion_remnant": {
        "biomes": ("nether_wastes", "crimson_forest", "warped_forest", "soul_sand_valley"),
        "rarity": "uncommon",
        "finding_difficulty": "medium",
        "search_strategy": "random_exploration",
        "visual_cues": ("blackstone", "gold_blocks", "piglins"),
        "detectable_from": 80,
        "search_radius": 600,
        "loot": ("ancient_debris", "gold", "enchanted_gear", "netherite_scrap"),
        "dangers": ("piglins", "piglin_brutes", "magma_cubes", "lava"),
        "preparations": ("gold_armor", "fire_resistance", "weapons", "blocks"),
        "navigation_tips": ("Wear gold armor", "Avoid piglin brutes", "Search all biomes"),
        "worth_revisiting": True,
    },
    # End
    "end_city": {
        "biomes": ("the_end",),
        "rarity": "uncommon",
        "finding_difficulty": "medium",
        "search_strategy": "island_hopping",
        "visual_cues": ("purpur_blocks", "tall_towers", "shulkers"),
        "detectable_from": 120,
        "search_radius": 1000,
        "loot": ("elytra", "shulker_shells", "enchanted_gear", "diamonds"),
        "dangers": ("shulkers", "void", "levitation"),
        "preparations": ("ender_pearls", "blocks", "slow_falling_potions", "armor"),
        "navigation_tips": ("Bridge between islands", "Look for tall purpur structures", "Watch for void"),
        "worth_revisiting": True,
    },
    # Common
    "mineshaft": {
        "biomes": ("any_underground", "badlands"),
        "rarity": "common",
        "finding_difficulty": "medium",
        "search_strategy": "cave_exploration",
        "visual_cues": ("oak_planks", "rails", "cobwebs"),
        "detectable_from": 20,
        "search_radius": 300,
        "loot": ("rails", "minecarts", "ores", "melon_seeds"),
        "dangers": ("cave_spiders", "falls", "lava"),
        "preparations": ("torches", "pickaxe", "armor", "food", "milk"),
        "navigation_tips": ("Explore caves", "Follow rail sounds", "Badlands have exposed mineshafts"),
        "worth_revisiting": False,
    },
    "stronghold": {
        "biomes": ("any_overworld",),
        "rarity": "very_rare",
        "finding_difficulty": "extreme",
        "search_strategy": "ender_eye_tracking",
        "visual_cues": ("stone_bricks", "iron_bars", "underground"),
        "detectable_from": 10,
        "search_radius": 3000,
        "loot": ("end_portal", "library_books", "ores"),
        "dangers": ("silverfish", "falls", "dead_ends"),
        "preparations": ("ender_eyes", "pickaxe", "torches", "blocks", "food"),
        "navigation_tips": ("Use eyes of ender", "Dig down carefully", "Mark your path"),
        "worth_revisiting": True,
    },
    # Small
    "shipwreck": {
        "biomes": ("ocean", "beach"),
        "rarity": "common",
        "finding_difficulty": "easy",
        "search_strategy": "ocean_scanning",
        "visual_cues": ("wood_planks", "broken_ship"),
        "detectable_from": 40,
        "search_radius": 400,
        "loot": ("treasure_map", "iron", "gold", "emeralds"),
        "dangers": ("drowned", "drowning"),
        "preparations": ("boat", "water_breathing", "weapon"),
        "navigation_tips": ("Scan ocean floor", "Check beaches", "Often partially buried"),
        "worth_revisiting": False,
    },
    "buried_treasure": {
        "biomes": ("beach",),
        "rarity": "uncommon",
        "finding_difficulty": "medium",
        "search_strategy": "treasure_map",
        "visual_cues": ("X_marks_spot",),
        "detectable_from": 0,
        "search_radius": 50,
        "loot": ("heart_of_the_sea", "diamonds", "emeralds", "iron"),
        "dangers": ("drowned",),
        "preparations": ("treasure_map", "shovel"),
        "navigation_tips": ("Get map from shipwreck", "Dig at X", "Usually 3-6 blocks deep"),
        "worth_revisiting": False,
    },
    "ruined_portal": {
        "biomes": ("any",),
        "rarity": "common",
        "finding_difficulty": "easy",
        "search_strategy": "random_exploration",
        "visual_cues": ("obsidian", "crying_obsidian", "netherrack"),
        "detectable_from": 60,
        "search_radius": 500,
        "loot": ("gold", "flint_and_steel", "obsidian", "enchanted_gear"),
        "dangers": ("lava", "falls"),
        "preparations": ("pickaxe", "water_bucket"),
        "navigation_tips": ("Very common", "Can spawn anywhere", "Check chest for loot"),
        "worth_revisiting": False,
    },
}

DEFAULT_STRUCTURE_PROFILE: Mapping[str, Any] = {
    "biomes": (),
    "rarity": "unknown",
    "finding_difficulty": "medium",
    "search_strategy": "random_walk",
    "visual_cues": (),
    "detectable_from": 0,
    "search_radius": None,
    "loot": (),
    "dangers": (),
    "preparations": ("basic_supplies",),
    "navigation_tips": (),
    "worth_revisiting": False,
}

STRUCTURE_SYNONYMS = {
    "outpost": "pillager_outpost",
    "temple": "desert_temple",
    "pyramid": "desert_temple",
    "mansion": "woodland_mansion",
    "monument": "ocean_monument",
    "fortress": "nether_fortress",
    "bastion": "bastion_remnant",
    "end_portal": "stronghold",
    "treasure": "buried_treasure",
    "portal": "ruined_portal",
}


def get_structure_profile(name: Any) -> Optional[Mapping[str, Any]]:
    """
    Profile for a named structure, the neutral default for an unknown name,
    or None when no structure was requested.
    """
    if not name:
        return None
    found = lookup_entry(STRUCTURE_PROFILES, name, synonyms=STRUCTURE_SYNONYMS)
    return found[1] if found else DEFAULT_STRUCTURE_PROFILE
