# src/domain/composting.py
"""
Composter fill chances and bone meal yield.

A composter needs 7 successful fills for one bone meal; each item
fills with its tier chance.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

from .lookup import lookup_key, table_key


FILLS_PER_BONEMEAL = 7
HOPPER_ITEMS_PER_SECOND = 2.5
MIXED_ITEMS_PER_BONEMEAL = 11
COMPOSTER_RECIPE = "7 wooden slabs"

# chance -> average items consumed per bone meal
ITEMS_PER_BONEMEAL = {0.30: 23, 0.50: 14, 0.65: 11, 0.85: 8, 1.00: 7}

_TIERS = {
    0.30: {
        "seeds": ("beetroot_seeds", "melon_seeds", "pumpkin_seeds", "torchflower_seeds", "wheat_seeds"),
        "plant": ("dried_kelp", "grass", "hanging_roots", "kelp", "leaves", "saplings", "seagrass",
                  "small_dripleaf"),
        "food": ("glow_berries", "sweet_berries"),
    },
    0.50: {
        "plant": ("cactus", "dried_kelp_block", "flowering_azalea_leaves", "glow_lichen", "moss_carpet",
                  "nether_sprouts", "sugar_cane", "tall_grass", "twisting_vines", "vines", "weeping_vines"),
        "food": ("melon_slice",),
    },
    0.65: {
        "food": ("apple", "beetroot", "carrot", "cocoa_beans", "melon", "potato", "pumpkin", "wheat"),
        "plant": ("azalea", "big_dripleaf", "fern", "flowers", "lily_pad", "moss_block", "mushrooms",
                  "nether_wart", "sea_pickle", "shroomlight", "spore_blossom", "torchflower"),
        "seeds": ("pitcher_pod",),
    },
    0.85: {
        "food": ("baked_potato", "bread", "cookie"),
        "plant": ("flowering_azalea", "hay_block", "mushroom_blocks", "nether_wart_block", "warped_wart_block"),
    },
    1.00: {"food": ("cake", "pumpkin_pie")},
}

COMPOSTABLE_ITEMS: Dict[str, Mapping[str, Any]] = {
    name: {"chance": chance, "category": category}
    for chance, groups in _TIERS.items()
    for category, names in groups.items()
    for name in names
}

# item families that match on a fragment of the name
COMPOSTABLE_FAMILIES = (("sapling", "saplings"), ("leaves", "leaves"), ("flower", "flowers"), ("mushroom", "mushrooms"))

COMPOSTABLE_SYNONYMS = {"seeds": "wheat_seeds", "vine": "vines", "hay_bale": "hay_block", "hay": "hay_block"}

BONEMEAL_USES = {
    "crops": "Instantly grows crops to next stage",
    "saplings": "Instantly grows tree (if space available)",
    "flowers": "Creates flower field",
    "grass": "Creates tall grass and flowers",
}


def get_compostable_info(name: Any) -> Optional[Dict[str, Any]]:
    """Chance and category for `name`, keeping the caller's item name."""
    normalized = table_key(name)
    if not normalized:
        return None
    key = lookup_key(COMPOSTABLE_ITEMS, normalized, synonyms=COMPOSTABLE_SYNONYMS, substring=False)
    if key is None:
        key = next((family for fragment, family in COMPOSTABLE_FAMILIES if fragment in normalized), None)
    if key is None:
        return None
    return {**COMPOSTABLE_ITEMS[key], "itemName": normalized, "family": key}


def is_compostable(name: Any) -> bool:
    return get_compostable_info(name) is not None


def items_per_bonemeal(chance: float) -> int:
    return ITEMS_PER_BONEMEAL.get(round(chance, 2), int(math.ceil(FILLS_PER_BONEMEAL / chance)))


def _rating(chance: float) -> str:
    if chance >= 0.85:
        return "excellent"
    if chance >= 0.65:
        return "good"
    if chance >= 0.50:
        return "fair"
    return "poor"


def calculate_composting_efficiency(name: Any, quantity: int = 1) -> Dict[str, Any]:
    """Expected bone meal is floor(quantity * chance / 7)."""
    info = get_compostable_info(name)
    if info is None:
        return {"error": "Item is not compostable", "itemName": table_key(name)}
    chance = info["chance"]
    return {
        "item": info["itemName"],
        "quantity": quantity,
        "chance": chance,
        "category": info["category"],
        "expectedBonemeal": int(math.floor(quantity * chance / FILLS_PER_BONEMEAL + 1e-9)),
        "itemsPerBonemeal": items_per_bonemeal(chance),
        "efficiency": f"{chance * 100:.0f}%",
        "rating": _rating(chance),
    }
