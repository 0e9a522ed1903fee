# src/domain/trades.py
"""
Villager professions, their per-level trades and the wandering trader.

Trade rows are plain dicts:

  {"buy": "paper", "buyCount": 24, "sell": "emerald", "sellCount": 1}

Randomized prices are stored as {"min": lo, "max": hi} and resolved with
`resolve_price()`; planning always takes the minimum unless a policy is
given.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .lookup import lookup_key, table_key


LEVELS = ("novice", "apprentice", "journeyman", "expert", "master")

LEVEL_XP: Mapping[str, Mapping[str, Any]] = {
    "novice": {"xpRequired": 0, "badge": "stone"},
    "apprentice": {"xpRequired": 10, "badge": "iron"},
    "journeyman": {"xpRequired": 70, "badge": "gold"},
    "expert": {"xpRequired": 150, "badge": "emerald"},
    "master": {"xpRequired": 250, "badge": "diamond"},
}

HERO_DISCOUNT = 0.30
CURED_DISCOUNT = 0.20
MAX_TRADES_PER_RESTOCK = 2

# score thresholds, highest first
REPUTATION_RANGES: Tuple[Tuple[str, int], ...] = (
    ("excellent", 100),
    ("good", 30),
    ("neutral", 0),
    ("bad", -30),
    ("terrible", -100),
)
REPUTATION_EFFECTS: Mapping[str, Mapping[str, Any]] = {
    "excellent": {"discount": 0.2},
    "good": {"discount": 0.1},
    "neutral": {},
    "bad": {"priceIncrease": 0.2, "ironGolemAggro": True},
    "terrible": {"noTrades": True, "ironGolemAggro": True},
}


def _r(lo: int, hi: int) -> Dict[str, int]:
    return {"min": lo, "max": hi}


def _t(buy: str, count: Any, sell: str, sell_count: int = 1, buy2: Optional[str] = None, buy2_count: int = 0):
    row = {"buy": buy, "buyCount": count, "sell": sell, "sellCount": sell_count}
    if buy2:
        row.update(buy2=buy2, buy2Count=buy2_count)
    return row


def _sells(item: str, count: int) -> Dict[str, Any]:
    """Villager buys `count` of `item` for one emerald."""
    return _t(item, count, "emerald")


def _costs(emeralds: Any, item: str, count: int = 1, **kw: Any) -> Dict[str, Any]:
    """Villager sells `count` of `item` for emeralds."""
    return _t("emerald", emeralds, item, count, **kw)


VILLAGER_PROFESSIONS: Mapping[str, Mapping[str, Any]] = {
    "armorer": {
        "workstation": "blast_furnace",
        "trades": {
            "novice": [_sells("coal", 15), _costs(5, "iron_helmet"), _costs(9, "iron_chestplate"),
                       _costs(5, "iron_leggings"), _costs(4, "iron_boots")],
            "apprentice": [_sells("iron_ingot", 4), _costs(36, "bell"), _costs(3, "chainmail_leggings"),
                           _costs(1, "chainmail_boots")],
            "journeyman": [_sells("lava_bucket", 1), _sells("diamond", 1), _costs(1, "chainmail_helmet"),
                           _costs(4, "chainmail_chestplate"), _costs(5, "shield")],
            "expert": [_costs(_r(19, 33), "enchanted_diamond_leggings"), _costs(_r(13, 27), "enchanted_diamond_boots")],
            "master": [_costs(_r(13, 27), "enchanted_diamond_helmet"),
                       _costs(_r(21, 35), "enchanted_diamond_chestplate")],
        },
    },
    "butcher": {
        "workstation": "smoker",
        "trades": {
            "novice": [_sells("chicken", 14), _sells("porkchop", 7), _sells("rabbit", 4), _costs(1, "rabbit_stew")],
            "apprentice": [_sells("coal", 15), _costs(1, "cooked_porkchop", 5), _costs(1, "cooked_chicken", 8)],
            "journeyman": [_sells("mutton", 7), _sells("beef", 10)],
            "expert": [_sells("dried_kelp_block", 10)],
            "master": [_sells("sweet_berries", 10)],
        },
    },
    "cartographer": {
        "workstation": "cartography_table",
        "trades": {
            "novice": [_sells("paper", 24), _costs(7, "empty_map")],
            "apprentice": [_sells("glass_pane", 11),
                           _costs(13, "ocean_explorer_map", buy2="compass", buy2_count=1)],
            "journeyman": [_sells("compass", 1),
                           _costs(14, "woodland_explorer_map", buy2="compass", buy2_count=1)],
            "expert": [_costs(7, "item_frame"), _costs(3, "white_banner"), _costs(3, "blue_banner")],
            "master": [_costs(8, "globe_banner_pattern")],
        },
    },
    "cleric": {
        "workstation": "brewing_stand",
        "trades": {
            "novice": [_sells("rotten_flesh", 32), _costs(1, "redstone_dust", 2)],
            "apprentice": [_sells("gold_ingot", 3), _costs(1, "lapis_lazuli")],
            "journeyman": [_sells("rabbit_foot", 2), _costs(4, "glowstone"), _costs(1, "ender_pearl")],
            "expert": [_sells("scute", 4), _sells("glass_bottle", 9), _costs(5, "experience_bottle")],
            "master": [_sells("nether_wart", 22), _costs(3, "ender_pearl")],
        },
    },
    "farmer": {
        "workstation": "composter",
        "trades": {
            "novice": [_sells("wheat", 20), _sells("potato", 26), _sells("carrot", 22), _sells("beetroot", 15),
                       _costs(1, "bread", 6)],
            "apprentice": [_sells("pumpkin", 6), _costs(1, "pumpkin_pie", 4), _costs(1, "apple", 4)],
            "journeyman": [_sells("melon", 4), _costs(3, "cookie", 18)],
            "expert": [_costs(1, "cake"), _costs(1, "suspicious_stew")],
            "master": [_costs(3, "golden_carrot", 3), _costs(4, "glistering_melon_slice", 3)],
        },
    },
    "fisherman": {
        "workstation": "barrel",
        "trades": {
            "novice": [_sells("string", 20), _sells("coal", 10),
                       _costs(5, "cooked_cod", 6, buy2="tropical_fish", buy2_count=1)],
            "apprentice": [_sells("cod", 6), _costs(1, "cooked_salmon", 6), _costs(1, "campfire")],
            "journeyman": [_sells("salmon", 6), _costs(_r(7, 22), "enchanted_fishing_rod")],
            "expert": [_sells("tropical_fish", 6)],
            "master": [_sells("pufferfish", 4), _sells("boat", 1)],
        },
    },
    "fletcher": {
        "workstation": "fletching_table",
        "trades": {
            "novice": [_sells("stick", 32), _costs(1, "arrow", 16),
                       _costs(1, "flint", 10, buy2="gravel", buy2_count=10)],
            "apprentice": [_sells("flint", 26), _costs(2, "bow")],
            "journeyman": [_sells("string", 14), _costs(3, "crossbow")],
            "expert": [_sells("feather", 24), _costs(_r(7, 21), "enchanted_bow")],
            "master": [_sells("tripwire_hook", 8), _costs(_r(8, 22), "enchanted_crossbow"),
                       _costs(2, "tipped_arrow", 5, buy2="arrow", buy2_count=5)],
        },
    },
    "leatherworker": {
        "workstation": "cauldron",
        "trades": {
            "novice": [_sells("leather", 6), _costs(3, "leather_pants"), _costs(7, "leather_tunic")],
            "apprentice": [_sells("flint", 26), _costs(5, "leather_cap"), _costs(4, "leather_boots")],
            "journeyman": [_sells("rabbit_hide", 9), _costs(7, "leather_tunic")],
            "expert": [_sells("scute", 4), _costs(6, "leather_horse_armor")],
            "master": [_costs(6, "saddle"), _costs(5, "leather_cap")],
        },
    },
    "librarian": {
        "workstation": "lectern",
        "trades": {
            "novice": [_sells("paper", 24), _costs(_r(5, 64), "enchanted_book", buy2="book", buy2_count=1),
                       _costs(1, "bookshelf")],
            "apprentice": [_sells("book", 4), _costs(_r(5, 64), "enchanted_book", buy2="book", buy2_count=1),
                           _costs(1, "lantern")],
            "journeyman": [_sells("ink_sac", 5), _costs(_r(5, 64), "enchanted_book", buy2="book", buy2_count=1),
                           _costs(1, "glass", 4)],
            "expert": [_sells("book_and_quill", 2),
                       _costs(_r(5, 64), "enchanted_book", buy2="book", buy2_count=1),
                       _costs(5, "clock"), _costs(4, "compass")],
            "master": [_costs(20, "name_tag")],
        },
    },
    "mason": {
        "workstation": "stonecutter",
        "trades": {
            "novice": [_sells("clay_ball", 10), _costs(1, "brick", 10)],
            "apprentice": [_sells("stone", 20), _costs(1, "chiseled_stone_bricks", 4)],
            "journeyman": [_sells("granite", 16), _sells("andesite", 16), _sells("diorite", 16),
                           _costs(1, "polished_andesite", 4)],
            "expert": [_sells("nether_quartz", 12), _costs(1, "colored_terracotta"), _costs(1, "glazed_terracotta")],
            "master": [_costs(1, "quartz_pillar"), _costs(1, "block_of_quartz")],
        },
    },
    "shepherd": {
        "workstation": "loom",
        "trades": {
            "novice": [_sells("white_wool", 18), _sells("brown_wool", 18), _sells("black_wool", 18),
                       _sells("gray_wool", 18), _costs(2, "shears")],
            "apprentice": [_sells("dye", 12), _costs(1, "wool"), _costs(1, "carpet", 4)],
            "journeyman": [_costs(3, "bed"), _costs(3, "colored_bed")],
            "expert": [_costs(3, "banner")],
            "master": [_costs(2, "painting", 3)],
        },
    },
    "toolsmith": {
        "workstation": "smithing_table",
        "trades": {
            "novice": [_sells("coal", 15), _costs(1, "stone_axe"), _costs(1, "stone_shovel"),
                       _costs(1, "stone_pickaxe"), _costs(1, "stone_hoe")],
            "apprentice": [_sells("iron_ingot", 4), _costs(36, "bell")],
            "journeyman": [_sells("flint", 30), _costs(_r(6, 20), "enchanted_iron_axe"),
                           _costs(_r(7, 21), "enchanted_iron_shovel"), _costs(_r(8, 22), "enchanted_iron_pickaxe")],
            "expert": [_sells("diamond", 1), _costs(_r(17, 31), "enchanted_diamond_axe"),
                       _costs(_r(10, 24), "enchanted_diamond_shovel")],
            "master": [_costs(_r(18, 32), "enchanted_diamond_pickaxe")],
        },
    },
    "weaponsmith": {
        "workstation": "grindstone",
        "trades": {
            "novice": [_sells("coal", 15), _costs(3, "iron_axe"), _costs(_r(7, 21), "enchanted_iron_sword")],
            "apprentice": [_sells("iron_ingot", 4), _costs(36, "bell")],
            "journeyman": [_sells("flint", 24)],
            "expert": [_sells("diamond", 1), _costs(_r(17, 31), "enchanted_diamond_axe")],
            "master": [_costs(_r(13, 27), "enchanted_diamond_sword")],
        },
    },
    "nitwit": {"workstation": None, "trades": {}},
}

WANDERING_TRADER = "wandering_trader"
WANDERING_TRADER_TRADES: List[Dict[str, Any]] = [
    _costs(5, "gunpowder"),
    _costs(1, "lily_pad", 2),
    _costs(1, "slime_ball"),
    _costs(3, "glowstone"),
    _costs(1, "nautilus_shell"),
    _costs(5, "coral_block"),
    _costs(5, "blue_ice"),
    _costs(1, "podzol", 3),
    _costs(1, "kelp", 3),
    _costs(1, "cactus"),
    _costs(3, "fern"),
    _costs(5, "pumpkin"),
    _costs(1, "vine", 3),
    _costs(1, "small_dripleaf", 2),
    _costs(5, "pointed_dripstone", 2),
]

PROFESSION_SYNONYMS = {"librarian_villager": "librarian", "smith": "toolsmith", "wanderer": WANDERING_TRADER}


def resolve_price(value: Any, policy: str = "min") -> int:
    """Concrete count from a fixed price or a {min, max} range."""
    if isinstance(value, Mapping):
        lo, hi = int(value.get("min", 1)), int(value.get("max", value.get("min", 1)))
        if policy == "max":
            return hi
        if policy in ("mid", "average"):
            return (lo + hi + 1) // 2
        return lo
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def get_profession_info(profession: Any) -> Optional[Dict[str, Any]]:
    key = table_key(profession)
    if key == WANDERING_TRADER or PROFESSION_SYNONYMS.get(key) == WANDERING_TRADER:
        return {"name": WANDERING_TRADER, "workstation": None, "trades": {level: WANDERING_TRADER_TRADES for level in LEVELS}}
    key = lookup_key(VILLAGER_PROFESSIONS, profession, synonyms=PROFESSION_SYNONYMS, substring=False)
    return {"name": key, **VILLAGER_PROFESSIONS[key]} if key else None


def get_available_trades(profession: Any, level: Any = "novice") -> List[Dict[str, Any]]:
    info = get_profession_info(profession)
    if info is None:
        return []
    return [dict(t) for t in info["trades"].get(table_key(level) or "novice", [])]


def level_for_xp(xp: Any) -> str:
    """Highest level whose XP threshold `xp` has reached."""
    try:
        value = float(xp)
    except (TypeError, ValueError):
        return "novice"
    reached = "novice"
    for level in LEVELS:
        if value >= LEVEL_XP[level]["xpRequired"]:
            reached = level
    return reached


def reputation_tier(score: Any) -> str:
    try:
        value = float(score)
    except (TypeError, ValueError):
        return "neutral"
    for tier, threshold in REPUTATION_RANGES:
        if value >= threshold:
            return tier
    return "terrible"


def _discounted(count: int, factor: float) -> int:
    return int(math.ceil(count * factor)) if count else 0


def calculate_trade_value(trade: Mapping[str, Any], modifiers: Optional[Mapping[str, Any]] = None,
                          policy: str = "min") -> Dict[str, Any]:
    """
    Effective price of `trade` after discounts and increases.

    Each modifier multiplies the price and rounds up; the primary cost
    never drops below 1.
    """
    mods = modifiers or {}
    original = resolve_price(trade.get("buyCount"), policy)
    buy_count = original
    buy2_count = resolve_price(trade.get("buy2Count") or 0, policy)

    factors = []
    if mods.get("heroDiscount"):
        factors.append(1 - HERO_DISCOUNT)
    if mods.get("reputationDiscount"):
        factors.append(1 - float(mods["reputationDiscount"]))
    if mods.get("curedDiscount"):
        factors.append(1 - CURED_DISCOUNT)
    if mods.get("reputationIncrease"):
        factors.append(1 + float(mods["reputationIncrease"]))
    for factor in factors:
        buy_count = _discounted(buy_count, factor)
        buy2_count = _discounted(buy2_count, factor)

    return {
        "buy": trade.get("buy"),
        "buyCount": max(1, buy_count),
        "buy2": trade.get("buy2"),
        "buy2Count": max(1, buy2_count) if buy2_count > 0 else 0,
        "sell": trade.get("sell"),
        "sellCount": trade.get("sellCount", 1),
        "originalBuyCount": original,
        "discount": buy_count < original,
    }


def format_trade(trade: Mapping[str, Any]) -> str:
    text = f"{trade['buyCount']} {trade['buy']}"
    if trade.get("buy2"):
        text += f" + {trade['buy2Count']} {trade['buy2']}"
    return f"{text} -> {trade['sellCount']} {trade['sell']}"
