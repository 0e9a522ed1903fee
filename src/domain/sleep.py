# src/domain/sleep.py
"""
Bed types and the rules that gate sleeping.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .lookup import lookup_key, table_key


BED_COLORS = (
    "white", "orange", "magenta", "light_blue", "yellow", "lime", "pink", "gray",
    "light_gray", "cyan", "purple", "blue", "brown", "green", "red", "black",
)

BED_TYPES: Mapping[str, Mapping[str, Any]] = {
    f"{color}_bed": {"color": color, "stackSize": 1} for color in BED_COLORS
}

# ticks, 20 per second
SLEEP_WINDOW_START = 12541
SLEEP_WINDOW_END = 23458
THUNDERSTORM_OVERRIDE = True
SLEEP_TICKS = 100
WAKE_TICKS = 20
TICKS_PER_SECOND = 20

PHANTOM_THRESHOLD_DAYS = 3
RESPAWN_MESSAGE = "Respawn point set"

MOB_RADIUS = 8
MOB_VERTICAL_RADIUS = 5
ALLOWED_MOBS = frozenset({"villager", "iron_golem", "cat", "chicken", "cow", "pig", "sheep"})

ALLOWED_DIMENSIONS = frozenset({"overworld"})
EXPLOSION_POWER = 5.0

MIN_HEADROOM = 2
MAX_SOLID_NEIGHBOURS = 8

BED_RECIPE_HINT = "Craft a bed (3 wool + 3 planks) or find one in a village"


def get_bed_info(name: Any) -> Optional[Dict[str, Any]]:
    key = lookup_key(BED_TYPES, name, substring=False)
    if key is None and table_key(name) == "bed":
        key = "white_bed"
    return {"type": key, **BED_TYPES[key]} if key else None


def is_bed(name: Any) -> bool:
    return lookup_key(BED_TYPES, name, substring=False) is not None
