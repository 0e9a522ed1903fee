# src/domain/minecarts.py
"""
Minecart variants, rail types and station designs.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .lookup import lookup_key


MAX_SPEED = 8.0  # blocks per second on powered rails
AVERAGE_SPEED_FACTOR = 0.8
FLAT_POWER_SPACING = 38
OPTIMAL_POWER_SPACING = 8
RAILS_PER_CRAFT = 16
POWERED_RAILS_PER_CRAFT = 6
IRON_PER_RAIL_CRAFT = 6
GOLD_PER_POWERED_CRAFT = 6
TORCH_POWER_RANGE = 9
LONG_ROUTE = 500
BUILD_SECONDS_PER_BLOCK = 2
MINECART_IRON = 5


def _cart(kind: str, **extra: Any) -> Dict[str, Any]:
    return {"type": kind, "stackSize": 1, "maxSpeed": MAX_SPEED, **extra}


MINECART_TYPES: Mapping[str, Mapping[str, Any]] = {
    "minecart": _cart("passenger", capacity=1, canContainEntities=True),
    "chest_minecart": _cart("storage", capacity=27, canContainItems=True, hopperInteraction=True),
    "furnace_minecart": _cart(
        "powered",
        capacity=0,
        maxSpeed=4.0,
        requiresFuel=True,
        fuelTypes=("coal", "charcoal"),
        fuelMinutes=3,
        canPush=True,
    ),
    "hopper_minecart": _cart("hopper", capacity=5, canContainItems=True, autoCollect=True, hopperInteraction=True),
    "tnt_minecart": _cart(
        "explosive",
        capacity=0,
        explosionPower=4.0,
        activators=("activator_rail", "fire", "lava", "explosion", "fall_damage"),
    ),
    "command_block_minecart": _cart("command", capacity=0, requiresOp=True, activators=("activator_rail",)),
}

RAIL_TYPES: Mapping[str, Mapping[str, Any]] = {
    "rail": {"type": "normal", "powered": False, "canTurn": True,
             "crafting": {"materials": ("iron_ingot", "stick"), "yield": 16}},
    "powered_rail": {
        "type": "powered",
        "powered": True,
        "canTurn": False,
        "acceleration": 0.06,
        "powerRange": TORCH_POWER_RANGE,
        "crafting": {"materials": ("gold_ingot", "stick", "redstone_dust"), "yield": 6},
    },
    "detector_rail": {
        "type": "detector",
        "powered": False,
        "canTurn": False,
        "outputPower": 15,
        "crafting": {"materials": ("iron_ingot", "stone_pressure_plate", "redstone_dust"), "yield": 6},
    },
    "activator_rail": {
        "type": "activator",
        "powered": True,
        "canTurn": False,
        "effects": {
            "hopper_minecart": "disable_hopper",
            "tnt_minecart": "prime_tnt",
            "command_block_minecart": "execute_command",
            "player": "eject",
        },
        "crafting": {"materials": ("iron_ingot", "stick", "redstone_torch"), "yield": 6},
    },
}

MINECART_SYNONYMS = {"cart": "minecart", "storage_minecart": "chest_minecart", "tnt_cart": "tnt_minecart"}

STATION_DESIGNS: Mapping[str, Mapping[str, Any]] = {
    "loading": {
        "description": "Player/items enter minecart",
        "dimensions": {"width": 3, "length": 5, "height": 3},
        "complexity": "easy",
        "buildSteps": (
            "Place powered rails at loading position",
            "Add button or lever next to rails for activation",
            "Build platform for player access",
            "Add redstone torch underneath for constant power (optional)",
            "Place minecart on rails",
        ),
        "materials": {"powered_rail": 3, "button": 1, "building_blocks": 15, "redstone_torch": 1},
    },
    "unloading": {
        "description": "Player/items exit minecart",
        "dimensions": {"width": 3, "length": 5, "height": 3},
        "complexity": "easy",
        "buildSteps": (
            "Place powered rails leading to station",
            "Add unpowered powered rails to stop minecart",
            "Place activator rail to eject passenger (optional)",
            "Build platform for player exit",
            "Add storage for minecart (optional)",
        ),
        "materials": {"powered_rail": 5, "activator_rail": 1, "building_blocks": 15},
    },
    "junction": {
        "description": "Rails split to multiple destinations",
        "dimensions": {"width": 5, "length": 7, "height": 3},
        "complexity": "medium",
        "buildSteps": (
            "Place detector rail before junction",
            "Build rail split using regular rails",
            "Add powered rails on each branch",
            "Install levers to control rail direction",
            "Add redstone wiring from detector to levers",
            "Test both paths",
        ),
        "materials": {"rail": 10, "powered_rail": 6, "detector_rail": 2, "lever": 2, "redstone_dust": 10,
                      "building_blocks": 20},
    },
    "booster": {
        "description": "Speed boost station",
        "dimensions": {"width": 1, "length": 8, "height": 2},
        "complexity": "easy",
        "buildSteps": (
            "Place 8 powered rails in a line",
            "Place redstone block underneath middle rail",
            "Power will spread to all 8 rails",
            "Minecart will reach max speed",
        ),
        "materials": {"powered_rail": 8, "redstone_block": 1},
        "speedBoost": "Accelerates to 8 blocks/second",
    },
}


def get_minecart_info(name: Any) -> Optional[Dict[str, Any]]:
    key = lookup_key(MINECART_TYPES, name, synonyms=MINECART_SYNONYMS, substring=False)
    return {"name": key, **MINECART_TYPES[key]} if key else None


def get_rail_info(name: Any) -> Optional[Dict[str, Any]]:
    key = lookup_key(RAIL_TYPES, name, substring=False)
    return {"name": key, **RAIL_TYPES[key]} if key else None


def is_minecart(name: Any) -> bool:
    return get_minecart_info(name) is not None


def is_rail(name: Any) -> bool:
    return get_rail_info(name) is not None
