# src/tasks/combat_utils.py
"""
Shared combat utilities for the combat and guard planners.

Equipment checks, loadout suggestions, durability telemetry, threat
assessment and defensive setups. All functions are pure; tables live in
`domain.combat`.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from domain.combat import (
    ALARM_SYSTEMS,
    DEFAULT_ARMOR,
    DURABILITY_CRITICAL_THRESHOLD,
    DURABILITY_LOW_THRESHOLD,
    ENEMY_COUNTERMEASURES,
    FORTIFICATION_OPTIONS,
    HEALTH_CRITICAL_THRESHOLD,
    HEALTH_LOW_THRESHOLD,
    PERIMETER_DEFENSE,
    WEAPON_MATCHUPS,
    enemy_key,
    get_enemy_profile,
)
from spec.types import UNSPECIFIED_ITEM, Inventory, PlanContext

from .helpers import has_inventory_item, normalize_item_name


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def optional_name(value: Any) -> str:
    """normalize_item_name, but the sentinel becomes an empty string."""
    name = normalize_item_name(value)
    return "" if name == UNSPECIFIED_ITEM else name


def display_name(name: Any) -> str:
    """"wither_skeleton" / "wither skeleton" -> "Wither Skeleton"."""
    text = str(name or "").replace("_", " ").split()
    if not text:
        return "Unknown"
    return " ".join(part[:1].upper() + part[1:] for part in text)


def format_list(values: Sequence[str]) -> str:
    values = [v for v in values if v]
    if not values:
        return ""
    if len(values) == 1:
        return values[0]
    return f"{', '.join(values[:-1])} and {values[-1]}"


def _finite(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if math.isfinite(value) else None


def durability_ratio(current: Any, maximum: Any) -> Optional[float]:
    current, maximum = _finite(current), _finite(maximum)
    if current is None or maximum is None or maximum <= 0:
        return None
    return current / maximum


# ---------------------------------------------------------------------------
# Equipment
# ---------------------------------------------------------------------------

def validate_equipment(equipment: Sequence[Any], context: Any = None) -> Dict[str, Any]:
    """
    Check required equipment against the context inventory.

    Returns `{valid, missing, warnings}`. An empty equipment list is never
    valid.
    """
    if not equipment:
        return {"valid": False, "missing": [], "warnings": ["No equipment specified"]}

    inventory = PlanContext.coerce(context).inventory
    missing = [item for item in equipment if not has_inventory_item(inventory, item)]
    return {
        "valid": not missing,
        "missing": missing,
        "warnings": [f"Missing equipment: {', '.join(missing)}"] if missing else [],
    }


def match_weapons(enemy_keys: Iterable[str], inventory: Inventory) -> List[Dict[str, Any]]:
    """Weapon matchups hit by `enemy_keys`, flagged with inventory availability."""
    keys = list(enemy_keys)
    matches: List[Dict[str, Any]] = []
    for matchup in WEAPON_MATCHUPS:
        hits = [key for key in keys if key in matchup["enemies"]]
        if not hits:
            continue
        weapon = matchup["weapon"]
        matches.append(
            {
                "weapon": weapon,
                "enemies": hits,
                "reason": matchup["reason"],
                "available": has_inventory_item(inventory, weapon),
            }
        )
    return matches


def recommend_weapons(
    enemy_types: Iterable[Any],
    inventory: Inventory,
    stance: Optional[str] = None,
    tactic: str = "",
    traits: Optional[Mapping[str, Any]] = None,
    base_primary: Optional[str] = None,
    base_secondary: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Primary / secondary weapons and the full recommended loadout.

    A matched counter weapon (one already carried preferred) overrides the
    base primary. Without a base, ranged stances or tactics pick a bow and
    aggressive NPCs (aggression > 0.6) an axe.
    """
    keys = [enemy_key(name) for name in enemy_types]
    matches = match_weapons(keys, inventory)

    aggression = (traits or {}).get("aggression")
    if isinstance(aggression, bool) or not isinstance(aggression, (int, float)):
        aggression = 0.3
    prefer_melee = "ranged" not in (tactic or "") and stance != "ranged"

    primary = optional_name(base_primary)
    secondary = optional_name(base_secondary)

    if matches:
        chosen = next((m for m in matches if m["available"]), matches[0])
        primary = chosen["weapon"]

    if not primary:
        if not prefer_melee:
            primary = "bow"
        else:
            primary = "axe" if aggression > 0.6 else "sword"
    if not secondary:
        if prefer_melee:
            secondary = "sword" if aggression > 0.6 else "shield"
        else:
            secondary = "sword"

    loadout: List[str] = []
    for weapon in [m["weapon"] for m in matches] + [primary, secondary]:
        if weapon and weapon not in loadout:
            loadout.append(weapon)

    return {"primary": primary, "secondary": secondary, "loadout": loadout, "matches": matches}


def suggest_loadout(
    enemy_types: Iterable[Any],
    context: Any = None,
    stance: str = "defensive",
    traits: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Loadout for expected enemies; matchups first, then stance and aggression."""
    inventory = PlanContext.coerce(context).inventory
    result = recommend_weapons(enemy_types, inventory, stance=stance, traits=traits)
    result["armor"] = [DEFAULT_ARMOR]
    return result


# ---------------------------------------------------------------------------
# Durability telemetry
# ---------------------------------------------------------------------------

_DURABILITY_TEXT = re.compile(
    r"([A-Za-z\s:_-]+)\s+durability\s+(?:is\s+)?(?:now\s*)?(\d+)(?:/(\d+))?",
    re.IGNORECASE,
)
_FRACTION_TEXT = re.compile(r"(\d+)(?:/(\d+))?")


def _durability_from_mapping(value: Mapping[str, Any]) -> tuple:
    current = _finite(value.get("current"))
    if current is None:
        current = _finite(value.get("durability"))
    maximum = _finite(value.get("max"))
    if maximum is None:
        maximum = _finite(value.get("maxDurability"))
    return current, maximum


def extract_durability_entries(context: Any) -> List[Dict[str, Any]]:
    """
    Durability readings reported by the bridge or the NPC.

    Pools are read from `bridgeState.equipmentDurability`,
    `bridgeState.durability`, `npc.equipmentDurability`, `npc.durability`
    and `equipmentDurability`. Each pool may be a list of records or
    "<item> durability is now 12/250" strings, or a name -> value mapping.
    """
    ctx = PlanContext.coerce(context)
    bridge = ctx.get("bridgeState", default={})
    if not isinstance(bridge, Mapping):
        bridge = {}
    npc = ctx.npc
    pools = [
        bridge.get("equipmentDurability"),
        bridge.get("durability"),
        npc.get("equipmentDurability"),
        npc.get("durability"),
        ctx.get("equipmentDurability"),
    ]

    entries: List[Dict[str, Any]] = []
    for pool in pools:
        if not pool:
            continue
        if isinstance(pool, (list, tuple)):
            for item in pool:
                if isinstance(item, Mapping):
                    name = optional_name(item.get("name") or item.get("item") or item.get("id"))
                    current, maximum = _durability_from_mapping(item)
                    if name and (current is not None or maximum is not None):
                        entries.append({"name": name, "current": current, "max": maximum})
                elif isinstance(item, str):
                    match = _DURABILITY_TEXT.search(item)
                    if match:
                        name = optional_name(match.group(1))
                        if name:
                            entries.append(
                                {
                                    "name": name,
                                    "current": int(match.group(2)),
                                    "max": int(match.group(3)) if match.group(3) else None,
                                }
                            )
        elif isinstance(pool, Mapping):
            for raw_name, raw_value in pool.items():
                name = optional_name(raw_name)
                if not name:
                    continue
                if isinstance(raw_value, Mapping):
                    current, maximum = _durability_from_mapping(raw_value)
                    if current is not None or maximum is not None:
                        entries.append({"name": name, "current": current, "max": maximum})
                elif _finite(raw_value) is not None:
                    entries.append({"name": name, "current": raw_value, "max": None})
                elif isinstance(raw_value, str):
                    match = _FRACTION_TEXT.search(raw_value)
                    if match:
                        entries.append(
                            {
                                "name": name,
                                "current": int(match.group(1)),
                                "max": int(match.group(2)) if match.group(2) else None,
                            }
                        )
    return entries


def build_durability_alerts(
    entries: Sequence[Mapping[str, Any]],
    focus_items: Sequence[Any] = (),
) -> List[Dict[str, Any]]:
    """
    Alerts for focus items at or below half durability.

    Readings without a known ratio are reported with level "unknown".
    """
    focus = {optional_name(item) for item in focus_items} - {""}
    alerts: List[Dict[str, Any]] = []
    for entry in entries:
        if focus and entry["name"] not in focus:
            continue
        ratio = durability_ratio(entry.get("current"), entry.get("max"))
        if ratio is None:
            level = "unknown"
        elif ratio <= DURABILITY_CRITICAL_THRESHOLD:
            level = "critical"
        elif ratio <= DURABILITY_LOW_THRESHOLD:
            level = "low"
        else:
            continue
        alerts.append(
            {
                "item": entry["name"],
                "current": entry.get("current"),
                "max": entry.get("max"),
                "ratio": ratio,
                "level": level,
            }
        )
    return alerts


def check_readiness(context: Any = None, critical_items: Sequence[Any] = ()) -> Dict[str, Any]:
    """`{ready, issues, warnings, durabilityEntries}` from durability and health telemetry."""
    ctx = PlanContext.coerce(context)
    entries = extract_durability_entries(ctx)
    critical = {normalize_item_name(item) for item in critical_items}
    issues: List[str] = []
    warnings: List[str] = []

    for entry in entries:
        ratio = durability_ratio(entry.get("current"), entry.get("max"))
        if ratio is None:
            continue
        if ratio < DURABILITY_CRITICAL_THRESHOLD:
            issues.append(f"{entry['name']} durability critical ({round(ratio * 100)}%)")
        elif ratio < DURABILITY_LOW_THRESHOLD and entry["name"] in critical:
            warnings.append(f"{entry['name']} durability low ({round(ratio * 100)}%)")

    bridge = ctx.get("bridgeState", default={})
    health = bridge.get("health") if isinstance(bridge, Mapping) else None
    if health is None:
        health = ctx.npc.get("health")
    health = _finite(health)
    if health is not None and health < HEALTH_LOW_THRESHOLD:
        if health < HEALTH_CRITICAL_THRESHOLD:
            issues.append(f"Health critical ({round(health * 100)}%)")
        else:
            warnings.append(f"Health low ({round(health * 100)}%)")

    return {"ready": not issues, "issues": issues, "warnings": warnings, "durabilityEntries": entries}


# ---------------------------------------------------------------------------
# Threat assessment
# ---------------------------------------------------------------------------

def evaluate_risk(
    enemy_types: Iterable[Any],
    environment: Any = "",
    weather: Any = None,
    hazard_flags: Iterable[Any] = (),
) -> Dict[str, Any]:
    """
    Hazards and advice raised by enemies, environment and weather.

    `threatLevel` is the most urgent (lowest) enemy priority, 4 when no
    enemies are listed.
    """
    keys = [enemy_key(name) for name in enemy_types]
    env = optional_name(environment)
    hazards: List[str] = []
    advice: List[str] = []

    def add(hazard: str) -> None:
        if hazard and hazard not in hazards:
            hazards.append(hazard)

    for flag in hazard_flags:
        add(optional_name(flag))

    if "nether" in env:
        add("fire")
        add("lava")
    if "end" in env:
        add("void fall")
    if "ocean" in env or "underwater" in env:
        add("drowning")

    if "blaze" in keys:
        add("fire")
        advice.append("Keep fire resistance handy, blaze volleys stack burn damage quickly.")
    if "witch" in keys:
        add("poison")
        advice.append("Carry milk or honey to purge poison when witches connect.")
    if "guardian" in keys or "elder_guardian" in keys:
        add("mining fatigue")
    if "hoglin" in keys or "ravager" in keys:
        add("knockback")
        advice.append("Brace near solid walls to prevent knockback launches from hoglin or ravager charges.")

    weather_text = str(weather or "").lower()
    if "storm" in weather_text or "thunder" in weather_text:
        add("lightning")

    priorities = [get_enemy_profile(key)["priority"] for key in keys]
    return {
        "hazards": hazards,
        "advice": advice,
        "threatLevel": min(priorities) if priorities else 4,
        "enemies": [{"name": key, "profile": dict(get_enemy_profile(key))} for key in keys],
    }


def calculate_difficulty(enemy_count: int = 1, enemy_types: Iterable[Any] = (), environment: Any = "") -> Dict[str, Any]:
    """
    Difficulty rating: easy (< 3), medium (3-6), hard (7-10), extreme (> 10).

    Enemy count plus 2 per priority-1 and 1 per priority-2 enemy, scaled by
    1.5 in the Nether or End and 1.3 underwater.
    """
    score = float(enemy_count or 0)
    for name in enemy_types:
        priority = get_enemy_profile(name)["priority"]
        if priority == 1:
            score += 2
        elif priority == 2:
            score += 1

    env = optional_name(environment)
    multiplier = 1.0
    if "nether" in env or "end" in env:
        multiplier = 1.5
        score *= 1.5
    if "underwater" in env or "ocean" in env:
        score *= 1.3
        if multiplier == 1.0:
            multiplier = 1.3

    if score > 10:
        rating = "extreme"
    elif score > 6:
        rating = "hard"
    elif score >= 3:
        rating = "medium"
    else:
        rating = "easy"

    return {
        "rating": rating,
        "score": round(score, 1),
        "enemyCount": enemy_count,
        "modifiers": {"environmentMultiplier": multiplier},
    }


def get_countermeasures(enemy_types: Iterable[Any]) -> Dict[str, Any]:
    every: List[str] = []
    by_enemy: Dict[str, List[str]] = {}
    for name in enemy_types:
        key = enemy_key(name)
        measures = list(ENEMY_COUNTERMEASURES.get(key, ()))
        by_enemy[key] = measures
        for item in measures:
            if item not in every:
                every.append(item)
    return {"all": every, "byEnemy": by_enemy}


# ---------------------------------------------------------------------------
# Defensive systems
# ---------------------------------------------------------------------------

def _setup_minutes(config: Mapping[str, Any]) -> int:
    match = re.search(r"(\d+)", str(config.get("time") or ""))
    return int(match.group(1)) if match else 0


def suggest_defensive_setup(threat_level: Any = "medium", time_available: float = 15) -> Dict[str, Any]:
    """
    Recommended defenses for a guarded area.

    Lighting is always recommended. High or extreme threats add reinforced
    walls (only with 15+ minutes available), a perimeter wall and a
    redstone alarm; medium threats a basic barricade and a bell; anything
    else just the bell. `estimatedTime` sums the lower bound of each
    recommendation's setup time in minutes.
    """
    level = optional_name(threat_level) or "medium"
    recommendations: List[Dict[str, Any]] = [
        {"type": "lighting", "priority": 1, "config": dict(FORTIFICATION_OPTIONS["lighting"])}
    ]

    if level in ("high", "extreme"):
        if time_available >= 15:
            recommendations.append(
                {"type": "fortification", "priority": 1, "config": dict(FORTIFICATION_OPTIONS["reinforced"])}
            )
        recommendations.append({"type": "perimeter", "priority": 2, "config": dict(PERIMETER_DEFENSE["walls"])})
        recommendations.append({"type": "alarm", "priority": 2, "config": dict(ALARM_SYSTEMS["redstone"])})
    elif level == "medium":
        recommendations.append(
            {"type": "fortification", "priority": 2, "config": dict(FORTIFICATION_OPTIONS["basic"])}
        )
        recommendations.append({"type": "alarm", "priority": 3, "config": dict(ALARM_SYSTEMS["bell"])})
    else:
        recommendations.append({"type": "alarm", "priority": 3, "config": dict(ALARM_SYSTEMS["bell"])})

    recommendations.sort(key=lambda rec: rec["priority"])
    return {
        "recommendations": recommendations,
        "estimatedTime": sum(_setup_minutes(rec["config"]) for rec in recommendations),
    }
