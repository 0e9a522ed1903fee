# src/domain/hazards.py
"""
Environmental hazard catalog and the hazard assessment used by gathering.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence


HAZARD_CATALOG: Mapping[str, Mapping[str, Any]] = {
    "hostile_mobs": {
        "severity": "high",
        "category": "combat",
        "mitigations": ("armor", "weapons", "torches", "work_during_day"),
        "description": "Hostile creatures may attack during gathering",
    },
    "fall_damage": {
        "severity": "medium",
        "category": "environmental",
        "mitigations": ("water_bucket", "slow_falling_potion", "careful_movement"),
        "description": "Risk of falling from heights",
    },
    "lava": {
        "severity": "critical",
        "category": "environmental",
        "mitigations": ("fire_resistance_potion", "water_bucket", "careful_movement"),
        "description": "Lava pools or flows present",
    },
    "drowning": {
        "severity": "medium",
        "category": "environmental",
        "mitigations": ("water_breathing_potion", "boat", "careful_swimming"),
        "description": "Water hazards present",
    },
    "darkness": {
        "severity": "medium",
        "category": "environmental",
        "mitigations": ("torches", "night_vision_potion", "work_during_day"),
        "description": "Low light levels increase danger",
    },
    "lightning": {
        "severity": "medium",
        "category": "weather",
        "mitigations": ("avoid_thunderstorms", "seek_shelter"),
        "description": "Lightning strikes during storms",
    },
    "getting_lost": {
        "severity": "low",
        "category": "navigation",
        "mitigations": ("compass", "map", "coordinates", "torches_as_markers"),
        "description": "May lose orientation in complex terrain",
    },
    "tool_breakage": {
        "severity": "low",
        "category": "equipment",
        "mitigations": ("backup_tools", "mending", "check_durability"),
        "description": "Tools may break during operation",
    },
    "hunger": {
        "severity": "low",
        "category": "survival",
        "mitigations": ("bring_food", "saturation_items"),
        "description": "Extended operations may deplete food",
    },
    "weather_exposure": {
        "severity": "low",
        "category": "weather",
        "mitigations": ("shelter", "wait_for_clear_weather"),
        "description": "Adverse weather may slow operations",
    },
}


def make_hazard(kind: str, severity: Optional[str] = None) -> Dict[str, Any]:
    """Catalog entry for `kind` with its type and an optional severity override."""
    entry = HAZARD_CATALOG[kind]
    return {
        "type": kind,
        "severity": severity or entry["severity"],
        "category": entry["category"],
        "mitigations": list(entry["mitigations"]),
        "description": entry["description"],
    }


def assess_environmental_hazards(
    resource: Mapping[str, Any],
    environment: Mapping[str, Any],
    tool_condition: Optional[Mapping[str, Any]] = None,
) -> List[Dict[str, Any]]:
    """
    Hazards for a gathering run.

    `environment` carries `biome_profile`, `y_level_info`, `weather_profile`,
    `light_level` and `is_night`.
    """
    hazards: List[Dict[str, Any]] = []
    biome = environment.get("biome_profile")
    y_info = environment.get("y_level_info")
    weather = environment.get("weather_profile") or {}
    light_level = environment.get("light_level", 15)

    if biome:
        mob_risk = (
            biome.get("hostile_mob_spawn_rate", 0)
            * (1.5 if environment.get("is_night") else 1.0)
            * weather.get("mob_spawn_modifier", 1.0)
        )
        if mob_risk > 1.0 or (light_level is not None and light_level < 8):
            if mob_risk > 1.5:
                severity = "critical"
            elif mob_risk > 1.0:
                severity = "high"
            else:
                severity = "medium"
            hazards.append(make_hazard("hostile_mobs", severity))

    biome_hazards = biome.get("hazards", ()) if biome else ()
    if y_info:
        category = y_info.get("category")
        if category in ("deep", "deepslate"):
            hazards.append(make_hazard("lava", "high"))
        if category != "surface":
            hazards.append(make_hazard("darkness", "medium"))
        if category == "elevated" or "fall_damage" in biome_hazards:
            hazards.append(make_hazard("fall_damage", "medium"))

    if "navigation_difficulty" in biome_hazards:
        hazards.append(make_hazard("getting_lost", "medium"))

    if weather.get("lightning_risk"):
        hazards.append(make_hazard("lightning", "medium"))
    if weather.get("movement_modifier", 1.0) < 1.0:
        hazards.append(make_hazard("weather_exposure", "low"))

    if tool_condition and tool_condition.get("status") == "low":
        hazards.append(make_hazard("tool_breakage", "medium"))

    if resource.get("type") in ("mining", "wood"):
        hazards.append(make_hazard("hunger", "low"))

    return hazards


def generate_safety_recommendations(hazards: Sequence[Mapping[str, Any]]) -> List[Dict[str, str]]:
    """
    De-duplicated mitigations: two per critical hazard, one per high hazard,
    one each for the first two medium hazards.
    """
    recommendations: List[Dict[str, str]] = []
    seen = set()
    plan = (
        ("critical", None, 2),
        ("high", None, 1),
        ("medium", 2, 1),
    )
    for severity, limit, per_hazard in plan:
        group = [h for h in hazards if h.get("severity") == severity]
        if limit is not None:
            group = group[:limit]
        for hazard in group:
            for mitigation in list(hazard.get("mitigations", ()))[:per_hazard]:
                if mitigation in seen:
                    continue
                seen.add(mitigation)
                recommendations.append(
                    {"priority": severity, "action": mitigation, "reason": hazard.get("description", "")}
                )
    return recommendations
