# src/domain/vocab.py
"""
Enumerated vocabularies shared by the mining planner and the envelope adapter.

Each normalizer maps free-form input onto a closed vocabulary and falls back
to a documented default. None of them raise.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional


TASK_PRIORITIES = ["critical", "high", "normal", "low"]
PRIORITY_RANKS = ["primary", "secondary", "tertiary", "optional"]
HAZARD_TYPES = [
    "lava",
    "water",
    "enemy",
    "void",
    "fall",
    "explosive",
    "cave_in",
    "darkness",
    "drowning",
    "gravel",
]
HAZARD_SEVERITIES = ["low", "moderate", "high", "critical"]
DIRECTIVE_ACTIONS = ["pause", "resume", "reroute", "request_support", "request_tools", "continue"]
MINING_STRATEGIES = {
    "branch": "branch_mining",
    "strip": "strip_mining",
    "spiral": "spiral_stair",
    "staircase": "staircase",
    "quarry": "quarry",
    "shaft": "vertical_shaft",
    "explore": "exploration",
}
KNOWN_RESOURCES = [
    "diamond",
    "iron",
    "coal",
    "gold",
    "redstone",
    "emerald",
    "lapis",
    "copper",
    "ancient_debris",
]


def strip_none(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in record.items() if v is not None}


def _lower(value: Any) -> str:
    return str(value).strip().lower() if value is not None else ""


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


# ---------------------------------------------------------------------------
# Generic descriptors
# ---------------------------------------------------------------------------

def normalize_positive_integer(value: Any, fallback: Optional[int]) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return fallback
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if math.isfinite(number) and number.is_integer() and number > 0:
        return int(number)
    return fallback


def normalize_item_descriptor(item: Any) -> Optional[Dict[str, Any]]:
    if not item:
        return None
    if isinstance(item, str):
        return {"item": item, "count": 1}
    if not isinstance(item, Mapping):
        return None
    name = item.get("item") or item.get("id") or item.get("name")
    if not name or not isinstance(name, str):
        return None
    count_raw = item.get("count") if item.get("count") is not None else item.get("quantity")
    return strip_none(
        {
            "item": name,
            "count": normalize_positive_integer(count_raw, 1),
            "metadata": item.get("metadata") or None,
        }
    )


def normalize_item_list(values: Any) -> List[Dict[str, Any]]:
    if not values:
        return []
    array = values if isinstance(values, (list, tuple)) else [values]
    return [d for d in (normalize_item_descriptor(v) for v in array) if d]


def normalize_string_array(values: Any) -> List[str]:
    if not values:
        return []
    array = values if isinstance(values, (list, tuple)) else [values]
    return [v.strip() for v in array if isinstance(v, str) and v.strip()]


def extract_rally_point(target: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(target, Mapping):
        return None
    x, y, z = target.get("x"), target.get("y"), target.get("z")
    if all(is_number(c) for c in (x, y, z)):
        return strip_none({"x": x, "y": y, "z": z, "dimension": target.get("dimension") or None})
    return None


def normalize_priority_rank(priority: Any) -> str:
    if not priority:
        return "primary"
    normalized = _lower(priority)
    if normalized in PRIORITY_RANKS:
        return normalized
    if "high" in normalized:
        return "primary"
    if "medium" in normalized or "mid" in normalized:
        return "secondary"
    if "low" in normalized:
        return "tertiary"
    return "primary"


# ---------------------------------------------------------------------------
# Hazards
# ---------------------------------------------------------------------------

def normalize_hazard_type(value: Any) -> str:
    if not value:
        return "unknown"
    normalized = _lower(value)
    if normalized in HAZARD_TYPES:
        return normalized
    if "mob" in normalized or "enemy" in normalized:
        return "enemy"
    if "lava" in normalized:
        return "lava"
    if "water" in normalized or "drown" in normalized:
        return "water"
    if "fall" in normalized:
        return "fall"
    return "unknown"


def normalize_hazard_severity(value: Any) -> str:
    if not value:
        return "moderate"
    normalized = _lower(value)
    if normalized in HAZARD_SEVERITIES:
        return normalized
    if "deadly" in normalized or "lethal" in normalized:
        return "critical"
    if "severe" in normalized or "danger" in normalized:
        return "high"
    if "minor" in normalized:
        return "low"
    return "moderate"


def infer_hazard_severity(name: Any) -> str:
    normalized = _lower(name)
    if "lava" in normalized or "void" in normalized:
        return "critical"
    if "enemy" in normalized or "mob" in normalized:
        return "high"
    return "moderate"


def normalize_mitigation_list(value: Any) -> Optional[List[str]]:
    if not value:
        return None
    if isinstance(value, (list, tuple)):
        steps = []
        for entry in value:
            if isinstance(entry, str):
                steps.append(entry)
            elif isinstance(entry, Mapping) and (entry.get("action") or entry.get("plan")):
                steps.append(str(entry.get("action") or entry.get("plan")))
        return steps or None
    if isinstance(value, str):
        return [value]
    if isinstance(value, Mapping) and value.get("action"):
        return [str(value["action"])]
    return None


def normalize_hazard_descriptor(hazard: Any) -> Optional[Dict[str, Any]]:
    if not hazard:
        return None
    if isinstance(hazard, str):
        return {"type": normalize_hazard_type(hazard), "severity": infer_hazard_severity(hazard)}
    if not isinstance(hazard, Mapping):
        return None
    distance = hazard.get("distance")
    return strip_none(
        {
            "type": normalize_hazard_type(hazard.get("type") or hazard.get("name") or hazard.get("kind")),
            "severity": normalize_hazard_severity(hazard.get("severity") or hazard.get("level")),
            "distance": float(distance) if is_number(distance) else None,
            "mitigation": normalize_mitigation_list(hazard.get("mitigation") or hazard.get("plan")),
            "note": hazard.get("note") or hazard.get("description") or None,
            "location": extract_rally_point(hazard.get("location")),
        }
    )


def normalize_mitigation_step(step: Any) -> Optional[Dict[str, Any]]:
    if not step:
        return None
    if isinstance(step, str):
        trimmed = step.strip()
        return {"action": trimmed} if trimmed else None
    if not isinstance(step, Mapping):
        return None
    action = step.get("action") or step.get("plan") or step.get("step")
    if not action or not str(action).strip():
        return None
    tools = step.get("tools")
    return strip_none(
        {
            "action": str(action).strip(),
            "tools": normalize_item_list(tools) if isinstance(tools, (list, tuple)) else None,
            "note": step.get("note") or None,
        }
    )


def describe_hazard(hazard: Any) -> str:
    if not hazard:
        return "unknown hazard"
    if isinstance(hazard, str):
        return hazard
    kind = hazard.get("type") or "unknown"
    severity = hazard.get("severity")
    return f"{kind} ({severity})" if severity else kind


# ---------------------------------------------------------------------------
# Mining strategy / resources
# ---------------------------------------------------------------------------

def normalize_mining_strategy(strategy: Any) -> Optional[str]:
    if not strategy:
        return None
    normalized = _lower(strategy)
    if normalized in MINING_STRATEGIES:
        return MINING_STRATEGIES[normalized]
    for needle, mapped in (
        ("branch", "branch_mining"),
        ("strip", "strip_mining"),
        ("stair", "staircase"),
        ("spiral", "spiral_stair"),
        ("shaft", "vertical_shaft"),
        ("quarry", "quarry"),
    ):
        if needle in normalized:
            return mapped
    return normalized


def infer_resource_from_details(details: Any) -> Optional[str]:
    """Bare resource name ("diamond") mentioned in free-form details."""
    if not details or not isinstance(details, str):
        return None
    normalized = details.lower()
    for resource in KNOWN_RESOURCES:
        if resource in normalized:
            return resource
    return None


# ---------------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------------

def normalize_directive_action(action: Any, fallback: str = "continue") -> str:
    value = action.lower() if isinstance(action, str) else ""
    return value if value in DIRECTIVE_ACTIONS else fallback


def normalize_notify_list(values: Any) -> Optional[List[Any]]:
    if not values:
        return None
    array = values if isinstance(values, (list, tuple)) else [values]
    out = [v.strip() if isinstance(v, str) else v for v in array]
    out = [v for v in out if v]
    return out or None


def normalize_directive_request(request: Any) -> Optional[Dict[str, Any]]:
    if not request:
        return None
    if isinstance(request, str):
        return {"message": request}
    if not isinstance(request, Mapping):
        return None
    out: Dict[str, Any] = {}
    if isinstance(request.get("message"), str) and request["message"]:
        out["message"] = request["message"]
    if isinstance(request.get("reason"), str) and request["reason"]:
        out["reason"] = request["reason"]
    if request.get("items"):
        out["items"] = normalize_item_list(request["items"])
    return out or None
