# src/domain/mining.py
"""
Mining styles, status directives and hazard watchers.

Shared by the mine planner (plan steps) and the envelope adapter
(`metadata.directives`, `metadata.watchers`, `metadata.plan`). Every
function here is pure; nothing mutates the tables.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from .vocab import (
    describe_hazard,
    normalize_directive_action,
    normalize_directive_request,
    normalize_hazard_descriptor,
    normalize_hazard_severity,
    normalize_hazard_type,
    normalize_mitigation_step,
    normalize_notify_list,
    strip_none,
)


# ---------------------------------------------------------------------------
# Styles
# ---------------------------------------------------------------------------

DEFAULT_SUPPORT_SUPPLIES = (
    {"name": "torch", "count": 32},
    {"name": "wood", "count": 16},
    {"name": "food", "count": 8},
)

MINING_STYLES: Sequence[Mapping[str, Any]] = (
    {
        "id": "strip",
        "label": "strip mine",
        "synonyms": ("strip", "strip mine", "branch", "branch mine", "grid"),
        "method": "branch",
        "description": "Carve long horizontal corridors with evenly spaced branches for broad coverage of ore veins.",
        "rationale": "Efficient for harvesting large volumes within a single depth layer.",
        "recommended_supplies": ("rails", "chest"),
        "risk": "Long corridors may spawn mobs if left unlit.",
        "duration_modifier": 2500,
    },
    {
        "id": "staircase",
        "label": "staircase",
        "synonyms": ("staircase", "stair", "stair mine", "incline"),
        "method": "staircase",
        "description": "Dig a descending stair pattern that exposes new layers while maintaining a safe ascent route.",
        "rationale": "Balanced approach for discovering new depths with safe retreat access.",
        "recommended_supplies": ("ladders", "torches"),
        "risk": "Open stairwells can collect mobs if not sealed.",
        "duration_modifier": 1500,
    },
    {
        "id": "quarry",
        "label": "quarry",
        "synonyms": ("quarry", "pit", "open pit"),
        "method": "quarry",
        "description": "Clear large surface layers in a square or circular pattern, moving downward layer by layer.",
        "rationale": "Ideal for surface-level bulk extraction and structured excavation projects.",
        "recommended_supplies": ("scaffolding", "storage chest"),
        "risk": "Open pits increase fall hazards; perimeter must be secured.",
        "duration_modifier": 3000,
    },
    {
        "id": "vertical shaft",
        "label": "vertical shaft",
        "synonyms": ("vertical", "shaft", "drop shaft", "ladder shaft"),
        "method": "shaft",
        "description": "Sink a narrow shaft straight down with ladders or bubbles for rapid access to deep layers.",
        "rationale": "Fastest way to reach deep ores when surface time is limited.",
        "recommended_supplies": ("ladders", "water bucket"),
        "risk": "Falling or lava breakthroughs pose high danger without safety stops.",
        "duration_modifier": 1800,
    },
)


def _style_key(value: Any) -> str:
    return " ".join(str(value).strip().lower().split()) if value else ""


MINING_STYLE_LOOKUP: Dict[str, Mapping[str, Any]] = {}
for _style in MINING_STYLES:
    for _key in (_style["id"], _style["label"], *_style["synonyms"]):
        MINING_STYLE_LOOKUP.setdefault(_style_key(_key), _style)

MINING_STYLE_OPTIONS = [
    {"id": s["id"], "label": s["label"], "description": s["description"]} for s in MINING_STYLES
]


def find_mining_style(name: Any) -> Optional[Mapping[str, Any]]:
    return MINING_STYLE_LOOKUP.get(_style_key(name)) if name else None


# ---------------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------------

def normalize_directive_block(block: Any, fallback: str) -> Dict[str, Any]:
    """
    Normalize one lifecycle block (`depletion`, `toolFailure`, ...).

    A bare string is taken as the action; mappings may carry notify /
    request / note / reroute / priority / on.
    """
    if not block:
        return {"action": fallback}
    if isinstance(block, str):
        return {"action": normalize_directive_action(block, fallback)}
    if not isinstance(block, Mapping):
        return {"action": fallback}
    return strip_none(
        {
            "action": normalize_directive_action(block.get("action"), fallback),
            "notify": normalize_notify_list(block.get("notify")),
            "request": normalize_directive_request(block.get("request")),
            "note": block.get("note") if isinstance(block.get("note"), str) else None,
            "reroute": block.get("reroute") or None,
            "priority": block.get("priority") if isinstance(block.get("priority"), str) else None,
            "on": block.get("on") if isinstance(block.get("on"), str) else None,
        }
    )


def normalize_hazard_directive(entry: Any) -> Optional[Dict[str, Any]]:
    if not entry:
        return None
    if isinstance(entry, str):
        return {"type": normalize_hazard_type(entry), "action": "pause"}
    if not isinstance(entry, Mapping):
        return None

    raw_type = entry.get("type") or entry.get("hazard")
    if raw_type == "any":
        kind = "any"
    else:
        kind = normalize_hazard_type(raw_type) if raw_type else None

    directive = strip_none(
        {
            "type": kind,
            "severity": normalize_hazard_severity(entry["severity"]) if entry.get("severity") else None,
            "action": normalize_directive_action(entry.get("action"), "pause"),
            "notify": normalize_notify_list(entry.get("notify")),
            "request": normalize_directive_request(entry.get("request")),
            "note": entry.get("note") if isinstance(entry.get("note"), str) else None,
            "reroute": entry.get("reroute") or None,
        }
    )
    if entry.get("escalate"):
        directive["escalate"] = normalize_directive_block(entry["escalate"], "request_support")
    if entry.get("resume"):
        directive["resume"] = normalize_directive_block(entry["resume"], "resume")
    return directive


def normalize_mining_directives(directives: Any) -> Dict[str, Any]:
    """
    `{hazards, depletion, toolFailure, resume, fallback}` with defaults
    `continue`, `request_tools`, `resume` and `pause`.
    """
    source = directives if isinstance(directives, Mapping) else {}
    raw_hazards = source.get("hazards") or []
    if not isinstance(raw_hazards, (list, tuple)):
        raw_hazards = [raw_hazards]
    hazards = [d for d in (normalize_hazard_directive(h) for h in raw_hazards) if d]
    return {
        "hazards": hazards,
        "depletion": normalize_directive_block(source.get("depletion"), "continue"),
        "toolFailure": normalize_directive_block(source.get("toolFailure"), "request_tools"),
        "resume": normalize_directive_block(source.get("resume"), "resume"),
        "fallback": normalize_directive_block(source.get("fallback"), "pause"),
    }


def resolve_hazard_directive(
    hazard: Mapping[str, Any], directives: Sequence[Mapping[str, Any]]
) -> Optional[Dict[str, Any]]:
    """
    Best directive for a hazard.

    Exact type entries beat `any` / untyped ones; within each group an
    entry without a severity filter only matches after the severity-specific
    ones have been tried. Returns None when nothing applies.
    """
    if not directives:
        return None
    kind = hazard.get("type")
    severity = hazard.get("severity")

    exact = [e for e in directives if e.get("type") == kind and kind not in (None, "any")]
    generic = [e for e in directives if not e.get("type") or e.get("type") == "any"]

    for group in (exact, generic):
        for entry in group:
            if entry.get("severity") and entry.get("severity") == severity:
                return dict(entry)
        for entry in group:
            if not entry.get("severity"):
                return dict(entry)
    return None


def normalize_hazards(values: Any) -> List[Dict[str, Any]]:
    if not values:
        return []
    array = values if isinstance(values, (list, tuple)) else [values]
    return [h for h in (normalize_hazard_descriptor(v) for v in array) if h]


def normalize_mitigations(values: Any) -> List[Dict[str, Any]]:
    if not values:
        return []
    array = values if isinstance(values, (list, tuple)) else [values]
    return [m for m in (normalize_mitigation_step(v) for v in array) if m]


def build_hazard_watchers(
    hazards: Sequence[Mapping[str, Any]],
    directives: Mapping[str, Any],
) -> List[Dict[str, Any]]:
    """One watcher per hazard, paired with its best matching directive."""
    entries = directives.get("hazards") or []
    watchers = []
    for hazard in hazards:
        watchers.append(
            strip_none(
                {
                    "hazard": hazard.get("type", "unknown"),
                    "severity": hazard.get("severity") or "moderate",
                    "mitigation": hazard.get("mitigation"),
                    "response": resolve_hazard_directive(hazard, entries),
                }
            )
        )
    return watchers


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def _render_point(target: Any) -> str:
    if not isinstance(target, Mapping):
        return "the target"
    coords = [target.get(k) for k in ("x", "y", "z")]
    if any(c is None for c in coords):
        return "the target"
    return "(" + ", ".join(str(c) for c in coords) + ")"


def build_mining_operations(
    resource: Mapping[str, Any],
    location: str,
    strategy: Optional[str],
    hazards: Sequence[Mapping[str, Any]],
    tools: Sequence[Mapping[str, Any]],
    deposit: Any,
    watchers: Sequence[Mapping[str, Any]],
) -> List[Dict[str, Any]]:
    """
    Ordered operations `{step, kind, description, hazards?, mitigation?, response?}`:
    strategy, survey, one mitigate per hazard, extract, deposit.
    """
    block = resource.get("block") or "resource"
    operations: List[Dict[str, Any]] = []

    if strategy:
        operations.append(
            {"step": "strategy", "kind": "pattern", "description": f"Use the {strategy} strategy"}
        )

    survey = {
        "step": "survey",
        "kind": "safety",
        "description": f"Survey the area around {location} before mining {block}",
    }
    if hazards:
        survey["hazards"] = [dict(h) for h in hazards]
    operations.append(survey)

    for index, hazard in enumerate(hazards):
        watcher = watchers[index] if index < len(watchers) else {}
        operations.append(
            strip_none(
                {
                    "step": "mitigate",
                    "kind": "safety",
                    "description": f"Mitigate {describe_hazard(hazard)}",
                    "hazard": describe_hazard(hazard),
                    "mitigation": hazard.get("mitigation"),
                    "response": watcher.get("response"),
                }
            )
        )

    extract = {
        "step": "extract",
        "kind": "action",
        "description": f"Prioritize {block} ({resource.get('priority', 'primary')})",
    }
    if tools:
        extract["tools"] = [dict(t) for t in tools]
    operations.append(extract)

    if deposit:
        operations.append(
            {
                "step": "deposit",
                "kind": "logistics",
                "description": f"Deliver mined materials to {_render_point(deposit) if isinstance(deposit, Mapping) else deposit}",
            }
        )
    return operations


