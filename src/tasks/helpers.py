# src/tasks/helpers.py
"""
Shared helper utilities for the task planners.

All helpers are total: malformed input yields a sentinel or an empty
collection, never an exception.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from domain.lookup import table_key
from spec.types import (
    UNSPECIFIED_ITEM,
    Inventory,
    Plan,
    PlanContext,
    Step,
    TaskRequest,
)


# ---------------------------------------------------------------------------
# Names and quantities
# ---------------------------------------------------------------------------

def normalize_item_name(value: Any) -> str:
    """
    Lowercase, trim and collapse whitespace.

    Accepts strings, numbers and objects exposing `.name`, `.item` or `.id`
    (attribute or mapping key). Empty or unknown input maps to
    "unspecified item".
    """
    if value is None or isinstance(value, bool):
        return UNSPECIFIED_ITEM

    if isinstance(value, Mapping):
        for key in ("name", "item", "id"):
            inner = value.get(key)
            if isinstance(inner, (str, int, float)) and not isinstance(inner, bool):
                return normalize_item_name(inner)
        return UNSPECIFIED_ITEM

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return UNSPECIFIED_ITEM
        value = str(value)

    if not isinstance(value, str):
        for attr in ("name", "item", "id"):
            inner = getattr(value, attr, None)
            if isinstance(inner, (str, int, float)) and not isinstance(inner, bool):
                return normalize_item_name(inner)
        return UNSPECIFIED_ITEM

    text = " ".join(value.strip().lower().split())
    return text or UNSPECIFIED_ITEM


def resolve_quantity(value: Any, fallback: Optional[int] = None) -> Optional[int]:
    """
    Positive integer view of `value`, or `fallback`.

    Accepts numbers, numeric strings and mappings with `count` / `quantity`.
    """
    if value is None or isinstance(value, bool):
        return fallback

    if isinstance(value, Mapping):
        inner = value.get("count", value.get("quantity"))
        return resolve_quantity(inner, fallback)

    number: Optional[float] = None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return fallback

    if number is None or not math.isfinite(number):
        return fallback
    as_int = int(math.floor(number))
    return as_int if as_int > 0 else fallback


def planning_mode(task: Any) -> str:
    """`mode` option as a table key (e.g. "build_rail"); "" when absent."""
    request = TaskRequest.coerce(task)
    return table_key(request.option("mode") or "")


def _fmt_coord(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def _coords_of(target: Mapping[str, Any]) -> Optional[List[float]]:
    coords = [target.get("x"), target.get("y"), target.get("z")]
    if all(
        isinstance(c, (int, float)) and not isinstance(c, bool) and math.isfinite(c)
        for c in coords
    ):
        return [float(c) for c in coords]
    return None


def describe_target(target: Any) -> str:
    """
    Stable short rendering of a location or entity:

      "(x,y,z)", "(x,y,z) in dimension", "<name>", "the designated location"
    """
    if target is None:
        return "the designated location"

    if isinstance(target, str):
        text = target.strip()
        return text or "the designated location"

    if not isinstance(target, Mapping):
        return "the designated location"

    coords = _coords_of(target)
    if coords is None and isinstance(target.get("position"), Mapping):
        coords = _coords_of(target["position"])

    if coords is not None:
        rendered = "(" + ",".join(_fmt_coord(c) for c in coords) + ")"
        dimension = target.get("dimension")
        if isinstance(dimension, str) and dimension.strip():
            rendered += f" in {dimension.strip()}"
        return rendered

    for key in ("name", "label", "id", "type"):
        value = target.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()

    return "the designated location"


def target_position(target: Any) -> Optional[Dict[str, float]]:
    """{x,y,z} of a target (or its nested `position`), else None."""
    if not isinstance(target, Mapping):
        return None
    coords = _coords_of(target)
    if coords is None and isinstance(target.get("position"), Mapping):
        coords = _coords_of(target["position"])
    if coords is None:
        return None
    return {"x": coords[0], "y": coords[1], "z": coords[2]}


# ---------------------------------------------------------------------------
# Inventory queries
# ---------------------------------------------------------------------------

def _as_inventory(source: Any) -> Inventory:
    if isinstance(source, Inventory):
        return source
    if isinstance(source, PlanContext):
        return source.inventory
    return Inventory.from_raw(source)


def extract_inventory(context: Any) -> List[Dict[str, Any]]:
    """Array view `[{name, count}]` of the inventory held by `context`."""
    if isinstance(context, (PlanContext, Inventory)):
        return _as_inventory(context).to_list()
    if isinstance(context, Mapping):
        return PlanContext(context).inventory.to_list()
    return []


def count_inventory_items(inventory: Any, name: Any) -> int:
    if name is None:
        return 0
    return _as_inventory(inventory).count(normalize_item_name(name))


def has_inventory_item(inventory: Any, name: Any, minimum: int = 1) -> bool:
    if name is None:
        return False
    required = resolve_quantity(minimum, 1) or 1
    return count_inventory_items(inventory, name) >= required


def format_requirement_list(items: Any) -> str:
    """Render `[{name, count?}]` as "3 iron_ingot, oak_planks, 2 torch"."""
    if not isinstance(items, (list, tuple)):
        return ""
    parts: List[str] = []
    for entry in items:
        if isinstance(entry, Mapping):
            name = normalize_item_name(entry.get("name") or entry.get("item"))
            count = resolve_quantity(entry.get("count", entry.get("quantity")), None)
        else:
            name = normalize_item_name(entry)
            count = None
        if name == UNSPECIFIED_ITEM:
            continue
        parts.append(f"{count} {name}" if count else name)
    return ", ".join(parts)


# ---------------------------------------------------------------------------
# Plan / step builders
# ---------------------------------------------------------------------------

def unique_resources(values: Iterable[Any]) -> List[str]:
    """Normalized, de-duplicated resource names without the sentinel."""
    seen: List[str] = []
    for value in values:
        name = normalize_item_name(value)
        if name == UNSPECIFIED_ITEM or name in seen:
            continue
        seen.append(name)
    return seen


def unique_strings(values: Iterable[Any]) -> List[str]:
    out: List[str] = []
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text and text not in out:
            out.append(text)
    return out


def create_step(
    title: str,
    type: str = "generic",
    description: Optional[str] = None,
    metadata: Optional[Mapping[str, Any]] = None,
    command: Optional[str] = None,
) -> Step:
    """Construct a Step; empty descriptions fall back to the title."""
    clean_title = str(title or "").strip() or "Step"
    clean_description = str(description or "").strip() or clean_title
    clean_command = command.strip() if isinstance(command, str) and command.strip() else None
    return Step(
        title=clean_title,
        type=str(type or "generic").strip() or "generic",
        description=clean_description,
        metadata={k: v for k, v in dict(metadata or {}).items() if v is not None},
        command=clean_command,
    )


def create_plan(
    task: Any,
    summary: str,
    steps: Optional[Sequence[Step]] = None,
    estimated_duration: Any = 8000,
    resources: Optional[Iterable[Any]] = None,
    risks: Optional[Iterable[Any]] = None,
    notes: Optional[Iterable[Any]] = None,
    metadata: Optional[Mapping[str, Any]] = None,
    priority: Optional[str] = None,
    task_graph: Any = None,
    sub_tasks: Optional[Sequence[Mapping[str, Any]]] = None,
    **extra: Any,
) -> Plan:
    """
    Construct the shared Plan shape.

    Resources are normalized and de-duplicated, risks / notes are
    de-duplicated, and the duration is clamped to a non-negative integer.
    """
    request = TaskRequest.coerce(task)

    try:
        duration = float(estimated_duration)
    except (TypeError, ValueError):
        duration = 0.0
    if not math.isfinite(duration) or duration < 0:
        duration = 0.0

    preferred = request.option("preferredTraits") or []
    if isinstance(preferred, str):
        preferred = [preferred]

    return Plan(
        action=request.action,
        summary=str(summary or "").strip() or f"Plan {request.action or 'task'}",
        steps=list(steps or []),
        estimated_duration=int(round(duration)),
        resources=unique_resources(resources or []),
        risks=unique_strings(risks or []),
        notes=unique_strings(notes or []),
        metadata=dict(metadata or {}),
        task=request.to_dict(),
        priority=priority or request.priority or "normal",
        preferred_traits=[str(t).lower() for t in preferred if t],
        task_graph=task_graph.to_dict() if hasattr(task_graph, "to_dict") else task_graph,
        sub_tasks=[dict(t) for t in sub_tasks or []],
        extra=dict(extra),
    )


def blocked_plan(
    task: Any,
    summary: str,
    error: str,
    suggestion: Optional[str] = None,
    steps: Optional[Sequence[Step]] = None,
    status: str = "blocked",
    **extra: Any,
) -> Plan:
    """Blocked / failed plan with `error` and optional `suggestion` populated."""
    plan = create_plan(task, summary, steps=steps, estimated_duration=0, **extra)
    plan.status = status
    plan.error = error
    plan.suggestion = suggestion
    return plan


def failed_plan(task: Any, summary: str, error: str, suggestion: Optional[str] = None, **extra: Any) -> Plan:
    return blocked_plan(task, summary, error, suggestion, status="failed", **extra)


def seconds_to_ms(seconds: Any) -> int:
    try:
        value = float(seconds)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(value) or value < 0:
        return 0
    return int(round(value * 1000))


# ---------------------------------------------------------------------------
# Environment / tool telemetry
# ---------------------------------------------------------------------------

LOW_LIGHT_THRESHOLD = 8


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (list, tuple, set)):
        return len(value) > 0
    if isinstance(value, Mapping):
        return bool(value.get("detected") or value.get("present") or value.get("nearby"))
    return bool(value)


def extract_environmental_signals(context: Any) -> Dict[str, Any]:
    """
    Bridge-reported signals relevant to underground work.

    Reads `lightLevel` plus `lava` / `gravel` flags from the context root,
    `environment` and `signals`, and hazard names listed under
    `environment.hazards`.
    """
    ctx = PlanContext.coerce(context)
    env = ctx.environment
    signals = ctx.get("signals", default={})
    if not isinstance(signals, Mapping):
        signals = {}

    light = ctx.get("lightLevel")
    if light is None:
        light = env.get("lightLevel", signals.get("lightLevel"))
    light_level = light if isinstance(light, (int, float)) and not isinstance(light, bool) else None

    hazard_names = {
        normalize_item_name(h) for h in (env.get("hazards") or []) if h is not None
    } if isinstance(env.get("hazards"), (list, tuple)) else set()

    def detected(name: str) -> bool:
        return (
            _flag(signals.get(name))
            or _flag(env.get(name))
            or any(name in hazard for hazard in hazard_names)
        )

    return {
        "lightLevel": light_level,
        "lowLight": light_level is not None and light_level < LOW_LIGHT_THRESHOLD,
        "lava": detected("lava"),
        "gravel": detected("gravel"),
    }


def resolve_tool_integrity(tool: Any, context: Any) -> Dict[str, Any]:
    """
    Durability view of `tool` from inventory telemetry.

    Returns `{durability, percent, broken, origin}`; unknown values are None.
    """
    ctx = PlanContext.coerce(context)
    empty = {"durability": None, "percent": None, "broken": False, "origin": None}
    item = ctx.inventory.find(normalize_item_name(tool))
    if item is None:
        return empty
    durability = item.durability
    percent = item.durability_ratio
    broken = durability is not None and durability <= 0
    return {
        "durability": durability,
        "percent": percent,
        "broken": broken,
        "origin": "inventory" if durability is not None else None,
    }
