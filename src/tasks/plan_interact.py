# src/tasks/plan_interact.py
"""
Container / block interaction planner (open chests, inspect blocks, move items).
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Optional

from spec.types import UNSPECIFIED_ITEM, Plan, PlanContext, TaskRequest

from .helpers import (
    create_plan,
    create_step,
    describe_target,
    failed_plan,
    format_requirement_list,
    has_inventory_item,
    normalize_item_name,
    resolve_quantity,
)


DEFAULT_INTERACTION_DURATION_MS = 7000
INTERACTION_BUFFER_MS = 3000

_UNSAFE_COMMAND_CHARS = re.compile(r"[^0-9\s.\-]")


def _non_negative(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def _transfer_entry(entry: Any) -> Optional[Dict[str, Any]]:
    if isinstance(entry, dict):
        name = normalize_item_name(entry.get("name") or entry.get("item"))
        count = resolve_quantity(entry.get("count", entry.get("quantity")), None)
    else:
        name = normalize_item_name(entry)
        count = None
    if name == UNSPECIFIED_ITEM:
        return None
    return {"name": name, "count": count} if count is not None else {"name": name}


def normalize_transfer_items(transfer: Any) -> Dict[str, List[Dict[str, Any]]]:
    """`{take: [...], store: [...]}` with invalid entries dropped."""
    result: Dict[str, List[Dict[str, Any]]] = {"take": [], "store": []}
    if not isinstance(transfer, dict):
        return result
    for key in ("take", "store"):
        raw = transfer.get(key)
        if not raw:
            continue
        entries = raw if isinstance(raw, (list, tuple)) else [raw]
        result[key] = [e for e in (_transfer_entry(r) for r in entries) if e]
    return result


def command_target(target: Any, description: str) -> str:
    """Block coordinates for a runtime command; never carries anything but numbers."""
    if isinstance(target, dict):
        coords = [_finite(target.get(axis)) for axis in ("x", "y", "z")]
        if all(c is not None for c in coords):
            return " ".join(str(math.floor(c)) for c in coords)
    cleaned = description.replace("(", "").replace(")", "").replace(",", " ")
    return " ".join(_UNSAFE_COMMAND_CHARS.sub("", cleaned).split())


def _finite(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def plan_interact_task(task: Any, context: Any = None) -> Plan:
    request = TaskRequest.coerce(task)
    ctx = PlanContext.coerce(context)

    if not request.target:
        return failed_plan(
            request,
            "Interaction needs a block or container location.",
            error="Task must have a target location",
            suggestion="Provide the coordinates of the container or block to interact with.",
        )

    container = normalize_item_name(request.option("container", "block") or "chest")
    interaction = normalize_item_name(request.option("interaction") or "open_container")
    target_description = describe_target(request.target)
    transfer = normalize_transfer_items(request.option("transfer") or {})

    key_raw = request.option("requiresKey")
    requires_key = normalize_item_name(key_raw) if key_raw else None
    hold_raw = request.option("holdItem")
    hold_item = normalize_item_name(hold_raw) if hold_raw else None
    if hold_item == UNSPECIFIED_ITEM:
        hold_item = None

    duration_s = _non_negative(request.option("duration"))
    missing_key = bool(requires_key) and not has_inventory_item(ctx.inventory, requires_key)

    steps = []
    if requires_key:
        steps.append(
            create_step(
                title="Prepare key",
                type="preparation",
                description=(
                    f"Retrieve the {requires_key} required to unlock the {container}."
                    if missing_key
                    else f"Keep the {requires_key} ready to unlock the {container}."
                ),
                metadata={"key": requires_key},
            )
        )

    if hold_item:
        steps.append(
            create_step(
                title="Select tool",
                type="preparation",
                description=f"Hold {hold_item} before interacting to trigger the correct behavior.",
                metadata={"item": hold_item},
            )
        )

    steps.append(
        create_step(
            title="Approach",
            type="movement",
            description=f"Move to {container} located at {target_description}.",
        )
    )

    if duration_s:
        shown = int(duration_s) if duration_s.is_integer() else duration_s
        interact_text = (
            f"Perform {interaction} on the {container} and keep it open for {shown} seconds to complete transfers."
        )
    else:
        interact_text = (
            f"Perform {interaction} on the {container}, ensuring the inventory GUI "
            "remains open long enough for transfers."
        )
    steps.append(
        create_step(
            title="Interact",
            type="interaction",
            description=interact_text,
            command=f"/data get block {command_target(request.target, target_description)} Items",
        )
    )

    if transfer["take"] or transfer["store"]:
        parts = []
        if transfer["take"]:
            parts.append(f"retrieve {format_requirement_list(transfer['take'])}")
        if transfer["store"]:
            parts.append(f"deposit {format_requirement_list(transfer['store'])}")
        steps.append(
            create_step(
                title="Manage inventory",
                type="inventory",
                description=f"Within the {container}, {' and '.join(parts)}. Confirm slot counts afterwards.",
                metadata=transfer,
            )
        )

    if request.option("recordContents"):
        steps.append(
            create_step(
                title="Record contents",
                type="report",
                description=f"Log notable items inside the {container} for tracking.",
            )
        )

    steps.append(
        create_step(
            title="Secure container",
            type="cleanup",
            description=f"Close the {container} and ensure no items spill on the ground.",
        )
    )

    risks = []
    if missing_key:
        risks.append(f"Missing required key item ({requires_key}).")
    if request.option("redstoneLinked"):
        risks.append("Redstone linkage may trigger traps when opened.")

    notes = []
    if request.option("ownership"):
        notes.append(
            f"Container owned by {request.option('ownership')}; ensure permissions before interacting."
        )

    return create_plan(
        task=request,
        summary=f"Interact with {container} at {target_description}.",
        steps=steps,
        estimated_duration=(
            duration_s * 1000 + INTERACTION_BUFFER_MS if duration_s else DEFAULT_INTERACTION_DURATION_MS
        ),
        resources=[container, requires_key, hold_item],
        risks=risks,
        notes=notes,
    )
