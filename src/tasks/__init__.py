# src/tasks/__init__.py
"""
Task planning entry points.

    from tasks import plan_task, has_planner

    plan = plan_task({"action": "eat"}, {"hungerState": {"hunger": 2}})
"""

from __future__ import annotations

from typing import Any, Optional

from spec.types import Plan

from .defaults import DEFAULT_PLANNERS, create_default_registry
from .helpers import (
    count_inventory_items,
    create_plan,
    create_step,
    describe_target,
    extract_inventory,
    format_requirement_list,
    has_inventory_item,
    normalize_item_name,
    resolve_quantity,
)
from .registry import PlannerRegistry

default_registry = create_default_registry()


def plan_task(task: Any, context: Any = None) -> Optional[Plan]:
    """Plan with the default registry; None for unknown actions or planner errors."""
    return default_registry.plan_task(task, context)


def has_planner(action: Any) -> bool:
    return default_registry.has_planner(action)


__all__ = [
    "DEFAULT_PLANNERS",
    "PlannerRegistry",
    "count_inventory_items",
    "create_default_registry",
    "create_plan",
    "create_step",
    "default_registry",
    "describe_target",
    "extract_inventory",
    "format_requirement_list",
    "has_inventory_item",
    "has_planner",
    "normalize_item_name",
    "plan_task",
    "resolve_quantity",
]
