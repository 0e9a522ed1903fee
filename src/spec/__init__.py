# src/spec/__init__.py

from __future__ import annotations

"""
Public spec surface for the planning core.

Re-exports the data types every planner consumes or produces:
  - TaskRequest / PlanContext (inputs)
  - Inventory / InventoryItem (normalized inventory view)
  - Plan / Step (output)
"""

from .types import (
    UNSPECIFIED_ITEM,
    TASK_PRIORITIES,
    Inventory,
    InventoryItem,
    Plan,
    PlanContext,
    PlannerFn,
    Step,
    TaskRequest,
)

__all__ = [
    "UNSPECIFIED_ITEM",
    "TASK_PRIORITIES",
    "Inventory",
    "InventoryItem",
    "Plan",
    "PlanContext",
    "PlannerFn",
    "Step",
    "TaskRequest",
]
