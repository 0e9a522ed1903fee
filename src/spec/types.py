# core shared types: TaskRequest, Plan, Step, Inventory, PlanContext
# src/spec/types.py

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, TypedDict


UNSPECIFIED_ITEM = "unspecified item"

TASK_PRIORITIES = ("critical", "high", "normal", "low")


# ---------------------------------------------------------------------------
# Raw input shapes
# ---------------------------------------------------------------------------

class TargetDict(TypedDict, total=False):
    """
    Location or entity reference attached to a task.

    Either a point:

      {"x": 30, "y": 12, "z": -4, "dimension": "overworld"}

    or a named / typed object:

      {"name": "village_bell", "type": "block"}
    """
    x: float
    y: float
    z: float
    dimension: str
    name: str
    type: str


class InventoryEntryDict(TypedDict, total=False):
    """Single inventory entry as produced by the game bridge."""
    name: str
    count: int
    durability: int
    maxDurability: int
    metadata: Dict[str, Any]


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------

def _item_key(name: Any) -> str:
    """Identity used for inventory matching: 'Oak Planks' == 'minecraft:oak_planks'."""
    text = " ".join(str(name or "").strip().lower().split())
    if text.startswith("minecraft:"):
        text = text[len("minecraft:"):]
    return text.replace(" ", "_").replace("-", "_")


def _as_count(value: Any, default: int = 1) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)) and math.isfinite(value):
        return max(0, int(value))
    if isinstance(value, str):
        try:
            return max(0, int(float(value.strip())))
        except ValueError:
            return default
    return default


@dataclass
class InventoryItem:
    """Canonical inventory entry."""

    name: str
    count: int = 1
    durability: Optional[int] = None
    max_durability: Optional[int] = None
    enchantments: Dict[str, int] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return _item_key(self.name)

    @property
    def durability_ratio(self) -> Optional[float]:
        if self.durability is None or not self.max_durability:
            return None
        return max(0.0, min(1.0, self.durability / self.max_durability))


class Inventory:
    """
    Canonical inventory view.

    Accepts every shape the game bridges produce:

      - [{"name": "bread", "count": 3}, "torch", ...]
      - {"slots": [...]} / {"items": [...]}
      - {"emerald": 30, "book": 1}
      - {"emerald": {"count": 30}, "bow": {"count": 1, "enchantments": {...}}}

    Uniqueness is by name; counting sums all matching entries.
    """

    def __init__(self, items: Optional[Iterable[InventoryItem]] = None) -> None:
        self._items: List[InventoryItem] = list(items or [])

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_raw(cls, raw: Any) -> "Inventory":
        if isinstance(raw, Inventory):
            return raw
        if raw is None:
            return cls()

        entries: List[InventoryItem] = []

        if isinstance(raw, Mapping):
            nested = raw.get("slots", raw.get("items"))
            if isinstance(nested, (list, tuple)):
                return cls.from_raw(list(nested))
            for name, value in raw.items():
                item = cls._entry_from_mapping_value(name, value)
                if item is not None:
                    entries.append(item)
            return cls(entries)

        if isinstance(raw, (list, tuple)):
            for entry in raw:
                item = cls._entry_from_list_value(entry)
                if item is not None:
                    entries.append(item)
            return cls(entries)

        return cls()

    @staticmethod
    def _entry_from_list_value(entry: Any) -> Optional[InventoryItem]:
        if entry is None:
            return None
        if isinstance(entry, str):
            return InventoryItem(name=entry, count=1) if entry.strip() else None
        if isinstance(entry, InventoryItem):
            return entry
        if isinstance(entry, Mapping):
            name = entry.get("name") or entry.get("item") or entry.get("id") or entry.get("type")
            if not name:
                return None
            count = _as_count(
                entry.get("count", entry.get("quantity", entry.get("amount"))), 1
            )
            return InventoryItem(
                name=str(name),
                count=count,
                durability=entry.get("durability"),
                max_durability=entry.get("maxDurability", entry.get("max_durability")),
                enchantments=dict(entry.get("enchantments") or {}),
                metadata=dict(entry.get("metadata") or {}),
            )
        name = getattr(entry, "name", None)
        if name:
            return InventoryItem(name=str(name), count=_as_count(getattr(entry, "count", 1)))
        return None

    @staticmethod
    def _entry_from_mapping_value(name: Any, value: Any) -> Optional[InventoryItem]:
        if not name:
            return None
        if isinstance(value, Mapping):
            return InventoryItem(
                name=str(name),
                count=_as_count(value.get("count", value.get("quantity")), 1),
                durability=value.get("durability"),
                max_durability=value.get("maxDurability", value.get("max_durability")),
                enchantments=dict(value.get("enchantments") or {}),
                metadata=dict(value.get("metadata") or {}),
            )
        return InventoryItem(name=str(name), count=_as_count(value, 0))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def items(self) -> List[InventoryItem]:
        return list(self._items)

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def count(self, name: Any) -> int:
        key = _item_key(name)
        if not key:
            return 0
        return sum(item.count for item in self._items if item.key == key)

    def has(self, name: Any, minimum: int = 1) -> bool:
        if minimum <= 0:
            return True
        return self.count(name) >= minimum

    def find(self, name: Any) -> Optional[InventoryItem]:
        key = _item_key(name)
        for item in self._items:
            if item.key == key:
                return item
        return None

    def matching(self, predicate: Callable[[InventoryItem], bool]) -> List[InventoryItem]:
        return [item for item in self._items if predicate(item)]

    def totals(self) -> Dict[str, int]:
        """Summed counts keyed by item identity, in first-seen order."""
        out: Dict[str, int] = {}
        for item in self._items:
            out[item.key] = out.get(item.key, 0) + item.count
        return out

    def to_list(self) -> List[Dict[str, Any]]:
        return [{"name": item.name, "count": item.count} for item in self._items]


# ---------------------------------------------------------------------------
# Task request
# ---------------------------------------------------------------------------

_TASK_FIELDS = ("action", "details", "target", "metadata", "priority", "npcId", "npc_id")


@dataclass
class TaskRequest:
    """
    Externally produced task request.

    Top-level keys other than the canonical ones (e.g. "bed", "villager",
    "item", "amount") are preserved in `extras` so planners can read them
    through `option()`.
    """

    action: Optional[str] = None
    details: Optional[str] = None
    target: Any = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    priority: str = "normal"
    npc_id: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, task: Any) -> "TaskRequest":
        if isinstance(task, TaskRequest):
            return task
        if not isinstance(task, Mapping):
            return cls()

        payload = copy.deepcopy(dict(task))
        metadata = payload.get("metadata")
        priority = payload.get("priority")
        details = payload.get("details")
        return cls(
            action=payload.get("action"),
            details=str(details) if details is not None else None,
            target=payload.get("target"),
            metadata=dict(metadata) if isinstance(metadata, Mapping) else {},
            priority=priority if priority in TASK_PRIORITIES else "normal",
            npc_id=payload.get("npcId", payload.get("npc_id")),
            extras={k: v for k, v in payload.items() if k not in _TASK_FIELDS},
        )

    def option(self, *keys: str, default: Any = None) -> Any:
        """First non-empty value among metadata[key], then top-level extras[key]."""
        for key in keys:
            value = self.metadata.get(key)
            if value is not None and value != "":
                return value
        for key in keys:
            value = self.extras.get(key)
            if value is not None and value != "":
                return value
        return default

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"action": self.action}
        if self.details is not None:
            out["details"] = self.details
        if self.target is not None:
            out["target"] = copy.deepcopy(self.target)
        if self.metadata:
            out["metadata"] = copy.deepcopy(self.metadata)
        out["priority"] = self.priority
        if self.npc_id is not None:
            out["npcId"] = self.npc_id
        out.update(copy.deepcopy(self.extras))
        return out


# ---------------------------------------------------------------------------
# Planning context
# ---------------------------------------------------------------------------

class PlanContext:
    """
    Read-only view over the world / agent context handed to planners.

    Every field is optional; `get()` accepts aliases and returns the first
    present value.
    """

    def __init__(self, raw: Optional[Mapping[str, Any]] = None) -> None:
        self._raw: Dict[str, Any] = copy.deepcopy(dict(raw or {}))
        npc = self._raw.get("npc")
        inventory_raw = self._raw.get("inventory")
        if inventory_raw is None and isinstance(npc, Mapping):
            inventory_raw = npc.get("inventory")
        self.inventory = Inventory.from_raw(inventory_raw)

    @classmethod
    def coerce(cls, context: Any) -> "PlanContext":
        if isinstance(context, PlanContext):
            return context
        if isinstance(context, Mapping):
            return cls(context)
        return cls()

    def get(self, *keys: str, default: Any = None) -> Any:
        for key in keys:
            value = self._raw.get(key)
            if value is not None:
                return value
        return default

    @property
    def npc(self) -> Dict[str, Any]:
        npc = self._raw.get("npc")
        return dict(npc) if isinstance(npc, Mapping) else {}

    @property
    def environment(self) -> Dict[str, Any]:
        env = self._raw.get("environment")
        return dict(env) if isinstance(env, Mapping) else {}

    @property
    def position(self) -> Optional[Dict[str, Any]]:
        pos = self.get("playerPosition", "position")
        if pos is None:
            pos = self.npc.get("position")
        return dict(pos) if isinstance(pos, Mapping) else None

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._raw)


# ---------------------------------------------------------------------------
# Plan output
# ---------------------------------------------------------------------------

@dataclass
class Step:
    """Single typed, human-readable plan step."""

    title: str
    type: str
    description: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    command: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "title": self.title,
            "type": self.type,
            "description": self.description,
        }
        if self.metadata:
            out["metadata"] = copy.deepcopy(self.metadata)
        if self.command is not None:
            out["command"] = self.command
        return out


@dataclass
class Plan:
    """
    Shared plan shape returned by every planner.

    `extra` holds planner-specific top-level fields (e.g. "danger",
    "explosionPower", "required", "tactic") that are flattened by
    `to_dict()`.
    """

    action: Optional[str]
    summary: str
    steps: List[Step] = field(default_factory=list)
    estimated_duration: int = 0
    resources: List[str] = field(default_factory=list)
    risks: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    task: Dict[str, Any] = field(default_factory=dict)
    priority: str = "normal"
    status: Optional[str] = None
    error: Optional[str] = None
    suggestion: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    outcome: Optional[Dict[str, Any]] = None
    preferred_traits: List[str] = field(default_factory=list)
    personality_bias: Optional[Dict[str, Any]] = None
    task_graph: Optional[Dict[str, Any]] = None
    sub_tasks: List[Dict[str, Any]] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status in (None, "ok")

    def step_titles(self) -> List[str]:
        return [step.title for step in self.steps]

    def find_step(self, title: str) -> Optional[Step]:
        for step in self.steps:
            if step.title == title:
                return step
        return None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "action": self.action,
            "task": copy.deepcopy(self.task),
            "summary": self.summary,
            "steps": [step.to_dict() for step in self.steps],
            "estimatedDuration": self.estimated_duration,
            "resources": list(self.resources),
            "risks": list(self.risks),
            "notes": list(self.notes),
            "priority": self.priority,
        }
        if self.metadata:
            out["metadata"] = copy.deepcopy(self.metadata)
        optional = {
            "status": self.status,
            "error": self.error,
            "suggestion": self.suggestion,
            "outcome": copy.deepcopy(self.outcome),
            "personalityBias": copy.deepcopy(self.personality_bias),
            "taskGraph": copy.deepcopy(self.task_graph),
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        if self.warnings:
            out["warnings"] = list(self.warnings)
        if self.preferred_traits:
            out["preferredTraits"] = list(self.preferred_traits)
        if self.sub_tasks:
            out["subTasks"] = copy.deepcopy(self.sub_tasks)
        for key, value in self.extra.items():
            out.setdefault(key, copy.deepcopy(value))
        return out


PlannerFn = Callable[[Any, Any], Optional[Plan]]
