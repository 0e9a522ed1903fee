# src/tasks/graph.py
"""
Task dependency graph attached to plans as `taskGraph`.

Nodes carry `{id, action, summary, metadata, requirements}`; edges run
parent -> child ("parent must finish first"). Backed by a networkx DiGraph
so ordering queries come for free.
"""

from __future__ import annotations

import itertools
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import networkx as nx


_NODE_COUNTER = itertools.count(1)
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    if value <= 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_node_id(prefix: str = "task") -> str:
    """`"{prefix}_{base36 ms}_{counter}"`; unique within the process."""
    safe = prefix.strip() if isinstance(prefix, str) and prefix.strip() else "task"
    return f"{safe}_{_base36(int(time.time() * 1000))}_{next(_NODE_COUNTER)}"


def create_task_node(
    action: str = "generic",
    summary: str = "task",
    metadata: Optional[Mapping[str, Any]] = None,
    requirements: Optional[Sequence[Any]] = None,
    id: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "id": id or generate_node_id(action),
        "action": action,
        "summary": summary,
        "metadata": dict(metadata or {}),
        "requirements": list(requirements or []),
    }


class TaskGraph:
    """Dependency graph of sub-tasks with a designated root."""

    def __init__(self) -> None:
        self._graph = nx.DiGraph()
        self.root_id: Optional[str] = None

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._graph

    def add_node(self, node: Mapping[str, Any]) -> str:
        if not node:
            raise ValueError("Cannot add empty node to TaskGraph")
        node_id = node.get("id") or generate_node_id("graph")
        self._graph.add_node(
            node_id,
            action=node.get("action") or "generic",
            summary=node.get("summary") or node.get("title") or node.get("action") or "task",
            metadata=dict(node.get("metadata") or {}),
            requirements=list(node.get("requirements") or []),
        )
        # Edges to nodes not yet present are restored once both ends exist.
        for parent in node.get("parents") or ():
            if parent in self._graph and parent != node_id:
                self._graph.add_edge(parent, node_id)
        for child in node.get("children") or ():
            if child in self._graph and child != node_id:
                self._graph.add_edge(node_id, child)
        if self.root_id is None:
            self.root_id = node_id
        return node_id

    def set_root(self, node_id: str) -> None:
        if node_id not in self._graph:
            raise KeyError(f"Unknown node {node_id!r} cannot be set as root")
        self.root_id = node_id

    def add_dependency(self, parent_id: str, child_id: str) -> None:
        """`child_id` waits on `parent_id`. Self-edges are ignored."""
        if parent_id not in self._graph:
            raise KeyError(f"Unknown parent node {parent_id!r}")
        if child_id not in self._graph:
            raise KeyError(f"Unknown child node {child_id!r}")
        if parent_id == child_id:
            return
        self._graph.add_edge(parent_id, child_id)

    def get_node(self, node_id: str) -> Optional[Dict[str, Any]]:
        if node_id not in self._graph:
            return None
        return self._node_dict(node_id)

    def _node_dict(self, node_id: str) -> Dict[str, Any]:
        data = self._graph.nodes[node_id]
        return {
            "id": node_id,
            "action": data["action"],
            "summary": data["summary"],
            "metadata": dict(data["metadata"]),
            "requirements": list(data["requirements"]),
            "parents": list(self._graph.predecessors(node_id)),
            "children": list(self._graph.successors(node_id)),
        }

    def get_ready_nodes(self, completed: Iterable[str] = ()) -> List[str]:
        """Nodes not yet completed whose parents are all completed."""
        done = set(completed)
        return [
            node_id
            for node_id in self._graph.nodes
            if node_id not in done and all(p in done for p in self._graph.predecessors(node_id))
        ]

    def topological_order(self) -> List[str]:
        """Parents before children; raises networkx.NetworkXUnfeasible on cycles."""
        return list(nx.topological_sort(self._graph))

    def is_acyclic(self) -> bool:
        return nx.is_directed_acyclic_graph(self._graph)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rootId": self.root_id,
            "nodes": [self._node_dict(node_id) for node_id in self._graph.nodes],
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "TaskGraph":
        graph = cls()
        if not isinstance(payload, Mapping) or not isinstance(payload.get("nodes"), list):
            return graph
        nodes = [n for n in payload["nodes"] if isinstance(n, Mapping) and n]
        for node in nodes:
            graph.add_node({k: v for k, v in node.items() if k not in ("parents", "children")})
        for node in nodes:
            node_id = node.get("id")
            for parent in node.get("parents") or ():
                if parent in graph and node_id in graph:
                    graph.add_dependency(parent, node_id)
        root = payload.get("rootId")
        if root in graph:
            graph.set_root(root)
        return graph
