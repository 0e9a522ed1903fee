#tests/test_task_graph.py
"""
Tests for tasks.graph.TaskGraph.

Covers:
- Dependencies, ready nodes and topological order
- Cycle detection
- to_dict / from_dict keep nodes, edges and root
"""

from __future__ import annotations

import networkx as nx
import pytest

from tasks.graph import TaskGraph, create_task_node, generate_node_id


def _sample() -> TaskGraph:
    graph = TaskGraph()
    root = graph.add_node(create_task_node("craft", "Craft piston", id="craft:piston"))
    for name in ("planks", "cobblestone", "iron_ingot"):
        graph.add_node(create_task_node("craft", f"Craft {name}", {"item": name}, id=f"craft:{name}"))
        graph.add_dependency(f"craft:{name}", root)
    graph.add_node(create_task_node("mine", "Mine iron ore", id="mine:iron_ore"))
    graph.add_dependency("mine:iron_ore", "craft:iron_ingot")
    return graph


def test_first_node_becomes_root():
    graph = _sample()
    assert graph.root_id == "craft:piston"
    assert len(graph) == 5
    assert "mine:iron_ore" in graph


def test_ready_nodes_follow_dependencies():
    graph = _sample()
    assert graph.get_ready_nodes() == ["craft:planks", "craft:cobblestone", "mine:iron_ore"]
    assert graph.get_ready_nodes(["mine:iron_ore"]) == ["craft:planks", "craft:cobblestone", "craft:iron_ingot"]
    done = ["craft:planks", "craft:cobblestone", "craft:iron_ingot", "mine:iron_ore"]
    assert graph.get_ready_nodes(done) == ["craft:piston"]


def test_topological_order_puts_parents_first():
    order = _sample().topological_order()
    assert order.index("mine:iron_ore") < order.index("craft:iron_ingot") < order.index("craft:piston")
    assert order[-1] == "craft:piston"


def test_cycle_is_detected():
    graph = _sample()
    graph.add_dependency("craft:piston", "mine:iron_ore")
    assert not graph.is_acyclic()
    with pytest.raises(nx.NetworkXUnfeasible):
        graph.topological_order()


def test_dependency_validation():
    graph = _sample()
    with pytest.raises(KeyError):
        graph.add_dependency("nope", "craft:piston")
    with pytest.raises(KeyError):
        graph.set_root("nope")
    with pytest.raises(ValueError):
        graph.add_node({})
    graph.add_dependency("craft:piston", "craft:piston")
    assert graph.is_acyclic()


def test_round_trip_through_dict():
    graph = _sample()
    graph.set_root("craft:iron_ingot")
    restored = TaskGraph.from_dict(graph.to_dict())

    assert restored.root_id == "craft:iron_ingot"
    assert restored.get_node("craft:iron_ingot")["parents"] == ["mine:iron_ore"]
    assert restored.get_node("craft:planks")["metadata"] == {"item": "planks"}
    assert restored.to_dict() == graph.to_dict()


def test_from_dict_tolerates_junk():
    assert len(TaskGraph.from_dict(None)) == 0
    assert len(TaskGraph.from_dict({"nodes": [None, {}, {"id": "a"}]})) == 1


def test_generated_ids_are_unique():
    ids = {generate_node_id("craft") for _ in range(50)}
    assert len(ids) == 50
    assert all(i.startswith("craft_") for i in ids)
