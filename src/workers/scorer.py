# src/workers/scorer.py
"""Rank known resource deposits by value per unit of travel."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

from .astar import heuristic, to_coord

TOP_TARGETS = 10


def score_mining_targets(
    resources: Iterable[Mapping[str, Any]],
    bot_position: Mapping[str, Any],
    efficiency: float = 1.0,
    limit: int = TOP_TARGETS,
) -> List[Dict[str, Any]]:
    """
    score = value * efficiency / (distance + 1), distance being Manhattan.

    Each returned resource is a copy with `distance` and `score` added,
    highest score first; ties keep input order.
    """
    origin = to_coord(bot_position)
    scored = []
    for resource in resources:
        distance = heuristic(origin, to_coord(resource["position"]))
        value = resource.get("value") or 1
        scored.append({**resource, "distance": distance, "score": value * efficiency / (distance + 1)})

    scored.sort(key=lambda r: r["score"], reverse=True)
    return scored[:limit]
