# src/workers/astar.py
"""
A* over the unbounded integer block lattice.

- 6-neighbourhood (±x, ±y, ±z), unit step cost.
- Manhattan distance heuristic.
- Obstacles are positions `{x, y, z}`; everything else is walkable.
- The search gives up once more than MAX_OPEN_SET nodes are open.

Positions go in and come out as plain `{x, y, z}` dicts so requests can
cross a worker boundary unchanged.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

Coord = Tuple[int, int, int]

MAX_OPEN_SET = 1000

NEIGHBOR_OFFSETS: Tuple[Coord, ...] = (
    (1, 0, 0),
    (-1, 0, 0),
    (0, 1, 0),
    (0, -1, 0),
    (0, 0, 1),
    (0, 0, -1),
)


def to_coord(position: Mapping[str, Any]) -> Coord:
    return (int(position["x"]), int(position["y"]), int(position["z"]))


def to_position(coord: Coord) -> Dict[str, int]:
    return {"x": coord[0], "y": coord[1], "z": coord[2]}


def heuristic(a: Coord, b: Coord) -> int:
    """Manhattan distance."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) + abs(a[2] - b[2])


def neighbors(coord: Coord) -> List[Coord]:
    x, y, z = coord
    return [(x + dx, y + dy, z + dz) for dx, dy, dz in NEIGHBOR_OFFSETS]


def _reconstruct(came_from: Dict[Coord, Coord], current: Coord) -> List[Coord]:
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path


def find_path(
    start: Mapping[str, Any],
    goal: Mapping[str, Any],
    obstacles: Optional[Iterable[Mapping[str, Any]]] = None,
    max_open: int = MAX_OPEN_SET,
) -> Optional[List[Dict[str, int]]]:
    """
    Shortest path from `start` to `goal` inclusive, or None when the goal is
    unreachable or the open set grows past `max_open`.

    Equal f-scores are broken by insertion order, so identical inputs always
    yield the identical path.
    """
    source, target = to_coord(start), to_coord(goal)
    blocked: Set[Coord] = {to_coord(o) for o in obstacles or ()}

    counter = itertools.count()
    open_heap: List[Tuple[int, int, Coord]] = [(heuristic(source, target), next(counter), source)]
    open_set: Set[Coord] = {source}
    came_from: Dict[Coord, Coord] = {}
    g_score: Dict[Coord, int] = {source: 0}

    while open_heap:
        _, _, current = heapq.heappop(open_heap)
        if current not in open_set:
            continue  # stale entry
        if current == target:
            return [to_position(c) for c in _reconstruct(came_from, current)]
        open_set.discard(current)

        for nxt in neighbors(current):
            if nxt in blocked:
                continue
            tentative = g_score[current] + 1
            if tentative < g_score.get(nxt, tentative + 1):
                came_from[nxt] = current
                g_score[nxt] = tentative
                heapq.heappush(open_heap, (tentative + heuristic(nxt, target), next(counter), nxt))
                open_set.add(nxt)

        if len(open_set) > max_open:
            return None

    return None
