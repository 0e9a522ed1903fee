# src/workers/__init__.py
"""Pathfinding and mining-target scoring, offloadable to a worker pool."""

from .astar import MAX_OPEN_SET, find_path, heuristic
from .pool import WorkerError, WorkerPool, WorkerResponse, WorkerTimeoutError
from .scorer import TOP_TARGETS, score_mining_targets

__all__ = [
    "MAX_OPEN_SET",
    "find_path",
    "heuristic",
    "WorkerError",
    "WorkerPool",
    "WorkerResponse",
    "WorkerTimeoutError",
    "TOP_TARGETS",
    "score_mining_targets",
]
