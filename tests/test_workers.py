# tests/test_workers.py
"""
Unit tests for the lattice A*, the mining-target scorer and WorkerPool.

Obstacles are plain {x, y, z} dicts, so no world data is required.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Any, List

import pytest

from env.schema import WorkerSettings
from monitoring.bus import EventBus
from monitoring.events import EventType, MonitoringEvent
from workers import WorkerError, WorkerPool, WorkerTimeoutError, find_path, score_mining_targets


def _pos(x: int, y: int, z: int) -> dict:
    return {"x": x, "y": y, "z": z}


def _is_unit_step(a: dict, b: dict) -> bool:
    return abs(a["x"] - b["x"]) + abs(a["y"] - b["y"]) + abs(a["z"] - b["z"]) == 1


def test_find_path_in_open_space() -> None:
    path = find_path(_pos(0, 64, 0), _pos(4, 64, 0))

    assert path is not None
    assert path[0] == _pos(0, 64, 0)
    assert path[-1] == _pos(4, 64, 0)
    # Manhattan distance 4 -> five positions inclusive
    assert len(path) == 5
    assert all(_is_unit_step(a, b) for a, b in zip(path, path[1:]))


def test_find_path_start_equals_goal() -> None:
    assert find_path(_pos(1, 2, 3), _pos(1, 2, 3)) == [_pos(1, 2, 3)]


def test_find_path_around_wall() -> None:
    wall = [_pos(2, 64, z) for z in range(-1, 2)]
    path = find_path(_pos(0, 64, 0), _pos(4, 64, 0), wall)

    assert path is not None
    assert path[-1] == _pos(4, 64, 0)
    for step in path:
        assert step not in wall
    # Detour over or around the wall costs exactly two extra steps
    assert len(path) == 7


def test_find_path_unreachable_goal_returns_none() -> None:
    goal = _pos(5, 5, 5)
    cage = [
        _pos(5 + dx, 5 + dy, 5 + dz)
        for dx, dy, dz in ((1, 0, 0), (-1, 0, 0), (0, 1, 0), (0, -1, 0), (0, 0, 1), (0, 0, -1))
    ]
    assert find_path(_pos(0, 0, 0), goal, cage, max_open=200) is None


def test_find_path_gives_up_past_open_limit() -> None:
    assert find_path(_pos(0, 0, 0), _pos(40, 40, 40), max_open=5) is None


def test_find_path_is_deterministic() -> None:
    obstacles = [_pos(1, 0, 0), _pos(0, 1, 0)]
    first = find_path(_pos(0, 0, 0), _pos(3, 3, 0), obstacles)
    second = find_path(_pos(0, 0, 0), _pos(3, 3, 0), obstacles)
    assert first == second


def test_score_mining_targets_orders_by_value_per_distance() -> None:
    resources = [
        {"id": "far-diamond", "position": _pos(30, 0, 0), "value": 10},
        {"id": "near-coal", "position": _pos(1, 0, 0), "value": 1},
        {"id": "near-iron", "position": _pos(1, 0, 0), "value": 3},
    ]
    ranked = score_mining_targets(resources, _pos(0, 0, 0))

    assert [r["id"] for r in ranked] == ["near-iron", "near-coal", "far-diamond"]
    assert ranked[0]["distance"] == 1
    assert ranked[0]["score"] == pytest.approx(1.5)
    assert "score" not in resources[0]


def test_score_mining_targets_keeps_top_ten() -> None:
    resources = [{"id": i, "position": _pos(i, 0, 0), "value": 1} for i in range(25)]
    ranked = score_mining_targets(resources, _pos(0, 0, 0), efficiency=2.0)

    assert len(ranked) == 10
    assert [r["id"] for r in ranked] == list(range(10))
    assert ranked[0]["score"] == pytest.approx(2.0)


class ImmediateExecutor:
    """Runs submitted callables inline and hands back a completed Future."""

    def submit(self, fn, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future

    def shutdown(self, wait: bool = True) -> None:
        pass


class StalledExecutor:
    """Never completes anything."""

    def submit(self, fn, *args, **kwargs) -> Future:
        return Future()

    def shutdown(self, wait: bool = True) -> None:
        pass


def _pool(executor: Any, bus: EventBus = None) -> WorkerPool:
    return WorkerPool(WorkerSettings(max_workers=1, timeout_s=0.05), executor=executor, bus=bus)


def test_worker_pool_runs_pathfinding_request() -> None:
    bus = EventBus()
    seen: List[MonitoringEvent] = []
    bus.subscribe(seen.append)
    pool = _pool(ImmediateExecutor(), bus)

    response = pool.run({"type": "pathfinding", "id": "p-1", "start": _pos(0, 0, 0), "goal": _pos(2, 0, 0)})

    assert response.success
    assert response.task_id == "p-1"
    assert response.data[-1] == _pos(2, 0, 0)
    assert response.to_dict()["taskId"] == "p-1"
    assert seen[-1].event_type == EventType.WORKER_COMPLETED
    assert pool.get_stats()["totalTasksProcessed"] == 1


def test_worker_pool_mining_strategy_and_calculation() -> None:
    pool = _pool(ImmediateExecutor())
    ranked = pool.submit(
        {"type": "miningStrategy", "resources": [{"position": _pos(3, 0, 0), "value": 4}], "botPosition": _pos(0, 0, 0)}
    )
    assert ranked[0]["score"] == pytest.approx(1.0)
    assert pool.submit({"type": "calculation", "data": {"n": 3}}) == {"n": 3}


def test_worker_pool_unknown_type_fails() -> None:
    pool = _pool(ImmediateExecutor())
    with pytest.raises(WorkerError, match="Unknown task type"):
        pool.submit({"type": "teleport"})

    response = pool.run({"type": "teleport", "id": "t-9"})
    assert not response.success
    assert "Unknown task type" in response.error
    assert pool.get_stats()["failedTasks"] == 1


def test_worker_pool_handler_error_is_wrapped() -> None:
    pool = _pool(ImmediateExecutor())
    with pytest.raises(WorkerError):
        pool.submit({"type": "pathfinding", "start": _pos(0, 0, 0)})


def test_worker_pool_timeout() -> None:
    pool = _pool(StalledExecutor())
    with pytest.raises(WorkerTimeoutError):
        pool.submit({"type": "calculation", "data": 1}, timeout=0.01)


def test_worker_pool_rejects_after_shutdown() -> None:
    with _pool(ImmediateExecutor()) as pool:
        pass
    assert pool.get_stats()["closed"] is True
    with pytest.raises(WorkerError):
        pool.submit({"type": "calculation", "data": 1})
