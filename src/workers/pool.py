# src/workers/pool.py
"""
Request/response worker pool for CPU-bound helpers.

Requests are plain dicts tagged with `type`:

    {"type": "pathfinding", "start": {...}, "goal": {...}, "obstacles": [...]}
    {"type": "miningStrategy", "resources": [...], "botPosition": {...}, "efficiency": 1.0}
    {"type": "calculation", "data": ...}

`submit()` returns the handler's data or raises WorkerError;
`run()` never raises and wraps the outcome in a WorkerResponse.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Executor, ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from env.loader import get_runtime_settings
from env.schema import WorkerSettings
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event

from .astar import find_path
from .scorer import score_mining_targets

log = logging.getLogger(__name__)


class WorkerError(RuntimeError):
    """Worker request failed or could not be dispatched."""


class WorkerTimeoutError(WorkerError):
    """Worker request did not finish within its timeout."""


@dataclass
class WorkerResponse:
    success: bool
    data: Any = None
    error: Optional[str] = None
    task_id: Optional[str] = None
    duration_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "data": self.data,
            "error": self.error,
            "taskId": self.task_id,
            "duration": self.duration_ms,
        }


def _pathfinding(request: Mapping[str, Any]) -> Any:
    return find_path(request["start"], request["goal"], request.get("obstacles") or [])


def _mining_strategy(request: Mapping[str, Any]) -> Any:
    return score_mining_targets(
        request.get("resources") or [],
        request["botPosition"],
        request.get("efficiency") or 1.0,
    )


def _calculation(request: Mapping[str, Any]) -> Any:
    return request.get("data")


REQUEST_HANDLERS: Dict[str, Callable[[Mapping[str, Any]], Any]] = {
    "pathfinding": _pathfinding,
    "miningStrategy": _mining_strategy,
    "calculation": _calculation,
}


class WorkerPool:
    """
    Thin wrapper over a concurrent.futures executor.

    The pool owns its executor unless one is passed in. `executor` is
    exposed so the planner registry can share the same threads.
    """

    def __init__(
        self,
        settings: Optional[WorkerSettings] = None,
        executor: Optional[Executor] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.settings = settings or get_runtime_settings().workers
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.settings.max_workers, thread_name_prefix="worker"
        )
        self._bus = bus
        self._lock = threading.Lock()
        self._processed = 0
        self._failed = 0
        self._closed = False

    @property
    def executor(self) -> Executor:
        return self._executor

    def submit(self, request: Mapping[str, Any], timeout: Optional[float] = None) -> Any:
        """Run `request` on the pool and return its data."""
        if self._closed:
            raise WorkerError("Worker pool is shut down")
        request_type = request.get("type") if isinstance(request, Mapping) else None
        handler = REQUEST_HANDLERS.get(request_type)
        if handler is None:
            raise WorkerError(f"Unknown task type: {request_type}")

        limit = self.settings.timeout_s if timeout is None else timeout
        future = self._executor.submit(handler, dict(request))
        try:
            return future.result(timeout=limit)
        except FutureTimeout as exc:
            future.cancel()
            log.warning("Worker request %s timed out after %.2fs", request_type, limit)
            raise WorkerTimeoutError(f"Task timeout after {limit}s") from exc
        except Exception as exc:
            raise WorkerError(str(exc)) from exc

    def run(self, request: Mapping[str, Any], timeout: Optional[float] = None) -> WorkerResponse:
        task_id = request.get("id") if isinstance(request, Mapping) else None
        started = time.monotonic()
        try:
            data = self.submit(request, timeout)
        except WorkerError as exc:
            self._record(False)
            log_event(self._bus, __name__, EventType.WORKER_FAILED, str(exc),
                      {"taskId": task_id}, correlation_id=task_id)
            return WorkerResponse(success=False, error=str(exc), task_id=task_id,
                                  duration_ms=int((time.monotonic() - started) * 1000))

        duration_ms = int((time.monotonic() - started) * 1000)
        self._record(True)
        log_event(self._bus, __name__, EventType.WORKER_COMPLETED, "Worker request completed",
                  {"taskId": task_id, "duration": duration_ms}, correlation_id=task_id)
        return WorkerResponse(success=True, data=data, task_id=task_id, duration_ms=duration_ms)

    def _record(self, success: bool) -> None:
        with self._lock:
            self._processed += 1
            if not success:
                self._failed += 1

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "maxWorkers": self.settings.max_workers,
                "totalTasksProcessed": self._processed,
                "failedTasks": self._failed,
                "closed": self._closed,
            }

    def shutdown(self, wait: bool = True) -> None:
        self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.shutdown()
