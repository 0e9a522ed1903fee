# src/tasks/registry.py
"""
Planner registry: the single dispatch point from an action name to a
planner function.

    registry = PlannerRegistry()
    registry.register("mine", plan_mine_task, module_path="tasks.plan_mine",
                      export_name="plan_mine_task", parallel=True)
    plan = registry.plan_task({"action": "mine", ...}, context)

Unknown actions, missing tasks and planner crashes all yield None; a
crash is logged once. Planners flagged `parallel` run on the configured
executor when one is set, falling back to in-process execution if the
executor fails or times out.
"""

from __future__ import annotations

import copy
import importlib
import logging
from concurrent.futures import Executor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event
from spec.types import Plan, PlanContext

from .bias import apply_personality_bias

log = logging.getLogger(__name__)

PlannerFn = Callable[[Any, Any], Optional[Plan]]


@dataclass(frozen=True)
class PlannerEntry:
    """Registered planner plus what an executor needs to re-import it."""
    action: str
    handler: PlannerFn
    module_path: Optional[str] = None
    export_name: Optional[str] = None
    parallel: bool = False


def run_planner_by_path(module_path: str, export_name: str, task: Dict[str, Any],
                        context: Dict[str, Any]) -> Optional[Plan]:
    """Import and run a planner; module-level so process pools can pickle it."""
    module = importlib.import_module(module_path)
    planner = getattr(module, export_name, None)
    if not callable(planner):
        raise LookupError(f"Planner export {export_name!r} not found in {module_path}")
    return planner(task, context)


class PlannerRegistry:
    def __init__(
        self,
        executor: Optional[Executor] = None,
        timeout_s: Optional[float] = None,
        bus: Optional[EventBus] = None,
        apply_bias: bool = True,
    ) -> None:
        self._planners: Dict[str, PlannerEntry] = {}
        self._executor = executor
        self._timeout_s = timeout_s
        self._bus = bus
        self._apply_bias = apply_bias

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        action: str,
        handler: PlannerFn,
        module_path: Optional[str] = None,
        export_name: Optional[str] = None,
        parallel: bool = False,
    ) -> None:
        if not action or not isinstance(action, str):
            raise ValueError("register requires a non-empty action string")
        if not callable(handler):
            raise ValueError(f"Planner for {action!r} must be callable")
        self._planners[action] = PlannerEntry(
            action=action,
            handler=handler,
            module_path=module_path,
            export_name=export_name or getattr(handler, "__name__", None),
            parallel=bool(parallel),
        )

    def has_planner(self, action: Any) -> bool:
        return isinstance(action, str) and action in self._planners

    def get_planner(self, action: Any) -> Optional[PlannerFn]:
        entry = self._planners.get(action) if isinstance(action, str) else None
        return entry.handler if entry else None

    def list_registered_planners(self) -> List[str]:
        return list(self._planners)

    def set_executor(self, executor: Optional[Executor], timeout_s: Optional[float] = None) -> None:
        self._executor = executor
        self._timeout_s = timeout_s

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def plan_task(self, task: Any, context: Any = None) -> Optional[Plan]:
        """Plan `task` with the planner registered for `task["action"]`."""
        if not isinstance(task, Mapping):
            return None
        action = task.get("action")
        entry = self._planners.get(action) if isinstance(action, str) else None
        if entry is None:
            return None

        try:
            ctx = context.to_dict() if isinstance(context, PlanContext) else dict(context or {})
            plan = self._run(entry, task, ctx)
        except Exception as exc:
            log.exception("Failed to plan task for action %r: %s", action, exc)
            log_event(self._bus, __name__, EventType.PLAN_FAILED, f"Planner crashed for {action}",
                      {"action": action, "error": str(exc)}, correlation_id=action)
            return None
        if plan is None:
            return None

        if self._apply_bias:
            plan = apply_personality_bias(plan, ctx)
        self._publish(plan)
        return plan

    execute_planner = plan_task

    def _run(self, entry: PlannerEntry, task: Mapping[str, Any], ctx: Dict[str, Any]) -> Optional[Plan]:
        if entry.parallel and self._executor is not None and entry.module_path and entry.export_name:
            try:
                safe_task = copy.deepcopy(dict(task))
                safe_ctx = copy.deepcopy(ctx)
            except (TypeError, copy.Error):
                return entry.handler(task, ctx)
            try:
                future = self._executor.submit(
                    run_planner_by_path, entry.module_path, entry.export_name, safe_task, safe_ctx
                )
                result = future.result(timeout=self._timeout_s)
                if result is not None:
                    return result
            except FutureTimeout:
                log.warning("Planner executor timed out for action %s; planning in-process", entry.action)
            except Exception as exc:
                log.warning("Planner executor failed for action %s: %s", entry.action, exc)
        return entry.handler(task, ctx)

    def _publish(self, plan: Plan) -> None:
        if self._bus is None:
            return
        if plan.ok:
            event_type, message = EventType.PLAN_CREATED, f"Planned {plan.action}"
        elif plan.status == "blocked":
            event_type, message = EventType.PLAN_BLOCKED, f"Plan blocked for {plan.action}: {plan.error}"
        else:
            event_type, message = EventType.PLAN_FAILED, f"Plan failed for {plan.action}: {plan.error}"
        log_event(
            self._bus,
            __name__,
            event_type,
            message,
            {"action": plan.action, "status": plan.status, "steps": len(plan.steps),
             "estimatedDuration": plan.estimated_duration},
            correlation_id=plan.action,
        )
