# src/runtime_client/simulator.py
"""
In-process stand-in for the in-game runtime.

Given an envelope the simulator emits the same event sequence a real
runtime would: a `plan` announcement, one `hazard_detected` per mining
watcher (plus status / support / tool follow-ups driven by the watcher's
directive), and finally `task_complete`. Timing, for N watchers, with
`min = minimum_delay_ms` and `d = event_delay_ms`:

    hazard i         min + d * i
    mitigation i     min + d * i + max(10, d // 2)     (follow-up actions only)
    task_complete    min + d * (N + 1)

Callbacks run on a scheduler. ThreadingScheduler uses real timers;
ManualScheduler runs them only when advanced, which makes event order
reproducible.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from env.loader import get_runtime_settings
from env.schema import SimulatorSettings
from envelope.adapter import envelope_id as build_envelope_id

from .emitter import EventEmitter

log = logging.getLogger(__name__)

FOLLOW_UP_ACTIONS = frozenset({"pause", "reroute", "request_support", "request_tools"})


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...


class ThreadingScheduler:
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay_ms / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return timer


class _ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock: callbacks fire in due order when `advance()` passes them."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._queue: List[Any] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        handle = _ManualHandle()
        heapq.heappush(self._queue, (self.now_ms + max(0, int(delay_ms)), next(self._seq), callback, handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for *_, handle in self._queue if not handle.cancelled)

    def advance(self, ms: int) -> None:
        deadline = self.now_ms + ms
        while self._queue and self._queue[0][0] <= deadline:
            due, _, callback, handle = heapq.heappop(self._queue)
            self.now_ms = due
            if not handle.cancelled:
                callback()
        self.now_ms = deadline

    def run_all(self) -> None:
        while self._queue:
            self.advance(max(0, self._queue[0][0] - self.now_ms))


def _resume_action(directive: Optional[Mapping[str, Any]]) -> str:
    if not directive:
        return "resume"
    resume = directive.get("resumeAction") or directive.get("resume")
    if isinstance(resume, Mapping):
        resume = resume.get("action")
    return resume or "resume"


class RuntimeSimulator(EventEmitter):
    """Emits `plan` and `event` notifications for executed envelopes."""

    def __init__(
        self,
        settings: Optional[SimulatorSettings] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        super().__init__()
        self.settings = settings or get_runtime_settings().simulator
        self.scheduler = scheduler or ThreadingScheduler()
        self._active: Dict[str, List[TimerHandle]] = {}
        self._lock = threading.Lock()

    @property
    def event_delay_ms(self) -> int:
        return self.settings.event_delay_ms

    @property
    def minimum_delay_ms(self) -> int:
        return self.settings.minimum_delay_ms

    def active_tasks(self) -> List[str]:
        with self._lock:
            return list(self._active)

    # ------------------------------------------------------------------

    def execute(self, envelope: Mapping[str, Any]) -> Dict[str, Any]:
        if "issuedAt" not in envelope:
            envelope = {**envelope, "issuedAt": int(time.time() * 1000)}
        eid = build_envelope_id(envelope)
        metadata = envelope.get("metadata") if isinstance(envelope.get("metadata"), Mapping) else {}
        watchers = metadata.get("watchers") if isinstance(metadata.get("watchers"), list) else []
        plan = metadata.get("plan")
        npc = envelope.get("npc") or None

        self.emit("plan", {"envelope": envelope, "npcId": npc, "plan": plan})
        self.clear_task(eid)

        delay, minimum = self.event_delay_ms, self.minimum_delay_ms
        timers: List[TimerHandle] = []
        for index, watch in enumerate(watchers):
            trigger = minimum + delay * index
            timers.append(
                self.scheduler.call_later(trigger, lambda w=watch: self._emit_hazard(npc, w, eid))
            )
            response = watch.get("response") or {}
            if response.get("action") in FOLLOW_UP_ACTIONS:
                timers.append(
                    self.scheduler.call_later(
                        trigger + max(10, delay // 2), lambda w=watch: self._emit_mitigation(npc, w, eid)
                    )
                )

        timers.append(
            self.scheduler.call_later(minimum + delay * (len(watchers) + 1), lambda: self._complete(npc, eid))
        )
        with self._lock:
            self._active[eid] = timers

        log.debug("Simulating envelope %s with %d watcher(s)", eid, len(watchers))
        return {"plan": plan, "watchers": watchers, "envelopeId": eid, "deferCompletion": True}

    def cancel(self, envelope_id: str) -> None:
        self.clear_task(envelope_id)
        self.emit("event", {"type": "task_cancelled", "envelopeId": envelope_id})

    def clear_task(self, envelope_id: str) -> None:
        with self._lock:
            timers = self._active.pop(envelope_id, [])
        for timer in timers:
            timer.cancel()

    def close(self) -> None:
        for eid in self.active_tasks():
            self.clear_task(eid)

    # ------------------------------------------------------------------

    def _complete(self, npc: Optional[str], eid: str) -> None:
        self.emit(
            "event",
            {"type": "task_complete", "npcId": npc, "success": True, "action": "complete", "envelopeId": eid},
        )
        with self._lock:
            self._active.pop(eid, None)

    def _emit_hazard(self, npc: Optional[str], watch: Mapping[str, Any], eid: str) -> None:
        hazard = watch.get("hazard") or "unknown"
        directive = watch.get("response") or None
        event = {
            "type": "hazard_detected",
            "npcId": npc,
            "hazard": hazard,
            "severity": watch.get("severity") or "moderate",
            "directive": directive,
            "envelopeId": eid,
        }
        if watch.get("mitigation") is not None:
            event["mitigation"] = watch["mitigation"]
        self.emit("event", event)

        action = directive.get("action") if directive else None
        if action in ("pause", "reroute"):
            self.emit(
                "event",
                {
                    "type": "status",
                    "npcId": npc,
                    "status": "pause",
                    "reason": f"Hazard detected: {hazard}",
                    "directive": directive,
                    "envelopeId": eid,
                },
            )
        elif action == "request_support":
            self.emit(
                "event",
                {
                    "type": "support_request",
                    "npcId": npc,
                    "reason": f"Support requested for {hazard}",
                    "directive": directive,
                    "envelopeId": eid,
                },
            )
        elif action == "request_tools" and directive.get("request"):
            self.emit(
                "event",
                {"type": "request_tools", "npcId": npc, "request": directive["request"],
                 "hazard": hazard, "envelopeId": eid},
            )

    def _emit_mitigation(self, npc: Optional[str], watch: Mapping[str, Any], eid: str) -> None:
        directive = watch.get("response") or None
        self.emit(
            "event",
            {
                "type": "status",
                "npcId": npc,
                "status": "reroute" if _resume_action(directive) == "reroute" else "resume",
                "reason": f"Mitigation applied for {watch.get('hazard')}",
                "directive": directive,
                "envelopeId": eid,
            },
        )
