# EventBus for monitoring events
"""
In-process pub/sub for monitoring events.

Used by:
    - tasks.registry (plan created / blocked / failed)
    - runtime_client (connection lifecycle and runtime events)
    - workers.pool (worker request outcomes)
    - monitoring.logger.JsonFileLogger
    - runtime_client.emitter (one bus per named channel)
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, List

from .events import MonitoringEvent

log = logging.getLogger(__name__)

SubscriberFn = Callable[[MonitoringEvent], None]


class EventBus:
    """
    Thread-safe event bus.

    Each publish iterates over a snapshot of the subscribers, so a
    subscriber may (un)subscribe from inside its callback.
    """

    def __init__(self) -> None:
        self._subscribers: List[SubscriberFn] = []
        self._lock = Lock()

    def subscribe(self, fn: SubscriberFn) -> None:
        with self._lock:
            self._subscribers.append(fn)

    def unsubscribe(self, fn: SubscriberFn) -> None:
        """Safe to call even if `fn` is not present."""
        with self._lock:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

    def publish(self, event: MonitoringEvent) -> None:
        """
        Deliver `event` to every subscriber.

        A failing subscriber is logged and skipped; the others still
        receive the event.
        """
        with self._lock:
            subscribers = list(self._subscribers)

        for fn in subscribers:
            try:
                fn(event)
            except Exception:
                kind = event.event_type.name if isinstance(event, MonitoringEvent) else type(event).__name__
                log.exception("Monitoring subscriber %r failed on %s", fn, kind)

    def clear(self) -> None:
        """Drop all subscribers. Mostly useful for tests."""
        with self._lock:
            self._subscribers.clear()


# Process-wide bus for callers that don't thread one through explicitly.
default_bus = EventBus()
