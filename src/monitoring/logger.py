# JSON logger subscribing to EventBus
"""
Structured logging for planner and runtime events.

Provides:
- JsonFileLogger: subscribes to an EventBus and writes MonitoringEvents as JSONL.
- log_event: convenience helper for publishing MonitoringEvents via the EventBus.

Usage:

    bus = EventBus()
    sink = JsonFileLogger(Path("logs/monitoring/events.log"), bus)

    log_event(
        bus=bus,
        module="tasks.registry",
        event_type=EventType.PLAN_CREATED,
        message="Planned mine",
        payload={"action": "mine", "steps": 6},
    )
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

from .bus import EventBus
from .events import EventType, MonitoringEvent

log = logging.getLogger(__name__)


class JsonFileLogger:
    """
    JSON-lines logger for MonitoringEvent instances.

    Writes one UTF-8 JSON object per line and creates the parent
    directory on first use.
    """

    def __init__(self, path: Path, bus: EventBus) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("a", encoding="utf-8")
        self._bus = bus
        bus.subscribe(self._on_event)

    @property
    def path(self) -> Path:
        return self._path

    def _on_event(self, event: MonitoringEvent) -> None:
        line = json.dumps(event.to_dict(), ensure_ascii=False, default=str)
        try:
            self._file.write(line + "\n")
            self._file.flush()
        except (OSError, ValueError):
            # Disk full or handle already closed: drop the line.
            log.warning("Could not write monitoring event to %s", self._path)

    def close(self) -> None:
        """Unsubscribe and close the file handle."""
        self._bus.unsubscribe(self._on_event)
        if not self._file.closed:
            self._file.close()


def log_event(
    bus: Optional[EventBus],
    module: str,
    event_type: EventType,
    message: str,
    payload: Optional[Dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> None:
    """
    Create and publish a MonitoringEvent.

    Parameters
    ----------
    bus:
        EventBus to publish to. None is a no-op, so callers can keep the
        bus optional.
    module:
        Source module ("tasks.registry", "runtime_client.client", ...).
    event_type:
        EventType member describing the event.
    message:
        Short human-readable description.
    payload:
        Structured JSON-safe data attached to this event.
    correlation_id:
        Optional id linking related events (envelopeId, action).
    """
    if bus is None:
        return
    event = MonitoringEvent(
        ts=time.time(),
        module=module,
        event_type=event_type,
        message=message,
        payload=payload or {},
        correlation_id=correlation_id,
    )
    bus.publish(event)
