# path: src/monitoring/events.py
"""
Monitoring event schema for the planning core and runtime client.

Every event is JSON-serializable via `.to_dict()` and travels through
monitoring.bus.EventBus to subscribers such as monitoring.logger.JsonFileLogger.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional


# ============================================================
# Event Types
# ============================================================

class EventType(Enum):
    """Typed monitoring events emitted by the registry and runtime client."""

    # Planner registry
    PLAN_CREATED = auto()
    PLAN_BLOCKED = auto()
    PLAN_FAILED = auto()

    # Envelope dispatch
    ENVELOPE_SUBMITTED = auto()

    # Runtime event stream
    RUNTIME_CONNECTED = auto()
    RUNTIME_DISCONNECTED = auto()
    RUNTIME_EVENT = auto()
    RUNTIME_ERROR = auto()

    # Worker pool
    WORKER_COMPLETED = auto()
    WORKER_FAILED = auto()

    # Generic log messages
    LOG = auto()


# ============================================================
# Monitoring Event Structure
# ============================================================

@dataclass
class MonitoringEvent:
    """
    Event emitted by the registry, envelope adapter, runtime client or
    worker pool.

    All fields must be JSON-safe.
    """

    ts: float                   # UNIX timestamp (seconds)
    module: str                 # Source module ("tasks.registry", "runtime_client", ...)
    event_type: EventType
    message: str                # Short human-readable description
    payload: Dict[str, Any]     # Structured data (plan summary, runtime event, ...)
    correlation_id: Optional[str] = None  # envelopeId / action used for grouping

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict for loggers."""
        data = asdict(self)
        data["event_type"] = self.event_type.name
        return data
