# src/runtime_client/__init__.py
"""Client side of the in-game runtime: event stream, submit, simulator."""

from .client import (
    RuntimeClient,
    RuntimeClientError,
    RuntimeTimeoutError,
    create_runtime_client,
)
from .frames import TASK_EVENT_TYPES, TERMINAL_EVENT_TYPES, decode_frames
from .simulator import ManualScheduler, RuntimeSimulator, ThreadingScheduler
from .transport import TcpEventTransport, parse_events_url

__all__ = [
    "RuntimeClient",
    "RuntimeClientError",
    "RuntimeTimeoutError",
    "create_runtime_client",
    "TASK_EVENT_TYPES",
    "TERMINAL_EVENT_TYPES",
    "decode_frames",
    "ManualScheduler",
    "RuntimeSimulator",
    "ThreadingScheduler",
    "TcpEventTransport",
    "parse_events_url",
]
