#tests/test_monitoring_logger.py
"""
Tests for monitoring.logger.JsonFileLogger and log_event.

Covers:
- JSON structure validity
- Correct field encoding
- Flush behavior (file actually gets data)
- log_event without a bus is a no-op
"""

from __future__ import annotations

import json
from pathlib import Path

from monitoring.bus import EventBus
from monitoring.logger import JsonFileLogger, log_event
from monitoring.events import EventType


def test_json_file_logger_writes_valid_json(tmp_path: Path):
    bus = EventBus()
    log_path = tmp_path / "events.log"

    logger = JsonFileLogger(log_path, bus)

    # Emit one event
    log_event(
        bus=bus,
        module="runtime_client.client",
        event_type=EventType.ENVELOPE_SUBMITTED,
        message="Envelope submitted",
        payload={"action": "mine", "status": 202},
        correlation_id="npc-1:1700000000000",
    )

    # Explicit close to ensure file handle is flushed
    logger.close()

    content = log_path.read_text(encoding="utf-8").strip()
    lines = content.splitlines()
    assert len(lines) == 1

    data = json.loads(lines[0])

    assert data["module"] == "runtime_client.client"
    assert data["event_type"] == "ENVELOPE_SUBMITTED"
    assert data["message"] == "Envelope submitted"
    assert data["payload"]["action"] == "mine"
    assert data["payload"]["status"] == 202
    assert data["correlation_id"] == "npc-1:1700000000000"
    assert isinstance(data["ts"], (int, float))


def test_logger_parent_dir_created(tmp_path: Path):
    # Create nested path that doesn't exist initially
    log_dir = tmp_path / "nested" / "logs"
    log_path = log_dir / "events.log"

    bus = EventBus()
    logger = JsonFileLogger(log_path, bus)

    # Emit something
    log_event(
        bus=bus,
        module="runtime_client.client",
        event_type=EventType.ENVELOPE_SUBMITTED,
        message="hello",
        payload={},
    )
    logger.close()

    assert log_path.exists()
    content = log_path.read_text(encoding="utf-8").strip()
    assert content  # not empty


def test_log_event_without_bus_is_noop():
    log_event(None, "tasks.registry", EventType.PLAN_CREATED, "Planned mine", {"action": "mine"})


def test_event_type_is_written_by_name(tmp_path: Path):
    bus = EventBus()
    log_path = tmp_path / "events.log"
    logger = JsonFileLogger(log_path, bus)

    log_event(bus, "tasks.registry", EventType.PLAN_BLOCKED, "Blocked door", {"action": "door"}, "door")
    logger.close()

    data = json.loads(log_path.read_text(encoding="utf-8").strip())
    assert data["event_type"] == "PLAN_BLOCKED"
    assert data["correlation_id"] == "door"
