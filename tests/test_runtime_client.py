#tests/test_runtime_client.py
"""
Tests for runtime_client.client.RuntimeClient.

Covers:
- Event enrichment from observed envelopes and terminal cleanup
- Named listener channels with failure isolation
- Plan decoration
- NDJSON processing and the background reader over a scripted transport
- HTTP submit through a fake requests session (ack, timeout, failure)
- create_runtime_client simulator fallback
"""

from __future__ import annotations

import threading
from typing import Any, List, Optional

import pytest
import requests

from env.schema import ClientSettings, RuntimeSettings
from monitoring.bus import EventBus
from monitoring.events import EventType, MonitoringEvent
from runtime_client import (
    ManualScheduler,
    RuntimeClient,
    RuntimeSimulator,
    RuntimeTimeoutError,
    create_runtime_client,
)

ENVELOPE = {"version": "1.0", "action": "mine", "npc": "npc-7", "issuedAt": 1000, "metadata": {}}


def _client(**settings) -> RuntimeClient:
    return RuntimeClient(ClientSettings(**settings))


def _collect(client: RuntimeClient, name: str) -> List[Any]:
    seen: List[Any] = []
    client.on(name, seen.append)
    return seen


def test_events_are_tagged_with_observed_npc():
    client = _client()
    events = _collect(client, "event")
    eid = client.observe_envelope(ENVELOPE)
    assert eid == "npc-7:1000"

    client.process_message('{"type": "task_progress", "envelopeId": "npc-7:1000"}\n')
    assert events[-1]["npcId"] == "npc-7"
    assert events[-1]["envelopeId"] == "npc-7:1000"
    assert eid in client.observed_envelopes()


def test_terminal_event_drops_observation():
    client = _client()
    events = _collect(client, "event")
    client.observe_envelope(ENVELOPE)

    client.process_message('{"type": "task_complete", "taskId": "npc-7:1000"}')
    assert events[-1]["npcId"] == "npc-7"
    assert client.observed_envelopes() == {}

    # Later events for the same id are no longer enriched
    client.process_message('{"type": "task_progress", "envelopeId": "npc-7:1000"}')
    assert "npcId" not in events[-1]


def test_existing_npc_id_is_kept_and_npc_field_is_promoted():
    client = _client()
    client.observe_envelope(ENVELOPE)
    enriched = client.enrich_event({"type": "status", "envelopeId": "npc-7:1000", "npcId": "npc-other"})
    assert enriched["npcId"] == "npc-other"

    assert client.enrich_event({"type": "status", "npc": "npc-3"})["npcId"] == "npc-3"
    assert client.enrich_event("not a mapping") == "not a mapping"


def test_decorate_plan_uses_nested_envelope():
    client = _client()
    plans = _collect(client, "plan")
    client.observe_envelope(ENVELOPE)

    client.process_message('{"plan": {"envelope": {"npc": "npc-7", "issuedAt": 1000}, "plan": null}}')
    assert plans[-1]["npcId"] == "npc-7"


def test_named_channels_isolate_failing_listeners():
    client = _client()
    events = _collect(client, "event")
    plans = _collect(client, "plan")

    def broken(_event):
        raise RuntimeError("listener bug")

    client.on("event", broken)
    client.process_message('{"type": "task_progress"}')
    client.off("event", broken)
    client.off("never-used", broken)
    client.process_message('{"type": "task_progress"}')

    assert [e["type"] for e in events] == ["task_progress", "task_progress"]
    assert plans == []


def test_runtime_events_reach_the_bus():
    bus = EventBus()
    seen: List[MonitoringEvent] = []
    bus.subscribe(seen.append)
    client = RuntimeClient(ClientSettings(), bus=bus)

    client.process_message('{"event": {"type": "hazard_detected", "hazard": "lava"}}')
    assert seen[-1].event_type == EventType.RUNTIME_EVENT
    assert seen[-1].message == "hazard_detected"


class ScriptedTransport:
    """Hands out queued chunks, then reports the peer closed."""

    def __init__(self, chunks: List[bytes]) -> None:
        self._chunks = list(chunks)
        self.opened = 0
        self.closed = threading.Event()

    def open(self) -> None:
        self.opened += 1

    def read(self) -> Optional[bytes]:
        return self._chunks.pop(0) if self._chunks else None

    def close(self) -> None:
        self.closed.set()


def test_reader_pumps_transport_until_closed():
    transport = ScriptedTransport([b'{"event": {"type": "task_acc', b'epted"}}\n', b"", b'{"type": "task_complete"}'])
    client = RuntimeClient(ClientSettings(auto_reconnect=False), transport=transport)
    events = _collect(client, "event")
    lifecycle = []
    client.on("connected", lambda _: lifecycle.append("connected"))
    client.on("disconnected", lambda _: lifecycle.append("disconnected"))

    assert client.connect()
    assert transport.closed.wait(2.0)
    client.close()

    assert [e["type"] for e in events] == ["task_accepted", "task_complete"]
    assert lifecycle == ["connected", "disconnected"]
    assert transport.opened == 1
    assert not client.connected


def test_connect_without_url_or_transport():
    assert _client().connect() is False


class FakeResponse:
    def __init__(self, body: Any = None, status: int = 200) -> None:
        self._body = body
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("no body")
        return self._body


class FakeSession:
    def __init__(self, response: Any = None, error: Optional[Exception] = None) -> None:
        self.response = response
        self.error = error
        self.calls: List[dict] = []

    def post(self, url: str, json: Any = None, timeout: Any = None) -> FakeResponse:
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def test_submit_posts_envelope_and_returns_ack():
    session = FakeSession(FakeResponse({"accepted": True}))
    client = RuntimeClient(ClientSettings(submit_url="http://runtime/submit", submit_timeout_s=3.0), session=session)

    ack = client.submit(ENVELOPE)
    assert ack == {"accepted": True, "envelopeId": "npc-7:1000"}
    assert session.calls[0]["json"]["action"] == "mine"
    assert session.calls[0]["timeout"] == 3.0


def test_submit_without_json_body_still_acks():
    session = FakeSession(FakeResponse(None))
    client = RuntimeClient(ClientSettings(submit_url="http://runtime/submit"), session=session)
    assert client.submit(ENVELOPE) == {"envelopeId": "npc-7:1000"}


def test_submit_timeout_raises():
    session = FakeSession(error=requests.Timeout("slow"))
    client = RuntimeClient(ClientSettings(submit_url="http://runtime/submit"), session=session)
    with pytest.raises(RuntimeTimeoutError):
        client.submit(ENVELOPE, timeout=0.5)
    assert session.calls[0]["timeout"] == 0.5
    assert client.observed_envelopes() == {}


def test_submit_failure_emits_error_and_returns_none():
    session = FakeSession(FakeResponse({"error": "bad"}, status=500))
    client = RuntimeClient(ClientSettings(submit_url="http://runtime/submit"), session=session)
    errors = _collect(client, "error")

    assert client.submit(ENVELOPE) is None
    assert isinstance(errors[0], requests.HTTPError)
    assert client.observed_envelopes() == {}


def test_submit_without_runtime_returns_none_and_keeps_no_observation():
    client = _client()
    for issued in range(5):
        assert client.submit({**ENVELOPE, "issuedAt": issued}) is None
    assert client.observed_envelopes() == {}


def test_acknowledged_submit_stays_observed_until_terminal_event():
    session = FakeSession(FakeResponse({"accepted": True}))
    client = RuntimeClient(ClientSettings(submit_url="http://runtime/submit"), session=session)
    client.submit(ENVELOPE)
    assert list(client.observed_envelopes()) == ["npc-7:1000"]

    client.process_message('{"type": "task_failed", "envelopeId": "npc-7:1000"}')
    assert client.observed_envelopes() == {}


def test_create_runtime_client_falls_back_to_simulator():
    scheduler = ManualScheduler()
    client = create_runtime_client(RuntimeSettings(), scheduler=scheduler)
    events = _collect(client, "event")

    assert isinstance(client.get_runtime(), RuntimeSimulator)
    ack = client.submit(ENVELOPE)
    assert ack["envelopeId"] == "npc-7:1000"

    scheduler.run_all()
    assert events[-1]["type"] == "task_complete"
    assert events[-1]["npcId"] == "npc-7"
    assert client.observed_envelopes() == {}


def test_create_runtime_client_with_stream_has_no_simulator():
    settings = RuntimeSettings(client=ClientSettings(events_url="tcp://127.0.0.1:9"))
    client = create_runtime_client(settings)
    assert client.get_runtime() is None
    assert not client.can_simulate()
