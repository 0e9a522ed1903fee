#tests/test_runtime_frames.py
"""
Tests for runtime_client.frames and the events URL parser.

Covers:
- Every recognised frame shape
- Malformed lines are dropped without stopping the stream
- LineBuffer reassembles lines split across reads
"""

from __future__ import annotations

import json

import pytest

from runtime_client.frames import LineBuffer, decode_frames, extract_chunks
from runtime_client.transport import parse_events_url


def _lines(*frames) -> str:
    return "\n".join(json.dumps(f) if not isinstance(f, str) else f for f in frames)


def test_decode_recognised_shapes():
    raw = _lines(
        {"events": [{"type": "task_accepted"}, {"type": "task_progress"}, "junk"]},
        {"event": {"type": "hazard_detected"}},
        {"plan": {"summary": "mine"}},
        {"type": "event", "name": "inline"},
        {"type": "plan", "summary": "inline plan"},
        {"type": "task_complete", "envelopeId": "npc:1"},
    )
    messages = list(decode_frames(raw))

    assert [kind for kind, _ in messages] == ["event", "event", "event", "plan", "event", "plan", "event"]
    assert messages[2][1] == {"type": "hazard_detected"}
    assert messages[3][1] == {"summary": "mine"}
    assert messages[-1][1]["envelopeId"] == "npc:1"


def test_malformed_lines_are_dropped():
    raw = _lines("{not json", {"event": {"type": "status"}}, "[1, 2]", "42")
    assert list(decode_frames(raw)) == [("event", {"type": "status"})]


def test_frames_without_a_message_yield_nothing():
    assert list(decode_frames(_lines({"hello": "world"}))) == []


def test_extract_chunks_accepts_bytes_and_lists():
    assert extract_chunks(b'{"a": 1}\n\n{"b": 2}\n') == ['{"a": 1}', '{"b": 2}']
    assert extract_chunks(["x\ny", b"z"]) == ["x", "y", "z"]
    assert extract_chunks(None) == []


def test_line_buffer_reassembles_split_lines():
    buffer = LineBuffer()
    assert buffer.feed(b'{"event": {"ty') == []
    assert buffer.feed(b'pe": "status"}}\n{"pl') == ['{"event": {"type": "status"}}']
    assert buffer.flush() == ['{"pl']
    assert buffer.flush() == []


@pytest.mark.parametrize(
    "url, host, port",
    [
        ("tcp://127.0.0.1:8080", "127.0.0.1", 8080),
        ("localhost:9000", "localhost", 9000),
        ("ws://runtime.local:8787/events", "runtime.local", 8787),
    ],
)
def test_parse_events_url(url, host, port):
    endpoint = parse_events_url(url)
    assert (endpoint.host, endpoint.port) == (host, port)


@pytest.mark.parametrize("url", ["", "tcp://nohost", "localhost"])
def test_parse_events_url_rejects_incomplete(url):
    with pytest.raises(ValueError):
        parse_events_url(url)
