# src/runtime_client/frames.py
"""
NDJSON frame decoding for the runtime event stream.

A frame is one JSON object per line. Recognised shapes:

    {"events": [Event, ...]}
    {"event": Event}
    {"plan": Plan}
    {"type": "event", ...}        an event carried inline
    {"type": "plan", ...}         a plan carried inline
    {"type": "task_complete", ...}

Lines that are not JSON objects are dropped.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List, Tuple

log = logging.getLogger(__name__)

TASK_EVENT_TYPES = ("task_accepted", "task_progress", "task_complete", "task_cancelled", "task_failed")
TERMINAL_EVENT_TYPES = frozenset({"task_complete", "task_cancelled", "task_failed"})

Message = Tuple[str, Dict[str, Any]]


def extract_chunks(raw: Any) -> List[str]:
    """Split raw stream data (str, bytes or a list of those) into non-empty lines."""
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("utf-8", errors="replace")
    if isinstance(raw, str):
        return [line.strip() for line in raw.splitlines() if line.strip()]
    if isinstance(raw, (list, tuple)):
        return [chunk for entry in raw for chunk in extract_chunks(entry)]
    return []


def split_frame(parsed: Any) -> List[Message]:
    """Messages `("event"|"plan", payload)` carried by one decoded frame."""
    if not isinstance(parsed, dict):
        return []

    messages: List[Message] = []
    events = parsed.get("events")
    if isinstance(events, list):
        messages.extend(("event", e) for e in events if isinstance(e, dict))
    if isinstance(parsed.get("event"), dict):
        messages.append(("event", parsed["event"]))
    if isinstance(parsed.get("plan"), dict):
        messages.append(("plan", parsed["plan"]))

    kind = parsed.get("type")
    if kind == "event" and not parsed.get("event"):
        messages.append(("event", parsed))
    elif kind == "plan" and not parsed.get("plan"):
        messages.append(("plan", parsed))
    elif isinstance(kind, str) and kind not in ("event", "plan") and not messages:
        messages.append(("event", parsed))
    return messages


def decode_frames(raw: Any) -> Iterator[Message]:
    for chunk in extract_chunks(raw):
        try:
            parsed = json.loads(chunk)
        except ValueError:
            log.debug("Dropping malformed frame: %.80s", chunk)
            continue
        yield from split_frame(parsed)


class LineBuffer:
    """Accumulates stream bytes and yields complete lines."""

    def __init__(self) -> None:
        self._buffer = b""

    def feed(self, data: bytes) -> List[str]:
        self._buffer += data
        lines = []
        while b"\n" in self._buffer:
            line, self._buffer = self._buffer.split(b"\n", 1)
            text = line.decode("utf-8", errors="replace").strip()
            if text:
                lines.append(text)
        return lines

    def flush(self) -> List[str]:
        rest, self._buffer = self._buffer, b""
        text = rest.decode("utf-8", errors="replace").strip()
        return [text] if text else []
