# src/envelope/adapter.py
"""
EnvelopeAdapter: turn a task payload into the versioned command envelope
the in-game runtime executes.

    adapter = EnvelopeAdapter()
    envelope = adapter.build_envelope(task)
    command = adapter(task)          # "mindcraftce run {...}"
    assert adapter.parse_command(command)["action"] == task["action"]

Envelopes are plain dicts with camelCase keys; `issuedAt` is epoch
milliseconds and strictly increasing across every adapter in the process,
so `npc:issuedAt` identifiers never collide.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Mapping, Optional

from env.loader import get_runtime_settings
from env.schema import EnvelopeSettings

from .normalizers import METADATA_BUILDERS, build_chest_metadata

log = logging.getLogger(__name__)

TASK_PRIORITIES = ("critical", "high", "normal", "low")


def _now_ms() -> int:
    return int(time.time() * 1000)


# Shared by all adapters: issuedAt is monotone per process.
_issue_lock = threading.Lock()
_last_issued = 0


def issue_timestamp(clock: Callable[[], int] = _now_ms) -> int:
    """Next issuedAt: the clock reading, bumped past the last one handed out."""
    global _last_issued
    with _issue_lock:
        issued = max(int(clock()), _last_issued + 1)
        _last_issued = issued
    return issued


def _reset_issue_clock_for_tests() -> None:
    global _last_issued
    with _issue_lock:
        _last_issued = 0


def normalize_tags(metadata: Mapping[str, Any]) -> Optional[List[Any]]:
    tags = metadata.get("tags")
    if isinstance(tags, (list, tuple)):
        return list(tags)
    if isinstance(tags, str):
        return [tags]
    return None


def normalize_task_priority(priority: Any) -> str:
    value = str(priority).strip().lower() if priority else ""
    return value if value in TASK_PRIORITIES else "normal"


class EnvelopeAdapter:
    """Builds envelopes and their textual wire commands."""

    def __init__(
        self,
        settings: Optional[EnvelopeSettings] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.settings = settings or get_runtime_settings().envelope
        self._clock = clock or _now_ms

    @property
    def prefix(self) -> str:
        return self.settings.prefix

    @property
    def version(self) -> str:
        return self.settings.version

    def __call__(self, task: Mapping[str, Any]) -> str:
        return self.build_command(task)

    # ------------------------------------------------------------------

    def build_metadata(self, action: Any, metadata: Any, task: Mapping[str, Any]) -> Dict[str, Any]:
        """Action-specific metadata record; unknown actions copy metadata as-is."""
        source = copy.deepcopy(dict(metadata)) if isinstance(metadata, Mapping) else {}
        if action == "open_chest":
            return build_chest_metadata(source, task, self.settings.default_auto_close)
        builder = METADATA_BUILDERS.get(action)
        if builder is None:
            return source
        return builder(source, task)

    def build_envelope(self, task: Mapping[str, Any]) -> Dict[str, Any]:
        if not isinstance(task, Mapping):
            raise TypeError(f"Envelope task must be a mapping, got {type(task).__name__}")
        action = task.get("action")
        metadata = task.get("metadata") if isinstance(task.get("metadata"), Mapping) else {}

        envelope: Dict[str, Any] = {"version": self.version, "action": action}
        if task.get("details") is not None:
            envelope["details"] = task["details"]
        if task.get("target") is not None:
            envelope["target"] = copy.deepcopy(task["target"])
        envelope["npc"] = task.get("npcId") or None
        envelope["priority"] = normalize_task_priority(task.get("priority"))
        envelope["metadata"] = self.build_metadata(action, metadata, task)
        envelope["issuedAt"] = issue_timestamp(self._clock)

        tags = normalize_tags(metadata)
        if tags is not None:
            envelope["tags"] = tags
        log.debug("Built %s envelope issued at %s", action, envelope["issuedAt"])
        return envelope

    def build_command_from_envelope(self, envelope: Mapping[str, Any]) -> str:
        return f"{self.prefix} run {json.dumps(envelope)}"

    def build_command(self, task: Mapping[str, Any]) -> str:
        return self.build_command_from_envelope(self.build_envelope(task))

    def parse_command(self, command: str) -> Dict[str, Any]:
        """Inverse of build_command_from_envelope; ValueError on a foreign command."""
        head = f"{self.prefix} run "
        if not isinstance(command, str) or not command.startswith(head):
            raise ValueError(f"Not a {self.prefix} run command")
        envelope = json.loads(command[len(head):])
        if not isinstance(envelope, dict):
            raise ValueError("Envelope payload must be a JSON object")
        return envelope


def envelope_id(envelope: Mapping[str, Any]) -> str:
    """Identifier the runtime tags events with: `envelopeId` or `npc:issuedAt`."""
    explicit = envelope.get("envelopeId") or envelope.get("id")
    if explicit:
        return str(explicit)
    return f"{envelope.get('npc') or 'npc'}:{envelope.get('issuedAt')}"


_default_adapter: Optional[EnvelopeAdapter] = None


def default_adapter() -> EnvelopeAdapter:
    global _default_adapter
    if _default_adapter is None:
        _default_adapter = EnvelopeAdapter()
    return _default_adapter


def build_envelope(task: Mapping[str, Any]) -> Dict[str, Any]:
    return default_adapter().build_envelope(task)


def envelope_adapter(task: Mapping[str, Any]) -> str:
    """Wire command for `task` using the process-wide adapter."""
    return default_adapter().build_command(task)
