# src/runtime_client/client.py
"""
RuntimeClient: the core's view of the in-game runtime.

Listeners subscribe with `client.on(name, fn)` for:

    "event"          runtime events (task_accepted, hazard_detected, task_complete, ...)
    "plan"           plan announcements
    "connected"      event stream opened
    "disconnected"   event stream dropped
    "error"          transport or submit failure (an Exception)

Envelopes are observed at submit time so events that come back without
an `npcId` can be tagged with the NPC the envelope was issued for.
Observations are dropped once a terminal event (task_complete,
task_cancelled, task_failed) arrives for them.

Without an events URL the client can hand envelopes to a RuntimeSimulator
that follows the same event contract.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import requests

from env.loader import get_runtime_settings
from env.schema import ClientSettings, RuntimeSettings
from envelope.adapter import envelope_id as build_envelope_id
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event

from .emitter import EventEmitter, Listener
from .frames import TERMINAL_EVENT_TYPES, LineBuffer, decode_frames
from .simulator import RuntimeSimulator
from .transport import EventTransport, TcpEventTransport

log = logging.getLogger(__name__)


class RuntimeClientError(RuntimeError):
    """Submitting an envelope to the runtime failed."""


class RuntimeTimeoutError(RuntimeClientError):
    """The runtime did not acknowledge a submitted envelope in time."""


class RuntimeClient(EventEmitter):
    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        runtime_fallback: Optional[RuntimeSimulator] = None,
        transport: Optional[EventTransport] = None,
        bus: Optional[EventBus] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        super().__init__()
        self.settings = settings or get_runtime_settings().client
        self.url = self.settings.events_url
        self.auto_reconnect = self.settings.auto_reconnect
        self.reconnect_delay_s = self.settings.reconnect_delay_s

        self._transport = transport
        self._bus = bus
        self._session = session
        self._observed: Dict[str, Dict[str, Any]] = {}
        self._observed_lock = threading.Lock()

        self._runtime: Optional[RuntimeSimulator] = None
        self._runtime_listeners: List[Tuple[str, Listener]] = []

        self._connected = False
        self._stop = threading.Event()
        self._reader: Optional[threading.Thread] = None

        if runtime_fallback is not None:
            self.use_runtime(runtime_fallback)

    @property
    def connected(self) -> bool:
        return self._connected

    # ------------------------------------------------------------------
    # Simulator fallback
    # ------------------------------------------------------------------

    def use_runtime(self, runtime: Optional[RuntimeSimulator]) -> None:
        if runtime is None or runtime is self._runtime:
            return
        self.detach_runtime()
        self._runtime = runtime

        def on_event(event: Any) -> None:
            self._emit_event(event)

        def on_plan(plan: Any) -> None:
            self.emit("plan", self.decorate_plan(plan))

        runtime.on("event", on_event)
        runtime.on("plan", on_plan)
        self._runtime_listeners = [("event", on_event), ("plan", on_plan)]

    def detach_runtime(self) -> None:
        if self._runtime is None:
            return
        for name, listener in self._runtime_listeners:
            self._runtime.off(name, listener)
        self._runtime_listeners = []
        self._runtime = None

    def get_runtime(self) -> Optional[RuntimeSimulator]:
        return self._runtime

    def can_simulate(self) -> bool:
        return self._runtime is not None and callable(getattr(self._runtime, "execute", None))

    def simulate_envelope(self, envelope: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        if not self.can_simulate():
            return None
        return self._runtime.execute(envelope)

    # ------------------------------------------------------------------
    # Observation / enrichment
    # ------------------------------------------------------------------

    def observe_envelope(self, envelope: Optional[Mapping[str, Any]]) -> Optional[str]:
        if not envelope:
            return None
        eid = build_envelope_id(envelope)
        with self._observed_lock:
            self._observed[eid] = {"npcId": envelope.get("npc") or envelope.get("npcId") or None,
                                   "envelope": envelope}
        return eid

    def observed_envelopes(self) -> Dict[str, Dict[str, Any]]:
        """Snapshot of envelopes still awaiting a terminal event."""
        with self._observed_lock:
            return dict(self._observed)

    def forget_envelope(self, eid: Optional[str]) -> None:
        """Stop tracking an envelope that will never see a terminal event."""
        if eid is None:
            return
        with self._observed_lock:
            self._observed.pop(eid, None)

    def enrich_event(self, event: Any) -> Any:
        if not isinstance(event, Mapping):
            return event
        eid = event.get("envelopeId") or event.get("taskId") or event.get("id")
        with self._observed_lock:
            observed = self._observed.get(eid) if eid else None
            if eid and event.get("type") in TERMINAL_EVENT_TYPES:
                self._observed.pop(eid, None)

        enriched = dict(event)
        if observed:
            if not enriched.get("npcId") and observed.get("npcId"):
                enriched["npcId"] = observed["npcId"]
            enriched["envelopeId"] = eid
        if not enriched.get("npcId") and enriched.get("npc"):
            enriched["npcId"] = enriched["npc"]
        return enriched

    def decorate_plan(self, plan: Any) -> Any:
        if not isinstance(plan, Mapping):
            return plan
        eid = plan.get("envelopeId") or plan.get("id")
        if not eid and isinstance(plan.get("envelope"), Mapping):
            eid = build_envelope_id(plan["envelope"])
        with self._observed_lock:
            observed = self._observed.get(eid) if eid else None
        if observed and not plan.get("npcId"):
            return {**plan, "npcId": observed["npcId"]}
        return plan

    def _emit_event(self, event: Any) -> None:
        enriched = self.enrich_event(event)
        if isinstance(enriched, Mapping):
            log_event(self._bus, __name__, EventType.RUNTIME_EVENT, str(enriched.get("type")),
                      dict(enriched), correlation_id=enriched.get("envelopeId"))
        self.emit("event", enriched)

    # ------------------------------------------------------------------
    # Event stream
    # ------------------------------------------------------------------

    def process_message(self, raw: Any) -> None:
        """Decode NDJSON data and dispatch every event / plan it carries."""
        if not raw:
            return
        for kind, payload in decode_frames(raw):
            if kind == "event":
                self._emit_event(payload)
            else:
                self.emit("plan", self.decorate_plan(payload))

    def connect(self) -> bool:
        """Start the background reader; False when no stream is configured."""
        if self._reader is not None and self._reader.is_alive():
            return True
        if self._transport is None:
            if not self.url:
                return False
            self._transport = TcpEventTransport.from_url(self.url)
        self._stop.clear()
        self._reader = threading.Thread(target=self._read_loop, name="runtime-events", daemon=True)
        self._reader.start()
        return True

    def _read_loop(self) -> None:
        while not self._stop.is_set():
            try:
                self._transport.open()
            except OSError as exc:
                log.exception("Runtime event stream connection failed")
                self._report_error(exc)
            else:
                self._connected = True
                log.info("Runtime event stream connected")
                log_event(self._bus, __name__, EventType.RUNTIME_CONNECTED, "Event stream connected", {})
                self.emit("connected")
                self._pump()
                self._connected = False
                log.info("Runtime event stream disconnected")
                log_event(self._bus, __name__, EventType.RUNTIME_DISCONNECTED, "Event stream disconnected", {})
                self.emit("disconnected")

            if not self.auto_reconnect or self._stop.wait(self.reconnect_delay_s):
                break

    def _pump(self) -> None:
        buffer = LineBuffer()
        while not self._stop.is_set():
            try:
                chunk = self._transport.read()
            except OSError as exc:
                log.exception("Runtime event stream read failed")
                self._report_error(exc)
                break
            if chunk is None:
                break
            if chunk:
                self.process_message(buffer.feed(chunk))
        self.process_message(buffer.flush())
        self._transport.close()

    def _report_error(self, exc: Exception) -> None:
        log_event(self._bus, __name__, EventType.RUNTIME_ERROR, str(exc), {"error": str(exc)})
        self.emit("error", exc)

    def close(self) -> None:
        self._stop.set()
        if self._transport is not None:
            self._transport.close()
        reader = self._reader
        if reader is not None and reader is not threading.current_thread():
            reader.join(timeout=self.reconnect_delay_s + 1.0)
        self._reader = None
        self._connected = False
        self.detach_runtime()

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def submit(self, envelope: Mapping[str, Any], timeout: Optional[float] = None) -> Optional[Dict[str, Any]]:
        """
        Hand `envelope` to the runtime.

        With a submit URL the envelope is POSTed as JSON; otherwise the
        simulator fallback runs it. Returns the runtime's acknowledgement,
        or None when no runtime is available or the transport failed (an
        `error` event is emitted in that case).
        """
        eid = self.observe_envelope(envelope)
        log_event(self._bus, __name__, EventType.ENVELOPE_SUBMITTED, f"Submitted {envelope.get('action')}",
                  {"action": envelope.get("action"), "npc": envelope.get("npc")}, correlation_id=eid)
        submit_url = self.settings.submit_url
        if submit_url:
            return self._post(submit_url, envelope, eid, timeout)
        if self.can_simulate():
            return self.simulate_envelope(envelope)
        log.warning("No runtime configured; envelope %s was not dispatched", eid)
        self.forget_envelope(eid)
        return None

    def _post(self, url: str, envelope: Mapping[str, Any], eid: Optional[str],
              timeout: Optional[float]) -> Optional[Dict[str, Any]]:
        limit = self.settings.submit_timeout_s if timeout is None else timeout
        http = self._session or requests
        try:
            response = http.post(url, json=dict(envelope), timeout=limit)
            response.raise_for_status()
        except requests.Timeout as exc:
            self.forget_envelope(eid)
            raise RuntimeTimeoutError(f"Runtime did not acknowledge envelope {eid} within {limit}s") from exc
        except requests.RequestException as exc:
            log.exception("Submitting envelope %s failed", eid)
            self.forget_envelope(eid)
            self._report_error(exc)
            return None

        try:
            body = response.json()
        except ValueError:
            body = None
        ack = body if isinstance(body, dict) else {}
        ack.setdefault("envelopeId", eid)
        return ack


def create_runtime_client(
    settings: Optional[RuntimeSettings] = None,
    bus: Optional[EventBus] = None,
    scheduler: Any = None,
    **kwargs: Any,
) -> RuntimeClient:
    """
    Client for the configured runtime. Without an events URL or submit URL
    the client gets a RuntimeSimulator fallback.
    """
    settings = settings or get_runtime_settings()
    fallback = kwargs.pop("runtime_fallback", None)
    if fallback is None and not settings.client.events_url and not settings.client.submit_url:
        fallback = RuntimeSimulator(settings.simulator, scheduler=scheduler)
    return RuntimeClient(settings.client, runtime_fallback=fallback, bus=bus, **kwargs)
