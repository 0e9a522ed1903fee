# src/runtime_client/emitter.py
"""
Named channels ("event", "plan", "error", ...) for the client and simulator.

Each channel is its own monitoring.bus.EventBus, so listeners get the same
snapshot delivery and failure isolation as monitoring subscribers.
"""

from __future__ import annotations

from threading import Lock
from typing import Any, Callable, Dict

from monitoring.bus import EventBus

Listener = Callable[[Any], None]


class EventEmitter:
    def __init__(self) -> None:
        self._channels: Dict[str, EventBus] = {}
        self._channel_lock = Lock()

    def _channel(self, name: str) -> EventBus:
        with self._channel_lock:
            channel = self._channels.get(name)
            if channel is None:
                channel = self._channels[name] = EventBus()
            return channel

    def on(self, name: str, listener: Listener) -> None:
        self._channel(name).subscribe(listener)

    def off(self, name: str, listener: Listener) -> None:
        with self._channel_lock:
            channel = self._channels.get(name)
        if channel is not None:
            channel.unsubscribe(listener)

    def emit(self, name: str, payload: Any = None) -> None:
        with self._channel_lock:
            channel = self._channels.get(name)
        if channel is not None:
            channel.publish(payload)
