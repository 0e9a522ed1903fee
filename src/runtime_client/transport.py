# src/runtime_client/transport.py
"""
Line-oriented TCP transport for the runtime event stream.

The runtime writes one JSON frame per line. `read()` returns whatever
bytes arrived (possibly b"" on a quiet poll) and None once the peer has
closed the connection.
"""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from threading import Lock
from typing import Optional, Protocol
from urllib.parse import urlparse

log = logging.getLogger(__name__)

POLL_TIMEOUT_S = 0.5


class EventTransport(Protocol):
    def open(self) -> None: ...

    def read(self) -> Optional[bytes]: ...

    def close(self) -> None: ...


@dataclass(frozen=True)
class Endpoint:
    host: str
    port: int


def parse_events_url(url: str) -> Endpoint:
    """Accept `tcp://host:port`, `ws://host:port/...` or bare `host:port`."""
    if not url:
        raise ValueError("Events URL is empty")
    parsed = urlparse(url if "://" in url else f"tcp://{url}")
    if not parsed.hostname or parsed.port is None:
        raise ValueError(f"Events URL must include host and port: {url!r}")
    return Endpoint(host=parsed.hostname, port=parsed.port)


class TcpEventTransport:
    def __init__(self, endpoint: Endpoint, poll_timeout_s: float = POLL_TIMEOUT_S) -> None:
        self._endpoint = endpoint
        self._poll_timeout_s = poll_timeout_s
        self._sock: socket.socket | None = None
        self._lock = Lock()

    @classmethod
    def from_url(cls, url: str) -> "TcpEventTransport":
        return cls(parse_events_url(url))

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    def open(self) -> None:
        if self._sock is not None:
            return
        log.info("Connecting to runtime event stream at %s:%d", self._endpoint.host, self._endpoint.port)
        sock = socket.create_connection((self._endpoint.host, self._endpoint.port))
        sock.settimeout(self._poll_timeout_s)
        self._sock = sock

    def read(self) -> Optional[bytes]:
        sock = self._sock
        if sock is None:
            return None
        try:
            chunk = sock.recv(4096)
        except socket.timeout:
            return b""
        if not chunk:
            log.info("Runtime event stream closed by peer")
            self.close()
            return None
        return chunk

    def close(self) -> None:
        with self._lock:
            if self._sock is None:
                return
            try:
                self._sock.close()
            finally:
                self._sock = None
