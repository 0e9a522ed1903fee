# RuntimeSettings and section dataclasses
# src/env/schema.py

from dataclasses import dataclass, field
from typing import Optional, Tuple

DEFAULT_PARALLEL_ACTIONS = ("build", "explore", "gather", "mine", "ranged")


@dataclass(frozen=True)
class EnvelopeSettings:
    """Wire command defaults for the envelope adapter."""
    prefix: str = "mindcraftce"
    version: str = "1.0"
    default_auto_close: bool = True


@dataclass(frozen=True)
class ClientSettings:
    """Event-stream client and optional HTTP submit endpoint."""
    events_url: Optional[str] = None     # tcp://host:port or host:port
    reconnect_delay_s: float = 5.0
    auto_reconnect: bool = True
    submit_url: Optional[str] = None     # POST target for envelopes
    submit_timeout_s: float = 10.0


@dataclass(frozen=True)
class SimulatorSettings:
    """Timing of the in-process runtime simulator (milliseconds)."""
    event_delay_ms: int = 40
    minimum_delay_ms: int = 20


@dataclass(frozen=True)
class WorkerSettings:
    max_workers: int = 2
    timeout_s: float = 5.0


@dataclass(frozen=True)
class RegistrySettings:
    parallel_actions: Tuple[str, ...] = DEFAULT_PARALLEL_ACTIONS


@dataclass(frozen=True)
class RuntimeSettings:
    """Top-level resolved settings."""
    envelope: EnvelopeSettings = field(default_factory=EnvelopeSettings)
    client: ClientSettings = field(default_factory=ClientSettings)
    simulator: SimulatorSettings = field(default_factory=SimulatorSettings)
    workers: WorkerSettings = field(default_factory=WorkerSettings)
    registry: RegistrySettings = field(default_factory=RegistrySettings)
