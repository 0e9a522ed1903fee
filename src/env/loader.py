from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .schema import (
    ClientSettings,
    EnvelopeSettings,
    RegistrySettings,
    RuntimeSettings,
    SimulatorSettings,
    WorkerSettings,
)

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_CONFIG = CONFIG_ROOT / "runtime.yaml"

EVENTS_URL_ENV = "MINDCRAFT_CE_EVENTS_URL"

_settings: Optional[RuntimeSettings] = None


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping; an empty file is an empty mapping."""
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{name}' must be a mapping, got {type(value)}")
    return value


def _float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_runtime_settings(path: Optional[Path] = None) -> RuntimeSettings:
    """
    Resolve settings from YAML plus environment overrides.

    An explicit `path` must exist; the default config/runtime.yaml is
    optional and built-in defaults apply without it.
    """
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Missing config file: {path}")
        raw = _load_yaml(path)
    elif DEFAULT_CONFIG.exists():
        raw = _load_yaml(DEFAULT_CONFIG)
    else:
        log.debug("No %s; using built-in runtime defaults", DEFAULT_CONFIG)
        raw = {}

    env_raw = _section(raw, "envelope")
    client_raw = _section(raw, "client")
    sim_raw = _section(raw, "simulator")
    workers_raw = _section(raw, "workers")
    registry_raw = _section(raw, "registry")

    defaults = RuntimeSettings()
    envelope = EnvelopeSettings(
        prefix=str(env_raw.get("prefix") or defaults.envelope.prefix),
        version=str(env_raw.get("version") or defaults.envelope.version),
        default_auto_close=bool(env_raw.get("default_auto_close", defaults.envelope.default_auto_close)),
    )

    events_url = os.getenv(EVENTS_URL_ENV) or client_raw.get("events_url")
    client = ClientSettings(
        events_url=events_url or None,
        reconnect_delay_s=_float(client_raw.get("reconnect_delay_s"), defaults.client.reconnect_delay_s),
        auto_reconnect=bool(client_raw.get("auto_reconnect", defaults.client.auto_reconnect)),
        submit_url=client_raw.get("submit_url") or None,
        submit_timeout_s=_float(client_raw.get("submit_timeout_s"), defaults.client.submit_timeout_s),
    )
    simulator = SimulatorSettings(
        event_delay_ms=max(0, _int(sim_raw.get("event_delay_ms"), defaults.simulator.event_delay_ms)),
        minimum_delay_ms=max(0, _int(sim_raw.get("minimum_delay_ms"), defaults.simulator.minimum_delay_ms)),
    )
    workers = WorkerSettings(
        max_workers=max(1, _int(workers_raw.get("max_workers"), defaults.workers.max_workers)),
        timeout_s=_float(workers_raw.get("timeout_s"), defaults.workers.timeout_s),
    )
    parallel = registry_raw.get("parallel_actions")
    registry = RegistrySettings(
        parallel_actions=tuple(str(a).lower() for a in parallel)
        if isinstance(parallel, (list, tuple))
        else defaults.registry.parallel_actions,
    )

    return RuntimeSettings(
        envelope=envelope,
        client=client,
        simulator=simulator,
        workers=workers,
        registry=registry,
    )


def get_runtime_settings() -> RuntimeSettings:
    """Process-wide settings, loaded on first use."""
    global _settings
    if _settings is None:
        _settings = load_runtime_settings()
    return _settings


def _reset_settings_for_tests() -> None:
    global _settings
    _settings = None
