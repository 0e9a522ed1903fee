# tests/test_config_loader.py
"""
Tests for env.loader.

Covers:
- The shipped config/runtime.yaml matches the built-in defaults
- Partial YAML files fall back to defaults per key
- MINDCRAFT_CE_EVENTS_URL overrides the configured events URL
- Missing explicit files and malformed sections raise
"""

from __future__ import annotations

from pathlib import Path

import pytest

from env import loader
from env.schema import DEFAULT_PARALLEL_ACTIONS, RuntimeSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv(loader.EVENTS_URL_ENV, raising=False)
    loader._reset_settings_for_tests()
    yield
    loader._reset_settings_for_tests()


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "runtime.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_shipped_config_matches_defaults():
    assert loader.DEFAULT_CONFIG.exists()
    assert loader.load_runtime_settings() == RuntimeSettings()


def test_partial_yaml_keeps_defaults(tmp_path: Path):
    path = _write(
        tmp_path,
        """
envelope:
  prefix: npcctl
client:
  submit_url: http://127.0.0.1:8080/envelopes
simulator:
  event_delay_ms: -5
workers:
  max_workers: 0
registry:
  parallel_actions: [Mine, build]
""",
    )
    settings = loader.load_runtime_settings(path)

    assert settings.envelope.prefix == "npcctl"
    assert settings.envelope.version == "1.0"
    assert settings.client.submit_url == "http://127.0.0.1:8080/envelopes"
    assert settings.client.events_url is None
    assert settings.simulator.event_delay_ms == 0
    assert settings.simulator.minimum_delay_ms == 20
    assert settings.workers.max_workers == 1
    assert settings.registry.parallel_actions == ("mine", "build")


def test_empty_yaml_is_all_defaults(tmp_path: Path):
    settings = loader.load_runtime_settings(_write(tmp_path, ""))
    assert settings == RuntimeSettings()
    assert settings.registry.parallel_actions == DEFAULT_PARALLEL_ACTIONS


def test_events_url_env_override(tmp_path: Path, monkeypatch):
    path = _write(tmp_path, "client:\n  events_url: tcp://config-host:1\n")
    assert loader.load_runtime_settings(path).client.events_url == "tcp://config-host:1"

    monkeypatch.setenv(loader.EVENTS_URL_ENV, "tcp://env-host:2")
    assert loader.load_runtime_settings(path).client.events_url == "tcp://env-host:2"


def test_missing_explicit_file_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        loader.load_runtime_settings(tmp_path / "nope.yaml")


@pytest.mark.parametrize("text", ["- just\n- a list\n", "client: 5\n"])
def test_malformed_config_raises(tmp_path: Path, text: str):
    with pytest.raises(ValueError):
        loader.load_runtime_settings(_write(tmp_path, text))


def test_get_runtime_settings_is_cached():
    first = loader.get_runtime_settings()
    assert loader.get_runtime_settings() is first
    loader._reset_settings_for_tests()
    assert loader.get_runtime_settings() is not first
