# src/envelope/__init__.py
"""Command envelopes for the in-game runtime."""

from .adapter import (
    EnvelopeAdapter,
    build_envelope,
    default_adapter,
    envelope_adapter,
    envelope_id,
    normalize_task_priority,
)
from .normalizers import METADATA_BUILDERS, build_mining_metadata, build_mining_plan

__all__ = [
    "EnvelopeAdapter",
    "build_envelope",
    "default_adapter",
    "envelope_adapter",
    "envelope_id",
    "normalize_task_priority",
    "METADATA_BUILDERS",
    "build_mining_metadata",
    "build_mining_plan",
]
