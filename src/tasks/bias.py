# src/tasks/bias.py
"""
Personality bias post-processor.

When an NPC's personality traits overlap a plan's preferred traits the
plan gets a `personalityBias` record and a shorter estimate: 5% per
matching trait, capped at 25%.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Any, Iterable, List, Mapping

from spec.types import Plan, PlanContext

BIAS_PER_TRAIT = 0.05
MAX_BIAS = 0.25


def _traits(values: Any) -> List[str]:
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, Iterable) or isinstance(values, Mapping):
        return []
    return [str(v).strip().lower() for v in values if v is not None and str(v).strip()]


def npc_traits(context: Any) -> List[str]:
    """Traits from npc.personalityTraits, npc.metadata.personalityTraits or npc.personality.traits."""
    npc = PlanContext.coerce(context).npc
    metadata = npc.get("metadata") if isinstance(npc.get("metadata"), Mapping) else {}
    personality = npc.get("personality") if isinstance(npc.get("personality"), Mapping) else {}
    return _traits(
        npc.get("personalityTraits")
        or metadata.get("personalityTraits")
        or personality.get("traits")
    )


def apply_personality_bias(plan: Plan, context: Any = None) -> Plan:
    """
    Return a biased copy of `plan`, or `plan` itself when nothing matches.

    Only `personality_bias` and `estimated_duration` differ in the copy.
    """
    if plan is None:
        return plan
    preferred = _traits(plan.preferred_traits or plan.metadata.get("preferredTraits"))
    traits = set(npc_traits(context))
    if not preferred or not traits:
        return plan

    matches = [trait for trait in preferred if trait in traits]
    if not matches:
        return plan

    score = len(matches)
    bonus = min(MAX_BIAS, score * BIAS_PER_TRAIT)
    return replace(
        plan,
        personality_bias={"score": score, "matches": matches, "totalPreferred": len(preferred)},
        estimated_duration=int(math.floor(plan.estimated_duration * (1 - bonus) + 0.5)),
    )
