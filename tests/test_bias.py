#tests/test_bias.py
"""
Tests for tasks.bias.apply_personality_bias.

Covers:
- 5% reduction per matching trait, capped at 25%
- Plans without matches come back unchanged (same object)
- The three places NPC traits are read from
"""

from __future__ import annotations

import pytest

from tasks.bias import apply_personality_bias, npc_traits
from tasks.helpers import create_plan


def _plan(traits, duration=10_000):
    task = {"action": "guard", "metadata": {"preferredTraits": traits} if traits else {}}
    return create_plan(task, "Guard the gate", estimated_duration=duration)


def test_single_match_shortens_by_five_percent():
    plan = _plan(["brave", "loyal"])
    biased = apply_personality_bias(plan, {"npc": {"personalityTraits": ["Brave"]}})

    assert biased is not plan
    assert biased.estimated_duration == 9500
    assert biased.personality_bias == {"score": 1, "matches": ["brave"], "totalPreferred": 2}
    assert plan.estimated_duration == 10_000
    assert plan.personality_bias is None


def test_bias_is_capped_at_twenty_five_percent():
    traits = ["a", "b", "c", "d", "e", "f", "g"]
    plan = _plan(traits)
    biased = apply_personality_bias(plan, {"npc": {"personalityTraits": traits}})

    assert biased.personality_bias["score"] == 7
    assert biased.estimated_duration == 7500
    assert biased.estimated_duration >= 0.75 * plan.estimated_duration


def test_rounding_is_half_up():
    plan = _plan(["calm"], duration=10)
    biased = apply_personality_bias(plan, {"npc": {"personalityTraits": ["calm"]}})
    # 10 * 0.95 = 9.5
    assert biased.estimated_duration == 10


@pytest.mark.parametrize(
    "context",
    [
        None,
        {},
        {"npc": {"personalityTraits": ["timid"]}},
        {"npc": {"personalityTraits": "nope"}},
    ],
)
def test_no_match_returns_same_plan(context):
    plan = _plan(["brave"])
    assert apply_personality_bias(plan, context) is plan


def test_plan_without_preferences_is_untouched():
    plan = _plan(None)
    assert apply_personality_bias(plan, {"npc": {"personalityTraits": ["brave"]}}) is plan


@pytest.mark.parametrize(
    "npc",
    [
        {"personalityTraits": ["Brave"]},
        {"metadata": {"personalityTraits": ["brave"]}},
        {"personality": {"traits": [" BRAVE "]}},
    ],
)
def test_npc_trait_sources(npc):
    assert npc_traits({"npc": npc}) == ["brave"]
