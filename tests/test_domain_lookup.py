#tests/test_domain_lookup.py
"""
Tests for domain.lookup.

Covers:
- Key normalization (namespace, case, spaces, hyphens)
- The exact -> normalized -> synonym -> substring cascade
- Unknown input returns None without raising
"""

from __future__ import annotations

import pytest

from domain.lookup import lookup, lookup_entry, lookup_key, table_key

TABLE = {
    "creeper": {"threat": "high"},
    "charged_creeper": {"threat": "extreme"},
    "oak_planks": {"burn": 300},
    "zombie": {"threat": "medium"},
}
SYNONYMS = {"boomer": "creeper", "walker": "zombie"}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Oak Planks", "oak_planks"),
        ("minecraft:oak_planks", "oak_planks"),
        ("  Iron-Ingot ", "iron_ingot"),
        ({"name": "Stone Bricks"}, "stone_bricks"),
        (None, ""),
        (True, ""),
        (7, "7"),
    ],
)
def test_table_key(value, expected):
    assert table_key(value) == expected


def test_exact_and_normalized_hits():
    assert lookup_entry(TABLE, "creeper") == ("creeper", {"threat": "high"})
    assert lookup_key(TABLE, "Oak Planks") == "oak_planks"
    assert lookup(TABLE, "minecraft:zombie") == {"threat": "medium"}


def test_synonyms_and_substrings():
    assert lookup_key(TABLE, "Boomer", synonyms=SYNONYMS) == "creeper"
    assert lookup_key(TABLE, "big charged creeper") == "charged_creeper"
    assert lookup_key(TABLE, "zomb") == "zombie"
    assert lookup_key(TABLE, "slow walker horde", synonyms=SYNONYMS) == "zombie"


def test_substring_matching_can_be_disabled():
    assert lookup(TABLE, "baby zombie", substring=False) is None
    assert lookup(TABLE, "baby zombie") == {"threat": "medium"}


@pytest.mark.parametrize("key", [None, "", "   ", "ghast", object()])
def test_unknown_keys_return_none(key):
    assert lookup(TABLE, key) is None
    assert lookup({}, "creeper") is None
