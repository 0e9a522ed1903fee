# src/domain/lookup.py
"""
Tolerant lookup into read-only domain tables.

Every table shares the same cascade:

  1. exact key
  2. normalized key ("Oak Planks" / "minecraft:oak_planks" -> "oak_planks")
  3. synonym table, then substring containment in either direction

Unknown inputs return None; nothing here raises.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple, TypeVar

T = TypeVar("T")


def table_key(value: Any) -> str:
    """Canonical table key for free-form names."""
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, Mapping):
        value = value.get("name") or value.get("type") or value.get("id") or value.get("item") or ""
    text = " ".join(str(value).strip().lower().split())
    if text.startswith("minecraft:"):
        text = text[len("minecraft:"):]
    return text.replace(" ", "_").replace("-", "_")


def lookup_entry(
    table: Mapping[str, T],
    key: Any,
    synonyms: Optional[Mapping[str, str]] = None,
    substring: bool = True,
) -> Optional[Tuple[str, T]]:
    """Return `(canonical_key, record)` or None."""
    if not table or key is None:
        return None

    if isinstance(key, str) and key in table:
        return key, table[key]

    normalized = table_key(key)
    if not normalized:
        return None
    if normalized in table:
        return normalized, table[normalized]

    if synonyms:
        alias = synonyms.get(normalized)
        if alias and alias in table:
            return alias, table[alias]

    if not substring:
        return None

    # Longest containing key first so "charged_creeper" beats "creeper".
    for candidate in sorted(table.keys(), key=len, reverse=True):
        if candidate in normalized:
            return candidate, table[candidate]
    if len(normalized) >= 3:
        for candidate in table.keys():
            if normalized in candidate:
                return candidate, table[candidate]

    if synonyms:
        for alias_key in sorted(synonyms.keys(), key=len, reverse=True):
            if alias_key in normalized and synonyms[alias_key] in table:
                target = synonyms[alias_key]
                return target, table[target]

    return None


def lookup(
    table: Mapping[str, T],
    key: Any,
    synonyms: Optional[Mapping[str, str]] = None,
    substring: bool = True,
) -> Optional[T]:
    found = lookup_entry(table, key, synonyms=synonyms, substring=substring)
    return found[1] if found else None


def lookup_key(
    table: Mapping[str, Any],
    key: Any,
    synonyms: Optional[Mapping[str, str]] = None,
    substring: bool = True,
) -> Optional[str]:
    found = lookup_entry(table, key, synonyms=synonyms, substring=substring)
    return found[0] if found else None
