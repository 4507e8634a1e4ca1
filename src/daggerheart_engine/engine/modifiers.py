"""Modifier extraction from equipment and item text.

System modifiers come from equipped items. An item's structured modifier
list is preferred; items without one fall back to scanning their feature
text for phrases such as "+1 to Evasion" or "-1 bonus to hit points".
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from daggerheart_engine.core.constants import MODIFIABLE_STATS, STAT_ALIASES
from daggerheart_engine.core.logging import get_logger
from daggerheart_engine.models.character import Character, InventoryItem, Modifier
from daggerheart_engine.models.enums import ModifierSource


logger = get_logger(__name__)

_ITEM_TEXT_STATS = "|".join(stat.replace("_", r"\s+") for stat in MODIFIABLE_STATS)
_ITEM_TEXT_PATTERN = re.compile(
    rf"([+-]?\d+)\s+(?:bonus\s+)?to\s+({_ITEM_TEXT_STATS})",
    re.IGNORECASE,
)
_SEGMENT_SPLIT_PATTERN = re.compile(r"[;\n]")


# =============================================================================
# System Modifier Extraction
# =============================================================================


def _stat_pattern(stat_key: str) -> re.Pattern[str]:
    # "hit_points" matches "hit points", "hit_points" and "Hit  Points"
    words = [re.escape(word) for word in stat_key.split("_") if word]
    stat = r"[\s_]+".join(words)
    return re.compile(rf"([+-]\d+)\s+(?:bonus\s+)?to\s+{stat}\b", re.IGNORECASE)


def _structured_modifiers(item: InventoryItem) -> list[dict[str, Any]]:
    entries = item.payload.get("modifiers")
    if not isinstance(entries, list):
        return []
    return [entry for entry in entries if isinstance(entry, dict)]


def _feature_text(item: InventoryItem) -> str:
    payload = item.payload
    feature = payload.get("feature")
    feature_text = feature.get("text") if isinstance(feature, dict) else None
    feat_text = payload.get("feat_text")
    return f"{feature_text or ''} {feat_text or ''}".strip()


def get_system_modifiers(character: Character | None, stat_key: str) -> list[Modifier]:
    """Collect equipment modifiers for one stat.

    Only items in the primary, secondary and armor slots contribute. Values
    of structured entries are passed through as given, numeric or not.

    Args:
        character: The character whose inventory is scanned.
        stat_key: Stat name, e.g. ``"armor"`` or ``"hit_points"``.

    Returns:
        One system modifier per matching structured entry or text match.
    """
    if character is None or not character.inventory:
        return []

    modifiers: list[Modifier] = []
    text_pattern = _stat_pattern(stat_key)

    for item in character.equipped_items:
        structured = _structured_modifiers(item)
        if structured:
            for index, entry in enumerate(structured):
                if entry.get("target") != stat_key:
                    continue
                modifiers.append(
                    Modifier(
                        id=f"sys-{item.id}-{entry.get('id', index)}",
                        name=item.name,
                        value=entry.get("value"),
                        source=ModifierSource.SYSTEM,
                    )
                )
            continue

        text = _feature_text(item)
        for index, match in enumerate(text_pattern.finditer(text)):
            modifiers.append(
                Modifier(
                    id=f"sys-{item.id}-text-{stat_key}-{index}",
                    name=item.name,
                    value=int(match.group(1)),
                    source=ModifierSource.SYSTEM,
                )
            )

    logger.debug("Extracted system modifiers", stat=stat_key, count=len(modifiers))
    return modifiers


def sum_modifiers(modifiers: Iterable[Modifier] | None) -> int | float:
    """Sum the numeric values of a modifier list."""
    if not modifiers:
        return 0
    return sum(modifier.numeric_value for modifier in modifiers)


def merge_modifiers(*modifier_lists: Iterable[Modifier]) -> list[Modifier]:
    """Concatenate modifier lists, keeping the first modifier seen for each id."""
    seen: set[str] = set()
    merged: list[Modifier] = []
    for modifiers in modifier_lists:
        for modifier in modifiers:
            if modifier.id in seen:
                continue
            seen.add(modifier.id)
            merged.append(modifier)
    return merged


# =============================================================================
# Item Text Parsing
# =============================================================================


class ItemModifier(BaseModel):
    """A stat modifier parsed out of item feature text."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: str = "stat"
    target: str
    value: int
    operator: str
    description: str


def parse_modifiers(text: str | None) -> list[ItemModifier]:
    """Parse item text into structured stat modifiers.

    Text is split on semicolons and newlines; each segment contributes at
    most one modifier.

    Example:
        >>> [m.target for m in parse_modifiers("+1 to Evasion; -1 to Hit Points")]
        ['evasion', 'hp']
    """
    if not text:
        return []

    parsed: list[ItemModifier] = []
    for segment in _SEGMENT_SPLIT_PATTERN.split(text):
        clean = segment.strip()
        if not clean:
            continue
        match = _ITEM_TEXT_PATTERN.search(clean)
        if match is None:
            continue
        value = int(match.group(1))
        raw_stat = re.sub(r"\s+", "_", match.group(2).lower())
        parsed.append(
            ItemModifier(
                target=STAT_ALIASES.get(raw_stat, raw_stat),
                value=value,
                operator="add" if value >= 0 else "subtract",
                description=clean,
            )
        )
    return parsed


__all__ = [
    "get_system_modifiers",
    "sum_modifiers",
    "merge_modifiers",
    "ItemModifier",
    "parse_modifiers",
]
