"""Advancement history trimming and de-leveling.

Lowering a character's level removes every advancement record above the
target level. State stored directly on the character by those records
(trait increases and marks, experience bumps, tier experiences, proficiency,
evasion, extra vital slots, subclass upgrades, multiclass domain and domain
cards) is reversed from the records themselves, newest first, and derived
stats are then recomputed.

De-leveling is destructive. Confirming it with the player is the caller's
job; this module performs no confirmation.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from daggerheart_engine.core.config import RulesSettings, get_settings
from daggerheart_engine.core.constants import MIN_CHARACTER_LEVEL
from daggerheart_engine.core.exceptions import InvalidLevelError
from daggerheart_engine.core.logging import character_context, get_logger
from daggerheart_engine.engine.derived_stats import recalculate_character
from daggerheart_engine.engine.level_up import level_modifier_id
from daggerheart_engine.models.character import AdvancementRecord, Character
from daggerheart_engine.models.progression import ADVANCEMENT_CATALOG


logger = get_logger(__name__)


def trim_advancement_history(
    history: Mapping[int, AdvancementRecord],
    level: int,
) -> dict[int, AdvancementRecord]:
    """Keep only the records at or below ``level``."""
    return {
        record_level: record for record_level, record in history.items() if int(record_level) <= level
    }


@dataclass(frozen=True)
class DelevelResult:
    """Outcome of lowering a character's level.

    Attributes:
        character: The de-leveled character with derived stats recomputed.
        removed: Records that were trimmed, newest first.
    """

    character: Character
    removed: list[AdvancementRecord]


def _reverse(character: Character, level: int, record: AdvancementRecord) -> None:
    """Undo the directly stored effects of one record in place."""
    marked = dict(character.marked_traits)
    for trait in record.traits_increased:
        character.traits = character.traits.adjusted(trait, -1)
        marked.pop(trait, None)
    for trait in record.cleared_marked_traits:
        marked[trait] = True
    character.marked_traits = marked

    experiences = [experience.model_copy() for experience in character.experiences]
    for index in record.experiences_increased:
        if 0 <= index < len(experiences):
            experiences[index].value -= 1
    if record.tier_experience_name is not None:
        for position in range(len(experiences) - 1, -1, -1):
            if experiences[position].name == record.tier_experience_name:
                del experiences[position]
                break
    character.experiences = experiences

    character.proficiency -= record.proficiency_increase
    character.evasion -= record.evasion_increase

    level_ids = {level_modifier_id(level, "hp"), level_modifier_id(level, "stress")}
    character.modifiers = {
        stat: [modifier for modifier in modifiers if modifier.id not in level_ids]
        for stat, modifiers in character.modifiers.items()
    }

    if record.took_subclass_card:
        character.subclass_upgrades = max(0, character.subclass_upgrades - 1)
    if record.took_multiclass:
        character.multiclass_domain = None

    acquired = set(record.acquired_card_ids)
    cards = [card for card in character.cards if card.id not in acquired]
    if record.exchanged_card is not None:
        cards.append(record.exchanged_card)
    character.cards = cards


def delevel_character(
    character: Character,
    level: int,
    *,
    rules: RulesSettings | None = None,
) -> DelevelResult:
    """Lower a character to ``level``, trimming and reversing later records.

    Args:
        character: The character to de-level.
        level: Target level, between 1 and the current level.
        rules: Rules settings; defaults to the application settings.

    Returns:
        DelevelResult with the updated character and the removed records.

    Raises:
        InvalidLevelError: If ``level`` is below 1 or above the current level.
    """
    rules = rules if rules is not None else get_settings().rules
    if level < MIN_CHARACTER_LEVEL or level > character.level:
        raise InvalidLevelError(
            f"De-level target must be between {MIN_CHARACTER_LEVEL} and {character.level}",
            level=level,
        )

    removed = sorted(
        (
            (int(record_level), record)
            for record_level, record in character.advancement_history.items()
            if int(record_level) > level
        ),
        key=lambda entry: entry[0],
        reverse=True,
    )

    with character_context(character.id, to_level=level):
        updated = character.model_copy(deep=True)
        for record_level, record in removed:
            _reverse(updated, record_level, record)
        updated.advancement_history = trim_advancement_history(character.advancement_history, level)
        updated.level = level

        logger.info(
            "Character de-leveled",
            from_level=character.level,
            removed_levels=[record_level for record_level, _ in removed],
        )
        return DelevelResult(
            character=recalculate_character(updated, rules=rules),
            removed=[record for _, record in removed],
        )


@dataclass(frozen=True)
class HistoryEntry:
    """One level of the advancement history, ready for display."""

    level: int
    advancements: list[str]
    advancement_names: list[str]

    @property
    def count(self) -> int:
        """Number of advancements taken at this level."""
        return len(self.advancements)


def summarize_history(history: Mapping[int | str, AdvancementRecord] | None) -> list[HistoryEntry]:
    """List history entries in numeric level order."""
    if not history:
        return []
    entries = []
    for key in sorted(history, key=int):
        record = history[key]
        names = [
            ADVANCEMENT_CATALOG[advancement_id].name
            if advancement_id in ADVANCEMENT_CATALOG
            else advancement_id
            for advancement_id in record.advancements
        ]
        entries.append(
            HistoryEntry(level=int(key), advancements=list(record.advancements), advancement_names=names)
        )
    return entries


__all__ = [
    "trim_advancement_history",
    "DelevelResult",
    "delevel_character",
    "HistoryEntry",
    "summarize_history",
]
