"""Rules constants for the Daggerheart rules engine.

This module defines the fixed numbers and vocabularies of the game rules
used throughout the engine. Values that a table may want to house-rule are
mirrored as defaults in ``daggerheart_engine.core.config.RulesSettings``.
"""

from __future__ import annotations

# =============================================================================
# Levels and Tiers
# =============================================================================

MIN_CHARACTER_LEVEL = 1
"""Minimum character level."""

MAX_CHARACTER_LEVEL = 10
"""Maximum character level."""

TIER_ACHIEVEMENT_LEVELS = frozenset({2, 5, 8})
"""Levels whose arrival grants a new Experience and +1 Proficiency."""

TRAIT_CLEARING_LEVELS = frozenset({5, 8})
"""Levels whose arrival clears every marked trait."""

ADVANCEMENT_SLOTS_PER_LEVEL = 2
"""Advancement slots that must be spent at every level-up."""

TIER_EXPERIENCE_VALUE = 2
"""Starting value of the Experience granted by a tier achievement."""

# =============================================================================
# Vitals
# =============================================================================

ARMOR_SCORE_CAP = 12
"""Maximum armor score a character can reach."""

BASE_STRESS = 6
"""Stress slots every character starts with."""

DEFAULT_CLASS_HP = 6
"""Starting hit points used when the class does not specify any."""

MIN_VITAL_SLOTS_PER_ADVANCEMENT = 1
MAX_VITAL_SLOTS_PER_ADVANCEMENT = 5

# =============================================================================
# Traits, Stats and Equipment
# =============================================================================

TRAIT_NAMES: tuple[str, ...] = (
    "agility",
    "strength",
    "finesse",
    "instinct",
    "presence",
    "knowledge",
)
"""The six character traits, in character sheet order."""

EQUIPPED_LOCATIONS = frozenset({"equipped_primary", "equipped_secondary", "equipped_armor"})
"""Inventory locations whose items contribute modifiers."""

MODIFIABLE_STATS: tuple[str, ...] = (
    *TRAIT_NAMES,
    "evasion",
    "armor",
    "hit_points",
    "stress",
    "hope",
    "proficiency",
)
"""Stat names recognised by item feature text."""

STAT_ALIASES: dict[str, str] = {
    "hit_points": "hp",
    "armor_score": "armor",
}
"""Normalisation applied to stat names parsed out of free text."""

DAMAGE_TYPE_ANNOTATIONS = ("physical", "magic", "phy", "mag")
"""Damage type suffixes stripped from weapon damage strings."""


__all__ = [
    # Levels
    "MIN_CHARACTER_LEVEL",
    "MAX_CHARACTER_LEVEL",
    "TIER_ACHIEVEMENT_LEVELS",
    "TRAIT_CLEARING_LEVELS",
    "ADVANCEMENT_SLOTS_PER_LEVEL",
    "TIER_EXPERIENCE_VALUE",
    # Vitals
    "ARMOR_SCORE_CAP",
    "BASE_STRESS",
    "DEFAULT_CLASS_HP",
    "MIN_VITAL_SLOTS_PER_ADVANCEMENT",
    "MAX_VITAL_SLOTS_PER_ADVANCEMENT",
    # Traits and stats
    "TRAIT_NAMES",
    "EQUIPPED_LOCATIONS",
    "MODIFIABLE_STATS",
    "STAT_ALIASES",
    "DAMAGE_TYPE_ANNOTATIONS",
]
