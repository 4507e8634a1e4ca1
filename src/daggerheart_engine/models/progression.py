"""Daggerheart level progression data.

This module contains the static data needed for character level progression:
- Tier boundaries and tier achievements
- The advancement catalog and slot costs
- Class to domain mapping used by multiclassing

The catalog is never mutated at runtime. Functions here are small lookups
over these tables; the validators and the level-up session build on them.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from daggerheart_engine.core.constants import (
    MAX_CHARACTER_LEVEL,
    MIN_CHARACTER_LEVEL,
    TIER_ACHIEVEMENT_LEVELS,
    TIER_EXPERIENCE_VALUE,
    TRAIT_CLEARING_LEVELS,
)
from daggerheart_engine.core.exceptions import InvalidLevelError
from daggerheart_engine.models.character import DamageThresholds, Experience
from daggerheart_engine.models.enums import AdvancementId


# =============================================================================
# Advancement Catalog
# =============================================================================


class AdvancementOption(BaseModel):
    """Static advancement catalog entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    cost: int = 1
    min_level: int | None = None
    once_per_character: bool = False


ADVANCEMENT_CATALOG: dict[str, AdvancementOption] = {
    option.id: option
    for option in (
        AdvancementOption(
            id=AdvancementId.INCREASE_TRAITS,
            name="Increase Traits",
            description="Choose 2 unmarked traits and gain +1 to them",
        ),
        AdvancementOption(
            id=AdvancementId.ADD_HP,
            name="Add HP",
            description="Permanently gain additional Hit Point slots",
        ),
        AdvancementOption(
            id=AdvancementId.ADD_STRESS,
            name="Add Stress",
            description="Permanently gain additional Stress slots",
        ),
        AdvancementOption(
            id=AdvancementId.INCREASE_EXPERIENCE,
            name="Increase Experience",
            description="Choose 2 experiences and gain +1 to both",
        ),
        AdvancementOption(
            id=AdvancementId.DOMAIN_CARD,
            name="Additional Domain Card",
            description="Gain an additional domain card",
        ),
        AdvancementOption(
            id=AdvancementId.INCREASE_EVASION,
            name="Increase Evasion",
            description="Gain +1 to your Evasion",
        ),
        AdvancementOption(
            id=AdvancementId.SUBCLASS_CARD,
            name="Upgraded Subclass Card",
            description="Take your next subclass card (Specialization or Mastery)",
        ),
        AdvancementOption(
            id=AdvancementId.INCREASE_PROFICIENCY,
            name="Increase Proficiency",
            description="Gain +1 to Proficiency and +1 damage die",
            cost=2,
        ),
        AdvancementOption(
            id=AdvancementId.MULTICLASS,
            name="Multiclass",
            description="Choose a second class and gain access to one of its domains",
            cost=2,
            min_level=5,
            once_per_character=True,
        ),
    )
}
"""Advancement options keyed by id."""

_BASE_ADVANCEMENTS: list[str] = [
    AdvancementId.INCREASE_TRAITS,
    AdvancementId.ADD_HP,
    AdvancementId.ADD_STRESS,
    AdvancementId.INCREASE_EXPERIENCE,
    AdvancementId.DOMAIN_CARD,
    AdvancementId.INCREASE_EVASION,
    AdvancementId.SUBCLASS_CARD,
    AdvancementId.INCREASE_PROFICIENCY,
]

# Multiclassing opens up from tier 2 onward, subject to its level minimum
_ADVANCEMENTS_BY_TIER: dict[int, list[str]] = {
    1: _BASE_ADVANCEMENTS,
    2: [*_BASE_ADVANCEMENTS, AdvancementId.MULTICLASS],
    3: [*_BASE_ADVANCEMENTS, AdvancementId.MULTICLASS],
    4: [*_BASE_ADVANCEMENTS, AdvancementId.MULTICLASS],
}


def get_advancement_option(advancement_id: str) -> AdvancementOption | None:
    """Look up a catalog entry by id."""
    return ADVANCEMENT_CATALOG.get(advancement_id)


def get_advancement_slot_cost(advancement_id: str) -> int:
    """Get the slot cost of an advancement. Unknown ids cost 1."""
    option = ADVANCEMENT_CATALOG.get(advancement_id)
    return option.cost if option else 1


def validate_advancement_slots(selected: list[str]) -> tuple[bool, int]:
    """Check that the selected advancements spend exactly 2 slots.

    Returns:
        Tuple of (valid, total_slots).
    """
    total = sum(get_advancement_slot_cost(advancement_id) for advancement_id in selected)
    return total == 2, total


def get_advancements_for_tier(tier: int) -> list[str]:
    """Get the advancement ids offered in a tier."""
    return [str(advancement_id) for advancement_id in _ADVANCEMENTS_BY_TIER.get(tier, [])]


def is_advancement_available(character_tier: int, advancement_tier: int) -> bool:
    """Check that an advancement's tier is at or below the character's."""
    return advancement_tier <= character_tier


# =============================================================================
# Tiers and Tier Achievements
# =============================================================================


def get_tier(level: int) -> int:
    """Get the tier of a level.

    Level 1 is tier 1, levels 2-4 tier 2, 5-7 tier 3 and 8-10 tier 4.

    Raises:
        InvalidLevelError: If the level is outside 1..10.
    """
    if level == 1:
        return 1
    if 2 <= level <= 4:
        return 2
    if 5 <= level <= 7:
        return 3
    if 8 <= level <= MAX_CHARACTER_LEVEL:
        return 4
    raise InvalidLevelError(
        f"Level must be between {MIN_CHARACTER_LEVEL} and {MAX_CHARACTER_LEVEL}",
        level=level,
    )


def get_tier_levels(tier: int) -> range:
    """Get the levels that make up a tier."""
    bounds = {1: (1, 1), 2: (2, 4), 3: (5, 7), 4: (8, 10)}
    low, high = bounds.get(tier, (0, -1))
    return range(low, high + 1)


def has_tier_achievements(new_level: int) -> bool:
    """Check whether reaching a level triggers tier achievements."""
    return new_level in TIER_ACHIEVEMENT_LEVELS


class TierAchievements(BaseModel):
    """Automatic bonuses granted on reaching a level."""

    model_config = ConfigDict(frozen=True)

    new_experience_value: int | None = None
    proficiency_increase: int = 0
    should_clear_marked_traits: bool = False


def calculate_tier_achievements(
    new_level: int,
    *,
    experience_value: int = TIER_EXPERIENCE_VALUE,
) -> TierAchievements:
    """Calculate the automatic bonuses of reaching ``new_level``.

    At levels 2, 5 and 8 the character gains a new Experience and +1
    Proficiency. At levels 5 and 8 marked traits are also cleared.
    """
    if not has_tier_achievements(new_level):
        return TierAchievements()
    return TierAchievements(
        new_experience_value=experience_value,
        proficiency_increase=1,
        should_clear_marked_traits=new_level in TRAIT_CLEARING_LEVELS,
    )


def create_new_experience(level: int, value: int = TIER_EXPERIENCE_VALUE) -> Experience:
    """Create the Experience granted by a tier achievement."""
    return Experience(name=f"Experience (Level {level})", value=value)


def add_experience_at_level_up(
    experiences: list[Experience],
    level: int,
    value: int = TIER_EXPERIENCE_VALUE,
) -> list[Experience]:
    """Return ``experiences`` with a tier experience appended."""
    return [*experiences, create_new_experience(level, value)]


def calculate_new_damage_thresholds(current: DamageThresholds) -> DamageThresholds:
    """Preview thresholds after a level-up: major and severe gain +1."""
    return DamageThresholds(
        minor=current.minor,
        major=current.major + 1,
        severe=current.severe + 1,
    )


def validate_damage_thresholds(thresholds: DamageThresholds) -> bool:
    """Check that thresholds are positive and strictly increasing."""
    return 0 < thresholds.minor < thresholds.major < thresholds.severe


def get_max_domain_card_level(character_level: int) -> int:
    """Get the highest domain card level a character may take."""
    return character_level


def calculate_proficiency_increase(new_level: int, selected: list[str]) -> int:
    """Sum proficiency gained from tier achievements and the chosen advancement."""
    increase = 1 if has_tier_achievements(new_level) else 0
    if AdvancementId.INCREASE_PROFICIENCY in selected:
        increase += 1
    return increase


class LevelUpConfig(BaseModel):
    """Automatic changes that apply when reaching a level."""

    model_config = ConfigDict(frozen=True)

    tier: int
    tier_achievements: TierAchievements
    max_domain_card_level: int


def get_level_up_config(new_level: int) -> LevelUpConfig:
    """Collect the tier, tier achievements and domain card cap for a level."""
    return LevelUpConfig(
        tier=get_tier(new_level),
        tier_achievements=calculate_tier_achievements(new_level),
        max_domain_card_level=get_max_domain_card_level(new_level),
    )


# =============================================================================
# Class Domains
# =============================================================================

CLASS_DOMAINS: dict[str, tuple[str, str]] = {
    "Bard": ("Codex", "Grace"),
    "Druid": ("Arcana", "Sage"),
    "Guardian": ("Blade", "Valor"),
    "Ranger": ("Bone", "Sage"),
    "Rogue": ("Grace", "Midnight"),
    "Seraph": ("Splendor", "Valor"),
    "Sorcerer": ("Arcana", "Midnight"),
    "Warrior": ("Blade", "Bone"),
    "Wizard": ("Codex", "Splendor"),
}


def get_class_domains(class_name: str) -> list[str]:
    """Get the two domains of a class. Lookup is case-sensitive."""
    return list(CLASS_DOMAINS.get(class_name, ()))


def get_all_class_names() -> list[str]:
    """Get every class name with a domain mapping."""
    return list(CLASS_DOMAINS)


__all__ = [
    "AdvancementOption",
    "ADVANCEMENT_CATALOG",
    "get_advancement_option",
    "get_advancement_slot_cost",
    "validate_advancement_slots",
    "get_advancements_for_tier",
    "is_advancement_available",
    "get_tier",
    "get_tier_levels",
    "has_tier_achievements",
    "TierAchievements",
    "calculate_tier_achievements",
    "create_new_experience",
    "add_experience_at_level_up",
    "calculate_new_damage_thresholds",
    "validate_damage_thresholds",
    "get_max_domain_card_level",
    "calculate_proficiency_increase",
    "LevelUpConfig",
    "get_level_up_config",
    "CLASS_DOMAINS",
    "get_class_domains",
    "get_all_class_names",
]
