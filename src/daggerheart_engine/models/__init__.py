"""Data models for the Daggerheart rules engine.

This package contains the pydantic models the engine reads and returns:
the character aggregate, card records, and the static progression tables.
"""

from __future__ import annotations

from daggerheart_engine.models.cards import (
    Card,
    CardLike,
    filter_cards_by_domain_and_level,
    get_card_description,
    get_card_domain,
    get_card_level,
    get_card_name,
    get_card_recall_cost,
    get_card_type,
    get_exchange_candidates,
    is_card_available_at_level,
    is_card_in_domain,
    normalize_card,
)
from daggerheart_engine.models.character import (
    AdvancementRecord,
    Character,
    CharacterCard,
    DamageThresholds,
    Experience,
    InventoryItem,
    LibraryItem,
    Modifier,
    RulesModel,
    Traits,
    Vitals,
)
from daggerheart_engine.models.enums import (
    AdvancementId,
    CardLocation,
    InventoryLocation,
    LevelUpStep,
    ModifierSource,
    Trait,
    ValidationField,
    VitalKind,
)
from daggerheart_engine.models.progression import (
    ADVANCEMENT_CATALOG,
    CLASS_DOMAINS,
    AdvancementOption,
    LevelUpConfig,
    TierAchievements,
    add_experience_at_level_up,
    calculate_new_damage_thresholds,
    calculate_proficiency_increase,
    calculate_tier_achievements,
    create_new_experience,
    get_advancement_option,
    get_advancement_slot_cost,
    get_advancements_for_tier,
    get_all_class_names,
    get_class_domains,
    get_level_up_config,
    get_max_domain_card_level,
    get_tier,
    get_tier_levels,
    has_tier_achievements,
    is_advancement_available,
    validate_advancement_slots,
    validate_damage_thresholds,
)


__all__ = [
    # Enums
    "AdvancementId",
    "CardLocation",
    "InventoryLocation",
    "LevelUpStep",
    "ModifierSource",
    "Trait",
    "ValidationField",
    "VitalKind",
    # Character
    "RulesModel",
    "Modifier",
    "Experience",
    "Traits",
    "Vitals",
    "DamageThresholds",
    "LibraryItem",
    "InventoryItem",
    "CharacterCard",
    "AdvancementRecord",
    "Character",
    # Cards
    "Card",
    "CardLike",
    "get_card_level",
    "get_card_description",
    "get_card_type",
    "get_card_domain",
    "get_card_recall_cost",
    "get_card_name",
    "is_card_in_domain",
    "is_card_available_at_level",
    "filter_cards_by_domain_and_level",
    "get_exchange_candidates",
    "normalize_card",
    # Progression
    "AdvancementOption",
    "ADVANCEMENT_CATALOG",
    "CLASS_DOMAINS",
    "LevelUpConfig",
    "TierAchievements",
    "add_experience_at_level_up",
    "calculate_new_damage_thresholds",
    "calculate_proficiency_increase",
    "calculate_tier_achievements",
    "create_new_experience",
    "get_advancement_option",
    "get_advancement_slot_cost",
    "get_advancements_for_tier",
    "get_all_class_names",
    "get_class_domains",
    "get_level_up_config",
    "get_max_domain_card_level",
    "get_tier",
    "get_tier_levels",
    "has_tier_achievements",
    "is_advancement_available",
    "validate_advancement_slots",
    "validate_damage_thresholds",
]
