"""Rules engine for derived stats and character advancement.

This package provides:
- Dice notation parsing and weapon damage scaling
- Modifier extraction from equipment
- Derived stats calculation
- Level-up validation, the level-up session and de-leveling
"""

from __future__ import annotations

from daggerheart_engine.engine.derived_stats import (
    DerivedStats,
    calculate_armor_score,
    calculate_damage_thresholds,
    calculate_derived_stats,
    calculate_max_hp,
    calculate_max_stress,
    calculate_weapon_damage_for,
    clamp_vital_value,
    parse_armor_thresholds,
    recalculate_character,
)
from daggerheart_engine.engine.dice import (
    DamageRoll,
    DiceNotation,
    DieTerm,
    calculate_weapon_damage,
    format_dice_notation,
    format_modifier,
    parse_damage_roll,
    parse_dice_notation,
)
from daggerheart_engine.engine.history import (
    DelevelResult,
    HistoryEntry,
    delevel_character,
    summarize_history,
    trim_advancement_history,
)
from daggerheart_engine.engine.level_up import (
    STEP_ORDER,
    LevelUpResult,
    LevelUpSelections,
    LevelUpSession,
    clamp_vital_slots,
    level_modifier_id,
)
from daggerheart_engine.engine.modifiers import (
    ItemModifier,
    get_system_modifiers,
    merge_modifiers,
    parse_modifiers,
    sum_modifiers,
)
from daggerheart_engine.engine.validation import (
    LevelUpProposal,
    LevelUpValidationError,
    group_errors_by_field,
    is_level_up_valid,
    validate_advancement_availability,
    validate_advancement_selections,
    validate_complete_level_up,
    validate_domain_card_exchange,
    validate_domain_card_selection,
    validate_experience_selection,
    validate_multiclass_selection,
    validate_new_level,
    validate_trait_selection,
    validate_vital_slot_addition,
)


__all__ = [
    # Dice
    "DieTerm",
    "DiceNotation",
    "DamageRoll",
    "parse_dice_notation",
    "parse_damage_roll",
    "format_modifier",
    "format_dice_notation",
    "calculate_weapon_damage",
    # Modifiers
    "ItemModifier",
    "get_system_modifiers",
    "merge_modifiers",
    "parse_modifiers",
    "sum_modifiers",
    # Derived stats
    "DerivedStats",
    "calculate_armor_score",
    "calculate_damage_thresholds",
    "calculate_derived_stats",
    "calculate_max_hp",
    "calculate_max_stress",
    "calculate_weapon_damage_for",
    "clamp_vital_value",
    "parse_armor_thresholds",
    "recalculate_character",
    # Validation
    "LevelUpProposal",
    "LevelUpValidationError",
    "group_errors_by_field",
    "is_level_up_valid",
    "validate_advancement_availability",
    "validate_advancement_selections",
    "validate_complete_level_up",
    "validate_domain_card_exchange",
    "validate_domain_card_selection",
    "validate_experience_selection",
    "validate_multiclass_selection",
    "validate_new_level",
    "validate_trait_selection",
    "validate_vital_slot_addition",
    # Level-up session
    "STEP_ORDER",
    "LevelUpResult",
    "LevelUpSelections",
    "LevelUpSession",
    "clamp_vital_slots",
    "level_modifier_id",
    # History
    "DelevelResult",
    "HistoryEntry",
    "delevel_character",
    "summarize_history",
    "trim_advancement_history",
]
