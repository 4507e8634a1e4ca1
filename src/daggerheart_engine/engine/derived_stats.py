"""Derived stats calculation.

Computes armor score, damage thresholds and vital maxima from a character's
equipment, level and modifiers, and clamps current vital values against the
new maxima. :func:`calculate_derived_stats` is the single entry point to call
after any equipment or modifier change; the smaller calculators are exposed
for previews and tests.

Rules notes:
    - Armor score is the armor's base score plus modifiers, capped at 12.
      Character level is not added, and no floor is applied.
    - An armor threshold string of the form ``"major/severe"`` replaces the
      level-based major and severe thresholds. Minor is always 1.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from daggerheart_engine.core.config import RulesSettings, get_settings
from daggerheart_engine.core.logging import get_logger
from daggerheart_engine.engine.dice import calculate_weapon_damage
from daggerheart_engine.engine.modifiers import (
    get_system_modifiers,
    merge_modifiers,
    sum_modifiers,
)
from daggerheart_engine.models.character import (
    Character,
    DamageThresholds,
    InventoryItem,
    Modifier,
    Vitals,
)
from daggerheart_engine.models.enums import VitalKind


logger = get_logger(__name__)


def _rules(rules: RulesSettings | None) -> RulesSettings:
    return rules if rules is not None else get_settings().rules


def _lenient_int(value: Any) -> int | None:
    """Parse a leading integer the way legacy data expects, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    text = str(value).strip()
    digits = ""
    for index, char in enumerate(text):
        if char.isdigit() or (index == 0 and char in "+-"):
            digits += char
        else:
            break
    try:
        return int(digits)
    except ValueError:
        return None


# =============================================================================
# Individual Calculators
# =============================================================================


def calculate_armor_score(
    equipped_armor: InventoryItem | None,
    system_mods: Iterable[Modifier] | None,
    user_mods: Iterable[Modifier] | None,
    *,
    rules: RulesSettings | None = None,
) -> int:
    """Calculate armor score.

    Args:
        equipped_armor: The item in the armor slot, if any.
        system_mods: Armor modifiers derived from equipment.
        user_mods: Armor modifiers entered by the user.
        rules: Rules settings; defaults to the application settings.

    Returns:
        Base score plus modifiers, capped at the armor score cap. A missing
        armor or a non-numeric base score contributes 0.
    """
    base = 0
    if equipped_armor is not None:
        base = _lenient_int(equipped_armor.payload.get("base_score")) or 0

    total = int(base + sum_modifiers(system_mods) + sum_modifiers(user_mods))
    return min(total, _rules(rules).armor_score_cap)


def parse_armor_thresholds(value: Any) -> tuple[int, int] | None:
    """Parse an armor ``"major/severe"`` threshold string.

    Returns:
        The two thresholds, or None when the string is malformed.
    """
    if not isinstance(value, str):
        return None
    parts = value.split("/")
    if len(parts) != 2:
        return None
    major = _lenient_int(parts[0])
    severe = _lenient_int(parts[1])
    if major is None or severe is None:
        return None
    return major, severe


def calculate_damage_thresholds(
    level: int,
    equipped_armor: InventoryItem | None,
    mods: Iterable[Modifier] | None,
    *,
    rules: RulesSettings | None = None,
) -> DamageThresholds:
    """Calculate damage thresholds.

    Defaults are minor 1, major ``level`` and severe ``level * 2``. Valid
    armor thresholds replace major and severe; malformed ones are ignored.
    Modifiers then add to major and severe, never to minor.
    """
    major = level
    severe = level * 2

    if equipped_armor is not None:
        armor_thresholds = parse_armor_thresholds(equipped_armor.payload.get("base_thresholds"))
        if armor_thresholds is not None:
            major, severe = armor_thresholds
            if _rules(rules).add_level_to_armor_thresholds:
                major += level
                severe += level
        elif equipped_armor.payload.get("base_thresholds") is not None:
            logger.debug(
                "Malformed armor thresholds, using level defaults",
                item_id=equipped_armor.id,
                value=equipped_armor.payload.get("base_thresholds"),
            )

    bonus = int(sum_modifiers(mods))
    return DamageThresholds(minor=1, major=major + bonus, severe=severe + bonus)


def calculate_max_hp(
    class_base: int,
    system_mods: Iterable[Modifier] | None,
    user_mods: Iterable[Modifier] | None,
) -> int:
    """Calculate maximum hit points, never below 1."""
    return max(1, int(class_base + sum_modifiers(system_mods) + sum_modifiers(user_mods)))


def calculate_max_stress(
    system_mods: Iterable[Modifier] | None,
    user_mods: Iterable[Modifier] | None,
    *,
    rules: RulesSettings | None = None,
) -> int:
    """Calculate maximum stress, never below 1."""
    base = _rules(rules).base_stress
    return max(1, int(base + sum_modifiers(system_mods) + sum_modifiers(user_mods)))


def clamp_vital_value(kind: VitalKind | str, value: int, maximum: int) -> int:
    """Clamp a current vital value into ``[0, maximum]``.

    The rule is the same for every vital kind; ``kind`` is accepted so
    callers can state which vital they are clamping.
    """
    return max(0, min(value, maximum))


def calculate_weapon_damage_for(character: Character, base_damage: str) -> str:
    """Scale a weapon's damage dice by the character's proficiency."""
    return calculate_weapon_damage(base_damage, max(1, character.proficiency))


# =============================================================================
# Orchestration
# =============================================================================


@dataclass(frozen=True)
class DerivedStats:
    """Result of a full derived stats calculation.

    Attributes:
        vitals: Vitals with new maxima and clamped current values.
        damage_thresholds: Recomputed damage thresholds.
    """

    vitals: Vitals
    damage_thresholds: DamageThresholds


def calculate_derived_stats(
    character: Character,
    armor_mods: list[Modifier],
    hp_mods: list[Modifier],
    stress_mods: list[Modifier],
    threshold_mods: list[Modifier],
    user_mods_by_field: dict[str, list[Modifier]] | None = None,
    *,
    rules: RulesSettings | None = None,
) -> DerivedStats:
    """Recompute derived stats from equipment, level and modifiers.

    Args:
        character: The character to compute for.
        armor_mods: System modifiers for armor score.
        hp_mods: System modifiers for maximum hit points.
        stress_mods: System modifiers for maximum stress.
        threshold_mods: System modifiers for damage thresholds.
        user_mods_by_field: User modifiers keyed by stat name. Defaults to
            the character's own modifier ledger. Within each stat the first
            modifier seen for an id wins.
        rules: Rules settings; defaults to the application settings.

    Returns:
        DerivedStats whose current vitals are pulled down to the new maxima
        where they exceed them and left untouched otherwise.
    """
    rules = _rules(rules)
    user_mods = {
        stat: merge_modifiers(mods or [])
        for stat, mods in (
            user_mods_by_field if user_mods_by_field is not None else character.modifiers
        ).items()
    }
    armor = character.equipped_armor

    armor_score = calculate_armor_score(armor, armor_mods, user_mods.get("armor"), rules=rules)
    class_base = (
        character.class_base_hp
        if character.class_base_hp is not None
        else rules.default_class_hp
    )
    max_hp = calculate_max_hp(class_base, hp_mods, user_mods.get("hit_points"))
    max_stress = calculate_max_stress(stress_mods, user_mods.get("stress"), rules=rules)

    # User threshold modifiers are stacked onto the system ones
    thresholds = calculate_damage_thresholds(
        character.level,
        armor,
        [*threshold_mods, *user_mods.get("damage_thresholds", [])],
        rules=rules,
    )

    current = character.vitals
    vitals = current.model_copy(
        update={
            "armor_score": armor_score,
            "armor_slots": clamp_vital_value(
                VitalKind.ARMOR_SLOTS, current.armor_slots, max(armor_score, 0)
            ),
            "hit_points_max": max_hp,
            "hit_points_current": clamp_vital_value(
                VitalKind.HIT_POINTS, current.hit_points_current, max_hp
            ),
            "stress_max": max_stress,
            "stress_current": clamp_vital_value(
                VitalKind.STRESS, current.stress_current, max_stress
            ),
        }
    )

    logger.debug(
        "Derived stats calculated",
        character_id=character.id,
        armor_score=armor_score,
        hit_points_max=max_hp,
        stress_max=max_stress,
        thresholds=thresholds.model_dump(),
    )
    return DerivedStats(vitals=vitals, damage_thresholds=thresholds)


def recalculate_character(
    character: Character,
    *,
    rules: RulesSettings | None = None,
) -> Character:
    """Return a copy of ``character`` with derived stats recomputed.

    System modifiers are re-extracted from the current equipment.
    """
    derived = calculate_derived_stats(
        character,
        get_system_modifiers(character, "armor"),
        get_system_modifiers(character, "hit_points"),
        get_system_modifiers(character, "stress"),
        get_system_modifiers(character, "damage_thresholds"),
        rules=rules,
    )
    return character.model_copy(
        update={"vitals": derived.vitals, "damage_thresholds": derived.damage_thresholds},
        deep=True,
    )


__all__ = [
    "calculate_armor_score",
    "parse_armor_thresholds",
    "calculate_damage_thresholds",
    "calculate_max_hp",
    "calculate_max_stress",
    "clamp_vital_value",
    "calculate_weapon_damage_for",
    "DerivedStats",
    "calculate_derived_stats",
    "recalculate_character",
]
