"""Level-up validation rules.

Each validator covers one decision point of the level-up flow and returns a
(possibly empty) list of field-tagged errors. Errors are collected, never
raised, so they can be shown next to the control that produced them.

Example:
    >>> errors = validate_advancement_selections(["add_hp", "add_stress"], 2)
    >>> is_level_up_valid(errors)
    True
"""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from daggerheart_engine.core.config import RulesSettings, get_settings
from daggerheart_engine.core.constants import MIN_CHARACTER_LEVEL, TRAIT_NAMES
from daggerheart_engine.core.logging import get_logger
from daggerheart_engine.models.character import AdvancementRecord
from daggerheart_engine.models.enums import AdvancementId, ValidationField
from daggerheart_engine.models.progression import (
    ADVANCEMENT_CATALOG,
    get_advancement_slot_cost,
    get_advancements_for_tier,
    get_class_domains,
    get_tier,
    get_tier_levels,
)


logger = get_logger(__name__)


class LevelUpValidationError(BaseModel):
    """A validation problem tied to one level-up field."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    field: ValidationField
    message: str


def _error(field: ValidationField, message: str) -> LevelUpValidationError:
    return LevelUpValidationError(field=field, message=message)


def _rules(rules: RulesSettings | None) -> RulesSettings:
    return rules if rules is not None else get_settings().rules


# =============================================================================
# Single Decision Validators
# =============================================================================


def validate_new_level(
    current_level: int,
    new_level: int,
    *,
    rules: RulesSettings | None = None,
) -> list[LevelUpValidationError]:
    """Check that the new level is above the current one and within range."""
    max_level = _rules(rules).max_level
    errors: list[LevelUpValidationError] = []

    if new_level <= current_level:
        errors.append(
            _error(
                ValidationField.NEW_LEVEL,
                f"New level ({new_level}) must be higher than current level ({current_level})",
            )
        )
    if new_level > max_level:
        errors.append(_error(ValidationField.NEW_LEVEL, f"Maximum level is {max_level}"))
    if new_level < MIN_CHARACTER_LEVEL:
        errors.append(_error(ValidationField.NEW_LEVEL, f"Minimum level is {MIN_CHARACTER_LEVEL}"))

    return errors


def validate_advancement_selections(
    selected: Sequence[str],
    character_level: int,
    *,
    has_mastery: bool = False,
    is_multiclassed: bool = False,
    rules: RulesSettings | None = None,
) -> list[LevelUpValidationError]:
    """Check the advancement slot budget and character-wide conflicts.

    The selected costs must sum to exactly the per-level slot budget. An
    empty selection is reported on its own, and each id may be chosen only
    once. Taking the next subclass card after mastery, or multiclassing
    twice, is rejected.

    Args:
        selected: Advancement ids chosen for this level.
        character_level: The level being advanced to.
        has_mastery: Whether the mastery subclass card is already held.
        is_multiclassed: Whether the character has already multiclassed.
        rules: Rules settings; defaults to the application settings.

    Returns:
        Errors tagged ``advancements``.
    """
    if not selected:
        return [_error(ValidationField.ADVANCEMENTS, "Must select at least one advancement")]

    budget = _rules(rules).advancement_slots_per_level
    errors: list[LevelUpValidationError] = []

    total = sum(get_advancement_slot_cost(advancement_id) for advancement_id in selected)
    if total != budget:
        errors.append(
            _error(
                ValidationField.ADVANCEMENTS,
                f"Total advancement slots must equal {budget}, but selected {total}",
            )
        )

    repeated = sorted(
        {advancement_id for advancement_id in selected if selected.count(advancement_id) > 1}
    )
    for advancement_id in repeated:
        errors.append(
            _error(ValidationField.ADVANCEMENTS, f"Cannot select {advancement_id} more than once")
        )

    for advancement_id in selected:
        if advancement_id not in ADVANCEMENT_CATALOG:
            errors.append(
                _error(ValidationField.ADVANCEMENTS, f"Unknown advancement: {advancement_id}")
            )
        elif advancement_id == AdvancementId.SUBCLASS_CARD and has_mastery:
            errors.append(
                _error(
                    ValidationField.ADVANCEMENTS,
                    "Cannot take upgraded subclass card - already have mastery",
                )
            )
        elif advancement_id == AdvancementId.MULTICLASS and is_multiclassed:
            errors.append(
                _error(ValidationField.ADVANCEMENTS, "Cannot take multiclass - already multiclassed")
            )

    logger.debug(
        "Validated advancement selections",
        level=character_level,
        selected=list(selected),
        total_slots=total,
        error_count=len(errors),
    )
    return errors


def validate_advancement_availability(
    selected: Sequence[str],
    new_level: int,
    history: Mapping[int, AdvancementRecord] | None = None,
) -> list[LevelUpValidationError]:
    """Check tier, level and history constraints of the advancement catalog.

    Multiclassing needs level 5, may be taken once per character, and is
    exclusive with taking a subclass card within the same tier, counting
    both earlier levels of the tier and this selection.

    Raises:
        InvalidLevelError: If ``new_level`` is outside 1..10.
    """
    history = history or {}
    tier = get_tier(new_level)
    offered = set(get_advancements_for_tier(tier))
    tier_records = [
        record
        for level, record in history.items()
        if level in get_tier_levels(tier) and level != new_level
    ]
    subclass_in_tier = AdvancementId.SUBCLASS_CARD in selected or any(
        record.took_subclass_card for record in tier_records
    )
    multiclass_in_tier = AdvancementId.MULTICLASS in selected or any(
        record.took_multiclass for record in tier_records
    )

    errors: list[LevelUpValidationError] = []
    for advancement_id in dict.fromkeys(selected):
        option = ADVANCEMENT_CATALOG.get(advancement_id)
        if option is None:
            continue
        if advancement_id not in offered:
            errors.append(
                _error(
                    ValidationField.ADVANCEMENTS,
                    f"{option.name} is not available in tier {tier}",
                )
            )
            continue
        if option.min_level is not None and new_level < option.min_level:
            errors.append(
                _error(
                    ValidationField.ADVANCEMENTS,
                    f"{option.name} requires level {option.min_level}",
                )
            )
        if option.once_per_character and any(
            advancement_id in record.advancements
            for level, record in history.items()
            if level != new_level
        ):
            errors.append(
                _error(ValidationField.ADVANCEMENTS, f"{option.name} may only be taken once")
            )
        if advancement_id == AdvancementId.SUBCLASS_CARD and multiclass_in_tier:
            errors.append(
                _error(
                    ValidationField.ADVANCEMENTS,
                    "Cannot take upgraded subclass card in the same tier as multiclass",
                )
            )
        if advancement_id == AdvancementId.MULTICLASS and subclass_in_tier:
            errors.append(
                _error(
                    ValidationField.ADVANCEMENTS,
                    "Cannot multiclass in the same tier as an upgraded subclass card",
                )
            )
    return errors


def validate_multiclass_selection(
    class_name: str | None,
    domain: str | None,
    *,
    primary_class: str | None = None,
    current_domains: Collection[str] = (),
) -> list[LevelUpValidationError]:
    """Check the class and domain chosen for a multiclass advancement."""
    if not class_name:
        return [_error(ValidationField.ADVANCEMENTS, "Must choose a class to multiclass into")]
    if primary_class and class_name == primary_class:
        return [_error(ValidationField.ADVANCEMENTS, "Cannot multiclass into your own class")]

    class_domains = get_class_domains(class_name)
    if not class_domains:
        return [_error(ValidationField.ADVANCEMENTS, f"Unknown class: {class_name}")]
    if not domain:
        return [_error(ValidationField.ADVANCEMENTS, f"Must choose a domain from {class_name}")]
    if domain not in class_domains:
        return [
            _error(
                ValidationField.ADVANCEMENTS,
                f"{domain} is not a domain of {class_name}",
            )
        ]
    if domain in current_domains:
        return [_error(ValidationField.ADVANCEMENTS, f"Already have access to {domain}")]
    return []


def validate_domain_card_selection(
    card_level: int,
    character_level: int,
) -> list[LevelUpValidationError]:
    """Check that the chosen card's level is between 1 and the new level.

    Multiclass domains are accounted for by the caller when offering cards.
    """
    errors: list[LevelUpValidationError] = []
    if card_level > character_level:
        errors.append(
            _error(
                ValidationField.DOMAIN_CARD,
                f"Domain card level ({card_level}) must be at or below "
                f"character level ({character_level})",
            )
        )
    if card_level < 1:
        errors.append(_error(ValidationField.DOMAIN_CARD, "Domain card level must be at least 1"))
    return errors


def validate_trait_selection(
    selected_trait_ids: Sequence[str],
    marked_traits: Mapping[str, bool] | Collection[str] = (),
    known_traits: Collection[str] = TRAIT_NAMES,
) -> list[LevelUpValidationError]:
    """Check a trait increase: exactly 2 distinct, known, unmarked traits."""
    if isinstance(marked_traits, Mapping):
        marked = {name for name, flag in marked_traits.items() if flag}
    else:
        marked = set(marked_traits)

    errors: list[LevelUpValidationError] = []
    if len(selected_trait_ids) != 2:
        errors.append(
            _error(
                ValidationField.TRAITS,
                f"Must select exactly 2 traits, selected {len(selected_trait_ids)}",
            )
        )
    if len(set(selected_trait_ids)) != len(selected_trait_ids):
        errors.append(_error(ValidationField.TRAITS, "Cannot select the same trait twice"))

    for trait_id in dict.fromkeys(selected_trait_ids):
        if trait_id not in known_traits:
            errors.append(_error(ValidationField.TRAITS, f"Trait {trait_id} not found"))
        elif trait_id in marked:
            errors.append(
                _error(
                    ValidationField.TRAITS,
                    f"Trait {trait_id} is already marked and cannot be upgraded this tier",
                )
            )
    return errors


def validate_experience_selection(
    selected_indices: Sequence[int],
    experiences: Sequence[Any],
) -> list[LevelUpValidationError]:
    """Check an experience increase: exactly 2 distinct, existing experiences."""
    errors: list[LevelUpValidationError] = []
    if len(selected_indices) != 2:
        errors.append(
            _error(
                ValidationField.EXPERIENCES,
                f"Must select exactly 2 experiences, selected {len(selected_indices)}",
            )
        )
    if len(set(selected_indices)) != len(selected_indices):
        errors.append(_error(ValidationField.EXPERIENCES, "Cannot select the same experience twice"))
    for index in dict.fromkeys(selected_indices):
        if index < 0 or index >= len(experiences):
            errors.append(
                _error(ValidationField.EXPERIENCES, f"Experience at index {index} not found")
            )
    return errors


def validate_domain_card_exchange(
    exchange_enabled: bool,
    existing_card_id: str | None,
    existing_card_level: int | None,
    new_card_level: int,
) -> list[LevelUpValidationError]:
    """Check an optional domain card exchange.

    The card given up must be of equal or higher level than the new card.
    Nothing is checked when exchange is not enabled.
    """
    if not exchange_enabled:
        return []
    if not existing_card_id:
        return [_error(ValidationField.DOMAIN_EXCHANGE, "Must select a card to exchange")]
    if existing_card_level is None:
        return [
            _error(
                ValidationField.DOMAIN_EXCHANGE,
                "Could not determine level of card being exchanged",
            )
        ]
    if new_card_level > existing_card_level:
        return [
            _error(
                ValidationField.DOMAIN_EXCHANGE,
                f"New card (level {new_card_level}) must be at or below "
                f"card being replaced (level {existing_card_level})",
            )
        ]
    return []


def validate_vital_slot_addition(vital: str, slots: Any) -> list[LevelUpValidationError]:
    """Check that a hit point or stress slot count is a positive integer."""
    is_integral = not isinstance(slots, bool) and (
        isinstance(slots, int) or (isinstance(slots, float) and slots.is_integer())
    )
    errors: list[LevelUpValidationError] = []
    if isinstance(slots, int | float) and not isinstance(slots, bool) and slots < 1:
        errors.append(_error(ValidationField.VITAL_SLOTS, f"Must add at least 1 {vital} slot"))
    if not is_integral:
        errors.append(_error(ValidationField.VITAL_SLOTS, f"{vital} slots must be an integer"))
    return errors


# =============================================================================
# Composition
# =============================================================================


class LevelUpProposal(BaseModel):
    """Everything collected for one level-up, for whole-transaction validation.

    Optional configuration is only checked when the advancement that needs it
    is selected; the domain card check is skipped when no card level is given.
    """

    model_config = ConfigDict(extra="ignore")

    current_level: int
    new_level: int
    selected_advancements: list[str] = Field(default_factory=list)
    has_mastery: bool = False
    is_multiclassed: bool = False
    advancement_history: dict[int, AdvancementRecord] | None = None

    domain_card_level: int | None = None
    trait_ids: list[str] = Field(default_factory=list)
    marked_traits: dict[str, bool] = Field(default_factory=dict)
    experience_indices: list[int] = Field(default_factory=list)
    experience_count: int = 0
    hp_slots: Any = 1
    stress_slots: Any = 1

    exchange_enabled: bool = False
    exchange_card_id: str | None = None
    exchange_card_level: int | None = None


def validate_complete_level_up(
    proposal: LevelUpProposal,
    *,
    rules: RulesSettings | None = None,
) -> list[LevelUpValidationError]:
    """Run every applicable validator over a full proposed level-up."""
    selected = proposal.selected_advancements
    level_errors = validate_new_level(proposal.current_level, proposal.new_level, rules=rules)
    errors: list[LevelUpValidationError] = list(level_errors)

    errors.extend(
        validate_advancement_selections(
            selected,
            proposal.new_level,
            has_mastery=proposal.has_mastery,
            is_multiclassed=proposal.is_multiclassed,
            rules=rules,
        )
    )

    # Tier lookups need a level that passed the range check
    if proposal.advancement_history is not None and not level_errors:
        errors.extend(
            validate_advancement_availability(
                selected, proposal.new_level, proposal.advancement_history
            )
        )

    if AdvancementId.INCREASE_TRAITS in selected:
        errors.extend(validate_trait_selection(proposal.trait_ids, proposal.marked_traits))
    if AdvancementId.INCREASE_EXPERIENCE in selected:
        errors.extend(
            validate_experience_selection(
                proposal.experience_indices, range(proposal.experience_count)
            )
        )
    if AdvancementId.ADD_HP in selected:
        errors.extend(validate_vital_slot_addition("hp", proposal.hp_slots))
    if AdvancementId.ADD_STRESS in selected:
        errors.extend(validate_vital_slot_addition("stress", proposal.stress_slots))

    if proposal.domain_card_level is not None:
        errors.extend(
            validate_domain_card_selection(proposal.domain_card_level, proposal.new_level)
        )
        errors.extend(
            validate_domain_card_exchange(
                proposal.exchange_enabled,
                proposal.exchange_card_id,
                proposal.exchange_card_level,
                proposal.domain_card_level,
            )
        )

    return errors


def is_level_up_valid(errors: Sequence[LevelUpValidationError]) -> bool:
    """Check whether a validation run produced no errors."""
    return len(errors) == 0


def group_errors_by_field(errors: Sequence[LevelUpValidationError]) -> dict[str, list[str]]:
    """Bucket error messages by field tag. Fields without errors are absent."""
    grouped: dict[str, list[str]] = {}
    for error in errors:
        grouped.setdefault(str(error.field), []).append(error.message)
    return grouped


__all__ = [
    "LevelUpValidationError",
    "validate_new_level",
    "validate_advancement_selections",
    "validate_advancement_availability",
    "validate_multiclass_selection",
    "validate_domain_card_selection",
    "validate_trait_selection",
    "validate_experience_selection",
    "validate_domain_card_exchange",
    "validate_vital_slot_addition",
    "LevelUpProposal",
    "validate_complete_level_up",
    "is_level_up_valid",
    "group_errors_by_field",
]
