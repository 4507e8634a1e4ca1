"""Level-up session state machine.

A :class:`LevelUpSession` walks one character through the ordered level-up
steps, holding the in-progress selections until commit:

    TierPreview -> AdvancementSelection -> Configuration -> ThresholdPreview
    -> DomainCardSelection -> Commit

Configuration is only visited when a trait or experience increase was
chosen. Moving forward requires the current step's selections to validate;
moving back is always allowed from any step but the first and keeps every
selection. Committing applies the selections to a copy of the character,
stores an :class:`AdvancementRecord` under the new level and recomputes
derived stats. Abandoning a session is simply not committing it.

Example:
    >>> session = LevelUpSession(character)
    >>> session.next()
    >>> session.select_advancements(["add_hp", "add_stress"])
    >>> while session.current_step != LevelUpStep.COMMIT:
    ...     session.next()
    >>> result = session.commit()
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import Field

from daggerheart_engine.core.config import RulesSettings, get_settings
from daggerheart_engine.core.exceptions import (
    InvalidLevelError,
    LevelUpError,
    LevelUpStateError,
)
from daggerheart_engine.core.logging import character_context, get_logger
from daggerheart_engine.engine.derived_stats import recalculate_character
from daggerheart_engine.engine.modifiers import merge_modifiers
from daggerheart_engine.engine.validation import (
    LevelUpValidationError,
    validate_advancement_availability,
    validate_advancement_selections,
    validate_domain_card_exchange,
    validate_domain_card_selection,
    validate_experience_selection,
    validate_multiclass_selection,
    validate_new_level,
    validate_trait_selection,
    validate_vital_slot_addition,
)
from daggerheart_engine.models.cards import (
    filter_cards_by_domain_and_level,
    get_card_level,
    get_exchange_candidates,
)
from daggerheart_engine.models.character import (
    AdvancementRecord,
    Character,
    CharacterCard,
    DamageThresholds,
    LibraryItem,
    Modifier,
    RulesModel,
)
from daggerheart_engine.models.enums import (
    AdvancementId,
    CardLocation,
    LevelUpStep,
    ModifierSource,
    ValidationField,
)
from daggerheart_engine.models.progression import (
    LevelUpConfig,
    calculate_new_damage_thresholds,
    calculate_tier_achievements,
    create_new_experience,
    get_level_up_config,
    get_tier,
)


logger = get_logger(__name__)

STEP_ORDER: tuple[LevelUpStep, ...] = (
    LevelUpStep.TIER_PREVIEW,
    LevelUpStep.ADVANCEMENT_SELECTION,
    LevelUpStep.CONFIGURATION,
    LevelUpStep.THRESHOLD_PREVIEW,
    LevelUpStep.DOMAIN_CARD_SELECTION,
    LevelUpStep.COMMIT,
)


def clamp_vital_slots(slots: int, *, rules: RulesSettings | None = None) -> int:
    """Clamp a hit point or stress slot count to the allowed range."""
    rules = rules if rules is not None else get_settings().rules
    return max(1, min(slots, rules.vital_slot_max_per_advancement))


def level_modifier_id(level: int, vital: str) -> str:
    """Get the id of the modifier a level-up adds for extra vital slots."""
    return f"level-{level}-{vital}"


class LevelUpSelections(RulesModel):
    """In-progress choices of one level-up session."""

    advancements: list[str] = Field(default_factory=list)
    trait_ids: list[str] = Field(default_factory=list)
    experience_indices: list[int] = Field(default_factory=list)
    hp_slots: int = 1
    stress_slots: int = 1
    multiclass_class: str | None = None
    multiclass_domain: str | None = None
    domain_card_id: str | None = None
    bonus_domain_card_id: str | None = None
    exchange_enabled: bool = False
    exchange_card_id: str | None = None

    def has(self, advancement_id: str) -> bool:
        """Check whether an advancement is selected."""
        return advancement_id in self.advancements


@dataclass(frozen=True)
class LevelUpResult:
    """Outcome of a committed level-up.

    Attributes:
        character: The advanced character with derived stats recomputed.
        record: The history entry stored under the new level.
    """

    character: Character
    record: AdvancementRecord


class LevelUpSession:
    """Drives one character through a level-up.

    Attributes:
        new_level: The level being advanced to.
        selections: The choices collected so far.
    """

    def __init__(
        self,
        character: Character,
        *,
        card_library: Iterable[LibraryItem | Mapping[str, Any]] = (),
        new_level: int | None = None,
        rules: RulesSettings | None = None,
    ) -> None:
        """Start a session.

        Args:
            character: Snapshot of the character to advance.
            card_library: Domain cards that may be offered.
            new_level: Target level. Must be one above the current level, so
                every tier boundary is crossed by its own session.
            rules: Rules settings; defaults to the application settings.

        Raises:
            InvalidLevelError: If the target level is not a valid advance.
        """
        self._rules = rules if rules is not None else get_settings().rules
        self._character = character.model_copy(deep=True)
        self.new_level = new_level if new_level is not None else character.level + 1

        level_errors = validate_new_level(character.level, self.new_level, rules=self._rules)
        if level_errors:
            raise InvalidLevelError(
                level_errors[0].message,
                level=self.new_level,
                details={"current_level": character.level},
            )
        if self.new_level != character.level + 1:
            raise InvalidLevelError(
                "A level-up advances exactly one level",
                level=self.new_level,
                details={"current_level": character.level},
            )

        self._card_library = [
            card if isinstance(card, LibraryItem) else LibraryItem.model_validate(card)
            for card in card_library
        ]
        self.selections = LevelUpSelections()
        self._current_step = LevelUpStep.TIER_PREVIEW
        self._committed = False

        logger.debug(
            "Level-up session started",
            character_id=character.id,
            current_level=character.level,
            new_level=self.new_level,
        )

    # -------------------------------------------------------------------------
    # Previews
    # -------------------------------------------------------------------------

    @property
    def character(self) -> Character:
        """The character snapshot the session started from."""
        return self._character

    @property
    def tier(self) -> int:
        """Tier of the new level."""
        return get_tier(self.new_level)

    def tier_preview(self) -> LevelUpConfig:
        """Get the automatic changes of reaching the new level."""
        return get_level_up_config(self.new_level)

    def threshold_preview(self) -> DamageThresholds:
        """Preview thresholds: major and severe +1 over the current values."""
        return calculate_new_damage_thresholds(self._character.damage_thresholds)

    # -------------------------------------------------------------------------
    # Selection helpers
    # -------------------------------------------------------------------------

    def select_advancements(self, advancement_ids: Sequence[str]) -> None:
        """Replace the selected advancements."""
        self.selections.advancements = [str(advancement_id) for advancement_id in advancement_ids]

    def set_vital_slots(self, vital: str, slots: int) -> None:
        """Set the hit point or stress slots to add, clamped to the allowed range."""
        clamped = clamp_vital_slots(slots, rules=self._rules)
        if vital == "hp":
            self.selections.hp_slots = clamped
        elif vital == "stress":
            self.selections.stress_slots = clamped
        else:
            raise LevelUpError(f"Unknown vital: {vital}", details={"vital": vital})

    @property
    def available_domains(self) -> list[str]:
        """Domains cards may come from, including a multiclass domain chosen now."""
        domains = self._character.all_domains
        chosen = self.selections.multiclass_domain
        if self.selections.has(AdvancementId.MULTICLASS) and chosen and chosen not in domains:
            domains.append(chosen)
        return domains

    def available_domain_cards(self) -> list[LibraryItem]:
        """Library cards in an available domain at or below the new level."""
        owned = {card.card_id for card in self._character.cards}
        eligible = filter_cards_by_domain_and_level(
            self._card_library, self.available_domains, self.new_level
        )
        return [card for card in eligible if card.id not in owned]

    def _library_card(self, card_id: str | None) -> LibraryItem | None:
        if not card_id:
            return None
        for card in self._card_library:
            if card.id == card_id:
                return card
        return None

    def exchange_candidates(self) -> list[CharacterCard]:
        """Owned cards that may be given up for the selected domain card."""
        new_card = self._library_card(self.selections.domain_card_id)
        if new_card is None:
            return []
        owned = [card for card in self._character.cards if card.library_item is not None]
        eligible = get_exchange_candidates(new_card, [card.library_item for card in owned])
        return [card for card in owned if any(card.library_item is item for item in eligible)]

    # -------------------------------------------------------------------------
    # Step navigation
    # -------------------------------------------------------------------------

    @property
    def steps(self) -> list[LevelUpStep]:
        """Steps of this session given the current selections."""
        needs_configuration = self.selections.has(
            AdvancementId.INCREASE_TRAITS
        ) or self.selections.has(AdvancementId.INCREASE_EXPERIENCE)
        return [
            step
            for step in STEP_ORDER
            if step != LevelUpStep.CONFIGURATION or needs_configuration
        ]

    @property
    def current_step(self) -> LevelUpStep:
        """The step the session is on."""
        return self._current_step

    def _neighbour(self, direction: int) -> LevelUpStep | None:
        order = STEP_ORDER.index(self._current_step)
        candidates = [step for step in self.steps if (STEP_ORDER.index(step) - order) * direction > 0]
        if not candidates:
            return None
        return candidates[0] if direction > 0 else candidates[-1]

    def errors_for(self, step: LevelUpStep) -> list[LevelUpValidationError]:
        """Validate the selections a step is responsible for."""
        if step == LevelUpStep.ADVANCEMENT_SELECTION:
            return self._advancement_errors()
        if step == LevelUpStep.CONFIGURATION:
            return self._configuration_errors()
        if step == LevelUpStep.DOMAIN_CARD_SELECTION:
            return self._domain_card_errors()
        if step == LevelUpStep.COMMIT:
            return [
                *self._advancement_errors(),
                *self._configuration_errors(),
                *self._domain_card_errors(),
            ]
        return []

    def can_proceed(self) -> bool:
        """Check whether the current step's selections allow moving on."""
        return not self.errors_for(self._current_step)

    def next(self) -> LevelUpStep:
        """Advance to the next step.

        Raises:
            LevelUpStateError: If already on the final step or the current
                step's selections are invalid.
        """
        target = self._neighbour(1)
        if target is None:
            raise LevelUpStateError(
                "Already on the final step",
                current_step=self._current_step,
            )
        errors = self.errors_for(self._current_step)
        if errors:
            raise LevelUpStateError(
                "Current step has invalid selections",
                current_step=self._current_step,
                details={"errors": [error.message for error in errors]},
            )
        self._current_step = target
        logger.debug("Level-up step advanced", step=target, new_level=self.new_level)
        return target

    def back(self) -> LevelUpStep:
        """Return to the previous step, keeping all selections.

        Raises:
            LevelUpStateError: If on the first step.
        """
        target = self._neighbour(-1)
        if target is None:
            raise LevelUpStateError(
                "Cannot go back from the first step",
                current_step=self._current_step,
            )
        self._current_step = target
        logger.debug("Level-up step reverted", step=target, new_level=self.new_level)
        return target

    # -------------------------------------------------------------------------
    # Step validation
    # -------------------------------------------------------------------------

    def _advancement_errors(self) -> list[LevelUpValidationError]:
        selections = self.selections
        character = self._character
        errors = validate_advancement_selections(
            selections.advancements,
            self.new_level,
            has_mastery=character.has_subclass_mastery,
            is_multiclassed=character.is_multiclassed,
            rules=self._rules,
        )
        errors.extend(
            validate_advancement_availability(
                selections.advancements, self.new_level, character.advancement_history
            )
        )
        if selections.has(AdvancementId.ADD_HP):
            errors.extend(validate_vital_slot_addition("hp", selections.hp_slots))
        if selections.has(AdvancementId.ADD_STRESS):
            errors.extend(validate_vital_slot_addition("stress", selections.stress_slots))
        if selections.has(AdvancementId.MULTICLASS):
            errors.extend(
                validate_multiclass_selection(
                    selections.multiclass_class,
                    selections.multiclass_domain,
                    primary_class=character.class_name,
                    current_domains=character.all_domains,
                )
            )
        return errors

    def _configuration_errors(self) -> list[LevelUpValidationError]:
        selections = self.selections
        errors: list[LevelUpValidationError] = []
        if selections.has(AdvancementId.INCREASE_TRAITS):
            errors.extend(
                validate_trait_selection(selections.trait_ids, self._marked_traits_for_new_level())
            )
        if selections.has(AdvancementId.INCREASE_EXPERIENCE):
            errors.extend(
                validate_experience_selection(
                    selections.experience_indices, self._character.experiences
                )
            )
        return errors

    def _domain_card_errors(self) -> list[LevelUpValidationError]:
        selections = self.selections
        available = self.available_domain_cards()
        if not available:
            return []

        errors: list[LevelUpValidationError] = []
        available_ids = {card.id for card in available}
        wanted = [(selections.domain_card_id, "domain card", "a")]
        if selections.has(AdvancementId.DOMAIN_CARD):
            wanted.append((selections.bonus_domain_card_id, "additional domain card", "an"))

        for card_id, label, article in wanted:
            if not card_id:
                errors.append(_domain_error(f"Must select {article} {label}"))
                continue
            card = self._library_card(card_id)
            if card is None or card_id not in available_ids:
                errors.append(_domain_error(f"Selected {label} is not available"))
                if card is None:
                    continue
            errors.extend(validate_domain_card_selection(get_card_level(card), self.new_level))

        if (
            selections.has(AdvancementId.DOMAIN_CARD)
            and selections.domain_card_id
            and selections.domain_card_id == selections.bonus_domain_card_id
        ):
            errors.append(_domain_error("Cannot take the same domain card twice"))

        errors.extend(self._exchange_errors())
        return errors

    def _exchange_errors(self) -> list[LevelUpValidationError]:
        selections = self.selections
        new_card = self._library_card(selections.domain_card_id)
        if not selections.exchange_enabled or new_card is None:
            return []

        exchanged = next(
            (card for card in self._character.cards if card.id == selections.exchange_card_id),
            None,
        )
        exchanged_level = (
            get_card_level(exchanged.library_item)
            if exchanged is not None and exchanged.library_item is not None
            else None
        )
        errors = validate_domain_card_exchange(
            selections.exchange_enabled,
            selections.exchange_card_id,
            exchanged_level,
            get_card_level(new_card),
        )
        if not errors and exchanged not in self.exchange_candidates():
            errors.append(
                LevelUpValidationError(
                    field=ValidationField.DOMAIN_EXCHANGE,
                    message="Selected card cannot be exchanged for the new card",
                )
            )
        return errors

    def _marked_traits_for_new_level(self) -> dict[str, bool]:
        if calculate_tier_achievements(self.new_level).should_clear_marked_traits:
            return {}
        return dict(self._character.marked_traits)

    # -------------------------------------------------------------------------
    # Commit
    # -------------------------------------------------------------------------

    def commit(self) -> LevelUpResult:
        """Apply the level-up and emit its advancement record.

        Returns:
            LevelUpResult with the advanced character and the new record.

        Raises:
            LevelUpStateError: If not on the commit step, already committed,
                or any selection is invalid.
        """
        if self._committed:
            raise LevelUpStateError("Level-up already committed", current_step=self._current_step)
        if self._current_step != LevelUpStep.COMMIT:
            raise LevelUpStateError(
                "Level-up can only be committed from the final step",
                current_step=self._current_step,
                expected_steps=[LevelUpStep.COMMIT],
            )
        errors = self.errors_for(LevelUpStep.COMMIT)
        if errors:
            raise LevelUpStateError(
                "Level-up has invalid selections",
                current_step=self._current_step,
                details={"errors": [error.message for error in errors]},
            )

        with character_context(self._character.id, new_level=self.new_level):
            character, record = self._apply()
            result = LevelUpResult(
                character=recalculate_character(character, rules=self._rules),
                record=record,
            )
            self._committed = True
            logger.info("Level up committed", advancements=list(record.advancements))
        return result

    def _apply(self) -> tuple[Character, AdvancementRecord]:
        selections = self.selections
        level = self.new_level
        character = self._character.model_copy(deep=True)
        achievements = calculate_tier_achievements(
            level, experience_value=self._rules.tier_experience_value
        )

        marked = dict(character.marked_traits)
        cleared: list[str] = []
        if achievements.should_clear_marked_traits:
            cleared = sorted(name for name, flag in marked.items() if flag)
            marked = {}

        traits_increased: list[str] = []
        if selections.has(AdvancementId.INCREASE_TRAITS):
            for trait in selections.trait_ids:
                character.traits = character.traits.adjusted(trait, 1)
                marked[trait] = True
                traits_increased.append(trait)
        character.marked_traits = marked

        experiences = [experience.model_copy() for experience in character.experiences]
        experiences_increased: list[int] = []
        if selections.has(AdvancementId.INCREASE_EXPERIENCE):
            for index in selections.experience_indices:
                experiences[index].value += 1
                experiences_increased.append(index)

        tier_experience_name: str | None = None
        if achievements.new_experience_value is not None:
            tier_experience = create_new_experience(level, achievements.new_experience_value)
            experiences.append(tier_experience)
            tier_experience_name = tier_experience.name
        character.experiences = experiences

        proficiency_increase = achievements.proficiency_increase
        if selections.has(AdvancementId.INCREASE_PROFICIENCY):
            proficiency_increase += 1
        character.proficiency += proficiency_increase

        evasion_increase = 1 if selections.has(AdvancementId.INCREASE_EVASION) else 0
        character.evasion += evasion_increase

        hp_slots = selections.hp_slots if selections.has(AdvancementId.ADD_HP) else 0
        stress_slots = selections.stress_slots if selections.has(AdvancementId.ADD_STRESS) else 0
        modifiers = {stat: list(mods) for stat, mods in character.modifiers.items()}
        for stat, vital, slots in (("hit_points", "hp", hp_slots), ("stress", "stress", stress_slots)):
            if slots:
                modifiers[stat] = merge_modifiers(
                    modifiers.get(stat, []),
                    [
                        Modifier(
                            id=level_modifier_id(level, vital),
                            name=f"Level {level} advancement",
                            value=slots,
                            source=ModifierSource.USER,
                        )
                    ],
                )
        character.modifiers = modifiers

        if selections.has(AdvancementId.SUBCLASS_CARD):
            character.subclass_upgrades += 1

        multiclass_domain: str | None = None
        if selections.has(AdvancementId.MULTICLASS):
            multiclass_domain = selections.multiclass_domain
            character.multiclass_domain = multiclass_domain

        cards = list(character.cards)
        exchanged_card: CharacterCard | None = None
        if selections.exchange_enabled and selections.exchange_card_id:
            exchanged_card = next(
                (card for card in cards if card.id == selections.exchange_card_id), None
            )
            cards = [card for card in cards if card.id != selections.exchange_card_id]

        acquired: list[str] = []
        card_ids = [selections.domain_card_id]
        if selections.has(AdvancementId.DOMAIN_CARD):
            card_ids.append(selections.bonus_domain_card_id)
        for card_id in card_ids:
            library_card = self._library_card(card_id)
            if library_card is None:
                continue
            new_card = CharacterCard(
                id=f"level-{level}-{library_card.id}",
                card_id=library_card.id,
                location=CardLocation.VAULT.value,
                library_item=library_card,
            )
            cards.append(new_card)
            acquired.append(new_card.id)
        character.cards = cards

        record = AdvancementRecord(
            level=level,
            advancements=tuple(selections.advancements),
            traits_increased=tuple(traits_increased),
            experiences_increased=tuple(experiences_increased),
            hp_slots_added=hp_slots,
            stress_slots_added=stress_slots,
            domain_card_id=selections.domain_card_id if acquired else None,
            acquired_card_ids=tuple(acquired),
            exchanged_card=exchanged_card,
            multiclass_domain=multiclass_domain,
            tier_experience_name=tier_experience_name,
            proficiency_increase=proficiency_increase,
            evasion_increase=evasion_increase,
            cleared_marked_traits=tuple(cleared),
        )
        history = dict(character.advancement_history)
        history[level] = record
        character.advancement_history = history
        character.level = level
        return character, record


def _domain_error(message: str) -> LevelUpValidationError:
    return LevelUpValidationError(field=ValidationField.DOMAIN_CARD, message=message)


__all__ = [
    "STEP_ORDER",
    "clamp_vital_slots",
    "level_modifier_id",
    "LevelUpSelections",
    "LevelUpResult",
    "LevelUpSession",
]
