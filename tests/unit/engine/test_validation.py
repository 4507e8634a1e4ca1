"""Tests for level-up validation rules."""

from __future__ import annotations

import pytest

from daggerheart_engine.core.config import RulesSettings
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
from daggerheart_engine.models.character import AdvancementRecord, Experience
from daggerheart_engine.models.enums import ValidationField


def fields(errors: list[LevelUpValidationError]) -> set[str]:
    """Collect the field tags of a list of errors."""
    return {str(error.field) for error in errors}


class TestValidateNewLevel:
    """Tests for validate_new_level."""

    def test_valid(self, rules: RulesSettings) -> None:
        """Test a one-level advance is valid."""
        assert validate_new_level(1, 2, rules=rules) == []

    @pytest.mark.parametrize(("current", "new"), [(3, 3), (4, 2)])
    def test_not_higher(self, current: int, new: int, rules: RulesSettings) -> None:
        """Test equal or lower levels are rejected."""
        errors = validate_new_level(current, new, rules=rules)
        assert len(errors) == 1
        assert errors[0].field == ValidationField.NEW_LEVEL

    def test_above_maximum(self, rules: RulesSettings) -> None:
        """Test levels above 10 are rejected."""
        errors = validate_new_level(10, 11, rules=rules)
        assert [error.message for error in errors] == ["Maximum level is 10"]

    def test_below_minimum(self, rules: RulesSettings) -> None:
        """Test levels below 1 are rejected with one error per violation."""
        errors = validate_new_level(-2, 0, rules=rules)
        assert [error.message for error in errors] == ["Minimum level is 1"]


class TestValidateAdvancementSelections:
    """Tests for validate_advancement_selections."""

    @pytest.mark.parametrize(
        "selected",
        [
            ["add_hp", "add_stress"],
            ["increase_traits", "domain_card"],
            ["increase_proficiency"],
            ["multiclass"],
        ],
    )
    def test_exactly_two_slots_accepted(self, selected: list[str], rules: RulesSettings) -> None:
        """Test selections costing exactly two slots are accepted."""
        assert validate_advancement_selections(selected, 5, rules=rules) == []

    @pytest.mark.parametrize(
        "selected",
        [
            ["add_hp"],
            ["add_hp", "add_stress", "increase_evasion"],
            ["increase_proficiency", "add_hp"],
            ["multiclass", "increase_proficiency"],
        ],
    )
    def test_wrong_total_rejected(self, selected: list[str], rules: RulesSettings) -> None:
        """Test any other slot total is rejected."""
        errors = validate_advancement_selections(selected, 5, rules=rules)
        assert len(errors) == 1
        assert "Total advancement slots must equal 2" in errors[0].message

    def test_repeated_advancement_rejected(self, rules: RulesSettings) -> None:
        """Test an advancement cannot be chosen twice in one level."""
        errors = validate_advancement_selections(
            ["increase_evasion", "increase_evasion"], 3, rules=rules
        )
        assert [error.message for error in errors] == [
            "Cannot select increase_evasion more than once"
        ]
        assert errors[0].field == ValidationField.ADVANCEMENTS

    def test_empty_selection(self, rules: RulesSettings) -> None:
        """Test an empty selection gets its own error."""
        errors = validate_advancement_selections([], 2, rules=rules)
        assert [error.message for error in errors] == ["Must select at least one advancement"]

    def test_subclass_after_mastery(self, rules: RulesSettings) -> None:
        """Test the subclass card is blocked once mastery is held."""
        errors = validate_advancement_selections(
            ["subclass_card", "add_hp"], 6, has_mastery=True, rules=rules
        )
        assert len(errors) == 1
        assert "already have mastery" in errors[0].message

    def test_multiclass_twice(self, rules: RulesSettings) -> None:
        """Test multiclassing is blocked when already multiclassed."""
        errors = validate_advancement_selections(
            ["multiclass"], 8, is_multiclassed=True, rules=rules
        )
        assert len(errors) == 1
        assert "already multiclassed" in errors[0].message

    def test_unknown_advancement(self, rules: RulesSettings) -> None:
        """Test unknown ids are reported."""
        errors = validate_advancement_selections(["fly", "add_hp"], 2, rules=rules)
        assert [error.message for error in errors] == ["Unknown advancement: fly"]


class TestValidateAdvancementAvailability:
    """Tests for validate_advancement_availability."""

    def test_multiclass_needs_level_five(self) -> None:
        """Test multiclass is rejected before level 5."""
        errors = validate_advancement_availability(["multiclass"], 4)
        assert [error.message for error in errors] == ["Multiclass requires level 5"]

    def test_multiclass_allowed_at_five(self) -> None:
        """Test multiclass is accepted at level 5 with a clean history."""
        assert validate_advancement_availability(["multiclass"], 5, {}) == []

    def test_multiclass_once_per_character(self) -> None:
        """Test multiclass may only be taken once."""
        history = {5: AdvancementRecord(level=5, advancements=["multiclass"])}
        errors = validate_advancement_availability(["multiclass"], 8, history)
        assert [error.message for error in errors] == ["Multiclass may only be taken once"]

    def test_subclass_blocked_by_multiclass_in_tier(self) -> None:
        """Test a subclass card is blocked after multiclassing in the same tier."""
        history = {5: AdvancementRecord(level=5, advancements=["multiclass"])}
        errors = validate_advancement_availability(["subclass_card", "add_hp"], 6, history)
        assert len(errors) == 1
        assert "same tier as multiclass" in errors[0].message

    def test_multiclass_blocked_by_subclass_in_tier(self) -> None:
        """Test multiclassing is blocked after a subclass card in the same tier."""
        history = {5: AdvancementRecord(level=5, advancements=["subclass_card", "add_hp"])}
        errors = validate_advancement_availability(["multiclass"], 6, history)
        assert len(errors) == 1
        assert "same tier as an upgraded subclass card" in errors[0].message

    def test_subclass_in_earlier_tier_does_not_block(self) -> None:
        """Test a subclass card from a previous tier is no conflict."""
        history = {3: AdvancementRecord(level=3, advancements=["subclass_card", "add_hp"])}
        assert validate_advancement_availability(["multiclass"], 5, history) == []

    def test_both_in_one_selection(self) -> None:
        """Test selecting both conflicting advancements flags both."""
        errors = validate_advancement_availability(["multiclass", "subclass_card"], 5)
        assert len(errors) == 2


class TestValidateMulticlassSelection:
    """Tests for validate_multiclass_selection."""

    def test_valid(self) -> None:
        """Test a new class domain is accepted."""
        assert (
            validate_multiclass_selection(
                "Warrior", "Blade", primary_class="Bard", current_domains=["Codex", "Grace"]
            )
            == []
        )

    @pytest.mark.parametrize(
        ("class_name", "domain", "message"),
        [
            (None, None, "Must choose a class to multiclass into"),
            ("Bard", "Codex", "Cannot multiclass into your own class"),
            ("Paladin", "Valor", "Unknown class: Paladin"),
            ("Warrior", None, "Must choose a domain from Warrior"),
            ("Warrior", "Arcana", "Arcana is not a domain of Warrior"),
            ("Wizard", "Codex", "Already have access to Codex"),
        ],
    )
    def test_invalid(self, class_name: str | None, domain: str | None, message: str) -> None:
        """Test each invalid choice is reported."""
        errors = validate_multiclass_selection(
            class_name, domain, primary_class="Bard", current_domains=["Codex", "Grace"]
        )
        assert [error.message for error in errors] == [message]


class TestValidateDomainCardSelection:
    """Tests for validate_domain_card_selection."""

    @pytest.mark.parametrize("card_level", [1, 3])
    def test_valid(self, card_level: int) -> None:
        """Test cards at or below the character level are accepted."""
        assert validate_domain_card_selection(card_level, 3) == []

    def test_above_level(self) -> None:
        """Test cards above the character level are rejected."""
        errors = validate_domain_card_selection(4, 3)
        assert fields(errors) == {"domainCard"}

    @pytest.mark.parametrize("card_level", [0, -1])
    def test_non_positive_level(self, card_level: int) -> None:
        """Test card levels below 1 are rejected."""
        assert len(validate_domain_card_selection(card_level, 3)) == 1


class TestValidateTraitSelection:
    """Tests for validate_trait_selection."""

    def test_valid(self) -> None:
        """Test two distinct unmarked traits are accepted."""
        assert validate_trait_selection(["agility", "presence"], {"strength": True}) == []

    @pytest.mark.parametrize("selected", [[], ["agility"], ["agility", "finesse", "instinct"]])
    def test_wrong_count(self, selected: list[str]) -> None:
        """Test anything but two traits is rejected."""
        errors = validate_trait_selection(selected)
        assert any("exactly 2 traits" in error.message for error in errors)

    def test_duplicate(self) -> None:
        """Test the same trait cannot be picked twice."""
        errors = validate_trait_selection(["agility", "agility"])
        assert [error.message for error in errors] == ["Cannot select the same trait twice"]

    def test_marked_trait(self) -> None:
        """Test marked traits are rejected."""
        errors = validate_trait_selection(["agility", "strength"], {"strength": True})
        assert len(errors) == 1
        assert "already marked" in errors[0].message

    def test_unmarked_flag_is_ignored(self) -> None:
        """Test a trait flagged false counts as unmarked."""
        assert validate_trait_selection(["agility", "strength"], {"strength": False}) == []

    def test_marked_as_collection(self) -> None:
        """Test marks may be given as a collection of names."""
        errors = validate_trait_selection(["agility", "strength"], ["agility"])
        assert fields(errors) == {"traits"}

    def test_unknown_trait(self) -> None:
        """Test unknown trait ids are rejected."""
        errors = validate_trait_selection(["agility", "luck"])
        assert [error.message for error in errors] == ["Trait luck not found"]


class TestValidateExperienceSelection:
    """Tests for validate_experience_selection."""

    @pytest.fixture
    def experiences(self) -> list[Experience]:
        """Provide three experiences."""
        return [Experience(name=f"Experience {index}") for index in range(3)]

    def test_valid(self, experiences: list[Experience]) -> None:
        """Test two distinct in-bounds indices are accepted."""
        assert validate_experience_selection([0, 2], experiences) == []

    def test_wrong_count(self, experiences: list[Experience]) -> None:
        """Test a single index is rejected."""
        assert len(validate_experience_selection([0], experiences)) == 1

    def test_duplicate(self, experiences: list[Experience]) -> None:
        """Test the same index cannot be picked twice."""
        errors = validate_experience_selection([1, 1], experiences)
        assert [error.message for error in errors] == ["Cannot select the same experience twice"]

    @pytest.mark.parametrize("index", [-1, 3])
    def test_out_of_bounds(self, index: int, experiences: list[Experience]) -> None:
        """Test indices outside the list are rejected."""
        errors = validate_experience_selection([0, index], experiences)
        assert [error.message for error in errors] == [f"Experience at index {index} not found"]


class TestValidateDomainCardExchange:
    """Tests for validate_domain_card_exchange."""

    def test_disabled(self) -> None:
        """Test nothing is checked when exchange is off."""
        assert validate_domain_card_exchange(False, None, None, 5) == []

    def test_missing_card(self) -> None:
        """Test a card must be chosen when exchange is on."""
        errors = validate_domain_card_exchange(True, None, None, 2)
        assert fields(errors) == {"domainExchange"}

    def test_unknown_level(self) -> None:
        """Test an exchanged card without a level is rejected."""
        errors = validate_domain_card_exchange(True, "cc-1", None, 2)
        assert "Could not determine level" in errors[0].message

    @pytest.mark.parametrize(("existing", "new"), [(2, 2), (3, 1)])
    def test_trade_down_or_sideways(self, existing: int, new: int) -> None:
        """Test the new card may match or be below the exchanged one."""
        assert validate_domain_card_exchange(True, "cc-1", existing, new) == []

    def test_trade_up_rejected(self) -> None:
        """Test the new card cannot exceed the exchanged one."""
        assert len(validate_domain_card_exchange(True, "cc-1", 1, 2)) == 1


class TestValidateVitalSlotAddition:
    """Tests for validate_vital_slot_addition."""

    @pytest.mark.parametrize("slots", [1, 3, 2.0])
    def test_valid(self, slots: object) -> None:
        """Test positive integers are accepted."""
        assert validate_vital_slot_addition("hp", slots) == []

    @pytest.mark.parametrize("slots", [0, -2, 1.5, "2", None, True])
    def test_invalid(self, slots: object) -> None:
        """Test zero, negatives and non-integers are rejected."""
        errors = validate_vital_slot_addition("stress", slots)
        assert errors
        assert fields(errors) == {"vitalSlots"}


class TestValidateCompleteLevelUp:
    """Tests for whole-transaction validation."""

    def test_valid_minimal(self, rules: RulesSettings) -> None:
        """Test a simple hit point and stress level-up is valid."""
        proposal = LevelUpProposal(
            current_level=1,
            new_level=2,
            selected_advancements=["add_hp", "add_stress"],
        )
        assert validate_complete_level_up(proposal, rules=rules) == []

    def test_configuration_checked_only_when_selected(self, rules: RulesSettings) -> None:
        """Test trait selections are ignored unless traits are increased."""
        proposal = LevelUpProposal(
            current_level=1,
            new_level=2,
            selected_advancements=["add_hp", "increase_evasion"],
            trait_ids=["luck"],
        )
        assert validate_complete_level_up(proposal, rules=rules) == []

    def test_collects_errors_across_fields(self, rules: RulesSettings) -> None:
        """Test errors from several validators are aggregated."""
        proposal = LevelUpProposal(
            current_level=3,
            new_level=3,
            selected_advancements=["increase_traits", "increase_experience"],
            trait_ids=["agility"],
            experience_indices=[0, 5],
            experience_count=2,
            domain_card_level=4,
        )

        errors = validate_complete_level_up(proposal, rules=rules)

        assert fields(errors) == {"newLevel", "traits", "experiences", "domainCard"}

    def test_availability_checked_with_history(self, rules: RulesSettings) -> None:
        """Test history-dependent rules run when a history is supplied."""
        proposal = LevelUpProposal(
            current_level=3,
            new_level=4,
            selected_advancements=["multiclass"],
            advancement_history={},
        )
        errors = validate_complete_level_up(proposal, rules=rules)
        assert [error.message for error in errors] == ["Multiclass requires level 5"]

    def test_availability_skipped_for_invalid_level(self, rules: RulesSettings) -> None:
        """Test out-of-range levels report only the level error for availability."""
        proposal = LevelUpProposal(
            current_level=10,
            new_level=11,
            selected_advancements=["add_hp", "add_stress"],
            advancement_history={},
        )
        errors = validate_complete_level_up(proposal, rules=rules)
        assert fields(errors) == {"newLevel"}

    def test_exchange_validated_with_domain_card(self, rules: RulesSettings) -> None:
        """Test exchange rules apply alongside the domain card."""
        proposal = LevelUpProposal(
            current_level=2,
            new_level=3,
            selected_advancements=["add_hp", "add_stress"],
            domain_card_level=3,
            exchange_enabled=True,
            exchange_card_id="cc-1",
            exchange_card_level=1,
        )
        errors = validate_complete_level_up(proposal, rules=rules)
        assert fields(errors) == {"domainExchange"}


class TestErrorHelpers:
    """Tests for is_level_up_valid and group_errors_by_field."""

    def test_is_level_up_valid(self) -> None:
        """Test validity is the absence of errors."""
        assert is_level_up_valid([]) is True
        error = LevelUpValidationError(field=ValidationField.TRAITS, message="x")
        assert is_level_up_valid([error]) is False

    def test_group_empty(self) -> None:
        """Test grouping no errors gives an empty mapping."""
        assert group_errors_by_field([]) == {}

    def test_group_by_field(self) -> None:
        """Test three errors across two fields give two keys."""
        errors = [
            LevelUpValidationError(field=ValidationField.TRAITS, message="first"),
            LevelUpValidationError(field=ValidationField.EXPERIENCES, message="second"),
            LevelUpValidationError(field=ValidationField.TRAITS, message="third"),
        ]

        grouped = group_errors_by_field(errors)

        assert grouped == {"traits": ["first", "third"], "experiences": ["second"]}
