"""Tests for level progression data."""

from __future__ import annotations

import pytest

from daggerheart_engine.core.exceptions import InvalidLevelError
from daggerheart_engine.models.character import DamageThresholds, Experience
from daggerheart_engine.models.progression import (
    ADVANCEMENT_CATALOG,
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
    get_tier,
    get_tier_levels,
    has_tier_achievements,
    is_advancement_available,
    validate_advancement_slots,
    validate_damage_thresholds,
)


class TestAdvancementCatalog:
    """Tests for the advancement catalog."""

    def test_catalog_costs(self) -> None:
        """Test every option's slot cost."""
        costs = {advancement_id: option.cost for advancement_id, option in ADVANCEMENT_CATALOG.items()}
        assert costs == {
            "increase_traits": 1,
            "add_hp": 1,
            "add_stress": 1,
            "increase_experience": 1,
            "domain_card": 1,
            "increase_evasion": 1,
            "subclass_card": 1,
            "increase_proficiency": 2,
            "multiclass": 2,
        }

    def test_multiclass_constraints(self) -> None:
        """Test multiclass needs level 5 and is taken once."""
        option = get_advancement_option("multiclass")
        assert option is not None
        assert option.min_level == 5
        assert option.once_per_character is True

    def test_unknown_option(self) -> None:
        """Test unknown ids have no option and cost one slot."""
        assert get_advancement_option("fly") is None
        assert get_advancement_slot_cost("fly") == 1

    @pytest.mark.parametrize(
        ("selected", "expected"),
        [
            (["add_hp", "add_stress"], (True, 2)),
            (["increase_proficiency"], (True, 2)),
            (["add_hp"], (False, 1)),
            (["multiclass", "add_hp"], (False, 3)),
        ],
    )
    def test_validate_advancement_slots(
        self,
        selected: list[str],
        expected: tuple[bool, int],
    ) -> None:
        """Test slot totals must equal exactly 2."""
        assert validate_advancement_slots(selected) == expected

    def test_multiclass_not_offered_in_tier_one(self) -> None:
        """Test tier 1 offers everything except multiclass."""
        assert "multiclass" not in get_advancements_for_tier(1)
        assert "multiclass" in get_advancements_for_tier(3)
        assert get_advancements_for_tier(7) == []

    def test_is_advancement_available(self) -> None:
        """Test advancements from higher tiers are unavailable."""
        assert is_advancement_available(3, 2) is True
        assert is_advancement_available(2, 3) is False


class TestTiers:
    """Tests for tier boundaries and achievements."""

    @pytest.mark.parametrize(
        ("level", "tier"),
        [(1, 1), (2, 2), (4, 2), (5, 3), (7, 3), (8, 4), (10, 4)],
    )
    def test_get_tier(self, level: int, tier: int) -> None:
        """Test tier boundaries."""
        assert get_tier(level) == tier

    @pytest.mark.parametrize("level", [0, 11, -1])
    def test_get_tier_out_of_range(self, level: int) -> None:
        """Test levels outside 1..10 raise."""
        with pytest.raises(InvalidLevelError) as exc_info:
            get_tier(level)
        assert exc_info.value.details["level"] == level

    def test_get_tier_levels(self) -> None:
        """Test tier level ranges."""
        assert list(get_tier_levels(1)) == [1]
        assert list(get_tier_levels(3)) == [5, 6, 7]
        assert list(get_tier_levels(9)) == []

    @pytest.mark.parametrize(("level", "expected"), [(2, True), (3, False), (5, True), (8, True), (9, False)])
    def test_has_tier_achievements(self, level: int, expected: bool) -> None:
        """Test only levels 2, 5 and 8 trigger achievements."""
        assert has_tier_achievements(level) is expected

    def test_achievements_at_level_two(self) -> None:
        """Test level 2 grants an experience and proficiency without clearing."""
        achievements = calculate_tier_achievements(2)
        assert achievements.new_experience_value == 2
        assert achievements.proficiency_increase == 1
        assert achievements.should_clear_marked_traits is False

    @pytest.mark.parametrize("level", [5, 8])
    def test_achievements_clear_marks(self, level: int) -> None:
        """Test levels 5 and 8 clear marked traits."""
        assert calculate_tier_achievements(level).should_clear_marked_traits is True

    def test_no_achievements(self) -> None:
        """Test other levels grant nothing."""
        achievements = calculate_tier_achievements(6)
        assert achievements.new_experience_value is None
        assert achievements.proficiency_increase == 0

    def test_custom_experience_value(self) -> None:
        """Test the experience value can be overridden."""
        assert calculate_tier_achievements(5, experience_value=3).new_experience_value == 3

    def test_level_up_config(self) -> None:
        """Test the combined configuration for a level."""
        config = get_level_up_config(8)
        assert config.tier == 4
        assert config.tier_achievements.should_clear_marked_traits is True
        assert config.max_domain_card_level == 8


class TestExperiencesAndThresholds:
    """Tests for experience and threshold helpers."""

    def test_create_new_experience(self) -> None:
        """Test tier experiences are named after their level."""
        assert create_new_experience(5) == Experience(name="Experience (Level 5)", value=2)

    def test_add_experience_does_not_mutate(self) -> None:
        """Test a new list is returned."""
        experiences = [Experience(name="Sailor")]
        result = add_experience_at_level_up(experiences, 2)
        assert len(result) == 2
        assert len(experiences) == 1

    def test_new_damage_thresholds(self) -> None:
        """Test the preview raises major and severe by one."""
        current = DamageThresholds(minor=1, major=6, severe=13)
        assert calculate_new_damage_thresholds(current) == DamageThresholds(minor=1, major=7, severe=14)

    @pytest.mark.parametrize(
        ("minor", "major", "severe", "expected"),
        [(1, 2, 4, True), (0, 2, 4, False), (1, 1, 2, False), (1, 5, 5, False)],
    )
    def test_validate_damage_thresholds(
        self,
        minor: int,
        major: int,
        severe: int,
        expected: bool,
    ) -> None:
        """Test thresholds must be positive and strictly increasing."""
        thresholds = DamageThresholds(minor=minor, major=major, severe=severe)
        assert validate_damage_thresholds(thresholds) is expected

    @pytest.mark.parametrize(
        ("level", "selected", "expected"),
        [(2, [], 1), (3, [], 0), (5, ["increase_proficiency"], 2), (4, ["increase_proficiency"], 1)],
    )
    def test_proficiency_increase(self, level: int, selected: list[str], expected: int) -> None:
        """Test proficiency from achievements and the advancement add up."""
        assert calculate_proficiency_increase(level, selected) == expected


class TestClassDomains:
    """Tests for the class to domain mapping."""

    def test_known_class(self) -> None:
        """Test a class maps to its two domains."""
        assert get_class_domains("Bard") == ["Codex", "Grace"]

    def test_case_sensitive(self) -> None:
        """Test lookups are case-sensitive."""
        assert get_class_domains("bard") == []

    def test_all_class_names(self) -> None:
        """Test every class is listed."""
        assert len(get_all_class_names()) == 9
        assert "Wizard" in get_all_class_names()
