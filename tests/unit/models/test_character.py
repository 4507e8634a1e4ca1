"""Tests for the character aggregate."""

from __future__ import annotations

import pytest

from daggerheart_engine.models.character import (
    AdvancementRecord,
    Character,
    InventoryItem,
    Modifier,
    Traits,
)
from daggerheart_engine.models.enums import InventoryLocation, Trait


class TestModifier:
    """Tests for Modifier."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(2, 2), (-1.5, -1.5), ("varies", 0), (None, 0), ({"dice": "d4"}, 0), ([1, 2], 0)],
    )
    def test_numeric_value(self, value: object, expected: float) -> None:
        """Test non-numeric values count as zero."""
        assert Modifier(id="m", value=value).numeric_value == expected


class TestTraits:
    """Tests for Traits."""

    def test_get_and_adjusted(self) -> None:
        """Test trait lookup and copy-on-adjust."""
        traits = Traits(agility=1)
        raised = traits.adjusted("agility", 1)

        assert raised.get("agility") == 2
        assert traits.agility == 1

    def test_unknown_trait(self) -> None:
        """Test unknown trait names raise."""
        with pytest.raises(ValueError):
            Traits().get("luck")

    def test_display_name(self) -> None:
        """Test the capitalised trait name."""
        assert Trait.KNOWLEDGE.display_name == "Knowledge"


class TestCharacter:
    """Tests for Character."""

    def test_null_collections_tolerated(self) -> None:
        """Test null joins load as empty collections."""
        character = Character.model_validate(
            {"inventory": None, "cards": None, "modifiers": {"armor": None}, "domains": None}
        )
        assert character.inventory == []
        assert character.cards == []
        assert character.modifiers == {"armor": []}
        assert character.domains == []

    def test_extra_columns_ignored(self) -> None:
        """Test unknown persistence columns are dropped."""
        character = Character.model_validate({"name": "Ava", "created_at": "2024-01-01"})
        assert character.name == "Ava"

    def test_equipped_items(self, leather_armor: InventoryItem) -> None:
        """Test only equipment slots count as equipped."""
        backpack = InventoryItem(id="rope", location=InventoryLocation.BACKPACK)
        odd = InventoryItem(id="odd", location="under_the_bed")
        character = Character(inventory=[backpack, leather_armor, odd])

        assert character.equipped_items == [leather_armor]
        assert character.equipped_armor == leather_armor

    def test_subclass_mastery(self) -> None:
        """Test mastery needs two subclass upgrades."""
        assert Character(subclass_upgrades=1).has_subclass_mastery is False
        assert Character(subclass_upgrades=2).has_subclass_mastery is True

    def test_multiclassed_from_history(self) -> None:
        """Test a multiclass record marks the character multiclassed."""
        character = Character(
            advancement_history={5: AdvancementRecord(level=5, advancements=["multiclass"])}
        )
        assert character.is_multiclassed is True
        assert character.all_domains == []

    def test_all_domains(self) -> None:
        """Test the multiclass domain is appended once."""
        character = Character(domains=["Codex", "Grace"], multiclass_domain="Blade")
        assert character.all_domains == ["Codex", "Grace", "Blade"]

    def test_user_modifiers_copy(self) -> None:
        """Test user modifier lists are returned as copies."""
        character = Character(modifiers={"armor": [Modifier(id="a", value=1)]})
        mods = character.user_modifiers("armor")
        mods.clear()
        assert len(character.modifiers["armor"]) == 1
        assert character.user_modifiers("evasion") == []

    def test_history_keys_from_json(self) -> None:
        """Test string level keys from stored JSON become integers."""
        character = Character.model_validate(
            {"advancement_history": {"2": {"level": 2, "advancements": ["add_hp", "add_stress"]}}}
        )
        assert character.advancement_history[2].advancements == ("add_hp", "add_stress")

    def test_history_level_filled_from_key(self) -> None:
        """Test records stored without a level take it from their key."""
        character = Character.model_validate(
            {
                "level": 3,
                "advancement_history": {
                    "2": {"advancements": ["add_hp", "add_stress"]},
                    "3": AdvancementRecord(advancements=("increase_evasion", "add_hp")),
                },
            }
        )
        assert character.advancement_history[2].level == 2
        assert character.advancement_history[3].level == 3

    def test_duplicate_modifier_ids_keep_first(self) -> None:
        """Test a repeated id within one stat keeps the first modifier."""
        character = Character.model_validate(
            {
                "modifiers": {
                    "hit_points": [
                        {"id": "u1", "name": "Ring", "value": 2},
                        {"id": "u1", "name": "Ring again", "value": 5},
                        {"id": "u2", "value": 1},
                    ],
                    "stress": [{"id": "u1", "value": 1}],
                }
            }
        )
        assert [(mod.id, mod.value) for mod in character.modifiers["hit_points"]] == [
            ("u1", 2),
            ("u2", 1),
        ]
        assert len(character.modifiers["stress"]) == 1
