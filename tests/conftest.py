"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Daggerheart rules engine test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from daggerheart_engine.core.config import RulesSettings
from daggerheart_engine.models.character import (
    Character,
    CharacterCard,
    Experience,
    InventoryItem,
    LibraryItem,
    Traits,
    Vitals,
)


if TYPE_CHECKING:
    from collections.abc import Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from daggerheart_engine.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def rules() -> RulesSettings:
    """Provide rules settings with published defaults.

    Returns:
        RulesSettings with every field at its default.
    """
    return RulesSettings()


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def leather_armor() -> InventoryItem:
    """Provide an equipped armor item with base score and thresholds.

    Returns:
        InventoryItem in the armor slot.
    """
    return InventoryItem(
        id="inv-armor",
        name="Leather Armor",
        location="equipped_armor",
        library_item=LibraryItem(
            id="lib-leather",
            type="armor",
            name="Leather Armor",
            data={"base_score": 3, "base_thresholds": "6/13"},
        ),
    )


@pytest.fixture
def sample_character() -> Character:
    """Provide a level 1 Bard with two experiences.

    Returns:
        Character with no equipment or history.
    """
    return Character(
        id="char-1",
        name="Ava",
        level=1,
        class_name="Bard",
        subclass="Troubadour",
        domains=["Codex", "Grace"],
        traits=Traits(agility=0, strength=-1, finesse=1, instinct=0, presence=2, knowledge=1),
        vitals=Vitals(hit_points_max=6, hit_points_current=0, stress_max=6, armor_score=0),
        hope=2,
        proficiency=1,
        evasion=10,
        class_base_hp=5,
        experiences=[
            Experience(name="Wandering Minstrel", value=2),
            Experience(name="Silver Tongue", value=2),
        ],
    )


@pytest.fixture
def card_library() -> list[dict[str, Any]]:
    """Provide domain cards across the Bard domains and one other.

    Returns:
        List of library card records as a persistence layer returns them.
    """
    return [
        {"id": "book-of-ava", "type": "spell", "name": "Book of Ava", "domain": "Codex", "data": {"level": 1}},
        {"id": "inspirational", "type": "ability", "name": "Inspirational Words", "domain": "Grace", "data": {"level": 1}},
        {"id": "deft-deceiver", "type": "ability", "name": "Deft Deceiver", "domain": "Grace", "data": {"level": 1}},
        {"id": "tell-no-lies", "type": "spell", "name": "Tell No Lies", "domain": "Grace", "data": {"level": 2}},
        {"id": "book-of-illiat", "type": "spell", "name": "Book of Illiat", "domain": "Codex", "data": {"level": 3}},
        {"id": "get-back-up", "type": "ability", "name": "Get Back Up", "domain": "Blade", "data": {"level": 1}},
    ]


@pytest.fixture
def owned_card() -> CharacterCard:
    """Provide a level 1 Grace card already in the character's vault.

    Returns:
        CharacterCard joined with its library item.
    """
    return CharacterCard(
        id="cc-inspirational",
        card_id="inspirational",
        location="loadout",
        library_item=LibraryItem(
            id="inspirational",
            type="ability",
            name="Inspirational Words",
            domain="Grace",
            data={"level": 1},
        ),
    )
