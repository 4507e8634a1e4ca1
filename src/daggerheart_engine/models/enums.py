"""Enumeration types for the Daggerheart rules engine.

This module defines the fixed vocabularies the engine reasons about:
traits, modifier sources, inventory and card locations, vital kinds,
the advancement catalog ids, validation field tags and the ordered
steps of a level-up session.
"""

from __future__ import annotations

from enum import StrEnum

from daggerheart_engine.core.constants import EQUIPPED_LOCATIONS


class Trait(StrEnum):
    """The six character traits."""

    AGILITY = "agility"
    STRENGTH = "strength"
    FINESSE = "finesse"
    INSTINCT = "instinct"
    PRESENCE = "presence"
    KNOWLEDGE = "knowledge"

    @property
    def display_name(self) -> str:
        """Get the capitalised trait name.

        Returns:
            Trait name as printed on a character sheet (e.g. 'Agility').
        """
        return self.value.capitalize()


class ModifierSource(StrEnum):
    """Where a modifier came from.

    System modifiers are derived from equipment and recomputed whenever
    equipment changes. User modifiers are entered by hand and persist
    until replaced.
    """

    SYSTEM = "system"
    USER = "user"


class InventoryLocation(StrEnum):
    """Inventory slots an item can occupy."""

    EQUIPPED_PRIMARY = "equipped_primary"
    EQUIPPED_SECONDARY = "equipped_secondary"
    EQUIPPED_ARMOR = "equipped_armor"
    ARMOR = "armor"
    BACKPACK = "backpack"

    @property
    def is_equipped(self) -> bool:
        """Check whether items in this slot contribute modifiers.

        Returns:
            True for the primary, secondary and armor equipment slots.
        """
        return self.value in EQUIPPED_LOCATIONS


class CardLocation(StrEnum):
    """Where a character's card currently lives."""

    LOADOUT = "loadout"
    VAULT = "vault"
    FEATURE = "feature"


class VitalKind(StrEnum):
    """Vital resources that are clamped against a maximum."""

    HIT_POINTS = "hit_points"
    STRESS = "stress"
    ARMOR_SLOTS = "armor_slots"
    HOPE = "hope"


class AdvancementId(StrEnum):
    """Identifiers of the advancement catalog entries."""

    INCREASE_TRAITS = "increase_traits"
    ADD_HP = "add_hp"
    ADD_STRESS = "add_stress"
    INCREASE_EXPERIENCE = "increase_experience"
    DOMAIN_CARD = "domain_card"
    INCREASE_EVASION = "increase_evasion"
    SUBCLASS_CARD = "subclass_card"
    INCREASE_PROFICIENCY = "increase_proficiency"
    MULTICLASS = "multiclass"


class ValidationField(StrEnum):
    """Stable tags used to group level-up validation errors."""

    NEW_LEVEL = "newLevel"
    ADVANCEMENTS = "advancements"
    DOMAIN_CARD = "domainCard"
    TRAITS = "traits"
    EXPERIENCES = "experiences"
    VITAL_SLOTS = "vitalSlots"
    DOMAIN_EXCHANGE = "domainExchange"


class LevelUpStep(StrEnum):
    """Ordered steps of a level-up session."""

    TIER_PREVIEW = "tier_preview"
    ADVANCEMENT_SELECTION = "advancement_selection"
    CONFIGURATION = "configuration"
    THRESHOLD_PREVIEW = "threshold_preview"
    DOMAIN_CARD_SELECTION = "domain_card_selection"
    COMMIT = "commit"


__all__ = [
    "Trait",
    "ModifierSource",
    "InventoryLocation",
    "CardLocation",
    "VitalKind",
    "AdvancementId",
    "ValidationField",
    "LevelUpStep",
]
