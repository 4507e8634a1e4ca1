"""Character aggregate and its sub-records.

The persistence layer loads a character whole and hands it to the engine.
These models describe that shape. They are deliberately permissive: a
character is never self-validating, malformed legacy fields are tolerated,
and the engine functions return updated copies rather than mutating the
instance they were given.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from daggerheart_engine.models.enums import (
    AdvancementId,
    InventoryLocation,
    ModifierSource,
    Trait,
)


class RulesModel(BaseModel):
    """Base class for mutable rules data records."""

    model_config = ConfigDict(
        frozen=False,
        validate_assignment=True,
        extra="ignore",  # Collaborator rows carry columns the engine ignores
        use_enum_values=True,
    )


# =============================================================================
# Modifiers and Experiences
# =============================================================================


class Modifier(RulesModel):
    """A signed bonus applied to one stat.

    Values supplied by item data are passed through untouched, so a value may
    be a string, a dict such as ``{"dice": "d4"}``, or missing. Aggregation
    only sums numeric values.
    """

    id: str = Field(description="Unique id within one stat's modifier list")
    name: str = Field(default="", description="Display name, usually the item name")
    value: Any = Field(default=0, description="Signed bonus")
    source: ModifierSource = Field(default=ModifierSource.USER)

    @property
    def numeric_value(self) -> int | float:
        """Get the value as a number, treating non-numeric values as zero."""
        if isinstance(self.value, bool):
            return 0
        if isinstance(self.value, int | float):
            return self.value
        return 0


class Experience(RulesModel):
    """A named situational bonus the player can apply to rolls."""

    name: str
    value: int = 2


# =============================================================================
# Stat Blocks
# =============================================================================


class Traits(RulesModel):
    """The six trait scores."""

    agility: int = 0
    strength: int = 0
    finesse: int = 0
    instinct: int = 0
    presence: int = 0
    knowledge: int = 0

    def get(self, trait: str) -> int:
        """Get a trait score by name."""
        return getattr(self, Trait(trait).value)

    def adjusted(self, trait: str, delta: int) -> Traits:
        """Return a copy with one trait shifted by ``delta``."""
        name = Trait(trait).value
        return self.model_copy(update={name: getattr(self, name) + delta})


class Vitals(RulesModel):
    """Current and maximum vital resources.

    ``armor_score`` is the armor slot maximum; ``armor_slots`` is the number
    of slots currently available.
    """

    hit_points_max: int = 6
    hit_points_current: int = 0
    stress_max: int = 6
    stress_current: int = 0
    armor_score: int = 0
    armor_slots: int = 0


class DamageThresholds(RulesModel):
    """Damage thresholds. Ordering is expected but not enforced."""

    minor: int = 1
    major: int = 1
    severe: int = 2


# =============================================================================
# Library Items, Inventory and Cards
# =============================================================================


class LibraryItem(RulesModel):
    """Shared library content joined onto inventory rows and cards.

    Rules-relevant fields usually live in the free-form ``data`` payload.
    """

    id: str = ""
    type: str = ""
    name: str = ""
    domain: str | None = None
    tier: int | None = None
    level: int | None = None
    data: dict[str, Any] | None = Field(default_factory=dict)


class InventoryItem(RulesModel):
    """An item owned by a character."""

    id: str
    name: str = ""
    location: str = InventoryLocation.BACKPACK.value
    quantity: int = 1
    item_id: str | None = None
    library_item: LibraryItem | None = None

    @property
    def is_equipped(self) -> bool:
        """Check whether the item sits in an equipment slot."""
        try:
            return InventoryLocation(self.location).is_equipped
        except ValueError:
            return False

    @property
    def payload(self) -> dict[str, Any]:
        """Get the library data payload, or an empty dict."""
        if self.library_item is None or not self.library_item.data:
            return {}
        return self.library_item.data


class CharacterCard(RulesModel):
    """A card in a character's collection."""

    id: str
    card_id: str = ""
    location: str = "vault"
    library_item: LibraryItem | None = None


# =============================================================================
# Advancement History
# =============================================================================


class AdvancementRecord(BaseModel):
    """Immutable record of what one level-up changed.

    Everything a de-level needs to reverse directly stored state is kept
    here; derived stats are recomputed instead of being recorded.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    level: int | None = None
    advancements: tuple[str, ...] = ()
    traits_increased: tuple[str, ...] = ()
    experiences_increased: tuple[int, ...] = ()
    hp_slots_added: int = 0
    stress_slots_added: int = 0
    domain_card_id: str | None = None
    acquired_card_ids: tuple[str, ...] = ()
    exchanged_card: CharacterCard | None = None
    multiclass_domain: str | None = None
    tier_experience_name: str | None = None
    proficiency_increase: int = 0
    evasion_increase: int = 0
    cleared_marked_traits: tuple[str, ...] = ()

    @field_validator("advancements", mode="before")
    @classmethod
    def coerce_advancement_ids(cls, v: Any) -> Any:
        """Store advancement ids as plain strings."""
        if isinstance(v, list | tuple):
            return tuple(str(item) for item in v)
        return v

    @property
    def took_subclass_card(self) -> bool:
        """Check whether this level took the next subclass card."""
        return AdvancementId.SUBCLASS_CARD.value in self.advancements

    @property
    def took_multiclass(self) -> bool:
        """Check whether this level took the multiclass advancement."""
        return AdvancementId.MULTICLASS.value in self.advancements


# =============================================================================
# Character
# =============================================================================


class Character(RulesModel):
    """Aggregate root for one player character.

    Attributes:
        level: Character level (1..10).
        domains: Domains granted by the character's class.
        class_base_hp: Starting hit points of the class, if known.
        modifiers: User-entered modifiers keyed by stat name.
        marked_traits: Traits already boosted in the current tier.
        advancement_history: Records keyed by the level they were taken at.
        subclass_upgrades: Subclass cards taken beyond the foundation card.
        multiclass_domain: Domain gained through multiclassing, if any.
    """

    id: str = ""
    name: str = ""
    level: int = 1
    class_name: str | None = None
    subclass: str | None = None
    domains: list[str] = Field(default_factory=list)

    traits: Traits = Field(default_factory=Traits)
    vitals: Vitals = Field(default_factory=Vitals)
    damage_thresholds: DamageThresholds = Field(default_factory=DamageThresholds)
    hope: int = 2
    proficiency: int = 1
    evasion: int = 10
    class_base_hp: int | None = None

    experiences: list[Experience] = Field(default_factory=list)
    modifiers: dict[str, list[Modifier]] = Field(default_factory=dict)
    inventory: list[InventoryItem] = Field(default_factory=list)
    cards: list[CharacterCard] = Field(default_factory=list)
    marked_traits: dict[str, bool] = Field(default_factory=dict)
    advancement_history: dict[int, AdvancementRecord] = Field(default_factory=dict)

    subclass_upgrades: int = 0
    multiclass_domain: str | None = None

    @field_validator("modifiers", mode="before")
    @classmethod
    def drop_null_modifier_lists(cls, v: Any) -> Any:
        """Treat a null column or null per-stat list as empty."""
        if v is None:
            return {}
        if isinstance(v, dict):
            return {k: (mods or []) for k, mods in v.items()}
        return v

    @field_validator("modifiers")
    @classmethod
    def keep_first_modifier_per_id(
        cls, v: dict[str, list[Modifier]]
    ) -> dict[str, list[Modifier]]:
        """Drop later modifiers whose id repeats within one stat's list."""
        deduped: dict[str, list[Modifier]] = {}
        for stat, modifiers in v.items():
            seen: set[str] = set()
            deduped[stat] = []
            for modifier in modifiers:
                if modifier.id not in seen:
                    seen.add(modifier.id)
                    deduped[stat].append(modifier)
        return deduped

    @field_validator("advancement_history", mode="before")
    @classmethod
    def fill_record_levels(cls, v: Any) -> Any:
        """Take a record's level from its history key when the record omits it."""
        if not isinstance(v, dict):
            return v
        filled: dict[Any, Any] = {}
        for key, record in v.items():
            if isinstance(record, dict) and record.get("level") is None:
                record = {**record, "level": int(key)}
            elif isinstance(record, AdvancementRecord) and record.level is None:
                record = record.model_copy(update={"level": int(key)})
            filled[key] = record
        return filled

    @field_validator("inventory", "cards", "experiences", "domains", mode="before")
    @classmethod
    def null_to_empty_list(cls, v: Any) -> Any:
        """Treat a missing join as an empty list."""
        return [] if v is None else v

    @property
    def equipped_items(self) -> list[InventoryItem]:
        """Get items in equipment slots."""
        return [item for item in self.inventory if item.is_equipped]

    @property
    def equipped_armor(self) -> InventoryItem | None:
        """Get the first item in the armor slot."""
        for item in self.inventory:
            if item.location == InventoryLocation.EQUIPPED_ARMOR:
                return item
        return None

    @property
    def has_subclass_mastery(self) -> bool:
        """Check whether the mastery subclass card has been taken."""
        return self.subclass_upgrades >= 2

    @property
    def is_multiclassed(self) -> bool:
        """Check whether the character has multiclassed."""
        if self.multiclass_domain:
            return True
        return any(record.took_multiclass for record in self.advancement_history.values())

    @property
    def all_domains(self) -> list[str]:
        """Get class domains plus any multiclass domain."""
        domains = list(self.domains)
        if self.multiclass_domain and self.multiclass_domain not in domains:
            domains.append(self.multiclass_domain)
        return domains

    @property
    def marked_trait_names(self) -> set[str]:
        """Get the names of traits currently marked."""
        return {name for name, marked in self.marked_traits.items() if marked}

    def user_modifiers(self, stat: str) -> list[Modifier]:
        """Get the user-entered modifiers for a stat."""
        return list(self.modifiers.get(stat, []))


__all__ = [
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
]
