"""Application state container.

Holds the active character and UI flags for a client session. It is passed
explicitly to the collaborators that need it; the rules engine never reads
or writes it.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from daggerheart_engine.engine.derived_stats import recalculate_character
from daggerheart_engine.models.character import Character


class PendingRoll(BaseModel):
    """A roll prepared for the dice overlay."""

    label: str
    modifier: int = 0
    dice: str | None = None


class AppState(BaseModel):
    """Client-side state for one signed-in player.

    Attributes:
        character: The active character, once loaded.
        is_loading: Whether the character is still being fetched.
        active_tab: The view currently shown.
        is_dice_overlay_open: Whether the dice overlay is visible.
        active_roll: The roll prepared for the overlay.
    """

    model_config = ConfigDict(validate_assignment=True)

    character: Character | None = None
    is_loading: bool = True
    active_tab: Literal["character", "playmat", "inventory", "combat"] = "character"
    is_dice_overlay_open: bool = False
    active_roll: PendingRoll | None = None
    last_roll_total: int | None = Field(default=None, description="Total of the last roll")

    def set_character(self, character: Character | None) -> None:
        """Replace the active character and mark loading finished."""
        self.character = character
        self.is_loading = False

    def snapshot(self) -> Character | None:
        """Copy the active character so it can be restored later."""
        return self.character.model_copy(deep=True) if self.character is not None else None

    def refresh_derived_stats(self) -> None:
        """Recompute the active character's derived stats in place."""
        if self.character is not None:
            self.character = recalculate_character(self.character)

    def prepare_roll(self, label: str, modifier: int = 0, dice: str | None = None) -> None:
        """Open the dice overlay with a prepared roll."""
        self.active_roll = PendingRoll(label=label, modifier=modifier, dice=dice)
        self.is_dice_overlay_open = True

    def close_dice_overlay(self) -> None:
        """Close the dice overlay and clear the prepared roll."""
        self.is_dice_overlay_open = False
        self.active_roll = None


__all__ = [
    "PendingRoll",
    "AppState",
]
