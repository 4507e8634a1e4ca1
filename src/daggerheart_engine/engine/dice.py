"""Dice notation parsing and damage scaling.

This module reads the free-form damage strings found on weapons and cards
("2d6+1d4+3", "d8 phy", "1d10-1") into die terms and a flat modifier, and
rescales weapon damage by proficiency. It never rolls dice; a roller
consumes the parsed output.

Parsing is tolerant: damage type annotations and whitespace are stripped,
unrecognised segments are ignored, and malformed input degrades to an empty
result rather than raising.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from daggerheart_engine.core.constants import DAMAGE_TYPE_ANNOTATIONS
from daggerheart_engine.core.exceptions import DiceNotationError
from daggerheart_engine.core.logging import get_logger


logger = get_logger(__name__)

_ANNOTATION_PATTERN = re.compile("(" + "|".join(DAMAGE_TYPE_ANNOTATIONS) + ")", re.IGNORECASE)
_WHITESPACE_PATTERN = re.compile(r"\s+")
_SEGMENT_PATTERN = re.compile(r"[+-]?[^+-]+")
_DIE_PATTERN = re.compile(r"^(\d+)?d(\d+)$")
_LEADING_INT_PATTERN = re.compile(r"^\d+")


@dataclass(frozen=True)
class DieTerm:
    """A single ``NdM`` term.

    Attributes:
        count: Number of dice.
        sides: Faces per die.
    """

    count: int
    sides: int

    @classmethod
    def parse(cls, token: str) -> DieTerm:
        """Parse one die token such as ``d8`` or ``2d6``.

        Raises:
            DiceNotationError: If the token is not a die term.
        """
        match = _DIE_PATTERN.match(token.strip().lower())
        if match is None:
            raise DiceNotationError("Not a die term", expression=token)
        count = int(match.group(1)) if match.group(1) else 1
        return cls(count=count, sides=int(match.group(2)))

    def scaled(self, multiplier: int) -> DieTerm:
        """Return this term with its die count multiplied."""
        return DieTerm(count=self.count * multiplier, sides=self.sides)

    def __str__(self) -> str:
        return f"{self.count}d{self.sides}"


@dataclass(frozen=True)
class DiceNotation:
    """Parsed dice notation.

    Attributes:
        dice: Die terms in ``NdM`` form, in input order.
        modifier: Sum of the flat numeric segments.
    """

    dice: tuple[str, ...]
    modifier: int

    @property
    def terms(self) -> list[DieTerm]:
        """Get the die terms as structured values."""
        return [DieTerm.parse(token) for token in self.dice]

    def __str__(self) -> str:
        return format_dice_notation(self.dice, self.modifier)


@dataclass(frozen=True)
class DamageRoll:
    """Legacy parse result with the dice joined into one string."""

    dice: str
    modifier: int


def _clean(notation: str) -> str:
    without_annotations = _ANNOTATION_PATTERN.sub("", notation or "")
    return _WHITESPACE_PATTERN.sub("", without_annotations).lower()


def parse_dice_notation(notation: str) -> DiceNotation:
    """Parse a dice expression into die terms and a flat modifier.

    Args:
        notation: Free-form dice text, e.g. ``"2d6+1d4+3"`` or ``" d8 + 1 "``.

    Returns:
        DiceNotation with normalized ``NdM`` terms. Empty or dice-less input
        gives no dice and whatever flat modifier was present.

    Example:
        >>> parse_dice_notation("d8+2")
        DiceNotation(dice=('1d8',), modifier=2)
    """
    dice: list[str] = []
    modifier = 0

    for segment in _SEGMENT_PATTERN.findall(_clean(notation)):
        negative = segment.startswith("-")
        body = segment.lstrip("+-")

        if _DIE_PATTERN.match(body):
            if negative:
                logger.debug("Ignoring subtracted die term", segment=segment)
                continue
            dice.append(str(DieTerm.parse(body)))
            continue

        number = _LEADING_INT_PATTERN.match(body)
        if number is None:
            logger.debug("Ignoring unrecognised dice segment", segment=segment)
            continue
        value = int(number.group(0))
        modifier += -value if negative else value

    return DiceNotation(dice=tuple(dice), modifier=modifier)


def parse_damage_roll(text: str) -> DamageRoll:
    """Parse damage text into a joined dice string and a modifier.

    Example:
        >>> parse_damage_roll("2d6+1d4+3 phy")
        DamageRoll(dice='2d6+1d4', modifier=3)
    """
    parsed = parse_dice_notation(text)
    return DamageRoll(dice="+".join(parsed.dice), modifier=parsed.modifier)


def format_modifier(modifier: int) -> str:
    """Render a flat modifier as a signed suffix, or nothing for zero."""
    if modifier == 0:
        return ""
    return f"+{modifier}" if modifier > 0 else str(modifier)


def format_dice_notation(dice: tuple[str, ...] | list[str], modifier: int) -> str:
    """Serialize die terms and a modifier back to notation.

    Example:
        >>> format_dice_notation(["2d8", "1d6"], -1)
        '2d8+1d6-1'
    """
    joined = "+".join(dice)
    if not joined:
        return str(modifier) if modifier else ""
    return f"{joined}{format_modifier(modifier)}"


def calculate_weapon_damage(base: str, multiplier: int) -> str:
    """Scale every die term of a weapon's damage by ``multiplier``.

    The flat modifier is left untouched. Input without any die term is
    returned unchanged.

    Args:
        base: Weapon damage text, e.g. ``"d8+2"``.
        multiplier: Die count multiplier, normally the character's proficiency.

    Returns:
        Scaled damage notation, e.g. ``"2d8+2"`` for a multiplier of 2.

    Raises:
        DiceNotationError: If the multiplier is below 1.

    Example:
        >>> calculate_weapon_damage("d8+d6", 2)
        '2d8+2d6'
    """
    if multiplier < 1:
        raise DiceNotationError(
            "Damage multiplier must be at least 1",
            expression=base,
            details={"multiplier": multiplier},
        )

    parsed = parse_dice_notation(base)
    if not parsed.dice:
        return base

    scaled = [str(term.scaled(multiplier)) for term in parsed.terms]
    result = format_dice_notation(scaled, parsed.modifier)
    logger.debug("Scaled weapon damage", base=base, multiplier=multiplier, result=result)
    return result


__all__ = [
    "DieTerm",
    "DiceNotation",
    "DamageRoll",
    "parse_dice_notation",
    "parse_damage_roll",
    "format_modifier",
    "format_dice_notation",
    "calculate_weapon_damage",
]
