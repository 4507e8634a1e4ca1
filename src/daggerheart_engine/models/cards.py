"""Card query helpers and the canonical card model.

Card records arrive in more than one shape: fields may sit at the top level
of the record or be nested under a ``data`` payload. The accessors in this
module read the nested payload first and fall back to the top level, with a
fixed default for absent data. ``normalize_card`` turns any such record into
one canonical :class:`Card` so code past the boundary sees a single shape.

Example:
    >>> card = {"name": "Book of Ava", "data": {"level": 2, "domain": "Codex"}}
    >>> get_card_level(card)
    2
    >>> is_card_in_domain(card, " codex ")
    True
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from daggerheart_engine.core.logging import get_logger


logger = get_logger(__name__)

CardLike = Mapping[str, Any] | BaseModel
"""Any dict-like or model record describing a domain, ability or spell card."""

_MISSING = object()


class Card(BaseModel):
    """Canonical card shape produced by :func:`normalize_card`."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = ""
    name: str = "Unknown Card"
    level: int = 1
    description: str = ""
    type: str = ""
    domain: str = ""
    recall_cost: int = 0
    data: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Field Access
# =============================================================================


def _as_mapping(card: CardLike) -> Mapping[str, Any]:
    if isinstance(card, BaseModel):
        return card.model_dump()
    return card


def _read(card: CardLike | None, *keys: str) -> Any:
    """Read the first present key, nested payload before top level."""
    if card is None:
        return _MISSING
    record = _as_mapping(card)
    payload = record.get("data")
    if isinstance(payload, Mapping):
        for key in keys:
            value = payload.get(key)
            if value is not None:
                return value
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return _MISSING


def _as_int(value: Any, default: int) -> int:
    if value is _MISSING:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.debug("Non-numeric card field, using default", value=value, default=default)
        return default


def get_card_level(card: CardLike | None) -> int:
    """Get the card's level, defaulting to 1."""
    return _as_int(_read(card, "level"), 1)


def get_card_description(card: CardLike | None) -> str:
    """Get the card's description.

    Falls back to the payload's markdown body, then to an empty string.
    """
    if card is None:
        return ""
    record = _as_mapping(card)
    payload = record.get("data")
    if isinstance(payload, Mapping):
        for key in ("description", "markdown"):
            if payload.get(key) is not None:
                return str(payload[key])
    description = record.get("description")
    return "" if description is None else str(description)


def get_card_type(card: CardLike | None) -> str:
    """Get the card's type, defaulting to an empty string."""
    value = _read(card, "type")
    return "" if value is _MISSING else str(value)


def get_card_domain(card: CardLike | None) -> str:
    """Get the card's domain, defaulting to an empty string."""
    value = _read(card, "domain")
    return "" if value is _MISSING else str(value)


def get_card_recall_cost(card: CardLike | None) -> int:
    """Get the card's recall cost, defaulting to 0."""
    return _as_int(_read(card, "recall_cost"), 0)


def get_card_name(card: CardLike | None) -> str:
    """Get the card's name, defaulting to 'Unknown Card'."""
    value = _read(card, "name")
    return "Unknown Card" if value is _MISSING else str(value)


# =============================================================================
# Eligibility Queries
# =============================================================================


def is_card_in_domain(card: CardLike | None, domain: str) -> bool:
    """Check whether a card belongs to a domain.

    Comparison trims and lowercases both sides. An empty domain never
    matches.
    """
    if card is None or not domain or not domain.strip():
        return False
    return get_card_domain(card).strip().lower() == domain.strip().lower()


def is_card_available_at_level(card: CardLike | None, level: int) -> bool:
    """Check whether a card's level is at or below ``level``."""
    if card is None:
        return False
    return get_card_level(card) <= level


def filter_cards_by_domain_and_level(
    cards: Iterable[CardLike],
    domains: list[str],
    level: int,
) -> list[CardLike]:
    """Filter cards to those in any of ``domains`` at or below ``level``.

    Args:
        cards: Candidate card records.
        domains: Domain names, matched case-insensitively.
        level: Maximum card level to include.

    Returns:
        Matching cards in their original order. Empty when ``level`` is 0
        or no domains are given.
    """
    if level <= 0 or not domains:
        return []
    return [
        card
        for card in cards
        if any(is_card_in_domain(card, domain) for domain in domains)
        and is_card_available_at_level(card, level)
    ]


def get_exchange_candidates(
    new_card: CardLike,
    owned_cards: Iterable[CardLike],
) -> list[CardLike]:
    """Get owned cards that may be traded away for ``new_card``.

    A card may only be exchanged for one of equal or lower level in the same
    domain.
    """
    domain = get_card_domain(new_card)
    new_level = get_card_level(new_card)
    return [
        card
        for card in owned_cards
        if is_card_in_domain(card, domain) and get_card_level(card) >= new_level
    ]


# =============================================================================
# Normalization
# =============================================================================


def normalize_card(card: CardLike) -> Card:
    """Normalize a card record into the canonical :class:`Card` shape."""
    record = _as_mapping(card)
    payload = record.get("data")
    card_id = record.get("id")
    return Card(
        id="" if card_id is None else str(card_id),
        name=get_card_name(card),
        level=get_card_level(card),
        description=get_card_description(card),
        type=get_card_type(card),
        domain=get_card_domain(card),
        recall_cost=get_card_recall_cost(card),
        data=dict(payload) if isinstance(payload, Mapping) else {},
    )


__all__ = [
    "Card",
    "CardLike",
    "get_card_level",
    "get_card_description",
    "get_card_type",
    "get_card_domain",
    "get_card_recall_cost",
    "get_card_name",
    "is_card_in_domain",
    "is_card_available_at_level",
    "filter_cards_by_domain_and_level",
    "get_exchange_candidates",
    "normalize_card",
]
