"""Card-related data structures and helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from .errors import InvalidCard


class Suit(Enum):
    SPADES = "♠"
    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"

    def __str__(self) -> str:
        return self.value


class Rank(Enum):
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"

    def __str__(self) -> str:
        return self.value

    @property
    def is_face(self) -> bool:
        return self in FACE_RANKS

    def numeric_value(self) -> int:
        """Integer value of a number rank; face cards and aces have none."""
        if self.is_face or self is Rank.ACE:
            return 0
        return int(self.value)


FACE_RANKS = frozenset({Rank.JACK, Rank.QUEEN, Rank.KING})

# Deck order: suits in declaration order, ranks from low to high.
RANK_ORDER: list[Rank] = list(Rank)
SUIT_ORDER: list[Suit] = list(Suit)

CARD_TOKEN = re.compile(r"^(\d+|[JQKA])([♠♥♦♣])$")


@dataclass(frozen=True)
class Card:
    """Immutable playing card. Two cards with the same rank and suit are equal."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank.value}{self.suit.value}"


def serialize_card(card: Card) -> dict[str, str]:
    return {"value": card.rank.value, "suit": card.suit.value}


def deserialize_card(payload: Any) -> Card:
    """Build a card from the structured ``{"value", "suit"}`` wire form."""
    if not isinstance(payload, Mapping):
        raise InvalidCard(f"Card must be an object with 'value' and 'suit', got {payload!r}.")
    value = payload.get("value")
    suit = payload.get("suit")
    if not isinstance(value, str) or not isinstance(suit, str):
        raise InvalidCard(f"Card must carry string 'value' and 'suit', got {dict(payload)!r}.")
    try:
        return Card(Rank(value.strip().upper()), Suit(suit.strip()))
    except ValueError as exc:
        raise InvalidCard(f"Unknown card {value!r} of {suit!r}.") from exc


def parse_card_token(token: str) -> Card:
    """Parse the compact ``"10♦"`` notation used in logs and tests."""
    match = CARD_TOKEN.match(token.strip())
    if match is None:
        raise InvalidCard(f"Unrecognised card token {token!r}.")
    rank_text, suit_text = match.groups()
    try:
        return Card(Rank(rank_text), Suit(suit_text))
    except ValueError as exc:
        raise InvalidCard(f"Unrecognised card token {token!r}.") from exc


def card_label(card: Card) -> str:
    return f"{card.rank.name.title()} of {card.suit.name.title()}"
