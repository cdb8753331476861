"""Deck creation and drawing."""

from __future__ import annotations

from random import Random
from typing import List, Optional, Sequence, Tuple

from .cards import Card, RANK_ORDER, SUIT_ORDER
from .errors import InsufficientCards

DECK_SIZE = 52


def ordered_deck() -> List[Card]:
    """Return the unshuffled 52-card deck."""
    return [Card(rank, suit) for suit in SUIT_ORDER for rank in RANK_ORDER]


def build_deck(rng: Optional[Random] = None) -> List[Card]:
    """Return a freshly shuffled 52-card deck.

    ``Random.shuffle`` is an in-place Fisher-Yates shuffle, so every ordering
    is equally likely given a good generator.
    """
    cards = ordered_deck()
    if rng is None:
        rng = Random()
    rng.shuffle(cards)
    return cards


def draw(deck: Sequence[Card], n: int) -> Tuple[List[Card], List[Card]]:
    """Take ``n`` cards from the front of ``deck``.

    Returns ``(drawn, remaining)``; the input sequence is left untouched.
    """
    if n < 0 or n > len(deck):
        raise InsufficientCards(n, len(deck))
    cards = list(deck)
    return cards[:n], cards[n:]
