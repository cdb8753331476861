"""Blackjack hand scoring."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from .cards import Card, Rank

BLACKJACK = 21
ACE_HIGH = 11
ACE_DEMOTION = 10
FACE_POINTS = 10


def card_points(card: Card) -> int:
    """Points of a single card with the ace counted high."""
    if card.rank is Rank.ACE:
        return ACE_HIGH
    if card.rank.is_face:
        return FACE_POINTS
    return card.rank.numeric_value()


def hand_value(hand: Iterable[Card]) -> int:
    """Best blackjack total: aces drop from 11 to 1, one at a time, while over 21."""
    total = 0
    aces = 0
    for card in hand:
        if card.rank is Rank.ACE:
            aces += 1
        total += card_points(card)
    while total > BLACKJACK and aces > 0:
        total -= ACE_DEMOTION
        aces -= 1
    return total


def is_bust(hand: Iterable[Card]) -> bool:
    return hand_value(hand) > BLACKJACK


def best_scores(scores: Sequence[int]) -> List[int]:
    """Indices of the highest non-busted scores; empty when everyone busted."""
    eligible = [score for score in scores if score <= BLACKJACK]
    if not eligible:
        return []
    top = max(eligible)
    return [index for index, score in enumerate(scores) if score == top]
