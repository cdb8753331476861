from random import Random

import pytest

from engine.cards import Card, Rank, Suit, deserialize_card, parse_card_token, serialize_card
from engine.deck import DECK_SIZE, build_deck, draw, ordered_deck
from engine.errors import InsufficientCards, InvalidCard


def test_deck_has_every_rank_and_suit_once():
    deck = build_deck(Random(1))
    assert len(deck) == DECK_SIZE
    assert len(set(deck)) == DECK_SIZE
    assert set(deck) == {Card(rank, suit) for rank in Rank for suit in Suit}


def test_seeded_shuffle_is_reproducible():
    assert build_deck(Random(42)) == build_deck(Random(42))
    assert build_deck(Random(42)) != ordered_deck()


def test_shuffle_spreads_a_card_evenly_over_positions():
    rng = Random(2024)
    trials = 5200
    target = ordered_deck()[0]
    counts = [0] * DECK_SIZE
    for _ in range(trials):
        counts[build_deck(rng).index(target)] += 1

    expected = trials / DECK_SIZE
    assert all(expected * 0.5 < count < expected * 1.5 for count in counts)
    chi_square = sum((count - expected) ** 2 / expected for count in counts)
    # 51 degrees of freedom; 99.9th percentile is about 87.
    assert chi_square < 100


def test_draw_takes_from_the_front():
    deck = ordered_deck()
    drawn, remaining = draw(deck, 3)
    assert drawn == deck[:3]
    assert remaining == deck[3:]
    assert len(deck) == DECK_SIZE


def test_draw_more_than_available_fails():
    with pytest.raises(InsufficientCards):
        draw(ordered_deck()[:2], 3)
    with pytest.raises(InsufficientCards):
        draw([], -1)


def test_card_wire_format():
    card = Card(Rank.TEN, Suit.DIAMONDS)
    assert serialize_card(card) == {"value": "10", "suit": "♦"}
    assert deserialize_card({"value": "10", "suit": "♦"}) == card
    assert deserialize_card({"value": "q", "suit": "♠"}) == Card(Rank.QUEEN, Suit.SPADES)


@pytest.mark.parametrize(
    "payload",
    ["10♦", {"value": "11", "suit": "♦"}, {"value": "K", "suit": "X"}, {"value": 10, "suit": "♦"}, None],
)
def test_card_wire_format_rejects_garbage(payload):
    with pytest.raises(InvalidCard):
        deserialize_card(payload)


def test_card_token_parsing():
    assert parse_card_token("10♦") == Card(Rank.TEN, Suit.DIAMONDS)
    assert parse_card_token("A♣") == Card(Rank.ACE, Suit.CLUBS)
    assert str(Card(Rank.JACK, Suit.HEARTS)) == "J♥"
    with pytest.raises(InvalidCard):
        parse_card_token("1♦")
    with pytest.raises(InvalidCard):
        parse_card_token("Z♠")
