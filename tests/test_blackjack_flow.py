from random import Random

import pytest

from engine.cards import parse_card_token
from engine.errors import InsufficientCards, NotYourTurn, WrongGameMode
from engine.game import TurnEngine
from engine.registry import RoomRegistry
from engine.rules_schema import RuleSet
from engine.scoring import hand_value
from engine.state import RoomPhase


def cards(*tokens):
    return [parse_card_token(token) for token in tokens]


class StackedRandom(Random):
    """Puts ``top`` on the deck and leaves the rest in order."""

    top = ()

    def shuffle(self, x):
        top = list(self.top)
        x[:] = top + [card for card in x if card not in top]


def blackjack_room(*players, top=()):
    rng = StackedRandom()
    rng.top = cards(*top)
    registry = RoomRegistry(RuleSet(mode="blackjack"))
    engine = TurnEngine(registry, rng=rng, clock=lambda: 0.0)
    registry.create_room("T")
    for sid in players:
        registry.join_room("T", sid)
    room = engine.start_game("T").room
    return engine, room


def set_hand(player, *tokens):
    player.hand = cards(*tokens)
    player.score = hand_value(player.hand)


def test_blackjack_deals_two_cards_and_no_enemy():
    engine, room = blackjack_room("s1", "s2")
    assert [len(player.hand) for player in room.players] == [2, 2]
    assert room.enemy_health is None
    assert all(player.score == hand_value(player.hand) for player in room.players)


def test_hit_keeps_the_turn_until_stand():
    engine, room = blackjack_room("s1", "s2")
    set_hand(room.players[0], "2♠", "3♥")
    room.deck = cards("4♦", "5♣")

    outcome = engine.hit("T", "s1")
    assert outcome.card == parse_card_token("4♦")
    assert room.players[0].score == 9
    assert not outcome.turn_passed
    assert room.current_player().connection_id == "s1"

    outcome = engine.stand("T", "s1")
    assert outcome.turn_passed
    assert room.current_player().connection_id == "s2"
    with pytest.raises(NotYourTurn):
        engine.hit("T", "s1")


def test_bust_stands_automatically_and_loses():
    engine, room = blackjack_room("s1", "s2")
    set_hand(room.players[0], "10♠", "6♥")
    set_hand(room.players[1], "9♠", "8♥")
    room.deck = cards("K♣", "2♦")

    outcome = engine.hit("T", "s1")
    assert "busted" in outcome.message
    assert room.players[0].standing
    assert room.current_player().connection_id == "s2"

    outcome = engine.stand("T", "s2")
    assert outcome.finished
    assert room.phase is RoomPhase.FINISHED
    assert room.finish_reason == "all_standing"
    assert engine.winners(room) == ["s2"]


def test_ties_share_the_win():
    engine, room = blackjack_room("s1", "s2")
    set_hand(room.players[0], "K♠", "Q♥")
    set_hand(room.players[1], "10♦", "J♣")
    engine.stand("T", "s1")
    engine.stand("T", "s2")
    assert engine.winners(room) == ["s1", "s2"]


def test_hitting_an_empty_deck_is_refused():
    engine, room = blackjack_room("s1", "s2")
    room.deck = []
    with pytest.raises(InsufficientCards):
        engine.hit("T", "s1")
    assert room.current_player().connection_id == "s1"


def test_effect_plays_are_refused_in_blackjack():
    engine, room = blackjack_room("s1", "s2")
    with pytest.raises(WrongGameMode):
        engine.play_turn("T", "s1", room.players[0].hand[0])


def test_timeout_forces_a_stand():
    engine, room = blackjack_room("s1", "s2")
    outcomes = engine.expire_turns(now=120.0)
    assert outcomes[0].actor.standing
    assert room.current_player().connection_id == "s2"


def test_natural_blackjack_stands_on_the_deal():
    engine, room = blackjack_room("s1", "s2", top=("A♠", "K♠", "2♥", "3♥"))
    natural, other = room.players

    assert natural.score == 21
    assert natural.standing
    assert not other.standing
    assert room.current_player().connection_id == "s2"

    outcome = engine.stand("T", "s2")
    assert outcome.finished
    assert engine.winners(room) == ["s1"]


def test_everyone_dealt_a_natural_finishes_at_once():
    engine, room = blackjack_room("s1", "s2", top=("A♠", "K♠", "A♥", "Q♥"))
    assert room.phase is RoomPhase.FINISHED
    assert room.finish_reason == "all_standing"
    assert engine.winners(room) == ["s1", "s2"]
