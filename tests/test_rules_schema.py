import pytest
from pydantic import ValidationError

from engine.cards import Rank
from engine.rules_schema import RuleSet


def test_defaults_describe_the_effects_game():
    rules = RuleSet()
    assert rules.mode == "effects"
    assert rules.deal_size == 5
    assert rules.max_players == 6
    assert rules.enemy_health == 50
    assert rules.damage_for(Rank.SEVEN) == 7
    assert rules.damage_for(Rank.KING) == 0
    assert rules.damage_for(Rank.ACE) == 0


def test_blackjack_deals_two():
    assert RuleSet(mode="blackjack").deal_size == 2
    assert RuleSet(mode="blackjack", hand_size=3).deal_size == 3


def test_damage_table_overrides_merge_with_defaults():
    rules = RuleSet(damage={"k": 10, "A": 11})
    assert rules.damage_for(Rank.KING) == 10
    assert rules.damage_for(Rank.ACE) == 11
    assert rules.damage_for(Rank.TWO) == 2


@pytest.mark.parametrize(
    "kwargs",
    [
        {"damage": {"1": 3}},
        {"damage": {"K": -1}},
        {"min_players": 4, "max_players": 3},
        {"enemy_health": None},
        {"hand_size": 9},
        {"mode": "poker"},
    ],
)
def test_invalid_rules_are_rejected(kwargs):
    with pytest.raises(ValidationError):
        RuleSet(**kwargs)


def test_deck_exhausted_games_may_drop_the_enemy():
    rules = RuleSet(enemy_health=None, end_condition="deck_exhausted")
    assert rules.enemy_health is None
