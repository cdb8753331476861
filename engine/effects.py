"""Suit-effect resolution for effects-mode play."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .cards import Card, Suit
from .deck import draw
from .rules_schema import RuleSet
from .state import Player, Room

BLOCK = "block"
HEAL = "heal"
DRAW = "draw"
DOUBLE = "double"

SUIT_EFFECTS = {
    Suit.SPADES: BLOCK,
    Suit.HEARTS: HEAL,
    Suit.DIAMONDS: DRAW,
    Suit.CLUBS: DOUBLE,
}


@dataclass(frozen=True)
class EffectResult:
    effect: str
    message: str
    damage: int
    drawn: List[Card] = field(default_factory=list)


def base_damage(card: Card, rules: RuleSet) -> int:
    return rules.damage_for(card.rank)


def apply_effect(card: Card, player: Player, room: Room, rules: RuleSet) -> EffectResult:
    """Resolve the suit effect of ``card`` played by ``player``.

    Mutates the room: diamonds move cards from the deck into the player's hand
    and any damage is taken off the enemy health, which never drops below 0.
    """
    effect = SUIT_EFFECTS[card.suit]
    damage = base_damage(card, rules)
    drawn: List[Card] = []

    if effect == BLOCK:
        message = f"{card} blocks the next attack."
    elif effect == HEAL:
        message = f"{card} heals the party."
    elif effect == DRAW:
        count = min(rules.draw_bonus, len(room.deck))
        drawn, room.deck = draw(room.deck, count)
        player.hand.extend(drawn)
        message = f"{card} draws {count} extra card(s)."
    else:
        damage *= rules.club_multiplier
        message = f"{card} doubles its damage."

    if room.enemy_health is not None and damage:
        room.enemy_health = max(0, room.enemy_health - damage)
    player.damage_dealt += damage
    if damage:
        message = f"{message} Dealt {damage} damage."

    return EffectResult(effect=effect, message=message, damage=damage, drawn=drawn)
