"""Views of room state for clients.

Room views are safe to broadcast to every member: they carry counters only.
Hand views belong to exactly one player.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

from .cards import serialize_card
from .game import TurnOutcome
from .state import Player, Room


@dataclass
class RoomView:
    roomName: str
    phase: str
    players: List[str]
    turnPlayerId: Optional[str]
    enemyHealth: Optional[int]
    deckCount: int
    handCounts: Dict[str, int]
    finishReason: Optional[str]


@dataclass
class HandView:
    roomName: str
    playerId: str
    hand: List[dict]
    score: Optional[int]  # blackjack total; None when the mode keeps no score
    standing: bool


def room_view(room: Room) -> RoomView:
    current = room.current_player()
    return RoomView(
        roomName=room.name,
        phase=str(room.phase),
        players=room.player_ids(),
        turnPlayerId=current.connection_id if current else None,
        enemyHealth=room.enemy_health,
        deckCount=len(room.deck),
        handCounts={player.connection_id: len(player.hand) for player in room.players},
        finishReason=room.finish_reason,
    )


def hand_view(room: Room, player: Player, *, scored: bool = True) -> HandView:
    return HandView(
        roomName=room.name,
        playerId=player.connection_id,
        hand=[serialize_card(card) for card in player.hand],
        score=player.score if scored else None,
        standing=player.standing,
    )


def room_payload(room: Room) -> dict:
    return asdict(room_view(room))


def hand_payload(room: Room, player: Player, *, scored: bool = True) -> dict:
    return asdict(hand_view(room, player, scored=scored))


def player_list_payload(room: Room) -> dict:
    return {"roomName": room.name, "players": room.player_ids()}


def turn_payload(outcome: TurnOutcome) -> dict:
    """Public summary of one turn: never includes anyone's hand."""
    payload = room_payload(outcome.room)
    payload.update(
        {
            "playerId": outcome.actor.connection_id,
            "action": outcome.action,
            "message": outcome.message,
            "card": serialize_card(outcome.card) if outcome.card and outcome.action == "play" else None,
            "effect": outcome.effect.effect if outcome.effect else None,
            "damage": outcome.effect.damage if outcome.effect else 0,
            "drawnCount": len(outcome.drawn),
            "finished": outcome.finished,
        }
    )
    return payload
