"""Room and player state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional

from .cards import Card
from .errors import PlayerNotFound


class RoomPhase(Enum):
    WAITING = auto()
    IN_PROGRESS = auto()
    FINISHED = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass
class Player:
    connection_id: str
    hand: List[Card] = field(default_factory=list)
    score: int = 0
    standing: bool = False
    damage_dealt: int = 0

    def has_card(self, card: Card) -> bool:
        return card in self.hand


@dataclass
class Room:
    name: str
    created_by: Optional[str] = None
    players: List[Player] = field(default_factory=list)
    deck: List[Card] = field(default_factory=list)
    discard: List[Card] = field(default_factory=list)
    turn_index: int = 0
    phase: RoomPhase = RoomPhase.WAITING
    enemy_health: Optional[int] = None
    turn_started_at: Optional[float] = None
    finish_reason: Optional[str] = None

    @property
    def started(self) -> bool:
        return self.phase is not RoomPhase.WAITING

    @property
    def in_progress(self) -> bool:
        return self.phase is RoomPhase.IN_PROGRESS

    def player_ids(self) -> List[str]:
        return [player.connection_id for player in self.players]

    def has_player(self, connection_id: str) -> bool:
        return any(player.connection_id == connection_id for player in self.players)

    def player(self, connection_id: str) -> Player:
        for player in self.players:
            if player.connection_id == connection_id:
                return player
        raise PlayerNotFound(connection_id)

    def current_player(self) -> Optional[Player]:
        if not self.in_progress or not self.players:
            return None
        return self.players[self.turn_index]

    def add_player(self, connection_id: str) -> Player:
        player = Player(connection_id=connection_id)
        self.players.append(player)
        return player

    def remove_player(self, connection_id: str) -> Player:
        """Drop a player and keep ``turn_index`` on whoever should act next."""
        for index, player in enumerate(self.players):
            if player.connection_id == connection_id:
                break
        else:
            raise PlayerNotFound(connection_id)

        del self.players[index]
        if not self.players:
            self.turn_index = 0
        elif index < self.turn_index:
            self.turn_index -= 1
        elif self.turn_index >= len(self.players):
            self.turn_index = 0
        return player

    def advance_turn(self, *, skip_standing: bool = False, skip_empty_hands: bool = False) -> Optional[Player]:
        """Move to the next eligible player.

        Returns the new current player, or None when nobody is eligible.
        """
        count = len(self.players)
        for step in range(1, count + 1):
            candidate = (self.turn_index + step) % count
            player = self.players[candidate]
            if skip_standing and player.standing:
                continue
            if skip_empty_hands and not player.hand:
                continue
            self.turn_index = candidate
            return player
        return None

    def settle_turn(self, *, skip_standing: bool = False, skip_empty_hands: bool = False) -> Optional[Player]:
        """Keep the current player if they may still act, otherwise advance."""
        current = self.current_player()
        if current is None:
            return None
        if (skip_standing and current.standing) or (skip_empty_hands and not current.hand):
            return self.advance_turn(skip_standing=skip_standing, skip_empty_hands=skip_empty_hands)
        return current

    def finish(self, reason: str) -> None:
        self.phase = RoomPhase.FINISHED
        self.finish_reason = reason
        self.turn_started_at = None
