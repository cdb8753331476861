"""Turn engine: game start, turn validation, rotation and end detection."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from random import Random
from typing import Callable, List, Optional

from .cards import Card
from .deck import build_deck, draw
from .effects import EffectResult, apply_effect
from .errors import (
    CardNotInHand,
    GameAlreadyStarted,
    GameFinished,
    GameNotStarted,
    InsufficientCards,
    NotRoomMember,
    NotYourTurn,
    TooFewPlayers,
    WrongGameMode,
)
from .registry import Departure, RoomRegistry
from .scoring import BLACKJACK, best_scores, hand_value
from .state import Player, Room, RoomPhase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartInfo:
    room: Room
    first_player: Optional[Player]


@dataclass(frozen=True)
class TurnOutcome:
    room: Room
    actor: Player
    action: str
    message: str
    card: Optional[Card] = None
    effect: Optional[EffectResult] = None
    drawn: List[Card] = field(default_factory=list)
    next_player: Optional[Player] = None

    @property
    def finished(self) -> bool:
        return self.room.phase is RoomPhase.FINISHED

    @property
    def turn_passed(self) -> bool:
        return self.next_player is not None and self.next_player is not self.actor


class TurnEngine:
    """Drive the games of every room held by a registry."""

    def __init__(
        self,
        registry: RoomRegistry,
        *,
        rng: Optional[Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.registry = registry
        self.rules = registry.rules
        self.rng = rng or Random()
        self.clock = clock

    @property
    def blackjack(self) -> bool:
        return self.rules.mode == "blackjack"

    # Game start --------------------------------------------------------

    def start_game(self, name: str) -> StartInfo:
        room = self.registry.get(name)
        if room.started:
            raise GameAlreadyStarted(name)
        if len(room.players) < self.rules.min_players:
            raise TooFewPlayers(name, self.rules.min_players, len(room.players))

        deck = build_deck(self.rng)
        hands = []
        for _ in room.players:
            hand, deck = draw(deck, self.rules.deal_size)
            hands.append(hand)

        for player, hand in zip(room.players, hands):
            player.hand = hand
            player.score = hand_value(hand) if self.blackjack else 0
            # A natural 21 stands on the deal, as a hit reaching 21 does.
            player.standing = self.blackjack and player.score == BLACKJACK
            player.damage_dealt = 0
        room.deck = deck
        room.discard = []
        room.turn_index = 0
        room.enemy_health = None if self.blackjack else self.rules.enemy_health
        room.phase = RoomPhase.IN_PROGRESS
        room.turn_started_at = self.clock()
        logger.info("Game started in room %s with %d players", name, len(room.players))

        first = self._settle(room)
        return StartInfo(room=room, first_player=first)

    # Effects mode ------------------------------------------------------

    def play_turn(self, name: str, connection_id: str, card: Card) -> TurnOutcome:
        room = self._active_room(name, "effects")
        player = self._require_turn(room, connection_id)
        if not player.has_card(card):
            raise CardNotInHand(f"{card} is not in your hand.")

        player.hand.remove(card)
        room.discard.append(card)
        effect = apply_effect(card, player, room, self.rules)
        next_player = self._next_turn(room)
        logger.debug("Room %s: %s played %s (%s)", name, connection_id, card, effect.effect)
        return TurnOutcome(
            room=room,
            actor=player,
            action="play",
            message=effect.message,
            card=card,
            effect=effect,
            drawn=list(effect.drawn),
            next_player=next_player,
        )

    # Blackjack mode ----------------------------------------------------

    def hit(self, name: str, connection_id: str) -> TurnOutcome:
        room = self._active_room(name, "blackjack")
        player = self._require_turn(room, connection_id)
        if not room.deck:
            raise InsufficientCards(1, 0)

        drawn, room.deck = draw(room.deck, 1)
        player.hand.extend(drawn)
        player.score = hand_value(player.hand)
        if player.score > BLACKJACK:
            player.standing = True
            message = f"Drew {drawn[0]} and busted with {player.score}."
        elif player.score == BLACKJACK:
            player.standing = True
            message = f"Drew {drawn[0]} for {BLACKJACK}."
        else:
            message = f"Drew {drawn[0]}, now at {player.score}."

        if player.standing:
            next_player = self._next_turn(room)
        else:
            room.turn_started_at = self.clock()
            next_player = player
        return TurnOutcome(
            room=room,
            actor=player,
            action="hit",
            message=message,
            card=drawn[0],
            drawn=drawn,
            next_player=next_player,
        )

    def stand(self, name: str, connection_id: str) -> TurnOutcome:
        room = self._active_room(name, "blackjack")
        player = self._require_turn(room, connection_id)
        player.standing = True
        next_player = self._next_turn(room)
        return TurnOutcome(
            room=room,
            actor=player,
            action="stand",
            message=f"Stands on {player.score}.",
            next_player=next_player,
        )

    # Liveness ----------------------------------------------------------

    def expire_turns(self, now: Optional[float] = None) -> List[TurnOutcome]:
        """Skip every turn that has been idle longer than the configured timeout."""
        timeout = self.rules.turn_timeout_seconds
        if timeout is None:
            return []
        if now is None:
            now = self.clock()

        outcomes = []
        for room in self.registry:
            if not room.in_progress or room.turn_started_at is None:
                continue
            if now - room.turn_started_at < timeout:
                continue
            player = room.current_player()
            if player is None:
                continue
            if self.blackjack:
                player.standing = True
            next_player = self._next_turn(room)
            logger.info("Room %s: turn of %s timed out", room.name, player.connection_id)
            outcomes.append(
                TurnOutcome(
                    room=room,
                    actor=player,
                    action="skip",
                    message="Turn skipped after inactivity.",
                    next_player=next_player,
                )
            )
        return outcomes

    # Departures --------------------------------------------------------

    def leave_room(self, name: str, connection_id: str) -> Departure:
        departure = self.registry.leave_room(name, connection_id)
        self._after_departure(departure)
        return departure

    def remove_connection(self, connection_id: str) -> List[Departure]:
        departures = self.registry.remove_connection(connection_id)
        for departure in departures:
            self._after_departure(departure)
        return departures

    # Results -----------------------------------------------------------

    def winners(self, room: Room) -> List[str]:
        if room.phase is not RoomPhase.FINISHED:
            return []
        if self.blackjack:
            indices = best_scores([player.score for player in room.players])
            return [room.players[index].connection_id for index in indices]
        if room.enemy_health is not None and room.enemy_health <= 0:
            return room.player_ids()
        return []

    # Internals ---------------------------------------------------------

    def _active_room(self, name: str, mode: str) -> Room:
        room = self.registry.get(name)
        if self.rules.mode != mode:
            raise WrongGameMode(f"Room {name!r} is playing {self.rules.mode}, not {mode}.")
        if room.phase is RoomPhase.WAITING:
            raise GameNotStarted(name)
        if room.phase is RoomPhase.FINISHED:
            raise GameFinished(name)
        return room

    def _require_turn(self, room: Room, connection_id: str) -> Player:
        if not room.has_player(connection_id):
            raise NotRoomMember(room.name)
        current = room.current_player()
        if current is None or current.connection_id != connection_id:
            raise NotYourTurn("It is not your turn.")
        return current

    def _end_reason(self, room: Room) -> Optional[str]:
        if room.enemy_health is not None and room.enemy_health <= 0:
            return "enemy_defeated"
        if not self.blackjack and self.rules.end_condition == "deck_exhausted" and not room.deck:
            return "deck_exhausted"
        return None

    def _settle(self, room: Room) -> Optional[Player]:
        """Finish the room if it is over, otherwise make sure the current player may act."""
        reason = self._end_reason(room)
        if reason is None:
            current = room.settle_turn(skip_standing=self.blackjack, skip_empty_hands=not self.blackjack)
            if current is not None:
                return current
            reason = "all_standing" if self.blackjack else "hands_exhausted"
        self._finish(room, reason)
        return None

    def _next_turn(self, room: Room) -> Optional[Player]:
        reason = self._end_reason(room)
        if reason is not None:
            self._finish(room, reason)
            return None
        next_player = room.advance_turn(skip_standing=self.blackjack, skip_empty_hands=not self.blackjack)
        if next_player is None:
            self._finish(room, "all_standing" if self.blackjack else "hands_exhausted")
            return None
        room.turn_started_at = self.clock()
        return next_player

    def _after_departure(self, departure: Departure) -> None:
        room = departure.room
        if departure.room_deleted or not room.in_progress:
            return
        if len(room.players) < self.rules.min_players:
            self._finish(room, "not_enough_players")
            return
        if self._settle(room) is not None and departure.was_current:
            room.turn_started_at = self.clock()

    def _finish(self, room: Room, reason: str) -> None:
        room.finish(reason)
        logger.info("Game in room %s finished: %s", room.name, reason)
