"""Inbound event dispatch.

The dispatcher turns one inbound event into engine calls and a ``Dispatch``:
the reply for the caller, group membership changes and outbound messages with
their audience. It never touches the transport, so every handler runs to
completion before anything is sent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from engine.cards import deserialize_card
from engine.errors import GameError, InvalidPayload, NotRoomMember, NotYourTurn
from engine.game import TurnEngine, TurnOutcome
from engine.registry import Departure
from engine.service import hand_payload, player_list_payload, room_payload, turn_payload
from engine.state import Room, RoomPhase

logger = logging.getLogger(__name__)

GROUP_PREFIX = "room:"


def group_name(room_name: str) -> str:
    """Transport group for a room; prefixed so it cannot clash with a sid."""
    return f"{GROUP_PREFIX}{room_name}"


@dataclass(frozen=True)
class Outbound:
    event: str
    data: Any
    to: Optional[str] = None  # a sid or a group; None reaches every connection


@dataclass(frozen=True)
class Membership:
    sid: str
    group: str
    joined: bool


@dataclass
class Dispatch:
    reply: Optional[dict] = None
    memberships: List[Membership] = field(default_factory=list)
    messages: List[Outbound] = field(default_factory=list)


def ok(message: str = "", **extra: Any) -> dict:
    reply = {"success": True, "message": message}
    reply.update(extra)
    return reply


def failure(exc: GameError) -> dict:
    return {"success": False, "message": str(exc), "error": exc.code}


def room_name_from(payload: Any) -> str:
    """Accept either a bare room name or ``{"roomName": ...}``."""
    name = payload.get("roomName") if isinstance(payload, Mapping) else payload
    if not isinstance(name, str) or not name.strip():
        raise InvalidPayload("A non-empty roomName is required.")
    return name


class Dispatcher:
    def __init__(self, engine: TurnEngine) -> None:
        self.engine = engine
        self.registry = engine.registry
        self._handlers: Dict[str, Callable[[str, Any], Dispatch]] = {
            "createRoom": self.create_room,
            "getRooms": self.get_rooms,
            "joinRoom": self.join_room,
            "leaveRoom": self.leave_room,
            "startGame": self.start_game,
            "playTurn": self.play_turn,
            "hit": self.hit,
            "stand": self.stand,
        }

    @property
    def events(self) -> Tuple[str, ...]:
        return tuple(self._handlers)

    def handle(self, event: str, sid: str, payload: Any = None) -> Dispatch:
        handler = self._handlers.get(event)
        try:
            if handler is None:
                raise InvalidPayload(f"Unknown event {event!r}.")
            return handler(sid, payload)
        except GameError as exc:
            logger.debug("Rejected %s from %s: %s", event, sid, exc)
            return Dispatch(reply=failure(exc))

    # Lobby -------------------------------------------------------------

    def create_room(self, sid: str, payload: Any) -> Dispatch:
        name = room_name_from(payload)
        self.registry.create_room(name, created_by=sid)
        return Dispatch(
            reply=ok(f"Room {name} created."),
            messages=[self._room_list()],
        )

    def get_rooms(self, sid: str, payload: Any = None) -> Dispatch:
        names = self.registry.list_room_names()
        return Dispatch(
            reply=ok(rooms=names),
            messages=[Outbound("roomList", names, to=sid)],
        )

    def join_room(self, sid: str, payload: Any) -> Dispatch:
        name = room_name_from(payload)
        player = self.registry.join_room(name, sid)
        room = self.registry.get(name)
        return Dispatch(
            reply=ok(f"Joined room {name}.", playerId=player.connection_id),
            memberships=[Membership(sid, group_name(name), joined=True)],
            messages=[Outbound("playerList", player_list_payload(room), to=group_name(name))],
        )

    def leave_room(self, sid: str, payload: Any) -> Dispatch:
        name = room_name_from(payload)
        was_in_progress = self.registry.get(name).in_progress
        departure = self.engine.leave_room(name, sid)
        messages = self._departure_messages(departure, was_in_progress)
        if departure.room_deleted:
            messages.append(self._room_list())
        return Dispatch(
            reply=ok(f"Left room {name}."),
            memberships=[Membership(sid, group_name(name), joined=False)],
            messages=messages,
        )

    def disconnect(self, sid: str) -> Dispatch:
        in_progress = {room.name: room.in_progress for room in self.registry if room.has_player(sid)}
        departures = self.engine.remove_connection(sid)
        messages: List[Outbound] = []
        for departure in departures:
            messages.extend(self._departure_messages(departure, in_progress.get(departure.room.name, False)))
        if departures:
            messages.append(self._room_list())
        return Dispatch(messages=messages)

    # Game --------------------------------------------------------------

    def start_game(self, sid: str, payload: Any) -> Dispatch:
        name = room_name_from(payload)
        room = self.registry.get(name)
        if not room.has_player(sid):
            raise NotRoomMember(name)
        info = self.engine.start_game(name)
        group = group_name(name)

        messages = [Outbound("gameStarted", room_payload(room), to=group)]
        messages.extend(
            Outbound("hand", hand_payload(room, player, scored=self.engine.blackjack), to=player.connection_id)
            for player in room.players
        )
        if info.first_player is not None:
            messages.append(self._your_turn(room, info.first_player.connection_id))
        if room.phase is RoomPhase.FINISHED:
            messages.append(self._game_over(room))
        return Dispatch(reply=ok(f"Game started in room {name}."), messages=messages)

    def play_turn(self, sid: str, payload: Any) -> Dispatch:
        if not isinstance(payload, Mapping):
            raise InvalidPayload("playTurn expects {roomName, playerId, card}.")
        name = room_name_from(payload)
        player_id = payload.get("playerId", sid)
        if player_id != sid:
            raise NotYourTurn("playerId does not match this connection.")
        card = deserialize_card(payload.get("card"))
        outcome = self.engine.play_turn(name, sid, card)
        return Dispatch(
            reply=ok(
                outcome.message,
                effect=outcome.effect.effect if outcome.effect else None,
                damage=outcome.effect.damage if outcome.effect else 0,
                enemyHealth=outcome.room.enemy_health,
            ),
            messages=self._turn_messages(outcome, "turnResult"),
        )

    def hit(self, sid: str, payload: Any) -> Dispatch:
        outcome = self.engine.hit(room_name_from(payload), sid)
        return Dispatch(
            reply=ok(outcome.message, score=outcome.actor.score),
            messages=self._turn_messages(outcome, "turnResult"),
        )

    def stand(self, sid: str, payload: Any) -> Dispatch:
        outcome = self.engine.stand(room_name_from(payload), sid)
        return Dispatch(
            reply=ok(outcome.message, score=outcome.actor.score),
            messages=self._turn_messages(outcome, "turnResult"),
        )

    def expire_turns(self, now: Optional[float] = None) -> Dispatch:
        messages: List[Outbound] = []
        for outcome in self.engine.expire_turns(now):
            messages.extend(self._turn_messages(outcome, "turnSkipped"))
        return Dispatch(messages=messages)

    # Message builders --------------------------------------------------

    def _room_list(self) -> Outbound:
        return Outbound("roomList", self.registry.list_room_names())

    def _your_turn(self, room: Room, connection_id: str) -> Outbound:
        return Outbound("yourTurn", {"roomName": room.name, "playerId": connection_id}, to=connection_id)

    def _game_over(self, room: Room) -> Outbound:
        payload = {
            "roomName": room.name,
            "reason": room.finish_reason,
            "enemyHealth": room.enemy_health,
            "winners": self.engine.winners(room),
        }
        if self.engine.blackjack:
            payload["scores"] = {player.connection_id: player.score for player in room.players}
        return Outbound("gameOver", payload, to=group_name(room.name))

    def _turn_messages(self, outcome: TurnOutcome, event: str) -> List[Outbound]:
        room = outcome.room
        messages = [Outbound(event, turn_payload(outcome), to=group_name(room.name))]
        if outcome.action in ("play", "hit"):
            hand = hand_payload(room, outcome.actor, scored=self.engine.blackjack)
            messages.append(Outbound("hand", hand, to=outcome.actor.connection_id))
        if outcome.finished:
            messages.append(self._game_over(room))
        elif outcome.turn_passed:
            messages.append(self._your_turn(room, outcome.next_player.connection_id))
        return messages

    def _departure_messages(self, departure: Departure, was_in_progress: bool) -> List[Outbound]:
        room = departure.room
        if departure.room_deleted:
            return []

        group = group_name(room.name)
        messages = [Outbound("playerList", player_list_payload(room), to=group)]
        if not was_in_progress:
            return messages
        messages.append(Outbound("roomState", room_payload(room), to=group))
        if room.phase is RoomPhase.FINISHED:
            messages.append(self._game_over(room))
        elif departure.was_current:
            current = room.current_player()
            if current is not None:
                messages.append(self._your_turn(room, current.connection_id))
        return messages
