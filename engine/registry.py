"""In-memory room registry: one owned mapping from room name to Room."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from .errors import (
    AlreadyInRoom,
    GameAlreadyStarted,
    InvalidPayload,
    NotRoomMember,
    RoomExists,
    RoomFull,
    RoomNotFound,
)
from .rules_schema import RuleSet
from .state import Player, Room

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Departure:
    """What happened to a room when a connection left it."""

    room: Room
    player: Optional[Player]
    was_current: bool
    room_deleted: bool


class RoomRegistry:
    """Owns every room of the process.

    All mutation goes through these methods; callers never touch the mapping.
    """

    def __init__(self, rules: Optional[RuleSet] = None) -> None:
        self.rules = rules or RuleSet()
        self._rooms: Dict[str, Room] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def __iter__(self) -> Iterator[Room]:
        return iter(list(self._rooms.values()))

    # Lookup ------------------------------------------------------------

    def get(self, name: str) -> Room:
        room = self._rooms.get(name)
        if room is None:
            raise RoomNotFound(name)
        return room

    def list_room_names(self) -> List[str]:
        return list(self._rooms)

    def room_of(self, connection_id: str) -> Optional[Room]:
        for room in self._rooms.values():
            if room.has_player(connection_id):
                return room
        return None

    # Lifecycle ---------------------------------------------------------

    def create_room(self, name: str, created_by: Optional[str] = None) -> Room:
        if not isinstance(name, str) or not name.strip():
            raise InvalidPayload("Room name must be a non-empty string.")
        if name in self._rooms:
            raise RoomExists(name)
        room = Room(name=name, created_by=created_by)
        self._rooms[name] = room
        logger.info("Created room %s", name)
        return room

    def join_room(self, name: str, connection_id: str) -> Player:
        room = self.get(name)
        current = self.room_of(connection_id)
        if current is not None:
            raise AlreadyInRoom(connection_id, current.name)
        if room.started:
            raise GameAlreadyStarted(name)
        if len(room.players) >= self.rules.max_players:
            raise RoomFull(name, self.rules.max_players)
        player = room.add_player(connection_id)
        logger.info("Connection %s joined room %s (%d/%d)", connection_id, name, len(room.players), self.rules.max_players)
        return player

    def leave_room(self, name: str, connection_id: str) -> Departure:
        room = self.get(name)
        if not room.has_player(connection_id):
            raise NotRoomMember(name)
        return self._depart(room, connection_id)

    def remove_connection(self, connection_id: str) -> List[Departure]:
        """Remove a closed connection from every room it appears in.

        Empty waiting rooms the connection created are deleted as well.
        """
        departures = []
        for room in list(self._rooms.values()):
            if room.has_player(connection_id):
                departures.append(self._depart(room, connection_id))
            elif room.created_by == connection_id and not room.players and not room.started:
                self.delete_room(room.name)
                departures.append(Departure(room=room, player=None, was_current=False, room_deleted=True))
        return departures

    def delete_room(self, name: str) -> None:
        if self._rooms.pop(name, None) is not None:
            logger.info("Deleted room %s", name)

    def _depart(self, room: Room, connection_id: str) -> Departure:
        current = room.current_player()
        was_current = current is not None and current.connection_id == connection_id
        player = room.remove_player(connection_id)
        deleted = not room.players
        if deleted:
            self.delete_room(room.name)
        logger.info("Connection %s left room %s", connection_id, room.name)
        return Departure(room=room, player=player, was_current=was_current, room_deleted=deleted)
