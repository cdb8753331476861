"""Error taxonomy shared by the registry, the turn engine and the dispatcher."""

from __future__ import annotations


class GameError(RuntimeError):
    """Base class for recoverable, caller-local game errors."""

    code = "GameError"


# Room lifecycle ------------------------------------------------------


class RoomExists(GameError):
    code = "RoomExists"

    def __init__(self, name: str) -> None:
        self.room_name = name
        super().__init__(f"Room {name!r} already exists.")


class RoomNotFound(GameError):
    code = "RoomNotFound"

    def __init__(self, name: str) -> None:
        self.room_name = name
        super().__init__(f"Room {name!r} not found.")


class RoomFull(GameError):
    code = "RoomFull"

    def __init__(self, name: str, max_players: int) -> None:
        self.room_name = name
        self.max_players = max_players
        super().__init__(f"Room {name!r} is full ({max_players} players).")


class AlreadyInRoom(GameError):
    """A connection may sit in one room at a time."""

    code = "AlreadyInRoom"

    def __init__(self, connection_id: str, name: str) -> None:
        self.connection_id = connection_id
        self.room_name = name
        super().__init__(f"Connection is already in room {name!r}.")


class NotRoomMember(GameError):
    code = "NotRoomMember"

    def __init__(self, name: str) -> None:
        self.room_name = name
        super().__init__(f"Not a member of room {name!r}.")


class PlayerNotFound(GameError):
    code = "PlayerNotFound"

    def __init__(self, connection_id: str) -> None:
        self.connection_id = connection_id
        super().__init__(f"Player {connection_id} not found.")


# Game flow -----------------------------------------------------------


class GameAlreadyStarted(GameError):
    code = "GameAlreadyStarted"

    def __init__(self, name: str) -> None:
        self.room_name = name
        super().__init__(f"Game in room {name!r} has already started.")


class GameNotStarted(GameError):
    code = "GameNotStarted"

    def __init__(self, name: str) -> None:
        self.room_name = name
        super().__init__(f"Game in room {name!r} has not started.")


class GameFinished(GameError):
    code = "GameFinished"

    def __init__(self, name: str) -> None:
        self.room_name = name
        super().__init__(f"Game in room {name!r} is over.")


class TooFewPlayers(GameError):
    code = "TooFewPlayers"

    def __init__(self, name: str, minimum: int, actual: int) -> None:
        self.room_name = name
        self.minimum = minimum
        self.actual = actual
        super().__init__(f"Need at least {minimum} players to start, room {name!r} has {actual}.")


class NotYourTurn(GameError):
    code = "NotYourTurn"


class CardNotInHand(GameError):
    code = "CardNotInHand"


class WrongGameMode(GameError):
    """Raised when an action belongs to the other rule mode."""

    code = "WrongGameMode"


# Cards and payloads --------------------------------------------------


class InsufficientCards(GameError):
    code = "InsufficientCards"

    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(f"Cannot draw {requested} card(s), {available} left in the deck.")


class InvalidCard(GameError):
    code = "InvalidCard"


class InvalidPayload(GameError):
    code = "InvalidPayload"
