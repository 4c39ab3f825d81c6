"""Enums and constants for the game."""

from enum import Enum, StrEnum


class GameStatus(str, Enum):
    """Game states during the lifecycle."""

    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class Suit(str, Enum):
    """Card suits, in canonical deck order."""

    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"


class Rank(str, Enum):
    """Card ranks, lowest first."""

    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"

    @property
    def order(self) -> int:
        """Numeric strength: 2 for a two, up to 14 for an ace."""
        return _RANK_ORDER[self]


_RANK_ORDER = {rank: position for position, rank in enumerate(Rank, start=2)}


class ErrorKind(StrEnum):
    """Reasons an action can be rejected.

    The value travels on the wire as ``error``; ``message`` is the text shown
    to the player.
    """

    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    INSUFFICIENT_PLAYERS = "INSUFFICIENT_PLAYERS"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    MUST_FOLLOW_SUIT = "MUST_FOLLOW_SUIT"
    PLAYER_NOT_IN_GAME = "PLAYER_NOT_IN_GAME"
    PLAYER_MISMATCH = "PLAYER_MISMATCH"
    GAME_NOT_IN_PROGRESS = "GAME_NOT_IN_PROGRESS"
    ALREADY_IN_GAME = "ALREADY_IN_GAME"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    UNKNOWN_EVENT = "UNKNOWN_EVENT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @property
    def message(self) -> str:
        """User-facing description."""
        return _ERROR_MESSAGES[self]


_ERROR_MESSAGES = {
    ErrorKind.ROOM_NOT_FOUND: "Game not found",
    ErrorKind.GAME_ALREADY_STARTED: "Game already started",
    ErrorKind.INSUFFICIENT_PLAYERS: "Not enough players to start the game",
    ErrorKind.NOT_YOUR_TURN: "Not your turn",
    ErrorKind.CARD_NOT_IN_HAND: "Card not in hand",
    ErrorKind.MUST_FOLLOW_SUIT: "Must follow suit",
    ErrorKind.PLAYER_NOT_IN_GAME: "Player not in a game",
    ErrorKind.PLAYER_MISMATCH: "Connection does not control that player",
    ErrorKind.GAME_NOT_IN_PROGRESS: "Game is not in progress",
    ErrorKind.ALREADY_IN_GAME: "Connection is already in a game",
    ErrorKind.INVALID_PAYLOAD: "Invalid request payload",
    ErrorKind.UNKNOWN_EVENT: "Unknown event",
    ErrorKind.INTERNAL_ERROR: "An unexpected error occurred",
}
