"""Game domain models."""

from app.models.card import Card
from app.models.deck import deal, shuffle, standard_deck
from app.models.enums import ErrorKind, GameStatus, Rank, Suit
from app.models.player import Player
from app.models.results import Accepted, PlayerLocation, PlayResult, Rejected, RoomResult
from app.models.trick import LastTrick, Play, Trick, resolve_trick

__all__ = [
    "Accepted",
    "Card",
    "ErrorKind",
    "GameStatus",
    "LastTrick",
    "Play",
    "PlayResult",
    "Player",
    "PlayerLocation",
    "Rank",
    "Rejected",
    "RoomResult",
    "Suit",
    "Trick",
    "deal",
    "resolve_trick",
    "shuffle",
    "standard_deck",
]
