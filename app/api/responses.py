"""Wire events, request payloads and response helpers."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.card import Card
from app.models.enums import ErrorKind, Rank, Suit

__all__ = [
    "CardPayload",
    "CreateGamePayload",
    "ErrorKind",
    "Event",
    "JoinGamePayload",
    "PlayCardPayload",
    "PlayersResponse",
    "ServerMessage",
    "failure",
    "success",
]


class Event(StrEnum):
    """Socket event names."""

    # Requests from client
    CREATE = "game:create"
    JOIN = "game:join"
    START = "game:start"
    PLAY_CARD = "game:playCard"
    REMATCH = "game:rematch"
    STATE = "game:state"

    # Notifications sent to players
    ACK = "ack"
    PLAYER_JOINED = "game:playerJoined"
    STARTED = "game:started"
    PLAYER_STATE = "game:playerState"
    CARD_PLAYED = "game:cardPlayed"
    TRICK_COMPLETE = "game:trickComplete"
    OVER = "game:over"
    RESTARTED = "game:restarted"
    PLAYER_LEFT = "game:playerLeft"


class _Payload(BaseModel):
    """Base for client payloads: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class CreateGamePayload(_Payload):
    """Payload of ``game:create``."""

    player_name: str = Field(min_length=1, max_length=32)
    target_score: int | None = Field(default=None, ge=1)

    @field_validator("player_name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Player name must not be blank")
        return value


class JoinGamePayload(CreateGamePayload):
    """Payload of ``game:join``; ``gameCode`` is accepted for ``roomCode``."""

    room_code: str = Field(
        min_length=1,
        validation_alias=AliasChoices("roomCode", "gameCode", "room_code"),
    )


class CardPayload(_Payload):
    """A card as sent by a client; ``value`` is accepted for ``rank``."""

    suit: Suit
    rank: Rank = Field(validation_alias=AliasChoices("rank", "value"))

    @field_validator("rank", mode="before")
    @classmethod
    def _rank_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    def to_card(self) -> Card:
        """Convert to the domain card."""
        return Card(suit=self.suit, rank=self.rank)


class PlayCardPayload(_Payload):
    """Payload of ``game:playCard``."""

    player_id: str = Field(min_length=1)
    card: CardPayload


class PlayersResponse(BaseModel):
    """Response for the room roster endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    room_code: str
    players: list[dict[str, Any]]


@dataclass
class ServerMessage:
    """Message sent from server to clients via WebSocket.

    Attributes:
        event: Event name
        room_code: Room the message belongs to
        content: Message payload (varies by event)
        receiver_id: Specific connection to receive (empty = broadcast)
        excluded_id: Connection to exclude from broadcast

    """

    event: Event
    room_code: str
    content: Any
    receiver_id: str = ""
    excluded_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "event": self.event.value,
            "data": self.content,
        }


def success(message: str, **content: Any) -> dict[str, Any]:
    """Build a success response."""
    return {"success": True, "message": message, **content}


def failure(error: ErrorKind, message: str | None = None) -> dict[str, Any]:
    """Build a failure response."""
    return {"success": False, "message": message or error.message, "error": error.value}
