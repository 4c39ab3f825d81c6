"""Result types returned by the game engine and room registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from app.models.enums import ErrorKind

if TYPE_CHECKING:
    from app.models.game import Game
    from app.models.player import Player
    from app.models.trick import Play, Trick


@dataclass(frozen=True)
class Accepted:
    """A card play that passed validation.

    Attributes:
        play: The play that was made
        next_player_id: Whose turn it is now (None once the game is over)
        trick_complete: Whether this play closed the trick
        trick_winner_id: Winner of the closed trick
        trick_points: Points the winner collected

    """

    valid: ClassVar[bool] = True

    play: Play
    next_player_id: str | None
    trick_complete: bool = False
    trick_winner_id: str | None = None
    trick_points: int | None = None


@dataclass(frozen=True)
class Rejected:
    """A card play that failed validation; the game is unchanged."""

    valid: ClassVar[bool] = False

    reason: ErrorKind

    @property
    def message(self) -> str:
        return self.reason.message


PlayResult = Accepted | Rejected


@dataclass(frozen=True)
class PlayerLocation:
    """Where a connection's player is seated."""

    player_id: str
    room_code: str


@dataclass
class RoomResult:
    """Uniform outcome of a registry operation.

    Only the fields relevant to the operation are filled in.
    """

    success: bool
    message: str
    error: ErrorKind | None = None
    room_code: str | None = None
    game: Game | None = None
    player: Player | None = None
    players: list[Player] = field(default_factory=list)
    play: Accepted | None = None
    trick: Trick | None = None
    game_deleted: bool = False

    @classmethod
    def ok(cls, message: str, **kwargs: object) -> RoomResult:
        return cls(success=True, message=message, **kwargs)  # type: ignore[arg-type]

    @classmethod
    def fail(cls, error: ErrorKind, **kwargs: object) -> RoomResult:
        return cls(success=False, message=error.message, error=error, **kwargs)  # type: ignore[arg-type]
