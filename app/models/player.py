"""Player model."""

from dataclasses import dataclass


@dataclass
class Player:
    """Represents a player seated in a game.

    The player's cards live in the owning game's ``hands`` mapping; only the
    count is kept here because it is public.

    Attributes:
        id: Unique player identifier within the game
        name: Display name
        connection_id: Transport connection the player joined from
        hand_size: Number of cards currently held

    """

    id: str
    name: str
    connection_id: str
    hand_size: int = 0

    def __str__(self) -> str:
        """Return string representation."""
        return f"{self.name} ({self.id})"
