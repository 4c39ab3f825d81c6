"""Trick model and trick resolution."""

from collections.abc import Sequence
from dataclasses import dataclass

from app.models.card import Card
from app.models.enums import Suit


@dataclass(frozen=True)
class Play:
    """A card played by a player in the current trick."""

    player_id: str
    card: Card


@dataclass(frozen=True)
class Trick:
    """A resolved trick.

    Attributes:
        plays: Cards in the order they were played
        winner_id: Player who played the highest card of the lead suit
        points: Sum of point values of every card in the trick

    """

    plays: tuple[Play, ...]
    winner_id: str
    points: int

    @property
    def lead_suit(self) -> Suit:
        """Suit of the first card played."""
        return self.plays[0].card.suit

    def __str__(self) -> str:
        """Return string representation of the trick."""
        cards = " ".join(str(play.card) for play in self.plays)
        return f"Trick [{cards}]: winner {self.winner_id}, {self.points} points"


@dataclass(frozen=True)
class LastTrick:
    """Winner and value of the most recently resolved trick."""

    winner_id: str
    points: int


def trick_points(cards: Sequence[Card]) -> int:
    """Total point value of a set of cards."""
    return sum(card.points for card in cards)


def determine_winner(plays: Sequence[Play]) -> Play:
    """Find the winning play.

    Only cards of the lead suit can win; the highest of them takes the trick.
    The lead card starts as the high card, so it wins when nobody follows
    with something higher.
    """
    high = plays[0]
    for play in plays[1:]:
        if play.card.beats(high.card):
            high = play
    return high


def resolve_trick(plays: Sequence[Play]) -> Trick:
    """Resolve a completed set of plays into a trick.

    Args:
        plays: Plays in order, lead card first

    Returns:
        The resolved trick with its winner and point value

    Raises:
        ValueError: If no cards were played.

    """
    if not plays:
        raise ValueError("Cannot resolve a trick with no plays")

    winner = determine_winner(plays)
    return Trick(
        plays=tuple(plays),
        winner_id=winner.player_id,
        points=trick_points([play.card for play in plays]),
    )
