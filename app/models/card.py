"""Card model and point values."""

from dataclasses import dataclass

from app.constants import ACE_POINTS, FIVE_POINTS, QUEEN_OF_SPADES_POINTS, TEN_POINTS
from app.models.enums import Rank, Suit

_SUIT_SYMBOLS = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}

_RANK_POINTS = {
    Rank.FIVE: FIVE_POINTS,
    Rank.TEN: TEN_POINTS,
    Rank.ACE: ACE_POINTS,
}


@dataclass(frozen=True)
class Card:
    """A playing card.

    Attributes:
        suit: One of the four suits
        rank: Face value, 2 through ace

    """

    suit: Suit
    rank: Rank

    @property
    def points(self) -> int:
        """Points this card is worth to whoever wins the trick it is in."""
        if self.suit == Suit.SPADES and self.rank == Rank.QUEEN:
            return QUEEN_OF_SPADES_POINTS
        return _RANK_POINTS.get(self.rank, 0)

    def beats(self, other: "Card") -> bool:
        """Check if this card outranks another card of the same suit."""
        return self.suit == other.suit and self.rank.order > other.rank.order

    def __str__(self) -> str:
        """Return string representation, e.g. ``Q♠``."""
        return f"{self.rank.value}{_SUIT_SYMBOLS[self.suit]}"
