"""Deck construction, shuffling and dealing."""

import random

from app.models.card import Card
from app.models.enums import Rank, Suit


def standard_deck() -> list[Card]:
    """Build the 52-card deck, suit by suit, ranks ascending."""
    return [Card(suit, rank) for suit in Suit for rank in Rank]


def shuffle(deck: list[Card], rng: random.Random | None = None) -> list[Card]:
    """Return a shuffled copy of ``deck`` using Fisher-Yates.

    Args:
        deck: Cards to shuffle; left untouched
        rng: Random source, the ``random`` module when omitted

    Returns:
        A new list holding the same cards in random order

    """
    source = rng or random
    cards = list(deck)
    for i in range(len(cards) - 1, 0, -1):
        j = source.randint(0, i)  # noqa: S311
        cards[i], cards[j] = cards[j], cards[i]
    return cards


def deal(deck: list[Card], player_count: int) -> list[list[Card]]:
    """Split the deck into contiguous hands, one per player.

    Every player but the last gets ``len(deck) // player_count`` cards and the
    last player takes whatever remains, so hand sizes differ whenever the deck
    does not divide evenly (52 cards over 3 players gives 17, 17, 18).

    Raises:
        ValueError: If ``player_count`` is below 1.

    """
    if player_count < 1:
        raise ValueError("Cannot deal to fewer than one player")

    per_player = len(deck) // player_count
    hands: list[list[Card]] = []
    for index in range(player_count):
        start = index * per_player
        end = len(deck) if index == player_count - 1 else start + per_player
        hands.append(list(deck[start:end]))
    return hands
