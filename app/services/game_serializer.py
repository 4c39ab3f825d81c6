"""Game serialization for the wire.

Converts engine objects into the camelCase dictionaries sent to clients.
Every view is a projection of the one canonical ``Game``; hands only ever
appear in the view built for their owner.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from app.models.card import Card
from app.models.player import Player
from app.models.trick import LastTrick, Play, Trick

if TYPE_CHECKING:
    from app.models.game import Game


def serialize_card(card: Card) -> dict[str, str]:
    """Serialize a Card to a dictionary."""
    return {"suit": card.suit.value, "rank": card.rank.value}


def serialize_player(player: Player) -> dict[str, Any]:
    """Serialize a Player's public fields; the connection id stays server-side."""
    return {"id": player.id, "name": player.name, "handSize": player.hand_size}


def serialize_players(players: list[Player]) -> list[dict[str, Any]]:
    """Serialize a roster."""
    return [serialize_player(p) for p in players]


def serialize_play(play: Play) -> dict[str, Any]:
    """Serialize a Play to a dictionary."""
    return {"playerId": play.player_id, "card": serialize_card(play.card)}


def serialize_trick(trick: Trick) -> dict[str, Any]:
    """Serialize a resolved Trick to a dictionary."""
    return {
        "plays": [serialize_play(p) for p in trick.plays],
        "winner": trick.winner_id,
        "points": trick.points,
    }


def serialize_last_trick(last_trick: LastTrick | None) -> dict[str, Any] | None:
    """Serialize the latest trick summary."""
    if last_trick is None:
        return None
    return {"winner": last_trick.winner_id, "points": last_trick.points}


def serialize_hand(hand: list[Card]) -> list[dict[str, str]]:
    """Serialize a hand of cards."""
    return [serialize_card(c) for c in hand]


def serialize_public_state(game: Game) -> dict[str, Any]:
    """Build the state every player in the room may see.

    Args:
        game: Game to project

    Returns:
        Full game state without any player's cards

    """
    return {
        "roomCode": game.code,
        "status": game.status.value,
        "players": serialize_players(game.players),
        "currentTrick": [serialize_play(p) for p in game.current_trick],
        "tricks": [serialize_trick(t) for t in game.trick_history],
        "trickNumber": game.trick_number,
        "currentPlayerId": game.current_player_id,
        "scores": dict(game.scores),
        "targetScore": game.target_score,
        "gameOver": game.game_over,
        "winner": game.winner_id,
        "lastTrick": serialize_last_trick(game.last_trick),
    }


def serialize_player_state(game: Game, player_id: str) -> dict[str, Any]:
    """Build the public state plus one player's own hand."""
    state = serialize_public_state(game)
    state["playerId"] = player_id
    state["hand"] = serialize_hand(game.hands.get(player_id, []))
    return state


def serialize_private_hand(game: Game, player: Player) -> dict[str, Any]:
    """Build the private ``game:playerState`` payload sent to one player."""
    return {
        "playerId": player.id,
        "hand": serialize_hand(game.hands.get(player.id, [])),
        "currentPlayerId": game.current_player_id,
    }
