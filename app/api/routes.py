"""API routes."""

from typing import Any

from fastapi import APIRouter, HTTPException, Request, WebSocket

from app.api.responses import PlayersResponse
from app.services.game_serializer import serialize_players
from app.services.room_registry import RoomRegistry

router = APIRouter()


def _registry(request: Request) -> RoomRegistry:
    return request.app.state.registry


@router.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@router.get("/games/{room_code}")
async def get_game(room_code: str, request: Request) -> dict[str, Any]:
    """Get the public state of a room.

    Args:
        room_code: Room code, any case
        request: Incoming request

    Returns:
        Game state without any player's hand

    """
    game = _registry(request).get_game(room_code)
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    return game.get_public_state()


@router.get("/games/{room_code}/players")
async def get_players(room_code: str, request: Request) -> PlayersResponse:
    """Get the players seated in a room."""
    game = _registry(request).get_game(room_code)
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    return PlayersResponse(room_code=game.code, players=serialize_players(game.players))


@router.websocket("/ws")
async def game_socket(websocket: WebSocket) -> None:
    """WebSocket endpoint carrying all game events.

    Args:
        websocket: WebSocket connection

    """
    await websocket.app.state.connection_manager.handle_connection(websocket)
