"""Game event handler: turns socket events into registry calls and replies."""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from app.api.responses import (
    CreateGamePayload,
    Event,
    JoinGamePayload,
    PlayCardPayload,
    ServerMessage,
    failure,
    success,
)
from app.models.enums import ErrorKind
from app.models.game import Game
from app.services.game_serializer import (
    serialize_last_trick,
    serialize_play,
    serialize_player,
    serialize_players,
    serialize_private_hand,
)
from app.services.room_registry import RoomRegistry

if TYPE_CHECKING:
    from app.api.websocket import ConnectionManager

logger = logging.getLogger(__name__)

Outcome = tuple[dict[str, Any], list[ServerMessage]]


class GameHandler:
    """Handles game events arriving over WebSocket.

    Every request gets exactly one response on its own connection. Room-wide
    changes are then broadcast as separate notifications. Handlers mutate game
    state synchronously and only return what to send, so a request is fully
    applied before anything is awaited.
    """

    def __init__(self, manager: "ConnectionManager", registry: RoomRegistry) -> None:
        """Initialize handler with connection manager and room registry."""
        self.manager = manager
        self.registry = registry
        self._handlers: dict[str, Callable[[str, Any], Outcome]] = {
            Event.CREATE: self._handle_create,
            Event.JOIN: self._handle_join,
            Event.START: self._handle_start,
            Event.PLAY_CARD: self._handle_play_card,
            Event.REMATCH: self._handle_rematch,
            Event.STATE: self._handle_state,
        }

    async def handle_event(
        self, connection_id: str, event: str, data: Any, request_id: Any = None
    ) -> dict[str, Any]:
        """Route an incoming event to its handler and deliver the results.

        Args:
            connection_id: Connection that sent the event
            event: Event name
            data: Event payload
            request_id: Client id for matching the response, echoed back

        Returns:
            The response sent to the caller

        """
        logger.info("Received %s from connection %s", event, connection_id)

        messages: list[ServerMessage] = []
        handler = self._handlers.get(event)
        if handler is None:
            logger.warning("Unknown event: %s", event)
            response = failure(ErrorKind.UNKNOWN_EVENT)
        else:
            try:
                response, messages = handler(connection_id, data if data is not None else {})
            except ValidationError as e:
                logger.warning("Invalid %s payload from %s: %s", event, connection_id, e)
                response = failure(ErrorKind.INVALID_PAYLOAD)
            except Exception:
                logger.exception("Error handling %s from %s", event, connection_id)
                response = failure(ErrorKind.INTERNAL_ERROR)

        await self.manager.send_response(connection_id, request_id, response)
        for message in messages:
            await self.manager.dispatch_message(message)
        return response

    async def handle_disconnect(self, connection_id: str) -> None:
        """Remove the disconnected connection's player and tell the room.

        Cleanup is best effort: there is nobody left to report a failure to.
        """
        try:
            location = self.registry.find_player_by_connection(connection_id)
            if location is None:
                return

            result = self.registry.remove_player(location.player_id, connection_id)
            if not result.success:
                logger.warning(
                    "Could not remove player %s after disconnect: %s",
                    location.player_id,
                    result.message,
                )
                return

            if result.players and result.game is not None:
                messages = [
                    ServerMessage(
                        event=Event.PLAYER_LEFT,
                        room_code=location.room_code,
                        content={
                            "playerId": location.player_id,
                            "players": serialize_players(result.players),
                            "gameState": result.game.get_public_state(),
                            "message": "A player has left the game",
                        },
                        excluded_id=connection_id,
                    )
                ]
                # The leaver may have been the last player the trick waited on
                if result.trick is not None:
                    messages.extend(
                        self._trick_messages(
                            result.game, result.trick.winner_id, result.trick.points
                        )
                    )
                for message in messages:
                    await self.manager.dispatch_message(message)
        except Exception:
            logger.exception("Error cleaning up after connection %s", connection_id)

    # ------------------------------------------------------------------
    # Room setup
    # ------------------------------------------------------------------

    def _handle_create(self, connection_id: str, data: Any) -> Outcome:
        payload = CreateGamePayload.model_validate(data)
        result = self.registry.create_game(payload.player_name, connection_id, payload.target_score)
        if not result.success or result.player is None or result.room_code is None:
            return failure(result.error or ErrorKind.INTERNAL_ERROR), []

        self.manager.join_room(result.room_code, connection_id)
        return (
            success(
                result.message,
                roomCode=result.room_code,
                player=serialize_player(result.player),
            ),
            [],
        )

    def _handle_join(self, connection_id: str, data: Any) -> Outcome:
        payload = JoinGamePayload.model_validate(data)
        result = self.registry.join_game(payload.room_code, payload.player_name, connection_id)
        if not result.success or result.player is None or result.room_code is None:
            logger.info("Failed to join game %s: %s", payload.room_code, result.message)
            return failure(result.error or ErrorKind.INTERNAL_ERROR), []

        self.manager.join_room(result.room_code, connection_id)
        player = serialize_player(result.player)
        players = serialize_players(result.players)

        joined = ServerMessage(
            event=Event.PLAYER_JOINED,
            room_code=result.room_code,
            content={
                "roomCode": result.room_code,
                "player": player,
                "players": players,
                "message": f"{result.player.name} joined the game",
            },
            excluded_id=connection_id,
        )
        response = success(
            result.message, roomCode=result.room_code, player=player, players=players
        )
        return response, [joined]

    # ------------------------------------------------------------------
    # Game flow
    # ------------------------------------------------------------------

    def _handle_start(self, connection_id: str, _data: Any) -> Outcome:
        location = self.registry.find_player_by_connection(connection_id)
        if location is None:
            return failure(ErrorKind.PLAYER_NOT_IN_GAME), []

        result = self.registry.start_game(location.room_code)
        if not result.success or result.game is None:
            logger.info("Failed to start game %s: %s", location.room_code, result.message)
            return failure(result.error or ErrorKind.INTERNAL_ERROR), []

        return success(result.message), self._deal_messages(result.game, Event.STARTED)

    def _handle_rematch(self, connection_id: str, _data: Any) -> Outcome:
        location = self.registry.find_player_by_connection(connection_id)
        if location is None:
            return failure(ErrorKind.PLAYER_NOT_IN_GAME), []

        result = self.registry.restart_game(location.room_code)
        if not result.success or result.game is None:
            return failure(result.error or ErrorKind.INTERNAL_ERROR), []

        return success(result.message), self._deal_messages(result.game, Event.RESTARTED)

    def _deal_messages(self, game: Game, event: Event) -> list[ServerMessage]:
        """Public state to the room, then each player's hand to that player alone."""
        messages = [
            ServerMessage(
                event=event,
                room_code=game.code,
                content={"gameState": game.get_public_state()},
            )
        ]
        for player in game.players:
            logger.debug(
                "Sending hand to player %s: %d cards", player, len(game.hands[player.id])
            )
            messages.append(
                ServerMessage(
                    event=Event.PLAYER_STATE,
                    room_code=game.code,
                    content=serialize_private_hand(game, player),
                    receiver_id=player.connection_id,
                )
            )
        return messages

    def _handle_play_card(self, connection_id: str, data: Any) -> Outcome:
        payload = PlayCardPayload.model_validate(data)
        location = self.registry.find_player_by_connection(connection_id)
        if location is None:
            return failure(ErrorKind.PLAYER_NOT_IN_GAME), []
        if location.player_id != payload.player_id:
            logger.warning(
                "Connection %s tried to play for %s but is seated as %s",
                connection_id,
                payload.player_id,
                location.player_id,
            )
            return failure(ErrorKind.PLAYER_MISMATCH), []

        game = self.registry.get_game_by_player(payload.player_id)
        if game is None:
            return failure(ErrorKind.PLAYER_NOT_IN_GAME), []

        result = self.registry.play_card(game.code, payload.player_id, payload.card.to_card())
        if not result.success or result.play is None:
            return failure(result.error or ErrorKind.INTERNAL_ERROR), []

        accepted = result.play
        response = success(
            result.message,
            play=serialize_play(accepted.play),
            nextPlayer=accepted.next_player_id,
            trickComplete=accepted.trick_complete,
            trickWinner=accepted.trick_winner_id,
            trickPoints=accepted.trick_points,
            scores=dict(game.scores),
            gameOver=game.game_over,
            winner=game.winner_id,
        )

        messages = [ServerMessage(event=Event.CARD_PLAYED, room_code=game.code, content=response)]
        if accepted.trick_complete:
            messages.extend(
                self._trick_messages(game, accepted.trick_winner_id, accepted.trick_points)
            )
        return response, messages

    def _trick_messages(
        self, game: Game, winner_id: str | None, points: int | None
    ) -> list[ServerMessage]:
        """Announce a resolved trick, and the end of the game if it ended there."""
        logger.info(
            "Trick completed in game %s: %s won %s points", game.code, winner_id, points
        )
        messages = [
            ServerMessage(
                event=Event.TRICK_COMPLETE,
                room_code=game.code,
                content={
                    "winner": winner_id,
                    "points": points,
                    "scores": dict(game.scores),
                    "lastTrick": serialize_last_trick(game.last_trick),
                },
            )
        ]

        if game.game_over:
            logger.info("Game %s is over. Final scores: %s", game.code, game.scores)
            messages.append(
                ServerMessage(
                    event=Event.OVER,
                    room_code=game.code,
                    content={
                        "winner": game.winner_id,
                        "scores": dict(game.scores),
                        "gameOver": True,
                        "gameStatus": game.status.value,
                    },
                )
            )
        return messages

    def _handle_state(self, connection_id: str, _data: Any) -> Outcome:
        location = self.registry.find_player_by_connection(connection_id)
        if location is None:
            return failure(ErrorKind.PLAYER_NOT_IN_GAME), []

        game = self.registry.get_game(location.room_code)
        if game is None:
            return failure(ErrorKind.ROOM_NOT_FOUND), []

        return success("Game state", gameState=game.get_state_for(location.player_id)), []
