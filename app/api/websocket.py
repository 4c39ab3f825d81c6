"""WebSocket connection manager: connections, room groups and delivery."""

from __future__ import annotations

import json
import logging
import uuid
from typing import TYPE_CHECKING, Any

from fastapi import WebSocket, WebSocketDisconnect

from app.api.responses import Event, ServerMessage

if TYPE_CHECKING:
    from app.api.game_handler import GameHandler

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages WebSocket connections for multiplayer games.

    Handles:
    - One connection id per socket
    - Room groups (room code -> connection ids)
    - Unicast, room broadcast and request acknowledgements
    - Disconnect notification to the game handler
    """

    def __init__(self) -> None:
        """Initialize the connection manager."""
        # connection_id -> WebSocket
        self.active_connections: dict[str, WebSocket] = {}
        # room_code -> connection ids
        self.rooms: dict[str, set[str]] = {}
        self.game_handler: GameHandler

    def set_game_handler(self, game_handler: GameHandler) -> None:
        """Set the game handler after initialization to avoid circular imports.

        Args:
            game_handler: The game handler instance

        """
        self.game_handler = game_handler

    async def connect(self, websocket: WebSocket) -> str:
        """Accept a new WebSocket connection and give it an id.

        Args:
            websocket: WebSocket connection

        Returns:
            The connection id

        """
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        self.active_connections[connection_id] = websocket
        logger.info("Connection %s opened", connection_id)
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        """Forget a connection and drop it from every room group."""
        if self.active_connections.pop(connection_id, None) is not None:
            logger.info("Connection %s closed", connection_id)

        for room_code in list(self.rooms):
            self.leave_room(room_code, connection_id)

    def join_room(self, room_code: str, connection_id: str) -> None:
        """Add a connection to a room group."""
        self.rooms.setdefault(room_code, set()).add(connection_id)

    def leave_room(self, room_code: str, connection_id: str) -> None:
        """Remove a connection from a room group; empty groups are dropped."""
        members = self.rooms.get(room_code)
        if members is None:
            return
        members.discard(connection_id)
        if not members:
            del self.rooms[room_code]

    async def _send(self, connection_id: str, data: dict[str, Any]) -> bool:
        websocket = self.active_connections.get(connection_id)
        if websocket is None:
            return False
        try:
            await websocket.send_json(data)
        except (WebSocketDisconnect, RuntimeError, ConnectionError, OSError):
            logger.warning("Connection lost to %s", connection_id)
            return False
        return True

    async def send_response(
        self, connection_id: str, request_id: Any, response: dict[str, Any]
    ) -> None:
        """Send the direct response to a request.

        Args:
            connection_id: Connection that made the request
            request_id: Client-chosen id echoed back so it can match the reply
            response: Response payload

        """
        await self._send(
            connection_id,
            {"event": Event.ACK.value, "id": request_id, "data": response},
        )

    async def send_personal_message(self, message: ServerMessage) -> None:
        """Send message to the connection named by ``message.receiver_id``."""
        await self._send(message.receiver_id, message.to_dict())

    async def broadcast_to_room(self, message: ServerMessage) -> None:
        """Broadcast message to every connection in the message's room.

        Args:
            message: Message to broadcast; ``excluded_id`` is skipped

        """
        disconnected = []
        for connection_id in list(self.rooms.get(message.room_code, ())):
            if message.excluded_id and connection_id == message.excluded_id:
                continue
            if not await self._send(connection_id, message.to_dict()):
                disconnected.append(connection_id)

        for connection_id in disconnected:
            self.leave_room(message.room_code, connection_id)

    async def dispatch_message(self, message: ServerMessage) -> None:
        """Deliver a message to its receiver, or to its room if it has none."""
        logger.debug("Dispatching %s to room %s", message.event.value, message.room_code)
        if message.receiver_id:
            await self.send_personal_message(message)
        else:
            await self.broadcast_to_room(message)

    async def handle_connection(self, websocket: WebSocket) -> None:
        """Serve one socket until it closes.

        Each frame is ``{"event", "data", "id"}``. Frames are handled one at a
        time in arrival order. When the socket goes away the game handler is
        told, so the player can be removed from their room.
        """
        connection_id = await self.connect(websocket)
        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    frame = json.loads(raw)
                except json.JSONDecodeError:
                    logger.warning("Ignoring malformed frame from %s", connection_id)
                    continue
                if not isinstance(frame, dict):
                    logger.warning("Ignoring non-object frame from %s", connection_id)
                    continue

                await self.game_handler.handle_event(
                    connection_id,
                    str(frame.get("event", "")),
                    frame.get("data"),
                    frame.get("id"),
                )

        except WebSocketDisconnect:
            logger.info("Connection %s disconnected", connection_id)

        except (RuntimeError, ConnectionError, OSError) as e:
            logger.warning("Error handling messages from %s: %s", connection_id, e)

        finally:
            self.disconnect(connection_id)
            await self.game_handler.handle_disconnect(connection_id)
