"""Room registry: room codes, games and the players seated in them."""

import logging
import secrets
import threading

from app.config import Settings, settings as default_settings
from app.constants import ROOM_CODE_ALPHABET
from app.models.card import Card
from app.models.enums import ErrorKind, GameStatus
from app.models.game import Game
from app.models.player import Player
from app.models.results import PlayerLocation, Rejected, RoomResult

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Owns every live game and the indexes that locate players in them.

    Keeps three tables in step:
    - room code -> game
    - player id -> room code
    - connection id -> player id

    A room is created with its first player and discarded when its last
    player leaves. All table mutations happen under one lock; the games
    themselves are only touched by the event loop that owns the registry.
    """

    def __init__(self, config: Settings | None = None) -> None:
        """Initialize empty tables."""
        self.settings = config or default_settings
        self.games: dict[str, Game] = {}
        self._player_rooms: dict[str, str] = {}
        self._connection_players: dict[str, str] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_game(self, room_code: str) -> Game | None:
        """Get a game by room code, ignoring case."""
        return self.games.get(room_code.strip().upper())

    def get_game_by_player(self, player_id: str) -> Game | None:
        """Get the game a player is seated in."""
        room_code = self._player_rooms.get(player_id)
        if room_code is None:
            return None
        return self.games.get(room_code)

    def get_players(self, room_code: str) -> list[Player]:
        """Roster of a room, empty if the room does not exist."""
        game = self.get_game(room_code)
        return list(game.players) if game else []

    def room_codes(self) -> list[str]:
        """Codes of all live rooms."""
        return list(self.games)

    def find_player_by_connection(self, connection_id: str) -> PlayerLocation | None:
        """Resolve a raw connection id to the player and room it belongs to."""
        with self._lock:
            player_id = self._connection_players.get(connection_id)
            if player_id is not None and player_id in self._player_rooms:
                return PlayerLocation(player_id=player_id, room_code=self._player_rooms[player_id])

            # Games placed in the table directly have no index entries.
            for room_code, game in self.games.items():
                player = game.get_player_by_connection(connection_id)
                if player is not None:
                    return PlayerLocation(player_id=player.id, room_code=room_code)
        return None

    # ------------------------------------------------------------------
    # Room lifecycle
    # ------------------------------------------------------------------

    def _generate_room_code(self) -> str:
        length = self.settings.room_code_length
        while True:
            code = "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(length))
            if code not in self.games:
                return code

    def _seat(self, game: Game, player_name: str, connection_id: str) -> Player:
        player = game.add_player(player_name, connection_id, taken_ids=self._player_rooms)
        self._player_rooms[player.id] = game.code
        self._connection_players[connection_id] = player.id
        return player

    def create_game(
        self, player_name: str, connection_id: str, target_score: int | None = None
    ) -> RoomResult:
        """Create a room and seat its creator as the first player.

        Args:
            player_name: Creator's display name
            connection_id: Creator's connection
            target_score: Score that ends the game, the configured default if None

        Returns:
            Result carrying ``room_code`` and ``player``

        """
        with self._lock:
            if connection_id in self._connection_players:
                return RoomResult.fail(ErrorKind.ALREADY_IN_GAME)

            room_code = self._generate_room_code()
            game = Game(
                code=room_code,
                target_score=target_score or self.settings.default_target_score,
                min_players=self.settings.min_players,
            )
            self.games[room_code] = game
            player = self._seat(game, player_name, connection_id)

        logger.info("Game %s created by %s", room_code, player)
        return RoomResult.ok(
            "Game created successfully", room_code=room_code, game=game, player=player
        )

    def join_game(self, room_code: str, player_name: str, connection_id: str) -> RoomResult:
        """Seat a player in an existing room that has not started yet."""
        with self._lock:
            game = self.get_game(room_code)
            if game is None:
                logger.info("Join failed: no game with code %s", room_code)
                return RoomResult.fail(ErrorKind.ROOM_NOT_FOUND)

            if game.status != GameStatus.WAITING:
                return RoomResult.fail(ErrorKind.GAME_ALREADY_STARTED, room_code=game.code)

            if connection_id in self._connection_players:
                return RoomResult.fail(ErrorKind.ALREADY_IN_GAME, room_code=game.code)

            player = self._seat(game, player_name, connection_id)

        return RoomResult.ok(
            "Joined game successfully",
            room_code=game.code,
            game=game,
            player=player,
            players=list(game.players),
        )

    def start_game(self, room_code: str) -> RoomResult:
        """Deal and begin play in a room."""
        game = self.get_game(room_code)
        if game is None:
            return RoomResult.fail(ErrorKind.ROOM_NOT_FOUND)

        error = game.start()
        if error is not None:
            return RoomResult.fail(error, room_code=game.code, game=game)
        return RoomResult.ok("Game started successfully", room_code=game.code, game=game)

    def play_card(self, room_code: str, player_id: str, card: Card) -> RoomResult:
        """Play a card for a player in a room."""
        game = self.get_game(room_code)
        if game is None:
            return RoomResult.fail(ErrorKind.ROOM_NOT_FOUND)

        result = game.play_card(player_id, card)
        if isinstance(result, Rejected):
            logger.info(
                "Player %s could not play %s in game %s: %s",
                player_id,
                card,
                game.code,
                result.message,
            )
            return RoomResult.fail(result.reason, room_code=game.code, game=game)
        return RoomResult.ok(
            "Card played successfully", room_code=game.code, game=game, play=result
        )

    def restart_game(self, room_code: str) -> RoomResult:
        """Deal a fresh game for the same players."""
        game = self.get_game(room_code)
        if game is None:
            return RoomResult.fail(ErrorKind.ROOM_NOT_FOUND)

        error = game.restart()
        if error is not None:
            return RoomResult.fail(error, room_code=game.code, game=game)
        return RoomResult.ok("Game restarted successfully", room_code=game.code, game=game)

    def remove_player(self, player_id: str, connection_id: str | None = None) -> RoomResult:
        """Take a player out of their room, deleting the room if it empties.

        Safe to call more than once for the same player: later calls report
        ``PLAYER_NOT_IN_GAME`` and change nothing.

        Args:
            player_id: Player to remove
            connection_id: Used to find the player when the id is not indexed

        Returns:
            Result carrying ``room_code``, the remaining ``players`` and the
            ``trick`` the removal completed, if any

        """
        with self._lock:
            room_code = self._player_rooms.get(player_id)
            if room_code is None and connection_id is not None:
                location = self.find_player_by_connection(connection_id)
                if location is not None:
                    player_id, room_code = location.player_id, location.room_code

            if room_code is None:
                logger.info("Player %s is not in any game", player_id)
                return RoomResult.fail(ErrorKind.PLAYER_NOT_IN_GAME)

            game = self.games.get(room_code)
            if game is None:
                logger.warning("Game %s missing for player %s; dropping index", room_code, player_id)
                self._forget_player(player_id)
                return RoomResult.fail(ErrorKind.ROOM_NOT_FOUND)

            resolved = len(game.trick_history)
            error = game.remove_player(player_id)
            self._forget_player(player_id)
            if error is not None:
                return RoomResult.fail(error, room_code=room_code)
            trick = game.trick_history[-1] if len(game.trick_history) > resolved else None

            if not game.players:
                del self.games[room_code]
                logger.info("No players left in game %s, removing game", room_code)
                return RoomResult.ok(
                    "Player removed and game deleted", room_code=room_code, game_deleted=True
                )

        logger.info("%d players remain in game %s", len(game.players), room_code)
        return RoomResult.ok(
            "Player removed from game",
            room_code=room_code,
            game=game,
            players=list(game.players),
            trick=trick,
        )

    def _forget_player(self, player_id: str) -> None:
        self._player_rooms.pop(player_id, None)
        stale = [conn for conn, pid in self._connection_players.items() if pid == player_id]
        for connection_id in stale:
            del self._connection_players[connection_id]
