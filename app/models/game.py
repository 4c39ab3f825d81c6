"""Game model for managing a single room's state."""

import logging
import random
import uuid
from collections.abc import Container
from dataclasses import dataclass, field
from typing import Any

from app.constants import DEFAULT_TARGET_SCORE, MIN_PLAYERS, PLAYER_ID_LENGTH
from app.models.card import Card
from app.models.deck import deal, shuffle, standard_deck
from app.models.enums import ErrorKind, GameStatus
from app.models.player import Player
from app.models.results import Accepted, PlayResult, Rejected
from app.models.trick import LastTrick, Play, Trick, resolve_trick
from app.services.game_serializer import serialize_player_state, serialize_public_state

logger = logging.getLogger(__name__)


@dataclass
class Game:
    """Authoritative state of one room.

    Players are dealt the whole deck and play tricks in seat order. The
    winner of a trick collects its points and leads the next one. The game
    ends as soon as someone reaches ``target_score``, or once the cards run
    out.

    Attributes:
        code: Room code, stable for the room's lifetime
        target_score: Score that ends the game
        min_players: Players needed to start
        status: Current lifecycle state
        players: Players in seat order (turn and deal order)
        hands: Cards held by each player, keyed by player id
        current_trick: Plays made so far in the trick being played
        trick_history: Resolved tricks, oldest first
        trick_number: Tricks started so far (1 once play begins)
        current_player_id: Whose turn it is; None unless playing
        scores: Points collected by each player
        game_over: Whether a winner has been decided
        winner_id: The winner, once the game is over
        last_trick: Winner and points of the latest resolved trick
        rng: Random source used for shuffling

    """

    code: str
    target_score: int = DEFAULT_TARGET_SCORE
    min_players: int = MIN_PLAYERS
    status: GameStatus = GameStatus.WAITING
    players: list[Player] = field(default_factory=list)
    hands: dict[str, list[Card]] = field(default_factory=dict)
    current_trick: list[Play] = field(default_factory=list)
    trick_history: list[Trick] = field(default_factory=list)
    trick_number: int = 0
    current_player_id: str | None = None
    scores: dict[str, int] = field(default_factory=dict)
    game_over: bool = False
    winner_id: str | None = None
    last_trick: LastTrick | None = None
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    @classmethod
    def from_hands(
        cls,
        code: str,
        hands: dict[str, list[Card]],
        target_score: int = DEFAULT_TARGET_SCORE,
        current_player_id: str | None = None,
    ) -> "Game":
        """Build a game that is already being played, with preset hands.

        Player ids, names and connection ids are derived from the keys of
        ``hands``, seated in key order. The first player is on turn unless
        ``current_player_id`` says otherwise.
        """
        game = cls(code=code, target_score=target_score)
        for player_id, hand in hands.items():
            game.players.append(
                Player(
                    id=player_id,
                    name=player_id,
                    connection_id=f"conn-{player_id}",
                    hand_size=len(hand),
                )
            )
            game.hands[player_id] = list(hand)
            game.scores[player_id] = 0

        game.status = GameStatus.PLAYING
        game.trick_number = 1
        game.current_player_id = current_player_id or game.players[0].id
        return game

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------

    def add_player(
        self, name: str, connection_id: str, taken_ids: Container[str] = ()
    ) -> Player:
        """Seat a new player with an empty hand and zero score.

        Args:
            name: Display name
            connection_id: Connection the player joined from
            taken_ids: Ids already in use outside this game, never handed out

        Returns:
            The new player

        """
        player = Player(
            id=self._new_player_id(taken_ids), name=name, connection_id=connection_id
        )
        self.players.append(player)
        self.hands[player.id] = []
        self.scores[player.id] = 0

        logger.info("Player %s joined game %s", player, self.code)
        return player

    def _new_player_id(self, taken_ids: Container[str]) -> str:
        while True:
            candidate = uuid.uuid4().hex[:PLAYER_ID_LENGTH]
            if candidate not in self.scores and candidate not in taken_ids:
                return candidate

    def remove_player(self, player_id: str) -> ErrorKind | None:
        """Remove a player from the game.

        If it was the leaving player's turn, play passes to whoever sat after
        them. A card they already put into the current trick is withdrawn, and
        if everyone still seated has now played, the trick is resolved.

        Returns:
            None on success, ``PLAYER_NOT_IN_GAME`` for an unknown id.

        """
        player = self.get_player(player_id)
        if player is None:
            logger.warning("Player %s is not in game %s", player_id, self.code)
            return ErrorKind.PLAYER_NOT_IN_GAME

        previous_players = list(self.players)
        self.players = [p for p in self.players if p.id != player_id]
        del self.hands[player_id]
        del self.scores[player_id]

        if not self.players:
            logger.info("Last player %s left game %s; game is now empty", player_id, self.code)
            self.status = GameStatus.WAITING
            self.current_player_id = None
            self.current_trick = []
            return None

        if self.status != GameStatus.PLAYING:
            return None

        self.current_trick = [play for play in self.current_trick if play.player_id != player_id]

        if self.current_player_id == player_id:
            self.current_player_id = self.next_player_id(player_id, previous_players)
            logger.info(
                "Current player %s left game %s; turn passes to %s",
                player_id,
                self.code,
                self.current_player_id,
            )

        if self.current_trick and len(self.current_trick) >= len(self.players):
            self._complete_trick()

        return None

    def get_player(self, player_id: str) -> Player | None:
        """Get a player by ID."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_player_by_connection(self, connection_id: str) -> Player | None:
        """Get the player who joined from a connection."""
        for player in self.players:
            if player.connection_id == connection_id:
                return player
        return None

    def next_player_id(
        self, current_id: str, roster: list[Player] | None = None
    ) -> str | None:
        """Player seated after ``current_id``, wrapping around.

        ``roster`` defaults to the current players; removal passes the roster
        as it was before the player left. An id missing from the roster falls
        back to the roster's first player.
        """
        players = self.players if roster is None else roster
        if not players:
            return None

        ids = [p.id for p in players]
        if current_id not in ids:
            logger.warning(
                "Player %s not found in roster of game %s; using first player",
                current_id,
                self.code,
            )
            return ids[0]
        return ids[(ids.index(current_id) + 1) % len(ids)]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def can_start(self) -> bool:
        """Check if game has enough players to start."""
        return len(self.players) >= self.min_players

    def start(self) -> ErrorKind | None:
        """Deal the cards and hand the first turn to the first player."""
        if self.status != GameStatus.WAITING:
            return ErrorKind.GAME_ALREADY_STARTED
        if not self.can_start():
            return ErrorKind.INSUFFICIENT_PLAYERS

        self._begin()
        logger.info("Game %s started with %d players", self.code, len(self.players))
        return None

    def restart(self) -> ErrorKind | None:
        """Start over with the same players and target, scores back at zero."""
        if not self.can_start():
            return ErrorKind.INSUFFICIENT_PLAYERS

        self._begin()
        logger.info("Game %s restarted with %d players", self.code, len(self.players))
        return None

    def _begin(self) -> None:
        self.current_trick = []
        self.trick_history = []
        self.last_trick = None
        self.game_over = False
        self.winner_id = None
        self.scores = {p.id: 0 for p in self.players}
        self._deal_cards()

        self.status = GameStatus.PLAYING
        self.current_player_id = self.players[0].id
        self.trick_number = 1

    def _deal_cards(self) -> None:
        deck = shuffle(standard_deck(), self.rng)
        hands = deal(deck, len(self.players))
        for player, hand in zip(self.players, hands, strict=True):
            self.hands[player.id] = hand
            player.hand_size = len(hand)

    # ------------------------------------------------------------------
    # Play
    # ------------------------------------------------------------------

    def play_card(self, player_id: str, card: Card) -> PlayResult:
        """Play a card for a player.

        Checks, in order: the game is running, the player is seated, it is
        their turn, they hold the card, and they follow the lead suit if they
        can.
        """
        if self.status != GameStatus.PLAYING:
            return Rejected(ErrorKind.GAME_NOT_IN_PROGRESS)

        player = self.get_player(player_id)
        if player is None:
            return Rejected(ErrorKind.PLAYER_NOT_IN_GAME)

        if self.current_player_id != player_id:
            return Rejected(ErrorKind.NOT_YOUR_TURN)

        hand = self.hands[player_id]
        if card not in hand:
            return Rejected(ErrorKind.CARD_NOT_IN_HAND)

        if self.current_trick:
            lead_suit = self.current_trick[0].card.suit
            if card.suit != lead_suit and any(c.suit == lead_suit for c in hand):
                return Rejected(ErrorKind.MUST_FOLLOW_SUIT)

        hand.remove(card)
        player.hand_size = len(hand)
        play = Play(player_id=player_id, card=card)
        self.current_trick.append(play)
        logger.debug("Player %s played %s in game %s", player_id, card, self.code)

        if len(self.current_trick) < len(self.players):
            self.current_player_id = self.next_player_id(player_id)
            return Accepted(play=play, next_player_id=self.current_player_id)

        trick = self._complete_trick()
        return Accepted(
            play=play,
            next_player_id=self.current_player_id,
            trick_complete=True,
            trick_winner_id=trick.winner_id,
            trick_points=trick.points,
        )

    def _complete_trick(self) -> Trick:
        trick = resolve_trick(self.current_trick)
        self.scores[trick.winner_id] += trick.points
        self.trick_history.append(trick)
        self.last_trick = LastTrick(winner_id=trick.winner_id, points=trick.points)
        self.current_trick = []
        self.trick_number += 1
        self.current_player_id = trick.winner_id

        logger.info(
            "Trick won by %s for %d points in game %s", trick.winner_id, trick.points, self.code
        )
        self._check_game_over()
        return trick

    def _check_game_over(self) -> None:
        """End the game if someone reached the target or the cards ran out.

        Cards run out once any player's hand is empty: with an uneven deal the
        last seat still holds the remainder, but no further full trick can be
        played. Ties go to the higher score, then to the earlier seat.
        """
        reached = [p for p in self.players if self.scores[p.id] >= self.target_score]
        if reached:
            winner = max(reached, key=lambda p: self.scores[p.id])
        elif any(not self.hands[p.id] for p in self.players):
            winner = max(self.players, key=lambda p: self.scores[p.id])
        else:
            return

        self.game_over = True
        self.winner_id = winner.id
        self.status = GameStatus.FINISHED
        self.current_player_id = None
        logger.info(
            "Game %s over, winner %s with %d points",
            self.code,
            winner,
            self.scores[winner.id],
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_public_state(self) -> dict[str, Any]:
        """Everything but the hands."""
        return serialize_public_state(self)

    def get_state_for(self, player_id: str) -> dict[str, Any]:
        """Public state plus this player's own hand."""
        return serialize_player_state(self, player_id)

    def __str__(self) -> str:
        """Return string representation."""
        return (
            f"Game {self.code}: {len(self.players)} players, "
            f"Trick {self.trick_number}, Status: {self.status.value}"
        )
