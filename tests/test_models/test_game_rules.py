"""Tests for the game engine: lifecycle, turn order, validation and scoring."""

import random
import uuid

import pytest

from app.models.card import Card
from app.models.enums import ErrorKind, GameStatus, Rank, Suit
from app.models.game import Game
from app.models.results import Accepted, Rejected


def c(rank: str, suit: Suit) -> Card:
    return Card(suit, Rank(rank))


H, D, C, S = Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES


def new_game(*names: str, seed: int = 1, target_score: int = 75) -> Game:
    game = Game(code="ROOM01", target_score=target_score, rng=random.Random(seed))
    for i, name in enumerate(names):
        game.add_player(name, f"conn-{i}")
    return game


def legal_card(game: Game, player_id: str) -> Card:
    """First card the player is allowed to play."""
    hand = game.hands[player_id]
    if game.current_trick:
        lead = game.current_trick[0].card.suit
        following = [card for card in hand if card.suit == lead]
        if following:
            return following[0]
    return hand[0]


def assert_invariants(game: Game) -> None:
    ids = {p.id for p in game.players}
    assert set(game.hands) == ids
    assert set(game.scores) == ids
    assert all(score >= 0 for score in game.scores.values())
    assert all(p.hand_size == len(game.hands[p.id]) for p in game.players)
    if game.status == GameStatus.PLAYING and game.players:
        assert game.current_player_id in ids
        assert len(game.current_trick) < len(game.players)


# =============================================================================
# ROSTER
# =============================================================================


class TestAddPlayer:
    """Test seating players."""

    def test_new_game_is_waiting_and_empty(self):
        game = Game(code="ROOM01")
        assert game.status == GameStatus.WAITING
        assert game.players == []
        assert game.current_player_id is None
        assert game.target_score == 75

    def test_add_player_allocates_hand_and_score(self):
        game = Game(code="ROOM01")
        player = game.add_player("Alice", "conn-a")

        assert player.name == "Alice"
        assert player.connection_id == "conn-a"
        assert player.hand_size == 0
        assert game.players == [player]
        assert game.hands[player.id] == []
        assert game.scores[player.id] == 0

    def test_taken_ids_are_skipped(self, monkeypatch):
        ids = iter(["aaaaaaaa" + "0" * 24, "bbbbbbbb" + "0" * 24])
        monkeypatch.setattr("app.models.game.uuid.uuid4", lambda: uuid.UUID(next(ids)))
        game = Game(code="ROOM01")

        player = game.add_player("Alice", "conn-a", taken_ids={"aaaaaaaa"})

        assert player.id == "bbbbbbbb"

    def test_player_ids_are_unique(self):
        game = new_game(*[f"P{i}" for i in range(20)])
        assert len({p.id for p in game.players}) == 20
        assert_invariants(game)


class TestRemovePlayer:
    """Test players leaving."""

    def test_remove_current_player_passes_turn_to_next_seat(self):
        """P2 is on turn and leaves: P3 plays next, not P1."""
        game = Game.from_hands(
            "ROOM01",
            {"p1": [c("2", H)], "p2": [c("3", H)], "p3": [c("4", H)]},
            current_player_id="p2",
        )

        assert game.remove_player("p2") is None

        assert game.current_player_id == "p3"
        assert [p.id for p in game.players] == ["p1", "p3"]
        assert_invariants(game)

    def test_remove_current_player_in_last_seat_wraps(self):
        game = Game.from_hands(
            "ROOM01",
            {"p1": [c("2", H)], "p2": [c("3", H)], "p3": [c("4", H)]},
            current_player_id="p3",
        )
        game.remove_player("p3")
        assert game.current_player_id == "p1"

    def test_remove_other_player_keeps_turn(self):
        game = Game.from_hands(
            "ROOM01",
            {"p1": [c("2", H)], "p2": [c("3", H)], "p3": [c("4", H)]},
            current_player_id="p2",
        )
        game.remove_player("p1")
        assert game.current_player_id == "p2"
        assert "p1" not in game.hands
        assert "p1" not in game.scores

    def test_leaver_card_is_withdrawn_from_trick(self):
        game = Game.from_hands(
            "ROOM01",
            {"p1": [c("5", H), c("2", C)], "p2": [c("3", H)], "p3": [c("4", H)]},
        )
        game.play_card("p1", c("5", H))

        game.remove_player("p1")

        assert game.current_trick == []
        assert game.current_player_id == "p2"
        assert_invariants(game)

    def test_removal_that_completes_trick_resolves_it(self):
        game = Game.from_hands(
            "ROOM01",
            {
                "p1": [c("2", H), c("7", C)],
                "p2": [c("A", H), c("8", C)],
                "p3": [c("4", H), c("9", C)],
            },
        )
        game.play_card("p1", c("2", H))
        game.play_card("p2", c("A", H))
        assert game.current_player_id == "p3"

        game.remove_player("p3")

        assert game.current_trick == []
        assert game.trick_number == 2
        assert game.scores["p2"] == 15
        assert game.current_player_id == "p2"
        assert game.last_trick is not None
        assert game.last_trick.winner_id == "p2"
        assert_invariants(game)

    def test_remove_unknown_player_is_reported_not_raised(self):
        game = new_game("Alice", "Bob")
        assert game.remove_player("nobody") == ErrorKind.PLAYER_NOT_IN_GAME
        assert len(game.players) == 2

    def test_removing_everyone_resets_to_waiting(self):
        game = new_game("Alice", "Bob")
        game.start()
        for player in list(game.players):
            game.remove_player(player.id)

        assert game.players == []
        assert game.status == GameStatus.WAITING
        assert game.current_player_id is None
        assert game.hands == {}
        assert game.scores == {}


class TestNextPlayer:
    """Test turn rotation helper."""

    def test_rotation_wraps(self):
        game = Game.from_hands("ROOM01", {"p1": [], "p2": [], "p3": []})
        assert game.next_player_id("p1") == "p2"
        assert game.next_player_id("p3") == "p1"

    def test_unknown_player_falls_back_to_first(self):
        game = Game.from_hands("ROOM01", {"p1": [], "p2": []})
        assert game.next_player_id("ghost") == "p1"

    def test_explicit_roster(self):
        game = Game.from_hands("ROOM01", {"p1": [], "p2": [], "p3": []})
        roster = [game.players[0], game.players[2]]
        assert game.next_player_id("p1", roster) == "p3"
        assert game.next_player_id("p1", []) is None


# =============================================================================
# LIFECYCLE
# =============================================================================


class TestStart:
    """Test starting a game."""

    def test_start_needs_two_players(self):
        game = new_game("Alice")
        assert game.start() == ErrorKind.INSUFFICIENT_PLAYERS
        assert game.status == GameStatus.WAITING
        assert game.hands[game.players[0].id] == []

    def test_start_deals_and_gives_first_turn_to_first_player(self):
        game = new_game("Alice", "Bob")
        assert game.start() is None

        alice, bob = game.players
        assert game.status == GameStatus.PLAYING
        assert game.current_player_id == alice.id
        assert game.trick_number == 1
        assert len(game.hands[alice.id]) == 26
        assert len(game.hands[bob.id]) == 26
        assert set(game.hands[alice.id]).isdisjoint(game.hands[bob.id])
        assert_invariants(game)

    def test_three_players_get_uneven_hands(self):
        game = new_game("A", "B", "C")
        game.start()
        assert [p.hand_size for p in game.players] == [17, 17, 18]

    def test_cannot_start_twice(self):
        game = new_game("Alice", "Bob")
        game.start()
        assert game.start() == ErrorKind.GAME_ALREADY_STARTED


class TestRestart:
    """Test rematch."""

    def test_restart_resets_scores_and_redeals(self):
        game = Game.from_hands(
            "ROOM01",
            {"p1": [c("5", H), c("2", C)], "p2": [c("Q", S), c("3", C)]},
            target_score=20,
        )
        game.play_card("p1", c("5", H))
        game.play_card("p2", c("Q", S))
        assert game.status == GameStatus.FINISHED

        assert game.restart() is None

        assert [p.id for p in game.players] == ["p1", "p2"]
        assert game.scores == {"p1": 0, "p2": 0}
        assert all(len(game.hands[pid]) == 26 for pid in ("p1", "p2"))
        assert game.status == GameStatus.PLAYING
        assert game.trick_number == 1
        assert game.current_player_id == "p1"
        assert game.target_score == 20
        assert game.trick_history == []
        assert game.last_trick is None
        assert game.game_over is False
        assert game.winner_id is None
        assert_invariants(game)

    def test_restart_needs_two_players(self):
        game = new_game("Alice")
        assert game.restart() == ErrorKind.INSUFFICIENT_PLAYERS


# =============================================================================
# PLAYING CARDS
# =============================================================================


class TestPlayValidation:
    """Test the checks made before a card is accepted."""

    @pytest.fixture
    def game(self):
        return Game.from_hands("ROOM01", {"p1": [c("5", H)], "p2": [c("A", H), c("Q", S)]})

    def test_must_follow_suit(self, game):
        game.play_card("p1", c("5", H))

        result = game.play_card("p2", c("Q", S))

        assert isinstance(result, Rejected)
        assert result.reason == ErrorKind.MUST_FOLLOW_SUIT
        assert result.message == "Must follow suit"
        assert c("Q", S) in game.hands["p2"]

    def test_following_suit_completes_trick(self, game):
        game.play_card("p1", c("5", H))

        result = game.play_card("p2", c("A", H))

        assert isinstance(result, Accepted)
        assert result.trick_complete is True
        assert result.trick_winner_id == "p2"
        assert result.trick_points == 20
        assert game.scores["p2"] == 20

    def test_not_your_turn(self, game):
        result = game.play_card("p2", c("A", H))
        assert isinstance(result, Rejected)
        assert result.reason == ErrorKind.NOT_YOUR_TURN
        assert game.current_trick == []

    def test_card_not_in_hand(self, game):
        result = game.play_card("p1", c("A", H))
        assert isinstance(result, Rejected)
        assert result.reason == ErrorKind.CARD_NOT_IN_HAND

    def test_unknown_player(self, game):
        result = game.play_card("ghost", c("5", H))
        assert isinstance(result, Rejected)
        assert result.reason == ErrorKind.PLAYER_NOT_IN_GAME

    def test_waiting_game_rejects_plays(self):
        game = new_game("Alice", "Bob")
        result = game.play_card(game.players[0].id, c("5", H))
        assert isinstance(result, Rejected)
        assert result.reason == ErrorKind.GAME_NOT_IN_PROGRESS

    def test_may_discard_when_void_in_lead_suit(self):
        game = Game.from_hands(
            "ROOM01", {"p1": [c("5", H), c("2", C)], "p2": [c("Q", S), c("3", C)]}
        )
        game.play_card("p1", c("5", H))
        assert isinstance(game.play_card("p2", c("3", C)), Accepted)


class TestPlayEffects:
    """Test what an accepted card does to the state."""

    def test_card_moves_from_hand_to_trick(self):
        game = Game.from_hands(
            "ROOM01",
            {"p1": [c("5", H), c("2", C)], "p2": [c("A", H)], "p3": [c("K", H)]},
        )

        result = game.play_card("p1", c("5", H))

        assert isinstance(result, Accepted)
        assert result.trick_complete is False
        assert result.next_player_id == "p2"
        assert result.trick_winner_id is None
        assert game.hands["p1"] == [c("2", C)]
        assert game.players[0].hand_size == 1
        assert [p.card for p in game.current_trick] == [c("5", H)]
        assert game.current_player_id == "p2"

    def test_trick_winner_leads_next_trick(self):
        game = Game.from_hands(
            "ROOM01",
            {
                "p1": [c("2", H), c("3", C)],
                "p2": [c("K", H), c("4", C)],
                "p3": [c("7", H), c("5", C)],
            },
        )
        game.play_card("p1", c("2", H))
        game.play_card("p2", c("K", H))
        result = game.play_card("p3", c("7", H))

        assert isinstance(result, Accepted)
        assert result.next_player_id == "p2"
        assert game.current_player_id == "p2"
        assert game.trick_number == 2
        assert game.current_trick == []
        assert len(game.trick_history) == 1
        assert game.trick_history[0].winner_id == "p2"
        assert game.last_trick is not None
        assert (game.last_trick.winner_id, game.last_trick.points) == ("p2", 0)
        assert game.status == GameStatus.PLAYING

        # Trick 2 starts with p2
        assert game.play_card("p1", c("3", C)).valid is False
        assert game.play_card("p2", c("4", C)).valid is True


# =============================================================================
# GAME OVER
# =============================================================================


class TestGameOver:
    """Test the end of the game."""

    def test_reaching_target_ends_game(self):
        game = Game.from_hands(
            "ROOM01",
            {"p1": [c("5", H), c("2", C)], "p2": [c("Q", S), c("3", C)]},
            target_score=20,
        )
        game.play_card("p1", c("5", H))
        result = game.play_card("p2", c("Q", S))

        assert isinstance(result, Accepted)
        assert result.trick_winner_id == "p1"
        assert result.trick_points == 35
        assert result.next_player_id is None
        assert game.game_over is True
        assert game.winner_id == "p1"
        assert game.status == GameStatus.FINISHED
        assert game.current_player_id is None

    def test_no_plays_after_game_over(self):
        game = Game.from_hands(
            "ROOM01",
            {"p1": [c("5", H), c("2", C)], "p2": [c("Q", S), c("3", C)]},
            target_score=20,
        )
        game.play_card("p1", c("5", H))
        game.play_card("p2", c("Q", S))

        result = game.play_card("p1", c("2", C))
        assert isinstance(result, Rejected)
        assert result.reason == ErrorKind.GAME_NOT_IN_PROGRESS

    def test_cards_running_out_ends_game(self):
        game = Game.from_hands("ROOM01", {"p1": [c("2", H)], "p2": [c("5", H)]})
        game.play_card("p1", c("2", H))
        game.play_card("p2", c("5", H))

        assert game.game_over is True
        assert game.winner_id == "p2"
        assert game.status == GameStatus.FINISHED

    def test_tie_when_cards_run_out_goes_to_earlier_seat(self):
        game = Game.from_hands("ROOM01", {"p1": [c("2", H)], "p2": [c("3", H)]})
        game.play_card("p1", c("2", H))
        game.play_card("p2", c("3", H))

        assert game.scores == {"p1": 0, "p2": 0}
        assert game.winner_id == "p1"

    def test_uneven_deal_ends_when_a_hand_empties(self):
        game = Game.from_hands(
            "ROOM01", {"p1": [c("2", H)], "p2": [c("3", C)], "p3": [c("K", H), c("4", D)]}
        )
        game.play_card("p1", c("2", H))
        game.play_card("p2", c("3", C))
        game.play_card("p3", c("K", H))

        assert game.game_over is True
        assert game.hands["p3"] == [c("4", D)]

    def test_simultaneous_crossing_highest_score_wins(self):
        game = Game.from_hands(
            "ROOM01",
            {"p1": [c("2", H), c("2", C)], "p2": [c("A", H), c("3", C)]},
            target_score=30,
        )
        game.scores["p1"] = 30
        game.scores["p2"] = 30
        game.play_card("p1", c("2", H))
        game.play_card("p2", c("A", H))

        assert game.scores == {"p1": 30, "p2": 45}
        assert game.winner_id == "p2"

    def test_simultaneous_crossing_tie_goes_to_earlier_seat(self):
        game = Game.from_hands(
            "ROOM01",
            {"p1": [c("2", H), c("2", C)], "p2": [c("A", H), c("3", C)]},
            target_score=30,
        )
        game.scores["p1"] = 45
        game.scores["p2"] = 30
        game.play_card("p1", c("2", H))
        game.play_card("p2", c("A", H))

        assert game.scores == {"p1": 45, "p2": 45}
        assert game.winner_id == "p1"


class TestFullGame:
    """Play whole games with legal moves and check the invariants throughout."""

    @pytest.mark.parametrize("player_count", [2, 3, 4, 5])
    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_game_always_finishes(self, player_count, seed):
        game = new_game(*[f"P{i}" for i in range(player_count)], seed=seed)
        game.start()
        dealt = sum(len(hand) for hand in game.hands.values())

        for _ in range(60):
            if game.game_over:
                break
            player_id = game.current_player_id
            before = sum(len(h) for h in game.hands.values()) + len(game.current_trick)

            result = game.play_card(player_id, legal_card(game, player_id))

            assert isinstance(result, Accepted)
            after = sum(len(h) for h in game.hands.values()) + len(game.current_trick)
            assert after <= before <= dealt
            assert_invariants(game)

        assert game.game_over is True
        assert game.status == GameStatus.FINISHED
        assert game.winner_id in game.scores
        played = sum(len(t.plays) for t in game.trick_history)
        assert sum(t.points for t in game.trick_history) == sum(game.scores.values())
        assert played == len(game.trick_history) * player_count


class TestViews:
    """Test public and per-player projections."""

    def test_public_state_hides_hands(self):
        game = new_game("Alice", "Bob")
        game.start()
        state = game.get_public_state()

        assert "hand" not in state
        assert "hands" not in state
        assert state["status"] == "playing"
        assert state["roomCode"] == "ROOM01"
        assert [p["handSize"] for p in state["players"]] == [26, 26]
        assert "connectionId" not in state["players"][0]

    def test_state_for_player_shows_only_own_hand(self):
        game = new_game("Alice", "Bob")
        game.start()
        alice, bob = game.players

        view = game.get_state_for(alice.id)

        own = {(card["suit"], card["rank"]) for card in view["hand"]}
        assert own == {(card.suit.value, card.rank.value) for card in game.hands[alice.id]}
        assert own.isdisjoint(
            {(card.suit.value, card.rank.value) for card in game.hands[bob.id]}
        )
        assert view["playerId"] == alice.id
