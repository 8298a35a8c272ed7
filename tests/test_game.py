"""Tests for GameEngine - move validation, captures, turns, and winning.

Tests cover:
1. Starting position and turn
2. Ownership and turn checks (forged or stale client state)
3. Shape and destination checks per piece kind
4. Captures along the path and overwrites at the destination
5. Win detection, no turn toggle on a winning move, GameOver lock-out
6. History, snapshots and reset
7. Random legal play preserves the counting and alternation invariants
"""

import random

import pytest

from engine import GameEngine, MoveResult, Player
from engine.constants import INVALID_MOVE_REASON

from conftest import engine_with, move


def cell(engine: GameEngine, row: int, col: int) -> str | None:
    piece = engine.current_state().board[row][col]
    return piece.tag if piece is not None else None


# ============================================================================
# Starting position
# ============================================================================


def test_fresh_engine_awaits_a(engine):
    state = engine.current_state()
    assert state.current_player is Player.A
    assert engine.winner is None
    assert state.move_history == {Player.A: (), Player.B: ()}


# ============================================================================
# Scenario: simple legal move
# ============================================================================


def test_p1_step_moves_piece_and_passes_turn(engine):
    result = engine.apply_move(move("A-P1", (0, 0), (1, 0)))

    assert result == MoveResult(valid=True)
    assert cell(engine, 1, 0) == "A-P1"
    assert cell(engine, 0, 0) is None
    assert engine.current_player is Player.B


# ============================================================================
# Ownership and turn
# ============================================================================


class TestOwnership:
    def test_cannot_move_opponent_piece(self, engine):
        before = engine.current_state()
        result = engine.apply_move(move("B-P1", (4, 0), (3, 0), player="A"))

        assert result == MoveResult(valid=False, reason=INVALID_MOVE_REASON)
        assert engine.current_state() == before

    def test_claiming_wrong_turn_is_rejected(self, engine):
        result = engine.apply_move(move("B-P1", (4, 0), (3, 0), player="B"))
        assert not result.valid
        assert engine.current_player is Player.A

    def test_claimed_player_must_match_engine_turn_even_for_own_piece(self, engine):
        engine.apply_move(move("A-P1", (0, 0), (1, 0)))
        # A claims it is still their turn.
        result = engine.apply_move(move("A-P1", (1, 0), (2, 0), player="A"))
        assert not result.valid
        assert engine.current_player is Player.B

    def test_start_cell_must_hold_exact_piece(self, engine):
        # (0, 1) holds A-H1, not A-P1.
        assert not engine.apply_move(move("A-P1", (0, 1), (1, 1))).valid

    def test_start_cell_empty(self, engine):
        assert not engine.apply_move(move("A-P1", (2, 2), (2, 3))).valid

    @pytest.mark.parametrize("tag", ["", "A-X9", "garbage", "A"])
    def test_unknown_piece_tag(self, engine, tag):
        assert not engine.apply_move(move(tag, (0, 0), (1, 0), player="A")).valid

    def test_unknown_player(self, engine):
        assert not engine.apply_move(move("A-P1", (0, 0), (1, 0), player="Z")).valid

    @pytest.mark.parametrize("start", [(-1, 0), (5, 0), (0, 7)])
    def test_start_out_of_bounds(self, engine, start):
        assert not engine.apply_move(move("A-P1", start, (0, 0))).valid


# ============================================================================
# Shapes and destinations
# ============================================================================


class TestShapes:
    def test_h1_diagonal_is_rejected(self, engine):
        before = engine.current_state()
        result = engine.apply_move(move("A-H1", (0, 1), (2, 2)))
        assert not result.valid
        assert engine.current_state() == before

    def test_h1_two_straight_steps(self, engine):
        assert engine.apply_move(move("A-H1", (0, 1), (2, 1))).valid
        assert cell(engine, 2, 1) == "A-H1"

    def test_h1_one_step_is_rejected(self, engine):
        assert not engine.apply_move(move("A-H1", (0, 1), (1, 1))).valid

    def test_h2_two_diagonal_steps(self, engine):
        assert engine.apply_move(move("A-H2", (0, 2), (2, 4))).valid
        assert cell(engine, 2, 4) == "A-H2"

    def test_h2_straight_is_rejected(self, engine):
        assert not engine.apply_move(move("A-H2", (0, 2), (2, 2))).valid

    def test_p1_diagonal_is_rejected(self, engine):
        assert not engine.apply_move(move("A-P1", (0, 0), (1, 1))).valid

    def test_p1_zero_step_is_rejected(self, engine):
        assert not engine.apply_move(move("A-P1", (0, 0), (0, 0))).valid

    def test_cannot_land_on_own_piece(self, engine):
        # A-P1 at (0, 3) stepping onto A-H1 at (0, 4).
        assert not engine.apply_move(move("A-P1", (0, 3), (0, 4))).valid

    def test_cannot_leave_board(self, engine):
        assert not engine.apply_move(move("A-P1", (0, 0), (-1, 0))).valid
        assert not engine.apply_move(move("A-H1", (0, 4), (0, 6))).valid

    def test_friendly_piece_on_path_is_jumped(self):
        engine = engine_with({(0, 0): "A-H1", (1, 0): "A-P1", (4, 4): "B-P1"})
        assert engine.apply_move(move("A-H1", (0, 0), (2, 0))).valid
        assert cell(engine, 1, 0) == "A-P1"
        assert cell(engine, 2, 0) == "A-H1"


# ============================================================================
# Captures
# ============================================================================


class TestCaptures:
    def test_h2_captures_intermediate_and_overwrites_destination(self, engine):
        """Reach the H2 capture from the starting layout with legal moves only."""
        setup = [
            move("A-P1", (0, 0), (1, 0)),
            move("B-P1", (4, 3), (3, 3)),
            move("A-P1", (1, 0), (2, 0)),
            move("B-P1", (3, 3), (2, 3)),
            move("A-P1", (2, 0), (2, 1)),
            move("B-P1", (2, 3), (1, 3)),
            move("A-P1", (2, 1), (2, 2)),
            move("B-H1", (4, 4), (2, 4)),
        ]
        for request in setup:
            assert engine.apply_move(request).valid, request

        result = engine.apply_move(move("A-H2", (0, 2), (2, 4)))

        assert result == MoveResult(valid=True)
        assert cell(engine, 1, 3) is None
        assert cell(engine, 2, 4) == "A-H2"
        assert cell(engine, 0, 2) is None
        board = engine.current_state().board
        b_pieces = [p for row in board for p in row if p is not None and p.owner is Player.B]
        assert len(b_pieces) == 3

    def test_h1_captures_opponent_on_path(self):
        engine = engine_with({(2, 0): "A-H1", (2, 1): "B-P1", (4, 4): "B-H2"})
        assert engine.apply_move(move("A-H1", (2, 0), (2, 2))).valid
        assert cell(engine, 2, 1) is None
        assert cell(engine, 2, 2) == "A-H1"

    def test_p1_onto_opponent_overwrites_it(self):
        engine = engine_with({(2, 2): "A-P1", (2, 3): "B-H1", (4, 4): "B-P1"})
        assert engine.apply_move(move("A-P1", (2, 2), (2, 3))).valid
        assert cell(engine, 2, 3) == "A-P1"
        assert engine.current_player is Player.B

    def test_b_captures_a(self):
        engine = engine_with(
            {(4, 2): "B-H2", (3, 1): "A-P1", (0, 0): "A-H1"},
            current=Player.B,
        )
        assert engine.apply_move(move("B-H2", (4, 2), (2, 0))).valid
        assert cell(engine, 3, 1) is None
        assert engine.current_player is Player.A


# ============================================================================
# Winning
# ============================================================================


class TestWinning:
    def test_path_capture_of_last_piece_wins_without_toggle(self):
        engine = engine_with({(0, 0): "A-H1", (1, 0): "B-P1"})

        result = engine.apply_move(move("A-H1", (0, 0), (2, 0)))

        assert result == MoveResult(valid=True, winner=Player.A)
        assert engine.winner is Player.A
        assert engine.current_state().current_player is Player.A

    def test_overwrite_of_last_piece_wins(self):
        engine = engine_with({(3, 3): "B-P1", (3, 4): "A-H2"}, current=Player.B)
        result = engine.apply_move(move("B-P1", (3, 3), (3, 4)))
        assert result.winner is Player.B

    def test_moves_after_game_over_are_rejected(self):
        engine = engine_with({(0, 0): "A-H1", (1, 0): "B-P1"})
        engine.apply_move(move("A-H1", (0, 0), (2, 0)))
        before = engine.current_state()

        assert not engine.apply_move(move("A-H1", (2, 0), (4, 0))).valid
        assert engine.current_state() == before
        assert engine.legal_moves() == []

    def test_non_final_capture_does_not_win(self):
        engine = engine_with({(0, 0): "A-H1", (1, 0): "B-P1", (4, 4): "B-P1"})
        result = engine.apply_move(move("A-H1", (0, 0), (2, 0)))
        assert result == MoveResult(valid=True)
        assert engine.winner is None


# ============================================================================
# History, snapshots, reset
# ============================================================================


class TestHistory:
    def test_history_per_player(self, engine):
        engine.apply_move(move("A-P1", (0, 0), (1, 0)))
        engine.apply_move(move("B-H1", (4, 1), (2, 1)))

        history = engine.current_state().move_history
        assert history[Player.A] == ("Moved A-P1 from (0, 0) to (1, 0)",)
        assert history[Player.B] == ("Moved B-H1 from (4, 1) to (2, 1)",)

    def test_rejected_moves_are_not_recorded(self, engine):
        engine.apply_move(move("A-H1", (0, 1), (2, 2)))
        assert engine.current_state().move_history[Player.A] == ()

    def test_snapshot_is_detached(self, engine):
        snapshot = engine.current_state()
        engine.apply_move(move("A-P1", (0, 0), (1, 0)))

        assert snapshot.board[0][0].tag == "A-P1"
        assert snapshot.board[1][0] is None
        assert snapshot.current_player is Player.A
        assert snapshot.move_history[Player.A] == ()

    def test_reset_restores_start_from_game_over(self):
        engine = engine_with({(0, 0): "A-H1", (1, 0): "B-P1"})
        engine.apply_move(move("A-H1", (0, 0), (2, 0)))

        engine.reset()

        assert engine.current_state() == GameEngine().current_state()
        assert engine.winner is None
        assert engine.apply_move(move("A-P1", (0, 0), (1, 0))).valid


# ============================================================================
# Legal move enumeration and invariants under random play
# ============================================================================


def test_opening_legal_moves(engine):
    moves = engine.legal_moves()
    assert all(m.claimed_player == "A" for m in moves)
    # P1 at (0,0) and (0,3) can step down; H1 at (0,1),(0,4) jump down;
    # H2 at (0,2) jumps to (2,0) or (2,4).
    ends = sorted((m.piece, m.start, m.end) for m in moves)
    assert ends == sorted([
        ("A-P1", (0, 0), (1, 0)),
        ("A-P1", (0, 3), (1, 3)),
        ("A-H1", (0, 1), (2, 1)),
        ("A-H1", (0, 4), (2, 4)),
        ("A-H2", (0, 2), (2, 0)),
        ("A-H2", (0, 2), (2, 4)),
    ])


def _count(engine: GameEngine, player: Player) -> int:
    board = engine.current_state().board
    return sum(1 for row in board for p in row if p is not None and p.owner is player)


@pytest.mark.parametrize("seed", range(10))
def test_random_play_invariants(seed):
    rng = random.Random(seed)
    engine = GameEngine()

    for _ in range(300):
        moves = engine.legal_moves()
        if not moves:
            break
        mover = engine.current_player
        mover_before = _count(engine, mover)
        opponent_before = _count(engine, mover.opponent)

        result = engine.apply_move(rng.choice(moves))
        assert result.valid

        assert _count(engine, mover) == mover_before
        assert _count(engine, mover.opponent) <= opponent_before

        if result.winner is not None:
            assert result.winner is mover
            assert _count(engine, mover.opponent) == 0
            assert engine.current_player is mover
            break
        assert engine.current_player is mover.opponent

        # A rejected move leaves the turn alone.
        assert not engine.apply_move(move("A-H1", (9, 9), (9, 9))).valid
        assert engine.current_player is mover.opponent
