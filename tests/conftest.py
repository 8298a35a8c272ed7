"""Shared fixtures and helpers for the grid capture tests."""

import pytest

from engine import GameEngine, MoveRequest, Piece, Player
from engine.board import empty_board


# ============================================================================
# Helpers
# ============================================================================


def move(tag: str, start: tuple[int, int], end: tuple[int, int], player: str | None = None) -> MoveRequest:
    """Build a MoveRequest, claiming the piece's own owner unless told otherwise."""
    return MoveRequest(piece=tag, start=start, end=end, claimed_player=player or tag[0])


def engine_with(pieces: dict[tuple[int, int], str], current: Player = Player.A) -> GameEngine:
    """Create an engine whose board holds exactly the given pieces."""
    engine = GameEngine()
    board = empty_board()
    for (row, col), tag in pieces.items():
        board[row][col] = Piece.from_tag(tag)
    engine._board = board
    engine._current = current
    return engine


class FakeConnection:
    """In-memory coordinator connection that records what it was sent."""

    def __init__(self, is_open: bool = True):
        self.is_open = is_open
        self.sent: list[dict] = []

    def send_nowait(self, message: dict) -> None:
        self.sent.append(message)

    def types(self) -> list[str]:
        return [m["type"] for m in self.sent]


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def engine() -> GameEngine:
    """Fresh engine at the starting layout."""
    return GameEngine()
