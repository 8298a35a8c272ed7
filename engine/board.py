"""
Board primitives: players, pieces, positions, and grid helpers.

Pieces are tagged values (owner, kind) compared structurally. The string tag
form ("A-P1") exists only at the edges, for the wire format and move history;
nothing inside the engine inspects a tag by prefix.

A board is a list of rows, each a list of cells holding a Piece or None.
Helpers here are pure functions over that grid; the GameEngine owns the only
mutable board and is the only caller that writes to it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from engine.constants import BOARD_SIZE, HOME_ROWS, MOVE_OFFSETS, STARTING_KINDS

Position = tuple[int, int]
Board = list[list["Piece | None"]]


class Player(str, Enum):
    """One of the two sides."""

    A = "A"
    B = "B"

    @property
    def opponent(self) -> "Player":
        return Player.B if self is Player.A else Player.A

    @classmethod
    def parse(cls, value: object) -> "Player | None":
        """Return the player named by value, or None if it names no player."""
        try:
            return cls(value)
        except (ValueError, TypeError):
            return None


class Kind(str, Enum):
    """Piece kinds. Each kind has its own movement rule (see MOVE_OFFSETS)."""

    P1 = "P1"
    H1 = "H1"
    H2 = "H2"


@dataclass(frozen=True)
class Piece:
    """
    A piece on the board.

    Frozen so that a piece can be moved between cells by reference without
    ever being altered; two pieces with the same owner and kind compare equal,
    which is exactly the identity the rules care about.
    """

    owner: Player
    kind: Kind

    @property
    def tag(self) -> str:
        return f"{self.owner.value}-{self.kind.value}"

    @classmethod
    def from_tag(cls, tag: object) -> "Piece | None":
        """
        Parse a tag like "B-H2" into a Piece.

        Returns None for anything that is not exactly "<owner>-<kind>" with a
        known owner and kind. Callers treat None as "no such piece" rather than
        as an error.
        """
        if not isinstance(tag, str):
            return None
        owner, sep, kind = tag.partition("-")
        if not sep:
            return None
        player = Player.parse(owner)
        if player is None or kind not in Kind.__members__:
            return None
        return cls(player, Kind(kind))

    def __str__(self) -> str:
        return self.tag


def in_bounds(position: Position) -> bool:
    row, col = position
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def empty_board() -> Board:
    return [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]


def initial_board() -> Board:
    """Return a fresh board with both home rows populated."""
    board = empty_board()
    for owner, row in HOME_ROWS.items():
        player = Player(owner)
        board[row] = [Piece(player, Kind(kind)) for kind in STARTING_KINDS]
    return board


def is_valid_shape(kind: Kind, start: Position, end: Position) -> bool:
    """True if moving from start to end is a displacement kind may make."""
    displacement = (end[0] - start[0], end[1] - start[1])
    return displacement in MOVE_OFFSETS[kind.value]


def path_between(start: Position, end: Position) -> Iterator[Position]:
    """
    Yield the cells strictly between start and end.

    start and end must lie on one row, one column, or one diagonal; the walk
    takes unit steps along that line and excludes both endpoints.
    """
    d_row = (end[0] > start[0]) - (end[0] < start[0])
    d_col = (end[1] > start[1]) - (end[1] < start[1])
    row, col = start[0] + d_row, start[1] + d_col
    while (row, col) != end:
        yield (row, col)
        row += d_row
        col += d_col


def count_pieces(board: Board, player: Player) -> int:
    return sum(
        1
        for row in board
        for cell in row
        if cell is not None and cell.owner is player
    )


def occupied_by(board: Board, player: Player) -> Iterator[tuple[Position, Piece]]:
    """Yield (position, piece) for every piece player has on the board."""
    for r, row in enumerate(board):
        for c, cell in enumerate(row):
            if cell is not None and cell.owner is player:
                yield (r, c), cell
