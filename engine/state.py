"""
Value types exchanged with the game engine: move requests, results, and snapshots.

GameState is the only view of the game that leaves the engine. It is built
from immutable parts (tuples of frozen Pieces) so a caller can hold on to it,
serialize it, or compare it without any way of writing back into the live
board.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from engine.board import Piece, Player, Position
from engine.constants import BOARD_SIZE, INVALID_MOVE_REASON


@dataclass(frozen=True)
class MoveRequest:
    """
    A proposed move as submitted by a client.

    Fields mirror what a client can assert, unparsed: the piece tag and the
    claimed player are plain strings and are validated by the engine against
    its own state, never trusted on their own.

    Attributes:
        piece:          Piece tag, e.g. "A-H1".
        start:          (row, col) the piece is claimed to stand on.
        end:            (row, col) to move it to.
        claimed_player: The player the client believes is to move.
    """

    piece: str
    start: Position
    end: Position
    claimed_player: str


@dataclass(frozen=True)
class MoveResult:
    """
    Outcome of GameEngine.apply_move.

    Rejections are ordinary results, not exceptions: valid is False and
    reason says why. A winning move carries the winner.
    """

    valid: bool
    winner: Player | None = None
    reason: str | None = None

    @classmethod
    def accepted(cls) -> "MoveResult":
        return cls(valid=True)

    @classmethod
    def won(cls, winner: Player) -> "MoveResult":
        return cls(valid=True, winner=winner)

    @classmethod
    def rejected(cls, reason: str = INVALID_MOVE_REASON) -> "MoveResult":
        return cls(valid=False, reason=reason)


@dataclass(frozen=True)
class GameState:
    """
    Immutable snapshot of a game.

    Attributes:
        board:          BOARD_SIZE rows of BOARD_SIZE cells, each a Piece or None.
        current_player: The player to move (or the winner, once the game is over).
        move_history:   Per-player tuple of move descriptions, oldest first.
    """

    board: tuple[tuple[Piece | None, ...], ...]
    current_player: Player
    move_history: Mapping[Player, tuple[str, ...]] = field(
        default_factory=lambda: {Player.A: (), Player.B: ()},
        hash=False,
    )

    def __post_init__(self) -> None:
        # Copy into a read-only view so the snapshot cannot be edited after the fact.
        history = {player: tuple(self.move_history.get(player, ())) for player in Player}
        object.__setattr__(self, "move_history", MappingProxyType(history))

    def piece_at(self, position: Position) -> Piece | None:
        row, col = position
        return self.board[row][col]

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to the wire shape:
            {"board": [[tag | None, ...], ...],
             "currentPlayer": "A" | "B",
             "moveHistory": {"A": [...], "B": [...]}}
        """
        return {
            "board": [
                [cell.tag if cell is not None else None for cell in row]
                for row in self.board
            ],
            "currentPlayer": self.current_player.value,
            "moveHistory": {
                player.value: list(self.move_history.get(player, ()))
                for player in Player
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameState":
        """
        Inverse of to_dict.

        Raises:
            ValueError: Wrong board dimensions, an unknown piece tag or
                        player, or a malformed move history.
            KeyError:   A required key is missing.
        """
        raw_board = data["board"]
        if len(raw_board) != BOARD_SIZE or any(len(row) != BOARD_SIZE for row in raw_board):
            raise ValueError(f"board must be {BOARD_SIZE}x{BOARD_SIZE}")

        rows = []
        for raw_row in raw_board:
            cells = []
            for tag in raw_row:
                if tag is None:
                    cells.append(None)
                    continue
                piece = Piece.from_tag(tag)
                if piece is None:
                    raise ValueError(f"unknown piece tag: {tag!r}")
                cells.append(piece)
            rows.append(tuple(cells))

        current = Player.parse(data["currentPlayer"])
        if current is None:
            raise ValueError(f"unknown player: {data['currentPlayer']!r}")

        raw_history = data.get("moveHistory", {})
        if not isinstance(raw_history, dict):
            raise ValueError("moveHistory must be an object keyed by player")
        history = {}
        for player in Player:
            moves = raw_history.get(player.value, [])
            if not isinstance(moves, list) or not all(isinstance(m, str) for m in moves):
                raise ValueError(f"moveHistory[{player.value!r}] must be a list of strings")
            history[player] = tuple(moves)
        return cls(board=tuple(rows), current_player=current, move_history=history)
