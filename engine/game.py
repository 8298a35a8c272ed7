"""
The game engine: authoritative board, turn, and history, and the move rules.

State machine:
    AwaitingMove(A) --legal move--> AwaitingMove(B) --legal move--> AwaitingMove(A) ...
    AwaitingMove(p) --legal move that empties the opponent--> GameOver(winner=p)

There is no "not started" state: construction and reset() both enter
AwaitingMove(A). GameOver is only left through reset().

apply_move runs a fixed validation pipeline and short-circuits on the first
failing stage with MoveResult.rejected(); state is only touched once every
stage has passed:

    1. ownership  - tag and claimed player parse, the claimed player is the
                    player to move and owns the piece, and the start cell holds
                    exactly that piece
    2. shape      - the displacement is one the piece kind may make
    3. landing    - destination in bounds and not held by the mover's own piece
    4. execution  - opponent pieces strictly between start and end are removed,
                    then the piece is moved (overwriting whatever was on the
                    destination)
    5. history    - the move is recorded for the mover
    6. win check  - if the opponent has no pieces left the mover wins and the
                    turn does not pass; otherwise the turn passes

Threading model:
    None. The engine holds no locks and must be driven by a single owner that
    serializes calls (see web.session.SessionCoordinator). current_state()
    returns an immutable snapshot, so readers never observe a half-applied move
    as long as they snapshot between calls.
"""

from engine.board import (
    Board,
    Piece,
    Player,
    Position,
    count_pieces,
    in_bounds,
    initial_board,
    is_valid_shape,
    occupied_by,
    path_between,
)
from engine.constants import MOVE_OFFSETS
from engine.state import GameState, MoveRequest, MoveResult


def describe_move(piece: Piece, start: Position, end: Position) -> str:
    """Human-readable history line, e.g. "Moved A-P1 from (0, 0) to (1, 0)"."""
    return f"Moved {piece.tag} from ({start[0]}, {start[1]}) to ({end[0]}, {end[1]})"


class GameEngine:
    """
    A single game of grid capture and the rules that drive it.

    Attributes:
        current_player: Player whose move it is. After a winning move this
                        stays on the winner.
        winner:         The winning player once the game is over, else None.
    """

    def __init__(self) -> None:
        self.reset()

    # -----------------------------------------------------------------------
    # Public interface
    # -----------------------------------------------------------------------

    def reset(self) -> None:
        """Restore the starting layout, give A the move, and clear history."""
        self._board: Board = initial_board()
        self._current: Player = Player.A
        self._history: dict[Player, list[str]] = {Player.A: [], Player.B: []}
        self._winner: Player | None = None

    @property
    def current_player(self) -> Player:
        return self._current

    @property
    def winner(self) -> Player | None:
        return self._winner

    @property
    def is_over(self) -> bool:
        return self._winner is not None

    def current_state(self) -> GameState:
        """Return an immutable snapshot; no side effects."""
        return GameState(
            board=tuple(tuple(row) for row in self._board),
            current_player=self._current,
            move_history={player: tuple(moves) for player, moves in self._history.items()},
        )

    def apply_move(self, request: MoveRequest) -> MoveResult:
        """
        Validate and, if legal, apply a move for the player to move.

        Args:
            request: The client's proposed move. Its piece tag and claimed
                     player are cross-checked against the board and the turn.

        Returns:
            MoveResult.accepted() for a legal move that passes the turn,
            MoveResult.won(mover) for a legal move that leaves the opponent
            with no pieces, or MoveResult.rejected() with state untouched.
        """
        piece = self._owned_piece_at_start(request)
        if piece is None:
            return MoveResult.rejected()

        start, end = tuple(request.start), tuple(request.end)
        if len(end) != 2 or not is_valid_shape(piece.kind, start, end):
            return MoveResult.rejected()
        if not self._can_land(piece, end):
            return MoveResult.rejected()

        self._execute(piece, start, end)
        self._history[piece.owner].append(describe_move(piece, start, end))

        opponent = piece.owner.opponent
        if count_pieces(self._board, opponent) == 0:
            self._winner = piece.owner
            return MoveResult.won(piece.owner)

        self._current = opponent
        return MoveResult.accepted()

    def legal_moves(self) -> list[MoveRequest]:
        """
        Every move the player to move could make right now.

        Built from the same checks apply_move uses, so each returned request
        is accepted by apply_move if submitted before anything else changes.
        Empty once the game is over.
        """
        if self.is_over:
            return []

        moves = []
        for start, piece in occupied_by(self._board, self._current):
            for d_row, d_col in sorted(MOVE_OFFSETS[piece.kind.value]):
                end = (start[0] + d_row, start[1] + d_col)
                if self._can_land(piece, end):
                    moves.append(MoveRequest(piece.tag, start, end, self._current.value))
        return moves

    # -----------------------------------------------------------------------
    # Pipeline stages
    # -----------------------------------------------------------------------

    def _owned_piece_at_start(self, request: MoveRequest) -> Piece | None:
        """
        Stage 1: return the moving piece if the request may move it, else None.

        The claimed player is only accepted when it matches the real turn, so
        a client cannot move out of turn by asserting a different player.
        """
        if self.is_over:
            return None

        piece = Piece.from_tag(request.piece)
        claimed = Player.parse(request.claimed_player)
        if piece is None or claimed is None:
            return None
        if claimed is not self._current or piece.owner is not claimed:
            return None

        start = tuple(request.start)
        if len(start) != 2 or not in_bounds(start):
            return None
        if self._board[start[0]][start[1]] != piece:
            return None
        return piece

    def _can_land(self, piece: Piece, end: Position) -> bool:
        """Stage 3: destination is on the board and not held by a friendly piece."""
        if len(end) != 2 or not in_bounds(end):
            return False
        occupant = self._board[end[0]][end[1]]
        return occupant is None or occupant.owner is not piece.owner

    def _execute(self, piece: Piece, start: Position, end: Position) -> None:
        """
        Stage 4: capture along the path, then relocate the piece.

        Only cells strictly between start and end are scanned; friendly pieces
        there are jumped over. The destination is overwritten unconditionally,
        so a P1 stepping onto an opponent removes it without it counting as a
        path capture.
        """
        opponent = piece.owner.opponent
        for row, col in path_between(start, end):
            occupant = self._board[row][col]
            if occupant is not None and occupant.owner is opponent:
                self._board[row][col] = None

        self._board[end[0]][end[1]] = piece
        self._board[start[0]][start[1]] = None
