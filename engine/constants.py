"""
Game constants: board geometry, starting layout, and movement tables.

Every fixed number the rules depend on lives here so that the board and game
modules never introduce magic values of their own. The game is played on a
single fixed configuration; nothing here is meant to be tuned at runtime.
"""

# ---------------------------------------------------------------------------
# Board geometry
# ---------------------------------------------------------------------------

BOARD_SIZE: int = 5

# Row each player's pieces start on. A sits at the top, B at the bottom.
HOME_ROWS: dict[str, int] = {
    "A": 0,
    "B": BOARD_SIZE - 1,
}

# Kinds placed along each home row, column 0 first.
STARTING_KINDS: tuple[str, ...] = ("P1", "H1", "H2", "P1", "H1")

# ---------------------------------------------------------------------------
# Movement
# ---------------------------------------------------------------------------
# Every (row, col) displacement a piece kind may make. A move is shaped
# correctly iff its displacement is in this set; there is no path blocking.

MOVE_OFFSETS: dict[str, frozenset[tuple[int, int]]] = {
    # One orthogonal step.
    "P1": frozenset({(-1, 0), (1, 0), (0, -1), (0, 1)}),
    # Exactly two orthogonal steps.
    "H1": frozenset({(-2, 0), (2, 0), (0, -2), (0, 2)}),
    # Exactly two diagonal steps.
    "H2": frozenset({(-2, -2), (-2, 2), (2, -2), (2, 2)}),
}

# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

# Reason attached to every rejected move. Clients show it verbatim.
INVALID_MOVE_REASON: str = "Invalid move"
