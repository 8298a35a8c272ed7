"""
Grid capture game engine package.

This package implements the rules of a two-player capture game on a fixed 5x5
board: move validation per piece kind, captures along the path of a move, turn
alternation, and win detection. It performs no I/O and knows nothing about
connections; web.session drives it.

Modules:
    constants  - Board size, starting layout, movement tables
    board      - Player, Kind, Piece, and pure grid helpers
    state      - MoveRequest, MoveResult, and the immutable GameState snapshot
    game       - GameEngine, the authoritative game and its move pipeline
"""

from engine.board import Kind, Piece, Player
from engine.game import GameEngine
from engine.state import GameState, MoveRequest, MoveResult

__all__ = [
    "GameEngine",
    "GameState",
    "Kind",
    "MoveRequest",
    "MoveResult",
    "Piece",
    "Player",
]
