#!/usr/bin/env python3
"""
Benchmark: play random legal games and measure engine throughput.

Each game picks uniformly among GameEngine.legal_moves() until someone wins,
the side to move has no legal move, or MAX_PLIES is reached (the rules have
no draw condition, so unbounded games are possible). Reports moves per
second and how games ended. Seeds are fixed so runs are comparable.

Usage: python3 tools/bench.py [games]
"""
import os
import random
import sys
import time
from collections import Counter

REPO = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO not in sys.path:
    sys.path.insert(0, REPO)

from engine import GameEngine

MAX_PLIES = 500
DEFAULT_GAMES = 200


def play_random_game(seed: int) -> tuple[str, int]:
    """Play one random game.

    Args:
        seed: Seed for this game's move choices.

    Returns:
        (outcome, plies) where outcome is "A", "B", "stuck" or "capped".
    """
    rng = random.Random(seed)
    engine = GameEngine()
    for ply in range(MAX_PLIES):
        moves = engine.legal_moves()
        if not moves:
            return "stuck", ply
        result = engine.apply_move(rng.choice(moves))
        if result.winner is not None:
            return result.winner.value, ply + 1
    return "capped", MAX_PLIES


def main() -> None:
    games = int(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_GAMES
    outcomes: Counter[str] = Counter()
    total_plies = 0

    start = time.perf_counter()
    for seed in range(games):
        outcome, plies = play_random_game(seed)
        outcomes[outcome] += 1
        total_plies += plies
    elapsed = max(time.perf_counter() - start, 1e-9)

    print(f"{'Outcome':<10} {'Games':>8}")
    print("-" * 19)
    for outcome in ("A", "B", "stuck", "capped"):
        print(f"{outcome:<10} {outcomes[outcome]:>8}")
    print("-" * 19)
    print(f"games={games} plies={total_plies} "
          f"avg_plies={total_plies / games:.1f} "
          f"moves/s={total_plies / elapsed:,.0f} time={elapsed:.2f}s")


if __name__ == "__main__":
    main()
