"""
Headless evaluation of the heuristic AI.

Plays a number of AI-controlled episodes without a display, driving each
engine with fixed-size update steps, and prints aggregate statistics:
lines, score, pieces placed, line-clear distribution and the board state
at the end of each episode.
"""

from __future__ import annotations

import time
from typing import Any

import numpy as np

from tetris_battle.ai.planner import HeuristicPlanner, Weights
from tetris_battle.game.modes import GameMode
from tetris_battle.game.tetris import TetrisGame


def run_episode(
    game: TetrisGame,
    max_pieces: int = 500,
    step_ms: float | None = None,
) -> dict[str, Any]:
    """Play one AI episode until game over or max_pieces have locked.

    Args:
        game: A freshly reset, AI-enabled TetrisGame.
        max_pieces: Stop once this many pieces have locked (0 = no limit).
        step_ms: Update step; defaults to the AI move interval so every
            update executes one queued move.

    Returns:
        Per-episode statistics dict.
    """
    step_ms = step_ms or float(game.ai_move_interval_ms)
    clears = {1: 0, 2: 0, 3: 0, 4: 0}
    last_lines = game.lines_cleared

    while not game.is_game_over:
        game.update(step_ms)

        if game.lines_cleared != last_lines:
            cleared = game.lines_cleared - last_lines
            clears[min(cleared, 4)] += 1
            last_lines = game.lines_cleared

        if max_pieces and game.pieces_locked >= max_pieces:
            break

    board = game.board
    return {
        "lines": game.lines_cleared,
        "score": game.score,
        "level": game.level,
        "pieces": game.pieces_locked,
        "game_over": game.is_game_over,
        "elapsed_ms": game.elapsed_ms,
        "singles": clears[1],
        "doubles": clears[2],
        "triples": clears[3],
        "tetrises": clears[4],
        "holes": board.get_holes(),
        "height": board.get_aggregate_height(),
        "bumpiness": board.get_bumpiness(),
        "col_heights": [int(h) for h in board.get_column_heights()],
    }


def evaluate(
    num_episodes: int = 10,
    mode: GameMode | str = GameMode.NORMAL,
    max_pieces: int = 500,
    seed: int | None = None,
    weights: dict[str, float] | None = None,
    verbose: bool = True,
) -> list[dict[str, Any]]:
    """Run evaluation episodes and collect per-episode + aggregate statistics.

    Raises:
        ValueError: For practice mode, where nothing moves the pieces.
    """
    if GameMode(mode) is GameMode.PRACTICE:
        raise ValueError("Practice sessions have no gravity or AI timer to evaluate")
    planner = HeuristicPlanner(Weights.from_dict(weights))
    episode_data = []

    if verbose:
        print(f"Running {num_episodes} AI episodes (mode={GameMode(mode).value}, max_pieces={max_pieces})...\n")
    start_time = time.time()

    for ep in range(num_episodes):
        episode_seed = None if seed is None else seed + ep
        game = TetrisGame(mode, ai_enabled=True, seed=episode_seed, planner=planner)
        record = run_episode(game, max_pieces=max_pieces)
        record["episode"] = ep
        episode_data.append(record)

        if verbose:
            print(f"  Episode {ep + 1}/{num_episodes} | "
                  f"Lines: {record['lines']}, Score: {record['score']}, Pieces: {record['pieces']}"
                  + (" (topped out)" if record["game_over"] else ""))

    if verbose:
        elapsed = time.time() - start_time
        print(f"\nEvaluation complete in {elapsed:.1f}s "
              f"({elapsed / max(num_episodes, 1):.2f}s per episode)\n")
        print_summary(episode_data)
    return episode_data


def print_summary(episode_data: list[dict[str, Any]]) -> None:
    if not episode_data:
        return

    lines_arr = np.array([d["lines"] for d in episode_data])
    score_arr = np.array([d["score"] for d in episode_data])
    pieces_arr = np.array([d["pieces"] for d in episode_data])
    holes_arr = np.array([d["holes"] for d in episode_data])
    height_arr = np.array([d["height"] for d in episode_data])
    bumpiness_arr = np.array([d["bumpiness"] for d in episode_data])

    print("=" * 70)
    print("AGGREGATE STATISTICS")
    print("=" * 70)

    print(f"\n{'Metric':<25} {'Mean':>8} {'Median':>8} {'Std':>8} {'Min':>8} {'Max':>8}")
    print("-" * 70)
    for name, arr in [("Lines cleared", lines_arr), ("Score", score_arr),
                      ("Pieces placed", pieces_arr), ("Holes at end", holes_arr),
                      ("Agg. height at end", height_arr), ("Bumpiness at end", bumpiness_arr)]:
        print(f"{name:<25} {arr.mean():>8.1f} {np.median(arr):>8.1f} "
              f"{arr.std():>8.1f} {arr.min():>8.1f} {arr.max():>8.1f}")

    totals = {key: sum(d[key] for d in episode_data)
              for key in ("singles", "doubles", "triples", "tetrises")}
    events = sum(totals.values())
    print(f"\n--- Line Clear Distribution ---")
    print(f"  Total line clear events: {events}")
    if events > 0:
        for label, key in [("Singles (1-line)", "singles"), ("Doubles (2-line)", "doubles"),
                           ("Triples (3-line)", "triples"), ("Tetrises (4-line)", "tetrises")]:
            print(f"  {label + ':':<19}{totals[key]:>5} ({100 * totals[key] / events:.1f}%)")
    else:
        print(f"  No line clears at all!")

    topped_out = sum(1 for d in episode_data if d["game_over"])
    print(f"\n  Topped out: {topped_out}/{len(episode_data)} episodes")
