"""
Entry point for Tetris Battle.

Supports five modes:
  - play:     Play a single board with keyboard controls.
  - watch:    Watch the heuristic AI play a single board.
  - battle:   Play against the AI (or watch AI vs AI) with garbage attacks.
  - evaluate: Run headless AI episodes and print statistics.
  - records:  Print the saved leaderboards.

Usage:
    python main.py --mode play --game-mode sprint1m
    python main.py --mode watch --game-mode time40
    python main.py --mode battle --difficulty hard
    python main.py --mode evaluate --episodes 20 --seed 7
    python main.py --mode records
"""

from __future__ import annotations

import argparse
import logging
import pathlib

import yaml

from tetris_battle.game.modes import GameMode
from tetris_battle.records import METRIC_FIELDS, RecordStore, format_metric

DEFAULT_CONFIG_PATH = "config/settings.yaml"
DEFAULT_RECORDS_PATH = "~/.tetris_battle/records.json"


def load_config(config_path: str | pathlib.Path) -> dict:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        Dict of configuration key-value pairs (empty for an empty file).

    Raises:
        FileNotFoundError: If the config file does not exist.
    """
    config_path = pathlib.Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Namespace with mode, game_mode, difficulty and run options.
    """
    parser = argparse.ArgumentParser(
        description="Tetris Battle: falling-block puzzle with a heuristic AI opponent.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--mode",
        type=str,
        choices=["play", "watch", "battle", "evaluate", "records"],
        default="play",
        help="Run mode: 'play' (keyboard), 'watch' (AI plays), 'battle', 'evaluate' (headless), 'records'.",
    )
    parser.add_argument(
        "--game-mode",
        type=str,
        choices=[m.value for m in GameMode if m is not GameMode.BATTLE],
        default=GameMode.NORMAL.value,
        help="Game mode for 'play', 'watch' and 'evaluate'.",
    )
    parser.add_argument(
        "--difficulty",
        type=str,
        default="normal",
        help="AI difficulty for 'battle': easy, normal, hard, hardest or insane.",
    )
    parser.add_argument(
        "--ai-vs-ai",
        action="store_true",
        help="In 'battle' mode, let the AI control the first board too.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=DEFAULT_CONFIG_PATH,
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "--episodes",
        type=int,
        default=10,
        help="Number of episodes for 'evaluate' mode.",
    )
    parser.add_argument(
        "--max-pieces",
        type=int,
        default=500,
        help="Piece limit per episode in 'evaluate' mode (0 = no limit).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (overrides the config value).",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=None,
        help="Rendering FPS (default: config 'fps', or 60).",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser.parse_args(argv)


def print_records(store: RecordStore) -> None:
    """Print every leaderboard, human and AI, ranked."""
    printed = False
    for mode in METRIC_FIELDS:
        for is_ai in (False, True):
            entries = store.top(mode, is_ai)
            if not entries:
                continue
            printed = True
            print(f"\n{mode}{' (AI)' if is_ai else ''}")
            print("-" * 40)
            for rank, record in enumerate(entries, start=1):
                date = str(record.get("date", ""))[:10]
                print(f"  {rank:>2}. {format_metric(record):>16}  {date}")
    if not printed:
        print(f"No records yet ({store.path}).")


def main(argv: list[str] | None = None) -> None:
    """Main entry point: parse args, load config, and dispatch to the selected mode."""
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    config.setdefault("records_path", DEFAULT_RECORDS_PATH)
    if args.seed is not None:
        config["seed"] = args.seed
    fps = args.fps or config.get("fps", 60)

    if args.mode == "play":
        from tetris_battle.play import play_single
        play_single(config, args.game_mode, ai_enabled=False, fps=fps)

    elif args.mode == "watch":
        from tetris_battle.play import play_single
        play_single(config, args.game_mode, ai_enabled=True, fps=fps)

    elif args.mode == "battle":
        from tetris_battle.play import play_battle
        play_battle(config, args.difficulty, ai_vs_ai=args.ai_vs_ai, fps=fps)

    elif args.mode == "evaluate":
        from tetris_battle.evaluate import evaluate
        evaluate(
            num_episodes=args.episodes,
            mode=args.game_mode,
            max_pieces=args.max_pieces,
            seed=config.get("seed"),
            weights=config.get("ai_weights"),
        )

    elif args.mode == "records":
        print_records(RecordStore(config["records_path"]))


if __name__ == "__main__":
    main()
