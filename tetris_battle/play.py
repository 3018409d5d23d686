"""
Interactive play loops.

Provides two loops:
  - play_single: one board, played by a human or watched while the AI plays.
  - play_battle: the player (or a second AI) against the AI, garbage enabled.

Both drive the engines with the frame time reported by the renderer,
so update() always completes before the next draw.
"""

from __future__ import annotations

import pathlib
from typing import Any

try:
    import pygame
except ImportError:
    pygame = None  # type: ignore[assignment]

from tetris_battle.ai.planner import HeuristicPlanner, Weights
from tetris_battle.battle import AI_SPEEDS, BattleManager, BattleResult
from tetris_battle.game.actions import Action
from tetris_battle.game.modes import GameMode
from tetris_battle.game.tetris import DEFAULT_AI_MOVE_INTERVAL_MS, TetrisGame
from tetris_battle.records import RecordStore, format_metric
from tetris_battle.renderer import TetrisRenderer


# ── Keyboard mapping ─────────────────────────────────────────────────────
# Arrow keys for movement, Up/X for rotation, Space for hard drop,
# P to pause, Z to undo (practice).
KEY_MAP: dict[int, Action] = {}
if pygame is not None:
    KEY_MAP = {
        pygame.K_LEFT: Action.LEFT,
        pygame.K_RIGHT: Action.RIGHT,
        pygame.K_DOWN: Action.SOFT_DROP,
        pygame.K_SPACE: Action.HARD_DROP,
        pygame.K_UP: Action.ROTATE,
        pygame.K_x: Action.ROTATE,
        pygame.K_p: Action.TOGGLE_PAUSE,
        pygame.K_z: Action.UNDO,
    }

BATTLE_BANNERS = {
    BattleResult.DRAW: "DRAW",
    BattleResult.PLAYER1_WIN: "YOU WIN!",
    BattleResult.PLAYER2_WIN: "AI WIN!",
}


def _require_pygame() -> None:
    if pygame is None:
        raise ImportError("pygame is required for interactive play. Install it: pip install pygame")


def _poll_keys() -> tuple[bool, list[int]]:
    """Return (keep running, keys pressed this frame)."""
    keys = []
    for event in pygame.event.get():
        if event.type == pygame.QUIT:
            return False, keys
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return False, keys
            keys.append(event.key)
    return True, keys


def _make_planner(config: dict[str, Any]) -> HeuristicPlanner:
    return HeuristicPlanner(Weights.from_dict(config.get("ai_weights")))


def _make_record_store(config: dict[str, Any]) -> RecordStore | None:
    path = config.get("records_path")
    return RecordStore(pathlib.Path(path)) if path else None


def play_single(
    config: dict[str, Any],
    mode: GameMode | str = GameMode.NORMAL,
    ai_enabled: bool = False,
    fps: int = 60,
) -> None:
    """Run one board until the window is closed.

    Controls: arrows move / rotate / soft drop, Space hard drops, P pauses,
    Z undoes (practice mode), R restarts after the game ends, Esc quits.

    Args:
        config: Config dict loaded from settings.yaml.
        mode: Game mode for the session.
        ai_enabled: Let the heuristic AI play instead of the keyboard.
        fps: Target frames per second.
    """
    _require_pygame()

    records = _make_record_store(config)
    game = TetrisGame(
        mode,
        ai_enabled=ai_enabled,
        seed=config.get("seed"),
        planner=_make_planner(config) if ai_enabled else None,
        ai_move_interval_ms=config.get("ai_move_interval_ms", DEFAULT_AI_MOVE_INTERVAL_MS),
        record_store=records,
    )
    caption = ("AI " if ai_enabled else "") + GameMode(mode).value.upper()
    renderer = TetrisRenderer([game], cell_size=config.get("cell_size", 25), captions=[caption])

    delta_ms = renderer.render(fps)
    running = True
    while running:
        running, keys = _poll_keys()
        for key in keys:
            if game.is_game_over:
                if key == pygame.K_r:
                    game.reset()
                continue
            if key in KEY_MAP:
                game.handle_action(KEY_MAP[key])

        game.update(delta_ms)
        renderer.banner = _result_banner(game) if game.is_game_over else ""
        delta_ms = renderer.render(fps)

    renderer.close()


def _result_banner(game: TetrisGame) -> str:
    if game.result is None or game.result.metric is None:
        return "GAME OVER"
    name, value = game.result.metric
    return format_metric({"mode": game.mode.value, name: value})


def play_battle(
    config: dict[str, Any],
    difficulty: str = "normal",
    ai_vs_ai: bool = False,
    fps: int = 60,
) -> None:
    """Run a two-board battle against the AI.

    Garbage sent by either board is queued on the other and rises from the
    bottom at its next spawn. R starts a new battle once one has finished.
    """
    _require_pygame()

    speeds = {**AI_SPEEDS, **config.get("battle_ai_speeds", {})}
    planner = _make_planner(config)

    def new_battle() -> BattleManager:
        return BattleManager(difficulty, ai_vs_ai, seed=config.get("seed"), planner=planner, speeds=speeds)

    battle = new_battle()
    captions = ["AI 1", "AI 2"] if ai_vs_ai else ["YOU", f"AI ({difficulty})"]
    renderer = TetrisRenderer(list(battle.games), cell_size=config.get("cell_size", 25), captions=captions)

    delta_ms = renderer.render(fps)
    running = True
    while running:
        running, keys = _poll_keys()
        for key in keys:
            if not battle.is_running:
                if key == pygame.K_r:
                    battle = new_battle()
                    renderer.games = list(battle.games)
                continue
            if key in KEY_MAP:
                battle.handle_action(KEY_MAP[key])

        battle.update(delta_ms)
        if battle.result is not None:
            banner = BATTLE_BANNERS[battle.result]
            if ai_vs_ai and battle.result is not BattleResult.DRAW:
                banner = "AI1 WIN!" if battle.result is BattleResult.PLAYER1_WIN else "AI2 WIN!"
            renderer.banner = banner
        else:
            renderer.banner = ""
        delta_ms = renderer.render(fps)

    renderer.close()
