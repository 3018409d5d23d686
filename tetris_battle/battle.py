"""
Two-board battle: a player engine against an AI engine.

The two TetrisGame instances share nothing. Each one's garbage output is
wired to the other's receive_garbage, and either one ending finishes the
battle.
"""

from __future__ import annotations

import enum
import logging
import random
from typing import Callable

from tetris_battle.ai.planner import HeuristicPlanner
from tetris_battle.game.actions import Action
from tetris_battle.game.modes import GameMode
from tetris_battle.game.tetris import DEFAULT_AI_MOVE_INTERVAL_MS, GameResult, TetrisGame

logger = logging.getLogger(__name__)

# AI move interval per difficulty (ms between queued actions; larger is weaker).
AI_SPEEDS: dict[str, int] = {
    "easy": 400,
    "normal": 300,
    "hard": 200,
    "hardest": 100,
    "insane": 50,
}


class BattleResult(str, enum.Enum):
    DRAW = "DRAW"
    PLAYER1_WIN = "PLAYER1_WIN"
    PLAYER2_WIN = "PLAYER2_WIN"


class BattleManager:
    """Runs two engines side by side and decides the winner.

    Attributes:
        difficulty: Key into the speed table for the opposing AI.
        ai_vs_ai: If True, the first board is AI-controlled as well.
        player_game: Board 1 (human, or AI in AI-vs-AI).
        ai_game: Board 2 (always AI).
        result: BattleResult once either board has ended.
    """

    def __init__(
        self,
        difficulty: str = "normal",
        ai_vs_ai: bool = False,
        *,
        seed: int | None = None,
        planner: HeuristicPlanner | None = None,
        speeds: dict[str, int] | None = None,
        on_finished: Callable[[BattleResult], None] | None = None,
    ) -> None:
        speeds = speeds or AI_SPEEDS
        if difficulty not in speeds:
            raise ValueError(f"Unknown difficulty: {difficulty!r} (choose from {sorted(speeds)})")

        self.difficulty = difficulty
        self.ai_vs_ai = ai_vs_ai
        self.is_paused = False
        self.result: BattleResult | None = None
        self._updating = False
        self.on_finished = on_finished

        rng = random.Random(seed)
        self.player_game = TetrisGame(
            GameMode.BATTLE,
            ai_enabled=ai_vs_ai,
            rng=random.Random(rng.getrandbits(32)),
            planner=planner,
            ai_move_interval_ms=DEFAULT_AI_MOVE_INTERVAL_MS,
            on_game_over=self._handle_game_end,
            on_garbage_send=self._send_to_ai,
        )
        self.ai_game = TetrisGame(
            GameMode.BATTLE,
            ai_enabled=True,
            rng=random.Random(rng.getrandbits(32)),
            planner=planner,
            ai_move_interval_ms=speeds[difficulty],
            on_game_over=self._handle_game_end,
            on_garbage_send=self._send_to_player,
        )

    @property
    def games(self) -> tuple[TetrisGame, TetrisGame]:
        return self.player_game, self.ai_game

    @property
    def is_running(self) -> bool:
        return self.result is None

    def _send_to_ai(self, lines: int) -> None:
        self.ai_game.receive_garbage(lines)

    def _send_to_player(self, lines: int) -> None:
        self.player_game.receive_garbage(lines)

    def update(self, delta_ms: float) -> None:
        """Advance both boards by one frame unless paused or finished."""
        if self.is_paused or not self.is_running:
            return
        self._updating = True
        try:
            self.player_game.update(delta_ms)
            self.ai_game.update(delta_ms)
        finally:
            self._updating = False
        self._resolve()

    def toggle_pause(self) -> None:
        """Pause or resume both boards together."""
        if not self.is_running:
            return
        self.is_paused = not self.is_paused
        for game in self.games:
            if game.is_paused != self.is_paused:
                game.toggle_pause()

    def handle_action(self, action: Action) -> None:
        """Route a player command. Only pause gets through while paused."""
        if not self.is_running:
            return
        if action == Action.TOGGLE_PAUSE:
            self.toggle_pause()
        elif not self.is_paused and action != Action.UNDO:
            self.player_game.handle_action(action)

    def _handle_game_end(self, _result: GameResult) -> None:
        # Boards ending during one frame are judged together.
        if not self._updating:
            self._resolve()

    def _resolve(self) -> None:
        if self.result is not None:
            return
        player_over = self.player_game.is_game_over
        ai_over = self.ai_game.is_game_over
        if not (player_over or ai_over):
            return

        if player_over and ai_over:
            self.result = BattleResult.DRAW
        elif player_over:
            self.result = BattleResult.PLAYER2_WIN
        else:
            self.result = BattleResult.PLAYER1_WIN
        logger.info("Battle finished (%s, difficulty=%s)", self.result.value, self.difficulty)

        if self.on_finished is not None:
            self.on_finished(self.result)
