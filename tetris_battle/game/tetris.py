"""
Game orchestrator: piece control, locking, line clears and the state machine.

This module ties the Board, the piece table and the scoring rules into a
full session:

  - PLAYING -> LINE_CLEARING -> PLAYING, any state -> GAME_OVER (terminal),
    PLAYING <-> PAUSED.
  - Gravity, the AI move timer, the line-clear flash, the action label and
    the elapsed-time clock are all advanced by update(delta_ms); there are
    no wall-clock timers, so a session can be driven tick by tick.
  - Battle sessions exchange garbage through on_garbage_send /
    receive_garbage and never share state.
"""

from __future__ import annotations

import enum
import logging
import random
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable

import numpy as np

from tetris_battle.ai.planner import HeuristicPlanner
from tetris_battle.game.actions import Action
from tetris_battle.game.board import Board
from tetris_battle.game.modes import (
    SPRINT_DURATION_MS,
    GameMode,
    record_metric,
    runs_clock,
    target_lines,
)
from tetris_battle.game.pieces import Piece, PieceBag
from tetris_battle.game.scoring import exchange_garbage, score_clear

if TYPE_CHECKING:
    from tetris_battle.records import RecordStore

logger = logging.getLogger(__name__)

LINE_CLEAR_FRAMES = 12
ACTION_LABEL_MS = 3000
DEFAULT_AI_MOVE_INTERVAL_MS = 50
MAX_UNDO_HISTORY = 20

# Tried in order after the unkicked rotation fails.
WALL_KICKS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (-1, -1), (1, -1))

# T-spin corners, relative to the piece position.
TSPIN_CORNERS: tuple[tuple[int, int], ...] = ((0, 0), (2, 0), (0, 2), (2, 2))


class GameState(str, enum.Enum):
    PLAYING = "PLAYING"
    LINE_CLEARING = "LINE_CLEARING"
    GAME_OVER = "GAME_OVER"
    PAUSED = "PAUSED"


class Outcome(str, enum.Enum):
    GAME_OVER = "game_over"
    SPRINT_COMPLETE = "sprint_complete"
    TIME_ATTACK_COMPLETE = "time_attack_complete"


@dataclass(frozen=True)
class GameResult:
    """Terminal event payload."""
    mode: GameMode
    outcome: Outcome
    is_ai: bool
    score: int
    lines: int
    elapsed_ms: int

    @property
    def metric(self) -> tuple[str, int] | None:
        """(name, value) of the figure this mode is ranked by."""
        name = record_metric(self.mode)
        if name is None:
            return None
        value = {"score": self.score, "lines": self.lines, "time": self.elapsed_ms}[name]
        return name, value


@dataclass
class _LineClear:
    rows: list[int]
    is_tspin: bool
    frame_count: int = 0


@dataclass
class _UndoSnapshot:
    grid: np.ndarray
    current_piece: Piece | None
    next_piece_type: str
    bag: list[str] = field(default_factory=list)
    score: int = 0
    level: int = 1
    lines_cleared: int = 0
    combo_count: int = 0
    is_back_to_back: bool = False
    last_move_was_rotation: bool = False


def drop_interval_ms(level: int) -> int:
    """Gravity interval: 700 ms at level 1, 50 ms faster per level, 200 ms floor."""
    return max(200, 700 - (level - 1) * 50)


class TetrisGame:
    """One falling-block session: board, current piece, counters, and timers.

    Attributes:
        mode: The GameMode of this session.
        ai_enabled: Whether the built-in planner drives the pieces.
        board: The game board.
        current_piece: The live piece, or None between lock and spawn.
        next_piece_type: Type of the piece that spawns next.
        state: Current GameState.
        score: Current score.
        level: Current level (starts at 1).
        lines_cleared: Total lines cleared this session.
        combo_count: Consecutive clears without a clear-less lock.
        is_back_to_back: Whether the last clear was a Tetris or T-spin.
        pending_garbage: Attack lines owed to this board.
        last_move_was_rotation: Whether the last successful action rotated.
        pieces_locked: Pieces written to the board this session.
        elapsed_ms: Session clock in milliseconds.
        action_text: Current action label ("" when none is showing).
        result: The GameResult once the session has ended.
    """

    def __init__(
        self,
        mode: GameMode | str = GameMode.NORMAL,
        ai_enabled: bool = False,
        *,
        seed: int | None = None,
        rng: random.Random | None = None,
        planner: HeuristicPlanner | None = None,
        ai_move_interval_ms: int = DEFAULT_AI_MOVE_INTERVAL_MS,
        record_store: RecordStore | None = None,
        on_game_over: Callable[[GameResult], None] | None = None,
        on_garbage_send: Callable[[int], None] | None = None,
        on_action: Callable[[str], None] | None = None,
        on_stats_changed: Callable[[int, int, int], None] | None = None,
    ) -> None:
        self.mode = GameMode(mode)
        self.ai_enabled = ai_enabled
        self.rng = rng or random.Random(seed)
        self.planner = planner or (HeuristicPlanner() if ai_enabled else None)
        self.ai_move_interval_ms = ai_move_interval_ms
        self.record_store = record_store

        self.on_game_over = on_game_over
        self.on_garbage_send = on_garbage_send
        self.on_action = on_action
        self.on_stats_changed = on_stats_changed

        self.board = Board()
        self.reset()

    # ── Session lifecycle ────────────────────────────────────────────────

    def reset(self) -> None:
        """Start a fresh session: empty board, counters zeroed, first spawn."""
        self.board.reset()
        self.bag = PieceBag(self.rng)
        self.current_piece: Piece | None = None
        self.next_piece_type: str = ""

        self.score = 0
        self.level = 1
        self.lines_cleared = 0
        self.combo_count = 0
        self.is_back_to_back = False
        self.pending_garbage = 0
        self.last_move_was_rotation = False
        self.pieces_locked = 0

        self.state = GameState.PLAYING
        self.result: GameResult | None = None
        self._resume_state = GameState.PLAYING
        self._line_clear: _LineClear | None = None

        self.elapsed_ms = 0
        self._clock_ms = 0.0
        self._clock_started = False
        self._drop_timer = 0.0
        self._ai_timer = 0.0
        self.ai_queue: list[Action] = []

        self.action_text = ""
        self._action_ttl_ms = 0.0

        self.undo_history: deque[_UndoSnapshot] = deque(maxlen=MAX_UNDO_HISTORY)

        self.next_piece_type = self.bag.draw()
        self._spawn_piece()

    @property
    def is_practice(self) -> bool:
        return self.mode is GameMode.PRACTICE

    @property
    def is_battle(self) -> bool:
        return self.mode is GameMode.BATTLE

    @property
    def is_game_over(self) -> bool:
        return self.state is GameState.GAME_OVER

    @property
    def is_paused(self) -> bool:
        return self.state is GameState.PAUSED

    def get_state(self) -> dict[str, Any]:
        """Return a read-only snapshot for renderers and other observers."""
        return {
            "board_grid": self.board.get_grid(),
            "current_piece": self.current_piece.copy() if self.current_piece else None,
            "ghost_piece": self.ghost_piece(),
            "next_piece_type": self.next_piece_type,
            "pending_garbage": self.pending_garbage,
            "stack_height": self.board.stack_height(),
            "state": self.state,
            "score": self.score,
            "level": self.level,
            "lines_cleared": self.lines_cleared,
            "elapsed_ms": self.elapsed_ms,
            "action_text": self.action_text,
            "clearing_rows": list(self._line_clear.rows) if self._line_clear else [],
            "line_clear_frame": self._line_clear.frame_count if self._line_clear else 0,
        }

    # ── Input ────────────────────────────────────────────────────────────

    def handle_action(self, action: Action) -> None:
        """Dispatch one input command.

        Pause and undo are always routed. Piece commands are ignored while
        the AI is in control; disallowed commands are silent no-ops.
        """
        if action == Action.TOGGLE_PAUSE:
            self.toggle_pause()
        elif action == Action.UNDO:
            self.undo()
        elif self.ai_enabled:
            return
        elif action == Action.LEFT:
            self.move_left()
        elif action == Action.RIGHT:
            self.move_right()
        elif action == Action.ROTATE:
            self.rotate()
        elif action == Action.SOFT_DROP:
            self.soft_drop()
        elif action == Action.HARD_DROP:
            self.hard_drop()

    def _can_control(self) -> bool:
        return self.current_piece is not None and self.state is GameState.PLAYING

    def move_left(self) -> bool:
        return self._shift(-1)

    def move_right(self) -> bool:
        return self._shift(1)

    def _shift(self, dx: int) -> bool:
        if not self._can_control():
            return False
        if self.board.collides(self.current_piece, dx, 0):
            return False
        self.current_piece.x += dx
        self.last_move_was_rotation = False
        return True

    def rotate(self) -> bool:
        """Rotate clockwise, trying the wall kicks in order.

        If neither the plain rotation nor any kick fits, the piece is left
        unchanged.
        """
        if not self._can_control():
            return False

        rotated = self.current_piece.rotated()
        if not self.board.collides(rotated):
            self.current_piece = rotated
            self.last_move_was_rotation = True
            return True

        for kick_x, kick_y in WALL_KICKS:
            if not self.board.collides(rotated, kick_x, kick_y):
                self.current_piece = rotated.moved(kick_x, kick_y)
                self.last_move_was_rotation = True
                return True
        return False

    def soft_drop(self) -> bool:
        """Manual one-row drop. Locks when blocked, except in practice mode."""
        if not self._can_control():
            return False
        return self._step_down(manual=True)

    def _step_down(self, manual: bool) -> bool:
        if not self.board.collides(self.current_piece, 0, 1):
            self.current_piece.y += 1
            if manual:
                self.last_move_was_rotation = False
            return True
        if self.is_practice and manual:
            return False
        self._lock_piece()
        return False

    def hard_drop(self) -> bool:
        if not self._can_control():
            return False
        self.current_piece.y += self.board.drop_distance(self.current_piece)
        self.last_move_was_rotation = False
        self._lock_piece()
        return True

    def ghost_piece(self) -> Piece | None:
        """Where the current piece would land, without moving it."""
        if self.current_piece is None:
            return None
        return self.current_piece.moved(0, self.board.drop_distance(self.current_piece))

    def toggle_pause(self) -> None:
        if self.state is GameState.GAME_OVER:
            return
        if self.state is GameState.PAUSED:
            self.state = self._resume_state
        else:
            self._resume_state = self.state
            self.state = GameState.PAUSED

    # ── Lock & clear ─────────────────────────────────────────────────────

    def _is_tspin(self, piece: Piece) -> bool:
        """T piece, last action a rotation, and at least 3 corners blocked."""
        if piece.kind != "T" or not self.last_move_was_rotation:
            return False
        filled = sum(
            self.board.is_filled(piece.x + dx, piece.y + dy) for dx, dy in TSPIN_CORNERS
        )
        return filled >= 3

    def _lock_piece(self) -> None:
        piece = self.current_piece
        if piece is None:
            return

        is_tspin = self._is_tspin(piece)
        locked_in_buffer = self.board.place_piece(piece)
        self.pieces_locked += 1

        self.current_piece = None
        self.last_move_was_rotation = False

        if locked_in_buffer:
            logger.info("Lockout: %s locked in the buffer at (%d, %d)", piece.kind, piece.x, piece.y)
            self._finish(Outcome.GAME_OVER)
            return

        rows = self.board.full_rows()
        if rows:
            self.state = GameState.LINE_CLEARING
            self._line_clear = _LineClear(rows, is_tspin)
        else:
            self.combo_count = 0
            self._spawn_piece()

    def _complete_line_clear(self) -> None:
        data = self._line_clear
        self._line_clear = None
        if data is None:
            self.state = GameState.PLAYING
            self._spawn_piece()
            return

        self.board.remove_rows(data.rows)
        result = score_clear(
            len(data.rows),
            data.is_tspin,
            self.level,
            self.combo_count,
            self.is_back_to_back,
            self.lines_cleared,
        )
        self.score += result.score_gained
        self.combo_count = result.combo_count
        self.is_back_to_back = result.is_back_to_back

        label = result.label
        if self.is_battle and result.garbage > 0:
            label = self._send_garbage(result.garbage, label)
        if label:
            self._show_action(label)

        self.lines_cleared += result.lines
        self.level = result.level
        self._emit_stats()

        target = target_lines(self.mode)
        if target is not None and self.lines_cleared >= target:
            self._finish(Outcome.TIME_ATTACK_COMPLETE)
            return

        self.state = GameState.PLAYING
        self._spawn_piece()

    # ── Garbage ──────────────────────────────────────────────────────────

    def _send_garbage(self, attack: int, label: str) -> str:
        exchange = exchange_garbage(attack, self.pending_garbage)
        if exchange.cancelled:
            suffix = f"OFFSET +{exchange.sent}" if exchange.sent else "OFFSET!"
            label = f"{label} {suffix}" if label else suffix
        self.pending_garbage = exchange.pending
        if exchange.sent > 0:
            logger.debug("Sending %d garbage lines (%d cancelled)", exchange.sent, exchange.cancelled)
            if self.on_garbage_send is not None:
                self.on_garbage_send(exchange.sent)
        return label

    def receive_garbage(self, count: int) -> None:
        """Queue attack lines; they are inserted at the next spawn."""
        if count > 0:
            self.pending_garbage += count
            logger.debug("Received %d garbage lines (%d pending)", count, self.pending_garbage)

    # ── Spawning ─────────────────────────────────────────────────────────

    def _spawn_piece(self) -> None:
        if self.state is GameState.GAME_OVER:
            return

        if self.pending_garbage > 0:
            hole = self.rng.randrange(self.board.width)
            self.board.add_garbage(self.pending_garbage, hole)
            logger.debug("Inserted %d garbage lines, hole at column %d", self.pending_garbage, hole)
            self.pending_garbage = 0

        piece = Piece.spawn(self.next_piece_type)
        self.next_piece_type = self.bag.draw()

        if self.board.collides(piece):
            logger.info("Blockout: %s cannot spawn", piece.kind)
            self._finish(Outcome.GAME_OVER)
            return

        self.current_piece = piece
        self.state = GameState.PLAYING

        if self.is_practice:
            self._save_undo_state()

        if self.ai_enabled and self.planner is not None:
            self.ai_queue = self.planner.plan(self.board, self.current_piece)

    # ── Undo (practice) ──────────────────────────────────────────────────

    def _save_undo_state(self) -> None:
        self.undo_history.append(_UndoSnapshot(
            grid=self.board.get_grid(),
            current_piece=self.current_piece.copy() if self.current_piece else None,
            next_piece_type=self.next_piece_type,
            bag=list(self.bag.contents),
            score=self.score,
            level=self.level,
            lines_cleared=self.lines_cleared,
            combo_count=self.combo_count,
            is_back_to_back=self.is_back_to_back,
            last_move_was_rotation=self.last_move_was_rotation,
        ))

    def undo(self) -> bool:
        """Restore the most recent spawn snapshot (practice mode only).

        Returns:
            True if a snapshot was restored.
        """
        if not self.is_practice or not self.undo_history or self.state is not GameState.PLAYING:
            return False
        snapshot = self.undo_history.pop()
        self.board.grid = snapshot.grid
        self.current_piece = snapshot.current_piece
        self.next_piece_type = snapshot.next_piece_type
        self.bag.contents = snapshot.bag
        self.score = snapshot.score
        self.level = snapshot.level
        self.lines_cleared = snapshot.lines_cleared
        self.combo_count = snapshot.combo_count
        self.is_back_to_back = snapshot.is_back_to_back
        self.last_move_was_rotation = snapshot.last_move_was_rotation
        self._emit_stats()
        return True

    # ── Timing ───────────────────────────────────────────────────────────

    def update(self, delta_ms: float) -> None:
        """Advance the session by one frame.

        Args:
            delta_ms: Milliseconds since the previous update.
        """
        if self.state in (GameState.GAME_OVER, GameState.PAUSED):
            return

        self._advance_clock(delta_ms)
        if self.state is GameState.GAME_OVER:
            return

        if self.action_text:
            self._action_ttl_ms -= delta_ms
            if self._action_ttl_ms <= 0:
                self.action_text = ""

        if self.state is GameState.LINE_CLEARING:
            if self._line_clear is not None:
                self._line_clear.frame_count += 1
                if self._line_clear.frame_count < LINE_CLEAR_FRAMES:
                    return
            self._complete_line_clear()
            return

        if self.is_practice or self.current_piece is None:
            return

        if self.ai_enabled:
            self._update_ai(delta_ms)
            return

        self._drop_timer += delta_ms
        if self._drop_timer >= drop_interval_ms(self.level):
            self._drop_timer = 0.0
            self._step_down(manual=False)

    def _advance_clock(self, delta_ms: float) -> None:
        if not runs_clock(self.mode):
            return
        if not self._clock_started:
            if self.current_piece is None:
                return
            self._clock_started = True
            return
        self._clock_ms += delta_ms
        self.elapsed_ms = int(self._clock_ms)
        if self.mode is GameMode.SPRINT_1M and self._clock_ms >= SPRINT_DURATION_MS:
            self._finish(Outcome.SPRINT_COMPLETE)

    def _update_ai(self, delta_ms: float) -> None:
        self._ai_timer += delta_ms
        if self._ai_timer < self.ai_move_interval_ms:
            return
        self._ai_timer = 0.0

        if not self.ai_queue:
            self.ai_queue = self.planner.plan(self.board, self.current_piece)
            return

        move = self.ai_queue.pop(0)
        if move == Action.LEFT:
            self.move_left()
        elif move == Action.RIGHT:
            self.move_right()
        elif move == Action.ROTATE:
            self.rotate()
        elif move == Action.HARD_DROP:
            self.hard_drop()

    # ── Events & termination ─────────────────────────────────────────────

    def _show_action(self, text: str) -> None:
        self.action_text = text
        self._action_ttl_ms = ACTION_LABEL_MS
        if self.on_action is not None:
            self.on_action(text)

    def _emit_stats(self) -> None:
        if self.on_stats_changed is not None:
            self.on_stats_changed(self.score, self.level, self.lines_cleared)

    def _finish(self, outcome: Outcome) -> None:
        """One-way transition to GAME_OVER. Later calls are ignored."""
        if self.state is GameState.GAME_OVER:
            return
        self.state = GameState.GAME_OVER
        self.ai_queue = []
        self.result = GameResult(
            mode=self.mode,
            outcome=outcome,
            is_ai=self.ai_enabled,
            score=self.score,
            lines=self.lines_cleared,
            elapsed_ms=self.elapsed_ms,
        )
        logger.info(
            "Session over (%s, %s): score=%d lines=%d time=%dms",
            self.mode.value, outcome.value, self.score, self.lines_cleared, self.elapsed_ms,
        )

        if self.on_game_over is not None:
            self.on_game_over(self.result)

        if self.record_store is not None and self._records_outcome(outcome):
            self.record_store.add(self._build_record(self.result))

    def _records_outcome(self, outcome: Outcome) -> bool:
        """Normal mode records any ending; timed modes only their completion."""
        if record_metric(self.mode) is None:
            return False
        return self.mode is GameMode.NORMAL or outcome is not Outcome.GAME_OVER

    @staticmethod
    def _build_record(result: GameResult) -> dict[str, Any]:
        name, value = result.metric
        return {
            "mode": result.mode.value,
            "is_ai": result.is_ai,
            "date": datetime.now(timezone.utc).isoformat(),
            name: value,
        }
