"""Game modes and the per-mode completion / record rules."""

from __future__ import annotations

import enum

SPRINT_DURATION_MS = 60_000


class GameMode(str, enum.Enum):
    NORMAL = "normal"
    SPRINT_1M = "sprint1m"
    TIME_10 = "time10"
    TIME_20 = "time20"
    TIME_40 = "time40"
    TIME_100 = "time100"
    PRACTICE = "practice"
    BATTLE = "battle"


# Line targets that end a time-attack session in success.
TARGET_LINES: dict[GameMode, int] = {
    GameMode.TIME_10: 10,
    GameMode.TIME_20: 20,
    GameMode.TIME_40: 40,
    GameMode.TIME_100: 100,
}

TIME_ATTACK_MODES = frozenset(TARGET_LINES)


def target_lines(mode: GameMode) -> int | None:
    return TARGET_LINES.get(mode)


def record_metric(mode: GameMode) -> str | None:
    """Name of the value stored for a finished session of this mode.

    Returns None for modes that never write a record.
    """
    if mode is GameMode.NORMAL:
        return "score"
    if mode is GameMode.SPRINT_1M:
        return "lines"
    if mode in TIME_ATTACK_MODES:
        return "time"
    return None


def runs_clock(mode: GameMode) -> bool:
    """Practice and battle sessions have no elapsed-time clock."""
    return mode not in (GameMode.PRACTICE, GameMode.BATTLE)
