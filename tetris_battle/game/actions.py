"""Discrete input commands accepted by the engine."""

from __future__ import annotations

import enum


class Action(enum.IntEnum):
    """Discrete action space shared by human input and the AI move queue."""
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    HARD_DROP = 4
    TOGGLE_PAUSE = 5
    UNDO = 6
