"""Game logic: board, pieces, scoring, and game orchestrator.

The orchestrator lives in tetris_battle.game.tetris; it is not re-exported
here because it depends on the AI planner, which in turn builds on the
modules below.
"""

from tetris_battle.game.actions import Action
from tetris_battle.game.board import Board
from tetris_battle.game.modes import GameMode
from tetris_battle.game.pieces import PIECE_TYPES, Piece, PieceBag

__all__ = [
    "Action",
    "Board",
    "GameMode",
    "PIECE_TYPES",
    "Piece",
    "PieceBag",
]
