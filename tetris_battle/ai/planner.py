"""
Heuristic placement search.

For the current piece, every distinct rotation is tried at every column in
[-2, width + 2). Each legal placement is hard-dropped onto a copy of the
board, full rows are removed, and the resulting board is scored with a
weighted linear heuristic:

  value = w_height * aggregate_height + w_holes * holes
        + w_bumpiness * bumpiness + w_lines * cleared^2
        + w_well * total_well_depth + w_multi * max(well_count - 1, 0)

The best placement (first found on ties) is turned into a flat queue of
ROTATE / LEFT / RIGHT actions followed by a single HARD_DROP.

The search reads the board and piece only; it never mutates engine state.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from tetris_battle.game.actions import Action
from tetris_battle.game.board import Board
from tetris_battle.game.pieces import Piece

# Distinct orientations per type; the rest are symmetric repeats.
ROTATION_COUNTS: dict[str, int] = {"O": 1, "I": 2, "S": 2, "Z": 2}
DEFAULT_ROTATIONS = 4

SEARCH_MARGIN = 2


@dataclass
class Weights:
    height: float = -0.5
    holes: float = -3.5
    bumpiness: float = -0.2
    lines_cleared: float = 3.0
    well_depth: float = 0.1
    multiple_wells: float = -10.0

    @classmethod
    def from_dict(cls, values: dict[str, Any] | None) -> "Weights":
        """Build weights from a config mapping, ignoring unknown keys."""
        if not values:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: float(v) for k, v in values.items() if k in known})


@dataclass(frozen=True)
class Placement:
    """A candidate resting position for the current piece."""
    rotation: int
    x: int
    y: int
    value: float
    lines_cleared: int


def rotation_count(kind: str) -> int:
    return ROTATION_COUNTS.get(kind, DEFAULT_ROTATIONS)


class HeuristicPlanner:
    """Exhaustive rotation x column search scored by board heuristics.

    Attributes:
        weights: Heuristic weights.
    """

    def __init__(self, weights: Weights | None = None) -> None:
        self.weights = weights or Weights()

    def find_best_move(self, board: Board, piece: Piece | None) -> Placement | None:
        """Return the highest-valued legal placement, or None.

        Rotations are applied to the piece's current shape; each rotated
        shape is tested at the piece's current row for every column in
        [-2, width + 2). Ties keep the first placement in enumeration order
        (ascending rotation, then ascending x).

        Args:
            board: Board to search on (not modified).
            piece: The piece to place (not modified).

        Returns:
            The best Placement, or None when no placement is legal.
        """
        if piece is None:
            return None

        best: Placement | None = None
        rotated = piece.copy()
        for rotation in range(rotation_count(piece.kind)):
            if rotation > 0:
                rotated = rotated.rotated()
            for x in range(-SEARCH_MARGIN, board.width + SEARCH_MARGIN):
                candidate = Piece(rotated.kind, rotated.shape, x, piece.y)
                if board.collides(candidate):
                    continue
                candidate.y += board.drop_distance(candidate)

                result, lines = self.simulate_placement(board, candidate)
                value = self.evaluate_board(result, lines)
                if best is None or value > best.value:
                    best = Placement(rotation, x, candidate.y, value, lines)
        return best

    def simulate_placement(self, board: Board, piece: Piece) -> tuple[Board, int]:
        """Lock the piece on a copy of the board and remove full rows.

        Returns:
            (resulting board, number of rows cleared)
        """
        result = board.copy()
        result.place_piece(piece)
        lines = result.clear_lines(include_buffer=True)
        return result, lines

    def evaluate_board(self, board: Board, lines_cleared: int = 0) -> float:
        """Score a board with the weighted heuristic (higher is better)."""
        w = self.weights
        well_depth, well_count = board.get_well_info()
        multiple_wells = max(well_count - 1, 0)
        return (
            w.height * board.get_aggregate_height()
            + w.holes * board.get_holes()
            + w.bumpiness * board.get_bumpiness()
            + w.lines_cleared * lines_cleared * lines_cleared
            + w.well_depth * well_depth
            + w.multiple_wells * multiple_wells
        )

    def generate_move_queue(self, placement: Placement, piece: Piece) -> list[Action]:
        """Translate a placement into rotations, shifts, and one hard drop."""
        moves: list[Action] = [Action.ROTATE] * placement.rotation
        delta_x = placement.x - piece.x
        if delta_x < 0:
            moves += [Action.LEFT] * -delta_x
        elif delta_x > 0:
            moves += [Action.RIGHT] * delta_x
        moves.append(Action.HARD_DROP)
        return moves

    def plan(self, board: Board, piece: Piece | None) -> list[Action]:
        """Search and return the move queue; a bare drop if nothing fits."""
        if piece is None:
            return []
        best = self.find_best_move(board, piece)
        if best is None:
            return [Action.HARD_DROP]
        return self.generate_move_queue(best, piece)
