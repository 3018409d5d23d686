"""
Board logic for a 10x22 grid.

The board is a 2D numpy array (height x width) of int8 values:
  - 0 = empty cell
  - 1-7 = piece type ID of the piece that locked there
  - 8 = garbage

The top 2 rows (indices 0-1) are a hidden buffer where pieces spawn.
The visible play area is rows 2-21 (20 visible rows).

Pieces are positioned in field coordinates (see pieces.py); a field row y
maps to board row y + BUFFER_HEIGHT.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

from tetris_battle.game.pieces import GARBAGE_ID, Piece

BOARD_WIDTH = 10
VISIBLE_HEIGHT = 20
BUFFER_HEIGHT = 2
TOTAL_HEIGHT = VISIBLE_HEIGHT + BUFFER_HEIGHT


class Board:
    """Tetris board with collision detection, line clearing, and board metrics.

    Attributes:
        width: Number of columns (10).
        height: Number of rows including the buffer (22).
        grid: 2D numpy array of shape (height, width), dtype int8.
    """

    def __init__(self, width: int = BOARD_WIDTH, height: int = TOTAL_HEIGHT) -> None:
        self.width = width
        self.height = height
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def copy(self) -> "Board":
        board = Board(self.width, self.height)
        board.grid = self.grid.copy()
        return board

    def reset(self) -> None:
        """Clear the entire board, setting all cells to 0."""
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def get_grid(self) -> np.ndarray:
        """Return a copy of the board grid."""
        return self.grid.copy()

    # ── Collision ────────────────────────────────────────────────────────

    def collides(self, piece: Piece | None, offset_x: int = 0, offset_y: int = 0) -> bool:
        """Check whether a piece, shifted by an offset, overlaps anything.

        A filled cell collides if its column is outside [0, width), if it is
        below the floor, or if the board cell it lands on is filled. Cells
        above the top of the board never collide, which only matters at
        spawn. A missing piece always collides.

        Args:
            piece: The piece to test, or None.
            offset_x: Column offset applied to the piece position.
            offset_y: Row offset applied to the piece position.

        Returns:
            True if the shifted placement is blocked.
        """
        if piece is None or piece.shape is None or piece.shape.size == 0:
            return True

        for x, y in piece.cells(offset_x, offset_y):
            board_y = y + BUFFER_HEIGHT
            if x < 0 or x >= self.width or board_y >= self.height:
                return True
            if board_y < 0:
                continue
            if self.grid[board_y, x] != 0:
                return True
        return False

    def drop_distance(self, piece: Piece) -> int:
        """Number of rows the piece can fall before it is blocked."""
        rows = 0
        while not self.collides(piece, 0, rows + 1):
            rows += 1
        return rows

    def is_filled(self, x: int, y: int) -> bool:
        """Corner test used by T-spin detection.

        Out-of-bounds cells (walls, floor, above the buffer) count as filled.
        """
        board_y = y + BUFFER_HEIGHT
        if x < 0 or x >= self.width or board_y < 0 or board_y >= self.height:
            return True
        return bool(self.grid[board_y, x] != 0)

    # ── Mutation ─────────────────────────────────────────────────────────

    def place_piece(self, piece: Piece) -> bool:
        """Write the piece's cells onto the grid.

        Cells outside the board are skipped. Does NOT check for overlap;
        the caller has already established that the position is legal.

        Returns:
            True if any written cell landed in a buffer row (lockout).
        """
        locked_in_buffer = False
        for x, y in piece.cells():
            board_y = y + BUFFER_HEIGHT
            if 0 <= board_y < self.height and 0 <= x < self.width:
                self.grid[board_y, x] = piece.id
                if board_y < BUFFER_HEIGHT:
                    locked_in_buffer = True
        return locked_in_buffer

    def full_rows(self, include_buffer: bool = False) -> list[int]:
        """Return board indices of completely filled rows.

        Only visible rows are eligible unless include_buffer is set.
        """
        start = 0 if include_buffer else BUFFER_HEIGHT
        filled = np.all(self.grid[start:] != 0, axis=1)
        return [start + int(r) for r in np.nonzero(filled)[0]]

    def remove_rows(self, rows: Iterable[int]) -> int:
        """Remove the given rows and prepend empty rows at the top.

        Returns:
            The number of rows removed.
        """
        rows = list(rows)
        if not rows:
            return 0
        mask = np.ones(self.height, dtype=bool)
        mask[rows] = False
        remaining = self.grid[mask]
        empty_rows = np.zeros((self.height - remaining.shape[0], self.width), dtype=np.int8)
        self.grid = np.vstack([empty_rows, remaining])
        return len(rows)

    def clear_lines(self, include_buffer: bool = False) -> int:
        """Remove all full rows at once and return how many were removed."""
        return self.remove_rows(self.full_rows(include_buffer))

    def add_garbage(self, count: int, hole: int) -> None:
        """Shift the stack up by count rows and append garbage at the bottom.

        Every inserted row is filled except for the shared hole column.
        Rows pushed off the top are discarded.
        """
        if count <= 0:
            return
        count = min(count, self.height)
        garbage = np.full((count, self.width), GARBAGE_ID, dtype=np.int8)
        garbage[:, hole] = 0
        self.grid = np.vstack([self.grid[count:], garbage])

    # ── Metrics ──────────────────────────────────────────────────────────

    def get_column_heights(self) -> np.ndarray:
        """Get the height of every column (vectorized).

        A column's height is measured from the floor up to the topmost
        filled cell, over the whole grid including the buffer. An empty
        column has height 0.
        """
        filled = self.grid != 0
        has_block = filled.any(axis=0)
        first_block = np.argmax(filled, axis=0)
        return np.where(has_block, self.height - first_block, 0)

    def get_aggregate_height(self) -> int:
        return int(self.get_column_heights().sum())

    def get_holes(self) -> int:
        """Count empty cells that have a filled cell somewhere above them."""
        filled = self.grid != 0
        block_above = np.maximum.accumulate(filled, axis=0)
        holes = block_above & ~filled
        return int(holes.sum())

    def get_bumpiness(self) -> int:
        """Sum of absolute height differences between adjacent columns."""
        heights = self.get_column_heights()
        return int(np.abs(np.diff(heights)).sum())

    def get_well_info(self) -> tuple[int, int]:
        """Return (total well depth, number of wells at least 2 deep).

        A well is a column strictly lower than both neighbours; a missing
        neighbour at the board edge counts as infinitely tall. Its depth is
        the lower neighbour height minus the column height.
        """
        heights = [int(h) for h in self.get_column_heights()]
        well_depth = 0
        well_count = 0
        for i, height in enumerate(heights):
            left = heights[i - 1] if i > 0 else float("inf")
            right = heights[i + 1] if i < len(heights) - 1 else float("inf")
            lowest_neighbour = min(left, right)
            if height < lowest_neighbour:
                depth = int(lowest_neighbour - height)
                well_depth += depth
                if depth >= 2:
                    well_count += 1
        return well_depth, well_count

    def stack_height(self) -> int:
        """Height of the tallest column, 0 for an empty board."""
        heights = self.get_column_heights()
        return int(heights.max()) if heights.size else 0
