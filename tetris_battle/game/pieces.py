"""
Tetromino definitions, the live Piece value, and the 7-bag randomizer.

Every piece type carries a single canonical shape matrix (the smallest
bounding box that fits the piece in its spawn orientation). Rotation is not
stored as an angle: a rotated piece gets a freshly computed matrix, obtained
by turning the current matrix 90 degrees clockwise.

Coordinate convention:
  - x is the column of the shape's left edge, increasing rightward.
  - y is the row of the shape's top edge in *field* coordinates, where
    y = 0 is the first visible row and negative rows lie in the buffer.
  - The board array index of a field row is y + BUFFER_HEIGHT.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field

import numpy as np

# =============================================================================
# Piece Colors (RGB)
# =============================================================================

COLOR_CYAN   = (0, 255, 255)    # I
COLOR_YELLOW = (255, 255, 0)    # O
COLOR_PURPLE = (128, 0, 128)    # T
COLOR_GREEN  = (0, 255, 0)      # S
COLOR_RED    = (255, 0, 0)      # Z
COLOR_BLUE   = (0, 0, 255)      # J
COLOR_ORANGE = (255, 136, 0)    # L
COLOR_GARBAGE = (136, 136, 136)

# Board cell token for garbage rows (piece ids are 1-7).
GARBAGE_ID = 8

SPAWN_X = 3
SPAWN_Y = -1

# =============================================================================
# Tetromino Definitions
# =============================================================================

I_PIECE: dict = {
    "id": 1,
    "name": "I",
    "color": COLOR_CYAN,
    "shape": np.array([[1, 1, 1, 1]], dtype=np.int8),
}

O_PIECE: dict = {
    "id": 2,
    "name": "O",
    "color": COLOR_YELLOW,
    "shape": np.array([
        [1, 1],
        [1, 1],
    ], dtype=np.int8),
}

T_PIECE: dict = {
    "id": 3,
    "name": "T",
    "color": COLOR_PURPLE,
    "shape": np.array([
        [0, 1, 0],
        [1, 1, 1],
    ], dtype=np.int8),
}

S_PIECE: dict = {
    "id": 4,
    "name": "S",
    "color": COLOR_GREEN,
    "shape": np.array([
        [0, 1, 1],
        [1, 1, 0],
    ], dtype=np.int8),
}

Z_PIECE: dict = {
    "id": 5,
    "name": "Z",
    "color": COLOR_RED,
    "shape": np.array([
        [1, 1, 0],
        [0, 1, 1],
    ], dtype=np.int8),
}

J_PIECE: dict = {
    "id": 6,
    "name": "J",
    "color": COLOR_BLUE,
    "shape": np.array([
        [1, 0, 0],
        [1, 1, 1],
    ], dtype=np.int8),
}

L_PIECE: dict = {
    "id": 7,
    "name": "L",
    "color": COLOR_ORANGE,
    "shape": np.array([
        [0, 0, 1],
        [1, 1, 1],
    ], dtype=np.int8),
}

PIECE_TYPES: list[dict] = [I_PIECE, O_PIECE, T_PIECE, S_PIECE, Z_PIECE, J_PIECE, L_PIECE]
PIECES_BY_NAME: dict[str, dict] = {piece["name"]: piece for piece in PIECE_TYPES}
PIECE_NAMES: list[str] = [piece["name"] for piece in PIECE_TYPES]

# Cell token -> RGB, used by anything that draws the board.
CELL_COLORS: dict[int, tuple[int, int, int]] = {
    piece["id"]: piece["color"] for piece in PIECE_TYPES
}
CELL_COLORS[GARBAGE_ID] = COLOR_GARBAGE


def rotate_shape(shape: np.ndarray) -> np.ndarray:
    """Return a new matrix turned 90 degrees clockwise.

    Row j of the result is column j of the input read bottom to top, i.e.
    a row reversal followed by a transpose. The transform is integer exact,
    so four applications reproduce the input.
    """
    return np.ascontiguousarray(shape[::-1].T)


@dataclass
class Piece:
    """A live tetromino: its type, current shape matrix, and position."""

    kind: str
    shape: np.ndarray
    x: int = SPAWN_X
    y: int = SPAWN_Y

    @classmethod
    def spawn(cls, kind: str) -> "Piece":
        """Create a piece of the given type at the spawn position."""
        return cls(kind, PIECES_BY_NAME[kind]["shape"].copy(), SPAWN_X, SPAWN_Y)

    @property
    def id(self) -> int:
        return PIECES_BY_NAME[self.kind]["id"]

    @property
    def color(self) -> tuple[int, int, int]:
        return PIECES_BY_NAME[self.kind]["color"]

    def copy(self) -> "Piece":
        return Piece(self.kind, self.shape.copy(), self.x, self.y)

    def rotated(self) -> "Piece":
        """Return a copy rotated clockwise about the same position."""
        return Piece(self.kind, rotate_shape(self.shape), self.x, self.y)

    def moved(self, dx: int, dy: int) -> "Piece":
        return Piece(self.kind, self.shape.copy(), self.x + dx, self.y + dy)

    def cells(self, offset_x: int = 0, offset_y: int = 0) -> list[tuple[int, int]]:
        """Return the (x, y) field coordinates of every filled cell."""
        rows, cols = np.nonzero(self.shape)
        return [
            (self.x + int(c) + offset_x, self.y + int(r) + offset_y)
            for r, c in zip(rows, cols)
        ]


@dataclass
class PieceBag:
    """7-bag randomizer.

    Each bag is a uniformly shuffled permutation of all seven types. A new
    bag is generated only once the previous one is empty, so any seven
    consecutive draws starting from an empty bag contain every type once.
    """

    rng: random.Random = field(default_factory=random.Random)
    contents: list[str] = field(default_factory=list)

    def refill(self) -> None:
        bag = list(PIECE_NAMES)
        self.rng.shuffle(bag)
        self.contents = bag

    def draw(self) -> str:
        if not self.contents:
            self.refill()
        return self.contents.pop(0)
