"""
Pygame renderer for one or more game boards.

Each board gets a panel: the visible 20 rows on the left, and a sidebar
with the next piece preview, score / level / lines, the clock, pending
garbage and the current action label. The renderer only reads
TetrisGame.get_state() snapshots.
"""

from __future__ import annotations

from typing import Any, Sequence

try:
    import pygame
except ImportError:
    pygame = None  # type: ignore[assignment]

from tetris_battle.game.board import BUFFER_HEIGHT, VISIBLE_HEIGHT
from tetris_battle.game.pieces import CELL_COLORS, PIECES_BY_NAME
from tetris_battle.game.tetris import LINE_CLEAR_FRAMES, GameState, TetrisGame
from tetris_battle.records import format_time


# ── Color constants ───────────────────────────────────────────────────────
BACKGROUND_COLOR = (30, 41, 59)
GRID_LINE_COLOR = (60, 60, 60)
BORDER_COLOR = (200, 200, 200)
TEXT_COLOR = (255, 255, 255)
ACTION_COLOR = (255, 220, 80)
GARBAGE_WARNING_COLOR = (255, 80, 80)
FLASH_COLOR = (255, 255, 255)
GHOST_ALPHA = 64
SIDEBAR_BG_COLOR = (20, 20, 20)
EMPTY_CELL_COLOR = (40, 40, 40)


class TetrisRenderer:
    """Pygame-based renderer for one or several TetrisGame instances.

    Attributes:
        games: The games to draw, left to right.
        cell_size: Pixel size of each grid cell.
        captions: Optional label drawn above each panel's stats.
        board_pixel_width: Pixel width of one board.
        board_pixel_height: Pixel height of one board.
        panel_width: Board plus sidebar width.
        screen: Pygame display surface (created on first render).
    """

    SIDEBAR_WIDTH_CELLS: int = 7

    def __init__(
        self,
        games: Sequence[TetrisGame],
        cell_size: int = 25,
        captions: Sequence[str] | None = None,
        title: str = "Tetris Battle",
    ) -> None:
        """Initialize the renderer.

        Does NOT create the Pygame window yet; that happens on the first
        call to render().
        """
        if pygame is None:
            raise ImportError("pygame is required for rendering. Install it: pip install pygame")

        self.games = list(games)
        self.cell_size = cell_size
        self.captions = list(captions) if captions else [""] * len(self.games)
        self.title = title

        width = self.games[0].board.width
        self.board_pixel_width = cell_size * width
        self.board_pixel_height = cell_size * VISIBLE_HEIGHT
        self.sidebar_width = cell_size * self.SIDEBAR_WIDTH_CELLS
        self.panel_width = self.board_pixel_width + self.sidebar_width
        self.window_width = self.panel_width * len(self.games)
        self.window_height = self.board_pixel_height

        self.screen: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._font: pygame.font.Font | None = None
        self._initialized: bool = False
        self.banner: str = ""

    def render(self, fps: int = 60) -> int:
        """Draw every panel and flip the display.

        Returns:
            Milliseconds since the previous frame (from the display clock).
        """
        if not self._initialized:
            self._init_pygame()

        self.screen.fill(BACKGROUND_COLOR)
        for index, game in enumerate(self.games):
            origin_x = index * self.panel_width
            state = game.get_state()
            self._draw_board(state, origin_x)
            self._draw_piece(state["ghost_piece"], origin_x, ghost=True)
            self._draw_piece(state["current_piece"], origin_x)
            self._draw_sidebar(state, origin_x, self.captions[index])
            self._draw_overlay(state, origin_x)
            pygame.draw.rect(
                self.screen,
                BORDER_COLOR,
                (origin_x, 0, self.board_pixel_width, self.board_pixel_height),
                2,
            )

        if self.banner:
            self._draw_centered(self.banner, self.window_width // 2, self.window_height // 2,
                                self._large_font, ACTION_COLOR)

        pygame.display.flip()
        return self._clock.tick(fps)

    def _init_pygame(self) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode((self.window_width, self.window_height))
        pygame.display.set_caption(self.title)
        self._clock = pygame.time.Clock()
        self._font = pygame.font.SysFont("monospace", 20)
        self._small_font = pygame.font.SysFont("monospace", 14)
        self._large_font = pygame.font.SysFont("monospace", 36, bold=True)
        self._initialized = True

    def _draw_cell(self, x: int, y: int, color: tuple[int, int, int]) -> None:
        pygame.draw.rect(self.screen, color, (x, y, self.cell_size, self.cell_size))
        darker = tuple(max(0, c - 40) for c in color)
        pygame.draw.rect(self.screen, darker, (x, y, self.cell_size, self.cell_size), 1)

    def _draw_board(self, state: dict[str, Any], origin_x: int) -> None:
        """Draw the visible rows; rows being cleared flash for half the delay."""
        grid = state["board_grid"]
        flashing = set(state["clearing_rows"]) if state["line_clear_frame"] < LINE_CLEAR_FRAMES // 2 else set()

        for row in range(VISIBLE_HEIGHT):
            board_row = row + BUFFER_HEIGHT
            for col in range(grid.shape[1]):
                x = origin_x + col * self.cell_size
                y = row * self.cell_size
                cell_value = int(grid[board_row, col])
                if cell_value == 0:
                    pygame.draw.rect(self.screen, EMPTY_CELL_COLOR, (x, y, self.cell_size, self.cell_size))
                elif board_row in flashing:
                    pygame.draw.rect(self.screen, FLASH_COLOR, (x, y, self.cell_size, self.cell_size))
                else:
                    self._draw_cell(x, y, CELL_COLORS.get(cell_value, (128, 128, 128)))
                pygame.draw.rect(self.screen, GRID_LINE_COLOR, (x, y, self.cell_size, self.cell_size), 1)

    def _draw_piece(self, piece, origin_x: int, ghost: bool = False) -> None:
        """Draw the live piece, or its landing preview with transparency."""
        if piece is None:
            return

        ghost_surface = None
        if ghost:
            ghost_surface = pygame.Surface((self.cell_size, self.cell_size), pygame.SRCALPHA)
            ghost_surface.fill((*piece.color, GHOST_ALPHA))

        for col, row in piece.cells():
            if row < 0 or not 0 <= col < self.games[0].board.width:
                continue
            x = origin_x + col * self.cell_size
            y = row * self.cell_size
            if ghost_surface is not None:
                self.screen.blit(ghost_surface, (x, y))
                pygame.draw.rect(self.screen, piece.color, (x, y, self.cell_size, self.cell_size), 1)
            else:
                self._draw_cell(x, y, piece.color)

    def _draw_sidebar(self, state: dict[str, Any], origin_x: int, caption: str) -> None:
        sidebar_x = origin_x + self.board_pixel_width
        pygame.draw.rect(
            self.screen,
            SIDEBAR_BG_COLOR,
            (sidebar_x, 0, self.sidebar_width, self.window_height),
        )
        pygame.draw.line(
            self.screen,
            BORDER_COLOR,
            (sidebar_x, 0),
            (sidebar_x, self.window_height),
            2,
        )

        text_x = sidebar_x + 15
        self._draw_piece_preview(state["next_piece_type"], text_x, 20, "NEXT")

        text_y = 160
        if caption:
            self._draw_text(caption, text_x, text_y)
            text_y += 30
        for label, value in [("SCORE", f"{state['score']:,}"),
                             ("LEVEL", str(state["level"])),
                             ("LINES", str(state["lines_cleared"])),
                             ("HEIGHT", str(state["stack_height"])),
                             ("TIME", format_time(state["elapsed_ms"]))]:
            self._draw_text(label, text_x, text_y)
            self._draw_text(value, text_x, text_y + 22)
            text_y += 50

        if state["pending_garbage"]:
            self._draw_text(f"+{state['pending_garbage']} INCOMING", text_x, text_y,
                            GARBAGE_WARNING_COLOR, small=True)
            text_y += 25
        if state["action_text"]:
            self._draw_text(state["action_text"], text_x, text_y, ACTION_COLOR, small=True)

    def _draw_piece_preview(self, kind: str, x_offset: int, y_offset: int, label: str) -> None:
        preview_cell = self.cell_size * 2 // 3
        box_size = preview_cell * 5

        self._draw_text(label, x_offset, y_offset)
        box_y = y_offset + 25
        pygame.draw.rect(self.screen, EMPTY_CELL_COLOR, (x_offset, box_y, box_size, box_size))
        pygame.draw.rect(self.screen, BORDER_COLOR, (x_offset, box_y, box_size, box_size), 1)

        piece = PIECES_BY_NAME.get(kind)
        if piece is None:
            return

        shape = piece["shape"]
        rows, cols = shape.shape
        offset_x = x_offset + (box_size - cols * preview_cell) // 2
        offset_y = box_y + (box_size - rows * preview_cell) // 2
        for r in range(rows):
            for c in range(cols):
                if shape[r, c] != 0:
                    pygame.draw.rect(
                        self.screen, piece["color"],
                        (offset_x + c * preview_cell, offset_y + r * preview_cell, preview_cell, preview_cell),
                    )

    def _draw_overlay(self, state: dict[str, Any], origin_x: int) -> None:
        if state["state"] is GameState.PAUSED:
            text = "PAUSED"
        elif state["state"] is GameState.GAME_OVER:
            text = "GAME OVER"
        else:
            return
        overlay = pygame.Surface((self.board_pixel_width, self.board_pixel_height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 150))
        self.screen.blit(overlay, (origin_x, 0))
        self._draw_centered(text, origin_x + self.board_pixel_width // 2,
                            self.board_pixel_height // 2 - 40, self._large_font, TEXT_COLOR)

    def _draw_centered(self, text: str, cx: int, cy: int, font, color) -> None:
        surface = font.render(text, True, color)
        self.screen.blit(surface, (cx - surface.get_width() // 2, cy))

    def _draw_text(
        self,
        text: str,
        x: int,
        y: int,
        color: tuple[int, int, int] = TEXT_COLOR,
        small: bool = False,
    ) -> None:
        font = self._small_font if small else self._font
        self.screen.blit(font.render(text, True, color), (x, y))

    def close(self) -> None:
        """Shut down Pygame and close the window."""
        if self._initialized:
            pygame.quit()
            self._initialized = False
