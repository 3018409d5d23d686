import unittest

import numpy as np

from tetris_battle.game.board import BUFFER_HEIGHT, TOTAL_HEIGHT, Board
from tetris_battle.game.pieces import GARBAGE_ID, PIECES_BY_NAME, Piece, rotate_shape


def vertical_i(x, y):
    return Piece("I", rotate_shape(PIECES_BY_NAME["I"]["shape"]), x, y)


class CollisionTests(unittest.TestCase):
    def setUp(self):
        self.board = Board()

    def test_missing_piece_collides(self):
        self.assertTrue(self.board.collides(None))

    def test_side_walls(self):
        self.assertFalse(self.board.collides(vertical_i(0, 5)))
        self.assertTrue(self.board.collides(vertical_i(-1, 5)))
        self.assertFalse(self.board.collides(Piece.spawn("I").moved(3, 0)))
        self.assertTrue(self.board.collides(Piece.spawn("I").moved(4, 0)))

    def test_offset_is_applied(self):
        piece = vertical_i(0, 5)
        self.assertTrue(self.board.collides(piece, -1, 0))
        self.assertFalse(self.board.collides(piece, 1, 0))

    def test_floor(self):
        self.assertFalse(self.board.collides(Piece("O", PIECES_BY_NAME["O"]["shape"], 0, 18)))
        self.assertTrue(self.board.collides(Piece("O", PIECES_BY_NAME["O"]["shape"], 0, 19)))

    def test_cells_above_the_board_never_collide(self):
        self.assertFalse(self.board.collides(Piece.spawn("T").moved(0, -2)))

    def test_filled_cell_collides(self):
        self.board.grid[10, 4] = GARBAGE_ID
        piece = Piece.spawn("T")
        self.assertTrue(self.board.collides(piece, 0, 9))
        self.assertFalse(self.board.collides(piece, 0, 7))

    def test_drop_distance(self):
        piece = Piece.spawn("O")
        self.assertEqual(self.board.drop_distance(piece), 19)
        self.board.grid[TOTAL_HEIGHT - 1, 3] = GARBAGE_ID
        self.assertEqual(self.board.drop_distance(piece), 18)

    def test_out_of_bounds_counts_as_filled(self):
        self.assertTrue(self.board.is_filled(-1, 5))
        self.assertTrue(self.board.is_filled(10, 5))
        self.assertTrue(self.board.is_filled(0, 20))
        self.assertFalse(self.board.is_filled(0, 19))


class MutationTests(unittest.TestCase):
    def setUp(self):
        self.board = Board()

    def test_place_piece_reports_buffer_lock(self):
        self.assertTrue(self.board.place_piece(Piece.spawn("T")))
        board = Board()
        self.assertFalse(board.place_piece(Piece("O", PIECES_BY_NAME["O"]["shape"], 0, 18)))
        self.assertEqual(board.grid[21, 0], PIECES_BY_NAME["O"]["id"])

    def test_full_rows_exclude_buffer_by_default(self):
        self.board.grid[0, :] = GARBAGE_ID
        self.board.grid[21, :] = GARBAGE_ID
        self.assertEqual(self.board.full_rows(), [21])
        self.assertEqual(self.board.full_rows(include_buffer=True), [0, 21])

    def test_clear_lines_shifts_rows_down(self):
        self.board.grid[21, :] = GARBAGE_ID
        self.board.grid[20, 0] = 3
        self.assertEqual(self.board.clear_lines(), 1)
        self.assertEqual(self.board.grid[21, 0], 3)
        self.assertFalse(self.board.grid[20].any())

    def test_add_garbage(self):
        self.board.grid[21, 5] = 2
        self.board.add_garbage(2, hole=3)
        self.assertEqual(self.board.grid[19, 5], 2)
        for row in (20, 21):
            self.assertEqual(self.board.grid[row, 3], 0)
            self.assertEqual(int(np.count_nonzero(self.board.grid[row] == GARBAGE_ID)), 9)

    def test_copy_is_independent(self):
        clone = self.board.copy()
        clone.grid[21, 0] = 1
        self.assertEqual(self.board.grid[21, 0], 0)


class MetricTests(unittest.TestCase):
    def setUp(self):
        self.board = Board()
        self.board.grid[21, 0] = 1
        self.board.grid[19, 1] = 1

    def test_heights_and_holes(self):
        heights = self.board.get_column_heights()
        self.assertEqual(list(heights[:3]), [1, 3, 0])
        self.assertEqual(self.board.get_aggregate_height(), 4)
        self.assertEqual(self.board.get_holes(), 2)
        self.assertEqual(self.board.stack_height(), 3)

    def test_bumpiness(self):
        self.assertEqual(self.board.get_bumpiness(), 5)

    def test_edge_well(self):
        self.assertEqual(self.board.get_well_info(), (2, 1))

    def test_empty_board(self):
        board = Board()
        self.assertEqual(board.get_aggregate_height(), 0)
        self.assertEqual(board.get_holes(), 0)
        self.assertEqual(board.get_well_info(), (0, 0))
        self.assertEqual(board.stack_height(), 0)

    def test_buffer_rows_count_toward_height(self):
        board = Board()
        board.grid[BUFFER_HEIGHT - 1, 4] = 1
        self.assertEqual(board.get_column_heights()[4], TOTAL_HEIGHT - 1)


if __name__ == "__main__":
    unittest.main()
