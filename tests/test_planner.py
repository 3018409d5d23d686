import unittest

from tetris_battle.ai.planner import HeuristicPlanner, Placement, Weights, rotation_count
from tetris_battle.game.actions import Action
from tetris_battle.game.board import Board
from tetris_battle.game.pieces import GARBAGE_ID, PIECE_NAMES, Piece


class PlannerTests(unittest.TestCase):
    def setUp(self):
        self.planner = HeuristicPlanner()
        self.board = Board()

    def test_queue_shape(self):
        for name in PIECE_NAMES:
            queue = self.planner.plan(self.board, Piece.spawn(name))
            self.assertEqual(queue[-1], Action.HARD_DROP, name)
            self.assertEqual(queue.count(Action.HARD_DROP), 1, name)
            rotations = queue.count(Action.ROTATE)
            self.assertEqual(queue[:rotations], [Action.ROTATE] * rotations)
            self.assertLess(rotations, rotation_count(name))
            self.assertFalse(Action.LEFT in queue and Action.RIGHT in queue)

    def test_search_is_deterministic(self):
        self.board.grid[21, :6] = GARBAGE_ID
        self.board.grid[20, 2] = GARBAGE_ID
        piece = Piece.spawn("T")
        first = HeuristicPlanner().plan(self.board, piece)
        second = HeuristicPlanner().plan(self.board, piece)
        self.assertEqual(first, second)

    def test_search_does_not_mutate_inputs(self):
        self.board.grid[21, :6] = GARBAGE_ID
        before = self.board.get_grid()
        piece = Piece.spawn("L")
        self.planner.find_best_move(self.board, piece)
        self.assertTrue((self.board.grid == before).all())
        self.assertEqual((piece.x, piece.y), (3, -1))
        self.assertEqual(piece.shape.shape, (2, 3))

    def test_takes_the_line_clear(self):
        self.board.grid[21, :] = GARBAGE_ID
        self.board.grid[21, :4] = 0
        piece = Piece.spawn("I")
        best = self.planner.find_best_move(self.board, piece)
        self.assertEqual(best, Placement(rotation=0, x=0, y=19, value=3.0, lines_cleared=1))
        self.assertEqual(
            self.planner.generate_move_queue(best, piece),
            [Action.LEFT, Action.LEFT, Action.LEFT, Action.HARD_DROP],
        )

    def test_no_piece_no_moves(self):
        self.assertEqual(self.planner.plan(self.board, None), [])
        self.assertIsNone(self.planner.find_best_move(self.board, None))

    def test_falls_back_to_hard_drop(self):
        self.board.grid[:, :] = GARBAGE_ID
        self.assertEqual(self.planner.plan(self.board, Piece.spawn("T")), [Action.HARD_DROP])

    def test_evaluate_board(self):
        self.assertEqual(self.planner.evaluate_board(Board()), 0.0)
        self.board.grid[21, 0] = GARBAGE_ID
        self.board.grid[19, 1] = GARBAGE_ID
        # height 4, holes 2, bumpiness 5, one edge well of depth 2
        expected = -0.5 * 4 - 3.5 * 2 - 0.2 * 5 + 0.1 * 2
        self.assertAlmostEqual(self.planner.evaluate_board(self.board), expected)

    def test_weights_from_config(self):
        weights = Weights.from_dict({"holes": -10, "unknown": 1})
        self.assertEqual(weights.holes, -10.0)
        self.assertEqual(weights.height, Weights().height)
        self.assertEqual(Weights.from_dict(None), Weights())


if __name__ == "__main__":
    unittest.main()
