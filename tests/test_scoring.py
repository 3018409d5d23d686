import unittest

from tetris_battle.game.scoring import exchange_garbage, level_for_lines, score_clear


class ScoreClearTests(unittest.TestCase):
    def test_tetris_at_level_one(self):
        result = score_clear(4, False, level=1, combo_count=0, is_back_to_back=False, total_lines=0)
        self.assertEqual(result.score_gained, 1600 * 2 + 800)
        self.assertEqual(result.garbage, 4)
        self.assertTrue(result.is_back_to_back)
        self.assertEqual(result.combo_count, 1)
        self.assertEqual(result.label, "TETRIS!")

    def test_back_to_back_tetris(self):
        result = score_clear(4, False, level=1, combo_count=0, is_back_to_back=True, total_lines=0)
        self.assertEqual(result.garbage, 5)
        self.assertEqual(result.label, "BtB TETRIS!")

    def test_tspin_triple(self):
        result = score_clear(3, True, level=1, combo_count=0, is_back_to_back=False, total_lines=0)
        self.assertEqual(result.score_gained, 400 * 2 + 3 * 400)
        self.assertEqual(result.garbage, 6)
        self.assertTrue(result.is_back_to_back)
        self.assertEqual(result.label, "T-SPIN TRIPLE!")

    def test_single_breaks_back_to_back(self):
        result = score_clear(1, False, level=1, combo_count=0, is_back_to_back=True, total_lines=4)
        self.assertEqual(result.score_gained, 50)
        self.assertEqual(result.garbage, 0)
        self.assertFalse(result.is_back_to_back)
        self.assertEqual(result.label, "")

    def test_double_with_combo(self):
        result = score_clear(2, False, level=1, combo_count=1, is_back_to_back=False, total_lines=1)
        self.assertEqual(result.combo_count, 2)
        self.assertEqual(result.score_gained, 200)
        self.assertEqual(result.garbage, 2)
        self.assertEqual(result.label, "2 REN!")

    def test_combo_appends_to_label(self):
        result = score_clear(4, False, level=2, combo_count=2, is_back_to_back=False, total_lines=12)
        self.assertEqual(result.garbage, 4 + 2)
        self.assertEqual(result.label, "TETRIS! 3 REN!")

    def test_no_lines_resets_combo_only(self):
        result = score_clear(0, False, level=3, combo_count=4, is_back_to_back=True, total_lines=25)
        self.assertEqual(result.combo_count, 0)
        self.assertEqual(result.score_gained, 0)
        self.assertTrue(result.is_back_to_back)
        self.assertEqual(result.level, 3)

    def test_level_up_every_ten_lines(self):
        result = score_clear(1, False, level=1, combo_count=0, is_back_to_back=False, total_lines=9)
        self.assertEqual(result.level, 2)
        self.assertEqual(level_for_lines(0), 1)
        self.assertEqual(level_for_lines(29), 3)


class GarbageExchangeTests(unittest.TestCase):
    def test_defence_left_over(self):
        exchange = exchange_garbage(3, 5)
        self.assertEqual((exchange.sent, exchange.pending, exchange.cancelled), (0, 2, 3))

    def test_attack_left_over(self):
        exchange = exchange_garbage(5, 2)
        self.assertEqual((exchange.sent, exchange.pending, exchange.cancelled), (3, 0, 2))

    def test_nothing_pending(self):
        exchange = exchange_garbage(4, 0)
        self.assertEqual((exchange.sent, exchange.pending, exchange.cancelled), (4, 0, 0))


if __name__ == "__main__":
    unittest.main()
