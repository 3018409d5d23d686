import contextlib
import io
import pathlib
import tempfile
import unittest

import yaml

from main import load_config, main, parse_args
from tetris_battle.evaluate import evaluate, run_episode
from tetris_battle.game.tetris import TetrisGame


class ConfigTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = pathlib.Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_config(self):
        with self.assertRaises(FileNotFoundError):
            load_config(self.dir / "missing.yaml")

    def test_load_config(self):
        path = self.dir / "settings.yaml"
        path.write_text(yaml.safe_dump({"cell_size": 30, "ai_weights": {"holes": -4.0}}))
        config = load_config(path)
        self.assertEqual(config["cell_size"], 30)
        self.assertEqual(config["ai_weights"]["holes"], -4.0)

    def test_empty_config_is_a_dict(self):
        path = self.dir / "empty.yaml"
        path.write_text("")
        self.assertEqual(load_config(path), {})

    def test_shipped_config_loads(self):
        config = load_config(pathlib.Path(__file__).resolve().parents[1] / "config" / "settings.yaml")
        self.assertEqual(config["battle_ai_speeds"]["insane"], 50)


class ArgumentTests(unittest.TestCase):
    def test_defaults(self):
        args = parse_args([])
        self.assertEqual(args.mode, "play")
        self.assertEqual(args.game_mode, "normal")
        self.assertEqual(args.difficulty, "normal")
        self.assertFalse(args.ai_vs_ai)

    def test_rejects_unknown_mode(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                parse_args(["--mode", "train"])

    def test_records_mode_prints_table(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        records = pathlib.Path(tmp.name) / "records.json"
        config = pathlib.Path(tmp.name) / "settings.yaml"
        config.write_text(yaml.safe_dump({"records_path": str(records)}))

        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            main(["--mode", "records", "--config", str(config)])
        self.assertIn("No records yet", out.getvalue())


class EvaluateTests(unittest.TestCase):
    def test_run_episode_stops_at_piece_limit(self):
        game = TetrisGame(ai_enabled=True, seed=0)
        record = run_episode(game, max_pieces=15)
        self.assertLessEqual(record["pieces"], 15)
        self.assertEqual(len(record["col_heights"]), 10)

    def test_evaluate_collects_each_episode(self):
        data = evaluate(num_episodes=2, max_pieces=10, seed=1, verbose=False)
        self.assertEqual([d["episode"] for d in data], [0, 1])

    def test_practice_is_rejected(self):
        with self.assertRaises(ValueError):
            evaluate(num_episodes=1, mode="practice", verbose=False)


if __name__ == "__main__":
    unittest.main()
