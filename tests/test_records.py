import json
import pathlib
import tempfile
import unittest

from tetris_battle.records import RecordStore, format_metric, format_time, record_key


def normal(score, is_ai=False):
    return {"mode": "normal", "is_ai": is_ai, "date": "2026-01-01T00:00:00+00:00", "score": score}


class RecordStoreTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = pathlib.Path(self._tmp.name) / "nested" / "records.json"
        self.store = RecordStore(self.path)

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_file_is_empty(self):
        self.assertEqual(self.store.records, {})
        self.assertIsNone(self.store.best("normal"))

    def test_scores_rank_descending(self):
        self.store.add(normal(100))
        self.store.add(normal(300))
        rank = self.store.add(normal(200))
        self.assertEqual(rank, 2)
        self.assertEqual([r["score"] for r in self.store.top("normal")], [300, 200, 100])

    def test_times_rank_ascending(self):
        self.store.add({"mode": "time40", "is_ai": False, "date": "", "time": 90_000})
        self.store.add({"mode": "time40", "is_ai": False, "date": "", "time": 75_500})
        self.assertEqual(self.store.best("time40")["time"], 75_500)

    def test_keeps_top_ten(self):
        for score in range(12):
            self.store.add(normal(score * 10))
        top = self.store.top("normal")
        self.assertEqual(len(top), 10)
        self.assertEqual(top[-1]["score"], 20)
        self.assertIsNone(self.store.add(normal(5)))

    def test_ai_records_are_separate(self):
        self.store.add(normal(500, is_ai=True))
        self.assertEqual(self.store.top("normal"), [])
        self.assertEqual(len(self.store.top("normal", is_ai=True)), 1)
        saved = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertIn("normal_ai", saved)

    def test_records_persist(self):
        self.store.add({"mode": "sprint1m", "is_ai": False, "date": "", "lines": 42})
        reloaded = RecordStore(self.path)
        self.assertEqual(reloaded.best("sprint1m")["lines"], 42)

    def test_unwritable_path_keeps_records_in_memory(self):
        blocker = pathlib.Path(self._tmp.name) / "blocker"
        blocker.write_text("")
        store = RecordStore(blocker / "records.json")
        with self.assertLogs("tetris_battle.records", level="WARNING"):
            rank = store.add(normal(500))
        self.assertEqual(rank, 1)
        self.assertEqual(store.best("normal")["score"], 500)
        with self.assertLogs("tetris_battle.records", level="WARNING"):
            self.assertFalse(store.save())


class MalformedFileTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = pathlib.Path(self._tmp.name) / "records.json"

    def tearDown(self):
        self._tmp.cleanup()

    def test_invalid_json_is_treated_as_empty(self):
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertLogs("tetris_battle.records", level="WARNING"):
            store = RecordStore(self.path)
        self.assertEqual(store.records, {})

    def test_entries_without_metric_are_skipped(self):
        self.path.write_text(json.dumps({
            "normal": [{"mode": "normal"}, normal(70), "junk"],
        }), encoding="utf-8")
        with self.assertLogs("tetris_battle.records", level="WARNING"):
            store = RecordStore(self.path)
        self.assertEqual([r["score"] for r in store.top("normal")], [70])


class FormattingTests(unittest.TestCase):
    def test_format_time(self):
        self.assertEqual(format_time(0), "00:00.000")
        self.assertEqual(format_time(61_234), "01:01.234")

    def test_format_metric(self):
        self.assertEqual(format_metric(normal(12345)), "12,345 pts")
        self.assertEqual(format_metric({"mode": "sprint1m", "lines": 8}), "8 lines")
        self.assertEqual(format_metric({"mode": "time10", "time": 5_000}), "00:05.000")
        self.assertEqual(format_metric({"mode": "practice"}), "-")

    def test_record_key(self):
        self.assertEqual(record_key("time20", False), "time20")
        self.assertEqual(record_key("time20", True), "time20_ai")


if __name__ == "__main__":
    unittest.main()
