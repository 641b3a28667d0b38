import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pandas as pd
from pydantic import ValidationError

from quizengine.errors import StoreError
from quizengine.results.result_manager import ResultManager
from quizengine.results.schema import QuizResult
from storage import DATA_FILE, ParquetHistoryStore, QuizResultRow, export_ndjson, init_store, load_all, validate_records


def _result(category: str, accuracy: int, minutes: int, difficulty="medium") -> QuizResult:
    return QuizResult(
        score=accuracy // 25,
        total_questions=4,
        correct_answers=accuracy // 25,
        time_spent=30 + minutes,
        accuracy=accuracy,
        category=category,
        difficulty=difficulty,
        completed_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc) + timedelta(minutes=minutes),
    )


class ResultManagerTests(unittest.TestCase):
    def test_per_user_insertion_order(self) -> None:
        store = ResultManager()
        a, b, c = _result("History", 50, 1), _result("Sports", 75, 2), _result("History", 100, 3)
        store.append("u1", a)
        store.append("u2", b)
        store.append("u1", c)
        self.assertEqual(store.read_all("u1"), [a, c])
        self.assertEqual(store.read_all("u2"), [b])
        self.assertEqual(store.read_all("u3"), [])
        store.read_all("u1").clear()
        self.assertEqual(len(store.read_all("u1")), 2)


class ParquetHistoryStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self._tmp.name) / "data"
        self.store = ParquetHistoryStore(self.data_dir)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_empty_store_reads_nothing(self) -> None:
        self.assertEqual(self.store.read_all("u1"), [])

    def test_round_trip_preserves_order_and_values(self) -> None:
        results = [
            _result("History", 50, 1),
            _result("Space & Stars", 100, 2, difficulty=None),
            _result("History", 0, 3, difficulty="hard"),
        ]
        for r in results:
            self.store.append("u1", r)
        self.store.append("u2", _result("Sports", 75, 4))

        self.assertEqual(self.store.read_all("u1"), results)
        self.assertEqual([r.category for r in self.store.read_all("u2")], ["Sports"])
        self.assertTrue((self.data_dir / DATA_FILE).exists())

        # A second store over the same directory sees the same history
        again = ParquetHistoryStore(self.data_dir)
        self.assertEqual([r.accuracy for r in again.read_all("u1")], [50, 100, 0])
        self.assertEqual(len(again.frame("u1")), 3)

    def test_unreadable_file_raises_store_error(self) -> None:
        self.data_dir.mkdir(parents=True)
        (self.data_dir / DATA_FILE).write_text("not parquet", encoding="utf-8")
        with self.assertRaises(StoreError):
            self.store.read_all("u1")
        with self.assertRaises(StoreError):
            self.store.append("u1", _result("History", 50, 1))


class StoreHelperTests(unittest.TestCase):
    def test_init_store_creates_empty_table(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = init_store(Path(tmp) / "d")
            self.assertTrue(path.exists())
            df = load_all(Path(tmp) / "d")
            self.assertTrue(df.empty)
            self.assertIn("accuracy", df.columns)

    def test_validate_records_enforces_row_rules(self) -> None:
        row = {
            "user_id": "u1",
            "completed_at": datetime(2024, 1, 1, 9, 30),
            "category": "History",
            "difficulty": "easy",
            "score": 2,
            "total_questions": 4,
            "correct_answers": 2,
            "time_spent": 50,
            "accuracy": 50,
        }
        df = validate_records([row])
        self.assertEqual(len(df), 1)
        self.assertEqual(str(df["completed_at"].dt.tz), "UTC")
        self.assertEqual(df["result_id"].str.len().iloc[0], 32)

        with self.assertRaises(ValidationError):
            validate_records([dict(row, correct_answers=5)])
        with self.assertRaises(ValidationError):
            validate_records([dict(row, accuracy=101)])
        with self.assertRaises(ValidationError):
            validate_records([dict(row, difficulty="legendary")])

    def test_row_normalises_timezone(self) -> None:
        aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        row = QuizResultRow(
            user_id="u1", completed_at=aware, category="History", score=1,
            total_questions=1, correct_answers=1, time_spent=3, accuracy=100,
        )
        self.assertEqual(row.completed_at, datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc))

    def test_export_ndjson(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = ParquetHistoryStore(Path(tmp))
            store.append("u1", _result("History", 50, 1))
            out = Path(tmp) / "out" / "history.ndjson"
            export_ndjson(load_all(Path(tmp)), out)
            lines = out.read_text(encoding="utf-8").strip().splitlines()
            self.assertEqual(len(lines), 1)
            self.assertEqual(pd.read_json(out, lines=True)["category"].iloc[0], "History")


if __name__ == "__main__":
    unittest.main()
