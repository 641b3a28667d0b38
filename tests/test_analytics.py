import tempfile
import unittest
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

from pydantic import ValidationError

from analytics import (
    AnalyticsConfig,
    category_summary,
    ewma_by_attempt,
    history_frame,
    load_and_prepare,
    plot_category_bars,
    plot_trend,
)
from quizengine.results.result_manager import ResultManager

from quiz_fakes import make_result


class AnalyticsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = ResultManager()
        for category, accuracy, seconds in [
            ("History", 50, 40),
            ("Sports", 100, 20),
            ("History", 75, 80),
            ("Technology", 25, 10),
        ]:
            self.store.append("u1", make_result(category, accuracy=accuracy, time_spent=seconds))
        self.cfg = AnalyticsConfig()

    def test_config_bounds(self) -> None:
        self.assertEqual(self.cfg.smoothing_span, 5)
        self.assertEqual(self.cfg.pass_mark, 60)
        with self.assertRaises(ValidationError):
            AnalyticsConfig(smoothing_span=1)
        with self.assertRaises(ValidationError):
            AnalyticsConfig(pass_mark=120)

    def test_load_and_prepare(self) -> None:
        df = load_and_prepare(self.store, "u1", self.cfg)
        self.assertEqual(df["attempt_idx"].tolist(), [0, 1, 2, 3])
        self.assertEqual(df["passed"].tolist(), [False, True, True, False])
        self.assertEqual(df["sec_per_question"].tolist(), [10.0, 5.0, 20.0, 2.5])

    def test_empty_history(self) -> None:
        df = load_and_prepare(self.store, "nobody", self.cfg)
        self.assertTrue(df.empty)
        self.assertIn("attempt_idx", df.columns)
        self.assertTrue(category_summary(history_frame([])).empty)

    def test_category_summary_keeps_first_seen_order(self) -> None:
        summary = category_summary(history_frame(self.store.read_all("u1")))
        self.assertEqual(summary["category"].tolist(), ["History", "Sports", "Technology"])
        self.assertEqual(summary["attempts"].tolist(), [2, 1, 1])
        self.assertEqual(summary["mean_accuracy"].tolist(), [62.5, 100.0, 25.0])

    def test_ewma_smoothing(self) -> None:
        df = ewma_by_attempt(load_and_prepare(self.store, "u1", self.cfg), value_col="accuracy", span=3)
        smooth = df["accuracy_smooth"].tolist()
        self.assertAlmostEqual(smooth[0], 50.0)
        self.assertTrue(50.0 < smooth[1] < 100.0)
        grouped = ewma_by_attempt(df, value_col="accuracy", span=3, group_cols=["category"])
        self.assertAlmostEqual(grouped["accuracy_smooth"].iloc[1], 100.0)

    def test_plots_write_files(self) -> None:
        df = ewma_by_attempt(load_and_prepare(self.store, "u1", self.cfg), value_col="accuracy", span=3)
        with tempfile.TemporaryDirectory() as tmp:
            trend = Path(tmp) / "trend.png"
            bars = Path(tmp) / "bars.png"
            plot_trend(df, pass_mark=60, save_path=trend)
            plot_category_bars(df, save_path=bars)
            self.assertTrue(trend.exists())
            self.assertTrue(bars.exists())
            missing = Path(tmp) / "none.png"
            plot_trend(df, category="Geography", save_path=missing)
            self.assertFalse(missing.exists())


if __name__ == "__main__":
    unittest.main()
