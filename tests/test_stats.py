import unittest

from quizengine.results.result_manager import ResultManager
from quizengine.results.schema import UserStats
from quizengine.stats.stats import (
    compute_user_stats,
    format_clock,
    format_duration,
    format_stats,
    format_summary,
    format_total_time,
    grade_for,
    level_for,
    load_user_stats,
    recommendations,
)

from quiz_fakes import make_result


class AggregationTests(unittest.TestCase):
    def test_empty_history_is_zero_state(self) -> None:
        stats = compute_user_stats([])
        self.assertEqual(stats, UserStats())
        self.assertEqual(stats.favorite_category, "None")
        self.assertEqual(stats.achievements, [])

    def test_single_result(self) -> None:
        stats = compute_user_stats([make_result("History", accuracy=75, time_spent=40)])
        self.assertEqual(stats.total_quizzes, 1)
        self.assertEqual(stats.average_score, 75)
        self.assertEqual(stats.total_time_spent, 40)
        self.assertEqual(stats.favorite_category, "History")
        self.assertEqual(stats.streak, 1)
        self.assertEqual([a.id for a in stats.achievements], ["first-quiz"])

    def test_average_rounds_half_up(self) -> None:
        history = [make_result(accuracy=67), make_result(accuracy=66)]
        self.assertEqual(compute_user_stats(history).average_score, 67)
        history = [make_result(accuracy=50), make_result(accuracy=51), make_result(accuracy=51)]
        self.assertEqual(compute_user_stats(history).average_score, 51)

    def test_favorite_category_tie_goes_to_first_seen(self) -> None:
        history = [
            make_result("Sports"),
            make_result("History"),
            make_result("History"),
            make_result("Sports"),
        ]
        self.assertEqual(compute_user_stats(history).favorite_category, "Sports")

    def test_perfectionist_needs_ninety(self) -> None:
        ids = [a.id for a in compute_user_stats([make_result(accuracy=89)]).achievements]
        self.assertNotIn("perfectionist", ids)
        ids = [a.id for a in compute_user_stats([make_result(accuracy=90)]).achievements]
        self.assertIn("perfectionist", ids)

    def test_ten_results(self) -> None:
        history = [make_result("History", accuracy=80, time_spent=60) for _ in range(8)]
        history += [make_result("Technology", accuracy=95, time_spent=30) for _ in range(2)]
        stats = compute_user_stats(history)
        self.assertEqual(stats.total_quizzes, 10)
        self.assertEqual(stats.average_score, 83)
        self.assertEqual(stats.total_time_spent, 540)
        self.assertEqual(stats.favorite_category, "History")
        self.assertEqual(stats.streak, 5)
        self.assertEqual(
            [a.id for a in stats.achievements],
            ["first-quiz", "perfectionist", "dedicated-learner"],
        )

    def test_idempotent(self) -> None:
        history = [make_result("Sports", accuracy=a) for a in (10, 40, 90)]
        self.assertEqual(compute_user_stats(history), compute_user_stats(list(history)))

    def test_appending_never_decreases_counts(self) -> None:
        history = []
        previous = compute_user_stats(history)
        for accuracy in (100, 0, 55, 90, 20, 70, 10, 30, 95, 60, 5):
            history.append(make_result(accuracy=accuracy, time_spent=accuracy))
            current = compute_user_stats(history)
            self.assertEqual(current.total_quizzes, previous.total_quizzes + 1)
            self.assertGreaterEqual(current.total_time_spent, previous.total_time_spent)
            self.assertGreaterEqual(current.streak, previous.streak)
            self.assertLessEqual(current.streak, 5)
            self.assertGreaterEqual(len(current.achievements), len(previous.achievements))
            previous = current

    def test_load_user_stats_reads_store(self) -> None:
        store = ResultManager()
        store.append("u1", make_result("History", accuracy=100))
        store.append("u2", make_result("Sports", accuracy=0))
        stats = load_user_stats(store, "u1")
        self.assertEqual(stats.total_quizzes, 1)
        self.assertEqual(stats.favorite_category, "History")
        self.assertEqual(load_user_stats(store, "nobody"), UserStats())


class PresentationTests(unittest.TestCase):
    def test_grade_bands(self) -> None:
        self.assertEqual(grade_for(95).letter, "A+")
        self.assertEqual(grade_for(90).letter, "A+")
        self.assertEqual(grade_for(85).letter, "A")
        self.assertEqual(grade_for(70).letter, "B")
        self.assertEqual(grade_for(60).letter, "C")
        self.assertEqual(grade_for(59).letter, "D")

    def test_level(self) -> None:
        self.assertEqual(level_for(UserStats()), 1)
        self.assertEqual(level_for(UserStats(total_quizzes=4)), 1)
        self.assertEqual(level_for(UserStats(total_quizzes=5)), 2)

    def test_recommendations_for_new_user(self) -> None:
        types = [r.type for r in recommendations(UserStats())]
        self.assertEqual(types, ["start", "consistency"])

    def test_recommendations_for_strong_regular(self) -> None:
        stats = UserStats(total_quizzes=12, average_score=85, favorite_category="History", streak=5)
        recs = recommendations(stats)
        self.assertEqual([r.type for r in recs], ["challenge", "explore"])
        self.assertEqual(recs[0].category, "History")

    def test_time_formats(self) -> None:
        self.assertEqual(format_clock(30), "00:30")
        self.assertEqual(format_clock(65), "01:05")
        self.assertEqual(format_duration(125), "2m 5s")
        self.assertEqual(format_total_time(59), "0m")
        self.assertEqual(format_total_time(3720), "1h 2m")

    def test_summaries(self) -> None:
        text = format_summary(make_result("History", accuracy=50, time_spent=75))
        self.assertIn("History: 2/4 correct", text)
        self.assertIn("Grade: D", text)
        self.assertIn("1m 15s", text)
        self.assertIn("unlock achievements", format_stats(UserStats()))
        text = format_stats(compute_user_stats([make_result(accuracy=100)]))
        self.assertIn("First Steps", text)
        self.assertIn("Perfectionist", text)


if __name__ == "__main__":
    unittest.main()
