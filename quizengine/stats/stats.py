from __future__ import annotations

"""User statistics: aggregation over result history and formatting."""

from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple

from ..results.result_manager import HistoryStore
from ..results.schema import Achievement, QuizResult, UserStats, accuracy_percent

STREAK_CAP = 5

# Evaluated in order; the unlocked list keeps this order.
ACHIEVEMENT_RULES: List[Tuple[Achievement, Callable[[Sequence[QuizResult]], bool]]] = [
    (
        Achievement("first-quiz", "First Steps", "Complete your first quiz", "🎯"),
        lambda history: len(history) >= 1,
    ),
    (
        Achievement("perfectionist", "Perfectionist", "Score 90% or higher", "🏆"),
        lambda history: any(r.accuracy >= 90 for r in history),
    ),
    (
        Achievement("dedicated-learner", "Dedicated Learner", "Complete 10 quizzes", "📚"),
        lambda history: len(history) >= 10,
    ),
]


def compute_user_stats(history: Sequence[QuizResult]) -> UserStats:
    """Fold the complete history into summary metrics.

    Pure and deterministic: the same history always yields an equal
    `UserStats`. An empty history yields the zero state.
    """
    if not history:
        return UserStats()
    total = len(history)
    accuracy_sum = sum(r.accuracy for r in history)
    return UserStats(
        total_quizzes=total,
        average_score=accuracy_percent(accuracy_sum, total * 100),
        total_time_spent=sum(r.time_spent for r in history),
        favorite_category=favorite_category(history),
        # Engagement placeholder, not a calendar streak
        streak=min(total, STREAK_CAP),
        achievements=unlocked_achievements(history),
    )


def favorite_category(history: Sequence[QuizResult]) -> str:
    """Most frequent category; ties go to the category seen first."""
    counts: Dict[str, int] = {}
    for r in history:
        counts[r.category] = counts.get(r.category, 0) + 1
    best, best_count = "None", 0
    for category, count in counts.items():
        if count > best_count:
            best, best_count = category, count
    return best


def unlocked_achievements(history: Sequence[QuizResult]) -> List[Achievement]:
    return [achievement for achievement, rule in ACHIEVEMENT_RULES if rule(history)]


def load_user_stats(store: HistoryStore, user_id: str) -> UserStats:
    return compute_user_stats(store.read_all(user_id))


@dataclass(frozen=True)
class Grade:
    letter: str
    message: str


def grade_for(accuracy: int) -> Grade:
    if accuracy >= 90:
        return Grade("A+", "Outstanding!")
    if accuracy >= 80:
        return Grade("A", "Excellent!")
    if accuracy >= 70:
        return Grade("B", "Good Job!")
    if accuracy >= 60:
        return Grade("C", "Not Bad!")
    return Grade("D", "Keep Practicing!")


def level_for(stats: UserStats) -> int:
    return stats.total_quizzes // 5 + 1


@dataclass(frozen=True)
class Recommendation:
    type: str
    title: str
    description: str
    action: str
    category: str


def recommendations(stats: UserStats) -> List[Recommendation]:
    """Rule-based action items derived from the user's stats."""
    out: List[Recommendation] = []
    if stats.total_quizzes == 0:
        out.append(Recommendation(
            "start", "Take your first quiz!",
            "Begin your learning journey by taking a quiz in your favorite subject.",
            "Start Quiz", "Science & Nature",
        ))
    if stats.average_score < 70 and stats.total_quizzes > 0:
        out.append(Recommendation(
            "improve", "Focus on fundamentals",
            "Your scores suggest reviewing basic concepts before attempting harder questions.",
            "Practice Easy", stats.favorite_category,
        ))
    if stats.average_score >= 80:
        out.append(Recommendation(
            "challenge", "Level up your challenge!",
            "You're doing great! Try harder difficulty levels to push your limits.",
            "Try Hard Mode", stats.favorite_category,
        ))
    if stats.streak < 3:
        out.append(Recommendation(
            "consistency", "Build a learning streak",
            "Regular practice helps improve retention and builds lasting knowledge.",
            "Daily Challenge", "Technology",
        ))
    if stats.total_quizzes >= 10:
        out.append(Recommendation(
            "explore", "Explore new categories",
            "Branch out and test your knowledge in different subject areas.",
            "Explore Topics", "History",
        ))
    return out


def format_clock(seconds: int) -> str:
    """Countdown display, e.g. 00:30."""
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"


def format_duration(seconds: int) -> str:
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins}m {secs}s"


def format_total_time(seconds: int) -> str:
    hours, rest = divmod(max(0, int(seconds)), 3600)
    minutes = rest // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_summary(result: QuizResult) -> str:
    """Return a human-readable summary of one quiz result."""
    grade = grade_for(result.accuracy)
    lines = [
        f"{result.category}: {result.correct_answers}/{result.total_questions} correct",
        f"Accuracy: {result.accuracy}%  Grade: {grade.letter} ({grade.message})",
        f"Time: {format_duration(result.time_spent)}",
    ]
    return "\n".join(lines)


def format_stats(stats: UserStats) -> str:
    lines = [
        f"Level {level_for(stats)}  |  {stats.streak} day streak",
        f"Quizzes completed: {stats.total_quizzes}",
        f"Average score: {stats.average_score}%",
        f"Time spent: {format_total_time(stats.total_time_spent)}",
        f"Favorite category: {stats.favorite_category}",
    ]
    if stats.achievements:
        lines.append("Achievements:")
        for a in stats.achievements:
            lines.append(f"  {a.icon} {a.name} - {a.description}")
    else:
        lines.append("Complete quizzes to unlock achievements!")
    return "\n".join(lines)
