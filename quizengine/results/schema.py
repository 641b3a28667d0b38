from __future__ import annotations

"""Result schema dataclasses: questions, quiz results and derived user stats."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Question:
    id: str
    prompt: str
    options: Tuple[str, ...]
    correct_index: int
    explanation: Optional[str] = None

    def __post_init__(self) -> None:
        # Normalise lists handed in by loaders so the record stays immutable
        object.__setattr__(self, "options", tuple(str(o) for o in self.options))
        if not str(self.prompt).strip():
            raise ValueError("question prompt must not be empty")
        if len(self.options) < 2:
            raise ValueError("a question needs at least two options")
        if isinstance(self.correct_index, bool) or not isinstance(self.correct_index, int):
            raise ValueError("correct_index must be an integer")
        if not (0 <= self.correct_index < len(self.options)):
            raise ValueError(f"correct_index {self.correct_index} out of range for {len(self.options)} options")

    def is_correct(self, selected: Optional[int]) -> bool:
        return selected is not None and selected == self.correct_index

    @classmethod
    def from_json(cls, data: Dict[str, Any], *, default_id: str = "") -> "Question":
        """Build a question from the loose shapes used by fallback tables and providers.

        Accepts `question`/`prompt`, `options`/`choices` and
        `correctAnswer`/`correct_index`. Raises ValueError on anything that
        does not satisfy the question invariants.
        """
        prompt = data.get("question", data.get("prompt", ""))
        options = data.get("options", data.get("choices"))
        if not isinstance(options, (list, tuple)):
            raise ValueError("options must be a list")
        correct = data.get("correctAnswer", data.get("correct_index"))
        try:
            correct_index = int(correct)
        except (TypeError, ValueError):
            raise ValueError(f"invalid correct answer index: {correct!r}") from None
        explanation = data.get("explanation")
        return cls(
            id=str(data.get("id") or default_id),
            prompt=str(prompt or "").strip(),
            options=tuple(str(o).strip() for o in options),
            correct_index=correct_index,
            explanation=str(explanation).strip() if explanation else None,
        )


@dataclass(frozen=True)
class QuizResult:
    score: int
    total_questions: int
    correct_answers: int
    time_spent: int
    accuracy: int
    category: str
    difficulty: Optional[str] = None
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.total_questions < 1:
            raise ValueError("total_questions must be >= 1")
        if not (0 <= self.correct_answers <= self.total_questions):
            raise ValueError("correct_answers must be within 0..total_questions")
        if not (0 <= self.accuracy <= 100):
            raise ValueError("accuracy must be within 0..100")
        if self.time_spent < 0:
            raise ValueError("time_spent must be >= 0")

    def to_json(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "totalQuestions": self.total_questions,
            "correctAnswers": self.correct_answers,
            "timeSpent": self.time_spent,
            "accuracy": self.accuracy,
            "category": self.category,
            "difficulty": self.difficulty,
            "completedAt": self.completed_at.isoformat(),
        }


def accuracy_percent(correct: int, total: int) -> int:
    """Integer percentage, halves rounded up like the score display."""
    if total <= 0:
        return 0
    return int(correct * 100 / total + 0.5)


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    icon: str

    def to_json(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "description": self.description, "icon": self.icon}


@dataclass(frozen=True)
class UserStats:
    total_quizzes: int = 0
    average_score: int = 0
    total_time_spent: int = 0
    favorite_category: str = "None"
    streak: int = 0
    achievements: List[Achievement] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {
            "totalQuizzes": self.total_quizzes,
            "averageScore": self.average_score,
            "totalTimeSpent": self.total_time_spent,
            "favoriteCategory": self.favorite_category,
            "streak": self.streak,
            "achievements": [a.to_json() for a in self.achievements],
        }
