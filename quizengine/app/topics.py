from __future__ import annotations

"""Topic registry and metadata.

Expose the built-in quiz topics, look them up by id or display name, and
construct validated custom topics for generated quizzes.
"""

import math
import time
from dataclasses import dataclass
from typing import List

DIFFICULTIES = ("easy", "medium", "hard")


@dataclass(frozen=True)
class TopicMeta:
    id: str
    name: str
    description: str
    icon: str
    difficulty: str
    question_count: int


_CATALOGUE = (
    TopicMeta(
        id="science-nature",
        name="Science & Nature",
        description="Test your knowledge of the natural world",
        icon="🔬",
        difficulty="medium",
        question_count=10,
    ),
    TopicMeta(
        id="history",
        name="History",
        description="Journey through time and historical events",
        icon="📚",
        difficulty="hard",
        question_count=15,
    ),
    TopicMeta(
        id="technology",
        name="Technology",
        description="Explore the digital world and innovations",
        icon="💻",
        difficulty="medium",
        question_count=12,
    ),
    TopicMeta(
        id="sports",
        name="Sports",
        description="Athletic achievements and sporting facts",
        icon="⚽",
        difficulty="easy",
        question_count=8,
    ),
)

SUGGESTED_TOPICS = [
    "Artificial Intelligence", "Climate Change", "Space Exploration",
    "Modern Literature", "Cryptocurrency", "Psychology",
    "Ancient Civilizations", "Renewable Energy", "Marine Biology",
    "Philosophy", "Art History", "Cybersecurity",
]


def list_topics() -> List[TopicMeta]:
    return list(_CATALOGUE)


def get_topic(topic: str) -> TopicMeta:
    """Find a built-in topic by id or (case-insensitive) display name."""
    wanted = topic.strip().lower()
    for m in _CATALOGUE:
        if m.id == wanted or m.name.lower() == wanted:
            return m
    raise KeyError(f"Unknown topic: {topic}")


def make_custom_topic(
    name: str,
    difficulty: str = "medium",
    question_count: int = 10,
    description: str = "",
    *,
    min_questions: int = 5,
    max_questions: int = 50,
) -> TopicMeta:
    title = (name or "").strip()
    if not title:
        raise ValueError("Please enter a quiz topic")
    if difficulty not in DIFFICULTIES:
        raise ValueError(f"Unknown difficulty '{difficulty}', expected one of {', '.join(DIFFICULTIES)}")
    if not (min_questions <= int(question_count) <= max_questions):
        raise ValueError(f"Question count must be between {min_questions} and {max_questions}")
    return TopicMeta(
        id=f"custom-{int(time.time() * 1000)}",
        name=title,
        description=description.strip() or f"A {difficulty} quiz about {title}",
        icon="🧠",
        difficulty=difficulty,
        question_count=int(question_count),
    )


def difficulty_description(level: str) -> str:
    return {
        "easy": "Basic concepts and well-known facts",
        "medium": "Mix of basic and intermediate knowledge",
        "hard": "Deep understanding and complex scenarios",
    }.get(level, "")


def estimated_minutes(question_count: int) -> str:
    return f"{math.ceil(question_count * 0.5)}-{question_count} minutes"
