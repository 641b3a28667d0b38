from __future__ import annotations

"""Question Set Loader: resolve a topic into an ordered list of questions.

A generative provider is tried first when one is configured; on absence,
failure or an empty answer the static fallback table for the topic is
used. Raises LoadError when neither yields a question.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from ..app.topics import DIFFICULTIES
from ..errors import LoadError, ProviderError
from ..results.schema import Question
from .fallback import FALLBACK_QUESTIONS

logger = logging.getLogger(__name__)


class QuestionProvider(Protocol):
    name: str

    def generate(self, topic: str, difficulty: str, count: int) -> List[Question]: ...


class QuestionSetLoader:
    def __init__(
        self,
        provider: Optional[QuestionProvider] = None,
        fallback: Optional[Mapping[str, Sequence[Dict[str, Any]]]] = None,
    ) -> None:
        self.provider = provider
        self.fallback = FALLBACK_QUESTIONS if fallback is None else fallback
        # Which source served the last resolve: provider name or "fallback"
        self.last_source: Optional[str] = None

    def resolve(self, topic: str, difficulty: str, count: int) -> List[Question]:
        if difficulty not in DIFFICULTIES:
            raise LoadError(f"Unknown difficulty '{difficulty}'")
        if int(count) < 1:
            raise LoadError("question count must be >= 1")
        count = int(count)

        if self.provider is not None:
            try:
                generated = self.provider.generate(topic, difficulty, count)
            except ProviderError as exc:
                logger.warning("%s provider failed for %r, using sample questions: %s", self.provider.name, topic, exc)
            else:
                questions = _valid_only(generated)[:count]
                if questions:
                    self.last_source = self.provider.name
                    return questions
                logger.warning("%s provider returned no usable questions for %r", self.provider.name, topic)

        rows = self.fallback.get(topic) or []
        questions = []
        for i, row in enumerate(rows, 1):
            try:
                questions.append(Question.from_json(row, default_id=str(i)))
            except ValueError as exc:
                logger.info("skipping invalid sample question %d for %r: %s", i, topic, exc)
        if not questions:
            raise LoadError(f"No questions available for topic '{topic}'")
        self.last_source = "fallback"
        return questions[:count]


def _valid_only(items: Sequence[Any]) -> List[Question]:
    return [q for q in items if isinstance(q, Question)]
