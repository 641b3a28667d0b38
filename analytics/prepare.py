from __future__ import annotations

"""Turn result history into an analysis frame with derived metrics."""

from typing import Sequence

import pandas as pd

from quizengine.results.result_manager import HistoryStore
from quizengine.results.schema import QuizResult

from .config import AnalyticsConfig
from .metrics import compute_metrics

COLUMNS = [
    "completed_at",
    "category",
    "difficulty",
    "score",
    "total_questions",
    "correct_answers",
    "time_spent",
    "accuracy",
]


def history_frame(results: Sequence[QuizResult]) -> pd.DataFrame:
    """One row per result, in history order."""
    if not results:
        return pd.DataFrame({c: pd.Series(dtype="object") for c in COLUMNS})
    df = pd.DataFrame(
        [
            {
                "completed_at": r.completed_at,
                "category": r.category,
                "difficulty": r.difficulty,
                "score": r.score,
                "total_questions": r.total_questions,
                "correct_answers": r.correct_answers,
                "time_spent": r.time_spent,
                "accuracy": r.accuracy,
            }
            for r in results
        ]
    )
    df["completed_at"] = pd.to_datetime(df["completed_at"], utc=True)
    return df[COLUMNS]


def load_and_prepare(store: HistoryStore, user_id: str, cfg: AnalyticsConfig) -> pd.DataFrame:
    """Read a user's history and compute metrics.

    - Keeps history order (the store's insertion order).
    - Computes metrics and adds a stable attempt index 'attempt_idx'.
    """
    df = history_frame(store.read_all(user_id))
    if df.empty:
        df = df.assign(
            acc=pd.Series(dtype="float32"),
            passed=pd.Series(dtype="bool"),
            sec_per_question=pd.Series(dtype="float32"),
        )
    else:
        df = compute_metrics(df, cfg)
    df["attempt_idx"] = range(len(df))
    return df
