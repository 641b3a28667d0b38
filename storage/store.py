from __future__ import annotations

"""Parquet-backed history of completed quizzes using pandas + pyarrow.

Unit of data: one row per completed quiz (user × attempt).
"""

import logging
import threading
from pathlib import Path
from typing import Iterable, List, Union

import pandas as pd
import pyarrow as pa

from quizengine.errors import StoreError
from quizengine.results.schema import QuizResult

from .schema import DTYPES, QuizResultRow

logger = logging.getLogger(__name__)

DATA_FILE = "quiz_results.parquet"

_STORE_FAILURES = (OSError, ValueError, pa.ArrowException)


def _empty_df() -> pd.DataFrame:
    return pd.DataFrame({k: pd.Series(dtype=v) for k, v in DTYPES.items()})


def _fix_dtypes(df: pd.DataFrame) -> pd.DataFrame:
    for col, dt in DTYPES.items():
        if col not in df.columns:
            df[col] = pd.NA
        df[col] = df[col].astype(dt)
    return df[list(DTYPES.keys())]


def init_store(data_dir: Path) -> Path:
    """Ensure the data directory and an empty Parquet file with the right schema exist."""
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    path = data_dir / DATA_FILE
    if not path.exists():
        _empty_df().to_parquet(path, engine="pyarrow", compression="zstd", index=False)
    return path


def to_row(user_id: str, result: QuizResult) -> QuizResultRow:
    return QuizResultRow(
        user_id=user_id,
        completed_at=result.completed_at,
        category=result.category,
        difficulty=result.difficulty,
        score=result.score,
        total_questions=result.total_questions,
        correct_answers=result.correct_answers,
        time_spent=result.time_spent,
        accuracy=result.accuracy,
    )


def validate_records(records: Iterable[Union[QuizResultRow, dict]]) -> pd.DataFrame:
    """Validate rows and return a DataFrame with the store's dtypes.

    Dicts are validated through `QuizResultRow`; anything violating the row
    constraints raises pydantic's ValidationError (a ValueError).
    """
    rows = [r if isinstance(r, QuizResultRow) else QuizResultRow.model_validate(r) for r in records]
    df = pd.DataFrame([r.model_dump() for r in rows])
    return _fix_dtypes(df)


def load_all(data_dir: Path) -> pd.DataFrame:
    """Load every stored result in insertion order, with enforced dtypes."""
    f = Path(data_dir) / DATA_FILE
    if not f.exists():
        return _empty_df()
    df = pd.read_parquet(f, engine="pyarrow")
    return _fix_dtypes(df).reset_index(drop=True)


def export_ndjson(df: pd.DataFrame, out_path: Path) -> None:
    """Export a DataFrame to line-delimited JSON (NDJSON) for quick inspection."""
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    df.to_json(out_path, orient="records", lines=True, date_format="iso")


def _to_result(row: pd.Series) -> QuizResult:
    difficulty = row["difficulty"]
    return QuizResult(
        score=int(row["score"]),
        total_questions=int(row["total_questions"]),
        correct_answers=int(row["correct_answers"]),
        time_spent=int(row["time_spent"]),
        accuracy=int(row["accuracy"]),
        category=str(row["category"]),
        difficulty=None if pd.isna(difficulty) else str(difficulty),
        completed_at=row["completed_at"].to_pydatetime(),
    )


class ParquetHistoryStore:
    """`HistoryStore` persisting every user's results in one Parquet file."""

    def __init__(self, data_dir: Union[str, Path]) -> None:
        self.data_dir = Path(data_dir)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self.data_dir / DATA_FILE

    def append(self, user_id: str, result: QuizResult) -> None:
        with self._lock:
            try:
                df_new = validate_records([to_row(user_id, result)])
                init_store(self.data_dir)
                combined = pd.concat([load_all(self.data_dir), df_new], ignore_index=True)
                _fix_dtypes(combined).to_parquet(self.path, engine="pyarrow", compression="zstd", index=False)
            except _STORE_FAILURES as exc:
                raise StoreError(f"could not append result to {self.path}: {exc}") from exc
        logger.debug("stored %s result for %s in %s", result.category, user_id, self.path)

    def read_all(self, user_id: str) -> List[QuizResult]:
        with self._lock:
            try:
                df = load_all(self.data_dir)
            except _STORE_FAILURES as exc:
                raise StoreError(f"could not read {self.path}: {exc}") from exc
        mine = df[df["user_id"] == user_id]
        return [_to_result(row) for _, row in mine.iterrows()]

    def frame(self, user_id: str) -> pd.DataFrame:
        """Raw rows for one user, in insertion order."""
        with self._lock:
            try:
                df = load_all(self.data_dir)
            except _STORE_FAILURES as exc:
                raise StoreError(f"could not read {self.path}: {exc}") from exc
        return df[df["user_id"] == user_id].reset_index(drop=True)
