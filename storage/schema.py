from __future__ import annotations

"""Schema constants and Pydantic models for the Parquet-backed result history."""

from datetime import datetime, timezone
from typing import Literal, Optional
from uuid import uuid4

import pandas as pd
from pandas.api.types import CategoricalDtype
from pydantic import BaseModel, Field, ValidationInfo, field_validator

# --- Constants ---

DIFFICULTIES = {"easy", "medium", "hard"}


def _cat_dtype(categories: set[str]) -> CategoricalDtype:
    return CategoricalDtype(categories=sorted(categories), ordered=False)


DTYPES = {
    "result_id": "string",
    "user_id": "string",
    # timezone-aware UTC timestamps
    "completed_at": pd.DatetimeTZDtype(tz="UTC"),
    "category": "string",
    "difficulty": _cat_dtype(DIFFICULTIES),
    "score": "UInt16",
    "total_questions": "UInt16",
    "correct_answers": "UInt16",
    "time_spent": "UInt32",
    "accuracy": "UInt8",
}


# --- Pydantic models ---

class QuizResultRow(BaseModel):
    result_id: str = Field(default_factory=lambda: uuid4().hex)
    user_id: str = Field(min_length=1)
    completed_at: datetime
    category: str = Field(min_length=1)
    difficulty: Optional[Literal[tuple(DIFFICULTIES)]] = None  # type: ignore[valid-type]
    score: int = Field(ge=0, le=65535)
    total_questions: int = Field(ge=1, le=65535)
    correct_answers: int = Field(ge=0, le=65535)
    time_spent: int = Field(ge=0, le=4294967295)
    accuracy: int = Field(ge=0, le=100)

    @field_validator("correct_answers")
    @classmethod
    def _correct_le_total(cls, v: int, info: ValidationInfo) -> int:
        total = int(info.data.get("total_questions", 0))
        if v > total:
            raise ValueError("correct_answers must be <= total_questions")
        return v

    @field_validator("completed_at")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
