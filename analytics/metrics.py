from __future__ import annotations

"""Metric computations for per-attempt analytics."""

import numpy as np
import pandas as pd
from .config import AnalyticsConfig


def compute_metrics(df: pd.DataFrame, cfg: AnalyticsConfig) -> pd.DataFrame:
    """Compute pass flag and pacing per attempt.

    Returns a copy with added columns:
    - acc (fraction 0..1), passed, sec_per_question
    """
    out = df.copy()
    # total_questions >= 1 by construction; guard anyway for hand-built frames
    q = out["total_questions"].astype("float32").where(out["total_questions"] > 0, other=1.0)
    out["acc"] = (out["accuracy"].astype("float32") / 100.0).astype("float32")
    out["passed"] = out["accuracy"].astype(int) >= int(cfg.pass_mark)
    out["sec_per_question"] = (out["time_spent"].astype("float32") / q).astype("float32")
    return out


def category_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Attempts and mean accuracy per category, in first-seen order."""
    if df.empty:
        return pd.DataFrame(
            {
                "category": pd.Series(dtype="string"),
                "attempts": pd.Series(dtype="int64"),
                "mean_accuracy": pd.Series(dtype="float64"),
            }
        )
    g = df.assign(category=df["category"].astype("string"), accuracy=df["accuracy"].astype("float64"))
    summary = g.groupby("category", sort=False).agg(
        attempts=("accuracy", "size"),
        mean_accuracy=("accuracy", "mean"),
    )
    summary["mean_accuracy"] = np.round(summary["mean_accuracy"].to_numpy(dtype="float64"), 1)
    return summary.reset_index()
