from __future__ import annotations

"""Matplotlib charts for accuracy trend and per-category performance."""

import os
from typing import Optional, Union

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from .metrics import category_summary

PathLike = Union[str, "os.PathLike[str]"]


def plot_trend(
    df: pd.DataFrame,
    *,
    category: Optional[str] = None,
    value_col: str = "accuracy",
    pass_mark: Optional[int] = None,
    save_path: Optional[PathLike] = None,
) -> None:
    g = df.copy()
    if category is not None:
        g = g[g["category"].astype("string") == category]
    if g.empty:
        return
    g = g.sort_values("attempt_idx")
    plt.figure()
    plt.plot(g["attempt_idx"] + 1, g[value_col], marker="o", linestyle="", label=value_col)
    smooth_col = f"{value_col}_smooth"
    if smooth_col in g.columns:
        plt.plot(g["attempt_idx"] + 1, g[smooth_col], linewidth=2, label=f"{value_col} (EWMA)")
    if pass_mark is not None:
        plt.axhline(pass_mark, color="grey", linestyle="--", linewidth=1, label="pass mark")
    plt.xlabel("Attempt")
    plt.ylabel(value_col)
    plt.ylim(0, 105)
    plt.title(f"Trend: {category}" if category else "Trend")
    plt.legend()
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()


def plot_category_bars(
    df: pd.DataFrame,
    *,
    save_path: Optional[PathLike] = None,
) -> None:
    summary = category_summary(df)
    if summary.empty:
        return
    x = np.arange(len(summary))
    plt.figure()
    bars = plt.bar(x, summary["mean_accuracy"].to_numpy(dtype="float64"))
    for bar, n in zip(bars, summary["attempts"]):
        plt.annotate(f"n={n}", (bar.get_x() + bar.get_width() / 2, bar.get_height()), ha="center", va="bottom", fontsize=8)
    plt.xticks(ticks=x, labels=summary["category"].astype(str).tolist(), rotation=20, ha="right")
    plt.ylim(0, 105)
    plt.ylabel("Mean accuracy (%)")
    plt.title("Accuracy by category")
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()
