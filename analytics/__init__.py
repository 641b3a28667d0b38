from .config import AnalyticsConfig
from .metrics import compute_metrics, category_summary
from .prepare import history_frame, load_and_prepare
from .smoothing import ewma_by_attempt
from .plots import plot_trend, plot_category_bars

__all__ = [
    "AnalyticsConfig",
    "compute_metrics",
    "category_summary",
    "history_frame",
    "load_and_prepare",
    "ewma_by_attempt",
    "plot_trend",
    "plot_category_bars",
]
