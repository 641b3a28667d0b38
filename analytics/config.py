from __future__ import annotations

"""Analytics configuration (hyperparameters) using Pydantic."""

from pydantic import BaseModel, Field


class AnalyticsConfig(BaseModel):
    """Hyperparameters for history analytics and smoothing.

    - smoothing_span: EWMA span in attempts (>1)
    - pass_mark: accuracy percentage that counts as a pass (0..100)
    """

    smoothing_span: int = Field(5, gt=1)
    pass_mark: int = Field(60, ge=0, le=100)
