"""quizengine package initialization.

Timed multiple-choice quizzes: a session engine driven by a per-question
countdown, question loading with a generative provider and sample fallback,
and statistics over each user's result history.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
