from __future__ import annotations

"""Randomness helpers for seeding and picking suggested topics."""

import os
import random
from typing import List

import numpy as np


def seed_if_needed() -> None:
    """Seed RNGs if SEED env var is set."""
    seed = os.environ.get("SEED")
    if seed is None:
        return
    try:
        s = int(seed)
    except ValueError:
        return
    random.seed(s)
    np.random.seed(s)


def choose_random_topic(names: List[str]) -> str:
    """Pick one topic name for a 'surprise me' quiz."""
    return random.choice(names)
