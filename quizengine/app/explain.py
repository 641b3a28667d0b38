from __future__ import annotations

"""Minimal tracing helpers (Explain Mode).

Enable with the CLI `--explain` flag to print one terse JSON line per
session milestone: loaded, started, answer selected, time expired,
reveal, advanced, completed, restarted.
"""

import json
from typing import Any, Dict

_ENABLED = False


def enable(flag: bool = True) -> None:
    global _ENABLED
    _ENABLED = bool(flag)


def trace(event: str, payload: Dict[str, Any] | None = None) -> None:
    if not _ENABLED:
        return
    data = payload or {}
    # default=str keeps datetimes and enums printable on one line
    print(f"[EXPLAIN] {event} :: {json.dumps(data, separators=(',', ':'), default=str)}")
