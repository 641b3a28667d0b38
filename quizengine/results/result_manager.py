from __future__ import annotations

"""Results Manager: the History Store contract and an in-memory store.

`ParquetHistoryStore` in `storage.store` implements the same two calls
durably; the session engine and stats only depend on the protocol.
"""

import threading
from typing import Dict, List, Protocol

from .schema import QuizResult


class HistoryStore(Protocol):
    def append(self, user_id: str, result: QuizResult) -> None: ...

    def read_all(self, user_id: str) -> List[QuizResult]: ...


class ResultManager:
    """Per-user append-only result lists kept in process memory."""

    def __init__(self) -> None:
        self._results: Dict[str, List[QuizResult]] = {}
        self._lock = threading.Lock()

    def append(self, user_id: str, result: QuizResult) -> None:
        with self._lock:
            self._results.setdefault(user_id, []).append(result)

    def read_all(self, user_id: str) -> List[QuizResult]:
        with self._lock:
            return list(self._results.get(user_id, []))
