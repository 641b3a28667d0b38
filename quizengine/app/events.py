from __future__ import annotations

"""Tiny pub/sub event bus used by the session engine to notify presenters."""

import logging
import threading
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class EventBus:
    def __init__(self) -> None:
        self._subs: Dict[str, List[Callable[[Any], None]]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        with self._lock:
            self._subs.setdefault(event, []).append(handler)

    def emit(self, event: str, payload: Any = None) -> None:
        with self._lock:
            handlers = list(self._subs.get(event, []))
        for h in handlers:
            try:
                h(payload)
            except Exception:
                # A broken presenter must not corrupt engine state
                logger.exception("handler for %r failed", event)
