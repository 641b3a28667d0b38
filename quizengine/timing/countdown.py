from __future__ import annotations

"""Cancellable one-second countdown with tick notifications.

The countdown knows nothing about quizzes: it decrements once per second
while active, reports each new value to an observer and fires its expiry
callback exactly once when it reaches zero. Ticks are scheduled through a
`Scheduler` so owners can swap the threading backend for a manual one.

Each `reset` starts a new epoch. A tick computed in an older epoch never
reaches the callbacks; owners that pass their own lock as `guard` get that
check made atomically with their own state changes.
"""

import threading
from functools import partial
from typing import Callable, ContextManager, Optional, Protocol


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_s: float, fn: Callable[[], None]) -> Handle: ...


class ThreadingScheduler:
    """Runs each callback on a daemon `threading.Timer`."""

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(max(0.0, float(delay_s)), fn)
        timer.daemon = True
        timer.start()
        return timer


class Countdown:
    TICK_S = 1.0

    def __init__(
        self,
        duration_s: int,
        on_expire: Callable[[], None],
        on_tick: Optional[Callable[[int], None]] = None,
        scheduler: Optional[Scheduler] = None,
        guard: Optional[ContextManager] = None,
    ) -> None:
        self._duration = _whole_seconds(duration_s)
        self._remaining = self._duration
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._scheduler = scheduler or ThreadingScheduler()
        self._lock = threading.Lock()
        self._guard = guard
        self._active = False
        self._expired = False
        self._handle: Optional[Handle] = None
        # Bumped whenever pending ticks must be ignored
        self._generation = 0
        # Bumped on reset; callbacks only run for the current epoch
        self._epoch = 0

    @property
    def duration(self) -> int:
        return self._duration

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def active(self) -> bool:
        return self._active

    @property
    def expired(self) -> bool:
        return self._expired

    def set_active(self, flag: bool) -> None:
        """Start or suspend ticking. Suspending keeps the remaining value."""
        with self._lock:
            flag = bool(flag)
            if flag == self._active:
                return
            if flag:
                if self._expired or self._remaining <= 0:
                    # Single-shot: stays stopped until reset
                    return
                self._active = True
                self._schedule()
            else:
                self._active = False
                self._drop_pending()

    def set_duration(self, seconds: int) -> None:
        """Change the configured duration; resets remaining when inactive."""
        with self._lock:
            self._duration = _whole_seconds(seconds)
            if not self._active:
                self._remaining = self._duration
                self._expired = False
                self._epoch += 1

    def reset(self, seconds: Optional[int] = None) -> None:
        """Stop ticking and restore the full duration (optionally a new one)."""
        with self._lock:
            if seconds is not None:
                self._duration = _whole_seconds(seconds)
            self._active = False
            self._drop_pending()
            self._remaining = self._duration
            self._expired = False
            self._epoch += 1

    def cancel(self) -> None:
        with self._lock:
            self._active = False
            self._epoch += 1
            self._drop_pending()

    def _schedule(self) -> None:
        self._handle = self._scheduler.call_later(self.TICK_S, partial(self._tick, self._generation))

    def _drop_pending(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or not self._active:
                return
            epoch = self._epoch
            self._remaining = max(0, self._remaining - 1)
            remaining = self._remaining
            fire_expiry = remaining == 0
            if fire_expiry:
                self._active = False
                self._expired = True
                self._handle = None
                self._generation += 1
            else:
                self._schedule()
        # Callbacks run outside the countdown lock so owners may call back in
        if self._guard is None:
            self._deliver(epoch, remaining, fire_expiry)
        else:
            with self._guard:
                self._deliver(epoch, remaining, fire_expiry)

    def _deliver(self, epoch: int, remaining: int, fire_expiry: bool) -> None:
        with self._lock:
            if epoch != self._epoch:
                return
        if self._on_tick is not None:
            self._on_tick(remaining)
        if fire_expiry:
            self._on_expire()


def _whole_seconds(value: int) -> int:
    seconds = int(value)
    if seconds < 1:
        raise ValueError(f"countdown duration must be >= 1 second, got {value!r}")
    return seconds
