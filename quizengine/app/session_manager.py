from __future__ import annotations

"""Session Manager: drives one timed quiz attempt from loading to result.

States are explicit variants (`Loading`, `Ready`, `Active`, `Paused`,
`Completed`). Every operation is serialised by one re-entrant lock; the
countdown and the reveal settle continuation re-enter through that lock
and carry the session token they were scheduled under, so a restart or
topic switch silently voids anything still in flight. The countdown shares
the session lock, so a tick computed for one question is dropped once the
next question has reset the clock.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ..content.loader import QuestionSetLoader
from ..errors import InvalidAnswerIndex, InvalidTransition, LoadError, StoreError
from ..results.result_manager import HistoryStore
from ..results.schema import Question, QuizResult, accuracy_percent
from ..timing.countdown import Countdown, Handle, Scheduler, ThreadingScheduler
from .events import EventBus
from .explain import trace as xtrace
from .topics import TopicMeta

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionContext:
    user_id: str
    topic: TopicMeta
    question_time_s: int
    settle_ms: int


@dataclass
class RunState:
    questions: Tuple[Question, ...]
    answers: List[Optional[int]]
    index: int = 0
    started_at: Optional[float] = None
    revealing: bool = False

    @property
    def current(self) -> Question:
        return self.questions[self.index]

    @property
    def is_last(self) -> bool:
        return self.index == len(self.questions) - 1


@dataclass(frozen=True)
class Loading:
    name = "loading"


@dataclass(frozen=True)
class Ready:
    run: RunState
    name = "ready"


@dataclass(frozen=True)
class Active:
    run: RunState
    name = "active"


@dataclass(frozen=True)
class Paused:
    run: RunState
    name = "paused"


@dataclass(frozen=True)
class Completed:
    result: QuizResult
    saved: Optional[bool] = field(default=None, compare=False)
    name = "completed"


SessionState = Union[Loading, Ready, Active, Paused, Completed]


def _spawn(fn: Callable[[], None]) -> None:
    threading.Thread(target=fn, daemon=True).start()


class SessionManager:
    def __init__(
        self,
        cfg: Dict[str, Any],
        loader: QuestionSetLoader,
        store: HistoryStore,
        *,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], float] = time.monotonic,
        run_in_background: Optional[Callable[[Callable[[], None]], None]] = None,
        events: Optional[EventBus] = None,
    ) -> None:
        self.cfg = cfg
        self.loader = loader
        self.store = store
        self.events = events or EventBus()
        self._scheduler = scheduler or ThreadingScheduler()
        self._clock = clock
        self._run_in_background = run_in_background or _spawn
        self._lock = threading.RLock()
        self._state: SessionState = Loading()
        self.ctx: Optional[SessionContext] = None
        self._token = 0
        self._countdown: Optional[Countdown] = None
        self._settle: Optional[Handle] = None

    # ----- read accessors -------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status(self) -> str:
        return self._state.name

    @property
    def current_index(self) -> Optional[int]:
        run = self._run()
        return run.index if run else None

    @property
    def current_question(self) -> Optional[Question]:
        run = self._run()
        return run.current if run else None

    @property
    def questions(self) -> Tuple[Question, ...]:
        run = self._run()
        return run.questions if run else ()

    @property
    def answers(self) -> Tuple[Optional[int], ...]:
        run = self._run()
        return tuple(run.answers) if run else ()

    @property
    def revealing(self) -> bool:
        run = self._run()
        return bool(run and run.revealing)

    @property
    def remaining(self) -> Optional[int]:
        return self._countdown.remaining if self._countdown else None

    @property
    def result(self) -> Optional[QuizResult]:
        state = self._state
        return state.result if isinstance(state, Completed) else None

    def _run(self) -> Optional[RunState]:
        state = self._state
        if isinstance(state, (Ready, Active, Paused)):
            return state.run
        if isinstance(state, (Loading, Completed)):
            return None
        raise TypeError(f"unknown session state: {state!r}")

    # ----- lifecycle -------------------------------------------------------

    def start_session(self, user_id: str, topic: TopicMeta) -> None:
        """Begin a new attempt for `topic`: load questions and wait in Ready.

        Raises LoadError when no questions could be resolved; the session then
        stays in Loading until `restart` or another `start_session`.
        """
        quiz_cfg = self.cfg.get("quiz", {})
        with self._lock:
            self.ctx = SessionContext(
                user_id=user_id,
                topic=topic,
                question_time_s=int(quiz_cfg.get("question_time_s", 30)),
                settle_ms=int(quiz_cfg.get("settle_ms", 2000)),
            )
            self._load()

    def restart(self) -> None:
        """Discard the current attempt and load a fresh question set for the same topic."""
        with self._lock:
            if self.ctx is None:
                raise InvalidTransition("restart", "no session has been started")
            xtrace("session_restarted", {"topic": self.ctx.topic.name})
            self._load()

    def stop(self) -> None:
        """Cancel the countdown and any pending continuation."""
        with self._lock:
            self._invalidate()

    def _load(self) -> None:
        ctx = self.ctx
        assert ctx is not None
        self._invalidate()
        self._set_state(Loading())
        topic = ctx.topic
        questions = self.loader.resolve(topic.name, topic.difficulty, topic.question_count)
        if not questions:
            raise LoadError(f"No questions available for topic '{topic.name}'")
        token = self._token
        self._countdown = Countdown(
            ctx.question_time_s,
            on_expire=partial(self._on_time_expired, token),
            on_tick=partial(self._on_tick, token),
            scheduler=self._scheduler,
            guard=self._lock,
        )
        run = RunState(questions=tuple(questions), answers=[None] * len(questions))
        self._set_state(Ready(run))
        xtrace("session_loaded", {"topic": topic.name, "questions": len(questions), "source": self.loader.last_source})

    def _invalidate(self) -> None:
        self._token += 1
        if self._countdown is not None:
            self._countdown.cancel()
        if self._settle is not None:
            self._settle.cancel()
            self._settle = None

    # ----- operations -------------------------------------------------------

    def start(self) -> None:
        with self._lock:
            state = self._state
            if not isinstance(state, Ready):
                raise InvalidTransition("start", state.name)
            run = state.run
            if not run.questions:
                raise InvalidTransition("start", "empty question set")
            run.started_at = self._clock()
            self._set_state(Active(run))
            xtrace("session_started", {"questions": len(run.questions)})
            self._begin_question(run)

    def select_answer(self, index: int) -> None:
        with self._lock:
            state = self._state
            if not isinstance(state, Active):
                raise InvalidTransition("select an answer", state.name)
            run = state.run
            if run.revealing:
                raise InvalidTransition("select an answer", "revealing")
            option_count = len(run.current.options)
            if isinstance(index, bool) or not isinstance(index, int) or not (0 <= index < option_count):
                raise InvalidAnswerIndex(index, option_count)
            run.answers[run.index] = index
            xtrace("answer_selected", {"index": run.index, "answer": index})

    def advance(self) -> None:
        with self._lock:
            state = self._state
            if not isinstance(state, Active):
                raise InvalidTransition("advance", state.name)
            run = state.run
            if run.revealing:
                raise InvalidTransition("advance", "revealing")
            if run.answers[run.index] is None:
                raise InvalidTransition("advance", "unanswered")
            self._begin_reveal(run, timed_out=False)

    def pause(self) -> None:
        with self._lock:
            state = self._state
            if not isinstance(state, Active):
                return
            if self._countdown is not None:
                self._countdown.set_active(False)
            self._set_state(Paused(state.run))

    def resume(self) -> None:
        with self._lock:
            state = self._state
            if not isinstance(state, Paused):
                return
            run = state.run
            self._set_state(Active(run))
            if run.revealing:
                # Settle continuation is still pending and restarts the clock
                return
            countdown = self._countdown
            if countdown is not None and countdown.remaining <= 0:
                xtrace("time_expired", {"index": run.index})
                self._begin_reveal(run, timed_out=True)
            elif countdown is not None:
                countdown.set_active(True)

    # ----- timer / settle callbacks ----------------------------------------

    def _on_tick(self, token: int, remaining: int) -> None:
        with self._lock:
            if token != self._token:
                return
            self.events.emit("tick", remaining)

    def _on_time_expired(self, token: int) -> None:
        with self._lock:
            if token != self._token:
                return
            state = self._state
            if not isinstance(state, Active) or state.run.revealing:
                # Paused: resume() sees remaining == 0 and advances then
                return
            xtrace("time_expired", {"index": state.run.index})
            self._begin_reveal(state.run, timed_out=True)

    def _begin_question(self, run: RunState) -> None:
        countdown = self._countdown
        assert countdown is not None
        countdown.reset()
        self.events.emit("question", (run.index, run.current))
        if isinstance(self._state, Active):
            countdown.set_active(True)

    def _begin_reveal(self, run: RunState, *, timed_out: bool) -> None:
        run.revealing = True
        if self._countdown is not None:
            self._countdown.set_active(False)
        selected = run.answers[run.index]
        question = run.current
        reveal = {
            "index": run.index,
            "selected": selected,
            "correct_index": question.correct_index,
            "is_correct": question.is_correct(selected),
            "timed_out": timed_out,
        }
        xtrace("reveal", reveal)
        self.events.emit("reveal", reveal)
        settle_s = self.ctx.settle_ms / 1000.0 if self.ctx else 0.0
        self._settle = self._scheduler.call_later(settle_s, partial(self._finish_advance, self._token))

    def _finish_advance(self, token: int) -> None:
        with self._lock:
            if token != self._token:
                return
            self._settle = None
            state = self._state
            if not isinstance(state, (Active, Paused)):
                return
            run = state.run
            if not run.revealing:
                return
            if run.is_last:
                self._complete(run)
                return
            run.index += 1
            run.revealing = False
            xtrace("question_advanced", {"index": run.index})
            self._begin_question(run)

    # ----- completion -----------------------------------------------------

    def _complete(self, run: RunState) -> None:
        ctx = self.ctx
        assert ctx is not None
        if self._countdown is not None:
            self._countdown.cancel()
        correct = sum(1 for q, a in zip(run.questions, run.answers) if q.is_correct(a))
        total = len(run.questions)
        started = run.started_at if run.started_at is not None else self._clock()
        result = QuizResult(
            score=correct,
            total_questions=total,
            correct_answers=correct,
            time_spent=max(0, int(self._clock() - started)),
            accuracy=accuracy_percent(correct, total),
            category=ctx.topic.name,
            difficulty=ctx.topic.difficulty,
            completed_at=datetime.now(timezone.utc),
        )
        self._set_state(Completed(result))
        xtrace("session_completed", result.to_json())
        self.events.emit("completed", result)
        self._run_in_background(partial(self._save, ctx.user_id, result))

    def _save(self, user_id: str, result: QuizResult) -> None:
        try:
            self.store.append(user_id, result)
        except StoreError as exc:
            logger.warning("Could not save quiz result for %s: %s", user_id, exc)
            self.events.emit("store_error", exc)
            saved = False
        else:
            saved = True
        with self._lock:
            state = self._state
            if isinstance(state, Completed) and state.result is result:
                self._state = Completed(result, saved=saved)

    def _set_state(self, state: SessionState) -> None:
        self._state = state
        self.events.emit("state", state.name)
