from __future__ import annotations

"""CLI for quizengine: run timed quizzes in the terminal and inspect history."""

import argparse
import json
import logging
import sys
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List

from .. import __version__
from ..config.config import load_config, validate_config
from ..content.gemini import make_provider
from ..content.loader import QuestionSetLoader
from ..errors import InvalidAnswerIndex, InvalidTransition, LoadError, StoreError
from ..results.result_manager import HistoryStore, ResultManager
from ..results.schema import QuizResult
from ..stats.stats import format_clock, format_stats, format_summary, load_user_stats, recommendations
from ..util.randomness import choose_random_topic, seed_if_needed
from .events import EventBus
from .session_manager import SessionManager
from .topics import DIFFICULTIES, TopicMeta, difficulty_description, estimated_minutes, get_topic, list_topics, make_custom_topic

logger = logging.getLogger(__name__)

TICK_WARNINGS = {10, 5, 3, 2, 1}

HELP = "Keys: 1-9 select an option, Enter/n next, p pause, r resume, x restart, q quit"


def make_store(cfg: Dict[str, Any]) -> HistoryStore:
    storage_cfg = cfg.get("storage", {})
    if storage_cfg.get("backend") == "memory":
        return ResultManager()
    # pandas/pyarrow only needed for the durable backend
    from storage import ParquetHistoryStore

    return ParquetHistoryStore(storage_cfg.get("data_dir", "./storage/data"))


class _BackgroundSaves:
    """Runs result saves off the session thread; the CLI joins them before exiting."""

    def __init__(self) -> None:
        self._threads: List[threading.Thread] = []

    def __call__(self, fn: Callable[[], None]) -> None:
        t = threading.Thread(target=fn, name="quiz-save")
        self._threads.append(t)
        t.start()

    def join(self) -> None:
        for t in self._threads:
            t.join()


def _resolve_topic(args: argparse.Namespace, cfg: Dict[str, Any]) -> TopicMeta:
    custom_cfg = cfg.get("custom", {})
    if args.custom:
        return make_custom_topic(
            args.custom,
            args.difficulty or "medium",
            args.questions if args.questions is not None else 10,
            min_questions=int(custom_cfg.get("min_questions", 5)),
            max_questions=int(custom_cfg.get("max_questions", 50)),
        )
    wanted = args.topic or cfg.get("quiz", {}).get("default_topic", "science-nature")
    if wanted == "random":
        wanted = choose_random_topic([t.id for t in list_topics()])
    topic = get_topic(wanted)
    if args.difficulty:
        topic = replace(topic, difficulty=args.difficulty)
    if args.questions is not None:
        topic = replace(topic, question_count=int(args.questions))
    return topic


def _wire_presenter(bus: EventBus, done: threading.Event) -> None:
    def on_question(payload: Any) -> None:
        index, question = payload
        print(f"\nQuestion {index + 1}: {question.prompt}")
        for i, option in enumerate(question.options, 1):
            print(f"  {i}. {option}")

    def on_tick(remaining: int) -> None:
        if remaining in TICK_WARNINGS:
            print(f"  [{format_clock(remaining)}]")

    def on_reveal(reveal: Dict[str, Any]) -> None:
        correct = reveal["correct_index"] + 1
        if reveal["timed_out"] and reveal["selected"] is None:
            print(f"  Time's up! The answer was {correct}.")
        elif reveal["is_correct"]:
            print("  Correct!")
        else:
            print(f"  Wrong, the answer was {correct}.")

    def on_completed(result: QuizResult) -> None:
        print("\nQuiz complete!")
        print(format_summary(result))
        print("Press Enter to finish, or x to try again.")

    def on_store_error(exc: StoreError) -> None:
        print(f"[WARN] Result could not be saved: {exc}")

    def on_state(name: str) -> None:
        if name == "completed":
            done.set()
        elif name == "paused":
            print("  Paused. Press r to resume.")

    bus.subscribe("question", on_question)
    bus.subscribe("tick", on_tick)
    bus.subscribe("reveal", on_reveal)
    bus.subscribe("completed", on_completed)
    bus.subscribe("store_error", on_store_error)
    bus.subscribe("state", on_state)


def _run_interactive(sm: SessionManager) -> None:
    done = threading.Event()
    _wire_presenter(sm.events, done)
    sm.start()
    while True:
        try:
            line = input().strip().lower()
        except EOFError:
            break
        if done.is_set() and line != "x":
            break
        try:
            if line == "q":
                break
            elif done.is_set():
                done.clear()
                sm.restart()
                sm.start()
            elif line in ("", "n"):
                sm.advance()
            elif line == "p":
                sm.pause()
            elif line == "r":
                sm.resume()
            elif line == "x":
                sm.restart()
                sm.start()
            elif line.isdigit():
                sm.select_answer(int(line) - 1)
                print(f"  Selected {line}. Enter to confirm.")
            else:
                print(HELP)
        except (InvalidTransition, InvalidAnswerIndex, LoadError) as exc:
            print(f"  {exc}")
    sm.stop()


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="quizengine")
    p.add_argument("--version", action="version", version=f"quizengine {__version__}")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("list-topics")

    rp = sub.add_parser("run")
    rp.add_argument("--config", default=None)
    rp.add_argument("--topic", default=None, help="Topic id or name, or 'random'")
    rp.add_argument("--custom", default=None, help="Free-text topic for a generated quiz")
    rp.add_argument("--difficulty", choices=DIFFICULTIES, default=None)
    rp.add_argument("--questions", type=int, default=None)
    rp.add_argument("--user", default=None)
    rp.add_argument("--offline", action="store_true", help="Skip the question generator, use sample questions")
    rp.add_argument("--explain", action="store_true")

    st = sub.add_parser("stats")
    st.add_argument("--config", default=None)
    st.add_argument("--user", default=None)
    st.add_argument("--json", action="store_true", help="Print the stats as JSON")

    hp = sub.add_parser("history")
    hp.add_argument("--config", default=None)
    hp.add_argument("--user", default=None)
    hp.add_argument("--export", default=None, help="Write history as NDJSON to this path")

    rep = sub.add_parser("report")
    rep.add_argument("--config", default=None)
    rep.add_argument("--user", default=None)
    rep.add_argument("--out", default="reports")

    args = p.parse_args(argv)

    if args.cmd == "list-topics":
        for m in list_topics():
            print(
                f"{m.id}: {m.icon} {m.name} - {m.description} | {m.difficulty} "
                f"({difficulty_description(m.difficulty)}) | {m.question_count} questions, "
                f"~{estimated_minutes(m.question_count)}"
            )
        return 0

    cfg = validate_config(load_config(args.config))
    logging.basicConfig(
        level=getattr(logging, cfg["logging"]["level"], logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    user_id = args.user or cfg["user"]["default_id"]
    store = make_store(cfg)

    if args.cmd == "run":
        seed_if_needed()
        if args.explain:
            from .explain import enable as explain_enable
            explain_enable(True)
        try:
            topic = _resolve_topic(args, cfg)
        except (KeyError, ValueError) as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 2
        provider = None if args.offline else make_provider(cfg)
        loader = QuestionSetLoader(provider)
        saves = _BackgroundSaves()
        sm = SessionManager(cfg, loader, store, run_in_background=saves)
        try:
            sm.start_session(user_id, topic)
        except LoadError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1
        n = len(sm.questions)
        print(f"{topic.icon} {topic.name} ({topic.difficulty}), {n} questions, "
              f"{cfg['quiz']['question_time_s']}s each. Source: {loader.last_source}")
        print(HELP)
        _run_interactive(sm)
        saves.join()
        return 0

    if args.cmd == "stats":
        try:
            stats = load_user_stats(store, user_id)
        except StoreError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1
        if args.json:
            print(json.dumps(stats.to_json(), indent=2))
            return 0
        print(format_stats(stats))
        recs = recommendations(stats)
        if recs:
            print("\nRecommendations:")
            for r in recs:
                print(f"  - {r.title} [{r.action}: {r.category}]")
        return 0

    if args.cmd == "history":
        try:
            results = store.read_all(user_id)
        except StoreError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1
        if not results:
            print(f"No quizzes recorded for {user_id}.")
        for r in results:
            print(
                f"{r.completed_at:%Y-%m-%d %H:%M}  {r.category:<24} "
                f"{r.correct_answers}/{r.total_questions}  {r.accuracy:>3}%  {r.time_spent}s"
            )
        if args.export:
            from analytics import history_frame
            from storage import export_ndjson

            export_ndjson(history_frame(results), Path(args.export))
            print(f"Exported {len(results)} results to {args.export}")
        return 0

    if args.cmd == "report":
        import matplotlib

        matplotlib.use("Agg")
        from analytics import AnalyticsConfig, ewma_by_attempt, load_and_prepare, plot_category_bars, plot_trend

        acfg = AnalyticsConfig()
        try:
            df = load_and_prepare(store, user_id, acfg)
        except StoreError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1
        if df.empty:
            print(f"No quizzes recorded for {user_id}.")
            return 0
        df = ewma_by_attempt(df, value_col="accuracy", span=acfg.smoothing_span)
        outdir = Path(args.out)
        outdir.mkdir(parents=True, exist_ok=True)
        plot_trend(df, pass_mark=acfg.pass_mark, save_path=outdir / "accuracy_trend.png")
        plot_category_bars(df, save_path=outdir / "accuracy_by_category.png")
        df.to_csv(outdir / "history_snapshot.csv", index=False)
        print(f"Reports saved to: {outdir.resolve()}")
        return 0

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
