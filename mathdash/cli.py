"""
Mathdash CLI - Command-line interface for the engine.

Usage:
    mathdash play [--mode main|quick|time_attack] [--difficulty easy|medium|hard]
    mathdash history [--clear]
    mathdash serve [--host HOST] [--port PORT]
"""

import argparse
import sys

from .config import MATHDASH_DATA_DIR, configure_logging


RATING_LABELS = {
    "excellent": "Excellent!",
    "great": "Great job!",
    "keep_going": "Keep going!",
    "practice": "More practice!",
}


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Mathdash - Timed mental arithmetic",
        prog="mathdash",
    )
    parser.add_argument("--data-dir", default=MATHDASH_DATA_DIR, help="History directory")
    parser.add_argument("--log-level", default=None, help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a run in the terminal")
    play_parser.add_argument(
        "--mode", choices=["main", "quick", "time_attack"], default="main",
    )
    play_parser.add_argument(
        "--difficulty", choices=["easy", "medium", "hard"], default="easy",
    )
    play_parser.add_argument("--quiet", action="store_true", help="No terminal bell")

    # History command
    history_parser = subparsers.add_parser("history", help="Show recent runs")
    history_parser.add_argument("--clear", action="store_true", help="Clear history")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    configure_logging(args.log_level or "WARNING")

    if args.command == "play":
        cmd_play(args)
    elif args.command == "history":
        cmd_history(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _history_store(args):
    from .storage import HistoryStore, JsonFileStore
    return HistoryStore(JsonFileStore(args.data_dir))


def cmd_play(args):
    """Interactive run over the engine."""
    from .audio import BellAudio, NullAudio
    from .engine_core import GameMode, Difficulty, QuestionState
    from .session import GameEngine, performance_rating, format_duration

    engine = GameEngine(
        audio=NullAudio() if args.quiet else BellAudio(),
        history=_history_store(args),
    )
    engine.start_game(GameMode(args.mode), Difficulty(args.difficulty))
    print("Type the answer and press Enter. 's' skips, 'q' quits.\n")

    try:
        while engine.run is not None and engine.run.is_playing:
            run = engine.run
            question = run.current_question
            if run.question_state == QuestionState.SHOW:
                engine.start_input()

            hud = f"[{run.current_question_index + 1}/{run.questions_planned}]"
            hud += f" score {run.score}  combo {run.current_combo}  shield {run.shield_remaining}"
            if run.mode == GameMode.TIME_ATTACK:
                hud += f"  time {run.time_remaining}s"
            boss = " BOSS" if question.is_boss else ""
            try:
                raw = input(f"{hud}\n{boss} {question.expression} = ").strip()
            except EOFError:
                raw = "q"

            if raw.lower() == "q":
                engine.reset_game()
                print("Run abandoned.")
                return
            if engine.run is None or not engine.run.is_playing:
                break

            if raw.lower() == "s":
                engine.skip_question()
                print(f"  Skipped. {question.expression} = {question.answer}")
                engine.next_question()
                continue

            result = engine.submit_answer(raw)
            if not result.success:
                continue
            run = engine.run
            if run.is_finished or run.current_question_index != question.index:
                print(f"  Correct! +{result.score_delta}")
                continue

            current = run.current_question
            if run.question_state == QuestionState.WRONG_SOFT and not current.shield_used:
                print("  Not quite, try again.")
                engine.retry_question()
            elif run.question_state == QuestionState.WRONG_SOFT:
                print(f"  Shield used, combo kept. {question.expression} = {question.answer}")
                engine.next_question()
            else:
                print(f"  Wrong. {question.expression} = {question.answer}")
                engine.next_question()
    except KeyboardInterrupt:
        engine.reset_game()
        print("\nRun abandoned.")
        return

    run = engine.snapshot()
    stats = engine.get_stats()
    if run is None or stats is None:
        return
    print("\nRun over!")
    print(RATING_LABELS[performance_rating(stats).value])
    print(f"Score:       {stats.total_score}")
    print(f"Accuracy:    {stats.accuracy:.0f}%")
    print(f"Max combo:   {stats.max_combo}")
    print(f"Speed stars: {stats.speed_stars}")
    print(f"Shields:     {stats.shield_used}")
    print(f"Time:        {format_duration(run.end_at - run.start_at)}")
    if stats.wrong_questions:
        print("\nReview:")
        for q in stats.wrong_questions:
            print(f"  {q.expression} = {q.answer}")
    engine.close()


def cmd_history(args):
    """Show or clear recent runs."""
    from .session import format_duration

    history = _history_store(args)
    if args.clear:
        history.clear()
        print("History cleared.")
        return

    entries = history.load()
    if not entries:
        print("No runs yet.")
        return
    for entry in entries:
        print(
            f"{entry.mode:<12} {entry.difficulty:<7} {entry.score:>6} pts  "
            f"{round(entry.accuracy):>3}%  {format_duration(entry.time_taken_ms)}"
        )


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("mathdash.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
