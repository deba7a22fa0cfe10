"""CLI interface for codewalk."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from codewalk.backend_factory import create_backend
from codewalk.config import Config
from codewalk.errors import CodewalkError
from codewalk.models import PageState, Verdict
from codewalk.navigation import LessonNavigator, Locator
from codewalk.samples import SAMPLES, get_sample
from codewalk.session import ExecutionSession
from codewalk.store import HttpCourseStore

LEARN_HELP = """Commands:
  next / prev        move to the next or previous lesson
  goto <id>          jump to a lesson
  list               show the lesson outline
  show               show the current lesson
  source             print the source buffer
  load <file>        replace the source buffer with a file's contents
  run                run the source buffer
  clear              clear output and errors
  hint [next|prev]   show hints, or step through them
  answer             toggle the expected output
  help               show this help
  quit               leave"""

_VERDICT_LABELS = {
    Verdict.MATCH: "PASS: output matches the expected result",
    Verdict.MISMATCH: "FAIL: output differs from the expected result",
}


class LivePrinter:
    """Echoes cumulative output deliveries as they arrive, printing only the new part."""

    def __init__(self, stream=None) -> None:
        self._stream = stream or sys.stdout
        self._shown = ""

    def __call__(self, text: str) -> None:
        if not text.startswith(self._shown):
            self._shown = ""
        if text[len(self._shown):]:
            self._stream.write(text[len(self._shown):])
            self._stream.flush()
        self._shown = text


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="codewalk",
        description="codewalk: step through programming lessons and run their code",
    )
    parser.add_argument("--executor", choices=["remote", "sandbox"], default=None, help="Execution backend")
    parser.add_argument("--api-url", type=str, default=None, help="Course API base URL")
    parser.add_argument("--compile-url", type=str, default=None, help="Compile endpoint URL")
    parser.add_argument("--module-dir", type=str, default=None, help="Directory of precompiled modules")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (e.g. INFO)")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("courses", help="List available courses")

    learn_parser = subparsers.add_parser("learn", help="Step through the lessons of a course")
    learn_parser.add_argument("course", help="Course id or locator such as /courses/go-basics?lesson=loop")
    learn_parser.add_argument("--lesson", type=str, default=None, help="Lesson to start at")

    run_parser = subparsers.add_parser("run", help="Run a source file or a built-in sample once")
    run_parser.add_argument("file", nargs="?", default=None, help="Path to a source file")
    run_parser.add_argument("--sample", choices=sorted(SAMPLES), default=None, help="Built-in sample")
    run_parser.add_argument("--example", type=str, default=None, help="Precompiled module name (sandbox)")
    run_parser.add_argument("--expect", type=str, default=None, help="Expected output to compare against")

    serve_parser = subparsers.add_parser("serve", help="Serve the course API")
    serve_parser.add_argument("--host", type=str, default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8081)
    serve_parser.add_argument("--db", type=str, default=None, help="SQLite database path")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    # Build config from env + CLI overrides
    overrides = {
        "executor_type": args.executor,
        "api_url": args.api_url,
        "compile_url": args.compile_url,
        "module_dir": args.module_dir,
        "log_level": args.log_level,
    }
    if args.command == "serve":
        overrides["db_path"] = args.db
    try:
        config = Config.from_env(**overrides)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "courses":
        sys.exit(asyncio.run(_list_courses(config)))
    if args.command == "learn":
        try:
            locator = Locator.parse(args.course)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        if args.lesson:
            locator = locator.with_lesson(args.lesson)
        sys.exit(asyncio.run(_learn(config, locator)))
    if args.command == "run":
        sys.exit(asyncio.run(_run_once(config, args)))
    if args.command == "serve":
        from codewalk.web.app import create_app

        create_app(config).run(host=args.host, port=args.port)


async def _list_courses(config: Config) -> int:
    try:
        courses = await HttpCourseStore(config).list_courses()
    except CodewalkError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    for course in courses:
        print(f"{course.id:<20} {course.title}  [{course.level.value}, {course.duration}h, {course.lessons_count} lessons]")
    return 0


async def _run_once(config: Config, args: argparse.Namespace) -> int:
    if args.sample:
        sample = get_sample(args.sample)
        source, example, expected = sample.code, args.example or sample.module, sample.expected_output
    elif args.file:
        try:
            source = Path(args.file).read_text()
        except OSError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        example, expected = args.example, None
    else:
        print("Error: give a source file or --sample", file=sys.stderr)
        return 1
    if args.expect is not None:
        expected = args.expect.replace("\\n", "\n")

    session = ExecutionSession(create_backend(config), source, expected, example)
    session.subscribe(LivePrinter())
    await session.run()
    if session.error:
        print(f"Error: {session.error}", file=sys.stderr)
        return 1
    _print_verdict(session.verdict)
    return 0 if session.verdict is not Verdict.MISMATCH else 2


async def _learn(config: Config, locator: Locator) -> int:
    session = ExecutionSession(create_backend(config))
    printer = LivePrinter()
    session.subscribe(printer)
    navigator = LessonNavigator(HttpCourseStore(config), session, locator)

    await navigator.open()
    if navigator.course is None:
        print(f"Error: {navigator.page_error}", file=sys.stderr)
        return 1
    _show_lesson(navigator)

    while True:
        try:
            line = await asyncio.to_thread(input, f"{navigator.locator}> ")
        except (EOFError, KeyboardInterrupt):
            print()
            return 0
        command, _, arg = line.strip().partition(" ")
        arg = arg.strip()

        if command in ("quit", "exit", "q"):
            return 0
        elif command == "next":
            await navigator.go_next()
            _show_lesson(navigator)
        elif command == "prev":
            await navigator.go_previous()
            _show_lesson(navigator)
        elif command == "goto" and arg:
            await navigator.select_lesson(arg)
            _show_lesson(navigator)
        elif command == "list":
            _show_outline(navigator)
        elif command == "show":
            _show_lesson(navigator)
        elif command == "source":
            print(session.source)
        elif command == "load" and arg:
            try:
                navigator.set_source(Path(arg).read_text())
            except OSError as e:
                print(f"Error: {e}", file=sys.stderr)
        elif command == "run":
            await navigator.run()
            if not session.output.endswith("\n") and session.output:
                print()
            if session.error:
                print(f"Error: {session.error}", file=sys.stderr)
            else:
                _print_verdict(navigator.verdict)
        elif command == "clear":
            navigator.clear_output()
        elif command == "hint":
            _step_hint(navigator, arg)
        elif command == "answer":
            navigator.hints.toggle_answer()
            if navigator.hints.answer_visible:
                expected = navigator.lesson.expected_output if navigator.lesson else None
                print(expected or "(this lesson has no expected output)")
        elif command == "help":
            print(LEARN_HELP)
        elif command:
            print(f"Unknown command {command!r}; type 'help'.")


def _show_lesson(navigator: LessonNavigator) -> None:
    if navigator.page_state is not PageState.READY or navigator.lesson is None:
        print(f"[{navigator.page_state.value}] {navigator.page_error or ''}".rstrip())
        return
    lesson = navigator.lesson
    index = navigator.active_index
    print(f"\n== {navigator.course.title} :: {lesson.title} ({index + 1}/{len(navigator.lessons)})")
    print(lesson.content)
    print()
    print(navigator.session.source)
    controls = []
    if navigator.has_previous:
        controls.append("prev")
    if navigator.has_next:
        controls.append("next")
    if lesson.hints:
        controls.append(f"hint ({len(lesson.hints)})")
    print(f"[{', '.join(controls + ['run', 'help'])}]")


def _show_outline(navigator: LessonNavigator) -> None:
    for entry in navigator.outline():
        marker = "✓" if entry.completed else ("●" if entry.active else "-")
        print(f" {marker} {entry.lesson.order}. {entry.lesson.title}")
    done, total = navigator.progress
    print(f"Progress: {done} / {total}")


def _step_hint(navigator: LessonNavigator, arg: str) -> None:
    hints = navigator.hints
    if not hints.count:
        print("This lesson has no hints.")
        return
    if arg == "next":
        hints.next()
    elif arg == "prev":
        hints.previous()
    else:
        hints.toggle()
        if not hints.visible:
            return
    print(f"Hint {hints.index + 1}/{hints.count}: {hints.current}")


def _print_verdict(verdict: Verdict) -> None:
    label = _VERDICT_LABELS.get(verdict)
    if label:
        print(label)
