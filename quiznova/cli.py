# quiznova/cli.py
"""Play a QuizNova quiz in the terminal against a running service."""
import argparse
import asyncio
import sys
import threading
from typing import List, Optional

from quiznova.client import QuizServiceClient
from quiznova.logging_config import setup_logging
from quiznova.quiz_manager import DEFAULT_TIMER_SECONDS, QuizSession, SessionError, SessionState
from quiznova.schemas import OPTION_LETTERS, QuizQuestion


def parse_choice(line: str, question: QuizQuestion) -> Optional[str]:
    """Map a typed letter (``b``, ``B``, ``B)``) to the matching option text."""
    letter = line.strip().rstrip(").").upper()
    if len(letter) != 1 or letter not in OPTION_LETTERS:
        return None
    return question.options[OPTION_LETTERS.index(letter)]


def format_results(session: QuizSession) -> str:
    lines: List[str] = [f"Quiz completed! Score: {session.score} / {len(session.questions)}", ""]
    for r in session.results():
        mark = ""
        if r.answer is not None:
            mark = " [correct]" if r.is_correct else " [wrong]"
        lines.append(f"Q{r.index + 1}: {r.text}")
        lines.append(f"  Your answer: {r.answer or 'None'}{mark}")
        lines.append(f"  Correct answer: {r.correct_answer}")
    return "\n".join(lines)


def _start_stdin_reader(loop: asyncio.AbstractEventLoop) -> "asyncio.Queue[Optional[str]]":
    # One daemon thread owns stdin for the whole run; None marks EOF
    queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue()

    def pump():
        try:
            for line in sys.stdin:
                loop.call_soon_threadsafe(queue.put_nowait, line)
            loop.call_soon_threadsafe(queue.put_nowait, None)
        except RuntimeError:
            # loop already closed
            return

    threading.Thread(target=pump, name="stdin-reader", daemon=True).start()
    return queue


def _show_question(session: QuizSession) -> None:
    q = session.current_question
    print()
    print(f"Q{session.current_index + 1}/{len(session.questions)}: {q.text}")
    for option in q.options:
        print(f"  {option}")
    print(f"({session.remaining} seconds) Your answer: ", end="", flush=True)


async def _play_once(session: QuizSession, client: QuizServiceClient, lines) -> bool:
    changed = asyncio.Event()
    session.on_change = lambda s: changed.set()

    print(f"Generating questions on {session.topic!r}...")
    if not await session.start(client):
        print(session.error, file=sys.stderr)
        return False

    while session.state is SessionState.ACTIVE:
        index = session.current_index
        _show_question(session)
        changed.clear()
        get_line = asyncio.ensure_future(lines.get())
        wait_change = asyncio.ensure_future(changed.wait())
        done, _ = await asyncio.wait({get_line, wait_change}, return_when=asyncio.FIRST_COMPLETED)
        wait_change.cancel()

        if get_line not in done:
            get_line.cancel()
            if session.state is not SessionState.ACTIVE or session.current_index != index:
                print("\nTime's up!")
            continue

        line = get_line.result()
        if line is None:
            session.close()
            return False
        if session.state is not SessionState.ACTIVE or session.current_index != index:
            print("\nTime's up!")
            continue
        choice = parse_choice(line, session.current_question)
        if choice is None:
            print(f"Please answer with one of {', '.join(OPTION_LETTERS)}.")
            continue
        session.select(choice)
        session.next()

    print()
    print(format_results(session))
    return True


async def play(args: argparse.Namespace) -> int:
    client = QuizServiceClient(args.url)
    session = QuizSession()
    try:
        session.configure(args.topic, args.count, args.timer, args.difficulty)
    except SessionError as e:
        print(e, file=sys.stderr)
        return 2

    lines = _start_stdin_reader(asyncio.get_running_loop())
    while True:
        if not await _play_once(session, client, lines):
            return 1
        print("\nRetake quiz? [y/N] ", end="", flush=True)
        answer = await lines.get()
        if not answer or answer.strip().lower() not in ("y", "yes"):
            return 0
        session.retake()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quiznova-play", description=__doc__)
    parser.add_argument("--topic", required=True)
    parser.add_argument("--count", type=int, default=5)
    parser.add_argument("--timer", type=int, default=DEFAULT_TIMER_SECONDS, help="seconds per question")
    parser.add_argument("--difficulty", choices=["easy", "medium", "hard"])
    parser.add_argument("--url", default="http://localhost:8080", help="QuizNova service base URL")
    parser.add_argument("--log-level", default="WARNING")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    return asyncio.run(play(args))


if __name__ == "__main__":
    sys.exit(main())
