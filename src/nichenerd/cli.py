"""
Command-line interface for nichenerd

A terminal presentation layer over QuizOrchestrator: pick a topic, answer
ten questions, then download, share or copy the scorecard.
"""

import asyncio
import sys
import argparse
import json
import logging
from typing import Optional

from .config import config
from .exporter import ScorecardExporter
from .orchestrator import QuizOrchestrator, QuizSnapshot
from .quiz.schema import ChatMessage, QuizState, ScreenState, EXAMPLE_TOPICS, SAMPLE_HISTORY, SAMPLE_FINAL
from .transport import get_transport


def format_message(msg: ChatMessage) -> str:
    """Format one chat turn for terminal output."""
    if not msg.is_agent:
        return f"\033[96mYou:\033[0m {msg.text}"

    badge = ""
    if msg.is_correct is True:
        badge = " \033[92m[Correct]\033[0m"
    elif msg.is_correct is False:
        badge = " \033[91m[Incorrect]\033[0m"

    header = "\033[95mNicheNerd"
    if msg.question_number:
        header += f" · Q{msg.question_number}"
    return f"{header}\033[0m{badge}\n{msg.text}"


def format_scorecard_terminal(final: Optional[QuizState], topic: str = "") -> str:
    """Text scorecard used when no image is available."""
    if final is None:
        return "No final result."

    width = 60
    title = (final.topic or topic or "Quiz").upper()[:width - 4]
    lines = [
        "┌" + "─" * width + "┐",
        f"│  {title:<{width - 2}}│",
        f"│  {'Score: ' + str(final.score) + '/' + str(final.total):<{width - 2}}│",
        f"│  {'Level: ' + (final.level_name or '-'):<{width - 2}}│",
    ]
    if final.tagline:
        lines.append(f"│  {final.tagline[:width - 4]:<{width - 2}}│")
    lines.append("└" + "─" * width + "┘")
    return "\n".join(lines)


def print_history(snapshot: QuizSnapshot, start: int = 0):
    for msg in snapshot.history[start:]:
        print(format_message(msg))
        print()


async def run_quiz(orchestrator: QuizOrchestrator, exporter: ScorecardExporter, topic: Optional[str]):
    """Interactive loop over the three screens."""
    while True:
        snapshot = orchestrator.snapshot()

        if snapshot.screen is ScreenState.HOME:
            chosen = topic
            topic = None
            if not chosen:
                print(f"Pick a niche topic (e.g. {', '.join(EXAMPLE_TOPICS)}), or 'q' to quit.")
                chosen = input("> ").strip()
            if chosen.lower() == "q":
                return
            await orchestrator.start(chosen)
            print_history(orchestrator.snapshot())

        elif snapshot.screen is ScreenState.QUIZ:
            if snapshot.quiz_complete:
                print("Generating your score card...")
                await orchestrator.generate_scorecard()
                continue
            if not snapshot.history:
                # Opening turn failed; offer a retry on the same topic
                print(f"\033[91m{snapshot.error or 'The quiz did not start.'}\033[0m")
                if input("Retry? [Y/n] ").strip().lower() not in ("", "y"):
                    return
                await orchestrator.start(snapshot.topic)
                print_history(orchestrator.snapshot())
                continue

            answer = input(f"Q{snapshot.current_question or '?'} > ").strip()
            if answer.lower() == "q":
                return
            before = len(snapshot.history)
            await orchestrator.submit_answer(answer)
            snapshot = orchestrator.snapshot()
            print()
            print_history(snapshot, start=before + 1)
            if snapshot.error:
                print(f"\033[91m{snapshot.error}\033[0m")

        else:
            final = snapshot.final_result
            if snapshot.error:
                print(f"\033[93m{snapshot.error}\033[0m")
            if snapshot.scorecard_url:
                print(f"Score card: {snapshot.scorecard_url}")
            print(format_scorecard_terminal(final, snapshot.topic))

            choice = input("[d]ownload  [s]hare  [c]opy  [p]lay again  [q]uit > ").strip().lower()
            if choice == "d" and snapshot.scorecard_url:
                path = await exporter.download(snapshot.scorecard_url, final.topic if final else snapshot.topic)
                print(f"Saved {path}" if path else "Opened the score card in your browser.")
            elif choice == "s":
                print(exporter.share(final, snapshot.topic))
            elif choice == "c":
                print(await exporter.copy_text(final, snapshot.topic))
            elif choice == "p":
                orchestrator.play_again()
            elif choice == "q":
                return


def print_sample():
    """Show the built-in sample session."""
    for msg in SAMPLE_HISTORY:
        print(format_message(msg))
        print()
    print(format_scorecard_terminal(SAMPLE_FINAL))


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="nichenerd",
        description="Deep-cut trivia quizzes on niche topics, run by an AI quiz master",
        epilog='Example: nichenerd play --topic "Mechanical Keyboards" --transport mock'
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    play_parser = subparsers.add_parser("play", help="Play a quiz")
    play_parser.add_argument(
        "--topic",
        help="Topic to start with (asked interactively otherwise)"
    )
    play_parser.add_argument(
        "--transport",
        choices=["http", "claude", "mock"],
        default=config.transport.backend,
        help=f"Agent transport (default: {config.transport.backend})"
    )
    play_parser.add_argument(
        "--download-dir",
        default=config.export.download_dir,
        help="Where downloaded score cards are saved"
    )

    sample_parser = subparsers.add_parser("sample", help="Show a sample session")
    sample_parser.add_argument(
        "--json",
        action="store_true",
        help="Output the sample as JSON"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "sample":
        if args.json:
            print(json.dumps({
                "history": [m.to_dict() for m in SAMPLE_HISTORY],
                "final": SAMPLE_FINAL.to_dict(),
            }, indent=2))
        else:
            print_sample()
        return 0

    if args.command == "play":
        orchestrator = QuizOrchestrator(transport=get_transport(args.transport))
        exporter = ScorecardExporter(download_dir=args.download_dir)

        async def session():
            try:
                await run_quiz(orchestrator, exporter, args.topic)
            finally:
                await orchestrator.close()

        try:
            asyncio.run(session())
        except (KeyboardInterrupt, EOFError):
            print()
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
