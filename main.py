#!/usr/bin/env python3
"""Command-line entry point for the DuoDebate client."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from api_client import DebateSession, DuoDebateClient, SessionUpdate
from config.settings import DEFAULT_CONFIG_PATH, AppConfig, get_default_config
from debate_stream import DirectiveKind, Message, SessionPhase

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    """Configure logging for the client."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Watch a PROPOSER and a CHALLENGER debate a prompt in real time."
    )
    parser.add_argument("prompt", help="Debate topic, e.g. 'Outline a blog post on AI in technical marketing'")
    parser.add_argument(
        "--rounds", type=int, default=None, help="Maximum debate rounds (1-20)"
    )
    parser.add_argument(
        "--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to a JSON or YAML config file"
    )
    parser.add_argument("--api-url", default=None, help="Override the DuoDebate API URL")
    return parser.parse_args(argv)


def print_message(message: Message) -> None:
    print()
    print(f"── {message.role.value} · round {message.iteration} · {message.model}")
    print(message.content)


class TranscriptPrinter:
    """Prints new transcript entries and directives as updates arrive."""

    def __init__(self):
        self._printed = 0

    def __call__(self, update: SessionUpdate) -> None:
        transcript = update.state.transcript
        if len(transcript) < self._printed:
            self._printed = 0
        for message in transcript[self._printed :]:
            print_message(message)
        self._printed = len(transcript)

        for directive in update.directives:
            if directive.kind is DirectiveKind.ALERT:
                print(f"\n⚠️  Error: {directive.message}", file=sys.stderr)
            else:
                logger.debug(f"Skipped malformed event: {directive.message}")


async def run_debate(config: AppConfig, prompt: str, max_rounds: int) -> int:
    client = DuoDebateClient(config.api)

    if not await client.check_health():
        print("⚠️  Backend API might be offline", file=sys.stderr)

    model_info = await client.get_config()
    if model_info is not None:
        print(f"PROPOSER:   {model_info.proposer_model or 'unknown'}")
        print(f"CHALLENGER: {model_info.challenger_model or 'unknown'}")

    session = DebateSession(client)
    session.add_listener(TranscriptPrinter())

    print(f"\nDebate Topic: {prompt}")
    await session.submit(prompt, max_rounds)
    state = await session.wait()

    if state.phase is SessionPhase.COMPLETE:
        print("\n" + "=" * 40)
        print(f"Final Draft [{state.status or 'UNKNOWN'}]")
        print("=" * 40)
        print(state.final_draft or "")
        if state.sources:
            print("\nSources:")
            for idx, source in enumerate(state.sources, start=1):
                print(f"{idx}. {source}")
        return 0

    print(f"\nDebate failed: {state.last_error}", file=sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    config = get_default_config(args.config)
    if args.api_url:
        config.api = config.api.model_copy(update={"base_url": args.api_url.rstrip("/")})
    setup_logging(config.system.log_level)

    max_rounds = args.rounds if args.rounds is not None else config.debate.max_rounds
    try:
        return asyncio.run(run_debate(config, args.prompt, max_rounds))
    except ValidationError as e:
        print(f"Invalid debate request: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nDebate cancelled", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
